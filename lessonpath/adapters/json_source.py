"""JSON Transaction Source Adapter

TransactionSource ABC の実装。アプリのデータエクスポート（JSON）を読み込む。
トップレベルは取引の配列、または {"transactions": [...]}。
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from lessonpath.adapters.records import transaction_with_items_from_dict
from lessonpath.domain.errors import SourceLoadError
from lessonpath.domain.models import TransactionWithItems
from lessonpath.domain.ports import TransactionSource

logger = logging.getLogger(__name__)


class JsonTransactionSource(TransactionSource):
    """JSONファイルから取引を読み込む（読み取り専用）"""

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)

    def load_transactions(self) -> list[TransactionWithItems]:
        """
        ファイルを読み込んで取引リストを返す。

        Raises:
            SourceLoadError: ファイルが無い・JSONとして不正・形式が違う場合
        """
        try:
            with self._path.open(encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError as e:
            raise SourceLoadError(f"Source file not found: {self._path}") from e
        except (OSError, ValueError) as e:
            logger.exception("Failed to read source file: %s", self._path)
            raise SourceLoadError(f"Failed to read {self._path}: {e}") from e

        if isinstance(data, dict):
            data = data.get("transactions")
        if not isinstance(data, list):
            raise SourceLoadError(
                f"Expected a list of transactions in {self._path}"
            )

        records = [
            transaction_with_items_from_dict(entry)
            for entry in data
            if isinstance(entry, dict)
        ]
        logger.info("Loaded %d transactions from %s", len(records), self._path)
        return records
