"""SeriesCache - シリーズ展開の任意メモ化レイヤー

(明細ID, 更新日時, 取引) をキーに generate_lesson_occurrences の結果を保持する。
結果はキャッシュなしの呼び出しと常に同じ。updated_at が空の明細は変更を
検知できないので毎回計算する。
"""

from __future__ import annotations

import copy
import logging
from collections import OrderedDict

from lessonpath.domain.models import LineItem, Occurrence, Transaction
from lessonpath.services.series_expansion import (
    MAX_SERIES_OCCURRENCES,
    generate_lesson_occurrences,
)

logger = logging.getLogger(__name__)


class SeriesCache:
    """LRU 方式で上限件数を超えたら古いものから捨てる

    Occurrence の metadata / links は可変なので、保存時と返却時に複製する。
    呼び出し側が結果を書き換えてもキャッシュには残らない。
    """

    def __init__(self, maxsize: int = 256) -> None:
        if maxsize <= 0:
            raise ValueError("maxsize must be positive")
        self._maxsize = maxsize
        self._entries: OrderedDict[tuple, tuple[Occurrence, ...]] = OrderedDict()
        self.hits = 0
        self.misses = 0

    def occurrences(
        self,
        item: LineItem,
        transaction: Transaction,
        *,
        max_occurrences: int = MAX_SERIES_OCCURRENCES,
    ) -> list[Occurrence]:
        if not item.updated_at:
            return generate_lesson_occurrences(
                item, transaction, max_occurrences=max_occurrences
            )

        # 取引名 (venue) と取引日 (開始日のフォールバック) も結果に入る
        key = (item.id, item.updated_at, transaction, max_occurrences)
        cached = self._entries.get(key)
        if cached is not None:
            self.hits += 1
            self._entries.move_to_end(key)
            return copy.deepcopy(list(cached))

        self.misses += 1
        result = generate_lesson_occurrences(
            item, transaction, max_occurrences=max_occurrences
        )
        self._entries[key] = tuple(copy.deepcopy(result))
        if len(self._entries) > self._maxsize:
            evicted, _ = self._entries.popitem(last=False)
            logger.debug("Evicted series cache entry: %s", evicted[:2])
        return result

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
