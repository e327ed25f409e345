"""Firestore Transaction Source Adapter

TransactionSource の Firestore 実装（読み取り専用）。

Firestore コレクション構造:
  users/{uid}/transactions/{transactionId}              ← 取引
  users/{uid}/transactions/{transactionId}/items/{id}   ← 明細
"""

from __future__ import annotations

import logging

from google.api_core import exceptions as gcp_exceptions
from google.cloud import firestore

from lessonpath.adapters.records import line_item_from_dict, transaction_from_dict
from lessonpath.domain.errors import SourceLoadError
from lessonpath.domain.models import TransactionWithItems
from lessonpath.domain.ports import TransactionSource

logger = logging.getLogger(__name__)

_USERS = "users"
_TRANSACTIONS = "transactions"
_ITEMS = "items"


class FirestoreTransactionSource(TransactionSource):
    """
    Firestore を使った TransactionSource 実装。

    書き込みは行わない（スケジュール編集の保存はアプリ側の責務）。
    """

    def __init__(self, db: firestore.Client, uid: str) -> None:
        """
        Args:
            db: 初期化済みの Firestore クライアント
            uid: 読み込むユーザーID
        """
        self._db = db
        self._uid = uid

    def load_transactions(self) -> list[TransactionWithItems]:
        """ユーザーの全取引を明細つきで取得"""
        transactions_col = (
            self._db.collection(_USERS).document(self._uid).collection(_TRANSACTIONS)
        )
        try:
            records = []
            for snap in transactions_col.stream():
                transaction = transaction_from_dict(snap.to_dict() or {}, snap.id)
                items = [
                    line_item_from_dict(item_snap.to_dict() or {}, snap.id, item_snap.id)
                    for item_snap in snap.reference.collection(_ITEMS).stream()
                ]
                records.append(TransactionWithItems(transaction=transaction, items=items))
        except gcp_exceptions.GoogleAPICallError as e:
            logger.exception("Failed to load transactions: uid=%s", self._uid)
            raise SourceLoadError(str(e)) from e

        logger.info("Loaded %d transactions: uid=%s", len(records), self._uid)
        return records
