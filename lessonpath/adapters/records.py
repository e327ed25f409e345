"""保存済みレコード（dict）からドメインモデルへの変換

JSON エクスポートと Firestore の両方で同じ形式を使う:

  {
    "id": "r1", "merchant": "Allegro Music", "transactionDate": "2024-01-01",
    "items": [
      {"id": "i1", "description": "Term 1 violin", "category": "education",
       "educationDetails": "{\"studentName\": \"Vivian\", ...}", ...}
    ]
  }

キー名は camelCase / snake_case のどちらも受け付ける。None は空文字列にフォールバック。
"""

from __future__ import annotations

from typing import Any

from lessonpath.domain.models import (
    EducationDetails,
    LineItem,
    ServiceDetails,
    Transaction,
    TransactionWithItems,
)


def _text(data: dict, *keys: str) -> str:
    for key in keys:
        value = data.get(key)
        if value is not None:
            return str(value)
    return ""


def _number(value: Any) -> float | None:
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        return value
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def transaction_from_dict(data: dict, transaction_id: str | None = None) -> Transaction:
    """取引レコード → Transaction"""
    return Transaction(
        id=transaction_id or _text(data, "id"),
        merchant=_text(data, "merchant"),
        transaction_date=_text(data, "transactionDate", "transaction_date", "date"),
        phone=_text(data, "merchantPhone", "phone"),
        email=_text(data, "merchantEmail", "email"),
        address=_text(data, "merchantAddress", "address"),
    )


def line_item_from_dict(
    data: dict, transaction_id: str, item_id: str | None = None
) -> LineItem:
    """明細レコード → LineItem（詳細ブロブは dict / JSON 文字列どちらでも可）"""
    total = _number(data.get("totalPrice", data.get("total_price")))
    return LineItem(
        id=item_id or _text(data, "id"),
        description=_text(data, "description"),
        category=(_text(data, "category") or "other").lower(),
        education=EducationDetails.from_blob(
            data.get("educationDetails", data.get("education_details"))
        ),
        service=ServiceDetails.from_blob(
            data.get("serviceDetails", data.get("service_details"))
        ),
        quantity=_number(data.get("quantity")),
        total_price=int(total) if total is not None else None,
        transaction_id=transaction_id,
        updated_at=_text(data, "updatedAt", "updated_at"),
    )


def transaction_with_items_from_dict(data: dict) -> TransactionWithItems:
    """items 配列を含む取引レコード → TransactionWithItems"""
    transaction = transaction_from_dict(data)
    items = [
        line_item_from_dict(item, transaction.id)
        for item in data.get("items") or []
        if isinstance(item, dict)
    ]
    return TransactionWithItems(transaction=transaction, items=items)
