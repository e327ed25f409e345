"""ServiceEvents - 修理・メンテナンス明細から予定を生成する

1日で終わるサービスは1件、複数日にまたがる場合は
サービス期間全体・預け入れ・受け取りの3件を生成する。
"""

from __future__ import annotations

from lessonpath.domain.models import ItemLink, LineItem, Occurrence, Transaction
from lessonpath.services.descriptor_parser import parse_iso_date
from lessonpath.services.series_expansion import occurrence_id, transaction_link_id


def generate_service_occurrences(
    item: LineItem, transaction: Transaction
) -> list[Occurrence]:
    """
    サービス明細から Occurrence を生成。

    開始日は startDate → pickupDate → 取引日の順、終了日は endDate → dropoffDate。
    終了日が開始日より後で isMultiDay が明示的に False でなければ複数日扱い。
    使える日付が1つも無い場合は空リスト。
    """
    service = item.service
    start_raw = service.start_date or service.pickup_date or transaction.transaction_date
    end_raw = service.end_date or service.dropoff_date
    start = parse_iso_date(start_raw)
    end = parse_iso_date(end_raw)
    if start is None:
        return []

    links = [
        ItemLink(id=item.id, type="service"),
        ItemLink(id=transaction_link_id(transaction.id), type="transaction"),
    ]
    metadata = {
        "venue": transaction.merchant or None,
        "technician": service.technician or None,
        "service_type": service.service_type or None,
        "gear_item_id": service.gear_item_id or None,
        "gear_description": service.gear_description or None,
    }

    is_multi_day = service.is_multi_day is not False and end is not None and end > start
    if not is_multi_day:
        return [
            Occurrence(
                id=occurrence_id(item.id),
                date=start,
                title=f"{item.description} - Service",
                subtitle=service.service_type or "Service",
                metadata=metadata,
                receipt_id=transaction.id,
                links=links,
            )
        ]

    days = (end - start).days
    return [
        Occurrence(
            id=f"{occurrence_id(item.id)}_overall",
            date=start,
            title=f"{item.description} - Service Period",
            subtitle=f"{days} day service",
            metadata={
                **metadata,
                "start_date": start.isoformat(),
                "end_date": end.isoformat(),
                "duration": f"{days} days",
            },
            receipt_id=transaction.id,
            links=list(links),
        ),
        Occurrence(
            id=f"{occurrence_id(item.id)}_pickup",
            date=start,
            title=f"{item.description} - Drop-off",
            subtitle="Service begins",
            metadata=dict(metadata),
            receipt_id=transaction.id,
            links=list(links),
        ),
        Occurrence(
            id=f"{occurrence_id(item.id)}_dropoff",
            date=end,
            title=f"{item.description} - Pickup",
            subtitle="Service complete",
            metadata=dict(metadata),
            receipt_id=transaction.id,
            links=list(links),
        ),
    ]
