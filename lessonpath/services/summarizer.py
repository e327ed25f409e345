"""SeriesSummarizer - レッスンシリーズを1件の要約にまとめる"""

from __future__ import annotations

from lessonpath.domain.models import LineItem, SeriesSummary, Transaction
from lessonpath.services.series_expansion import (
    MAX_SERIES_OCCURRENCES,
    generate_lesson_occurrences,
)


def get_series_summary(
    item: LineItem,
    transaction: Transaction,
    *,
    max_occurrences: int = MAX_SERIES_OCCURRENCES,
) -> SeriesSummary | None:
    """
    教育明細のシリーズ要約（件数・初回〜最終日）を返す。

    詳細画面の「レッスンシリーズ」表示と、シリーズ全体で1件のカレンダー登録に使う。
    生成件数が0なら None。
    """
    occurrences = generate_lesson_occurrences(
        item, transaction, max_occurrences=max_occurrences
    )
    if not occurrences:
        return None
    first = occurrences[0]
    last = occurrences[-1]
    return SeriesSummary(
        count=len(occurrences),
        first_date=first.date,
        last_date=last.date,
        title=item.description,
        item_id=item.id,
        receipt_id=transaction.id,
        metadata=dict(first.metadata),
    )
