"""SeriesExpansion - レッスン記述子を具体的な日付の列に展開する

処理フロー:
1. 頻度が単発、または開始日が無い → 1件だけ（開始日 or フォールバック日）
2. 繰り返し → 開始日からカーソルを進め、曜日フィルターに合う日を出力
   - 終了日があればそこまで、無ければ開始日 + 12か月まで
   - 頻度が28日以上なら暦の上で1か月ずつ進める（開始日の日付に固定、月末は丸める）
   - 出力件数は MAX_SERIES_OCCURRENCES で打ち切り

出力は入力だけで決まる（ID も明細ID + 日付）ので、何度再生成しても同じ結果になる。
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import date

from dateutil.relativedelta import relativedelta

from lessonpath.domain.models import ItemLink, LineItem, Occurrence, Transaction
from lessonpath.services.descriptor_parser import (
    parse_iso_date,
    parse_schedule,
    python_weekday_to_index,
)

logger = logging.getLogger(__name__)

MAX_SERIES_OCCURRENCES = 52
MONTHLY_THRESHOLD_DAYS = 28
OPEN_ENDED_HORIZON_MONTHS = 12


def advance_by_cadence(start: date, cadence_days: int, steps: int = 1) -> date:
    """開始日から cadence を steps 回進めた日付（28日以上は暦月単位）"""
    if cadence_days >= MONTHLY_THRESHOLD_DAYS:
        return start + relativedelta(months=steps)
    return start + relativedelta(days=cadence_days * steps)


def expand_series_dates(
    start_date: date | None,
    end_date: date | None,
    cadence_days: int,
    weekdays: Iterable[int] = (),
    *,
    max_occurrences: int = MAX_SERIES_OCCURRENCES,
    fallback_date: date | None = None,
) -> list[date]:
    """
    繰り返し設定を日付のリストに展開。

    Args:
        start_date: 開始日（2件以上出力するには必須）
        end_date: 終了日（含む）。None なら開始日 + 12か月
        cadence_days: 間隔日数（0 = 単発）
        weekdays: 曜日フィルター（0=日..6=土）。空なら全曜日
        max_occurrences: 出力件数の上限
        fallback_date: 開始日が無いときに使う日付（取引日など）

    Returns:
        昇順の日付リスト（0〜max_occurrences 件）
    """
    if cadence_days <= 0 or start_date is None:
        single = start_date or fallback_date
        return [single] if single is not None else []

    if end_date is not None:
        bound = end_date
    else:
        bound = start_date + relativedelta(months=OPEN_ENDED_HORIZON_MONTHS)
    allowed = frozenset(weekdays)

    dates: list[date] = []
    step = 0
    cursor = start_date
    while cursor <= bound and len(dates) < max_occurrences:
        if not allowed or python_weekday_to_index(cursor) in allowed:
            dates.append(cursor)
        step += 1
        # 月単位は開始日から数えて進める（1/31 → 2/29 → 3/31）
        cursor = advance_by_cadence(start_date, cadence_days, step)

    return dates


def occurrence_id(item_id: str, on_date: date | None = None) -> str:
    """生成イベントの決定的ID。単発は event_<itemId>、シリーズは日付つき"""
    if on_date is None:
        return f"event_{item_id}"
    return f"event_{item_id}_{on_date.isoformat()}"


def transaction_link_id(receipt_id: str) -> str:
    return f"trans_{receipt_id}"


def generate_lesson_occurrences(
    item: LineItem,
    transaction: Transaction,
    *,
    max_occurrences: int = MAX_SERIES_OCCURRENCES,
) -> list[Occurrence]:
    """
    教育明細から単発レッスン or レッスンシリーズの Occurrence を生成。

    Args:
        item: 教育カテゴリの明細
        transaction: 明細が属する取引（会場名・取引日のフォールバックに使う）
        max_occurrences: シリーズの上限件数

    Returns:
        list[Occurrence]: 日付昇順
    """
    edu = item.education
    schedule = parse_schedule(edu)
    start = parse_iso_date(edu.start_date)
    end = parse_iso_date(edu.end_date)
    fallback = parse_iso_date(transaction.transaction_date)

    links = [
        ItemLink(id=item.id, type="education"),
        ItemLink(id=transaction_link_id(transaction.id), type="transaction"),
    ]
    subtitle = edu.student_name or "Lesson"
    base_metadata = {
        "venue": transaction.merchant or None,
        "duration": edu.duration or None,
        "teacher_name": edu.teacher_name or None,
        "student_name": edu.student_name or None,
        "times": list(edu.times),
    }

    # 単発レッスン
    if not schedule.cadence.is_recurring or start is None:
        dates = expand_series_dates(
            start, end, 0, max_occurrences=max_occurrences, fallback_date=fallback
        )
        if not dates:
            logger.debug("No usable date for item %s, skipping", item.id)
            return []
        return [
            Occurrence(
                id=occurrence_id(item.id),
                date=dates[0],
                title=f"{item.description} – Lesson",
                subtitle=subtitle,
                metadata={**base_metadata, "frequency": edu.frequency or "One-off"},
                receipt_id=transaction.id,
                links=links,
            )
        ]

    # シリーズ
    dates = expand_series_dates(
        start,
        end,
        schedule.cadence_days,
        schedule.weekdays,
        max_occurrences=max_occurrences,
    )
    metadata = {
        **base_metadata,
        "frequency": edu.frequency or None,
        "start_date": edu.start_date or None,
        "end_date": edu.end_date or None,
    }
    occurrences = [
        Occurrence(
            id=occurrence_id(item.id, on_date),
            date=on_date,
            title=f"{item.description} – Lesson {number}",
            subtitle=subtitle,
            metadata=dict(metadata),
            receipt_id=transaction.id,
            links=list(links),
        )
        for number, on_date in enumerate(dates, 1)
    ]
    if len(occurrences) >= max_occurrences:
        logger.info(
            "Series for item %s capped at %d occurrences",
            item.id,
            max_occurrences,
            extra={"item_id": item.id, "receipt_id": transaction.id},
        )
    return occurrences
