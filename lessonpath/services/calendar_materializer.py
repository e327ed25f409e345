"""CalendarMaterializer - 予定からカレンダー書き出し用ペイロードを組み立てる

ここは純粋関数のみ。実際のカレンダー書き込みは CalendarExporter が行う。

正規ディープリンク:
  app://cal/<occurrenceId>            ← 1回分の予定
  app://cal/event_series_<itemId>     ← レッスンシリーズ全体
アプリ内ナビゲーションと、カレンダーが使えないときの手動コピー用テキストを兼ねる。
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta

from lessonpath.domain.models import (
    CalendarEventPayload,
    CanonicalLink,
    ClockTime,
    LineItem,
    Occurrence,
    SeriesSummary,
    Transaction,
)
from lessonpath.services.descriptor_parser import (
    parse_clock_time,
    parse_duration_minutes,
)
from lessonpath.services.service_events import generate_service_occurrences

CANONICAL_PREFIX = "app://cal/"
EVENT_SERIES_PREFIX = "event_series_"
DEFAULT_START = ClockTime(hour=9, minute=0)
NOTES_SIGNATURE = "From LessonPath."

_MONTH_ABBR = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)


def canonical_event_url(event_id: str) -> str:
    return f"{CANONICAL_PREFIX}{event_id}"


def series_event_id(item_id: str) -> str:
    return f"{EVENT_SERIES_PREFIX}{item_id}"


def parse_canonical_url(url: str | None) -> CanonicalLink | None:
    """
    app://cal/... を分解する。

    シリーズリンクは event_series_ を外した明細IDを、それ以外は生のIDをそのまま返す。
    スキームが違う・IDが空の場合は None。
    """
    if not url or not url.startswith(CANONICAL_PREFIX):
        return None
    event_id = url[len(CANONICAL_PREFIX):]
    if event_id.startswith(EVENT_SERIES_PREFIX) and len(event_id) > len(EVENT_SERIES_PREFIX):
        return CanonicalLink(target_id=event_id[len(EVENT_SERIES_PREFIX):], is_series=True)
    if not event_id:
        return None
    return CanonicalLink(target_id=event_id)


def format_note_date(value: date) -> str:
    """2024-01-05 → "5 Jan 2024" """
    return f"{value.day} {_MONTH_ABBR[value.month - 1]} {value.year}"


def _first_clock_time(metadata: dict) -> ClockTime | None:
    times = metadata.get("times") or []
    if isinstance(times, (list, tuple)) and times:
        return parse_clock_time(str(times[0]))
    return None


def _time_window(
    on_date: date, clock: ClockTime | None, duration_minutes: int
) -> tuple[datetime, datetime]:
    """開始・終了日時。時刻が無ければ 9:00 開始"""
    clock = clock or DEFAULT_START
    start = datetime.combine(on_date, time(clock.hour, clock.minute))
    return start, start + timedelta(minutes=duration_minutes)


def _person_context(metadata: dict) -> list[str]:
    context: list[str] = []
    if metadata.get("teacher_name"):
        context.append(f"Lesson with {metadata['teacher_name']}.")
    elif metadata.get("student_name"):
        context.append(f"Student: {metadata['student_name']}.")
    if metadata.get("technician"):
        context.append(f"Technician: {metadata['technician']}.")
    return context


def build_single_calendar_event(
    occurrence: Occurrence, transaction: Transaction | None = None
) -> CalendarEventPayload:
    """1回分の予定からペイロードを作る（時刻・所要時間・会場が無くても例外にしない）"""
    metadata = occurrence.metadata or {}
    start, end = _time_window(
        occurrence.date,
        _first_clock_time(metadata),
        parse_duration_minutes(metadata.get("duration")),
    )
    location = metadata.get("venue") or (transaction.merchant if transaction else "")
    url = canonical_event_url(occurrence.id)
    context = _person_context(metadata)
    context.append(NOTES_SIGNATURE)

    return CalendarEventPayload(
        title=occurrence.title or "Event",
        start=start,
        end=end,
        location=location or "",
        notes=" ".join(context) + "\n" + url,
        url=url,
    )


def build_series_calendar_event(
    summary: SeriesSummary, transaction: Transaction
) -> CalendarEventPayload:
    """
    レッスンシリーズ全体で1件のペイロードを作る（レッスンごとではない）。

    開始・終了は初回レッスンの時刻と所要時間、タイトルに件数を含め、
    メモに「Series of N lessons from A to B.」と正規リンクを入れる。
    """
    metadata = summary.metadata or {}
    start, end = _time_window(
        summary.first_date,
        _first_clock_time(metadata),
        parse_duration_minutes(metadata.get("duration")),
    )
    location = metadata.get("venue") or transaction.merchant

    count = summary.count
    first = format_note_date(summary.first_date)
    last = format_note_date(summary.last_date)
    span = first if summary.first_date == summary.last_date else f"{first} to {last}"
    context = [f"Series of {count} lesson{'' if count == 1 else 's'} from {span}."]
    if metadata.get("frequency"):
        context.append(f"Schedule: {metadata['frequency']}.")
    context.extend(_person_context(metadata))
    context.append(NOTES_SIGNATURE)
    url = canonical_event_url(series_event_id(summary.item_id))

    return CalendarEventPayload(
        title=f"{summary.title} – Lesson series ({count})",
        start=start,
        end=end,
        location=location or "",
        notes=" ".join(context) + "\n" + url,
        url=url,
    )


def build_service_calendar_events(
    item: LineItem, transaction: Transaction
) -> list[CalendarEventPayload]:
    """
    サービス明細のペイロード。

    1日のサービスなら1件、複数日なら期間全体（終日）・預け入れ・受け取りの3件。
    """
    payloads = []
    for occurrence in generate_service_occurrences(item, transaction):
        if occurrence.id.endswith("_overall"):
            payloads.append(_build_service_period(occurrence, transaction))
        else:
            payloads.append(build_single_calendar_event(occurrence, transaction))
    return payloads


def _build_service_period(
    occurrence: Occurrence, transaction: Transaction
) -> CalendarEventPayload:
    """サービス期間全体の終日イベント（終了は翌日0時、排他的）"""
    metadata = occurrence.metadata
    last_day = date.fromisoformat(metadata["end_date"])
    url = canonical_event_url(occurrence.id)
    context = [f"{occurrence.subtitle}."]
    context.extend(_person_context(metadata))
    context.append(NOTES_SIGNATURE)

    return CalendarEventPayload(
        title=occurrence.title,
        start=datetime.combine(occurrence.date, time()),
        end=datetime.combine(last_day + timedelta(days=1), time()),
        location=metadata.get("venue") or transaction.merchant or "",
        notes=" ".join(context) + "\n" + url,
        url=url,
        all_day=True,
    )
