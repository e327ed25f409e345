"""LessonReminders - 直近レッスンのリマインダー計画

通知の送信自体は扱わない。いつ・どのキーで通知するかだけを決める。
キー形式 lessons|{itemId}|{date} は再計算しても変わらないので、
送信側はキーで重複登録を防げる。
"""

from __future__ import annotations

from datetime import datetime, time, timedelta

from lessonpath.domain.models import LessonReminder, LineItem, Transaction
from lessonpath.services.calendar_materializer import DEFAULT_START
from lessonpath.services.descriptor_parser import parse_clock_time
from lessonpath.services.series_expansion import (
    MAX_SERIES_OCCURRENCES,
    generate_lesson_occurrences,
)

DEFAULT_WINDOW_DAYS = 30
DEFAULT_OFFSET_MINUTES = 60


def reminder_key(item_id: str, lesson_date_iso: str) -> str:
    return f"lessons|{item_id}|{lesson_date_iso}"


def plan_lesson_reminders(
    item: LineItem,
    transaction: Transaction,
    now: datetime,
    *,
    window_days: int = DEFAULT_WINDOW_DAYS,
    offset_minutes: int = DEFAULT_OFFSET_MINUTES,
    max_occurrences: int = MAX_SERIES_OCCURRENCES,
) -> list[LessonReminder]:
    """
    now から window_days 以内に始まるレッスンのリマインダーを計画。

    Args:
        item: 教育明細
        transaction: 明細の取引
        now: 基準日時（ローカル、タイムゾーンなし）
        window_days: 対象期間（日）
        offset_minutes: レッスン開始の何分前に通知するか
        max_occurrences: シリーズ展開の上限件数

    Returns:
        list[LessonReminder]: レッスン日昇順
    """
    edu = item.education
    clock = parse_clock_time(edu.times[0]) if edu.times else None
    clock = clock or DEFAULT_START
    horizon = now + timedelta(days=window_days)

    reminders = []
    for occurrence in generate_lesson_occurrences(
        item, transaction, max_occurrences=max_occurrences
    ):
        lesson_start = datetime.combine(occurrence.date, time(clock.hour, clock.minute))
        if not now <= lesson_start <= horizon:
            continue
        reminders.append(
            LessonReminder(
                key=reminder_key(item.id, occurrence.date.isoformat()),
                item_id=item.id,
                lesson_date=occurrence.date,
                lesson_start=lesson_start,
                remind_at=lesson_start - timedelta(minutes=offset_minutes),
                student_name=edu.student_name or "Student",
                instrument=edu.focus or "Lessons",
            )
        )
    return reminders
