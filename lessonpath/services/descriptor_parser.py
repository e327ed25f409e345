"""DescriptorParser - AI抽出されたスケジュール記述子のパース

上流の抽出結果はノイズを含むため、ここの関数は全て例外を投げない。
パースできない入力は既定値（単発・30分・時刻なし）に解決される。
"""

from __future__ import annotations

import re
from datetime import date

from lessonpath.domain.models import Cadence, ClockTime, EducationDetails, ParsedSchedule

DEFAULT_DURATION_MINUTES = 30

_WEEKDAYS = {
    "sunday": 0,
    "monday": 1,
    "tuesday": 2,
    "wednesday": 3,
    "thursday": 4,
    "friday": 5,
    "saturday": 6,
}

_DURATION_RE = re.compile(
    r"^(\d+(?:\.\d+)?)\s*(min|mins|minute|minutes|h|hr|hrs|hour|hours)$"
)
_TIME_12H_RE = re.compile(r"^(\d{1,2}):(\d{2})\s*(am|pm)$", re.IGNORECASE)
_TIME_24H_RE = re.compile(r"^(\d{1,2}):(\d{2})$")
_ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def parse_cadence(text: str | None) -> Cadence:
    """
    頻度テキストを Cadence に変換。

    例: "Weekly" → WEEKLY, "every 2 weeks" → FORTNIGHTLY, "Monthly" → MONTHLY
    該当なし・空 → ONE_OFF
    """
    if not text or not isinstance(text, str):
        return Cadence.ONE_OFF
    s = text.lower()
    # "every 2 weeks" / "biweekly" は weekly を含むので先に判定する
    if "fortnight" in s or "every 2 week" in s or "biweek" in s:
        return Cadence.FORTNIGHTLY
    if "weekly" in s or s.strip() == "week":
        return Cadence.WEEKLY
    if "month" in s:
        return Cadence.MONTHLY
    return Cadence.ONE_OFF


def parse_frequency(text: str | None) -> int:
    """頻度テキストを日数に変換（0 = 単発）"""
    return parse_cadence(text).days


def parse_duration_minutes(text: str | None) -> int:
    """"30 min", "1 hr", "1.5 hours" → 分。パースできなければ30"""
    if not text or not isinstance(text, str):
        return DEFAULT_DURATION_MINUTES
    match = _DURATION_RE.match(text.lower().strip())
    if not match:
        return DEFAULT_DURATION_MINUTES
    amount = float(match.group(1))
    if match.group(2).startswith("h"):
        return round(amount * 60)
    return round(amount)


def parse_clock_time(text: str | None) -> ClockTime | None:
    """"4:00 PM" / "16:00" → ClockTime。範囲外・不正な形式は None"""
    if not text or not isinstance(text, str):
        return None
    s = text.strip()

    match = _TIME_12H_RE.match(s)
    if match:
        hour = int(match.group(1))
        minute = int(match.group(2))
        if not 1 <= hour <= 12:
            return None
        meridiem = match.group(3).lower()
        if meridiem == "pm" and hour != 12:
            hour += 12
        if meridiem == "am" and hour == 12:
            hour = 0
    else:
        match = _TIME_24H_RE.match(s)
        if not match:
            return None
        hour = int(match.group(1))
        minute = int(match.group(2))

    if hour > 23 or minute > 59:
        return None
    return ClockTime(hour=hour, minute=minute)


def parse_weekday(name: str | None) -> int:
    """曜日名 → 0(日)..6(土)。一致しなければ -1（呼び出し側で除外する）"""
    if not name or not isinstance(name, str):
        return -1
    return _WEEKDAYS.get(name.strip().lower(), -1)


def python_weekday_to_index(value: date) -> int:
    """date.weekday()（月=0）を 日=0 の曜日インデックスに変換"""
    return (value.weekday() + 1) % 7


def parse_iso_date(text: str | None) -> date | None:
    """YYYY-MM-DD → date。それ以外は None"""
    if not text or not isinstance(text, str):
        return None
    s = text.strip()
    if not _ISO_DATE_RE.match(s):
        return None
    try:
        return date.fromisoformat(s)
    except ValueError:
        return None


def parse_schedule(details: EducationDetails) -> ParsedSchedule:
    """教育記述子をまとめてパース"""
    weekdays = frozenset(
        w for w in (parse_weekday(d) for d in details.days_of_week) if w >= 0
    )
    first_time = details.times[0] if details.times else None
    return ParsedSchedule(
        cadence=parse_cadence(details.frequency),
        clock_time=parse_clock_time(first_time),
        duration_minutes=parse_duration_minutes(details.duration),
        weekdays=weekdays,
    )
