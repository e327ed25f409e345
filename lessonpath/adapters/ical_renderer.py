"""iCal Feed Renderer Adapter

CalendarFeedRenderer ABC の icalendar ライブラリを使った実装。
CalendarEventPayload のリストから RFC 5545 準拠の iCal 形式文字列を生成する。

出力例:
  BEGIN:VCALENDAR
  VERSION:2.0
  PRODID:-//LessonPath//LessonPath//EN
  ...
  BEGIN:VEVENT
  UID:event_item-1_2024-01-08@lessonpath
  ...
  END:VEVENT
  END:VCALENDAR
"""

from __future__ import annotations

import logging

from icalendar import Calendar, Event, vText

from lessonpath.domain.models import CalendarEventPayload
from lessonpath.domain.ports import CalendarFeedRenderer
from lessonpath.services.calendar_materializer import CANONICAL_PREFIX

logger = logging.getLogger(__name__)

_PRODID = "-//LessonPath//LessonPath//EN"
_UID_DOMAIN = "lessonpath"


class ICalRenderer(CalendarFeedRenderer):
    """
    icalendar ライブラリを使った iCal フィード生成実装。

    終日ペイロードは DATE 型、それ以外はタイムゾーンなしの DATETIME 型
    （フローティング時刻、端末のローカル時刻として解釈される）で出力する。
    UID は正規ディープリンクのIDから作るので、再生成しても同じ値になる。
    """

    def __init__(self, calendar_name: str = "LessonPath") -> None:
        self._calendar_name = calendar_name

    def render(self, events: list[CalendarEventPayload]) -> str:
        """
        CalendarEventPayload リストから iCal 形式の文字列を生成。

        Args:
            events: 出力するイベントのリスト

        Returns:
            RFC 5545 準拠の iCal 文字列（Content-Type: text/calendar）
        """
        cal = Calendar()
        cal.add("prodid", _PRODID)
        cal.add("version", "2.0")
        cal.add("calscale", "GREGORIAN")
        cal.add("method", "PUBLISH")
        cal.add("x-wr-calname", vText(self._calendar_name))

        for payload in events:
            cal.add_component(self._build_vevent(payload))

        result = cal.to_ical().decode("utf-8")
        logger.info("Rendered iCal: events=%d, bytes=%d", len(events), len(result))
        return result

    @staticmethod
    def _uid(payload: CalendarEventPayload) -> str:
        event_id = payload.url[len(CANONICAL_PREFIX):] if payload.url else ""
        return f"{event_id or payload.title}@{_UID_DOMAIN}"

    @classmethod
    def _build_vevent(cls, payload: CalendarEventPayload) -> Event:
        """CalendarEventPayload から VEVENT コンポーネントを構築"""
        vevent = Event()
        vevent.add("uid", cls._uid(payload))
        vevent.add("summary", payload.title)

        if payload.all_day:
            vevent.add("dtstart", payload.start.date())
            vevent.add("dtend", payload.end.date())
        else:
            vevent.add("dtstart", payload.start)
            vevent.add("dtend", payload.end)

        if payload.location:
            vevent.add("location", payload.location)
        if payload.notes:
            vevent.add("description", payload.notes)
        if payload.url:
            vevent.add("url", payload.url)

        return vevent
