"""Google Calendar Service Adapter

CalendarService ABCの実装。
ペイロードはタイムゾーンなしのローカル日時なので、設定のタイムゾーンを付けて送る。
"""

import logging

from google.oauth2.credentials import Credentials
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from lessonpath.domain.errors import CalendarWriteError
from lessonpath.domain.models import CalendarEventPayload
from lessonpath.domain.ports import CalendarService

logger = logging.getLogger(__name__)

_DATE_FMT = "%Y-%m-%d"
_DATETIME_FMT = "%Y-%m-%dT%H:%M:%S"


class GoogleCalendarService(CalendarService):
    """
    Google Calendarを使ったイベント作成実装。

    終日ペイロード（サービス期間）と時刻指定ペイロードの両方に対応。
    """

    def __init__(
        self,
        credentials: Credentials,
        calendar_id: str = "primary",
        timezone: str = "Australia/Sydney",
    ):
        """
        Args:
            credentials: Google API認証情報
            calendar_id: 書き込み先カレンダーID
            timezone: ローカル日時に付けるタイムゾーン
        """
        if not credentials:
            raise ValueError("credentials is required")

        self._service = build("calendar", "v3", credentials=credentials)
        self._calendar_id = calendar_id
        self._timezone = timezone

    def is_available(self) -> bool:
        """書き込み先カレンダーにアクセスできるか"""
        try:
            self._service.calendars().get(calendarId=self._calendar_id).execute()
        except HttpError as e:
            logger.warning("Calendar %s is not accessible: %s", self._calendar_id, e)
            return False
        return True

    def create_event(self, payload: CalendarEventPayload) -> str:
        """
        Google Calendarにイベントを作成。

        Args:
            payload: 書き出すイベント

        Returns:
            str: 作成されたイベントのURL

        Raises:
            CalendarWriteError: イベント作成に失敗した場合
        """
        event_body = {
            "summary": payload.title or "No Title",
            "location": payload.location,
            "description": payload.notes,
            "start": self._build_datetime_body(payload, payload.start),
            "end": self._build_datetime_body(payload, payload.end),
        }
        if payload.url:
            event_body["source"] = {"title": "LessonPath", "url": payload.url}

        try:
            created_event = (
                self._service.events()
                .insert(calendarId=self._calendar_id, body=event_body)
                .execute()
            )
        except HttpError as e:
            logger.exception("Failed to create calendar event: %s", payload.title)
            raise CalendarWriteError(str(e)) from e

        event_url: str = created_event.get("htmlLink", "")
        logger.info("Created calendar event: %s (%s)", payload.title, event_url)
        return event_url

    def _build_datetime_body(self, payload: CalendarEventPayload, value) -> dict:
        """
        Calendar APIの start/end bodyを構築。

        Returns:
            dict: {'date': ...} or {'dateTime': ..., 'timeZone': ...}
        """
        if payload.all_day:
            return {"date": value.strftime(_DATE_FMT)}
        return {"dateTime": value.strftime(_DATETIME_FMT), "timeZone": self._timezone}
