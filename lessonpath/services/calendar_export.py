"""CalendarExporter - ペイロードを外部カレンダーに書き出す

書き込みは1回だけ試み、リトライしない。カレンダーが使えない・作成に失敗した場合は
正規ディープリンクを返して手動コピーに切り替える（書き出しを黙って捨てない）。
"""

from __future__ import annotations

import logging

from lessonpath.domain.models import (
    CalendarEventPayload,
    ExportResult,
    Occurrence,
    SeriesSummary,
    Transaction,
)
from lessonpath.domain.ports import CalendarService
from lessonpath.services.calendar_materializer import (
    build_series_calendar_event,
    build_single_calendar_event,
)

logger = logging.getLogger(__name__)

STATUS_CREATED = "created"
STATUS_FALLBACK = "fallback"
REASON_UNAVAILABLE = "unavailable"
REASON_WRITE_FAILED = "write_failed"


class CalendarExporter:
    """
    CalendarService への書き出しと手動コピーフォールバックを担当する。

    - is_available() が False → fallback（reason=unavailable）
    - create_event() が例外 → fallback（reason=write_failed）
    どちらの場合も例外は呼び出し側に伝播させない。
    """

    def __init__(self, calendar: CalendarService) -> None:
        self._calendar = calendar

    def export_payload(self, payload: CalendarEventPayload) -> ExportResult:
        """
        ペイロードを1件書き出す。

        Args:
            payload: 書き出すイベント（url に正規ディープリンクを含む）

        Returns:
            ExportResult: created なら event_ref、fallback なら手動コピー用 url
        """
        try:
            available = self._calendar.is_available()
        except Exception:
            logger.exception("Calendar availability check failed: %s", payload.title)
            available = False

        if not available:
            logger.warning("Calendar unavailable, falling back to link: %s", payload.url)
            return ExportResult(
                status=STATUS_FALLBACK, url=payload.url, reason=REASON_UNAVAILABLE
            )

        try:
            event_ref = self._calendar.create_event(payload)
        except Exception:
            logger.exception("Failed to export calendar event: %s", payload.title)
            return ExportResult(
                status=STATUS_FALLBACK, url=payload.url, reason=REASON_WRITE_FAILED
            )

        logger.info("Exported calendar event: %s (%s)", payload.title, event_ref)
        return ExportResult(status=STATUS_CREATED, url=payload.url, event_ref=event_ref)

    def export_occurrence(
        self, occurrence: Occurrence, transaction: Transaction | None = None
    ) -> ExportResult:
        """1回分の予定を書き出す"""
        return self.export_payload(build_single_calendar_event(occurrence, transaction))

    def export_series(
        self, summary: SeriesSummary, transaction: Transaction
    ) -> ExportResult:
        """レッスンシリーズ全体を1件として書き出す"""
        return self.export_payload(build_series_calendar_event(summary, transaction))

    def export_all(self, payloads: list[CalendarEventPayload]) -> list[ExportResult]:
        """複数ペイロードを順に書き出す（サービスの3件セット等）"""
        return [self.export_payload(payload) for payload in payloads]
