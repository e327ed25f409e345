"""Factory - 依存性注入の組み立て

Adapter と Service を組み立てて、CLI / API から使える形にする。
"""

import logging

from lessonpath.adapters.json_source import JsonTransactionSource
from lessonpath.config import AppConfig
from lessonpath.domain.errors import CalendarUnavailableError
from lessonpath.domain.models import CalendarEventPayload
from lessonpath.domain.ports import CalendarService, TransactionSource
from lessonpath.services.calendar_export import CalendarExporter
from lessonpath.services.schedule_service import ScheduleService
from lessonpath.services.series_cache import SeriesCache

logger = logging.getLogger(__name__)


def create_source(config: AppConfig) -> TransactionSource:
    """設定に応じた TransactionSource を生成"""
    if config.source_backend == "firestore":
        from google.cloud import firestore

        from lessonpath.adapters.firestore_source import FirestoreTransactionSource

        logger.info("Using Firestore source: uid=%s", config.firestore_uid)
        db = firestore.Client(project=config.project_id or None)
        return FirestoreTransactionSource(db, config.firestore_uid)

    logger.info("Using JSON source: %s", config.source_path)
    return JsonTransactionSource(config.source_path)


def create_schedule_service(
    config: AppConfig | None = None, source: TransactionSource | None = None
) -> ScheduleService:
    """
    ScheduleService を生成。

    Args:
        config: アプリケーション設定（Noneの場合は環境変数から読み込み）
        source: 取引データの読み込み元（Noneの場合は設定から生成）
    """
    if config is None:
        config = AppConfig.from_env()

    cache = SeriesCache(config.series_cache_size) if config.series_cache_size else None
    return ScheduleService(
        source or create_source(config),
        max_occurrences=config.max_series_occurrences,
        tolerance_days=config.gap_tolerance_days,
        cache=cache,
    )


def create_calendar_service(config: AppConfig) -> CalendarService:
    """
    Google Calendar を生成。認証情報が無ければ Null Object を返す
    （書き出しは手動コピーのフォールバックになる）。
    """
    from lessonpath.adapters.credentials import (
        get_google_credentials,
        has_local_credentials,
    )

    if not has_local_credentials(config.credentials_dir):
        logger.warning("Google credentials not found, calendar export disabled")
        return _NullCalendarService()

    from lessonpath.adapters.google_calendar import GoogleCalendarService

    creds = get_google_credentials(config.credentials_dir)
    return GoogleCalendarService(
        credentials=creds,
        calendar_id=config.calendar_id,
        timezone=config.calendar_timezone,
    )


def create_exporter(config: AppConfig | None = None) -> CalendarExporter:
    if config is None:
        config = AppConfig.from_env()
    return CalendarExporter(create_calendar_service(config))


# Null Object Pattern（カレンダー未設定の場合の代替）


class _NullCalendarService(CalendarService):
    """CalendarServiceのNull Object（常に利用不可）"""

    def is_available(self) -> bool:
        return False

    def create_event(self, payload: CalendarEventPayload) -> str:
        raise CalendarUnavailableError("Calendar is not configured")
