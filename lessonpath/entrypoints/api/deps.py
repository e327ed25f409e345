"""FastAPI 依存性注入

設定・ScheduleService・CalendarExporter・iCal レンダラーの初期化を担当する。
各ルートは Depends() でこのモジュールの関数を呼び出してインスタンスを受け取る。
テストでは app.dependency_overrides で差し替える。
"""

from __future__ import annotations

import logging
from functools import lru_cache

from fastapi import Depends

from lessonpath.adapters.ical_renderer import ICalRenderer
from lessonpath.config import AppConfig
from lessonpath.entrypoints.factory import create_exporter, create_schedule_service
from lessonpath.services.calendar_export import CalendarExporter
from lessonpath.services.schedule_service import ScheduleService

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def get_config() -> AppConfig:
    """環境変数から設定を読み込む（プロセス内で1回のみ）"""
    config = AppConfig.from_env()
    logger.info(
        "Config loaded: source=%s, max_series=%d",
        config.source_backend,
        config.max_series_occurrences,
    )
    return config


@lru_cache(maxsize=1)
def _schedule_service_for(config: AppConfig) -> ScheduleService:
    # 取引データは毎回ソースから読むので、共有するのは任意のキャッシュだけ
    return create_schedule_service(config)


def get_schedule_service(config: AppConfig = Depends(get_config)) -> ScheduleService:
    return _schedule_service_for(config)


def get_exporter(config: AppConfig = Depends(get_config)) -> CalendarExporter:
    return create_exporter(config)


def get_ical_renderer() -> ICalRenderer:
    return ICalRenderer()
