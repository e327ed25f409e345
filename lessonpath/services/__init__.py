"""Services layer - スケジュール展開・チェーン・カレンダー生成のロジック"""

from lessonpath.services.calendar_export import CalendarExporter
from lessonpath.services.schedule_service import ScheduleService
from lessonpath.services.series_cache import SeriesCache

__all__ = [
    "ScheduleService",
    "CalendarExporter",
    "SeriesCache",
]
