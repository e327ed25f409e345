"""Domain layer - 外部依存なしのドメインモデルとインターフェース定義"""

from lessonpath.domain.errors import (
    CalendarUnavailableError,
    CalendarWriteError,
    ItemNotFoundError,
    LessonPathError,
    SourceLoadError,
)
from lessonpath.domain.models import (
    CalendarEventPayload,
    Cadence,
    Chain,
    ChainEntry,
    ClockTime,
    ContinuityGap,
    EducationDetails,
    ExportResult,
    ItemCategory,
    LineItem,
    Occurrence,
    ParsedSchedule,
    SeriesSummary,
    ServiceDetails,
    Transaction,
    TransactionWithItems,
)
from lessonpath.domain.ports import (
    CalendarFeedRenderer,
    CalendarService,
    TransactionSource,
)

__all__ = [
    # Models
    "ItemCategory",
    "Cadence",
    "EducationDetails",
    "ServiceDetails",
    "Transaction",
    "LineItem",
    "TransactionWithItems",
    "ClockTime",
    "ParsedSchedule",
    "Occurrence",
    "SeriesSummary",
    "ChainEntry",
    "Chain",
    "ContinuityGap",
    "CalendarEventPayload",
    "ExportResult",
    # Errors
    "LessonPathError",
    "SourceLoadError",
    "ItemNotFoundError",
    "CalendarUnavailableError",
    "CalendarWriteError",
    # Ports
    "TransactionSource",
    "CalendarService",
    "CalendarFeedRenderer",
]
