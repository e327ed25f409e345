"""ScheduleService - 取引データからの派生データ取得を1か所にまとめる

TransactionSource（Port）にのみ依存し、ストレージの実装詳細からは独立。
派生データは保存せず、呼び出しのたびに取引データから再計算する。
"""

from __future__ import annotations

import logging
from datetime import datetime

from lessonpath.domain.errors import ItemNotFoundError
from lessonpath.domain.models import (
    CalendarEventPayload,
    Chain,
    ContinuityGap,
    LessonReminder,
    LineItem,
    Occurrence,
    SeriesSummary,
    Transaction,
    TransactionWithItems,
)
from lessonpath.domain.ports import TransactionSource
from lessonpath.services.calendar_materializer import (
    build_series_calendar_event,
    build_service_calendar_events,
    build_single_calendar_event,
)
from lessonpath.services.chain_linker import (
    ChainKeyFunction,
    default_chain_key,
    find_chain_for_item,
)
from lessonpath.services.continuity import DEFAULT_TOLERANCE_DAYS, detect_continuity_gaps
from lessonpath.services.education_text import (
    format_education_title,
    format_series_title,
)
from lessonpath.services.lesson_reminders import (
    DEFAULT_WINDOW_DAYS,
    plan_lesson_reminders,
)
from lessonpath.services.series_cache import SeriesCache
from lessonpath.services.series_expansion import (
    MAX_SERIES_OCCURRENCES,
    generate_lesson_occurrences,
)
from lessonpath.services.service_events import generate_service_occurrences
from lessonpath.services.summarizer import get_series_summary

logger = logging.getLogger(__name__)


class ScheduleService:
    """
    明細IDを起点に、予定・シリーズ要約・チェーン・ギャップ・カレンダーペイロードを返す。

    詳細画面のプレビュー、レビュー時のギャップ確認、ラーニングパス表示、
    カレンダー書き出しの各入口から使われる。
    """

    def __init__(
        self,
        source: TransactionSource,
        *,
        max_occurrences: int = MAX_SERIES_OCCURRENCES,
        tolerance_days: int = DEFAULT_TOLERANCE_DAYS,
        key_func: ChainKeyFunction = default_chain_key,
        cache: SeriesCache | None = None,
    ) -> None:
        """
        Args:
            source: 取引データの読み込み元
            max_occurrences: 1明細あたりの予定件数の上限
            tolerance_days: ギャップ判定の既定許容日数
            key_func: チェーンの同一性判定
            cache: 任意のメモ化レイヤー（None ならキャッシュしない）
        """
        self._source = source
        self._max_occurrences = max_occurrences
        self._tolerance_days = tolerance_days
        self._key_func = key_func
        self._cache = cache

    def transactions(self) -> list[TransactionWithItems]:
        return self._source.load_transactions()

    def find_item(self, item_id: str) -> tuple[LineItem, Transaction]:
        """明細とその取引を返す。見つからなければ ItemNotFoundError"""
        for record in self.transactions():
            for item in record.items:
                if item.id == item_id:
                    return item, record.transaction
        raise ItemNotFoundError(item_id)

    def occurrences(self, item_id: str) -> list[Occurrence]:
        """明細から生成される予定（教育はレッスン、サービスは1件 or 3件）"""
        item, transaction = self.find_item(item_id)
        if item.is_service:
            return generate_service_occurrences(item, transaction)
        if not item.is_education:
            return []
        if self._cache is not None:
            return self._cache.occurrences(
                item, transaction, max_occurrences=self._max_occurrences
            )
        return generate_lesson_occurrences(
            item, transaction, max_occurrences=self._max_occurrences
        )

    def series_summary(self, item_id: str) -> SeriesSummary | None:
        item, transaction = self.find_item(item_id)
        if not item.is_education:
            return None
        return get_series_summary(
            item, transaction, max_occurrences=self._max_occurrences
        )

    def series_titles(self, item_id: str, fallback_year: int) -> tuple[str, str]:
        """表示用タイトル（"Violin lessons for Vivian"）と学期つきシリーズタイトル"""
        item, _ = self.find_item(item_id)
        return (
            format_education_title(item.description, item.education),
            format_series_title(item.education, fallback_year),
        )

    def reminders(
        self, item_id: str, now: datetime, window_days: int = DEFAULT_WINDOW_DAYS
    ) -> list[LessonReminder]:
        """直近レッスンのリマインダー計画。教育明細以外は空"""
        item, transaction = self.find_item(item_id)
        if not item.is_education:
            return []
        return plan_lesson_reminders(
            item,
            transaction,
            now,
            window_days=window_days,
            max_occurrences=self._max_occurrences,
        )

    def chain(self, item_id: str) -> Chain | None:
        return find_chain_for_item(
            item_id, self.transactions(), key_func=self._key_func
        )

    def continuity_gaps(
        self, item_id: str, tolerance_days: int | None = None
    ) -> list[ContinuityGap]:
        """明細が属するチェーンのギャップ。チェーンが無ければ空"""
        chain = self.chain(item_id)
        if chain is None:
            return []
        tolerance = self._tolerance_days if tolerance_days is None else tolerance_days
        gaps = detect_continuity_gaps(chain.entries, tolerance)
        if gaps:
            logger.info(
                "Detected %d continuity gap(s) in chain %s",
                len(gaps),
                chain.chain_key,
                extra={"item_id": item_id, "chain_key": chain.chain_key},
            )
        return gaps

    def calendar_events(self, item_id: str) -> list[CalendarEventPayload]:
        """
        明細のカレンダーペイロード。

        - 教育: シリーズ全体で1件
        - サービス: 1件 or 3件（期間・預け入れ・受け取り）
        - その他: 空
        """
        item, transaction = self.find_item(item_id)
        if item.is_service:
            return build_service_calendar_events(item, transaction)
        if not item.is_education:
            return []
        summary = get_series_summary(
            item, transaction, max_occurrences=self._max_occurrences
        )
        if summary is None:
            return []
        if summary.count == 1:
            occurrence = generate_lesson_occurrences(
                item, transaction, max_occurrences=self._max_occurrences
            )[0]
            return [build_single_calendar_event(occurrence, transaction)]
        return [build_series_calendar_event(summary, transaction)]

    def feed_events(self) -> list[CalendarEventPayload]:
        """iCal フィード用に全明細のペイロードを集める"""
        payloads: list[CalendarEventPayload] = []
        for record in self.transactions():
            transaction = record.transaction
            for item in record.items:
                if item.is_service:
                    payloads.extend(build_service_calendar_events(item, transaction))
                elif item.is_education:
                    payloads.extend(
                        build_single_calendar_event(occurrence, transaction)
                        for occurrence in generate_lesson_occurrences(
                            item, transaction, max_occurrences=self._max_occurrences
                        )
                    )
        logger.info("Collected %d feed events", len(payloads))
        return payloads
