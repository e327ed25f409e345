"""明細 API ルート

GET  /api/items/{id}/occurrences     → 200 [OccurrenceResponse...]
GET  /api/items/{id}/series          → 200 SeriesSummaryResponse | null
GET  /api/items/{id}/chain           → 200 ChainResponse | null
GET  /api/items/{id}/gaps            → 200 [GapResponse...]
GET  /api/items/{id}/calendar-event  → 200 [CalendarEventResponse...]
GET  /api/items/{id}/reminders       → 200 [ReminderResponse...]
POST /api/items/{id}/export          → 200 [ExportResponse...]
"""

from __future__ import annotations

import logging
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Query, status

from lessonpath.domain.errors import ItemNotFoundError
from lessonpath.entrypoints.api.deps import get_exporter, get_schedule_service
from lessonpath.entrypoints.api.schemas import (
    CalendarEventResponse,
    ChainResponse,
    ExportResponse,
    GapResponse,
    OccurrenceResponse,
    ReminderResponse,
    SeriesSummaryResponse,
)
from lessonpath.services.calendar_export import CalendarExporter
from lessonpath.services.chain_linker import get_chain_index
from lessonpath.services.schedule_service import ScheduleService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/items", tags=["items"])


def _not_found(e: ItemNotFoundError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.get("/{item_id}/occurrences", response_model=list[OccurrenceResponse])
def list_occurrences(
    item_id: str,
    service: ScheduleService = Depends(get_schedule_service),
) -> list[OccurrenceResponse]:
    """明細から生成される予定（プレビュー用）"""
    try:
        occurrences = service.occurrences(item_id)
    except ItemNotFoundError as e:
        raise _not_found(e) from e
    return [OccurrenceResponse.from_domain(o) for o in occurrences]


@router.get("/{item_id}/series", response_model=SeriesSummaryResponse | None)
def get_series(
    item_id: str,
    service: ScheduleService = Depends(get_schedule_service),
) -> SeriesSummaryResponse | None:
    """レッスンシリーズの要約。教育明細でない・予定0件なら null"""
    try:
        summary = service.series_summary(item_id)
    except ItemNotFoundError as e:
        raise _not_found(e) from e
    if summary is None:
        return None
    display_title, series_title = service.series_titles(
        item_id, fallback_year=summary.first_date.year
    )
    return SeriesSummaryResponse.from_domain(summary, display_title, series_title)


@router.get("/{item_id}/chain", response_model=ChainResponse | None)
def get_chain(
    item_id: str,
    service: ScheduleService = Depends(get_schedule_service),
) -> ChainResponse | None:
    """ラーニングパス（スワイプ表示用）。同じキーの明細が他に無ければ null"""
    chain = service.chain(item_id)
    if chain is None:
        return None
    return ChainResponse.from_domain(chain, get_chain_index(item_id, chain))


@router.get("/{item_id}/gaps", response_model=list[GapResponse])
def list_gaps(
    item_id: str,
    tolerance_days: int | None = Query(default=None, ge=0),
    service: ScheduleService = Depends(get_schedule_service),
) -> list[GapResponse]:
    """
    チェーンの継続ギャップ。

    ギャップは情報提供のみ。「受け入れる」「修正する」はクライアント側で扱う。
    """
    gaps = service.continuity_gaps(item_id, tolerance_days)
    return [GapResponse.from_domain(g) for g in gaps]


@router.get("/{item_id}/calendar-event", response_model=list[CalendarEventResponse])
def get_calendar_events(
    item_id: str,
    service: ScheduleService = Depends(get_schedule_service),
) -> list[CalendarEventResponse]:
    """カレンダー書き出し用ペイロード（シリーズは1件、複数日サービスは3件）"""
    try:
        payloads = service.calendar_events(item_id)
    except ItemNotFoundError as e:
        raise _not_found(e) from e
    return [CalendarEventResponse.from_domain(p) for p in payloads]


@router.post("/{item_id}/export", response_model=list[ExportResponse])
def export_to_calendar(
    item_id: str,
    service: ScheduleService = Depends(get_schedule_service),
    exporter: CalendarExporter = Depends(get_exporter),
) -> list[ExportResponse]:
    """
    カレンダーに書き出す。

    カレンダーが使えない・失敗した場合も 200 を返し、status=fallback と
    手動コピー用の url をクライアントに渡す。
    """
    try:
        payloads = service.calendar_events(item_id)
    except ItemNotFoundError as e:
        raise _not_found(e) from e
    results = exporter.export_all(payloads)
    logger.info(
        "Export item=%s: %d event(s), %d fallback",
        item_id,
        len(results),
        sum(1 for r in results if r.needs_manual_copy),
        extra={"item_id": item_id},
    )
    return [ExportResponse.from_domain(r) for r in results]


@router.get("/{item_id}/reminders", response_model=list[ReminderResponse])
def list_reminders(
    item_id: str,
    window_days: int = Query(default=30, ge=1, le=366),
    service: ScheduleService = Depends(get_schedule_service),
) -> list[ReminderResponse]:
    """直近レッスンのリマインダー計画（送信は通知側で行う）"""
    try:
        reminders = service.reminders(item_id, datetime.now(), window_days)
    except ItemNotFoundError as e:
        raise _not_found(e) from e
    return [ReminderResponse.from_domain(r) for r in reminders]
