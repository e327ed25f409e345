"""カレンダーフィード・ディープリンク API ルート

GET /api/calendar.ics           → text/calendar（全明細の予定）
GET /api/links/resolve?url=...  → CanonicalLinkResponse

iPhone のカレンダーアプリや Google Calendar からフィード URL を登録すると
自動同期が可能になる。
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import PlainTextResponse

from lessonpath.adapters.ical_renderer import ICalRenderer
from lessonpath.entrypoints.api.deps import get_ical_renderer, get_schedule_service
from lessonpath.entrypoints.api.schemas import CanonicalLinkResponse
from lessonpath.services.calendar_materializer import parse_canonical_url
from lessonpath.services.schedule_service import ScheduleService

logger = logging.getLogger(__name__)
router = APIRouter(tags=["calendar"])


@router.get("/calendar.ics", response_class=PlainTextResponse)
def get_ical_feed(
    service: ScheduleService = Depends(get_schedule_service),
    renderer: ICalRenderer = Depends(get_ical_renderer),
) -> PlainTextResponse:
    """全明細の予定を iCal 形式で返す"""
    ical_content = renderer.render(service.feed_events())
    return PlainTextResponse(
        content=ical_content,
        media_type="text/calendar; charset=utf-8",
        headers={"Content-Disposition": 'attachment; filename="lessonpath.ics"'},
    )


@router.get("/links/resolve", response_model=CanonicalLinkResponse)
def resolve_link(url: str) -> CanonicalLinkResponse:
    """app://cal/... を分解してナビゲーション先を返す"""
    link = parse_canonical_url(url)
    if link is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Not a calendar link"
        )
    return CanonicalLinkResponse(target_id=link.target_id, is_series=link.is_series)
