"""API レスポンスモデル（pydantic）"""

from __future__ import annotations

import datetime as dt
from typing import Any

from pydantic import BaseModel

from lessonpath.domain.models import (
    CalendarEventPayload,
    Chain,
    ContinuityGap,
    ExportResult,
    LessonReminder,
    Occurrence,
    SeriesSummary,
)


class LinkResponse(BaseModel):
    id: str
    type: str


class OccurrenceResponse(BaseModel):
    id: str
    date: dt.date
    title: str
    subtitle: str
    metadata: dict[str, Any]
    receipt_id: str
    links: list[LinkResponse]

    @classmethod
    def from_domain(cls, o: Occurrence) -> OccurrenceResponse:
        return cls(
            id=o.id,
            date=o.date,
            title=o.title,
            subtitle=o.subtitle,
            metadata=o.metadata,
            receipt_id=o.receipt_id,
            links=[LinkResponse(id=link.id, type=link.type) for link in o.links],
        )


class SeriesSummaryResponse(BaseModel):
    count: int
    first_date: dt.date
    last_date: dt.date
    title: str
    display_title: str  # 例: "Violin lessons for Vivian"
    series_title: str  # 例: "Violin lessons for Vivian - Term 1 2024"
    item_id: str
    receipt_id: str
    metadata: dict[str, Any]

    @classmethod
    def from_domain(
        cls, s: SeriesSummary, display_title: str = "", series_title: str = ""
    ) -> SeriesSummaryResponse:
        return cls(
            count=s.count,
            first_date=s.first_date,
            last_date=s.last_date,
            title=s.title,
            display_title=display_title or s.title,
            series_title=series_title or s.title,
            item_id=s.item_id,
            receipt_id=s.receipt_id,
            metadata=s.metadata,
        )


class ChainEntryResponse(BaseModel):
    item_id: str
    description: str
    receipt_id: str
    start_date: dt.date | None
    end_date: dt.date | None


class ChainResponse(BaseModel):
    chain_key: str
    student_name: str
    focus: str
    providers: list[str]
    index: int  # 要求した明細のチェーン内位置
    entries: list[ChainEntryResponse]

    @classmethod
    def from_domain(cls, chain: Chain, index: int) -> ChainResponse:
        return cls(
            chain_key=chain.chain_key,
            student_name=chain.student_name,
            focus=chain.focus,
            providers=list(chain.providers),
            index=index,
            entries=[
                ChainEntryResponse(
                    item_id=e.item.id,
                    description=e.item.description,
                    receipt_id=e.receipt.id,
                    start_date=e.start_date,
                    end_date=e.end_date,
                )
                for e in chain.entries
            ],
        )


class GapResponse(BaseModel):
    expected_date: dt.date
    actual_next_date: dt.date | None
    gap_days: int
    chain_item_index: int

    @classmethod
    def from_domain(cls, g: ContinuityGap) -> GapResponse:
        return cls(
            expected_date=g.expected_date,
            actual_next_date=g.actual_next_date,
            gap_days=g.gap_days,
            chain_item_index=g.chain_item_index,
        )


class CalendarEventResponse(BaseModel):
    title: str
    start: dt.datetime
    end: dt.datetime
    location: str
    notes: str
    url: str
    all_day: bool

    @classmethod
    def from_domain(cls, p: CalendarEventPayload) -> CalendarEventResponse:
        return cls(
            title=p.title,
            start=p.start,
            end=p.end,
            location=p.location,
            notes=p.notes,
            url=p.url,
            all_day=p.all_day,
        )


class ExportResponse(BaseModel):
    status: str  # "created" | "fallback"
    url: str
    event_ref: str
    reason: str

    @classmethod
    def from_domain(cls, r: ExportResult) -> ExportResponse:
        return cls(status=r.status, url=r.url, event_ref=r.event_ref, reason=r.reason)


class CanonicalLinkResponse(BaseModel):
    target_id: str
    is_series: bool


class ReminderResponse(BaseModel):
    key: str
    item_id: str
    lesson_date: dt.date
    lesson_start: dt.datetime
    remind_at: dt.datetime
    student_name: str
    instrument: str

    @classmethod
    def from_domain(cls, r: LessonReminder) -> ReminderResponse:
        return cls(
            key=r.key,
            item_id=r.item_id,
            lesson_date=r.lesson_date,
            lesson_start=r.lesson_start,
            remind_at=r.remind_at,
            student_name=r.student_name,
            instrument=r.instrument,
        )
