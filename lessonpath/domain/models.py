"""ドメインモデル - 外部依存なしのデータ構造"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any


class ItemCategory(Enum):
    """明細行のカテゴリ"""

    GEAR = "gear"
    SERVICE = "service"
    EDUCATION = "education"
    EVENT = "event"
    OTHER = "other"


class Cadence(Enum):
    """
    レッスンの繰り返し間隔（日数）。

    MONTHLY の 30 は「暦の上で1か月進める」を意味する（固定30日ではない）。
    """

    ONE_OFF = 0
    WEEKLY = 7
    FORTNIGHTLY = 14
    MONTHLY = 30

    @property
    def days(self) -> int:
        return self.value

    @property
    def is_recurring(self) -> bool:
        return self.value > 0


def _decode_blob(raw: Any) -> dict:
    """dict または JSON 文字列の詳細ブロブを dict に変換。壊れていれば空 dict"""
    if isinstance(raw, dict):
        return raw
    if isinstance(raw, str) and raw.strip():
        try:
            decoded = json.loads(raw)
        except ValueError:
            return {}
        return decoded if isinstance(decoded, dict) else {}
    return {}


def _pick(data: dict, *keys: str) -> str:
    """候補キーのうち最初に値がある文字列を返す"""
    for key in keys:
        value = data.get(key)
        if value is None:
            continue
        text = str(value).strip()
        if text:
            return text
    return ""


def _string_list(value: Any) -> list[str]:
    if isinstance(value, str):
        return [value] if value.strip() else []
    if isinstance(value, (list, tuple)):
        return [str(v) for v in value if v is not None and str(v).strip()]
    return []


@dataclass(frozen=True)
class EducationDetails:
    """教育系明細（レッスン）のスケジュール記述子。AI 抽出のため表記ゆれあり"""

    teacher_name: str = ""
    student_name: str = ""
    focus: str = ""  # 例: "Violin", "Music Theory"
    frequency: str = ""  # 例: "Weekly", "every 2 weeks"
    duration: str = ""  # 例: "30 min", "1.5 hours"
    start_date: str = ""  # YYYY-MM-DD
    end_date: str = ""  # YYYY-MM-DD
    days_of_week: list[str] = field(default_factory=list)  # 例: ["Monday"]
    times: list[str] = field(default_factory=list)  # 例: ["4:00 PM"]

    @classmethod
    def from_blob(cls, raw: Any) -> EducationDetails:
        """
        保存済みの詳細ブロブ（dict / JSON 文字列）から生成。

        camelCase（アプリ側の保存形式）と snake_case の両方を受け付ける。
        focus が無い場合は instrument / subject をフォールバックに使う。
        """
        data = _decode_blob(raw)
        return cls(
            teacher_name=_pick(data, "teacherName", "teacher_name"),
            student_name=_pick(data, "studentName", "student_name"),
            focus=_pick(data, "focus", "instrument", "subject"),
            frequency=_pick(data, "frequency"),
            duration=_pick(data, "duration"),
            start_date=_pick(data, "startDate", "start_date"),
            end_date=_pick(data, "endDate", "end_date"),
            days_of_week=_string_list(data.get("daysOfWeek", data.get("days_of_week"))),
            times=_string_list(data.get("times")),
        )


@dataclass(frozen=True)
class ServiceDetails:
    """修理・メンテナンス系明細の記述子"""

    start_date: str = ""
    end_date: str = ""
    is_multi_day: bool | None = None
    pickup_date: str = ""  # 預け入れ日（サービス開始）
    dropoff_date: str = ""  # 受け取り日（サービス完了）
    technician: str = ""
    gear_item_id: str = ""
    gear_description: str = ""
    service_type: str = ""

    @classmethod
    def from_blob(cls, raw: Any) -> ServiceDetails:
        """保存済みの詳細ブロブ（dict / JSON 文字列）から生成"""
        data = _decode_blob(raw)
        multi_day = data.get("isMultiDay", data.get("is_multi_day"))
        return cls(
            start_date=_pick(data, "startDate", "start_date"),
            end_date=_pick(data, "endDate", "end_date"),
            is_multi_day=multi_day if isinstance(multi_day, bool) else None,
            pickup_date=_pick(data, "pickupDate", "pickup_date"),
            dropoff_date=_pick(data, "dropoffDate", "dropoff_date"),
            technician=_pick(data, "technician"),
            gear_item_id=_pick(data, "gearItemId", "gear_item_id"),
            gear_description=_pick(data, "gearDescription", "gear_description"),
            service_type=_pick(data, "serviceType", "service_type"),
        )


@dataclass(frozen=True)
class Transaction:
    """取引（レシート・請求書）。外部ストレージが所有し、ここでは読むだけ"""

    id: str
    merchant: str = ""
    transaction_date: str = ""  # YYYY-MM-DD
    phone: str = ""
    email: str = ""
    address: str = ""


@dataclass(frozen=True)
class LineItem:
    """取引の明細行"""

    id: str
    description: str
    category: str = ItemCategory.OTHER.value
    education: EducationDetails = field(default_factory=EducationDetails)
    service: ServiceDetails = field(default_factory=ServiceDetails)
    quantity: float | None = None
    total_price: int | None = None  # セント単位
    transaction_id: str = ""
    updated_at: str = ""  # ISO8601。メモ化キーに使う

    @property
    def is_education(self) -> bool:
        return self.category == ItemCategory.EDUCATION.value

    @property
    def is_service(self) -> bool:
        return self.category == ItemCategory.SERVICE.value


@dataclass(frozen=True)
class TransactionWithItems:
    """明細行つきの取引"""

    transaction: Transaction
    items: list[LineItem] = field(default_factory=list)


@dataclass(frozen=True)
class ClockTime:
    """時刻（時・分）"""

    hour: int
    minute: int


@dataclass(frozen=True)
class ParsedSchedule:
    """記述子をパースした結果（都度再計算、永続化しない）"""

    cadence: Cadence = Cadence.ONE_OFF
    clock_time: ClockTime | None = None
    duration_minutes: int = 30
    weekdays: frozenset[int] = frozenset()  # 0=日曜 .. 6=土曜

    @property
    def cadence_days(self) -> int:
        return self.cadence.days


@dataclass(frozen=True)
class ItemLink:
    """生成物から元の明細・取引への参照"""

    id: str
    type: str  # "education" | "service" | "transaction"


@dataclass(frozen=True)
class Occurrence:
    """具体的な1回分の予定"""

    id: str  # 明細ID + 日付から決定的に生成
    date: date
    title: str
    subtitle: str
    metadata: dict[str, Any] = field(default_factory=dict)
    receipt_id: str = ""
    links: list[ItemLink] = field(default_factory=list)


@dataclass(frozen=True)
class SeriesSummary:
    """レッスンシリーズの要約（カレンダー1件分）"""

    count: int
    first_date: date
    last_date: date
    title: str
    item_id: str
    receipt_id: str
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ChainEntry:
    """ラーニングパス内の1期間"""

    item: LineItem
    receipt: Transaction
    start_date: date | None
    end_date: date | None


@dataclass(frozen=True)
class Chain:
    """取引をまたいで連続する教育明細のグループ（ラーニングパス）"""

    chain_key: str  # 例: "vivian|violin"
    entries: list[ChainEntry]
    student_name: str
    focus: str
    providers: list[str] = field(default_factory=list)  # 先生が変わっても同じチェーン


@dataclass(frozen=True)
class ContinuityGap:
    """期待される次回日と実際の次期間開始日のずれ"""

    expected_date: date
    actual_next_date: date | None
    gap_days: int
    chain_item_index: int


@dataclass(frozen=True)
class TermPattern:
    """タイトル中の学期表記（例: "Term 1 2025"）"""

    year: int
    term: int | None = None
    semester: int | None = None


@dataclass(frozen=True)
class CalendarEventPayload:
    """カレンダー書き出し用イベント（タイムゾーンなしのローカル日時）"""

    title: str
    start: datetime
    end: datetime
    location: str = ""
    notes: str = ""
    url: str = ""  # 正規ディープリンク（手動コピー用フォールバック）
    all_day: bool = False


@dataclass(frozen=True)
class CanonicalLink:
    """app://cal/... をパースした結果"""

    target_id: str  # シリーズなら明細ID、それ以外は生のイベントID
    is_series: bool = False


@dataclass(frozen=True)
class ExportResult:
    """カレンダー書き出し結果"""

    status: str  # "created" | "fallback"
    url: str  # 正規ディープリンク
    event_ref: str = ""
    reason: str = ""  # "unavailable" | "write_failed"

    @property
    def needs_manual_copy(self) -> bool:
        return self.status == "fallback"


@dataclass(frozen=True)
class LessonReminder:
    """レッスン前リマインダーの計画"""

    key: str  # lessons|{itemId}|{date}
    item_id: str
    lesson_date: date
    lesson_start: datetime
    remind_at: datetime
    student_name: str
    instrument: str
