"""共通テストフィクスチャ

全テストから利用可能なモックオブジェクトとサンプルデータを提供。

モックの作成:
- MagicMock(spec=ABC) でABCのメソッドシグネチャを保持
- 取引データはメモリ上の TransactionSource で差し替える
"""

from unittest.mock import MagicMock

import pytest
from lessonpath.domain.models import (
    EducationDetails,
    LineItem,
    ServiceDetails,
    Transaction,
    TransactionWithItems,
)
from lessonpath.domain.ports import CalendarService, TransactionSource


class InMemoryTransactionSource(TransactionSource):
    """テスト用の TransactionSource（読み込み回数を記録する）"""

    def __init__(self, records: list[TransactionWithItems]) -> None:
        self._records = list(records)
        self.load_count = 0

    def load_transactions(self) -> list[TransactionWithItems]:
        self.load_count += 1
        return list(self._records)


# ========== サンプルデータ ==========

_VIOLIN_DEFAULTS = {
    "teacher_name": "Ms Lee",
    "student_name": "Vivian",
    "focus": "Violin",
    "frequency": "Weekly",
    "duration": "30 min",
    "start_date": "2024-01-01",
    "end_date": "2024-03-11",
    "days_of_week": ["Monday"],
    "times": ["4:00 PM"],
}


@pytest.fixture
def sample_transaction() -> Transaction:
    """サンプル取引: 音楽教室"""
    return Transaction(id="r1", merchant="Allegro Music", transaction_date="2024-01-01")


@pytest.fixture
def make_education_item():
    """教育明細を作るファクトリ（既定は毎週月曜 16:00 のバイオリン、11回）"""

    def _make(
        item_id: str = "i1",
        description: str = "Term 1 violin",
        updated_at: str = "",
        **details,
    ) -> LineItem:
        fields = {**_VIOLIN_DEFAULTS, **details}
        return LineItem(
            id=item_id,
            description=description,
            category="education",
            education=EducationDetails(**fields),
            updated_at=updated_at,
        )

    return _make


@pytest.fixture
def make_service_item():
    """サービス明細を作るファクトリ"""

    def _make(
        item_id: str = "s1",
        description: str = "Violin bow rehair",
        **details,
    ) -> LineItem:
        return LineItem(
            id=item_id,
            description=description,
            category="service",
            service=ServiceDetails(**details),
        )

    return _make


@pytest.fixture
def sample_records(make_education_item, make_service_item) -> list[TransactionWithItems]:
    """
    サンプル取引一式

    - r1: Vivian のバイオリン Term 1（i1、毎週11回）と楽器本体（g1）
    - r2: Vivian のバイオリン Term 2（i2、先生が交代、毎週9回）
    - r3: 弓の毛替え（s1、3日間）と調整（s2、1日）
    - r4: Oscar のピアノ体験レッスン（i3、単発）
    """
    return [
        TransactionWithItems(
            transaction=Transaction(
                id="r1", merchant="Allegro Music", transaction_date="2024-01-01"
            ),
            items=[
                make_education_item(updated_at="2024-01-01T09:00:00Z"),
                LineItem(id="g1", description="Violin 3/4", category="gear"),
            ],
        ),
        TransactionWithItems(
            transaction=Transaction(
                id="r2", merchant="Allegro Music", transaction_date="2024-04-01"
            ),
            items=[
                make_education_item(
                    item_id="i2",
                    description="Term 2 violin",
                    teacher_name="Mr Park",
                    start_date="2024-04-29",
                    end_date="2024-06-24",
                ),
            ],
        ),
        TransactionWithItems(
            transaction=Transaction(
                id="r3", merchant="Fix-It Strings", transaction_date="2024-02-01"
            ),
            items=[
                make_service_item(
                    start_date="2024-02-05",
                    end_date="2024-02-08",
                    technician="Sam",
                    service_type="Rehair",
                ),
                make_service_item(
                    item_id="s2",
                    description="Violin setup",
                    start_date="2024-02-10",
                ),
            ],
        ),
        TransactionWithItems(
            transaction=Transaction(
                id="r4", merchant="Keys Studio", transaction_date="2024-05-01"
            ),
            items=[
                make_education_item(
                    item_id="i3",
                    description="Piano trial lesson",
                    teacher_name="",
                    student_name="Oscar",
                    focus="Piano",
                    frequency="",
                    duration="1 hour",
                    start_date="2024-05-04",
                    end_date="",
                    days_of_week=[],
                    times=["10:30 AM"],
                ),
            ],
        ),
    ]


@pytest.fixture
def in_memory_source(sample_records) -> InMemoryTransactionSource:
    return InMemoryTransactionSource(sample_records)


# ========== モックオブジェクト ==========


@pytest.fixture
def mock_calendar() -> MagicMock:
    """モックカレンダー（利用可能、作成成功）"""
    mock = MagicMock(spec=CalendarService)
    mock.is_available.return_value = True
    mock.create_event.return_value = "https://calendar.google.com/event?eid=abc"
    return mock
