"""series_expansion のユニットテスト"""

import logging
from datetime import date

import pytest
from lessonpath.domain.models import Transaction
from lessonpath.services.series_expansion import (
    MAX_SERIES_OCCURRENCES,
    advance_by_cadence,
    expand_series_dates,
    generate_lesson_occurrences,
    occurrence_id,
)


class TestAdvanceByCadence:
    """cadence 単位で日付を進める"""

    def test_weekly_steps(self):
        """週単位は日数で進める"""
        assert advance_by_cadence(date(2024, 1, 1), 7) == date(2024, 1, 8)
        assert advance_by_cadence(date(2024, 1, 1), 7, steps=3) == date(2024, 1, 22)

    def test_monthly_clamps_to_month_end(self):
        """月単位は暦月で進め、存在しない日は月末に丸める"""
        assert advance_by_cadence(date(2024, 1, 31), 30) == date(2024, 2, 29)
        assert advance_by_cadence(date(2024, 1, 31), 30, steps=2) == date(2024, 3, 31)


class TestExpandSeriesDates:
    """日付列への展開"""

    def test_weekly_with_end_date(self):
        """毎週 2024-01-01〜2024-03-11 は11回"""
        dates = expand_series_dates(date(2024, 1, 1), date(2024, 3, 11), 7)

        assert len(dates) == 11
        assert dates[0] == date(2024, 1, 1)
        assert dates[-1] == date(2024, 3, 11)

    def test_fortnightly(self):
        """隔週は14日おき"""
        dates = expand_series_dates(date(2024, 1, 1), date(2024, 2, 12), 14)

        assert dates == [
            date(2024, 1, 1),
            date(2024, 1, 15),
            date(2024, 1, 29),
            date(2024, 2, 12),
        ]

    def test_open_ended_series_is_capped(self):
        """終了日なしの毎週は 52 件で打ち切る"""
        dates = expand_series_dates(date(2024, 1, 1), None, 7)

        assert len(dates) == MAX_SERIES_OCCURRENCES

    def test_cap_can_be_overridden(self):
        """上限件数は呼び出しごとに変更できる"""
        dates = expand_series_dates(date(2024, 1, 1), None, 7, max_occurrences=5)

        assert len(dates) == 5

    def test_dates_never_precede_start_and_are_increasing(self):
        """全て開始日以降、かつ狭義単調増加"""
        start = date(2024, 3, 15)
        dates = expand_series_dates(start, date(2025, 3, 15), 14)

        assert all(d >= start for d in dates)
        assert all(a < b for a, b in zip(dates, dates[1:]))

    def test_monthly_keeps_anchor_day(self):
        """月単位は開始日の日付に固定（月末は丸めるが、次の月で戻る）"""
        dates = expand_series_dates(date(2024, 1, 31), date(2024, 5, 31), 30)

        assert dates == [
            date(2024, 1, 31),
            date(2024, 2, 29),
            date(2024, 3, 31),
            date(2024, 4, 30),
            date(2024, 5, 31),
        ]

    def test_weekday_filter_excludes_non_matching_dates(self):
        """曜日フィルターに合わない日は出力しない"""
        # 2024-01-01 は月曜、水曜(3)だけを許可
        dates = expand_series_dates(date(2024, 1, 1), date(2024, 2, 1), 7, [3])

        assert dates == []

    def test_weekday_filter_matching(self):
        """曜日フィルターに合う日は全て出力する"""
        dates = expand_series_dates(date(2024, 1, 1), date(2024, 1, 29), 7, [1])

        assert len(dates) == 5

    def test_one_off_returns_start(self):
        """単発は開始日1件"""
        assert expand_series_dates(date(2024, 5, 4), None, 0) == [date(2024, 5, 4)]

    def test_missing_start_uses_fallback(self):
        """開始日が無ければフォールバック日で1件"""
        dates = expand_series_dates(None, None, 7, fallback_date=date(2024, 1, 1))

        assert dates == [date(2024, 1, 1)]

    def test_no_dates_at_all(self):
        """開始日もフォールバックも無ければ空"""
        assert expand_series_dates(None, None, 7) == []

    def test_end_before_start_is_empty(self):
        """終了日が開始日より前の繰り返しは空"""
        assert expand_series_dates(date(2024, 3, 1), date(2024, 2, 1), 7) == []


class TestOccurrenceId:
    """決定的な ID"""

    def test_occurrence_id(self):
        assert occurrence_id("i1") == "event_i1"
        assert occurrence_id("i1", date(2024, 1, 8)) == "event_i1_2024-01-08"


class TestGenerateLessonOccurrences:
    """教育明細からの Occurrence 生成"""

    def test_weekly_series(self, make_education_item, sample_transaction):
        """毎週のシリーズは番号つきタイトルで11件"""
        # Arrange
        item = make_education_item()

        # Act
        occurrences = generate_lesson_occurrences(item, sample_transaction)

        # Assert
        assert len(occurrences) == 11
        first = occurrences[0]
        assert first.id == "event_i1_2024-01-01"
        assert first.date == date(2024, 1, 1)
        assert first.title == "Term 1 violin – Lesson 1"
        assert occurrences[-1].title == "Term 1 violin – Lesson 11"
        assert first.subtitle == "Vivian"
        assert first.receipt_id == "r1"
        assert [(link.id, link.type) for link in first.links] == [
            ("i1", "education"),
            ("trans_r1", "transaction"),
        ]

    def test_series_metadata(self, make_education_item, sample_transaction):
        """メタデータに会場・先生・時刻・期間が入る"""
        occurrence = generate_lesson_occurrences(make_education_item(), sample_transaction)[0]

        assert occurrence.metadata["venue"] == "Allegro Music"
        assert occurrence.metadata["teacher_name"] == "Ms Lee"
        assert occurrence.metadata["student_name"] == "Vivian"
        assert occurrence.metadata["times"] == ["4:00 PM"]
        assert occurrence.metadata["duration"] == "30 min"
        assert occurrence.metadata["frequency"] == "Weekly"
        assert occurrence.metadata["start_date"] == "2024-01-01"
        assert occurrence.metadata["end_date"] == "2024-03-11"

    def test_regeneration_is_idempotent(self, make_education_item, sample_transaction):
        """同じ入力からは何度でも同じ結果"""
        item = make_education_item()

        first = generate_lesson_occurrences(item, sample_transaction)
        second = generate_lesson_occurrences(item, sample_transaction)

        assert first == second

    def test_one_off_lesson(self, make_education_item, sample_transaction):
        """頻度なしは単発レッスン1件"""
        item = make_education_item(frequency="")

        occurrences = generate_lesson_occurrences(item, sample_transaction)

        assert len(occurrences) == 1
        assert occurrences[0].id == "event_i1"
        assert occurrences[0].title == "Term 1 violin – Lesson"
        assert occurrences[0].metadata["frequency"] == "One-off"

    def test_missing_start_falls_back_to_transaction_date(self, make_education_item):
        """開始日が無ければ取引日の単発レッスン"""
        item = make_education_item(start_date="")
        transaction = Transaction(id="r9", transaction_date="2024-02-14")

        occurrences = generate_lesson_occurrences(item, transaction)

        assert len(occurrences) == 1
        assert occurrences[0].date == date(2024, 2, 14)

    def test_no_usable_date_returns_empty(self, make_education_item):
        """使える日付が無ければ空"""
        item = make_education_item(start_date="not a date")
        transaction = Transaction(id="r9")

        assert generate_lesson_occurrences(item, transaction) == []

    @pytest.mark.parametrize("cap", [1, 3, 10])
    def test_cap_is_respected(self, make_education_item, sample_transaction, cap):
        """上限件数を超えない"""
        item = make_education_item(end_date="")

        occurrences = generate_lesson_occurrences(
            item, sample_transaction, max_occurrences=cap
        )

        assert len(occurrences) == cap

    def test_cap_is_logged_with_item_id(self, make_education_item, sample_transaction, caplog):
        """上限に達したら明細IDつきでログを出す"""
        item = make_education_item(end_date="")

        with caplog.at_level(logging.INFO, logger="lessonpath.services.series_expansion"):
            generate_lesson_occurrences(item, sample_transaction, max_occurrences=2)

        (record,) = caplog.records
        assert record.item_id == "i1"
        assert record.receipt_id == "r1"
