"""lesson_reminders のユニットテスト"""

from datetime import date, datetime

from lessonpath.services.lesson_reminders import plan_lesson_reminders


class TestPlanLessonReminders:
    """リマインダー計画"""

    def test_reminders_within_window(self, make_education_item, sample_transaction):
        """期間内に始まるレッスンだけ、開始1時間前に通知"""
        # Arrange
        now = datetime(2024, 1, 10, 12, 0)

        # Act
        reminders = plan_lesson_reminders(make_education_item(), sample_transaction, now)

        # Assert
        assert [r.lesson_date for r in reminders] == [
            date(2024, 1, 15),
            date(2024, 1, 22),
            date(2024, 1, 29),
            date(2024, 2, 5),
        ]
        first = reminders[0]
        assert first.key == "lessons|i1|2024-01-15"
        assert first.lesson_start == datetime(2024, 1, 15, 16, 0)
        assert first.remind_at == datetime(2024, 1, 15, 15, 0)
        assert first.student_name == "Vivian"
        assert first.instrument == "Violin"

    def test_started_lessons_are_excluded(self, make_education_item, sample_transaction):
        """開始済みのレッスンは対象外"""
        now = datetime(2024, 1, 15, 16, 1)

        reminders = plan_lesson_reminders(
            make_education_item(), sample_transaction, now, window_days=7
        )

        assert [r.lesson_date for r in reminders] == [date(2024, 1, 22)]

    def test_default_start_time_and_offset(self, make_education_item, sample_transaction):
        """時刻が無ければ 9:00 開始、オフセットは指定可能"""
        item = make_education_item(times=[], student_name="", focus="")

        reminders = plan_lesson_reminders(
            item, sample_transaction, datetime(2024, 1, 1, 0, 0),
            window_days=1, offset_minutes=15,
        )

        assert len(reminders) == 1
        assert reminders[0].remind_at == datetime(2024, 1, 1, 8, 45)
        assert reminders[0].student_name == "Student"
        assert reminders[0].instrument == "Lessons"

    def test_finished_series(self, make_education_item, sample_transaction):
        """終わったシリーズは空"""
        now = datetime(2024, 6, 1)

        assert plan_lesson_reminders(make_education_item(), sample_transaction, now) == []

    def test_max_occurrences_limits_reminders(self, make_education_item, sample_transaction):
        """展開の上限件数より先のレッスンは対象外"""
        now = datetime(2024, 1, 1, 0, 0)

        reminders = plan_lesson_reminders(
            make_education_item(), sample_transaction, now, max_occurrences=2
        )

        assert [r.lesson_date for r in reminders] == [date(2024, 1, 1), date(2024, 1, 8)]
