"""education_text のユニットテスト"""

import pytest
from lessonpath.domain.models import EducationDetails
from lessonpath.services.education_text import (
    format_education_title,
    format_series_title,
    school_term,
)


class TestFormatEducationTitle:
    """表示用タイトル"""

    def test_focus_and_student(self):
        """分野と生徒名（先頭大文字）"""
        details = EducationDetails(student_name="vivian", focus="Violin")

        assert format_education_title("Term 1 fees", details) == "Violin lessons for Vivian"

    def test_student_from_description(self):
        """生徒名が無ければ説明文の最後の大文字始まりの単語"""
        details = EducationDetails()

        title = format_education_title("Piano with Claudette", details)

        assert title == "Music lessons for Claudette"

    def test_no_student_at_all(self):
        assert format_education_title("fees", EducationDetails()) == "Music lessons for Student"


class TestSeriesTitle:
    """学期つきシリーズタイトル"""

    @pytest.mark.parametrize(
        "month, term", [(1, 1), (3, 1), (4, 2), (9, 3), (10, 4), (12, 4)]
    )
    def test_school_term(self, month, term):
        """四半期ごとの学期"""
        assert school_term(month) == term

    def test_with_start_date(self):
        details = EducationDetails(
            student_name="claudette", focus="Piano", start_date="2025-10-13"
        )

        assert format_series_title(details, 2024) == "Piano lessons for Claudette - Term 4 2025"

    def test_without_start_date(self):
        """開始日が無ければ学期を省いてフォールバックの年"""
        assert format_series_title(EducationDetails(), 2024) == "Music lessons for Student - 2024"
