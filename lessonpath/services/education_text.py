"""教育明細の表示用テキスト"""

from __future__ import annotations

import re

from lessonpath.domain.models import EducationDetails
from lessonpath.services.descriptor_parser import parse_iso_date

_CAPITALIZED_WORD_RE = re.compile(r"\b([A-Z][a-z]+)\b")


def _display_name(name: str) -> str:
    return name[:1].upper() + name[1:] if name else name


def format_education_title(description: str, details: EducationDetails) -> str:
    """
    明細の説明文からレッスンタイトルを作る。

    例: "Term 1 fees vivian"（focus="Violin", student="vivian"）→ "Violin lessons for Vivian"
    生徒名が無い場合は説明文の最後の大文字始まりの単語を生徒名とみなす。
    """
    student = details.student_name
    if not student:
        words = _CAPITALIZED_WORD_RE.findall(description or "")
        student = words[-1] if words else ""
    display = student[:1].upper() + student[1:].lower() if student else "Student"

    if details.focus:
        return f"{details.focus} lessons for {display}"
    return f"Music lessons for {display}"


def school_term(month: int) -> int:
    """オーストラリアの学期（1-3月=1, 4-6月=2, 7-9月=3, 10-12月=4）"""
    return (month - 1) // 3 + 1


def format_series_title(details: EducationDetails, fallback_year: int) -> str:
    """
    シリーズのタイトル。例: "Piano lessons for Claudette - Term 4 2025"

    開始日が無い・不正な場合は学期を省き fallback_year を使う。
    """
    focus = details.focus or "Music"
    student = _display_name(details.student_name or "Student")
    start = parse_iso_date(details.start_date)
    if start is None:
        return f"{focus} lessons for {student} - {fallback_year}"
    return f"{focus} lessons for {student} - Term {school_term(start.month)} {start.year}"
