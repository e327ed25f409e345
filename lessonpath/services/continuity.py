"""ContinuityGapDetector - ラーニングパスの途切れ・ずれを検出する

隣り合うチェーンエントリについて、前の期間の頻度から期待される次回日と
次の期間の実際の開始日を比較し、許容日数を超えたずれをギャップとして返す。

ギャップは情報提供のみ（ユーザーが「受け入れる」か「修正する」かを選ぶ）。
状態を持たないので、スケジュール編集のたびに再計算してよい。
"""

from __future__ import annotations

import re
from collections.abc import Sequence

from lessonpath.domain.models import ChainEntry, ContinuityGap, TermPattern
from lessonpath.services.descriptor_parser import parse_frequency
from lessonpath.services.series_expansion import advance_by_cadence

DEFAULT_TOLERANCE_DAYS = 7

_TERM_FIRST_RE = re.compile(r"(term|semester)\s*(\d+)[\s,]*(\d{4})")
_YEAR_FIRST_RE = re.compile(r"(\d{4})[\s,]*term\s*(\d+)")


def detect_continuity_gaps(
    entries: Sequence[ChainEntry], tolerance_days: int = DEFAULT_TOLERANCE_DAYS
) -> list[ContinuityGap]:
    """
    チェーンのギャップを検出。

    Args:
        entries: 開始日昇順のチェーンエントリ
        tolerance_days: 許容するずれ（日）

    Returns:
        list[ContinuityGap]: chain_item_index 昇順
    """
    gaps: list[ContinuityGap] = []

    for index in range(len(entries) - 1):
        current = entries[index]
        following = entries[index + 1]
        if current.start_date is None or following.start_date is None:
            continue

        cadence_days = parse_frequency(current.item.education.frequency)
        if cadence_days == 0:
            continue  # 頻度不明では判定できない

        expected = advance_by_cadence(current.start_date, cadence_days)
        diff = abs((following.start_date - expected).days)
        if diff > tolerance_days:
            gaps.append(
                ContinuityGap(
                    expected_date=expected,
                    actual_next_date=following.start_date,
                    gap_days=round(diff),
                    chain_item_index=index + 1,
                )
            )

    return gaps


def parse_term_pattern(text: str | None) -> TermPattern | None:
    """
    タイトル等から学期表記を読み取る。

    例: "Term 1 2025" → term=1, "Semester 2 2024" → semester=2, "2025 Term 3" → term=3
    """
    if not text:
        return None
    lower = text.lower()

    match = _TERM_FIRST_RE.search(lower)
    if match:
        number = int(match.group(2))
        year = int(match.group(3))
        if match.group(1) == "term":
            return TermPattern(year=year, term=number)
        return TermPattern(year=year, semester=number)

    match = _YEAR_FIRST_RE.search(lower)
    if match:
        return TermPattern(year=int(match.group(1)), term=int(match.group(2)))

    return None
