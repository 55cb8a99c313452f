"""
Grade Comparison

Compares grade strings across the scales students enter: plain letters,
WASSCE grades and numbers (percentages, GPA, language test bands).
Anything that cannot be placed on a shared scale fails closed.
"""

import re
from typing import Optional

from .constants import (
    LETTER_GRADE_ORDER,
    WASSCE_GRADE_ORDER,
    LETTER_GRADE_BANDS,
    WASSCE_GRADE_BANDS,
    NUMERIC_GRADE_BANDS,
)

_LETTER_RE = re.compile(r"^([A-F])[+-]?$")


def _normalize(grade: Optional[str]) -> str:
    return (grade or "").strip().upper()


def _letter_rank(grade: str) -> Optional[int]:
    """Rank of a plain letter grade, higher is better. Modifiers are ignored."""
    m = _LETTER_RE.match(grade)
    if not m:
        return None
    return len(LETTER_GRADE_ORDER) - LETTER_GRADE_ORDER.index(m.group(1))


def _wassce_rank(grade: str) -> Optional[int]:
    if grade in WASSCE_GRADE_ORDER:
        return WASSCE_GRADE_ORDER.index(grade)
    return None


def _numeric(grade: str) -> Optional[float]:
    try:
        value = float(grade)
    except ValueError:
        return None
    if value != value:  # NaN
        return None
    return value


def compare_grades(student_grade: Optional[str], required_grade: Optional[str]) -> bool:
    """
    True when `student_grade` is at least as good as `required_grade`.

    Both grades must be on the same scale; mixed or unrecognised
    pairs return False.
    """
    student = _normalize(student_grade)
    required = _normalize(required_grade)
    if not student or not required:
        return False

    s_rank, r_rank = _wassce_rank(student), _wassce_rank(required)
    if s_rank is not None and r_rank is not None:
        return s_rank >= r_rank

    s_rank, r_rank = _letter_rank(student), _letter_rank(required)
    if s_rank is not None and r_rank is not None:
        return s_rank >= r_rank

    s_num, r_num = _numeric(student), _numeric(required)
    if s_num is not None and r_num is not None:
        return s_num >= r_num

    return False


def grade_band(grade: Optional[str]) -> Optional[str]:
    """Coarse "low" / "mid" / "high" band for a grade, None if unrecognised."""
    value = _normalize(grade)
    if not value:
        return None
    if value in WASSCE_GRADE_BANDS:
        return WASSCE_GRADE_BANDS[value]
    m = _LETTER_RE.match(value)
    if m:
        return LETTER_GRADE_BANDS[m.group(1)]
    number = _numeric(value)
    if number is None or number < 0:
        return None
    for scale_max, (low_below, high_from) in NUMERIC_GRADE_BANDS:
        if number <= scale_max:
            if number < low_below:
                return "low"
            if number >= high_from:
                return "high"
            return "mid"
    return None
