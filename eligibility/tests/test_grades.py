"""
Grade comparison across letter, WASSCE and numeric scales.
"""

import pytest

from eligibility.logic import compare_grades, grade_band


@pytest.mark.parametrize("student, required", [
    ("A", "B"),
    ("B", "B"),
    ("a", "C"),
    ("A+", "A"),
    ("A1", "B3"),
    ("C4", "C6"),
    ("7.5", "6.5"),
    ("80", "80"),
])
def test_grade_meets_requirement(student, required):
    assert compare_grades(student, required) is True


@pytest.mark.parametrize("student, required", [
    ("C", "B"),
    ("F", "D"),
    ("C6", "B3"),
    ("5.5", "6.0"),
])
def test_grade_below_requirement(student, required):
    assert compare_grades(student, required) is False


@pytest.mark.parametrize("student, required", [
    ("A", "A1"),
    ("A1", "B"),
    ("80", "B"),
    ("", "C"),
    ("B", None),
    ("excellent", "good"),
])
def test_unrecognised_or_mixed_scales_fail_closed(student, required):
    assert compare_grades(student, required) is False


def test_grade_bands():
    assert grade_band("A") == "high"
    assert grade_band("A1") == "high"
    assert grade_band("F9") == "low"
    assert grade_band("") is None
    assert grade_band("unknown") is None
