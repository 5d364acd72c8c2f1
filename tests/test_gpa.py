# tests/test_gpa.py

import pytest

from academics.gpa import compute_gpa, grade_to_points, percent_to_letter
from academics.grading import Grade


def grade(value, credits=1.0, key="CS101"):
    return Grade(subject_key=key, subject_name=key, grade_value=value, credits=credits)


def test_no_grades_gives_zero():
    assert compute_gpa([]) == 0.0
    assert compute_gpa(None) == 0.0
    assert compute_gpa([None]) == 0.0


def test_single_top_grade():
    assert compute_gpa([grade("95.00", 3.0)]) == 4.0


@pytest.mark.parametrize(
    "value, points",
    [
        ("A", 4.0),
        ("a-", 4.0),
        ("B+", 3.0),
        (" c ", 2.0),
        ("D", 1.0),
        ("E", 0.0),
        ("F", 0.0),
        ("90", 4.0),
        ("89.99", 3.0),
        ("70.00", 2.0),
        (60, 1.0),
        ("59.9", 0.0),
        ("AB", 0.0),
        ("pass", 0.0),
        ("", 0.0),
        (None, 0.0),
    ],
)
def test_grade_to_points(value, points):
    assert grade_to_points(value) == points


def test_percent_to_letter_boundaries():
    assert [percent_to_letter(v) for v in (100, 90, 80, 70, 60, 0)] == ["A", "A", "B", "C", "D", "F"]


def test_gpa_is_weighted_by_credits():
    grades = [grade("92.00", 4.0, "MA101"), grade("75.00", 2.0, "PH101")]
    # (4 * 4 + 2 * 2) / 6
    assert compute_gpa(grades) == 3.33


def test_non_positive_credits_count_as_one():
    grades = [grade("95.00", 0.0, "A1"), grade("65.00", -2.0, "A2")]
    assert compute_gpa(grades) == 2.5


def test_gpa_rounds_half_up():
    grades = [grade("A", 1.0, "X1"), grade("B", 1.0, "X2"), grade("B", 2.0, "X3"), grade("B", 4.0, "X4")]
    # 4 + 3 + 6 + 12 = 25 over 8 credits
    assert compute_gpa(grades) == 3.13


def test_gpa_stays_on_scale():
    grades = [grade(str(v), 1.0, f"S{v}") for v in (0, 55, 61, 79, 88, 100)]
    assert 0.0 <= compute_gpa(grades) <= 4.0
