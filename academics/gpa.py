"""Grade point conversion and credit-weighted GPA."""
from __future__ import annotations

import re
from collections.abc import Iterable
from decimal import ROUND_HALF_UP, Decimal

from .grading import Grade
from .resolvers import as_number, positive_credits

LETTER_POINTS = {"A": 4, "B": 3, "C": 2, "D": 1}

# +/- modifiers are accepted but do not change the points of a letter
_LETTER_GRADE = re.compile(r"^[A-F][+-]?$", re.IGNORECASE)


def percent_to_letter(value: float) -> str:
    if value >= 90:
        return "A"
    if value >= 80:
        return "B"
    if value >= 70:
        return "C"
    if value >= 60:
        return "D"
    return "F"


def letter_to_points(letter: str | None) -> int:
    if not letter:
        return 0
    return LETTER_POINTS.get(letter.upper(), 0)


def grade_to_points(grade) -> float:
    """Points on the 0-4 scale for a letter grade or a 0-100 number; unreadable grades score 0."""

    if grade is None:
        return 0.0
    if isinstance(grade, str):
        text = grade.strip()
        if _LETTER_GRADE.match(text):
            return float(letter_to_points(text[0]))
    numeric = as_number(grade)
    if numeric is None:
        return 0.0
    return float(letter_to_points(percent_to_letter(numeric)))


def compute_gpa(grades: Iterable[Grade | None]) -> float:
    total_points = 0.0
    total_credits = 0.0
    for grade in grades or []:
        if grade is None:
            continue
        credits = positive_credits(grade.credits) or 1.0
        total_points += grade_to_points(grade.grade_value) * credits
        total_credits += credits
    if total_credits == 0:
        return 0.0
    gpa = Decimal(repr(total_points / total_credits)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    return float(gpa)
