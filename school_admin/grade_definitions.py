"""
Grade definitions for the school administration system.

This module defines the letter grades, their descriptions and percentage
ranges in one place so that grade entry, analytics and reports all derive
letters the same way.
"""

import math
from dataclasses import dataclass
from typing import Dict, List, Literal, NamedTuple, Optional, Tuple

LetterGrade = Literal["A+", "A", "A-", "B+", "B", "B-", "C+", "C", "C-", "F"]


@dataclass
class MarkRange:
    """Represents a percentage range with minimum and maximum values."""

    min: int
    max: int


@dataclass
class GradeDefinition:
    """Represents a complete grade definition with all properties."""

    grade: LetterGrade
    description: str
    marks_range: MarkRange


GRADE_DEFINITIONS: List[GradeDefinition] = [
    GradeDefinition(grade="A+", description="Distinction", marks_range=MarkRange(min=90, max=100)),
    GradeDefinition(grade="A", description="Distinction", marks_range=MarkRange(min=85, max=89)),
    GradeDefinition(grade="A-", description="Distinction", marks_range=MarkRange(min=80, max=84)),
    GradeDefinition(grade="B+", description="Merit", marks_range=MarkRange(min=75, max=79)),
    GradeDefinition(grade="B", description="Merit", marks_range=MarkRange(min=70, max=74)),
    GradeDefinition(grade="B-", description="Merit", marks_range=MarkRange(min=65, max=69)),
    GradeDefinition(grade="C+", description="Pass", marks_range=MarkRange(min=60, max=64)),
    GradeDefinition(grade="C", description="Pass", marks_range=MarkRange(min=55, max=59)),
    GradeDefinition(grade="C-", description="Pass", marks_range=MarkRange(min=50, max=54)),
    GradeDefinition(grade="F", description="Fail", marks_range=MarkRange(min=0, max=49)),
]

_GRADE_LOOKUP: Dict[LetterGrade, GradeDefinition] = {
    grade_def.grade: grade_def for grade_def in GRADE_DEFINITIONS
}

# Sorted by min percentage in descending order for threshold lookup
_THRESHOLDS: List[Tuple[int, LetterGrade]] = sorted(
    ((grade_def.marks_range.min, grade_def.grade) for grade_def in GRADE_DEFINITIONS),
    reverse=True,
)


class GradeResult(NamedTuple):
    percentage: int
    letter: LetterGrade


def round_half_up(value: float) -> int:
    """Round to the nearest integer with .5 going up, unlike Python's round()."""
    return int(math.floor(value + 0.5))


def calculate_percentage(marks_obtained: float, max_marks: float) -> int:
    """
    Calculate the whole-number percentage for a mark.

    Args:
        marks_obtained: Marks the student received
        max_marks: Maximum marks available

    Returns:
        Percentage rounded to the nearest integer

    Raises:
        ValueError: If max_marks is not positive or marks_obtained is negative
    """
    if max_marks <= 0:
        raise ValueError(f"max_marks must be greater than 0, got {max_marks}")
    if marks_obtained < 0:
        raise ValueError(f"marks_obtained cannot be negative, got {marks_obtained}")
    return round_half_up(marks_obtained * 100 / max_marks)


def get_grade_by_percentage(percentage: float) -> LetterGrade:
    """
    Get the letter grade for a percentage.

    Percentages above 100 (bonus marks) still map to A+.
    """
    for minimum, grade in _THRESHOLDS:
        if percentage >= minimum:
            return grade
    return "F"


def compute_grade(marks_obtained: float, max_marks: float) -> GradeResult:
    """Compute the stored percentage and the letter derived from it."""
    percentage = calculate_percentage(marks_obtained, max_marks)
    return GradeResult(percentage, get_grade_by_percentage(percentage))


def get_grade_definition(grade: str) -> Optional[GradeDefinition]:
    return _GRADE_LOOKUP.get(grade)  # type: ignore[arg-type]


def get_grade_description(grade: str) -> Optional[str]:
    grade_def = get_grade_definition(grade)
    return grade_def.description if grade_def else None


def is_passing_grade(grade: str) -> bool:
    """A grade is passing when it is defined and is not F."""
    return grade in _GRADE_LOOKUP and grade != "F"
