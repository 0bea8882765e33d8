"""
GRADING - Percentage and letter grade derivation

TWO LETTER TABLES ARE IN USE:
✅ Import table (fine-grained, +/- modifiers): used by CSV grade import
✅ Manual-entry table (A/B/C/D/F at 90/80/70/60): used when a teacher records
   a single grade by hand

REPORT GPA:
- Unweighted 4.0 scale on the manual-entry letters (A=4.0, B=3.0, C=2.0, D=1.0, F=0.0)

The two tables disagree (a 91% is "A-" on import but "A" by hand). Both are kept as-is until the product owners
decide which one is authoritative.
"""

import math
from typing import List, Optional, Tuple

# (inclusive lower bound, letter) - evaluated top-down, first match wins
IMPORT_GRADE_SCALE: List[Tuple[float, str]] = [
    (97, "A+"),
    (93, "A"),
    (90, "A-"),
    (87, "B+"),
    (83, "B"),
    (80, "B-"),
    (77, "C+"),
    (73, "C"),
    (70, "C-"),
    (67, "D+"),
    (63, "D"),
    (60, "D-"),
]

MANUAL_GRADE_SCALE: List[Tuple[float, str]] = [
    (90, "A"),
    (80, "B"),
    (70, "C"),
    (60, "D"),
]

FAILING_GRADE = "F"

# Grade point mapping - simple letter grades only
GRADE_POINTS = {
    "A": 4.0,
    "B": 3.0,
    "C": 2.0,
    "D": 1.0,
    "F": 0.0,
}


def round_half_up(value: float, ndigits: int = 0) -> float:
    """Round halves away from zero on the positive side (2.5 -> 3, not 2)"""
    factor = 10 ** ndigits
    return math.floor(value * factor + 0.5) / factor


def _letter_from_scale(percentage: Optional[float], scale: List[Tuple[float, str]]) -> str:
    if percentage is None or math.isnan(percentage):
        return FAILING_GRADE
    for lower_bound, letter in scale:
        if percentage >= lower_bound:
            return letter
    return FAILING_GRADE


def import_percentage(points: float, max_points: float) -> int:
    """Whole-number percentage used by CSV import (0 when max_points is not positive)"""
    if not max_points or max_points <= 0 or math.isnan(max_points) or math.isnan(points):
        return 0
    return int(round_half_up(points / max_points * 100))


def import_letter_grade(percentage: Optional[float]) -> str:
    """Letter grade for imported rows"""
    return _letter_from_scale(percentage, IMPORT_GRADE_SCALE)


def manual_percentage(points: float, max_points: float) -> float:
    """Percentage rounded to 2 decimals, used by manual grade entry"""
    if not max_points or max_points <= 0:
        return 0.0
    return round_half_up(points / max_points * 100, 2)


def manual_letter_grade(percentage: Optional[float]) -> str:
    """Letter grade for manually entered grades"""
    return _letter_from_scale(percentage, MANUAL_GRADE_SCALE)


def gpa_points(percentage: Optional[float]) -> float:
    """Unweighted grade points for a percentage (90+ = 4.0 ... below 60 = 0.0)"""
    return GRADE_POINTS[manual_letter_grade(percentage)]
