"""
DATA VALIDATOR - Field rules for normalized import records

VALIDATION RULES:
Students
- Required non-empty: firstName, lastName, email, dateOfBirth
- email must look like local@domain.tld
- dateOfBirth must be a real calendar date
Grades
- Required: studentId, courseId, assignmentName, points, maxPoints
- studentId / courseId must be positive integers
- points must be a non-negative number, maxPoints a positive number
- points cannot exceed maxPoints

Every violation on a row is reported; rows without violations produce no entry.
Validation never raises and has no side effects.
"""

import re
import warnings
from typing import Dict, List, Sequence

import pandas as pd

from .data_models import GradeImportRecord, StudentImportRecord, ValidationErrorEntry
from .data_normalizer import clean_text, parse_number

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

# pandas resolves these against the clock; they are not dates
RELATIVE_DATE_WORDS = {"now", "today", "tomorrow", "yesterday"}

STUDENT_REQUIRED_FIELDS = ["firstName", "lastName", "email", "dateOfBirth"]
GRADE_REQUIRED_FIELDS = ["studentId", "courseId", "assignmentName", "points", "maxPoints"]


def is_valid_email(value: str) -> bool:
    return bool(EMAIL_PATTERN.match(value or ""))


def is_valid_date(value: str) -> bool:
    """True when the text parses to an actual calendar date (2024-02-30 does not)"""
    text = clean_text(value)
    if not text or text.lower() in RELATIVE_DATE_WORDS:
        return False
    try:
        with warnings.catch_warnings():
            warnings.simplefilter("ignore")
            parsed = pd.to_datetime(text, errors="coerce")
    except (ValueError, TypeError, OverflowError):
        return False
    return not pd.isna(parsed)


def _student_values(record: StudentImportRecord) -> Dict[str, str]:
    return {
        "firstName": record.first_name,
        "lastName": record.last_name,
        "email": record.email,
        "dateOfBirth": record.date_of_birth,
    }


def _grade_values(record: GradeImportRecord) -> Dict[str, str]:
    """Cell text as uploaded; records built in code fall back to their own fields"""
    if record.source_row:
        return {field: clean_text(record.source_row.get(field)) for field in GRADE_REQUIRED_FIELDS}
    return {
        "studentId": "" if record.student_id is None else str(record.student_id),
        "courseId": "" if record.course_id is None else str(record.course_id),
        "assignmentName": record.assignment_name,
        "points": str(record.points),
        "maxPoints": str(record.max_points),
    }


def _error_data(record) -> Dict[str, str]:
    return dict(record.source_row) if record.source_row else record.to_record()


def check_student(record: StudentImportRecord) -> List[str]:
    """Violation messages for one student record"""
    values = _student_values(record)
    row_errors = [
        f"Missing required field: {field}"
        for field in STUDENT_REQUIRED_FIELDS
        if not values[field]
    ]

    if values["email"] and not is_valid_email(values["email"]):
        row_errors.append("Invalid email format")

    if values["dateOfBirth"] and not is_valid_date(values["dateOfBirth"]):
        row_errors.append("Invalid date format for dateOfBirth")

    return row_errors


def check_grade(record: GradeImportRecord) -> List[str]:
    """Violation messages for one grade record"""
    values = _grade_values(record)
    row_errors = [
        f"Missing required field: {field}"
        for field in GRADE_REQUIRED_FIELDS
        if not values[field]
    ]

    for field in ("studentId", "courseId"):
        if values[field]:
            number = parse_number(values[field])
            if number is None or int(number) <= 0:
                row_errors.append(f"{field} must be a positive integer")

    points = parse_number(values["points"]) if values["points"] else None
    max_points = parse_number(values["maxPoints"]) if values["maxPoints"] else None

    if values["points"] and (points is None or points < 0):
        row_errors.append("points must be a non-negative number")

    if values["maxPoints"] and (max_points is None or max_points <= 0):
        row_errors.append("maxPoints must be a positive number")

    if points is not None and max_points is not None and points > max_points:
        row_errors.append("points cannot exceed maxPoints")

    return row_errors


def validate_students(records: Sequence[StudentImportRecord]) -> List[ValidationErrorEntry]:
    """Per-row violations for a batch of student records (1-based row numbers)"""
    errors = []
    for index, record in enumerate(records, start=1):
        row_errors = check_student(record)
        if row_errors:
            errors.append(ValidationErrorEntry(row=index, errors=row_errors, data=_error_data(record)))
    return errors


def validate_grades(records: Sequence[GradeImportRecord]) -> List[ValidationErrorEntry]:
    """Per-row violations for a batch of grade records (1-based row numbers)"""
    errors = []
    for index, record in enumerate(records, start=1):
        row_errors = check_grade(record)
        if row_errors:
            errors.append(ValidationErrorEntry(row=index, errors=row_errors, data=_error_data(record)))
    return errors
