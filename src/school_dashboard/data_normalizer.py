"""
DATA NORMALIZER - Raw CSV rows to typed import records

NORMALIZATION RULES:
✅ One record per raw row, same order, never raises
✅ Strings trimmed, absent values become "" (never None)
✅ Student and guardian emails lower-cased
✅ parentGuardian and its address always constructed
✅ communicationHistory read from an exported JSON cell, otherwise empty
✅ Grade ids parsed as integers; unparsable ids become None for the validator to reject
✅ Grade percentage and letter grade derived (fine-grained import table)

LEGACY HEADERS:
- "grade" is read as gradeLevel, "status" as enrollmentStatus
"""

import logging
from datetime import date
from typing import Any, Dict, Iterable, List, Optional

import numpy as np
import pandas as pd
from pydantic import ValidationError

from .config import settings
from .data_models import COMMUNICATION_HISTORY, Address, GradeImportRecord, ParentGuardian, StudentImportRecord
from .grading import import_letter_grade, import_percentage

logger = logging.getLogger(__name__)


def clean_text(value: Any) -> str:
    """Trimmed string, "" for None/NaN"""
    if value is None or (isinstance(value, float) and np.isnan(value)):
        return ""
    return str(value).strip()


def parse_number(value: Any) -> Optional[float]:
    """Float value of a cell, None when the cell is blank or not numeric"""
    text = clean_text(value)
    if not text:
        return None
    number = pd.to_numeric(text, errors="coerce")
    if pd.isna(number) or not np.isfinite(number):
        return None
    return float(number)


def parse_identifier(value: Any) -> Optional[int]:
    """Integer id of a cell; fractional values are truncated ("7.9" -> 7)"""
    number = parse_number(value)
    if number is None:
        return None
    return int(number)


def _first(row: Dict[str, Any], *keys: str) -> str:
    """First non-blank value among several header spellings"""
    for key in keys:
        text = clean_text(row.get(key))
        if text:
            return text
    return ""


def _student_address(row: Dict[str, Any]):
    """Free-text address, or a structured one when the split columns are used"""
    address = clean_text(row.get("address"))
    if address:
        return address

    structured = Address(
        street=clean_text(row.get("addressStreet")),
        city=clean_text(row.get("addressCity")),
        state=clean_text(row.get("addressState")),
        zip_code=clean_text(row.get("addressZipCode")),
    )
    return "" if structured.is_empty else structured


def _communication_history(row: Dict[str, Any]) -> List[Dict[str, Any]]:
    """History from an exported JSON cell; new students start with none"""
    text = clean_text(row.get("communicationHistory"))
    if not text:
        return []
    try:
        return COMMUNICATION_HISTORY.validate_json(text)
    except ValidationError:
        logger.warning("⚠️ Unreadable communicationHistory cell, starting empty")
        return []


def normalize_student_row(row: Dict[str, Any], today: Optional[date] = None) -> StudentImportRecord:
    today = today or date.today()

    guardian = ParentGuardian(
        name=clean_text(row.get("parentGuardianName")),
        relationship=clean_text(row.get("parentGuardianRelationship")) or settings.DEFAULT_GUARDIAN_RELATIONSHIP,
        primary_phone=clean_text(row.get("parentGuardianPhone")),
        secondary_phone=clean_text(row.get("parentGuardianSecondaryPhone")),
        primary_email=clean_text(row.get("parentGuardianEmail")),
        secondary_email=clean_text(row.get("parentGuardianSecondaryEmail")),
        address=Address(
            street=clean_text(row.get("parentGuardianAddressStreet")),
            city=clean_text(row.get("parentGuardianAddressCity")),
            state=clean_text(row.get("parentGuardianAddressState")),
            zip_code=clean_text(row.get("parentGuardianAddressZipCode")),
        ),
    )

    return StudentImportRecord(
        first_name=clean_text(row.get("firstName")),
        last_name=clean_text(row.get("lastName")),
        email=clean_text(row.get("email")),
        phone=clean_text(row.get("phone")),
        date_of_birth=clean_text(row.get("dateOfBirth")),
        address=_student_address(row),
        emergency_contact=clean_text(row.get("emergencyContact")),
        grade_level=_first(row, "gradeLevel", "grade"),
        enrollment_status=_first(row, "enrollmentStatus", "status").lower() or settings.DEFAULT_ENROLLMENT_STATUS,
        enrollment_date=clean_text(row.get("enrollmentDate")) or today.isoformat(),
        parent_guardian=guardian,
        communication_history=_communication_history(row),
        source_row={key: clean_text(value) for key, value in row.items()},
    )


def normalize_grade_row(row: Dict[str, Any], today: Optional[date] = None) -> GradeImportRecord:
    today = today or date.today()

    points = parse_number(row.get("points"))
    points = 0.0 if points is None else points
    max_points = parse_number(row.get("maxPoints"))
    max_points = settings.DEFAULT_MAX_POINTS if max_points is None else max_points

    percentage = import_percentage(points, max_points)

    return GradeImportRecord(
        student_id=parse_identifier(row.get("studentId")),
        course_id=parse_identifier(row.get("courseId")),
        assignment_name=clean_text(row.get("assignmentName")),
        category=clean_text(row.get("category")) or settings.DEFAULT_GRADE_CATEGORY,
        points=points,
        max_points=max_points,
        percentage=percentage,
        letter_grade=import_letter_grade(percentage),
        date_recorded=clean_text(row.get("dateRecorded")) or today.isoformat(),
        comments=clean_text(row.get("comments")),
        source_row={key: clean_text(value) for key, value in row.items()},
    )


def normalize_students(rows: Iterable[Dict[str, Any]], today: Optional[date] = None) -> List[StudentImportRecord]:
    """Map raw student rows to StudentImportRecords, one per row"""
    records = [normalize_student_row(row, today) for row in rows]
    logger.debug(f"Normalized {len(records)} student rows")
    return records


def normalize_grades(rows: Iterable[Dict[str, Any]], today: Optional[date] = None) -> List[GradeImportRecord]:
    """Map raw grade rows to GradeImportRecords, one per row"""
    records = [normalize_grade_row(row, today) for row in rows]
    logger.debug(f"Normalized {len(records)} grade rows")
    return records
