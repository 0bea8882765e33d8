"""
SERVICES - Record services used by the dashboard pages

SERVICES:
✅ StudentService: CRUD + CSV bulk import/export (natural key: email, case-insensitive)
✅ GradeService: CRUD + CSV bulk import/export (natural key: studentId + courseId +
   assignmentName, case-insensitive) + manual grade entry
✅ CourseService: CRUD
✅ AttendanceService: CRUD + lookups by student and date
✅ ActivityService: dashboard activity feed, newest first

Every service wraps an injected RecordRepository; nothing here talks to
storage directly.
"""

import logging
from datetime import date
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import pandas as pd

from .csv_utils import CSVSource
from .data_models import COMMUNICATION_HISTORY, ActivityRecord, AttendanceRecord, Course, ExportResult, ImportResult
from .data_normalizer import clean_text, normalize_grades, normalize_students, parse_identifier
from .data_validator import validate_grades, validate_students
from .grading import manual_letter_grade, manual_percentage
from .import_processor import BulkImporter, EntityProfile, bulk_export
from .repositories import ID_FIELD, Record, RecordRepository, filter_records

logger = logging.getLogger(__name__)


# ==============================================================================
# Student profile
# ==============================================================================

def student_key(record: Dict[str, Any]) -> str:
    return clean_text(record.get("email")).lower()


def describe_student_duplicate(record: Dict[str, Any]) -> str:
    return f"Student with email {student_key(record)} already exists"


def _history_cell(history: Any) -> str:
    if not history:
        return ""
    return COMMUNICATION_HISTORY.dump_json(history).decode("utf-8")


def flatten_student(record: Dict[str, Any]) -> Dict[str, Any]:
    """One flat export row; nested address/guardian blocks become prefixed columns"""
    address = record.get("address") or ""
    structured = address if isinstance(address, dict) else {}
    guardian = record.get("parentGuardian") or {}
    guardian_address = guardian.get("address") or {}

    return {
        "Id": record.get(ID_FIELD, ""),
        "firstName": record.get("firstName", ""),
        "lastName": record.get("lastName", ""),
        "email": record.get("email", ""),
        "phone": record.get("phone", ""),
        "dateOfBirth": record.get("dateOfBirth", ""),
        "address": "" if structured else address,
        "addressStreet": structured.get("street", ""),
        "addressCity": structured.get("city", ""),
        "addressState": structured.get("state", ""),
        "addressZipCode": structured.get("zipCode", ""),
        "emergencyContact": record.get("emergencyContact", ""),
        "gradeLevel": record.get("gradeLevel", record.get("grade", "")),
        "enrollmentStatus": record.get("enrollmentStatus", record.get("status", "")),
        "enrollmentDate": record.get("enrollmentDate", ""),
        "parentGuardianName": guardian.get("name", ""),
        "parentGuardianRelationship": guardian.get("relationship", ""),
        "parentGuardianPhone": guardian.get("primaryPhone", ""),
        "parentGuardianSecondaryPhone": guardian.get("secondaryPhone", ""),
        "parentGuardianEmail": guardian.get("primaryEmail", ""),
        "parentGuardianSecondaryEmail": guardian.get("secondaryEmail", ""),
        "parentGuardianAddressStreet": guardian_address.get("street", ""),
        "parentGuardianAddressCity": guardian_address.get("city", ""),
        "parentGuardianAddressState": guardian_address.get("state", ""),
        "parentGuardianAddressZipCode": guardian_address.get("zipCode", ""),
        "communicationHistory": _history_cell(record.get("communicationHistory")),
    }


STUDENT_PROFILE = EntityProfile(
    entity="students",
    normalize=normalize_students,
    validate=validate_students,
    natural_key=student_key,
    describe_duplicate=describe_student_duplicate,
    flatten=flatten_student,
)


# ==============================================================================
# Grade profile
# ==============================================================================

def grade_key(record: Dict[str, Any]) -> tuple:
    return (
        parse_identifier(record.get("studentId")),
        parse_identifier(record.get("courseId")),
        clean_text(record.get("assignmentName")).lower(),
    )


def describe_grade_duplicate(record: Dict[str, Any]) -> str:
    student_id, course_id, _ = grade_key(record)
    return (
        f"Grade for '{clean_text(record.get('assignmentName'))}' already exists "
        f"for student {student_id} in course {course_id}"
    )


GRADE_EXPORT_FIELDS = [
    "studentId",
    "courseId",
    "assignmentName",
    "category",
    "points",
    "maxPoints",
    "percentage",
    "letterGrade",
    "dateRecorded",
    "comments",
]


def flatten_grade(record: Dict[str, Any]) -> Dict[str, Any]:
    row = {"Id": record.get(ID_FIELD, "")}
    row.update({field: record.get(field, "") for field in GRADE_EXPORT_FIELDS})
    return row


GRADE_PROFILE = EntityProfile(
    entity="grades",
    normalize=normalize_grades,
    validate=validate_grades,
    natural_key=grade_key,
    describe_duplicate=describe_grade_duplicate,
    flatten=flatten_grade,
)


# ==============================================================================
# Services
# ==============================================================================

def _parse_ids(data: Record) -> Record:
    """Coerce studentId/courseId, when present, the way imports do"""
    return {
        key: parse_identifier(value) if key in ("studentId", "courseId") else value
        for key, value in data.items()
    }


class RecordService:
    """Pass-through CRUD over one record store"""

    def __init__(self, repository: RecordRepository):
        self.repository = repository

    def get_all(self) -> List[Record]:
        return self.repository.get_all()

    def get_by_id(self, record_id: Any) -> Record:
        return self.repository.get_by_id(record_id)

    def create(self, data: Record) -> Record:
        return self.repository.create(data)

    def update(self, record_id: Any, data: Record) -> Record:
        return self.repository.update(record_id, data)

    def delete(self, record_id: Any) -> bool:
        return self.repository.delete(record_id)

    def _filter(self, **criteria: Any) -> List[Record]:
        return filter_records(self.repository.get_all(), **criteria)


class BulkRecordService(RecordService):
    """Record service with CSV bulk import/export"""

    profile: EntityProfile

    def bulk_import(self, source: CSVSource, progress: bool = False) -> ImportResult:
        """Import a CSV file; see BulkImporter.run for the failure modes"""
        return BulkImporter(self.profile, self.repository, progress=progress).run(source)

    def bulk_export(self, export_dir: Optional[Union[str, Path]] = None, on: Optional[date] = None) -> ExportResult:
        """Write all records to <entity>-export-<date>.csv"""
        return bulk_export(self.profile, self.repository, export_dir=export_dir, on=on)


class StudentService(BulkRecordService):
    profile = STUDENT_PROFILE

    def create(self, data: Record) -> Record:
        data = {**data, "enrollmentDate": data.get("enrollmentDate") or date.today().isoformat()}
        return self.repository.create(data)


class GradeService(BulkRecordService):
    profile = GRADE_PROFILE

    def create(self, data: Record) -> Record:
        data = {
            **data,
            "studentId": parse_identifier(data.get("studentId")),
            "courseId": parse_identifier(data.get("courseId")),
            "dateRecorded": data.get("dateRecorded") or date.today().isoformat(),
        }
        return self.repository.create(data)

    def update(self, record_id: Any, data: Record) -> Record:
        return self.repository.update(record_id, _parse_ids(data))

    def get_by_student_id(self, student_id: Any) -> List[Record]:
        return self._filter(studentId=parse_identifier(student_id))

    def get_by_course_id(self, course_id: Any) -> List[Record]:
        return self._filter(courseId=parse_identifier(course_id))

    def record_grade(
        self,
        student_id: Any,
        course_id: Any,
        assignment_name: str,
        points: float,
        max_points: float,
        category: str = "Assignment",
        semester: Optional[str] = None,
        comments: str = "",
    ) -> Record:
        """
        Manual grade entry from the grades page.

        Uses the coarse A/B/C/D/F table and a 2-decimal percentage, unlike
        CSV import.
        """
        points = float(points)
        max_points = float(max_points)
        percentage = manual_percentage(points, max_points)

        data = {
            "studentId": student_id,
            "courseId": course_id,
            "assignmentName": clean_text(assignment_name),
            "category": category,
            "points": points,
            "maxPoints": max_points,
            "percentage": percentage,
            "letterGrade": manual_letter_grade(percentage),
            "dateRecorded": date.today().isoformat(),
            "comments": comments,
        }
        if semester:
            data["semester"] = semester

        created = self.create(data)
        logger.info(f"✅ Recorded {created['letterGrade']} for student {created['studentId']}: {assignment_name}")
        return created


class CourseService(RecordService):

    def create(self, data: Record) -> Record:
        return self.repository.create(Course.model_validate(data).to_record())


class AttendanceService(RecordService):

    def create(self, data: Record) -> Record:
        return self.repository.create(AttendanceRecord.model_validate(data).to_record())

    def update(self, record_id: Any, data: Record) -> Record:
        return self.repository.update(record_id, _parse_ids(data))

    def get_by_student_id(self, student_id: Any) -> List[Record]:
        return self._filter(studentId=parse_identifier(student_id))

    def get_by_date(self, on: Union[str, date]) -> List[Record]:
        on = on.isoformat() if isinstance(on, date) else on
        return self._filter(date=on)


def _activity_time(record: Record) -> pd.Timestamp:
    """Sort key; unreadable timestamps sort as oldest"""
    stamp = pd.to_datetime(record.get("timestamp"), errors="coerce", utc=True)
    return pd.Timestamp.min.tz_localize("UTC") if pd.isna(stamp) else stamp


class ActivityService(RecordService):

    def get_all(self) -> List[Record]:
        return sorted(self.repository.get_all(), key=_activity_time, reverse=True)

    def create(self, data: Record) -> Record:
        return self.repository.create(ActivityRecord.model_validate(data).to_record())

    def get_recent(self, limit: int = 10) -> List[Record]:
        return self.get_all()[:limit]
