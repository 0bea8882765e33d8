"""
DATA MODELS - Pydantic schemas for school records and import/export results
Type-safe data structures for students, grades, courses and attendance

RECORD TYPES:
✅ Student Import Record: demographics, enrollment, parent/guardian contact
✅ Grade Import Record: assignment score with derived percentage and letter grade
✅ Course / Attendance Record: typed payloads for the remaining record stores
✅ Import / Export Result: per-row error report returned to the caller
✅ Activity Record / Reports: dashboard feed entries and computed report payloads

FIELD NAMING:
- Python attributes are snake_case
- Aliases are the camelCase keys used in CSV headers and by the record stores
- to_record() dumps by alias, which is what repositories receive

Dependencies: Pydantic for validation
"""

from typing import Any, Dict, List, Optional, Union
from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator
from datetime import date, datetime, timezone
from enum import Enum


class LetterGrade(str, Enum):
    """Valid letter grades with plus/minus modifiers"""
    A_PLUS = "A+"
    A = "A"
    A_MINUS = "A-"
    B_PLUS = "B+"
    B = "B"
    B_MINUS = "B-"
    C_PLUS = "C+"
    C = "C"
    C_MINUS = "C-"
    D_PLUS = "D+"
    D = "D"
    D_MINUS = "D-"
    F = "F"


class AttendanceStatus(str, Enum):
    """Attendance marks recorded per student per class day"""
    PRESENT = "present"
    ABSENT = "absent"
    LATE = "late"
    EXCUSED = "excused"


class RecordModel(BaseModel):
    """Base for records exchanged with the record stores"""

    model_config = ConfigDict(populate_by_name=True, use_enum_values=True, validate_default=True)

    def to_record(self) -> Dict[str, Any]:
        """Dump using camelCase keys, as stored by the repositories"""
        return self.model_dump(by_alias=True)


class Address(RecordModel):
    """Postal address"""

    street: str = ""
    city: str = ""
    state: str = ""
    zip_code: str = Field("", alias="zipCode")

    @property
    def is_empty(self) -> bool:
        return not any([self.street, self.city, self.state, self.zip_code])


class ParentGuardian(RecordModel):
    """Parent or guardian contact block, always fully populated"""

    name: str = ""
    relationship: str = "Parent"
    primary_phone: str = Field("", alias="primaryPhone")
    secondary_phone: str = Field("", alias="secondaryPhone")
    primary_email: str = Field("", alias="primaryEmail")
    secondary_email: str = Field("", alias="secondaryEmail")
    address: Address = Field(default_factory=Address)

    @field_validator("primary_email", "secondary_email")
    @classmethod
    def lowercase_email(cls, v):
        """Guardian emails are compared case-insensitively"""
        return v.strip().lower() if v else ""


class StudentImportRecord(RecordModel):
    """Student record built from one CSV row"""

    first_name: str = Field("", alias="firstName")
    last_name: str = Field("", alias="lastName")
    email: str = Field("", description="Trimmed, lower-cased email")
    phone: str = ""
    date_of_birth: str = Field("", alias="dateOfBirth")
    address: Union[str, Address] = ""
    emergency_contact: str = Field("", alias="emergencyContact")
    grade_level: str = Field("", alias="gradeLevel")
    enrollment_status: str = Field("active", alias="enrollmentStatus")
    enrollment_date: str = Field(default_factory=lambda: date.today().isoformat(), alias="enrollmentDate")
    parent_guardian: ParentGuardian = Field(default_factory=ParentGuardian, alias="parentGuardian")
    communication_history: List[Dict[str, Any]] = Field(default_factory=list, alias="communicationHistory")

    # Raw CSV row this record was built from; never persisted
    source_row: Dict[str, str] = Field(default_factory=dict, exclude=True)

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, v):
        """Emails are the student natural key and compared case-insensitively"""
        return v.strip().lower() if v else ""

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class GradeImportRecord(RecordModel):
    """Grade record built from one CSV row"""

    # None stands for an identifier that could not be parsed as a number
    student_id: Optional[int] = Field(None, alias="studentId")
    course_id: Optional[int] = Field(None, alias="courseId")
    assignment_name: str = Field("", alias="assignmentName")
    category: str = "Assignment"
    points: float = 0.0
    max_points: float = Field(100.0, alias="maxPoints")
    percentage: int = 0
    letter_grade: LetterGrade = Field(LetterGrade.F, alias="letterGrade")
    date_recorded: str = Field(default_factory=lambda: date.today().isoformat(), alias="dateRecorded")
    comments: str = ""

    source_row: Dict[str, str] = Field(default_factory=dict, exclude=True)


# communicationHistory travels through CSV as one JSON array cell
COMMUNICATION_HISTORY = TypeAdapter(List[Dict[str, Any]])


class Course(RecordModel):
    """Course offered in the current term"""

    course_code: str = Field("", alias="courseCode")
    course_name: str = Field("", alias="courseName")
    teacher: str = ""
    credits: float = 0.0
    semester: str = ""
    enrolled_students: List[int] = Field(default_factory=list, alias="enrolledStudents")


class AttendanceRecord(RecordModel):
    """Attendance mark for one student, course and day"""

    student_id: int = Field(..., alias="studentId")
    course_id: int = Field(..., alias="courseId")
    date: str = Field(default_factory=lambda: date.today().isoformat())
    status: AttendanceStatus = AttendanceStatus.PRESENT
    notes: str = ""
    recorded_by: str = Field("System", alias="recordedBy")

    @field_validator("status", mode="before")
    @classmethod
    def lowercase_status(cls, v):
        return v.strip().lower() if isinstance(v, str) else v


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


class ActivityRecord(RecordModel):
    """Entry in the dashboard activity feed; extra keys are kept"""

    model_config = ConfigDict(extra="allow")

    type: str = ""
    description: str = ""
    timestamp: Optional[str] = None

    @field_validator("timestamp", mode="before")
    @classmethod
    def default_timestamp(cls, v):
        if isinstance(v, datetime):
            return v.isoformat()
        return v or _utc_now()


class ValidationErrorEntry(RecordModel):
    """Violations found on one row, or one synthetic duplicate entry"""

    row: Union[int, str] = Field(..., description="1-based data row number or 'duplicate_<n>'")
    errors: List[str] = Field(default_factory=list)
    data: Dict[str, Any] = Field(default_factory=dict)

    def describe(self) -> str:
        return f"Row {self.row}: {', '.join(self.errors)}"


class DuplicateEntry(RecordModel):
    """A valid row that was not persisted: natural key conflict or store rejection"""

    row: int = Field(..., description="1-based data row number")
    reason: str
    data: Dict[str, Any] = Field(default_factory=dict)


class ImportResult(RecordModel):
    """Summary of one bulk import call"""

    success_count: int = Field(0, alias="successCount")
    total_rows: int = Field(0, alias="totalRows")
    errors: List[ValidationErrorEntry] = Field(default_factory=list)
    duplicates: List[DuplicateEntry] = Field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)

    def error_lines(self, limit: Optional[int] = None) -> List[str]:
        """Human-readable 'Row N: ...' lines, optionally truncated"""
        lines = [entry.describe() for entry in self.errors]
        if limit is not None and len(lines) > limit:
            hidden = len(lines) - limit
            lines = lines[:limit] + [f"... and {hidden} more errors"]
        return lines


class ExportResult(RecordModel):
    """Outcome of one bulk export call"""

    success: bool = True
    count: int = 0
    path: Optional[str] = None


# ==============================================================================
# Reports
# ==============================================================================

class OverviewReport(RecordModel):
    """School-wide summary"""

    total_students: int = Field(0, alias="totalStudents")
    active_students: int = Field(0, alias="activeStudents")
    total_courses: int = Field(0, alias="totalCourses")
    average_gpa: float = Field(0.0, alias="averageGPA")
    attendance_rate: int = Field(0, alias="attendanceRate")
    total_grades: int = Field(0, alias="totalGrades")
    grade_distribution: Dict[str, int] = Field(default_factory=dict, alias="gradeDistribution")
    generated_at: str = Field(default_factory=_utc_now, alias="generatedAt")


class StudentReport(RecordModel):
    """GPA, attendance and grades for one student"""

    student: Dict[str, Any]
    gpa: float = 0.0
    attendance_rate: int = Field(0, alias="attendanceRate")
    total_grades: int = Field(0, alias="totalGrades")
    courses_enrolled: int = Field(0, alias="coursesEnrolled")
    grades_by_course: Dict[str, List[Dict[str, Any]]] = Field(default_factory=dict, alias="gradesByCourse")
    attendance_history: List[Dict[str, Any]] = Field(default_factory=list, alias="attendanceHistory")
    generated_at: str = Field(default_factory=_utc_now, alias="generatedAt")


class StudentPerformance(RecordModel):
    student: Dict[str, Any]
    average_grade: float = Field(0.0, alias="averageGrade")
    total_assignments: int = Field(0, alias="totalAssignments")


class CourseReport(RecordModel):
    """Grade and attendance statistics for one course"""

    course: Dict[str, Any]
    enrolled_students: int = Field(0, alias="enrolledStudents")
    average_grade: float = Field(0.0, alias="averageGrade")
    attendance_rate: int = Field(0, alias="attendanceRate")
    total_assignments: int = Field(0, alias="totalAssignments")
    pass_rate: int = Field(0, alias="passRate")
    grade_distribution: Dict[str, int] = Field(default_factory=dict, alias="gradeDistribution")
    student_performance: List[StudentPerformance] = Field(default_factory=list, alias="studentPerformance")
    generated_at: str = Field(default_factory=_utc_now, alias="generatedAt")


# Export all models
__all__ = [
    'COMMUNICATION_HISTORY',
    'LetterGrade',
    'AttendanceStatus',
    'Address',
    'ParentGuardian',
    'StudentImportRecord',
    'GradeImportRecord',
    'Course',
    'AttendanceRecord',
    'ActivityRecord',
    'ValidationErrorEntry',
    'DuplicateEntry',
    'ImportResult',
    'ExportResult',
    'OverviewReport',
    'StudentReport',
    'StudentPerformance',
    'CourseReport',
]
