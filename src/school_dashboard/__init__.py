"""
School dashboard core: student, course, grade and attendance records with
CSV bulk import/export, reports and an activity feed.

Usage:
    from school_dashboard import InMemoryRepository, StudentService

    students = StudentService(InMemoryRepository("Student"))
    result = students.bulk_import("students.csv")
"""

from .data_models import (
    CourseReport,
    ExportResult,
    GradeImportRecord,
    ImportResult,
    OverviewReport,
    StudentImportRecord,
    StudentReport,
    ValidationErrorEntry,
)
from .exceptions import CSVParseError, FileValidationError, NoDataError, RecordNotFoundError, SchoolDashboardError
from .repositories import InMemoryRepository, RecordRepository
from .reports import ReportService
from .services import ActivityService, AttendanceService, CourseService, GradeService, StudentService

__all__ = [
    "ActivityService",
    "AttendanceService",
    "CourseService",
    "GradeService",
    "StudentService",
    "ReportService",
    "InMemoryRepository",
    "RecordRepository",
    "ImportResult",
    "ExportResult",
    "OverviewReport",
    "StudentReport",
    "CourseReport",
    "StudentImportRecord",
    "GradeImportRecord",
    "ValidationErrorEntry",
    "SchoolDashboardError",
    "CSVParseError",
    "FileValidationError",
    "NoDataError",
    "RecordNotFoundError",
]

__version__ = "1.0.0"
