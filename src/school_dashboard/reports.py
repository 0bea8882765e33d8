"""
REPORTS - Overview, student and course statistics for the reports page

REPORT TYPES:
✅ Overview: head counts, average GPA, attendance rate, letter grade distribution
✅ Student: GPA, attendance rate, grades grouped by course name, attendance history
✅ Course: average grade, pass rate, attendance rate, per-student averages

CALCULATIONS:
- GPA is unweighted on the 4.0 scale (90+ = 4.0, 80+ = 3.0, 70+ = 2.0, 60+ = 1.0)
- Overview GPA averages each student's mean percentage; student GPA averages
  the grade points of every individual grade
- Attendance rate = present marks / all marks, whole percent (0 with no marks)
- Pass rate = grades at 60% or above / all grades, whole percent
- Average grade is the mean percentage to 1 decimal

Dependencies: pandas for grade aggregation
"""

import logging
from collections import Counter
from typing import Any, Dict, List

import pandas as pd

from .data_models import CourseReport, OverviewReport, StudentPerformance, StudentReport
from .data_normalizer import clean_text, parse_identifier
from .grading import gpa_points, round_half_up
from .repositories import ID_FIELD, Record, RecordRepository

logger = logging.getLogger(__name__)

PASSING_PERCENTAGE = 60
UNKNOWN_COURSE = "Unknown Course"


def _grade_frame(grades: List[Record]) -> pd.DataFrame:
    """Grades as a frame with parsed ids and numeric percentages"""
    df = pd.DataFrame(grades, columns=["studentId", "courseId", "percentage", "letterGrade"])
    df["studentId"] = df["studentId"].map(parse_identifier)
    df["courseId"] = df["courseId"].map(parse_identifier)
    df["percentage"] = pd.to_numeric(df["percentage"], errors="coerce").astype(float)
    return df


def _mean(values: pd.Series, ndigits: int) -> float:
    if values.empty:
        return 0.0
    average = values.mean()
    if pd.isna(average):
        return 0.0
    return round_half_up(float(average), ndigits)


def _whole_percent(part: int, whole: int) -> int:
    if not whole:
        return 0
    return int(round_half_up(part / whole * 100))


def attendance_rate(records: List[Record]) -> int:
    """Share of 'present' marks, whole percent"""
    present = sum(1 for record in records if clean_text(record.get("status")).lower() == "present")
    return _whole_percent(present, len(records))


def grade_distribution(grades: List[Record]) -> Dict[str, int]:
    """Count of grades per letter, in first-seen order"""
    return dict(Counter(grade["letterGrade"] for grade in grades if grade.get("letterGrade")))


def _is_active(student: Record) -> bool:
    status = student.get("enrollmentStatus", student.get("status"))
    return clean_text(status).lower() == "active"


def _matching(records: List[Record], field: str, record_id: Any) -> List[Record]:
    wanted = parse_identifier(record_id)
    return [record for record in records if parse_identifier(record.get(field)) == wanted]


class ReportService:
    """Computes report payloads from the student, grade, attendance and course stores"""

    def __init__(
        self,
        students: RecordRepository,
        grades: RecordRepository,
        attendance: RecordRepository,
        courses: RecordRepository,
    ):
        self.students = students
        self.grades = grades
        self.attendance = attendance
        self.courses = courses

    def overview(self) -> OverviewReport:
        students = self.students.get_all()
        grades = self.grades.get_all()
        attendance = self.attendance.get_all()

        frame = _grade_frame(grades)
        per_student = frame.groupby("studentId")["percentage"].mean()
        average_gpa = _mean(per_student.map(gpa_points), 2)

        report = OverviewReport(
            total_students=len(students),
            active_students=sum(1 for student in students if _is_active(student)),
            total_courses=len(self.courses.get_all()),
            average_gpa=average_gpa,
            attendance_rate=attendance_rate(attendance),
            total_grades=len(grades),
            grade_distribution=grade_distribution(grades),
        )
        logger.info(f"📊 Overview report: {report.total_students} students, GPA {report.average_gpa}")
        return report

    def student_report(self, student_id: Any) -> StudentReport:
        """
        Report for one student.

        Raises:
            RecordNotFoundError: no student with that id
        """
        student = self.students.get_by_id(student_id)
        grades = _matching(self.grades.get_all(), "studentId", student_id)
        attendance = _matching(self.attendance.get_all(), "studentId", student_id)

        course_names = {
            parse_identifier(course.get(ID_FIELD)): course.get("courseName") or UNKNOWN_COURSE
            for course in self.courses.get_all()
        }
        grades_by_course: Dict[str, List[Record]] = {}
        for grade in grades:
            name = course_names.get(parse_identifier(grade.get("courseId")), UNKNOWN_COURSE)
            grades_by_course.setdefault(name, []).append(grade)

        points = pd.Series([gpa_points(p) for p in _grade_frame(grades)["percentage"]], dtype=float)

        return StudentReport(
            student=student,
            gpa=_mean(points, 2),
            attendance_rate=attendance_rate(attendance),
            total_grades=len(grades),
            courses_enrolled=len(grades_by_course),
            grades_by_course=grades_by_course,
            attendance_history=attendance,
        )

    def course_report(self, course_id: Any) -> CourseReport:
        """
        Report for one course.

        Students count as enrolled when they have a grade in the course or
        are listed in its enrolledStudents.

        Raises:
            RecordNotFoundError: no course with that id
        """
        course = self.courses.get_by_id(course_id)
        grades = _matching(self.grades.get_all(), "courseId", course_id)
        attendance = _matching(self.attendance.get_all(), "courseId", course_id)

        frame = _grade_frame(grades)
        graded_ids = set(frame["studentId"].dropna().astype(int))
        listed_ids = {parse_identifier(sid) for sid in course.get("enrolledStudents") or []}
        enrolled_ids = graded_ids | listed_ids
        enrolled = [
            student for student in self.students.get_all()
            if parse_identifier(student.get(ID_FIELD)) in enrolled_ids
        ]

        performance = []
        for student in enrolled:
            own = frame[frame["studentId"] == parse_identifier(student.get(ID_FIELD))]
            performance.append(StudentPerformance(
                student=student,
                average_grade=_mean(own["percentage"], 1),
                total_assignments=len(own),
            ))

        passed = int((frame["percentage"] >= PASSING_PERCENTAGE).sum())

        report = CourseReport(
            course=course,
            enrolled_students=len(enrolled),
            average_grade=_mean(frame["percentage"], 1),
            attendance_rate=attendance_rate(attendance),
            total_assignments=len(grades),
            pass_rate=_whole_percent(passed, len(grades)),
            grade_distribution=grade_distribution(grades),
            student_performance=performance,
        )
        logger.info(f"📊 Course report: {course.get('courseName', course_id)}, {report.enrolled_students} students")
        return report
