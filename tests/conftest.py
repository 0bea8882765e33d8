"""
Pytest Configuration and Fixtures

Provides common fixtures for all tests including:
- In-memory record stores seeded with existing students and grades
- Services wired to those stores
- Courses and attendance marks for reports
- Sample CSV uploads
"""

import pytest

# Add src to path
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from school_dashboard.repositories import InMemoryRepository
from school_dashboard.reports import ReportService
from school_dashboard.services import ActivityService, AttendanceService, CourseService, GradeService, StudentService


@pytest.fixture
def existing_students():
    """Students already in the store before an import"""
    return [
        {
            "Id": 1,
            "firstName": "Emma",
            "lastName": "Johnson",
            "email": "emma.johnson@school.edu",
            "phone": "(555) 111-2222",
            "dateOfBirth": "2008-03-15",
            "address": "12 Oak St, Springfield, IL 62701",
            "emergencyContact": "Mark Johnson - (555) 111-3333",
            "gradeLevel": "10",
            "enrollmentStatus": "active",
            "enrollmentDate": "2023-08-21",
            "parentGuardian": {
                "name": "Mark Johnson",
                "relationship": "Father",
                "primaryPhone": "(555) 111-3333",
                "secondaryPhone": "",
                "primaryEmail": "mark.johnson@email.com",
                "secondaryEmail": "",
                "address": {"street": "12 Oak St", "city": "Springfield", "state": "IL", "zipCode": "62701"},
            },
            "communicationHistory": [],
        },
        {
            "Id": 2,
            "firstName": "Liam",
            "lastName": "Smith",
            "email": "liam.smith@school.edu",
            "dateOfBirth": "2007-11-02",
            "grade": "11",
            "status": "active",
            "enrollmentDate": "2022-08-22",
        },
    ]


@pytest.fixture
def existing_grades():
    """Grades already in the store before an import"""
    return [
        {
            "Id": 1,
            "studentId": 1,
            "courseId": 1,
            "assignmentName": "Chapter 1 Quiz",
            "category": "Quiz",
            "points": 18.0,
            "maxPoints": 20.0,
            "percentage": 90,
            "letterGrade": "A-",
            "dateRecorded": "2024-01-10",
            "comments": "",
        },
        {
            "Id": 2,
            "studentId": 2,
            "courseId": 1,
            "assignmentName": "Chapter 1 Quiz",
            "category": "Quiz",
            "points": 15.0,
            "maxPoints": 20.0,
            "percentage": 75,
            "letterGrade": "C",
            "dateRecorded": "2024-01-10",
            "comments": "Review fractions",
        },
    ]


@pytest.fixture
def existing_courses():
    return [
        {"Id": 1, "courseCode": "MATH101", "courseName": "Algebra I", "teacher": "Ms. Rivera", "enrolledStudents": [1, 2]},
        {"Id": 2, "courseCode": "SCI101", "courseName": "Biology", "teacher": "Mr. Chen", "enrolledStudents": [1]},
    ]


@pytest.fixture
def existing_attendance():
    """Four marks in Algebra I; student 1 present twice, student 2 absent then late"""
    return [
        {"Id": 1, "studentId": 1, "courseId": 1, "date": "2024-03-04", "status": "present"},
        {"Id": 2, "studentId": 2, "courseId": 1, "date": "2024-03-04", "status": "absent"},
        {"Id": 3, "studentId": 1, "courseId": 1, "date": "2024-03-05", "status": "Present"},
        {"Id": 4, "studentId": 2, "courseId": 1, "date": "2024-03-05", "status": "late"},
    ]


@pytest.fixture
def existing_activities():
    return [
        {"Id": 1, "type": "grade", "description": "Grades imported for Algebra I", "timestamp": "2024-03-01T09:00:00Z"},
        {"Id": 2, "type": "student", "description": "New student enrolled: Liam Smith", "timestamp": "2024-03-03T14:30:00Z"},
        {"Id": 3, "type": "attendance", "description": "Attendance taken", "timestamp": "2024-03-02T08:15:00+00:00"},
    ]


@pytest.fixture
def student_repository(existing_students):
    return InMemoryRepository("Student", existing_students)


@pytest.fixture
def grade_repository(existing_grades):
    return InMemoryRepository("Grade", existing_grades)


@pytest.fixture
def student_service(student_repository):
    return StudentService(student_repository)


@pytest.fixture
def grade_service(grade_repository):
    return GradeService(grade_repository)


@pytest.fixture
def course_service():
    return CourseService(InMemoryRepository("Course"))


@pytest.fixture
def attendance_service():
    return AttendanceService(InMemoryRepository("Attendance record"))


@pytest.fixture
def activity_service(existing_activities):
    return ActivityService(InMemoryRepository("Activity", existing_activities))


@pytest.fixture
def report_service(student_repository, grade_repository, existing_attendance, existing_courses):
    return ReportService(
        students=student_repository,
        grades=grade_repository,
        attendance=InMemoryRepository("Attendance record", existing_attendance),
        courses=InMemoryRepository("Course", existing_courses),
    )


@pytest.fixture
def student_csv():
    """Three new students; the second has no email"""
    return (
        "firstName,lastName,email,dateOfBirth,gradeLevel,parentGuardianName,parentGuardianEmail\n"
        "Olivia,Brown,Olivia.Brown@School.edu,2009-05-01,9,Ann Brown,ANN.BROWN@email.com\n"
        "Noah,Davis,,2008-07-19,10,,\n"
        "Ava,Wilson,ava.wilson@school.edu,2007-01-30,11,,\n"
    )


@pytest.fixture
def grade_csv():
    """Four grade rows; the third scores above maxPoints, the fourth has no maxPoints"""
    return (
        "studentId,courseId,assignmentName,category,points,maxPoints,dateRecorded,comments\n"
        "1,2,Lab Report 1,Lab,47,50,2024-02-01,Neat work\n"
        "2,2,Lab Report 1,Lab,40,50,2024-02-01,\n"
        "3,2,Lab Report 1,Lab,110,100,2024-02-01,\n"
        "3,2,Midterm,,88,,,\n"
    )
