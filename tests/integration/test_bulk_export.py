"""
Integration Tests for CSV Bulk Export

Tests export file naming and columns, and that exported files import back
into an empty store with the same field values.
"""

from datetime import date
from pathlib import Path

from school_dashboard.csv_utils import parse_csv
from school_dashboard.repositories import InMemoryRepository
from school_dashboard.services import GradeService, StudentService


def without_ids(records):
    return [{k: v for k, v in record.items() if k != "Id"} for record in records]


class TestStudentExport:
    """Tests for StudentService.bulk_export"""

    def test_file_name_and_count(self, student_service, tmp_path):
        result = student_service.bulk_export(export_dir=tmp_path, on=date(2024, 1, 15))

        assert result.success is True
        assert result.count == 2
        assert result.path == str(tmp_path / "students-export-2024-01-15.csv")

    def test_nested_fields_flattened(self, student_service, tmp_path):
        result = student_service.bulk_export(export_dir=tmp_path)

        emma = parse_csv(Path(result.path))[0]

        assert emma["Id"] == "1"
        assert emma["parentGuardianName"] == "Mark Johnson"
        assert emma["parentGuardianRelationship"] == "Father"
        assert emma["parentGuardianAddressCity"] == "Springfield"
        assert emma["address"] == "12 Oak St, Springfield, IL 62701"
        assert "parentGuardian" not in emma

    def test_legacy_keys_exported_under_current_headers(self, student_service, tmp_path):
        result = student_service.bulk_export(export_dir=tmp_path)

        liam = parse_csv(Path(result.path))[1]

        assert liam["gradeLevel"] == "11"
        assert liam["enrollmentStatus"] == "active"
        assert liam["parentGuardianName"] == ""

    def test_header_line(self, student_service, tmp_path):
        result = student_service.bulk_export(export_dir=tmp_path)

        header = Path(result.path).read_text(encoding="utf-8").splitlines()[0].split(",")

        assert header[:4] == ["Id", "firstName", "lastName", "email"]

    def test_empty_store_writes_nothing(self, tmp_path):
        service = StudentService(InMemoryRepository("Student"))

        result = service.bulk_export(export_dir=tmp_path)

        assert result.success is True
        assert result.count == 0
        assert result.path is None
        assert list(tmp_path.iterdir()) == []

    def test_round_trip(self, student_csv, tmp_path):
        source = StudentService(InMemoryRepository("Student"))
        source.bulk_import(student_csv)
        source.bulk_import(
            "firstName,lastName,email,dateOfBirth,addressStreet,addressCity\n"
            "Sam,Lee,sam@school.edu,2008-01-01,9 Pine Rd,Shelbyville\n"
        )

        exported = source.bulk_export(export_dir=tmp_path)
        target = StudentService(InMemoryRepository("Student"))
        result = target.bulk_import(exported.path)

        assert result.success_count == 3
        assert result.errors == []
        assert without_ids(target.get_all()) == without_ids(source.get_all())

        sam = target.get_by_id(3)
        assert sam["address"] == {"street": "9 Pine Rd", "city": "Shelbyville", "state": "", "zipCode": ""}

    def test_communication_history_survives_round_trip(self, existing_students, tmp_path):
        history = [
            {"date": "2024-02-01", "type": "email", "note": "Progress report, term 1"},
            {"date": "2024-03-12", "type": "call", "note": "Discussed attendance"},
        ]
        emma = {**existing_students[0], "communicationHistory": history}
        source = StudentService(InMemoryRepository("Student", [emma]))

        exported = source.bulk_export(export_dir=tmp_path)
        target = StudentService(InMemoryRepository("Student"))
        target.bulk_import(exported.path)

        assert target.get_by_id(1)["communicationHistory"] == history
        assert without_ids(target.get_all()) == without_ids(source.get_all())


class TestGradeExport:
    """Tests for GradeService.bulk_export"""

    def test_columns(self, grade_service, tmp_path):
        result = grade_service.bulk_export(export_dir=tmp_path, on=date(2024, 5, 1))

        rows = parse_csv(Path(result.path))

        assert result.path.endswith("grades-export-2024-05-01.csv")
        assert list(rows[0].keys()) == [
            "Id", "studentId", "courseId", "assignmentName", "category", "points",
            "maxPoints", "percentage", "letterGrade", "dateRecorded", "comments",
        ]
        assert rows[1]["comments"] == "Review fractions"

    def test_round_trip(self, grade_csv, tmp_path):
        source = GradeService(InMemoryRepository("Grade"))
        source.bulk_import(grade_csv)

        exported = source.bulk_export(export_dir=tmp_path)
        target = GradeService(InMemoryRepository("Grade"))
        result = target.bulk_import(exported.path)

        assert result.success_count == 2
        assert result.errors == []
        assert without_ids(target.get_all()) == without_ids(source.get_all())

    def test_reimport_into_same_store_is_all_duplicates(self, grade_service, tmp_path):
        exported = grade_service.bulk_export(export_dir=tmp_path)

        result = grade_service.bulk_import(exported.path)

        assert result.success_count == 0
        assert len(result.duplicates) == 2
        assert len(grade_service.get_all()) == 2
