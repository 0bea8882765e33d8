"""
Integration Tests for the Command-Line Entry Point
"""

import json

from school_dashboard.cli import main


def write_seed(path, records):
    path.write_text(json.dumps(records), encoding="utf-8")
    return str(path)


class TestImportCommand:

    def test_import_prints_summary(self, tmp_path, student_csv, existing_students, capsys):
        csv_path = tmp_path / "students.csv"
        csv_path.write_text(student_csv, encoding="utf-8")
        seed = write_seed(tmp_path / "students.json", existing_students)

        exit_code = main(["import", "students", str(csv_path), "--seed", seed])

        out = capsys.readouterr().out
        assert exit_code == 0
        assert "Imported 2 of 3 students" in out
        assert "Row 2: Missing required field: email" in out

    def test_empty_file_reports_error(self, tmp_path, capsys):
        csv_path = tmp_path / "grades.csv"
        csv_path.write_text("studentId,courseId,assignmentName,points,maxPoints\n", encoding="utf-8")

        exit_code = main(["import", "grades", str(csv_path)])

        assert exit_code == 1
        assert "No data found in the uploaded file" in capsys.readouterr().out

    def test_rejects_unsupported_extension(self, tmp_path, capsys):
        path = tmp_path / "notes.txt"
        path.write_text("a,b\n1,2\n", encoding="utf-8")

        exit_code = main(["import", "students", str(path)])

        assert exit_code == 1
        assert "Please select a valid CSV or Excel file" in capsys.readouterr().out

    def test_spreadsheets_must_be_converted(self, tmp_path, capsys):
        path = tmp_path / "students.xlsx"
        path.write_bytes(b"PK")

        exit_code = main(["import", "students", str(path)])

        assert exit_code == 1
        assert "convert spreadsheets to CSV" in capsys.readouterr().out


class TestExportCommand:

    def test_export_writes_file(self, tmp_path, existing_grades, capsys):
        seed = write_seed(tmp_path / "grades.json", existing_grades)
        out_dir = tmp_path / "exports"

        exit_code = main(["export", "grades", "--seed", seed, "--out", str(out_dir)])

        assert exit_code == 0
        assert len(list(out_dir.glob("grades-export-*.csv"))) == 1
        assert "Exported 2 grades" in capsys.readouterr().out

    def test_export_empty_store(self, tmp_path, capsys):
        exit_code = main(["export", "students", "--out", str(tmp_path)])

        assert exit_code == 0
        assert "No students to export" in capsys.readouterr().out
        assert list(tmp_path.iterdir()) == []


class TestTemplateCommand:

    def test_template_imports_cleanly(self, tmp_path):
        assert main(["template", "grades", "--out", str(tmp_path)]) == 0

        template = tmp_path / "grades-template.csv"
        assert template.exists()
        assert main(["import", "grades", str(template)]) == 0
