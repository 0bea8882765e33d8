"""
Unit Tests for Import Result Folding
"""

from school_dashboard.data_models import DuplicateEntry, ImportResult, ValidationErrorEntry
from school_dashboard.import_processor import (
    Duplicate,
    PersistFailed,
    Success,
    ValidationFailed,
    fold_outcomes,
)


def invalid(row):
    return ValidationFailed(row, ValidationErrorEntry(row=row, errors=[f"bad row {row}"], data={}))


def duplicate(row, reason="already exists"):
    return Duplicate(row, DuplicateEntry(row=row, reason=reason, data={"row": row}))


class TestFoldOutcomes:

    def test_counts(self):
        outcomes = [Success(1, 10), invalid(2), duplicate(3), Success(4, 11)]

        result = fold_outcomes(outcomes, total_rows=4)

        assert result.success_count == 2
        assert result.total_rows == 4
        assert len(result.errors) == 2
        assert len(result.duplicates) == 1

    def test_duplicate_entries_follow_validation_entries(self):
        outcomes = [duplicate(1, "first"), Success(2, 1), invalid(5), invalid(3), duplicate(4, "second")]

        result = fold_outcomes(outcomes, total_rows=5)

        assert [entry.row for entry in result.errors] == [3, 5, "duplicate_1", "duplicate_2"]
        assert result.errors[2].errors == ["first"]
        assert result.errors[3].data == {"row": 4}

    def test_persistence_failures_reported_as_duplicates(self):
        failed = PersistFailed(2, DuplicateEntry(row=2, reason="Failed to create record: timeout", data={}))

        result = fold_outcomes([Success(1, 1), failed], total_rows=2)

        assert result.duplicates[0].reason == "Failed to create record: timeout"
        assert result.errors[0].row == "duplicate_1"

    def test_nothing_to_report(self):
        result = fold_outcomes([Success(1, 1)], total_rows=1)

        assert result.errors == []
        assert not result.has_errors


class TestImportResult:

    def test_error_lines_truncated(self):
        errors = [ValidationErrorEntry(row=n, errors=["a", "b"]) for n in range(1, 13)]
        result = ImportResult(success_count=0, total_rows=12, errors=errors)

        lines = result.error_lines(limit=10)

        assert lines[0] == "Row 1: a, b"
        assert len(lines) == 11
        assert lines[-1] == "... and 2 more errors"

    def test_camel_case_dump(self):
        result = ImportResult(success_count=1, total_rows=2)

        assert result.to_record() == {"successCount": 1, "totalRows": 2, "errors": [], "duplicates": []}
