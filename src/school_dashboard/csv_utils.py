"""
CSV UTILITIES - Parse uploaded CSV files and write CSV exports

PARSING:
✅ Accepts text, bytes, a file path or an open file object
✅ UTF-8 (BOM tolerated) with latin-1 fallback
✅ Header cells trimmed and used verbatim as row keys
✅ Blank lines skipped, every value kept as a string (no NA/type inference)
✅ Structural errors (unterminated quotes, too many or too few fields) aggregated into one CSVParseError

EXPORT:
✅ Header + one line per record, column order from the first record
✅ File name pattern: <entity>-export-<YYYY-MM-DD>.csv
✅ Empty record lists write nothing and return None

Dependencies: pandas for CSV reading/writing
"""

import io
import os
import csv
import logging
from datetime import date
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import pandas as pd

from .config import settings
from .exceptions import CSVParseError, FileValidationError

logger = logging.getLogger(__name__)

RawRow = Dict[str, str]

CSVSource = Union[str, bytes, os.PathLike, Any]


def _read_source_text(source: CSVSource) -> str:
    """Load the whole source as text (the import reads the file fully before processing)"""
    if isinstance(source, os.PathLike) or (isinstance(source, str) and _looks_like_path(source)):
        source = Path(source).read_bytes()
    elif hasattr(source, "read"):
        source = source.read()

    if isinstance(source, bytes):
        try:
            return source.decode(settings.CSV_ENCODING)
        except UnicodeDecodeError:
            logger.warning(f"⚠️ File is not {settings.CSV_ENCODING}, decoding as {settings.CSV_FALLBACK_ENCODING}")
            return source.decode(settings.CSV_FALLBACK_ENCODING)

    # Text sources may still carry a BOM
    return str(source).lstrip("\ufeff")


def _looks_like_path(value: str) -> bool:
    """Single-line strings naming an existing .csv file are treated as paths"""
    if "\n" in value or "," in value:
        return False
    return value.lower().endswith(".csv") and Path(value).is_file()


def _short_line_errors(text: str, expected: int) -> List[str]:
    """One message per data row with fewer fields than the header"""
    errors = []
    rows = (fields for fields in csv.reader(io.StringIO(text)) if any(cell.strip() for cell in fields))
    next(rows, None)
    for row, fields in enumerate(rows, start=1):
        if len(fields) < expected:
            errors.append(f"Too few fields: expected {expected} fields but parsed {len(fields)} (row {row})")
    return errors


def parse_csv(source: CSVSource) -> List[RawRow]:
    """
    Parse CSV input into an ordered list of raw rows.

    Args:
        source: CSV text, bytes, a path to a .csv file, or a file object

    Returns:
        One dict per data line (header excluded), keyed by trimmed header names

    Raises:
        CSVParseError: the parser reported structural errors
    """
    text = _read_source_text(source)
    if not text.strip():
        return []

    try:
        df = pd.read_csv(
            io.StringIO(text),
            dtype=str,
            keep_default_na=False,
            na_filter=False,
            skip_blank_lines=True,
        )
    except pd.errors.EmptyDataError:
        return []
    except (pd.errors.ParserError, csv.Error) as e:
        messages = [line.strip() for line in str(e).splitlines() if line.strip()]
        raise CSVParseError(messages or [str(e)]) from e

    # pandas silently turns one extra field on every line into an index
    if len(df) and not isinstance(df.index, pd.RangeIndex):
        raise CSVParseError([f"Too many fields: expected {len(df.columns)} fields per line"])

    # pandas pads short lines instead of rejecting them
    short_lines = _short_line_errors(text, len(df.columns))
    if short_lines:
        raise CSVParseError(short_lines)

    df.columns = [str(col).strip() for col in df.columns]
    df = df.fillna("")

    rows = df.to_dict(orient="records")
    logger.info(f"📊 Parsed {len(rows)} CSV rows with columns: {list(df.columns)}")
    return rows


def to_csv_text(records: List[Dict[str, Any]]) -> str:
    """Serialize uniform records to CSV text; column order is the first record's key order"""
    if not records:
        return ""
    columns = list(records[0].keys())
    df = pd.DataFrame(records, columns=columns)
    return df.to_csv(index=False, lineterminator="\n")


def export_filename(entity: str, on: Optional[date] = None) -> str:
    """Download file name, e.g. students-export-2024-01-15.csv"""
    on = on or date.today()
    return f"{entity}-export-{on.isoformat()}.csv"


def generate_csv(
    records: List[Dict[str, Any]],
    filename: str = "export.csv",
    export_dir: Optional[Union[str, Path]] = None,
) -> Optional[Path]:
    """
    Write records to <export_dir>/<filename>.

    Returns:
        Path of the written file, or None when there was nothing to export
    """
    if not records:
        logger.warning(f"⚠️ Nothing to export - {filename} not written")
        return None

    output_dir = Path(export_dir or settings.EXPORT_DIR)
    output_dir.mkdir(parents=True, exist_ok=True)
    output_path = output_dir / filename

    output_path.write_text(to_csv_text(records), encoding="utf-8")
    logger.info(f"✅ Exported {len(records)} records to: {output_path}")
    return output_path


def check_upload(filename: str, size: Optional[int] = None) -> None:
    """
    Reject uploads the import dialog would refuse.

    .xlsx/.xls are accepted here but must be converted to CSV text
    before they reach parse_csv.
    """
    extension = Path(filename).suffix.lower()
    if extension not in settings.ALLOWED_EXTENSIONS:
        raise FileValidationError(filename, "Please select a valid CSV or Excel file")
    if size is not None and size > settings.MAX_FILE_SIZE:
        limit_mb = settings.MAX_FILE_SIZE // (1024 * 1024)
        raise FileValidationError(filename, f"File size must be less than {limit_mb}MB")


# ==============================================================================
# Import templates
# ==============================================================================

def student_template() -> List[Dict[str, str]]:
    """Example row showing the student import columns"""
    return [
        {
            "firstName": "John",
            "lastName": "Doe",
            "email": "john.doe@email.com",
            "phone": "(555) 123-4567",
            "dateOfBirth": "2005-01-15",
            "address": "123 Main St, City, State 12345",
            "emergencyContact": "Jane Doe - (555) 987-6543",
            "gradeLevel": "10",
            "enrollmentStatus": "active",
            "enrollmentDate": "2024-01-15",
            "parentGuardianName": "Jane Doe",
            "parentGuardianRelationship": "Mother",
            "parentGuardianPhone": "(555) 987-6543",
            "parentGuardianEmail": "jane.doe@email.com",
        }
    ]


def grade_template() -> List[Dict[str, str]]:
    """Example row showing the grade import columns"""
    return [
        {
            "studentId": "1",
            "courseId": "1",
            "assignmentName": "Math Test 1",
            "category": "Test",
            "points": "85",
            "maxPoints": "100",
            "dateRecorded": "2024-01-15",
            "comments": "Good work",
        }
    ]
