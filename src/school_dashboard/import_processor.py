"""
IMPORT PROCESSOR - Bulk CSV import and export orchestration

IMPORT PIPELINE (one call):
1. PARSING      CSV source -> raw rows (fatal on parse errors or zero rows)
2. NORMALIZING  raw rows -> typed import records, one per row
3. VALIDATING   records -> per-row violation lists
4. PERSISTING   valid rows in input order: duplicate check, then create()
5. DONE         per-row outcomes folded into an ImportResult

ROW OUTCOMES:
✅ Success: created by the record store
✅ ValidationFailed: at least one field rule broken, never persisted
✅ Duplicate: natural key already in the store or earlier in this batch
✅ PersistFailed: the store raised on create(); reported like a duplicate

No row-level problem aborts the batch, and there is no rollback: rows created
before a crash stay created.
"""

import logging
from dataclasses import dataclass
from datetime import date
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, Hashable, List, Optional, Sequence, Set, Union

from tqdm import tqdm

from .csv_utils import CSVSource, RawRow, export_filename, generate_csv, parse_csv
from .data_models import DuplicateEntry, ExportResult, ImportResult, ValidationErrorEntry
from .exceptions import NoDataError
from .repositories import ID_FIELD, RecordRepository

logger = logging.getLogger(__name__)


class ImportState(str, Enum):
    """Stages of one bulk import call"""
    PARSING = "parsing"
    NORMALIZING = "normalizing"
    VALIDATING = "validating"
    PERSISTING = "persisting"
    DONE = "done"
    FAILED = "failed"


# ==============================================================================
# Row outcomes
# ==============================================================================

@dataclass
class Success:
    row: int
    record_id: Any


@dataclass
class ValidationFailed:
    row: int
    entry: ValidationErrorEntry


@dataclass
class Duplicate:
    row: int
    descriptor: DuplicateEntry


@dataclass
class PersistFailed:
    row: int
    descriptor: DuplicateEntry


RowOutcome = Union[Success, ValidationFailed, Duplicate, PersistFailed]


def fold_outcomes(outcomes: Sequence[RowOutcome], total_rows: int) -> ImportResult:
    """
    Build the ImportResult from per-row outcomes.

    Validation entries come first in row order, followed by one
    "duplicate_<n>" entry per duplicate or persistence failure.
    """
    ordered = sorted(outcomes, key=lambda outcome: outcome.row)

    validation_errors = [o.entry for o in ordered if isinstance(o, ValidationFailed)]
    duplicates = [o.descriptor for o in ordered if isinstance(o, (Duplicate, PersistFailed))]
    success_count = sum(1 for o in ordered if isinstance(o, Success))

    duplicate_errors = [
        ValidationErrorEntry(row=f"duplicate_{n}", errors=[descriptor.reason], data=descriptor.data)
        for n, descriptor in enumerate(duplicates, start=1)
    ]

    return ImportResult(
        success_count=success_count,
        total_rows=total_rows,
        errors=validation_errors + duplicate_errors,
        duplicates=duplicates,
    )


# ==============================================================================
# Entity profiles
# ==============================================================================

@dataclass
class EntityProfile:
    """Everything the importer needs to know about one record type"""

    entity: str
    normalize: Callable[[List[RawRow]], List[Any]]
    validate: Callable[[List[Any]], List[ValidationErrorEntry]]
    # Natural key of a stored record dict (also applied to to_record() output)
    natural_key: Callable[[Dict[str, Any]], Hashable]
    describe_duplicate: Callable[[Dict[str, Any]], str]
    flatten: Callable[[Dict[str, Any]], Dict[str, Any]]


class BulkImporter:
    """Runs the import pipeline for one entity against one record store"""

    def __init__(self, profile: EntityProfile, repository: RecordRepository, progress: bool = False):
        self.profile = profile
        self.repository = repository
        self.progress = progress
        self.state = ImportState.PARSING

    def _parse(self, source: CSVSource) -> List[RawRow]:
        self.state = ImportState.PARSING
        try:
            rows = parse_csv(source)
            if not rows:
                raise NoDataError()
        except Exception:
            self.state = ImportState.FAILED
            raise
        return rows

    def _persist(self, row: int, record: Any, seen_keys: Set[Hashable]) -> RowOutcome:
        payload = record.to_record()
        key = self.profile.natural_key(payload)

        if key in seen_keys:
            descriptor = DuplicateEntry(row=row, reason=self.profile.describe_duplicate(payload), data=payload)
            return Duplicate(row, descriptor)

        try:
            created = self.repository.create(payload)
        except Exception as e:
            logger.warning(f"⚠️ Row {row}: {self.profile.entity} store rejected record - {e}")
            descriptor = DuplicateEntry(row=row, reason=f"Failed to create record: {e}", data=payload)
            return PersistFailed(row, descriptor)

        seen_keys.add(key)
        record_id = created.get(ID_FIELD) if isinstance(created, dict) else None
        return Success(row, record_id)

    def run(self, source: CSVSource) -> ImportResult:
        """
        Import every acceptable row of a CSV source.

        Raises:
            CSVParseError: the file is not structurally valid CSV
            NoDataError: the file has no data rows
        """
        entity = self.profile.entity
        logger.info(f"📊 Importing {entity}")

        rows = self._parse(source)

        self.state = ImportState.NORMALIZING
        records = self.profile.normalize(rows)

        self.state = ImportState.VALIDATING
        validation_errors = self.profile.validate(records)
        invalid_rows = {entry.row for entry in validation_errors}
        outcomes: List[RowOutcome] = [ValidationFailed(entry.row, entry) for entry in validation_errors]

        self.state = ImportState.PERSISTING
        existing = self.repository.get_all()
        seen_keys = {self.profile.natural_key(record) for record in existing}

        candidates = [
            (row, record)
            for row, record in enumerate(records, start=1)
            if row not in invalid_rows
        ]
        iterator = tqdm(candidates, desc=f"Importing {entity}", unit="row", disable=not self.progress)
        for row, record in iterator:
            outcomes.append(self._persist(row, record, seen_keys))

        result = fold_outcomes(outcomes, total_rows=len(rows))
        self.state = ImportState.DONE

        logger.info(
            f"✅ Imported {result.success_count}/{result.total_rows} {entity} "
            f"({len(validation_errors)} invalid, {len(result.duplicates)} duplicates)"
        )
        return result


def bulk_export(
    profile: EntityProfile,
    repository: RecordRepository,
    export_dir: Optional[Union[str, Path]] = None,
    on: Optional[date] = None,
) -> ExportResult:
    """Write every stored record as <entity>-export-<date>.csv"""
    records = repository.get_all()
    rows = [profile.flatten(record) for record in records]

    path = generate_csv(rows, export_filename(profile.entity, on), export_dir)
    return ExportResult(success=True, count=len(rows), path=str(path) if path else None)
