# ==============================================================================
# exceptions.py - Custom exception classes for the school dashboard
# ==============================================================================

"""
Custom exception classes for the school dashboard core.

Only batch-level failures are raised: a rejected upload, a structurally broken
CSV file or a file without data rows. Row-level problems (validation errors,
duplicates, persistence errors) are reported in the ImportResult instead.
"""

from typing import Any, Dict, List, Optional
import logging

logger = logging.getLogger(__name__)


class SchoolDashboardError(Exception):
    """Base exception class for all school dashboard errors"""

    def __init__(self, message: str, error_code: str = None, details: Dict[str, Any] = None):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)

        # Log the exception when it's created
        logger.error(f"Exception raised: {self.__class__.__name__} - {message}",
                     extra={"error_code": error_code, "details": self.details})


# ==============================================================================
# Import/Export exceptions
# ==============================================================================

class ImportExportError(SchoolDashboardError):
    """Base exception for import/export operations"""
    pass


class FileValidationError(ImportExportError):
    """Raised when an upload has an unsupported extension or is too large"""

    def __init__(self, filename: str, reason: str):
        message = f"{reason}: {filename}"
        super().__init__(message, "INVALID_UPLOAD", {"filename": filename, "reason": reason})


class CSVParseError(ImportExportError):
    """Raised when the CSV parser reports structural errors"""

    def __init__(self, messages: List[str]):
        self.messages = list(messages)
        message = f"CSV parsing errors: {', '.join(self.messages)}"
        super().__init__(message, "CSV_PARSE_ERROR", {"messages": self.messages})


class NoDataError(ImportExportError):
    """Raised when an uploaded file holds no data rows"""

    def __init__(self, message: str = "No data found in the uploaded file"):
        super().__init__(message, "NO_DATA")


# ==============================================================================
# Repository exceptions
# ==============================================================================

class RecordNotFoundError(SchoolDashboardError):
    """Raised when a record id does not exist in a repository"""

    def __init__(self, entity: str, record_id: Optional[Any] = None):
        message = f"{entity} not found"
        super().__init__(message, "RECORD_NOT_FOUND", {"entity": entity, "id": record_id})
