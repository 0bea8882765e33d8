# ==============================================================================
# config.py - Configuration management
# ==============================================================================

import os
from typing import Optional


class Settings:
    """Application settings and configuration"""

    # App settings
    APP_NAME: str = "School Dashboard"
    APP_VERSION: str = "1.0.0"

    # File upload settings
    MAX_FILE_SIZE: int = int(os.getenv("MAX_FILE_SIZE", "10485760"))  # 10MB
    ALLOWED_EXTENSIONS: list = [".csv", ".xlsx", ".xls"]

    # CSV processing settings
    CSV_ENCODING: str = os.getenv("CSV_ENCODING", "utf-8-sig")
    CSV_FALLBACK_ENCODING: str = "latin-1"
    EXPORT_DIR: str = os.getenv("EXPORT_DIR", "exports")

    # Import defaults
    DEFAULT_MAX_POINTS: float = float(os.getenv("DEFAULT_MAX_POINTS", "100"))
    DEFAULT_GRADE_CATEGORY: str = "Assignment"
    DEFAULT_ENROLLMENT_STATUS: str = "active"
    DEFAULT_GUARDIAN_RELATIONSHIP: str = "Parent"

    # Number of row errors shown in an import summary
    MAX_REPORTED_ERRORS: int = 10

    # Logging settings
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    LOG_FILE: Optional[str] = os.getenv("LOG_FILE")


settings = Settings()
