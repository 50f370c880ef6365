# Shared Infrastructure for the Attachment Extractor
"""
Shared infrastructure components for the extraction lambda.

This package provides:
- Configuration management
- Custom exceptions
- Pydantic models for trigger events and the batch report
- S3 and webhook clients
"""

from extractor.shared.exceptions import (
    DecodeError,
    ExtractorError,
    FatalConfigError,
    NotifyError,
    RetrievalError,
    SigningError,
    WriteError,
)
from extractor.shared.config import Settings, get_settings, load_settings

__all__ = [
    # Exceptions
    "DecodeError",
    "ExtractorError",
    "FatalConfigError",
    "NotifyError",
    "RetrievalError",
    "SigningError",
    "WriteError",
    # Config
    "Settings",
    "get_settings",
    "load_settings",
]
