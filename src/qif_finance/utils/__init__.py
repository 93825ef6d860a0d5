"""Utility modules."""

from .exceptions import (
    FinanceError,
    QIFParseError,
    QIFStructureError,
    QIFExportError,
    QIFFileError,
    ConfigurationError,
    ValidationError,
    ReportGenerationError,
)
from .logging_config import setup_logging, get_logger

__all__ = [
    "FinanceError",
    "QIFParseError",
    "QIFStructureError",
    "QIFExportError",
    "QIFFileError",
    "ConfigurationError",
    "ValidationError",
    "ReportGenerationError",
    "setup_logging",
    "get_logger",
]
