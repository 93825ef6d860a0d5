"""Custom exceptions for the QIF finance application."""


class FinanceError(Exception):
    """Base exception for QIF finance errors."""

    pass


class QIFParseError(FinanceError):
    """Error parsing QIF content."""

    pass


class QIFStructureError(QIFParseError):
    """QIF content is missing context a section depends on."""

    pass


class QIFExportError(FinanceError):
    """Error serializing financial data to QIF."""

    pass


class QIFFileError(FinanceError):
    """Error reading or writing a QIF file."""

    pass


class ConfigurationError(FinanceError):
    """Error in configuration."""

    pass


class ValidationError(FinanceError):
    """Data validation error."""

    pass


class ReportGenerationError(FinanceError):
    """Error generating Excel report."""

    pass
