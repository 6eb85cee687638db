"""
Domain exceptions for reports app.

Exception Hierarchy:
    ReportsServiceError (base)
    └── UnsupportedFormatError
"""


class ReportsServiceError(Exception):
    """Base exception for report generation errors."""

    pass


class UnsupportedFormatError(ReportsServiceError):
    """Raised when an export is requested in a format that is not offered."""

    def __init__(self, export_format, supported):
        self.export_format = export_format
        self.supported = tuple(supported)
        super().__init__(
            f"Formato não suportado: {export_format}. "
            f"Use um destes: {', '.join(self.supported)}"
        )
