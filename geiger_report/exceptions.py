"""Custom exceptions for geiger-report."""


class GeigerReportError(Exception):
    """Base exception for all report builder errors."""


class ResolutionError(GeigerReportError):
    """Raised when the compiled-file set or package metadata cannot be determined."""


class FinderError(GeigerReportError):
    """Raised when the workspace-wide unsafe-usage scan fails."""


class SerializationError(GeigerReportError):
    """Raised when a SafetyReport cannot be turned into an output document."""

    def __init__(self, message: str, output_format: str | None = None):
        self.output_format = output_format
        super().__init__(message)
