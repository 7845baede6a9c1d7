"""Scan error taxonomy.

InvalidScanRequest is raised before any browser session exists and maps to
HTTP 400. Everything that goes wrong after a session is opened is a
ScanFailure and maps to HTTP 500 ``scan_failed``.
"""


class ScanError(Exception):
    """Base class for every error the scanner raises on purpose."""


class InvalidScanRequest(ScanError):
    def __init__(self, message: str, error: str = "missing_url"):
        super().__init__(message)
        self.error = error
        self.message = message


class ScanFailure(ScanError):
    error = "scan_failed"


class SessionError(ScanFailure):
    """The browser session could not be opened."""


class NavigationError(ScanFailure):
    """The target was unreachable, timed out or rejected the load."""


class AnalysisError(ScanFailure):
    """axe or one of the DOM heuristics raised mid-scan."""
