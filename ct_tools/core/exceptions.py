"""
Exception classes for ct-tools.
"""

from typing import Optional


class CtToolsError(Exception):
    """Base exception for all ct-tools errors.

    ``hint`` carries a remedy that the CLI prints inline with the error.
    """

    def __init__(self, message: str, hint: Optional[str] = None):
        super().__init__(message)
        self.hint = hint


class ConfigurationError(CtToolsError):
    """Raised when configuration is invalid or missing."""
    pass


class DeploymentError(CtToolsError):
    """Raised when the deployment subprocess cannot be started."""
    pass


class CharmError(CtToolsError):
    """Raised when reading or writing a charm through the ct tool fails."""
    pass


class SourceError(CtToolsError):
    """Base exception for local Apple data source errors."""
    pass


class AuthorizationError(SourceError):
    """Raised when the OS denies access to a data source."""
    pass


class EventKitImportError(SourceError):
    """Raised when EventKit/PyObjC dependencies are not available."""
    pass


class SyncError(CtToolsError):
    """Raised when a per-source sync fails."""
    pass
