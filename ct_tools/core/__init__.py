"""
Core module for ct-tools - contains domain models, configuration, and exceptions.
"""

from .models import (
    DeploymentTarget,
    SourceName,
    PatternRecord,
    LauncherConfig,
    SyncConfig,
    SyncState,
    SourceState,
    Message,
    CalendarEvent,
    Reminder,
    Note,
)

from .exceptions import (
    CtToolsError,
    ConfigurationError,
    DeploymentError,
    CharmError,
    SourceError,
    AuthorizationError,
    EventKitImportError,
    SyncError,
)

__all__ = [
    # Models
    'DeploymentTarget',
    'SourceName',
    'PatternRecord',
    'LauncherConfig',
    'SyncConfig',
    'SyncState',
    'SourceState',
    'Message',
    'CalendarEvent',
    'Reminder',
    'Note',
    # Exceptions
    'CtToolsError',
    'ConfigurationError',
    'DeploymentError',
    'CharmError',
    'SourceError',
    'AuthorizationError',
    'EventKitImportError',
    'SyncError',
]
