"""
Command implementations for ct-tools.
"""

from .launch import LaunchCommand
from .sync import InitCommand, StatusCommand, SyncCommand

__all__ = [
    'LaunchCommand',
    'InitCommand',
    'StatusCommand',
    'SyncCommand',
]
