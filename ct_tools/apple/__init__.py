"""
Readers for local Apple data: Messages, Calendar, Reminders and Notes.
"""

from .calendar import CalendarGateway
from .messages import MessagesReader
from .mock import (
    generate_mock_events,
    generate_mock_messages,
    generate_mock_notes,
    generate_mock_reminders,
)
from .notes import NotesReader
from .reminders import RemindersGateway

__all__ = [
    'CalendarGateway',
    'MessagesReader',
    'NotesReader',
    'RemindersGateway',
    'generate_mock_events',
    'generate_mock_messages',
    'generate_mock_notes',
    'generate_mock_reminders',
]
