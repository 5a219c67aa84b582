"""
Utility functions for ct-tools.
"""

from .io import safe_read_json, safe_write_json
from .spaces import next_space_name, today_space_name, suggest_spaces
from .text import short_path, format_time_since, shorten_home

__all__ = [
    # I/O utilities
    'safe_read_json',
    'safe_write_json',
    # Space names
    'next_space_name',
    'today_space_name',
    'suggest_spaces',
    # Display helpers
    'short_path',
    'format_time_since',
    'shorten_home',
]
