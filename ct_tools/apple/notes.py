"""Apple Notes reader driven through AppleScript."""

import logging
import subprocess
from datetime import datetime, timezone
from typing import Callable, List, Optional

from ..core.models import Note
from ..utils.macos import run_osascript

FIELD_SEPARATOR = "\x1f"
RECORD_SEPARATOR = "\x1e"
FIELD_COUNT = 6

# Dates come back as local ISO strings ("2025-01-15T10:30:00")
NOTES_SCRIPT = """
set fieldSep to ASCII character 31
set recordSep to ASCII character 30
set output to ""
tell application "Notes"
    repeat with theNote in every note
        set noteFolder to ""
        try
            set noteFolder to name of container of theNote
        end try
        set output to output & (id of theNote) & fieldSep & (name of theNote) & fieldSep & noteFolder & fieldSep & ((creation date of theNote) as «class isot» as string) & fieldSep & ((modification date of theNote) as «class isot» as string) & fieldSep & (plaintext of theNote) & recordSep
    end repeat
end tell
return output
"""


def _parse_local_iso(value: str) -> Optional[datetime]:
    value = (value or "").strip()
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.astimezone()
    return parsed.astimezone(timezone.utc)


def parse_notes_output(output: str) -> List[Note]:
    """Split osascript output into notes, skipping malformed records."""
    notes = []
    for record in output.split(RECORD_SEPARATOR):
        record = record.strip("\n")
        if not record:
            continue
        fields = record.split(FIELD_SEPARATOR)
        if len(fields) < FIELD_COUNT:
            continue
        note_id, title, folder, created, modified = fields[:5]
        # The body may itself contain separators; keep everything after the fifth field
        body = FIELD_SEPARATOR.join(fields[5:])
        if not note_id:
            continue
        notes.append(Note(
            note_id=note_id,
            title=title or "Untitled",
            body=body,
            folder=folder or "Notes",
            created_at=_parse_local_iso(created),
            modified_at=_parse_local_iso(modified),
        ))
    return notes


class NotesReader:
    """Full snapshot of Notes.app."""

    def __init__(self, runner: Callable[..., subprocess.CompletedProcess] = subprocess.run,
                 logger: Optional[logging.Logger] = None):
        self.runner = runner
        self.logger = logger or logging.getLogger(__name__)

    def get_notes(self) -> List[Note]:
        output = run_osascript(NOTES_SCRIPT, runner=self.runner)
        notes = parse_notes_output(output)
        self.logger.debug("Read %d notes", len(notes))
        return notes
