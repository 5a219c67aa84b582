"""
Tests for the Notes reader and osascript helper (ct_tools/apple/notes.py, utils/macos.py).
"""

import subprocess

import pytest

from ct_tools.apple.notes import FIELD_SEPARATOR as FS, RECORD_SEPARATOR as RS, NotesReader, parse_notes_output
from ct_tools.core.exceptions import AuthorizationError, SourceError
from ct_tools.utils.macos import run_osascript


def record(*fields):
    return FS.join(fields) + RS


class TestParseNotesOutput:

    def test_parses_records(self):
        output = (
            record("x-coredata://1", "Groceries", "Personal", "2025-01-15T10:30:00+00:00",
                   "2025-01-16T08:00:00+00:00", "milk\neggs")
            + record("x-coredata://2", "", "", "", "", "")
        )

        notes = parse_notes_output(output)

        assert len(notes) == 2
        first = notes[0].to_dict()
        assert first["id"] == "x-coredata://1"
        assert first["title"] == "Groceries"
        assert first["body"] == "milk\neggs"
        assert first["folder"] == "Personal"
        assert first["createdAt"] == "2025-01-15T10:30:00Z"
        assert first["modifiedAt"] == "2025-01-16T08:00:00Z"

        second = notes[1]
        assert second.title == "Untitled"
        assert second.folder == "Notes"
        assert second.created_at is None

    def test_body_containing_separator_is_kept(self):
        output = record("id1", "T", "F", "", "", "a", "b")
        assert parse_notes_output(output)[0].body == f"a{FS}b"

    def test_malformed_records_skipped(self):
        output = "garbage" + RS + record("", "T", "F", "", "", "body") + record("id", "T")
        assert parse_notes_output(output) == []

    def test_empty_output(self):
        assert parse_notes_output("") == []


class TestNotesReader:

    def test_runs_osascript(self, fake_runner):
        runner = fake_runner(stdout=record("id1", "Hello", "Notes", "", "", "body"))
        notes = NotesReader(runner=runner).get_notes()

        assert [n.note_id for n in notes] == ["id1"]
        assert runner.last_args[:2] == ["osascript", "-e"]


class TestRunOsascript:

    def test_not_authorized(self, fake_runner):
        runner = fake_runner(returncode=1, stderr="execution error: Not authorized to send Apple events to Notes. (-1743)")
        with pytest.raises(AuthorizationError) as exc_info:
            run_osascript("tell app", runner=runner)
        assert "Automation" in exc_info.value.hint

    def test_script_error(self, fake_runner):
        with pytest.raises(SourceError, match="AppleScript error"):
            run_osascript("bad", runner=fake_runner(returncode=1, stderr="syntax error"))

    def test_missing_osascript(self, fake_runner):
        with pytest.raises(SourceError, match="requires macOS"):
            run_osascript("x", runner=fake_runner(raises=FileNotFoundError("osascript")))

    def test_timeout(self, fake_runner):
        runner = fake_runner(raises=subprocess.TimeoutExpired(["osascript"], 5))
        with pytest.raises(SourceError, match="timed out"):
            run_osascript("x", timeout=5, runner=runner)
