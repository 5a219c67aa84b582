"""
Tests for the launcher maintenance actions (ct_tools/launcher/actions.py).
"""

from pathlib import Path

import pytest

from ct_tools.launcher.actions import CLEAR_LLM_CACHE, FINAL_CONFIRMATION, SQLITE_CACHE_DIR, OtherActions
from tests.conftest import FakeRunner, ScriptedPrompt, ScriptedSelect


@pytest.fixture
def labs(temp_dir):
    sqlite_dir = Path(temp_dir) / SQLITE_CACHE_DIR
    sqlite_dir.mkdir(parents=True)
    for name in ("space-a.sqlite", "space-b.sqlite", "keep.txt"):
        (sqlite_dir / name).write_text("")
    return Path(temp_dir)


class TestClearLlmCache:

    def test_runs_cache_clear_in_labs(self, labs):
        runner = FakeRunner()
        actions = OtherActions(str(labs), select=ScriptedSelect(CLEAR_LLM_CACHE),
                               prompt=ScriptedPrompt("yes"), runner=runner)

        assert actions.run() is True
        assert runner.last_args == ["deno", "task", "ct", "cache", "clear"]
        assert runner.calls[0]["cwd"] == str(labs)

    def test_confirmation_ignores_case(self, labs):
        runner = FakeRunner()
        actions = OtherActions(str(labs), prompt=ScriptedPrompt("YES"), runner=runner)

        assert actions.clear_llm_cache() is True
        assert len(runner.calls) == 1

    def test_requires_confirmation(self, labs):
        runner = FakeRunner()
        actions = OtherActions(str(labs), prompt=ScriptedPrompt("no"), runner=runner)

        assert actions.clear_llm_cache() is False
        assert runner.calls == []


class TestClearSqliteDatabase:

    def test_deletes_only_sqlite_files(self, labs, capsys):
        actions = OtherActions(str(labs), prompt=ScriptedPrompt("DELETE", FINAL_CONFIRMATION))

        assert actions.clear_sqlite_database() is True
        remaining = sorted(p.name for p in (labs / SQLITE_CACHE_DIR).iterdir())
        assert remaining == ["keep.txt"]
        assert "Deleted 2 SQLite database files" in capsys.readouterr().out

    @pytest.mark.parametrize("answers", [("delete",), ("DELETE", "yes")])
    def test_both_confirmations_required(self, labs, answers):
        actions = OtherActions(str(labs), prompt=ScriptedPrompt(*answers))

        assert actions.clear_sqlite_database() is False
        assert len(list((labs / SQLITE_CACHE_DIR).glob("*.sqlite"))) == 2

    def test_nothing_to_delete(self, temp_dir, capsys):
        actions = OtherActions(temp_dir, prompt=ScriptedPrompt("DELETE", FINAL_CONFIRMATION))
        assert actions.clear_sqlite_database() is False
        assert "No SQLite database files found" in capsys.readouterr().out


def test_back_does_nothing(labs):
    assert OtherActions(str(labs), select=ScriptedSelect("back")).run() is False
