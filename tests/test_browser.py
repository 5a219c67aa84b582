"""
Tests for the pattern file browser (ct_tools/launcher/browser.py).
"""

from pathlib import Path

import pytest

from ct_tools.core.models import LauncherConfig, PatternRecord
from ct_tools.launcher.browser import BROWSE, MANUAL, UP, PatternBrowser
from tests.conftest import ScriptedPrompt, ScriptedSelect


@pytest.fixture
def pattern_tree(temp_dir):
    """patterns/{alex/{counter.tsx, notes.md, WIP/}, .hidden/, Zeta/, about.tsx}"""
    root = Path(temp_dir) / "patterns"
    (root / "alex" / "WIP").mkdir(parents=True)
    (root / ".hidden").mkdir()
    (root / "Zeta").mkdir()
    (root / "alex" / "counter.tsx").write_text("export default {}")
    (root / "alex" / "notes.md").write_text("# notes")
    (root / "about.tsx").write_text("export default {}")
    (root / ".secret.tsx").write_text("")
    return root.resolve()


class TestListEntries:

    def test_directories_first_then_patterns(self, pattern_tree):
        entries = PatternBrowser().list_entries(pattern_tree)
        assert [(e.name, e.is_dir) for e in entries] == [
            ("alex", True),
            ("Zeta", True),
            ("about.tsx", False),
        ]

    def test_filters_by_extension(self, pattern_tree):
        names = [e.name for e in PatternBrowser().list_entries(pattern_tree / "alex")]
        assert names == ["WIP", "counter.tsx"]

    def test_unreadable_directory_raises(self, temp_dir):
        with pytest.raises(OSError):
            PatternBrowser().list_entries(Path(temp_dir) / "missing")


class TestNavigate:

    def test_descend_and_pick_file(self, pattern_tree):
        select = ScriptedSelect("alex", "counter.tsx")
        chosen = PatternBrowser(select=select).navigate(pattern_tree)

        assert chosen == pattern_tree / "alex" / "counter.tsx"
        first_menu_values = select.menus[0][2]
        assert first_menu_values[0] == UP
        assert first_menu_values[-1] == MANUAL

    def test_go_up(self, pattern_tree):
        select = ScriptedSelect(UP, "about.tsx")
        chosen = PatternBrowser(select=select).navigate(pattern_tree / "alex")
        assert chosen == pattern_tree / "about.tsx"

    def test_cancel_returns_none(self, pattern_tree):
        assert PatternBrowser(select=ScriptedSelect(None)).navigate(pattern_tree) is None

    def test_unreadable_start_returns_none(self, temp_dir, capsys):
        chosen = PatternBrowser(select=ScriptedSelect()).navigate(Path(temp_dir) / "missing")
        assert chosen is None
        assert "Cannot read directory" in capsys.readouterr().out

    def test_no_up_option_at_root(self):
        select = ScriptedSelect(None)
        PatternBrowser(select=select).navigate(Path("/"))
        assert UP not in select.menus[0][2]

    def test_manual_entry_from_menu(self, pattern_tree):
        target = pattern_tree / "about.tsx"
        browser = PatternBrowser(select=ScriptedSelect(MANUAL), prompt=ScriptedPrompt(str(target)))
        assert browser.navigate(pattern_tree) == target


class TestEnterPathManually:

    def test_reprompts_until_valid(self, pattern_tree, capsys):
        prompt = ScriptedPrompt(
            str(pattern_tree / "nope.tsx"),
            str(pattern_tree / "alex"),
            str(pattern_tree / "alex" / "counter.tsx"),
        )
        chosen = PatternBrowser(prompt=prompt).enter_path_manually()

        out = capsys.readouterr().out
        assert "File not found" in out
        assert "Path is not a file" in out
        assert chosen == pattern_tree / "alex" / "counter.tsx"

    def test_wrong_extension_warns_but_accepts(self, pattern_tree, capsys):
        chosen = PatternBrowser(prompt=ScriptedPrompt(str(pattern_tree / "alex" / "notes.md"))).enter_path_manually()
        assert chosen == pattern_tree / "alex" / "notes.md"
        assert "Warning" in capsys.readouterr().out

    def test_blank_cancels(self):
        assert PatternBrowser(prompt=ScriptedPrompt("")).enter_path_manually() is None


class TestChooseStart:

    def test_recent_directory(self, pattern_tree):
        config = LauncherConfig(patterns=[
            PatternRecord(path=str(pattern_tree / "alex" / "counter.tsx"), last_used=""),
        ])
        select = ScriptedSelect(str(pattern_tree / "alex"), "counter.tsx")

        chosen = PatternBrowser(select=select).choose_start(config, pattern_tree)

        assert chosen == pattern_tree / "alex" / "counter.tsx"
        assert select.menus[0][2] == [str(pattern_tree / "alex"), BROWSE]

    def test_browse_from_patterns_dir(self, pattern_tree):
        select = ScriptedSelect(BROWSE, "about.tsx")
        chosen = PatternBrowser(select=select).choose_start(LauncherConfig(), pattern_tree)
        assert chosen == pattern_tree / "about.tsx"
