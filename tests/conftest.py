#!/usr/bin/env python3
"""
Global pytest configuration and fixtures.

This module provides:
- Platform-specific test skipping (macOS/EventKit tests)
- Isolated tool roots so tests never touch real history or sync files
- Fake subprocess runners for the deno/ct and osascript calls
"""

import os
import platform
import shutil
import subprocess
import sys
import tempfile
from pathlib import Path
from typing import Generator, List

import pytest

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from ct_tools.core.paths import PathManager, set_path_manager

HAS_EVENTKIT = False

try:
    if platform.system() == "Darwin":
        import objc  # noqa: F401
        import EventKit  # noqa: F401
        HAS_EVENTKIT = True
except ImportError:
    pass


def pytest_configure(config):
    """Configure pytest environment."""
    config.addinivalue_line("markers", "macos: test requires the Darwin platform")
    config.addinivalue_line("markers", "eventkit: test requires EventKit framework")


def pytest_collection_modifyitems(config, items):
    """Skip macOS/EventKit tests where they cannot run."""
    skip_macos = pytest.mark.skip(reason="macOS tests require Darwin platform")
    skip_eventkit = pytest.mark.skip(reason="Test requires EventKit framework")

    for item in items:
        if "macos" in item.keywords and platform.system() != "Darwin":
            item.add_marker(skip_macos)

        if "eventkit" in item.keywords and not HAS_EVENTKIT:
            item.add_marker(skip_eventkit)


# Common test fixtures

@pytest.fixture
def temp_dir() -> Generator[str, None, None]:
    """Create a temporary directory for test isolation."""
    temp_path = tempfile.mkdtemp(prefix="ct_tools_test_")
    try:
        yield temp_path
    finally:
        shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def path_manager(temp_dir: str) -> Generator[PathManager, None, None]:
    """A PathManager rooted in a temp checkout with a sibling labs directory."""
    root = Path(temp_dir) / "community-patterns"
    (root / "patterns").mkdir(parents=True)
    (Path(temp_dir) / "labs").mkdir()

    manager = PathManager(root=root)
    set_path_manager(manager)
    try:
        yield manager
    finally:
        set_path_manager(None)


class FakeRunner:
    """Stands in for ``subprocess.run`` and records every call."""

    def __init__(self, returncode: int = 0, stdout: str = "", stderr: str = "", raises=None):
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr
        self.raises = raises
        self.calls: List[dict] = []

    def __call__(self, args, **kwargs):
        self.calls.append({"args": list(args), **kwargs})
        if self.raises is not None:
            raise self.raises
        return subprocess.CompletedProcess(args, self.returncode, self.stdout, self.stderr)

    @property
    def last_args(self) -> List[str]:
        return self.calls[-1]["args"]


@pytest.fixture
def fake_runner():
    """Factory for FakeRunner instances."""
    return FakeRunner


class ScriptedSelect:
    """Replays menu choices in order, recording each menu it was shown."""

    def __init__(self, *choices):
        self.choices = list(choices)
        self.menus = []

    def __call__(self, options, title=None):
        self.menus.append((title, [option.label for option in options], [option.value for option in options]))
        if not self.choices:
            raise AssertionError(f"Unexpected menu: {title}")
        choice = self.choices.pop(0)
        if callable(choice):
            return choice(options)
        return choice


class ScriptedPrompt:
    """Replays typed answers in order."""

    def __init__(self, *answers):
        self.answers = list(answers)
        self.asked = []

    def __call__(self, message, default=None):
        self.asked.append(message)
        if not self.answers:
            return default or ""
        return self.answers.pop(0)
