"""Filesystem browser for picking a pattern file."""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional, Sequence

from ..core.models import LauncherConfig
from ..utils.prompts import prompt as default_prompt
from ..utils.terminal import SelectOption, interactive_select
from ..utils.text import shorten_home
from .history import recent_directories

PATTERN_EXTENSION = ".tsx"

UP = "__up__"
MANUAL = "__manual__"
BROWSE = "__browse__"

SelectFn = Callable[[Sequence[SelectOption], Optional[str]], Optional[str]]
PromptFn = Callable[..., str]


@dataclass
class DirEntry:
    """A directory or pattern file shown by the browser."""

    name: str
    is_dir: bool


class PatternBrowser:
    """Navigate directories showing only sub-directories and pattern files."""

    def __init__(self, select: SelectFn = interactive_select,
                 prompt: PromptFn = default_prompt,
                 extension: str = PATTERN_EXTENSION,
                 logger: Optional[logging.Logger] = None):
        self.select = select
        self.prompt = prompt
        self.extension = extension
        self.logger = logger or logging.getLogger(__name__)

    def list_entries(self, directory: Path) -> List[DirEntry]:
        """
        List directories and pattern files in ``directory``.

        Raises:
            OSError: the directory cannot be read
        """
        entries: List[DirEntry] = []
        with os.scandir(directory) as scan:
            for entry in scan:
                if entry.name.startswith("."):
                    continue
                try:
                    is_dir = entry.is_dir()
                    is_pattern = entry.is_file() and entry.name.endswith(self.extension)
                except OSError:
                    continue
                if is_dir or is_pattern:
                    entries.append(DirEntry(name=entry.name, is_dir=is_dir))

        # Directories first, then files, alphabetically
        entries.sort(key=lambda e: (not e.is_dir, e.name.lower(), e.name))
        return entries

    def choose_start(self, config: LauncherConfig, patterns_dir: Path) -> Optional[Path]:
        """Offer recently used folders before falling back to ``patterns_dir``."""
        options = [
            SelectOption(label=shorten_home(directory) + "/", value=directory, icon="📁 ")
            for directory in recent_directories(config)
        ]
        options.append(SelectOption(label="Browse from patterns/ directory...", value=BROWSE, icon="🔍 "))

        selection = self.select(
            options,
            "📂 Quick navigate to a recent folder, or browse:\n(↑/↓ to move, Enter to select, Q to cancel)",
        )
        if selection is None:
            return None
        if selection == BROWSE:
            return self.navigate(patterns_dir)
        return self.navigate(Path(selection))

    def navigate(self, start: Path) -> Optional[Path]:
        """Browse from ``start``; returns the chosen file or None if cancelled."""
        trail: List[Path] = [Path(start).expanduser().resolve()]

        while trail:
            current = trail[-1]
            try:
                entries = self.list_entries(current)
            except OSError as exc:
                print(f"❌ Cannot read directory: {exc}")
                self.logger.debug("Cannot list %s: %s", current, exc)
                trail.pop()
                continue

            options: List[SelectOption] = []
            if current.parent != current:
                options.append(SelectOption(label=".. (Go up one directory)", value=UP, icon="⬆️  "))
            for entry in entries:
                icon = "📁 " if entry.is_dir else "📄 "
                options.append(SelectOption(label=entry.name, value=entry.name, icon=icon))
            options.append(SelectOption(label="Enter absolute path manually...", value=MANUAL, icon="✏️  "))

            selection = self.select(options, f"📁 {current}/\n(↑/↓ to move, Enter to select, Q to cancel)")

            if selection is None:
                return None
            if selection == UP:
                trail.append(current.parent)
                continue
            if selection == MANUAL:
                return self.enter_path_manually()

            chosen = next((entry for entry in entries if entry.name == selection), None)
            if chosen is None:
                return None
            if chosen.is_dir:
                trail.append(current / chosen.name)
                continue
            return current / chosen.name

        return None

    def enter_path_manually(self) -> Optional[Path]:
        """Prompt for a path until it names an existing file; blank input cancels."""
        print(f"\n📁 Enter absolute path to pattern file:")
        while True:
            raw = self.prompt("Path").strip()
            if not raw:
                return None

            path = Path(raw).expanduser()
            if not path.exists():
                print("❌ File not found")
                continue
            if not path.is_file():
                print("❌ Path is not a file")
                continue
            if not path.name.endswith(self.extension):
                print(f"⚠️  Warning: File doesn't end with {self.extension}")
            return path.resolve()
