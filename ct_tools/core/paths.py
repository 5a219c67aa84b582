"""
Centralized path management for ct-tools.

All launcher and sync state lives next to the tool checkout so that it
travels with the patterns repository it belongs to.
"""

import os
import sys
from pathlib import Path
from typing import Optional
import logging


class PathManager:
    """Resolves ct-tools file locations relative to the tool root."""

    # Environment override for the tool root
    HOME_ENV = "CT_TOOLS_HOME"

    # File names
    LAUNCHER_HISTORY_FILE = ".launcher-history"
    SYNC_CONFIG_FILE = ".apple-sync-config"
    SYNC_STATE_FILE = ".apple-sync-state"
    IDENTITY_FILE = "claude.key"

    # Apple data locations, relative to the user's home
    MESSAGES_DB = "Library/Messages/chat.db"
    CALENDAR_DB_LEGACY = "Library/Calendars/Calendar.sqlitedb"
    CALENDAR_DB_MODERN = "Library/Group Containers/group.com.apple.calendar/Calendar.sqlitedb"
    NOTES_DB = "Library/Group Containers/group.com.apple.notes/NoteStore.sqlite"

    def __init__(self, root: Optional[Path] = None, logger: Optional[logging.Logger] = None):
        """Initialize path manager."""
        self.logger = logger or logging.getLogger(__name__)
        self._root = Path(root) if root else None

    @property
    def tool_root(self) -> Path:
        """Get the root directory of the ct-tools checkout."""
        if self._root is not None:
            return self._root

        # Priority 1: explicit override
        override = os.environ.get(self.HOME_ENV)
        if override:
            self._root = Path(override).expanduser().resolve()
            return self._root

        # Priority 2: the checkout containing the ct_tools package
        repo_root = self._find_repo_root()
        if repo_root:
            self._root = repo_root
            return self._root

        # Last resort: current working directory
        self._root = Path.cwd()
        return self._root

    def _find_repo_root(self) -> Optional[Path]:
        """Find the checkout root by looking for markers next to ct_tools."""
        try:
            import ct_tools
            candidate = Path(ct_tools.__file__).resolve().parent.parent
        except Exception:
            candidate = None

        if candidate is not None and self._looks_like_root(candidate):
            self.logger.debug(f"Found tool root via package location: {candidate}")
            return candidate

        # Check sys.argv[0] location
        if hasattr(sys, 'argv') and sys.argv and sys.argv[0]:
            current = Path(sys.argv[0]).resolve().parent
            for _ in range(5):
                if self._looks_like_root(current):
                    self.logger.debug(f"Found tool root via argv: {current}")
                    return current
                if current == current.parent:
                    break
                current = current.parent

        return None

    @staticmethod
    def _looks_like_root(path: Path) -> bool:
        return (path / "pyproject.toml").exists() or (path / "patterns").is_dir()

    # File path properties
    @property
    def launcher_history_path(self) -> Path:
        """Launcher config and pattern history."""
        return self.tool_root / self.LAUNCHER_HISTORY_FILE

    @property
    def sync_config_path(self) -> Path:
        """Apple sync configuration (space, API URL, charm IDs)."""
        return self.tool_root / self.SYNC_CONFIG_FILE

    @property
    def sync_state_path(self) -> Path:
        """Apple sync cursors."""
        return self.tool_root / self.SYNC_STATE_FILE

    @property
    def identity_path(self) -> Path:
        """Identity credential passed to the ct tool."""
        return self.tool_root / self.IDENTITY_FILE

    @property
    def default_labs_dir(self) -> Path:
        """Default location of the labs checkout (sibling of the tool root)."""
        return (self.tool_root.parent / "labs").resolve()

    @property
    def patterns_dir(self) -> Path:
        """Directory the pattern browser starts in."""
        return self.tool_root / "patterns"

    # Apple data sources
    @property
    def messages_db_path(self) -> Path:
        return Path.home() / self.MESSAGES_DB

    @property
    def calendar_db_candidates(self) -> list:
        return [Path.home() / self.CALENDAR_DB_MODERN, Path.home() / self.CALENDAR_DB_LEGACY]

    @property
    def notes_db_path(self) -> Path:
        return Path.home() / self.NOTES_DB


# Global instance
_path_manager: Optional[PathManager] = None


def get_path_manager() -> PathManager:
    """Get or create the global PathManager instance."""
    global _path_manager
    if _path_manager is None:
        _path_manager = PathManager()
    return _path_manager


def set_path_manager(manager: Optional[PathManager]) -> None:
    """Replace the global PathManager (used by tests and --root overrides)."""
    global _path_manager
    _path_manager = manager
