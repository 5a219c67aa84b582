"""
Pattern usage history.

The history is most-recently-used first, holds at most one record per
path and is capped at ``HISTORY_LIMIT`` entries.
"""

import os
from datetime import datetime, timezone
from typing import Callable, List, Optional

from ..core.models import LauncherConfig, PatternRecord, utc_iso

HISTORY_LIMIT = 50
RECENT_PATTERNS_SHOWN = 10
RECENT_DIRS_SHOWN = 10


def record_usage(config: LauncherConfig, pattern_path: str,
                 now: Optional[datetime] = None) -> LauncherConfig:
    """Move ``pattern_path`` to the front of the history with a fresh timestamp."""
    timestamp = utc_iso(now or datetime.now(timezone.utc))
    remaining = [record for record in config.patterns if record.path != pattern_path]
    remaining.insert(0, PatternRecord(path=pattern_path, last_used=timestamp))
    config.patterns = remaining[:HISTORY_LIMIT]
    return config


def cull_missing(config: LauncherConfig,
                 exists: Callable[[str], bool] = os.path.exists) -> int:
    """Drop history entries whose file is gone; returns how many were removed."""
    kept = [record for record in config.patterns if exists(record.path)]
    removed = len(config.patterns) - len(kept)
    config.patterns = kept
    return removed


def recent_patterns(config: LauncherConfig, limit: int = RECENT_PATTERNS_SHOWN) -> List[PatternRecord]:
    return config.patterns[:limit]


def recent_directories(config: LauncherConfig, limit: int = RECENT_DIRS_SHOWN) -> List[str]:
    """Unique parent directories of the history, most recent first."""
    seen: List[str] = []
    for record in config.patterns:
        directory = os.path.dirname(record.path)
        if directory and directory not in seen:
            seen.append(directory)
        if len(seen) >= limit:
            break
    return seen
