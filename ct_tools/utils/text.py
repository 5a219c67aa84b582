"""
Display helpers for paths and timestamps.
"""

import os
from datetime import datetime, timezone
from typing import Optional

REPO_MARKERS = ("labs", "recipes")
REPO_PREFIX = "community-patterns"


def short_path(absolute_path: str) -> str:
    """
    Label a pattern path by file name plus repo/user context.

    ``/Users/alex/Code/community-patterns/patterns/jkomoros/WIP/cozy-poll.tsx``
    becomes ``cozy-poll.tsx  (community-patterns/jkomoros/WIP)``. Paths that
    don't follow the ``<repo>/patterns/<user>/`` layout are shown by name only.
    """
    parts = absolute_path.split("/")
    filename = parts[-1]

    repo_index = -1
    for index in range(len(parts) - 1, -1, -1):
        part = parts[index]
        if part in REPO_MARKERS or part.startswith(REPO_PREFIX):
            repo_index = index
            break

    if repo_index == -1:
        return filename

    try:
        patterns_index = parts.index("patterns", repo_index)
    except ValueError:
        return filename
    if patterns_index + 1 >= len(parts) - 1:
        return filename

    tags = [parts[repo_index], parts[patterns_index + 1]]
    if "WIP" in parts:
        tags.append("WIP")

    return f"{filename}  ({'/'.join(tags)})"


def format_time_since(timestamp: Optional[str], now: Optional[datetime] = None) -> str:
    """Render an ISO timestamp as ``just now``, ``5 min ago``, ``yesterday``..."""
    if not timestamp:
        return "never"
    try:
        then = datetime.fromisoformat(timestamp.replace("Z", "+00:00"))
    except ValueError:
        return "unknown"
    if then.tzinfo is None:
        then = then.replace(tzinfo=timezone.utc)

    now = now or datetime.now(timezone.utc)
    minutes = int((now - then).total_seconds() // 60)
    hours = minutes // 60
    days = hours // 24

    if minutes < 1:
        return "just now"
    if minutes < 60:
        return f"{minutes} min ago"
    if hours < 24:
        return f"{hours} hour{'s' if hours > 1 else ''} ago"
    if days == 1:
        return "yesterday"
    return f"{days} days ago"


def shorten_home(path: str) -> str:
    """Replace the home directory prefix with ``~``."""
    home = os.path.expanduser("~")
    if home and path.startswith(home):
        return "~" + path[len(home):]
    return path


def preview(text: Optional[str], width: int = 40) -> str:
    if not text:
        return "(no text)"
    flat = " ".join(text.split())
    return flat[:width]
