"""
Safe JSON I/O with atomic writes.

State files have a single writer (one interactive user, one process), so
there is no locking here; writes go through a temp file and ``os.replace``
so a crash never leaves a half-written document behind.
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Optional, Union

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def safe_read_json(file_path: PathLike, default: Optional[Any] = None) -> Any:
    """
    Safely read JSON from file with error handling.

    Args:
        file_path: Path to JSON file
        default: Value to return if the file doesn't exist or is invalid

    Returns:
        Parsed JSON data or default value
    """
    path_obj = Path(os.path.expanduser(str(file_path)))

    if not path_obj.exists():
        return default

    try:
        with path_obj.open('r', encoding='utf-8') as handle:
            return json.load(handle)
    except (json.JSONDecodeError, UnicodeDecodeError, OSError) as exc:
        logger.warning("Failed to read %s: %s", path_obj, exc)
        return default


def safe_write_json(file_path: PathLike, data: Any, indent: int = 2) -> bool:
    """
    Write JSON to file atomically.

    Args:
        file_path: Path to write to
        data: Data to write
        indent: JSON indentation level

    Returns:
        True if successful, False otherwise
    """
    path_obj = Path(os.path.expanduser(str(file_path)))
    path_obj.parent.mkdir(parents=True, exist_ok=True)

    tmp_path = None
    try:
        with tempfile.NamedTemporaryFile(
            mode='w',
            dir=str(path_obj.parent),
            prefix='.tmp_',
            suffix='.json',
            delete=False,
            encoding='utf-8'
        ) as tmp_file:
            tmp_path = Path(tmp_file.name)
            json.dump(data, tmp_file, indent=indent, ensure_ascii=False)
            tmp_file.write("\n")

        os.replace(str(tmp_path), str(path_obj))
        return True

    except (OSError, TypeError, ValueError) as exc:
        logger.error("Error writing to %s: %s", path_obj, exc)
    finally:
        if tmp_path and tmp_path.exists():
            try:
                tmp_path.unlink()
            except OSError:
                pass

    return False
