"""macOS-specific helpers."""

from __future__ import annotations

import logging
import platform
import subprocess
from typing import Optional

from ..core.exceptions import AuthorizationError, SourceError

logger = logging.getLogger(__name__)

OSASCRIPT_TIMEOUT = 120  # seconds; Notes.app can be slow with large libraries


def is_macos() -> bool:
    return platform.system() == "Darwin"


def set_process_name(name: str, log: Optional[logging.Logger] = None) -> bool:
    """Set the current process name on macOS when PyObjC is available."""
    log = log or logger
    if not is_macos():
        return False

    try:
        from Foundation import NSProcessInfo  # type: ignore
    except ImportError:
        log.debug("PyObjC not installed; cannot set process name")
        return False

    try:
        process_info = NSProcessInfo.processInfo()
        if process_info.processName() != name:
            process_info.setProcessName_(name)
        return True
    except Exception as exc:  # pragma: no cover - depends on PyObjC runtime
        log.warning("Failed to set process name: %s", exc)
        return False


def run_osascript(script: str, timeout: int = OSASCRIPT_TIMEOUT, runner=subprocess.run) -> str:
    """
    Run an AppleScript through ``osascript`` and return its stdout.

    Raises:
        AuthorizationError: the script was blocked by Automation privacy settings
        SourceError: osascript is missing, timed out, or the script failed
    """
    try:
        result = runner(
            ["osascript", "-e", script],
            capture_output=True,
            text=True,
            timeout=timeout,
        )
    except FileNotFoundError as exc:
        raise SourceError(
            "osascript not found - this data source requires macOS.",
            hint="Use --mock to test with sample data.",
        ) from exc
    except subprocess.TimeoutExpired as exc:
        raise SourceError(f"AppleScript timed out after {timeout} seconds.") from exc

    if result.returncode != 0:
        stderr = (result.stderr or "").strip()
        logger.debug("osascript failed (%s): %s", result.returncode, stderr)
        # -1743: "Not authorized to send Apple events"
        if "-1743" in stderr or "not authorized" in stderr.lower():
            raise AuthorizationError(
                f"AppleScript error: {stderr}",
                hint=(
                    "Grant automation access to your terminal:\n"
                    "   System Settings > Privacy & Security > Automation"
                ),
            )
        raise SourceError(f"AppleScript error: {stderr}")

    return result.stdout or ""
