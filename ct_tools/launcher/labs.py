"""Locating the labs checkout that provides the ``ct`` tool."""

import logging
import os
from typing import Callable, Optional, Tuple

from ..core.exceptions import ConfigurationError
from ..core.models import LauncherConfig
from ..utils.prompts import prompt as default_prompt

logger = logging.getLogger(__name__)


def resolve_labs_dir(config: LauncherConfig, default_dir: str,
                     prompt: Callable[..., str] = default_prompt) -> Tuple[str, bool]:
    """
    Find the labs directory.

    Order: the cached ``labsDir`` from the config, the default sibling
    checkout, then a prompt. Returns ``(path, prompted)`` so the caller can
    cache a directory the user typed in.

    Raises:
        ConfigurationError: the entered path is missing or not a directory
    """
    if config.labs_dir:
        return config.labs_dir, False

    if os.path.isdir(default_dir):
        return default_dir, False

    print("\n⚠️  Could not find labs directory at default location:")
    print(f"   {default_dir}")
    print("\nPlease enter the path to your labs repository:")

    entered = os.path.expanduser(prompt("Labs directory path").strip())
    if not entered or not os.path.exists(entered):
        raise ConfigurationError("Directory not found", hint=f"Clone labs next to this repo ({default_dir}).")
    if not os.path.isdir(entered):
        raise ConfigurationError("Not a directory")

    logger.debug("Using labs directory %s", entered)
    return os.path.abspath(entered), True


def labs_dir_for_sync(configured: Optional[str], default_dir: str) -> str:
    """Labs directory for the sync tool; it never prompts."""
    labs_dir = configured or default_dir
    if not os.path.isdir(labs_dir):
        raise ConfigurationError(
            f"Labs directory not found: {labs_dir}",
            hint="Set labsDir in .apple-sync-config or clone labs next to this repo.",
        )
    return labs_dir
