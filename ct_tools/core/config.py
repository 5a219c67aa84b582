"""
Configuration management for ct-tools.

Every loader returns structurally valid defaults when its file is missing
or corrupt; savers overwrite the whole document.
"""

from typing import Optional

from .models import LauncherConfig, SyncConfig, SyncState
from .paths import get_path_manager


def get_launcher_history_path() -> str:
    """Get the default launcher history file path."""
    return str(get_path_manager().launcher_history_path)


def get_sync_config_path() -> str:
    """Get the default Apple sync configuration file path."""
    return str(get_path_manager().sync_config_path)


def get_sync_state_path() -> str:
    """Get the default Apple sync state file path."""
    return str(get_path_manager().sync_state_path)


def load_launcher_config(config_path: Optional[str] = None) -> LauncherConfig:
    """
    Load launcher configuration from file or return defaults.

    Args:
        config_path: Optional path to the history file. Uses default if not provided.

    Returns:
        LauncherConfig object
    """
    return LauncherConfig.load_from_file(config_path or get_launcher_history_path())


def save_launcher_config(config: LauncherConfig, config_path: Optional[str] = None) -> bool:
    """Save launcher configuration, returning False if the write failed."""
    return config.save_to_file(config_path or get_launcher_history_path())


def load_sync_config(config_path: Optional[str] = None) -> SyncConfig:
    return SyncConfig.load_from_file(config_path or get_sync_config_path())


def save_sync_config(config: SyncConfig, config_path: Optional[str] = None) -> bool:
    """Save the Apple sync configuration, returning False if the write failed."""
    return config.save_to_file(config_path or get_sync_config_path())


def load_sync_state(state_path: Optional[str] = None) -> SyncState:
    return SyncState.load_from_file(state_path or get_sync_state_path())


def save_sync_state(state: SyncState, state_path: Optional[str] = None) -> bool:
    return state.save_to_file(state_path or get_sync_state_path())
