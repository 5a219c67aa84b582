"""
Tests for persisted launcher/sync documents (ct_tools/core/models.py, config.py, utils/io.py).
"""

import json
import os

from ct_tools.core.config import (
    load_launcher_config,
    load_sync_config,
    load_sync_state,
    save_launcher_config,
    save_sync_config,
    save_sync_state,
)
from ct_tools.core.models import (
    DeploymentTarget,
    LauncherConfig,
    PatternRecord,
    SourceName,
    SourceState,
    SyncConfig,
    SyncState,
)
from ct_tools.utils.io import safe_read_json, safe_write_json


def create_corrupted_json_file(file_path: str) -> None:
    with open(file_path, 'w') as f:
        f.write('{"incomplete": "json file without closing brace"')


class TestLauncherConfig:
    """Launcher history document."""

    def test_missing_file_gives_defaults(self, temp_dir):
        config = load_launcher_config(os.path.join(temp_dir, ".launcher-history"))
        assert config == LauncherConfig()
        assert config.patterns == []

    def test_corrupt_file_gives_defaults(self, temp_dir):
        path = os.path.join(temp_dir, ".launcher-history")
        create_corrupted_json_file(path)
        assert load_launcher_config(path) == LauncherConfig()

    def test_legacy_last_space_migrates_to_local(self):
        config = LauncherConfig.from_dict({"lastSpace": "alex-1119-1", "patterns": []})
        assert config.last_space_local == "alex-1119-1"
        assert config.last_space_prod is None
        assert "lastSpace" not in config.to_dict()

    def test_legacy_last_space_does_not_override_local(self):
        config = LauncherConfig.from_dict({"lastSpace": "old", "lastSpaceLocal": "new"})
        assert config.last_space_local == "new"

    def test_prod_target_spelling(self):
        assert LauncherConfig.from_dict({"lastDeploymentTarget": "prod"}).last_deployment_target \
            is DeploymentTarget.PRODUCTION
        assert LauncherConfig.from_dict({"lastDeploymentTarget": "nonsense"}).last_deployment_target is None

    def test_invalid_pattern_entries_dropped(self):
        config = LauncherConfig.from_dict({
            "patterns": [{"path": "/a.tsx", "lastUsed": "2025-01-01T00:00:00Z"}, {"nopath": 1}, "junk"],
        })
        assert config.patterns == [PatternRecord(path="/a.tsx", last_used="2025-01-01T00:00:00Z")]

    def test_save_and_reload(self, temp_dir):
        path = os.path.join(temp_dir, "nested", ".launcher-history")
        config = LauncherConfig(
            last_space_prod="demo-1201-1",
            last_deployment_target=DeploymentTarget.PRODUCTION,
            patterns=[PatternRecord(path="/p/foo.tsx", last_used="2025-12-01T10:00:00Z")],
        )

        assert save_launcher_config(config, path)
        with open(path, encoding="utf-8") as f:
            raw = json.load(f)

        assert raw["lastDeploymentTarget"] == "production"
        assert raw["lastSpaceProd"] == "demo-1201-1"
        assert raw["patterns"] == [{"path": "/p/foo.tsx", "lastUsed": "2025-12-01T10:00:00Z"}]
        assert load_launcher_config(path) == config

    def test_spaces_are_per_target(self):
        config = LauncherConfig()
        config.set_last_space(DeploymentTarget.LOCAL, "local-1")
        config.set_last_space(DeploymentTarget.PRODUCTION, "prod-1")
        assert config.last_space_for(DeploymentTarget.LOCAL) == "local-1"
        assert config.last_space_for(DeploymentTarget.PRODUCTION) == "prod-1"


class TestSyncDocuments:
    """Sync configuration and cursor state."""

    def test_imessage_charm_key_migrates(self):
        config = SyncConfig.from_dict({"space": "s", "charms": {"imessage": "baed1"}})
        assert config.charm_for(SourceName.MESSAGES) == "baed1"

    def test_effective_api_url_default(self):
        assert SyncConfig().effective_api_url == "http://localhost:8000"
        assert not SyncConfig().is_configured

    def test_missing_sync_config(self, temp_dir):
        assert load_sync_config(os.path.join(temp_dir, "missing")) == SyncConfig()

    def test_sync_config_save_and_reload(self, temp_dir):
        path = os.path.join(temp_dir, ".apple-sync-config")
        config = SyncConfig(space="alex-1119-1", api_url="http://localhost:8000")
        config.set_charm(SourceName.NOTES, "baed-notes")

        assert save_sync_config(config, path)
        reloaded = load_sync_config(path)

        assert reloaded.space == "alex-1119-1"
        assert reloaded.charm_for(SourceName.NOTES) == "baed-notes"
        assert reloaded.charm_for(SourceName.MESSAGES) is None

    def test_sync_config_default_path(self, path_manager):
        assert save_sync_config(SyncConfig(space="s"))
        assert safe_read_json(str(path_manager.sync_config_path))["space"] == "s"
        assert load_sync_config().space == "s"

    def test_state_round_trip(self, temp_dir):
        path = os.path.join(temp_dir, ".apple-sync-state")
        state = SyncState()
        state.get(SourceName.MESSAGES).advance_row_id(42)
        state.get(SourceName.CALENDAR).last_sync_time = "2025-01-01T00:00:00Z"

        assert save_sync_state(state, path)
        reloaded = load_sync_state(path)

        assert reloaded.peek(SourceName.MESSAGES).last_row_id == 42
        assert reloaded.peek(SourceName.CALENDAR).last_sync_time == "2025-01-01T00:00:00Z"
        assert reloaded.peek(SourceName.NOTES) is None

    def test_legacy_imessage_state_key(self):
        state = SyncState.from_dict({"imessage": {"lastRowId": 7}})
        assert state.peek(SourceName.MESSAGES).last_row_id == 7

    def test_cursor_never_moves_backwards(self):
        source_state = SourceState(last_row_id=100)
        assert source_state.advance_row_id(50) == 100
        assert source_state.advance_row_id(150) == 150

    def test_non_integer_row_id_ignored(self):
        assert SourceState.from_dict({"lastRowId": "12"}).last_row_id is None
        assert SourceState.from_dict({"lastRowId": True}).last_row_id is None


class TestSafeJson:
    """Atomic JSON writes."""

    def test_write_leaves_no_temp_files(self, temp_dir):
        path = os.path.join(temp_dir, "doc.json")
        assert safe_write_json(path, {"a": 1})
        assert safe_read_json(path) == {"a": 1}
        assert os.listdir(temp_dir) == ["doc.json"]

    def test_unserializable_data_keeps_previous_file(self, temp_dir):
        path = os.path.join(temp_dir, "doc.json")
        safe_write_json(path, {"a": 1})

        assert not safe_write_json(path, {"bad": object()})
        assert safe_read_json(path) == {"a": 1}
        assert os.listdir(temp_dir) == ["doc.json"]

    def test_read_default(self, temp_dir):
        assert safe_read_json(os.path.join(temp_dir, "nope.json"), default={}) == {}
