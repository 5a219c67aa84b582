"""Apple sync commands: init, status and the per-source syncs."""

import importlib.util
import logging
from typing import Callable, Dict, List, Optional

from ..apple import (
    CalendarGateway,
    MessagesReader,
    NotesReader,
    RemindersGateway,
    generate_mock_events,
    generate_mock_messages,
    generate_mock_notes,
    generate_mock_reminders,
)
from ..apple.calendar import DEFAULT_DAYS_AHEAD, DEFAULT_DAYS_BACK
from ..charm import CharmClient
from ..core.config import save_sync_config
from ..core.exceptions import ConfigurationError
from ..core.models import LOCAL_API_URL, SourceName, SyncConfig, SyncState
from ..core.paths import PathManager, get_path_manager
from ..launcher.labs import labs_dir_for_sync
from ..sync.daemon import DEFAULT_INTERVAL, SyncDaemon
from ..sync.engine import LocalReader, SyncEngine
from ..utils.prompts import is_interactive, prompt as default_prompt
from ..utils.text import format_time_since

CHARM_ID_EXAMPLE = "baedreibive33kcfxiweainjam2anrs5jxwiem4qwnemlumlyjlz63qtn6i"


def build_readers(paths: PathManager, mock: bool = False,
                  days_back: int = DEFAULT_DAYS_BACK,
                  days_ahead: int = DEFAULT_DAYS_AHEAD,
                  seed: Optional[int] = None) -> Dict[SourceName, LocalReader]:
    """Local readers for every source; each takes the stored row cursor."""
    if mock:
        return {
            SourceName.MESSAGES: lambda cursor: generate_mock_messages(seed=seed),
            SourceName.CALENDAR: lambda cursor: generate_mock_events(seed=seed),
            SourceName.REMINDERS: lambda cursor: generate_mock_reminders(seed=seed),
            SourceName.NOTES: lambda cursor: generate_mock_notes(seed=seed),
        }

    return {
        SourceName.MESSAGES: lambda cursor: MessagesReader(paths.messages_db_path).read_since(cursor or 0),
        SourceName.CALENDAR: lambda cursor: CalendarGateway().get_events(days_back=days_back, days_ahead=days_ahead),
        SourceName.REMINDERS: lambda cursor: RemindersGateway().get_reminders(),
        SourceName.NOTES: lambda cursor: NotesReader().get_notes(),
    }


class InitCommand:
    """One-time interactive configuration of space, API URL and charm IDs."""

    def __init__(self, config: SyncConfig, config_path: str,
                 prompt: Callable[..., str] = default_prompt, verbose: bool = False):
        self.config = config
        self.config_path = config_path
        self.prompt = prompt
        self.verbose = verbose
        self.logger = logging.getLogger(__name__)

    def run(self) -> bool:
        print("\n🍎 Apple Sync Configuration\n")

        space = self.prompt("Enter your space name", self.config.space or "")
        if not space:
            print("❌ Space name is required")
            return False

        api_url = self.prompt("API URL", self.config.api_url or LOCAL_API_URL)

        print("\nCharm IDs (leave blank to keep the current value):")
        print("  Deploy a viewer pattern first, then copy its charm ID here.")
        print(f"  Example: {CHARM_ID_EXAMPLE}\n")

        for source in SourceName:
            charm_id = self.prompt(f"  {source.label} viewer charm ID", self.config.charm_for(source) or "")
            self.config.set_charm(source, charm_id.strip() or None)

        self.config.space = space
        self.config.api_url = api_url

        if not save_sync_config(self.config, self.config_path):
            print(f"❌ Failed to save configuration to {self.config_path}")
            return False

        print(f"\n✅ Configuration saved to {self.config_path}")
        print(f"   Space: {space}")
        print(f"   API: {api_url}")
        for source in SourceName:
            charm_id = self.config.charm_for(source)
            if charm_id:
                print(f"   {source.label} charm: {charm_id}")
        print("")
        return True


class StatusCommand:
    """Show configuration, cursors and data source availability. Read-only."""

    def __init__(self, config: SyncConfig, state: SyncState,
                 paths: Optional[PathManager] = None, verbose: bool = False):
        self.config = config
        self.state = state
        self.paths = paths or get_path_manager()
        self.verbose = verbose

    def run(self) -> bool:
        print("\n🍎 Apple Sync Status\n")

        print("Configuration:")
        print(f"  Space: {self.config.space or '(not set)'}")
        print(f"  API URL: {self.config.api_url or '(not set)'}")
        print(f"  Labs Dir: {self.config.labs_dir or self.paths.default_labs_dir}")

        print("\nCharm IDs:")
        for source in SourceName:
            print(f"  {source.label}: {self.config.charm_for(source) or '(not set)'}")

        print("\nSync State:")
        for source in SourceName:
            source_state = self.state.peek(source)
            if source_state and source_state.last_sync_time:
                when = format_time_since(source_state.last_sync_time)
                print(f"  {source.label}: Last synced {source_state.last_sync_time} ({when})")
                if source_state.last_row_id is not None:
                    print(f"            Last Row ID: {source_state.last_row_id}")
            else:
                print(f"  {source.label}: Never synced")

        print("\nData Sources:")
        self._report_path("iMessage", self.paths.messages_db_path)

        calendar_db = next((p for p in self.paths.calendar_db_candidates if p.exists()), None)
        if calendar_db:
            print(f"  ✅ Calendar: {calendar_db}")
        else:
            print("  ❌ Calendar: Not found (checked both legacy and modern paths)")

        self._report_path("Notes", self.paths.notes_db_path)

        if importlib.util.find_spec("EventKit") is not None:
            print("  ✅ EventKit: PyObjC installed")
        else:
            print("  ❌ EventKit: PyObjC not installed (pip install 'ct-tools[macos]')")

        print("")
        return True

    @staticmethod
    def _report_path(label: str, path) -> None:
        if path.exists():
            print(f"  ✅ {label}: {path}")
        else:
            print(f"  ❌ {label}: {path} (not found or no access)")


class SyncCommand:
    """Sync one or more sources, once or in daemon mode."""

    def __init__(self, config: SyncConfig, config_path: str, state_path: str,
                 paths: Optional[PathManager] = None, verbose: bool = False,
                 prompt: Callable[..., str] = default_prompt,
                 client_factory: Optional[Callable[..., CharmClient]] = None,
                 readers: Optional[Dict[SourceName, LocalReader]] = None):
        self.config = config
        self.config_path = config_path
        self.state_path = state_path
        self.paths = paths or get_path_manager()
        self.verbose = verbose
        self.prompt = prompt
        self.client_factory = client_factory or CharmClient
        self.readers = readers
        self.logger = logging.getLogger(__name__)

    def ensure_configured(self, space_override: Optional[str] = None) -> bool:
        """Run the one-time init flow when no space is configured."""
        if self.config.is_configured or space_override:
            return True

        if not is_interactive():
            print("❌ No space configured. Run 'ct-apple-sync init' first.")
            return False

        print("⚙️  No sync configuration found - let's set it up first.")
        return InitCommand(self.config, self.config_path, prompt=self.prompt,
                           verbose=self.verbose).run()

    def _effective_config(self, space: Optional[str], api_url: Optional[str]) -> SyncConfig:
        effective = SyncConfig.from_dict(self.config.to_dict())
        if space:
            effective.space = space
        if api_url:
            effective.api_url = api_url
        return effective

    def _build_engine(self, config: SyncConfig, mock: bool, charm_override: Optional[str],
                      days_back: int) -> SyncEngine:
        labs_dir = labs_dir_for_sync(config.labs_dir, str(self.paths.default_labs_dir))
        client = self.client_factory(
            labs_dir=labs_dir,
            identity_path=str(self.paths.identity_path),
            api_url=config.effective_api_url,
            space=config.space,
        )
        state = SyncState.load_from_file(self.state_path)
        readers = self.readers or build_readers(self.paths, mock=mock, days_back=days_back)
        return SyncEngine(
            config=config,
            state=state,
            client=client,
            readers=readers,
            mock=mock,
            charm_override=charm_override,
            save_state=lambda s: s.save_to_file(self.state_path),
            logger=self.logger,
        )

    def run(self, sources: List[SourceName], mock: bool = False,
            charm_override: Optional[str] = None, space: Optional[str] = None,
            api_url: Optional[str] = None, days_back: int = DEFAULT_DAYS_BACK,
            daemon: bool = False, interval: int = DEFAULT_INTERVAL) -> bool:
        if not self.ensure_configured(space):
            return False

        if charm_override and len(sources) > 1:
            print("⚠️  --charm applies to a single source; ignoring it for a multi-source sync.")
            charm_override = None

        config = self._effective_config(space, api_url)

        def cycle() -> bool:
            engine = self._build_engine(config, mock, charm_override, days_back)
            return engine.run_sources(sources)

        if daemon:
            # Configuration problems won't fix themselves between cycles
            labs_dir_for_sync(config.labs_dir, str(self.paths.default_labs_dir))
            return SyncDaemon(cycle, interval=interval, logger=self.logger).run() == 0

        try:
            return cycle()
        except ConfigurationError as e:
            print(f"❌ {e}")
            if e.hint:
                print(f"   {e.hint}")
            return False
