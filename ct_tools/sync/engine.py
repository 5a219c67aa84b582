"""
Per-source sync orchestration.

Each source runs the same pipeline: read local records (incrementally for
messages, as a full snapshot otherwise), read the charm's current
collection, merge by identity, write the union back and only then advance
the persisted cursor.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Optional
import logging

from ..core.exceptions import CharmError, CtToolsError, SyncError
from ..core.models import SourceName, SyncConfig, SyncState, now_iso
from ..utils.text import preview
from .merge import collections_equal, merge_source

LocalReader = Callable[[Optional[int]], List[Any]]

SAMPLE_SIZE = 5

NOUNS = {
    SourceName.MESSAGES: "messages",
    SourceName.CALENDAR: "events",
    SourceName.REMINDERS: "reminders",
    SourceName.NOTES: "notes",
}


class SyncPhase(Enum):
    NOT_STARTED = "not_started"
    READING_LOCAL = "reading_local"
    NORMALIZING = "normalizing"
    READING_REMOTE = "reading_remote"
    MERGING = "merging"
    WRITING_REMOTE = "writing_remote"
    DONE = "done"
    FAILED = "failed"


@dataclass
class SourceSyncResult:
    """What one source sync did."""

    source: SourceName
    phase: SyncPhase
    message: str = ""
    read: int = 0
    added: int = 0
    updated: int = 0
    total: int = 0
    written: bool = False
    cursor: Optional[int] = None
    error: Optional[CtToolsError] = None
    failed_phase: Optional[SyncPhase] = None

    @property
    def success(self) -> bool:
        return self.phase is SyncPhase.DONE


def describe_record(source: SourceName, item: Dict[str, Any]) -> str:
    """One-line sample shown while syncing."""
    if source is SourceName.MESSAGES:
        direction = "→" if item.get("isFromMe") else "←"
        return f"{direction} {item.get('handleId')}: {preview(item.get('text'))}"
    if source is SourceName.CALENDAR:
        day = str(item.get("startDate") or "")[:10]
        return f"📅 {day}: {item.get('title')} ({item.get('calendarName')})"
    if source is SourceName.REMINDERS:
        box = "☑" if item.get("completed") else "☐"
        return f"{box} {item.get('title')} ({item.get('listName')})"
    return f"📝 {item.get('title')} ({item.get('folder')})"


class SourceSync:
    """Runs the sync pipeline for one source into one charm."""

    def __init__(self, source: SourceName, charm_id: str, client, state: SyncState,
                 reader: LocalReader, mock: bool = False,
                 save_state: Optional[Callable[[SyncState], bool]] = None,
                 logger: Optional[logging.Logger] = None):
        self.source = source
        self.charm_id = charm_id
        self.client = client
        self.state = state
        self.reader = reader
        self.mock = mock
        self.save_state = save_state
        self.logger = logger or logging.getLogger(__name__)
        self.phase = SyncPhase.NOT_STARTED

    def _enter(self, phase: SyncPhase) -> None:
        self.logger.debug("%s: %s -> %s", self.source.value, self.phase.value, phase.value)
        self.phase = phase

    def _fail(self, result: SourceSyncResult, error: CtToolsError) -> SourceSyncResult:
        result.failed_phase = self.phase
        self._enter(SyncPhase.FAILED)
        result.phase = SyncPhase.FAILED
        result.error = error
        result.message = str(error)
        return result

    def _done(self, result: SourceSyncResult, message: str) -> SourceSyncResult:
        self._enter(SyncPhase.DONE)
        result.phase = SyncPhase.DONE
        result.message = message
        return result

    @property
    def incremental(self) -> bool:
        return self.source is SourceName.MESSAGES

    def run(self) -> SourceSyncResult:
        noun = NOUNS[self.source]
        result = SourceSyncResult(source=self.source, phase=SyncPhase.NOT_STARTED)
        stored = self.state.peek(self.source)
        cursor = stored.last_row_id if stored and self.incremental else None
        result.cursor = cursor

        # 1. Local read
        self._enter(SyncPhase.READING_LOCAL)
        if self.mock:
            print(f"\n  Generating mock {noun}...")
        elif self.incremental:
            print(f"  Last synced row ID: {cursor or 0}")
            print(f"\n  Reading {noun}...")
        else:
            print(f"\n  Reading {noun}...")
        try:
            records = self.reader(cursor or 0)
        except CtToolsError as exc:
            return self._fail(result, exc)

        # 2. Normalize
        self._enter(SyncPhase.NORMALIZING)
        incoming = [record.to_dict() if hasattr(record, "to_dict") else dict(record) for record in records]
        result.read = len(incoming)
        label = "new " if self.incremental and not self.mock else ""
        print(f"  Found {len(incoming)} {label}{noun}")

        if not incoming:
            if self.incremental:
                return self._done(result, "Already up to date!")
            return self._done(result, f"No {noun} found.")

        print(f"\n  Sample {noun}:")
        for item in incoming[:SAMPLE_SIZE]:
            print(f"    {describe_record(self.source, item)}")
        if len(incoming) > SAMPLE_SIZE:
            print(f"    ... and {len(incoming) - SAMPLE_SIZE} more")

        # 3. Remote read; anything unreadable is treated as a first sync
        self._enter(SyncPhase.READING_REMOTE)
        print(f"\n  Reading existing {noun} from charm...")
        try:
            existing = self.client.read(self.charm_id, self.source.charm_path)
        except CharmError as exc:
            self.logger.debug("Remote read failed for %s: %s", self.charm_id, exc)
            existing = None
        if not isinstance(existing, list):
            existing = []
            print(f"  No existing {noun} (first sync)")
        else:
            print(f"  Found {len(existing)} existing {noun}")

        # 4. Merge
        self._enter(SyncPhase.MERGING)
        merged = merge_source(self.source, existing, incoming)
        result.added = merged.added
        result.updated = merged.updated
        result.total = len(merged.items)
        print(f"  Merged: {merged.added} new, {merged.updated} updated ({result.total} total)")

        max_row_id = None
        if self.incremental:
            row_ids = [item.get("rowId") for item in incoming if isinstance(item.get("rowId"), int)]
            max_row_id = max(row_ids) if row_ids else None

        if collections_equal(existing, merged.items):
            if self.incremental and not self.mock and max_row_id is not None:
                # The charm already holds these rows; move past them
                self._advance(result, max_row_id, touch_time=False)
            return self._done(result, f"Already up to date ({result.total} {noun})")

        # 5. Remote write
        self._enter(SyncPhase.WRITING_REMOTE)
        print("\n  Writing to charm...")
        try:
            self.client.write(self.charm_id, self.source.charm_path, merged.items)
        except CharmError as exc:
            return self._fail(result, SyncError(f"Error writing to charm: {exc}", hint=exc.hint))
        result.written = True
        print("  ✓ Written to charm")

        # 6. Cursor, only for authoritative runs
        if not self.mock:
            self._advance(result, max_row_id, touch_time=True)

        if self.incremental:
            message = f"Synced {merged.added} new {noun} ({result.total} total)"
        else:
            message = f"Synced {result.total} {noun}"
        return self._done(result, message)

    def _advance(self, result: SourceSyncResult, max_row_id: Optional[int], touch_time: bool) -> None:
        source_state = self.state.get(self.source)
        if max_row_id is not None:
            result.cursor = source_state.advance_row_id(max_row_id)
        if touch_time:
            source_state.last_sync_time = now_iso()
        if self.save_state is not None and not self.save_state(self.state):
            self.logger.warning("Failed to save sync state")


class SyncEngine:
    """Builds and runs source syncs from the sync configuration."""

    def __init__(self, config: SyncConfig, state: SyncState, client,
                 readers: Dict[SourceName, LocalReader], mock: bool = False,
                 charm_override: Optional[str] = None,
                 save_state: Optional[Callable[[SyncState], bool]] = None,
                 logger: Optional[logging.Logger] = None):
        self.config = config
        self.state = state
        self.client = client
        self.readers = readers
        self.mock = mock
        self.charm_override = charm_override
        self.save_state = save_state
        self.logger = logger or logging.getLogger(__name__)

    def charm_for(self, source: SourceName) -> Optional[str]:
        return self.charm_override or self.config.charm_for(source)

    def sync_source(self, source: SourceName) -> SourceSyncResult:
        print(f"\n{source.icon} Syncing {source.label}...\n")

        charm_id = self.charm_for(source)
        if not charm_id:
            error = SyncError(
                f"No {source.label} charm ID configured.",
                hint=(
                    "Either run 'ct-apple-sync init' to configure it,\n"
                    "   or pass --charm <id> on the command line."
                ),
            )
            return SourceSyncResult(source=source, phase=SyncPhase.FAILED,
                                    message=str(error), error=error)

        if self.mock:
            print("  Mode: MOCK DATA (for testing)")
        print(f"  Target space: {self.config.space}")
        print(f"  Target charm: {charm_id}")

        sync = SourceSync(
            source=source,
            charm_id=charm_id,
            client=self.client,
            state=self.state,
            reader=self.readers[source],
            mock=self.mock,
            save_state=self.save_state,
            logger=self.logger,
        )
        return sync.run()

    def run_sources(self, sources: Iterable[SourceName]) -> bool:
        """
        Sync every source, continuing past failures.

        A single-source run succeeds only if its source did. A multi-source run
        reports failed sources as warnings and still succeeds.
        """
        results = [self.report(self.sync_source(source)) for source in sources]
        if len(results) == 1:
            return results[0].success
        return True

    def report(self, result: SourceSyncResult) -> SourceSyncResult:
        if result.success:
            print(f"\n✅ {result.message}")
            if result.written and result.source is SourceName.MESSAGES and not self.mock and result.cursor:
                print(f"   New last row ID: {result.cursor}")
            print("")
            return result

        print(f"\n⚠️  {result.source.label} sync failed: {result.message}")
        if result.error is not None and result.error.hint:
            print(f"\n💡 {result.error.hint}")
        print("")
        if result.failed_phase is not None:
            self.logger.debug("%s sync failed while %s", result.source.value, result.failed_phase.value)
        return result
