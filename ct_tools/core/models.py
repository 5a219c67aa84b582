"""
Domain models for ct-tools.

This module contains the persisted launcher/sync documents and the
normalized record shapes written to charms by the Apple sync.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional
import logging

from ..utils.io import safe_read_json, safe_write_json

logger = logging.getLogger(__name__)

LOCAL_API_URL = "http://localhost:8000"
PRODUCTION_API_URL = "https://toolshed.saga-castor.ts.net"


def utc_iso(value: Optional[datetime]) -> Optional[str]:
    """Format a datetime as an ISO-8601 UTC string with a ``Z`` suffix."""
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def now_iso() -> str:
    return utc_iso(datetime.now(timezone.utc))


def parse_iso(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO timestamp (``Z`` suffix allowed); None if unparseable."""
    if not value or not isinstance(value, str):
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class DeploymentTarget(Enum):
    """Which toolshed a pattern is deployed to."""

    LOCAL = "local"
    PRODUCTION = "production"

    @property
    def api_url(self) -> str:
        return PRODUCTION_API_URL if self is DeploymentTarget.PRODUCTION else LOCAL_API_URL

    @property
    def is_production(self) -> bool:
        return self is DeploymentTarget.PRODUCTION

    @property
    def default_space(self) -> str:
        return "prod-space" if self.is_production else "test-space"

    @classmethod
    def parse(cls, value: Any) -> Optional[DeploymentTarget]:
        """Parse a stored target value; accepts the legacy ``prod`` spelling."""
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return None
        value = value.strip().lower()
        if value == "prod":
            return cls.PRODUCTION
        try:
            return cls(value)
        except ValueError:
            return None


class SourceName(Enum):
    """Apple data sources handled by the sync tool."""

    MESSAGES = "messages"
    CALENDAR = "calendar"
    REMINDERS = "reminders"
    NOTES = "notes"

    @property
    def charm_path(self) -> str:
        """Input field on the viewer charm that holds this source's collection."""
        return {
            SourceName.MESSAGES: "messages",
            SourceName.CALENDAR: "events",
            SourceName.REMINDERS: "reminders",
            SourceName.NOTES: "notes",
        }[self]

    @property
    def label(self) -> str:
        return {
            SourceName.MESSAGES: "iMessage",
            SourceName.CALENDAR: "Calendar",
            SourceName.REMINDERS: "Reminders",
            SourceName.NOTES: "Notes",
        }[self]

    @property
    def icon(self) -> str:
        return {
            SourceName.MESSAGES: "📱",
            SourceName.CALENDAR: "📅",
            SourceName.REMINDERS: "✅",
            SourceName.NOTES: "📝",
        }[self]


# ----------------------------------------------------------------------
# Launcher
# ----------------------------------------------------------------------

@dataclass
class PatternRecord:
    """A pattern file the launcher has deployed before."""

    path: str
    last_used: str

    def to_dict(self) -> Dict[str, Any]:
        return {"path": self.path, "lastUsed": self.last_used}

    @classmethod
    def from_dict(cls, data: Any) -> Optional[PatternRecord]:
        if not isinstance(data, dict):
            return None
        path = data.get("path")
        if not isinstance(path, str) or not path:
            return None
        last_used = data.get("lastUsed")
        if not isinstance(last_used, str):
            last_used = ""
        return cls(path=path, last_used=last_used)


@dataclass
class LauncherConfig:
    """Launcher state persisted in ``.launcher-history``."""

    last_space_local: Optional[str] = None
    last_space_prod: Optional[str] = None
    last_deployment_target: Optional[DeploymentTarget] = None
    labs_dir: Optional[str] = None
    patterns: List[PatternRecord] = field(default_factory=list)

    def last_space_for(self, target: DeploymentTarget) -> Optional[str]:
        return self.last_space_prod if target.is_production else self.last_space_local

    def set_last_space(self, target: DeploymentTarget, space: str) -> None:
        if target.is_production:
            self.last_space_prod = space
        else:
            self.last_space_local = space

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {}
        if self.last_space_local:
            data["lastSpaceLocal"] = self.last_space_local
        if self.last_space_prod:
            data["lastSpaceProd"] = self.last_space_prod
        if self.last_deployment_target:
            data["lastDeploymentTarget"] = self.last_deployment_target.value
        if self.labs_dir:
            data["labsDir"] = self.labs_dir
        data["patterns"] = [record.to_dict() for record in self.patterns]
        return data

    @classmethod
    def from_dict(cls, data: Any) -> LauncherConfig:
        if not isinstance(data, dict):
            return cls()

        # Backward compatibility: the single lastSpace predates per-target spaces
        if data.get("lastSpace") and not data.get("lastSpaceLocal"):
            data = dict(data)
            data["lastSpaceLocal"] = data.pop("lastSpace")

        patterns: List[PatternRecord] = []
        raw_patterns = data.get("patterns", [])
        if isinstance(raw_patterns, list):
            for entry in raw_patterns:
                record = PatternRecord.from_dict(entry)
                if record is not None:
                    patterns.append(record)

        return cls(
            last_space_local=_optional_str(data.get("lastSpaceLocal")),
            last_space_prod=_optional_str(data.get("lastSpaceProd")),
            last_deployment_target=DeploymentTarget.parse(data.get("lastDeploymentTarget")),
            labs_dir=_optional_str(data.get("labsDir")),
            patterns=patterns,
        )

    @classmethod
    def load_from_file(cls, config_path: str) -> LauncherConfig:
        return cls.from_dict(safe_read_json(config_path, default={}))

    def save_to_file(self, config_path: str) -> bool:
        return safe_write_json(config_path, self.to_dict())


# ----------------------------------------------------------------------
# Apple sync
# ----------------------------------------------------------------------

@dataclass
class SyncConfig:
    """Apple sync target configuration persisted in ``.apple-sync-config``."""

    space: Optional[str] = None
    api_url: Optional[str] = None
    labs_dir: Optional[str] = None
    charms: Dict[str, str] = field(default_factory=dict)

    @property
    def is_configured(self) -> bool:
        return bool(self.space)

    @property
    def effective_api_url(self) -> str:
        return self.api_url or LOCAL_API_URL

    def charm_for(self, source: SourceName) -> Optional[str]:
        return self.charms.get(source.value) or None

    def set_charm(self, source: SourceName, charm_id: Optional[str]) -> None:
        if charm_id:
            self.charms[source.value] = charm_id
        else:
            self.charms.pop(source.value, None)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {}
        if self.space:
            data["space"] = self.space
        if self.api_url:
            data["apiUrl"] = self.api_url
        if self.labs_dir:
            data["labsDir"] = self.labs_dir
        data["charms"] = {key: value for key, value in self.charms.items() if value}
        return data

    @classmethod
    def from_dict(cls, data: Any) -> SyncConfig:
        if not isinstance(data, dict):
            return cls()

        charms: Dict[str, str] = {}
        raw_charms = data.get("charms")
        if isinstance(raw_charms, dict):
            charms = {str(k): v for k, v in raw_charms.items() if isinstance(v, str) and v}
            # The messages viewer used to be keyed as "imessage"
            if "imessage" in charms and "messages" not in charms:
                charms["messages"] = charms.pop("imessage")

        return cls(
            space=_optional_str(data.get("space")),
            api_url=_optional_str(data.get("apiUrl")),
            labs_dir=_optional_str(data.get("labsDir")),
            charms=charms,
        )

    @classmethod
    def load_from_file(cls, config_path: str) -> SyncConfig:
        return cls.from_dict(safe_read_json(config_path, default={}))

    def save_to_file(self, config_path: str) -> bool:
        return safe_write_json(config_path, self.to_dict())


@dataclass
class SourceState:
    """Per-source sync cursor."""

    last_row_id: Optional[int] = None
    last_sync_time: Optional[str] = None

    def advance_row_id(self, row_id: int) -> int:
        """Move the row cursor forward; it never moves backwards."""
        current = self.last_row_id or 0
        self.last_row_id = max(current, int(row_id))
        return self.last_row_id

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {}
        if self.last_row_id is not None:
            data["lastRowId"] = self.last_row_id
        if self.last_sync_time:
            data["lastSyncTime"] = self.last_sync_time
        return data

    @classmethod
    def from_dict(cls, data: Any) -> SourceState:
        if not isinstance(data, dict):
            return cls()
        row_id = data.get("lastRowId")
        if isinstance(row_id, bool) or not isinstance(row_id, int):
            row_id = None
        return cls(last_row_id=row_id, last_sync_time=_optional_str(data.get("lastSyncTime")))


@dataclass
class SyncState:
    """Sync cursors persisted in ``.apple-sync-state``."""

    sources: Dict[str, SourceState] = field(default_factory=dict)

    def get(self, source: SourceName) -> SourceState:
        if source.value not in self.sources:
            self.sources[source.value] = SourceState()
        return self.sources[source.value]

    def peek(self, source: SourceName) -> Optional[SourceState]:
        """Return the stored state without creating an entry."""
        return self.sources.get(source.value)

    def to_dict(self) -> Dict[str, Any]:
        return {
            name: state.to_dict()
            for name, state in self.sources.items()
            if state.to_dict()
        }

    @classmethod
    def from_dict(cls, data: Any) -> SyncState:
        if not isinstance(data, dict):
            return cls()
        data = dict(data)
        if "imessage" in data and "messages" not in data:
            data["messages"] = data.pop("imessage")
        sources = {}
        for source in SourceName:
            if source.value in data:
                sources[source.value] = SourceState.from_dict(data[source.value])
        return cls(sources=sources)

    @classmethod
    def load_from_file(cls, state_path: str) -> SyncState:
        return cls.from_dict(safe_read_json(state_path, default={}))

    def save_to_file(self, state_path: str) -> bool:
        return safe_write_json(state_path, self.to_dict())


# ----------------------------------------------------------------------
# Normalized records written to charms
# ----------------------------------------------------------------------

@dataclass
class Message:
    """A single iMessage/SMS row."""

    row_id: int
    guid: str
    text: Optional[str]
    is_from_me: bool
    date: datetime
    chat_id: str = "unknown"
    handle_id: str = "unknown"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "rowId": self.row_id,
            "guid": self.guid,
            "text": self.text,
            "isFromMe": self.is_from_me,
            "date": utc_iso(self.date),
            "chatId": self.chat_id,
            "handleId": self.handle_id,
        }


@dataclass
class CalendarEvent:
    """Calendar event data."""

    event_id: str
    title: str
    start_date: datetime
    end_date: datetime
    location: Optional[str]
    notes: Optional[str]
    calendar_name: str
    is_all_day: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.event_id,
            "title": self.title,
            "startDate": utc_iso(self.start_date),
            "endDate": utc_iso(self.end_date),
            "location": self.location,
            "notes": self.notes,
            "calendarName": self.calendar_name,
            "isAllDay": self.is_all_day,
        }


@dataclass
class Reminder:
    """A reminder with its list, completion and scheduling data.

    ``priority`` uses EventKit's scale: 0 none, 1 high, 5 medium, 9 low.
    """

    reminder_id: str
    title: str
    completed: bool
    list_name: str
    notes: Optional[str] = None
    due_date: Optional[str] = None
    completion_date: Optional[str] = None
    priority: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.reminder_id,
            "title": self.title,
            "notes": self.notes,
            "completed": self.completed,
            "completionDate": self.completion_date,
            "dueDate": self.due_date,
            "priority": self.priority,
            "listName": self.list_name,
        }


@dataclass
class Note:
    """An Apple Notes note as plain text."""

    note_id: str
    title: str
    body: str
    folder: str
    created_at: Optional[datetime] = None
    modified_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.note_id,
            "title": self.title,
            "body": self.body,
            "folder": self.folder,
            "createdAt": utc_iso(self.created_at),
            "modifiedAt": utc_iso(self.modified_at),
        }


def _optional_str(value: Any) -> Optional[str]:
    if isinstance(value, str) and value.strip():
        return value
    return None
