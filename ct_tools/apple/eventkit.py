"""
EventKit access shared by the calendar and reminders gateways.

PyObjC is imported lazily so the rest of ct-tools works without it; install
the ``macos`` extra to enable these sources.
"""

import threading
import time
from datetime import datetime, timezone
from typing import Any, Callable, Optional
import logging

from ..core.exceptions import AuthorizationError, EventKitImportError, SourceError

AUTHORIZATION_TIMEOUT = 30  # seconds
FETCH_TIMEOUT = 30  # seconds

# EKAuthorizationStatus values
STATUS_NOT_DETERMINED = 0
STATUS_RESTRICTED = 1
STATUS_DENIED = 2
STATUS_AUTHORIZED = 3  # FullAccess on macOS 14+


class EventKitStore:
    """Owns one ``EKEventStore`` authorized for a single entity type."""

    # Subclasses set these
    entity_name = "events"
    entity_label = "Calendars"

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)
        self._store = None

    def _ensure_eventkit(self):
        """Import EventKit, raising EventKitImportError with install advice."""
        try:
            import EventKit  # type: ignore
            from Foundation import NSDate, NSRunLoop  # type: ignore
        except ImportError as e:
            self.logger.debug("EventKit import failed: %s", e)
            raise EventKitImportError(
                f"EventKit not available: {e}",
                hint=(
                    "Install the macOS extra:\n"
                    "   pip install 'ct-tools[macos]'\n"
                    "   or use --mock to test with sample data."
                ),
            )

        self._EventKit = EventKit
        self._NSDate = NSDate
        self._NSRunLoop = NSRunLoop

    def _entity_type(self):
        raise NotImplementedError

    def _request_access(self, store, entity_type, completion) -> None:
        # macOS 14+ requires the full-access request; older systems only have the generic one
        if self.entity_name == "events" and hasattr(store, "requestFullAccessToEventsWithCompletion_"):
            store.requestFullAccessToEventsWithCompletion_(completion)
        elif self.entity_name == "reminders" and hasattr(store, "requestFullAccessToRemindersWithCompletion_"):
            store.requestFullAccessToRemindersWithCompletion_(completion)
        else:
            store.requestAccessToEntityType_completion_(entity_type, completion)

    def _wait(self, done: threading.Event, timeout: float, on_timeout: Callable[[], Exception]) -> None:
        """Spin the run loop until ``done`` is set; EventKit calls back on it."""
        start = time.time()
        while not done.is_set():
            if time.time() - start > timeout:
                raise on_timeout()
            self._NSRunLoop.currentRunLoop().runUntilDate_(
                self._NSDate.dateWithTimeIntervalSinceNow_(0.1)
            )

    def get_store(self):
        """Return an authorized store, prompting for access the first time."""
        if self._store is not None:
            return self._store

        self._ensure_eventkit()
        EKEventStore = self._EventKit.EKEventStore
        entity_type = self._entity_type()

        try:
            store = EKEventStore.alloc().init()
        except Exception as e:
            raise SourceError(f"Failed to initialize EventKit store: {e}")

        status = int(EKEventStore.authorizationStatusForEntityType_(entity_type))
        self.logger.debug("EventKit %s authorization status: %s", self.entity_name, status)

        settings_hint = (
            f"Grant access in System Settings > Privacy & Security > {self.entity_label},\n"
            "   or use --mock to test with sample data."
        )

        if status == STATUS_RESTRICTED:
            raise AuthorizationError(
                f"Access to {self.entity_label} is restricted by system policy.",
                hint=settings_hint,
            )
        if status == STATUS_DENIED:
            raise AuthorizationError(
                f"Access to {self.entity_label} was previously denied.",
                hint=settings_hint,
            )

        if status != STATUS_AUTHORIZED:
            self.logger.info("Requesting EventKit access to %s...", self.entity_name)
            done = threading.Event()
            result = {'granted': False}

            def completion(granted, error):
                result['granted'] = bool(granted)
                done.set()

            self._request_access(store, entity_type, completion)
            self._wait(done, AUTHORIZATION_TIMEOUT, lambda: AuthorizationError(
                f"Authorization request timed out after {AUTHORIZATION_TIMEOUT} seconds.",
                hint="Check for a system permission dialog and try again.",
            ))

            if not result['granted']:
                raise AuthorizationError(
                    f"Access to {self.entity_label} was not granted.",
                    hint=settings_hint,
                )

        self._store = store
        return self._store

    def ns_date(self, value: datetime):
        return self._NSDate.dateWithTimeIntervalSince1970_(value.timestamp())

    @staticmethod
    def to_datetime(ns_date: Any) -> Optional[datetime]:
        if ns_date is None:
            return None
        return datetime.fromtimestamp(ns_date.timeIntervalSince1970(), tz=timezone.utc)
