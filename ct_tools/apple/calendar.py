"""Apple Calendar reader using EventKit."""

from datetime import datetime, timedelta, timezone
from typing import List, Optional

from ..core.exceptions import SourceError
from ..core.models import CalendarEvent, utc_iso
from .eventkit import EventKitStore

DEFAULT_DAYS_BACK = 7
DEFAULT_DAYS_AHEAD = 30


class CalendarGateway(EventKitStore):
    """Gateway for Apple Calendar via EventKit."""

    entity_name = "events"
    entity_label = "Calendars"

    def _entity_type(self):
        return self._EventKit.EKEntityTypeEvent

    def get_events(self, days_back: int = DEFAULT_DAYS_BACK,
                   days_ahead: int = DEFAULT_DAYS_AHEAD,
                   now: Optional[datetime] = None) -> List[CalendarEvent]:
        """Events starting between ``days_back`` days ago and ``days_ahead`` days from now."""
        store = self.get_store()

        now = now or datetime.now(timezone.utc)
        start = now - timedelta(days=days_back)
        end = now + timedelta(days=days_ahead)

        try:
            calendars = store.calendarsForEntityType_(self._entity_type()) or []
            predicate = store.predicateForEventsWithStartDate_endDate_calendars_(
                self.ns_date(start), self.ns_date(end), calendars
            )
            events = store.eventsMatchingPredicate_(predicate) or []
        except Exception as e:
            self.logger.debug("Calendar fetch failed: %s", e)
            raise SourceError(f"Failed to fetch calendar events: {e}")

        result = []
        for event in events:
            try:
                start_time = self.to_datetime(event.startDate())
                end_time = self.to_datetime(event.endDate()) or start_time
                if start_time is None:
                    continue

                cal = event.calendar()
                result.append(CalendarEvent(
                    event_id=self.occurrence_id(event, start_time),
                    title=str(event.title() or 'Untitled'),
                    start_date=start_time,
                    end_date=end_time,
                    location=str(event.location()) if event.location() else None,
                    notes=str(event.notes()) if event.notes() else None,
                    calendar_name=str(cal.title()) if cal else 'Unknown',
                    is_all_day=bool(event.isAllDay()),
                ))
            except Exception as e:
                self.logger.warning(f"Failed to process event: {e}")
                continue

        result.sort(key=lambda e: e.start_date)
        return result

    def occurrence_id(self, event, start_time: datetime) -> str:
        """
        Identity for one occurrence of an event.

        Every occurrence of a recurring series shares ``eventIdentifier``, so
        those get the occurrence's original start appended.
        """
        identifier = str(event.eventIdentifier())
        if not event.hasRecurrenceRules():
            return identifier
        occurred = self.to_datetime(event.occurrenceDate()) or start_time
        return f"{identifier}:{utc_iso(occurred)}"
