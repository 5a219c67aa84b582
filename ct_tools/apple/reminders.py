"""Apple Reminders reader using EventKit."""

import threading
from typing import Any, List, Optional

from ..core.exceptions import SourceError
from ..core.models import Reminder, utc_iso
from .eventkit import FETCH_TIMEOUT, EventKitStore


def _due_date(rem: Any) -> Optional[str]:
    """Due date as ``YYYY-MM-DD``, or a full timestamp when a time is set."""
    components = rem.dueDateComponents()
    if not components:
        return None
    year, month, day = components.year(), components.month(), components.day()
    # NSDateComponents reports unset fields as NSDateComponentUndefined (a huge int)
    if not (0 < year < 10000 and 0 < month <= 12 and 0 < day <= 31):
        return None
    hour = components.hour()
    if 0 <= hour < 24:
        minute = components.minute()
        minute = minute if 0 <= minute < 60 else 0
        return f"{year:04d}-{month:02d}-{day:02d}T{hour:02d}:{minute:02d}:00"
    return f"{year:04d}-{month:02d}-{day:02d}"


class RemindersGateway(EventKitStore):
    """Gateway for Apple Reminders via EventKit."""

    entity_name = "reminders"
    entity_label = "Reminders"

    def _entity_type(self):
        return self._EventKit.EKEntityTypeReminder

    def get_reminders(self) -> List[Reminder]:
        """Fetch every reminder, completed or not, from every list."""
        store = self.get_store()

        try:
            calendars = store.calendarsForEntityType_(self._entity_type()) or []
            if not calendars:
                return []
            predicate = store.predicateForRemindersInCalendars_(calendars)
        except Exception as e:
            raise SourceError(f"Failed to prepare reminder fetch: {e}")

        fetched = []
        done = threading.Event()

        def completion(items):
            if items:
                fetched.extend(list(items))
            done.set()

        try:
            store.fetchRemindersMatchingPredicate_completion_(predicate, completion)
        except Exception as e:
            raise SourceError(f"Failed to fetch reminders: {e}")

        self._wait(done, FETCH_TIMEOUT, lambda: SourceError(
            f"Reminder fetch timed out after {FETCH_TIMEOUT} seconds.",
            hint="Reminders.app may still be syncing; try again shortly.",
        ))

        result = []
        for rem in fetched:
            try:
                cal = rem.calendar()
                completion_date = self.to_datetime(rem.completionDate())
                result.append(Reminder(
                    reminder_id=str(rem.calendarItemIdentifier()),
                    title=str(rem.title() or ''),
                    completed=bool(rem.isCompleted()),
                    list_name=str(cal.title() or 'Untitled') if cal else 'Unknown',
                    notes=str(rem.notes()) if rem.notes() else None,
                    due_date=_due_date(rem),
                    completion_date=utc_iso(completion_date),
                    priority=int(rem.priority() or 0),
                ))
            except Exception as e:
                self.logger.warning(f"Failed to process reminder: {e}")
                continue

        return result
