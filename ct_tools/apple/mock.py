"""Sample Apple data for ``--mock`` runs."""

import random
from datetime import datetime, timedelta, timezone
from typing import List, Optional

from ..core.models import CalendarEvent, Message, Note, Reminder, utc_iso

MOCK_CONTACTS = [
    "+15551234567",
    "+15559876543",
    "friend@example.com",
    "work@company.com",
]

MOCK_TEXTS = [
    "Hey, how's it going?",
    "Can you pick up some milk on the way home?",
    "Meeting moved to 3pm",
    "Thanks for lunch!",
    "Running late, be there in 10",
    "Did you see the game last night?",
    "Happy birthday! 🎉",
    "Call me when you get a chance",
    "Sounds good!",
    "👍",
    "lol",
    "On my way",
    "See you tomorrow",
    "Can't make it tonight, sorry",
    "Just finished the project",
]

MOCK_EVENT_TITLES = [
    "Team Meeting",
    "Doctor Appointment",
    "Lunch with Sarah",
    "Project Review",
    "Dentist",
    "Birthday Party",
    "Conference Call",
    "Gym",
    "Coffee Chat",
    "Sprint Planning",
]

MOCK_CALENDARS = ["Work", "Personal", "Family"]
MOCK_LOCATIONS = ["Conference Room A", "123 Main St", "Zoom Meeting", None, "Office"]

MOCK_REMINDERS = [
    "Buy groceries",
    "Renew passport",
    "Call the plumber",
    "Book flights",
    "Pay electricity bill",
    "Return library books",
    "Schedule car service",
    "Water the plants",
]
MOCK_REMINDER_LISTS = ["Reminders", "Errands", "Work"]
MOCK_PRIORITIES = [0, 0, 1, 5, 9]

MOCK_NOTES = [
    ("Shopping list", "Eggs\nBread\nCoffee"),
    ("Trip ideas", "Lisbon in spring\nKyoto in autumn"),
    ("Meeting notes", "Decided to ship on Friday"),
    ("Book recommendations", "The Dispossessed\nPiranesi"),
    ("Recipe: pancakes", "Flour, milk, eggs, a pinch of salt"),
]
MOCK_NOTE_FOLDERS = ["Notes", "Personal", "Work"]


def _rng(seed: Optional[int]) -> random.Random:
    return random.Random(seed)


def _now(now: Optional[datetime]) -> datetime:
    return now or datetime.now(timezone.utc)


def generate_mock_messages(count: int = 20, seed: Optional[int] = None,
                           now: Optional[datetime] = None) -> List[Message]:
    rng = _rng(seed)
    now = _now(now)
    messages = []
    for i in range(count):
        contact = rng.choice(MOCK_CONTACTS)
        minutes_ago = rng.randrange(60 * 24 * 7)
        messages.append(Message(
            row_id=i + 1,
            guid=f"mock-{i}",
            text=rng.choice(MOCK_TEXTS),
            is_from_me=rng.random() > 0.5,
            date=now - timedelta(minutes=minutes_ago),
            chat_id=contact,
            handle_id=contact,
        ))
    messages.sort(key=lambda m: (m.date, m.row_id))
    return messages


def generate_mock_events(count: int = 15, seed: Optional[int] = None,
                         now: Optional[datetime] = None) -> List[CalendarEvent]:
    rng = _rng(seed)
    now = _now(now)
    events = []
    for i in range(count):
        day = (now + timedelta(days=rng.randrange(30) - 7)).replace(minute=0, second=0, microsecond=0)
        is_all_day = rng.random() < 0.1
        if is_all_day:
            start = day.replace(hour=0)
            end = day.replace(hour=23, minute=59, second=59)
        else:
            start = day.replace(hour=8 + rng.randrange(10))
            end = start + timedelta(minutes=rng.choice([30, 60, 90, 120]))
        events.append(CalendarEvent(
            event_id=f"mock-event-{i}",
            title=rng.choice(MOCK_EVENT_TITLES),
            start_date=start,
            end_date=end,
            location=rng.choice(MOCK_LOCATIONS),
            notes="Some notes about this event" if rng.random() < 0.3 else None,
            calendar_name=rng.choice(MOCK_CALENDARS),
            is_all_day=is_all_day,
        ))
    events.sort(key=lambda e: e.start_date)
    return events


def generate_mock_reminders(count: int = 12, seed: Optional[int] = None,
                            now: Optional[datetime] = None) -> List[Reminder]:
    rng = _rng(seed)
    now = _now(now)
    reminders = []
    for i in range(count):
        completed = rng.random() < 0.3
        due = None
        if rng.random() < 0.6:
            due = (now + timedelta(days=rng.randrange(14) - 3)).strftime("%Y-%m-%d")
        reminders.append(Reminder(
            reminder_id=f"mock-reminder-{i}",
            title=rng.choice(MOCK_REMINDERS),
            completed=completed,
            list_name=rng.choice(MOCK_REMINDER_LISTS),
            notes="Added from mock data" if rng.random() < 0.2 else None,
            due_date=due,
            completion_date=utc_iso(now - timedelta(hours=rng.randrange(72))) if completed else None,
            priority=rng.choice(MOCK_PRIORITIES),
        ))
    return reminders


def generate_mock_notes(count: int = 5, seed: Optional[int] = None,
                        now: Optional[datetime] = None) -> List[Note]:
    rng = _rng(seed)
    now = _now(now)
    notes = []
    for i in range(count):
        title, body = MOCK_NOTES[i % len(MOCK_NOTES)]
        created = now - timedelta(days=rng.randrange(1, 60))
        modified = created + timedelta(hours=rng.randrange(0, 24 * 30))
        notes.append(Note(
            note_id=f"mock-note-{i}",
            title=title,
            body=body,
            folder=rng.choice(MOCK_NOTE_FOLDERS),
            created_at=created,
            modified_at=min(modified, now),
        ))
    return notes
