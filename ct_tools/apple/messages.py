"""
iMessage reader over the Messages ``chat.db`` SQLite database.

The database is opened read-only through a SQLite URI. Reading it needs
Full Disk Access for the terminal running the sync.
"""

import logging
import sqlite3
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import List, Optional

from ..core.exceptions import AuthorizationError, SourceError
from ..core.models import Message

# Messages stores dates as nanoseconds since 2001-01-01 UTC
APPLE_EPOCH = datetime(2001, 1, 1, tzinfo=timezone.utc)
BATCH_LIMIT = 1000

MESSAGES_QUERY = """
    SELECT
        message.ROWID,
        message.guid,
        message.text,
        message.is_from_me,
        message.date,
        chat.chat_identifier,
        handle.id
    FROM message
    LEFT JOIN chat_message_join ON message.ROWID = chat_message_join.message_id
    LEFT JOIN chat ON chat_message_join.chat_id = chat.ROWID
    LEFT JOIN handle ON message.handle_id = handle.ROWID
    WHERE message.ROWID > ?
    ORDER BY message.ROWID ASC
    LIMIT ?
"""

FULL_DISK_ACCESS_HINT = (
    "1. Make sure iMessage is set up on this Mac\n"
    "   2. Grant Full Disk Access to your terminal:\n"
    "      System Settings > Privacy & Security > Full Disk Access\n"
    "   3. Use --mock to test with sample data"
)


def apple_timestamp_to_datetime(value: Optional[int]) -> datetime:
    """Convert a Messages ``date`` column value to an aware UTC datetime."""
    if not value:
        return APPLE_EPOCH
    return APPLE_EPOCH + timedelta(seconds=value / 1_000_000_000)


class MessagesReader:
    """Incremental reader keyed on ``message.ROWID``."""

    def __init__(self, db_path: Path, batch_limit: int = BATCH_LIMIT,
                 logger: Optional[logging.Logger] = None):
        self.db_path = Path(db_path)
        self.batch_limit = batch_limit
        self.logger = logger or logging.getLogger(__name__)

    def _connect(self) -> sqlite3.Connection:
        if not self.db_path.exists():
            raise AuthorizationError(
                f"Cannot access iMessage database at: {self.db_path}",
                hint=FULL_DISK_ACCESS_HINT,
            )
        try:
            return sqlite3.connect(f"{self.db_path.as_uri()}?mode=ro", uri=True)
        except sqlite3.Error as exc:
            raise AuthorizationError(
                f"Cannot open iMessage database: {exc}",
                hint=FULL_DISK_ACCESS_HINT,
            ) from exc

    def read_since(self, last_row_id: int = 0) -> List[Message]:
        """
        Messages with ``ROWID > last_row_id``, oldest row first.

        Raises:
            AuthorizationError: the database is missing or unreadable
            SourceError: the query failed
        """
        connection = self._connect()
        try:
            rows = connection.execute(MESSAGES_QUERY, (last_row_id or 0, self.batch_limit)).fetchall()
        except sqlite3.DatabaseError as exc:
            # "authorization denied" and "unable to open" surface here without Full Disk Access
            message = str(exc).lower()
            if "authorization" in message or "unable to open" in message:
                raise AuthorizationError(f"Error reading messages: {exc}", hint=FULL_DISK_ACCESS_HINT) from exc
            raise SourceError(f"Error reading messages: {exc}",
                              hint="Use --mock to test with sample data.") from exc
        finally:
            connection.close()

        self.logger.debug("Read %d message rows after ROWID %s", len(rows), last_row_id)

        return [
            Message(
                row_id=row_id,
                guid=guid,
                text=text,
                is_from_me=is_from_me == 1,
                date=apple_timestamp_to_datetime(date_value),
                chat_id=chat_id or "unknown",
                handle_id=handle_id or "unknown",
            )
            for row_id, guid, text, is_from_me, date_value, chat_id, handle_id in rows
        ]
