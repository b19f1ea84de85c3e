"""
Contract Event Log

Append-only audit trail. Event ids come from one global counter shared by
all contracts, start at 0 and are never reused. Appends always run inside
the enclosing operation's transaction, so a failed append takes the whole
operation down with it.
"""

import logging
from typing import List, Optional, Union

from ..core.exceptions import EventFailedError, InvalidInputError, NotFoundError, StorageError
from ..core.models import Event, EventType
from ..storage.database import EVENT_NONCE, LedgerDatabase


logger = logging.getLogger(__name__)


class EventLog:
    """Per-contract view over the global, sequential event table."""

    def __init__(self, database: LedgerDatabase):
        self._db = database

    def append(
        self,
        contract_id: int,
        event_type: Union[EventType, str],
        metadata: str,
        created_by: str,
        created_at: int,
        related_principal: Optional[str] = None,
        related_value: Optional[int] = None,
    ) -> int:
        """
        Append an event.

        Args:
            contract_id: Contract the event belongs to
            event_type: Short tag naming the operation
            metadata: Free-text description
            created_by: Acting principal
            created_at: Logical timestamp of the operation
            related_principal: Other principal involved, if any
            related_value: Related integer (version number, access level), if any

        Returns:
            The new event id

        Raises:
            EventFailedError: If the row or counter could not be written
        """
        tag = event_type.value if isinstance(event_type, EventType) else event_type
        if not tag:
            raise InvalidInputError("event_type must not be empty", field_name="event_type")
        if related_value is not None and related_value < 0:
            raise InvalidInputError("related_value must be non-negative", field_name="related_value")

        try:
            with self._db.transaction():
                event_id = self._db.read_counter(EVENT_NONCE)
                self._db.execute(
                    """
                    INSERT INTO events (
                        event_id, contract_id, event_type, created_at, created_by,
                        metadata, related_principal, related_value
                    ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        event_id,
                        contract_id,
                        tag,
                        created_at,
                        created_by,
                        metadata,
                        related_principal,
                        related_value,
                    ),
                )
                self._db.advance_counter(EVENT_NONCE, event_id)
        except StorageError as e:
            logger.error(f"Failed to append {tag} event for contract {contract_id}: {e}")
            raise EventFailedError(
                f"Could not record {tag} event: {e}",
                contract_id=contract_id,
                event_type=tag,
                original_error=e,
            ) from e

        logger.debug(f"Event {event_id} ({tag}) on contract {contract_id} by {created_by}")
        return event_id

    def get_event(self, event_id: int) -> Event:
        row = self._db.fetch_one("SELECT * FROM events WHERE event_id = ?", (event_id,))
        if row is None:
            raise NotFoundError(f"Event not found: {event_id}")
        return Event.from_row(row)

    def events_for(self, contract_id: int, event_type: Optional[Union[EventType, str]] = None) -> List[Event]:
        """Events of one contract in id order, optionally filtered by type."""
        sql = "SELECT * FROM events WHERE contract_id = ?"
        params: list = [contract_id]
        if event_type is not None:
            sql += " AND event_type = ?"
            params.append(event_type.value if isinstance(event_type, EventType) else event_type)
        sql += " ORDER BY event_id"
        return [Event.from_row(row) for row in self._db.fetch_all(sql, params)]

    def event_count(self) -> int:
        """Number of events ever appended, which is also the next event id."""
        return self._db.read_counter(EVENT_NONCE)
