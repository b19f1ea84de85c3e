"""
Contract Access Control

Per-contract, per-user access table with three ordered levels
(Read < Write < Admin). Stored levels are never widened implicitly: every
check compares the single stored level against the level an operation needs.
"""

import logging
from typing import List, Optional

from ..core.config import LedgerConfig
from ..core.exceptions import InvalidInputError, InvalidStateError, NotFoundError
from ..core.identity import IdentityContext
from ..core.models import AccessEntry, AccessLevel, EventType
from ..storage.database import LedgerDatabase
from . import guards
from .events import EventLog


logger = logging.getLogger(__name__)


class AccessControl:
    """Access entries keyed by (contract id, user)."""

    def __init__(self, database: LedgerDatabase, events: EventLog, config: LedgerConfig):
        self._db = database
        self._events = events
        self._config = config

    # -------------------------------------------------------------------------
    # Checks
    # -------------------------------------------------------------------------

    def get_access_level(self, contract_id: int, principal: str) -> Optional[AccessLevel]:
        """Stored level, or None when the user has no entry."""
        row = self._db.fetch_one(
            "SELECT access_level FROM access_entries WHERE contract_id = ? AND user = ?",
            (contract_id, principal),
        )
        return AccessLevel(row["access_level"]) if row else None

    def is_admin(self, contract_id: int, principal: str) -> bool:
        """True iff the stored level is exactly Admin. Missing entries are not errors."""
        return self.get_access_level(contract_id, principal) == AccessLevel.ADMIN

    def has_access(self, contract_id: int, principal: str, required: AccessLevel) -> bool:
        level = self.get_access_level(contract_id, principal)
        return level is not None and level >= required

    def list_access(self, contract_id: int) -> List[AccessEntry]:
        guards.require_contract(self._db, contract_id)
        rows = self._db.fetch_all(
            "SELECT * FROM access_entries WHERE contract_id = ? ORDER BY rowid",
            (contract_id,),
        )
        return [AccessEntry.from_row(row) for row in rows]

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def grant_access(
        self,
        ctx: IdentityContext,
        contract_id: int,
        user: str,
        level: AccessLevel,
    ) -> None:
        """
        Grant (or change) a user's access level. Caller must be Admin.

        Raises:
            InvalidInputError: Empty user or unknown level
            NotFoundError: Contract does not exist
            NotAuthorizedError: Caller is not Admin
            InvalidStateError: Contract is archived, or the change would
                demote its last Admin
        """
        snapshot = guards.require_caller(ctx, self._config)
        guards.require_text(user, "user", self._config.max_principal_length)
        try:
            level = AccessLevel(level)
        except ValueError as e:
            raise InvalidInputError(f"Unknown access level: {level!r}", field_name="level") from e

        with self._db.transaction():
            contract = guards.require_contract(self._db, contract_id)
            guards.require_level(
                self.get_access_level(contract_id, snapshot.caller),
                AccessLevel.ADMIN,
                contract_id,
                snapshot.caller,
                exact=True,
            )
            guards.require_active(contract, "grant access")
            if (
                level != AccessLevel.ADMIN
                and self.get_access_level(contract_id, user) == AccessLevel.ADMIN
                and self._admin_count(contract_id) == 1
            ):
                raise InvalidStateError(
                    f"Cannot demote the last admin of contract {contract_id}", contract_id
                )

            self.write_entry(contract_id, user, level)
            self._events.append(
                contract_id,
                EventType.ACCESS_GRANTED,
                f"{level.name} access granted",
                created_by=snapshot.caller,
                created_at=snapshot.timestamp,
                related_principal=user,
                related_value=int(level),
            )

        logger.info(f"{snapshot.caller} granted {level.name} on contract {contract_id} to {user}")

    def revoke_access(self, ctx: IdentityContext, contract_id: int, user: str) -> None:
        """
        Remove a user's access entry. Caller must be Admin.

        The last Admin of a contract cannot be removed.
        """
        snapshot = guards.require_caller(ctx, self._config)
        guards.require_text(user, "user", self._config.max_principal_length)

        with self._db.transaction():
            contract = guards.require_contract(self._db, contract_id)
            guards.require_level(
                self.get_access_level(contract_id, snapshot.caller),
                AccessLevel.ADMIN,
                contract_id,
                snapshot.caller,
                exact=True,
            )
            guards.require_active(contract, "revoke access")

            current = self.get_access_level(contract_id, user)
            if current is None:
                raise NotFoundError(
                    f"{user} has no access entry on contract {contract_id}", contract_id
                )
            if current == AccessLevel.ADMIN and self._admin_count(contract_id) == 1:
                raise InvalidStateError(
                    f"Cannot revoke the last admin of contract {contract_id}", contract_id
                )

            self._db.execute(
                "DELETE FROM access_entries WHERE contract_id = ? AND user = ?",
                (contract_id, user),
            )
            self._events.append(
                contract_id,
                EventType.ACCESS_REVOKED,
                f"{current.name} access revoked",
                created_by=snapshot.caller,
                created_at=snapshot.timestamp,
                related_principal=user,
            )

        logger.info(f"{snapshot.caller} revoked access on contract {contract_id} from {user}")

    def write_entry(self, contract_id: int, user: str, level: AccessLevel) -> None:
        """Insert or replace an entry. Callers own the transaction and the event."""
        self._db.execute(
            """
            INSERT INTO access_entries (contract_id, user, access_level) VALUES (?, ?, ?)
            ON CONFLICT (contract_id, user) DO UPDATE SET access_level = excluded.access_level
            """,
            (contract_id, user, int(level)),
        )

    def _admin_count(self, contract_id: int) -> int:
        row = self._db.fetch_one(
            "SELECT COUNT(*) AS n FROM access_entries WHERE contract_id = ? AND access_level = ?",
            (contract_id, int(AccessLevel.ADMIN)),
        )
        return row["n"]
