"""
Contract Version History

Ordered content-hash snapshots per contract. Numbering starts at 0
("Initial version", written at creation) and grows by exactly one per
recorded version, with no gaps.
"""

import logging
from typing import List

from ..core.config import LedgerConfig
from ..core.exceptions import VersionNotFoundError
from ..core.identity import IdentityContext
from ..core.models import CONTENT_HASH_LENGTH, AccessLevel, EventType, Version
from ..storage.database import LedgerDatabase
from . import guards
from .access import AccessControl
from .events import EventLog


logger = logging.getLogger(__name__)


class VersionHistory:
    """Append-only version table keyed by (contract id, version number)."""

    def __init__(
        self,
        database: LedgerDatabase,
        access: AccessControl,
        events: EventLog,
        config: LedgerConfig,
    ):
        self._db = database
        self._access = access
        self._events = events
        self._config = config

    def latest_version(self, contract_id: int) -> int:
        """
        Highest version number recorded for a contract.

        Raises:
            NotFoundError: Contract does not exist
            VersionNotFoundError: Contract exists but has no versions
        """
        guards.require_contract(self._db, contract_id)
        row = self._db.fetch_one(
            "SELECT MAX(version_number) AS latest FROM versions WHERE contract_id = ?",
            (contract_id,),
        )
        if row is None or row["latest"] is None:
            logger.error(f"Contract {contract_id} has no recorded versions")
            raise VersionNotFoundError(
                f"Contract {contract_id} has no recorded versions", contract_id
            )
        return row["latest"]

    def get_version(self, contract_id: int, version_number: int) -> Version:
        guards.require_contract(self._db, contract_id)
        row = self._db.fetch_one(
            "SELECT * FROM versions WHERE contract_id = ? AND version_number = ?",
            (contract_id, version_number),
        )
        if row is None:
            raise VersionNotFoundError(
                f"Version {version_number} of contract {contract_id} not found",
                contract_id,
                version=version_number,
            )
        return Version.from_row(row)

    def list_versions(self, contract_id: int) -> List[Version]:
        guards.require_contract(self._db, contract_id)
        rows = self._db.fetch_all(
            "SELECT * FROM versions WHERE contract_id = ? ORDER BY version_number",
            (contract_id,),
        )
        return [Version.from_row(row) for row in rows]

    def record_version(
        self,
        ctx: IdentityContext,
        contract_id: int,
        content_hash: bytes,
        metadata: str,
    ) -> int:
        """
        Record a new content version.

        Args:
            ctx: Caller identity (needs Write or Admin access)
            contract_id: Contract to version
            content_hash: 32-byte content fingerprint
            metadata: Non-empty description of the change

        Returns:
            The new version number
        """
        snapshot = guards.require_caller(ctx, self._config)

        with self._db.transaction():
            contract = guards.require_contract(self._db, contract_id)
            content_hash = guards.require_hash(content_hash, "content_hash", CONTENT_HASH_LENGTH)
            guards.require_text(metadata, "metadata", self._config.max_metadata_length)
            guards.require_level(
                self._access.get_access_level(contract_id, snapshot.caller),
                AccessLevel.WRITE,
                contract_id,
                snapshot.caller,
            )
            guards.require_active(contract, "record version")

            version_number = self.latest_version(contract_id) + 1
            self.write_version(
                contract_id, version_number, content_hash, snapshot.caller, snapshot.timestamp, metadata
            )
            self._db.execute(
                "UPDATE contracts SET updated_at = ? WHERE contract_id = ?",
                (snapshot.timestamp, contract_id),
            )
            self._events.append(
                contract_id,
                EventType.VERSION_RECORDED,
                metadata,
                created_by=snapshot.caller,
                created_at=snapshot.timestamp,
                related_principal=snapshot.caller,
                related_value=version_number,
            )

        logger.info(f"Contract {contract_id} version {version_number} recorded by {snapshot.caller}")
        return version_number

    def write_version(
        self,
        contract_id: int,
        version_number: int,
        content_hash: bytes,
        author: str,
        created_at: int,
        metadata: str,
    ) -> None:
        """Insert a version row. Callers own the transaction and the event."""
        self._db.execute(
            """
            INSERT INTO versions (
                contract_id, version_number, content_hash, author, created_at, metadata
            ) VALUES (?, ?, ?, ?, ?, ?)
            """,
            (contract_id, version_number, content_hash, author, created_at, metadata),
        )
