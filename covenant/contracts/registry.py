"""
Contract Registry

Owns the top-level contract records and composes the event log, access
control, version history and signature collector into one engine.

Every mutating operation:
1. reads the caller identity once,
2. validates all preconditions,
3. applies its writes and appends exactly one event inside a single
   transaction. Any failure, including a failed event append, rolls back
   everything and leaves both counters untouched.
"""

import logging
from typing import List, Optional

from ..core.config import LedgerConfig, get_config
from ..core.identity import IdentityContext
from ..core.models import (
    CONTENT_HASH_LENGTH,
    INITIAL_VERSION_METADATA,
    MAX_REQUIRED_SIGNATURES,
    MIN_REQUIRED_SIGNATURES,
    AccessLevel,
    Contract,
    ContractStatus,
    EventType,
    QuorumStatus,
)
from ..storage.database import CONTRACT_NONCE, LedgerDatabase
from . import guards
from .access import AccessControl
from .events import EventLog
from .signatures import SignatureCollector
from .versions import VersionHistory


logger = logging.getLogger(__name__)


class ContractRegistry:
    """
    Agreement ledger engine.

    Components are exposed as attributes for direct queries:
    - events: EventLog
    - access: AccessControl
    - versions: VersionHistory
    - signatures: SignatureCollector
    """

    def __init__(self, database: LedgerDatabase, config: Optional[LedgerConfig] = None):
        """
        Initialize the registry.

        Args:
            database: Initialized ledger database
            config: Ledger configuration (global config if None)
        """
        self.config = config or get_config()
        self._db = database
        self.events = EventLog(database)
        self.access = AccessControl(database, self.events, self.config)
        self.versions = VersionHistory(database, self.access, self.events, self.config)
        self.signatures = SignatureCollector(database, self.versions, self.events, self.config)

    @property
    def database(self) -> LedgerDatabase:
        return self._db

    def close(self) -> None:
        self._db.close()

    # -------------------------------------------------------------------------
    # Contracts
    # -------------------------------------------------------------------------

    def create_contract(
        self,
        ctx: IdentityContext,
        title: str,
        description: str,
        required_signatures: int,
        initial_content_hash: bytes,
    ) -> int:
        """
        Create a contract with its initial version.

        The caller becomes the creator, the author of version 0 and the
        contract's first Admin.

        Args:
            ctx: Caller identity
            title: Non-empty title
            description: Non-empty description
            required_signatures: Advisory quorum, 1 to 8
            initial_content_hash: 32-byte fingerprint of the initial content

        Returns:
            The new contract id
        """
        snapshot = guards.require_caller(ctx, self.config)
        guards.require_text(title, "title", self.config.max_title_length)
        guards.require_text(description, "description", self.config.max_description_length)
        guards.require_range(
            required_signatures,
            "required_signatures",
            MIN_REQUIRED_SIGNATURES,
            MAX_REQUIRED_SIGNATURES,
        )
        content_hash = guards.require_hash(
            initial_content_hash, "initial_content_hash", CONTENT_HASH_LENGTH
        )

        with self._db.transaction():
            contract_id = self._db.read_counter(CONTRACT_NONCE)
            self._db.execute(
                """
                INSERT INTO contracts (
                    contract_id, title, description, status, creator,
                    created_at, updated_at, required_signatures
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    contract_id,
                    title,
                    description,
                    ContractStatus.ACTIVE.value,
                    snapshot.caller,
                    snapshot.timestamp,
                    snapshot.timestamp,
                    required_signatures,
                ),
            )
            self.versions.write_version(
                contract_id,
                0,
                content_hash,
                snapshot.caller,
                snapshot.timestamp,
                INITIAL_VERSION_METADATA,
            )
            self.access.write_entry(contract_id, snapshot.caller, AccessLevel.ADMIN)
            self.events.append(
                contract_id,
                EventType.CONTRACT_CREATED,
                title,
                created_by=snapshot.caller,
                created_at=snapshot.timestamp,
                related_principal=snapshot.caller,
                related_value=required_signatures,
            )
            self._db.advance_counter(CONTRACT_NONCE, contract_id)

        logger.info(f"Contract {contract_id} created by {snapshot.caller}: {title}")
        return contract_id

    def get_contract_details(self, contract_id: int) -> Contract:
        """Read-only snapshot of a contract. Raises NotFoundError."""
        return guards.require_contract(self._db, contract_id)

    def archive_contract(self, ctx: IdentityContext, contract_id: int) -> None:
        """
        Move an active contract to the terminal Archived state.

        Raises:
            NotFoundError: Contract does not exist
            NotAuthorizedError: Caller is not Admin on the contract
            InvalidStateError: Contract is already archived
        """
        snapshot = guards.require_caller(ctx, self.config)

        with self._db.transaction():
            contract = guards.require_contract(self._db, contract_id)
            guards.require_level(
                self.access.get_access_level(contract_id, snapshot.caller),
                AccessLevel.ADMIN,
                contract_id,
                snapshot.caller,
                exact=True,
            )
            guards.require_active(contract, "archive")

            self._db.execute(
                "UPDATE contracts SET status = ?, updated_at = ? WHERE contract_id = ?",
                (ContractStatus.ARCHIVED.value, snapshot.timestamp, contract_id),
            )
            self.events.append(
                contract_id,
                EventType.CONTRACT_ARCHIVED,
                "Contract archived",
                created_by=snapshot.caller,
                created_at=snapshot.timestamp,
            )

        logger.info(f"Contract {contract_id} archived by {snapshot.caller}")

    def list_contracts(
        self,
        status: Optional[ContractStatus] = None,
        creator: Optional[str] = None,
        limit: int = 100,
    ) -> List[Contract]:
        """Contracts in id order, optionally filtered."""
        sql = "SELECT * FROM contracts WHERE 1=1"
        params: list = []

        if status:
            sql += " AND status = ?"
            params.append(ContractStatus(status).value)

        if creator:
            sql += " AND creator = ?"
            params.append(creator)

        sql += " ORDER BY contract_id LIMIT ?"
        params.append(limit)

        return [Contract.from_row(row) for row in self._db.fetch_all(sql, params)]

    def contract_count(self) -> int:
        """Contracts ever created, which is also the next contract id."""
        return self._db.read_counter(CONTRACT_NONCE)

    # -------------------------------------------------------------------------
    # Delegated operations
    # -------------------------------------------------------------------------

    def record_version(
        self,
        ctx: IdentityContext,
        contract_id: int,
        content_hash: bytes,
        metadata: str,
    ) -> int:
        return self.versions.record_version(ctx, contract_id, content_hash, metadata)

    def add_signature(self, ctx: IdentityContext, contract_id: int, signature_hash: bytes) -> int:
        return self.signatures.add_signature(ctx, contract_id, signature_hash)

    def grant_access(
        self,
        ctx: IdentityContext,
        contract_id: int,
        user: str,
        level: AccessLevel,
    ) -> None:
        self.access.grant_access(ctx, contract_id, user, level)

    def revoke_access(self, ctx: IdentityContext, contract_id: int, user: str) -> None:
        self.access.revoke_access(ctx, contract_id, user)

    def is_admin(self, contract_id: int, principal: str) -> bool:
        return self.access.is_admin(contract_id, principal)

    def latest_version(self, contract_id: int) -> int:
        return self.versions.latest_version(contract_id)

    def signature_status(self, contract_id: int) -> QuorumStatus:
        return self.signatures.quorum_status(contract_id)


def create_registry(
    config: Optional[LedgerConfig] = None,
    database: Optional[LedgerDatabase] = None,
) -> ContractRegistry:
    """
    Factory function to create a contract registry.

    Args:
        config: Ledger configuration (global config if None)
        database: Existing database to reuse (opened from config.db_path if None)

    Returns:
        ContractRegistry over an initialized database
    """
    config = config or get_config()
    if database is None:
        database = LedgerDatabase(db_path=config.db_path)
        database.initialize()
    return ContractRegistry(database, config)
