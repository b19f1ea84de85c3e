"""
Contract Signature Collector

Collects one opaque signature per signer per contract. Each signature is
stamped with the contract's latest version at the moment of signing, never
a version the caller claims.

The contract's required_signatures is an advisory quorum: signers keep
being accepted after it is reached unless the hard cap is switched on in
LedgerConfig.enforce_signature_cap.
"""

import logging
from typing import List

from ..core.config import LedgerConfig
from ..core.exceptions import InvalidStateError, MaxSignaturesReachedError, NotFoundError
from ..core.identity import IdentityContext
from ..core.models import SIGNATURE_HASH_LENGTH, EventType, QuorumStatus, Signature
from ..storage.database import LedgerDatabase
from . import guards
from .events import EventLog
from .versions import VersionHistory


logger = logging.getLogger(__name__)


class SignatureCollector:
    """Signature table keyed by (contract id, signer)."""

    def __init__(
        self,
        database: LedgerDatabase,
        versions: VersionHistory,
        events: EventLog,
        config: LedgerConfig,
    ):
        self._db = database
        self._versions = versions
        self._events = events
        self._config = config

    def add_signature(
        self,
        ctx: IdentityContext,
        contract_id: int,
        signature_hash: bytes,
    ) -> int:
        """
        Sign the contract's current version as the caller.

        Args:
            ctx: Caller identity
            contract_id: Contract to sign
            signature_hash: 64-byte opaque signature

        Returns:
            The version number the signature was bound to

        Raises:
            NotFoundError: Contract does not exist
            VersionNotFoundError: Contract has no versions
            InvalidInputError: Signature is not 64 bytes
            InvalidStateError: Contract not active, or caller already signed
            MaxSignaturesReachedError: Hard cap enabled and quorum already met
        """
        snapshot = guards.require_caller(ctx, self._config)

        with self._db.transaction():
            contract = guards.require_contract(self._db, contract_id)
            version_number = self._versions.latest_version(contract_id)
            signature_hash = guards.require_hash(
                signature_hash, "signature_hash", SIGNATURE_HASH_LENGTH
            )
            guards.require_active(contract, "sign")
            if self.has_signed(contract_id, snapshot.caller):
                logger.warning(f"{snapshot.caller} tried to sign contract {contract_id} twice")
                raise InvalidStateError(
                    f"{snapshot.caller} has already signed contract {contract_id}", contract_id
                )
            if (
                self._config.enforce_signature_cap
                and self.signature_count(contract_id) >= contract.required_signatures
            ):
                raise MaxSignaturesReachedError(contract_id, contract.required_signatures)

            self._db.execute(
                """
                INSERT INTO signatures (
                    contract_id, signer, signed_at, signature_hash, version_number
                ) VALUES (?, ?, ?, ?, ?)
                """,
                (contract_id, snapshot.caller, snapshot.timestamp, signature_hash, version_number),
            )
            self._events.append(
                contract_id,
                EventType.SIGNATURE_ADDED,
                f"Signed version {version_number}",
                created_by=snapshot.caller,
                created_at=snapshot.timestamp,
                related_principal=snapshot.caller,
                related_value=version_number,
            )
            quorum = self.quorum_status(contract_id)

        logger.info(
            f"{snapshot.caller} signed contract {contract_id} v{version_number} "
            f"({quorum.collected}/{quorum.required})"
        )
        return version_number

    def has_signed(self, contract_id: int, signer: str) -> bool:
        row = self._db.fetch_one(
            "SELECT 1 FROM signatures WHERE contract_id = ? AND signer = ?",
            (contract_id, signer),
        )
        return row is not None

    def get_signature(self, contract_id: int, signer: str) -> Signature:
        guards.require_contract(self._db, contract_id)
        row = self._db.fetch_one(
            "SELECT * FROM signatures WHERE contract_id = ? AND signer = ?",
            (contract_id, signer),
        )
        if row is None:
            raise NotFoundError(f"{signer} has not signed contract {contract_id}", contract_id)
        return Signature.from_row(row)

    def list_signatures(self, contract_id: int) -> List[Signature]:
        """Signatures in the order they were collected."""
        guards.require_contract(self._db, contract_id)
        rows = self._db.fetch_all(
            "SELECT * FROM signatures WHERE contract_id = ? ORDER BY rowid",
            (contract_id,),
        )
        return [Signature.from_row(row) for row in rows]

    def signature_count(self, contract_id: int) -> int:
        row = self._db.fetch_one(
            "SELECT COUNT(*) AS n FROM signatures WHERE contract_id = ?", (contract_id,)
        )
        return row["n"]

    def quorum_status(self, contract_id: int) -> QuorumStatus:
        contract = guards.require_contract(self._db, contract_id)
        return QuorumStatus(
            contract_id=contract_id,
            required=contract.required_signatures,
            collected=self.signature_count(contract_id),
        )
