"""
Covenant Ledger Data Models

Read-only snapshots of the five ledger tables: contracts, versions,
signatures, access entries and events. Rows are immutable once written;
these dataclasses are frozen to match.
"""

import sqlite3
from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Any, Dict, Optional


CONTENT_HASH_LENGTH = 32
SIGNATURE_HASH_LENGTH = 64
MIN_REQUIRED_SIGNATURES = 1
MAX_REQUIRED_SIGNATURES = 8

INITIAL_VERSION_METADATA = "Initial version"


class ContractStatus(str, Enum):
    """Lifecycle status of a contract. Archived is terminal."""

    ACTIVE = "active"
    ARCHIVED = "archived"


class AccessLevel(IntEnum):
    """Per-contract access tiers, totally ordered."""

    READ = 0
    WRITE = 1
    ADMIN = 2


class EventType(str, Enum):
    """Audit event tags, one per mutating operation."""

    CONTRACT_CREATED = "contract_created"
    VERSION_RECORDED = "version_recorded"
    SIGNATURE_ADDED = "signature_added"
    CONTRACT_ARCHIVED = "contract_archived"
    ACCESS_GRANTED = "access_granted"
    ACCESS_REVOKED = "access_revoked"


@dataclass(frozen=True)
class Contract:
    """Top-level agreement record."""

    contract_id: int
    title: str
    description: str
    status: ContractStatus
    creator: str
    created_at: int
    updated_at: int
    required_signatures: int

    @property
    def is_active(self) -> bool:
        return self.status == ContractStatus.ACTIVE

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "contract_id": self.contract_id,
            "title": self.title,
            "description": self.description,
            "status": self.status.value,
            "creator": self.creator,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
            "required_signatures": self.required_signatures,
        }

    @classmethod
    def from_row(cls, row: sqlite3.Row) -> "Contract":
        return cls(
            contract_id=row["contract_id"],
            title=row["title"],
            description=row["description"],
            status=ContractStatus(row["status"]),
            creator=row["creator"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
            required_signatures=row["required_signatures"],
        )


@dataclass(frozen=True)
class Version:
    """A content fingerprint snapshot of a contract."""

    contract_id: int
    version_number: int
    content_hash: bytes
    author: str
    created_at: int
    metadata: str

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary (hash as hex)."""
        return {
            "contract_id": self.contract_id,
            "version_number": self.version_number,
            "content_hash": self.content_hash.hex(),
            "author": self.author,
            "created_at": self.created_at,
            "metadata": self.metadata,
        }

    @classmethod
    def from_row(cls, row: sqlite3.Row) -> "Version":
        return cls(
            contract_id=row["contract_id"],
            version_number=row["version_number"],
            content_hash=bytes(row["content_hash"]),
            author=row["author"],
            created_at=row["created_at"],
            metadata=row["metadata"],
        )


@dataclass(frozen=True)
class Signature:
    """A signer's opaque signature, bound to the version current at signing."""

    contract_id: int
    signer: str
    signed_at: int
    signature_hash: bytes
    version_number: int

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary (hash as hex)."""
        return {
            "contract_id": self.contract_id,
            "signer": self.signer,
            "signed_at": self.signed_at,
            "signature_hash": self.signature_hash.hex(),
            "version_number": self.version_number,
        }

    @classmethod
    def from_row(cls, row: sqlite3.Row) -> "Signature":
        return cls(
            contract_id=row["contract_id"],
            signer=row["signer"],
            signed_at=row["signed_at"],
            signature_hash=bytes(row["signature_hash"]),
            version_number=row["version_number"],
        )


@dataclass(frozen=True)
class AccessEntry:
    """Stored access level of one user on one contract."""

    contract_id: int
    user: str
    access_level: AccessLevel

    def to_dict(self) -> Dict[str, Any]:
        return {
            "contract_id": self.contract_id,
            "user": self.user,
            "access_level": self.access_level.name,
        }

    @classmethod
    def from_row(cls, row: sqlite3.Row) -> "AccessEntry":
        return cls(
            contract_id=row["contract_id"],
            user=row["user"],
            access_level=AccessLevel(row["access_level"]),
        )


@dataclass(frozen=True)
class Event:
    """An immutable audit record. event_id is global across contracts."""

    event_id: int
    contract_id: int
    event_type: str
    created_at: int
    created_by: str
    metadata: str
    related_principal: Optional[str] = None
    related_value: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "event_id": self.event_id,
            "contract_id": self.contract_id,
            "event_type": self.event_type,
            "created_at": self.created_at,
            "created_by": self.created_by,
            "metadata": self.metadata,
            "related_principal": self.related_principal,
            "related_value": self.related_value,
        }

    @classmethod
    def from_row(cls, row: sqlite3.Row) -> "Event":
        return cls(
            event_id=row["event_id"],
            contract_id=row["contract_id"],
            event_type=row["event_type"],
            created_at=row["created_at"],
            created_by=row["created_by"],
            metadata=row["metadata"],
            related_principal=row["related_principal"],
            related_value=row["related_value"],
        )


@dataclass(frozen=True)
class QuorumStatus:
    """Live signature count compared against the advisory threshold."""

    contract_id: int
    required: int
    collected: int

    @property
    def reached(self) -> bool:
        return self.collected >= self.required

    @property
    def remaining(self) -> int:
        return max(self.required - self.collected, 0)
