"""
Covenant Ledger Core

Shared building blocks: data models, caller identity, configuration and
the exception hierarchy.
"""

from .config import (
    LedgerConfig,
    configure_logging,
    get_config,
    set_config,
)
from .exceptions import (
    CovenantError,
    ErrorCode,
    EventFailedError,
    InvalidInputError,
    InvalidStateError,
    MaxSignaturesReachedError,
    NotAuthorizedError,
    NotFoundError,
    StorageError,
    VersionNotFoundError,
)
from .identity import (
    CallerSnapshot,
    IdentityContext,
    LogicalClock,
    StaticIdentity,
)
from .models import (
    AccessEntry,
    AccessLevel,
    Contract,
    ContractStatus,
    Event,
    EventType,
    QuorumStatus,
    Signature,
    Version,
)

__all__ = [
    # Config
    "LedgerConfig",
    "configure_logging",
    "get_config",
    "set_config",
    # Exceptions
    "CovenantError",
    "ErrorCode",
    "EventFailedError",
    "InvalidInputError",
    "InvalidStateError",
    "MaxSignaturesReachedError",
    "NotAuthorizedError",
    "NotFoundError",
    "StorageError",
    "VersionNotFoundError",
    # Identity
    "CallerSnapshot",
    "IdentityContext",
    "LogicalClock",
    "StaticIdentity",
    # Models
    "AccessEntry",
    "AccessLevel",
    "Contract",
    "ContractStatus",
    "Event",
    "EventType",
    "QuorumStatus",
    "Signature",
    "Version",
]
