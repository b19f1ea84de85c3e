"""
Covenant Agreement Contracts Module

Record-keeping engine for legal agreements.

Components:
- EventLog: Append-only, globally sequenced audit trail
- AccessControl: Per-contract Read/Write/Admin access table
- VersionHistory: Gapless content-hash history per contract
- SignatureCollector: One signature per signer, advisory quorum
- ContractRegistry: Contract lifecycle, composes the components above
- ContractsClient: Tagged-result surface over the registry

Usage:
    from covenant.contracts import create_registry
    from covenant.core import StaticIdentity

    registry = create_registry()
    alice = StaticIdentity("alice", timestamp=1)
    contract_id = registry.create_contract(
        alice, "NDA", "Mutual non-disclosure", 2, content_hash,
    )
    registry.add_signature(StaticIdentity("bob", timestamp=2), contract_id, signature)
"""

from .access import AccessControl
from .client import (
    ContractsClient,
    OperationResult,
    create_contracts_client,
)
from .events import EventLog
from .registry import (
    ContractRegistry,
    create_registry,
)
from .signatures import SignatureCollector
from .versions import VersionHistory

__all__ = [
    # Components
    "AccessControl",
    "EventLog",
    "SignatureCollector",
    "VersionHistory",
    # Registry
    "ContractRegistry",
    "create_registry",
    # Client
    "ContractsClient",
    "OperationResult",
    "create_contracts_client",
]
