"""
Covenant Ledger Storage

SQLite persistence for contracts, versions, signatures, access entries,
events and the two sequence counters.
"""

from .database import (
    CONTRACT_NONCE,
    EVENT_NONCE,
    LedgerDatabase,
    create_database,
)

__all__ = [
    "CONTRACT_NONCE",
    "EVENT_NONCE",
    "LedgerDatabase",
    "create_database",
]
