"""
Covenant - Agreement Ledger

Record-keeping engine for legal agreements, including:
- Contract lifecycle (active, archived)
- Append-only version history of content fingerprints
- Signature collection toward an advisory quorum
- Per-contract access levels
- Immutable, sequentially numbered audit events
"""

__version__ = "0.1.0"
__author__ = "Covenant Contributors"
