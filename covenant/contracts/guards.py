"""
Precondition checks shared by the ledger components.

Each guard either returns the validated value or raises the matching
CovenantError. None of them write anything.
"""

from typing import Any, Optional

from ..core.config import LedgerConfig
from ..core.exceptions import (
    InvalidInputError,
    InvalidStateError,
    NotAuthorizedError,
    NotFoundError,
)
from ..core.identity import CallerSnapshot, IdentityContext
from ..core.models import AccessLevel, Contract, ContractStatus
from ..storage.database import LedgerDatabase


def require_text(value: Any, field_name: str, max_length: int) -> str:
    """Non-empty string no longer than max_length."""
    if not isinstance(value, str) or not value:
        raise InvalidInputError(f"{field_name} must be a non-empty string", field_name=field_name)
    if len(value) > max_length:
        raise InvalidInputError(
            f"{field_name} exceeds {max_length} characters", field_name=field_name
        )
    return value


def require_hash(value: Any, field_name: str, length: int) -> bytes:
    """Opaque byte string of exactly length bytes."""
    if not isinstance(value, (bytes, bytearray, memoryview)):
        raise InvalidInputError(f"{field_name} must be bytes", field_name=field_name)
    value = bytes(value)
    if len(value) != length:
        raise InvalidInputError(
            f"{field_name} must be exactly {length} bytes, got {len(value)}",
            field_name=field_name,
        )
    return value


def require_range(value: Any, field_name: str, low: int, high: int) -> int:
    # bool is an int subclass but never a valid count
    if not isinstance(value, int) or isinstance(value, bool):
        raise InvalidInputError(f"{field_name} must be an integer", field_name=field_name)
    if not low <= value <= high:
        raise InvalidInputError(
            f"{field_name} must be between {low} and {high}, got {value}",
            field_name=field_name,
        )
    return value


def require_caller(ctx: IdentityContext, config: LedgerConfig) -> CallerSnapshot:
    """Read caller and timestamp once and validate them."""
    snapshot = ctx.snapshot()
    require_text(snapshot.caller, "caller", config.max_principal_length)
    if (
        not isinstance(snapshot.timestamp, int)
        or isinstance(snapshot.timestamp, bool)
        or snapshot.timestamp < 0
    ):
        raise InvalidInputError("timestamp must be a non-negative integer", field_name="timestamp")
    return snapshot


def load_contract(database: LedgerDatabase, contract_id: int) -> Optional[Contract]:
    row = database.fetch_one("SELECT * FROM contracts WHERE contract_id = ?", (contract_id,))
    return Contract.from_row(row) if row else None


def require_contract(database: LedgerDatabase, contract_id: Any) -> Contract:
    """The contract, or NotFound."""
    if not isinstance(contract_id, int) or isinstance(contract_id, bool) or contract_id < 0:
        raise NotFoundError(f"Contract not found: {contract_id!r}")
    contract = load_contract(database, contract_id)
    if contract is None:
        raise NotFoundError(f"Contract not found: {contract_id}", contract_id)
    return contract


def require_active(contract: Contract, operation: str) -> None:
    if contract.status != ContractStatus.ACTIVE:
        raise InvalidStateError(
            f"Cannot {operation}: contract {contract.contract_id} is {contract.status.value}",
            contract.contract_id,
        )


def require_level(
    stored: Optional[AccessLevel],
    required: AccessLevel,
    contract_id: int,
    principal: str,
    exact: bool = False,
) -> None:
    """
    Compare a stored access level against the one an operation needs.

    exact=True demands equality (admin checks), otherwise stored >= required.
    """
    if stored is None:
        allowed = False
    elif exact:
        allowed = stored == required
    else:
        allowed = stored >= required
    if not allowed:
        raise NotAuthorizedError(
            f"{principal} lacks {required.name} access on contract {contract_id}",
            contract_id=contract_id,
            principal=principal,
            required=required.name,
        )
