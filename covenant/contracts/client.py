"""
Agreement Ledger Client

Service-facing wrapper over ContractRegistry. Every call returns an
OperationResult that is either ok with a value or failed with an ErrorCode,
so callers never have to guess from a sentinel value.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional

from ..core.config import LedgerConfig
from ..core.exceptions import CovenantError, ErrorCode
from ..core.identity import IdentityContext
from ..core.models import AccessLevel
from .registry import ContractRegistry, create_registry


logger = logging.getLogger(__name__)


@dataclass
class OperationResult:
    """Tagged outcome of a ledger operation."""

    ok: bool
    operation: str
    value: Any = None
    error: Optional[ErrorCode] = None
    message: str = ""
    details: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def success(cls, operation: str, value: Any = None) -> "OperationResult":
        return cls(ok=True, operation=operation, value=value)

    @classmethod
    def failure(cls, operation: str, error: CovenantError) -> "OperationResult":
        details = {}
        if error.contract_id is not None:
            details["contract_id"] = error.contract_id
        field_name = getattr(error, "field_name", None)
        if field_name:
            details["field"] = field_name
        return cls(
            ok=False,
            operation=operation,
            error=error.code,
            message=str(error),
            details=details,
        )

    def unwrap(self) -> Any:
        """Value of a successful result; raises ValueError on failure."""
        if not self.ok:
            raise ValueError(f"{self.operation} failed with {self.error.value}: {self.message}")
        return self.value

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        value = self.value.to_dict() if hasattr(self.value, "to_dict") else self.value
        return {
            "ok": self.ok,
            "operation": self.operation,
            "value": value,
            "error": self.error.value if self.error else None,
            "message": self.message,
            "details": self.details,
        }


class ContractsClient:
    """
    Client for the agreement ledger.

    Provides the service's operation surface:
    - create_contract / get_contract_details / archive_contract
    - record_version
    - add_signature
    - grant_access / revoke_access / is_admin
    """

    def __init__(self, registry: Optional[ContractRegistry] = None, config: Optional[LedgerConfig] = None):
        """
        Initialize client.

        Args:
            registry: Registry to wrap (a new one is created if None)
            config: Configuration for a newly created registry
        """
        self._registry = registry or create_registry(config)

        # Statistics
        self._succeeded = 0
        self._failed = 0

    @property
    def registry(self) -> ContractRegistry:
        """Get the underlying registry."""
        return self._registry

    def create_contract(
        self,
        ctx: IdentityContext,
        title: str,
        description: str,
        required_signatures: int,
        initial_content_hash: bytes,
    ) -> OperationResult:
        return self._call(
            "create_contract",
            self._registry.create_contract,
            ctx,
            title,
            description,
            required_signatures,
            initial_content_hash,
        )

    def get_contract_details(self, contract_id: int) -> OperationResult:
        return self._call("get_contract_details", self._registry.get_contract_details, contract_id)

    def archive_contract(self, ctx: IdentityContext, contract_id: int) -> OperationResult:
        return self._call("archive_contract", self._registry.archive_contract, ctx, contract_id)

    def record_version(
        self,
        ctx: IdentityContext,
        contract_id: int,
        content_hash: bytes,
        metadata: str,
    ) -> OperationResult:
        return self._call(
            "record_version",
            self._registry.record_version,
            ctx,
            contract_id,
            content_hash,
            metadata,
        )

    def add_signature(self, ctx: IdentityContext, contract_id: int, signature_hash: bytes) -> OperationResult:
        return self._call("add_signature", self._registry.add_signature, ctx, contract_id, signature_hash)

    def grant_access(
        self,
        ctx: IdentityContext,
        contract_id: int,
        user: str,
        level: AccessLevel,
    ) -> OperationResult:
        return self._call("grant_access", self._registry.grant_access, ctx, contract_id, user, level)

    def revoke_access(self, ctx: IdentityContext, contract_id: int, user: str) -> OperationResult:
        return self._call("revoke_access", self._registry.revoke_access, ctx, contract_id, user)

    def is_admin(self, contract_id: int, principal: str) -> OperationResult:
        return self._call("is_admin", self._registry.is_admin, contract_id, principal)

    def signature_status(self, contract_id: int) -> OperationResult:
        return self._call("signature_status", self._registry.signature_status, contract_id)

    def get_statistics(self) -> Dict[str, Any]:
        """Get client statistics."""
        return {
            "succeeded": self._succeeded,
            "failed": self._failed,
            "contracts": self._registry.contract_count(),
            "events": self._registry.events.event_count(),
        }

    def close(self) -> None:
        self._registry.close()

    def _call(self, operation: str, func: Callable[..., Any], *args: Any) -> OperationResult:
        try:
            value = func(*args)
        except CovenantError as e:
            self._failed += 1
            logger.warning(f"{operation} rejected ({e.code.value}): {e}")
            return OperationResult.failure(operation, e)

        self._succeeded += 1
        return OperationResult.success(operation, value)


def create_contracts_client(config: Optional[LedgerConfig] = None) -> ContractsClient:
    """Factory function to create a contracts client over a fresh registry."""
    return ContractsClient(registry=create_registry(config))
