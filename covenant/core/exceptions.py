"""
Covenant Ledger Exceptions

Custom exceptions for the agreement ledger. Every exception carries an
ErrorCode so callers (and the tagged-result client) can tell failures apart
without parsing messages.
"""

from enum import Enum
from typing import Optional


class ErrorCode(str, Enum):
    """Distinguishable failure codes surfaced to callers."""

    NOT_AUTHORIZED = "not_authorized"
    INVALID_INPUT = "invalid_input"
    NOT_FOUND = "not_found"
    VERSION_NOT_FOUND = "version_not_found"
    MAX_SIGNATURES_REACHED = "max_signatures_reached"
    INVALID_STATE = "invalid_state"
    EVENT_FAILED = "event_failed"
    STORAGE_ERROR = "storage_error"
    INTERNAL_ERROR = "internal_error"


class CovenantError(Exception):
    """Base exception for ledger operations."""

    code: ErrorCode = ErrorCode.INTERNAL_ERROR

    def __init__(self, message: str, contract_id: Optional[int] = None):
        self.contract_id = contract_id
        super().__init__(message)


class NotAuthorizedError(CovenantError):
    """Caller lacks the access level the operation requires."""

    code = ErrorCode.NOT_AUTHORIZED

    def __init__(
        self,
        message: str,
        contract_id: Optional[int] = None,
        principal: Optional[str] = None,
        required: Optional[str] = None,
    ):
        self.principal = principal
        self.required = required
        super().__init__(message, contract_id)


class InvalidInputError(CovenantError):
    """An argument is malformed or out of range."""

    code = ErrorCode.INVALID_INPUT

    def __init__(
        self,
        message: str,
        field_name: Optional[str] = None,
        contract_id: Optional[int] = None,
    ):
        self.field_name = field_name
        super().__init__(message, contract_id)


class NotFoundError(CovenantError):
    """Referenced contract (or row keyed under it) does not exist."""

    code = ErrorCode.NOT_FOUND


class VersionNotFoundError(NotFoundError):
    """
    A contract exists but the requested version does not.

    When raised for the latest version this signals an internal
    inconsistency: creation always writes version 0.
    """

    code = ErrorCode.VERSION_NOT_FOUND

    def __init__(self, message: str, contract_id: Optional[int] = None, version: Optional[int] = None):
        self.version = version
        super().__init__(message, contract_id)


class MaxSignaturesReachedError(CovenantError):
    """Signature cap reached (only raised when the hard cap is enabled)."""

    code = ErrorCode.MAX_SIGNATURES_REACHED

    def __init__(self, contract_id: int, required: int):
        self.required = required
        super().__init__(
            f"Contract {contract_id} already has its {required} required signatures",
            contract_id,
        )


class InvalidStateError(CovenantError):
    """Operation is not valid for the contract's current state."""

    code = ErrorCode.INVALID_STATE


class EventFailedError(CovenantError):
    """
    The audit event could not be appended.

    Fatal to the enclosing operation: every staged write is rolled back.
    """

    code = ErrorCode.EVENT_FAILED

    def __init__(
        self,
        message: str,
        contract_id: Optional[int] = None,
        event_type: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ):
        self.event_type = event_type
        self.original_error = original_error
        super().__init__(message, contract_id)


class StorageError(CovenantError):
    """Error in the underlying storage engine."""

    code = ErrorCode.STORAGE_ERROR

    def __init__(
        self,
        message: str,
        operation: str,
        original_error: Optional[Exception] = None,
    ):
        self.operation = operation
        self.original_error = original_error
        super().__init__(message)
