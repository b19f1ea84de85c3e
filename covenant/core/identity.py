"""
Caller Identity

The ledger never looks up "who is calling" on its own. Each operation is
handed an IdentityContext and reads the caller and logical timestamp from
it exactly once, at the start of the operation.
"""

import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass


class IdentityContext(ABC):
    """Supplies the acting principal and logical timestamp for an operation."""

    @abstractmethod
    def current_caller(self) -> str:
        """Return the acting principal."""

    @abstractmethod
    def current_timestamp(self) -> int:
        """Return a monotonically non-decreasing logical timestamp."""

    def snapshot(self) -> "CallerSnapshot":
        """Capture caller and timestamp once for the duration of an operation."""
        return CallerSnapshot(
            caller=self.current_caller(),
            timestamp=self.current_timestamp(),
        )


@dataclass(frozen=True)
class CallerSnapshot:
    """Immutable caller identity and time captured at operation start."""

    caller: str
    timestamp: int


@dataclass(frozen=True)
class StaticIdentity(IdentityContext):
    """Fixed caller and timestamp. Used by tests and embedding callers."""

    caller: str
    timestamp: int = 0

    def current_caller(self) -> str:
        return self.caller

    def current_timestamp(self) -> int:
        return self.timestamp


class LogicalClock:
    """
    Hands out identities with a strictly advancing logical timestamp.

    One tick per call to as_caller(), so sequential operations issued
    through the same clock get increasing timestamps.
    """

    def __init__(self, start: int = 0):
        if start < 0:
            raise ValueError("Logical clock cannot start below zero")
        self._now = start
        self._lock = threading.Lock()

    @property
    def now(self) -> int:
        return self._now

    def tick(self) -> int:
        with self._lock:
            self._now += 1
            return self._now

    def as_caller(self, caller: str) -> StaticIdentity:
        """Identity for the next operation performed by caller."""
        return StaticIdentity(caller=caller, timestamp=self.tick())
