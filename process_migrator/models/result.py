"""Explicit success/failure results for engine gateway calls."""

from dataclasses import dataclass
from enum import Enum
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


class ErrorKind(str, Enum):
    """Why a gateway call did not produce a value."""
    MISSING_INPUT = "missing_input"  # Required argument was empty
    TRANSPORT = "transport"  # Network failure, timeout, connection refused
    ENGINE = "engine"  # Engine answered with an unexpected status
    INVALID_RESPONSE = "invalid_response"  # Body could not be parsed


@dataclass
class GatewayResult(Generic[T]):
    """
    Outcome of a single engine call.

    Callers decide explicitly whether a failure means "skip this step" or
    "abort", instead of inheriting an implicit empty value.
    """
    ok: bool
    value: Optional[T] = None
    error_kind: Optional[ErrorKind] = None
    error: Optional[str] = None
    status_code: Optional[int] = None

    @classmethod
    def success(cls, value: Optional[T] = None, status_code: Optional[int] = None) -> "GatewayResult[T]":
        return cls(ok=True, value=value, status_code=status_code)

    @classmethod
    def failure(
        cls,
        error_kind: ErrorKind,
        error: str,
        status_code: Optional[int] = None
    ) -> "GatewayResult[T]":
        return cls(ok=False, error_kind=error_kind, error=error, status_code=status_code)

    def unwrap_or(self, default: T) -> T:
        """Return the value on success (and when present), else the default."""
        if self.ok and self.value is not None:
            return self.value
        return default
