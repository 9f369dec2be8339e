"""
Result type returned by store and service operations.

Operations report success or a specific ErrorKind instead of raising, so a
single bad request can never take the process down and callers can branch
on the kind.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Generic, Optional, TypeVar

from .errors import DocDbError, ErrorKind

T = TypeVar("T")


@dataclass(frozen=True)
class Result(Generic[T]):
    """Outcome of an operation.

    Attributes:
        ok: Whether the operation succeeded
        value: Operation output (None on failure)
        error: Failure kind (None on success)
        message: Human readable description
    """

    ok: bool
    value: Optional[T] = None
    error: Optional[ErrorKind] = None
    message: str = ""

    @classmethod
    def success(cls, value: Optional[T] = None, message: str = "") -> Result[T]:
        return cls(ok=True, value=value, message=message)

    @classmethod
    def failure(cls, error: ErrorKind, message: str) -> Result[T]:
        return cls(ok=False, error=error, message=message)

    @classmethod
    def from_error(cls, exc: DocDbError) -> Result[T]:
        """Convert a DocDbError into a failed Result."""
        return cls.failure(exc.kind or ErrorKind.MALFORMED_INPUT, exc.message)

    @property
    def not_found(self) -> bool:
        return self.error == ErrorKind.NOT_FOUND

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON responses."""
        data: Dict[str, Any] = {"ok": self.ok, "message": self.message}
        if self.error is not None:
            data["error_code"] = self.error.value
        return data
