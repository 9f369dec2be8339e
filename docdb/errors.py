"""
Error types for docdb.

This module defines the error taxonomy shared by the store, the codecs and
the HTTP adapter:
- DocDbError: Base exception
- NotFoundError: Collection or record does not exist
- MalformedInputError: Import payload could not be parsed or has the wrong shape
- NoPayloadError: Import requested without any attached data

Every exception maps to an ErrorKind. The store never lets these escape to
callers; it converts them into a failed Result carrying the kind.

Invariants:
    - All errors inherit from DocDbError
    - Each error class has exactly one ErrorKind
    - Error messages name the collection/record involved
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional


class ErrorKind(str, Enum):
    """Failure kinds reported by store and service operations."""

    NOT_FOUND = "NOT_FOUND"
    MALFORMED_INPUT = "MALFORMED_INPUT"
    NO_PAYLOAD = "NO_PAYLOAD"


class DocDbError(Exception):
    """Base exception for all docdb errors.

    Attributes:
        message: Error message
        code: Error code for programmatic handling
        details: Additional error context
    """

    kind: Optional[ErrorKind] = None

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or (self.kind.value if self.kind else "DOCDB_ERROR")
        self.details = details or {}


class NotFoundError(DocDbError):
    """Resource not found.

    Raised when:
    - Collection doesn't exist
    - Record doesn't exist in an existing collection
    """

    kind = ErrorKind.NOT_FOUND

    def __init__(
        self,
        message: str,
        resource_type: str,
        resource_id: str,
    ) -> None:
        super().__init__(
            message,
            details={
                "resource_type": resource_type,
                "resource_id": resource_id,
            },
        )
        self.resource_type = resource_type
        self.resource_id = resource_id


class MalformedInputError(DocDbError):
    """Import payload is malformed.

    Raised when:
    - Bytes are not valid UTF-8 or not valid JSON
    - JSON top level is not the expected array/object
    - A record element is not an object
    """

    kind = ErrorKind.MALFORMED_INPUT

    def __init__(
        self,
        message: str,
        fmt: Optional[str] = None,
        position: Optional[str] = None,
    ) -> None:
        super().__init__(
            message,
            details={"format": fmt, "position": position},
        )
        self.fmt = fmt
        self.position = position


class NoPayloadError(DocDbError):
    """Import requested with no attached data."""

    kind = ErrorKind.NO_PAYLOAD

    def __init__(self, message: str = "No file provided") -> None:
        super().__init__(message)
