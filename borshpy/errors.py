"""Error types raised while encoding or decoding Borsh data."""

from __future__ import annotations

import enum

__all__ = ["ErrorKind", "BorshError"]


class ErrorKind(enum.Enum):
    """General category of a failure."""

    NOT_FOUND = "entity not found"
    PERMISSION_DENIED = "permission denied"
    CONNECTION_REFUSED = "connection refused"
    CONNECTION_RESET = "connection reset"
    CONNECTION_ABORTED = "connection aborted"
    NOT_CONNECTED = "not connected"
    ADDR_IN_USE = "address in use"
    ADDR_NOT_AVAILABLE = "address not available"
    BROKEN_PIPE = "broken pipe"
    ALREADY_EXISTS = "entity already exists"
    WOULD_BLOCK = "operation would block"
    INVALID_INPUT = "invalid input parameter"
    INVALID_DATA = "invalid data"
    TIMED_OUT = "timed out"
    WRITE_ZERO = "write zero"
    INTERRUPTED = "operation interrupted"
    OTHER = "other os error"
    UNEXPECTED_EOF = "unexpected end of file"

    def describe(self) -> str:
        """Return the short human-readable description of this kind."""
        return self.value


class BorshError(ValueError):
    """Raised when a value cannot be serialized or a byte string cannot be decoded.

    ``message`` is optional; without it the error reads as the description
    of its ``kind``.
    """

    def __init__(self, kind: ErrorKind, message: str | None = None) -> None:
        if not isinstance(kind, ErrorKind):
            raise TypeError(f"kind must be an ErrorKind, not {type(kind).__name__}")
        super().__init__(kind, message)
        self.kind = kind
        self.message = message

    def __str__(self) -> str:
        if self.message is None:
            return self.kind.describe()
        return self.message

    def __repr__(self) -> str:
        if self.message is None:
            return f"{type(self).__name__}({self.kind.name})"
        return f"{type(self).__name__}({self.kind.name}, {self.message!r})"