"""Normalized error hierarchy for remote_state."""

from __future__ import annotations

from typing import Optional


class RemoteStateError(Exception):
    """Base class for all remote_state errors.

    :param message: Human-readable error description.
    :param field: The configuration key involved in the error, if any.
    :param backend: The provider type involved, if any.
    """

    def __init__(self, message: str = "", *, field: Optional[str] = None, backend: Optional[str] = None) -> None:
        self.field = field
        self.backend = backend
        super().__init__(message)

    def _context(self) -> list[str]:
        parts = []
        if self.field is not None:
            parts.append(f"field={self.field!r}")
        if self.backend is not None:
            parts.append(f"backend={self.backend!r}")
        return parts

    def __str__(self) -> str:
        parts = [super().__str__(), *self._context()]
        return " | ".join(parts) if len(parts) > 1 else parts[0]

    def __repr__(self) -> str:
        cls = type(self).__name__
        args = [repr(self.args[0] if self.args else ""), *self._context()]
        return f"{cls}({', '.join(args)})"


class DecodeError(RemoteStateError):
    """Raised when a known configuration key holds a value of the wrong shape.

    :param expected: Description of the expected type (e.g. ``"bool"``).
    """

    def __init__(
        self,
        message: str = "",
        *,
        field: Optional[str] = None,
        backend: Optional[str] = None,
        expected: str = "",
    ) -> None:
        self.expected = expected
        super().__init__(message, field=field, backend=backend)

    def _context(self) -> list[str]:
        parts = super()._context()
        if self.expected:
            parts.append(f"expected={self.expected!r}")
        return parts


class MissingRequiredConfig(RemoteStateError):
    """Raised when the required storage identifier is empty."""


class RemoteCallError(RemoteStateError):
    """Raised when a provider API call fails.

    :param operation: The provider operation that failed (e.g. ``"create_resource"``).
    """

    def __init__(
        self,
        message: str = "",
        *,
        field: Optional[str] = None,
        backend: Optional[str] = None,
        operation: str = "",
    ) -> None:
        self.operation = operation
        super().__init__(message, field=field, backend=backend)

    def _context(self) -> list[str]:
        parts = super()._context()
        if self.operation:
            parts.append(f"operation={self.operation!r}")
        return parts


class ConsistencyTimeoutError(RemoteStateError):
    """Raised when a created resource does not become visible within the retry ceiling.

    :param attempts: Number of existence checks performed.
    """

    def __init__(
        self,
        message: str = "",
        *,
        field: Optional[str] = None,
        backend: Optional[str] = None,
        attempts: int = 0,
    ) -> None:
        self.attempts = attempts
        super().__init__(message, field=field, backend=backend)

    def _context(self) -> list[str]:
        parts = super()._context()
        if self.attempts:
            parts.append(f"attempts={self.attempts}")
        return parts


class AmbiguousExistenceError(RemoteStateError):
    """Raised when the existence probe itself failed.

    The storage resource must be treated as existing: ``assumed_exists`` is
    always ``True`` and callers must not attempt to re-create it. The
    underlying provider error is available as ``__cause__``.
    """

    assumed_exists = True


class CapabilityNotSupported(RemoteStateError):
    """Raised when a step requires a capability the provider does not declare.

    :param capability: The name of the unsupported capability.
    """

    def __init__(
        self,
        message: str = "",
        *,
        field: Optional[str] = None,
        backend: Optional[str] = None,
        capability: str = "",
    ) -> None:
        self.capability = capability
        super().__init__(message, field=field, backend=backend)

    def _context(self) -> list[str]:
        parts = super()._context()
        if self.capability:
            parts.append(f"capability={self.capability!r}")
        return parts


class ReconcileCancelled(RemoteStateError):
    """Raised when the caller cancels a reconciliation between poll attempts."""
