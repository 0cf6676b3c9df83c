"""Domain-specific errors for nasctl."""

from __future__ import annotations

_NOT_FOUND_MARKERS = ("does not exist", "[ENOENT]")


class NasctlError(Exception):
    """Base error for nasctl."""


class CatalogValidationError(NasctlError):
    """Raised when a method catalog does not conform to schema or semantics."""


class CatalogLoadError(NasctlError):
    """Raised when loading catalog sources fails."""


class VersionParseError(NasctlError):
    """Raised when an appliance version string cannot be parsed."""


class UnsupportedOperationError(NasctlError):
    """Raised when the configured caller lacks a required capability."""


class TransportError(NasctlError):
    """Base error for caller implementations."""


class DecodeError(NasctlError):
    """Raised when a response does not have the expected shape.

    ``step`` names the decode step that failed (e.g. ``"user.query"``); the
    underlying exception stays reachable through ``__cause__``.
    """

    def __init__(self, step: str, message: str) -> None:
        super().__init__(f"parse {step} response: {message}")
        self.step = step


def is_not_found(error: BaseException | None) -> bool:
    """Return True when *error* reports a missing resource."""
    if error is None:
        return False
    message = str(error)
    return any(marker in message for marker in _NOT_FOUND_MARKERS)
