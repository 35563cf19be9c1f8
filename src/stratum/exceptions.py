"""
Stratum exception hierarchy.

All domain-specific exceptions inherit from StratumError, so callers can
catch any store failure with a single base class while still handling the
specific cases they care about.

Hierarchy::

    StratumError
    ├── ConfigurationError          - source loading and parsing
    │   ├── UnsupportedFormatError  - unknown or disabled source format
    │   └── ReservedNamespaceError  - resolve() given the "self" namespace
    └── ResolutionDepthError        - strict mode: placeholder depth exceeded
"""

from __future__ import annotations


class StratumError(Exception):
    """Base exception for all Stratum errors."""

    def __init__(self, message: str, *, details: dict | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


# --- Configuration -----------------------------------------------------------


class ConfigurationError(StratumError):
    """Raised when a configuration source cannot be loaded or parsed."""


class UnsupportedFormatError(ConfigurationError):
    """Raised when a source file has an extension no reader handles."""

    def __init__(self, path: str, message: str | None = None) -> None:
        super().__init__(message or f"Unsupported file type {path}", details={"path": path})
        self.path = path


class ReservedNamespaceError(ConfigurationError):
    """Raised when a caller tries to register a reserved namespace."""

    def __init__(self, namespace: str) -> None:
        super().__init__(
            f'Cannot use reserved key "{namespace}"',
            details={"namespace": namespace},
        )
        self.namespace = namespace


# --- Resolution --------------------------------------------------------------


class ResolutionDepthError(StratumError):
    """Raised in strict mode when a placeholder exceeds the recursion depth.

    The default (lenient) store returns the partially substituted text instead.
    """

    def __init__(self, value: str, max_depth: int) -> None:
        super().__init__(
            f"Placeholder depth exceeded {max_depth} while resolving: {value}",
            details={"value": value, "max_depth": max_depth},
        )
        self.value = value
        self.max_depth = max_depth
