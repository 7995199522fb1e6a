"""Custom exceptions for frameguide."""

from __future__ import annotations

from enum import Enum


class FrameguideError(Exception):
    """Base exception for all frameguide errors."""


class ConfigError(FrameguideError):
    """Raised when a ``FRAMEGUIDE_*`` environment variable cannot be parsed."""

    def __init__(self, key: str, value: str, expected: str) -> None:
        self.key = key
        self.value = value
        super().__init__(f"{key}={value!r} is not a valid {expected}")


# ── dependency resolution ─────────────────────────────────────────────────


class ResolutionError(FrameguideError):
    """Raised when a package cannot be mapped to a source repository."""

    def __init__(self, name: str, message: str) -> None:
        self.name = name
        super().__init__(f"{name}: {message}")


class PackageNotFoundError(ResolutionError):
    """The package registry has no such package (HTTP 404 or no repo field)."""


class RateLimitedError(ResolutionError):
    """The package registry refused the request with HTTP 429."""


class BadResponseError(ResolutionError):
    """Transport failure, unexpected status, oversized or unparseable body."""


class UnsupportedEcosystemError(ResolutionError):
    """No resolver is registered for the requested ecosystem."""


# ── repository sync ───────────────────────────────────────────────────────


class RepositorySyncError(FrameguideError):
    """Raised when a git clone / fetch / ls-remote fails."""


class CheckoutLockTimeout(FrameguideError):
    """Raised when a checkout lock could not be acquired in time."""


# ── consultation ──────────────────────────────────────────────────────────


class FailureKind(str, Enum):
    TIMEOUT = "timeout"
    NO_MARKERS = "no_markers"
    NO_CITATION = "no_citation"
    PROCESS_ERROR = "process_error"


class ConsultationError(FrameguideError):
    """Raised when a consult subprocess fails to produce trusted guidance."""

    def __init__(self, kind: FailureKind, message: str) -> None:
        self.kind = kind
        super().__init__(message)
