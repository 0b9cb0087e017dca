"""Error kinds raised by the screening core."""

from __future__ import annotations


class ScreeningError(RuntimeError):
    """Base class for failures that abort a screening call."""


class StorageError(ScreeningError):
    """The durable blacklist store could not be read or written."""


class RemoteScoringError(ScreeningError):
    """The external risk scoring API failed or returned an unusable body."""


class ConfigurationError(ValueError):
    """Settings are missing or invalid; raised only at startup."""


__all__ = [
    "ScreeningError",
    "StorageError",
    "RemoteScoringError",
    "ConfigurationError",
]
