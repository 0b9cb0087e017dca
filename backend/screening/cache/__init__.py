"""In-memory caches used by the remote risk scorer."""

from .clearance import ClearanceCache

__all__ = ["ClearanceCache"]
