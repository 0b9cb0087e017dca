"""Two-tier caching address screening service."""

__version__ = "1.0.0"
