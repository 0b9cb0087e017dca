"""Persistence layer for durable blacklist verdicts."""

from .blacklist_store import BlacklistStore
from .engine import close_engine, get_engine

__all__ = ["BlacklistStore", "get_engine", "close_engine"]
