"""Utility helpers for managing the shared SQLAlchemy engine instance."""

import logging
from typing import Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import ArgumentError, SQLAlchemyError

from screening.config import get_settings
from screening.exceptions import ConfigurationError

LOGGER = logging.getLogger(__name__)

_ENGINE: Optional[Engine] = None


def _build_engine(database_url: str) -> Engine:
    """Create and return a new engine for the configured database."""
    try:
        url = make_url(database_url)
    except ArgumentError as exc:
        raise ConfigurationError(f"Invalid DATABASE_URL: {exc}") from exc

    LOGGER.info("Initializing database engine for %s", url.render_as_string(hide_password=True))
    if url.get_backend_name() == "sqlite":
        return create_engine(url, connect_args={"check_same_thread": False})
    return create_engine(url, pool_size=20, max_overflow=80, pool_pre_ping=True)


def get_engine() -> Engine:
    """Return the shared engine instance, creating it if needed."""
    global _ENGINE

    if _ENGINE is None:
        try:
            _ENGINE = _build_engine(get_settings().database_url)
        except (SQLAlchemyError, ValueError) as exc:
            LOGGER.exception("Unable to initialize database engine: %s", exc)
            raise

    return _ENGINE


def close_engine() -> None:
    """Dispose the shared engine if it has been initialized."""
    global _ENGINE

    if _ENGINE is not None:
        LOGGER.info("Disposing database engine")
        _ENGINE.dispose()
        _ENGINE = None


__all__ = ["get_engine", "close_engine"]
