"""Durable, positives-only cache of addresses already proven blacklisted."""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Sequence

from sqlalchemy import Column, MetaData, Table, Text, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from screening.exceptions import ConfigurationError, StorageError
from screening.models.verdicts import AddressKey, DurableLookup, LookupStatus, ScreeningVerdict

LOGGER = logging.getLogger(__name__)

metadata = MetaData()

blacklisted = Table(
    "blacklisted",
    metadata,
    Column("address", Text, unique=True, nullable=False),
    Column("chain", Text, nullable=False),
)

_SUPPORTED_DIALECTS = ("postgresql", "sqlite")


def _insert_ignore(dialect_name: str):
    """Insert statement that skips rows whose address already exists."""
    if dialect_name == "postgresql":
        return postgresql.insert(blacklisted).on_conflict_do_nothing(index_elements=["address"])
    return sqlite.insert(blacklisted).on_conflict_do_nothing(index_elements=["address"])


class BlacklistStore:
    """Append-only table of blacklisted addresses.

    A row proves an address is blacklisted. A missing row proves nothing, so
    lookups report misses as ``NOT_FOUND`` rather than clean. Clean verdicts
    are never written here.
    """

    def __init__(self, engine: Engine) -> None:
        dialect = engine.dialect.name
        if dialect not in _SUPPORTED_DIALECTS:
            raise ConfigurationError(
                f"Unsupported database dialect '{dialect}'; expected one of {', '.join(_SUPPORTED_DIALECTS)}"
            )
        self._engine = engine
        self._insert = _insert_ignore(dialect)
        self.create_schema()

    def create_schema(self) -> None:
        """Create the blacklist table if it does not exist yet."""
        try:
            metadata.create_all(self._engine, checkfirst=True)
        except SQLAlchemyError as exc:
            LOGGER.exception("Failed to create blacklist table: %s", exc)
            raise StorageError("Unable to create blacklist table") from exc

    def lookup(self, addresses: Sequence[AddressKey]) -> List[DurableLookup]:
        """Return one tagged result per input address, in input order."""
        if not addresses:
            return []

        params = sorted({address_info.address for address_info in addresses})
        query = select(blacklisted.c.address).where(blacklisted.c.address.in_(params))

        try:
            with self._engine.connect() as conn:
                existing = set(conn.execute(query).scalars())
        except SQLAlchemyError as exc:
            LOGGER.exception("Failed to query blacklist: %s", exc)
            raise StorageError("Unable to query blacklisted addresses") from exc

        return [
            DurableLookup(
                address=address_info,
                status=LookupStatus.BLACKLISTED if address_info.address in existing else LookupStatus.NOT_FOUND,
            )
            for address_info in addresses
        ]

    def record(self, verdicts: Iterable[ScreeningVerdict]) -> int:
        """Persist blacklisted verdicts in one transaction; clean verdicts are dropped.

        Returns the number of rows submitted for insertion.
        """
        rows: Dict[str, dict] = {}
        for verdict in verdicts:
            if not verdict.is_blacklisted:
                continue
            key = verdict.address
            rows.setdefault(key.address, {"address": key.address, "chain": key.chain})

        if not rows:
            return 0

        try:
            with self._engine.begin() as conn:
                conn.execute(self._insert, list(rows.values()))
        except SQLAlchemyError as exc:
            LOGGER.exception("Failed to record blacklisted addresses: %s", exc)
            raise StorageError("Unable to record blacklisted addresses") from exc

        LOGGER.info("Recorded %d blacklisted addresses", len(rows))
        return len(rows)


__all__ = ["BlacklistStore", "blacklisted", "metadata"]
