"""Screening orchestrator reconciling the durable blacklist with the remote risk scorer."""

from __future__ import annotations

import logging
import threading
from typing import Dict, List, Optional, Sequence

from screening.cache.clearance import ClearanceCache
from screening.config import Settings, get_settings
from screening.db.blacklist_store import BlacklistStore
from screening.db.engine import get_engine
from screening.models.verdicts import AddressKey, ScreeningVerdict
from screening.scoring.risk_scorer import RemoteRiskScorer, ScorerSettings

LOGGER = logging.getLogger(__name__)


class AddressScreener:
    """Single entry point answering "is this address blacklisted?" for a batch.

    The durable store is trusted for positives only. Anything it does not
    know goes to the scorer, and new positives are written back durably.
    """

    def __init__(self, scorer: RemoteRiskScorer, store: BlacklistStore) -> None:
        self.scorer = scorer
        self.store = store

    def is_blacklisted(self, addresses: Sequence[AddressKey]) -> List[ScreeningVerdict]:
        if not addresses:
            return []

        lookups = self.store.lookup(addresses)
        missing = [lookup.address for lookup in lookups if lookup.not_found]

        if not missing:
            LOGGER.info("All %d addresses resolved from the durable blacklist", len(addresses))
            return [lookup.to_verdict() for lookup in lookups]

        if len(missing) == len(addresses):
            scored = self.scorer.is_blacklisted(addresses)
            self.store.record(scored)
            return scored

        LOGGER.info(
            "Durable blacklist resolved %d of %d addresses; scoring the rest",
            len(addresses) - len(missing),
            len(addresses),
        )
        scored = self.scorer.is_blacklisted(missing)
        self.store.record(scored)

        resolved: Dict[AddressKey, bool] = {verdict.address: verdict.is_blacklisted for verdict in scored}
        return [
            lookup.to_verdict()
            if lookup.is_blacklisted
            else ScreeningVerdict(address=lookup.address, is_blacklisted=resolved[lookup.address])
            for lookup in lookups
        ]


def build_address_screener(settings: Settings, store: Optional[BlacklistStore] = None) -> AddressScreener:
    """Wire the durable store, clearance cache and scorer from settings."""
    scorer_settings = ScorerSettings(
        url=settings.screener_url,
        api_key=settings.screener_api_key,
        batch_size=settings.api_batch_size,
        risk_score_limit=settings.risk_score_limit,
        always_whitelisted=settings.whitelisted_addresses,
        timeout_seconds=settings.api_timeout_seconds,
        max_workers=settings.api_max_workers,
    )
    cache = ClearanceCache(
        ttl_seconds=settings.clearance_ttl_seconds,
        max_entries=settings.clearance_max_entries,
    )
    if store is None:
        store = BlacklistStore(get_engine())
    return AddressScreener(RemoteRiskScorer(scorer_settings, cache), store)


_SCREENER: Optional[AddressScreener] = None
_SCREENER_LOCK = threading.Lock()


def get_address_screener() -> AddressScreener:
    """Return the shared screener instance, creating it if needed."""
    global _SCREENER

    with _SCREENER_LOCK:
        if _SCREENER is None:
            _SCREENER = build_address_screener(get_settings())
            LOGGER.info("Address screener initialized")

    return _SCREENER


def reset_address_screener() -> None:
    """Drop the shared screener so the next call rebuilds it."""
    global _SCREENER

    with _SCREENER_LOCK:
        _SCREENER = None


__all__ = [
    "AddressScreener",
    "build_address_screener",
    "get_address_screener",
    "reset_address_screener",
]
