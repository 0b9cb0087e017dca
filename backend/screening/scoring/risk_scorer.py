"""Turn addresses with unknown durable status into verdicts via the external screening API."""

from __future__ import annotations

import logging
import math
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, List, Sequence, Tuple

import requests
from pydantic import TypeAdapter, ValidationError

from screening.cache.clearance import ClearanceCache
from screening.exceptions import RemoteScoringError
from screening.models.verdicts import AddressKey, ScreeningVerdict, dedupe_addresses
from screening.scoring.schemas import AddressScreeningResult, ScreeningRequestItem

LOGGER = logging.getLogger(__name__)

_RESULTS_ADAPTER = TypeAdapter(List[AddressScreeningResult])


@dataclass(frozen=True)
class ScorerSettings:
    """Immutable scorer configuration, built once at startup."""

    url: str
    api_key: str = field(repr=False)
    batch_size: int
    risk_score_limit: float
    always_whitelisted: FrozenSet[str] = field(default_factory=frozenset)
    timeout_seconds: float = 30
    max_workers: int = 1

    def __post_init__(self) -> None:
        if self.batch_size <= 0:
            raise ValueError("batch_size must be positive")
        if self.max_workers <= 0:
            raise ValueError("max_workers must be positive")
        if not math.isfinite(self.risk_score_limit):
            raise ValueError("risk_score_limit must be a finite number")


def evaluate_risk(result: AddressScreeningResult, risk_score_limit: float) -> bool:
    """Return True if any entity or risk indicator scores above the limit."""
    for entity in result.entities:
        if entity.risk_score_level > risk_score_limit:
            return True

    for indicator in result.address_risk_indicators:
        if indicator.category_risk_score_level > risk_score_limit:
            return True

    return False


def _chunks(items: Sequence[AddressKey], size: int) -> List[Sequence[AddressKey]]:
    return [items[i : i + size] for i in range(0, len(items), size)]


class RemoteRiskScorer:
    """Screens addresses through the bypass set, the clearance cache and the remote API, in that order."""

    def __init__(self, settings: ScorerSettings, cache: ClearanceCache) -> None:
        self.settings = settings
        self.cache = cache

    def _partition(
        self, addresses: Sequence[AddressKey]
    ) -> Tuple[List[AddressKey], List[AddressKey], List[AddressKey]]:
        """Split unique addresses into (whitelisted, cached clean, to score)."""
        whitelisted: List[AddressKey] = []
        cached: List[AddressKey] = []
        to_score: List[AddressKey] = []

        for address_info in dedupe_addresses(addresses):
            if address_info.address in self.settings.always_whitelisted:
                LOGGER.info("Received an always whitelisted address %s", address_info.address)
                whitelisted.append(address_info)
            elif self.cache.get(address_info.id):
                cached.append(address_info)
            else:
                to_score.append(address_info)

        return whitelisted, cached, to_score

    def _request_batch(self, batch: Sequence[AddressKey]) -> List[AddressScreeningResult]:
        """Send one batch to the screening API and parse the per-address results."""
        inputs = [
            ScreeningRequestItem.from_key(address_info).model_dump(by_alias=True)
            for address_info in batch
        ]

        try:
            LOGGER.info("Sending batch of %d addresses to the screening API", len(inputs))
            response = requests.post(
                self.settings.url,
                json=inputs,
                auth=(self.settings.api_key, self.settings.api_key),
                timeout=self.settings.timeout_seconds,
            )
            response.raise_for_status()
            payload = response.json()
        except (requests.RequestException, ValueError) as exc:
            LOGGER.exception("Screening API request failed: %s", exc)
            raise RemoteScoringError("Failed to screen addresses with the screening API") from exc

        try:
            return _RESULTS_ADAPTER.validate_python(payload)
        except ValidationError as exc:
            LOGGER.error("Unexpected screening API response format: %s", exc)
            raise RemoteScoringError("Unexpected screening API response format") from exc

    def _score_batch(self, batch: Sequence[AddressKey]) -> Dict[AddressKey, bool]:
        """Score one batch, caching clean results; every submitted address must come back."""
        submitted = set(batch)
        decided: Dict[AddressKey, bool] = {}

        for result in self._request_batch(batch):
            key = result.key()
            if key not in submitted:
                LOGGER.warning("Ignoring screening result for unsubmitted address %s", key.id)
                continue

            blacklisted = evaluate_risk(result, self.settings.risk_score_limit)
            if not blacklisted:
                self.cache.put(key.id)
            decided[key] = blacklisted

        missing = [address_info.id for address_info in batch if address_info not in decided]
        if missing:
            LOGGER.error("Screening API returned no result for %s", ", ".join(missing))
            raise RemoteScoringError(f"Screening API returned no result for {len(missing)} addresses")

        return decided

    def _score(self, to_score: Sequence[AddressKey]) -> Dict[AddressKey, bool]:
        batches = _chunks(to_score, self.settings.batch_size)
        decided: Dict[AddressKey, bool] = {}

        if self.settings.max_workers == 1 or len(batches) == 1:
            for batch in batches:
                decided.update(self._score_batch(batch))
            return decided

        workers = min(self.settings.max_workers, len(batches))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="screening-batch") as pool:
            for batch_result in pool.map(self._score_batch, batches):
                decided.update(batch_result)
        return decided

    def is_blacklisted(self, addresses: Sequence[AddressKey]) -> List[ScreeningVerdict]:
        """Return one verdict per input address, in input order."""
        if not addresses:
            return []

        whitelisted, cached, to_score = self._partition(addresses)

        if not to_score:
            LOGGER.info(
                "All %d addresses are whitelisted or cached clean; skipping screening API",
                len(addresses),
            )
            return [ScreeningVerdict(address=address_info, is_blacklisted=False) for address_info in addresses]

        LOGGER.info(
            "Screening %d addresses (%d whitelisted, %d cached clean)",
            len(to_score),
            len(whitelisted),
            len(cached),
        )
        decided = self._score(to_score)

        return [
            ScreeningVerdict(address=address_info, is_blacklisted=decided.get(address_info, False))
            for address_info in addresses
        ]


__all__ = ["RemoteRiskScorer", "ScorerSettings", "evaluate_risk"]
