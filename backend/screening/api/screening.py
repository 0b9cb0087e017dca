"""Endpoint screening batches of (chain, address) pairs."""

from __future__ import annotations

import logging
from typing import List

from fastapi import APIRouter, HTTPException
from fastapi.concurrency import run_in_threadpool

from screening.config import get_settings
from screening.exceptions import RemoteScoringError, StorageError
from screening.models import AddressPayload, ScreeningResult, dedupe_addresses
from screening.screener import get_address_screener

LOGGER = logging.getLogger(__name__)

router = APIRouter(prefix="/screening", tags=["screening"])


@router.post("/addresses", response_model=List[ScreeningResult], response_model_by_alias=True)
async def screen_addresses(payload: List[AddressPayload]) -> List[ScreeningResult]:
    """Return a blacklist verdict for every unique address in the request."""
    limit = get_settings().request_batch_size
    if len(payload) > limit:
        raise HTTPException(
            status_code=400,
            detail=f"Too many addresses in one request: {len(payload)} > {limit}",
        )

    addresses = dedupe_addresses(item.to_key() for item in payload)
    if not addresses:
        return []

    screener = get_address_screener()
    try:
        verdicts = await run_in_threadpool(screener.is_blacklisted, addresses)
    except StorageError as exc:
        LOGGER.error("Screening failed on durable store: %s", exc)
        raise HTTPException(status_code=502, detail="Failed to screen addresses") from exc
    except RemoteScoringError as exc:
        LOGGER.error("Screening failed on remote scoring API: %s", exc)
        raise HTTPException(status_code=502, detail="Failed to screen addresses") from exc

    blacklisted = sum(1 for verdict in verdicts if verdict.is_blacklisted)
    LOGGER.info("Screened %d addresses, %d blacklisted", len(verdicts), blacklisted)
    return [ScreeningResult.from_verdict(verdict) for verdict in verdicts]


__all__ = ["router"]
