"""Pydantic schemas for the address screening endpoint."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from .verdicts import AddressKey, ScreeningVerdict


class AddressPayload(BaseModel):
    """One (chain, address) pair submitted for screening."""

    chain: str = Field(..., min_length=1, description="Chain identifier, e.g. ethereum")
    address: str = Field(..., min_length=1, description="Address literal as used on the chain")

    def to_key(self) -> AddressKey:
        return AddressKey(chain=self.chain, address=self.address)


class ScreeningResult(BaseModel):
    """Verdict for a single address."""

    model_config = ConfigDict(populate_by_name=True)

    chain: str
    address: str
    is_blacklisted: bool = Field(..., alias="isBlacklisted")

    @classmethod
    def from_verdict(cls, verdict: ScreeningVerdict) -> "ScreeningResult":
        return cls(
            chain=verdict.address.chain,
            address=verdict.address.address,
            is_blacklisted=verdict.is_blacklisted,
        )


__all__ = ["AddressPayload", "ScreeningResult"]
