"""Pydantic models for the external screening API payloads."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from screening.models.verdicts import AddressKey


class _ApiModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class ScreeningRequestItem(_ApiModel):
    """One address submitted in a screening batch."""

    address: str
    chain: str
    account_external_id: str = Field(..., alias="accountExternalId")

    @classmethod
    def from_key(cls, key: AddressKey) -> "ScreeningRequestItem":
        return cls(address=key.address, chain=key.chain, account_external_id=key.id)


class AddressRiskIndicator(_ApiModel):
    category: Optional[str] = None
    category_id: Optional[str] = Field(None, alias="categoryId")
    category_risk_score_level: float = Field(..., alias="categoryRiskScoreLevel")
    category_risk_score_level_label: Optional[str] = Field(None, alias="categoryRiskScoreLevelLabel")
    risk_type: Optional[str] = Field(None, alias="riskType")


class Entity(_ApiModel):
    category: Optional[str] = None
    category_id: Optional[str] = Field(None, alias="categoryId")
    confidence_score_label: Optional[str] = Field(None, alias="confidenceScoreLabel")
    entity: Optional[str] = None
    risk_score_level: float = Field(..., alias="riskScoreLevel")
    risk_score_level_label: Optional[str] = Field(None, alias="riskScoreLevelLabel")


class AddressScreeningResult(_ApiModel):
    """Per-address result returned by the screening API."""

    address: Optional[str] = None
    address_submitted: str = Field(..., alias="addressSubmitted")
    chain: str
    entities: List[Entity] = Field(default_factory=list)
    address_risk_indicators: List[AddressRiskIndicator] = Field(
        default_factory=list, alias="addressRiskIndicators"
    )

    def key(self) -> AddressKey:
        return AddressKey(chain=self.chain, address=self.address_submitted)


__all__ = [
    "ScreeningRequestItem",
    "AddressRiskIndicator",
    "Entity",
    "AddressScreeningResult",
]
