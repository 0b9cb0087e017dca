"""Data models exposed by the address screening service."""

from .screening import AddressPayload, ScreeningResult
from .verdicts import (
	AddressKey,
	DurableLookup,
	LookupStatus,
	ScreeningVerdict,
	dedupe_addresses,
)

__all__ = [
	"AddressPayload",
	"ScreeningResult",
	"AddressKey",
	"DurableLookup",
	"LookupStatus",
	"ScreeningVerdict",
	"dedupe_addresses",
]
