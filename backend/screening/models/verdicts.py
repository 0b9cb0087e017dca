"""Core value types shared by the caches, the scorer and the orchestrator."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List


@dataclass(frozen=True)
class AddressKey:
    """A (chain, address) pair; the same address on two chains is distinct."""

    chain: str
    address: str

    @property
    def id(self) -> str:
        """Lookup key used by both caches and sent as the external account id."""
        return f"{self.address}_{self.chain}"


@dataclass(frozen=True)
class ScreeningVerdict:
    address: AddressKey
    is_blacklisted: bool


class LookupStatus(str, Enum):
    BLACKLISTED = "blacklisted"
    NOT_FOUND = "not_found"


@dataclass(frozen=True)
class DurableLookup:
    """Result of a durable store read.

    The store can only prove positives, so a miss is ``NOT_FOUND`` (unknown)
    and never "clean".
    """

    address: AddressKey
    status: LookupStatus

    @property
    def is_blacklisted(self) -> bool:
        return self.status is LookupStatus.BLACKLISTED

    @property
    def not_found(self) -> bool:
        return self.status is LookupStatus.NOT_FOUND

    def to_verdict(self) -> ScreeningVerdict:
        if self.not_found:
            raise ValueError(f"No durable verdict for {self.address.id}")
        return ScreeningVerdict(address=self.address, is_blacklisted=True)


def dedupe_addresses(addresses: Iterable[AddressKey]) -> List[AddressKey]:
    """Drop repeated addresses, keeping the first occurrence order."""
    seen = set()
    unique: List[AddressKey] = []
    for address in addresses:
        if address in seen:
            continue
        seen.add(address)
        unique.append(address)
    return unique


__all__ = [
    "AddressKey",
    "ScreeningVerdict",
    "LookupStatus",
    "DurableLookup",
    "dedupe_addresses",
]
