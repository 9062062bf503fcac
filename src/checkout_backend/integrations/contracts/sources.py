"""
Customer source contracts.

Defines the data shapes shared by the local (in-memory) and remote (merchant
backend) implementations of the customer source client:
- payment sources (cards) as decoded from the backend
- the source variants handed to us by the payment SDK
- client configuration and in-memory state
- result records returned by every client operation

Both clients/mocks/customer_sources.py and clients/real_http/customer_sources.py
must use these contracts.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Union


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class CardBrand(str, Enum):
    VISA = "visa"
    AMEX = "amex"
    MASTERCARD = "mastercard"
    DISCOVER = "discover"
    JCB = "jcb"
    DINERS_CLUB = "diners_club"
    UNKNOWN = "unknown"

    @classmethod
    def from_string(cls, value: str) -> "CardBrand":
        key = (value or "").strip().lower()
        return _BRAND_ALIASES.get(key, cls.UNKNOWN)


_BRAND_ALIASES = {
    "visa": CardBrand.VISA,
    "american express": CardBrand.AMEX,
    "amex": CardBrand.AMEX,
    "mastercard": CardBrand.MASTERCARD,
    "discover": CardBrand.DISCOVER,
    "jcb": CardBrand.JCB,
    "diners club": CardBrand.DINERS_CLUB,
    "diners": CardBrand.DINERS_CLUB,
}


class CardFunding(str, Enum):
    CREDIT = "credit"
    DEBIT = "debit"
    PREPAID = "prepaid"
    UNKNOWN = "unknown"

    @classmethod
    def from_string(cls, value: str) -> "CardFunding":
        key = (value or "").strip().lower()
        for member in cls:
            if member.value == key:
                return member
        return cls.UNKNOWN


# ---------------------------------------------------------------------------
# Sources
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class PaymentSource:
    """A saved card as reported by the merchant backend."""
    id: str
    brand: CardBrand
    last4: str
    exp_month: int
    exp_year: int
    funding: CardFunding


@dataclass(frozen=True)
class CardSource:
    """A tokenized source that carries a card payload."""
    id: str
    card: PaymentSource


@dataclass(frozen=True)
class OtherSource:
    """Any tokenized source without a card payload (bank account, wallet, ...)."""
    id: str


Source = Union[CardSource, OtherSource]


def card_from_source(source: Source) -> Optional[PaymentSource]:
    """Return the card carried by ``source``, or None for non-card variants."""
    if isinstance(source, CardSource):
        return source.card
    return None


# ---------------------------------------------------------------------------
# Client configuration and state
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ClientConfig:
    base_url: Optional[str] = None
    customer_id: Optional[str] = None

    @property
    def is_remote(self) -> bool:
        return bool(self.base_url and self.base_url.strip()) and bool(self.customer_id and self.customer_id.strip())

    def matches(self, base_url: Optional[str], customer_id: Optional[str]) -> bool:
        return self.base_url == base_url and self.customer_id == customer_id


@dataclass
class ClientState:
    default_source: Optional[PaymentSource] = None
    sources: List[PaymentSource] = field(default_factory=list)

    @property
    def default_source_id(self) -> Optional[str]:
        return self.default_source.id if self.default_source else None


@dataclass(frozen=True)
class CustomerRecord:
    """Decoded body of ``GET /customers/{id}``."""
    selected_card: Optional[PaymentSource]
    cards: List[PaymentSource]


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------

@dataclass
class OperationResult:
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class SourcesResult:
    default_source_id: Optional[str] = None
    sources: List[PaymentSource] = field(default_factory=list)
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None
