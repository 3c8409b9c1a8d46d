"""
Mint and renewal pricing.

Prices are set in USD cents on a step schedule keyed by the total number of
credentials ever issued, then converted to wei with a USD/ETH quote from an
external price source. A missing, non-positive or outdated quote raises
``StalePrice``; there is no silent default.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Sequence

from .config import PriceTier, WEI_PER_ETH
from .exceptions import StalePrice

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PriceQuote:
    """
    USD per ETH as a fixed-point integer.

    Attributes:
        answer: Price scaled by ``10**decimals``
        decimals: Fixed-point decimals of ``answer``
        updated_at: Unix time the quote was produced
    """

    answer: int
    decimals: int
    updated_at: int


class PriceSource(ABC):
    @abstractmethod
    def latest(self) -> PriceQuote:
        ...


class StaticPriceSource(PriceSource):
    """Fixed quote, for tests and the CLI."""

    def __init__(self, usd_per_eth: float, *, decimals: int = 8, updated_at: int = 0) -> None:
        self.quote = PriceQuote(
            answer=int(round(usd_per_eth * 10**decimals)),
            decimals=decimals,
            updated_at=updated_at,
        )

    def latest(self) -> PriceQuote:
        return self.quote

    def update(self, usd_per_eth: float, updated_at: int) -> None:
        self.quote = PriceQuote(
            answer=int(round(usd_per_eth * 10**self.quote.decimals)),
            decimals=self.quote.decimals,
            updated_at=updated_at,
        )


def tier_index(tiers: Sequence[PriceTier], issued: int) -> int:
    """Index of the tier that prices the next credential after ``issued``."""
    for index, tier in enumerate(tiers):
        if tier.supply_cap is None or issued < tier.supply_cap:
            return index
    return len(tiers) - 1


def usd_cents_for(tiers: Sequence[PriceTier], issued: int) -> int:
    return tiers[tier_index(tiers, issued)].usd_cents


def fresh_quote(source: PriceSource, now: int, max_age: int) -> PriceQuote:
    """
    Read and check a quote.

    Raises:
        StalePrice: If the source fails or the quote is unusable
    """
    try:
        quote = source.latest()
    except Exception as exc:
        raise StalePrice(f"price source unavailable: {exc}") from exc
    if quote.answer <= 0:
        raise StalePrice("price source returned a non-positive price")
    if quote.updated_at > now:
        raise StalePrice("price quote is dated in the future")
    if now - quote.updated_at > max_age:
        raise StalePrice(f"price quote is {now - quote.updated_at}s old (max {max_age}s)")
    return quote


def to_wei(usd_cents: int, quote: PriceQuote) -> int:
    """Convert USD cents to wei, rounding up."""
    numerator = usd_cents * WEI_PER_ETH * 10**quote.decimals
    denominator = 100 * quote.answer
    return -(-numerator // denominator)


def describe_schedule(tiers: Sequence[PriceTier]) -> List[str]:
    lines = []
    floor = 0
    for tier in tiers:
        upper = "+" if tier.supply_cap is None else f"-{tier.supply_cap - 1}"
        lines.append(f"#{floor}{upper}: ${tier.usd_cents / 100:.2f}")
        floor = tier.supply_cap or floor
    return lines
