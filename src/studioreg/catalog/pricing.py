"""Price lookup and amount allocation."""

from __future__ import annotations

from decimal import ROUND_DOWN, Decimal
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence

    from studioreg.catalog.models import SlotAvailability

CENT = Decimal("0.01")


def price_for(slots: Sequence[SlotAvailability], pricing_type: str) -> Decimal | None:
    """Lowest price of ``pricing_type`` across a course's slots, or None if not offered."""
    prices = [s.prices[pricing_type] for s in slots if pricing_type in s.prices]
    return min(prices) if prices else None


def split_amount(total: Decimal, parts: int) -> list[Decimal]:
    """Split ``total`` into ``parts`` cent-exact shares.

    Shares are equal except the first, which absorbs the rounding remainder,
    so the shares always sum to ``total``.
    """
    if parts < 1:
        raise ValueError("parts must be at least 1")
    total = Decimal(total).quantize(CENT)
    share = (total / parts).quantize(CENT, rounding=ROUND_DOWN)
    remainder = total - share * parts
    return [share + remainder] + [share] * (parts - 1)
