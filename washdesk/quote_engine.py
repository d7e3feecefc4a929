"""
Quote engine: pane count to suggested price.

Thresholds are checked before the table lookup:
  0 panes        → prompt, no quote
  1-9 panes      → below minimum job size
  over 90 panes  → too large to take on
  10-90 panes    → table lookup (a gap in the table yields no quote)

The suggested quote is always the inside + outside tier. Both tiers are
returned so the operator can compare them.
"""

import logging
from dataclasses import dataclass, asdict
from typing import Callable, Mapping, Optional

from .prices import PricePoint, lookup_price

logger = logging.getLogger(__name__)

MIN_PANES = 10
MAX_PANES = 90

PROMPT_MESSAGE = "Enter the number of panes to see the suggested quote."
BELOW_MINIMUM_MESSAGE = "Waste of time."
ABOVE_MAXIMUM_MESSAGE = "Lmao fr bruh just walk away"


@dataclass(frozen=True)
class QuoteResult:
    pane_count: int
    suggested_quote: float
    inside_outside: float
    outside_only: float
    message: str

    def to_dict(self) -> dict:
        return asdict(self)


def parse_pane_count(value) -> int:
    """
    Normalize raw pane count input.

    Returns 0 for absent, non-numeric or fractional input. Negative counts
    clamp to 0.
    """
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, float):
        if not value.is_integer():
            return 0
        value = int(value)
    elif isinstance(value, str):
        text = value.strip()
        digits = text[1:] if text[:1] in "+-" else text
        if not digits.isdecimal():
            return 0
        value = int(text)
    elif not isinstance(value, int):
        return 0
    return max(value, 0)


def compute_quote(pane_count: int, table: Mapping[int, PricePoint] = None) -> QuoteResult:
    """Apply the threshold policy, then resolve the price pair."""
    pane_count = parse_pane_count(pane_count)

    if pane_count == 0:
        return QuoteResult(0, 0.0, 0.0, 0.0, PROMPT_MESSAGE)
    if pane_count < MIN_PANES:
        return QuoteResult(pane_count, 0.0, 0.0, 0.0, BELOW_MINIMUM_MESSAGE)
    if pane_count > MAX_PANES:
        return QuoteResult(pane_count, 0.0, 0.0, 0.0, ABOVE_MAXIMUM_MESSAGE)

    price = lookup_price(pane_count, table)
    if price is None:
        logger.debug("No price entry for %d panes", pane_count)
        return QuoteResult(pane_count, 0.0, 0.0, 0.0, "")

    return QuoteResult(
        pane_count=pane_count,
        suggested_quote=price.inside_outside,
        inside_outside=price.inside_outside,
        outside_only=price.outside_only,
        message="",
    )


class QuoteCalculator:
    """
    Stateful pane counter.

    Every change of the pane count recomputes the quote and pushes the
    suggested amount to on_quote_change.
    """

    def __init__(self, on_quote_change: Callable[[float], None] = None,
                 table: Mapping[int, PricePoint] = None):
        self.on_quote_change = on_quote_change
        self.table = table
        self.panes: Optional[int] = None
        self.result = compute_quote(0, table)

    def set_panes(self, value) -> QuoteResult:
        panes = parse_pane_count(value)
        self.panes = panes or None
        return self._recompute()

    def increment(self) -> QuoteResult:
        self.panes = self.panes + 1 if self.panes else 1
        return self._recompute()

    def decrement(self) -> QuoteResult:
        self.panes = self.panes - 1 if self.panes and self.panes > 1 else None
        return self._recompute()

    def reset(self) -> QuoteResult:
        self.panes = None
        return self._recompute()

    def _recompute(self) -> QuoteResult:
        self.result = compute_quote(self.panes or 0, self.table)
        if self.on_quote_change is not None:
            self.on_quote_change(self.result.suggested_quote)
        return self.result
