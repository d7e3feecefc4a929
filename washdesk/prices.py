"""
Pane price lookup with fallback chain:
1. Override table from PRICE_TABLE_FILE (JSON), if configured and readable
2. DEFAULT_BRACKETS from this file

Prices are whole-job dollar amounts keyed by pane count. Each entry carries
two tiers: inside + outside, and outside only.

Override file format:
    {"10": [100, 70], "11": [100, 70], ...}
"""

import json
import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Optional

from .config import settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PricePoint:
    inside_outside: float
    outside_only: float


# (first pane, last pane, inside + outside, outside only)
DEFAULT_BRACKETS = [
    (10, 14, 100.00, 70.00),
    (15, 19, 125.00, 85.00),
    (20, 24, 150.00, 100.00),
    (25, 29, 180.00, 120.00),
    (30, 34, 210.00, 140.00),
    (35, 39, 240.00, 160.00),
    (40, 44, 270.00, 180.00),
    (45, 49, 300.00, 200.00),
    (50, 54, 330.00, 220.00),
    (55, 59, 360.00, 240.00),
    (60, 64, 390.00, 260.00),
    (65, 69, 420.00, 280.00),
    (70, 74, 450.00, 300.00),
    (75, 79, 480.00, 320.00),
    (80, 84, 510.00, 340.00),
    (85, 90, 540.00, 360.00),
]


def table_from_brackets(brackets) -> Mapping[int, PricePoint]:
    """Expand (first, last, inside_outside, outside_only) rows into a per-pane mapping."""
    table = {}
    for first, last, inside_outside, outside_only in brackets:
        for panes in range(first, last + 1):
            table[panes] = PricePoint(inside_outside, outside_only)
    return MappingProxyType(table)


def load_price_table(path: str) -> Mapping[int, PricePoint]:
    """
    Read a JSON price table.
    Raises ValueError if the file is not an object of [inside_outside, outside_only] pairs.
    """
    with open(path) as f:
        raw = json.load(f)
    if not isinstance(raw, dict):
        raise ValueError(f"Price table must be a JSON object keyed by pane count, got {type(raw).__name__}")

    table = {}
    for key, value in raw.items():
        try:
            panes = int(key)
            inside_outside, outside_only = value
            table[panes] = PricePoint(float(inside_outside), float(outside_only))
        except (TypeError, ValueError) as e:
            raise ValueError(f"Invalid price table entry {key!r}: {value!r}") from e
    return MappingProxyType(table)


DEFAULT_PRICE_TABLE = table_from_brackets(DEFAULT_BRACKETS)

PRICE_TABLE = DEFAULT_PRICE_TABLE
if settings.PRICE_TABLE_FILE:
    try:
        PRICE_TABLE = load_price_table(settings.PRICE_TABLE_FILE)
        logger.info("Loaded %d pane prices from %s", len(PRICE_TABLE), settings.PRICE_TABLE_FILE)
    except (OSError, ValueError, json.JSONDecodeError) as e:
        logger.warning("Could not load price table %s, using defaults: %s", settings.PRICE_TABLE_FILE, e)


def lookup_price(pane_count: int, table: Mapping[int, PricePoint] = None) -> Optional[PricePoint]:
    """Return the price pair for an exact pane count, or None if the table has no entry."""
    if table is None:
        table = PRICE_TABLE
    return table.get(pane_count)
