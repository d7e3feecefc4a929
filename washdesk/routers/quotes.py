from typing import List, Optional

from fastapi import APIRouter, Query

from .. import prices
from ..quote_engine import compute_quote, parse_pane_count
from ..scheduling import estimate_duration_hours, generate_time_slots
from ..schemas import MAX_QUOTE, PriceRow, QuoteOut, TimeSlot

router = APIRouter(tags=["quotes"])


@router.get("/quote", response_model=QuoteOut)
def get_quote(panes: Optional[str] = None):
    """Suggested quote for a pane count. Bad input is treated as no panes."""
    return compute_quote(parse_pane_count(panes)).to_dict()


@router.get("/duration")
def get_duration(quote: float = Query(0.0, le=MAX_QUOTE, allow_inf_nan=False)):
    """Calendar hours that would be booked for a quote."""
    return {"quote": quote, "hours": estimate_duration_hours(quote)}


@router.get("/price-table", response_model=List[PriceRow])
def get_price_table():
    return [
        {"panes": panes, "inside_outside": p.inside_outside, "outside_only": p.outside_only}
        for panes, p in sorted(prices.PRICE_TABLE.items())
    ]


@router.get("/time-slots", response_model=List[TimeSlot])
def get_time_slots():
    return generate_time_slots()
