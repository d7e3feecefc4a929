"""Text helpers shared by the record, calendar and email builders."""

import re
import urllib.parse

from .errors import JobValidationError
from .schemas import DESCRIPTION_OPTIONS


def format_currency(amount: float) -> str:
    """$1,234.50 style; whole amounts drop the cents ($300)."""
    if float(amount).is_integer():
        return f"${amount:,.0f}"
    return f"${amount:,.2f}"


def plain_amount(amount: float) -> str:
    """300 → "300", 250.5 → "250.5"; no thousands separators."""
    return f"{amount:.2f}".rstrip("0").rstrip(".")


def maps_url(address: str) -> str:
    return f"https://www.google.com/maps?q={urllib.parse.quote(address, safe='')}"


def sms_link(phone: str) -> str:
    """sms:+1XXXXXXXXXX: a bare 10-digit US number gets the country code."""
    digits = re.sub(r"\D", "", phone)
    if len(digits) == 10 and not digits.startswith("1"):
        digits = f"1{digits}"
    return f"sms:+{digits}"


def display_phone(phone: str) -> str:
    """(555) 123-4567 for a 10-digit number; anything else is returned as digits."""
    digits = re.sub(r"\D", "", phone)[:10]
    if len(digits) != 10:
        return digits
    return f"({digits[:3]}) {digits[3:6]}-{digits[6:]}"


def notion_page_url(page_id: str) -> str:
    return f"https://www.notion.so/{page_id.replace('-', '')}"


def compose_description(options: list, notes: str = None) -> str:
    """
    Build the job description from the service checkboxes and free notes:
        Selected: Outside, Screens
        Notes: back gate code 1234
    At least one known option is required.
    """
    selected = [o for o in DESCRIPTION_OPTIONS if o in (options or [])]
    if not selected:
        raise JobValidationError("Please select at least one option.")

    description = f"Selected: {', '.join(selected)}"
    if notes and notes.strip():
        description += f"\nNotes: {notes.strip()}"
    return description
