"""
Calendar math for scheduled jobs.

Event length comes from the quote at a $60/hour billing rate, rounded UP
to the next half hour so the technician's calendar is never under-booked.

Event times are written as the operator's wall clock plus an explicit UTC
offset ("2024-07-15T10:00:00-06:00"), never normalized to UTC. The offset
is resolved from APP_TIMEZONE for the job's own date, so jobs booked across
a daylight-saving change still land at the right local hour.
"""

import math
from datetime import date, datetime, time, timedelta, timezone
from zoneinfo import ZoneInfo

HOURLY_RATE = 60.0
MIN_DURATION_HOURS = 0.5

# Bookable start times: every 30 minutes from 8:00 AM through 7:30 PM
FIRST_SLOT_HOUR = 8
LAST_SLOT_HOUR = 20


def estimate_duration_hours(quote: float) -> float:
    """Hours to block out for a job, as a multiple of 0.5 and never below 0.5."""
    if quote is None:
        return MIN_DURATION_HOURS
    if not math.isfinite(quote):
        raise ValueError(f"Quote must be a finite amount, got {quote}")
    if quote <= 0:
        return MIN_DURATION_HOURS
    return math.ceil((quote / HOURLY_RATE) * 2) / 2


def format_utc_offset(minutes_behind_utc: int) -> str:
    """
    Minutes behind UTC → "±HH:MM".

    Follows the browser getTimezoneOffset() convention: 360 (six hours
    behind UTC) is "-06:00", -120 is "+02:00".
    """
    sign = "-" if minutes_behind_utc > 0 else "+"
    hours, minutes = divmod(abs(int(minutes_behind_utc)), 60)
    return f"{sign}{hours:02d}:{minutes:02d}"


def build_local_timestamp(job_date: date, job_time: time, minutes_behind_utc: int) -> str:
    """Compose YYYY-MM-DDTHH:MM:SS±HH:MM from the literal wall-clock values."""
    return (
        f"{job_date.year:04d}-{job_date.month:02d}-{job_date.day:02d}"
        f"T{job_time.hour:02d}:{job_time.minute:02d}:{job_time.second:02d}"
        f"{format_utc_offset(minutes_behind_utc)}"
    )


def parse_local_timestamp(value: str):
    """Inverse of build_local_timestamp → (date, time, minutes_behind_utc)."""
    parsed = datetime.fromisoformat(value)
    if parsed.utcoffset() is None:
        raise ValueError(f"Timestamp has no UTC offset: {value}")
    minutes_behind = -int(parsed.utcoffset().total_seconds() // 60)
    return parsed.date(), parsed.time(), minutes_behind


def utc_offset_minutes_for(job_date: date, job_time: time, tz_name: str) -> int:
    """Minutes behind UTC in effect at this wall-clock moment in tz_name."""
    local = datetime.combine(job_date, job_time, tzinfo=ZoneInfo(tz_name))
    return -int(local.utcoffset().total_seconds() // 60)


def event_window(job_date: date, job_time: time, quote: float, tz_name: str):
    """
    Start and end timestamps for a job's calendar event.
    Returns (start, end, duration_hours).
    """
    duration_hours = estimate_duration_hours(quote)
    zone = ZoneInfo(tz_name)

    start_local = datetime.combine(job_date, job_time, tzinfo=zone)
    start = build_local_timestamp(job_date, job_time, utc_offset_minutes_for(job_date, job_time, tz_name))

    # Add elapsed time in UTC, then re-express on the local wall clock
    end_local = (start_local.astimezone(timezone.utc) + timedelta(hours=duration_hours)).astimezone(zone)
    end_minutes_behind = -int(end_local.utcoffset().total_seconds() // 60)
    end = build_local_timestamp(end_local.date(), end_local.time(), end_minutes_behind)

    return start, end, duration_hours


def generate_time_slots() -> list:
    """Half-hour start times as [{"label": "8:00 AM", "value": "08:00"}, ...]."""
    slots = []
    for hour in range(FIRST_SLOT_HOUR, LAST_SLOT_HOUR):
        for minute in (0, 30):
            display_hour = hour % 12 or 12
            ampm = "AM" if hour < 12 else "PM"
            slots.append({
                "label": f"{display_hour}:{minute:02d} {ampm}",
                "value": f"{hour:02d}:{minute:02d}",
            })
    return slots
