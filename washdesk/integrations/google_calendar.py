"""
Google Calendar Service
Exchanges the stored refresh token for an access token, then inserts one
event per job on the technician's calendar.
"""

import json
import logging
import urllib.error
import urllib.parse
import urllib.request
from dataclasses import dataclass

from ..errors import CalendarServiceError
from ..formatting import plain_amount, sms_link

logger = logging.getLogger(__name__)

GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"
GOOGLE_CALENDAR_API = "https://www.googleapis.com/calendar/v3"


@dataclass(frozen=True)
class CalendarEventSpec:
    summary: str
    location: str
    description: str
    start: str
    end: str
    timezone: str

    def to_body(self) -> dict:
        return {
            "summary": self.summary,
            "location": self.location,
            "description": self.description,
            "start": {"dateTime": self.start, "timeZone": self.timezone},
            "end": {"dateTime": self.end, "timeZone": self.timezone},
        }


@dataclass(frozen=True)
class CalendarEvent:
    event_url: str
    event_id: str


def job_event_spec(job, start: str, end: str, timezone: str) -> CalendarEventSpec:
    """Summary "<name> | $<quote>", with the client's phone as a tap-to-text link."""
    return CalendarEventSpec(
        summary=f"{job.name} | ${plain_amount(job.quote)}",
        location=job.address,
        description=(
            f"Job Description: {job.description or 'N/A'}\n"
            f"Client Phone: {sms_link(job.phone)}"
        ),
        start=start,
        end=end,
        timezone=timezone,
    )


class GoogleCalendarClient:

    def __init__(self, client_id: str, client_secret: str, refresh_token: str, calendar_id: str,
                 timeout: float = 30.0):
        self.client_id = client_id
        self.client_secret = client_secret
        self.refresh_token = refresh_token
        self.calendar_id = calendar_id
        self.timeout = timeout

    def create_event(self, spec: CalendarEventSpec) -> CalendarEvent:
        """Insert the event. Raises CalendarServiceError on any failure."""
        access_token = self._access_token()
        calendar_id = urllib.parse.quote(self.calendar_id, safe="")

        logger.info("Creating calendar event '%s' on %s", spec.summary, self.calendar_id)
        req = urllib.request.Request(
            f"{GOOGLE_CALENDAR_API}/calendars/{calendar_id}/events",
            data=json.dumps(spec.to_body()).encode("utf-8"),
            headers={
                "Authorization": f"Bearer {access_token}",
                "Content-Type": "application/json",
            },
            method="POST",
        )
        event = self._send(req, "create event")

        if not event.get("htmlLink"):
            raise CalendarServiceError("Failed to create Google Calendar event: no event link returned")
        logger.info("Calendar event created: %s", event["htmlLink"])
        return CalendarEvent(event_url=event["htmlLink"], event_id=event.get("id", ""))

    def _access_token(self) -> str:
        payload = urllib.parse.urlencode({
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "refresh_token": self.refresh_token,
            "grant_type": "refresh_token",
        }).encode("utf-8")
        req = urllib.request.Request(
            GOOGLE_TOKEN_URL,
            data=payload,
            headers={"Content-Type": "application/x-www-form-urlencoded"},
            method="POST",
        )
        tokens = self._send(req, "refresh access token")
        access_token = tokens.get("access_token")
        if not access_token:
            raise CalendarServiceError("Failed to refresh Google access token: no access token in response")
        return access_token

    def _send(self, req: urllib.request.Request, action: str) -> dict:
        try:
            with urllib.request.urlopen(req, timeout=self.timeout) as response:
                return json.loads(response.read())
        except urllib.error.HTTPError as e:
            message = _error_message(e)
            logger.error("Google Calendar %s failed (%s): %s", action, e.code, message)
            raise CalendarServiceError(f"Failed to {action}: {message}") from e
        except OSError as e:
            reason = getattr(e, "reason", e)
            logger.error("Google Calendar %s unreachable: %s", action, reason)
            raise CalendarServiceError(f"Failed to {action}: {reason}") from e
        except ValueError as e:
            raise CalendarServiceError(f"Failed to {action}: unreadable response ({e})") from e


def _error_message(error: urllib.error.HTTPError) -> str:
    try:
        data = json.loads(error.read())
    except (ValueError, OSError):
        return str(error.reason)
    err = data.get("error")
    if isinstance(err, dict):
        return err.get("message", str(error.reason))
    # Token endpoint errors: {"error": "invalid_grant", "error_description": "..."}
    return data.get("error_description") or err or str(error.reason)
