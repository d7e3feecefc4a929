"""
Job submission: form payload to Notion record, calendar event and email.

Steps, strictly in order:
  0. Validate the payload (no external calls on failure)
     and check Notion / Google credentials (fail fast)
  1. Create the Notion record: failure is terminal
  2. Create the Google Calendar event: failure is a partial success;
     the record is kept
  3. Write the event link into the record: failure is logged only
  4. Email the distribution list: detached; failure is logged only

Every terminal outcome is its own result type so callers must handle the
partial-success case explicitly. Nothing is retried.
"""

import logging
import threading
from dataclasses import dataclass, field
from typing import Callable, Optional, Union

from pydantic import ValidationError

from .config import Settings
from .errors import CalendarServiceError, ConfigurationError, NotificationError, RecordServiceError
from .integrations.google_calendar import GoogleCalendarClient, job_event_spec
from .integrations.mailer import SmtpNotifier, job_email
from .integrations.notion import NotionRecordClient, event_link_properties, job_properties
from .scheduling import event_window
from .schemas import MAX_QUOTE, JobRequest

logger = logging.getLogger(__name__)

# Payload field → label used in validation messages
FIELD_LABELS = {
    "name": "Name",
    "address": "Address",
    "jobDate": "Job date",
    "jobTime": "Job time",
    "quote": "Quote",
    "phone": "Phone number",
    "description": "Description",
    "scheduledBy": "Scheduled by",
}

FIELD_MESSAGES = {
    "quote": "Quote must be a positive number",
    "phone": "Invalid phone number format",
    "scheduledBy": "Please select who scheduled the job.",
}


# --- Terminal outcomes ---

@dataclass(frozen=True)
class Submitted:
    record_id: str
    event_url: str
    outcome: str = "success"


@dataclass(frozen=True)
class CalendarFailed:
    """Record created, calendar event not."""
    record_id: str
    error: str
    outcome: str = "record_created_calendar_failed"


@dataclass(frozen=True)
class ValidationFailed:
    message: str
    errors: list = field(default_factory=list)
    outcome: str = "validation_error"


@dataclass(frozen=True)
class ConfigurationFailed:
    message: str
    missing: list = field(default_factory=list)
    outcome: str = "configuration_error"


@dataclass(frozen=True)
class RecordServiceFailed:
    message: str
    code: Optional[str] = None
    outcome: str = "record_service_error"


SubmissionResult = Union[Submitted, CalendarFailed, ValidationFailed, ConfigurationFailed, RecordServiceFailed]


def detach(func: Callable, *args) -> None:
    """Run func(*args) on a daemon thread without waiting for it."""
    threading.Thread(target=func, args=args, daemon=True).start()


def validate_job(payload) -> JobRequest:
    """Parse a raw payload into a JobRequest. Raises ValidationError."""
    if not isinstance(payload, dict):
        raise ValueError("Job payload must be a JSON object")
    return JobRequest.model_validate(payload)


def describe_validation_errors(exc: ValidationError) -> list:
    """One {"field", "message"} entry per invalid field, in payload order."""
    errors = []
    seen = set()
    for err in exc.errors():
        name = str(err["loc"][0]) if err["loc"] else "payload"
        if name in seen:
            continue
        seen.add(name)
        label = FIELD_LABELS.get(name, name)
        if err["type"] == "missing" or err.get("input") in ("", None):
            message = f"{label} is required" if name != "scheduledBy" else FIELD_MESSAGES[name]
        elif name == "quote" and err["type"] == "less_than_equal":
            message = f"Quote cannot exceed ${MAX_QUOTE:,.0f}"
        else:
            message = FIELD_MESSAGES.get(name, f"{label}: {err['msg']}")
        errors.append({"field": name, "message": message})
    return errors


class JobSubmitter:
    """
    Runs one submission at a time per call; holds no per-request state.

    Service clients may be injected; otherwise they are built from settings
    when a submission needs them.
    """

    def __init__(self, settings: Settings,
                 records: NotionRecordClient = None,
                 calendar: GoogleCalendarClient = None,
                 notifier: SmtpNotifier = None,
                 dispatch: Callable = None):
        self.settings = settings
        self.records = records
        self.calendar = calendar
        self.notifier = notifier
        self.dispatch = dispatch or detach

    def submit(self, payload) -> SubmissionResult:
        # --- 0. Validate ---
        try:
            job = validate_job(payload)
        except ValidationError as e:
            errors = describe_validation_errors(e)
            message = "; ".join(err["message"] for err in errors)
            logger.info("Job submission rejected: %s", message)
            return ValidationFailed(message=message, errors=errors)
        except ValueError as e:
            return ValidationFailed(message=str(e))

        try:
            records = self._record_client()
            calendar = self._calendar_client()
        except ConfigurationError as e:
            logger.error(str(e))
            return ConfigurationFailed(message=str(e), missing=e.missing)

        tz_name = self.settings.APP_TIMEZONE
        try:
            start, end, duration_hours = event_window(job.job_date, job.job_time, job.quote, tz_name)
        except OverflowError:
            message = "Job date is out of range"
            logger.info("Job submission rejected: %s (%s)", message, job.job_date)
            return ValidationFailed(message=message, errors=[{"field": "jobDate", "message": message}])

        # --- 1. Create record ---
        try:
            record_id = records.create_record(job_properties(
                job, start,
                handled_by=self.settings.RECORD_HANDLED_BY,
                payment_status=self.settings.RECORD_PAYMENT_STATUS,
            ))
        except RecordServiceError as e:
            return RecordServiceFailed(message=str(e), code=e.code)

        # --- 2. Create calendar event ---
        try:
            event = calendar.create_event(job_event_spec(job, start, end, tz_name))
        except CalendarServiceError as e:
            logger.error(
                "Calendar event failed for Notion page %s; record kept: %s", record_id, e,
            )
            return CalendarFailed(record_id=record_id, error=str(e))
        logger.info("Booked %s for %.1f hours starting %s", job.name, duration_hours, start)

        # --- 3. Link back ---
        try:
            records.update_record(record_id, event_link_properties(event.event_url))
        except RecordServiceError as e:
            logger.error("Could not add calendar link to Notion page %s: %s", record_id, e)

        # --- 4. Notify ---
        self._notify(job, record_id, event.event_url)

        return Submitted(record_id=record_id, event_url=event.event_url)

    def _record_client(self) -> NotionRecordClient:
        if self.records is not None:
            return self.records
        missing = self.settings.missing_record_settings()
        if missing:
            raise ConfigurationError("Notion", missing)
        return NotionRecordClient(
            self.settings.NOTION_API_KEY,
            self.settings.NOTION_DATABASE_ID,
            notion_version=self.settings.NOTION_VERSION,
            timeout=self.settings.HTTP_TIMEOUT_SECONDS,
        )

    def _calendar_client(self) -> GoogleCalendarClient:
        if self.calendar is not None:
            return self.calendar
        missing = self.settings.missing_calendar_settings()
        if missing:
            raise ConfigurationError("Google Calendar", missing)
        return GoogleCalendarClient(
            self.settings.GOOGLE_CLIENT_ID,
            self.settings.GOOGLE_CLIENT_SECRET,
            self.settings.GOOGLE_REFRESH_TOKEN,
            self.settings.GOOGLE_CALENDAR_ID,
            timeout=self.settings.HTTP_TIMEOUT_SECONDS,
        )

    def _notifier(self) -> Optional[SmtpNotifier]:
        if self.notifier is not None:
            return self.notifier
        missing = self.settings.missing_smtp_settings()
        if missing:
            logger.warning("Job email skipped: SMTP settings missing (%s)", ", ".join(missing))
            return None
        return SmtpNotifier(
            self.settings.SMTP_SERVER,
            self.settings.SMTP_PORT,
            self.settings.SENDER_EMAIL,
            self.settings.SENDER_PASSWORD,
            timeout=self.settings.HTTP_TIMEOUT_SECONDS,
        )

    def _notify(self, job: JobRequest, record_id: str, event_url: str) -> None:
        recipients = self.settings.notify_recipients
        if not recipients:
            logger.info("Job email skipped: no NOTIFY_RECIPIENTS configured")
            return
        notifier = self._notifier()
        if notifier is None:
            return
        subject, body = job_email(job, record_id, event_url)
        self.dispatch(send_job_email, notifier, recipients, subject, body)


def send_job_email(notifier: SmtpNotifier, recipients: list, subject: str, body: str) -> None:
    """Detached email send. Errors end here, in the log."""
    try:
        notifier.send(recipients, subject, body)
    except NotificationError as e:
        logger.error("Failed to send job email: %s", e)
    except Exception:
        logger.exception("Unexpected error sending job email")
