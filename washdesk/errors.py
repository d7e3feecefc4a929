"""
Error taxonomy for job submission.

Validation and configuration errors stop a submission before any external
call. Record service errors are terminal. Calendar and notification errors
are caught by the orchestrator and never abort a created record.
"""


class WashdeskError(Exception):
    """Base class for all job-manager errors."""


class JobValidationError(WashdeskError):
    """Description options are invalid, e.g. no service checkbox selected."""

    def __init__(self, message: str, errors: list = None):
        super().__init__(message)
        self.errors = errors or []


class ConfigurationError(WashdeskError):
    """Required credentials for an external service are not set."""

    def __init__(self, service: str, missing: list):
        self.service = service
        self.missing = list(missing)
        super().__init__(
            f"Server configuration error: {service} settings missing ({', '.join(self.missing)})"
        )


class RecordServiceError(WashdeskError):
    """Notion rejected the request or could not be reached."""

    def __init__(self, message: str, code: str = None, status: int = None):
        super().__init__(message)
        self.code = code
        self.status = status


class CalendarServiceError(WashdeskError):
    """Google Calendar event creation failed."""


class NotificationError(WashdeskError):
    """Notification email could not be sent."""
