"""
Shared test fixtures: fake Notion / Google Calendar / SMTP services, test client.
"""

import os

import pytest
from fastapi.testclient import TestClient

# Configure every integration before importing app modules
os.environ["NOTION_API_KEY"] = "secret_test_notion_key"
os.environ["NOTION_DATABASE_ID"] = "db-0000"
os.environ["GOOGLE_CLIENT_ID"] = "test-client-id"
os.environ["GOOGLE_CLIENT_SECRET"] = "test-client-secret"
os.environ["GOOGLE_REFRESH_TOKEN"] = "test-refresh-token"
os.environ["GOOGLE_CALENDAR_ID"] = "tech@example.com"
os.environ["SMTP_SERVER"] = "smtp.example.com"
os.environ["SMTP_PORT"] = "587"
os.environ["SENDER_EMAIL"] = "jobs@example.com"
os.environ["SENDER_PASSWORD"] = "test-password"
os.environ["NOTIFY_RECIPIENTS"] = "office@example.com, tech@example.com"
os.environ["APP_TIMEZONE"] = "America/Denver"

from washdesk.config import Settings
from washdesk.integrations.google_calendar import CalendarEvent
from washdesk.job_submission import JobSubmitter
from washdesk.main import app
from washdesk.routers.jobs import get_job_submitter

EVENT_URL = "https://www.google.com/calendar/event?eid=abc123"
RECORD_ID = "1a2b3c4d-0000-1111-2222-333344445555"


class FakeRecords:
    """Stands in for NotionRecordClient."""

    def __init__(self, create_error: Exception = None, update_error: Exception = None):
        self.create_error = create_error
        self.update_error = update_error
        self.created = []
        self.updated = []

    def create_record(self, properties: dict) -> str:
        self.created.append(properties)
        if self.create_error:
            raise self.create_error
        return RECORD_ID

    def update_record(self, record_id: str, properties: dict) -> None:
        self.updated.append((record_id, properties))
        if self.update_error:
            raise self.update_error


class FakeCalendar:
    """Stands in for GoogleCalendarClient."""

    def __init__(self, error: Exception = None):
        self.error = error
        self.specs = []

    def create_event(self, spec):
        self.specs.append(spec)
        if self.error:
            raise self.error
        return CalendarEvent(event_url=EVENT_URL, event_id="evt-1")


class FakeNotifier:
    """Stands in for SmtpNotifier."""

    def __init__(self, error: Exception = None):
        self.error = error
        self.sent = []

    def send(self, recipients: list, subject: str, html_body: str) -> None:
        self.sent.append((recipients, subject, html_body))
        if self.error:
            raise self.error


def run_now(func, *args):
    """Dispatcher that runs the detached task inline."""
    func(*args)


def sample_payload(**overrides) -> dict:
    """A complete, valid job form payload."""
    payload = {
        "name": "Jane Homeowner",
        "address": "123 Main St, Boulder, CO",
        "jobDate": "2024-07-15",
        "jobTime": "10:00",
        "quote": 300,
        "phone": "(303) 555-0142",
        "description": "Selected: Outside, Screens",
        "scheduledBy": "Sean Baird",
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def test_settings():
    return Settings()


@pytest.fixture
def records():
    return FakeRecords()


@pytest.fixture
def calendar():
    return FakeCalendar()


@pytest.fixture
def notifier():
    return FakeNotifier()


@pytest.fixture
def submitter(test_settings, records, calendar, notifier):
    return JobSubmitter(
        test_settings, records=records, calendar=calendar, notifier=notifier, dispatch=run_now,
    )


@pytest.fixture
def client(submitter):
    """FastAPI test client wired to the fake services."""
    app.dependency_overrides[get_job_submitter] = lambda: submitter
    yield TestClient(app)
    app.dependency_overrides.clear()
