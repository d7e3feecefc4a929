"""
External service client tests: Notion, Google Calendar, SMTP.

All HTTP is mocked at urllib.request.urlopen; SMTP at smtplib.
"""

import io
import json
import urllib.error
from unittest.mock import MagicMock, patch

import pytest

from washdesk.errors import CalendarServiceError, JobValidationError, NotificationError, RecordServiceError
from washdesk.formatting import compose_description, display_phone, format_currency, sms_link
from washdesk.integrations.google_calendar import CalendarEventSpec, GoogleCalendarClient
from washdesk.integrations.mailer import SmtpNotifier
from washdesk.integrations.notion import NotionRecordClient, describe_notion_error


def _response(body: dict):
    """Context-manager response object as returned by urlopen."""
    resp = MagicMock()
    resp.read.return_value = json.dumps(body).encode("utf-8")
    resp.__enter__.return_value = resp
    resp.__exit__.return_value = False
    return resp


def _http_error(url: str, status: int, body: dict):
    return urllib.error.HTTPError(
        url, status, "error", {}, io.BytesIO(json.dumps(body).encode("utf-8")),
    )


def _spec():
    return CalendarEventSpec(
        summary="Jane Homeowner | $300",
        location="123 Main St",
        description="Job Description: N/A\nClient Phone: sms:+13035550142",
        start="2024-07-15T10:00:00-06:00",
        end="2024-07-15T15:00:00-06:00",
        timezone="America/Denver",
    )


# ============================================================
# Notion
# ============================================================

def test_notion_create_record_posts_to_database():
    client = NotionRecordClient("secret_key", "db-123")
    with patch("urllib.request.urlopen", return_value=_response({"id": "page-1"})) as urlopen:
        page_id = client.create_record({"Name": {"title": []}})

    assert page_id == "page-1"
    req = urlopen.call_args[0][0]
    assert req.full_url == "https://api.notion.com/v1/pages"
    assert req.get_method() == "POST"
    assert req.get_header("Authorization") == "Bearer secret_key"
    assert req.get_header("Notion-version") == "2022-06-28"
    body = json.loads(req.data)
    assert body["parent"] == {"database_id": "db-123"}


def test_notion_update_record_patches_page():
    client = NotionRecordClient("secret_key", "db-123")
    with patch("urllib.request.urlopen", return_value=_response({"id": "page-1"})) as urlopen:
        client.update_record("page-1", {"Google Event": {"url": "https://x"}})

    req = urlopen.call_args[0][0]
    assert req.full_url == "https://api.notion.com/v1/pages/page-1"
    assert req.get_method() == "PATCH"


@pytest.mark.parametrize("code, status, fragment", [
    ("object_not_found", 404, "database not found"),
    ("unauthorized", 401, "API key is invalid"),
    ("validation_error", 400, "validation error: Quote is expected to be number"),
    ("rate_limited", 429, "rate limit exceeded"),
])
def test_notion_errors_name_the_cause(code, status, fragment):
    client = NotionRecordClient("secret_key", "db-123")
    error = _http_error(
        "https://api.notion.com/v1/pages", status,
        {"object": "error", "status": status, "code": code, "message": "Quote is expected to be number"},
    )
    with patch("urllib.request.urlopen", side_effect=error):
        with pytest.raises(RecordServiceError) as exc:
            client.create_record({})

    assert fragment in str(exc.value)
    assert exc.value.code == code
    assert exc.value.status == status


def test_notion_unknown_error_code():
    assert describe_notion_error("conflict_error", "Conflict") == "Notion error: Conflict (Code: conflict_error)"


def test_notion_unreachable():
    client = NotionRecordClient("secret_key", "db-123")
    with patch("urllib.request.urlopen", side_effect=urllib.error.URLError("Name or service not known")):
        with pytest.raises(RecordServiceError, match="Could not reach Notion"):
            client.create_record({})


def test_notion_missing_page_id():
    client = NotionRecordClient("secret_key", "db-123")
    with patch("urllib.request.urlopen", return_value=_response({"object": "page"})):
        with pytest.raises(RecordServiceError):
            client.create_record({})


# ============================================================
# Google Calendar
# ============================================================

def test_calendar_refreshes_token_then_inserts_event():
    client = GoogleCalendarClient("cid", "csecret", "rtoken", "tech@example.com")
    responses = [
        _response({"access_token": "ya29.token", "expires_in": 3599}),
        _response({"id": "evt-1", "htmlLink": "https://www.google.com/calendar/event?eid=evt1"}),
    ]
    with patch("urllib.request.urlopen", side_effect=responses) as urlopen:
        event = client.create_event(_spec())

    assert event.event_url == "https://www.google.com/calendar/event?eid=evt1"
    assert event.event_id == "evt-1"

    token_req = urlopen.call_args_list[0][0][0]
    assert token_req.full_url == "https://oauth2.googleapis.com/token"
    assert b"grant_type=refresh_token" in token_req.data
    assert b"refresh_token=rtoken" in token_req.data

    insert_req = urlopen.call_args_list[1][0][0]
    assert insert_req.full_url == (
        "https://www.googleapis.com/calendar/v3/calendars/tech%40example.com/events"
    )
    assert insert_req.get_header("Authorization") == "Bearer ya29.token"
    body = json.loads(insert_req.data)
    assert body["start"] == {"dateTime": "2024-07-15T10:00:00-06:00", "timeZone": "America/Denver"}
    assert body["end"]["dateTime"] == "2024-07-15T15:00:00-06:00"
    assert body["summary"] == "Jane Homeowner | $300"


def test_calendar_token_refresh_failure():
    client = GoogleCalendarClient("cid", "csecret", "rtoken", "tech@example.com")
    error = _http_error(
        "https://oauth2.googleapis.com/token", 400,
        {"error": "invalid_grant", "error_description": "Token has been expired or revoked."},
    )
    with patch("urllib.request.urlopen", side_effect=error):
        with pytest.raises(CalendarServiceError, match="Token has been expired or revoked"):
            client.create_event(_spec())


def test_calendar_insert_failure_uses_api_message():
    client = GoogleCalendarClient("cid", "csecret", "rtoken", "missing@example.com")
    error = _http_error(
        "https://www.googleapis.com/calendar/v3/calendars/x/events", 404,
        {"error": {"code": 404, "message": "Not Found"}},
    )
    with patch("urllib.request.urlopen", side_effect=[_response({"access_token": "t"}), error]):
        with pytest.raises(CalendarServiceError, match="Not Found"):
            client.create_event(_spec())


def test_calendar_timeout():
    client = GoogleCalendarClient("cid", "csecret", "rtoken", "tech@example.com")
    with patch("urllib.request.urlopen", side_effect=TimeoutError("timed out")):
        with pytest.raises(CalendarServiceError, match="timed out"):
            client.create_event(_spec())


# ============================================================
# SMTP
# ============================================================

def test_smtp_starttls_on_587():
    notifier = SmtpNotifier("smtp.example.com", 587, "jobs@example.com", "pw")
    with patch("smtplib.SMTP") as smtp, patch("smtplib.SMTP_SSL") as smtp_ssl:
        notifier.send(["a@example.com", "b@example.com"], "Job Scheduled", "<p>hi</p>")

    smtp_ssl.assert_not_called()
    server = smtp.return_value
    server.starttls.assert_called_once()
    server.login.assert_called_once_with("jobs@example.com", "pw")
    from_addr, to_addrs, message = server.sendmail.call_args[0]
    assert from_addr == "jobs@example.com"
    assert to_addrs == ["a@example.com", "b@example.com"]
    assert "Subject: Job Scheduled" in message
    server.quit.assert_called_once()


def test_smtp_implicit_tls_on_465():
    notifier = SmtpNotifier("smtp.example.com", 465, "jobs@example.com", "pw")
    with patch("smtplib.SMTP") as smtp, patch("smtplib.SMTP_SSL") as smtp_ssl:
        notifier.send(["a@example.com"], "s", "<p>hi</p>")

    smtp.assert_not_called()
    smtp_ssl.return_value.sendmail.assert_called_once()


def test_smtp_failure_raises_notification_error():
    import smtplib

    notifier = SmtpNotifier("smtp.example.com", 587, "jobs@example.com", "pw")
    with patch("smtplib.SMTP") as smtp:
        smtp.return_value.login.side_effect = smtplib.SMTPAuthenticationError(535, b"bad credentials")
        with pytest.raises(NotificationError):
            notifier.send(["a@example.com"], "s", "<p>hi</p>")
    smtp.return_value.quit.assert_called_once()


# ============================================================
# Formatting helpers
# ============================================================

@pytest.mark.parametrize("phone, link", [
    ("(303) 555-0142", "sms:+13035550142"),
    ("13035550142", "sms:+13035550142"),
    ("1035550142", "sms:+1035550142"),
])
def test_sms_link(phone, link):
    assert sms_link(phone) == link


def test_display_phone():
    assert display_phone("3035550142") == "(303) 555-0142"
    assert display_phone("303555") == "303555"


def test_format_currency():
    assert format_currency(300) == "$300"
    assert format_currency(1250.5) == "$1,250.50"


def test_compose_description_options_and_notes():
    text = compose_description(["Screens", "Outside"], "  gate code 1234 ")
    assert text == "Selected: Outside, Screens\nNotes: gate code 1234"


def test_compose_description_options_only():
    assert compose_description(["Inside"]) == "Selected: Inside"


def test_compose_description_requires_an_option():
    with pytest.raises(JobValidationError, match="at least one option"):
        compose_description([], "notes only")
