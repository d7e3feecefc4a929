"""
Notion job records.

One page per job in the jobs database. Calls go straight to the Notion REST
API with urllib; any HTTP or network failure becomes a RecordServiceError
whose message names the likely cause for the operator.
"""

import json
import logging
import urllib.error
import urllib.request

from ..errors import RecordServiceError
from ..formatting import maps_url

logger = logging.getLogger(__name__)

NOTION_API = "https://api.notion.com/v1"

# Notion error codes → operator-facing explanation
ERROR_MESSAGES = {
    "object_not_found": (
        "Notion database not found. Please check your NOTION_DATABASE_ID."
    ),
    "unauthorized": (
        "Notion API key is invalid or lacks permissions for the database. "
        "Please check your NOTION_API_KEY and integration permissions."
    ),
    "restricted_resource": (
        "Notion API key is invalid or lacks permissions for the database. "
        "Please check your NOTION_API_KEY and integration permissions."
    ),
    "rate_limited": "Notion API rate limit exceeded. Please try again later.",
}


def describe_notion_error(code: str, message: str) -> str:
    if code in ERROR_MESSAGES:
        return ERROR_MESSAGES[code]
    if code == "validation_error":
        return (
            f"Notion API validation error: {message}. Please check if all form fields "
            f"match Notion's property types and constraints."
        )
    return f"Notion error: {message} (Code: {code})"


def _rich_text(content: str) -> dict:
    return {"rich_text": [{"text": {"content": content}}]}


def job_properties(job, start_timestamp: str, handled_by: str, payment_status: str) -> dict:
    """Page properties for a new job record."""
    return {
        "Name": {"title": [{"text": {"content": job.name}}]},
        "Address": {"url": maps_url(job.address)},
        "Job Date/Time": {"date": {"start": start_timestamp}},
        "Quote": {"number": job.quote},
        "Phone #": {"phone_number": job.phone_digits},
        "Description": _rich_text(job.description or ""),
        "Scheduled By": _rich_text(job.scheduled_by.value),
        "Scheduled For": _rich_text(handled_by),
        "Payment Status": {"select": {"name": payment_status}},
    }


def event_link_properties(event_url: str) -> dict:
    return {"Google Event": {"url": event_url}}


class NotionRecordClient:
    """Create and patch pages in a single Notion database."""

    def __init__(self, api_key: str, database_id: str, notion_version: str = "2022-06-28",
                 timeout: float = 30.0):
        self.api_key = api_key
        self.database_id = database_id
        self.notion_version = notion_version
        self.timeout = timeout

    def create_record(self, properties: dict) -> str:
        """Create a page in the database. Returns the new page id."""
        page = self._request("POST", "/pages", {
            "parent": {"database_id": self.database_id},
            "properties": properties,
        })
        page_id = page.get("id")
        if not page_id:
            raise RecordServiceError("Notion returned no page id for the new record")
        logger.info("Notion page created: %s", page_id)
        return page_id

    def update_record(self, record_id: str, properties: dict) -> None:
        self._request("PATCH", f"/pages/{record_id}", {"properties": properties})
        logger.info("Notion page %s updated", record_id)

    def _request(self, method: str, path: str, body: dict) -> dict:
        req = urllib.request.Request(
            f"{NOTION_API}{path}",
            data=json.dumps(body).encode("utf-8"),
            headers={
                "Authorization": f"Bearer {self.api_key}",
                "Notion-Version": self.notion_version,
                "Content-Type": "application/json",
            },
            method=method,
        )
        try:
            with urllib.request.urlopen(req, timeout=self.timeout) as response:
                return json.loads(response.read())
        except urllib.error.HTTPError as e:
            code, message = _parse_error_body(e)
            logger.error("Notion %s %s failed (%s): %s", method, path, e.code, message)
            raise RecordServiceError(
                describe_notion_error(code, message), code=code, status=e.code,
            ) from e
        except OSError as e:
            reason = getattr(e, "reason", e)
            logger.error("Notion %s %s unreachable: %s", method, path, reason)
            raise RecordServiceError(f"Could not reach Notion: {reason}") from e
        except ValueError as e:
            raise RecordServiceError(f"Notion returned an unreadable response: {e}") from e


def _parse_error_body(error: urllib.error.HTTPError):
    """Pull (code, message) out of a Notion error response."""
    try:
        data = json.loads(error.read())
    except (ValueError, OSError):
        return f"http_{error.code}", str(error.reason)
    return data.get("code", f"http_{error.code}"), data.get("message", str(error.reason))
