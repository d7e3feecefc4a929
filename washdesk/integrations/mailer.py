"""
Job notification email over SMTP.

Port 465 uses implicit TLS; any other port upgrades with STARTTLS.
"""

import html
import logging
import smtplib
import ssl
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

from ..errors import NotificationError
from ..formatting import display_phone, format_currency, notion_page_url, plain_amount

logger = logging.getLogger(__name__)


def job_email(job, record_id: str, event_url: str):
    """Subject and HTML body summarizing a newly scheduled job."""
    subject = f"Job Scheduled: {job.name} | ${plain_amount(job.quote)}"
    ticket_url = notion_page_url(record_id)
    event_url = event_url or ""

    rows = [
        ("Name", html.escape(job.name)),
        ("Address", html.escape(job.address)),
        ("Date/Time", f"{job.job_date:%Y-%m-%d} {job.job_time:%H:%M}"),
        ("Quote", format_currency(job.quote)),
        ("Phone", display_phone(job.phone)),
        ("Description", html.escape(job.description or "N/A")),
        ("Scheduled By", html.escape(job.scheduled_by.value)),
        ("Google Calendar Event", f'<a href="{html.escape(event_url)}">{html.escape(event_url)}</a>'),
        ("Notion Ticket", f'<a href="{ticket_url}">{ticket_url}</a>'),
    ]
    items = "\n".join(f"    <li><strong>{label}:</strong> {value}</li>" for label, value in rows)
    body = f"<h2>New Job Scheduled</h2>\n<ul>\n{items}\n</ul>\n"
    return subject, body


class SmtpNotifier:

    def __init__(self, server: str, port: int, sender: str, password: str, timeout: float = 30.0):
        self.server = server
        self.port = port
        self.sender = sender
        self.password = password
        self.timeout = timeout

    def send(self, recipients: list, subject: str, html_body: str) -> None:
        """Send one HTML message to all recipients. Raises NotificationError."""
        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = self.sender
        msg["To"] = ", ".join(recipients)
        msg.attach(MIMEText(html_body, "html", "utf-8"))

        try:
            context = ssl.create_default_context()
            if self.port == 465:
                server = smtplib.SMTP_SSL(self.server, self.port, context=context, timeout=self.timeout)
            else:
                server = smtplib.SMTP(self.server, self.port, timeout=self.timeout)
            try:
                if self.port != 465:
                    server.starttls(context=context)
                server.login(self.sender, self.password)
                server.sendmail(self.sender, recipients, msg.as_string())
            finally:
                server.quit()
        except (smtplib.SMTPException, OSError) as e:
            raise NotificationError(f"SMTP send via {self.server} failed: {e}") from e

        logger.info("Job email sent to %d recipient(s) via %s", len(recipients), self.server)
