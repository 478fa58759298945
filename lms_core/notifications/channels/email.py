"""SendGrid email delivery channel."""

import asyncio
import os
import re
from dataclasses import dataclass
from typing import Callable

from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import Mail

from lms_core.config import get_email_send_timeout
from lms_core.enums import EventKind
from lms_core.errors import DeliveryFailure
from lms_core.notifications.templates import get_message


SENDGRID_API_KEY = os.environ.get("SENDGRID_API_KEY")
FROM_EMAIL = os.environ.get("FROM_EMAIL", "support@klariti.com")
FROM_NAME = os.environ.get("FROM_NAME", "Klariti Learning")

# Template bodies write links as [text](url)
LINK_PATTERN = re.compile(r"\[([^\]]+)\]\(([^)]+)\)")

HTML_DOCUMENT = """<!DOCTYPE html>
<html>
<head><meta charset="utf-8"></head>
<body style="font-family: Arial, Helvetica, sans-serif; font-size: 15px; line-height: 1.6; color: #222;">
{body}
</body>
</html>"""

ACCEPTED_STATUS_CODES = (200, 201, 202)

_client: SendGridAPIClient | None = None


@dataclass(frozen=True)
class EmailMessage:
    """A rendered email for one recipient."""

    to_email: str
    subject: str
    body: str

    @property
    def plain_text(self) -> str:
        """Body with every link spelled out as "text (url)"."""
        return LINK_PATTERN.sub(r"\1 (\2)", self.body)

    @property
    def html(self) -> str:
        """Body as a small HTML document with clickable links and kept line breaks."""
        linked = LINK_PATTERN.sub(r'<a href="\2">\1</a>', self.body)
        return HTML_DOCUMENT.format(body=linked.replace("\n", "<br>\n"))


def render_email(kind: EventKind, template_data: dict) -> EmailMessage:
    """
    Default renderer: messages.yaml subject/body for the event kind.

    template_data must carry the recipient address under "email".
    """
    return EmailMessage(
        to_email=template_data["email"],
        subject=get_message(kind.value, "email_subject", template_data),
        body=get_message(kind.value, "email_body", template_data),
    )


def _get_sendgrid_client() -> SendGridAPIClient | None:
    global _client
    if _client is None and SENDGRID_API_KEY:
        _client = SendGridAPIClient(SENDGRID_API_KEY)
    return _client


def send_email(message: EmailMessage) -> None:
    """
    Hand a message to SendGrid as plain text plus HTML. Blocking.

    Raises:
        DeliveryFailure: SendGrid is not configured or did not accept the message
    """
    client = _get_sendgrid_client()
    if not client:
        raise DeliveryFailure("SendGrid not configured (SENDGRID_API_KEY not set)")

    response = client.send(
        Mail(
            from_email=(FROM_EMAIL, FROM_NAME),
            to_emails=message.to_email,
            subject=message.subject,
            plain_text_content=message.plain_text,
            html_content=message.html,
        )
    )
    if response.status_code not in ACCEPTED_STATUS_CODES:
        raise DeliveryFailure(
            f"SendGrid returned {response.status_code} for {message.to_email}"
        )


class SendGridEmailAdapter:
    """
    Email channel adapter.

    The render function is opaque to the engine: it maps an event kind and
    template data to an EmailMessage. The blocking SendGrid call runs in a
    worker thread and is bounded by a timeout.
    """

    def __init__(
        self,
        render: Callable[[EventKind, dict], EmailMessage] = render_email,
        timeout: float | None = None,
    ):
        self.render = render
        self.timeout = timeout if timeout is not None else get_email_send_timeout()

    async def send(self, kind: EventKind, template_data: dict) -> None:
        message = self.render(kind, template_data)
        try:
            await asyncio.wait_for(asyncio.to_thread(send_email, message), timeout=self.timeout)
        except asyncio.TimeoutError as e:
            raise DeliveryFailure(
                f"Email to {message.to_email} timed out after {self.timeout}s"
            ) from e
