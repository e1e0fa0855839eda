"""Outbound email transports"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Protocol, Union

import resend

from ...config import EMAIL_PROVIDER_API_KEY

logger = logging.getLogger(__name__)


@dataclass
class EmailMessage:
    """A fully rendered email ready for the provider"""

    from_address: str
    to: Union[str, list[str]]
    subject: str
    html: str
    reply_to: Optional[str] = None
    scheduled_at: Optional[datetime] = None

    def to_resend_params(self) -> dict:
        params = {
            "from": self.from_address,
            "to": [self.to] if isinstance(self.to, str) else self.to,
            "subject": self.subject,
            "html": self.html,
        }
        if self.reply_to:
            params["reply_to"] = self.reply_to
        if self.scheduled_at:
            params["scheduled_at"] = self.scheduled_at.isoformat()
        return params


class EmailTransport(Protocol):
    name: str

    async def send(self, message: EmailMessage) -> dict: ...


class EmailTransportError(Exception):
    """The provider rejected the message or could not be reached"""


class ResendTransport:
    """Sends through the Resend API"""

    name = "resend"

    def __init__(self, api_key: Optional[str] = None):
        self.api_key = api_key or EMAIL_PROVIDER_API_KEY

    async def send(self, message: EmailMessage) -> dict:
        if not self.api_key:
            logger.error("❌ No email service configured - EMAIL_PROVIDER_API_KEY missing")
            raise EmailTransportError("Email service not configured")

        resend.api_key = self.api_key
        try:
            response = resend.Emails.send(message.to_resend_params())
        except Exception as e:
            raise EmailTransportError(f"Failed to send email: {str(e)}") from e

        return dict(response) if response else {}
