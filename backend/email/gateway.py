"""
Delivery Gateway

Sends one fully-resolved email through the Resend API.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, List, Dict, Any

import resend

from backend.config import config
from backend.delivery.errors import GatewayError
from backend.utils.logging import email_logger as logger


@dataclass(frozen=True)
class EmailAttachment:
    """A local file sent along with the email."""
    filename: str
    path: str


class ResendGateway:
    """Thin wrapper around resend.Emails.send that raises GatewayError on failure."""

    def __init__(self, api_key: Optional[str] = None, from_address: Optional[str] = None):
        self.api_key = api_key or config.RESEND_API_KEY
        self.from_address = from_address or config.EMAIL_FROM_ADDRESS

    def _attachments(self, attachment: EmailAttachment) -> List[Dict[str, Any]]:
        try:
            content = Path(attachment.path).read_bytes()
        except OSError as e:
            raise GatewayError(f"Could not read attachment {attachment.path}: {e}") from e
        return [{"filename": attachment.filename, "content": list(content)}]

    def send(
        self,
        to: str,
        subject: str,
        text: str,
        html: Optional[str] = None,
        attachment: Optional[EmailAttachment] = None,
    ) -> Optional[str]:
        """
        Send an email and return the Resend message id.

        The video link, when there is one, is already embedded in the bodies;
        a local video is passed as attachment instead.
        """
        if not self.api_key:
            raise GatewayError("RESEND_API_KEY is not configured")

        params: Dict[str, Any] = {
            "from": self.from_address,
            "to": [to],
            "subject": subject,
            "text": text,
        }
        if html:
            params["html"] = html
        if attachment:
            params["attachments"] = self._attachments(attachment)

        resend.api_key = self.api_key
        try:
            response = resend.Emails.send(params)
        except Exception as e:
            raise GatewayError(f"Resend rejected email to {to}: {e}") from e

        message_id = response.get("id") if isinstance(response, dict) else getattr(response, "id", None)
        logger.info("Email sent", to=to, resend_id=message_id)
        return message_id
