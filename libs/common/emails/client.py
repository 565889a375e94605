"""
E-mail client backed by the Resend HTTP API.

Used for password-reset codes and superadmin broadcasts. When no API key is
configured the client logs what it would have sent and reports failure, so
callers can record the attempt without crashing.

Usage:
    from libs.common.emails.client import get_email_client

    email_client = get_email_client()

    await email_client.send(
        to_email="user@example.com",
        subject="Hello",
        body="Plain text body",
        html_body="<p>HTML body</p>",
    )

    result = await email_client.send_bulk(
        to_emails=["user1@example.com", "user2@example.com"],
        subject="Announcement",
        html_body="<p>Hello everyone!</p>",
    )
"""

from typing import Any, Optional

import httpx
from libs.common.config import get_settings
from libs.common.logging import get_logger

logger = get_logger(__name__)


class EmailClient:
    """
    HTTP client for sending e-mail through Resend.

    Each call opens a short-lived httpx client; there is no retry.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        api_url: Optional[str] = None,
        from_email: Optional[str] = None,
    ):
        settings = get_settings()
        self.api_key = api_key if api_key is not None else settings.RESEND_API_KEY
        self.api_url = api_url or settings.RESEND_API_URL
        self.from_email = from_email or settings.EMAIL_FROM
        self.timeout = 30.0

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    async def send(
        self,
        to_email: str,
        subject: str,
        body: Optional[str] = None,
        html_body: Optional[str] = None,
        from_email: Optional[str] = None,
    ) -> bool:
        """
        Send a single email.

        Returns:
            True if Resend accepted the message, False otherwise
        """
        if not self.is_configured:
            logger.warning("RESEND_API_KEY not configured - email not sent")
            logger.info(f"Would have sent email to {to_email}: {subject}")
            return False

        payload: dict[str, Any] = {
            "from": from_email or self.from_email,
            "to": [to_email],
            "subject": subject,
        }
        if html_body:
            payload["html"] = html_body
        if body:
            payload["text"] = body

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(
                    self.api_url,
                    json=payload,
                    headers={"Authorization": f"Bearer {self.api_key}"},
                )
        except httpx.HTTPError as e:
            logger.error(f"Failed to reach Resend: {e}")
            return False

        if response.status_code >= 400:
            logger.error(
                f"Email API returned {response.status_code}: {response.text}"
            )
            return False
        return True

    async def send_bulk(
        self,
        to_emails: list[str],
        subject: str,
        body: Optional[str] = None,
        html_body: Optional[str] = None,
    ) -> dict:
        """
        Send the same message to every recipient, one request each.

        Returns:
            Dict with success, sent_count, and failed_count
        """
        sent_count = 0
        failed_count = 0

        for email in to_emails:
            if await self.send(email, subject, body=body, html_body=html_body):
                sent_count += 1
            else:
                failed_count += 1

        return {
            "success": failed_count == 0,
            "sent_count": sent_count,
            "failed_count": failed_count,
        }


_email_client: Optional[EmailClient] = None


def get_email_client() -> EmailClient:
    """Get or create the singleton EmailClient instance."""
    global _email_client
    if _email_client is None:
        _email_client = EmailClient()
    return _email_client
