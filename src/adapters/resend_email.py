"""
Resend Email Adapter.

Sends transactional email through the Resend HTTP API
(POST https://api.resend.com/emails). Non-2xx responses come back as a FAILED
EmailResult; transport errors raise EmailSendError.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from src.core.ports.email import EmailAddress, EmailMessage, EmailResult, EmailSendError

logger = logging.getLogger(__name__)

RESEND_API_URL = "https://api.resend.com/emails"


class ResendEmailAdapter:
    """Implements EmailPort over the Resend API."""

    def __init__(
        self,
        api_key: str,
        default_sender: EmailAddress,
        *,
        timeout: float = 10.0,
        client: httpx.Client | None = None,
    ) -> None:
        if not api_key:
            raise ValueError("Resend API key is required")
        self._api_key = api_key
        self._default_sender = default_sender
        self._client = client or httpx.Client(timeout=timeout)

    def _payload(self, message: EmailMessage) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "from": str(message.sender or self._default_sender),
            "to": [message.recipient.email],
            "subject": message.subject,
            "html": message.body_html,
            "text": message.body_text,
        }
        if message.headers:
            payload["headers"] = dict(message.headers)
        return payload

    def send(self, message: EmailMessage) -> EmailResult:
        recipient = message.recipient.email
        try:
            response = self._client.post(
                RESEND_API_URL,
                json=self._payload(message),
                headers={"Authorization": f"Bearer {self._api_key}"},
            )
        except httpx.HTTPError as e:
            raise EmailSendError(recipient, str(e)) from e

        if response.is_success:
            data = response.json()
            return EmailResult.success(recipient, message_id=data.get("id"))

        try:
            detail = response.json().get("message") or response.text
        except ValueError:
            detail = response.text
        logger.error("Resend rejected email to %s: %s %s", recipient, response.status_code, detail)
        return EmailResult.failed(recipient, f"{response.status_code}: {detail}")

    def close(self) -> None:
        self._client.close()
