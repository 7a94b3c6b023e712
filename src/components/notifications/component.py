"""
Notification dispatcher.

Renders the Spanish email for a proposal lifecycle event and hands it to an
EmailPort. SUBMITTED sends two emails: a receipt to the submitter and an
alert to the admin address.
"""

from __future__ import annotations

import logging

from src.components.notifications.models import (
    NotificationConfig,
    NotificationEvent,
    NotificationOutcome,
    NotificationPayload,
    NotifierPort,
    RenderedEmail,
)
from src.components.notifications.templates import (
    render_admin_alert,
    render_approved,
    render_rejected,
    render_submitted,
)
from src.core.ports.email import EmailAddress, EmailMessage, EmailPort, EmailResult
from src.rules.models import NotificationRules

logger = logging.getLogger(__name__)

_RENDERERS = {
    NotificationEvent.SUBMITTED: render_submitted,
    NotificationEvent.APPROVED: render_approved,
    NotificationEvent.REJECTED: render_rejected,
}


def config_from_rules(rules: NotificationRules, site_name: str = "DeFi México") -> NotificationConfig:
    return NotificationConfig(
        enabled=rules.enabled,
        site_name=site_name,
        site_url=rules.site_url,
        admin_email=rules.admin_email,
        from_email=rules.from_email,
        content_paths=dict(rules.content_paths),
    )


class NotificationDispatcher:
    """Sends proposal notifications through an email adapter."""

    def __init__(self, email: EmailPort, config: NotificationConfig) -> None:
        self._email = email
        self._config = config
        self._sender = EmailAddress.parse(config.from_email) if config.from_email else None

    @property
    def config(self) -> NotificationConfig:
        return self._config

    def _send(self, recipient: str, rendered: RenderedEmail) -> EmailResult:
        message = EmailMessage(
            recipient=EmailAddress(recipient),
            subject=rendered.subject,
            body_html=rendered.body_html,
            body_text=rendered.body_text,
            sender=self._sender,
        )
        result = self._email.send(message)
        if not result.ok:
            logger.warning("Notification email to %s failed: %s", recipient, result.error)
        return result

    def notify(
        self,
        event: NotificationEvent | str,
        recipient: str,
        payload: NotificationPayload,
    ) -> NotificationOutcome:
        """
        Send the email(s) for one event.

        Returns a NotificationOutcome with one EmailResult per email. Transport
        errors raised by the adapter propagate to the caller.
        """
        event = NotificationEvent(event)
        if not self._config.enabled:
            logger.info("Notifications disabled; skipping %s email to %s", event.value, recipient)
            return NotificationOutcome(event, [EmailResult.skipped(recipient, "Notifications disabled")])

        results = [self._send(recipient, _RENDERERS[event](self._config, payload))]

        if event is NotificationEvent.SUBMITTED and self._config.admin_email:
            results.append(
                self._send(self._config.admin_email, render_admin_alert(self._config, payload))
            )

        logger.info("Dispatched %s notification for %r to %s", event.value, payload.content_title, recipient)
        return NotificationOutcome(event, results)


def notify_best_effort(
    notifier: NotifierPort | None,
    event: NotificationEvent,
    recipient: str | None,
    payload: NotificationPayload,
) -> NotificationOutcome | None:
    """
    Send a notification after the triggering write has committed.

    Never raises: a failure is logged and the committed transition stands.
    """
    if notifier is None:
        return None
    if not recipient:
        logger.warning("No recipient for %s notification about %r", event.value, payload.content_title)
        return None
    try:
        return notifier.notify(event, recipient, payload)
    except Exception:
        logger.exception("Failed to send %s notification to %s", event.value, recipient)
        return None
