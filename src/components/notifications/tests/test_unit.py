"""
Notification component unit tests.

Covers:
- SUBMITTED: receipt to submitter + admin alert
- APPROVED / REJECTED: single email to submitter, notes included
- Disabled config: nothing sent
- Failed deliveries reported in the outcome, never raised by best-effort send
"""

from __future__ import annotations

import logging

import pytest

from src.adapters.dev_email import DevEmailAdapter
from src.components.notifications import (
    NotificationConfig,
    NotificationDispatcher,
    NotificationEvent,
    NotificationPayload,
    notify_best_effort,
    type_label,
)
from src.components.notifications.templates import content_url, render_approved
from src.core.ports.email import EmailMessage, EmailResult, EmailSendError, EmailStatus

CONFIG = NotificationConfig(
    enabled=True,
    site_url="https://defimexico.org",
    admin_email="admin@defimexico.org",
    from_email="DeFi México <noreply@defimexico.org>",
    content_paths={"startup": "/ecosistema/startups"},
)

PAYLOAD = NotificationPayload(
    content_type="startup",
    content_title="Acme Pay",
    user_name="Ana",
)


class FailingEmail:
    """Email port whose provider rejects everything."""

    def __init__(self) -> None:
        self.calls = 0

    def send(self, message: EmailMessage) -> EmailResult:
        self.calls += 1
        return EmailResult.failed(message.recipient.email, "503: unavailable")


class ExplodingEmail:
    def send(self, message: EmailMessage) -> EmailResult:
        raise EmailSendError(message.recipient.email, "connection reset")


@pytest.fixture
def email() -> DevEmailAdapter:
    return DevEmailAdapter()


@pytest.fixture
def dispatcher(email: DevEmailAdapter) -> NotificationDispatcher:
    return NotificationDispatcher(email, CONFIG)


class TestSubmitted:
    def test_sends_receipt_and_admin_alert(
        self, dispatcher: NotificationDispatcher, email: DevEmailAdapter
    ) -> None:
        outcome = dispatcher.notify(NotificationEvent.SUBMITTED, "ana@example.com", PAYLOAD)

        assert outcome.event is NotificationEvent.SUBMITTED
        assert len(outcome.results) == 2
        assert outcome.success

        receipt = email.get_emails_to("ana@example.com")[0]
        assert receipt.subject == "[DeFi MX] Propuesta recibida: Acme Pay"
        assert "Hola Ana," in receipt.body_text
        assert receipt.sender == '"DeFi México" <noreply@defimexico.org>'

        alert = email.get_emails_to("admin@defimexico.org")[0]
        assert alert.subject == "[ADMIN] Nueva propuesta: Startup - Acme Pay"
        assert "https://defimexico.org/admin" in alert.body_text

    def test_no_admin_alert_without_admin_email(self, email: DevEmailAdapter) -> None:
        config = NotificationConfig(admin_email=None)
        NotificationDispatcher(email, config).notify("submitted", "ana@example.com", PAYLOAD)
        assert email.email_count == 1


class TestReviewed:
    def test_approved_links_to_section(
        self, dispatcher: NotificationDispatcher, email: DevEmailAdapter
    ) -> None:
        payload = NotificationPayload("startup", "Acme Pay", review_notes="¡Bienvenidos!")
        dispatcher.notify(NotificationEvent.APPROVED, "ana@example.com", payload)

        sent = email.get_last_email()
        assert sent is not None
        assert email.email_count == 1
        assert sent.subject == "[DeFi MX] ¡Propuesta APROBADA! Acme Pay"
        assert "https://defimexico.org/ecosistema/startups" in sent.body_text
        assert "¡Bienvenidos!" in sent.body_text

    def test_rejected_includes_reason(
        self, dispatcher: NotificationDispatcher, email: DevEmailAdapter
    ) -> None:
        payload = NotificationPayload("event", "Meetup", review_notes="Fecha pasada")
        dispatcher.notify(NotificationEvent.REJECTED, "ana@example.com", payload)

        sent = email.get_last_email()
        assert sent is not None
        assert sent.subject == "[DeFi MX] Actualización sobre tu propuesta: Meetup"
        assert "Motivo: Fecha pasada" in sent.body_text
        assert "Hola," in sent.body_text

    def test_html_is_escaped(self, dispatcher: NotificationDispatcher, email: DevEmailAdapter) -> None:
        payload = NotificationPayload("blog", "<script>x</script>")
        dispatcher.notify(NotificationEvent.APPROVED, "ana@example.com", payload)

        sent = email.get_last_email()
        assert sent is not None
        assert "<script>" not in sent.body_html
        assert "&lt;script&gt;" in sent.body_html


class TestDisabledAndFailures:
    def test_disabled_sends_nothing(self, email: DevEmailAdapter) -> None:
        dispatcher = NotificationDispatcher(email, NotificationConfig(enabled=False))
        outcome = dispatcher.notify(NotificationEvent.APPROVED, "ana@example.com", PAYLOAD)

        assert email.email_count == 0
        assert outcome.results[0].status is EmailStatus.SKIPPED
        assert outcome.success

    def test_failed_delivery_reported(self, caplog: pytest.LogCaptureFixture) -> None:
        port = FailingEmail()
        dispatcher = NotificationDispatcher(port, CONFIG)

        with caplog.at_level(logging.WARNING):
            outcome = dispatcher.notify(NotificationEvent.SUBMITTED, "ana@example.com", PAYLOAD)

        assert port.calls == 2
        assert not outcome.success
        assert "failed" in caplog.text

    def test_transport_error_propagates_from_notify(self) -> None:
        dispatcher = NotificationDispatcher(ExplodingEmail(), CONFIG)
        with pytest.raises(EmailSendError):
            dispatcher.notify(NotificationEvent.APPROVED, "ana@example.com", PAYLOAD)


class TestBestEffort:
    def test_swallows_and_logs_transport_error(self, caplog: pytest.LogCaptureFixture) -> None:
        dispatcher = NotificationDispatcher(ExplodingEmail(), CONFIG)

        with caplog.at_level(logging.ERROR):
            result = notify_best_effort(
                dispatcher, NotificationEvent.APPROVED, "ana@example.com", PAYLOAD
            )

        assert result is None
        assert "Failed to send approved notification" in caplog.text

    def test_no_notifier(self) -> None:
        assert notify_best_effort(None, NotificationEvent.APPROVED, "a@b.c", PAYLOAD) is None

    def test_missing_recipient(self, dispatcher: NotificationDispatcher, email: DevEmailAdapter) -> None:
        assert notify_best_effort(dispatcher, NotificationEvent.APPROVED, None, PAYLOAD) is None
        assert email.email_count == 0

    def test_returns_outcome_on_success(self, dispatcher: NotificationDispatcher) -> None:
        outcome = notify_best_effort(
            dispatcher, NotificationEvent.APPROVED, "ana@example.com", PAYLOAD
        )
        assert outcome is not None
        assert outcome.success


class TestTemplates:
    def test_type_labels(self) -> None:
        assert type_label("community") == "Comunidad"
        assert type_label("blog") == "Blog Post"
        assert type_label("podcast") == "podcast"

    def test_content_url_falls_back_to_site(self) -> None:
        assert content_url(CONFIG, "startup") == "https://defimexico.org/ecosistema/startups"
        assert content_url(CONFIG, "course") == "https://defimexico.org"

    def test_approved_without_notes_omits_notes_line(self) -> None:
        rendered = render_approved(CONFIG, NotificationPayload("job", "Dev"))
        assert "Notas del equipo" not in rendered.body_text
