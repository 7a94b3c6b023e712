"""Notification component models."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Protocol

from src.core.ports.email import EmailResult


class NotificationEvent(str, Enum):
    """Proposal lifecycle events that trigger an email."""

    SUBMITTED = "submitted"
    APPROVED = "approved"
    REJECTED = "rejected"


@dataclass(frozen=True)
class NotificationPayload:
    """What the email talks about."""

    content_type: str
    content_title: str
    review_notes: str | None = None
    user_name: str | None = None


@dataclass(frozen=True)
class NotificationConfig:
    """Dispatcher configuration (mirrors the notifications section of rules.yaml)."""

    enabled: bool = True
    site_name: str = "DeFi México"
    site_url: str = "https://defimexico.org"
    admin_email: str | None = None
    from_email: str | None = None
    content_paths: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class RenderedEmail:
    subject: str
    body_html: str
    body_text: str


@dataclass(frozen=True)
class NotificationOutcome:
    """Results of every email sent for one event (submitter + admin on SUBMITTED)."""

    event: NotificationEvent
    results: list[EmailResult] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return all(r.ok for r in self.results)


class NotifierPort(Protocol):
    """Anything that can deliver a lifecycle notification."""

    def notify(
        self,
        event: NotificationEvent | str,
        recipient: str,
        payload: NotificationPayload,
    ) -> NotificationOutcome: ...
