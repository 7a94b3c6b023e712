"""Notifications component - proposal lifecycle emails."""

from src.components.notifications.component import (
    NotificationDispatcher,
    config_from_rules,
    notify_best_effort,
)
from src.components.notifications.models import (
    NotificationConfig,
    NotificationEvent,
    NotificationOutcome,
    NotificationPayload,
    NotifierPort,
    RenderedEmail,
)
from src.components.notifications.templates import CONTENT_TYPE_LABELS, type_label

__all__ = [
    # Component
    "NotificationDispatcher",
    "config_from_rules",
    "notify_best_effort",
    # Models
    "NotificationConfig",
    "NotificationEvent",
    "NotificationOutcome",
    "NotificationPayload",
    "NotifierPort",
    "RenderedEmail",
    # Templates
    "CONTENT_TYPE_LABELS",
    "type_label",
]
