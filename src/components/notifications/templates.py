"""
Email templates for proposal notifications.

Plain, inline-styled HTML plus a text alternative. Every interpolated value is
HTML-escaped.
"""

from __future__ import annotations

import html
from collections.abc import Mapping
from types import MappingProxyType

from src.components.notifications.models import NotificationConfig, NotificationPayload, RenderedEmail

CONTENT_TYPE_LABELS: Mapping[str, str] = MappingProxyType(
    {
        "job": "Trabajo",
        "startup": "Startup",
        "community": "Comunidad",
        "event": "Evento",
        "referent": "Referente",
        "course": "Curso",
        "blog": "Blog Post",
    }
)


def type_label(content_type: str) -> str:
    return CONTENT_TYPE_LABELS.get(content_type, content_type)


def content_url(config: NotificationConfig, content_type: str) -> str:
    base = config.site_url.rstrip("/")
    path = config.content_paths.get(content_type)
    return f"{base}{path}" if path else base


def _greeting(payload: NotificationPayload) -> str:
    return f"Hola {payload.user_name}," if payload.user_name else "Hola,"


def _wrap(config: NotificationConfig, heading: str, paragraphs: list[str]) -> str:
    body = "".join(f"<p>{p}</p>" for p in paragraphs)
    return (
        "<!DOCTYPE html><html><body style=\"font-family: sans-serif; line-height: 1.6;\">"
        f"<h1>{html.escape(config.site_name)}</h1>"
        f"<h2>{html.escape(heading)}</h2>"
        f"{body}"
        "</body></html>"
    )


def render_submitted(config: NotificationConfig, payload: NotificationPayload) -> RenderedEmail:
    label = type_label(payload.content_type)
    title = html.escape(payload.content_title)
    subject = f"[DeFi MX] Propuesta recibida: {payload.content_title}"
    body_html = _wrap(
        config,
        "¡Propuesta recibida!",
        [
            html.escape(_greeting(payload)),
            f"Recibimos tu propuesta de <strong>{html.escape(label)}</strong>: \"{title}\".",
            "Nuestro equipo la revisará y te avisaremos cuando tengamos una respuesta.",
        ],
    )
    body_text = (
        f"{_greeting(payload)}\n\n"
        f"Recibimos tu propuesta de {label}: \"{payload.content_title}\".\n"
        "Nuestro equipo la revisará y te avisaremos cuando tengamos una respuesta.\n"
    )
    return RenderedEmail(subject, body_html, body_text)


def render_admin_alert(config: NotificationConfig, payload: NotificationPayload) -> RenderedEmail:
    label = type_label(payload.content_type)
    admin_url = f"{config.site_url.rstrip('/')}/admin"
    subject = f"[ADMIN] Nueva propuesta: {label} - {payload.content_title}"
    body_html = _wrap(
        config,
        "Nueva propuesta",
        [
            f"Tipo: <strong>{html.escape(label)}</strong>",
            f"Título: {html.escape(payload.content_title)}",
            f"<a href=\"{html.escape(admin_url)}\">Revisar en el panel de administración</a>",
        ],
    )
    body_text = (
        f"Nueva propuesta de {label}: {payload.content_title}\n"
        f"Revisar: {admin_url}\n"
    )
    return RenderedEmail(subject, body_html, body_text)


def render_approved(config: NotificationConfig, payload: NotificationPayload) -> RenderedEmail:
    label = type_label(payload.content_type)
    url = content_url(config, payload.content_type)
    subject = f"[DeFi MX] ¡Propuesta APROBADA! {payload.content_title}"
    paragraphs = [
        html.escape(_greeting(payload)),
        f"Tu propuesta de <strong>{html.escape(label)}</strong> "
        f"\"{html.escape(payload.content_title)}\" fue aprobada y ya está publicada.",
    ]
    if payload.review_notes:
        paragraphs.append(f"Notas del equipo: {html.escape(payload.review_notes)}")
    paragraphs.append(f"<a href=\"{html.escape(url)}\">Ver publicación</a>")
    body_text = (
        f"{_greeting(payload)}\n\n"
        f"Tu propuesta de {label} \"{payload.content_title}\" fue aprobada y ya está publicada.\n"
        + (f"Notas del equipo: {payload.review_notes}\n" if payload.review_notes else "")
        + f"Ver: {url}\n"
    )
    return RenderedEmail(subject, _wrap(config, "Propuesta aprobada", paragraphs), body_text)


def render_rejected(config: NotificationConfig, payload: NotificationPayload) -> RenderedEmail:
    label = type_label(payload.content_type)
    subject = f"[DeFi MX] Actualización sobre tu propuesta: {payload.content_title}"
    paragraphs = [
        html.escape(_greeting(payload)),
        "Gracias por tu interés en contribuir a DeFi México. Después de revisar tu "
        f"propuesta de <strong>{html.escape(label)}</strong> "
        f"\"{html.escape(payload.content_title)}\", decidimos no publicarla por ahora.",
    ]
    if payload.review_notes:
        paragraphs.append(f"Motivo: {html.escape(payload.review_notes)}")
    paragraphs.append("Puedes enviar una nueva propuesta cuando quieras.")
    body_text = (
        f"{_greeting(payload)}\n\n"
        f"Después de revisar tu propuesta de {label} \"{payload.content_title}\", "
        "decidimos no publicarla por ahora.\n"
        + (f"Motivo: {payload.review_notes}\n" if payload.review_notes else "")
        + "Puedes enviar una nueva propuesta cuando quieras.\n"
    )
    return RenderedEmail(subject, _wrap(config, "Sobre tu propuesta", paragraphs), body_text)
