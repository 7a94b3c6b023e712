"""
Content transformer - maps an approved proposal payload into a published record.

Pure: no I/O, no clock reads. The caller passes `now` and persists the result.

Per content type the transformer:
1. derives the slug from the canonical field (name or title)
2. fills every required target field, defaulting absent values
3. remaps vocabulary (event format, community focus, referent track, job type)
4. sets the collection's initial status and zeroes engagement counters
5. stamps proposal_id and created_by
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime
from types import MappingProxyType
from typing import Any, TypeVar

from src.domain.entities import ContentType, Proposal
from src.domain.errors import InvalidPayloadError
from src.domain.records import (
    BlogPost,
    Community,
    Course,
    Event,
    Job,
    PublishedRecord,
    Referent,
    Startup,
)
from src.domain.slug import fold, slugify

from src.components.transform.payloads import (
    CANONICAL_FIELDS,
    BlogPayload,
    CommunityPayload,
    CoursePayload,
    EventPayload,
    JobPayload,
    ProposalPayload,
    ReferentPayload,
    StartupPayload,
    parse_payload,
)

T = TypeVar("T")

# --- Lookup tables ---

REFERENT_TRACKS: Mapping[str, str] = MappingProxyType(
    {
        "programadores": "developer",
        "abogados": "lawyer",
        "financieros": "financial",
        "disenadores": "designer",
        "marketers": "marketer",
        "otros": "other",
    }
)

WORDS_PER_MINUTE = 200


@dataclass(frozen=True)
class TransformDefaults:
    """Locale defaults applied when the submitter leaves a field out."""

    country: str = "Mexico"
    currency: str = "MXN"
    timezone: str = "America/Mexico_City"
    language: str = "es"


DEFAULTS = TransformDefaults()


# --- Helpers ---


def _first(*values: T | None, default: T) -> T:
    """First truthy value, else default (empty strings and lists fall through)."""
    for value in values:
        if value:
            return value
    return default


def _canonical_slug(payload: ProposalPayload, content_type: ContentType) -> tuple[str, str]:
    field = CANONICAL_FIELDS[content_type]
    raw = getattr(payload, field, None)
    if not raw or not raw.strip():
        raise InvalidPayloadError(field, f"Missing required field '{field}' (needed for slug)")
    slug = slugify(raw)
    if not slug:
        raise InvalidPayloadError(field, f"Field '{field}' has no characters usable in a slug")
    return raw.strip(), slug


def map_event_type(raw: str | None) -> str:
    """Normalize free-text event format into presencial | online | hibrido."""
    value = fold(raw or "")
    if "online" in value or "virtual" in value:
        return "online"
    if "hybrid" in value or "hibrid" in value:
        return "hibrido"
    return "presencial"


def map_referent_track(raw: str | None) -> str:
    """Map a Spanish category label to a track code; unknown labels give other."""
    return REFERENT_TRACKS.get(fold(raw or "").strip(), "other")


def map_job_type(raw: str | None) -> str:
    value = fold(raw or "")
    if "remot" in value:
        return "remote"
    if "hybrid" in value or "hibrid" in value:
        return "hybrid"
    return "onsite"


def read_time_minutes(text: str) -> int:
    words = len(text.split())
    return max(1, math.ceil(words / WORDS_PER_MINUTE))


# --- Per-type builders ---


def _startup(p: StartupPayload, name: str, slug: str, now: datetime, d: TransformDefaults) -> Startup:
    description = p.description or ""
    founded = p.founded_date or (f"{p.founded_year:04d}-01-01" if p.founded_year else None)
    return Startup(
        name=name,
        slug=slug,
        description=description,
        long_description=_first(p.long_description, description, default=""),
        tagline=_first(p.tagline, p.short_description, default=""),
        website=_first(p.website, p.website_url, default=""),
        logo_url=p.logo_url or "",
        cover_image_url=p.cover_image_url or "",
        categories=_first(p.categories, [p.category] if p.category else None, default=[]),
        tags=p.tags or [],
        city=p.city or "",
        country=p.country or d.country,
        founded_date=founded or now.date().isoformat(),
        team_size=_first(p.team_size, p.employee_count, default=0),
        funding_stage=p.funding_stage,
        funding_raised_usd=_first(p.funding_raised_usd, p.total_funding, default=0.0),
        github_url=p.github_url or "",
        twitter_url=p.twitter_url or "",
        linkedin_url=p.linkedin_url or "",
        telegram_url=p.telegram_url or "",
        discord_url=p.discord_url or "",
        status="published",
        verification_status="verified",
    )


def _event(p: EventPayload, title: str, slug: str, now: datetime, d: TransformDefaults) -> Event:
    return Event(
        title=title,
        slug=slug,
        description=p.description or "",
        subtitle=_first(p.subtitle, p.short_description, default=""),
        category=p.category or "meetup",
        event_type=map_event_type(p.event_type or p.format),  # type: ignore[arg-type]
        start_date=p.start_date or now.date().isoformat(),
        end_date=p.end_date,
        start_time=p.start_time or "00:00",
        end_time=p.end_time or "23:59",
        timezone=p.timezone or d.timezone,
        venue_name=_first(p.venue_name, p.location, default=""),
        venue_address=_first(p.venue_address, p.address, default=""),
        venue_city=_first(p.venue_city, p.city, default=""),
        venue_state=p.venue_state or "",
        venue_country=_first(p.venue_country, p.country, default=d.country),
        online_url=_first(p.online_url, p.streaming_url, default=""),
        online_platform=p.online_platform or "",
        organizer_name=_first(p.organizer_name, p.organizer, default=""),
        organizer_email=p.organizer_email or "",
        is_free=p.is_free is not False,
        price=p.price or 0.0,
        currency=p.currency or d.currency,
        capacity=_first(p.max_attendees, p.capacity, default=0),
        registration_required=p.registration_required is not False,
        registration_url=p.registration_url or "",
        image_url=_first(p.image_url, p.cover_image_url, default=""),
        banner_url=_first(p.banner_url, p.cover_image_url, default=""),
        tags=p.tags or [],
        sponsors=p.sponsors or [],
        partners=p.partners or [],
        language=p.language or [d.language],
        difficulty_level=p.difficulty_level or "beginner",
        status="published",
    )


def _community(
    p: CommunityPayload, name: str, slug: str, now: datetime, d: TransformDefaults
) -> Community:
    tags = list(p.tags or [])
    if p.community_type:
        tags.append(p.community_type)
    return Community(
        name=name,
        slug=slug,
        description=_first(p.short_description, p.description, default=""),
        long_description=p.description or "",
        category=p.focus_area or "defi",
        image_url=_first(p.logo_url, p.cover_image_url, default=""),
        banner_url=p.cover_image_url or "",
        tags=tags,
        member_count=p.member_count or 0,
        city=p.city or "",
        country=p.country or d.country,
        links={
            "website": _first(p.main_url, p.website, default=""),
            "twitter": p.twitter_url or "",
            "telegram": p.telegram_url or "",
            "discord": p.discord_url or "",
            "github": p.github_url or "",
        },
        is_verified=True,
    )


def _referent(
    p: ReferentPayload, name: str, slug: str, now: datetime, d: TransformDefaults
) -> Referent:
    areas = p.expertise_areas or []
    return Referent(
        name=name,
        slug=slug,
        bio=_first(p.bio, p.description, default=""),
        email=p.email or "",
        location=_first(p.location, p.city, default=""),
        company=p.company or "",
        position=p.position or "",
        expertise=_first(p.expertise, ", ".join(areas), default=""),
        track=map_referent_track(p.category or p.track),  # type: ignore[arg-type]
        specializations=_first(p.expertise_areas, p.specializations, default=[]),
        achievements=p.achievements or [],
        avatar_url=_first(p.avatar_url, p.photo_url, default=""),
        twitter_url=p.twitter_url or "",
        linkedin_url=p.linkedin_url or "",
        github_url=p.github_url or "",
        website=_first(p.website, p.website_url, p.portfolio_url, default=""),
        is_active=True,
    )


def _course(p: CoursePayload, title: str, slug: str, now: datetime, d: TransformDefaults) -> Course:
    return Course(
        title=title,
        slug=slug,
        description=p.description or "",
        short_description=p.short_description or "",
        cover_image_url=p.cover_image_url or "",
        syllabus=p.syllabus or {},
        learning_outcomes=p.learning_outcomes or [],
        prerequisites=p.prerequisites or [],
        instructor_name=p.instructor_name or "",
        difficulty_level=p.difficulty_level or "principiante",
        duration_hours=p.duration_hours or 0.0,
        language=p.language or d.language,
        is_free=p.is_free is not False,
        price=p.price or 0.0,
        currency=p.currency or d.currency,
        enrollment_url=p.enrollment_url or "",
        course_url=p.course_url or "",
        category=p.category or "defi",
        tags=p.tags or [],
        status="approved",
    )


def _blog(p: BlogPayload, title: str, slug: str, now: datetime, d: TransformDefaults) -> BlogPost:
    content = _first(p.content, p.body, p.description, default="")
    excerpt = _first(p.excerpt, p.description, default="")
    return BlogPost(
        title=title,
        slug=slug,
        content=content,
        excerpt=excerpt,
        cover_image_url=p.cover_image_url or "",
        category=p.category or "defi",
        tags=p.tags or [],
        meta_title=p.meta_title or title,
        meta_description=_first(p.meta_description, excerpt, default=""),
        status="approved",
        published_at=now.isoformat(),
        read_time_minutes=read_time_minutes(content),
    )


def _job(p: JobPayload, title: str, slug: str, now: datetime, d: TransformDefaults) -> Job:
    return Job(
        title=title,
        slug=slug,
        company=p.company or "",
        company_logo=p.company_logo or "",
        description=p.description or "",
        location=p.location or "Remoto",
        job_type=map_job_type(p.job_type),  # type: ignore[arg-type]
        category=p.category or "other",
        salary_min=p.salary_min,
        salary_max=p.salary_max,
        salary_currency=p.salary_currency or "USD",
        experience_level=p.experience_level or "mid",
        requirements=p.requirements or "",
        benefits=p.benefits or "",
        tags=p.tags or [],
        apply_url=p.apply_url or "",
        apply_email=p.apply_email or "",
        status="published",
        expires_at=p.expires_at,
    )


# --- Entry points ---


def transform(
    content_type: ContentType,
    content_data: Mapping[str, Any],
    *,
    proposal_id: str | None,
    proposed_by: str | None,
    now: datetime,
    defaults: TransformDefaults = DEFAULTS,
) -> PublishedRecord:
    """
    Build the schema-complete record for content_type.

    Raises InvalidPayloadError when the canonical name/title is missing or a
    field cannot be coerced to its declared type. Absent fields only default.
    """
    payload = parse_payload(content_type, content_data)
    canonical, slug = _canonical_slug(payload, content_type)

    record: PublishedRecord
    if isinstance(payload, StartupPayload):
        record = _startup(payload, canonical, slug, now, defaults)
    elif isinstance(payload, EventPayload):
        record = _event(payload, canonical, slug, now, defaults)
    elif isinstance(payload, CommunityPayload):
        record = _community(payload, canonical, slug, now, defaults)
    elif isinstance(payload, ReferentPayload):
        record = _referent(payload, canonical, slug, now, defaults)
    elif isinstance(payload, CoursePayload):
        record = _course(payload, canonical, slug, now, defaults)
    elif isinstance(payload, BlogPayload):
        record = _blog(payload, canonical, slug, now, defaults).model_copy(
            update={"author_id": proposed_by}
        )
    elif isinstance(payload, JobPayload):
        record = _job(payload, canonical, slug, now, defaults)
    else:
        raise TypeError(f"Unknown payload type: {type(payload)}")

    return record.model_copy(update={"proposal_id": proposal_id, "created_by": proposed_by})


def transform_proposal(
    proposal: Proposal,
    now: datetime,
    defaults: TransformDefaults = DEFAULTS,
) -> PublishedRecord:
    """Transform a proposal's payload, stamping its provenance."""
    return transform(
        proposal.content_type,
        proposal.content_data,
        proposal_id=str(proposal.id),
        proposed_by=proposal.proposed_by,
        now=now,
        defaults=defaults,
    )
