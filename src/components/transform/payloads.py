"""
Typed proposal payloads - one variant per content type.

Submitters send free-form field maps. Each map is parsed into the variant
selected by the proposal's content type; every field is optional here because
the transformer owns defaulting. A value that does not fit its field is
dropped so the default applies; only the canonical name/title is checked later.
"""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType
from typing import Any, Literal

from pydantic import (
    BaseModel,
    ConfigDict,
    ValidationError,
    ValidationInfo,
    ValidatorFunctionWrapHandler,
    field_validator,
    model_validator,
)

from src.domain.entities import ContentType
from src.domain.errors import InvalidPayloadError

StrList = list[str] | None


class PayloadBase(BaseModel):
    """Lenient base: unknown keys are kept, empty strings count as absent."""

    model_config = ConfigDict(extra="allow")

    @model_validator(mode="before")
    @classmethod
    def _drop_empty(cls, data: Any) -> Any:
        if isinstance(data, Mapping):
            return {k: v for k, v in data.items() if v is not None and v != ""}
        return data

    @field_validator("*", mode="wrap")
    @classmethod
    def _lenient(
        cls, value: Any, handler: ValidatorFunctionWrapHandler, info: ValidationInfo
    ) -> Any:
        # Forms send tags as "defi, nft"; list fields accept that too.
        field = cls.model_fields.get(info.field_name)
        if field is not None and isinstance(value, str) and "list[" in str(field.annotation):
            value = [part.strip() for part in value.split(",") if part.strip()]
        try:
            return handler(value)
        except ValidationError:
            if info.field_name == "content_type":
                raise
            return None


class StartupPayload(PayloadBase):
    content_type: Literal["startup"] = "startup"
    name: str | None = None
    description: str | None = None
    long_description: str | None = None
    short_description: str | None = None
    tagline: str | None = None
    website: str | None = None
    website_url: str | None = None
    logo_url: str | None = None
    cover_image_url: str | None = None
    category: str | None = None
    categories: StrList = None
    tags: StrList = None
    city: str | None = None
    country: str | None = None
    founded_date: str | None = None
    founded_year: int | None = None
    team_size: int | None = None
    employee_count: int | None = None
    funding_stage: str | None = None
    funding_raised_usd: float | None = None
    total_funding: float | None = None
    github_url: str | None = None
    twitter_url: str | None = None
    linkedin_url: str | None = None
    telegram_url: str | None = None
    discord_url: str | None = None


class EventPayload(PayloadBase):
    content_type: Literal["event"] = "event"
    title: str | None = None
    description: str | None = None
    subtitle: str | None = None
    short_description: str | None = None
    category: str | None = None
    event_type: str | None = None
    format: str | None = None
    start_date: str | None = None
    end_date: str | None = None
    start_time: str | None = None
    end_time: str | None = None
    timezone: str | None = None
    venue_name: str | None = None
    location: str | None = None
    venue_address: str | None = None
    address: str | None = None
    venue_city: str | None = None
    city: str | None = None
    venue_state: str | None = None
    venue_country: str | None = None
    country: str | None = None
    online_url: str | None = None
    streaming_url: str | None = None
    online_platform: str | None = None
    organizer_name: str | None = None
    organizer: str | None = None
    organizer_email: str | None = None
    is_free: bool | None = None
    price: float | None = None
    currency: str | None = None
    max_attendees: int | None = None
    capacity: int | None = None
    registration_required: bool | None = None
    registration_url: str | None = None
    image_url: str | None = None
    cover_image_url: str | None = None
    banner_url: str | None = None
    tags: StrList = None
    sponsors: StrList = None
    partners: StrList = None
    language: StrList = None
    difficulty_level: str | None = None


class CommunityPayload(PayloadBase):
    content_type: Literal["community"] = "community"
    name: str | None = None
    description: str | None = None
    short_description: str | None = None
    logo_url: str | None = None
    cover_image_url: str | None = None
    community_type: str | None = None
    focus_area: str | None = None
    main_url: str | None = None
    website: str | None = None
    telegram_url: str | None = None
    discord_url: str | None = None
    twitter_url: str | None = None
    github_url: str | None = None
    member_count: int | None = None
    city: str | None = None
    country: str | None = None
    tags: StrList = None


class ReferentPayload(PayloadBase):
    content_type: Literal["referent"] = "referent"
    name: str | None = None
    bio: str | None = None
    description: str | None = None
    email: str | None = None
    location: str | None = None
    city: str | None = None
    company: str | None = None
    position: str | None = None
    expertise: str | None = None
    expertise_areas: StrList = None
    specializations: StrList = None
    achievements: StrList = None
    category: str | None = None
    track: str | None = None
    avatar_url: str | None = None
    photo_url: str | None = None
    twitter_url: str | None = None
    linkedin_url: str | None = None
    github_url: str | None = None
    website: str | None = None
    website_url: str | None = None
    portfolio_url: str | None = None


class CoursePayload(PayloadBase):
    content_type: Literal["course"] = "course"
    title: str | None = None
    description: str | None = None
    short_description: str | None = None
    cover_image_url: str | None = None
    syllabus: dict[str, Any] | None = None
    learning_outcomes: StrList = None
    prerequisites: StrList = None
    instructor_name: str | None = None
    difficulty_level: str | None = None
    duration_hours: float | None = None
    language: str | None = None
    is_free: bool | None = None
    price: float | None = None
    currency: str | None = None
    enrollment_url: str | None = None
    course_url: str | None = None
    category: str | None = None
    tags: StrList = None


class BlogPayload(PayloadBase):
    content_type: Literal["blog"] = "blog"
    title: str | None = None
    content: str | None = None
    body: str | None = None
    excerpt: str | None = None
    description: str | None = None
    cover_image_url: str | None = None
    category: str | None = None
    tags: StrList = None
    meta_title: str | None = None
    meta_description: str | None = None


class JobPayload(PayloadBase):
    content_type: Literal["job"] = "job"
    title: str | None = None
    company: str | None = None
    company_logo: str | None = None
    description: str | None = None
    location: str | None = None
    job_type: str | None = None
    category: str | None = None
    salary_min: float | None = None
    salary_max: float | None = None
    salary_currency: str | None = None
    experience_level: str | None = None
    requirements: str | None = None
    benefits: str | None = None
    tags: StrList = None
    apply_url: str | None = None
    apply_email: str | None = None
    expires_at: str | None = None


ProposalPayload = (
    StartupPayload
    | EventPayload
    | CommunityPayload
    | ReferentPayload
    | CoursePayload
    | BlogPayload
    | JobPayload
)

PAYLOAD_MODELS: Mapping[ContentType, type[PayloadBase]] = MappingProxyType(
    {
        "startup": StartupPayload,
        "event": EventPayload,
        "community": CommunityPayload,
        "referent": ReferentPayload,
        "course": CoursePayload,
        "blog": BlogPayload,
        "job": JobPayload,
    }
)

# Field the slug is derived from.
CANONICAL_FIELDS: Mapping[ContentType, str] = MappingProxyType(
    {
        "startup": "name",
        "community": "name",
        "referent": "name",
        "event": "title",
        "course": "title",
        "blog": "title",
        "job": "title",
    }
)


def parse_payload(content_type: str, content_data: Mapping[str, Any]) -> ProposalPayload:
    """
    Parse a raw field map into the typed variant for content_type.

    Off-type values come back as None. Raises InvalidPayloadError only for an
    unknown content type.
    """
    model = PAYLOAD_MODELS.get(content_type)  # type: ignore[call-overload]
    if model is None:
        raise InvalidPayloadError("content_type", f"Unsupported content type: {content_type}")

    data = dict(content_data)
    data["content_type"] = content_type
    try:
        return model.model_validate(data)  # type: ignore[return-value]
    except ValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(part) for part in first["loc"]) or "content_data"
        raise InvalidPayloadError(field, f"Invalid value for {field}: {first['msg']}") from e
