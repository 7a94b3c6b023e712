"""
Published content records.

One schema per content type. Records are what an approved proposal becomes;
they are independent of the proposal after creation (proposal_id is a
non-owning back-reference).
"""

from __future__ import annotations

import types
from collections.abc import Mapping
from types import MappingProxyType
from typing import Any, Literal, Union, get_args, get_origin

from pydantic import BaseModel, Field

from src.domain.entities import ContentType


class PublishedRecord(BaseModel):
    """Fields shared by every published collection."""

    slug: str
    proposal_id: str | None = None
    created_by: str | None = None

    view_count: int = 0
    like_count: int = 0
    share_count: int = 0


class Startup(PublishedRecord):
    name: str
    description: str
    long_description: str
    tagline: str
    website: str
    logo_url: str
    cover_image_url: str
    categories: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    city: str
    country: str
    founded_date: str
    team_size: int
    funding_stage: str | None = None
    funding_raised_usd: float
    github_url: str
    twitter_url: str
    linkedin_url: str
    telegram_url: str
    discord_url: str
    status: Literal["draft", "published"] = "published"
    verification_status: Literal["pending", "verified"] = "verified"
    is_featured: bool = False
    total_users: int = 0
    unique_visitors: int = 0


class Event(PublishedRecord):
    title: str
    description: str
    subtitle: str
    category: str
    event_type: Literal["presencial", "online", "hibrido"]
    start_date: str
    end_date: str | None = None
    start_time: str
    end_time: str
    timezone: str
    venue_name: str
    venue_address: str
    venue_city: str
    venue_state: str
    venue_country: str
    online_url: str
    online_platform: str
    organizer_name: str
    organizer_email: str
    is_free: bool
    price: float
    currency: str
    capacity: int
    registration_required: bool
    registration_url: str
    image_url: str
    banner_url: str
    tags: list[str] = Field(default_factory=list)
    sponsors: list[str] = Field(default_factory=list)
    partners: list[str] = Field(default_factory=list)
    language: list[str] = Field(default_factory=list)
    difficulty_level: str
    status: Literal["draft", "published", "cancelled"] = "published"
    is_featured: bool = False
    current_attendees: int = 0
    waitlist_count: int = 0
    waitlist_enabled: bool = False
    cancellation_reason: str = ""


class Community(PublishedRecord):
    name: str
    description: str
    long_description: str
    category: str
    image_url: str
    banner_url: str
    tags: list[str] = Field(default_factory=list)
    member_count: int
    city: str
    country: str
    links: dict[str, str] = Field(default_factory=dict)
    is_featured: bool = False
    is_verified: bool = True
    is_official: bool = False
    active_members_count: int = 0
    post_count: int = 0
    moderators: list[str] = Field(default_factory=list)
    rules: list[str] = Field(default_factory=list)


Track = Literal["developer", "lawyer", "financial", "designer", "marketer", "other"]


class Referent(PublishedRecord):
    name: str
    bio: str
    email: str
    location: str
    company: str
    position: str
    expertise: str
    track: Track
    specializations: list[str] = Field(default_factory=list)
    achievements: list[str] = Field(default_factory=list)
    avatar_url: str
    twitter_url: str
    linkedin_url: str
    github_url: str
    website: str
    is_active: bool = True
    is_featured: bool = False
    display_order: int = 999


class Course(PublishedRecord):
    title: str
    description: str
    short_description: str
    cover_image_url: str
    syllabus: dict[str, Any] = Field(default_factory=dict)
    learning_outcomes: list[str] = Field(default_factory=list)
    prerequisites: list[str] = Field(default_factory=list)
    instructor_name: str
    difficulty_level: str
    duration_hours: float
    language: str
    is_free: bool
    price: float
    currency: str
    enrollment_url: str
    course_url: str
    category: str
    tags: list[str] = Field(default_factory=list)
    enrolled_count: int = 0
    rating: float | None = None
    review_count: int = 0
    is_featured: bool = False
    is_active: bool = True
    status: Literal["pending", "approved"] = "approved"


class BlogPost(PublishedRecord):
    title: str
    content: str
    excerpt: str
    cover_image_url: str
    author_id: str | None = None
    category: str
    tags: list[str] = Field(default_factory=list)
    meta_title: str
    meta_description: str
    status: Literal["pending", "approved"] = "approved"
    published_at: str
    read_time_minutes: int
    is_featured: bool = False


class Job(PublishedRecord):
    title: str
    company: str
    company_logo: str
    description: str
    location: str
    job_type: Literal["remote", "hybrid", "onsite"]
    category: str
    salary_min: float | None = None
    salary_max: float | None = None
    salary_currency: str
    experience_level: str
    requirements: str
    benefits: str
    tags: list[str] = Field(default_factory=list)
    apply_url: str
    apply_email: str
    is_featured: bool = False
    status: Literal["draft", "published", "closed", "expired"] = "published"
    expires_at: str | None = None


# --- Collection registry ---

RECORD_MODELS: Mapping[ContentType, type[PublishedRecord]] = MappingProxyType(
    {
        "startup": Startup,
        "event": Event,
        "community": Community,
        "referent": Referent,
        "course": Course,
        "blog": BlogPost,
        "job": Job,
    }
)

COLLECTIONS: Mapping[ContentType, str] = MappingProxyType(
    {
        "startup": "startups",
        "event": "events",
        "community": "communities",
        "referent": "defi_advocates",
        "course": "courses",
        "blog": "blog_posts",
        "job": "jobs",
    }
)


def collection_for(content_type: ContentType) -> str:
    return COLLECTIONS[content_type]


def model_for_collection(collection: str) -> type[PublishedRecord] | None:
    for content_type, name in COLLECTIONS.items():
        if name == collection:
            return RECORD_MODELS[content_type]
    return None


def _allows_none(annotation: Any) -> bool:
    origin = get_origin(annotation)
    if origin is Union or origin is types.UnionType:
        return type(None) in get_args(annotation)
    return annotation is None or annotation is type(None)


def required_fields(model: type[PublishedRecord]) -> list[str]:
    """Fields that must be non-null in a schema-complete record."""
    return [
        name for name, info in model.model_fields.items() if not _allows_none(info.annotation)
    ]


def json_fields(model: type[PublishedRecord]) -> set[str]:
    """Fields persisted as JSON text (lists and mappings)."""
    names: set[str] = set()
    for name, info in model.model_fields.items():
        origin = get_origin(info.annotation)
        if origin in (list, dict):
            names.add(name)
    return names
