"""
Transform component unit tests.

Covers slug derivation, defaulting, vocabulary remaps and the schema
completeness of every content type's record.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

import pytest

from src.components.transform import (
    TransformDefaults,
    map_event_type,
    map_job_type,
    map_referent_track,
    parse_payload,
    read_time_minutes,
    transform,
)
from src.domain.entities import CONTENT_TYPES
from src.domain.errors import InvalidPayloadError
from src.domain.records import (
    RECORD_MODELS,
    BlogPost,
    Community,
    Course,
    Event,
    Job,
    Referent,
    Startup,
    required_fields,
)
from src.domain.slug import slugify

NOW = datetime(2025, 3, 14, 18, 30, tzinfo=UTC)

MINIMAL: dict[str, dict[str, Any]] = {
    "startup": {"name": "Acme Pay"},
    "event": {"title": "ETH CDMX Meetup"},
    "community": {"name": "DeFi Guadalajara"},
    "referent": {"name": "María Pérez"},
    "course": {"title": "Intro a DeFi"},
    "blog": {"title": "¿Qué es un AMM?"},
    "job": {"title": "Solidity Engineer"},
}


def _run(content_type: str, data: dict[str, Any], **kwargs: Any) -> Any:
    return transform(
        content_type,  # type: ignore[arg-type]
        data,
        proposal_id=kwargs.pop("proposal_id", "prop-1"),
        proposed_by=kwargs.pop("proposed_by", "user-1"),
        now=kwargs.pop("now", NOW),
        **kwargs,
    )


# --- Slug ---


class TestSlug:
    def test_strips_diacritics_and_punctuation(self) -> None:
        assert slugify("Café Árbol S.A.") == "cafe-arbol-s-a"

    def test_collapses_whitespace_and_trims(self) -> None:
        assert slugify("  Multi   Space  ") == "multi-space"

    def test_slug_comes_from_canonical_field(self) -> None:
        record = _run("startup", {"name": "Café Árbol S.A.", "title": "ignored"})
        assert record.slug == "cafe-arbol-s-a"

        event = _run("event", {"title": "Hola Mundo", "name": "ignored"})
        assert event.slug == "hola-mundo"

    @pytest.mark.parametrize("content_type", CONTENT_TYPES)
    def test_missing_canonical_field_raises(self, content_type: str) -> None:
        with pytest.raises(InvalidPayloadError) as exc:
            _run(content_type, {"description": "sin nombre"})
        expected = "name" if content_type in ("startup", "community", "referent") else "title"
        assert exc.value.field == expected

    def test_blank_canonical_field_raises(self) -> None:
        with pytest.raises(InvalidPayloadError) as exc:
            _run("startup", {"name": "   "})
        assert exc.value.field == "name"

    def test_unsluggable_canonical_field_raises(self) -> None:
        with pytest.raises(InvalidPayloadError) as exc:
            _run("event", {"title": "!!! ???"})
        assert exc.value.field == "title"


# --- Schema completeness ---


class TestCompleteness:
    @pytest.mark.parametrize("content_type", CONTENT_TYPES)
    def test_required_fields_non_null_from_minimal_payload(self, content_type: str) -> None:
        record = _run(content_type, MINIMAL[content_type])
        assert isinstance(record, RECORD_MODELS[content_type])
        for name in required_fields(type(record)):
            assert getattr(record, name) is not None, f"{content_type}.{name} is null"

    @pytest.mark.parametrize("content_type", CONTENT_TYPES)
    def test_engagement_counters_zeroed(self, content_type: str) -> None:
        record = _run(content_type, MINIMAL[content_type])
        assert (record.view_count, record.like_count, record.share_count) == (0, 0, 0)

    @pytest.mark.parametrize("content_type", CONTENT_TYPES)
    def test_provenance_stamped(self, content_type: str) -> None:
        record = _run(content_type, MINIMAL[content_type], proposal_id="p-9", proposed_by="u-7")
        assert record.proposal_id == "p-9"
        assert record.created_by == "u-7"

    @pytest.mark.parametrize("content_type", CONTENT_TYPES)
    def test_deterministic(self, content_type: str) -> None:
        data = {**MINIMAL[content_type], "tags": "defi, nft", "description": "x"}
        assert _run(content_type, data) == _run(content_type, data)

    def test_initial_statuses(self) -> None:
        assert _run("startup", MINIMAL["startup"]).status == "published"
        assert _run("event", MINIMAL["event"]).status == "published"
        assert _run("job", MINIMAL["job"]).status == "published"
        assert _run("course", MINIMAL["course"]).status == "approved"
        assert _run("blog", MINIMAL["blog"]).status == "approved"


# --- Per-type mapping ---


class TestStartup:
    def test_defaults_and_alternative_keys(self) -> None:
        record = _run(
            "startup",
            {
                "name": "Acme Pay",
                "description": "Pagos cripto",
                "short_description": "Pagos para todos",
                "website_url": "https://acme.mx",
                "employee_count": "12",
                "total_funding": 250000,
                "category": "payments",
                "founded_year": 2021,
            },
        )
        assert isinstance(record, Startup)
        assert record.country == "Mexico"
        assert record.long_description == "Pagos cripto"
        assert record.tagline == "Pagos para todos"
        assert record.website == "https://acme.mx"
        assert record.team_size == 12
        assert record.funding_raised_usd == 250000.0
        assert record.categories == ["payments"]
        assert record.founded_date == "2021-01-01"
        assert record.tags == []
        assert record.is_featured is False
        assert record.verification_status == "verified"

    def test_founded_date_defaults_to_today(self) -> None:
        record = _run("startup", {"name": "Acme"})
        assert record.founded_date == "2025-03-14"

    def test_comma_separated_tags(self) -> None:
        record = _run("startup", {"name": "Acme", "tags": "defi, pagos ,, nft"})
        assert record.tags == ["defi", "pagos", "nft"]

    def test_off_type_values_fall_back_to_defaults(self) -> None:
        record = _run("startup", {"name": "Acme", "team_size": "10-20", "tags": {"a": 1}})
        assert isinstance(record, Startup)
        assert record.team_size == 0
        assert record.tags == []

    def test_off_type_value_falls_through_to_alias(self) -> None:
        record = _run("startup", {"name": "Acme", "team_size": "muchos", "employee_count": 8})
        assert record.team_size == 8


class TestEvent:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("Virtual Meetup", "online"),
            ("ONLINE", "online"),
            ("Sala híbrida", "hibrido"),
            ("Hybrid", "hibrido"),
            ("Auditorio", "presencial"),
            (None, "presencial"),
        ],
    )
    def test_event_type_remap(self, raw: str | None, expected: str) -> None:
        assert map_event_type(raw) == expected

    def test_format_used_when_event_type_missing(self) -> None:
        record = _run("event", {"title": "Demo Day", "format": "virtual"})
        assert isinstance(record, Event)
        assert record.event_type == "online"

    def test_defaults(self) -> None:
        record = _run("event", {"title": "Demo Day"})
        assert record.timezone == "America/Mexico_City"
        assert record.currency == "MXN"
        assert record.venue_country == "Mexico"
        assert record.start_date == "2025-03-14"
        assert record.language == ["es"]
        assert record.is_free is True
        assert record.registration_required is True
        assert record.capacity == 0

    def test_custom_defaults(self) -> None:
        defaults = TransformDefaults(country="Colombia", currency="COP", timezone="America/Bogota")
        record = _run("event", {"title": "Demo Day"}, defaults=defaults)
        assert record.venue_country == "Colombia"
        assert record.currency == "COP"
        assert record.timezone == "America/Bogota"

    def test_explicit_false_kept(self) -> None:
        record = _run("event", {"title": "Gala", "is_free": False, "price": "350"})
        assert record.is_free is False
        assert record.price == 350.0


class TestCommunity:
    def test_focus_area_and_community_type(self) -> None:
        record = _run(
            "community",
            {
                "name": "DeFi GDL",
                "focus_area": "education",
                "community_type": "meetup",
                "tags": ["defi"],
                "main_url": "https://gdl.xyz",
            },
        )
        assert isinstance(record, Community)
        assert record.category == "education"
        assert record.tags == ["defi", "meetup"]
        assert record.links["website"] == "https://gdl.xyz"

    def test_category_defaults_to_defi(self) -> None:
        record = _run("community", {"name": "DeFi GDL"})
        assert record.category == "defi"
        assert record.is_verified is True


class TestReferent:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("Programadores", "developer"),
            ("abogados", "lawyer"),
            ("Financieros", "financial"),
            ("Diseñadores", "designer"),
            ("marketers", "marketer"),
            ("otros", "other"),
            ("developer", "other"),
            ("lawyer", "other"),
            ("inventado", "other"),
            (None, "other"),
        ],
    )
    def test_track_remap(self, raw: str | None, expected: str) -> None:
        assert map_referent_track(raw) == expected

    def test_expertise_from_areas(self) -> None:
        record = _run(
            "referent",
            {"name": "María", "category": "Programadores", "expertise_areas": "solidity, rust"},
        )
        assert isinstance(record, Referent)
        assert record.track == "developer"
        assert record.specializations == ["solidity", "rust"]
        assert record.expertise == "solidity, rust"
        assert record.is_active is True


class TestCourseAndBlog:
    def test_course_defaults(self) -> None:
        record = _run("course", {"title": "Intro a DeFi"})
        assert isinstance(record, Course)
        assert record.language == "es"
        assert record.currency == "MXN"
        assert record.is_free is True
        assert record.syllabus == {}

    def test_blog_author_and_read_time(self) -> None:
        body = " ".join(["palabra"] * 450)
        record = _run("blog", {"title": "AMMs", "content": body}, proposed_by="u-42")
        assert isinstance(record, BlogPost)
        assert record.author_id == "u-42"
        assert record.read_time_minutes == 3
        assert record.published_at == NOW.isoformat()
        assert record.meta_title == "AMMs"

    def test_read_time_minimum_one(self) -> None:
        assert read_time_minutes("") == 1
        assert read_time_minutes("hola") == 1
        assert read_time_minutes(" ".join(["w"] * 201)) == 2


class TestJob:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [("Remoto", "remote"), ("remote", "remote"), ("Híbrido", "hybrid"), ("oficina", "onsite")],
    )
    def test_job_type_remap(self, raw: str, expected: str) -> None:
        assert map_job_type(raw) == expected

    def test_defaults(self) -> None:
        record = _run("job", {"title": "Solidity Engineer", "company": "Acme"})
        assert isinstance(record, Job)
        assert record.location == "Remoto"
        assert record.salary_currency == "USD"
        assert record.job_type == "onsite"
        assert record.salary_min is None


class TestParsePayload:
    def test_unknown_content_type(self) -> None:
        with pytest.raises(InvalidPayloadError) as exc:
            parse_payload("podcast", {"title": "x"})
        assert exc.value.field == "content_type"

    def test_empty_strings_count_as_absent(self) -> None:
        payload = parse_payload("startup", {"name": "Acme", "website": ""})
        assert payload.website is None  # type: ignore[union-attr]

    def test_unknown_keys_kept(self) -> None:
        payload = parse_payload("startup", {"name": "Acme", "pitch_deck": "https://x"})
        assert payload.model_extra == {"pitch_deck": "https://x"}

    def test_off_type_values_are_dropped(self) -> None:
        payload = parse_payload("community", {"name": "Comunidad", "member_count": "500+"})
        assert payload.member_count is None  # type: ignore[union-attr]
        assert payload.name == "Comunidad"  # type: ignore[union-attr]

    @pytest.mark.parametrize(
        ("content_type", "data", "field", "expected"),
        [
            ("community", {"name": "Comunidad", "member_count": "500+"}, "member_count", 0),
            ("course", {"title": "Curso", "language": ["es", "en"]}, "language", "es"),
            ("event", {"title": "Meetup", "price": "gratis"}, "price", 0.0),
            ("job", {"title": "Dev", "tags": 42}, "tags", []),
        ],
    )
    def test_transform_is_total_over_off_type_fields(
        self, content_type: str, data: dict, field: str, expected: object
    ) -> None:
        record = _run(content_type, data)
        assert getattr(record, field) == expected

    def test_non_string_canonical_field_raises(self) -> None:
        with pytest.raises(InvalidPayloadError) as exc:
            _run("startup", {"name": 12345})
        assert exc.value.field == "name"
