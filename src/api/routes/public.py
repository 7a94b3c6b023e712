"""
Public read API for published records.

Only records in their collection's public state are visible: startups,
events and jobs must be 'published'; courses and blog posts 'approved';
referents and courses must be active.
"""

from collections.abc import Callable, Mapping
from types import MappingProxyType
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query

from src.api.deps import get_policy, get_uow_factory, require_permission
from src.api.errors import http_error
from src.core.ports.db import UnitOfWorkPort
from src.domain.entities import CONTENT_TYPES
from src.domain.errors import ModerationError
from src.domain.policy import PolicyEngine
from src.domain.records import collection_for

router = APIRouter()

PUBLIC_FILTERS: Mapping[str, Mapping[str, Any]] = MappingProxyType(
    {
        "startup": {"status": "published"},
        "event": {"status": "published"},
        "job": {"status": "published"},
        "course": {"status": "approved", "is_active": True},
        "blog": {"status": "approved"},
        "community": {},
        "referent": {"is_active": True},
    }
)


def _collection(content_type: str) -> str:
    if content_type not in CONTENT_TYPES:
        raise HTTPException(status_code=404, detail="Unknown content type")
    return collection_for(content_type)  # type: ignore[arg-type]


@router.get("/{content_type}")
def list_published(
    content_type: str,
    limit: int = Query(50, ge=1, le=200),
    policy: PolicyEngine = Depends(get_policy),
    uow_factory: Callable[[], UnitOfWorkPort] = Depends(get_uow_factory),
) -> list[dict[str, Any]]:
    """Published records of one content type, newest first."""
    require_permission(policy, None, "content:read")
    collection = _collection(content_type)
    try:
        with uow_factory() as uow:
            return uow.content.select(collection, PUBLIC_FILTERS[content_type], limit=limit)
    except ModerationError as e:
        raise http_error(e) from e


@router.get("/{content_type}/{slug}")
def get_published(
    content_type: str,
    slug: str,
    policy: PolicyEngine = Depends(get_policy),
    uow_factory: Callable[[], UnitOfWorkPort] = Depends(get_uow_factory),
) -> dict[str, Any]:
    """One published record by slug."""
    require_permission(policy, None, "content:read")
    collection = _collection(content_type)
    try:
        with uow_factory() as uow:
            rows = uow.content.select(
                collection, {**PUBLIC_FILTERS[content_type], "slug": slug}, limit=1
            )
    except ModerationError as e:
        raise http_error(e) from e

    if not rows:
        raise HTTPException(status_code=404, detail="Content not found")
    return rows[0]
