from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field

from src.domain.entities import (
    ActivityAction,
    ContentType,
    ProposalStatus,
    RoleType,
)


# --- Profiles ---
class ProfileSummaryModel(BaseModel):
    id: str
    email: str
    full_name: str | None = None
    avatar_url: str | None = None
    role: RoleType


class UserResponse(ProfileSummaryModel):
    is_active: bool


# --- Proposals ---
class ProposalCreateRequest(BaseModel):
    """Unknown keys (e.g. a client-supplied status) are ignored."""

    content_type: ContentType
    content_data: dict[str, Any] = Field(default_factory=dict)


class ReviewRequest(BaseModel):
    review_notes: str | None = None


class ProposalResponse(BaseModel):
    id: UUID
    content_type: ContentType
    content_data: dict[str, Any]
    status: ProposalStatus
    proposed_by: str
    reviewed_by: str | None = None
    reviewed_at: datetime | None = None
    review_notes: str | None = None
    created_at: datetime
    updated_at: datetime


class ProposalDetailResponse(ProposalResponse):
    proposed_by_profile: ProfileSummaryModel | None = None
    reviewed_by_profile: ProfileSummaryModel | None = None


class ApprovalResponse(BaseModel):
    proposal: ProposalResponse
    collection: str
    record: dict[str, Any]


# --- Reconcile ---
class RepairedModel(BaseModel):
    proposal_id: str
    collection: str
    record_id: str
    slug: str


class SkippedModel(BaseModel):
    proposal_id: str
    field: str
    reason: str


class ReconcileResponse(BaseModel):
    checked: int
    repaired: list[RepairedModel] = []
    skipped: list[SkippedModel] = []


# --- Activity ---
class ActivityResponse(BaseModel):
    id: UUID
    user_id: str | None
    action: ActivityAction
    entity_type: str
    entity_id: str
    old_data: dict[str, Any] | None = None
    new_data: dict[str, Any] | None = None
    created_at: datetime
