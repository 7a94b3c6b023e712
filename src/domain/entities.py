from datetime import UTC, datetime
from typing import Any, Literal
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

# --- Enums / Literals ---
RoleType = Literal["admin", "editor", "user"]
ContentType = Literal["startup", "event", "community", "referent", "course", "blog", "job"]
ProposalStatus = Literal["pending", "approved", "rejected"]
ActivityAction = Literal["create", "approve", "reject", "delete", "reconcile"]

CONTENT_TYPES: tuple[ContentType, ...] = (
    "startup",
    "event",
    "community",
    "referent",
    "course",
    "blog",
    "job",
)


def utcnow() -> datetime:
    return datetime.now(UTC)


# --- Profiles & Auth ---

class UserProfile(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid4()))
    email: str
    full_name: str | None = None
    avatar_url: str | None = None
    role: RoleType = "user"
    password_hash: str = ""
    is_active: bool = True
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

class ProfileSummary(BaseModel):
    id: str
    email: str
    full_name: str | None = None
    avatar_url: str | None = None
    role: RoleType

    @classmethod
    def of(cls, profile: UserProfile) -> "ProfileSummary":
        return cls(
            id=profile.id,
            email=profile.email,
            full_name=profile.full_name,
            avatar_url=profile.avatar_url,
            role=profile.role,
        )

# --- Proposals ---

class Proposal(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    content_type: ContentType
    content_data: dict[str, Any] = Field(default_factory=dict)
    status: ProposalStatus = "pending"
    proposed_by: str

    reviewed_by: str | None = None
    reviewed_at: datetime | None = None
    review_notes: str | None = None

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    @property
    def title(self) -> str:
        """Human-readable title of the proposed content."""
        value = self.content_data.get("name") or self.content_data.get("title")
        return str(value) if value else self.content_type

class ProposalDetail(Proposal):
    proposed_by_profile: ProfileSummary | None = None
    reviewed_by_profile: ProfileSummary | None = None

# --- Audit ---

class ActivityLog(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    user_id: str | None
    action: ActivityAction
    entity_type: str
    entity_id: str
    old_data: dict[str, Any] | None = None
    new_data: dict[str, Any] | None = None
    created_at: datetime = Field(default_factory=utcnow)
