from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


class ProjectRules(BaseModel):
    slug: str
    rules_version: str
    site_name: str = "DeFi México"

class PasswordHashingRules(BaseModel):
    algorithm: str
    min_length: int

class AuthRules(BaseModel):
    password_hashing: PasswordHashingRules
    access_token_expire_minutes: int = 60 * 24

class RbacRules(BaseModel):
    roles: dict[str, list[str]]
    public_permissions: list[str]

class AbacRule(BaseModel):
    if_condition: dict[str, Any] = Field(alias="if")
    allow: list[str]

    model_config = ConfigDict(populate_by_name=True)

class AbacRules(BaseModel):
    proposal_rules: list[AbacRule] = Field(default_factory=list)

class TransformDefaultsRules(BaseModel):
    country: str = "Mexico"
    currency: str = "MXN"
    timezone: str = "America/Mexico_City"
    language: str = "es"

class ProposalRules(BaseModel):
    slug_collision: Literal["suffix", "reject", "allow"] = "suffix"
    max_slug_suffix: int = 50
    defaults: TransformDefaultsRules = Field(default_factory=TransformDefaultsRules)

class ReviewRules(BaseModel):
    require_rejection_notes: bool = True

class NotificationRules(BaseModel):
    enabled: bool = True
    admin_email: str
    from_email: str
    site_url: str
    content_paths: dict[str, str] = Field(default_factory=dict)
    request_timeout_seconds: float = 10.0

class OpsRules(BaseModel):
    data_dir_required: bool
    required_env: list[str]

class Rules(BaseModel):
    project: ProjectRules
    auth: AuthRules
    rbac: RbacRules
    abac: AbacRules
    proposals: ProposalRules
    review: ReviewRules
    notifications: NotificationRules
    ops: OpsRules
