from dataclasses import asdict
from typing import Any
from uuid import UUID

from fastapi import APIRouter, Depends, status

from src.api.deps import (
    get_current_user,
    get_policy,
    get_proposal_service,
    get_review_component,
    require_permission,
)
from src.api.errors import http_error
from src.api.schemas import (
    ActivityResponse,
    ApprovalResponse,
    ProposalCreateRequest,
    ProposalDetailResponse,
    ProposalResponse,
    ReconcileResponse,
    RepairedModel,
    ReviewRequest,
    SkippedModel,
)
from src.components.proposals import ProposalFilters, ProposalService
from src.components.review import ReviewComponent
from src.domain.entities import Proposal, UserProfile
from src.domain.errors import ModerationError, PermissionDeniedError
from src.domain.policy import PolicyEngine

router = APIRouter()


def _proposal(p: Proposal) -> ProposalResponse:
    return ProposalResponse.model_validate(p.model_dump())


@router.get("", response_model=list[ProposalResponse])
def list_proposals(
    status: str | None = None,
    content_type: str | None = None,
    proposed_by: str | None = None,
    current_user: UserProfile = Depends(get_current_user),
    policy: PolicyEngine = Depends(get_policy),
    service: ProposalService = Depends(get_proposal_service),
) -> list[ProposalResponse]:
    """List proposals. Without proposals:list a caller only sees their own."""
    if not policy.check_permission(current_user, "proposals:list"):
        if proposed_by and proposed_by != current_user.id:
            raise http_error(PermissionDeniedError("proposals:list"))
        proposed_by = current_user.id
        require_permission(
            policy, current_user, "proposals:list", context={"proposed_by": proposed_by}
        )

    try:
        filters = ProposalFilters(status=status, content_type=content_type, proposed_by=proposed_by)
        proposals = service.list(filters)
    except ModerationError as e:
        raise http_error(e) from e
    return [_proposal(p) for p in proposals]


@router.post("", response_model=ProposalResponse, status_code=status.HTTP_201_CREATED)
def create_proposal(
    req: ProposalCreateRequest,
    current_user: UserProfile = Depends(get_current_user),
    policy: PolicyEngine = Depends(get_policy),
    service: ProposalService = Depends(get_proposal_service),
) -> ProposalResponse:
    """Submit a proposal (always created as pending)."""
    require_permission(policy, current_user, "proposals:create")
    try:
        proposal = service.create(req.content_type, req.content_data, current_user.id)
    except ModerationError as e:
        raise http_error(e) from e
    return _proposal(proposal)


@router.post("/reconcile", response_model=ReconcileResponse)
def reconcile_proposals(
    current_user: UserProfile = Depends(get_current_user),
    policy: PolicyEngine = Depends(get_policy),
    review: ReviewComponent = Depends(get_review_component),
) -> ReconcileResponse:
    """Insert missing records for approved proposals."""
    require_permission(policy, current_user, "proposals:reconcile")
    try:
        report = review.reconcile(actor_id=current_user.id)
    except ModerationError as e:
        raise http_error(e) from e
    return ReconcileResponse(
        checked=report.checked,
        repaired=[RepairedModel(**asdict(r)) for r in report.repaired],
        skipped=[SkippedModel(**asdict(s)) for s in report.skipped],
    )


@router.get("/{proposal_id}", response_model=ProposalDetailResponse)
def get_proposal(
    proposal_id: UUID,
    current_user: UserProfile = Depends(get_current_user),
    policy: PolicyEngine = Depends(get_policy),
    service: ProposalService = Depends(get_proposal_service),
) -> ProposalDetailResponse:
    """Proposal with submitter/reviewer profiles."""
    try:
        detail = service.get_by_id(proposal_id)
    except ModerationError as e:
        raise http_error(e) from e

    require_permission(policy, current_user, "proposals:read", resource=detail)
    return ProposalDetailResponse.model_validate(detail.model_dump())


@router.delete("/{proposal_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_proposal(
    proposal_id: UUID,
    current_user: UserProfile = Depends(get_current_user),
    policy: PolicyEngine = Depends(get_policy),
    service: ProposalService = Depends(get_proposal_service),
) -> None:
    """Purge a proposal. Published records are kept."""
    require_permission(policy, current_user, "proposals:delete")
    try:
        service.delete(proposal_id, actor_id=current_user.id)
    except ModerationError as e:
        raise http_error(e) from e


@router.post("/{proposal_id}/approve", response_model=ApprovalResponse)
def approve_proposal(
    proposal_id: UUID,
    req: ReviewRequest | None = None,
    current_user: UserProfile = Depends(get_current_user),
    policy: PolicyEngine = Depends(get_policy),
    review: ReviewComponent = Depends(get_review_component),
) -> ApprovalResponse:
    """Approve and publish."""
    require_permission(policy, current_user, "proposals:review")
    notes = req.review_notes if req else None
    try:
        result = review.approve(proposal_id, current_user.id, notes)
    except ModerationError as e:
        raise http_error(e) from e
    return ApprovalResponse(
        proposal=_proposal(result.proposal),
        collection=result.collection,
        record=result.record,
    )


@router.post("/{proposal_id}/reject", response_model=ProposalResponse)
def reject_proposal(
    proposal_id: UUID,
    req: ReviewRequest,
    current_user: UserProfile = Depends(get_current_user),
    policy: PolicyEngine = Depends(get_policy),
    review: ReviewComponent = Depends(get_review_component),
) -> ProposalResponse:
    """Reject with a reason."""
    require_permission(policy, current_user, "proposals:review")
    try:
        proposal = review.reject(proposal_id, current_user.id, req.review_notes)
    except ModerationError as e:
        raise http_error(e) from e
    return _proposal(proposal)


@router.get("/{proposal_id}/activity", response_model=list[ActivityResponse])
def proposal_activity(
    proposal_id: UUID,
    current_user: UserProfile = Depends(get_current_user),
    policy: PolicyEngine = Depends(get_policy),
    service: ProposalService = Depends(get_proposal_service),
) -> list[Any]:
    """Activity log for one proposal."""
    require_permission(policy, current_user, "activity:read")
    try:
        entries = service.activity(proposal_id)
    except ModerationError as e:
        raise http_error(e) from e
    return [ActivityResponse.model_validate(entry.model_dump()) for entry in entries]
