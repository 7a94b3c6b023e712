from datetime import datetime
from types import MappingProxyType
from typing import Any

from src.domain.entities import Proposal, ProposalStatus
from src.domain.errors import InvalidStateError

# Rejection is terminal for the record; the submitter files a new proposal.
TRANSITIONS = MappingProxyType(
    {
        "pending": frozenset({"approved", "rejected"}),
        "approved": frozenset(),
        "rejected": frozenset(),
    }
)


def can_transition(current: ProposalStatus, new: ProposalStatus) -> bool:
    """
    Determine if a review transition is allowed.
    """
    return new in TRANSITIONS.get(current, frozenset())


def transition(
    proposal: Proposal,
    new_status: ProposalStatus,
    reviewer_id: str,
    now: datetime,
    notes: str | None = None,
) -> Proposal:
    """
    Return a NEW Proposal carrying the review outcome.
    Raises InvalidStateError if the transition is not allowed.
    """
    if not can_transition(proposal.status, new_status):
        raise InvalidStateError(str(proposal.id), proposal.status, new_status)

    updates: dict[str, Any] = {
        "status": new_status,
        "reviewed_by": reviewer_id,
        "reviewed_at": now,
        "review_notes": notes,
        "updated_at": now,
    }
    return proposal.model_copy(update=updates)
