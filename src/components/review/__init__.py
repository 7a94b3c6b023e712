"""Review component - approve/reject state machine and reconcile job."""

from src.components.review.component import ReviewComponent, defaults_from_rules
from src.components.review.models import (
    ApprovalResult,
    ReconcileReport,
    RepairedProposal,
    SkippedProposal,
)

__all__ = [
    # Component
    "ReviewComponent",
    "defaults_from_rules",
    # Models
    "ApprovalResult",
    "ReconcileReport",
    "RepairedProposal",
    "SkippedProposal",
]
