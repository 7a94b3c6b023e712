"""Proposals component - submission and management of proposals."""

from src.components.proposals.component import ProposalService
from src.components.proposals.models import PROPOSAL_STATUSES, ProposalFilters

__all__ = [
    # Component
    "ProposalService",
    # Models
    "ProposalFilters",
    "PROPOSAL_STATUSES",
]
