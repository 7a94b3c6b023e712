"""Review component models - frozen dataclass outputs."""

from dataclasses import dataclass, field
from typing import Any

from src.domain.entities import Proposal


@dataclass(frozen=True)
class ApprovalResult:
    """An approved proposal and the record it produced."""

    proposal: Proposal
    collection: str
    record: dict[str, Any]


@dataclass(frozen=True)
class RepairedProposal:
    proposal_id: str
    collection: str
    record_id: str
    slug: str


@dataclass(frozen=True)
class SkippedProposal:
    proposal_id: str
    field: str
    reason: str


@dataclass(frozen=True)
class ReconcileReport:
    """Outcome of a reconcile run over approved proposals."""

    checked: int = 0
    repaired: list[RepairedProposal] = field(default_factory=list)
    skipped: list[SkippedProposal] = field(default_factory=list)

    @property
    def clean(self) -> bool:
        return not self.repaired and not self.skipped
