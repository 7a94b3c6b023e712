"""Proposal component models - frozen dataclass inputs."""

from dataclasses import dataclass
from typing import Any, get_args

from src.domain.entities import CONTENT_TYPES, ProposalStatus
from src.domain.errors import InvalidPayloadError

PROPOSAL_STATUSES: tuple[str, ...] = get_args(ProposalStatus)


@dataclass(frozen=True)
class ProposalFilters:
    """Optional list filters, ANDed together."""

    status: str | None = None
    content_type: str | None = None
    proposed_by: str | None = None

    def __post_init__(self) -> None:
        if self.status is not None and self.status not in PROPOSAL_STATUSES:
            raise InvalidPayloadError("status", f"Unknown status: {self.status}")
        if self.content_type is not None and self.content_type not in CONTENT_TYPES:
            raise InvalidPayloadError("content_type", f"Unknown content type: {self.content_type}")

    def as_dict(self) -> dict[str, Any]:
        return {
            k: v
            for k, v in (
                ("status", self.status),
                ("content_type", self.content_type),
                ("proposed_by", self.proposed_by),
            )
            if v is not None
        }
