"""
Proposal repository service.

Create/list/get/delete over proposals. Each write appends an activity entry
in the same transaction; the "submitted" notification goes out after commit.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import Any
from uuid import UUID

from src.components.notifications import (
    NotificationEvent,
    NotificationPayload,
    NotifierPort,
    notify_best_effort,
)
from src.components.proposals.models import ProposalFilters
from src.core.ports.db import UnitOfWorkPort
from src.core.ports.time import ClockPort
from src.domain.entities import (
    CONTENT_TYPES,
    ActivityLog,
    ProfileSummary,
    Proposal,
    ProposalDetail,
)
from src.domain.errors import AuthError, InvalidPayloadError, NotFoundError

logger = logging.getLogger(__name__)


class ProposalService:
    """Component for submitting and managing proposals."""

    def __init__(
        self,
        uow_factory: Callable[[], UnitOfWorkPort],
        clock: ClockPort,
        notifier: NotifierPort | None = None,
    ) -> None:
        self._uow_factory = uow_factory
        self._clock = clock
        self._notifier = notifier

    def list(self, filters: ProposalFilters | None = None) -> list[Proposal]:
        """All proposals matching filters, newest first."""
        filters = filters or ProposalFilters()
        with self._uow_factory() as uow:
            return uow.proposals.list(filters.as_dict())

    def create(
        self,
        content_type: str,
        content_data: Mapping[str, Any],
        proposed_by: str | None,
    ) -> Proposal:
        """
        Submit a new proposal.

        The status is always 'pending'. Raises AuthError when the submitter
        cannot be resolved to an active profile.
        """
        if not proposed_by:
            raise AuthError()
        if content_type not in CONTENT_TYPES:
            raise InvalidPayloadError("content_type", f"Unknown content type: {content_type}")
        if not isinstance(content_data, Mapping):
            raise InvalidPayloadError("content_data", "content_data must be an object")

        now = self._clock.now_utc()
        with self._uow_factory() as uow:
            profile = uow.profiles.get_by_id(proposed_by)
            if profile is None or not profile.is_active:
                raise AuthError("Submitter profile not found or inactive")

            proposal = Proposal(
                content_type=content_type,  # type: ignore[arg-type]
                content_data=dict(content_data),
                status="pending",
                proposed_by=proposed_by,
                created_at=now,
                updated_at=now,
            )
            uow.proposals.insert(proposal)
            uow.activity.append(
                ActivityLog(
                    user_id=proposed_by,
                    action="create",
                    entity_type="proposal",
                    entity_id=str(proposal.id),
                    new_data={"content_type": content_type, "status": "pending"},
                    created_at=now,
                )
            )
            uow.commit()

        logger.info(
            "Proposal %s created: type=%s by=%s", proposal.id, content_type, proposed_by
        )
        notify_best_effort(
            self._notifier,
            NotificationEvent.SUBMITTED,
            profile.email,
            NotificationPayload(
                content_type=content_type,
                content_title=proposal.title,
                user_name=profile.full_name,
            ),
        )
        return proposal

    def get_by_id(self, proposal_id: UUID) -> ProposalDetail:
        """Proposal joined with submitter and reviewer profile summaries."""
        with self._uow_factory() as uow:
            proposal = uow.proposals.get_by_id(proposal_id)
            if proposal is None:
                raise NotFoundError("Proposal", str(proposal_id))

            submitter = uow.profiles.get_by_id(proposal.proposed_by)
            reviewer = (
                uow.profiles.get_by_id(proposal.reviewed_by) if proposal.reviewed_by else None
            )

        return ProposalDetail(
            **proposal.model_dump(),
            proposed_by_profile=ProfileSummary.of(submitter) if submitter else None,
            reviewed_by_profile=ProfileSummary.of(reviewer) if reviewer else None,
        )

    def delete(self, proposal_id: UUID, actor_id: str | None = None) -> None:
        """
        Hard delete. Published records created from the proposal stay.
        """
        now = self._clock.now_utc()
        with self._uow_factory() as uow:
            proposal = uow.proposals.get_by_id(proposal_id)
            if proposal is None or not uow.proposals.delete(proposal_id):
                raise NotFoundError("Proposal", str(proposal_id))
            uow.activity.append(
                ActivityLog(
                    user_id=actor_id,
                    action="delete",
                    entity_type="proposal",
                    entity_id=str(proposal_id),
                    old_data=proposal.model_dump(mode="json"),
                    created_at=now,
                )
            )
            uow.commit()

        logger.info("Proposal %s deleted by %s", proposal_id, actor_id)

    def activity(self, proposal_id: UUID) -> list[ActivityLog]:
        """Activity entries for a proposal, oldest first."""
        with self._uow_factory() as uow:
            return uow.activity.list_for_entity("proposal", str(proposal_id))
