"""
Review state machine.

approve and reject move a proposal out of 'pending' with a conditional update,
so two reviewers racing on the same proposal cannot both win. On approval the
transformed record is inserted in the same transaction as the status change:
if the insert fails, the proposal stays pending. Notifications go out after
commit and never undo a committed review.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime
from uuid import UUID

from src.components.notifications import (
    NotificationEvent,
    NotificationPayload,
    NotifierPort,
    notify_best_effort,
)
from src.components.review.models import (
    ApprovalResult,
    ReconcileReport,
    RepairedProposal,
    SkippedProposal,
)
from src.components.transform import TransformDefaults, transform_proposal
from src.core.ports.db import ContentStorePort, UnitOfWorkPort
from src.core.ports.time import ClockPort
from src.domain.entities import ActivityLog, Proposal, ProposalStatus, UserProfile
from src.domain.errors import (
    InvalidPayloadError,
    InvalidStateError,
    NotFoundError,
    SlugConflictError,
)
from src.domain.records import PublishedRecord, collection_for
from src.domain.slug import with_suffix
from src.domain.state import can_transition, transition
from src.rules.models import ProposalRules, ReviewRules

logger = logging.getLogger(__name__)


def defaults_from_rules(rules: ProposalRules) -> TransformDefaults:
    return TransformDefaults(**rules.defaults.model_dump())


class ReviewComponent:
    """Approve, reject and reconcile proposals."""

    def __init__(
        self,
        uow_factory: Callable[[], UnitOfWorkPort],
        clock: ClockPort,
        notifier: NotifierPort | None = None,
        proposal_rules: ProposalRules | None = None,
        review_rules: ReviewRules | None = None,
    ) -> None:
        self._uow_factory = uow_factory
        self._clock = clock
        self._notifier = notifier
        self._proposal_rules = proposal_rules or ProposalRules()
        self._review_rules = review_rules or ReviewRules()
        self._defaults = defaults_from_rules(self._proposal_rules)

    # --- Shared steps ---

    def _load_pending(
        self, uow: UnitOfWorkPort, proposal_id: UUID, target: ProposalStatus
    ) -> Proposal:
        proposal = uow.proposals.get_by_id(proposal_id)
        if proposal is None:
            raise NotFoundError("Proposal", str(proposal_id))
        if not can_transition(proposal.status, target):
            raise InvalidStateError(str(proposal_id), proposal.status, target)
        return proposal

    def _mark_reviewed(
        self,
        uow: UnitOfWorkPort,
        proposal: Proposal,
        target: ProposalStatus,
        reviewer_id: str,
        now: datetime,
        notes: str | None,
    ) -> Proposal:
        reviewed = transition(proposal, target, reviewer_id, now, notes)
        if not uow.proposals.mark_reviewed(proposal.id, target, reviewer_id, now, notes):
            # Another reviewer got there between our read and the update.
            current = uow.proposals.get_by_id(proposal.id)
            status = current.status if current else "deleted"
            raise InvalidStateError(str(proposal.id), status, target)
        return reviewed

    def _resolve_slug(
        self, store: ContentStorePort, collection: str, record: PublishedRecord
    ) -> PublishedRecord:
        policy = self._proposal_rules.slug_collision
        if policy == "allow" or not store.exists(collection, {"slug": record.slug}):
            return record
        if policy == "reject":
            raise SlugConflictError(collection, record.slug)

        for n in range(2, self._proposal_rules.max_slug_suffix + 1):
            candidate = with_suffix(record.slug, n)
            if not store.exists(collection, {"slug": candidate}):
                return record.model_copy(update={"slug": candidate})
        raise SlugConflictError(collection, record.slug)

    def _notify(
        self,
        event: NotificationEvent,
        proposal: Proposal,
        submitter: UserProfile | None,
        notes: str | None,
    ) -> None:
        notify_best_effort(
            self._notifier,
            event,
            submitter.email if submitter else None,
            NotificationPayload(
                content_type=proposal.content_type,
                content_title=proposal.title,
                review_notes=notes,
                user_name=submitter.full_name if submitter else None,
            ),
        )

    # --- Operations ---

    def approve(
        self, proposal_id: UUID, reviewer_id: str, notes: str | None = None
    ) -> ApprovalResult:
        """
        Approve a pending proposal and publish its record.

        Raises NotFoundError, InvalidStateError, InvalidPayloadError (nothing
        written) or QueryError (transaction rolled back).
        """
        now = self._clock.now_utc()
        notes = notes.strip() if notes and notes.strip() else None

        with self._uow_factory() as uow:
            proposal = self._load_pending(uow, proposal_id, "approved")
            record = transform_proposal(proposal, now, self._defaults)
            collection = collection_for(proposal.content_type)

            reviewed = self._mark_reviewed(uow, proposal, "approved", reviewer_id, now, notes)
            record = self._resolve_slug(uow.content, collection, record)
            row = uow.content.insert(collection, record, now=now)
            uow.activity.append(
                ActivityLog(
                    user_id=reviewer_id,
                    action="approve",
                    entity_type="proposal",
                    entity_id=str(proposal_id),
                    old_data={"status": proposal.status},
                    new_data={
                        "status": "approved",
                        "collection": collection,
                        "record_id": row["id"],
                        "slug": row["slug"],
                    },
                    created_at=now,
                )
            )
            submitter = uow.profiles.get_by_id(proposal.proposed_by)
            uow.commit()

        logger.info(
            "Proposal %s approved by %s: inserted %s/%s (slug=%s)",
            proposal_id,
            reviewer_id,
            collection,
            row["id"],
            row["slug"],
        )
        self._notify(NotificationEvent.APPROVED, reviewed, submitter, notes)
        return ApprovalResult(proposal=reviewed, collection=collection, record=row)

    def reject(self, proposal_id: UUID, reviewer_id: str, notes: str | None) -> Proposal:
        """
        Reject a pending proposal. Never transforms or inserts.
        """
        notes = notes.strip() if notes else None
        if not notes:
            if self._review_rules.require_rejection_notes:
                raise InvalidPayloadError("review_notes", "A rejection reason is required")
            notes = None

        now = self._clock.now_utc()
        with self._uow_factory() as uow:
            proposal = self._load_pending(uow, proposal_id, "rejected")
            reviewed = self._mark_reviewed(uow, proposal, "rejected", reviewer_id, now, notes)
            uow.activity.append(
                ActivityLog(
                    user_id=reviewer_id,
                    action="reject",
                    entity_type="proposal",
                    entity_id=str(proposal_id),
                    old_data={"status": proposal.status},
                    new_data={"status": "rejected", "review_notes": notes},
                    created_at=now,
                )
            )
            submitter = uow.profiles.get_by_id(proposal.proposed_by)
            uow.commit()

        logger.info("Proposal %s rejected by %s", proposal_id, reviewer_id)
        self._notify(NotificationEvent.REJECTED, reviewed, submitter, notes)
        return reviewed

    def reconcile(self, actor_id: str | None = None) -> ReconcileReport:
        """
        Insert the missing record for every approved proposal that has none.

        Records are rebuilt as of the proposal's review time. Proposals whose
        payload no longer transforms are reported, not raised.
        """
        now = self._clock.now_utc()
        repaired: list[RepairedProposal] = []
        skipped: list[SkippedProposal] = []

        with self._uow_factory() as uow:
            approved = uow.proposals.list({"status": "approved"})
            for proposal in approved:
                collection = collection_for(proposal.content_type)
                if uow.content.exists(collection, {"proposal_id": str(proposal.id)}):
                    continue

                try:
                    record = transform_proposal(proposal, proposal.reviewed_at or now, self._defaults)
                    record = self._resolve_slug(uow.content, collection, record)
                except InvalidPayloadError as e:
                    logger.warning("Reconcile skipped proposal %s: %s", proposal.id, e)
                    skipped.append(SkippedProposal(str(proposal.id), e.field, str(e)))
                    continue

                row = uow.content.insert(collection, record, now=now)
                uow.activity.append(
                    ActivityLog(
                        user_id=actor_id,
                        action="reconcile",
                        entity_type="proposal",
                        entity_id=str(proposal.id),
                        new_data={"collection": collection, "record_id": row["id"]},
                        created_at=now,
                    )
                )
                repaired.append(
                    RepairedProposal(str(proposal.id), collection, row["id"], row["slug"])
                )
                logger.info(
                    "Reconcile inserted %s/%s for proposal %s", collection, row["id"], proposal.id
                )
            uow.commit()

        return ReconcileReport(checked=len(approved), repaired=repaired, skipped=skipped)
