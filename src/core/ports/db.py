"""
Database Adapter Interfaces.

Protocol-based interfaces for the moderation repositories and the generic
published-content store. Implementations: SQLite (src/adapters/sqlite/repos.py).
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime
from typing import Any, Protocol
from uuid import UUID

from src.domain.entities import ActivityLog, Proposal, ProposalStatus, UserProfile
from src.domain.records import PublishedRecord

# -----------------------------------------------------------------------------
# Profiles
# -----------------------------------------------------------------------------


class ProfileRepoPort(Protocol):
    """Principal profiles (id, email, role, active flag)."""

    def get_by_id(self, profile_id: str) -> UserProfile | None: ...

    def get_by_email(self, email: str) -> UserProfile | None: ...

    def save(self, profile: UserProfile) -> UserProfile: ...


# -----------------------------------------------------------------------------
# Proposals
# -----------------------------------------------------------------------------


class ProposalRepoPort(Protocol):
    """
    Repository for proposals.

    State machine: pending -> approved | rejected (both terminal).
    """

    def insert(self, proposal: Proposal) -> Proposal: ...

    def get_by_id(self, proposal_id: UUID) -> Proposal | None: ...

    def list(self, filters: Mapping[str, Any] | None = None) -> list[Proposal]:
        """Newest first, filters ANDed (status, content_type, proposed_by)."""
        ...

    def mark_reviewed(
        self,
        proposal_id: UUID,
        status: ProposalStatus,
        reviewer_id: str,
        reviewed_at: datetime,
        notes: str | None,
    ) -> bool:
        """
        Atomic transition out of 'pending'.

        Returns False if the row is no longer pending; the caller must treat
        that as a lost race.
        """
        ...

    def delete(self, proposal_id: UUID) -> bool: ...


# -----------------------------------------------------------------------------
# Published content store
# -----------------------------------------------------------------------------


class ContentStorePort(Protocol):
    """Generic CRUD over the named published collections."""

    def insert(
        self,
        collection: str,
        record: PublishedRecord | Mapping[str, Any],
        now: datetime | None = None,
    ) -> dict[str, Any]: ...

    def update(
        self,
        collection: str,
        record_id: str,
        partial: Mapping[str, Any],
        now: datetime | None = None,
    ) -> dict[str, Any]: ...

    def select(
        self,
        collection: str,
        filters: Mapping[str, Any] | None = None,
        limit: int | None = None,
    ) -> list[dict[str, Any]]: ...

    def exists(self, collection: str, filters: Mapping[str, Any]) -> bool: ...

    def delete(self, collection: str, record_id: str) -> bool: ...


# -----------------------------------------------------------------------------
# Activity log
# -----------------------------------------------------------------------------


class ActivityRepoPort(Protocol):
    """Append-only activity log."""

    def append(self, entry: ActivityLog) -> ActivityLog: ...

    def list_for_entity(self, entity_type: str, entity_id: str) -> list[ActivityLog]: ...


# -----------------------------------------------------------------------------
# Unit of Work
# -----------------------------------------------------------------------------


class UnitOfWorkPort(Protocol):
    """
    Unit of Work pattern for transaction management.

    Usage:
        with uow_factory() as uow:
            uow.proposals.mark_reviewed(...)
            uow.content.insert(...)
            uow.commit()

    Leaving the block with an exception rolls back; store errors surface as
    QueryError.
    """

    # Repository access
    proposals: ProposalRepoPort
    profiles: ProfileRepoPort
    content: ContentStorePort
    activity: ActivityRepoPort

    def __enter__(self) -> UnitOfWorkPort:
        """Enter transaction context."""
        ...

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        """Exit transaction context (rollback on exception)."""
        ...

    def commit(self) -> None:
        """Commit the transaction."""
        ...

    def rollback(self) -> None:
        """Rollback the transaction."""
        ...
