"""
Moderation error types.

Every repository and review operation raises one of these; the API layer maps
them to HTTP responses. Store-level failures never leak driver detail.
"""

from __future__ import annotations


class ModerationError(Exception):
    """Base exception for proposal moderation errors."""

    pass


class AuthError(ModerationError):
    """Caller is not authenticated (or the principal cannot be resolved)."""

    def __init__(self, message: str = "Not authenticated") -> None:
        super().__init__(message)


class PermissionDeniedError(AuthError):
    """Caller is authenticated but not allowed to perform the action."""

    def __init__(self, action: str) -> None:
        self.action = action
        super().__init__(f"Not allowed: {action}")


class NotFoundError(ModerationError):
    """Proposal or target record is absent."""

    def __init__(self, entity: str, entity_id: str) -> None:
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} {entity_id} not found")


class InvalidStateError(ModerationError):
    """Transition attempted from a non-pending state."""

    def __init__(self, proposal_id: str, status: str, target: str) -> None:
        self.proposal_id = proposal_id
        self.status = status
        self.target = target
        super().__init__(
            f"Proposal {proposal_id} is '{status}' and cannot become '{target}'"
        )


class InvalidPayloadError(ModerationError):
    """Proposal payload cannot be transformed (missing canonical field, bad type)."""

    def __init__(self, field: str, message: str | None = None) -> None:
        self.field = field
        super().__init__(message or f"Missing or invalid field: {field}")


class SlugConflictError(InvalidPayloadError):
    """Derived slug already exists and the collision policy is 'reject'."""

    def __init__(self, collection: str, slug: str) -> None:
        self.collection = collection
        self.slug = slug
        super().__init__("slug", f"Slug '{slug}' already exists in {collection}")


class QueryError(ModerationError):
    """Underlying store failure."""

    def __init__(self, operation: str) -> None:
        self.operation = operation
        super().__init__(f"Store operation failed: {operation}")
