# DeFi México moderation: Ports (Protocol Interfaces)
# Abstract interfaces for adapters; no implementations here

from src.core.ports.db import (
    ActivityRepoPort,
    ContentStorePort,
    ProfileRepoPort,
    ProposalRepoPort,
    UnitOfWorkPort,
)
from src.core.ports.email import (
    EmailAddress,
    EmailError,
    EmailMessage,
    EmailPort,
    EmailResult,
    EmailSendError,
    EmailStatus,
)
from src.core.ports.time import ClockPort

__all__ = [
    # Database
    "ActivityRepoPort",
    "ContentStorePort",
    "ProfileRepoPort",
    "ProposalRepoPort",
    "UnitOfWorkPort",
    # Email
    "EmailAddress",
    "EmailError",
    "EmailMessage",
    "EmailPort",
    "EmailResult",
    "EmailSendError",
    "EmailStatus",
    # Time
    "ClockPort",
]
