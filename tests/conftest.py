from datetime import UTC, datetime
from functools import partial
from pathlib import Path

import pytest

from src.adapters.clock import FixedClock
from src.adapters.dev_email import DevEmailAdapter
from src.adapters.sqlite.migrator import SQLiteMigrator
from src.adapters.sqlite.repos import SQLiteUnitOfWork
from src.components.notifications import NotificationDispatcher, config_from_rules
from src.components.proposals import ProposalService
from src.components.review import ReviewComponent
from src.domain.entities import UserProfile
from src.rules.loader import load_rules

PROJECT_ROOT = Path(__file__).parent.parent
MIGRATIONS_DIR = PROJECT_ROOT / "migrations"
RULES_PATH = PROJECT_ROOT / "rules.yaml"

FIXED_NOW = datetime(2025, 3, 14, 18, 30, tzinfo=UTC)


@pytest.fixture
def rules():
    return load_rules(RULES_PATH)


@pytest.fixture
def db_path(tmp_path):
    """Temporary SQLite DB with all migrations applied."""
    path = str(tmp_path / "defimx.db")
    SQLiteMigrator(path, str(MIGRATIONS_DIR)).run_migrations()
    return path


@pytest.fixture
def uow_factory(db_path):
    return partial(SQLiteUnitOfWork, db_path)


@pytest.fixture
def clock():
    return FixedClock(FIXED_NOW)


def _save(uow_factory, profile: UserProfile) -> UserProfile:
    with uow_factory() as uow:
        uow.profiles.save(profile)
        uow.commit()
    return profile


@pytest.fixture
def admin(uow_factory):
    return _save(
        uow_factory,
        UserProfile(email="admin@defimexico.org", full_name="Admin", role="admin"),
    )


@pytest.fixture
def editor(uow_factory):
    return _save(
        uow_factory,
        UserProfile(email="editor@defimexico.org", full_name="Editora", role="editor"),
    )


@pytest.fixture
def submitter(uow_factory):
    return _save(
        uow_factory,
        UserProfile(email="ana@example.com", full_name="Ana López", role="user"),
    )


@pytest.fixture
def email():
    return DevEmailAdapter()


@pytest.fixture
def notifier(email, rules):
    return NotificationDispatcher(email, config_from_rules(rules.notifications))


@pytest.fixture
def proposal_service(uow_factory, clock, notifier):
    return ProposalService(uow_factory, clock, notifier)


@pytest.fixture
def review(uow_factory, clock, notifier, rules):
    return ReviewComponent(
        uow_factory,
        clock,
        notifier,
        proposal_rules=rules.proposals,
        review_rules=rules.review,
    )
