import logging
import os
from collections.abc import Callable
from functools import lru_cache, partial
from pathlib import Path
from typing import Annotated, Any

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer

from src.adapters.clock import SystemClock
from src.adapters.dev_email import DevEmailAdapter
from src.adapters.resend_email import ResendEmailAdapter
from src.adapters.sqlite.repos import SQLiteUnitOfWork
from src.api.auth_utils import read_token
from src.api.errors import http_error

# Components are stateless; dependencies are injected as ports/repos/adapters.
from src.components.notifications import NotificationDispatcher, config_from_rules
from src.components.proposals import ProposalService
from src.components.review import ReviewComponent
from src.core.ports.db import UnitOfWorkPort
from src.core.ports.email import EmailAddress, EmailPort
from src.domain.entities import UserProfile
from src.domain.errors import PermissionDeniedError, QueryError
from src.domain.policy import PolicyEngine
from src.rules.loader import load_rules
from src.rules.models import Rules

logger = logging.getLogger(__name__)


# --- Settings ---
class Settings:
    def __init__(self) -> None:
        self.base_dir = Path(os.getcwd())
        self.data_dir = Path(os.environ.get("DEFIMX_DATA_DIR", "./data"))
        self.db_path = str(self.data_dir / "defimx.db")
        self.rules_path = Path(os.environ.get("DEFIMX_RULES_PATH", self.base_dir / "rules.yaml"))
        self.migrations_dir = Path(
            os.environ.get("DEFIMX_MIGRATIONS_DIR", self.base_dir / "migrations")
        )
        self.resend_api_key = os.environ.get("DEFIMX_RESEND_API_KEY") or None


@lru_cache
def get_settings() -> Settings:
    return Settings()


# --- Rules ---
@lru_cache
def get_rules(settings: Settings = Depends(get_settings)) -> Rules:
    return load_rules(settings.rules_path)


def get_policy(rules: Rules = Depends(get_rules)) -> PolicyEngine:
    return PolicyEngine(rules)


# --- Persistence ---
def get_uow_factory(
    settings: Settings = Depends(get_settings),
) -> Callable[[], UnitOfWorkPort]:
    return partial(SQLiteUnitOfWork, settings.db_path)


# Time adapter for deterministic time operations
_clock_instance: SystemClock | None = None


def get_clock() -> SystemClock:
    """Get clock singleton."""
    global _clock_instance
    if _clock_instance is None:
        _clock_instance = SystemClock()
    return _clock_instance


# --- Email ---
_email_instance: EmailPort | None = None


def get_email_adapter(
    settings: Settings = Depends(get_settings),
    rules: Rules = Depends(get_rules),
) -> EmailPort:
    """Resend when an API key is configured, otherwise the logging dev adapter."""
    global _email_instance
    if _email_instance is None:
        if settings.resend_api_key:
            _email_instance = ResendEmailAdapter(
                settings.resend_api_key,
                EmailAddress.parse(rules.notifications.from_email),
                timeout=rules.notifications.request_timeout_seconds,
            )
            logger.info("Email: Resend adapter")
        else:
            _email_instance = DevEmailAdapter()
            logger.info("Email: dev adapter (emails are logged, not sent)")
    return _email_instance


def get_notifier(
    rules: Rules = Depends(get_rules),
    email: EmailPort = Depends(get_email_adapter),
) -> NotificationDispatcher:
    return NotificationDispatcher(
        email, config_from_rules(rules.notifications, rules.project.site_name)
    )


# --- Component Services ---
def get_proposal_service(
    uow_factory: Callable[[], UnitOfWorkPort] = Depends(get_uow_factory),
    clock: SystemClock = Depends(get_clock),
    notifier: NotificationDispatcher = Depends(get_notifier),
) -> ProposalService:
    """Get proposal component service."""
    return ProposalService(uow_factory, clock, notifier)


def get_review_component(
    uow_factory: Callable[[], UnitOfWorkPort] = Depends(get_uow_factory),
    clock: SystemClock = Depends(get_clock),
    notifier: NotificationDispatcher = Depends(get_notifier),
    rules: Rules = Depends(get_rules),
) -> ReviewComponent:
    """Get review component."""
    return ReviewComponent(
        uow_factory,
        clock,
        notifier,
        proposal_rules=rules.proposals,
        review_rules=rules.review,
    )


# --- Auth ---
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login", auto_error=False)


def get_current_user(
    request: Request,
    token: Annotated[str | None, Depends(oauth2_scheme)],
    uow_factory: Callable[[], UnitOfWorkPort] = Depends(get_uow_factory),
) -> UserProfile:
    # 1. Try Cookie first (HttpOnly)
    cookie_token = request.cookies.get("access_token")
    if cookie_token and cookie_token.startswith("Bearer "):
        token = cookie_token.split(" ")[1]

    # 2. Header (OAuth2Bearer) is handled by Depends(oauth2_scheme)
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    # 3. Decode
    user_id = read_token(token)
    if user_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    # 4. Fetch profile
    try:
        with uow_factory() as uow:
            user = uow.profiles.get_by_id(user_id)
    except QueryError as e:
        raise http_error(e) from e

    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
        )

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Inactive user",
        )

    return user


def require_permission(
    policy: PolicyEngine,
    user: UserProfile | None,
    action: str,
    resource: Any = None,
    context: dict[str, Any] | None = None,
) -> None:
    """Raise 403 unless the policy allows action."""
    if not policy.check_permission(user, action, resource=resource, context=context):
        raise http_error(PermissionDeniedError(action))
