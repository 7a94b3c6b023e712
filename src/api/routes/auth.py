from collections.abc import Callable
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Response, status
from fastapi.security import OAuth2PasswordRequestForm
from pydantic import BaseModel

from src.api.auth_utils import issue_token, verify_password
from src.api.deps import get_current_user, get_rules, get_uow_factory
from src.api.errors import http_error
from src.api.schemas import UserResponse
from src.core.ports.db import UnitOfWorkPort
from src.domain.entities import UserProfile
from src.domain.errors import QueryError
from src.rules.models import Rules

router = APIRouter()


class Token(BaseModel):
    access_token: str
    token_type: str


@router.post("/login", response_model=Token)
def login_for_access_token(
    response: Response,
    form_data: Annotated[OAuth2PasswordRequestForm, Depends()],
    uow_factory: Callable[[], UnitOfWorkPort] = Depends(get_uow_factory),
    rules: Rules = Depends(get_rules),
) -> Token:
    """Authenticate a profile and return an access token."""
    try:
        with uow_factory() as uow:
            user = uow.profiles.get_by_email(form_data.username)
    except QueryError as e:
        raise http_error(e) from e

    if not user or not verify_password(
        form_data.password, user.password_hash, rules.auth.password_hashing
    ):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect username or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Inactive user")

    expire_minutes = rules.auth.access_token_expire_minutes
    access_token = issue_token(user, expire_minutes)

    # Set HttpOnly Cookie
    response.set_cookie(
        key="access_token",
        value=f"Bearer {access_token}",
        httponly=True,
        max_age=expire_minutes * 60,
        expires=expire_minutes * 60,
        samesite="lax",
        secure=False,  # Set to True for HTTPS prod
    )

    return Token(access_token=access_token, token_type="bearer")


@router.post("/logout")
def logout(response: Response) -> dict[str, str]:
    """Log out user by clearing cookie."""
    response.delete_cookie(key="access_token")
    return {"status": "success"}


@router.get("/me", response_model=UserResponse)
def read_users_me(
    current_user: UserProfile = Depends(get_current_user),
) -> UserResponse:
    """Get current user info."""
    return UserResponse(
        id=current_user.id,
        email=current_user.email,
        full_name=current_user.full_name,
        avatar_url=current_user.avatar_url,
        role=current_user.role,
        is_active=current_user.is_active,
    )
