import os
from datetime import UTC, datetime, timedelta
from functools import lru_cache

from jose import JWTError, jwt
from passlib.context import CryptContext

from src.domain.entities import UserProfile
from src.domain.errors import InvalidPayloadError
from src.rules.models import PasswordHashingRules

SECRET_KEY = os.environ.get("DEFIMX_SECRET_KEY", "dev-secret-unsafe")
ALGORITHM = "HS256"


@lru_cache
def _crypt_context(scheme: str) -> CryptContext:
    return CryptContext(schemes=[scheme], deprecated="auto")


def hash_password(password: str, rules: PasswordHashingRules) -> str:
    """Hash a new password with the configured scheme, enforcing min_length."""
    if len(password) < rules.min_length:
        raise InvalidPayloadError(
            "password", f"Password must be at least {rules.min_length} characters"
        )
    result: str = _crypt_context(rules.algorithm).hash(password)
    return result


def verify_password(plain_password: str, hashed_password: str | None, rules: PasswordHashingRules) -> bool:
    # Profiles without a local password keep an empty hash.
    if not hashed_password:
        return False
    result: bool = _crypt_context(rules.algorithm).verify(plain_password, hashed_password)
    return result


def issue_token(
    profile: UserProfile,
    expire_minutes: int,
    now_utc: datetime | None = None,
) -> str:
    """
    Issue a signed access token for a profile.

    Claims: `sub` (profile id), `role` (informational; the role is re-read
    from the profile on every request), `iat` and `exp`.
    """
    issued_at = now_utc if now_utc is not None else datetime.now(UTC)
    claims = {
        "sub": profile.id,
        "role": profile.role,
        "iat": issued_at,
        "exp": issued_at + timedelta(minutes=expire_minutes),
    }
    encoded: str = jwt.encode(claims, SECRET_KEY, algorithm=ALGORITHM)
    return encoded


def read_token(token: str) -> str | None:
    """Profile id carried by a valid token, or None if invalid, expired or subject-less."""
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError:
        return None
    subject = payload.get("sub")
    return subject if isinstance(subject, str) and subject else None
