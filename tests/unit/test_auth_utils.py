from datetime import UTC, datetime

import pytest
from jose import jwt

from src.api.auth_utils import (
    ALGORITHM,
    SECRET_KEY,
    hash_password,
    issue_token,
    read_token,
    verify_password,
)
from src.domain.entities import UserProfile
from src.domain.errors import InvalidPayloadError
from src.rules.models import PasswordHashingRules

HASHING = PasswordHashingRules(algorithm="argon2", min_length=8)


@pytest.fixture
def editor():
    return UserProfile(email="editor@defimexico.org", role="editor")


class TestPasswords:
    def test_hash_and_verify(self):
        hashed = hash_password("correct horse", HASHING)

        assert hashed != "correct horse"
        assert verify_password("correct horse", hashed, HASHING) is True
        assert verify_password("wrong horse", hashed, HASHING) is False

    def test_short_password_rejected(self):
        with pytest.raises(InvalidPayloadError) as exc:
            hash_password("short", HASHING)
        assert exc.value.field == "password"

    def test_profile_without_password_never_verifies(self):
        assert verify_password("anything", "", HASHING) is False
        assert verify_password("anything", None, HASHING) is False


class TestTokens:
    def test_round_trip_returns_profile_id(self, editor):
        token = issue_token(editor, expire_minutes=5)
        assert read_token(token) == editor.id

    def test_claims_carry_role(self, editor):
        claims = jwt.decode(issue_token(editor, expire_minutes=5), SECRET_KEY, algorithms=[ALGORITHM])
        assert claims["role"] == "editor"
        assert claims["exp"] - claims["iat"] == 5 * 60

    def test_expired_token(self, editor):
        issued = datetime(2020, 1, 1, tzinfo=UTC)
        assert read_token(issue_token(editor, expire_minutes=1, now_utc=issued)) is None

    def test_garbage_token(self):
        assert read_token("not-a-jwt") is None

    def test_token_without_subject(self):
        token = jwt.encode({"role": "admin"}, SECRET_KEY, algorithm=ALGORITHM)
        assert read_token(token) is None

    def test_token_signed_with_other_key(self, editor):
        token = jwt.encode({"sub": editor.id}, "another-key", algorithm=ALGORITHM)
        assert read_token(token) is None
