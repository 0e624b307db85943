"""Unit tests for password hashing and the token issuer."""
from dataclasses import FrozenInstanceError, replace
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import jwt
import pytest

from api.config import TestingConfig
from utils.security import (
    TokenIssuer,
    InvalidTokenSignatureError,
    MalformedTokenError,
    TokenError,
    TokenExpiredError,
    hash_password,
    verify_password,
)


@pytest.fixture
def user():
    return SimpleNamespace(id="user-1", username="alice", email="alice@example.com")


class TestPasswordHashing:
    def test_hash_is_not_plaintext_and_salted(self):
        first = hash_password("correct-horse")
        second = hash_password("correct-horse")

        assert first != "correct-horse"
        assert first != second

    def test_verify_accepts_right_password(self):
        assert verify_password("correct-horse", hash_password("correct-horse")) is True

    def test_verify_returns_false_on_mismatch(self):
        assert verify_password("wrong-horse", hash_password("correct-horse")) is False

    def test_verify_returns_false_on_unusable_hash(self):
        assert verify_password("correct-horse", "not-an-argon2-hash") is False
        assert verify_password("correct-horse", None) is False
        assert verify_password("", hash_password("correct-horse")) is False


class TestTokenIssuer:
    def test_access_token_carries_identity(self, issuer, user):
        decoded = issuer.verify_access_token(issuer.issue_access_token(user))

        assert decoded["sub"] == "user-1"
        assert decoded["type"] == "access"
        assert decoded["username"] == "alice"
        assert decoded["exp"] - decoded["iat"] == 15 * 60

    def test_refresh_token_carries_identity(self, issuer):
        decoded = issuer.verify_refresh_token(issuer.issue_refresh_token("user-1"))

        assert decoded["sub"] == "user-1"
        assert decoded["type"] == "refresh"
        assert decoded["exp"] - decoded["iat"] == 10 * 24 * 3600

    def test_tokens_minted_back_to_back_differ(self, issuer):
        assert issuer.issue_refresh_token("user-1") != issuer.issue_refresh_token("user-1")

    def test_issuer_is_immutable(self, issuer):
        with pytest.raises(FrozenInstanceError):
            issuer.access_secret = "other"

    def test_expired_token(self, issuer):
        expired = replace(issuer, refresh_expires=timedelta(seconds=-30))
        token = expired.issue_refresh_token("user-1")

        with pytest.raises(TokenExpiredError) as exc:
            issuer.verify_refresh_token(token)
        assert exc.value.reason == "expired"

    def test_foreign_signature(self, issuer):
        forged = replace(issuer, refresh_secret="attacker-secret-0123456789abcdef0123").issue_refresh_token("user-1")

        with pytest.raises(InvalidTokenSignatureError) as exc:
            issuer.verify_refresh_token(forged)
        assert exc.value.reason == "signature"

    @pytest.mark.parametrize("token", ["not-a-token", "a.b.c", ""])
    def test_malformed_token(self, issuer, token):
        with pytest.raises(MalformedTokenError) as exc:
            issuer.verify_refresh_token(token)
        assert exc.value.reason == "malformed"

    def test_missing_subject_is_malformed(self, issuer):
        now = datetime.now(timezone.utc)
        token = jwt.encode(
            {"iat": int(now.timestamp()), "exp": int((now + timedelta(minutes=5)).timestamp()), "type": "refresh"},
            issuer.refresh_secret,
            algorithm="HS256",
        )

        with pytest.raises(MalformedTokenError):
            issuer.verify_refresh_token(token)

    def test_wrong_token_type_is_malformed(self, issuer, user):
        # an access-typed payload signed with the refresh key
        same_keys = replace(issuer, access_secret=issuer.refresh_secret)
        token = same_keys.issue_access_token(user)

        with pytest.raises(MalformedTokenError, match="Wrong token type"):
            issuer.verify_refresh_token(token)

    def test_access_token_is_not_a_refresh_token(self, issuer, user):
        with pytest.raises(TokenError):
            issuer.verify_refresh_token(issuer.issue_access_token(user))

    def test_from_config(self):
        config = {key: getattr(TestingConfig, key) for key in dir(TestingConfig) if key.isupper()}
        issuer = TokenIssuer.from_config(config)
        assert issuer.access_secret == "test-access-secret-0123456789abcdef"
        assert issuer.refresh_secret == "test-refresh-secret-0123456789abcdef"
        assert issuer.access_expires == TestingConfig.ACCESS_TOKEN_EXPIRES
        assert issuer.algorithm == "HS256"

    def test_foreign_issuer_is_rejected(self, issuer):
        # same key, different iss claim
        token = replace(issuer, issuer="someone-else").issue_refresh_token("user-1")

        with pytest.raises(MalformedTokenError):
            issuer.verify_refresh_token(token)

    def test_missing_issuer_is_rejected(self, issuer):
        now = datetime.now(timezone.utc)
        token = jwt.encode(
            {
                "sub": "user-1",
                "iat": int(now.timestamp()),
                "exp": int((now + timedelta(minutes=5)).timestamp()),
                "type": "refresh",
            },
            issuer.refresh_secret,
            algorithm="HS256",
        )

        with pytest.raises(MalformedTokenError):
            issuer.verify_refresh_token(token)
