"""
security helpers:
- Argon2 password hashing via argon2-cffi
- JWT creation/verification via PyJWT (TokenIssuer)
- JTI generation for token identifiers
"""
from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Dict, Any, Mapping

import jwt
from argon2 import PasswordHasher
from argon2.exceptions import VerificationError, InvalidHashError

ph = PasswordHasher()

ACCESS = "access"
REFRESH = "refresh"


def hash_password(password: str) -> str:
    """Hash a plaintext password using Argon2
    """
    return ph.hash(password)


def verify_password(password: str, password_hash: str | None) -> bool:
    """ Verify a plaintext password using argon2.
    Returns False on mismatch or on a stored hash argon2 cannot parse.
    """
    if not password or not password_hash:
        return False
    try:
        return ph.verify(password_hash, password)
    except (VerificationError, InvalidHashError):
        return False


def generate_jti() -> str:
    """Generate a unique JTI (JWT ID).
    """
    return str(uuid.uuid4())


def _now() -> datetime:
    return datetime.now(timezone.utc)


class TokenError(Exception):
    """Base for every token verification failure."""
    reason = "invalid"


class InvalidTokenSignatureError(TokenError):
    reason = "signature"


class TokenExpiredError(TokenError):
    reason = "expired"


class MalformedTokenError(TokenError):
    reason = "malformed"


@dataclass(frozen=True)
class TokenIssuer:
    """
    Mints and verifies the access/refresh JWT pair.
    Built once from app config at startup (see create_app) and never mutated.
    """
    access_secret: str
    access_expires: timedelta
    refresh_secret: str
    refresh_expires: timedelta
    algorithm: str = "HS256"
    issuer: str = "video-share-api"

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> "TokenIssuer":
        return cls(
            access_secret=config["ACCESS_TOKEN_SECRET"],
            access_expires=config["ACCESS_TOKEN_EXPIRES"],
            refresh_secret=config["REFRESH_TOKEN_SECRET"],
            refresh_expires=config["REFRESH_TOKEN_EXPIRES"],
            algorithm=config.get("JWT_ALGORITHM", "HS256"),
            issuer=config.get("JWT_ISSUER", "video-share-api"),
        )

    def _encode(self, subject: str, token_type: str, secret: str,
                expires: timedelta, extra: Dict[str, Any] | None = None) -> str:
        now = _now()
        payload = {
            "iss": self.issuer,
            "sub": str(subject),
            "iat": int(now.timestamp()),
            "exp": int((now + expires).timestamp()),
            "type": token_type,
            "jti": generate_jti(),
        }
        if extra:
            payload.update(extra)
        return jwt.encode(payload, secret, algorithm=self.algorithm)

    def issue_access_token(self, user) -> str:
        """Short-lived token authorizing individual requests."""
        return self._encode(
            user.id, ACCESS, self.access_secret, self.access_expires,
            extra={"username": user.username, "email": user.email},
        )

    def issue_refresh_token(self, user_id: str) -> str:
        """Long-lived token used only to obtain a new pair."""
        return self._encode(user_id, REFRESH, self.refresh_secret, self.refresh_expires)

    def _decode(self, token: str, secret: str, expected_type: str) -> Dict[str, Any]:
        """
        Decode and validate a JWT.
        Raises TokenExpiredError, InvalidTokenSignatureError or MalformedTokenError.
        """
        if not isinstance(token, str) or not token:
            raise MalformedTokenError("Token is empty")
        try:
            decoded = jwt.decode(
                token,
                secret,
                algorithms=[self.algorithm],
                issuer=self.issuer,
                options={"require": ["exp", "iat", "iss", "sub"]},
            )
        # InvalidSignatureError subclasses DecodeError, so order matters
        except jwt.ExpiredSignatureError as exc:
            raise TokenExpiredError("Token expired") from exc
        except jwt.InvalidSignatureError as exc:
            raise InvalidTokenSignatureError("Token signature is invalid") from exc
        except jwt.InvalidTokenError as exc:
            raise MalformedTokenError(f"Invalid token: {exc}") from exc

        if decoded.get("type") != expected_type:
            raise MalformedTokenError("Wrong token type")
        return decoded

    def verify_access_token(self, token: str) -> Dict[str, Any]:
        return self._decode(token, self.access_secret, ACCESS)

    def verify_refresh_token(self, token: str) -> Dict[str, Any]:
        return self._decode(token, self.refresh_secret, REFRESH)
