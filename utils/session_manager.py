"""
Session lifecycle: login, refresh (rotation) and logout.

Per user the session moves Anonymous -> Authenticated -> (Refreshed)* -> LoggedOut.
Exactly one refresh token is valid per user at any time: the one stored in the
user's slot. Issuing a new one overwrites the slot, logout clears it.

Known limitation: two refresh calls racing with the same token can both pass the
slot comparison before either write lands. Closing that would need a
compare-and-swap update, which this service does not do.
"""
from __future__ import annotations

import hmac
import logging
from dataclasses import dataclass

from jwt import PyJWTError
from sqlalchemy.exc import SQLAlchemyError

from models.session_store import SessionStore
from models.user import User
from utils.exceptions import InternalError, NotFoundError, UnauthorizedError
from utils.security import TokenError, TokenIssuer, verify_password

logger = logging.getLogger(__name__)

INVALID_REFRESH_TOKEN = "Invalid refresh token"


@dataclass
class SessionTokens:
    user: User
    access_token: str
    refresh_token: str


class SessionManager:
    def __init__(self, store: SessionStore, issuer: TokenIssuer):
        self.store = store
        self.issuer = issuer

    def _issue_pair(self, user: User) -> SessionTokens:
        """Mint a new pair and overwrite the stored refresh slot."""
        try:
            access_token = self.issuer.issue_access_token(user)
            refresh_token = self.issuer.issue_refresh_token(user.id)
            self.store.persist_refresh_token(user.id, refresh_token)
        except (SQLAlchemyError, PyJWTError) as exc:
            logger.exception("Token issuance failed for user %s", user.id)
            raise InternalError(
                "Something went wrong while generating refresh and access token",
                reason=exc.__class__.__name__,
            ) from exc
        return SessionTokens(user=user, access_token=access_token, refresh_token=refresh_token)

    def login(self, password: str, username: str | None = None, email: str | None = None) -> SessionTokens:
        user = self.store.find_by_username_or_email(username, email)
        if user is None:
            logger.info("Login rejected: unknown user (username=%s, email=%s)", username, email)
            raise NotFoundError("User does not exist")

        if not verify_password(password, user.password_hash):
            logger.info("Login rejected: wrong password for user %s", user.id)
            raise UnauthorizedError("Password incorrect", reason="password")

        tokens = self._issue_pair(user)
        logger.info("User %s logged in", user.id)
        return tokens

    def refresh(self, presented: str | None) -> SessionTokens:
        if not presented:
            raise UnauthorizedError("Unauthorized request", reason="missing")

        try:
            decoded = self.issuer.verify_refresh_token(presented)
        except TokenError as exc:
            logger.info("Refresh rejected (%s): %s", exc.reason, exc)
            raise UnauthorizedError(INVALID_REFRESH_TOKEN, reason=exc.reason) from exc

        user = self.store.find_by_id(decoded.get("sub"))
        if user is None:
            logger.info("Refresh rejected: user %s no longer exists", decoded.get("sub"))
            raise UnauthorizedError(INVALID_REFRESH_TOKEN, reason="unknown_user")

        stored = self.store.get_stored_refresh_token(user.id)
        if not stored or not hmac.compare_digest(stored.encode(), presented.encode()):
            # Rotated, logged out, or never issued: same answer as any other bad token
            logger.warning("Refresh rejected: stale or reused refresh token for user %s", user.id)
            raise UnauthorizedError(INVALID_REFRESH_TOKEN, reason="reused")

        tokens = self._issue_pair(user)
        logger.info("Rotated refresh token for user %s", user.id)
        return tokens

    def logout(self, user_id: str) -> None:
        """Clear the refresh slot. Safe to call when it is already empty."""
        self.store.clear_refresh_token(user_id)
        logger.info("User %s logged out", user_id)
