"""
SessionStore: thin read/write access to the refresh-token slot on the users row,
plus the identity lookups the session lifecycle needs.

Each write is a single-row UPDATE committed on its own, so the slot follows
last-write-wins semantics. No in-process locking: it would not hold across
several server processes anyway.
"""
from __future__ import annotations

from sqlalchemy import or_

from models.user import User


class SessionStore:
    def __init__(self, storage):
        self._storage = storage

    def _session(self):
        return self._storage.get_session()

    def find_by_username_or_email(self, username: str | None, email: str | None) -> User | None:
        """Identity whose username OR email matches (both are stored lower-cased)."""
        clauses = []
        if username:
            clauses.append(User.username == username.strip().lower())
        if email:
            clauses.append(User.email == email.strip().lower())
        if not clauses:
            return None
        return self._session().query(User).filter(or_(*clauses)).first()

    def find_by_id(self, user_id: str) -> User | None:
        if not user_id:
            return None
        return self._storage.get(User, user_id)

    def get_stored_refresh_token(self, user_id: str) -> str | None:
        row = self._session().query(User.refresh_token).filter(User.id == user_id).first()
        return row[0] if row else None

    def _write_slot(self, user_id: str, token: str | None) -> None:
        self._session().query(User).filter(User.id == user_id).update(
            {User.refresh_token: token}, synchronize_session="fetch"
        )
        self._storage.save()

    def persist_refresh_token(self, user_id: str, token: str) -> None:
        self._write_slot(user_id, token)

    def clear_refresh_token(self, user_id: str) -> None:
        self._write_slot(user_id, None)
