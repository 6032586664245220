"""Server-side sessions: issue, validate and destroy opaque session ids.

The manager talks to a SessionStore handed to it at construction time, so
the same login flow runs against the `sessions` table in production and a
dict in tests or single-process dev setups.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from threading import Lock
from typing import Protocol

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from driveeasy.core.errors import InternalError
from driveeasy.core.security import generate_session_id
from driveeasy.models import UserSession
from driveeasy.schemas.auth import SessionData

logger = logging.getLogger(__name__)

DEFAULT_SESSION_TTL = timedelta(hours=24)


class SessionStoreError(Exception):
    """Raised when the backing store cannot read or write session state."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class SessionStore(Protocol):
    def save(self, session_id: str, data: SessionData, expires_at: datetime) -> None: ...

    def load(self, session_id: str) -> tuple[SessionData, datetime] | None: ...

    def delete(self, session_id: str) -> None: ...

    def purge_expired(self, now: datetime) -> int: ...


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes even for timezone=True columns.
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


class InMemorySessionStore:
    """Process-local store. Sessions are lost on restart."""

    def __init__(self) -> None:
        self._sessions: dict[str, tuple[SessionData, datetime]] = {}
        self._lock = Lock()

    def save(self, session_id: str, data: SessionData, expires_at: datetime) -> None:
        with self._lock:
            self._sessions[session_id] = (data.model_copy(), expires_at)

    def load(self, session_id: str) -> tuple[SessionData, datetime] | None:
        with self._lock:
            entry = self._sessions.get(session_id)
        if entry is None:
            return None
        data, expires_at = entry
        return data.model_copy(), expires_at

    def delete(self, session_id: str) -> None:
        with self._lock:
            self._sessions.pop(session_id, None)

    def purge_expired(self, now: datetime) -> int:
        with self._lock:
            expired = [sid for sid, (_, exp) in self._sessions.items() if exp <= now]
            for sid in expired:
                del self._sessions[sid]
        return len(expired)

    def __len__(self) -> int:
        return len(self._sessions)


class DatabaseSessionStore:
    """Sessions persisted in the `sessions` table; every write is committed."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def save(self, session_id: str, data: SessionData, expires_at: datetime) -> None:
        row = UserSession(
            id=session_id,
            user_id=data.user_id,
            role=data.role,
            name=data.name,
            email=data.email,
            expires_at=expires_at,
        )
        try:
            self.db.add(row)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise SessionStoreError(f"Session save failed: {e}") from e

    def load(self, session_id: str) -> tuple[SessionData, datetime] | None:
        try:
            row = self.db.get(UserSession, session_id)
        except SQLAlchemyError as e:
            self.db.rollback()
            raise SessionStoreError(f"Session load failed: {e}") from e
        if row is None:
            return None
        data = SessionData(user_id=row.user_id, role=row.role, name=row.name, email=row.email)
        return data, _as_utc(row.expires_at)

    def delete(self, session_id: str) -> None:
        try:
            self.db.query(UserSession).filter(UserSession.id == session_id).delete(
                synchronize_session=False
            )
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise SessionStoreError(f"Session delete failed: {e}") from e

    def purge_expired(self, now: datetime) -> int:
        try:
            deleted = (
                self.db.query(UserSession)
                .filter(UserSession.expires_at <= now)
                .delete(synchronize_session=False)
            )
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise SessionStoreError(f"Session purge failed: {e}") from e
        return deleted


class SessionManager:
    """
    Session lifecycle over an injected store.

    Expiry is absolute: ttl counted from creation, never extended by use.
    """

    def __init__(
        self,
        store: SessionStore,
        ttl: timedelta = DEFAULT_SESSION_TTL,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.store = store
        self.ttl = ttl
        self._clock = clock or (lambda: datetime.now(UTC))

    def create_session(
        self,
        user_id: int,
        role: str,
        name: str,
        email: str,
        previous_session_id: str | None = None,
    ) -> str:
        """
        Regenerate, then bind and persist. Returns the new session id.

        Any session id the client held before login is destroyed first so a
        planted id never becomes authenticated. Raises InternalError when
        either step fails; the caller must not report login success then.
        """
        if previous_session_id:
            try:
                self.store.delete(previous_session_id)
            except SessionStoreError as e:
                logger.error("Session regeneration error: %s", e.message)
                raise InternalError("Login failed. Please try again.") from e

        session_id = generate_session_id()
        data = SessionData(user_id=user_id, role=role, name=name, email=email)
        expires_at = self._clock() + self.ttl
        try:
            self.store.save(session_id, data, expires_at)
        except SessionStoreError as e:
            logger.error("Session save error: %s", e.message)
            raise InternalError("Login failed. Please try again.") from e
        return session_id

    def validate_session(self, session_id: str | None) -> SessionData | None:
        """Return the bound identity, or None for a missing, unknown or expired id."""
        if not session_id:
            return None
        try:
            entry = self.store.load(session_id)
        except SessionStoreError as e:
            logger.error("Session load error: %s", e.message)
            raise InternalError("Session lookup failed") from e
        if entry is None:
            return None
        data, expires_at = entry
        if expires_at <= self._clock():
            try:
                self.store.delete(session_id)
            except SessionStoreError as e:
                logger.warning("Could not remove expired session: %s", e.message)
            return None
        return data

    def destroy_session(self, session_id: str | None) -> None:
        if not session_id:
            return
        try:
            self.store.delete(session_id)
        except SessionStoreError as e:
            logger.error("Logout error: %s", e.message)
            raise InternalError("Logout failed") from e

    def purge_expired(self) -> int:
        try:
            return self.store.purge_expired(self._clock())
        except SessionStoreError as e:
            logger.error("Session purge error: %s", e.message)
            raise InternalError("Session purge failed") from e
