"""Revocation store for bearer tokens that were logged out before expiry."""

import logging
from datetime import datetime, timezone
from threading import Lock
from typing import Callable, Protocol

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from elearning.core.config import Settings
from elearning.database import SessionLocal
from elearning.models.revoked_token import RevokedToken

logger = logging.getLogger(__name__)


def _utc_naive(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


class TokenBlacklist(Protocol):
    def revoke(self, token: str, expires_at: datetime | None = None) -> None: ...

    def is_revoked(self, token: str) -> bool: ...

    def purge_expired(self, now: datetime | None = None) -> int: ...


class InMemoryTokenBlacklist:
    """Process-local blacklist. Entries are lost when the process restarts."""

    def __init__(self) -> None:
        self._lock = Lock()
        self._entries: dict[str, datetime | None] = {}

    def revoke(self, token: str, expires_at: datetime | None = None) -> None:
        with self._lock:
            if token in self._entries:
                return
            self._entries[token] = _utc_naive(expires_at) if expires_at else None

    def is_revoked(self, token: str) -> bool:
        with self._lock:
            return token in self._entries

    def purge_expired(self, now: datetime | None = None) -> int:
        cutoff = _utc_naive(now) if now else _utcnow()
        with self._lock:
            expired = [
                token
                for token, expires_at in self._entries.items()
                if expires_at is not None and expires_at <= cutoff
            ]
            for token in expired:
                del self._entries[token]
        return len(expired)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


class DatabaseTokenBlacklist:
    """Blacklist persisted in the ``revoked_tokens`` table.

    Each call opens its own session from ``session_factory`` so the store can
    be shared by every request in the process.
    """

    def __init__(self, session_factory: Callable[[], Session]) -> None:
        self._session_factory = session_factory

    def revoke(self, token: str, expires_at: datetime | None = None) -> None:
        db = self._session_factory()
        try:
            if db.get(RevokedToken, token) is not None:
                return
            db.add(RevokedToken(token=token, expires_at=_utc_naive(expires_at) if expires_at else None))
            try:
                db.commit()
            except IntegrityError:
                # Another request revoked the same token first.
                db.rollback()
        finally:
            db.close()

    def is_revoked(self, token: str) -> bool:
        db = self._session_factory()
        try:
            return db.get(RevokedToken, token) is not None
        finally:
            db.close()

    def purge_expired(self, now: datetime | None = None) -> int:
        cutoff = _utc_naive(now) if now else _utcnow()
        db = self._session_factory()
        try:
            expired = db.scalars(
                select(RevokedToken.token).where(RevokedToken.expires_at <= cutoff)
            ).all()
            if expired:
                db.execute(delete(RevokedToken).where(RevokedToken.token.in_(expired)))
                db.commit()
            return len(expired)
        finally:
            db.close()


def build_token_blacklist(config: Settings, session_factory: Callable[[], Session] | None = None) -> TokenBlacklist:
    if config.token_blacklist_backend == "memory":
        logger.warning("Using the in-memory token blacklist; revocations are lost on restart.")
        return InMemoryTokenBlacklist()

    return DatabaseTokenBlacklist(session_factory or SessionLocal)
