import logging
import secrets
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Dict, Optional

from sqlalchemy import delete, insert, select

from fitlead.core.clock import as_utc, utcnow
from fitlead.core.settings import settings
from fitlead.db.gateway import Gateway
from fitlead.models.auth_session import AuthSession
from fitlead.schemas.auth import SessionUser

logger = logging.getLogger(__name__)

_sessions = AuthSession.__table__


@dataclass(frozen=True)
class SessionRecord:
    id: str
    user: SessionUser
    expires_at: datetime

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        return as_utc(self.expires_at) <= (now or utcnow())


def _new_session_id() -> str:
    return secrets.token_urlsafe(32)


def _ttl() -> timedelta:
    return timedelta(hours=settings.session_ttl_hours)


class SessionStore:
    def create(self, user: SessionUser) -> SessionRecord:
        raise NotImplementedError

    def get(self, session_id: str) -> Optional[SessionRecord]:
        raise NotImplementedError

    def destroy(self, session_id: str) -> None:
        raise NotImplementedError

    def purge_expired(self) -> int:
        raise NotImplementedError


class DatabaseSessionStore(SessionStore):
    def __init__(self, gw: Gateway) -> None:
        self.gw = gw

    def create(self, user: SessionUser) -> SessionRecord:
        now = utcnow()
        record = SessionRecord(id=_new_session_id(), user=user, expires_at=now + _ttl())
        self.gw.execute(
            insert(_sessions).values(
                id=record.id,
                user_id=user.id,
                email=user.email,
                role=user.role,
                created_at=now,
                expires_at=record.expires_at,
            )
        )
        return record

    def get(self, session_id: str) -> Optional[SessionRecord]:
        row = self.gw.fetch_one(select(_sessions).where(_sessions.c.id == session_id))
        if row is None:
            return None
        record = SessionRecord(
            id=row["id"],
            user=SessionUser(id=row["user_id"], email=row["email"], role=row["role"]),
            expires_at=as_utc(row["expires_at"]),
        )
        if record.is_expired():
            self.destroy(session_id)
            return None
        return record

    def destroy(self, session_id: str) -> None:
        self.gw.execute(delete(_sessions).where(_sessions.c.id == session_id))

    def purge_expired(self) -> int:
        result = self.gw.execute(delete(_sessions).where(_sessions.c.expires_at <= utcnow()))
        return result.rows_affected


class InMemorySessionStore(SessionStore):
    def __init__(self) -> None:
        self._records: Dict[str, SessionRecord] = {}
        self._lock = threading.Lock()

    def create(self, user: SessionUser) -> SessionRecord:
        record = SessionRecord(id=_new_session_id(), user=user, expires_at=utcnow() + _ttl())
        with self._lock:
            self._records[record.id] = record
        return record

    def get(self, session_id: str) -> Optional[SessionRecord]:
        with self._lock:
            record = self._records.get(session_id)
            if record is not None and record.is_expired():
                del self._records[session_id]
                return None
            return record

    def destroy(self, session_id: str) -> None:
        with self._lock:
            self._records.pop(session_id, None)

    def purge_expired(self) -> int:
        now = utcnow()
        with self._lock:
            expired = [sid for sid, record in self._records.items() if record.is_expired(now)]
            for sid in expired:
                del self._records[sid]
        return len(expired)


# Database sessions survive a restart; memory sessions are lost with the process
def build_session_store(backend: str, gw: Gateway) -> SessionStore:
    if backend == "memory":
        logger.warning("Using in-memory sessions; a restart will log out every user")
        return InMemorySessionStore()
    if backend != "database":
        raise ValueError(f"Unknown session backend: {backend}")
    return DatabaseSessionStore(gw)
