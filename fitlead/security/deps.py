from typing import Optional

from fastapi import Cookie, Depends

from fitlead.core.errors import ForbiddenError
from fitlead.core.settings import settings
from fitlead.db.session import gateway
from fitlead.models.user import ROLE_ADMIN
from fitlead.schemas.auth import SessionUser
from fitlead.security.session_store import SessionStore, build_session_store
from fitlead.security.session_tokens import decode_session_cookie
from fitlead.services import identity


_session_store = build_session_store(settings.session_backend, gateway)


def get_session_store() -> SessionStore:
    return _session_store


def get_session_id(
    session_cookie: Optional[str] = Cookie(default=None, alias=settings.session_cookie_name),
) -> Optional[str]:
    if not session_cookie:
        return None
    return decode_session_cookie(session_cookie)


def get_current_user(
    session_id: Optional[str] = Depends(get_session_id),
    store: SessionStore = Depends(get_session_store),
) -> SessionUser:
    return identity.current_user(store, session_id)


def require_admin(
    session_id: Optional[str] = Depends(get_session_id),
    store: SessionStore = Depends(get_session_store),
) -> SessionUser:
    # Looked up on every request; a logout or expiry takes effect immediately
    record = store.get(session_id) if session_id else None
    if record is None or record.user.role != ROLE_ADMIN:
        raise ForbiddenError()
    return record.user
