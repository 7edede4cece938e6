from typing import Optional

from fastapi import APIRouter, Depends, Response

from fitlead.core.settings import settings
from fitlead.db.gateway import Gateway
from fitlead.db.session import get_gateway
from fitlead.schemas.auth import Credentials, LoginResponse, OkResponse, RegisterResponse
from fitlead.security.deps import get_session_id, get_session_store
from fitlead.security.session_store import SessionRecord, SessionStore
from fitlead.security.session_tokens import create_session_cookie
from fitlead.services import identity

router = APIRouter()


def _set_session_cookie(response: Response, record: SessionRecord) -> None:
    """Set the HTTP-only session cookie with configured attributes."""
    response.set_cookie(
        key=settings.session_cookie_name,
        value=create_session_cookie(record.id, record.expires_at),
        max_age=settings.session_ttl_hours * 60 * 60,
        httponly=True,
        secure=settings.session_cookie_secure,
        samesite=settings.session_cookie_samesite,
        path=settings.session_cookie_path,
    )


@router.post("/register", response_model=RegisterResponse)
def register(
    payload: Credentials,
    response: Response,
    session_id: Optional[str] = Depends(get_session_id),
    gw: Gateway = Depends(get_gateway),
    store: SessionStore = Depends(get_session_store),
) -> RegisterResponse:
    user, record = identity.register(gw, store, payload.email, payload.password, previous_session_id=session_id)
    _set_session_cookie(response, record)
    return RegisterResponse(user=user)


@router.post("/login", response_model=LoginResponse)
def login(
    payload: Credentials,
    response: Response,
    session_id: Optional[str] = Depends(get_session_id),
    gw: Gateway = Depends(get_gateway),
    store: SessionStore = Depends(get_session_store),
) -> LoginResponse:
    user, record = identity.login(gw, store, payload.email, payload.password, previous_session_id=session_id)
    _set_session_cookie(response, record)
    return LoginResponse(user=user)


@router.post("/logout", response_model=OkResponse)
def logout(
    response: Response,
    session_id: Optional[str] = Depends(get_session_id),
    store: SessionStore = Depends(get_session_store),
) -> OkResponse:
    identity.logout(store, session_id)
    response.delete_cookie(
        key=settings.session_cookie_name,
        path=settings.session_cookie_path,
    )
    return OkResponse()
