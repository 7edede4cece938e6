import datetime as dt
from typing import Any, Dict, Optional

import jwt

from fitlead.core.settings import settings


def create_session_cookie(session_id: str, expires_at: dt.datetime) -> str:
    """Sign the opaque session id so a tampered cookie never reaches the store."""
    payload: Dict[str, Any] = {
        "sid": session_id,
        "type": "session",
        "exp": expires_at,
        "iat": dt.datetime.now(tz=dt.timezone.utc),
    }
    return jwt.encode(payload, settings.session_secret, algorithm=settings.session_algorithm)


def decode_session_cookie(token: str) -> Optional[str]:
    try:
        payload = jwt.decode(token, settings.session_secret, algorithms=[settings.session_algorithm])
    except jwt.InvalidTokenError:
        return None
    if payload.get("type") != "session" or not isinstance(payload.get("sid"), str):
        return None
    return payload["sid"]
