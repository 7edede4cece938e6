import logging
from typing import Optional, Tuple

from sqlalchemy import insert, select, update

from fitlead.core.clock import utcnow
from fitlead.core.errors import AuthError, ConflictError, StorageError, UnauthenticatedError, ValidationError
from fitlead.db.gateway import Gateway
from fitlead.models.user import ROLE_ADMIN, ROLE_USER, User
from fitlead.schemas.auth import RegisteredUser, SessionUser
from fitlead.security.passwords import hash_password, verify_password
from fitlead.security.session_store import SessionRecord, SessionStore

logger = logging.getLogger(__name__)

_users = User.__table__


def _require_credentials(email: Optional[str], password: Optional[str]) -> Tuple[str, str]:
    if not email or not password:
        raise ValidationError("Email and password required")
    return email, password


def _admin_exists(gw: Gateway) -> bool:
    return gw.fetch_one(select(_users.c.id).where(_users.c.role == ROLE_ADMIN).limit(1)) is not None


def _find_by_email(gw: Gateway, email: str) -> Optional[dict]:
    return gw.fetch_one(select(_users).where(_users.c.email == email))


def _insert_user(gw: Gateway, email: str, password: str, role: str) -> int:
    result = gw.execute(
        insert(_users).values(
            email=email,
            hashed_password=hash_password(password),
            role=role,
            created_at=utcnow(),
        )
    )
    return result.inserted_id


def _keep_single_first_admin(gw: Gateway, user_id: int) -> None:
    # Two registrations racing on an empty table can both see no admin; the lower id wins
    earlier = gw.fetch_one(
        select(_users.c.id).where(_users.c.role == ROLE_ADMIN, _users.c.id < user_id).limit(1)
    )
    if earlier is not None:
        gw.execute(update(_users).values(role=ROLE_USER).where(_users.c.id == user_id))


def _start_session(store: SessionStore, user: SessionUser, previous_session_id: Optional[str]) -> SessionRecord:
    if previous_session_id:
        store.destroy(previous_session_id)
    return store.create(user)


def register(
    gw: Gateway,
    store: SessionStore,
    email: Optional[str],
    password: Optional[str],
    previous_session_id: Optional[str] = None,
) -> Tuple[RegisteredUser, SessionRecord]:
    email, password = _require_credentials(email, password)
    if _find_by_email(gw, email) is not None:
        raise ConflictError()

    role = ROLE_USER if _admin_exists(gw) else ROLE_ADMIN
    try:
        user_id = _insert_user(gw, email, password, role)
    except StorageError as exc:
        # Lost a race with a concurrent registration of the same email
        if exc.is_integrity:
            raise ConflictError() from exc
        raise
    if role == ROLE_ADMIN:
        _keep_single_first_admin(gw, user_id)

    row = gw.fetch_one(select(_users).where(_users.c.id == user_id))
    user = RegisteredUser.model_validate(row)
    if user.role == ROLE_ADMIN:
        logger.info("Registered first admin account %s", user.email)
    record = _start_session(store, SessionUser(id=user.id, email=user.email, role=user.role), previous_session_id)
    return user, record


def login(
    gw: Gateway,
    store: SessionStore,
    email: Optional[str],
    password: Optional[str],
    previous_session_id: Optional[str] = None,
) -> Tuple[SessionUser, SessionRecord]:
    email, password = _require_credentials(email, password)
    row = _find_by_email(gw, email)
    hashed = row["hashed_password"] if row is not None else None
    if not verify_password(password, hashed):
        raise AuthError()

    user = SessionUser.model_validate(row)
    record = _start_session(store, user, previous_session_id)
    return user, record


def logout(store: SessionStore, session_id: Optional[str]) -> None:
    if session_id:
        store.destroy(session_id)


def current_user(store: SessionStore, session_id: Optional[str]) -> SessionUser:
    record = store.get(session_id) if session_id else None
    if record is None:
        raise UnauthenticatedError()
    return record.user


def bootstrap_admin(gw: Gateway, email: Optional[str], password: Optional[str]) -> bool:
    """Create the configured admin account unless that email is already taken."""
    if not email or not password:
        return False
    if _find_by_email(gw, email) is not None:
        return False
    _insert_user(gw, email, password, ROLE_ADMIN)
    logger.info("Created initial admin: %s", email)
    return True
