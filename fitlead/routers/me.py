from fastapi import APIRouter, Depends

from fitlead.schemas.auth import SessionUser
from fitlead.security.deps import get_current_user


router = APIRouter()


@router.get("/me", response_model=SessionUser)
def me(user: SessionUser = Depends(get_current_user)) -> SessionUser:
    return user
