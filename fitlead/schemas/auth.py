from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, field_validator

from fitlead.core.clock import as_utc


class Credentials(BaseModel):
    # Presence is checked by the identity service so both routes report it the same way
    email: Optional[str] = None
    password: Optional[str] = None


class SessionUser(BaseModel):
    id: int
    email: str
    role: Literal["user", "admin"]

    class Config:
        from_attributes = True


class RegisteredUser(SessionUser):
    created_at: datetime

    @field_validator("created_at")
    @classmethod
    def _utc(cls, value: datetime) -> datetime:
        return as_utc(value)


class RegisterResponse(BaseModel):
    user: RegisteredUser


class LoginResponse(BaseModel):
    user: SessionUser


class OkResponse(BaseModel):
    ok: bool = True
