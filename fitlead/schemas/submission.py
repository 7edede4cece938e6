from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, field_validator

from fitlead.core.clock import as_utc


class SubmissionCreate(BaseModel):
    name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    goal: Optional[str] = None
    message: Optional[str] = None
    trainer: Optional[str] = None
    plan: Optional[str] = None
    intent: Optional[str] = None


class SubmissionUpdate(SubmissionCreate):
    """Partial update; only fields present in the request body are applied."""

    status: Optional[str] = None


class SubmissionOut(BaseModel):
    id: int
    name: str
    phone: str
    email: Optional[str] = None
    goal: str
    message: Optional[str] = None
    trainer: Optional[str] = None
    plan: Optional[str] = None
    intent: Optional[str] = None
    status: str
    created_at: datetime
    updated_at: datetime

    @field_validator("created_at", "updated_at")
    @classmethod
    def _utc(cls, value: datetime) -> datetime:
        return as_utc(value)

    class Config:
        from_attributes = True


class SubmissionResponse(BaseModel):
    submission: SubmissionOut


class SubmissionListResponse(BaseModel):
    submissions: List[SubmissionOut]
