from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from fitlead.core.clock import as_utc


class VisitOut(BaseModel):
    id: int
    ip: Optional[str] = None
    path: Optional[str] = None
    user_agent: Optional[str] = None
    created_at: datetime

    @field_validator("created_at")
    @classmethod
    def _utc(cls, value: datetime) -> datetime:
        return as_utc(value)

    class Config:
        from_attributes = True


class VisitStats(BaseModel):
    total_visits: int = Field(alias="totalVisits")
    unique_visitors: int = Field(alias="uniqueVisitors")

    class Config:
        populate_by_name = True


class VisitsResponse(BaseModel):
    visits: List[VisitOut]
    stats: VisitStats
