from fastapi import APIRouter, Depends, Query

from fitlead.core.settings import settings
from fitlead.db.gateway import Gateway
from fitlead.db.session import get_gateway
from fitlead.schemas.auth import SessionUser
from fitlead.schemas.visit import VisitsResponse, VisitStats
from fitlead.security.deps import require_admin
from fitlead.services import visits


router = APIRouter()


@router.get("/visits", response_model=VisitsResponse)
def list_visits(
    _: SessionUser = Depends(require_admin),
    gw: Gateway = Depends(get_gateway),
    limit: int = Query(default=settings.visits_recent_limit, ge=1, le=1000),
) -> VisitsResponse:
    return VisitsResponse(
        visits=visits.recent_visits(gw, limit),
        stats=VisitStats(**visits.visit_stats(gw)),
    )
