"""Page-view classification and the visits table."""

import posixpath
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from fastapi import Request
from sqlalchemy import distinct, func, insert, select

from fitlead.core.clock import utcnow
from fitlead.db.gateway import Gateway
from fitlead.models.visit import Visit

_visits = Visit.__table__

API_PREFIX = "/api"
INDEX_PATH = "/index.html"
PAGE_EXTENSIONS = (".html", ".htm")


@dataclass(frozen=True)
class PageView:
    ip: Optional[str]
    path: str
    user_agent: Optional[str]


def is_page_view(method: str, path: str) -> bool:
    """GET outside the API whose last segment is an HTML document or has no extension."""
    if method.upper() != "GET":
        return False
    if path == API_PREFIX or path.startswith(API_PREFIX + "/"):
        return False
    _, ext = posixpath.splitext(posixpath.basename(path))
    return ext == "" or ext.lower() in PAGE_EXTENSIONS


def normalize_path(path: str) -> str:
    if path in ("", "/"):
        return INDEX_PATH
    return path


def client_ip(forwarded_for: Optional[str], peer: Optional[str]) -> Optional[str]:
    # Behind a reverse proxy the first X-Forwarded-For hop is the visitor
    if forwarded_for:
        first = forwarded_for.split(",")[0].strip()
        if first:
            return first
    return peer


def page_view_from_request(request: Request) -> Optional[PageView]:
    if not is_page_view(request.method, request.url.path):
        return None
    return PageView(
        ip=client_ip(request.headers.get("x-forwarded-for"), request.client.host if request.client else None),
        path=normalize_path(request.url.path),
        user_agent=request.headers.get("user-agent"),
    )


def record_visit(gw: Gateway, view: PageView) -> Optional[int]:
    result = gw.execute(
        insert(_visits).values(ip=view.ip, path=view.path, user_agent=view.user_agent, created_at=utcnow())
    )
    return result.inserted_id


def recent_visits(gw: Gateway, limit: int) -> List[Dict[str, Any]]:
    return gw.fetch_all(
        select(_visits).order_by(_visits.c.created_at.desc(), _visits.c.id.desc()).limit(limit)
    )


def visit_stats(gw: Gateway) -> Dict[str, int]:
    row = gw.fetch_one(
        select(
            func.count(_visits.c.id).label("total_visits"),
            func.count(distinct(_visits.c.ip)).label("unique_visitors"),
        )
    )
    return {"total_visits": row["total_visits"], "unique_visitors": row["unique_visitors"]}
