import logging
from typing import Optional

from fastapi import FastAPI, Request
from starlette.background import BackgroundTasks
from starlette.concurrency import run_in_threadpool

from fitlead.db.gateway import Gateway
from fitlead.services.visits import PageView, page_view_from_request, record_visit

logger = logging.getLogger(__name__)


class VisitLogger:
    def __init__(self, gw: Gateway) -> None:
        self.gw = gw

    def observe(self, request: Request) -> Optional[PageView]:
        try:
            return page_view_from_request(request)
        except Exception:
            logger.exception("Failed to inspect request for visit logging")
            return None

    def write(self, view: PageView) -> None:
        try:
            record_visit(self.gw, view)
        except Exception:
            logger.exception("Failed to log visit to %s", view.path)


def register_visit_logger(app: FastAPI, visit_logger: VisitLogger) -> None:
    app.state.visit_logger = visit_logger

    @app.middleware("http")
    async def _log_page_views(request: Request, call_next):
        observer: VisitLogger = request.app.state.visit_logger
        view = observer.observe(request)
        try:
            response = await call_next(request)
        except Exception:
            # The handler failed without a response to attach to; write now
            if view is not None:
                await run_in_threadpool(observer.write, view)
            raise
        if view is not None:
            existing = getattr(response, "background", None)
            tasks = BackgroundTasks([existing] if existing is not None else None)
            tasks.add_task(observer.write, view)
            response.background = tasks
        return response
