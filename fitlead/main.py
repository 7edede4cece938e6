import logging
import sys
from pathlib import Path

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from fitlead.core.settings import settings
from fitlead.db.session import gateway
from fitlead.exception_handlers import setup_exception_handlers
from fitlead.routers.auth import router as auth_router
from fitlead.routers.me import router as me_router
from fitlead.routers.submissions import router as submissions_router
from fitlead.routers.visits import router as visits_router
from fitlead.startup import register_startup
from fitlead.visit_logging import VisitLogger, register_visit_logger


def _configure_logging() -> None:
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stdout,
    )
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


_configure_logging()
logger = logging.getLogger(__name__)

app = FastAPI(title=settings.app_name, debug=settings.debug)

register_startup(app)
setup_exception_handlers(app)
register_visit_logger(app, VisitLogger(gateway))

app.include_router(auth_router, prefix="/api/auth", tags=["auth"])
app.include_router(me_router, prefix="/api", tags=["auth"])
app.include_router(submissions_router, prefix="/api/submissions", tags=["submissions"])
app.include_router(visits_router, prefix="/api", tags=["visits"])


@app.get("/api/health", tags=["health"])
def health_check():
    return {"status": "ok"}


if settings.static_dir:
    static_path = Path(settings.static_dir)
    if static_path.is_dir():
        app.mount("/", StaticFiles(directory=static_path, html=True), name="site")
    else:
        logger.warning("STATIC_DIR %s is not a directory; site files are not served", static_path)
