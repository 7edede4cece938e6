import logging

from fastapi import FastAPI

from fitlead.core.settings import settings
from fitlead.db.session import Base, engine, gateway
from fitlead.security.deps import get_session_store
from fitlead.services.identity import bootstrap_admin

# Registered on Base.metadata before create_all
from fitlead.models.auth_session import AuthSession  # noqa: F401
from fitlead.models.submission import Submission  # noqa: F401
from fitlead.models.user import User  # noqa: F401
from fitlead.models.visit import Visit  # noqa: F401

logger = logging.getLogger(__name__)


def register_startup(app: FastAPI) -> None:
    @app.on_event("startup")
    def _prepare_database() -> None:
        Base.metadata.create_all(bind=engine)
        logger.info("Tables ready: %s", ", ".join(sorted(Base.metadata.tables)))

        purged = get_session_store().purge_expired()
        if purged:
            logger.info("Purged %d expired sessions", purged)

        bootstrap_admin(gateway, settings.admin_email, settings.admin_password)
