from sqlalchemy import create_engine
from sqlalchemy.orm import DeclarativeBase

from fitlead.core.settings import settings
from fitlead.db.gateway import Gateway


class Base(DeclarativeBase):
    pass


engine = create_engine(
    settings.database_url,
    connect_args={"check_same_thread": False} if settings.database_url.startswith("sqlite") else {},
    pool_pre_ping=not settings.database_url.startswith("sqlite"),
)

gateway = Gateway(engine)


def get_gateway() -> Gateway:
    return gateway
