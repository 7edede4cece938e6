import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Union

from sqlalchemy import text
from sqlalchemy.engine import Connection, CursorResult, Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.sql import Executable

from fitlead.core.errors import StorageError

logger = logging.getLogger(__name__)

Query = Union[str, Executable]


@dataclass(frozen=True)
class ExecResult:
    inserted_id: Optional[int]
    rows_affected: int


def _run(conn: Connection, query: Query, params: Optional[Mapping[str, Any]]) -> CursorResult:
    statement = text(query) if isinstance(query, str) else query
    if params:
        return conn.execute(statement, dict(params))
    return conn.execute(statement)


class Gateway:
    def __init__(self, engine: Engine) -> None:
        self.engine = engine

    def fetch_one(self, query: Query, params: Optional[Mapping[str, Any]] = None) -> Optional[Dict[str, Any]]:
        try:
            with self.engine.begin() as conn:
                row = _run(conn, query, params).mappings().first()
        except SQLAlchemyError as exc:
            raise self._storage_error(exc) from exc
        return dict(row) if row is not None else None

    def fetch_all(self, query: Query, params: Optional[Mapping[str, Any]] = None) -> List[Dict[str, Any]]:
        try:
            with self.engine.begin() as conn:
                rows = _run(conn, query, params).mappings().all()
        except SQLAlchemyError as exc:
            raise self._storage_error(exc) from exc
        return [dict(row) for row in rows]

    def execute(self, query: Query, params: Optional[Mapping[str, Any]] = None) -> ExecResult:
        try:
            with self.engine.begin() as conn:
                result = _run(conn, query, params)
                inserted_id = None
                if result.is_insert and result.inserted_primary_key:
                    inserted_id = result.inserted_primary_key[0]
                return ExecResult(inserted_id=inserted_id, rows_affected=result.rowcount)
        except SQLAlchemyError as exc:
            raise self._storage_error(exc) from exc

    @staticmethod
    def _storage_error(exc: SQLAlchemyError) -> StorageError:
        logger.debug("Storage failure: %s", exc)
        return StorageError(is_integrity=isinstance(exc, IntegrityError))
