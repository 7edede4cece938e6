import logging
from datetime import timedelta
from typing import Any, Dict, Iterable, List, Mapping

from sqlalchemy import Table, delete, insert, select, update
from sqlalchemy.sql import Update

from fitlead.core.clock import as_utc, utcnow
from fitlead.core.errors import NotFoundError, ValidationError
from fitlead.db.gateway import Gateway
from fitlead.models.submission import STATUS_NEW, Submission
from fitlead.schemas.submission import SubmissionCreate

logger = logging.getLogger(__name__)

_submissions = Submission.__table__

REQUIRED_FIELDS = ("name", "phone", "goal")
OPTIONAL_FIELDS = ("email", "message", "trainer", "plan", "intent")
MUTABLE_FIELDS = REQUIRED_FIELDS + OPTIONAL_FIELDS + ("status",)


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _or_none(value: Any) -> Any:
    return None if _is_blank(value) else value


def build_update(table: Table, allowed: Iterable[str], fields: Mapping[str, Any]) -> Update:
    """UPDATE for the allowed columns present in ``fields``; other keys are ignored.

    Column names always come from ``allowed``, values are bound parameters.
    """
    values = {name: fields[name] for name in allowed if name in fields}
    if not values:
        raise ValidationError("No fields to update")
    return update(table).values(**values)


def create_submission(gw: Gateway, payload: SubmissionCreate) -> Dict[str, Any]:
    fields = payload.model_dump()
    if any(_is_blank(fields[name]) for name in REQUIRED_FIELDS):
        raise ValidationError("Required fields: name, phone, goal")

    now = utcnow()
    values = {name: fields[name] for name in REQUIRED_FIELDS}
    values.update({name: _or_none(fields[name]) for name in OPTIONAL_FIELDS})
    result = gw.execute(
        insert(_submissions).values(status=STATUS_NEW, created_at=now, updated_at=now, **values)
    )
    logger.info("New submission %s", result.inserted_id)
    return get_submission(gw, result.inserted_id)


def list_submissions(gw: Gateway) -> List[Dict[str, Any]]:
    return gw.fetch_all(
        select(_submissions).order_by(_submissions.c.created_at.desc(), _submissions.c.id.desc())
    )


def get_submission(gw: Gateway, submission_id: int) -> Dict[str, Any]:
    row = gw.fetch_one(select(_submissions).where(_submissions.c.id == submission_id))
    if row is None:
        raise NotFoundError()
    return row


def update_submission(gw: Gateway, submission_id: int, patch: Mapping[str, Any]) -> Dict[str, Any]:
    fields = {name: value for name, value in patch.items() if name in MUTABLE_FIELDS}
    if not fields:
        raise ValidationError("No fields to update")
    if any(_is_blank(fields[name]) for name in REQUIRED_FIELDS + ("status",) if name in fields):
        raise ValidationError("Required fields cannot be empty: name, phone, goal, status")
    for name in OPTIONAL_FIELDS:
        if name in fields:
            fields[name] = _or_none(fields[name])

    current = get_submission(gw, submission_id)
    # updated_at must move forward even if the clock has not ticked
    stamp = utcnow()
    previous = as_utc(current["updated_at"])
    if previous is not None and stamp <= previous:
        stamp = previous + timedelta(microseconds=1)

    statement = (
        build_update(_submissions, MUTABLE_FIELDS, fields)
        .values(updated_at=stamp)
        .where(_submissions.c.id == submission_id)
    )
    if gw.execute(statement).rows_affected == 0:
        raise NotFoundError()
    return get_submission(gw, submission_id)


def delete_submission(gw: Gateway, submission_id: int) -> None:
    result = gw.execute(delete(_submissions).where(_submissions.c.id == submission_id))
    if result.rows_affected == 0:
        logger.debug("Delete of missing submission %s", submission_id)
