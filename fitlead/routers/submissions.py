from fastapi import APIRouter, Depends

from fitlead.db.gateway import Gateway
from fitlead.db.session import get_gateway
from fitlead.schemas.auth import OkResponse, SessionUser
from fitlead.schemas.submission import (
    SubmissionCreate,
    SubmissionListResponse,
    SubmissionResponse,
    SubmissionUpdate,
)
from fitlead.security.deps import require_admin
from fitlead.services import submissions


router = APIRouter()


@router.post("", response_model=SubmissionResponse)
def create_submission(payload: SubmissionCreate, gw: Gateway = Depends(get_gateway)) -> SubmissionResponse:
    # Public: any visitor can leave a request from the site form
    return SubmissionResponse(submission=submissions.create_submission(gw, payload))


@router.get("", response_model=SubmissionListResponse)
def list_submissions(
    _: SessionUser = Depends(require_admin), gw: Gateway = Depends(get_gateway)
) -> SubmissionListResponse:
    return SubmissionListResponse(submissions=submissions.list_submissions(gw))


@router.get("/{submission_id}", response_model=SubmissionResponse)
def get_submission(
    submission_id: int, _: SessionUser = Depends(require_admin), gw: Gateway = Depends(get_gateway)
) -> SubmissionResponse:
    return SubmissionResponse(submission=submissions.get_submission(gw, submission_id))


@router.put("/{submission_id}", response_model=SubmissionResponse)
def update_submission(
    submission_id: int,
    payload: SubmissionUpdate,
    _: SessionUser = Depends(require_admin),
    gw: Gateway = Depends(get_gateway),
) -> SubmissionResponse:
    patch = payload.model_dump(exclude_unset=True)
    return SubmissionResponse(submission=submissions.update_submission(gw, submission_id, patch))


@router.delete("/{submission_id}", response_model=OkResponse)
def delete_submission(
    submission_id: int, _: SessionUser = Depends(require_admin), gw: Gateway = Depends(get_gateway)
) -> OkResponse:
    submissions.delete_submission(gw, submission_id)
    return OkResponse()
