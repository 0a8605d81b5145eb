"""
Status router.

POST   /status                    - analyze and store a status update
GET    /status/{user_id}/latest   - latest stored entry
GET    /status/{user_id}/history  - stored entries, oldest first
GET    /status/{user_id}/today    - updates since 00:00 UTC
DELETE /status/{user_id}          - purge every record for the user
"""
from __future__ import annotations

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.errors import StatusNotFoundError
from app.db.base import get_db
from app.schemas.common import ErrorResponse
from app.schemas.snapshot import StoredStatusEntry
from app.schemas.status import (
    HistoryResponse,
    PurgeResponse,
    StatusUpdateRequest,
    StatusUpdateResponse,
    TodayCountResponse,
)
from app.services.llm import CompletionClient, get_completion_client
from app.services.status import StatusUpdateResult, run_status_update
from app.services.storage import StatusStore

router = APIRouter(prefix="/status", tags=["status"])


def to_update_response(result: StatusUpdateResult) -> StatusUpdateResponse:
    return StatusUpdateResponse(
        user_id=result.user_id,
        timestamp=result.timestamp,
        snapshot=result.display_snapshot,
        stored=result.stored,
        activity_id=result.activity_id,
        message=result.message,
    )


# ---------------------------------------------------------------------------
# POST /status
# ---------------------------------------------------------------------------

@router.post(
    "",
    response_model=StatusUpdateResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Analyze a status update",
    description=(
        "Scores and filters the user's previous status, asks the LLM for a new "
        "structured snapshot, reconciles personal-state trends and stores the "
        "result. LLM or storage failures still return a rendered status: the "
        "snapshot then carries the failure in `errors`, or `stored` is false."
    ),
    responses={
        422: {"model": ErrorResponse, "description": "Empty status text or user id"},
        500: {"model": ErrorResponse, "description": "Unexpected processing failure"},
    },
)
async def post_status(
    body: StatusUpdateRequest,
    db: Session = Depends(get_db),
    completion: CompletionClient = Depends(get_completion_client),
) -> StatusUpdateResponse:
    result = await run_status_update(db, completion, body.user_id, body.status_text)
    return to_update_response(result)


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------

@router.get(
    "/{user_id}/latest",
    response_model=StoredStatusEntry,
    summary="Latest stored status",
    responses={404: {"model": ErrorResponse, "description": "No status recorded for the user"}},
)
def get_latest(user_id: str, db: Session = Depends(get_db)) -> StoredStatusEntry:
    entry = StatusStore(db).get_latest(user_id)
    if entry is None:
        raise StatusNotFoundError(user_id)
    return entry


@router.get(
    "/{user_id}/history",
    response_model=HistoryResponse,
    summary="Status history, oldest first",
)
def get_history(
    user_id: str,
    limit: int = Query(
        default=settings.HISTORY_LIMIT,
        ge=0,
        le=100,
        description="Most recent N entries; 0 returns everything stored.",
    ),
    db: Session = Depends(get_db),
) -> HistoryResponse:
    entries = StatusStore(db).get_history(user_id, limit)
    return HistoryResponse(user_id=user_id, count=len(entries), entries=entries)


@router.get(
    "/{user_id}/today",
    response_model=TodayCountResponse,
    summary="Number of updates today (UTC)",
)
def get_today_count(user_id: str, db: Session = Depends(get_db)) -> TodayCountResponse:
    return TodayCountResponse(user_id=user_id, count=StatusStore(db).count_updates_today(user_id))


# ---------------------------------------------------------------------------
# DELETE /status/{user_id}
# ---------------------------------------------------------------------------

@router.delete(
    "/{user_id}",
    response_model=PurgeResponse,
    summary="Purge all data for a user",
    description=(
        "Deletes status history, the latest pointer, the profile, templates and "
        "activities created by the user. Safe to call repeatedly."
    ),
)
def purge_user(user_id: str, db: Session = Depends(get_db)) -> PurgeResponse:
    return PurgeResponse(user_id=user_id, deleted=StatusStore(db).purge_all(user_id))
