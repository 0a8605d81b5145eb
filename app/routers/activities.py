"""
Activities router.

GET  /activities/{activity_id}       - activity detail
POST /activities/{activity_id}/join  - join (idempotent)
"""
from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.db.base import get_db
from app.schemas.activity import ActivityOut, JoinActivityRequest
from app.schemas.common import ErrorResponse
from app.services.activity import ActivityStore

router = APIRouter(prefix="/activities", tags=["activities"])


@router.get(
    "/{activity_id}",
    response_model=ActivityOut,
    summary="Get activity",
    responses={404: {"model": ErrorResponse, "description": "Activity not found"}},
)
def get_activity(activity_id: str, db: Session = Depends(get_db)) -> ActivityOut:
    return ActivityStore(db).get(activity_id)


@router.post(
    "/{activity_id}/join",
    response_model=ActivityOut,
    summary="Join activity",
    responses={
        404: {"model": ErrorResponse, "description": "Activity not found"},
        409: {"model": ErrorResponse, "description": "Activity is full"},
    },
)
def join_activity(
    activity_id: str,
    body: JoinActivityRequest,
    db: Session = Depends(get_db),
) -> ActivityOut:
    return ActivityStore(db).join(activity_id, body.user_id)
