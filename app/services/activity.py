"""
Joinable activities detected from status highlights.

detect_activity(snapshot)  -> dict | None   first current/future activity highlight

ActivityStore(db)
-----------------
create(creator, title, description, activity_type, max_participants=0) -> ActivityOut
get(activity_id)                                   -> ActivityOut
join(activity_id, user_id)                         -> ActivityOut
"""
from __future__ import annotations

import json
import secrets
import string
import time
from typing import Optional

import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.errors import ActivityFullError, ActivityNotFoundError, StorageError
from app.models.activity import Activity
from app.schemas.activity import ActivityOut
from app.schemas.snapshot import HighlightType, StatusSnapshot, Timeframe

logger = structlog.get_logger(__name__)

_ID_ALPHABET = string.ascii_lowercase + string.digits
_JOINABLE_TIMEFRAMES = {Timeframe.current.value, Timeframe.future.value}


def new_activity_id() -> str:
    suffix = "".join(secrets.choice(_ID_ALPHABET) for _ in range(5))
    return f"act_{int(time.time() * 1000)}_{suffix}"


def detect_activity(snapshot: StatusSnapshot) -> Optional[dict]:
    """Activity fields for the first highlight someone could join, if any."""
    for highlight in snapshot.highlights:
        if (
            highlight.type == HighlightType.activity.value
            and highlight.timeframe in _JOINABLE_TIMEFRAMES
            and highlight.description
        ):
            return {
                "title": highlight.description,
                "description": snapshot.narrative_summary,
                "activity_type": snapshot.visual_theme,
            }
    return None


class ActivityStore:
    def __init__(self, db: Session):
        self.db = db

    def _load(self, activity_id: str) -> Activity:
        try:
            activity = self.db.get(Activity, activity_id)
        except SQLAlchemyError as exc:
            raise StorageError(
                f"Could not read activity {activity_id}.",
                details={"activity_id": activity_id},
            ) from exc
        if activity is None:
            raise ActivityNotFoundError(activity_id)
        return activity

    def create(
        self,
        creator: str,
        title: str,
        description: str = "",
        activity_type: str = "general",
        max_participants: int = 0,
    ) -> ActivityOut:
        activity = Activity(
            id=new_activity_id(),
            creator=creator,
            title=(title or "Untitled Activity")[:256],
            description=description or "",
            activity_type=activity_type or "general",
            max_participants=max(0, max_participants),
            participants=json.dumps([creator]),
        )
        try:
            self.db.add(activity)
            self.db.commit()
            self.db.refresh(activity)
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise StorageError(
                f"Could not create activity for user {creator}.",
                details={"user_id": creator},
            ) from exc

        logger.info("activity_created", activity_id=activity.id, creator=creator)
        return ActivityOut.model_validate(activity)

    def get(self, activity_id: str) -> ActivityOut:
        return ActivityOut.model_validate(self._load(activity_id))

    def join(self, activity_id: str, user_id: str) -> ActivityOut:
        """Add `user_id` to the participants. Joining twice is a no-op."""
        activity = self._load(activity_id)
        participants = ActivityOut.model_validate(activity).participants

        if user_id in participants:
            return ActivityOut.model_validate(activity)
        if activity.max_participants > 0 and len(participants) >= activity.max_participants:
            raise ActivityFullError(activity_id, activity.max_participants)

        participants.append(user_id)
        activity.participants = json.dumps(participants)
        try:
            self.db.commit()
            self.db.refresh(activity)
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise StorageError(
                f"Could not join activity {activity_id}.",
                details={"activity_id": activity_id},
            ) from exc

        logger.info("activity_joined", activity_id=activity_id, user_id=user_id)
        return ActivityOut.model_validate(activity)
