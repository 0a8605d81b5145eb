"""
Profile router.

GET   /profile/{user_id}                      - profile (created on first access)
PATCH /profile/{user_id}                      - partial update
PUT   /profile/{user_id}/emojis/{state_name}  - set or clear an emoji override
"""
from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.db.base import get_db
from app.schemas.profile import EmojiUpdate, ProfileOut, ProfileUpdate
from app.services.profile import ProfileStore

router = APIRouter(prefix="/profile", tags=["profile"])


@router.get("/{user_id}", response_model=ProfileOut, summary="Get user profile")
def get_profile(user_id: str, db: Session = Depends(get_db)) -> ProfileOut:
    return ProfileStore(db).get(user_id)


@router.patch("/{user_id}", response_model=ProfileOut, summary="Update user profile")
def update_profile(
    user_id: str,
    body: ProfileUpdate,
    db: Session = Depends(get_db),
) -> ProfileOut:
    return ProfileStore(db).update(
        user_id,
        theme=body.theme,
        visibility=body.visibility,
        timezone=body.timezone,
    )


@router.put(
    "/{user_id}/emojis/{state_name}",
    response_model=ProfileOut,
    summary="Set a custom emoji",
    description=(
        "Overrides the emoji shown for a personal state or metric with this name "
        "(case-insensitive). The name `mood` replaces the mood emoji. An empty "
        "`emoji` removes the override."
    ),
)
def set_custom_emoji(
    user_id: str,
    state_name: str,
    body: EmojiUpdate,
    db: Session = Depends(get_db),
) -> ProfileOut:
    return ProfileStore(db).set_custom_emoji(user_id, state_name, body.emoji)
