"""
User profile: display preferences and custom emoji overrides.

Profiles are created with defaults on first access. Custom emojis are
keyed by lowercased personal-state / metric name; the key "mood" replaces
the snapshot's mood emoji. Overrides are applied to a copy of the snapshot
for display only; stored snapshots keep the extracted emojis.
"""
from __future__ import annotations

import json
from typing import Optional

import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.errors import StorageError
from app.models.user_profile import UserProfile
from app.schemas.profile import ProfileOut
from app.schemas.snapshot import StatusSnapshot

logger = structlog.get_logger(__name__)

MOOD_KEY = "mood"


def default_profile(user_id: str) -> ProfileOut:
    return ProfileOut(user_id=user_id)


def apply_custom_emojis(snapshot: StatusSnapshot, emojis: Optional[dict[str, str]]) -> StatusSnapshot:
    if not emojis:
        return snapshot

    overrides = {k.lower(): v for k, v in emojis.items() if v}
    update: dict = {}
    if MOOD_KEY in overrides:
        update["mood_emoji"] = overrides[MOOD_KEY]

    update["metrics"] = [
        m.model_copy(update={"icon": overrides[m.name.lower()]})
        if m.name.lower() in overrides else m
        for m in snapshot.metrics
    ]
    update["personal_states"] = [
        s.model_copy(update={"emoji": overrides[s.name.lower()]})
        if s.name.lower() in overrides else s
        for s in snapshot.personal_states
    ]
    return snapshot.model_copy(update=update)


class ProfileStore:
    def __init__(self, db: Session):
        self.db = db

    def _get_or_create(self, user_id: str) -> UserProfile:
        try:
            profile = self.db.get(UserProfile, user_id)
            if profile is None:
                profile = UserProfile(
                    user_id=user_id, theme="default", visibility="public", custom_emojis="{}",
                )
                self.db.add(profile)
                self.db.flush()
                logger.info("profile_created", user_id=user_id)
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise StorageError(
                f"Could not load profile for user {user_id}.",
                details={"user_id": user_id},
            ) from exc
        return profile

    def _commit(self, user_id: str, profile: UserProfile) -> ProfileOut:
        try:
            self.db.commit()
            self.db.refresh(profile)
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise StorageError(
                f"Could not save profile for user {user_id}.",
                details={"user_id": user_id},
            ) from exc
        return ProfileOut.model_validate(profile)

    def get(self, user_id: str) -> ProfileOut:
        profile = self._get_or_create(user_id)
        return self._commit(user_id, profile)

    def update(
        self,
        user_id: str,
        theme: Optional[str] = None,
        visibility: Optional[str] = None,
        timezone: Optional[str] = None,
    ) -> ProfileOut:
        profile = self._get_or_create(user_id)

        if theme is not None:
            profile.theme = theme
        if visibility is not None:
            profile.visibility = visibility
        if timezone is not None:
            profile.timezone = timezone or None
        return self._commit(user_id, profile)

    def set_custom_emoji(self, user_id: str, state_name: str, emoji: str) -> ProfileOut:
        """Set the override for `state_name`; an empty emoji removes it."""
        key = state_name.strip().lower()
        profile = self._get_or_create(user_id)

        emojis = ProfileOut.model_validate(profile).custom_emojis
        if emoji and emoji.strip():
            emojis[key] = emoji.strip()
        else:
            emojis.pop(key, None)
        profile.custom_emojis = json.dumps(emojis, ensure_ascii=False)
        logger.info("custom_emoji_set", user_id=user_id, state=key, removed=not emoji.strip())
        return self._commit(user_id, profile)
