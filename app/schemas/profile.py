"""
Profile schemas.

GET   /profile/{user_id}                      → ProfileOut
PATCH /profile/{user_id}                      → ProfileUpdate → ProfileOut
PUT   /profile/{user_id}/emojis/{state_name}  → EmojiUpdate   → ProfileOut
"""
from __future__ import annotations

import enum
import json
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.schemas.snapshot import VisualTheme


class Visibility(str, enum.Enum):
    public = "public"
    private = "private"


class ProfileOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    user_id: str
    theme: str = VisualTheme.default.value
    visibility: str = Visibility.public.value
    custom_emojis: dict[str, str] = Field(
        default_factory=dict,
        description="Lowercased state name (or 'mood') → emoji.",
    )
    timezone: Optional[str] = None

    @field_validator("custom_emojis", mode="before")
    @classmethod
    def decode_emojis(cls, v: Any) -> dict:
        if isinstance(v, str):
            try:
                v = json.loads(v or "{}")
            except ValueError:
                return {}
        if not isinstance(v, dict):
            return {}
        return {str(k): str(e) for k, e in v.items() if e}


class ProfileUpdate(BaseModel):
    """Partial update; omitted fields are left unchanged."""
    model_config = ConfigDict(use_enum_values=True)

    theme: Optional[VisualTheme] = None
    visibility: Optional[Visibility] = None
    timezone: Optional[str] = Field(default=None, max_length=64, examples=["Europe/Madrid"])


class EmojiUpdate(BaseModel):
    emoji: str = Field(
        default="",
        max_length=16,
        description="Emoji to use for the state. Empty string removes the override.",
        examples=["🍕"],
    )
