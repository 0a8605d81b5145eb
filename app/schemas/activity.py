"""
Activity schemas.

GET  /activities/{activity_id}       → ActivityOut
POST /activities/{activity_id}/join  → JoinActivityRequest → ActivityOut
"""
from __future__ import annotations

import json
from datetime import datetime
from typing import Annotated, Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ActivityOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    creator: str
    title: str
    description: str = ""
    activity_type: str = "general"
    max_participants: int = Field(default=0, description="0 means unlimited.")
    participants: list[str] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("participants", mode="before")
    @classmethod
    def decode_participants(cls, v: Any) -> list:
        if isinstance(v, str):
            try:
                v = json.loads(v or "[]")
            except ValueError:
                return []
        return [str(p) for p in v] if isinstance(v, list) else []


class JoinActivityRequest(BaseModel):
    user_id: Annotated[str, Field(min_length=1, max_length=64)]
