"""
Status template schemas.

GET    /templates/{user_id}?category=     → list[TemplateOut]
PUT    /templates/{user_id}/{name}        → TemplateSave → TemplateOut
DELETE /templates/{user_id}/{name}        → 204
POST   /templates/{user_id}/{name}/use    → StatusUpdateResponse
"""
from __future__ import annotations

from datetime import datetime
from typing import Annotated, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_TEMPLATE_EMOJI = "📝"


class TemplateSave(BaseModel):
    template_text: Annotated[str, Field(
        min_length=1,
        max_length=4_000,
        description="Status text submitted when the template is used.",
        examples=["Heads down on the API refactor, energy ok, need coffee"],
    )]
    emoji: str = Field(default=DEFAULT_TEMPLATE_EMOJI, max_length=16)
    category: Optional[str] = Field(default=None, max_length=64, examples=["work"])

    @field_validator("template_text", mode="before")
    @classmethod
    def strip_and_check_empty(cls, v: str) -> str:
        stripped = v.strip() if isinstance(v, str) else v
        if not stripped:
            raise ValueError("template_text must not be empty after stripping whitespace")
        return stripped

    @field_validator("emoji", mode="before")
    @classmethod
    def default_emoji(cls, v: Optional[str]) -> str:
        if not isinstance(v, str) or not v.strip():
            return DEFAULT_TEMPLATE_EMOJI
        return v.strip()


class TemplateOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    name: str
    emoji: str = DEFAULT_TEMPLATE_EMOJI
    category: Optional[str] = None
    template_text: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
