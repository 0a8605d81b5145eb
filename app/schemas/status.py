"""
Status request / response schemas.

POST   /status                    → StatusUpdateRequest → StatusUpdateResponse
GET    /status/{user_id}/latest   → StoredStatusEntry
GET    /status/{user_id}/history  → HistoryResponse
GET    /status/{user_id}/today    → TodayCountResponse
DELETE /status/{user_id}          → PurgeResponse
"""
from __future__ import annotations

from typing import Annotated, Any, Optional

from pydantic import BaseModel, Field, field_validator

from app.schemas.snapshot import StatusSnapshot, StoredStatusEntry


class StatusUpdateRequest(BaseModel):
    """A free-text status narrative for one user."""

    user_id: Annotated[str, Field(
        min_length=1,
        max_length=64,
        description="Opaque, stable user identifier.",
        examples=["u_1029"],
    )]
    status_text: Annotated[str, Field(
        min_length=1,
        max_length=4_000,
        description="Free-text status. Stripped of leading/trailing whitespace.",
        examples=["Finally fixed the login bug, pretty tired, haven't eaten since noon"],
    )]

    @field_validator("user_id", "status_text", mode="before")
    @classmethod
    def strip_and_check_empty(cls, v: str) -> str:
        stripped = v.strip() if isinstance(v, str) else v
        if not stripped:
            raise ValueError("must not be empty after stripping whitespace")
        return stripped


class StatusUpdateResponse(BaseModel):
    user_id: str
    timestamp: str = Field(description="ISO-8601 time the update was processed.")
    snapshot: StatusSnapshot = Field(description="Snapshot with display overrides applied.")
    stored: bool = Field(description="False when the update could not be persisted.")
    activity_id: Optional[str] = Field(default=None, description="Activity created from this update.")
    message: dict[str, Any] = Field(description="Rendered status message payload.")


class HistoryResponse(BaseModel):
    user_id: str
    count: int
    entries: list[StoredStatusEntry] = Field(description="Oldest first.")


class TodayCountResponse(BaseModel):
    user_id: str
    count: int = Field(description="Updates stored since 00:00 UTC today.")


class PurgeResponse(BaseModel):
    user_id: str
    deleted: int = Field(ge=0, description="Number of records removed.")
