"""
Status history: one row per successful status update.

Rules:
- Rows are never updated after insert.
- Per-user history is capped (FIFO eviction by id) by the storage service.
- processed_status is the StatusSnapshot JSON-encoded as Text, without
  relevance scores.
"""
from datetime import datetime
from sqlalchemy import Integer, String, Text, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base


class StatusHistory(Base):
    __tablename__ = "status_history"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    timestamp: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    raw_input: Mapped[str] = mapped_column(Text, nullable=False)
    processed_status: Mapped[str] = mapped_column(
        Text, nullable=False,
        comment="JSON-encoded StatusSnapshot",
    )
