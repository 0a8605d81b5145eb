"""
Latest-status pointer: an independent copy of the newest history row.

Written in the same transaction as the history append, so after every
successful store the pointer equals the last history row. `version` is
bumped on every write and backs the optional compare-and-swap.
"""
from datetime import datetime
from sqlalchemy import Integer, String, Text, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base


class LatestStatus(Base):
    __tablename__ = "latest_status"

    user_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    timestamp: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    raw_input: Mapped[str] = mapped_column(Text, nullable=False)
    processed_status: Mapped[str] = mapped_column(Text, nullable=False)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
