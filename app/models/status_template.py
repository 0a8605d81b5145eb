from datetime import datetime
from sqlalchemy import Integer, String, Text, DateTime, func, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base


class StatusTemplate(Base):
    """Saved status text a user can re-submit by name."""

    __tablename__ = "status_templates"
    __table_args__ = (
        UniqueConstraint("user_id", "name_key", name="uq_status_template_user_name"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    # Lowercased name; templates are matched case-insensitively.
    name_key: Mapped[str] = mapped_column(String(128), nullable=False)
    name: Mapped[str] = mapped_column(String(128), nullable=False)
    emoji: Mapped[str] = mapped_column(String(16), nullable=False, default="📝")
    category: Mapped[str | None] = mapped_column(String(64), nullable=True)
    template_text: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )
