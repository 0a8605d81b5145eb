"""
Per-user status templates, matched by name case-insensitively.

Saving an existing name replaces its text, emoji and category but keeps
the original `created_at`. Deleting a missing template is a no-op.
"""
from __future__ import annotations

from typing import Optional

import structlog
from sqlalchemy import delete, func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.errors import StorageError, TemplateNotFoundError
from app.models.status_template import StatusTemplate
from app.schemas.template import DEFAULT_TEMPLATE_EMOJI, TemplateOut

logger = structlog.get_logger(__name__)

UNCATEGORIZED = "Uncategorized"


def _key(name: str) -> str:
    return name.strip().lower()


class TemplateStore:
    def __init__(self, db: Session):
        self.db = db

    def _find(self, user_id: str, name: str) -> Optional[StatusTemplate]:
        return self.db.scalar(
            select(StatusTemplate)
            .where(StatusTemplate.user_id == user_id)
            .where(StatusTemplate.name_key == _key(name))
        )

    def for_user(self, user_id: str, category: Optional[str] = None) -> list[TemplateOut]:
        """
        Templates sorted by name. `category` matches case-insensitively;
        templates without one are listed under "uncategorized".
        """
        query = select(StatusTemplate).where(StatusTemplate.user_id == user_id)
        if category and category.strip():
            wanted = category.strip().lower()
            condition = func.lower(StatusTemplate.category) == wanted
            if wanted == UNCATEGORIZED.lower():
                condition = or_(condition, StatusTemplate.category.is_(None))
            query = query.where(condition)
        try:
            rows = self.db.scalars(query.order_by(StatusTemplate.name_key)).all()
        except SQLAlchemyError as exc:
            raise StorageError(
                f"Could not list templates for user {user_id}.",
                details={"user_id": user_id},
            ) from exc
        return [TemplateOut.model_validate(r) for r in rows]

    def get(self, user_id: str, name: str) -> TemplateOut:
        try:
            row = self._find(user_id, name)
        except SQLAlchemyError as exc:
            raise StorageError(
                f"Could not read template '{name}'.",
                details={"user_id": user_id, "name": name},
            ) from exc
        if row is None:
            raise TemplateNotFoundError(name)
        return TemplateOut.model_validate(row)

    def save(
        self,
        user_id: str,
        name: str,
        template_text: str,
        emoji: str = DEFAULT_TEMPLATE_EMOJI,
        category: Optional[str] = None,
    ) -> TemplateOut:
        try:
            row = self._find(user_id, name)
            if row is None:
                row = StatusTemplate(user_id=user_id, name_key=_key(name))
                self.db.add(row)
            row.name = name.strip()
            row.template_text = template_text
            row.emoji = emoji or DEFAULT_TEMPLATE_EMOJI
            row.category = category or None
            self.db.commit()
            self.db.refresh(row)
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise StorageError(
                f"Could not save template '{name}'.",
                details={"user_id": user_id, "name": name},
            ) from exc

        logger.info("template_saved", user_id=user_id, name=row.name)
        return TemplateOut.model_validate(row)

    def delete(self, user_id: str, name: str) -> bool:
        """Returns True when a template was removed."""
        try:
            result = self.db.execute(
                delete(StatusTemplate)
                .where(StatusTemplate.user_id == user_id)
                .where(StatusTemplate.name_key == _key(name))
            )
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise StorageError(
                f"Could not delete template '{name}'.",
                details={"user_id": user_id, "name": name},
            ) from exc

        removed = bool(result.rowcount)
        logger.info("template_deleted", user_id=user_id, name=name, removed=removed)
        return removed
