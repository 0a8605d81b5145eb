"""
Durable status storage.

StatusStore(db)
---------------
get_latest(user_id)                                   -> StoredStatusEntry | None
get_latest_version(user_id)                           -> int  (0 when none)
append_history(user_id, entry, capacity, expected_version=None) -> StoredStatusEntry
get_history(user_id, limit)                           -> list[StoredStatusEntry]  (oldest first)
count_updates_today(user_id, now=None)                -> int
purge_all(user_id)                                    -> int  (rows deleted)

The history append and the latest-pointer write share one transaction, so
after a successful append the latest entry equals the last history entry.
SQLAlchemy faults are re-raised as the StorageError subclasses the
orchestrator knows how to absorb.
"""
from __future__ import annotations

from datetime import datetime
from typing import Optional

import structlog
from pydantic import ValidationError
from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.errors import (
    ContextUnavailableError,
    PersistenceFailureError,
    StaleWriteError,
    StorageError,
)
from app.models.activity import Activity
from app.models.latest_status import LatestStatus
from app.models.status_history import StatusHistory
from app.models.status_template import StatusTemplate
from app.models.user_profile import UserProfile
from app.schemas.snapshot import StatusSnapshot, StoredStatusEntry
from app.services.elapsed import parse_timestamp, to_iso, utcnow

logger = structlog.get_logger(__name__)


def _to_entry(row: StatusHistory | LatestStatus) -> StoredStatusEntry:
    return StoredStatusEntry(
        timestamp=to_iso(row.timestamp),
        raw_input=row.raw_input,
        processed_status=StatusSnapshot.model_validate_json(row.processed_status),
    )


class StatusStore:
    def __init__(self, db: Session):
        self.db = db

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_latest(self, user_id: str) -> Optional[StoredStatusEntry]:
        try:
            row = self.db.get(LatestStatus, user_id)
            return _to_entry(row) if row is not None else None
        except (SQLAlchemyError, ValidationError) as exc:
            logger.warning("latest_status_unavailable", user_id=user_id, error=str(exc))
            raise ContextUnavailableError(
                f"Could not read latest status for user {user_id}.",
                details={"user_id": user_id},
            ) from exc

    def get_latest_version(self, user_id: str) -> int:
        try:
            version = self.db.scalar(
                select(LatestStatus.version).where(LatestStatus.user_id == user_id)
            )
        except SQLAlchemyError as exc:
            raise ContextUnavailableError(
                f"Could not read latest status version for user {user_id}.",
                details={"user_id": user_id},
            ) from exc
        return version or 0

    def get_history(self, user_id: str, limit: int = 0) -> list[StoredStatusEntry]:
        stmt = (
            select(StatusHistory)
            .where(StatusHistory.user_id == user_id)
            .order_by(StatusHistory.id.desc())
        )
        if limit > 0:
            stmt = stmt.limit(limit)
        try:
            rows = list(self.db.scalars(stmt))
        except SQLAlchemyError as exc:
            raise StorageError(
                f"Could not read status history for user {user_id}.",
                details={"user_id": user_id},
            ) from exc

        entries: list[StoredStatusEntry] = []
        for row in reversed(rows):
            try:
                entries.append(_to_entry(row))
            except ValidationError:
                logger.warning("history_row_unreadable", user_id=user_id, row_id=row.id)
        return entries

    def count_updates_today(self, user_id: str, now: Optional[datetime] = None) -> int:
        """Number of stored updates since 00:00 UTC of the current day."""
        day_start = (now or utcnow()).replace(hour=0, minute=0, second=0, microsecond=0)
        try:
            stamps = self.db.scalars(
                select(StatusHistory.timestamp).where(StatusHistory.user_id == user_id)
            ).all()
        except SQLAlchemyError as exc:
            raise StorageError(
                f"Could not count updates for user {user_id}.",
                details={"user_id": user_id},
            ) from exc
        parsed = (parse_timestamp(ts) for ts in stamps)
        return sum(1 for ts in parsed if ts is not None and ts >= day_start)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def append_history(
        self,
        user_id: str,
        entry: StoredStatusEntry,
        capacity: int,
        expected_version: Optional[int] = None,
    ) -> StoredStatusEntry:
        """
        Append `entry`, evict the oldest rows beyond `capacity` and move the
        latest pointer. With `expected_version` the pointer is only moved if
        it is still at that version (StaleWriteError otherwise).
        """
        timestamp = parse_timestamp(entry.timestamp) or utcnow()
        payload = entry.processed_status.model_dump_json()

        try:
            latest = self.db.get(LatestStatus, user_id)
            current_version = latest.version if latest is not None else 0
            if expected_version is not None and current_version != expected_version:
                raise StaleWriteError(user_id, expected_version, current_version)

            self.db.add(StatusHistory(
                user_id=user_id,
                timestamp=timestamp,
                raw_input=entry.raw_input,
                processed_status=payload,
            ))
            self.db.flush()

            if capacity > 0:
                keep_ids = select(StatusHistory.id).where(
                    StatusHistory.user_id == user_id
                ).order_by(StatusHistory.id.desc()).limit(capacity)
                self.db.execute(
                    delete(StatusHistory)
                    .where(StatusHistory.user_id == user_id)
                    .where(StatusHistory.id.not_in(keep_ids))
                    .execution_options(synchronize_session=False)
                )

            if latest is None:
                self.db.add(LatestStatus(
                    user_id=user_id,
                    timestamp=timestamp,
                    raw_input=entry.raw_input,
                    processed_status=payload,
                    version=1,
                ))
            else:
                latest.timestamp = timestamp
                latest.raw_input = entry.raw_input
                latest.processed_status = payload
                latest.version = current_version + 1

            self.db.commit()
        except StaleWriteError:
            self.db.rollback()
            raise
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.error("status_persist_failed", user_id=user_id, error=str(exc))
            raise PersistenceFailureError(
                f"Could not store status for user {user_id}.",
                details={"user_id": user_id},
            ) from exc

        logger.info("status_stored", user_id=user_id, version=current_version + 1)
        return entry.model_copy(update={"timestamp": to_iso(timestamp)})

    def purge_all(self, user_id: str) -> int:
        """Delete everything stored for the user. Idempotent."""
        try:
            deleted = 0
            for stmt in (
                delete(StatusHistory).where(StatusHistory.user_id == user_id),
                delete(LatestStatus).where(LatestStatus.user_id == user_id),
                delete(UserProfile).where(UserProfile.user_id == user_id),
                delete(StatusTemplate).where(StatusTemplate.user_id == user_id),
                delete(Activity).where(Activity.creator == user_id),
            ):
                result = self.db.execute(stmt.execution_options(synchronize_session=False))
                deleted += result.rowcount or 0
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise StorageError(
                f"Could not purge data for user {user_id}.",
                details={"user_id": user_id},
            ) from exc

        logger.info("user_data_purged", user_id=user_id, deleted=deleted)
        return deleted

