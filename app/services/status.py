"""
Synthesis orchestrator: one status update, end to end.

Pipeline
--------
1. read the user's previous entry            (failure → no prior context)
2. score relevance and filter prior context
3. compose the system prompt and user input
4. call the completion client under a timeout (failure → fallback snapshot)
5. validate / repair the completion output    (never raises)
6. reconcile personal states against the previous snapshot
7. persist the new entry                      (failure → logged, stored=False)
8. apply profile emoji overrides, detect an activity, render

Only InputError and unexpected exceptions leave process_status_update;
run_status_update wraps the unexpected ones in StatusProcessingError.
"""
from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

import structlog
from sqlalchemy.orm import Session
from structlog.contextvars import bound_contextvars

from app.core.config import settings
from app.core.errors import (
    CompletionFailureError,
    InputError,
    StatusAppException,
    StatusProcessingError,
    StorageError,
)
from app.schemas.profile import ProfileOut
from app.schemas.snapshot import StatusSnapshot, StoredStatusEntry
from app.services.activity import ActivityStore, detect_activity
from app.services.context_filter import DEFAULT_THRESHOLD, filter_relevant_context
from app.services.elapsed import to_iso, utcnow
from app.services.llm import CompletionClient
from app.services.profile import ProfileStore, apply_custom_emojis, default_profile
from app.services.prompts import build_system_prompt, format_user_input
from app.services.relevance import calculate_context_relevance
from app.services.rendering import render_status_message
from app.services.state_tracker import mark_all_new, reconcile_personal_states
from app.services.storage import StatusStore
from app.services.validation import create_fallback_status, validate_and_repair

logger = structlog.get_logger(__name__)


@dataclass
class StatusUpdateResult:
    user_id: str
    timestamp: str
    snapshot: StatusSnapshot                       # as stored (no display overrides)
    display_snapshot: StatusSnapshot               # with profile overrides applied
    stored: bool
    previous: Optional[StoredStatusEntry] = None
    profile: Optional[ProfileOut] = None
    activity_id: Optional[str] = None
    message: dict = field(default_factory=dict)


# ---------------------------------------------------------------------------
# Steps
# ---------------------------------------------------------------------------

def _validate_input(status_text: object, user_id: object) -> tuple[str, str]:
    if not isinstance(user_id, str) or not user_id.strip():
        raise InputError("A user identifier is required.", field="user_id")
    if not isinstance(status_text, str) or not status_text.strip():
        raise InputError("Status text must not be empty.", field="status_text")
    return status_text.strip(), user_id.strip()


def _load_previous(
    store: StatusStore, user_id: str, strict_ordering: bool,
) -> tuple[Optional[StoredStatusEntry], Optional[int]]:
    """Previous entry and, under strict ordering, the version it was read at."""
    try:
        version = store.get_latest_version(user_id) if strict_ordering else None
        previous = store.get_latest(user_id)
    except StorageError as exc:
        logger.warning("previous_status_unavailable", code=exc.code, error=exc.message)
        return None, None
    return previous, version


async def _complete(
    completion: CompletionClient,
    system_prompt: str,
    user_input: str,
    status_text: str,
    timeout: float,
) -> StatusSnapshot:
    try:
        raw = await asyncio.wait_for(completion.complete(system_prompt, user_input), timeout)
    except CompletionFailureError as exc:
        logger.warning("completion_unavailable", error=exc.message)
        return create_fallback_status(status_text, f"LLM Error: {exc.message}")
    except asyncio.TimeoutError:
        logger.warning("completion_timed_out", timeout=timeout)
        return create_fallback_status(
            status_text, f"LLM Error: completion timed out after {timeout:g}s"
        )
    except Exception as exc:
        # Clients other than LLMClient may raise raw transport errors.
        logger.warning("completion_unavailable", error=str(exc), exc_info=exc)
        return create_fallback_status(status_text, f"LLM Error: {exc}")
    return validate_and_repair(raw, status_text)


def _reconcile(
    snapshot: StatusSnapshot,
    previous: Optional[StoredStatusEntry],
    now: datetime,
) -> StatusSnapshot:
    if previous is None:
        states = mark_all_new(snapshot.personal_states)
    else:
        states = reconcile_personal_states(
            previous.processed_status.personal_states,
            snapshot.personal_states,
            previous.timestamp,
            now,
        )
    return snapshot.model_copy(update={"personal_states": states})


def _persist(
    store: StatusStore,
    user_id: str,
    entry: StoredStatusEntry,
    history_limit: int,
    expected_version: Optional[int],
) -> bool:
    try:
        store.append_history(user_id, entry, history_limit, expected_version=expected_version)
    except StorageError as exc:
        logger.error("status_not_stored", code=exc.code, error=exc.message)
        return False
    return True


def _load_profile(profiles: Optional[ProfileStore], user_id: str) -> ProfileOut:
    if profiles is None:
        return default_profile(user_id)
    try:
        return profiles.get(user_id)
    except StorageError as exc:
        logger.warning("profile_unavailable", error=exc.message)
        return default_profile(user_id)


def _create_activity(
    activities: Optional[ActivityStore], user_id: str, snapshot: StatusSnapshot,
) -> Optional[str]:
    if activities is None:
        return None
    fields = detect_activity(snapshot)
    if fields is None:
        return None
    try:
        return activities.create(creator=user_id, **fields).id
    except StorageError as exc:
        logger.warning("activity_not_created", error=exc.message)
        return None


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

async def process_status_update(
    status_text: str,
    user_id: str,
    *,
    store: StatusStore,
    completion: CompletionClient,
    profiles: Optional[ProfileStore] = None,
    activities: Optional[ActivityStore] = None,
    threshold: float = DEFAULT_THRESHOLD,
    history_limit: int = 20,
    timeout: float = 30.0,
    strict_ordering: bool = False,
    now: Optional[datetime] = None,
) -> StatusUpdateResult:
    status_text, user_id = _validate_input(status_text, user_id)
    now = now or utcnow()

    with bound_contextvars(user_id=user_id):
        previous, expected_version = _load_previous(store, user_id, strict_ordering)

        usable = filter_relevant_context(calculate_context_relevance(previous, now), threshold)
        system_prompt = build_system_prompt(has_context=usable is not None)
        user_input = format_user_input(status_text, usable, now)

        snapshot = await _complete(completion, system_prompt, user_input, status_text, timeout)
        snapshot = _reconcile(snapshot, previous, now)

        entry = StoredStatusEntry(timestamp=to_iso(now), raw_input=status_text, processed_status=snapshot)
        stored = _persist(store, user_id, entry, history_limit, expected_version)

        profile = _load_profile(profiles, user_id)
        display = apply_custom_emojis(snapshot, profile.custom_emojis)
        activity_id = _create_activity(activities, user_id, snapshot)
        message = render_status_message(
            display, user_id, previous=previous, profile=profile, activity_id=activity_id, now=now,
        )

        logger.info(
            "status_update_processed",
            stored=stored,
            had_context=previous is not None,
            fallback=snapshot.overall_status == "Analysis Failed",
            activity_id=activity_id,
        )
        return StatusUpdateResult(
            user_id=user_id,
            timestamp=entry.timestamp,
            snapshot=snapshot,
            display_snapshot=display,
            stored=stored,
            previous=previous,
            profile=profile,
            activity_id=activity_id,
            message=message,
        )


async def run_status_update(
    db: Session,
    completion: CompletionClient,
    user_id: str,
    status_text: str,
) -> StatusUpdateResult:
    """
    Run the pipeline with configured limits and storage bound to `db`.

    Application errors pass through untouched; anything else is wrapped in
    StatusProcessingError so the HTTP layer answers with a typed envelope.
    """
    try:
        return await process_status_update(
            status_text,
            user_id,
            store=StatusStore(db),
            completion=completion,
            profiles=ProfileStore(db),
            activities=ActivityStore(db),
            threshold=settings.RELEVANCE_THRESHOLD,
            history_limit=settings.HISTORY_LIMIT,
            timeout=settings.LLM_TIMEOUT_SECONDS,
            strict_ordering=settings.STRICT_ORDERING,
        )
    except StatusAppException:
        raise
    except Exception as exc:
        logger.exception("status_update_failed", user_id=user_id)
        raise StatusProcessingError(
            "Unexpected error while processing status update.", user_id=user_id,
        ) from exc
