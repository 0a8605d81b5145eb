"""
Personal-state reconciliation.

Only the states produced by the current extraction survive. Each is
matched by exact name against the previous snapshot and annotated with:

- trend: new / increasing / decreasing / stable (stable when either level
  is missing, since the levels cannot be compared);
- time_since_last: the extraction's own value when it supplies one,
  otherwise the previous value aged by the wall-clock gap between the
  two updates, otherwise left empty.

States present before but absent now are dropped.
"""
from __future__ import annotations

from datetime import datetime, timedelta
from typing import Optional, Sequence

import structlog

from app.schemas.snapshot import PersonalState, StateTrend
from app.services.elapsed import add_elapsed, parse_timestamp, utcnow

logger = structlog.get_logger(__name__)


def level_trend(previous: Optional[int], current: Optional[int]) -> str:
    if previous is None or current is None:
        return StateTrend.stable.value
    if current > previous:
        return StateTrend.increasing.value
    if current < previous:
        return StateTrend.decreasing.value
    return StateTrend.stable.value


def mark_all_new(states: Sequence[PersonalState]) -> list[PersonalState]:
    """First update for a user: every state is new."""
    return [s.model_copy(update={"trend": StateTrend.new.value}) for s in states]


def _reconcile_time(
    current: PersonalState,
    previous: PersonalState,
    gap: Optional[timedelta],
) -> Optional[str]:
    if current.time_since_last:
        return current.time_since_last
    if not previous.time_since_last or gap is None:
        return None
    aged = add_elapsed(previous.time_since_last, gap)
    if aged is None:
        # Unparseable previous value ("unknown", free text): carry it as-is.
        logger.info(
            "personal_state_time_not_aged",
            state=current.name,
            previous=previous.time_since_last,
        )
        return previous.time_since_last
    return aged


def reconcile_personal_states(
    previous_states: Sequence[PersonalState],
    current_states: Sequence[PersonalState],
    previous_timestamp: Optional[str],
    now: Optional[datetime] = None,
) -> list[PersonalState]:
    by_name = {s.name: s for s in previous_states if s.name}

    previous_time = parse_timestamp(previous_timestamp)
    gap = abs((now or utcnow()) - previous_time) if previous_time else None

    reconciled: list[PersonalState] = []
    for state in current_states:
        if not state.name:
            reconciled.append(state)
            continue

        previous = by_name.get(state.name)
        if previous is None:
            reconciled.append(state.model_copy(update={"trend": StateTrend.new.value}))
            continue

        reconciled.append(state.model_copy(update={
            "trend": level_trend(previous.level, state.level),
            "time_since_last": _reconcile_time(state, previous, gap),
        }))

    logger.debug(
        "personal_states_reconciled",
        current=len(current_states),
        matched=sum(1 for s in current_states if s.name in by_name),
    )
    return reconciled
