"""
Relevance model: linear time decay of prior context.

    score = max(0, 1 - hours_elapsed / span_hours)

`span_hours` depends on the semantic category of the element. Metrics are
categorised by a pluggable classifier (keyword match on the metric name by
default), highlights by their own `type`, and persistent context is always
treated as `activity` because it represents longer-lived state.

Public API
----------
decay_score(hours_elapsed, category)                     -> float
classify_metric(name)                                    -> RelevanceCategory
calculate_context_relevance(entry, now, metric_classifier) -> StoredStatusEntry
"""
from __future__ import annotations

import enum
from datetime import datetime
from typing import Callable, Optional

import structlog

from app.schemas.snapshot import StoredStatusEntry
from app.services.elapsed import hours_between, parse_timestamp, utcnow

logger = structlog.get_logger(__name__)


class RelevanceCategory(str, enum.Enum):
    physical = "physical"
    emotional = "emotional"
    activity = "activity"
    event = "event"
    state = "state"
    need = "need"
    achievement = "achievement"
    default = "default"


# Hours after which an element of the category scores 0.
DECAY_SPAN_HOURS: dict[RelevanceCategory, float] = {
    RelevanceCategory.physical: 6.0,
    RelevanceCategory.emotional: 12.0,
    RelevanceCategory.state: 12.0,
    RelevanceCategory.event: 24.0,
    RelevanceCategory.activity: 36.0,
    RelevanceCategory.need: 8.0,
    RelevanceCategory.achievement: 48.0,
    RelevanceCategory.default: 18.0,
}

# Checked in order; the first keyword set with a substring hit wins.
METRIC_KEYWORDS: list[tuple[RelevanceCategory, tuple[str, ...]]] = [
    (RelevanceCategory.physical, ("energy", "hunger", "sleep", "tired", "physical")),
    (RelevanceCategory.emotional, ("focus", "mood", "stress", "feeling")),
    (RelevanceCategory.activity, ("project", "work", "task", "progress", "coding", "writing")),
]

MetricClassifier = Callable[[str], RelevanceCategory]


def to_category(value: Optional[str]) -> RelevanceCategory:
    """Map a free-form type string onto a category, `default` if unknown."""
    if not value:
        return RelevanceCategory.default
    key = str(value).strip().lower()
    if key in RelevanceCategory.__members__:
        return RelevanceCategory(key)
    return RelevanceCategory.default


def classify_metric(name: Optional[str]) -> RelevanceCategory:
    lower = (name or "").lower()
    for category, keywords in METRIC_KEYWORDS:
        if any(keyword in lower for keyword in keywords):
            return category
    return RelevanceCategory.default


def decay_score(hours_elapsed: float, category: RelevanceCategory | str) -> float:
    span = DECAY_SPAN_HOURS[to_category(category)]
    return max(0.0, 1.0 - abs(hours_elapsed) / span)


def calculate_context_relevance(
    entry: Optional[StoredStatusEntry],
    now: Optional[datetime] = None,
    metric_classifier: MetricClassifier = classify_metric,
) -> Optional[StoredStatusEntry]:
    """
    Return a copy of `entry` whose metrics, highlights and persistent
    context carry a `relevance_score`.

    When the entry's timestamp cannot be parsed the entry is returned
    unscored; the context filter keeps unscored elements.
    """
    if entry is None:
        return None

    previous_time = parse_timestamp(entry.timestamp)
    if previous_time is None:
        logger.warning("relevance_unscorable_timestamp", timestamp=entry.timestamp)
        return entry

    hours = hours_between(previous_time, now or utcnow())
    status = entry.processed_status

    metrics = [
        m.model_copy(update={"relevance_score": decay_score(hours, metric_classifier(m.name))})
        for m in status.metrics
    ]
    highlights = [
        h.model_copy(update={"relevance_score": decay_score(hours, to_category(h.type))})
        for h in status.highlights
    ]
    persistent = [
        p.model_copy(update={"relevance_score": decay_score(hours, RelevanceCategory.activity)})
        for p in status.persistent_context
    ]

    logger.debug(
        "relevance_calculated",
        hours_elapsed=round(hours, 2),
        metrics=len(metrics),
        highlights=len(highlights),
        persistent_context=len(persistent),
    )
    return entry.model_copy(update={
        "processed_status": status.model_copy(update={
            "metrics": metrics,
            "highlights": highlights,
            "persistent_context": persistent,
        }),
    })
