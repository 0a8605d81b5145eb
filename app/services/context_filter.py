"""
Context filter: drop prior-context elements whose relevance has decayed
below a threshold.

An element is kept when its `relevance_score` is at least the threshold.
Elements without a score (the relevance model could not read the source
timestamp) are kept rather than silently lost.
"""
from __future__ import annotations

from typing import Optional, Sequence, TypeVar

import structlog

from app.schemas.snapshot import StoredStatusEntry, ScoredItem

logger = structlog.get_logger(__name__)

DEFAULT_THRESHOLD = 0.3

_T = TypeVar("_T", bound=ScoredItem)


def _keep(items: Sequence[_T], threshold: float) -> list[_T]:
    return [
        item for item in items
        if item.relevance_score is None or item.relevance_score >= threshold
    ]


def normalize_threshold(threshold: object) -> float:
    if (
        isinstance(threshold, bool)
        or not isinstance(threshold, (int, float))
        or not 0.0 <= threshold <= 1.0
    ):
        logger.warning("invalid_relevance_threshold", threshold=threshold, using=DEFAULT_THRESHOLD)
        return DEFAULT_THRESHOLD
    return float(threshold)


def filter_relevant_context(
    scored: Optional[StoredStatusEntry],
    threshold: float = DEFAULT_THRESHOLD,
) -> Optional[StoredStatusEntry]:
    """Return a new entry holding only the still-relevant elements."""
    if scored is None:
        return None

    threshold = normalize_threshold(threshold)
    status = scored.processed_status
    metrics = _keep(status.metrics, threshold)
    highlights = _keep(status.highlights, threshold)
    persistent = _keep(status.persistent_context, threshold)

    logger.info(
        "context_filtered",
        threshold=threshold,
        kept_metrics=len(metrics),
        kept_highlights=len(highlights),
        kept_persistent_context=len(persistent),
    )
    return scored.model_copy(update={
        "processed_status": status.model_copy(update={
            "metrics": metrics,
            "highlights": highlights,
            "persistent_context": persistent,
        }),
    })
