"""
Tests for the context filter: threshold semantics and threshold validation.
"""
from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from app.schemas.snapshot import StatusSnapshot, StoredStatusEntry
from app.services.context_filter import (
    DEFAULT_THRESHOLD,
    filter_relevant_context,
    normalize_threshold,
)
from app.services.relevance import calculate_context_relevance

NOW = datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc)


def _scored(hours_ago: float) -> StoredStatusEntry:
    entry = StoredStatusEntry(
        timestamp=(NOW - timedelta(hours=hours_ago)).isoformat(),
        raw_input="tired, hungry, coding the dashboard",
        processed_status=StatusSnapshot(
            metrics=[
                {"name": "Energy", "value": "Low"},
                {"name": "Focus", "value": "Medium"},
                {"name": "Project Progress", "value": "40%"},
            ],
            highlights=[
                {"type": "need", "description": "Need food"},
                {"type": "activity", "description": "Coding the dashboard"},
            ],
            persistent_context=[{"description": "Recovering from a cold"}],
        ),
    )
    return calculate_context_relevance(entry, NOW)


class TestFilterRelevantContext:
    def test_none_passes_through(self):
        assert filter_relevant_context(None, 0.3) is None

    def test_eight_hours_drops_fast_decaying_items(self):
        result = filter_relevant_context(_scored(8), 0.3).processed_status

        assert [m.name for m in result.metrics] == ["Focus", "Project Progress"]
        assert [h.description for h in result.highlights] == ["Coding the dashboard"]
        assert len(result.persistent_context) == 1

    def test_every_retained_item_meets_threshold(self):
        for hours in (0, 1, 5, 11, 20, 30, 40):
            for threshold in (0.0, 0.1, 0.3, 0.5, 0.9):
                status = filter_relevant_context(_scored(hours), threshold).processed_status
                for item in [*status.metrics, *status.highlights, *status.persistent_context]:
                    assert item.relevance_score >= threshold

    def test_score_equal_to_threshold_is_kept(self):
        # Energy at 3h: 1 - 3/6 == 0.5
        result = filter_relevant_context(_scored(3), 0.5).processed_status
        assert "Energy" in [m.name for m in result.metrics]

    def test_threshold_one_keeps_only_fresh_items(self):
        result = filter_relevant_context(_scored(0), 1.0).processed_status
        assert len(result.metrics) == 3

    def test_everything_dropped_after_longest_span(self):
        result = filter_relevant_context(_scored(40), 0.3).processed_status
        assert result.metrics == []
        assert result.highlights == []
        assert result.persistent_context == []

    def test_non_scored_fields_are_preserved(self):
        scored = _scored(8)
        scored = scored.model_copy(update={
            "processed_status": scored.processed_status.model_copy(update={"narrative_summary": "kept"}),
        })
        result = filter_relevant_context(scored, 0.3)
        assert result.processed_status.narrative_summary == "kept"
        assert result.raw_input == scored.raw_input
        assert result.timestamp == scored.timestamp

    def test_unscored_items_are_kept(self):
        entry = StoredStatusEntry(
            timestamp="garbage",
            raw_input="x",
            processed_status=StatusSnapshot(metrics=[{"name": "Energy"}]),
        )
        result = filter_relevant_context(calculate_context_relevance(entry, NOW), 0.9)
        assert len(result.processed_status.metrics) == 1

    def test_input_is_not_modified(self):
        scored = _scored(8)
        filter_relevant_context(scored, 0.3)
        assert len(scored.processed_status.metrics) == 3


class TestNormalizeThreshold:
    @pytest.mark.parametrize("value", [0, 0.0, 0.3, 0.75, 1, 1.0])
    def test_valid_values_pass(self, value):
        assert normalize_threshold(value) == float(value)

    @pytest.mark.parametrize("value", [-0.1, 1.01, 5, "0.5", None, True, [0.3]])
    def test_invalid_values_fall_back_to_default(self, value):
        assert normalize_threshold(value) == DEFAULT_THRESHOLD

    def test_invalid_threshold_still_filters(self):
        result = filter_relevant_context(_scored(8), threshold=7).processed_status
        assert [m.name for m in result.metrics] == ["Focus", "Project Progress"]
