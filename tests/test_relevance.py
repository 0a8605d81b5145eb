"""
Tests for the relevance model: linear decay by category, metric keyword
classification and scoring of a stored entry.
"""
from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from app.schemas.snapshot import StatusSnapshot, StoredStatusEntry
from app.services.relevance import (
    DECAY_SPAN_HOURS,
    RelevanceCategory,
    calculate_context_relevance,
    classify_metric,
    decay_score,
    to_category,
)

NOW = datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc)


def _entry(hours_ago: float, **snapshot) -> StoredStatusEntry:
    return StoredStatusEntry(
        timestamp=(NOW - timedelta(hours=hours_ago)).isoformat(),
        raw_input="previous update",
        processed_status=StatusSnapshot(**snapshot),
    )


# ---------------------------------------------------------------------------
# decay_score
# ---------------------------------------------------------------------------

class TestDecayScore:
    @pytest.mark.parametrize("category", list(RelevanceCategory))
    def test_fresh_context_scores_one(self, category):
        assert decay_score(0, category) == 1.0

    @pytest.mark.parametrize("category", list(RelevanceCategory))
    def test_score_is_zero_at_and_after_span(self, category):
        span = DECAY_SPAN_HOURS[category]
        assert decay_score(span, category) == 0.0
        assert decay_score(span * 3, category) == 0.0

    @pytest.mark.parametrize("category", list(RelevanceCategory))
    def test_score_never_increases_with_time(self, category):
        scores = [decay_score(h / 2, category) for h in range(0, 120)]
        assert all(a >= b for a, b in zip(scores, scores[1:]))

    def test_spans_match_category_lifetimes(self):
        assert decay_score(3, "physical") == pytest.approx(0.5)
        assert decay_score(6, "emotional") == pytest.approx(0.5)
        assert decay_score(18, "activity") == pytest.approx(0.5)
        assert decay_score(12, "event") == pytest.approx(0.5)
        assert decay_score(4, "need") == pytest.approx(0.5)
        assert decay_score(24, "achievement") == pytest.approx(0.5)
        assert decay_score(9, "default") == pytest.approx(0.5)

    def test_negative_elapsed_uses_magnitude(self):
        assert decay_score(-3, "physical") == pytest.approx(decay_score(3, "physical"))

    def test_unknown_category_uses_default_span(self):
        assert decay_score(9, "blocker") == pytest.approx(0.5)


# ---------------------------------------------------------------------------
# Classification
# ---------------------------------------------------------------------------

class TestClassifyMetric:
    @pytest.mark.parametrize("name,expected", [
        ("Energy", RelevanceCategory.physical),
        ("Sleep quality", RelevanceCategory.physical),
        ("Tiredness", RelevanceCategory.physical),
        ("Focus", RelevanceCategory.emotional),
        ("MOOD", RelevanceCategory.emotional),
        ("Stress level", RelevanceCategory.emotional),
        ("Project Progress", RelevanceCategory.activity),
        ("Coding streak", RelevanceCategory.activity),
        ("Homework", RelevanceCategory.activity),
        ("Caffeine", RelevanceCategory.default),
        ("", RelevanceCategory.default),
    ])
    def test_keyword_sets(self, name, expected):
        assert classify_metric(name) == expected

    def test_physical_keywords_win_over_later_sets(self):
        # "energy" (physical) and "work" (activity) both match
        assert classify_metric("Work energy") == RelevanceCategory.physical

    def test_to_category_is_case_insensitive(self):
        assert to_category("Achievement") == RelevanceCategory.achievement
        assert to_category(None) == RelevanceCategory.default
        assert to_category("blocker") == RelevanceCategory.default


# ---------------------------------------------------------------------------
# calculate_context_relevance
# ---------------------------------------------------------------------------

class TestCalculateContextRelevance:
    def test_none_entry_returns_none(self):
        assert calculate_context_relevance(None, NOW) is None

    def test_eight_hour_old_context(self):
        entry = _entry(
            8,
            metrics=[{"name": "Energy", "value": "Low"}],
            highlights=[{"type": "activity", "description": "Building the dashboard"}],
        )
        scored = calculate_context_relevance(entry, NOW)

        assert scored.processed_status.metrics[0].relevance_score == 0.0
        assert scored.processed_status.highlights[0].relevance_score == pytest.approx(1 - 8 / 36)

    def test_highlight_category_comes_from_type(self):
        entry = _entry(4, highlights=[
            {"type": "need", "description": "Need coffee"},
            {"type": "achievement", "description": "Shipped v1"},
            {"type": "blocker", "description": "Waiting for review"},
        ])
        scores = [h.relevance_score for h in calculate_context_relevance(entry, NOW).processed_status.highlights]
        assert scores == pytest.approx([0.5, 1 - 4 / 48, 1 - 4 / 18])

    def test_persistent_context_decays_as_activity(self):
        entry = _entry(18, persistent_context=[{"description": "Ongoing project: dashboard"}])
        item = calculate_context_relevance(entry, NOW).processed_status.persistent_context[0]
        assert item.relevance_score == pytest.approx(0.5)

    def test_custom_classifier_is_used(self):
        entry = _entry(3, metrics=[{"name": "Energy"}])
        scored = calculate_context_relevance(entry, NOW, metric_classifier=lambda _: RelevanceCategory.achievement)
        assert scored.processed_status.metrics[0].relevance_score == pytest.approx(1 - 3 / 48)

    def test_future_timestamp_is_treated_as_elapsed_magnitude(self):
        entry = _entry(-2, metrics=[{"name": "Energy"}])
        scored = calculate_context_relevance(entry, NOW)
        assert scored.processed_status.metrics[0].relevance_score == pytest.approx(1 - 2 / 6)

    def test_unparseable_timestamp_leaves_items_unscored(self):
        entry = StoredStatusEntry(
            timestamp="sometime yesterday",
            raw_input="x",
            processed_status=StatusSnapshot(metrics=[{"name": "Energy"}]),
        )
        scored = calculate_context_relevance(entry, NOW)
        assert scored.processed_status.metrics[0].relevance_score is None

    def test_input_entry_is_not_modified(self):
        entry = _entry(8, metrics=[{"name": "Energy"}])
        calculate_context_relevance(entry, NOW)
        assert entry.processed_status.metrics[0].relevance_score is None

    def test_scores_never_serialized(self):
        entry = _entry(2, metrics=[{"name": "Energy"}])
        scored = calculate_context_relevance(entry, NOW)
        assert "relevance_score" not in scored.model_dump_json()
