"""
Tests for the lenient StatusSnapshot model.
"""
from __future__ import annotations

import pytest

from app.schemas.snapshot import (
    Highlight,
    Metric,
    PersonalState,
    StatusSnapshot,
    StoredStatusEntry,
    parse_level,
)


class TestParseLevel:
    @pytest.mark.parametrize("value,expected", [
        (3, 3),
        (4.6, 5),
        ("2", 2),
        ("4/5", 4),
        ("level 3", 3),
        (9, 5),
        (0, 1),
        (-2, 1),
        ("high", None),
        (None, None),
        (True, None),
        ([3], None),
        (float("inf"), None),
        (float("-inf"), None),
        (float("nan"), None),
        ("1" + "0" * 400, None),
        (10 ** 400, 5),
    ])
    def test_values(self, value, expected):
        assert parse_level(value) == expected


class TestCoercion:
    def test_unknown_theme_becomes_default(self):
        assert StatusSnapshot(visual_theme="party").visual_theme == "default"
        assert StatusSnapshot(visual_theme="GAMING").visual_theme == "gaming"
        assert StatusSnapshot(visual_theme=None).visual_theme == "default"
        assert StatusSnapshot().visual_theme == "default"

    def test_null_and_non_list_arrays_become_empty(self):
        snapshot = StatusSnapshot(metrics=None, highlights="oops", personal_states={"a": 1})
        assert snapshot.metrics == []
        assert snapshot.highlights == []
        assert snapshot.personal_states == []

    def test_non_object_members_are_dropped(self):
        snapshot = StatusSnapshot(metrics=["Energy", {"name": "Focus"}, 3])
        assert [m.name for m in snapshot.metrics] == ["Focus"]

    def test_text_fields_tolerate_null_and_numbers(self):
        snapshot = StatusSnapshot(overall_status=None, narrative_summary=42)
        assert snapshot.overall_status == ""
        assert snapshot.narrative_summary == "42"

    def test_metric_enum_values(self):
        assert Metric(trend="Improved").trend == "improved"
        assert Metric(trend="up").trend is None
        assert Metric(value=80).value == "80"

    def test_highlight_fields(self):
        highlight = Highlight(type="Blocker", timeframe="someday", is_new="true")
        assert highlight.type == "blocker"
        assert highlight.timeframe is None
        assert highlight.is_new is True
        assert Highlight(is_new="false").is_new is False

    def test_personal_state_blank_time_is_none(self):
        assert PersonalState(name="Hunger", time_since_last="  ").time_since_last is None
        assert PersonalState(name="Hunger", trend="rising").trend is None

    def test_errors_normalised(self):
        assert StatusSnapshot(errors="bad").errors == ["bad"]
        assert StatusSnapshot(errors=[None, "", "kept", 5]).errors == ["kept", "5"]
        assert StatusSnapshot(errors=None).errors == []


class TestStoredEntry:
    def test_relevance_score_not_serialized(self):
        entry = StoredStatusEntry(
            timestamp="2026-10-18T12:00:00+00:00",
            raw_input="hi",
            processed_status=StatusSnapshot(metrics=[{"name": "Energy"}]),
        )
        scored = entry.model_copy(update={
            "processed_status": entry.processed_status.model_copy(update={
                "metrics": [entry.processed_status.metrics[0].model_copy(update={"relevance_score": 0.4})],
            }),
        })

        dumped = scored.model_dump()
        assert "relevance_score" not in dumped["processed_status"]["metrics"][0]
        reloaded = StoredStatusEntry.model_validate_json(scored.model_dump_json())
        assert reloaded.model_dump() == entry.model_dump()
        assert reloaded.processed_status.metrics[0].relevance_score is None
