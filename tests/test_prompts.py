"""
Tests for prompt composition.
"""
from __future__ import annotations

import json
from datetime import datetime, timezone

from app.schemas.snapshot import StatusSnapshot, StoredStatusEntry
from app.services.prompts import (
    PERSONAL_STATE_EMOJIS,
    build_system_prompt,
    format_user_input,
)

NOW = datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc)


def _previous() -> StoredStatusEntry:
    return StoredStatusEntry(
        timestamp="2026-10-18T08:00:00Z",
        raw_input="hungry and coding ☕",
        processed_status=StatusSnapshot(
            overall_status="Coding",
            metrics=[{"name": "Focus", "value": "High"}],
        ),
    )


class TestSystemPrompt:
    def test_lists_every_personal_state_emoji(self):
        prompt = build_system_prompt(has_context=False)
        for emoji, _ in PERSONAL_STATE_EMOJIS:
            assert emoji in prompt

    def test_merge_rules_only_with_context(self):
        assert "merging context" not in build_system_prompt(has_context=False)
        assert "merging context" in build_system_prompt(has_context=True)

    def test_describes_response_schema(self):
        prompt = build_system_prompt(has_context=True)
        for field in ("overall_status", "personal_states", "persistent_context", "narrative_summary", "errors"):
            assert f'"{field}"' in prompt


class TestUserInput:
    def test_without_previous(self):
        text = format_user_input("Just woke up", None, NOW)
        assert text.startswith("PREVIOUS STATUS CONTEXT: None provided.")
        assert "CURRENT TIME (UTC): 2026-10-18T12:00:00+00:00" in text
        assert text.endswith("CURRENT STATUS UPDATE:\nJust woke up")

    def test_with_previous(self):
        text = format_user_input("Still coding", _previous(), NOW)

        assert "PREVIOUS STATUS CONTEXT (from 2026-10-18T08:00:00+00:00):" in text
        assert "PREVIOUS RAW INPUT (from 2026-10-18T08:00:00+00:00):\nhungry and coding ☕" in text
        assert text.index("PREVIOUS STATUS CONTEXT") < text.index("CURRENT TIME") < text.index("CURRENT STATUS UPDATE")

    def test_previous_snapshot_is_embedded_as_json(self):
        text = format_user_input("Still coding", _previous(), NOW)
        block = text.split("```json\n", 1)[1].split("\n```", 1)[0]
        data = json.loads(block)
        assert data["overall_status"] == "Coding"
        assert data["metrics"][0]["name"] == "Focus"

    def test_relevance_scores_are_not_sent(self):
        previous = _previous()
        scored = previous.model_copy(update={
            "processed_status": previous.processed_status.model_copy(update={
                "metrics": [previous.processed_status.metrics[0].model_copy(update={"relevance_score": 0.6})],
            }),
        })
        assert "relevance_score" not in format_user_input("x", scored, NOW)

    def test_unparseable_previous_timestamp_shown_verbatim(self):
        previous = _previous().model_copy(update={"timestamp": "last tuesday"})
        assert "PREVIOUS STATUS CONTEXT (from last tuesday):" in format_user_input("x", previous, NOW)
