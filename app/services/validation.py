"""
Validation / repair of completion output.

parse_status_json(raw)                -> StatusSnapshot  (raises MalformedResultError)
validate_and_repair(raw, text)        -> StatusSnapshot  (never raises)
create_fallback_status(text, reason)  -> StatusSnapshot

Parsing tries, in order: the whole text, a ```json fenced block, and the
span from the first "{" to the last "}". Whatever parses must be a JSON
object; the lenient snapshot model fills in missing arrays.
"""
from __future__ import annotations

import json
import re
from typing import Any, Optional

import structlog
from pydantic import ValidationError

from app.core.errors import MalformedResultError
from app.schemas.snapshot import StatusSnapshot

logger = structlog.get_logger(__name__)

_FENCED_RE = re.compile(r"```(?:json)?\s*([\s\S]*?)\s*```", re.IGNORECASE)

FALLBACK_ACCENT = "#FEE75C"
FALLBACK_EMOJI = "⚠️"


def _candidates(text: str) -> list[str]:
    found = [text]
    fenced = _FENCED_RE.search(text)
    if fenced and fenced.group(1).strip():
        found.append(fenced.group(1))
    start, end = text.find("{"), text.rfind("}")
    if start != -1 and end > start:
        found.append(text[start:end + 1])
    return found


def _load_first(candidates: list[str]) -> Any:
    for candidate in candidates:
        try:
            return json.loads(candidate)
        except (ValueError, RecursionError):
            continue
    raise ValueError("no candidate parsed")


def parse_status_json(raw: Optional[str]) -> StatusSnapshot:
    if not isinstance(raw, str) or not raw.strip():
        raise MalformedResultError(MalformedResultError.EMPTY_RESPONSE)

    text = raw.strip()
    candidates = _candidates(text)
    try:
        data = _load_first(candidates)
    except ValueError:
        # Something object-like was present but nothing parsed.
        if "{" in text:
            raise MalformedResultError(MalformedResultError.MALFORMED_JSON)
        raise MalformedResultError(MalformedResultError.NO_JSON_FOUND)

    if not isinstance(data, dict):
        raise MalformedResultError(MalformedResultError.INVALID_SHAPE)
    try:
        return StatusSnapshot.model_validate(data)
    except ValidationError:
        raise MalformedResultError(MalformedResultError.INVALID_SHAPE)


def create_fallback_status(text: str, reason: str = "Processing failed") -> StatusSnapshot:
    """Deterministic, always-valid snapshot describing why analysis failed."""
    logger.warning("fallback_status_created", reason=reason, text_length=len(text or ""))
    return StatusSnapshot(
        overall_status="Analysis Failed",
        mood_emoji=FALLBACK_EMOJI,
        visual_theme="default",
        accent_color=FALLBACK_ACCENT,
        metrics=[{
            "name": "Processing Status",
            "value": "Failed",
            "value_rating": 1,
            "trend": "new",
            "icon": "⚙️",
        }],
        highlights=[{
            "type": "state",
            "description": f"Failed to analyze status update. Reason: {reason}",
            "timeframe": "current",
            "is_new": True,
        }],
        persistent_context=[],
        personal_states=[],
        narrative_summary=f"Analysis failed. {reason}",
        errors=[f"LLM Processing Error: {reason}"],
    )


def validate_and_repair(raw: Optional[str], original_text: str) -> StatusSnapshot:
    try:
        snapshot = parse_status_json(raw)
    except MalformedResultError as exc:
        logger.warning("completion_output_rejected", kind=exc.kind)
        return create_fallback_status(original_text, exc.message)
    logger.info("completion_output_parsed", metrics=len(snapshot.metrics))
    return snapshot
