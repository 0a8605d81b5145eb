"""
StatusSnapshot data contract.

A snapshot is what one status update turns into. The models are lenient on
input because they are fed LLM output: unknown enum values degrade to a
neutral value, `null` arrays become empty arrays and non-object array
members are dropped, instead of rejecting the whole snapshot.

`relevance_score` is a scratch annotation computed at read time. It is
declared with `exclude=True`, so it never reaches storage or API output.
"""
from __future__ import annotations

import enum
import math
import re
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

_INT_RE = re.compile(r"-?\d+(?:\.\d+)?")


class VisualTheme(str, enum.Enum):
    work = "work"
    gaming = "gaming"
    social = "social"
    rest = "rest"
    creative = "creative"
    learning = "learning"
    default = "default"


class MetricTrend(str, enum.Enum):
    improved = "improved"
    worsened = "worsened"
    unchanged = "unchanged"
    new = "new"


class HighlightType(str, enum.Enum):
    activity = "activity"
    event = "event"
    state = "state"
    need = "need"
    achievement = "achievement"
    blocker = "blocker"


class Timeframe(str, enum.Enum):
    past = "past"
    current = "current"
    future = "future"
    ongoing = "ongoing"


class StateTrend(str, enum.Enum):
    increasing = "increasing"
    decreasing = "decreasing"
    stable = "stable"
    new = "new"


# ---------------------------------------------------------------------------
# Coercion helpers
# ---------------------------------------------------------------------------

def _text(v: Any) -> str:
    if v is None:
        return ""
    return v if isinstance(v, str) else str(v)


def _enum_or_none(enum_cls: type[enum.Enum], v: Any) -> Optional[str]:
    if not isinstance(v, str):
        return None
    key = v.strip().lower()
    return key if key in enum_cls.__members__ else None


def parse_level(v: Any) -> Optional[int]:
    """Read a 1..5 intensity out of an int, float or text like "3" / "4/5"."""
    if isinstance(v, bool) or v is None:
        return None
    if isinstance(v, int):
        return max(1, min(5, v))
    if isinstance(v, float):
        number = v
    elif isinstance(v, str):
        match = _INT_RE.search(v)
        if not match:
            return None
        number = float(match.group(0))
    else:
        return None
    if not math.isfinite(number):
        return None
    return max(1, min(5, int(round(number))))


def _object_list(v: Any) -> list:
    if not isinstance(v, list):
        return []
    return [item for item in v if isinstance(item, (dict, BaseModel))]


# ---------------------------------------------------------------------------
# Array members
# ---------------------------------------------------------------------------

class ScoredItem(BaseModel):
    model_config = ConfigDict(use_enum_values=True)

    relevance_score: Optional[float] = Field(default=None, exclude=True)


class Metric(ScoredItem):
    name: str = ""
    value: str = ""
    value_rating: Optional[int] = None
    trend: Optional[MetricTrend] = None
    icon: str = ""

    @field_validator("name", "value", "icon", mode="before")
    @classmethod
    def coerce_text(cls, v: Any) -> str:
        return _text(v)

    @field_validator("value_rating", mode="before")
    @classmethod
    def coerce_rating(cls, v: Any) -> Optional[int]:
        return parse_level(v)

    @field_validator("trend", mode="before")
    @classmethod
    def coerce_trend(cls, v: Any) -> Optional[str]:
        return _enum_or_none(MetricTrend, v)


class Highlight(ScoredItem):
    type: Optional[HighlightType] = None
    description: str = ""
    timeframe: Optional[Timeframe] = None
    is_new: bool = False

    @field_validator("description", mode="before")
    @classmethod
    def coerce_text(cls, v: Any) -> str:
        return _text(v)

    @field_validator("type", mode="before")
    @classmethod
    def coerce_type(cls, v: Any) -> Optional[str]:
        return _enum_or_none(HighlightType, v)

    @field_validator("timeframe", mode="before")
    @classmethod
    def coerce_timeframe(cls, v: Any) -> Optional[str]:
        return _enum_or_none(Timeframe, v)

    @field_validator("is_new", mode="before")
    @classmethod
    def coerce_flag(cls, v: Any) -> bool:
        if isinstance(v, str):
            return v.strip().lower() == "true"
        return bool(v)


class ContextItem(ScoredItem):
    description: str = ""
    from_previous: bool = True
    source_timestamp: Optional[str] = None

    @field_validator("description", mode="before")
    @classmethod
    def coerce_text(cls, v: Any) -> str:
        return _text(v)

    @field_validator("source_timestamp", mode="before")
    @classmethod
    def coerce_timestamp(cls, v: Any) -> Optional[str]:
        return None if v is None else _text(v)


class PersonalState(BaseModel):
    """A slowly-changing need or level, matched across updates by exact name."""
    model_config = ConfigDict(use_enum_values=True)

    name: str = ""
    emoji: str = ""
    level: Optional[int] = None
    time_since_last: Optional[str] = None
    trend: Optional[StateTrend] = None

    @field_validator("name", "emoji", mode="before")
    @classmethod
    def coerce_text(cls, v: Any) -> str:
        return _text(v)

    @field_validator("level", mode="before")
    @classmethod
    def coerce_level(cls, v: Any) -> Optional[int]:
        return parse_level(v)

    @field_validator("time_since_last", mode="before")
    @classmethod
    def coerce_elapsed(cls, v: Any) -> Optional[str]:
        text = _text(v).strip()
        return text or None

    @field_validator("trend", mode="before")
    @classmethod
    def coerce_trend(cls, v: Any) -> Optional[str]:
        return _enum_or_none(StateTrend, v)


# ---------------------------------------------------------------------------
# Snapshot and stored entry
# ---------------------------------------------------------------------------

class StatusSnapshot(BaseModel):
    """Structured result of analyzing one status update."""
    model_config = ConfigDict(use_enum_values=True)

    overall_status: str = ""
    mood_emoji: str = ""
    visual_theme: VisualTheme = Field(default=VisualTheme.default, validate_default=True)
    accent_color: str = ""
    metrics: list[Metric] = Field(default_factory=list)
    highlights: list[Highlight] = Field(default_factory=list)
    persistent_context: list[ContextItem] = Field(default_factory=list)
    personal_states: list[PersonalState] = Field(default_factory=list)
    narrative_summary: str = ""
    errors: list[str] = Field(default_factory=list)

    @field_validator("overall_status", "mood_emoji", "accent_color", "narrative_summary", mode="before")
    @classmethod
    def coerce_text(cls, v: Any) -> str:
        return _text(v)

    @field_validator("visual_theme", mode="before")
    @classmethod
    def coerce_theme(cls, v: Any) -> str:
        return _enum_or_none(VisualTheme, v) or VisualTheme.default.value

    @field_validator("metrics", "highlights", "persistent_context", "personal_states", mode="before")
    @classmethod
    def coerce_objects(cls, v: Any) -> list:
        return _object_list(v)

    @field_validator("errors", mode="before")
    @classmethod
    def coerce_errors(cls, v: Any) -> list[str]:
        if isinstance(v, str):
            return [v] if v.strip() else []
        if not isinstance(v, list):
            return []
        return [_text(e) for e in v if e is not None and _text(e).strip()]


class StoredStatusEntry(BaseModel):
    """Durable wrapper around one snapshot. Never mutated after creation."""
    timestamp: str
    raw_input: str
    processed_status: StatusSnapshot = Field(default_factory=StatusSnapshot)
