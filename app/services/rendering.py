"""
Rendering: turn a snapshot into a platform-neutral status message.

The payload is a plain dict (title, description, color, fields, footer,
actions) that a chat adapter or web client can lay out however it likes.
Rendering never mutates the snapshot it is given.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from app.schemas.profile import ProfileOut
from app.schemas.snapshot import StatusSnapshot, StoredStatusEntry, VisualTheme
from app.services.elapsed import relative_time, to_iso, utcnow

SEPARATOR = "━━━━━━━━━━━━━━━━━━━━"
MAX_ERRORS_TEXT = 1000


@dataclass(frozen=True)
class Theme:
    color: int
    emoji_prefix: str
    accent_bar: str
    progress_filled: str = "█"
    progress_empty: str = "░"


THEMES: dict[str, Theme] = {
    "work": Theme(0x4287F5, "💼", "━━━━ WORKING ━━━━"),
    "gaming": Theme(0x9C59B6, "🎮", "━━━━ GAMING ━━━━"),
    "social": Theme(0xF1C40F, "👋", "━━━━ SOCIALIZING ━━━━"),
    "rest": Theme(0x2ECC71, "😌", "━━━━ RESTING ━━━━"),
    "creative": Theme(0xE74C3C, "🎨", "━━━━ CREATING ━━━━"),
    "learning": Theme(0x3498DB, "📚", "━━━━ LEARNING ━━━━"),
    "default": Theme(0x7289DA, "📊", "━━━━ STATUS ━━━━"),
}

COLOR_NAMES = {
    "red": 0xED4245,
    "orange": 0xE67E22,
    "yellow": 0xFEE75C,
    "green": 0x57F287,
    "blue": 0x3498DB,
    "purple": 0x9B59B6,
    "pink": 0xE91E63,
    "white": 0xFFFFFF,
    "black": 0x000000,
    "grey": 0x95A5A6,
    "gray": 0x95A5A6,
    "blurple": 0x5865F2,
}

HIGHLIGHT_EMOJIS = {
    "activity": "🏃",
    "event": "📅",
    "state": "💭",
    "need": "❗",
    "achievement": "🏆",
    "blocker": "🚧",
}

_HEX_RE = re.compile(r"^[0-9a-f]{6}$")


# ---------------------------------------------------------------------------
# Small formatters
# ---------------------------------------------------------------------------

def hex_color_to_int(value: Optional[str]) -> Optional[int]:
    """'#RRGGBB', '#RGB' or a common colour name → int. None if unreadable."""
    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip().lower()
    if text in COLOR_NAMES:
        return COLOR_NAMES[text]
    hex_part = text[1:] if text.startswith("#") else text
    if len(hex_part) == 3:
        hex_part = "".join(ch * 2 for ch in hex_part)
    if not _HEX_RE.match(hex_part):
        return None
    return int(hex_part, 16)


def progress_bar(value: Any, maximum: int = 5, theme: Theme = THEMES["default"], length: int = 10) -> str:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value < 0:
        return theme.progress_empty * length
    filled = round(min(value, maximum) / maximum * length)
    return theme.progress_filled * filled + theme.progress_empty * (length - filled)


def trend_indicator(trend: Optional[str]) -> str:
    if trend in ("increasing", "improved"):
        return "↗️"
    if trend in ("decreasing", "worsened"):
        return "↘️"
    if trend in ("stable", "unchanged"):
        return "⟳"
    if trend == "new":
        return "✨"
    return ""


def rating_blocks(rating: Optional[int]) -> str:
    if not isinstance(rating, int) or not 1 <= rating <= 5:
        return "□□□□□"
    return "■" * rating + "□" * (5 - rating)


def resolve_theme(snapshot: StatusSnapshot, profile: Optional[ProfileOut] = None) -> str:
    name = snapshot.visual_theme
    if name == VisualTheme.default.value and profile is not None:
        name = profile.theme
    return name if name in THEMES else "default"


# ---------------------------------------------------------------------------
# Sections
# ---------------------------------------------------------------------------

def _metric_fields(snapshot: StatusSnapshot, theme: Theme) -> list[dict]:
    fields = []
    for metric in snapshot.metrics:
        rating = metric.value_rating or 0
        fields.append({
            "name": f"{metric.icon or '❔'} {metric.name or 'Metric'}",
            "value": (
                f"{trend_indicator(metric.trend)} {progress_bar(rating, theme=theme)} ({rating}/5)\n"
                f"Value: {metric.value or 'N/A'}"
            ).strip(),
            "inline": True,
        })
    return fields


def _highlights_text(snapshot: StatusSnapshot) -> str:
    lines = []
    for h in snapshot.highlights:
        marker = "✨" if h.is_new else "🔄"
        emoji = HIGHLIGHT_EMOJIS.get(h.type or "", "📌")
        timeframe = f" ({h.timeframe})" if h.timeframe else ""
        lines.append(f"{marker} {emoji} {h.description or 'Highlight'}{timeframe}")
    return "\n".join(lines) or "No specific highlights identified."


def _continuing_text(snapshot: StatusSnapshot) -> str:
    return "\n".join(
        f"⏳ {p.description or 'Persistent context'}"
        for p in snapshot.persistent_context if p.from_previous
    )


def _personal_states_text(snapshot: StatusSnapshot) -> str:
    lines = []
    for state in snapshot.personal_states:
        level = state.level or 0
        line = (
            f"{state.emoji or '❔'} {state.name or 'Unknown'}: "
            f"{trend_indicator(state.trend)} {rating_blocks(state.level)} ({level}/5)"
        )
        if state.time_since_last:
            line += f" | Last: {state.time_since_last}"
        lines.append(line)
    return "\n".join(lines)


def _errors_text(snapshot: StatusSnapshot) -> str:
    text = "\n".join(f"- {e}" for e in snapshot.errors)
    if len(text) > MAX_ERRORS_TEXT:
        return text[:MAX_ERRORS_TEXT - 3] + "..."
    return text


def _actions(user_id: str, activity_id: Optional[str]) -> list[dict]:
    actions = [
        {"action": "check_in", "label": "Check In", "emoji": "👋", "target": user_id},
        {"action": "show_details", "label": "Show Details", "emoji": "🔍", "target": user_id},
    ]
    if activity_id:
        actions.append({
            "action": "join_activity",
            "label": "Join Activity",
            "emoji": "🤝",
            "target": user_id,
            "activity_id": activity_id,
        })
    return actions


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def render_status_message(
    snapshot: StatusSnapshot,
    user_id: str,
    previous: Optional[StoredStatusEntry] = None,
    profile: Optional[ProfileOut] = None,
    activity_id: Optional[str] = None,
    now: Optional[datetime] = None,
) -> dict:
    now = now or utcnow()
    theme_name = resolve_theme(snapshot, profile)
    theme = THEMES[theme_name]
    accent = hex_color_to_int(snapshot.accent_color)

    fields: list[dict] = _metric_fields(snapshot, theme)
    if fields:
        fields.append({"name": "", "value": SEPARATOR, "inline": False})

    fields.append({"name": "💡 Highlights", "value": _highlights_text(snapshot), "inline": False})

    continuing = _continuing_text(snapshot)
    if continuing:
        fields.append({"name": "⏳ Continuing Context", "value": continuing, "inline": False})

    states = _personal_states_text(snapshot)
    if states:
        fields.append({"name": "🫀 Personal State", "value": states, "inline": False})

    if snapshot.errors:
        fields.append({"name": "⚠️ Analysis Issues", "value": _errors_text(snapshot), "inline": False})

    summary = snapshot.narrative_summary
    if summary and not summary.startswith("Analysis failed."):
        fields.append({"name": "📝 Summary", "value": summary, "inline": False})
    elif not summary and not snapshot.errors:
        fields.append({"name": "📝 Summary", "value": "No summary provided.", "inline": False})

    description = f"{user_id}'s Status: {snapshot.overall_status or 'Status Update'}"
    if previous is not None:
        description += f"\nPrevious update: {relative_time(previous.timestamp, now)}"

    return {
        "title": f"{theme.emoji_prefix} {snapshot.mood_emoji or '👤'} {theme.accent_bar}",
        "description": description,
        "color": accent if accent is not None else theme.color,
        "fields": fields,
        "footer": f"Theme: {theme_name}",
        "timestamp": to_iso(now),
        "actions": _actions(user_id, activity_id),
    }
