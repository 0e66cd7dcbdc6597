"""Chat markup helpers: mentions, timestamps and point labels."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime


def mention_user(user_id: int) -> str:
    return f"<@{user_id}>"


def mention_role(role_id: int) -> str:
    return f"<@&{role_id}>"


def timestamp(moment: datetime, style: str = "F") -> str:
    """Render a client-localised timestamp (``R`` relative, ``F`` full date)."""

    return f"<t:{int(moment.timestamp())}:{style}>"


def render_emoji(emoji: str) -> str:
    """Custom emoji are stored as ``:name:id`` and need angle brackets."""

    if ":" in emoji and not emoji.startswith("<"):
        return f"<{emoji}>"
    return emoji


def point_label(name: str, x: int, y: int, emojis: Iterable[str] = ()) -> str:
    prefix = "".join(render_emoji(emoji) for emoji in emojis)
    label = f"{name} ({x}, {y})"
    return f"{prefix} {label}" if prefix else label
