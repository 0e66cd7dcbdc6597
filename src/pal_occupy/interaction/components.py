"""Presentation-neutral message components.

The core describes buttons in these terms; the Discord adapter translates
them into ``discord.ui`` items.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

MAX_BUTTONS_PER_ROW = 5


class ButtonStyle(StrEnum):
    PRIMARY = "primary"
    SECONDARY = "secondary"
    SUCCESS = "success"
    DANGER = "danger"


@dataclass(frozen=True, slots=True)
class Button:
    """A button carrying an encoded action token as its custom id."""

    custom_id: str
    label: str | None = None
    emoji: str | None = None
    style: ButtonStyle = ButtonStyle.SECONDARY
    disabled: bool = False


def pack_rows(buttons: list[Button], width: int = MAX_BUTTONS_PER_ROW) -> list[list[Button]]:
    """Split buttons into rows of at most ``width``."""

    return [buttons[i : i + width] for i in range(0, len(buttons), width)]
