"""Presentation-neutral replies and the messages built from service outcomes."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum

from pal_occupy.catalog import ReferenceCatalog
from pal_occupy.domain.enums import OutcomeKind
from pal_occupy.formatting import mention_role, mention_user, point_label, timestamp
from pal_occupy.interaction.components import Button
from pal_occupy.services.list_paginator import ListPage, TargetPage
from pal_occupy.services.occupancy_service import Outcome

GENERIC_FAILURE = "Something went wrong while saving your request. Please try again later."


class ReplyMode(StrEnum):
    """``NEW`` sends a message; ``UPDATE`` edits the message a button is on."""

    NEW = "new"
    UPDATE = "update"


@dataclass(slots=True)
class Reply:
    """What to show the user.

    When ``mode`` is UPDATE, ``content`` replaces the message text (None clears
    it) and the list embed is only replaced when ``page`` is set.
    """

    content: str | None = None
    page: ListPage | None = None
    rows: list[list[Button]] = field(default_factory=list)
    ephemeral: bool = True
    mode: ReplyMode = ReplyMode.NEW
    mention_roles: tuple[int, ...] = ()

    @classmethod
    def error(cls, message: str) -> Reply:
        return cls(content=message, ephemeral=True)

    @classmethod
    def for_page(cls, page: ListPage, *, mode: ReplyMode = ReplyMode.NEW) -> Reply:
        return cls(page=page, rows=page.rows, ephemeral=True, mode=mode)

    @classmethod
    def for_targets(cls, targets: TargetPage) -> Reply:
        if targets.targets:
            content = f"Pick a point to {targets.mode}:"
        else:
            content = f"No point on this page is available to {targets.mode}."
        return cls(
            content=content,
            rows=[list(row) for row in targets.rows],
            ephemeral=True,
            mode=ReplyMode.UPDATE,
        )


def announcement(outcome: Outcome, catalog: ReferenceCatalog) -> Reply:
    """Public message describing a successful transition."""

    point = outcome.point
    label = point_label(point.name, point.x, point.y, catalog.emojis_for(point))
    record = outcome.record
    mention_roles: tuple[int, ...] = ()

    match outcome.kind:
        case OutcomeKind.OCCUPIED:
            content = (
                f"{mention_user(record.holder_user_id)} occupied {label} "
                f"until {timestamp(record.due_time)}."
            )
        case OutcomeKind.CHALLENGED:
            content = (
                f"{mention_user(record.challenger_user_id)} challenged "
                f"{mention_user(record.holder_user_id)} for {label}."
            )
            if outcome.notify_role_id is not None:
                content = f"{mention_role(outcome.notify_role_id)} {content}"
                mention_roles = (outcome.notify_role_id,)
        case OutcomeKind.FORCED:
            content = (
                f"{mention_user(record.holder_user_id)} now occupies {label} "
                f"until {timestamp(record.due_time)} (set by an administrator)."
            )
        case OutcomeKind.JUDGED:
            content = (
                f"Challenge on {label} resolved: {mention_user(record.holder_user_id)} "
                f"holds it until {timestamp(record.due_time)}."
            )

    return Reply(content=content, ephemeral=False, mention_roles=mention_roles)
