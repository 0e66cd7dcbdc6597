"""Translate presentation-neutral replies into discord.py embeds and views."""

from __future__ import annotations

import discord

from pal_occupy.domain import models as dm
from pal_occupy.formatting import mention_user, point_label, render_emoji, timestamp
from pal_occupy.interaction.components import Button, ButtonStyle
from pal_occupy.services.list_paginator import ListPage, PageEntry

LIST_TITLE = "Ore points"

_STYLES = {
    ButtonStyle.PRIMARY: discord.ButtonStyle.primary,
    ButtonStyle.SECONDARY: discord.ButtonStyle.secondary,
    ButtonStyle.SUCCESS: discord.ButtonStyle.success,
    ButtonStyle.DANGER: discord.ButtonStyle.danger,
}


def lease_summary(entry: PageEntry) -> str:
    match entry.state:
        case dm.Vacant():
            return "Unoccupied"
        case dm.Leased(holder=holder, due=due):
            return f"Held by {mention_user(holder)}\nLease ends {timestamp(due, 'R')}"
        case dm.Contested(holder=holder, due=due, challenger=challenger):
            return (
                f"Held by {mention_user(holder)}\nLease ended {timestamp(due, 'R')}\n"
                f"Challenged by {mention_user(challenger)}"
            )
    raise AssertionError(entry.state)


def list_embed(page: ListPage) -> discord.Embed:
    embed = discord.Embed(title=LIST_TITLE, colour=discord.Colour.blurple())
    for entry in page.entries:
        point = entry.point
        embed.add_field(
            name=f"#{point.id} " + point_label(point.name, point.x, point.y, entry.emojis),
            value=lease_summary(entry),
            inline=False,
        )
    if not page.entries:
        embed.description = "There are no points on this page."
    embed.set_footer(text=f"Page {page.page_index + 1}/{max(page.max_page, 1)}")
    return embed


def build_view(rows: list[list[Button]]) -> discord.ui.View | None:
    """Build a view for the given button rows.

    The view is stopped before it is returned: button presses are routed by
    custom id in ``on_interaction``, so discord.py must not keep the view in
    its view store.
    """
    if not rows:
        return None
    view = discord.ui.View(timeout=None)
    for row_index, row in enumerate(rows):
        for button in row:
            view.add_item(
                discord.ui.Button(
                    custom_id=button.custom_id,
                    label=button.label,
                    emoji=(
                        discord.PartialEmoji.from_str(render_emoji(button.emoji))
                        if button.emoji
                        else None
                    ),
                    style=_STYLES[button.style],
                    disabled=button.disabled,
                    row=row_index,
                )
            )
    view.stop()
    return view


def allowed_mentions(role_ids: tuple[int, ...]) -> discord.AllowedMentions:
    return discord.AllowedMentions(
        everyone=False,
        users=True,
        roles=[discord.Object(id=role_id) for role_id in role_ids],
    )
