"""ReplySink over a ``discord.Interaction``."""

from __future__ import annotations

from typing import Any

import discord

from pal_occupy.bot import render
from pal_occupy.interaction.context import InteractionContext
from pal_occupy.interaction.replies import Reply, ReplyMode


def context_from(interaction: discord.Interaction) -> InteractionContext:
    """Caller context for an interaction; Manage Guild marks a privileged caller."""

    return InteractionContext(
        tenant_id=interaction.guild_id,
        user_id=interaction.user.id,
        channel_id=interaction.channel_id or 0,
        is_privileged=interaction.guild_id is not None
        and interaction.permissions.manage_guild,
    )


class InteractionSink:
    """Delivers replies as the initial response, an edit or a follow-up."""

    def __init__(self, interaction: discord.Interaction) -> None:
        self.interaction = interaction

    async def defer(self, *, ephemeral: bool = True) -> None:
        if not self.interaction.response.is_done():
            await self.interaction.response.defer(ephemeral=ephemeral)

    async def send(self, reply: Reply) -> None:
        if reply.mode is ReplyMode.UPDATE:
            await self._update(reply)
        else:
            await self._respond(reply)

    async def _update(self, reply: Reply) -> None:
        kwargs: dict[str, Any] = {"content": reply.content}
        if reply.page is not None:
            kwargs["embed"] = render.list_embed(reply.page)
        view = render.build_view(reply.rows)
        kwargs["view"] = view
        if not self.interaction.response.is_done():
            await self.interaction.response.edit_message(**kwargs)
        else:
            await self.interaction.edit_original_response(**kwargs)

    async def _respond(self, reply: Reply) -> None:
        kwargs: dict[str, Any] = {
            "ephemeral": reply.ephemeral,
            "allowed_mentions": render.allowed_mentions(reply.mention_roles),
        }
        if reply.content is not None:
            kwargs["content"] = reply.content
        if reply.page is not None:
            kwargs["embed"] = render.list_embed(reply.page)
        view = render.build_view(reply.rows)
        if view is not None:
            kwargs["view"] = view

        if not self.interaction.response.is_done():
            await self.interaction.response.send_message(**kwargs)
        else:
            await self.interaction.followup.send(**kwargs)
