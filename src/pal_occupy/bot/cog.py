"""Slash commands."""

from __future__ import annotations

from typing import Optional

import discord
from discord import app_commands
from discord.ext import commands

from pal_occupy.bot.sink import InteractionSink, context_from
from pal_occupy.catalog import ReferenceCatalog
from pal_occupy.formatting import point_label
from pal_occupy.interaction.commands import CommandHandlers
from pal_occupy.interaction.tokens import MAX_PAGE_SIZE

MAX_CHOICES = 25


class OccupyCog(commands.Cog):
    """Occupy, force-occupy, list and set-notify-role."""

    def __init__(self, handlers: CommandHandlers, catalog: ReferenceCatalog) -> None:
        self.handlers = handlers
        self.catalog = catalog

    async def point_autocomplete(
        self, interaction: discord.Interaction, current: str
    ) -> list[app_commands.Choice[int]]:
        needle = current.strip().lower()
        choices = []
        for point in self.catalog.points():
            label = f"{point.id}. {point_label(point.name, point.x, point.y)}"
            if needle and needle not in label.lower():
                continue
            choices.append(app_commands.Choice(name=label, value=point.id))
            if len(choices) == MAX_CHOICES:
                break
        return choices

    @app_commands.command(
        name="occupy", description="Occupy a point, or challenge an expired lease"
    )
    @app_commands.describe(point="Point to occupy")
    @app_commands.guild_only()
    async def occupy(
        self, interaction: discord.Interaction, point: app_commands.Range[int, 1]
    ) -> None:
        await self.handlers.occupy(context_from(interaction), point, InteractionSink(interaction))

    @app_commands.command(name="force-occupy", description="Grant a user a lease on a point")
    @app_commands.describe(user="New holder", point="Point to assign")
    @app_commands.guild_only()
    @app_commands.default_permissions(manage_guild=True)
    async def force_occupy(
        self,
        interaction: discord.Interaction,
        user: discord.Member,
        point: app_commands.Range[int, 1],
    ) -> None:
        await self.handlers.force_occupy(
            context_from(interaction), user.id, point, InteractionSink(interaction)
        )

    @app_commands.command(name="list", description="Show the point list")
    @app_commands.describe(page_size="Points per page")
    @app_commands.guild_only()
    async def list_points(
        self,
        interaction: discord.Interaction,
        page_size: Optional[app_commands.Range[int, 1, MAX_PAGE_SIZE]] = None,  # noqa: UP007
    ) -> None:
        await self.handlers.list_points(
            context_from(interaction), page_size, InteractionSink(interaction)
        )

    @app_commands.command(
        name="set-notify-role", description="Choose the role mentioned when a challenge is made"
    )
    @app_commands.describe(role="Role to mention")
    @app_commands.guild_only()
    @app_commands.default_permissions(manage_guild=True)
    async def set_notify_role(self, interaction: discord.Interaction, role: discord.Role) -> None:
        await self.handlers.set_notify_role(
            context_from(interaction), role.id, InteractionSink(interaction)
        )

    occupy.autocomplete("point")(point_autocomplete)
    force_occupy.autocomplete("point")(point_autocomplete)
