"""Discord client."""

from __future__ import annotations

import logging

import discord
from discord import app_commands
from discord.ext import commands

from pal_occupy.bot.cog import OccupyCog
from pal_occupy.bot.sink import InteractionSink, context_from
from pal_occupy.catalog import ReferenceCatalog
from pal_occupy.interaction.commands import CommandHandlers
from pal_occupy.interaction.router import InteractionRouter

logger = logging.getLogger(__name__)


def describe_invocation(
    command: app_commands.Command | app_commands.ContextMenu, namespace: app_commands.Namespace
) -> str:
    """Render an invocation as ``/name key=value ...`` for the audit log."""

    parts = [f"/{command.qualified_name}"]
    for name, value in namespace:
        parts.append(f"{name}={getattr(value, 'id', value)}")
    return " ".join(parts)


class OccupyBot(commands.Bot):
    """Bot registering the slash commands and routing button presses."""

    def __init__(
        self,
        handlers: CommandHandlers,
        router: InteractionRouter,
        catalog: ReferenceCatalog,
        *,
        sync_commands: bool = True,
    ) -> None:
        super().__init__(
            command_prefix=commands.when_mentioned,
            intents=discord.Intents.default(),
            help_command=None,
        )
        self.handlers = handlers
        self.router = router
        self.catalog = catalog
        self.sync_commands = sync_commands

    async def setup_hook(self) -> None:
        await self.add_cog(OccupyCog(self.handlers, self.catalog))
        if self.sync_commands:
            synced = await self.tree.sync()
            logger.info("synced %d application commands", len(synced))

    async def on_ready(self) -> None:
        logger.info("logged in as %s (%s)", self.user, getattr(self.user, "id", None))

    async def on_interaction(self, interaction: discord.Interaction) -> None:
        if interaction.type is not discord.InteractionType.component:
            return
        custom_id = (interaction.data or {}).get("custom_id")
        if not custom_id:
            return
        await self.router.dispatch(
            context_from(interaction), custom_id, InteractionSink(interaction)
        )

    async def on_app_command_completion(
        self,
        interaction: discord.Interaction,
        command: app_commands.Command | app_commands.ContextMenu,
    ) -> None:
        await self.handlers.record(
            context_from(interaction), describe_invocation(command, interaction.namespace)
        )
