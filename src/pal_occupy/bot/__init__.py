"""discord.py adapter: slash commands, button routing and reply rendering."""

from pal_occupy.bot.client import OccupyBot
from pal_occupy.bot.cog import OccupyCog
from pal_occupy.bot.sink import InteractionSink, context_from

__all__ = ["InteractionSink", "OccupyBot", "OccupyCog", "context_from"]
