"""Runtime state shared by the HTTP API and the Discord client."""

from __future__ import annotations

import asyncio
import logging

from sqlalchemy.engine import Engine

from pal_occupy import factory
from pal_occupy.bot import OccupyBot
from pal_occupy.catalog import ReferenceCatalog
from pal_occupy.config import Settings, get_settings
from pal_occupy.database import create_db_engine, create_session_factory
from pal_occupy.interaction.commands import CommandHandlers
from pal_occupy.interaction.router import InteractionRouter
from pal_occupy.repository import OccupancyStore
from pal_occupy.services import ListPaginator, OccupancyService

logger = logging.getLogger(__name__)


class AppState:
    """Store, catalog and services for one process.

    ``boot`` loads the catalog exactly once; everything that needs the catalog
    is built there. Reading it earlier, or booting twice, is a programming
    error and raises ``RuntimeError``.
    """

    def __init__(self, *, settings: Settings | None = None, engine: Engine | None = None) -> None:
        self.settings = settings or get_settings()
        self.engine = engine or create_db_engine(self.settings)
        self.store = OccupancyStore(create_session_factory(self.engine))
        self._catalog: ReferenceCatalog | None = None
        self._service: OccupancyService | None = None
        self._paginator: ListPaginator | None = None
        self._router: InteractionRouter | None = None
        self._handlers: CommandHandlers | None = None
        self._bot_task: asyncio.Task[None] | None = None
        self._bot: OccupyBot | None = None

    def boot(self) -> None:
        """Load the catalog and build the services.

        Raises:
            CatalogLoadError: The catalog could not be loaded; do not serve.
            RuntimeError: Called a second time.
        """
        if self._catalog is not None:
            raise RuntimeError("AppState.boot() called twice")

        catalog = ReferenceCatalog.load(self.store)
        self._service = factory.create_occupancy_service(self.store, catalog, self.settings)
        self._paginator = factory.create_list_paginator(self.store, catalog)
        self._router = factory.create_router(self.store, catalog, self.settings)
        self._handlers = factory.create_command_handlers(self.store, catalog, self.settings)
        self._catalog = catalog

    def _require_booted(self) -> ReferenceCatalog:
        if self._catalog is None:
            raise RuntimeError("catalog accessed before AppState.boot()")
        return self._catalog

    @property
    def catalog(self) -> ReferenceCatalog:
        return self._require_booted()

    @property
    def service(self) -> OccupancyService:
        self._require_booted()
        return self._service

    @property
    def paginator(self) -> ListPaginator:
        self._require_booted()
        return self._paginator

    @property
    def router(self) -> InteractionRouter:
        self._require_booted()
        return self._router

    @property
    def handlers(self) -> CommandHandlers:
        self._require_booted()
        return self._handlers

    @property
    def bot_status(self) -> str:
        if self._bot_task is None:
            return "disabled"
        if self._bot_task.done():
            return "stopped"
        if self._bot is not None and self._bot.is_ready():
            return "ready"
        return "connecting"

    async def start_bot(self) -> None:
        """Start the Discord client as a background task, if a token is set."""

        token = self.settings.discord_token
        if token is None:
            logger.warning("no Discord token configured; serving the HTTP API only")
            return

        self._bot = OccupyBot(
            self.handlers,
            self.router,
            self.catalog,
            sync_commands=self.settings.sync_commands,
        )
        loop = asyncio.get_running_loop()
        self._bot_task = loop.create_task(
            self._bot.start(token.get_secret_value()), name="pal-occupy-discord"
        )
        self._bot_task.add_done_callback(self._on_bot_exit)

    @staticmethod
    def _on_bot_exit(task: asyncio.Task[None]) -> None:
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Discord client stopped", exc_info=exc)

    async def shutdown(self) -> None:
        if self._bot is not None:
            await self._bot.close()
        if self._bot_task is not None:
            # exceptions were already logged by _on_bot_exit
            await asyncio.wait({self._bot_task})
        self.engine.dispose()


def build_state() -> AppState:
    """Factory used by the API to initialize state."""

    return AppState()
