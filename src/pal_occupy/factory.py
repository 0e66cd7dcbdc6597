"""Service Factory for pal-occupy.

This module wires services and handlers together from a store, a loaded
catalog and the settings. Use these functions in production code; in tests,
construct the classes directly with in-memory stores and fake sinks.

Example:
    store = OccupancyStore(create_session_factory(engine))
    catalog = ReferenceCatalog.load(store)
    router = create_router(store, catalog, settings)
"""

from datetime import timedelta

from pal_occupy.catalog import ReferenceCatalog
from pal_occupy.config import Settings
from pal_occupy.interaction.commands import CommandHandlers
from pal_occupy.interaction.router import InteractionRouter
from pal_occupy.repository import OccupancyStore
from pal_occupy.services import ListPaginator, OccupancyService


def create_occupancy_service(
    store: OccupancyStore, catalog: ReferenceCatalog, settings: Settings
) -> OccupancyService:
    """Create an OccupancyService with the configured lease length.

    Args:
        store: Store to run transactions against
        catalog: Loaded reference catalog
        settings: Application settings

    Returns:
        Fully initialized OccupancyService
    """
    return OccupancyService(store, catalog, lease_duration=timedelta(days=settings.lease_days))


def create_list_paginator(store: OccupancyStore, catalog: ReferenceCatalog) -> ListPaginator:
    return ListPaginator(store, catalog)


def create_router(
    store: OccupancyStore, catalog: ReferenceCatalog, settings: Settings
) -> InteractionRouter:
    """Create the button router with its services."""

    return InteractionRouter(
        create_occupancy_service(store, catalog, settings),
        create_list_paginator(store, catalog),
        catalog,
        default_page_size=settings.default_page_size,
    )


def create_command_handlers(
    store: OccupancyStore, catalog: ReferenceCatalog, settings: Settings
) -> CommandHandlers:
    """Create the slash command handlers with their services."""

    return CommandHandlers(
        create_occupancy_service(store, catalog, settings),
        create_list_paginator(store, catalog),
        catalog,
        default_page_size=settings.default_page_size,
        max_page_size=settings.max_page_size,
    )
