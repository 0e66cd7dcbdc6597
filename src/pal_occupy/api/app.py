"""FastAPI application wiring for pal-occupy."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from pal_occupy.api import routes
from pal_occupy.api.runtime import AppState, build_state
from pal_occupy.config import get_settings


def create_app(*, state_factory: Callable[[], AppState] = build_state) -> FastAPI:
    """Instantiate the FastAPI application with routing and lifecycle hooks.

    The lifespan boots the state (loading the catalog; a failure aborts
    startup) and starts the Discord client alongside the HTTP server.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        state = state_factory()
        await asyncio.to_thread(state.boot)
        app.state.app_state = state
        await state.start_bot()
        try:
            yield
        finally:
            await state.shutdown()

    app = FastAPI(title="pal-occupy", version="0.1.0", lifespan=lifespan)
    settings = get_settings()
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET"],
        allow_headers=["*"],
    )
    app.include_router(routes.router)
    return app


app = create_app()
