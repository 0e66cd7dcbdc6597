"""Slash command handlers, independent of the chat client."""

from __future__ import annotations

import asyncio
import logging

from pal_occupy.catalog import ReferenceCatalog
from pal_occupy.domain.errors import StoreError
from pal_occupy.formatting import mention_role
from pal_occupy.interaction.context import InteractionContext
from pal_occupy.interaction.replies import Reply, announcement
from pal_occupy.interaction.router import respond_with_errors
from pal_occupy.interfaces import ReplySink
from pal_occupy.services import ListPaginator, OccupancyService

logger = logging.getLogger(__name__)


class CommandHandlers:
    """The four slash commands: occupy, force-occupy, list and set-notify-role."""

    def __init__(
        self,
        service: OccupancyService,
        paginator: ListPaginator,
        catalog: ReferenceCatalog,
        *,
        default_page_size: int = 20,
        max_page_size: int = 20,
    ):
        self.service = service
        self.paginator = paginator
        self.catalog = catalog
        self.default_page_size = default_page_size
        self.max_page_size = max_page_size

    async def occupy(self, ctx: InteractionContext, point_id: int, sink: ReplySink) -> None:
        async def work() -> None:
            tenant_id = ctx.require_tenant()
            outcome = await asyncio.to_thread(
                self.service.occupy, tenant_id, ctx.user_id, point_id
            )
            await sink.send(announcement(outcome, self.catalog))

        await respond_with_errors(sink, work(), description=f"/occupy {point_id}")

    async def force_occupy(
        self, ctx: InteractionContext, target_id: int, point_id: int, sink: ReplySink
    ) -> None:
        async def work() -> None:
            tenant_id = ctx.require_tenant()
            ctx.require_privilege()
            outcome = await asyncio.to_thread(
                self.service.force_occupy, tenant_id, target_id, point_id
            )
            await sink.send(announcement(outcome, self.catalog))

        await respond_with_errors(
            sink, work(), description=f"/force-occupy {target_id} {point_id}"
        )

    async def list_points(
        self, ctx: InteractionContext, page_size: int | None, sink: ReplySink
    ) -> None:
        """Send page 0 of the list; ``page_size`` is clamped to the allowed range."""

        async def work() -> None:
            tenant_id = ctx.require_tenant()
            size = self.default_page_size if page_size is None else page_size
            size = max(1, min(size, self.max_page_size))
            await sink.defer(ephemeral=True)
            page = await asyncio.to_thread(
                self.paginator.render, tenant_id, 0, size, ctx.is_privileged
            )
            await sink.send(Reply.for_page(page))

        await respond_with_errors(sink, work(), description="/list")

    async def set_notify_role(
        self, ctx: InteractionContext, role_id: int, sink: ReplySink
    ) -> None:
        async def work() -> None:
            tenant_id = ctx.require_tenant()
            ctx.require_privilege()
            await asyncio.to_thread(self.service.set_notify_role, tenant_id, role_id)
            await sink.send(
                Reply(content=f"New challenges will notify {mention_role(role_id)}.")
            )

        await respond_with_errors(sink, work(), description=f"/set-notify-role {role_id}")

    async def record(self, ctx: InteractionContext, content: str) -> None:
        """Write an audit entry; failures are logged, never shown to the caller."""

        try:
            await asyncio.to_thread(
                self.service.record_command, ctx.tenant_id, ctx.channel_id, ctx.user_id, content
            )
        except StoreError:
            logger.exception("could not record command %r", content)
