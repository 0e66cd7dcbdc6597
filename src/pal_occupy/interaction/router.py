"""Button interaction router.

Each button press arrives as an action token. The router decodes it, runs the
matching handler against the services and hands the resulting replies to a
:class:`~pal_occupy.interfaces.ReplySink`. It keeps no state between presses.

Service calls are blocking store work, so they run via ``asyncio.to_thread``.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable

from pal_occupy.catalog import ReferenceCatalog
from pal_occupy.domain.enums import JudgeWinner, TargetMode
from pal_occupy.domain.errors import OccupyError, StoreError
from pal_occupy.formatting import mention_user, point_label
from pal_occupy.interaction.components import Button, ButtonStyle
from pal_occupy.interaction.context import InteractionContext
from pal_occupy.interaction.replies import GENERIC_FAILURE, Reply, ReplyMode, announcement
from pal_occupy.interaction.tokens import SHOW_ACTIONS, Action, ActionToken, parse_token
from pal_occupy.interfaces import ReplySink
from pal_occupy.services import ListPaginator, OccupancyService

logger = logging.getLogger(__name__)

Handler = Callable[[InteractionContext, ActionToken, ReplySink], Awaitable[None]]

_MODE_BY_SHOW_ACTION = {action: mode for mode, action in SHOW_ACTIONS.items()}


async def respond_with_errors(
    sink: ReplySink, work: Awaitable[None], *, description: str
) -> None:
    """Await ``work``; turn rejections into ephemeral replies.

    User-facing errors are shown as they are. Store failures are logged and
    replaced by a generic message.
    """
    try:
        await work
    except OccupyError as exc:
        logger.info("%s rejected: %s", description, exc)
        await sink.send(Reply.error(str(exc)))
    except StoreError:
        logger.exception("%s failed in the store", description)
        await sink.send(Reply.error(GENERIC_FAILURE))


class InteractionRouter:
    """Dispatch table from token actions to handlers."""

    def __init__(
        self,
        service: OccupancyService,
        paginator: ListPaginator,
        catalog: ReferenceCatalog,
        *,
        default_page_size: int = 20,
    ):
        self.service = service
        self.paginator = paginator
        self.catalog = catalog
        self.default_page_size = default_page_size
        self._handlers: dict[Action, Handler] = {
            Action.LIST_POINTS: self._list_points,
            Action.SHOW_OCCUPY: self._show_targets,
            Action.SHOW_CHALLENGE: self._show_targets,
            Action.SHOW_JUDGE: self._show_targets,
            Action.OCCUPY: self._occupy,
            Action.CHALLENGE: self._occupy,
            Action.JUDGE: self._judge,
            Action.RESOLVE: self._resolve,
            Action.NOOP: self._noop,
        }

    @property
    def actions(self) -> frozenset[Action]:
        return frozenset(self._handlers)

    async def dispatch(self, ctx: InteractionContext, custom_id: str, sink: ReplySink) -> None:
        """Handle one button press identified by ``custom_id``."""

        await respond_with_errors(
            sink,
            self._dispatch(ctx, custom_id, sink),
            description=f"button {custom_id!r} from user {ctx.user_id}",
        )

    async def _dispatch(self, ctx: InteractionContext, custom_id: str, sink: ReplySink) -> None:
        token = parse_token(custom_id)
        await self._handlers[token.action](ctx, token, sink)

    # --- handlers -------------------------------------------------------------------

    async def _list_points(
        self, ctx: InteractionContext, token: ActionToken, sink: ReplySink
    ) -> None:
        tenant_id = ctx.require_tenant()
        if token.cursor is None:
            # Fresh list: a new ephemeral message, so acknowledge first.
            await sink.defer(ephemeral=True)
            page = await asyncio.to_thread(
                self.paginator.render, tenant_id, 0, self.default_page_size, ctx.is_privileged
            )
            await sink.send(Reply.for_page(page))
            return

        page = await asyncio.to_thread(
            self.paginator.render,
            tenant_id,
            token.cursor.page_index,
            token.cursor.page_size,
            ctx.is_privileged,
        )
        await sink.send(Reply.for_page(page, mode=ReplyMode.UPDATE))

    async def _show_targets(
        self, ctx: InteractionContext, token: ActionToken, sink: ReplySink
    ) -> None:
        tenant_id = ctx.require_tenant()
        targets = await asyncio.to_thread(
            self.paginator.render_targets,
            tenant_id,
            ctx.user_id,
            _MODE_BY_SHOW_ACTION[token.action],
            token.cursor.page_index,
            token.cursor.page_size,
            ctx.is_privileged,
        )
        await sink.send(Reply.for_targets(targets))

    async def _occupy(self, ctx: InteractionContext, token: ActionToken, sink: ReplySink) -> None:
        tenant_id = ctx.require_tenant()
        outcome = await asyncio.to_thread(
            self.service.occupy, tenant_id, ctx.user_id, token.point_id
        )
        await self._refresh_list(ctx, token, sink)
        await sink.send(announcement(outcome, self.catalog))

    async def _judge(self, ctx: InteractionContext, token: ActionToken, sink: ReplySink) -> None:
        tenant_id = ctx.require_tenant()
        ctx.require_privilege()
        point, state = await asyncio.to_thread(
            self.service.pending_challenge, tenant_id, token.point_id
        )
        label = point_label(point.name, point.x, point.y, self.catalog.emojis_for(point))
        verdicts = [
            Button(
                ActionToken.resolve(point.id, JudgeWinner.HOLDER, token.cursor).encode(),
                label="Holder keeps it",
                style=ButtonStyle.PRIMARY,
            ),
            Button(
                ActionToken.resolve(point.id, JudgeWinner.CHALLENGER, token.cursor).encode(),
                label="Challenger wins",
                style=ButtonStyle.DANGER,
            ),
        ]
        back = Button(ActionToken.show(TargetMode.JUDGE, token.cursor).encode(), emoji="↩️")
        await sink.send(
            Reply(
                content=(
                    f"{label}: held by {mention_user(state.holder)}, "
                    f"challenged by {mention_user(state.challenger)}. Who wins?"
                ),
                rows=[verdicts, [back]],
                mode=ReplyMode.UPDATE,
            )
        )

    async def _resolve(
        self, ctx: InteractionContext, token: ActionToken, sink: ReplySink
    ) -> None:
        tenant_id = ctx.require_tenant()
        ctx.require_privilege()
        outcome = await asyncio.to_thread(
            self.service.judge, tenant_id, token.point_id, token.winner
        )
        await self._refresh_list(ctx, token, sink)
        await sink.send(announcement(outcome, self.catalog))

    async def _noop(self, ctx: InteractionContext, token: ActionToken, sink: ReplySink) -> None:
        await sink.defer()

    async def _refresh_list(
        self, ctx: InteractionContext, token: ActionToken, sink: ReplySink
    ) -> None:
        page = await asyncio.to_thread(
            self.paginator.render,
            ctx.require_tenant(),
            token.cursor.page_index,
            token.cursor.page_size,
            ctx.is_privileged,
        )
        await sink.send(Reply.for_page(page, mode=ReplyMode.UPDATE))
