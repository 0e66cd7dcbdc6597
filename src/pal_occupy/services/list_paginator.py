"""List Paginator for pal-occupy.

Renders one page of the point list for a tenant, and the target pickers the
``show*`` buttons open. Nothing is cached between calls: every render reads
the store afresh, and every button carries the full state it needs in its
token.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

from pal_occupy.catalog import ReferenceCatalog
from pal_occupy.domain import models as dm
from pal_occupy.domain.categories import CategorySet
from pal_occupy.domain.enums import TargetMode
from pal_occupy.domain.errors import PermissionDeniedError
from pal_occupy.formatting import point_label
from pal_occupy.interaction.components import Button, ButtonStyle, pack_rows
from pal_occupy.interaction.tokens import ActionToken, PageCursor
from pal_occupy.models import utc_now
from pal_occupy.repository import OccupancyStore

logger = logging.getLogger(__name__)

PREVIOUS_EMOJI = "◀️"
REFRESH_EMOJI = "🔄"
NEXT_EMOJI = "▶️"
BACK_EMOJI = "↩️"

_COMMAND_LABELS = {
    TargetMode.OCCUPY: "Occupy",
    TargetMode.CHALLENGE: "Challenge",
    TargetMode.JUDGE: "Judge",
}


@dataclass(frozen=True, slots=True)
class PageEntry:
    """A point on a rendered page, with its emojis and lease."""

    point: dm.Point
    emojis: tuple[str, ...]
    record: dm.OccupancyRecord | None

    @property
    def state(self) -> dm.OccupancyState:
        return dm.classify(self.record)

    @property
    def label(self) -> str:
        return point_label(self.point.name, self.point.x, self.point.y)


@dataclass(frozen=True, slots=True)
class ListPage:
    """One rendered page of the point list.

    Attributes:
        tenant_id: Guild the leases belong to
        page_index: Zero-based page shown
        page_size: Points per page
        max_page: Number of pages; ``ceil(point count / page_size)``
        entries: Points on this page, in catalog order
        navigation: Previous, refresh and next buttons
        actions: Buttons opening the target pickers
    """

    tenant_id: int
    page_index: int
    page_size: int
    max_page: int
    entries: tuple[PageEntry, ...]
    navigation: tuple[Button, ...]
    actions: tuple[Button, ...]

    @property
    def cursor(self) -> PageCursor:
        return PageCursor(self.page_index, self.page_size)

    @property
    def rows(self) -> list[list[Button]]:
        return [list(self.navigation), list(self.actions)]


@dataclass(frozen=True, slots=True)
class TargetPage:
    """Buttons for the points on a page a user can act on in one mode."""

    mode: TargetMode
    page_index: int
    page_size: int
    targets: tuple[PageEntry, ...]
    rows: tuple[tuple[Button, ...], ...]


class ListPaginator:
    """Renders list pages and target pickers from the store."""

    def __init__(
        self,
        store: OccupancyStore,
        catalog: ReferenceCatalog,
        *,
        now: Callable[[], datetime] = utc_now,
    ):
        self.store = store
        self.catalog = catalog
        self._now = now

    def _entry(self, item: dm.ListEntry) -> PageEntry:
        return PageEntry(
            point=item.point,
            emojis=tuple(self.catalog.emojis_for(item.point)),
            record=item.record,
        )

    def render(
        self, tenant_id: int, page_index: int, page_size: int, is_privileged: bool
    ) -> ListPage:
        """Render page ``page_index`` of the point list.

        Pages past the end render with no entries; their navigation still
        points back into range.
        """
        cursor = PageCursor(page_index, page_size)
        with self.store.transaction() as tx:
            total = tx.count_points()
            items = tx.list_by_tenant(tenant_id, cursor.offset, cursor.page_size)

        max_page = -(-total // page_size)
        return ListPage(
            tenant_id=tenant_id,
            page_index=page_index,
            page_size=page_size,
            max_page=max_page,
            entries=tuple(self._entry(item) for item in items),
            navigation=self._navigation(cursor, max_page),
            actions=self._actions(cursor, is_privileged),
        )

    @staticmethod
    def _navigation(cursor: PageCursor, max_page: int) -> tuple[Button, ...]:
        if cursor.page_index > 0:
            previous = Button(
                ActionToken.list_points(cursor.with_page(cursor.page_index - 1)).encode(),
                emoji=PREVIOUS_EMOJI,
                style=ButtonStyle.PRIMARY,
            )
        else:
            previous = Button(
                ActionToken.noop("prev").encode(), emoji=PREVIOUS_EMOJI, disabled=True
            )

        refresh = Button(
            ActionToken.list_points(cursor).encode(),
            emoji=REFRESH_EMOJI,
            style=ButtonStyle.SUCCESS,
        )

        if cursor.page_index + 1 < max_page:
            following = Button(
                ActionToken.list_points(cursor.with_page(cursor.page_index + 1)).encode(),
                emoji=NEXT_EMOJI,
                style=ButtonStyle.PRIMARY,
            )
        else:
            following = Button(ActionToken.noop("next").encode(), emoji=NEXT_EMOJI, disabled=True)

        return previous, refresh, following

    @staticmethod
    def _actions(cursor: PageCursor, is_privileged: bool) -> tuple[Button, ...]:
        modes = [TargetMode.OCCUPY, TargetMode.CHALLENGE]
        if is_privileged:
            modes.append(TargetMode.JUDGE)
        return tuple(
            Button(
                ActionToken.show(mode, cursor).encode(),
                label=_COMMAND_LABELS[mode],
                style=ButtonStyle.DANGER if mode is TargetMode.JUDGE else ButtonStyle.SECONDARY,
            )
            for mode in modes
        )

    def render_targets(
        self,
        tenant_id: int,
        user_id: int,
        mode: TargetMode,
        page_index: int,
        page_size: int,
        is_privileged: bool,
    ) -> TargetPage:
        """List the points on a page the user can act on in ``mode``.

        Raises:
            PermissionDeniedError: JUDGE mode without the privilege flag
        """
        if mode is TargetMode.JUDGE and not is_privileged:
            raise PermissionDeniedError()

        cursor = PageCursor(page_index, page_size)
        now = self._now()
        with self.store.transaction() as tx:
            items = tx.list_by_tenant(tenant_id, cursor.offset, cursor.page_size)
            taken = CategorySet()
            if mode is not TargetMode.JUDGE:
                taken = taken.union(
                    holding.categories for holding in tx.records_for_user(tenant_id, user_id)
                )

        targets = []
        for item in items:
            free = not item.point.categories.intersects(taken)
            match item.state, mode:
                case dm.Vacant(), TargetMode.OCCUPY if free:
                    targets.append(self._entry(item))
                case dm.Leased() as leased, TargetMode.CHALLENGE if free and leased.is_expired(now):
                    targets.append(self._entry(item))
                case dm.Contested(), TargetMode.JUDGE:
                    targets.append(self._entry(item))

        buttons = [
            Button(
                ActionToken.target(mode, target.point.id, cursor).encode(),
                label=target.label,
                emoji=target.emojis[0] if target.emojis else None,
            )
            for target in targets
        ]
        back = Button(
            ActionToken.list_points(cursor).encode(),
            emoji=BACK_EMOJI,
            style=ButtonStyle.PRIMARY,
        )
        rows = [*pack_rows(buttons), [back]]

        logger.debug(
            "tenant %s: %d %s targets on page %d for user %s",
            tenant_id,
            len(targets),
            mode,
            page_index,
            user_id,
        )
        return TargetPage(
            mode=mode,
            page_index=page_index,
            page_size=page_size,
            targets=tuple(targets),
            rows=tuple(tuple(row) for row in rows),
        )
