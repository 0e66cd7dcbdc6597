"""Tests for the discord.py adapter: rendering, sinks and slash command glue."""

from datetime import UTC, datetime
from types import SimpleNamespace
from unittest.mock import AsyncMock, Mock

import discord
import pytest

from pal_occupy.bot import render
from pal_occupy.bot.client import describe_invocation
from pal_occupy.bot.cog import OccupyCog
from pal_occupy.bot.sink import InteractionSink, context_from
from pal_occupy.catalog import ReferenceCatalog
from pal_occupy.domain import models as dm
from pal_occupy.domain.categories import CategorySet
from pal_occupy.interaction.components import Button, ButtonStyle
from pal_occupy.interaction.replies import Reply, ReplyMode
from pal_occupy.services import ListPage, PageEntry

DUE = datetime(2026, 5, 15, 12, 0, tzinfo=UTC)
ORE = dm.PointType(id=1, name="Ore", emoji=":ore:123456789012345678")
POINTS = [
    dm.Point(id=dm.PointID(i), categories=CategorySet.of(1), x=i, y=-i, name=f"Seam {i}")
    for i in range(1, 31)
]
CATALOG = ReferenceCatalog.from_definitions([ORE], POINTS)


def _record(challenger=None) -> dm.OccupancyRecord:
    return dm.OccupancyRecord(
        tenant_id=dm.TenantID(1),
        point_id=dm.PointID(1),
        holder_user_id=dm.UserID(100),
        due_time=DUE,
        challenger_user_id=challenger,
    )


def _page(entries) -> ListPage:
    return ListPage(
        tenant_id=1,
        page_index=0,
        page_size=5,
        max_page=6,
        entries=tuple(entries),
        navigation=(
            Button("noop:prev", emoji="◀️", disabled=True),
            Button("listPoints:0:5", emoji="🔄", style=ButtonStyle.SUCCESS),
            Button("listPoints:1:5", emoji="▶️", style=ButtonStyle.PRIMARY),
        ),
        actions=(Button("showOccupy:0:5", label="Occupy"),),
    )


def _interaction(*, done=False, guild_id=9001, manage_guild=False):
    response = Mock()
    response.is_done.return_value = done
    response.defer = AsyncMock()
    response.send_message = AsyncMock()
    response.edit_message = AsyncMock()
    return SimpleNamespace(
        guild_id=guild_id,
        channel_id=77,
        user=SimpleNamespace(id=100),
        permissions=discord.Permissions(manage_guild=manage_guild),
        response=response,
        followup=SimpleNamespace(send=AsyncMock()),
        edit_original_response=AsyncMock(),
    )


class TestRender:
    def test_lease_summaries(self):
        point = POINTS[0]
        vacant = PageEntry(point, (":ore:123456789012345678",), None)
        leased = PageEntry(point, (), _record())
        contested = PageEntry(point, (), _record(challenger=dm.UserID(200)))

        assert render.lease_summary(vacant) == "Unoccupied"
        assert render.lease_summary(leased).startswith("Held by <@100>\nLease ends <t:")
        assert render.lease_summary(contested).endswith("Challenged by <@200>")

    def test_list_embed(self):
        page = _page([PageEntry(POINTS[0], (":ore:123456789012345678",), None)])

        embed = render.list_embed(page)

        assert embed.title == "Ore points"
        assert embed.fields[0].name == "#1 <:ore:123456789012345678> Seam 1 (1, -1)"
        assert embed.fields[0].value == "Unoccupied"
        assert embed.footer.text == "Page 1/6"
        assert embed.description is None

    def test_empty_page_embed(self):
        embed = render.list_embed(_page([]))
        assert embed.description == "There are no points on this page."
        assert embed.fields == []

    @pytest.mark.asyncio
    async def test_build_view(self):
        rows = _page([]).rows

        view = render.build_view(rows)

        buttons = view.children
        assert [b.custom_id for b in buttons] == [
            "noop:prev",
            "listPoints:0:5",
            "listPoints:1:5",
            "showOccupy:0:5",
        ]
        assert buttons[0].disabled
        assert buttons[1].style is discord.ButtonStyle.success
        assert buttons[3].label == "Occupy"
        assert view.is_finished()

    @pytest.mark.asyncio
    async def test_custom_emoji_button(self):
        button = Button("occupy:1:0:5", label="Seam 1", emoji=":ore:123456789012345678")
        view = render.build_view([[button]])

        emoji = view.children[0].emoji
        assert (emoji.name, emoji.id) == ("ore", 123456789012345678)

    def test_no_rows_no_view(self):
        assert render.build_view([]) is None

    def test_allowed_mentions(self):
        mentions = render.allowed_mentions((555,))
        assert mentions.everyone is False
        assert [role.id for role in mentions.roles] == [555]


class TestInteractionSink:
    def test_context_from(self):
        ctx = context_from(_interaction(manage_guild=True))
        assert (ctx.tenant_id, ctx.user_id, ctx.channel_id) == (9001, 100, 77)
        assert ctx.is_privileged

    def test_direct_message_is_never_privileged(self):
        ctx = context_from(_interaction(guild_id=None, manage_guild=True))
        assert ctx.tenant_id is None
        assert not ctx.is_privileged

    @pytest.mark.asyncio
    async def test_defer_only_once(self):
        interaction = _interaction(done=True)
        await InteractionSink(interaction).defer()
        interaction.response.defer.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_new_reply_is_initial_response(self):
        interaction = _interaction()

        await InteractionSink(interaction).send(Reply.error("nope"))

        kwargs = interaction.response.send_message.await_args.kwargs
        assert kwargs["content"] == "nope"
        assert kwargs["ephemeral"] is True
        assert "view" not in kwargs

    @pytest.mark.asyncio
    async def test_new_reply_after_defer_is_followup(self):
        interaction = _interaction(done=True)

        await InteractionSink(interaction).send(Reply(content="hi", ephemeral=False))

        interaction.response.send_message.assert_not_awaited()
        assert interaction.followup.send.await_args.kwargs["ephemeral"] is False

    @pytest.mark.asyncio
    async def test_update_edits_the_button_message(self):
        interaction = _interaction()
        page = _page([])

        await InteractionSink(interaction).send(Reply.for_page(page, mode=ReplyMode.UPDATE))

        kwargs = interaction.response.edit_message.await_args.kwargs
        assert kwargs["content"] is None
        assert kwargs["embed"].title == "Ore points"
        assert len(kwargs["view"].children) == 4

    @pytest.mark.asyncio
    async def test_update_after_response_edits_original(self):
        interaction = _interaction(done=True)

        await InteractionSink(interaction).send(Reply(content="x", mode=ReplyMode.UPDATE))

        interaction.response.edit_message.assert_not_awaited()
        interaction.edit_original_response.assert_awaited_once()


class TestCog:
    @pytest.mark.asyncio
    async def test_autocomplete_caps_choices(self):
        cog = OccupyCog(Mock(), CATALOG)

        choices = await cog.point_autocomplete(None, "")

        assert len(choices) == 25
        assert choices[0].value == 1
        assert choices[0].name == "1. Seam 1 (1, -1)"

    @pytest.mark.asyncio
    async def test_autocomplete_filters(self):
        cog = OccupyCog(Mock(), CATALOG)

        choices = await cog.point_autocomplete(None, "seam 2")

        assert [c.value for c in choices] == [2, *range(20, 30)]


def test_describe_invocation():
    command = SimpleNamespace(qualified_name="force-occupy")
    namespace = [("user", SimpleNamespace(id=200)), ("point", 3)]

    assert describe_invocation(command, namespace) == "/force-occupy user=200 point=3"
