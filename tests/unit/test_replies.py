"""Tests for outcome announcements and reply constructors."""

from datetime import UTC, datetime

from pal_occupy.catalog import ReferenceCatalog
from pal_occupy.domain import models as dm
from pal_occupy.domain.categories import CategorySet
from pal_occupy.domain.enums import OutcomeKind, TargetMode
from pal_occupy.interaction.components import Button, pack_rows
from pal_occupy.interaction.replies import Reply, ReplyMode, announcement
from pal_occupy.services import Outcome, TargetPage

DUE = datetime(2026, 5, 15, 12, 0, tzinfo=UTC)

ORE = dm.PointType(id=1, name="Ore", emoji="⛏️")
POINT = dm.Point(id=dm.PointID(3), categories=CategorySet.of(1), x=-15, y=72, name="North Ore")
CATALOG = ReferenceCatalog.from_definitions([ORE], [POINT])


def _record(challenger=None) -> dm.OccupancyRecord:
    return dm.OccupancyRecord(
        tenant_id=dm.TenantID(1),
        point_id=POINT.id,
        holder_user_id=dm.UserID(100),
        due_time=DUE,
        challenger_user_id=challenger,
    )


class TestAnnouncement:
    def test_occupied_is_public(self):
        reply = announcement(Outcome(OutcomeKind.OCCUPIED, POINT, _record()), CATALOG)
        assert reply.ephemeral is False
        assert reply.mode is ReplyMode.NEW
        assert "<@100>" in reply.content
        assert "⛏️ North Ore (-15, 72)" in reply.content
        assert reply.mention_roles == ()

    def test_challenge_mentions_notify_role(self):
        outcome = Outcome(
            OutcomeKind.CHALLENGED,
            POINT,
            _record(challenger=dm.UserID(200)),
            previous_holder=dm.UserID(100),
            notify_role_id=dm.RoleID(555),
        )
        reply = announcement(outcome, CATALOG)
        assert reply.content.startswith("<@&555>")
        assert "<@200> challenged <@100>" in reply.content
        assert reply.mention_roles == (555,)

    def test_challenge_without_role(self):
        outcome = Outcome(
            OutcomeKind.CHALLENGED, POINT, _record(challenger=dm.UserID(200))
        )
        reply = announcement(outcome, CATALOG)
        assert "<@&" not in reply.content
        assert reply.mention_roles == ()

    def test_judged(self):
        reply = announcement(
            Outcome(OutcomeKind.JUDGED, POINT, _record(), loser=dm.UserID(200)), CATALOG
        )
        assert reply.content.startswith("Challenge on")
        assert "<@100>" in reply.content


class TestReplies:
    def test_error_is_ephemeral(self):
        reply = Reply.error("nope")
        assert reply.ephemeral is True
        assert reply.content == "nope"

    def test_empty_target_page(self):
        back = Button("listPoints:0:5")
        targets = TargetPage(
            mode=TargetMode.CHALLENGE, page_index=0, page_size=5, targets=(), rows=((back,),)
        )
        reply = Reply.for_targets(targets)
        assert reply.mode is ReplyMode.UPDATE
        assert reply.content == "No point on this page is available to challenge."
        assert reply.rows == [[back]]


def test_pack_rows():
    buttons = [Button(f"noop:{i}") for i in range(12)]
    rows = pack_rows(buttons)
    assert [len(row) for row in rows] == [5, 5, 2]
