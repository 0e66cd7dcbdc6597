"""Tests for list pages and target pickers."""

from datetime import timedelta

import pytest

from pal_occupy.domain import models as dm
from pal_occupy.domain.enums import TargetMode
from pal_occupy.domain.errors import PermissionDeniedError
from pal_occupy.interaction.tokens import Action, parse_token

ALICE = 100
BOB = 200


def _ids(buttons):
    return [b.custom_id for b in buttons]


class TestRender:
    def test_first_page_of_seven(self, paginator, tenant):
        page = paginator.render(tenant, 0, 5, is_privileged=False)

        assert [e.point.id for e in page.entries] == [1, 2, 3, 4, 5]
        assert page.max_page == 2
        previous, refresh, following = page.navigation
        assert previous.disabled
        assert previous.custom_id == "noop:prev"
        assert refresh.custom_id == "listPoints:0:5"
        assert not following.disabled
        assert following.custom_id == "listPoints:1:5"

    def test_last_page_of_seven(self, paginator, tenant):
        page = paginator.render(tenant, 1, 5, is_privileged=False)

        assert [e.point.id for e in page.entries] == [6, 7]
        previous, _, following = page.navigation
        assert not previous.disabled
        assert previous.custom_id == "listPoints:0:5"
        assert following.disabled
        assert following.custom_id == "noop:next"

    def test_single_page(self, paginator, tenant):
        page = paginator.render(tenant, 0, 20, is_privileged=False)

        assert page.max_page == 1
        assert len(page.entries) == 7
        assert page.navigation[0].disabled
        assert page.navigation[2].disabled

    def test_page_past_the_end_is_empty(self, paginator, tenant):
        page = paginator.render(tenant, 4, 5, is_privileged=False)

        assert page.entries == ()
        assert not page.navigation[0].disabled
        assert page.navigation[2].disabled

    @pytest.mark.parametrize(("size", "expected"), [(1, 7), (2, 4), (3, 3), (7, 1), (8, 1)])
    def test_max_page_is_ceiling(self, paginator, tenant, size, expected):
        assert paginator.render(tenant, 0, size, is_privileged=False).max_page == expected

    def test_entries_carry_leases_and_emojis(self, paginator, service, tenant):
        service.occupy(tenant, ALICE, 4)
        page = paginator.render(tenant, 0, 5, is_privileged=False)

        mixed = page.entries[3]
        assert mixed.emojis == ("🪨", "🟡")
        assert mixed.state == dm.Leased(holder=ALICE, due=mixed.record.due_time)
        assert page.entries[0].state == dm.Vacant()

    def test_judge_button_only_for_privileged(self, paginator, tenant):
        member = paginator.render(tenant, 0, 5, is_privileged=False)
        admin = paginator.render(tenant, 0, 5, is_privileged=True)

        assert _ids(member.actions) == ["showOccupy:0:5", "showChallenge:0:5"]
        assert _ids(admin.actions) == ["showOccupy:0:5", "showChallenge:0:5", "showJudge:0:5"]

    def test_every_token_parses(self, paginator, tenant):
        page = paginator.render(tenant, 1, 5, is_privileged=True)
        for row in page.rows:
            for button in row:
                parse_token(button.custom_id)


class TestRenderTargets:
    def test_occupy_targets_skip_held_categories(self, paginator, service, tenant):
        service.occupy(tenant, ALICE, 3)
        service.occupy(tenant, BOB, 1)

        targets = paginator.render_targets(tenant, ALICE, TargetMode.OCCUPY, 0, 5, False)

        # 1 is taken, 3 is Alice's, 5 shares category 0x1 with it
        assert [t.point.id for t in targets.targets] == [2, 4]
        assert _ids(targets.rows[0]) == ["occupy:2:0:5", "occupy:4:0:5"]
        assert _ids(targets.rows[-1]) == ["listPoints:0:5"]

    def test_challenge_targets_are_expired_and_unchallenged(
        self, paginator, service, clock, tenant
    ):
        service.occupy(tenant, ALICE, 1)
        service.occupy(tenant, ALICE, 2)
        clock.advance(timedelta(days=15))
        service.occupy(tenant, ALICE, 3)
        service.occupy(tenant, 300, 2)

        targets = paginator.render_targets(tenant, BOB, TargetMode.CHALLENGE, 0, 5, False)

        assert [t.point.id for t in targets.targets] == [1]
        assert targets.rows[0][0].custom_id == "challenge:1:0:5"

    def test_judge_targets_are_contested(self, paginator, service, clock, tenant):
        service.occupy(tenant, ALICE, 6)
        clock.advance(timedelta(days=15))
        service.occupy(tenant, BOB, 6)

        targets = paginator.render_targets(tenant, 999, TargetMode.JUDGE, 1, 5, True)

        assert [t.point.id for t in targets.targets] == [6]
        assert targets.rows[0][0].custom_id == "judge:6:1:5"
        assert targets.rows[0][0].emoji == "💎"

    def test_judge_requires_privilege(self, paginator, tenant):
        with pytest.raises(PermissionDeniedError):
            paginator.render_targets(tenant, ALICE, TargetMode.JUDGE, 0, 5, False)

    def test_buttons_are_packed_five_per_row(self, paginator, tenant):
        targets = paginator.render_targets(tenant, ALICE, TargetMode.OCCUPY, 0, 20, False)

        assert [len(row) for row in targets.rows] == [5, 2, 1]
        for row in targets.rows:
            for button in row:
                assert parse_token(button.custom_id).action in {Action.OCCUPY, Action.LIST_POINTS}
