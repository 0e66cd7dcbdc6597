"""Tests for action token encoding and parsing."""

import pytest
from hypothesis import given
from hypothesis import strategies as st

from pal_occupy.domain.enums import JudgeWinner, TargetMode
from pal_occupy.domain.errors import TokenParseError, TokenTooLongError, UnknownActionError
from pal_occupy.interaction.tokens import (
    MAX_PAGE_SIZE,
    MAX_TOKEN_LENGTH,
    Action,
    ActionToken,
    PageCursor,
    parse_token,
)

page_indexes = st.integers(min_value=0, max_value=9_999_999)
page_sizes = st.integers(min_value=1, max_value=MAX_PAGE_SIZE)
point_ids = st.integers(min_value=1, max_value=9_999_999)


class TestEncoding:
    def test_list_points_layouts(self):
        assert ActionToken.list_points().encode() == "listPoints"
        assert ActionToken.list_points(PageCursor(2, 5)).encode() == "listPoints:2:5"

    def test_show_and_target_tokens(self):
        cursor = PageCursor(1, 5)
        assert ActionToken.show(TargetMode.CHALLENGE, cursor).encode() == "showChallenge:1:5"
        assert ActionToken.target(TargetMode.OCCUPY, 7, cursor).encode() == "occupy:7:1:5"
        assert ActionToken.target(TargetMode.JUDGE, 7, cursor).encode() == "judge:7:1:5"

    def test_resolve_token(self):
        token = ActionToken.resolve(12, JudgeWinner.CHALLENGER, PageCursor(0, 20))
        assert token.encode() == "resolve:12:c:0:20"

    def test_noop_token(self):
        assert str(ActionToken.noop("next")) == "noop:next"

    def test_too_long_token_rejected(self):
        with pytest.raises(TokenTooLongError):
            ActionToken.noop("x" * MAX_TOKEN_LENGTH).encode()

    def test_fields_must_match_a_layout(self):
        with pytest.raises(ValueError):
            ActionToken(Action.OCCUPY, cursor=PageCursor(0, 5)).encode()


class TestParsing:
    def test_fresh_list(self):
        token = parse_token("listPoints")
        assert token.action is Action.LIST_POINTS
        assert token.cursor is None

    def test_occupy(self):
        token = parse_token("occupy:3:1:5")
        assert token.action is Action.OCCUPY
        assert token.point_id == 3
        assert token.cursor == PageCursor(1, 5)

    def test_resolve(self):
        token = parse_token("resolve:4:h:0:5")
        assert token.winner is JudgeWinner.HOLDER
        assert token.point_id == 4

    def test_unknown_action(self):
        with pytest.raises(UnknownActionError) as excinfo:
            parse_token("teleport:1:2")
        assert excinfo.value.action == "teleport"
        assert str(excinfo.value) == "Unknown command."

    @pytest.mark.parametrize(
        "raw",
        [
            "listPoints:",
            "listPoints:1",
            "listPoints:1:5:9",
            "showOccupy",
            "occupy:1:2",
            "occupy:x:0:5",
            "occupy:-1:0:5",
            "occupy:+1:0:5",
            "occupy:1:0:0",
            "occupy:1:0:21",
            "occupy:1::5",
            "resolve:1:x:0:5",
            "resolve:1:0:5",
            "noop:",
            "listPoints:٣:5",
        ],
    )
    def test_malformed_arguments(self, raw):
        with pytest.raises(TokenParseError):
            parse_token(raw)

    def test_oversized_input(self):
        with pytest.raises(TokenTooLongError):
            parse_token("listPoints:" + "1" * MAX_TOKEN_LENGTH)

    @given(page_indexes, page_sizes)
    def test_page_round_trip(self, page_index, page_size):
        cursor = PageCursor(page_index, page_size)
        assert parse_token(ActionToken.list_points(cursor).encode()).cursor == cursor

    @given(st.sampled_from(list(TargetMode)), point_ids, page_indexes, page_sizes)
    def test_target_round_trip(self, mode, point_id, page_index, page_size):
        token = ActionToken.target(mode, point_id, PageCursor(page_index, page_size))
        assert parse_token(token.encode()) == token


class TestPageCursor:
    def test_offset(self):
        assert PageCursor(3, 5).offset == 15

    @pytest.mark.parametrize(("index", "size"), [(-1, 5), (0, 0), (0, MAX_PAGE_SIZE + 1)])
    def test_rejects_out_of_range(self, index, size):
        with pytest.raises(TokenParseError):
            PageCursor(index, size)
