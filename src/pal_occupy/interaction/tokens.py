"""Action tokens carried in button custom ids.

A token is ``action[:arg]*``. The action is everything before the first
``:``; the remaining fields are positional arguments whose number and types
depend on the action:

=================  ============================================
``listPoints``     (none) or ``<pageIndex>:<pageSize>``
``showOccupy``     ``<pageIndex>:<pageSize>``
``showChallenge``  ``<pageIndex>:<pageSize>``
``showJudge``      ``<pageIndex>:<pageSize>``
``occupy``         ``<pointId>:<pageIndex>:<pageSize>``
``challenge``      ``<pointId>:<pageIndex>:<pageSize>``
``judge``          ``<pointId>:<pageIndex>:<pageSize>``
``resolve``        ``<pointId>:<h|c>:<pageIndex>:<pageSize>``
``noop``           ``<slot>``
=================  ============================================

Tokens may be pressed long after they were issued, possibly by a newer
deployment, so parsing is strict: unknown actions and malformed arguments are
rejected with a user-facing error, never guessed at. New actions can be added
freely; changing the arguments of an existing action needs a new action name.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

from pal_occupy.domain.enums import JudgeWinner, TargetMode
from pal_occupy.domain.errors import TokenParseError, TokenTooLongError, UnknownActionError

DELIMITER = ":"
MAX_TOKEN_LENGTH = 100  # platform limit on custom ids
MAX_PAGE_SIZE = 20
_MAX_INT_DIGITS = 10
MAX_PAGE_INDEX = 10**_MAX_INT_DIGITS - 1


class Action(StrEnum):
    LIST_POINTS = "listPoints"
    SHOW_OCCUPY = "showOccupy"
    SHOW_CHALLENGE = "showChallenge"
    SHOW_JUDGE = "showJudge"
    OCCUPY = "occupy"
    CHALLENGE = "challenge"
    JUDGE = "judge"
    RESOLVE = "resolve"
    NOOP = "noop"


SHOW_ACTIONS: dict[TargetMode, Action] = {
    TargetMode.OCCUPY: Action.SHOW_OCCUPY,
    TargetMode.CHALLENGE: Action.SHOW_CHALLENGE,
    TargetMode.JUDGE: Action.SHOW_JUDGE,
}

TARGET_ACTIONS: dict[TargetMode, Action] = {
    TargetMode.OCCUPY: Action.OCCUPY,
    TargetMode.CHALLENGE: Action.CHALLENGE,
    TargetMode.JUDGE: Action.JUDGE,
}

# Accepted argument layouts per action, by field name.
_LAYOUTS: dict[Action, tuple[tuple[str, ...], ...]] = {
    Action.LIST_POINTS: ((), ("page", "size")),
    Action.SHOW_OCCUPY: (("page", "size"),),
    Action.SHOW_CHALLENGE: (("page", "size"),),
    Action.SHOW_JUDGE: (("page", "size"),),
    Action.OCCUPY: (("point", "page", "size"),),
    Action.CHALLENGE: (("point", "page", "size"),),
    Action.JUDGE: (("point", "page", "size"),),
    Action.RESOLVE: (("point", "winner", "page", "size"),),
    Action.NOOP: (("slot",),),
}


@dataclass(frozen=True, slots=True)
class PageCursor:
    """Which page of the point list a token refers back to."""

    page_index: int
    page_size: int

    def __post_init__(self) -> None:
        if self.page_index < 0:
            raise TokenParseError("Page index must not be negative.")
        if not 1 <= self.page_size <= MAX_PAGE_SIZE:
            raise TokenParseError(f"Page size must be between 1 and {MAX_PAGE_SIZE}.")

    @property
    def offset(self) -> int:
        return self.page_index * self.page_size

    def with_page(self, page_index: int) -> PageCursor:
        return PageCursor(page_index, self.page_size)


@dataclass(frozen=True, slots=True)
class ActionToken:
    """A decoded token. Fields not used by the action are None."""

    action: Action
    cursor: PageCursor | None = None
    point_id: int | None = None
    winner: JudgeWinner | None = None
    slot: str | None = None

    # --- constructors ------------------------------------------------------------

    @classmethod
    def list_points(cls, cursor: PageCursor | None = None) -> ActionToken:
        return cls(Action.LIST_POINTS, cursor=cursor)

    @classmethod
    def show(cls, mode: TargetMode, cursor: PageCursor) -> ActionToken:
        return cls(SHOW_ACTIONS[mode], cursor=cursor)

    @classmethod
    def target(cls, mode: TargetMode, point_id: int, cursor: PageCursor) -> ActionToken:
        return cls(TARGET_ACTIONS[mode], cursor=cursor, point_id=point_id)

    @classmethod
    def resolve(cls, point_id: int, winner: JudgeWinner, cursor: PageCursor) -> ActionToken:
        return cls(Action.RESOLVE, cursor=cursor, point_id=point_id, winner=winner)

    @classmethod
    def noop(cls, slot: str) -> ActionToken:
        return cls(Action.NOOP, slot=slot)

    # --- wire format -------------------------------------------------------------

    def _field(self, name: str) -> str:
        match name:
            case "page":
                return str(self.cursor.page_index)
            case "size":
                return str(self.cursor.page_size)
            case "point":
                return str(self.point_id)
            case "winner":
                return self.winner.value
            case "slot":
                return self.slot
        raise AssertionError(name)

    def _layout(self) -> tuple[str, ...]:
        for layout in _LAYOUTS[self.action]:
            if all(self._has(name) for name in layout) and self._uses_only(layout):
                return layout
        raise ValueError(f"{self!r} does not match any layout of {self.action}")

    def _has(self, name: str) -> bool:
        return {
            "page": self.cursor is not None,
            "size": self.cursor is not None,
            "point": self.point_id is not None,
            "winner": self.winner is not None,
            "slot": self.slot is not None,
        }[name]

    def _uses_only(self, layout: tuple[str, ...]) -> bool:
        return all(self._has(name) == (name in layout) for name in _FIELD_NAMES)

    def encode(self) -> str:
        """Serialise to a custom id.

        Raises:
            TokenTooLongError: If the result exceeds the platform limit.
        """
        fields = [self.action.value, *(self._field(name) for name in self._layout())]
        token = DELIMITER.join(fields)
        if len(token) > MAX_TOKEN_LENGTH:
            raise TokenTooLongError(token, MAX_TOKEN_LENGTH)
        return token

    def __str__(self) -> str:
        return self.encode()


_FIELD_NAMES = ("page", "size", "point", "winner", "slot")


def _parse_int(raw: str, what: str) -> int:
    if not raw or len(raw) > _MAX_INT_DIGITS or not (raw.isascii() and raw.isdigit()):
        raise TokenParseError(f"Invalid {what}: {raw!r}.")
    return int(raw)


def parse_token(raw: str) -> ActionToken:
    """Decode a custom id into an :class:`ActionToken`.

    Raises:
        UnknownActionError: The action name is not known to this deployment.
        TokenParseError: The arguments do not match the action's layout.
    """
    if len(raw) > MAX_TOKEN_LENGTH:
        raise TokenTooLongError(raw, MAX_TOKEN_LENGTH)

    name, sep, rest = raw.partition(DELIMITER)
    try:
        action = Action(name)
    except ValueError:
        raise UnknownActionError(name) from None

    args = rest.split(DELIMITER) if sep else []
    layout = next((lay for lay in _LAYOUTS[action] if len(lay) == len(args)), None)
    if layout is None:
        raise TokenParseError(f"Wrong number of arguments for {action.value}.")

    values = dict(zip(layout, args, strict=True))
    cursor = None
    if "page" in values:
        cursor = PageCursor(
            _parse_int(values["page"], "page index"), _parse_int(values["size"], "page size")
        )
    point_id = None
    if "point" in values:
        point_id = _parse_int(values["point"], "point id")
    winner = None
    if "winner" in values:
        try:
            winner = JudgeWinner(values["winner"])
        except ValueError:
            raise TokenParseError(f"Invalid verdict: {values['winner']!r}.") from None
    slot = None
    if "slot" in values:
        if not values["slot"]:
            raise TokenParseError("Empty slot name.")
        slot = values["slot"]

    return ActionToken(action, cursor=cursor, point_id=point_id, winner=winner, slot=slot)
