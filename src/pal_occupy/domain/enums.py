"""Enumerations used across the occupancy domain."""

from __future__ import annotations

from enum import StrEnum


class OutcomeKind(StrEnum):
    """Which transition a successful service call performed."""

    OCCUPIED = "occupied"
    CHALLENGED = "challenged"
    FORCED = "forced"
    JUDGED = "judged"


class TargetMode(StrEnum):
    """Which point picker a ``show*`` button opens."""

    OCCUPY = "occupy"
    CHALLENGE = "challenge"
    JUDGE = "judge"


class JudgeWinner(StrEnum):
    """Side chosen by the operator when resolving a challenge.

    Values are single characters so they fit compactly in action tokens.
    """

    HOLDER = "h"
    CHALLENGER = "c"
