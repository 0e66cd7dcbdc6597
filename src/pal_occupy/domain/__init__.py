"""Pure domain layer: identifiers, category sets, lease state and errors."""

from pal_occupy.domain import errors, models
from pal_occupy.domain.categories import CategorySet
from pal_occupy.domain.enums import JudgeWinner, OutcomeKind, TargetMode

__all__ = [
    "CategorySet",
    "JudgeWinner",
    "OutcomeKind",
    "TargetMode",
    "errors",
    "models",
]
