"""Seed data and catalog import for the reference tables.

The catalog (point types and points) is reference data owned by the
deployment. These helpers are used by the admin CLI; a running bot only picks
up changes after a restart.
"""

from collections.abc import Iterable, Mapping
from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from .catalog import Point, PointType

DEFAULT_POINT_TYPES: tuple[tuple[int, str, str], ...] = (
    (1, "Ore", "⛏️"),
    (2, "Coal", "🪨"),
    (4, "Sulfur", "🟡"),
    (8, "Pure Quartz", "💎"),
)


def seed_point_types(session: Session) -> None:
    """Seed the point_types table with the default ore categories.

    Args:
        session: SQLAlchemy session to use for database operations
    """
    result = session.execute(select(PointType).limit(1))
    if result.scalar_one_or_none() is not None:
        return  # Already seeded

    session.add_all(
        PointType(id=type_id, name=name, emoji=emoji)
        for type_id, name, emoji in DEFAULT_POINT_TYPES
    )
    session.commit()


def _validate_mask(mask: int, known_types: Iterable[int]) -> None:
    allowed = 0
    for type_id in known_types:
        allowed |= type_id
    if mask <= 0 or mask & ~allowed:
        raise ValueError(f"category mask {mask} references unknown point types")


def import_catalog(session: Session, payload: Mapping[str, Any]) -> tuple[int, int]:
    """Insert or update point types and points from a mapping.

    The payload has the shape::

        {
            "point_types": [{"id": 1, "name": "Ore", "emoji": ":ore:123456789012345678"}],
            "points": [{"id": 1, "category_mask": 1, "x": 10, "y": -4, "name": "..."}]
        }

    Args:
        session: SQLAlchemy session
        payload: Parsed catalog document

    Returns:
        Tuple of (point types written, points written)

    Raises:
        ValueError: If a type id is not a single bit or a point references
            unknown categories
    """
    try:
        types = list(payload.get("point_types", []))
        points = list(payload.get("points", []))

        for raw in types:
            type_id = int(raw["id"])
            if type_id <= 0 or type_id & (type_id - 1):
                raise ValueError(f"point type id {type_id} is not a single bit flag")
            session.merge(PointType(id=type_id, name=raw["name"], emoji=raw["emoji"]))
        session.flush()

        known = session.scalars(select(PointType.id)).all()
        for raw in points:
            mask = int(raw["category_mask"])
            _validate_mask(mask, known)
            session.merge(
                Point(
                    id=int(raw["id"]),
                    category_mask=mask,
                    x=int(raw["x"]),
                    y=int(raw["y"]),
                    name=raw["name"],
                )
            )

        session.commit()
        return len(types), len(points)
    except Exception:
        session.rollback()
        raise
