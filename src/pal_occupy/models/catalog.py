"""Catalog models: point types (ore categories) and points.

Both tables are reference data. They are read once at startup into the
in-memory catalog and are only written by the administrative import path.
"""

from sqlalchemy import CheckConstraint, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


class PointType(Base):
    """A point category, identified by a single bit flag.

    Attributes:
        id: Power-of-two flag; points reference categories by OR-ing these
        name: Display name of the category (e.g. "Coal")
        emoji: Emoji used when rendering the category; custom guild emoji use
            the ``:name:id`` form
    """

    __tablename__ = "point_types"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    name: Mapped[str] = mapped_column(String, nullable=False, unique=True)
    emoji: Mapped[str] = mapped_column(String, nullable=False)

    __table_args__ = (
        CheckConstraint("id > 0 AND (id & (id - 1)) = 0", name="ck_point_types_single_bit"),
    )

    def __repr__(self) -> str:
        return f"<PointType(id={self.id}, name='{self.name}')>"


class Point(Base):
    """A contestable point on the world map.

    Attributes:
        id: Stable identifier users type into commands
        category_mask: Bitwise OR of the PointType ids this point belongs to
        x: Map x coordinate
        y: Map y coordinate
        name: Display name
    """

    __tablename__ = "points"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    category_mask: Mapped[int] = mapped_column(Integer, nullable=False)
    x: Mapped[int] = mapped_column(Integer, nullable=False)
    y: Mapped[int] = mapped_column(Integer, nullable=False)
    name: Mapped[str] = mapped_column(String, nullable=False)

    __table_args__ = (
        CheckConstraint("category_mask > 0", name="ck_points_category_mask"),
        Index("idx_points_category_mask", "category_mask"),
    )

    def __repr__(self) -> str:
        return f"<Point(id={self.id}, name='{self.name}', mask={self.category_mask})>"
