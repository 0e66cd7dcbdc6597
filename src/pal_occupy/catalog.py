"""Immutable reference catalog of point types and points.

The catalog is built exactly once, at boot, from the store and then handed to
every component that needs it. There is no global: code that holds a
``ReferenceCatalog`` holds a fully loaded one.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from sqlalchemy.exc import SQLAlchemyError

from pal_occupy.domain import models as dm
from pal_occupy.domain.categories import CategorySet
from pal_occupy.domain.errors import CatalogLoadError, StoreError
from pal_occupy.repository import OccupancyStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ReferenceCatalog:
    """Read-only view over the deployment's point types and points."""

    _point_types: tuple[dm.PointType, ...]
    _points: tuple[dm.Point, ...]
    _by_id: Mapping[int, dm.Point] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "_by_id", MappingProxyType({point.id: point for point in self._points})
        )

    @classmethod
    def from_definitions(
        cls, point_types: Iterable[dm.PointType], points: Iterable[dm.Point]
    ) -> ReferenceCatalog:
        return cls(
            tuple(sorted(point_types, key=lambda t: t.id)),
            tuple(sorted(points, key=lambda p: p.id)),
        )

    @classmethod
    def load(cls, store: OccupancyStore) -> ReferenceCatalog:
        """Read the catalog tables.

        Raises:
            CatalogLoadError: If the query fails or the catalog has no points.
                Running with a partial or empty catalog is never acceptable.
        """
        try:
            with store.transaction() as tx:
                point_types = tx.load_point_types()
                points = tx.load_points()
        except (StoreError, SQLAlchemyError) as exc:
            raise CatalogLoadError("cannot load the point catalog") from exc

        if not points:
            raise CatalogLoadError("the point catalog is empty")

        known = CategorySet(frozenset(t.id for t in point_types))
        for point in points:
            unknown = point.categories.flags - known.flags
            if unknown:
                raise CatalogLoadError(
                    f"point {point.id} references unknown point types {sorted(unknown)}"
                )

        catalog = cls.from_definitions(point_types, points)
        logger.info(
            "loaded catalog: %d point types, %d points", len(catalog._point_types), len(catalog)
        )
        return catalog

    def points(self) -> Iterator[dm.Point]:
        return iter(self._points)

    def point_types(self) -> Iterator[dm.PointType]:
        return iter(self._point_types)

    def get_point(self, point_id: int) -> dm.Point | None:
        return self._by_id.get(point_id)

    def types_of(self, point: dm.Point) -> list[dm.PointType]:
        """The point's categories, in type id order."""

        return [t for t in self._point_types if t.id in point.categories]

    def emojis_for(self, point: dm.Point) -> list[str]:
        return [t.emoji for t in self.types_of(point)]

    def __len__(self) -> int:
        return len(self._points)
