"""Dataclasses describing catalog entries, leases and their state.

The ORM rows in :mod:`pal_occupy.models` are translated into these immutable
values at the store boundary; services, the paginator and the router only
ever see the dataclasses below.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import NewType

from .categories import CategorySet

# --- Strongly typed identifiers -------------------------------------------------

TenantID = NewType("TenantID", int)
UserID = NewType("UserID", int)
RoleID = NewType("RoleID", int)
PointID = NewType("PointID", int)


# --- Catalog --------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class PointType:
    """A category (ore type) identified by a single bit flag."""

    id: int
    name: str
    emoji: str


@dataclass(frozen=True, slots=True)
class Point:
    """A contestable point on the map."""

    id: PointID
    categories: CategorySet
    x: int
    y: int
    name: str


# --- Lease state ----------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Vacant:
    """No lease has ever been recorded for the point."""


@dataclass(frozen=True, slots=True)
class Leased:
    """Held by ``holder`` until ``due``; open to challenge afterwards."""

    holder: UserID
    due: datetime

    def is_expired(self, now: datetime) -> bool:
        return self.due <= now


@dataclass(frozen=True, slots=True)
class Contested:
    """Expired lease with a registered challenger awaiting judgement."""

    holder: UserID
    due: datetime
    challenger: UserID


OccupancyState = Vacant | Leased | Contested


@dataclass(frozen=True, slots=True)
class OccupancyRecord:
    """A stored lease row."""

    tenant_id: TenantID
    point_id: PointID
    holder_user_id: UserID
    due_time: datetime
    challenger_user_id: UserID | None = None

    @property
    def state(self) -> Leased | Contested:
        if self.challenger_user_id is None:
            return Leased(self.holder_user_id, self.due_time)
        return Contested(self.holder_user_id, self.due_time, self.challenger_user_id)


def classify(record: OccupancyRecord | None) -> OccupancyState:
    """Collapse an optional record into the tagged state variant."""

    if record is None:
        return Vacant()
    return record.state


@dataclass(frozen=True, slots=True)
class Holding:
    """A point a user holds or challenges, with that point's categories."""

    point_id: PointID
    categories: CategorySet


@dataclass(frozen=True, slots=True)
class ListEntry:
    """A catalog point joined with its lease in one tenant."""

    point: Point
    record: OccupancyRecord | None

    @property
    def state(self) -> OccupancyState:
        return classify(self.record)
