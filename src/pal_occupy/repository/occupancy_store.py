"""SQLAlchemy-backed store for leases, guild settings and the audit log.

All reads and writes go through :meth:`OccupancyStore.transaction`, which
brackets one session in a single database transaction. Services run their
check-then-write sequences inside one such block so the check never informs a
write from a different snapshot.

Writes that can race are conditional:

* ``insert_record`` relies on ``uq_occupancies_tenant_point`` and raises
  :class:`RecordConflictError` when it loses;
* ``update_challenger`` and ``update_record`` only match rows whose challenger
  still has the value the caller read, and raise the same error otherwise.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime

from sqlalchemy import func, or_, select, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from pal_occupy.domain import models as dm
from pal_occupy.domain.categories import CategorySet
from pal_occupy.domain.errors import RecordConflictError, StoreError
from pal_occupy.models import CommandLog, NotifyRole, Occupancy, Point, PointType

logger = logging.getLogger(__name__)


def _to_record(row: Occupancy) -> dm.OccupancyRecord:
    return dm.OccupancyRecord(
        tenant_id=dm.TenantID(row.tenant_id),
        point_id=dm.PointID(row.point_id),
        holder_user_id=dm.UserID(row.holder_user_id),
        due_time=row.due_time,
        challenger_user_id=(
            dm.UserID(row.challenger_user_id) if row.challenger_user_id is not None else None
        ),
    )


def _to_point(row: Point) -> dm.Point:
    return dm.Point(
        id=dm.PointID(row.id),
        categories=CategorySet.from_mask(row.category_mask),
        x=row.x,
        y=row.y,
        name=row.name,
    )


class StoreTransaction:
    """Operations available inside one store transaction."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def _insert(self, table):
        dialect = self.session.get_bind().dialect.name
        if dialect == "postgresql":
            return postgresql.insert(table)
        if dialect == "sqlite":
            return sqlite.insert(table)
        raise StoreError(f"upsert is not supported on {dialect}")

    # --- catalog ----------------------------------------------------------------

    def load_point_types(self) -> list[dm.PointType]:
        rows = self.session.scalars(select(PointType).order_by(PointType.id)).all()
        return [dm.PointType(id=row.id, name=row.name, emoji=row.emoji) for row in rows]

    def load_points(self) -> list[dm.Point]:
        rows = self.session.scalars(select(Point).order_by(Point.id)).all()
        return [_to_point(row) for row in rows]

    def count_points(self) -> int:
        return self.session.execute(select(func.count()).select_from(Point)).scalar_one()

    # --- leases -----------------------------------------------------------------

    def get_record(self, tenant_id: int, point_id: int) -> dm.OccupancyRecord | None:
        row = self.session.scalars(
            select(Occupancy).where(
                Occupancy.tenant_id == tenant_id, Occupancy.point_id == point_id
            )
        ).first()
        return _to_record(row) if row is not None else None

    def insert_record(self, record: dm.OccupancyRecord) -> None:
        """Insert a new lease; raise :class:`RecordConflictError` if one exists."""

        self.session.add(
            Occupancy(
                tenant_id=record.tenant_id,
                point_id=record.point_id,
                holder_user_id=record.holder_user_id,
                due_time=record.due_time,
                challenger_user_id=record.challenger_user_id,
            )
        )
        try:
            self.session.flush()
        except IntegrityError as exc:
            raise RecordConflictError(record.tenant_id, record.point_id) from exc

    def upsert_record(self, record: dm.OccupancyRecord) -> None:
        """Insert a lease or replace holder, due time and challenger wholesale."""

        stmt = self._insert(Occupancy.__table__).values(
            tenant_id=record.tenant_id,
            point_id=record.point_id,
            holder_user_id=record.holder_user_id,
            due_time=record.due_time,
            challenger_user_id=record.challenger_user_id,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["tenant_id", "point_id"],
            set_={
                "holder_user_id": stmt.excluded.holder_user_id,
                "due_time": stmt.excluded.due_time,
                "challenger_user_id": stmt.excluded.challenger_user_id,
                "updated_at": func.now(),
            },
        )
        self.session.execute(stmt)

    def update_challenger(self, tenant_id: int, point_id: int, challenger_user_id: int) -> None:
        """Register a challenger on a lease that has none yet."""

        result = self.session.execute(
            update(Occupancy)
            .where(
                Occupancy.tenant_id == tenant_id,
                Occupancy.point_id == point_id,
                Occupancy.challenger_user_id.is_(None),
            )
            .values(challenger_user_id=challenger_user_id)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            raise RecordConflictError(tenant_id, point_id)

    def update_record(
        self,
        tenant_id: int,
        point_id: int,
        *,
        holder_user_id: int,
        due_time: datetime,
        expected_challenger: int,
    ) -> None:
        """Rewrite holder and due time and clear the challenger.

        Only matches while ``expected_challenger`` is still the registered
        challenger, so two operators judging at once cannot both win.
        """

        result = self.session.execute(
            update(Occupancy)
            .where(
                Occupancy.tenant_id == tenant_id,
                Occupancy.point_id == point_id,
                Occupancy.challenger_user_id == expected_challenger,
            )
            .values(holder_user_id=holder_user_id, due_time=due_time, challenger_user_id=None)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            raise RecordConflictError(tenant_id, point_id)

    def records_for_user(self, tenant_id: int, user_id: int) -> list[dm.Holding]:
        """Every lease the user holds or challenges in the tenant."""

        rows = self.session.execute(
            select(Occupancy.point_id, Point.category_mask)
            .join(Point, Point.id == Occupancy.point_id)
            .where(
                Occupancy.tenant_id == tenant_id,
                or_(Occupancy.holder_user_id == user_id, Occupancy.challenger_user_id == user_id),
            )
        ).all()
        return [
            dm.Holding(point_id=dm.PointID(point_id), categories=CategorySet.from_mask(mask))
            for point_id, mask in rows
        ]

    def list_by_tenant(self, tenant_id: int, offset: int, limit: int) -> list[dm.ListEntry]:
        """A page of the catalog, in catalog order, joined with the tenant's leases."""

        if offset < 0 or limit <= 0:
            return []
        rows = self.session.execute(
            select(Point, Occupancy)
            .outerjoin(
                Occupancy,
                (Occupancy.point_id == Point.id) & (Occupancy.tenant_id == tenant_id),
            )
            .order_by(Point.id)
            .offset(offset)
            .limit(limit)
        ).all()
        return [
            dm.ListEntry(
                point=_to_point(point),
                record=_to_record(occupancy) if occupancy is not None else None,
            )
            for point, occupancy in rows
        ]

    # --- guild settings and audit -----------------------------------------------

    def get_notify_role(self, tenant_id: int) -> dm.RoleID | None:
        role_id = self.session.scalar(
            select(NotifyRole.role_id).where(NotifyRole.tenant_id == tenant_id)
        )
        return dm.RoleID(role_id) if role_id is not None else None

    def set_notify_role(self, tenant_id: int, role_id: int) -> None:
        stmt = self._insert(NotifyRole.__table__).values(tenant_id=tenant_id, role_id=role_id)
        stmt = stmt.on_conflict_do_update(
            index_elements=["tenant_id"],
            set_={"role_id": stmt.excluded.role_id, "updated_at": func.now()},
        )
        self.session.execute(stmt)

    def append_audit(
        self, tenant_id: int | None, channel_id: int, user_id: int, content: str
    ) -> None:
        self.session.add(
            CommandLog(tenant_id=tenant_id, channel_id=channel_id, user_id=user_id, content=content)
        )


class OccupancyStore:
    """Factory for store transactions over a session factory."""

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self._session_factory = session_factory

    @contextmanager
    def transaction(self) -> Iterator[StoreTransaction]:
        """Run a block in one transaction: commit on success, roll back on any error.

        Raises:
            StoreError: When the database fails; the original exception is chained.
        """
        session = self._session_factory()
        try:
            yield StoreTransaction(session)
            session.commit()
        except SQLAlchemyError as exc:
            session.rollback()
            logger.warning("store transaction rolled back: %s", exc)
            raise StoreError("database operation failed") from exc
        except BaseException:
            session.rollback()
            raise
        finally:
            session.close()
