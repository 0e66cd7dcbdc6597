"""Occupancy (lease) records.

One row per (tenant, point) that has ever been occupied. Rows are rewritten,
never deleted: a resolved challenge rewrites holder and due time and clears
the challenger.
"""

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import BigInteger, CheckConstraint, ForeignKey, Index, Integer, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, TimestampMixin

if TYPE_CHECKING:
    from .catalog import Point


class Occupancy(Base, TimestampMixin):
    """The current lease on a point within a tenant.

    Race arbitration:
        ``uq_occupancies_tenant_point`` is the final arbiter between two
        concurrent first-time occupations of the same point. The service
        checks optimistically, inserts, and classifies a unique violation as
        "already occupied". Removing this constraint turns that path into a
        silent double grant.

    Attributes:
        id: Surrogate primary key
        tenant_id: Guild the lease belongs to
        point_id: Foreign key to the leased point
        holder_user_id: Current holder
        due_time: Lease expiry (UTC); challenges open once it has passed
        challenger_user_id: User who registered a challenge, if any
    """

    __tablename__ = "occupancies"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)

    tenant_id: Mapped[int] = mapped_column(BigInteger, nullable=False)
    point_id: Mapped[int] = mapped_column(Integer, ForeignKey("points.id"), nullable=False)

    holder_user_id: Mapped[int] = mapped_column(BigInteger, nullable=False)
    due_time: Mapped[datetime] = mapped_column(nullable=False)
    challenger_user_id: Mapped[int | None] = mapped_column(BigInteger, nullable=True)

    point: Mapped["Point"] = relationship("Point")

    __table_args__ = (
        UniqueConstraint("tenant_id", "point_id", name="uq_occupancies_tenant_point"),
        CheckConstraint(
            "challenger_user_id IS NULL OR challenger_user_id <> holder_user_id",
            name="ck_occupancies_challenger_not_holder",
        ),
        Index("idx_occupancies_holder", "tenant_id", "holder_user_id"),
        Index("idx_occupancies_challenger", "tenant_id", "challenger_user_id"),
    )

    def __repr__(self) -> str:
        return (
            f"<Occupancy(tenant={self.tenant_id}, point={self.point_id}, "
            f"holder={self.holder_user_id}, challenger={self.challenger_user_id})>"
        )
