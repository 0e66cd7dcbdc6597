"""Occupancy Service for pal-occupy.

This module implements the lease state machine for a (tenant, point) pair:

* ``occupy``: take a vacant point, or register a challenge on an expired one;
* ``force_occupy``: administrative overwrite, no checks;
* ``judge``: resolve a pending challenge in favour of one side.

Every check-then-write sequence runs inside one store transaction. Concurrent
writers are not serialised in process; the store's uniqueness constraint and
conditional updates decide who wins, and the loser is told the same thing it
would have been told had it arrived a moment later.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, replace
from datetime import datetime, timedelta

from pal_occupy.catalog import ReferenceCatalog
from pal_occupy.domain import models as dm
from pal_occupy.domain.categories import CategorySet
from pal_occupy.domain.enums import JudgeWinner, OutcomeKind
from pal_occupy.domain.errors import (
    CategoryConflictError,
    ChallengePendingError,
    LeaseActiveError,
    NoPendingChallengeError,
    RaceLostError,
    RecordConflictError,
    UnknownPointError,
    ValidationError,
)
from pal_occupy.models import utc_now
from pal_occupy.repository import OccupancyStore, StoreTransaction

logger = logging.getLogger(__name__)

# Constants
DEFAULT_LEASE = timedelta(days=14)


@dataclass(frozen=True, slots=True)
class Outcome:
    """Result of a successful transition.

    Attributes:
        kind: Which transition ran
        point: The catalog point involved
        record: The lease as written
        previous_holder: Holder before the transition (challenges, judgements)
        notify_role_id: Role to mention for a new challenge, if configured
        loser: The side that lost a judgement
    """

    kind: OutcomeKind
    point: dm.Point
    record: dm.OccupancyRecord
    previous_holder: dm.UserID | None = None
    notify_role_id: dm.RoleID | None = None
    loser: dm.UserID | None = None


class OccupancyService:
    """Service executing lease transitions against the store."""

    def __init__(
        self,
        store: OccupancyStore,
        catalog: ReferenceCatalog,
        *,
        lease_duration: timedelta = DEFAULT_LEASE,
        now: Callable[[], datetime] = utc_now,
    ):
        self.store = store
        self.catalog = catalog
        self.lease_duration = lease_duration
        self._now = now

    def _require_point(self, point_id: int) -> dm.Point:
        point = self.catalog.get_point(point_id)
        if point is None:
            raise UnknownPointError(point_id)
        return point

    @staticmethod
    def has_conflicting_category(
        tx: StoreTransaction, tenant_id: int, user_id: int, categories: CategorySet
    ) -> bool:
        """True if any point the user holds or challenges shares a category."""

        return any(
            holding.categories.intersects(categories)
            for holding in tx.records_for_user(tenant_id, user_id)
        )

    def occupy(self, tenant_id: int, actor_id: int, point_id: int) -> Outcome:
        """Occupy a vacant point or challenge an expired lease.

        Args:
            tenant_id: Guild the request belongs to
            actor_id: Requesting user
            point_id: Target point

        Returns:
            Outcome with kind OCCUPIED or CHALLENGED

        Raises:
            UnknownPointError: point_id is not in the catalog
            CategoryConflictError: the actor already holds or challenges a
                point sharing a category with this one
            LeaseActiveError: the current lease has not expired
            ChallengePendingError: someone already registered a challenge
            RaceLostError: a concurrent writer won and left no readable state
        """
        point = self._require_point(point_id)
        now = self._now()

        try:
            with self.store.transaction() as tx:
                if self.has_conflicting_category(tx, tenant_id, actor_id, point.categories):
                    raise CategoryConflictError(point.id)

                record = tx.get_record(tenant_id, point.id)
                match dm.classify(record):
                    case dm.Vacant():
                        written = dm.OccupancyRecord(
                            tenant_id=dm.TenantID(tenant_id),
                            point_id=point.id,
                            holder_user_id=dm.UserID(actor_id),
                            due_time=now + self.lease_duration,
                        )
                        tx.insert_record(written)
                        outcome = Outcome(OutcomeKind.OCCUPIED, point, written)
                    case dm.Leased(due=due) | dm.Contested(due=due) if due > now:
                        raise LeaseActiveError(point.id, due)
                    case dm.Contested():
                        raise ChallengePendingError(point.id)
                    case dm.Leased(holder=holder):
                        tx.update_challenger(tenant_id, point.id, actor_id)
                        written = replace(record, challenger_user_id=dm.UserID(actor_id))
                        outcome = Outcome(
                            OutcomeKind.CHALLENGED,
                            point,
                            written,
                            previous_holder=holder,
                            notify_role_id=tx.get_notify_role(tenant_id),
                        )
        except RecordConflictError:
            raise self._lost_race(tenant_id, point, now) from None

        logger.info(
            "tenant %s: user %s %s point %s", tenant_id, actor_id, outcome.kind, point.id
        )
        return outcome

    def _lost_race(self, tenant_id: int, point: dm.Point, now: datetime) -> Exception:
        """Re-read the point after losing a write race and pick the matching rejection."""

        with self.store.transaction() as tx:
            record = tx.get_record(tenant_id, point.id)

        logger.info("tenant %s: lost write race on point %s", tenant_id, point.id)
        match dm.classify(record):
            case dm.Leased(due=due) | dm.Contested(due=due) if due > now:
                return LeaseActiveError(point.id, due)
            case dm.Contested():
                return ChallengePendingError(point.id)
            case _:
                return RaceLostError(point.id)

    def force_occupy(self, tenant_id: int, target_id: int, point_id: int) -> Outcome:
        """Grant ``target_id`` a fresh lease regardless of the current state.

        No category check is made; this is the operators' override.
        """
        point = self._require_point(point_id)
        written = dm.OccupancyRecord(
            tenant_id=dm.TenantID(tenant_id),
            point_id=point.id,
            holder_user_id=dm.UserID(target_id),
            due_time=self._now() + self.lease_duration,
        )
        with self.store.transaction() as tx:
            previous = tx.get_record(tenant_id, point.id)
            tx.upsert_record(written)

        logger.info(
            "tenant %s: point %s force-occupied for user %s", tenant_id, point.id, target_id
        )
        return Outcome(
            OutcomeKind.FORCED,
            point,
            written,
            previous_holder=previous.holder_user_id if previous is not None else None,
        )

    def judge(self, tenant_id: int, point_id: int, winner: JudgeWinner | int) -> Outcome:
        """Resolve a pending challenge.

        Args:
            tenant_id: Guild the point belongs to
            point_id: Contested point
            winner: Either side as a JudgeWinner, or the winning user's id,
                which must be the holder or the challenger

        Returns:
            Outcome with kind JUDGED; the winner holds a fresh lease

        Raises:
            NoPendingChallengeError: the point has no registered challenger
                (or another operator resolved it first)
            ValidationError: an explicit winner is neither party
        """
        point = self._require_point(point_id)
        now = self._now()

        try:
            with self.store.transaction() as tx:
                state = dm.classify(tx.get_record(tenant_id, point.id))
                if not isinstance(state, dm.Contested):
                    raise NoPendingChallengeError(point.id)

                if isinstance(winner, JudgeWinner):
                    winner_id = state.holder if winner is JudgeWinner.HOLDER else state.challenger
                elif winner in (state.holder, state.challenger):
                    winner_id = dm.UserID(winner)
                else:
                    raise ValidationError("The winner must be the holder or the challenger.")
                loser_id = state.challenger if winner_id == state.holder else state.holder

                written = dm.OccupancyRecord(
                    tenant_id=dm.TenantID(tenant_id),
                    point_id=point.id,
                    holder_user_id=winner_id,
                    due_time=now + self.lease_duration,
                )
                tx.update_record(
                    tenant_id,
                    point.id,
                    holder_user_id=winner_id,
                    due_time=written.due_time,
                    expected_challenger=state.challenger,
                )
        except RecordConflictError:
            raise NoPendingChallengeError(point.id) from None

        logger.info(
            "tenant %s: challenge on point %s resolved for user %s", tenant_id, point.id, winner_id
        )
        return Outcome(
            OutcomeKind.JUDGED, point, written, previous_holder=state.holder, loser=loser_id
        )

    def pending_challenge(self, tenant_id: int, point_id: int) -> tuple[dm.Point, dm.Contested]:
        """Return the point and its contested state, for showing the verdict choices."""

        point = self._require_point(point_id)
        with self.store.transaction() as tx:
            state = dm.classify(tx.get_record(tenant_id, point.id))
        if not isinstance(state, dm.Contested):
            raise NoPendingChallengeError(point.id)
        return point, state

    def set_notify_role(self, tenant_id: int, role_id: int) -> None:
        with self.store.transaction() as tx:
            tx.set_notify_role(tenant_id, role_id)
        logger.info("tenant %s: challenge notifications go to role %s", tenant_id, role_id)

    def record_command(
        self, tenant_id: int | None, channel_id: int, user_id: int, content: str
    ) -> None:
        """Append an audit entry for an invoked command."""

        with self.store.transaction() as tx:
            tx.append_audit(tenant_id, channel_id, user_id, content)
