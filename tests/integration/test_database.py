"""Integration tests for database setup, seeding and catalog import."""

from datetime import UTC, datetime

import pytest
from sqlalchemy import func, inspect, select
from sqlalchemy.exc import IntegrityError

from pal_occupy.config import Settings
from pal_occupy.database import check_database_health, create_db_engine, init_db
from pal_occupy.models import (
    DEFAULT_POINT_TYPES,
    Occupancy,
    Point,
    PointType,
    import_catalog,
    seed_point_types,
)


def _point_count(session) -> int:
    return session.scalar(select(func.count()).select_from(Point))


class TestDatabaseInitialization:
    def test_all_tables_created(self, engine):
        assert set(inspect(engine).get_table_names()) == {
            "command_logs",
            "notify_roles",
            "occupancies",
            "point_types",
            "points",
        }

    def test_health_check(self, engine):
        assert check_database_health(engine) is True

    def test_health_check_failure(self, tmp_path):
        missing = tmp_path / "no" / "such" / "dir" / "db.sqlite"
        broken = create_db_engine(Settings(database_url=f"sqlite:///{missing}"))
        try:
            assert check_database_health(broken) is False
        finally:
            broken.dispose()

    def test_file_database(self, tmp_path):
        engine = create_db_engine(Settings(database_url=f"sqlite:///{tmp_path / 'occupy.db'}"))
        try:
            assert check_database_health(engine) is True
        finally:
            engine.dispose()

    def test_init_db_is_idempotent(self, engine):
        init_db(engine)
        assert check_database_health(engine) is True


class TestConstraints:
    def _lease(self, **overrides) -> Occupancy:
        values = {
            "tenant_id": 1,
            "point_id": 3,
            "holder_user_id": 100,
            "due_time": datetime(2026, 5, 15, tzinfo=UTC),
        }
        values.update(overrides)
        return Occupancy(**values)

    def test_one_lease_per_point_and_tenant(self, seeded_store, session_factory):
        with session_factory() as session:
            session.add(self._lease())
            session.commit()
            session.add(self._lease(holder_user_id=200))
            with pytest.raises(IntegrityError):
                session.commit()

    def test_challenger_differs_from_holder(self, seeded_store, session_factory):
        with session_factory() as session:
            session.add(self._lease(challenger_user_id=100))
            with pytest.raises(IntegrityError):
                session.commit()

    def test_lease_requires_known_point(self, session_factory):
        with session_factory() as session:
            session.add(self._lease(point_id=42))
            with pytest.raises(IntegrityError):
                session.commit()


class TestSeedData:
    def test_seed_point_types_is_idempotent(self, session_factory):
        with session_factory() as session:
            seed_point_types(session)
            seed_point_types(session)
            ids = session.scalars(select(PointType.id).order_by(PointType.id)).all()

        assert ids == [type_id for type_id, _, _ in DEFAULT_POINT_TYPES]

    def test_import_catalog(self, session_factory):
        payload = {
            "point_types": [
                {"id": 1, "name": "Ore", "emoji": ":ore:123456789012345678"},
                {"id": 2, "name": "Coal", "emoji": "🪨"},
            ],
            "points": [
                {"id": 1, "category_mask": 3, "x": 10, "y": -4, "name": "Twin Seam"},
                {"id": 2, "category_mask": 2, "x": 0, "y": 0, "name": "Coal Hole"},
            ],
        }
        with session_factory() as session:
            assert import_catalog(session, payload) == (2, 2)
            point = session.get(Point, 1)
            assert (point.category_mask, point.name) == (3, "Twin Seam")

    def test_import_updates_existing_rows(self, session_factory):
        with session_factory() as session:
            seed_point_types(session)
            for name in ("A", "B"):
                point = {"id": 1, "category_mask": 1, "x": 0, "y": 0, "name": name}
                import_catalog(session, {"points": [point]})
            assert session.get(Point, 1).name == "B"
            assert _point_count(session) == 1

    @pytest.mark.parametrize(
        ("payload", "message"),
        [
            ({"point_types": [{"id": 3, "name": "Bad", "emoji": "x"}]}, "single bit"),
            ({"point_types": [{"id": 0, "name": "Bad", "emoji": "x"}]}, "single bit"),
            (
                {"points": [{"id": 1, "category_mask": 16, "x": 0, "y": 0, "name": "P"}]},
                "unknown point types",
            ),
            (
                {"points": [{"id": 1, "category_mask": 0, "x": 0, "y": 0, "name": "P"}]},
                "unknown point types",
            ),
        ],
    )
    def test_import_rejects_invalid_catalog(self, session_factory, payload, message):
        with session_factory() as session:
            seed_point_types(session)
            with pytest.raises(ValueError, match=message):
                import_catalog(session, payload)
            assert _point_count(session) == 0
