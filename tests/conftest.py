"""Pytest configuration and shared fixtures.

Adds the `src/` directory to `sys.path` so tests can import the `pal_occupy`
package without requiring an editable install in CI, and provides an
in-memory SQLite store seeded with a seven-point catalog.
"""

import sys
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest

SRC_PATH = Path(__file__).resolve().parents[1] / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

from pal_occupy.catalog import ReferenceCatalog  # noqa: E402
from pal_occupy.config import Settings  # noqa: E402
from pal_occupy.database import create_db_engine, create_session_factory, init_db  # noqa: E402
from pal_occupy.models import Point, seed_point_types  # noqa: E402
from pal_occupy.repository import OccupancyStore  # noqa: E402
from pal_occupy.services import ListPaginator, OccupancyService  # noqa: E402

START = datetime(2026, 5, 1, 12, 0, tzinfo=UTC)
GUILD = 9001

# (id, category mask, x, y, name); point 3 and point 5 share category 0x1
CATALOG_POINTS = (
    (1, 0b0010, 120, -40, "Coal Ridge"),
    (2, 0b0100, 88, 310, "Sulfur Vent"),
    (3, 0b0001, -15, 72, "North Ore"),
    (4, 0b0110, 240, 12, "Mixed Pit"),
    (5, 0b0001, -200, -310, "South Ore"),
    (6, 0b1000, 33, 33, "Quartz Cave"),
    (7, 0b1001, 401, -5, "Deep Quartz"),
)


class Clock:
    """Settable clock injected as ``now`` into services."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now += delta


class FakeSink:
    """ReplySink recording everything it is asked to deliver."""

    def __init__(self) -> None:
        self.deferred: list[bool] = []
        self.replies = []

    async def defer(self, *, ephemeral: bool = True) -> None:
        self.deferred.append(ephemeral)

    async def send(self, reply) -> None:
        self.replies.append(reply)

    @property
    def last(self):
        return self.replies[-1]


def seed_catalog(session_factory) -> None:
    with session_factory() as session:
        seed_point_types(session)
        session.add_all(
            Point(id=point_id, category_mask=mask, x=x, y=y, name=name)
            for point_id, mask, x, y, name in CATALOG_POINTS
        )
        session.commit()


@pytest.fixture
def settings():
    return Settings(database_url="sqlite://", discord_token=None)


@pytest.fixture
def engine(settings):
    """In-memory SQLite engine with the schema created; disposed after use."""
    engine = create_db_engine(settings)
    init_db(engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def session_factory(engine):
    return create_session_factory(engine)


@pytest.fixture
def store(session_factory):
    """Store over an empty schema."""
    return OccupancyStore(session_factory)


@pytest.fixture
def seeded_store(store, session_factory):
    """Store over the seven-point catalog."""
    seed_catalog(session_factory)
    return store


@pytest.fixture
def catalog(seeded_store):
    return ReferenceCatalog.load(seeded_store)


@pytest.fixture
def tenant():
    return GUILD


@pytest.fixture
def clock():
    return Clock(START)


@pytest.fixture
def service(seeded_store, catalog, clock):
    return OccupancyService(seeded_store, catalog, now=clock)


@pytest.fixture
def paginator(seeded_store, catalog, clock):
    return ListPaginator(seeded_store, catalog, now=clock)


@pytest.fixture
def sink():
    return FakeSink()
