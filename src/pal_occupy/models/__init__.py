"""SQLAlchemy models for the pal-occupy bot.

This module exports all database models and the catalog seeding helpers.
"""

from .base import Base, TimestampCreatedMixin, TimestampMixin, UTCDateTime, utc_now

# Catalog models
from .catalog import Point, PointType

# Guild settings and audit log
from .guild import CommandLog, NotifyRole

# Lease records
from .occupancy import Occupancy

# Seed data functions
from .seed_data import DEFAULT_POINT_TYPES, import_catalog, seed_point_types

__all__ = [
    "DEFAULT_POINT_TYPES",
    "Base",
    "CommandLog",
    "NotifyRole",
    "Occupancy",
    "Point",
    "PointType",
    "TimestampCreatedMixin",
    "TimestampMixin",
    "UTCDateTime",
    "import_catalog",
    "seed_point_types",
    "utc_now",
]
