"""Persistence adapters for the occupancy core."""

from .occupancy_store import OccupancyStore, StoreTransaction

__all__ = ["OccupancyStore", "StoreTransaction"]
