"""Service layer for the pal-occupy bot.

- OccupancyService: the lease state machine (occupy, challenge, force, judge)
  plus guild settings and the audit log
- ListPaginator: list pages and target pickers for the interactive list

Both take an :class:`~pal_occupy.repository.OccupancyStore` and the loaded
:class:`~pal_occupy.catalog.ReferenceCatalog`; wiring happens in
:mod:`pal_occupy.factory`.
"""

from pal_occupy.services.list_paginator import ListPage, ListPaginator, PageEntry, TargetPage
from pal_occupy.services.occupancy_service import DEFAULT_LEASE, OccupancyService, Outcome

__all__ = [
    "DEFAULT_LEASE",
    "ListPage",
    "ListPaginator",
    "OccupancyService",
    "Outcome",
    "PageEntry",
    "TargetPage",
]
