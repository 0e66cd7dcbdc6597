"""HTTP routes for the pal-occupy API (read-only)."""

from __future__ import annotations

import asyncio
from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from pydantic import BaseModel

from pal_occupy.api.runtime import AppState
from pal_occupy.database import check_database_health
from pal_occupy.domain import models as dm
from pal_occupy.domain.errors import StoreError
from pal_occupy.interaction.tokens import MAX_PAGE_INDEX, MAX_PAGE_SIZE
from pal_occupy.services.list_paginator import ListPage, PageEntry

router = APIRouter()


def get_state(request: Request) -> AppState:
    state = getattr(request.app.state, "app_state", None)
    if state is None:  # pragma: no cover - FastAPI should always initialise state
        raise RuntimeError("API state not initialised")
    return state


AppStateDep = Annotated[AppState, Depends(get_state)]


class PointTypeSummary(BaseModel):
    id: int
    name: str
    emoji: str


class PointSummary(BaseModel):
    id: int
    name: str
    x: int
    y: int
    categories: list[int]
    emojis: list[str]


class LeaseSummary(BaseModel):
    state: str
    holder_user_id: int | None = None
    due_time: datetime | None = None
    challenger_user_id: int | None = None


class ListEntrySummary(BaseModel):
    point: PointSummary
    lease: LeaseSummary


class ListPageResponse(BaseModel):
    tenant_id: int
    page_index: int
    page_size: int
    max_page: int
    entries: list[ListEntrySummary]


class CatalogResponse(BaseModel):
    point_types: list[PointTypeSummary]
    points: list[PointSummary]


def _point_summary(point: dm.Point, emojis: list[str]) -> PointSummary:
    return PointSummary(
        id=point.id,
        name=point.name,
        x=point.x,
        y=point.y,
        categories=sorted(point.categories),
        emojis=emojis,
    )


def _lease_summary(entry: PageEntry) -> LeaseSummary:
    match entry.state:
        case dm.Vacant():
            return LeaseSummary(state="vacant")
        case dm.Leased(holder=holder, due=due):
            return LeaseSummary(state="leased", holder_user_id=holder, due_time=due)
        case dm.Contested(holder=holder, due=due, challenger=challenger):
            return LeaseSummary(
                state="contested",
                holder_user_id=holder,
                due_time=due,
                challenger_user_id=challenger,
            )
    raise AssertionError(entry.state)


def _page_response(page: ListPage) -> ListPageResponse:
    return ListPageResponse(
        tenant_id=page.tenant_id,
        page_index=page.page_index,
        page_size=page.page_size,
        max_page=page.max_page,
        entries=[
            ListEntrySummary(
                point=_point_summary(entry.point, list(entry.emojis)),
                lease=_lease_summary(entry),
            )
            for entry in page.entries
        ],
    )


@router.get("/health")
async def health(state: AppStateDep) -> dict[str, object]:
    database = await asyncio.to_thread(check_database_health, state.engine)
    return {
        "status": "ok" if database else "degraded",
        "database": database,
        "points": len(state.catalog),
        "discord": state.bot_status,
    }


@router.get("/points", response_model=CatalogResponse)
async def list_points(state: AppStateDep) -> CatalogResponse:
    catalog = state.catalog
    return CatalogResponse(
        point_types=[
            PointTypeSummary(id=t.id, name=t.name, emoji=t.emoji) for t in catalog.point_types()
        ],
        points=[_point_summary(p, catalog.emojis_for(p)) for p in catalog.points()],
    )


@router.get("/tenants/{tenant_id}/points", response_model=ListPageResponse)
async def tenant_points(
    tenant_id: int,
    state: AppStateDep,
    page: Annotated[int, Query(ge=0, le=MAX_PAGE_INDEX)] = 0,
    page_size: Annotated[int | None, Query(ge=1, le=MAX_PAGE_SIZE)] = None,
) -> ListPageResponse:
    size = page_size or state.settings.default_page_size
    try:
        rendered = await asyncio.to_thread(state.paginator.render, tenant_id, page, size, False)
    except StoreError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="database unavailable"
        ) from exc
    return _page_response(rendered)
