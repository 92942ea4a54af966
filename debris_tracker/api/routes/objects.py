"""
Object catalog and per-tick position endpoints.
"""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, HTTPException, Query

from debris_tracker.api.dataset_loader import combined_counts
from debris_tracker.api.models import (
    AnalysisResponse,
    CatalogStats,
    GroupStatsOut,
    PositionsFrame,
    TrackedObjectOut,
)
from debris_tracker.simulation.objects import ObjectCategory

router = APIRouter(prefix="/api/objects", tags=["objects"])


def _get_controller():
    from debris_tracker.api.main import app_state
    return app_state["controller"]


def _get_loader():
    from debris_tracker.api.main import app_state
    return app_state["loader"]


@router.get("", response_model=List[TrackedObjectOut])
async def list_objects(
    category: Optional[ObjectCategory] = Query(None, description="Filter by category"),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
):
    """List the objects of the current generation."""
    objects = _get_controller().objects
    if category is not None:
        objects = [obj for obj in objects if obj.category is category]
    return [TrackedObjectOut.from_object(obj) for obj in objects[offset:offset + limit]]


@router.get("/positions", response_model=PositionsFrame)
async def current_positions(include_trails: bool = Query(True)):
    """Latest tick: positions, trails and the hovered object."""
    controller = _get_controller()
    snapshot = controller.last_snapshot
    if snapshot is None:
        from debris_tracker.api.main import app_state
        snapshot = app_state["clock"].tick()
    return PositionsFrame.from_snapshot(snapshot, include_trails=include_trails)


@router.get("/stats", response_model=CatalogStats)
async def catalog_stats():
    """
    Category counts and element statistics for the loaded batch.

    `counts` covers the objects on the map; `catalog_counts` and the element
    averages cover every classified record of the batch.
    """
    controller = _get_controller()
    loader = _get_loader()
    result = loader.last_result
    statistics = result.statistics if result else {}
    return CatalogStats(
        source=result.source if result else None,
        total=len(controller.objects),
        counts={category.value: n for category, n in controller.counts().items()},
        catalog_size=result.catalog_size if result else 0,
        catalog_counts={category.value: n for category, n in loader.observed_counts().items()},
        avg_inclination_deg=statistics.get("avg_inclination_deg", 0.0),
        avg_altitude_km=statistics.get("avg_altitude_km", 0.0),
        synthetic=result.synthetic if result else False,
        warning=result.warning if result else None,
    )


@router.get("/analysis", response_model=AnalysisResponse)
async def group_analysis(refresh: bool = Query(False, description="Reload every group first")):
    """Per-group statistics over the analysis groups, each capped at 40 records."""
    groups = await _get_loader().get_analysis(refresh=refresh)
    totals = combined_counts(groups)
    return AnalysisResponse(
        groups=[GroupStatsOut.from_group(group) for group in groups],
        total=sum(group.count for group in groups),
        counts={category.value: n for category, n in totals.items()},
    )


@router.get("/{object_id}", response_model=TrackedObjectOut)
async def get_object(object_id: int):
    """Details for one object of the current generation."""
    obj = _get_controller().find(object_id)
    if obj is None:
        raise HTTPException(status_code=404, detail=f"Object {object_id} not found")
    return TrackedObjectOut.from_object(obj)
