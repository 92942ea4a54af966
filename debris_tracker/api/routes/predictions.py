"""
Forecast endpoints for the predictions view.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, HTTPException, Query

from debris_tracker.api.dataset_loader import combined_counts
from debris_tracker.api.models import (
    CategoryForecastOut,
    CategoryForecastResponse,
    MarkerEvent,
    ProjectionPointOut,
    ProjectionResponse,
    ProjectionSummaryOut,
)
from debris_tracker.forecast.projection import marker_events, project, project_categories, summarize

router = APIRouter(prefix="/api/predictions", tags=["predictions"])


def _get_projection_config():
    from debris_tracker.api.main import app_state
    return app_state["config"].projection


@router.get("", response_model=ProjectionResponse)
async def growth_projection(
    start_year: Optional[int] = Query(None, ge=1950, le=2200),
    end_year: Optional[int] = Query(None, ge=1950, le=2200),
    baseline: Optional[int] = Query(None, ge=0, le=1_000_000),
):
    """Year-by-year debris growth projection with risk levels."""
    cfg = _get_projection_config()
    start_year = cfg.start_year if start_year is None else start_year
    end_year = cfg.end_year if end_year is None else end_year
    baseline = cfg.baseline_count if baseline is None else baseline

    if end_year < start_year:
        raise HTTPException(status_code=400, detail=f"end_year {end_year} precedes start_year {start_year}")

    points = project(start_year, end_year, baseline)
    summary = summarize(points)

    return ProjectionResponse(
        points=[
            ProjectionPointOut(
                year=p.year,
                total=p.total,
                large_debris=p.large_debris,
                small_debris=p.small_debris,
                collision_events=p.collision_events,
                risk_level=p.risk_level.value,
            )
            for p in points
        ],
        summary=ProjectionSummaryOut(
            final_year=summary.final_year,
            final_total=summary.final_total,
            final_large_debris=summary.final_large_debris,
            final_risk_level=summary.final_risk_level.value,
            growth_percent=summary.growth_percent,
        ) if summary else None,
        markers=[MarkerEvent(year=m.first_year, label=m.label) for m in marker_events(start_year, end_year)],
    )


@router.get("/categories", response_model=CategoryForecastResponse)
async def category_forecast(
    start_year: Optional[int] = Query(None, ge=1950, le=2200),
    years: Optional[int] = Query(None, ge=0, le=100),
    all_groups: bool = Query(False, description="Seed from the analysis groups instead of the loaded batch"),
):
    """
    Per-category forecast seeded from observed counts.

    By default the seed is every classified record of the loaded batch, not
    just the objects on the map; `all_groups` sums the analysis groups.
    """
    from debris_tracker.api.main import app_state

    cfg = _get_projection_config()
    loader = app_state["loader"]
    if all_groups:
        counts = combined_counts(await loader.get_analysis())
    else:
        counts = loader.observed_counts()

    points = project_categories(
        counts,
        start_year=cfg.category_start_year if start_year is None else start_year,
        years=cfg.category_horizon_years if years is None else years,
    )
    return CategoryForecastResponse(
        seed="groups" if all_groups else "batch",
        counts={category.value: n for category, n in counts.items()},
        points=[
            CategoryForecastOut(
                year=p.year,
                total_objects=p.total_objects,
                debris=p.debris,
                active_satellites=p.active_satellites,
                rocket_bodies=p.rocket_bodies,
                collision_risk=p.collision_risk,
            )
            for p in points
        ],
    )
