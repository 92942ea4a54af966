"""
Pydantic response schemas for the debris tracker API.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Sequence, Tuple

from pydantic import BaseModel

from debris_tracker.simulation.objects import (
    CATEGORY_COLORS,
    ObjectCategory,
    PositionSample,
    TrackedObject,
)
from debris_tracker.simulation.tle_loader import DataSource
from debris_tracker.tracking.hover_resolver import RenderedObject
from debris_tracker.tracking.trail_buffer import fade_weights


class HealthResponse(BaseModel):
    status: str
    objects_loaded: int
    generation: int
    source: Optional[DataSource] = None
    synthetic: bool = False


class TrackedObjectOut(BaseModel):
    id: int
    name: str
    category: ObjectCategory
    epoch_year: Optional[int] = None
    country: Optional[str] = None
    mission: Optional[str] = None
    has_elements: bool = False

    @classmethod
    def from_object(cls, obj: TrackedObject) -> "TrackedObjectOut":
        return cls(
            id=obj.catalog_id,
            name=obj.name,
            category=obj.category,
            epoch_year=obj.epoch_year,
            country=obj.country,
            mission=obj.mission,
            has_elements=obj.has_elements,
        )


class ObjectPosition(BaseModel):
    id: int
    x: float
    y: float
    lat: float
    lon: float
    category: ObjectCategory
    color: Tuple[int, int, int]

    @classmethod
    def from_rendered(cls, obj: RenderedObject) -> "ObjectPosition":
        return cls(
            id=obj.object_id, x=obj.x, y=obj.y, lat=obj.lat, lon=obj.lon,
            category=obj.category, color=CATEGORY_COLORS[obj.category],
        )


class TrailPoint(BaseModel):
    """One trail sample; alpha and thickness style the segment ending here."""
    x: float
    y: float
    timestamp: float
    alpha: float
    thickness: float

    @classmethod
    def from_samples(cls, samples: Sequence[PositionSample]) -> List["TrailPoint"]:
        return [
            cls(x=s.x, y=s.y, timestamp=s.timestamp, alpha=alpha, thickness=thickness)
            for s, (alpha, thickness) in zip(samples, fade_weights(len(samples)))
        ]


class PositionsFrame(BaseModel):
    generation: int
    timestamp: float
    objects: List[ObjectPosition]
    trails: Dict[int, List[TrailPoint]]
    hovered: Optional[ObjectPosition] = None

    @classmethod
    def from_snapshot(cls, snapshot, include_trails: bool = True) -> "PositionsFrame":
        trails = {}
        if include_trails:
            trails = {
                object_id: TrailPoint.from_samples(samples)
                for object_id, samples in snapshot.trails.items()
            }
        return cls(
            generation=snapshot.generation,
            timestamp=snapshot.timestamp,
            objects=[ObjectPosition.from_rendered(o) for o in snapshot.objects],
            trails=trails,
            hovered=ObjectPosition.from_rendered(snapshot.hovered) if snapshot.hovered else None,
        )


class CatalogStats(BaseModel):
    source: Optional[DataSource] = None
    total: int
    counts: Dict[str, int]
    catalog_size: int
    catalog_counts: Dict[str, int]
    avg_inclination_deg: float
    avg_altitude_km: float
    synthetic: bool
    warning: Optional[str] = None


class GroupStatsOut(BaseModel):
    source: DataSource
    label: str
    count: int
    avg_inclination_deg: float
    avg_altitude_km: float
    counts: Dict[str, int]
    synthetic: bool
    warning: Optional[str] = None

    @classmethod
    def from_group(cls, group) -> "GroupStatsOut":
        return cls(
            source=group.source,
            label=group.source.label,
            count=group.count,
            avg_inclination_deg=group.avg_inclination_deg,
            avg_altitude_km=group.avg_altitude_km,
            counts={category.value: n for category, n in group.counts.items()},
            synthetic=group.synthetic,
            warning=group.warning,
        )


class AnalysisResponse(BaseModel):
    groups: List[GroupStatsOut]
    total: int
    counts: Dict[str, int]


class ProjectionPointOut(BaseModel):
    year: int
    total: int
    large_debris: int
    small_debris: int
    collision_events: int
    risk_level: str


class MarkerEvent(BaseModel):
    year: int
    label: str


class ProjectionSummaryOut(BaseModel):
    final_year: int
    final_total: int
    final_large_debris: int
    final_risk_level: str
    growth_percent: Optional[float] = None


class ProjectionResponse(BaseModel):
    points: List[ProjectionPointOut]
    summary: Optional[ProjectionSummaryOut] = None
    markers: List[MarkerEvent]


class CategoryForecastOut(BaseModel):
    year: int
    total_objects: int
    debris: int
    active_satellites: int
    rocket_bodies: int
    collision_risk: float


class CategoryForecastResponse(BaseModel):
    seed: str
    counts: Dict[str, int]
    points: List[CategoryForecastOut]


class SimulationStatus(BaseModel):
    is_playing: bool
    interval_ms: float
    tick_count: int
    generation: int
    object_count: int
    source: Optional[DataSource] = None
    pointer: Optional[List[float]] = None


class RefreshResponse(BaseModel):
    source: DataSource
    committed: bool
    generation: Optional[int] = None
    object_count: int
    synthetic: bool
    warning: Optional[str] = None
