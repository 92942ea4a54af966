"""
SimulationController — single owner of the tick-loop state.

Holds the current object generation, its trails and the pointer position.
`advance(now)` propagates every object, records trail samples, resolves the
hover target and returns an immutable TickSnapshot for the rendering sink.
`replace_dataset` is the only way a new object set gets in; it swaps the
objects and a fresh TrailStore together so no trail outlives its generation.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Dict, Iterable, Mapping, Optional, Tuple

from debris_tracker.simulation.classifier import category_counts
from debris_tracker.simulation.objects import ObjectCategory, PositionSample, TrackedObject
from debris_tracker.simulation.orbital_mechanics import PositionPropagator
from debris_tracker.tracking.hover_resolver import HoverResolver, RenderedObject
from debris_tracker.tracking.trail_buffer import TrailStore
from debris_tracker.utils.config_loader import HoverConfig, TrailConfig, ViewConfig
from debris_tracker.utils.coordinates import geodetic_to_screen
from debris_tracker.utils.logging_config import get_logger

logger = get_logger("simulation")


@dataclass(frozen=True)
class TickSnapshot:
    """Everything the rendering sink needs for one frame."""
    generation: int
    timestamp: float  # ms since Unix epoch
    objects: Tuple[RenderedObject, ...]
    trails: Mapping[int, Tuple[PositionSample, ...]]
    hovered: Optional[RenderedObject]


class SimulationController:
    """
    Owns the simulation state and advances it one tick at a time.

    Example:
        >>> controller = SimulationController(PositionPropagator(SkyfieldBackend()))
        >>> controller.replace_dataset(objects)
        >>> snapshot = controller.advance(datetime.now(timezone.utc))
        >>> print(f"{len(snapshot.objects)} objects, hovered={snapshot.hovered}")
    """

    def __init__(
        self,
        propagator: PositionPropagator,
        view: Optional[ViewConfig] = None,
        trail: Optional[TrailConfig] = None,
        hover: Optional[HoverConfig] = None,
    ):
        self.propagator = propagator
        self.view = view or ViewConfig()
        self.trail_window_ms = (trail or TrailConfig()).window_seconds * 1000.0
        self.resolver = HoverResolver((hover or HoverConfig()).pick_radius_px)

        self._generation = 0
        self._objects: Tuple[TrackedObject, ...] = ()
        self._trails = TrailStore(self.trail_window_ms, generation=0)
        self._pointer: Optional[Tuple[float, float]] = None
        self._last_snapshot: Optional[TickSnapshot] = None

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def objects(self) -> Tuple[TrackedObject, ...]:
        return self._objects

    @property
    def trails(self) -> TrailStore:
        return self._trails

    @property
    def pointer(self) -> Optional[Tuple[float, float]]:
        return self._pointer

    @property
    def last_snapshot(self) -> Optional[TickSnapshot]:
        return self._last_snapshot

    def counts(self) -> Dict[ObjectCategory, int]:
        return category_counts(self._objects)

    def replace_dataset(self, objects: Iterable[TrackedObject]) -> int:
        """
        Swap in a new object set and start a new generation.

        Objects repeating an earlier catalog id are dropped so every trail
        belongs to exactly one object.

        Returns:
            The new generation number
        """
        unique = []
        seen = set()
        for obj in objects:
            if obj.catalog_id in seen:
                logger.warning(f"Dropping duplicate catalog id {obj.catalog_id} ({obj.name})")
                continue
            seen.add(obj.catalog_id)
            unique.append(obj)

        generation = self._generation + 1
        trails = TrailStore(self.trail_window_ms, generation=generation)

        # Rebind together; the tick loop sees either the old set or the new one
        self._objects, self._trails, self._generation = tuple(unique), trails, generation
        self._last_snapshot = None

        logger.info(f"Dataset generation {generation}: {len(unique)} objects")
        return generation

    def set_pointer(self, x: float, y: float) -> None:
        self._pointer = (x, y)

    def clear_pointer(self) -> None:
        self._pointer = None

    def resize(self, width: int, height: int) -> None:
        self.view = ViewConfig(
            width=width, height=height, earth_radius_fraction=self.view.earth_radius_fraction
        )

    def advance(self, now: datetime) -> TickSnapshot:
        """
        Run one tick: propagate, append-then-prune trails, resolve hover.

        Args:
            now: Tick time (naive datetimes are treated as UTC)
        """
        if now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)
        now_ms = now.timestamp() * 1000.0

        objects, trails, generation = self._objects, self._trails, self._generation
        width, height = self.view.width, self.view.height
        fraction = self.view.earth_radius_fraction

        rendered = []
        for obj in objects:
            lat, lon, _ = self.propagator.propagate(obj, now)
            x, y = geodetic_to_screen(lat, lon, width, height, fraction)
            trails.record(obj.catalog_id, PositionSample(x, y, lat, lon, now_ms), now_ms)
            rendered.append(RenderedObject(obj.catalog_id, x, y, obj.category, lat, lon))

        hovered = None
        if self._pointer is not None:
            hovered = self.resolver.resolve(self._pointer[0], self._pointer[1], rendered)

        snapshot = TickSnapshot(
            generation=generation,
            timestamp=now_ms,
            objects=tuple(rendered),
            trails=MappingProxyType(trails.snapshot()),
            hovered=hovered,
        )
        self._last_snapshot = snapshot
        return snapshot

    def find(self, object_id: int) -> Optional[TrackedObject]:
        for obj in self._objects:
            if obj.catalog_id == object_id:
                return obj
        return None
