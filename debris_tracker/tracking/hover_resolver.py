"""
Pointer hover resolution against the current screen positions.
"""

from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np

from debris_tracker.simulation.objects import ObjectCategory

DEFAULT_PICK_RADIUS_PX = 20.0


@dataclass(frozen=True)
class RenderedObject:
    """One drawable dot for the rendering sink."""
    object_id: int
    x: float
    y: float
    category: ObjectCategory
    lat: float = 0.0
    lon: float = 0.0


class HoverResolver:
    """
    Finds the object under the pointer.

    Picks the first object in iteration order lying strictly inside the pick
    radius, not the nearest one, so a tie between overlapping dots always
    resolves the same way.
    """

    def __init__(self, pick_radius: float = DEFAULT_PICK_RADIUS_PX):
        self.pick_radius = pick_radius

    def resolve(
        self, pointer_x: float, pointer_y: float, objects: Sequence[RenderedObject]
    ) -> Optional[RenderedObject]:
        """
        Args:
            pointer_x: Pointer x in screen pixels
            pointer_y: Pointer y in screen pixels
            objects: Current rendered objects in canonical order

        Returns:
            The hovered object, or None
        """
        if not objects:
            return None

        xy = np.array([(obj.x, obj.y) for obj in objects], dtype=float)
        d2 = (xy[:, 0] - pointer_x) ** 2 + (xy[:, 1] - pointer_y) ** 2
        hits = np.flatnonzero(d2 < self.pick_radius ** 2)

        if hits.size == 0:
            return None
        return objects[int(hits[0])]
