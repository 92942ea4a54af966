"""
Tracking - per-object trails and pointer hover resolution.

Components:
- trail_buffer: time-windowed monotonic position history
- hover_resolver: first-hit pointer lookup over the rendered objects

Example:
    >>> from debris_tracker.tracking import Trail, HoverResolver
    >>> resolver = HoverResolver(pick_radius=20)
    >>> hovered = resolver.resolve(100, 100, snapshot.objects)
"""

from .trail_buffer import Trail, TrailStore
from .hover_resolver import HoverResolver, RenderedObject

__all__ = [
    "Trail",
    "TrailStore",
    "HoverResolver",
    "RenderedObject",
]
