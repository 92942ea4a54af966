"""
Time-windowed position trails.

Each object owns a monotonic queue of PositionSamples: appends only at the
tail with a timestamp no older than the last one, pruning only from the head.
A TrailStore holds the trails of one data-load generation.
"""

from collections import deque
from typing import Dict, Iterator, List, Optional, Tuple

from debris_tracker.simulation.objects import PositionSample
from debris_tracker.utils.logging_config import get_logger

logger = get_logger("tracking")

DEFAULT_WINDOW_MS = 90_000.0

# Peak alpha and stroke width for the newest trail segment
TRAIL_MAX_ALPHA = 120.0
TRAIL_MAX_THICKNESS = 2.0


def fade_weights(count: int) -> List[Tuple[float, float]]:
    """
    (alpha, thickness) for each of `count` samples, oldest first.

    Sample i ends segment i, so its weight is i / count of the peak; the
    oldest sample starts the trail and gets zero.
    """
    return [
        ((i / count) * TRAIL_MAX_ALPHA, (i / count) * TRAIL_MAX_THICKNESS)
        for i in range(count)
    ]


class Trail:
    """
    Ordered position history for one object.

    Attributes:
        window_ms: How far behind `now` a sample may lag after a prune
    """

    def __init__(self, window_ms: float = DEFAULT_WINDOW_MS):
        self.window_ms = window_ms
        self._samples: deque = deque()

    def append(self, sample: PositionSample) -> bool:
        """
        Add a sample at the tail.

        Returns:
            False (sample dropped) if it is older than the last sample
        """
        if self._samples and sample.timestamp < self._samples[-1].timestamp:
            logger.debug(
                f"Rejected out-of-order sample at {sample.timestamp} "
                f"(last {self._samples[-1].timestamp})"
            )
            return False
        self._samples.append(sample)
        return True

    def prune(self, now: float) -> int:
        """
        Drop samples with timestamp < now - window.

        Returns:
            Number of samples removed
        """
        cutoff = now - self.window_ms
        removed = 0
        while self._samples and self._samples[0].timestamp < cutoff:
            self._samples.popleft()
            removed += 1
        return removed

    @property
    def last(self) -> Optional[PositionSample]:
        return self._samples[-1] if self._samples else None

    def samples(self) -> Tuple[PositionSample, ...]:
        """Immutable copy of the current samples, oldest first."""
        return tuple(self._samples)

    def segments(self) -> List[Tuple[PositionSample, PositionSample, float, float]]:
        """
        Line segments for fading-trail rendering.

        Segment i joins samples i-1 and i and takes sample i's fade weight.

        Returns:
            List of (start, end, alpha, thickness)
        """
        samples = self._samples
        weights = fade_weights(len(samples))
        return [
            (samples[i - 1], samples[i], weights[i][0], weights[i][1])
            for i in range(1, len(samples))
        ]

    def __len__(self) -> int:
        return len(self._samples)

    def __iter__(self) -> Iterator[PositionSample]:
        return iter(self._samples)


class TrailStore:
    """Trails for every object of one generation, keyed by object id."""

    def __init__(self, window_ms: float = DEFAULT_WINDOW_MS, generation: int = 0):
        self.window_ms = window_ms
        self.generation = generation
        self._trails: Dict[int, Trail] = {}

    def record(self, object_id: int, sample: PositionSample, now: float) -> Trail:
        """Append then prune one object's trail; creates the trail on first use."""
        trail = self._trails.get(object_id)
        if trail is None:
            trail = Trail(self.window_ms)
            self._trails[object_id] = trail
        trail.append(sample)
        trail.prune(now)
        return trail

    def get(self, object_id: int) -> Optional[Trail]:
        return self._trails.get(object_id)

    def snapshot(self) -> Dict[int, Tuple[PositionSample, ...]]:
        """Immutable view of every trail."""
        return {object_id: trail.samples() for object_id, trail in self._trails.items()}

    def __contains__(self, object_id: int) -> bool:
        return object_id in self._trails

    def __len__(self) -> int:
        return len(self._trails)
