"""Integration of the frame graph with measurement streams and filters."""

import logging
from dataclasses import dataclass
from typing import Dict, Hashable, List, Optional, Sequence, Tuple

import numpy as np
import numpy.typing as npt

from .config import FusionSettings, SeedConfig
from .filters import ExponentialMovingAverage, WeightedMean
from .pose import Pose
from .seed import populate_graph
from .transform_graph import FrameGraph, PathResolver, TransformLookup

logger = logging.getLogger(__name__)


@dataclass
class MeasurementEvent:
    """A single observation from the perception pipeline.

    ``transform`` is the measured pose of ``target`` in ``source``.
    ``timestamp`` does not affect the graph; it advances the clock that
    :meth:`TransformFusion.smoothed_lookup` uses when no time is given.
    """

    source: str
    target: str
    key: Hashable
    transform: npt.NDArray[np.float64]  # 4x4 SE(3) matrix
    weight: Optional[float] = None
    timestamp: float = 0.0


def fuse_transforms(
    transforms: Sequence[npt.NDArray[np.float64]],
    weights: Optional[Sequence[float]] = None,
) -> npt.NDArray[np.float64]:
    """Average simultaneous measurements of the same relationship.

    Args:
        transforms: 4x4 SE(3) matrices describing one frame pair.
        weights: Per-sample weights, all 1.0 if None.

    Returns:
        Fused 4x4 SE(3) matrix.
    """
    if weights is None:
        weights = [1.0] * len(transforms)
    if len(weights) != len(transforms):
        raise ValueError("Expected one weight per transform")

    mean = WeightedMean()
    for transform, weight in zip(transforms, weights):
        mean.add_pose(Pose.from_transform(np.asarray(transform, dtype=np.float64)), weight)
    return mean.mean_pose().to_transform()


class TransformFusion:
    """Keeps a frame graph up to date and answers fused transform queries.

    Owns one graph and, for every frame pair queried through
    :meth:`smoothed_lookup`, one smoothing filter.
    """

    def __init__(self, settings: Optional[FusionSettings] = None) -> None:
        self.settings = settings or FusionSettings()
        self.graph = FrameGraph()
        self.resolver = PathResolver(self.graph)
        self._smoothers: Dict[Tuple[str, str], ExponentialMovingAverage] = {}
        self._last_observed: Optional[float] = None

    @classmethod
    def from_config(cls, config: SeedConfig) -> "TransformFusion":
        """Create a fusion instance seeded with the configured static frames."""
        fusion = cls(config.fusion)
        populate_graph(config, fusion.graph)
        return fusion

    def add_frame(self, name: str) -> None:
        self.graph.add_frame(name)

    def observe(self, event: MeasurementEvent) -> None:
        """Record a measurement, superseding the previous one with the same key."""
        weight = self.settings.default_weight if event.weight is None else event.weight
        self.graph.update_measurement(
            event.source, event.target, event.key, event.transform, weight
        )
        if self._last_observed is None or event.timestamp > self._last_observed:
            self._last_observed = event.timestamp

    @property
    def last_observed(self) -> Optional[float]:
        """Latest timestamp of an accepted event, None before the first one."""
        return self._last_observed

    def forget(self, key: Hashable) -> int:
        """Drop every edge produced by measurement channel ``key``."""
        return self.graph.remove_edges_by_key(key)

    def lookup(self, source: str, target: str) -> TransformLookup:
        return self.resolver.resolve_transform(source, target)

    def can_reach(self, source: str, target: str) -> bool:
        return self.resolver.can_reach(source, target)

    def smoothed_lookup(
        self, source: str, target: str, now: Optional[float] = None
    ) -> Optional[Pose]:
        """Resolve a transform and feed it through the frame pair's smoother.

        Args:
            source: Start frame.
            target: Goal frame.
            now: Timestamp of the query in seconds. Defaults to the latest
                observed event timestamp, or 0.0 before any event.

        Returns:
            The smoothed pose, or None when the transform is unavailable.
        """
        result = self.lookup(source, target)
        if not result.found:
            logger.warning("Transform %s -> %s unavailable", source, target)
            return None

        if now is None:
            now = 0.0 if self._last_observed is None else self._last_observed

        smoother = self._smoothers.get((source, target))
        if smoother is None:
            smoother = ExponentialMovingAverage(self.settings.alpha, self.settings.timeout)
            self._smoothers[(source, target)] = smoother

        smoother.add_pose(result.pose(), now)
        return smoother.pose()

    def reset_smoothing(self, source: Optional[str] = None, target: Optional[str] = None) -> None:
        """Reset the smoothers of the matching frame pairs, all of them by default."""
        for (pair_source, pair_target), smoother in self._smoothers.items():
            if source is not None and pair_source != source:
                continue
            if target is not None and pair_target != target:
                continue
            smoother.reset()

    def smoothed_pairs(self) -> List[Tuple[str, str]]:
        return list(self._smoothers)
