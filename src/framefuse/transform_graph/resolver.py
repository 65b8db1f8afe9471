"""Path search and transform composition over a frame graph."""

import logging
from dataclasses import dataclass, field
from itertools import pairwise
from typing import List, Optional

import networkx as nx
import numpy as np
import numpy.typing as npt

from ..errors import InconsistentGraphError
from ..pose import Pose
from .edge import MeasurementEdge
from .graph import FrameGraph

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TransformLookup:
    """Result of a transform query.

    ``transform`` is None whenever ``found`` is False.
    """

    found: bool
    transform: Optional[npt.NDArray[np.float64]] = None
    path: List[str] = field(default_factory=list)

    def pose(self) -> Optional[Pose]:
        """Get the looked up transform as a Pose, or None when unavailable."""
        if not self.found:
            return None
        return Pose.from_transform(self.transform)


class PathResolver:
    """Finds the cheapest route between two frames and composes its transforms.

    The resolver keeps a reference to the graph, so every query sees the
    graph's state at call time.
    """

    def __init__(self, graph: FrameGraph) -> None:
        self.graph = graph

    def find_path(self, source: str, target: str) -> List[str]:
        """Find the minimum-weight path between two frames.

        Args:
            source: Start frame.
            target: Goal frame.

        Returns:
            Frame names from ``source`` to ``target`` inclusive, or an empty
            list when a frame is unknown or no path exists.
        """
        view = self.graph.view
        if source not in view or target not in view:
            logger.debug("No path %s -> %s: unknown frame", source, target)
            return []

        predecessors, distances = nx.dijkstra_predecessor_and_distance(
            view, source, weight="weight"
        )
        if target not in distances:
            logger.debug("No path %s -> %s", source, target)
            return []

        # Walk back from the goal to the start
        path = [target]
        while path[-1] != source:
            path.append(predecessors[path[-1]][0])
        path.reverse()

        logger.debug(
            "Shortest path %s -> %s: %s (distance %.3f)",
            source,
            target,
            " -> ".join(path),
            distances[target],
        )
        return path

    def can_reach(self, source: str, target: str) -> bool:
        return bool(self.find_path(source, target))

    def resolve_transform(self, source: str, target: str) -> TransformLookup:
        """Compose the transform from ``source`` to ``target`` along the shortest path.

        Each step uses the cheapest of the parallel edges between the two
        frames, which is the edge the path search relaxed.

        Args:
            source: Start frame.
            target: Goal frame.

        Returns:
            Lookup result; ``found`` is False when no path exists.

        Raises:
            InconsistentGraphError: If consecutive path frames share no edge.
        """
        path = self.find_path(source, target)
        if not path:
            return TransformLookup(found=False)

        transform = np.eye(4)
        for step_source, step_target in pairwise(path):
            edge = self._cheapest_edge(step_source, step_target)
            transform = transform @ edge.transform

        return TransformLookup(found=True, transform=transform, path=path)

    def _cheapest_edge(self, source: str, target: str) -> MeasurementEdge:
        edges = self.graph.parallel_edges(source, target)
        if not edges:
            raise InconsistentGraphError(source, target)
        return min(edges, key=lambda edge: edge.weight)
