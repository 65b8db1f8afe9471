"""Frame graph holding measured transforms between named frames."""

import logging
from typing import Dict, Hashable, List, Optional, Set, Tuple

import networkx as nx
import numpy as np
import numpy.typing as npt

from ..errors import UnknownFrameError
from .edge import DEFAULT_EDGE_WEIGHT, MeasurementEdge

logger = logging.getLogger(__name__)


class FrameGraph:
    """Weighted multigraph of coordinate frames and measurement edges.

    Every measurement is stored twice: the measured edge and its inverse,
    both tagged with the same measurement key. A key identifies at most one
    such pair at any time, so a new reading from a channel supersedes the
    previous one even when its endpoints changed.
    """

    def __init__(self) -> None:
        """Initialize an empty frame graph."""
        self._graph = nx.MultiDiGraph()
        self._key_index: Dict[Hashable, Set[Tuple[str, str]]] = {}

    def add_frame(self, name: str) -> None:
        """Add a frame. Adding an existing frame is a no-op.

        Args:
            name: Frame name.
        """
        if name not in self._graph:
            logger.debug("Adding frame %s", name)
            self._graph.add_node(name)

    def has_frame(self, name: str) -> bool:
        return name in self._graph

    def frames(self) -> List[str]:
        """Get all frame names in insertion order."""
        return list(self._graph.nodes)

    def update_measurement(
        self,
        source: str,
        target: str,
        key: Hashable,
        transform: npt.ArrayLike,
        weight: float = DEFAULT_EDGE_WEIGHT,
    ) -> None:
        """Insert or replace the measurement produced by ``key``.

        All edges carrying ``key`` are removed first, whatever their
        endpoints, then the forward edge and its inverse are inserted.

        Args:
            source: Frame the transform is expressed in.
            target: Measured frame.
            key: Measurement channel identifier.
            transform: 4x4 SE(3) matrix from ``source`` to ``target``.
            weight: Positive path cost of the edge.

        Raises:
            UnknownFrameError: If either frame was never added.
            ValueError: If the edge is a self-loop, the key is None, the weight
                is not positive or the transform is not 4x4.
        """
        self._require_frame(source)
        self._require_frame(target)
        if source == target:
            raise ValueError(f"Measurement {key!r} connects frame {source!r} to itself")
        if key is None:
            raise ValueError("Measurement key must not be None")

        forward = MeasurementEdge(
            source=source,
            target=target,
            key=key,
            transform=np.array(transform, dtype=np.float64),
            weight=float(weight),
        )
        backward = forward.inverse()

        removed = self.remove_edges_by_key(key)
        if removed:
            logger.debug("Replacing %d edge(s) of measurement %r", removed, key)

        for edge in (forward, backward):
            self._graph.add_edge(
                edge.source, edge.target, key=edge.key, weight=edge.weight, measurement=edge
            )
            self._key_index.setdefault(edge.key, set()).add((edge.source, edge.target))

    def remove_edges_between(self, source: str, target: str) -> int:
        """Remove every edge from ``source`` to ``target``.

        Only that direction is touched; remove ``target`` -> ``source``
        separately for symmetry.

        Returns:
            Number of removed edges.
        """
        self._require_frame(source)
        self._require_frame(target)
        if not self._graph.has_edge(source, target):
            return 0

        keys = list(self._graph[source][target])
        for key in keys:
            self._graph.remove_edge(source, target, key=key)
            pairs = self._key_index.get(key)
            if pairs is not None:
                pairs.discard((source, target))
                if not pairs:
                    del self._key_index[key]
        return len(keys)

    def remove_edges_by_key(self, key: Hashable) -> int:
        """Remove every edge carrying ``key``, whatever its endpoints.

        Returns:
            Number of removed edges.
        """
        removed = 0
        for source, target in self._key_index.pop(key, set()):
            if self._graph.has_edge(source, target, key=key):
                self._graph.remove_edge(source, target, key=key)
                removed += 1
        return removed

    def edge_count(self) -> int:
        """Get the number of directed edges."""
        return self._graph.number_of_edges()

    def edges(
        self,
        source: Optional[str] = None,
        target: Optional[str] = None,
    ) -> List[MeasurementEdge]:
        """List stored edges, optionally filtered by endpoints.

        Args:
            source: Keep only edges leaving this frame.
            target: Keep only edges entering this frame.

        Returns:
            Matching edges.
        """
        return [
            edge
            for _, _, edge in self._graph.edges(data="measurement")
            if (source is None or edge.source == source)
            and (target is None or edge.target == target)
        ]

    def edges_with_key(self, key: Hashable) -> List[MeasurementEdge]:
        """List the edges currently tagged with ``key``."""
        return [
            self._graph.edges[source, target, key]["measurement"]
            for source, target in self._key_index.get(key, ())
        ]

    def parallel_edges(self, source: str, target: str) -> List[MeasurementEdge]:
        """Get all edges directly connecting ``source`` to ``target``."""
        data = self._graph.get_edge_data(source, target)
        if data is None:
            return []
        return [attrs["measurement"] for attrs in data.values()]

    @property
    def view(self) -> nx.MultiDiGraph:
        """Read-only view of the underlying networkx graph."""
        return self._graph.copy(as_view=True)

    def _require_frame(self, name: str) -> None:
        if name not in self._graph:
            raise UnknownFrameError(name)
