"""Frame graph core module.

This module provides the multigraph of measured frame-to-frame transforms
and the path resolver that composes transforms between arbitrary frames.
"""

from .edge import DEFAULT_EDGE_WEIGHT, MeasurementEdge
from .graph import FrameGraph
from .resolver import PathResolver, TransformLookup

__all__ = [
    "DEFAULT_EDGE_WEIGHT",
    "FrameGraph",
    "MeasurementEdge",
    "PathResolver",
    "TransformLookup",
]
