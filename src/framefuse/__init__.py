"""framefuse - Multi-sensor transform fusion.

A Python library that tracks measured transforms between named coordinate
frames (robots, sensors, fiducial markers) in a weighted multigraph and
computes the transform between any two connected frames, with weighted
rotation averaging and exponential smoothing of the results.
"""

from .config import FusionSettings, SeedConfig
from .errors import (
    DegenerateAverageError,
    FrameFusionError,
    InconsistentGraphError,
    MalformedConfigError,
    UnknownFrameError,
)
from .filters import ExponentialMovingAverage, WeightedMean
from .fusion import MeasurementEvent, TransformFusion, fuse_transforms
from .pose import Pose
from .transform_graph import FrameGraph, MeasurementEdge, PathResolver, TransformLookup

__version__ = "0.1.0"

__all__ = [
    "DegenerateAverageError",
    "ExponentialMovingAverage",
    "FrameFusionError",
    "FrameGraph",
    "FusionSettings",
    "InconsistentGraphError",
    "MalformedConfigError",
    "MeasurementEdge",
    "MeasurementEvent",
    "PathResolver",
    "Pose",
    "SeedConfig",
    "TransformFusion",
    "TransformLookup",
    "UnknownFrameError",
    "WeightedMean",
    "__version__",
    "fuse_transforms",
]
