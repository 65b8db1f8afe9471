"""Measurement edge representation."""

from dataclasses import dataclass
from typing import Hashable

import numpy as np
import numpy.typing as npt

from ..utils.conversions import invert_transform

DEFAULT_EDGE_WEIGHT = 1.0


@dataclass(frozen=True, eq=False)
class MeasurementEdge:
    """A directed, measured transform between two frames.

    ``transform`` maps coordinates expressed in ``target`` into ``source``,
    so that chaining edges along a path is a plain matrix product.
    """

    source: str
    target: str
    key: Hashable  # Identity of the producing measurement channel
    transform: npt.NDArray[np.float64]  # 4x4 SE(3) matrix
    weight: float = DEFAULT_EDGE_WEIGHT

    def __post_init__(self) -> None:
        """Validate edge data."""
        if np.shape(self.transform) != (4, 4):
            raise ValueError("Transform must be a 4x4 SE(3) matrix")
        if not self.weight > 0.0:
            raise ValueError("Edge weight must be positive")

    def inverse(self) -> "MeasurementEdge":
        """Return the mirror edge target -> source carrying the inverse transform."""
        return MeasurementEdge(
            source=self.target,
            target=self.source,
            key=self.key,
            transform=invert_transform(self.transform),
            weight=self.weight,
        )
