"""Rigid pose representation."""

from dataclasses import dataclass, field

import numpy as np
import numpy.typing as npt

from .utils.conversions import (
    IDENTITY_QUATERNION,
    normalize_quaternion,
    pose_to_transform,
    transform_to_pose,
)


@dataclass
class Pose:
    """Position and orientation of one frame expressed in another.

    Convertible to and from a 4x4 SE(3) matrix.
    """

    position: npt.NDArray[np.float64] = field(default_factory=lambda: np.zeros(3))
    orientation: npt.NDArray[np.float64] = field(
        default_factory=lambda: IDENTITY_QUATERNION.copy()
    )  # Quaternion (w, x, y, z)

    def __post_init__(self) -> None:
        """Validate and normalize pose data."""
        self.position = np.asarray(self.position, dtype=np.float64)
        if self.position.shape != (3,):
            raise ValueError("Position must be a 3D vector")

        self.orientation = np.asarray(self.orientation, dtype=np.float64)
        if self.orientation.shape != (4,):
            raise ValueError("Orientation must be a quaternion (4,)")
        self.orientation = normalize_quaternion(self.orientation)

    def to_transform(self) -> npt.NDArray[np.float64]:
        """Convert to a 4x4 SE(3) matrix."""
        return pose_to_transform(self.position, self.orientation)

    @staticmethod
    def from_transform(T: npt.NDArray[np.float64]) -> "Pose":
        """Create a Pose from a 4x4 SE(3) matrix.

        Args:
            T: 4x4 SE(3) transformation matrix.

        Returns:
            Pose instance.
        """
        position, orientation = transform_to_pose(T)
        return Pose(position=position, orientation=orientation)
