"""Weighted averaging of simultaneous vector and rotation samples."""

import numpy as np
import numpy.typing as npt

from ..errors import DegenerateAverageError
from ..pose import Pose
from ..utils.conversions import canonical_quaternion


class WeightedMean:
    """Fuses weighted samples of one relationship into a single estimate.

    Vectors are averaged arithmetically. Rotations are averaged in closed
    form: the mean quaternion is the eigenvector belonging to the largest
    eigenvalue of ``M @ M.T``, where the columns of ``M`` are the weighted
    sample quaternions (Markley et al., "Averaging Quaternions", 2007). This
    minimizes the weighted sum of squared chordal distances and is insensitive
    to the sign of each sample.
    """

    def __init__(self) -> None:
        """Initialize empty accumulators."""
        self.reset()

    def reset(self) -> None:
        """Discard all accumulated samples."""
        self._vector_sum = np.zeros(3)
        self._vector_weight = 0.0
        self._vector_count = 0
        self._quaternions = np.zeros((4, 0))
        self._rotation_weight = 0.0

    @property
    def vector_count(self) -> int:
        return self._vector_count

    @property
    def rotation_count(self) -> int:
        return self._quaternions.shape[1]

    def add_vector(self, vector: npt.ArrayLike, weight: float = 1.0) -> None:
        """Accumulate a weighted 3D vector.

        Args:
            vector: 3D vector sample.
            weight: Non-negative sample weight.
        """
        vector = np.asarray(vector, dtype=np.float64)
        if vector.shape != (3,):
            raise ValueError("Vector must be a 3D vector")
        _check_weight(weight)

        self._vector_sum += weight * vector
        self._vector_weight += weight
        self._vector_count += 1

    def add_rotation(self, quaternion: npt.ArrayLike, weight: float = 1.0) -> None:
        """Accumulate a weighted rotation.

        Args:
            quaternion: Unit quaternion as [w, x, y, z].
            weight: Non-negative sample weight.
        """
        quaternion = np.asarray(quaternion, dtype=np.float64)
        if quaternion.shape != (4,):
            raise ValueError("Quaternion must have 4 components")
        _check_weight(weight)

        self._quaternions = np.column_stack([self._quaternions, weight * quaternion])
        self._rotation_weight += weight

    def add_pose(self, pose: Pose, weight: float = 1.0) -> None:
        """Accumulate both parts of a pose with the same weight."""
        self.add_vector(pose.position, weight)
        self.add_rotation(pose.orientation, weight)

    def mean_vector(self) -> npt.NDArray[np.float64]:
        """Get the weighted mean vector.

        Returns:
            The weighted mean, or the zero vector when no weight was added.
        """
        if self._vector_weight == 0.0:
            return np.zeros(3)
        return self._vector_sum / self._vector_weight

    def mean_rotation(self) -> npt.NDArray[np.float64]:
        """Get the weighted mean rotation.

        Returns:
            Unit quaternion [w, x, y, z] with w >= 0.

        Raises:
            DegenerateAverageError: If no rotation was added, or every
                rotation sample had zero weight.
        """
        if self.rotation_count == 0:
            raise DegenerateAverageError("Cannot average rotations without samples")
        if self._rotation_weight == 0.0:
            raise DegenerateAverageError("All rotation samples have zero weight")

        # Rescaling leaves the eigenvectors unchanged and keeps tiny weights from underflowing.
        M = self._quaternions / np.abs(self._quaternions).max()
        A = M @ M.T
        eigenvalues, eigenvectors = np.linalg.eigh(A)

        largest = int(np.argmax(np.abs(eigenvalues)))
        mean = eigenvectors[:, largest]
        return canonical_quaternion(mean / np.linalg.norm(mean))

    def mean_pose(self) -> Pose:
        """Get the weighted mean pose."""
        return Pose(position=self.mean_vector(), orientation=self.mean_rotation())


def _check_weight(weight: float) -> None:
    if not weight >= 0.0:
        raise ValueError("Sample weight must be non-negative")
