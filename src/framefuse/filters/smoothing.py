"""Exponential moving average smoothing with stale-data expiry."""

from dataclasses import dataclass
from typing import Any, Callable, Optional

import numpy as np
import numpy.typing as npt

from ..pose import Pose
from ..utils.conversions import IDENTITY_QUATERNION, normalize_quaternion, quaternion_slerp


@dataclass
class SmoothedState:
    """Streaming estimate of one channel."""

    default: Any
    estimate: Any = None
    initialized: bool = False
    last_update: Optional[float] = None

    def value(self) -> Any:
        return self.estimate if self.initialized else self.default

    def is_stale(self, now: float, timeout: float) -> bool:
        if timeout == 0.0 or self.last_update is None:
            return False
        return now - self.last_update >= timeout

    def reset(self) -> None:
        self.initialized = False


def _blend_linear(alpha: float, estimate: Any, sample: Any) -> Any:
    return alpha * sample + (1.0 - alpha) * estimate


def _blend_rotation(alpha: float, estimate: Any, sample: Any) -> Any:
    return quaternion_slerp(estimate, sample, alpha)


class ExponentialMovingAverage:
    """Smooths scalar, vector and rotation streams independently.

    Each channel starts uninitialized: its first sample is taken as is, and
    every later sample is blended in with weight ``alpha``. Rotations are
    blended by slerp along the shortest arc. When ``timeout`` is non-zero
    and a channel has not been updated for at least ``timeout`` seconds, its
    history is discarded and the next sample initializes it again.

    Timestamps are passed in by the caller; the filter never reads a clock.
    """

    def __init__(self, alpha: float = 1.0, timeout: float = 0.0) -> None:
        """Initialize the filter.

        Args:
            alpha: Smoothing factor in (0, 1]. Values close to 1 trust new
                samples more.
            timeout: Staleness timeout in seconds, 0 disables expiry.
        """
        self.alpha = alpha
        self.timeout = timeout

        self._scalar = SmoothedState(default=0.0)
        self._vector = SmoothedState(default=np.zeros(3))
        self._rotation = SmoothedState(default=IDENTITY_QUATERNION.copy())

    @property
    def alpha(self) -> float:
        return self._alpha

    @alpha.setter
    def alpha(self, value: float) -> None:
        if not 0.0 < value <= 1.0:
            raise ValueError("Smoothing factor alpha must be in (0, 1]")
        self._alpha = float(value)

    @property
    def timeout(self) -> float:
        return self._timeout

    @timeout.setter
    def timeout(self, value: float) -> None:
        if not value >= 0.0:
            raise ValueError("Timeout must be non-negative")
        self._timeout = float(value)

    @property
    def time_of_last_value(self) -> Optional[float]:
        """Most recent timestamp seen by any channel, None before the first sample."""
        stamps = [
            state.last_update
            for state in (self._scalar, self._vector, self._rotation)
            if state.last_update is not None
        ]
        return max(stamps) if stamps else None

    def add_scalar(self, value: float, now: float) -> None:
        self._add(self._scalar, float(value), now, _blend_linear)

    def add_vector(self, vector: npt.ArrayLike, now: float) -> None:
        """Add a 3D vector sample taken at ``now``."""
        vector = np.array(vector, dtype=np.float64)
        if vector.shape != (3,):
            raise ValueError("Vector must be a 3D vector")
        self._add(self._vector, vector, now, _blend_linear)

    def add_rotation(self, quaternion: npt.ArrayLike, now: float) -> None:
        """Add a rotation sample, as [w, x, y, z], taken at ``now``."""
        self._add(self._rotation, normalize_quaternion(quaternion), now, _blend_rotation)

    def add_pose(self, pose: Pose, now: float) -> None:
        self.add_vector(pose.position, now)
        self.add_rotation(pose.orientation, now)

    def reset(self) -> None:
        """Uninitialize every channel. ``alpha`` and ``timeout`` are kept."""
        for state in (self._scalar, self._vector, self._rotation):
            state.reset()

    def scalar(self) -> float:
        return self._scalar.value()

    def vector(self) -> npt.NDArray[np.float64]:
        return self._vector.value().copy()

    def rotation(self) -> npt.NDArray[np.float64]:
        return self._rotation.value().copy()

    def pose(self) -> Pose:
        return Pose(position=self.vector(), orientation=self.rotation())

    def _add(
        self,
        state: SmoothedState,
        sample: Any,
        now: float,
        blend: Callable[[float, Any, Any], Any],
    ) -> None:
        if state.is_stale(now, self._timeout):
            state.reset()

        if state.initialized:
            state.estimate = blend(self._alpha, state.estimate, sample)
        else:
            state.estimate = sample
            state.initialized = True

        state.last_update = now
