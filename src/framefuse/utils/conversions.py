"""Rotation and rigid transform conversions.

Quaternions are stored as [w, x, y, z] and rigid transforms as 4x4 SE(3)
homogeneous matrices throughout the package.
"""

import numpy as np
import numpy.typing as npt

IDENTITY_QUATERNION = np.array([1.0, 0.0, 0.0, 0.0])

# Below this angle slerp degrades to a normalized linear blend.
_SLERP_DOT_THRESHOLD = 0.9995


def normalize_quaternion(q: npt.ArrayLike) -> npt.NDArray[np.float64]:
    """Return the unit quaternion pointing along ``q``.

    Args:
        q: Quaternion as [w, x, y, z].

    Returns:
        Normalized quaternion.
    """
    q = np.asarray(q, dtype=np.float64)
    if q.shape != (4,):
        raise ValueError("Quaternion must have 4 components")
    norm = np.linalg.norm(q)
    if norm == 0.0:
        raise ValueError("Cannot normalize a zero quaternion")
    return q / norm


def canonical_quaternion(q: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
    """Pick the representative of ``q`` / ``-q`` with a non-negative scalar part."""
    return -q if q[0] < 0.0 else q


def xyzw_to_wxyz(q: npt.ArrayLike) -> npt.NDArray[np.float64]:
    """Reorder a scalar-last quaternion to scalar-first."""
    x, y, z, w = np.asarray(q, dtype=np.float64)
    return np.array([w, x, y, z])


def wxyz_to_xyzw(q: npt.ArrayLike) -> npt.NDArray[np.float64]:
    """Reorder a scalar-first quaternion to scalar-last."""
    w, x, y, z = np.asarray(q, dtype=np.float64)
    return np.array([x, y, z, w])


def quaternion_to_rotation_matrix(q: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
    """Convert quaternion to rotation matrix.

    Args:
        q: Quaternion as [w, x, y, z].

    Returns:
        3x3 rotation matrix.
    """
    w, x, y, z = normalize_quaternion(q)

    return np.array(
        [
            [1 - 2 * (y**2 + z**2), 2 * (x * y - w * z), 2 * (x * z + w * y)],
            [2 * (x * y + w * z), 1 - 2 * (x**2 + z**2), 2 * (y * z - w * x)],
            [2 * (x * z - w * y), 2 * (y * z + w * x), 1 - 2 * (x**2 + y**2)],
        ]
    )


def rotation_matrix_to_quaternion(R: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
    """Convert rotation matrix to quaternion.

    Args:
        R: 3x3 rotation matrix.

    Returns:
        Unit quaternion as [w, x, y, z] with w >= 0.
    """
    trace = np.trace(R)

    if trace > 0:
        s = 0.5 / np.sqrt(trace + 1.0)
        w = 0.25 / s
        x = (R[2, 1] - R[1, 2]) * s
        y = (R[0, 2] - R[2, 0]) * s
        z = (R[1, 0] - R[0, 1]) * s
    elif R[0, 0] > R[1, 1] and R[0, 0] > R[2, 2]:
        s = 2.0 * np.sqrt(1.0 + R[0, 0] - R[1, 1] - R[2, 2])
        w = (R[2, 1] - R[1, 2]) / s
        x = 0.25 * s
        y = (R[0, 1] + R[1, 0]) / s
        z = (R[0, 2] + R[2, 0]) / s
    elif R[1, 1] > R[2, 2]:
        s = 2.0 * np.sqrt(1.0 + R[1, 1] - R[0, 0] - R[2, 2])
        w = (R[0, 2] - R[2, 0]) / s
        x = (R[0, 1] + R[1, 0]) / s
        y = 0.25 * s
        z = (R[1, 2] + R[2, 1]) / s
    else:
        s = 2.0 * np.sqrt(1.0 + R[2, 2] - R[0, 0] - R[1, 1])
        w = (R[1, 0] - R[0, 1]) / s
        x = (R[0, 2] + R[2, 0]) / s
        y = (R[1, 2] + R[2, 1]) / s
        z = 0.25 * s

    return canonical_quaternion(normalize_quaternion([w, x, y, z]))


def pose_to_transform(
    position: npt.ArrayLike,
    quaternion: npt.ArrayLike,
) -> npt.NDArray[np.float64]:
    """Create a 4x4 SE(3) transformation matrix.

    Args:
        position: Translation [x, y, z].
        quaternion: Rotation as [w, x, y, z].

    Returns:
        4x4 SE(3) transformation matrix.
    """
    T = np.eye(4)
    T[:3, :3] = quaternion_to_rotation_matrix(np.asarray(quaternion, dtype=np.float64))
    T[:3, 3] = np.asarray(position, dtype=np.float64)
    return T


def transform_to_pose(
    T: npt.NDArray[np.float64],
) -> tuple[npt.NDArray[np.float64], npt.NDArray[np.float64]]:
    """Split a 4x4 SE(3) matrix into translation and quaternion.

    Args:
        T: 4x4 SE(3) transformation matrix.

    Returns:
        Tuple of (position [x, y, z], quaternion [w, x, y, z]).
    """
    validate_transform(T)
    return T[:3, 3].copy(), rotation_matrix_to_quaternion(T[:3, :3])


def invert_transform(T: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
    """Invert a rigid transform without a general matrix inverse."""
    validate_transform(T)
    R_inv = T[:3, :3].T
    T_inv = np.eye(4)
    T_inv[:3, :3] = R_inv
    T_inv[:3, 3] = -R_inv @ T[:3, 3]
    return T_inv


def validate_transform(T: npt.NDArray[np.float64]) -> None:
    """Raise ``ValueError`` unless ``T`` is shaped like an SE(3) matrix."""
    if np.shape(T) != (4, 4):
        raise ValueError("Transform must be a 4x4 SE(3) matrix")


def quaternion_slerp(
    q0: npt.ArrayLike,
    q1: npt.ArrayLike,
    t: float,
) -> npt.NDArray[np.float64]:
    """Spherical linear interpolation along the shortest arc.

    Args:
        q0: Start quaternion as [w, x, y, z].
        q1: End quaternion as [w, x, y, z].
        t: Fraction of the arc to travel, 0 returns ``q0`` and 1 returns ``q1``
            (up to sign).

    Returns:
        Interpolated unit quaternion.
    """
    q0 = normalize_quaternion(q0)
    q1 = normalize_quaternion(q1)

    dot = float(np.dot(q0, q1))
    if dot < 0.0:
        q1 = -q1
        dot = -dot

    if dot > _SLERP_DOT_THRESHOLD:
        return normalize_quaternion(q0 + t * (q1 - q0))

    theta_0 = np.arccos(dot)
    theta = theta_0 * t
    sin_theta_0 = np.sin(theta_0)

    s0 = np.sin(theta_0 - theta) / sin_theta_0
    s1 = np.sin(theta) / sin_theta_0
    return normalize_quaternion(s0 * q0 + s1 * q1)


def rotation_angle_between(q0: npt.ArrayLike, q1: npt.ArrayLike) -> float:
    """Geodesic angle in radians between two rotations."""
    dot = abs(float(np.dot(normalize_quaternion(q0), normalize_quaternion(q1))))
    return float(2.0 * np.arccos(min(dot, 1.0)))
