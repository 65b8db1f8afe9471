"""Utility functions for rotations and rigid transforms."""

from .conversions import (
    IDENTITY_QUATERNION,
    canonical_quaternion,
    invert_transform,
    normalize_quaternion,
    pose_to_transform,
    quaternion_slerp,
    quaternion_to_rotation_matrix,
    rotation_angle_between,
    rotation_matrix_to_quaternion,
    transform_to_pose,
    validate_transform,
    wxyz_to_xyzw,
    xyzw_to_wxyz,
)

__all__ = [
    "IDENTITY_QUATERNION",
    "canonical_quaternion",
    "invert_transform",
    "normalize_quaternion",
    "pose_to_transform",
    "quaternion_slerp",
    "quaternion_to_rotation_matrix",
    "rotation_angle_between",
    "rotation_matrix_to_quaternion",
    "transform_to_pose",
    "validate_transform",
    "wxyz_to_xyzw",
    "xyzw_to_wxyz",
]
