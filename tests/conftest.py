"""Pytest configuration and fixtures."""

import numpy as np
import pytest

from framefuse.transform_graph import FrameGraph
from framefuse.utils.conversions import pose_to_transform


def _transform(position, yaw: float = 0.0) -> np.ndarray:
    """Build a 4x4 transform from a translation and a rotation about z."""
    quaternion = np.array([np.cos(yaw / 2), 0.0, 0.0, np.sin(yaw / 2)])
    return pose_to_transform(np.asarray(position, dtype=np.float64), quaternion)


@pytest.fixture
def make_transform():
    """Factory building transforms from a translation and a yaw angle."""
    return _transform


@pytest.fixture
def transform_ab() -> np.ndarray:
    return _transform([1.0, 0.0, 0.0], yaw=np.pi / 2)


@pytest.fixture
def transform_bc() -> np.ndarray:
    return _transform([0.0, 2.0, 0.5], yaw=-np.pi / 4)


@pytest.fixture
def chain_graph(transform_ab, transform_bc) -> FrameGraph:
    """Frames A, B, C linked A -> B ("s1") and B -> C ("s2")."""
    graph = FrameGraph()
    for name in ("A", "B", "C"):
        graph.add_frame(name)
    graph.update_measurement("A", "B", "s1", transform_ab, 1.0)
    graph.update_measurement("B", "C", "s2", transform_bc, 1.0)
    return graph


@pytest.fixture
def seed_yaml() -> str:
    return """
entities:
  - name: robot_1
    sensors:
      - name: robot_1/camera
        topic: /robot_1/camera/image_raw
        transform:
          origin: [0.1, 0.0, 0.3]
          rot: [0.0, 0.0, 0.0, 1.0]
  - name: robot_2
    sensors:
markers:
  - id: 7
    ref: robot_2
    transform:
      origin: [0.0, 0.0, 0.5]
      rot: [0.0, 0.0, 0.7071068, 0.7071068]
fusion:
  alpha: 0.5
  timeout: 2.0
"""
