"""Seed configuration: entities, their sensors and fiducial markers.

The seed document is YAML::

    entities:
      - name: robot_1
        sensors:
          - name: robot_1/camera
            topic: /robot_1/camera/image_raw
            transform: {origin: [0.1, 0.0, 0.3], rot: [0.0, 0.0, 0.0, 1.0]}
    markers:
      - id: 7
        ref: robot_1
        transform: {origin: [0.0, 0.0, 0.5], rot: [0.0, 0.0, 0.0, 1.0]}
    fusion:
      alpha: 0.5
      timeout: 1.0
      default_weight: 1.0

Rotations are given scalar-last (x, y, z, w). The whole document is
validated before a single frame is created.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List, Mapping, Union

import numpy as np
import numpy.typing as npt
import yaml

from .errors import MalformedConfigError
from .transform_graph.edge import DEFAULT_EDGE_WEIGHT
from .utils.conversions import pose_to_transform, xyzw_to_wxyz


@dataclass(frozen=True)
class FusionSettings:
    """Tunables shared by every fused channel."""

    alpha: float = 1.0  # Smoothing factor in (0, 1]
    timeout: float = 0.0  # Staleness timeout in seconds, 0 disables expiry
    default_weight: float = DEFAULT_EDGE_WEIGHT  # Used when a measurement omits its weight

    def __post_init__(self) -> None:
        """Validate settings."""
        if not 0.0 < self.alpha <= 1.0:
            raise ValueError("alpha must be in (0, 1]")
        if not self.timeout >= 0.0:
            raise ValueError("timeout must be non-negative")
        if not self.default_weight > 0.0:
            raise ValueError("default_weight must be positive")


@dataclass
class Sensor:
    name: str
    topic: str
    transform: npt.NDArray[np.float64]  # Mounting transform, entity -> sensor


@dataclass
class Entity:
    name: str
    sensors: List[Sensor] = field(default_factory=list)


@dataclass
class Marker:
    id: int
    ref: str  # Frame the marker is attached to
    transform: npt.NDArray[np.float64]  # ref -> marker

    @property
    def frame(self) -> str:
        return marker_frame_name(self.id)


def marker_frame_name(marker_id: int) -> str:
    """Frame name under which a marker is registered."""
    return f"marker_{marker_id}"


@dataclass
class SeedConfig:
    """Static description of the frames known at startup."""

    entities: List[Entity] = field(default_factory=list)
    markers: List[Marker] = field(default_factory=list)
    fusion: FusionSettings = field(default_factory=FusionSettings)

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "SeedConfig":
        """Load a seed document from disk.

        Args:
            path: Path to the YAML document.

        Returns:
            Parsed and validated configuration.

        Raises:
            FileNotFoundError: If the document does not exist.
            MalformedConfigError: If it cannot be read or fails validation.
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise MalformedConfigError(f"Config: cannot read {path}: {exc}") from exc
        return cls.from_string(text)

    @classmethod
    def from_string(cls, text: str) -> "SeedConfig":
        """Parse a seed document held in memory."""
        try:
            root = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise MalformedConfigError(f"Config: invalid YAML: {exc}") from exc
        return cls.from_dict(root)

    @classmethod
    def from_dict(cls, root: Any) -> "SeedConfig":
        """Build a configuration from an already parsed document."""
        if not root:
            raise MalformedConfigError("Config: document is empty")
        if not isinstance(root, Mapping):
            raise MalformedConfigError("Config: document must be a mapping")
        if "entities" not in root:
            raise MalformedConfigError("Config: cannot find 'entities'")
        if "markers" not in root:
            raise MalformedConfigError("Config: cannot find 'markers'")

        entities = [_parse_entity(node) for node in _optional_list(root, "entities")]
        markers = [_parse_marker(node) for node in _optional_list(root, "markers")]
        fusion = _parse_fusion(root.get("fusion") or {})

        config = cls(entities=entities, markers=markers, fusion=fusion)
        config.validate()
        return config

    def frame_names(self) -> List[str]:
        """All entity, sensor and marker frames in declaration order."""
        names = []
        for entity in self.entities:
            names.append(entity.name)
            names.extend(sensor.name for sensor in entity.sensors)
        names.extend(marker.frame for marker in self.markers)
        return names

    def validate(self) -> None:
        """Check cross references and name uniqueness.

        Raises:
            MalformedConfigError: On duplicate frames or markers attached to
                an undeclared frame.
        """
        seen = set()
        for name in self.frame_names():
            if name in seen:
                raise MalformedConfigError(f"Config: duplicate frame name {name!r}")
            seen.add(name)

        for marker in self.markers:
            if marker.ref not in seen or marker.ref == marker.frame:
                raise MalformedConfigError(
                    f"Config: marker {marker.id} references unknown frame {marker.ref!r}"
                )


def parse_transform(node: Any) -> npt.NDArray[np.float64]:
    """Parse an ``{origin: [x, y, z], rot: [x, y, z, w]}`` node into a 4x4 matrix."""
    if not isinstance(node, Mapping):
        raise MalformedConfigError("Config: 'transform' must be a mapping")

    rot = _number_list(node, "rot", 4)
    origin = _number_list(node, "origin", 3)
    quaternion = xyzw_to_wxyz(rot)
    if np.linalg.norm(quaternion) == 0.0:
        raise MalformedConfigError("Config: 'rot' must not be a zero quaternion")
    return pose_to_transform(origin, quaternion)


def _number_list(node: Mapping, name: str, length: int) -> List[float]:
    values = node.get(name)
    if not isinstance(values, list) or len(values) != length:
        raise MalformedConfigError(f"Config: '{name}' is expected to have {length} elements")
    try:
        return [float(value) for value in values]
    except (TypeError, ValueError) as exc:
        raise MalformedConfigError(f"Config: '{name}' must contain numbers") from exc


def _require(node: Any, name: str, context: str) -> Any:
    if not isinstance(node, Mapping) or node.get(name) is None:
        raise MalformedConfigError(f"Config: {context} is missing '{name}'")
    return node[name]


def _optional_list(node: Mapping, name: str) -> List[Any]:
    values = node.get(name)
    if values is None:
        return []
    if not isinstance(values, list):
        raise MalformedConfigError(f"Config: '{name}' must be a list")
    return values


def _parse_entity(node: Any) -> Entity:
    name = str(_require(node, "name", "entity"))
    sensors = [
        Sensor(
            name=str(_require(sensor, "name", f"sensor of {name!r}")),
            topic=str(_require(sensor, "topic", f"sensor of {name!r}")),
            transform=parse_transform(_require(sensor, "transform", f"sensor of {name!r}")),
        )
        for sensor in _optional_list(node, "sensors")
    ]
    return Entity(name=name, sensors=sensors)


def _parse_marker(node: Any) -> Marker:
    marker_id = _require(node, "id", "marker")
    try:
        marker_id = int(marker_id)
    except (TypeError, ValueError) as exc:
        raise MalformedConfigError(f"Config: marker id {marker_id!r} is not an integer") from exc

    return Marker(
        id=marker_id,
        ref=str(_require(node, "ref", f"marker {marker_id}")),
        transform=parse_transform(_require(node, "transform", f"marker {marker_id}")),
    )


def _parse_fusion(node: Any) -> FusionSettings:
    if not isinstance(node, Mapping):
        raise MalformedConfigError("Config: 'fusion' must be a mapping")
    unknown = set(node) - {"alpha", "timeout", "default_weight"}
    if unknown:
        raise MalformedConfigError(f"Config: unknown fusion options {sorted(unknown)}")
    try:
        return FusionSettings(**{key: float(value) for key, value in node.items()})
    except (TypeError, ValueError) as exc:
        raise MalformedConfigError(f"Config: invalid fusion settings: {exc}") from exc
