"""Populate a frame graph from seed configuration."""

import logging
from typing import Optional

from .config import SeedConfig
from .transform_graph import FrameGraph

logger = logging.getLogger(__name__)


def mount_key(sensor: str) -> tuple:
    """Measurement key of a sensor's fixed mounting transform."""
    return ("mount", sensor)


def marker_key(marker_id: int) -> tuple:
    """Measurement key of a marker's fixed attachment transform."""
    return ("marker", marker_id)


def populate_graph(
    config: SeedConfig,
    graph: Optional[FrameGraph] = None,
    weight: Optional[float] = None,
) -> FrameGraph:
    """Add the static frames and edges described by ``config``.

    Every entity and sensor becomes a frame, every sensor is linked to its
    entity by its mounting transform and every marker becomes a frame linked
    to its reference frame.

    Args:
        config: Validated seed configuration.
        graph: Graph to populate. A new graph is created if None.
        weight: Weight of the static edges, defaults to the configured
            default edge weight.

    Returns:
        The populated graph.
    """
    if graph is None:
        graph = FrameGraph()
    if weight is None:
        weight = config.fusion.default_weight

    for entity in config.entities:
        graph.add_frame(entity.name)
        for sensor in entity.sensors:
            graph.add_frame(sensor.name)
            graph.update_measurement(
                entity.name, sensor.name, mount_key(sensor.name), sensor.transform, weight
            )

    for marker in config.markers:
        graph.add_frame(marker.frame)
    for marker in config.markers:
        graph.update_measurement(
            marker.ref, marker.frame, marker_key(marker.id), marker.transform, weight
        )

    logger.info(
        "Seeded %d frames and %d edges from %d entities and %d markers",
        len(graph.frames()),
        graph.edge_count(),
        len(config.entities),
        len(config.markers),
    )
    return graph
