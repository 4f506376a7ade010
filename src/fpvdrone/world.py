"""Collidable layouts for the two flying areas.

Only collision geometry lives here; meshes, textures and lighting belong to
whatever renders the scene. Both maps are a 1000 m ground plane with random
obstacles scattered over a 400 m square, plus a line of gates ahead of the
spawn point. Every other gate is turned 45 degrees about the vertical.

- CITY: 50 box buildings, 10-30 m wide, 20-100 m tall; gates 50 m apart.
- JUNGLE: 100 trees (box trunk, sphere canopy), random scale 1-2; gates 30 m apart.
"""

import math
import random
from enum import Enum

from fpvdrone.core.logging_system import get_logger
from fpvdrone.physics.collision import (
    BoxCollider,
    GroundPlane,
    OrientedBoxCollider,
    SphereCollider,
)
from fpvdrone.physics.flight_model.base import CollidableGeometry
from fpvdrone.physics.vectors import Quaternion, Vector3

logger = get_logger(__name__)

SCATTER_SIZE = 400.0
GATE_COUNT = 5
GATE_HEIGHT = 10.0
GATE_HALF_SPAN = 4.0
GATE_BAR = 0.5


class MapType(Enum):
    CITY = "CITY"
    JUNGLE = "JUNGLE"


def _scatter(rng: random.Random) -> float:
    return (rng.random() - 0.5) * SCATTER_SIZE


def gate_colliders(center: Vector3, rotation_y: float = 0.0) -> list[CollidableGeometry]:
    """Four bars of a square gate, turned ``rotation_y`` radians about +Y.

    At zero rotation the gate faces the Z axis.
    """
    span = GATE_HALF_SPAN * 2
    bar = GATE_BAR
    turn = Quaternion.from_axis_angle(Vector3(0.0, 1.0, 0.0), rotation_y)
    bars = [
        (Vector3(0.0, GATE_HALF_SPAN, 0.0), Vector3(span, bar, bar)),
        (Vector3(0.0, -GATE_HALF_SPAN, 0.0), Vector3(span, bar, bar)),
        (Vector3(-GATE_HALF_SPAN, 0.0, 0.0), Vector3(bar, span, bar)),
        (Vector3(GATE_HALF_SPAN, 0.0, 0.0), Vector3(bar, span, bar)),
    ]
    return [
        OrientedBoxCollider(center + turn.rotate(offset), size, turn) for offset, size in bars
    ]


def _gates(spacing: float) -> list[CollidableGeometry]:
    colliders: list[CollidableGeometry] = []
    for i in range(GATE_COUNT):
        # Every other gate is turned 45 degrees
        rotation = 0.0 if i % 2 == 0 else math.pi / 4
        colliders.extend(gate_colliders(Vector3(0.0, GATE_HEIGHT, -20.0 - i * spacing), rotation))
    return colliders


def _city(rng: random.Random) -> list[CollidableGeometry]:
    colliders: list[CollidableGeometry] = [GroundPlane(0.0)]
    for _ in range(50):
        width = 10 + rng.random() * 20
        depth = 10 + rng.random() * 20
        height = 20 + rng.random() * 80
        center = Vector3(_scatter(rng), height / 2, _scatter(rng))
        colliders.append(BoxCollider.from_center(center, Vector3(width, height, depth)))
    colliders.extend(_gates(50.0))
    return colliders


def _jungle(rng: random.Random) -> list[CollidableGeometry]:
    colliders: list[CollidableGeometry] = [GroundPlane(0.0)]
    for _ in range(100):
        scale = 1 + rng.random()
        base = Vector3(_scatter(rng), 0.0, _scatter(rng))
        # Trunk: 1.6 m wide, 4 m tall; canopy: 4 m radius centered 7 m up
        colliders.append(
            BoxCollider.from_center(
                base + Vector3(0.0, 2.0 * scale, 0.0), Vector3(1.6, 4.0, 1.6) * scale
            )
        )
        colliders.append(SphereCollider(base + Vector3(0.0, 7.0 * scale, 0.0), 4.0 * scale))
    colliders.extend(_gates(30.0))
    return colliders


def build_map(map_type: MapType, rng: random.Random | None = None) -> list[CollidableGeometry]:
    """Build the collidables of a map.

    Args:
        map_type: Which map to build.
        rng: Random source for obstacle placement (seed it for a fixed layout).

    Returns:
        Collidable geometry list for ``DroneFlightModel.update``.
    """
    rng = rng if rng is not None else random.Random()
    if map_type is MapType.CITY:
        colliders = _city(rng)
    else:
        colliders = _jungle(rng)
    logger.info("Loaded %s map: %d collidables", map_type.value, len(colliders))
    return colliders
