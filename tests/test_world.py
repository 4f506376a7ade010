"""Tests for map collidable layouts."""

import math
import random

import pytest

from fpvdrone.physics.collision import (
    BoxCollider,
    GroundPlane,
    OrientedBoxCollider,
    SphereCollider,
    nearest_hit,
)
from fpvdrone.physics.flight_model.base import CollidableGeometry
from fpvdrone.physics.vectors import Quaternion, Vector3
from fpvdrone.world import GATE_COUNT, MapType, build_map, gate_colliders

FORWARD = Vector3(0.0, 0.0, -1.0)


class TestBuildMap:
    """Test map construction."""

    def test_city(self) -> None:
        """Test CITY has ground, 50 buildings and the gate line."""
        colliders = build_map(MapType.CITY, random.Random(1))
        assert isinstance(colliders[0], GroundPlane)
        assert len(colliders) == 1 + 50 + GATE_COUNT * 4
        assert all(isinstance(c, BoxCollider) for c in colliders[1:51])
        assert all(isinstance(c, OrientedBoxCollider) for c in colliders[51:])

    def test_jungle(self) -> None:
        """Test JUNGLE has 100 trees of trunk and canopy."""
        colliders = build_map(MapType.JUNGLE, random.Random(1))
        assert len(colliders) == 1 + 100 * 2 + GATE_COUNT * 4
        assert sum(isinstance(c, SphereCollider) for c in colliders) == 100

    @pytest.mark.parametrize("map_type", list(MapType))
    def test_all_collidable(self, map_type: MapType) -> None:
        """Test every map entry satisfies the collidable protocol."""
        for collider in build_map(map_type, random.Random(2)):
            assert isinstance(collider, CollidableGeometry)

    def test_seed_reproducible(self) -> None:
        """Test the same seed builds the same layout."""
        assert build_map(MapType.CITY, random.Random(5)) == build_map(
            MapType.CITY, random.Random(5)
        )

    def test_buildings_stand_on_ground(self) -> None:
        """Test every building starts at ground level."""
        for collider in build_map(MapType.CITY, random.Random(3))[1:51]:
            assert collider.min_corner.y == pytest.approx(0.0)

    def test_every_other_gate_turned(self) -> None:
        """Test even gates face the flight line and odd gates are turned."""
        gates = build_map(MapType.CITY, random.Random(4))[51:]
        for i in range(GATE_COUNT):
            orientation = gates[i * 4].orientation
            if i % 2 == 0:
                assert orientation == Quaternion.identity()
            else:
                assert orientation.to_euler_yxz()[1] == pytest.approx(math.pi / 4)


class TestGates:
    """Test gate geometry."""

    def test_gate_opening_is_clear(self) -> None:
        """Test flying through the middle of a gate hits nothing."""
        bars = gate_colliders(Vector3(0.0, 10.0, -20.0))
        origin = Vector3(0.0, 10.0, 0.0)
        assert all(bar.cast_ray(origin, FORWARD) is None for bar in bars)

    def test_gate_frame_blocks(self) -> None:
        """Test flying into the top bar hits its near face."""
        bars = gate_colliders(Vector3(0.0, 10.0, -20.0))
        assert nearest_hit(bars, Vector3(0.0, 14.0, 0.0), FORWARD) == pytest.approx(19.75)

    def test_turned_gate_opening_is_clear(self) -> None:
        """Test a gate turned 45 degrees still leaves its opening clear."""
        bars = gate_colliders(Vector3(0.0, 10.0, -20.0), math.pi / 4)
        assert nearest_hit(bars, Vector3(0.0, 10.0, 0.0), FORWARD) is None

    def test_turned_gate_frame_blocks(self) -> None:
        """Test the top bar of a turned gate is hit at its rotated edge."""
        bars = gate_colliders(Vector3(0.0, 10.0, -20.0), math.pi / 4)
        distance = nearest_hit(bars, Vector3(0.0, 14.0, 0.0), FORWARD)
        assert distance == pytest.approx(20.0 - 0.25 * math.sqrt(2.0))

    def test_turned_gate_side_bars_move(self) -> None:
        """Test side bars swing around the gate center when turned."""
        bars = gate_colliders(Vector3(0.0, 10.0, -20.0), math.pi / 2)
        right = bars[3]
        assert right.center.to_tuple() == pytest.approx((0.0, 10.0, -24.0), abs=1e-9)
