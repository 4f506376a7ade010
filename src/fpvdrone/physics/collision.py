"""Ray-based collision queries and simple collidable shapes.

The flight model treats the world as a list of ``CollidableGeometry`` handles
and only asks each for the distance along a ray. The shapes here are what the
bundled course and the tests use: boxes for buildings and gates, spheres for tree
canopies and a plane for the ground.

Typical usage example:
    from fpvdrone.physics.collision import BoxCollider, nearest_hit
    from fpvdrone.physics.vectors import Vector3

    building = BoxCollider(Vector3(4.0, 0.0, -12.0), Vector3(8.0, 20.0, -8.0))
    distance = nearest_hit([building], Vector3(6.0, 2.0, 0.0), Vector3(0.0, 0.0, -1.0))
"""

import math
from collections.abc import Iterable
from dataclasses import dataclass, field

from fpvdrone.physics.flight_model.base import CollidableGeometry
from fpvdrone.physics.vectors import Quaternion, Vector3

# Rays with a direction component below this are treated as parallel to a slab
_PARALLEL_EPSILON = 1e-12


def lookahead_distance(speed: float, dt: float, radius: float) -> float:
    """Distance ahead within which a hit counts as imminent this frame.

    Args:
        speed: Current speed (m/s).
        dt: Frame time (s).
        radius: Vehicle collision radius, the minimum lookahead (m).

    Returns:
        ``max(radius, speed * dt * 2)``.
    """
    return max(radius, speed * dt * 2.0)


def nearest_hit(
    collidables: Iterable[CollidableGeometry], origin: Vector3, direction: Vector3
) -> float | None:
    """Return the closest non-negative hit distance among ``collidables``.

    Args:
        collidables: Geometry handles to query.
        origin: Ray origin.
        direction: Unit ray direction.

    Returns:
        Nearest distance, or None if nothing was hit.
    """
    nearest: float | None = None
    for geometry in collidables:
        distance = geometry.cast_ray(origin, direction)
        if distance is None or distance < 0.0 or math.isnan(distance):
            continue
        if nearest is None or distance < nearest:
            nearest = distance
    return nearest


@dataclass(frozen=True)
class BoxCollider:
    """Axis-aligned box.

    Attributes:
        min_corner: Corner with the smallest coordinates.
        max_corner: Corner with the largest coordinates.
    """

    min_corner: Vector3
    max_corner: Vector3

    def __post_init__(self) -> None:
        if (
            self.min_corner.x > self.max_corner.x
            or self.min_corner.y > self.max_corner.y
            or self.min_corner.z > self.max_corner.z
        ):
            raise ValueError(f"min_corner {self.min_corner} exceeds max_corner {self.max_corner}")

    @classmethod
    def from_center(cls, center: Vector3, size: Vector3) -> "BoxCollider":
        """Build a box from its center and full extents."""
        half = size * 0.5
        return cls(center - half, center + half)

    def cast_ray(self, origin: Vector3, direction: Vector3) -> float | None:
        """Slab test. A ray starting inside the box hits at distance 0."""
        t_near = -math.inf
        t_far = math.inf
        for o, d, lo, hi in (
            (origin.x, direction.x, self.min_corner.x, self.max_corner.x),
            (origin.y, direction.y, self.min_corner.y, self.max_corner.y),
            (origin.z, direction.z, self.min_corner.z, self.max_corner.z),
        ):
            if abs(d) < _PARALLEL_EPSILON:
                if o < lo or o > hi:
                    return None
                continue
            t1 = (lo - o) / d
            t2 = (hi - o) / d
            if t1 > t2:
                t1, t2 = t2, t1
            t_near = max(t_near, t1)
            t_far = min(t_far, t2)
            if t_near > t_far:
                return None

        if t_far < 0.0:
            return None
        return max(t_near, 0.0)


@dataclass(frozen=True)
class OrientedBoxCollider:
    """Box rotated about its center, e.g. a gate turned to face a new heading.

    Attributes:
        center: Box center.
        size: Full extents along the box's own axes.
        orientation: Box-to-world rotation.
    """

    center: Vector3
    size: Vector3
    orientation: Quaternion = field(default_factory=Quaternion.identity)

    def __post_init__(self) -> None:
        if self.size.x < 0.0 or self.size.y < 0.0 or self.size.z < 0.0:
            raise ValueError(f"size must be non-negative, got {self.size}")

    def cast_ray(self, origin: Vector3, direction: Vector3) -> float | None:
        """Slab test in the box frame. Rotation keeps distances unchanged."""
        to_local = self.orientation.conjugate()
        half = self.size * 0.5
        return BoxCollider(-half, half).cast_ray(
            to_local.rotate(origin - self.center), to_local.rotate(direction)
        )


@dataclass(frozen=True)
class SphereCollider:
    """Sphere.

    Attributes:
        center: Sphere center.
        radius: Sphere radius (m).
    """

    center: Vector3
    radius: float

    def __post_init__(self) -> None:
        if self.radius <= 0.0:
            raise ValueError(f"radius must be > 0, got {self.radius}")

    def cast_ray(self, origin: Vector3, direction: Vector3) -> float | None:
        """Ray/sphere intersection. A ray starting inside the sphere hits at distance 0."""
        oc = origin - self.center
        b = oc.dot(direction)
        c = oc.magnitude_squared() - self.radius * self.radius
        if c <= 0.0:
            return 0.0

        discriminant = b * b - c
        if discriminant < 0.0:
            return None

        t = -b - math.sqrt(discriminant)
        if t < 0.0:
            return None
        return t


@dataclass(frozen=True)
class GroundPlane:
    """Horizontal plane, solid from above.

    Attributes:
        height: Plane altitude (m).
    """

    height: float = 0.0

    def cast_ray(self, origin: Vector3, direction: Vector3) -> float | None:
        """Only downward rays from above the plane can hit it."""
        if origin.y < self.height:
            return 0.0
        if direction.y >= 0.0:
            return None
        return (self.height - origin.y) / direction.y
