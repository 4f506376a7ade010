"""Immutable 3D vector and quaternion types for the flight model.

Both types are frozen dataclasses: every operation returns a new value, so a
state snapshot handed to a caller can never be changed behind its back.

Coordinate system (same as the renderer the drone was built for):
    +X right, +Y up, -Z forward.

Typical usage example:
    from fpvdrone.physics.vectors import Quaternion, Vector3

    up = Vector3(0.0, 1.0, 0.0)
    q = Quaternion.from_axis_angle(Vector3(1.0, 0.0, 0.0), 0.1)
    tilted_up = q.rotate(up)
"""

import math
from dataclasses import dataclass


@dataclass(frozen=True)
class Vector3:
    """3D vector.

    Attributes:
        x: X component.
        y: Y component (up).
        z: Z component.
    """

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    @staticmethod
    def zero() -> "Vector3":
        """Return the zero vector."""
        return Vector3(0.0, 0.0, 0.0)

    @staticmethod
    def from_sequence(values: "tuple[float, float, float] | list[float]") -> "Vector3":
        """Build a vector from a 3-element sequence (e.g. a YAML list).

        Raises:
            ValueError: If the sequence does not have exactly three items.
        """
        if len(values) != 3:
            raise ValueError(f"expected 3 components, got {len(values)}")
        return Vector3(float(values[0]), float(values[1]), float(values[2]))

    def __add__(self, other: "Vector3") -> "Vector3":
        return Vector3(self.x + other.x, self.y + other.y, self.z + other.z)

    def __sub__(self, other: "Vector3") -> "Vector3":
        return Vector3(self.x - other.x, self.y - other.y, self.z - other.z)

    def __mul__(self, scalar: float) -> "Vector3":
        return Vector3(self.x * scalar, self.y * scalar, self.z * scalar)

    __rmul__ = __mul__

    def __truediv__(self, scalar: float) -> "Vector3":
        return Vector3(self.x / scalar, self.y / scalar, self.z / scalar)

    def __neg__(self) -> "Vector3":
        return Vector3(-self.x, -self.y, -self.z)

    def dot(self, other: "Vector3") -> float:
        """Dot product."""
        return self.x * other.x + self.y * other.y + self.z * other.z

    def magnitude_squared(self) -> float:
        """Squared length (no square root)."""
        return self.x * self.x + self.y * self.y + self.z * self.z

    def magnitude(self) -> float:
        """Length of the vector."""
        return math.sqrt(self.magnitude_squared())

    def normalized(self) -> "Vector3":
        """Unit vector in the same direction.

        The zero vector normalizes to itself.
        """
        mag = self.magnitude()
        if mag == 0.0:
            return Vector3.zero()
        return self / mag

    def lerp(self, target: "Vector3", alpha: float) -> "Vector3":
        """Linear interpolation toward ``target`` by ``alpha``."""
        return Vector3(
            self.x + (target.x - self.x) * alpha,
            self.y + (target.y - self.y) * alpha,
            self.z + (target.z - self.z) * alpha,
        )

    def clamped_magnitude(self, max_magnitude: float) -> "Vector3":
        """Scale the vector down so its length does not exceed ``max_magnitude``."""
        mag_sq = self.magnitude_squared()
        if mag_sq <= max_magnitude * max_magnitude:
            return self
        return self * (max_magnitude / math.sqrt(mag_sq))

    def is_finite(self) -> bool:
        """True if no component is NaN or infinite."""
        return math.isfinite(self.x) and math.isfinite(self.y) and math.isfinite(self.z)

    def to_tuple(self) -> tuple[float, float, float]:
        return (self.x, self.y, self.z)

    def __str__(self) -> str:
        return f"({self.x:.2f}, {self.y:.2f}, {self.z:.2f})"


@dataclass(frozen=True)
class Quaternion:
    """Rotation quaternion (x, y, z, w), body-to-world when used as an orientation.

    Attributes:
        x: Vector part X.
        y: Vector part Y.
        z: Vector part Z.
        w: Scalar part.
    """

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0
    w: float = 1.0

    @staticmethod
    def identity() -> "Quaternion":
        """Return the identity rotation."""
        return Quaternion(0.0, 0.0, 0.0, 1.0)

    @staticmethod
    def from_axis_angle(axis: Vector3, angle: float) -> "Quaternion":
        """Rotation of ``angle`` radians about a unit ``axis``."""
        half = angle * 0.5
        s = math.sin(half)
        return Quaternion(axis.x * s, axis.y * s, axis.z * s, math.cos(half))

    @staticmethod
    def from_euler_yxz(pitch: float, yaw: float, roll: float) -> "Quaternion":
        """Build a rotation from YXZ Euler angles (yaw outer, then pitch, then roll).

        Args:
            pitch: Rotation about X in radians.
            yaw: Rotation about Y in radians.
            roll: Rotation about Z in radians.
        """
        c1 = math.cos(pitch / 2)
        c2 = math.cos(yaw / 2)
        c3 = math.cos(roll / 2)
        s1 = math.sin(pitch / 2)
        s2 = math.sin(yaw / 2)
        s3 = math.sin(roll / 2)
        return Quaternion(
            s1 * c2 * c3 + c1 * s2 * s3,
            c1 * s2 * c3 - s1 * c2 * s3,
            c1 * c2 * s3 - s1 * s2 * c3,
            c1 * c2 * c3 + s1 * s2 * s3,
        )

    def __mul__(self, other: "Quaternion") -> "Quaternion":
        """Hamilton product ``self * other`` (apply ``other`` first, in self's frame)."""
        ax, ay, az, aw = self.x, self.y, self.z, self.w
        bx, by, bz, bw = other.x, other.y, other.z, other.w
        return Quaternion(
            ax * bw + aw * bx + ay * bz - az * by,
            ay * bw + aw * by + az * bx - ax * bz,
            az * bw + aw * bz + ax * by - ay * bx,
            aw * bw - ax * bx - ay * by - az * bz,
        )

    def norm(self) -> float:
        return math.sqrt(self.x * self.x + self.y * self.y + self.z * self.z + self.w * self.w)

    def normalized(self) -> "Quaternion":
        """Unit-norm copy. A degenerate (zero) quaternion becomes the identity."""
        n = self.norm()
        if n == 0.0:
            return Quaternion.identity()
        return Quaternion(self.x / n, self.y / n, self.z / n, self.w / n)

    def conjugate(self) -> "Quaternion":
        return Quaternion(-self.x, -self.y, -self.z, self.w)

    def rotate(self, v: Vector3) -> Vector3:
        """Rotate a vector by this (unit) quaternion."""
        # t = 2 * cross(q.xyz, v); v' = v + w*t + cross(q.xyz, t)
        tx = 2.0 * (self.y * v.z - self.z * v.y)
        ty = 2.0 * (self.z * v.x - self.x * v.z)
        tz = 2.0 * (self.x * v.y - self.y * v.x)
        return Vector3(
            v.x + self.w * tx + self.y * tz - self.z * ty,
            v.y + self.w * ty + self.z * tx - self.x * tz,
            v.z + self.w * tz + self.x * ty - self.y * tx,
        )

    def to_euler_yxz(self) -> tuple[float, float, float]:
        """Decompose into YXZ Euler angles.

        Yaw is the outer rotation so pitch and roll read relative to the
        heading, without coupling to it.

        Returns:
            Tuple of (pitch, yaw, roll) in radians.
        """
        x, y, z, w = self.x, self.y, self.z, self.w
        m11 = 1.0 - 2.0 * (y * y + z * z)
        m13 = 2.0 * (x * z + w * y)
        m21 = 2.0 * (x * y + w * z)
        m22 = 1.0 - 2.0 * (x * x + z * z)
        m23 = 2.0 * (y * z - w * x)
        m31 = 2.0 * (x * z - w * y)
        m33 = 1.0 - 2.0 * (x * x + y * y)

        pitch = math.asin(-max(-1.0, min(1.0, m23)))
        if abs(m23) < 0.9999999:
            yaw = math.atan2(m13, m33)
            roll = math.atan2(m21, m22)
        else:
            # Gimbal lock: fold roll into yaw
            yaw = math.atan2(-m31, m11)
            roll = 0.0
        return pitch, yaw, roll

    def is_finite(self) -> bool:
        return all(math.isfinite(c) for c in (self.x, self.y, self.z, self.w))

    def to_tuple(self) -> tuple[float, float, float, float]:
        return (self.x, self.y, self.z, self.w)
