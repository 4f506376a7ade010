"""Value types shared by the drone flight model and its callers.

Typical usage example:
    from fpvdrone.physics.flight_model.base import ControlInput, VehicleConfig

    config = VehicleConfig(acro_rate=6.0)
    inputs = ControlInput(thrust=0.5, pitch=-0.2)
"""

import math
from dataclasses import dataclass, field, fields
from enum import Enum
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

import yaml

from fpvdrone.physics.vectors import Quaternion, Vector3


class FlightMode(Enum):
    """Control law applied to pilot input.

    ACRO maps stick deflection to angular rate; LEVEL maps pitch/roll stick
    deflection to a target attitude angle.
    """

    ACRO = "ACRO"
    LEVEL = "LEVEL"

    def toggled(self) -> "FlightMode":
        """Return the other mode."""
        return FlightMode.LEVEL if self is FlightMode.ACRO else FlightMode.ACRO


@dataclass(frozen=True)
class VehicleConfig:
    """Physical and control parameters of the drone.

    Attributes:
        max_thrust: Thrust acceleration at full throttle (m/s²).
        mass: Vehicle mass (kg). Informational; thrust is already an acceleration.
        linear_drag: Linear drag coefficient (1/s).
        angular_drag: Angular drag coefficient (1/s). Informational; both
            control laws set angular velocity directly.
        acro_rate: Angular rate at full stick deflection (rad/s).
        level_angle_limit: Attitude at full stick deflection in LEVEL mode (rad).
        level_gain: Proportional gain of the LEVEL attitude controller (1/s).
        gravity: Vertical acceleration along +Y (m/s², negative pulls down).
        collision_radius: Minimum collision lookahead distance (m).
        ground_clearance: Lowest allowed altitude of the vehicle origin (m).
        max_speed: Upper bound on linear speed (m/s).
        camera_offset: FPV camera position in the body frame (m).
        spawn_position: Position used by ``reset()`` (m).
    """

    max_thrust: float = 30.0
    mass: float = 0.5
    linear_drag: float = 0.5
    angular_drag: float = 6.0
    acro_rate: float = 8.0
    level_angle_limit: float = 0.78  # ~45 degrees
    level_gain: float = 15.0
    gravity: float = -9.81
    collision_radius: float = 0.5
    ground_clearance: float = 0.2
    max_speed: float = 100.0
    camera_offset: Vector3 = field(default_factory=lambda: Vector3(0.0, 0.1, -0.2))
    spawn_position: Vector3 = field(default_factory=lambda: Vector3(0.0, 2.0, 0.0))

    def __post_init__(self) -> None:
        """Validate parameters.

        Raises:
            ValueError: If a parameter is non-finite or out of range.
        """
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, Vector3):
                if not value.is_finite():
                    raise ValueError(f"{f.name} must be finite, got {value}")
            elif not isinstance(value, (int, float)) or not math.isfinite(value):
                raise ValueError(f"{f.name} must be a finite number, got {value!r}")

        non_negative = (
            "max_thrust",
            "linear_drag",
            "angular_drag",
            "acro_rate",
            "level_angle_limit",
            "level_gain",
        )
        for name in non_negative:
            if getattr(self, name) < 0.0:
                raise ValueError(f"{name} must be >= 0, got {getattr(self, name)}")

        for name in ("mass", "collision_radius", "max_speed"):
            if getattr(self, name) <= 0.0:
                raise ValueError(f"{name} must be > 0, got {getattr(self, name)}")

        if self.level_angle_limit > math.pi / 2:
            raise ValueError(
                f"level_angle_limit must be <= pi/2, got {self.level_angle_limit}"
            )

        if self.spawn_position.y < self.ground_clearance:
            raise ValueError(
                f"spawn_position must be at or above ground_clearance, got {self.spawn_position}"
            )

    @classmethod
    def from_dict(cls, config: dict[str, Any]) -> "VehicleConfig":
        """Create a config from a mapping, e.g. the ``drone`` section of a YAML file.

        Missing keys keep their defaults. Vector fields accept 3-element lists.

        Raises:
            ValueError: On unknown keys or invalid values.
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(config) - known)
        if unknown:
            raise ValueError(f"Unknown drone config keys: {', '.join(unknown)}")

        kwargs: dict[str, Any] = {}
        for key, value in config.items():
            if key in ("camera_offset", "spawn_position"):
                kwargs[key] = Vector3.from_sequence(value)
            else:
                kwargs[key] = value
        return cls(**kwargs)


def load_vehicle_config(path: str | Path) -> VehicleConfig:
    """Load a ``VehicleConfig`` from the ``drone`` section of a YAML file.

    Args:
        path: YAML file path.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the document has no ``drone`` mapping or values are invalid.
    """
    with open(path, encoding="utf-8") as f:
        document = yaml.safe_load(f) or {}

    section = document.get("drone") if isinstance(document, dict) else None
    if not isinstance(section, dict):
        raise ValueError(f"drone section required in {path}")
    return VehicleConfig.from_dict(section)


@dataclass(frozen=True)
class ControlInput:
    """Normalized pilot command for one frame.

    Attributes:
        thrust: Throttle (0.0 to 1.0).
        yaw: Yaw command (-1.0 to 1.0, positive turns left).
        pitch: Pitch command (-1.0 to 1.0).
        roll: Roll command (-1.0 to 1.0).
        mode_toggle_requested: True on the single frame a mode toggle was pressed.
    """

    thrust: float = 0.0
    yaw: float = 0.0
    pitch: float = 0.0
    roll: float = 0.0
    mode_toggle_requested: bool = False

    def is_finite(self) -> bool:
        return all(math.isfinite(v) for v in (self.thrust, self.yaw, self.pitch, self.roll))


@dataclass(frozen=True)
class VehicleState:
    """Kinematic state of the drone.

    Attributes:
        position: World position (m).
        orientation: Body-to-world rotation.
        linear_velocity: World-frame velocity (m/s).
        angular_velocity: Body-frame rates (rad/s): x = pitch, y = yaw, z = roll.
        mode: Active control law.
    """

    position: Vector3 = field(default_factory=lambda: Vector3(0.0, 2.0, 0.0))
    orientation: Quaternion = field(default_factory=Quaternion.identity)
    linear_velocity: Vector3 = field(default_factory=Vector3.zero)
    angular_velocity: Vector3 = field(default_factory=Vector3.zero)
    mode: FlightMode = FlightMode.ACRO

    def get_attitude(self) -> tuple[float, float, float]:
        """Return (pitch, yaw, roll) in radians, YXZ decomposition."""
        return self.orientation.to_euler_yxz()

    def get_speed(self) -> float:
        return self.linear_velocity.magnitude()

    def is_finite(self) -> bool:
        return (
            self.position.is_finite()
            and self.orientation.is_finite()
            and self.linear_velocity.is_finite()
            and self.angular_velocity.is_finite()
        )


@dataclass(frozen=True)
class CameraPose:
    """FPV camera pose in world space."""

    position: Vector3
    orientation: Quaternion


@runtime_checkable
class CollidableGeometry(Protocol):
    """Anything the drone can fly into.

    The flight model only ever asks for the distance along a ray.
    """

    def cast_ray(self, origin: Vector3, direction: Vector3) -> float | None:
        """Distance from ``origin`` along unit ``direction`` to the nearest hit, or None."""
        ...
