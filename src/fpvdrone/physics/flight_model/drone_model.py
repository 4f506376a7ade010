"""Drone flight model with ACRO and LEVEL control laws.

This module is the simulation core: it owns the vehicle state, turns stick
input into angular velocity, integrates rotation and translation with forward
Euler, looks ahead along the velocity for obstacles and keeps the drone above
the ground.

Frame step order (each step feeds the next):
    1. Angular velocity from the active control law
    2. Orientation integration (pitch, then yaw, then roll, body axes)
    3. Thrust along body up
    4. Gravity + thrust + linear drag
    5. Velocity integration
    6. Lookahead collision check and crash response
    7. Position integration
    8. Ground clamp with bounce and friction

Typical usage example:
    from fpvdrone.physics.flight_model.base import ControlInput, VehicleConfig
    from fpvdrone.physics.flight_model.drone_model import DroneFlightModel

    model = DroneFlightModel(VehicleConfig())
    state = model.update(dt=0.016, inputs=ControlInput(thrust=0.5))
    pose = model.camera_pose()
"""

import math
import random
from collections.abc import Sequence
from dataclasses import replace

from fpvdrone.core.logging_system import get_logger
from fpvdrone.physics.collision import lookahead_distance, nearest_hit
from fpvdrone.physics.flight_model.base import (
    CameraPose,
    CollidableGeometry,
    ControlInput,
    FlightMode,
    VehicleConfig,
    VehicleState,
)
from fpvdrone.physics.vectors import Quaternion, Vector3

logger = get_logger(__name__)

# ACRO rate response: blend factor per second toward the target rate
ACRO_RESPONSE = 10.0

# Collision response
COLLISION_MIN_SPEED = 0.1  # m/s, below this no ray is cast
CRASH_VELOCITY_FACTOR = -0.5
CRASH_TUMBLE_RATE = 5.0  # rad/s, bound of each random tumble component

# Ground contact
GROUND_BOUNCE_FACTOR = 0.5
GROUND_FRICTION = 0.8

BODY_UP = Vector3(0.0, 1.0, 0.0)
AXIS_X = Vector3(1.0, 0.0, 0.0)
AXIS_Y = Vector3(0.0, 1.0, 0.0)
AXIS_Z = Vector3(0.0, 0.0, 1.0)


def integrate_orientation(
    orientation: Quaternion, angular_velocity: Vector3, dt: float
) -> Quaternion:
    """Apply one frame of body rates to an orientation.

    The rates are applied as three sequential rotations about the body axes,
    always in the order pitch (X), yaw (Y), roll (Z). Reference trajectories
    depend on this order.

    Args:
        orientation: Current body-to-world rotation.
        angular_velocity: Body rates (rad/s): x = pitch, y = yaw, z = roll.
        dt: Time step (s).

    Returns:
        New unit-norm orientation.
    """
    q = orientation * Quaternion.from_axis_angle(AXIS_X, angular_velocity.x * dt)
    q = q * Quaternion.from_axis_angle(AXIS_Y, angular_velocity.y * dt)
    q = q * Quaternion.from_axis_angle(AXIS_Z, angular_velocity.z * dt)
    return q.normalized()


def acro_angular_velocity(
    current: Vector3, inputs: ControlInput, acro_rate: float, dt: float
) -> Vector3:
    """Rate law: ease the body rates toward stick deflection times ``acro_rate``."""
    target = Vector3(inputs.pitch * acro_rate, inputs.yaw * acro_rate, inputs.roll * acro_rate)
    return current.lerp(target, min(1.0, dt * ACRO_RESPONSE))


def level_angular_velocity(
    orientation: Quaternion, inputs: ControlInput, config: VehicleConfig
) -> Vector3:
    """Angle law for pitch and roll, rate law for yaw.

    Pitch and roll rates are proportional to the error between the commanded
    angle (stick times ``level_angle_limit``) and the current YXZ Euler angle.
    """
    pitch, _, roll = orientation.to_euler_yxz()
    target_pitch = inputs.pitch * config.level_angle_limit
    target_roll = inputs.roll * config.level_angle_limit
    return Vector3(
        (target_pitch - pitch) * config.level_gain,
        inputs.yaw * config.acro_rate,
        (target_roll - roll) * config.level_gain,
    )


def camera_pose_for(state: VehicleState, offset: Vector3) -> CameraPose:
    """FPV camera pose: body-frame ``offset`` carried into the world by the drone."""
    return CameraPose(
        position=state.position + state.orientation.rotate(offset),
        orientation=state.orientation,
    )


class DroneFlightModel:
    """Stateful drone simulator.

    Holds exactly one ``VehicleState`` and replaces it on every ``update``.
    Calls must be sequential; there is no internal locking.

    Examples:
        >>> model = DroneFlightModel(VehicleConfig())
        >>> model.set_mode(FlightMode.LEVEL)
        >>> state = model.update(0.016, ControlInput(thrust=0.4, roll=0.5))
        >>> state.position.y >= 0.2
        True
    """

    def __init__(
        self,
        config: VehicleConfig,
        initial_state: VehicleState | None = None,
        rng: random.Random | None = None,
    ) -> None:
        """Initialize the flight model.

        Args:
            config: Vehicle parameters.
            initial_state: Starting state (spawn pose if None).
            rng: Random source for crash tumble (seed it for reproducible runs).

        Raises:
            ValueError: If the initial state is not finite or starts below
                ground clearance.
        """
        self.config = config
        self._rng = rng if rng is not None else random.Random()
        self._state = self._prepare_state(
            initial_state if initial_state is not None else self._spawn_state()
        )

        self.crash_count = 0
        self._updates = 0

        logger.info(
            "Initialized drone model: thrust=%.1fm/s², drag=%.2f, acro_rate=%.1frad/s, mode=%s",
            config.max_thrust,
            config.linear_drag,
            config.acro_rate,
            self._state.mode.value,
        )

    @property
    def state(self) -> VehicleState:
        """Current state (immutable snapshot)."""
        return self._state

    @property
    def mode(self) -> FlightMode:
        return self._state.mode

    def get_state(self) -> VehicleState:
        """Get current vehicle state.

        Returns:
            The current frozen state; later updates do not change it.
        """
        return self._state

    def set_mode(self, mode: FlightMode) -> None:
        """Switch control law immediately. Only the mode is recorded.

        Raises:
            ValueError: If ``mode`` is not a ``FlightMode``.
        """
        if not isinstance(mode, FlightMode):
            raise ValueError(f"Unknown flight mode: {mode!r}")
        self._state = replace(self._state, mode=mode)
        logger.info("Flight mode: %s", mode.value)

    def update(
        self,
        dt: float,
        inputs: ControlInput,
        collidables: Sequence[CollidableGeometry] = (),
    ) -> VehicleState:
        """Advance the simulation by one frame.

        Args:
            dt: Elapsed time since the previous frame (s), >= 0.
            inputs: Normalized pilot command.
            collidables: Geometry to test for collisions this frame.

        Returns:
            The new state.

        Raises:
            ValueError: If ``dt`` is negative or not finite, or inputs are not finite.
            FloatingPointError: If integration produced a non-finite state.
        """
        if not math.isfinite(dt) or dt < 0.0:
            raise ValueError(f"dt must be a finite value >= 0, got {dt}")
        if not inputs.is_finite():
            raise ValueError(f"Control inputs must be finite: {inputs}")

        self._updates += 1
        cfg = self.config
        state = self._state

        # 1. Angular velocity from the control law
        if state.mode is FlightMode.ACRO:
            angular_velocity = acro_angular_velocity(
                state.angular_velocity, inputs, cfg.acro_rate, dt
            )
        else:
            angular_velocity = level_angular_velocity(state.orientation, inputs, cfg)

        # 2. Orientation
        orientation = integrate_orientation(state.orientation, angular_velocity, dt)

        # 3. Thrust acceleration (mass normalized to 1)
        thrust = orientation.rotate(BODY_UP) * (inputs.thrust * cfg.max_thrust)

        # 4. Gravity + thrust + linear drag
        acceleration = (
            Vector3(0.0, cfg.gravity, 0.0) + thrust + state.linear_velocity * -cfg.linear_drag
        )

        # 5. Velocity (forward Euler, speed-limited)
        velocity = (state.linear_velocity + acceleration * dt).clamped_magnitude(cfg.max_speed)

        # 6. Lookahead collision
        speed = velocity.magnitude()
        if collidables and speed > COLLISION_MIN_SPEED:
            direction = velocity / speed
            lookahead = lookahead_distance(speed, dt, cfg.collision_radius)
            hit = nearest_hit(collidables, state.position, direction)
            if hit is not None and hit < lookahead:
                velocity = velocity * CRASH_VELOCITY_FACTOR
                angular_velocity = Vector3(
                    self._rng.uniform(-CRASH_TUMBLE_RATE, CRASH_TUMBLE_RATE),
                    self._rng.uniform(-CRASH_TUMBLE_RATE, CRASH_TUMBLE_RATE),
                    self._rng.uniform(-CRASH_TUMBLE_RATE, CRASH_TUMBLE_RATE),
                )
                self.crash_count += 1
                logger.warning(
                    "CRASH at %s: hit at %.2fm (lookahead %.2fm, speed %.1fm/s)",
                    state.position,
                    hit,
                    lookahead,
                    speed,
                )

        # 7. Position
        position = state.position + velocity * dt

        # 8. Ground clamp
        if position.y < cfg.ground_clearance:
            position = Vector3(position.x, cfg.ground_clearance, position.z)
            velocity = Vector3(
                velocity.x * GROUND_FRICTION,
                max(0.0, -velocity.y * GROUND_BOUNCE_FACTOR),
                velocity.z * GROUND_FRICTION,
            )

        new_state = VehicleState(
            position=position,
            orientation=orientation,
            linear_velocity=velocity,
            angular_velocity=angular_velocity,
            mode=state.mode,
        )
        if not new_state.is_finite():
            raise FloatingPointError(f"Non-finite drone state after update (dt={dt})")
        self._state = new_state

        if self._updates % 60 == 0:
            logger.debug(
                "[DRONE] pos=%s vel=%s speed=%.1fm/s mode=%s",
                position,
                velocity,
                speed,
                state.mode.value,
            )

        return new_state

    def camera_pose(self) -> CameraPose:
        """FPV camera pose for the current state. Does not modify the state."""
        return camera_pose_for(self._state, self.config.camera_offset)

    def reset(self, initial_state: VehicleState | None = None) -> None:
        """Reset to a new state.

        Args:
            initial_state: New state. Defaults to the spawn pose in the current mode.

        Raises:
            ValueError: If the state is not finite or starts below ground clearance.
        """
        state = initial_state if initial_state is not None else self._spawn_state(self.mode)
        self._state = self._prepare_state(state)
        self.crash_count = 0
        self._updates = 0
        logger.debug("Reset drone model to %s", state.position)

    def get_update_count(self) -> int:
        """Get number of updates performed since construction or reset."""
        return self._updates

    def _spawn_state(self, mode: FlightMode = FlightMode.ACRO) -> VehicleState:
        return VehicleState(position=self.config.spawn_position, mode=mode)

    def _prepare_state(self, state: VehicleState) -> VehicleState:
        if not state.is_finite():
            raise ValueError(f"Initial state must be finite: {state}")
        if not isinstance(state.mode, FlightMode):
            raise ValueError(f"Unknown flight mode: {state.mode!r}")
        if state.position.y < self.config.ground_clearance:
            raise ValueError(
                f"Initial altitude {state.position.y} is below ground clearance "
                f"{self.config.ground_clearance}"
            )
        return replace(state, orientation=state.orientation.normalized())
