"""Per-frame glue between input, flight model and telemetry.

A ``FlightSession`` runs the same sequence every frame: sample the input
normalizer, flip the flight mode if a toggle was requested, step the flight
model, record telemetry, and hand back the camera pose for rendering.

Typical usage example:
    session = FlightSession(DroneFlightModel(VehicleConfig()), InputNormalizer())

    # In game loop
    session.input.process_events(pygame.event.get())
    pose = session.step(dt, collidables)
"""

from collections.abc import Sequence

from fpvdrone.core.input import InputNormalizer
from fpvdrone.core.logging_system import get_logger
from fpvdrone.physics.flight_model.base import (
    CameraPose,
    CollidableGeometry,
    ControlInput,
    FlightMode,
)
from fpvdrone.physics.flight_model.drone_model import DroneFlightModel
from fpvdrone.telemetry import TelemetryLogger

logger = get_logger(__name__)


class FlightSession:
    """Runs one drone with one input source."""

    def __init__(
        self,
        model: DroneFlightModel,
        input_normalizer: InputNormalizer,
        telemetry: TelemetryLogger | None = None,
    ) -> None:
        self.model = model
        self.input = input_normalizer
        self.telemetry = telemetry
        self.last_input = ControlInput()

    @property
    def mode(self) -> FlightMode:
        return self.model.mode

    def toggle_mode(self) -> FlightMode:
        """Switch between ACRO and LEVEL. Returns the new mode."""
        new_mode = self.model.mode.toggled()
        self.model.set_mode(new_mode)
        return new_mode

    def step(self, dt: float, collidables: Sequence[CollidableGeometry] = ()) -> CameraPose:
        """Advance one frame.

        Args:
            dt: Elapsed time since the previous frame (s).
            collidables: World geometry for this frame.

        Returns:
            Camera pose after the update.
        """
        command = self.input.sample()
        if command.mode_toggle_requested:
            self.toggle_mode()

        state = self.model.update(dt, command, collidables)
        self.last_input = command

        if self.telemetry is not None:
            self.telemetry.log(dt, state, command, self.model.crash_count)

        return self.model.camera_pose()

    def reset(self) -> None:
        """Put the drone back at spawn: level, still, current mode kept."""
        self.model.reset()
        self.last_input = ControlInput()
        logger.info("Drone reset to spawn")

    def close(self) -> None:
        """Flush telemetry, if any, and log the flight summary."""
        if self.telemetry is None:
            return
        self.telemetry.close()
        summary = self.telemetry.get_summary()
        logger.info(
            "Flight summary: %d frames, max speed %s m/s, max altitude %s m, %s crashes",
            summary["frame_count"],
            summary["max_speed_mps"],
            summary["max_altitude_m"],
            summary["crashes"],
        )
