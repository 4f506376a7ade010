"""fpvdrone - FPV drone flight simulator.

Main entry point. Initializes pygame, builds the flight session, and runs the
game loop with a text HUD. 3D rendering is left to other front ends; this
window only shows the state the simulation core produces.

Typical usage:
    python -m fpvdrone.main
    python -m fpvdrone.main --map JUNGLE --mode LEVEL
    python -m fpvdrone.main --telemetry /tmp/flight.db
"""

import argparse
import math
import random
import sys

import pygame

from fpvdrone.core.input import InputNormalizer
from fpvdrone.core.logging_system import get_logger, initialize_logging
from fpvdrone.core.resource_path import get_config_path
from fpvdrone.physics.flight_model.base import (
    CollidableGeometry,
    FlightMode,
    VehicleConfig,
    load_vehicle_config,
)
from fpvdrone.physics.flight_model.drone_model import DroneFlightModel
from fpvdrone.session import FlightSession
from fpvdrone.telemetry import TelemetryLogger
from fpvdrone.version import get_version
from fpvdrone.world import MapType, build_map

logger = get_logger(__name__)


class FPVDroneApp:
    """Main application: window, loop, HUD."""

    def __init__(self, args: argparse.Namespace) -> None:
        """Initialize the application.

        Args:
            args: Parsed command line arguments.
        """
        self.args = args

        logging_config = get_config_path("logging.yaml")
        if logging_config.exists():
            initialize_logging(str(logging_config), use_platform_dir=True)
        else:
            initialize_logging(use_platform_dir=True)
        logger.info("fpvdrone %s starting up...", get_version())

        pygame.init()
        pygame.display.set_caption("fpvdrone")
        self.screen = pygame.display.set_mode((800, 600), pygame.RESIZABLE)
        self.clock = pygame.time.Clock()
        self.font = pygame.font.SysFont("monospace", 14)
        self.large_font = pygame.font.SysFont("monospace", 32, bold=True)
        self.running = True
        self.paused = False

        config = self._load_vehicle_config()
        model = DroneFlightModel(config)
        model.set_mode(FlightMode(args.mode))

        telemetry = None
        if args.telemetry is not None:
            telemetry = TelemetryLogger(args.telemetry or None)

        self.session = FlightSession(model, InputNormalizer(), telemetry)

        rng = random.Random(args.seed) if args.seed is not None else None
        self.collidables: list[CollidableGeometry] = build_map(MapType(args.map), rng)

        logger.info("fpvdrone initialized successfully")

    def _load_vehicle_config(self) -> VehicleConfig:
        if self.args.config:
            return load_vehicle_config(self.args.config)
        default_path = get_config_path("drone.yaml")
        if default_path.exists():
            return load_vehicle_config(default_path)
        logger.warning("No drone.yaml found, using built-in defaults")
        return VehicleConfig()

    def run(self) -> None:
        """Run the main game loop."""
        logger.info("Starting main game loop")

        while self.running:
            dt = self.clock.tick(self.args.fps) / 1000.0

            self._process_events()

            if not self.paused:
                self.session.step(dt, self.collidables)

            self._render()
            pygame.display.flip()

        self._shutdown()

    def _process_events(self) -> None:
        events = pygame.event.get()
        for event in events:
            if event.type == pygame.QUIT:
                self.running = False
            elif event.type == pygame.KEYDOWN:
                if event.key == pygame.K_ESCAPE:
                    self.running = False
                elif event.key == pygame.K_p:
                    self.paused = not self.paused
                    logger.info("Paused" if self.paused else "Resumed")
                elif event.key == pygame.K_r:
                    self.session.reset()
        self.session.input.process_events(events)

    def _render(self) -> None:
        """Render the HUD."""
        self.screen.fill((0, 0, 0))

        state = self.session.model.get_state()
        command = self.session.last_input
        pitch, yaw, roll = state.get_attitude()
        center_x = self.screen.get_width() // 2
        center_y = self.screen.get_height() // 2

        instruments = [
            f"MODE: {state.mode.value}",
            f"THRUST: {command.thrust * 100:>3.0f}%",
            f"ALT: {state.position.y:>6.1f} M",
            f"SPEED: {state.get_speed():>5.1f} M/S",
        ]
        y_offset = center_y - 80
        for line in instruments:
            text = self.large_font.render(line, True, (0, 255, 0))
            self.screen.blit(text, text.get_rect(center=(center_x, y_offset)))
            y_offset += 40

        debug = [
            f"FPS: {self.clock.get_fps():.1f}",
            f"Pos: {state.position}",
            f"Pitch: {math.degrees(pitch):+.0f}  Yaw: {math.degrees(yaw):+.0f}  "
            f"Roll: {math.degrees(roll):+.0f}",
            f"Crashes: {self.session.model.crash_count}",
            f"Input: {'GAMEPAD' if self.session.input.analog_attached else 'KEYBOARD'}",
        ]
        y_offset = 10
        for line in debug:
            text = self.font.render(line, True, (255, 255, 0))
            self.screen.blit(text, (10, y_offset))
            y_offset += 16

        instructions = [
            "Space: Throttle  LShift: Cut",
            "W/S: Pitch  A/D: Roll  Q/E: Yaw",
            "M: Mode  R: Reset  P: Pause  Esc: Quit",
        ]
        y_offset = self.screen.get_height() - len(instructions) * 16 - 10
        for line in instructions:
            text = self.font.render(line, True, (200, 200, 200))
            self.screen.blit(text, (10, y_offset))
            y_offset += 16

        if self.paused:
            text = self.large_font.render("PAUSED", True, (255, 255, 0))
            self.screen.blit(text, text.get_rect(center=(center_x, center_y + 100)))

    def _shutdown(self) -> None:
        logger.info("Shutting down...")
        self.session.close()
        pygame.quit()


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments.

    Returns:
        Parsed arguments
    """
    parser = argparse.ArgumentParser(description="fpvdrone - FPV drone flight simulator")

    parser.add_argument("--config", type=str, help="Drone YAML config (default: config/drone.yaml)")
    parser.add_argument(
        "--map",
        choices=[m.value for m in MapType],
        default=MapType.CITY.value,
        help="Flying area",
    )
    parser.add_argument(
        "--mode",
        choices=[m.value for m in FlightMode],
        default=FlightMode.ACRO.value,
        help="Initial flight mode",
    )
    parser.add_argument(
        "--telemetry",
        nargs="?",
        const="",
        default=None,
        help="Record telemetry to an SQLite file (temp file if no path given)",
    )
    parser.add_argument("--seed", type=int, help="Seed for obstacle placement")
    parser.add_argument("--fps", type=int, default=120, help="Frame rate cap")

    return parser.parse_args(argv)


def main() -> int:
    """Main entry point.

    Returns:
        Exit code (0 for success).
    """
    try:
        app = FPVDroneApp(parse_args())
        app.run()
        return 0
    except Exception as e:  # pylint: disable=broad-exception-caught
        logger.exception("Fatal error: %s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
