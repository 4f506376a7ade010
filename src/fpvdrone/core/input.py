"""Input normalization for keyboard and gamepad.

This module turns raw device state into one ``ControlInput`` per frame. The
host feeds pygame events through ``process_events`` and then polls
``sample()``; nothing listens to devices behind the caller's back, so the
normalizer can be driven entirely by mock events and a mock joystick.

Source precedence:
- A connected gamepad fully overrides the keyboard for that frame.
- Without a gamepad, keyboard bindings are used.

Typical usage example:
    from fpvdrone.core.input import InputNormalizer

    normalizer = InputNormalizer()

    # In game loop
    normalizer.process_events(pygame.event.get())
    command = normalizer.sample()
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

import pygame  # pylint: disable=no-member

from fpvdrone.core.logging_system import get_logger
from fpvdrone.physics.flight_model.base import ControlInput

logger = get_logger(__name__)


class InputAction(Enum):
    """Logical actions that keys can be bound to."""

    THROTTLE_FULL = "throttle_full"
    THROTTLE_CUT = "throttle_cut"
    PITCH_FORWARD = "pitch_forward"
    PITCH_BACK = "pitch_back"
    ROLL_LEFT = "roll_left"
    ROLL_RIGHT = "roll_right"
    YAW_LEFT = "yaw_left"
    YAW_RIGHT = "yaw_right"
    MODE_TOGGLE = "mode_toggle"


@dataclass
class InputConfig:
    """Configuration for input normalization.

    Attributes:
        keyboard_bindings: Map of pygame key constants to InputAction.
        axis_deadzone: Yaw/pitch/roll magnitudes below this read as exactly 0.
        enable_joystick: Whether to open a joystick at startup and on hot-plug.
        thrust_axis: Gamepad axis for throttle (-1 = full, +1 = idle).
        yaw_axis: Gamepad axis for yaw (inverted).
        pitch_axis: Gamepad axis for pitch.
        roll_axis: Gamepad axis for roll.
        mode_toggle_button: Gamepad button that requests a mode toggle.
    """

    keyboard_bindings: dict[int, InputAction] = field(default_factory=dict)
    axis_deadzone: float = 0.1
    enable_joystick: bool = True
    thrust_axis: int = 1  # Left stick Y
    yaw_axis: int = 0  # Left stick X
    pitch_axis: int = 3  # Right stick Y
    roll_axis: int = 2  # Right stick X
    mode_toggle_button: int = 0  # A / Cross

    def __post_init__(self) -> None:
        """Initialize default key bindings if not provided."""
        if not self.keyboard_bindings:
            self.keyboard_bindings = self._get_default_bindings()
        if not 0.0 <= self.axis_deadzone < 1.0:
            raise ValueError(f"axis_deadzone must be in [0, 1), got {self.axis_deadzone}")

    def _get_default_bindings(self) -> dict[int, InputAction]:
        """Get default keyboard bindings.

        Returns:
            Dictionary mapping pygame keys to input actions.
        """
        return {
            pygame.K_SPACE: InputAction.THROTTLE_FULL,
            pygame.K_LSHIFT: InputAction.THROTTLE_CUT,
            pygame.K_w: InputAction.PITCH_FORWARD,
            pygame.K_s: InputAction.PITCH_BACK,
            pygame.K_a: InputAction.ROLL_LEFT,
            pygame.K_d: InputAction.ROLL_RIGHT,
            pygame.K_q: InputAction.YAW_LEFT,
            pygame.K_e: InputAction.YAW_RIGHT,
            pygame.K_m: InputAction.MODE_TOGGLE,
        }


def apply_deadzone(value: float, deadzone: float) -> float:
    """Snap small axis values to zero.

    Values at or beyond the deadzone pass through unchanged (no rescaling).
    """
    if abs(value) < deadzone:
        return 0.0
    return value


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


class InputNormalizer:
    """Produces one normalized ``ControlInput`` per frame.

    Examples:
        >>> normalizer = InputNormalizer(InputConfig(enable_joystick=False))
        >>> normalizer.process_events(pygame_events)
        >>> command = normalizer.sample()
        >>> print(f"Thrust: {command.thrust:.2f}")
    """

    def __init__(self, config: InputConfig | None = None, joystick: Any = None) -> None:
        """Initialize input normalizer.

        Args:
            config: Input configuration (uses defaults if None).
            joystick: Already-opened joystick (pygame.joystick.Joystick or any
                object with ``get_numaxes``/``get_axis``). If None and joysticks
                are enabled, the first connected device is opened.
        """
        self.config = config if config is not None else InputConfig()

        # Keys currently held
        self._keys_pressed: set[int] = set()

        # Latched mode toggle, cleared by sample()
        self._toggle_pending = False

        # Analog source
        self.joystick: Any = None  # pygame.joystick.Joystick | None
        if joystick is not None:
            self.attach_joystick(joystick)
        else:
            self._initialize_joystick()

        logger.info(
            "Input normalizer initialized with %d key bindings", len(self.config.keyboard_bindings)
        )

    @property
    def analog_attached(self) -> bool:
        """True while a gamepad is the active input source."""
        return self.joystick is not None

    def _initialize_joystick(self) -> None:
        """Open the first joystick if available and enabled."""
        if not self.config.enable_joystick:
            return

        pygame.joystick.init()
        if pygame.joystick.get_count() > 0:
            self._open_joystick(0)
        else:
            logger.debug("No joystick detected, using keyboard")

    def _open_joystick(self, device_index: int) -> None:
        """Open and attach a device; on failure stay on the keyboard."""
        try:
            self.attach_joystick(pygame.joystick.Joystick(device_index))
        except pygame.error as e:
            self.joystick = None
            logger.warning("Could not open joystick %d (%s), using keyboard", device_index, e)

    def attach_joystick(self, joystick: Any) -> None:
        """Use ``joystick`` as the analog source from the next sample on."""
        if hasattr(joystick, "init"):
            joystick.init()
        self.joystick = joystick
        if hasattr(joystick, "get_name"):
            logger.info(
                "Joystick attached: %s (%d axes)", joystick.get_name(), joystick.get_numaxes()
            )
        else:
            logger.info("Joystick attached (%d axes)", joystick.get_numaxes())

    def detach_joystick(self) -> None:
        """Drop the analog source and fall back to the keyboard."""
        if self.joystick is not None:
            logger.info("Joystick detached, falling back to keyboard")
        self.joystick = None

    def process_events(self, events: list[Any]) -> None:
        """Process pygame events.

        Args:
            events: List of pygame events from the event queue.
        """
        for event in events:
            if event.type == pygame.KEYDOWN:
                self._handle_key_down(event.key)
            elif event.type == pygame.KEYUP:
                self._keys_pressed.discard(event.key)
            elif event.type == pygame.JOYBUTTONDOWN:
                self._handle_joy_button_down(event.button)
            elif event.type == pygame.JOYDEVICEADDED:
                self._handle_device_added(event.device_index)
            elif event.type == pygame.JOYDEVICEREMOVED:
                self._handle_device_removed(event.instance_id)

    def _handle_key_down(self, key: int) -> None:
        """Handle key press event.

        Args:
            key: Pygame key constant.
        """
        is_repeat = key in self._keys_pressed
        self._keys_pressed.add(key)

        action = self.config.keyboard_bindings.get(key)
        if action is InputAction.MODE_TOGGLE and not is_repeat:
            self._toggle_pending = True
            logger.debug("Mode toggle requested (keyboard)")

    def _handle_joy_button_down(self, button: int) -> None:
        """Handle joystick button press.

        Args:
            button: Joystick button index.
        """
        if button == self.config.mode_toggle_button:
            self._toggle_pending = True
            logger.debug("Mode toggle requested (joystick button %d)", button)

    def _handle_device_added(self, device_index: int) -> None:
        if self.joystick is not None or not self.config.enable_joystick:
            return
        self._open_joystick(device_index)

    def _handle_device_removed(self, instance_id: int) -> None:
        if self.joystick is None:
            return
        get_instance_id = getattr(self.joystick, "get_instance_id", None)
        if get_instance_id is None or get_instance_id() == instance_id:
            self.detach_joystick()

    def sample(self) -> ControlInput:
        """Return this frame's command and consume any pending mode toggle.

        Never raises: a gamepad that fails to read is detached and the
        keyboard is used instead.
        """
        toggle = self._toggle_pending
        self._toggle_pending = False

        if self.joystick is not None:
            try:
                return self._sample_joystick(toggle)
            except pygame.error as e:
                logger.warning("Joystick read failed (%s), falling back to keyboard", e)
                self.detach_joystick()

        return self._sample_keyboard(toggle)

    def _read_axis(self, index: int) -> float:
        if index >= self.joystick.get_numaxes():
            return 0.0
        return float(self.joystick.get_axis(index))

    def _sample_joystick(self, toggle: bool) -> ControlInput:
        """Map gamepad axes (mode 2 layout) to a command."""
        cfg = self.config

        # Stick up reads -1 and means full throttle
        thrust = _clamp((-self._read_axis(cfg.thrust_axis) + 1.0) / 2.0, 0.0, 1.0)
        yaw = -self._read_axis(cfg.yaw_axis)
        pitch = self._read_axis(cfg.pitch_axis)
        roll = self._read_axis(cfg.roll_axis)

        return ControlInput(
            thrust=thrust,
            yaw=_clamp(apply_deadzone(yaw, cfg.axis_deadzone), -1.0, 1.0),
            pitch=_clamp(apply_deadzone(pitch, cfg.axis_deadzone), -1.0, 1.0),
            roll=_clamp(apply_deadzone(roll, cfg.axis_deadzone), -1.0, 1.0),
            mode_toggle_requested=toggle,
        )

    def _sample_keyboard(self, toggle: bool) -> ControlInput:
        """Map held keys to a binary command."""
        held = {
            action
            for key, action in self.config.keyboard_bindings.items()
            if key in self._keys_pressed
        }

        thrust = 0.0
        if InputAction.THROTTLE_FULL in held:
            thrust = 1.0
        if InputAction.THROTTLE_CUT in held:
            thrust = 0.0

        return ControlInput(
            thrust=thrust,
            yaw=self._key_axis(held, InputAction.YAW_LEFT, InputAction.YAW_RIGHT),
            pitch=self._key_axis(held, InputAction.PITCH_BACK, InputAction.PITCH_FORWARD),
            roll=self._key_axis(held, InputAction.ROLL_RIGHT, InputAction.ROLL_LEFT),
            mode_toggle_requested=toggle,
        )

    @staticmethod
    def _key_axis(held: set[InputAction], positive: InputAction, negative: InputAction) -> float:
        """+1 or -1 for one key of a pair, 0 for neither or both."""
        value = 0.0
        if positive in held:
            value += 1.0
        if negative in held:
            value -= 1.0
        return value
