"""
Gamepad Input Provider

Reads USB/wireless game controllers through pygame and translates them
into the same key tokens the keyboard produces, so one set of bindings
serves both.
"""

import logging
from typing import Optional, Sequence, Tuple

try:
    import pygame
    HAS_PYGAME = True
except ImportError:
    HAS_PYGAME = False


logger = logging.getLogger(__name__)

# Button indices (Xbox-style layout)
BUTTON_A = 0       # stop
BUTTON_B = 1       # stand down
BUTTON_Y = 3       # stand up
BUTTON_START = 7   # exit

STOP_TOKEN = " "
EXIT_TOKEN = "\x1b"


def resolve_token(
    x: float,
    y: float,
    hat: Tuple[int, int] = (0, 0),
    buttons: Sequence[bool] = (),
    deadzone: float = 0.3,
) -> str:
    """
    Translate one controller snapshot into a key token.

    Buttons win over the D-pad, the D-pad wins over the stick. On the
    stick the larger axis decides between driving and turning.

    Args:
        x: Left stick X (-1 left .. +1 right)
        y: Left stick Y (-1 up .. +1 down, as pygame reports it)
        hat: D-pad (x, y)
        buttons: Pressed state per button index
        deadzone: Stick magnitude treated as centered

    Returns:
        Key token; the stop token when nothing is pressed
    """
    def pressed(index: int) -> bool:
        return index < len(buttons) and bool(buttons[index])

    if pressed(BUTTON_START):
        return EXIT_TOKEN
    if pressed(BUTTON_A):
        return STOP_TOKEN
    if pressed(BUTTON_Y):
        return "r"
    if pressed(BUTTON_B):
        return "f"

    if hat[0] < 0:
        return "q"
    if hat[0] > 0:
        return "e"

    if abs(x) < deadzone and abs(y) < deadzone:
        return STOP_TOKEN
    if abs(y) >= abs(x):
        return "w" if y < 0 else "s"
    return "a" if x < 0 else "d"


class GamepadInput:
    """
    Game controller input provider.

    - Left stick: forward/backward or turn (dominant axis)
    - D-pad left/right: strafe
    - A: stop, Y: stand up, B: stand down, Start: exit

    A token is emitted only when the resolved control changes, so holding
    the stick does not flood the reader.
    """

    def __init__(self, deadzone: float = 0.3, joystick_index: int = 0) -> None:
        """
        Initialize gamepad input.

        Args:
            deadzone: Ignore stick movements below this threshold
            joystick_index: Which controller to use
        """
        if not HAS_PYGAME:
            raise RuntimeError(
                "pygame not installed. Install with: pip install go2-motion[gamepad]"
            )

        self._deadzone = deadzone
        self._joystick_index = joystick_index
        self._joystick: Optional["pygame.joystick.Joystick"] = None
        self._running = False
        self._last_token: Optional[str] = None

    async def start(self) -> None:
        """Initialize pygame and connect to controller"""
        if self._running:
            return

        logger.info("Initializing gamepad input...")
        pygame.init()
        pygame.joystick.init()

        joystick_count = pygame.joystick.get_count()
        logger.info(f"Found {joystick_count} game controller(s)")
        if joystick_count <= self._joystick_index:
            raise RuntimeError("No game controllers found")

        self._joystick = pygame.joystick.Joystick(self._joystick_index)
        self._joystick.init()
        logger.info(f"Selected: {self._joystick.get_name()}")
        logger.info(
            f"Axes: {self._joystick.get_numaxes()}, "
            f"Buttons: {self._joystick.get_numbuttons()}, "
            f"Hats: {self._joystick.get_numhats()}"
        )

        # Centered stick must not send a stop before the first real input
        self._last_token = STOP_TOKEN
        self._running = True

    async def stop(self) -> None:
        """Disconnect from controller"""
        logger.info("Stopping gamepad input")
        self._running = False

        if self._joystick:
            self._joystick.quit()
            self._joystick = None

        pygame.joystick.quit()
        pygame.quit()

    def poll_key(self) -> Optional[str]:
        """Return a key token when the controller state changed"""
        if not self._running or not self._joystick:
            return None

        # Process pygame events (required to update joystick state)
        pygame.event.pump()

        js = self._joystick
        hat = js.get_hat(0) if js.get_numhats() > 0 else (0, 0)
        buttons = [bool(js.get_button(i)) for i in range(js.get_numbuttons())]
        token = resolve_token(js.get_axis(0), js.get_axis(1), hat, buttons, self._deadzone)

        if token == self._last_token:
            return None

        logger.debug(f"Gamepad -> {token!r}")
        self._last_token = token
        return token
