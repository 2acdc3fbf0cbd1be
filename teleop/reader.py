"""
Interactive Input Reader - Turns operator key presses into mode changes.

Runs in its own loop at the input period, independent of the control
tick. Each recognized key replaces the supervisor's current mode; the
exit key stops the supervisor. Unrecognized keys are ignored.
"""

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional

from motion_core.interfaces import InputProvider
from motion_core.supervisor import Supervisor
from motion_core.types import Mode, TeleopDirection


logger = logging.getLogger(__name__)


class KeyAction(Enum):
    """What a key does"""
    SET_MODE = "set_mode"
    HELP = "help"
    EXIT = "exit"


@dataclass(frozen=True)
class KeyBinding:
    action: KeyAction
    mode: Optional[Mode] = None
    feedback: str = ""


@dataclass(frozen=True)
class KeyEvent:
    """One recognized key press"""
    key: str
    binding: KeyBinding


ESC = "\x1b"

KEY_BINDINGS: Dict[str, KeyBinding] = {
    "w": KeyBinding(KeyAction.SET_MODE, Mode.teleop(TeleopDirection.FORWARD), "Moving forward"),
    "s": KeyBinding(KeyAction.SET_MODE, Mode.teleop(TeleopDirection.BACKWARD), "Moving backward"),
    "a": KeyBinding(KeyAction.SET_MODE, Mode.teleop(TeleopDirection.TURN_LEFT), "Turning left"),
    "d": KeyBinding(KeyAction.SET_MODE, Mode.teleop(TeleopDirection.TURN_RIGHT), "Turning right"),
    "q": KeyBinding(KeyAction.SET_MODE, Mode.teleop(TeleopDirection.STRAFE_LEFT), "Strafing left"),
    "e": KeyBinding(KeyAction.SET_MODE, Mode.teleop(TeleopDirection.STRAFE_RIGHT), "Strafing right"),
    "r": KeyBinding(KeyAction.SET_MODE, Mode.teleop(TeleopDirection.STAND_UP), "Standing up"),
    "f": KeyBinding(KeyAction.SET_MODE, Mode.teleop(TeleopDirection.STAND_DOWN), "Standing down"),
    " ": KeyBinding(KeyAction.SET_MODE, Mode.idle(), "Stopped"),
    "h": KeyBinding(KeyAction.HELP),
    ESC: KeyBinding(KeyAction.EXIT, feedback="Exiting..."),
}

HELP_TEXT = """
Go2 keyboard control
  w / s   forward / backward
  a / d   turn left / right
  q / e   strafe left / right
  r / f   stand up / stand down
  space   stop
  h       show this help
  ESC     exit
"""


def lookup(key: str) -> Optional[KeyBinding]:
    """Binding for a key token (letters are case-insensitive)"""
    return KEY_BINDINGS.get(key.lower() if len(key) == 1 else key)


class InputReader:
    """
    Polls an InputProvider and applies key bindings to the supervisor.
    """

    def __init__(self, provider: InputProvider, supervisor: Supervisor, echo: bool = True) -> None:
        """
        Initialize the reader.

        Args:
            provider: Non-blocking key source
            supervisor: Receives mode changes and the exit request
            echo: Print operator feedback for recognized keys
        """
        self.provider = provider
        self.supervisor = supervisor
        self.echo = echo
        self._events = 0

    def poll_once(self) -> Optional[KeyEvent]:
        """
        Read at most one key and apply it.

        Returns:
            The recognized event, or None if no key / unrecognized key
        """
        key = self.provider.poll_key()
        if key is None:
            return None

        binding = lookup(key)
        if binding is None:
            logger.debug(f"Ignoring key {key!r}")
            return None

        if binding.action is KeyAction.SET_MODE:
            self.supervisor.set_mode(binding.mode)
        elif binding.action is KeyAction.EXIT:
            logger.info("Exit requested from input")
            self.supervisor.stop()

        if self.echo:
            print(HELP_TEXT if binding.action is KeyAction.HELP else binding.feedback)

        self._events += 1
        return KeyEvent(key, binding)

    async def run(self, period: float = 0.05) -> None:
        """
        Poll until the supervisor stops.

        Args:
            period: Seconds between polls
        """
        await self.provider.start()
        if self.echo:
            print(HELP_TEXT)
        try:
            while self.supervisor.is_running:
                self.poll_once()
                await asyncio.sleep(period)
        finally:
            await self.provider.stop()

    @property
    def event_count(self) -> int:
        """Recognized keys handled so far"""
        return self._events
