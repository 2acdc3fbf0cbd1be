"""
Mock (test) input provider.

Provides scripted key presses for testing without a terminal or controller.
"""

import logging
from typing import List, Optional


logger = logging.getLogger(__name__)


class MockInput:
    """
    Mock input provider for testing.

    Returns the scripted keys one per poll, in order. A None entry in the
    script is a poll with no key pressed. Once the script is exhausted
    every poll returns None.
    """

    def __init__(self, keys: Optional[List[Optional[str]]] = None) -> None:
        """
        Initialize mock input.

        Args:
            keys: Key tokens to return in sequence
        """
        self._keys = list(keys or [])
        self._index = 0
        self._running = False

    async def start(self) -> None:
        """Start the input provider"""
        logger.info(f"[MOCK INPUT] Started - Script mode ({len(self._keys)} keys)")
        self._running = True
        self._index = 0

    async def stop(self) -> None:
        """Stop the input provider"""
        logger.info("[MOCK INPUT] Stopped")
        self._running = False

    def poll_key(self) -> Optional[str]:
        """Return next scripted key"""
        if not self._running or self._index >= len(self._keys):
            return None

        key = self._keys[self._index]
        self._index += 1
        return key

    @property
    def exhausted(self) -> bool:
        """True once every scripted key has been returned"""
        return self._index >= len(self._keys)

    def reset(self) -> None:
        """Reset to beginning of script"""
        self._index = 0

    def load_script(self, script_name: str) -> None:
        """
        Load a predefined test script.

        Args:
            script_name: Name of script to load from TestScripts
        """
        script_map = {
            "forward_stop": TestScripts.forward_stop(),
            "turn_in_place": TestScripts.turn_in_place(),
            "strafe": TestScripts.strafe(),
            "stand_cycle": TestScripts.stand_cycle(),
        }

        if script_name in script_map:
            self._keys = script_map[script_name]
            self._index = 0
            logger.info(f"Loaded script '{script_name}' with {len(self._keys)} keys")
        else:
            logger.warning(f"Unknown script '{script_name}'")


class TestScripts:
    """Pre-defined key scripts"""

    # Not a test class
    __test__ = False

    @staticmethod
    def forward_stop() -> List[Optional[str]]:
        """Drive forward for a few polls, then stop and exit"""
        return ["w", None, None, None, " ", None, "\x1b"]

    @staticmethod
    def turn_in_place() -> List[Optional[str]]:
        """Turn left, then right, then stop"""
        return ["a", None, None, "d", None, None, " ", "\x1b"]

    @staticmethod
    def strafe() -> List[Optional[str]]:
        """Strafe left and right"""
        return ["q", None, "e", None, " ", "\x1b"]

    @staticmethod
    def stand_cycle() -> List[Optional[str]]:
        """Stand down, stand back up, then exit"""
        return ["f", None, None, "r", None, None, " ", "\x1b"]
