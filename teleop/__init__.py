"""Operator input: key bindings, reader loop and input providers"""

from teleop.gamepad_input import GamepadInput
from teleop.mock_input import MockInput, TestScripts
from teleop.reader import KEY_BINDINGS, InputReader, KeyEvent

try:
    from teleop.keyboard_input import KeyboardInput
    __all__ = ["InputReader", "KeyEvent", "KEY_BINDINGS", "MockInput", "TestScripts",
               "GamepadInput", "KeyboardInput"]
except ImportError:
    # termios not available (Windows)
    __all__ = ["InputReader", "KeyEvent", "KEY_BINDINGS", "MockInput", "TestScripts",
               "GamepadInput"]
