"""
Keyboard Input Provider

Reads single keystrokes from the controlling terminal without blocking.
The terminal is switched to cbreak mode on start and restored on stop.
"""

import logging
import os
import select
import sys
import termios
import tty
from typing import Any, List, Optional


logger = logging.getLogger(__name__)

ESC = "\x1b"


class KeyboardInput:
    """
    Raw terminal keyboard provider.

    poll_key() returns at most one key per call and never waits.
    """

    def __init__(self, stream=None) -> None:
        """
        Initialize keyboard input.

        Args:
            stream: File object to read from (default: sys.stdin)
        """
        self._stream = stream or sys.stdin
        self._fd: Optional[int] = None
        self._saved_attrs: Optional[List[Any]] = None
        self._running = False

    async def start(self) -> None:
        """Put the terminal into cbreak mode"""
        if self._running:
            return

        if not self._stream.isatty():
            raise RuntimeError("Keyboard input needs an interactive terminal (stdin is not a TTY)")

        self._fd = self._stream.fileno()
        self._saved_attrs = termios.tcgetattr(self._fd)
        tty.setcbreak(self._fd)
        self._running = True
        logger.info("Keyboard input started")

    async def stop(self) -> None:
        """Restore the terminal settings"""
        if self._fd is not None and self._saved_attrs is not None:
            termios.tcsetattr(self._fd, termios.TCSADRAIN, self._saved_attrs)
            logger.info("Keyboard input stopped, terminal restored")
        self._saved_attrs = None
        self._fd = None
        self._running = False

    def poll_key(self) -> Optional[str]:
        """Return one pending key, or None"""
        if not self._running or self._fd is None:
            return None

        ready, _, _ = select.select([self._fd], [], [], 0.0)
        if not ready:
            return None

        data = os.read(self._fd, 1)
        if not data:
            return None
        return data.decode("utf-8", errors="ignore") or None
