"""
Simulated Transport - For testing without hardware.

Integrates the commanded body velocity into a planar pose and publishes
it to subscribers, the way the robot's state topic would.
"""

import logging
import math
import time
from collections import deque
from typing import Callable, Deque, List, Optional

from motion_core.heading import normalize_angle
from motion_core.interfaces import PoseCallback
from motion_core.types import Command, PoseSample, PostureCommand, VelocityCommand


logger = logging.getLogger(__name__)

HISTORY_SIZE = 1000  # Commands kept for inspection


class SimTransport:
    """
    Kinematic robot simulator.

    Records the most recent commands and publishes a new pose after each
    one. Time advances with the injected clock, or explicitly via step().
    """

    def __init__(
        self,
        initial_pose: Optional[PoseSample] = None,
        yaw_drift: float = 0.0,
        publish_on_connect: bool = True,
        clock: Callable[[], float] = time.monotonic,
        history_size: int = HISTORY_SIZE,
    ) -> None:
        """
        Initialize simulated transport.

        Args:
            initial_pose: Starting pose (default: origin, heading 0)
            yaw_drift: Constant heading disturbance (rad/s)
            publish_on_connect: If False, no pose is published until the first command
            clock: Time source used for integration
            history_size: Number of recent commands kept for inspection
        """
        self._connected = False
        self._subscribers: List[PoseCallback] = []
        self._clock = clock
        self._yaw_drift = yaw_drift
        self._publish_on_connect = publish_on_connect

        start = initial_pose or PoseSample()
        self._x = start.x
        self._y = start.y
        self._z = start.z
        self._yaw = normalize_angle(start.yaw)

        self._velocity = VelocityCommand.zero()
        self._posture: Optional[PostureCommand] = None
        self._last_time: Optional[float] = None

        self._commands: Deque[Command] = deque(maxlen=history_size)
        self._command_count = 0
        self._interface: Optional[str] = None

    def subscribe_pose(self, callback: PoseCallback) -> None:
        """Register a pose subscriber"""
        self._subscribers.append(callback)

    async def connect(self, interface: str) -> bool:
        """Simulate connection"""
        logger.info(f"[SIM] Connecting via {interface}")
        self._interface = interface
        self._connected = True
        self._last_time = self._clock()
        if self._publish_on_connect:
            self._publish()
        return True

    async def disconnect(self) -> None:
        """Simulate disconnection"""
        logger.info("[SIM] Disconnecting")
        self._connected = False
        self._velocity = VelocityCommand.zero()

    async def send_velocity(self, command: VelocityCommand) -> None:
        """Integrate up to now, then apply the new velocity"""
        if not self._connected:
            logger.warning("[SIM] Cannot send velocity - not connected")
            return

        self._integrate()
        self._velocity = command
        self._commands.append(command)
        self._command_count += 1
        logger.debug(
            f"[SIM] Move vx={command.forward:+.2f} vy={command.lateral:+.2f} "
            f"wz={command.angular:+.2f}"
        )
        self._publish()

    async def send_posture(self, posture: PostureCommand) -> None:
        """Integrate up to now; every posture command halts body motion"""
        if not self._connected:
            logger.warning("[SIM] Cannot send posture - not connected")
            return

        self._integrate()
        self._velocity = VelocityCommand.zero()
        self._posture = posture
        self._commands.append(posture)
        self._command_count += 1
        logger.debug(f"[SIM] Posture {posture.value}")
        self._publish()

    def step(self, dt: float) -> PoseSample:
        """
        Advance the simulation by dt seconds and publish.

        Returns:
            The published pose
        """
        self._advance(dt)
        return self._publish()

    def _integrate(self) -> None:
        now = self._clock()
        if self._last_time is not None:
            self._advance(max(0.0, now - self._last_time))
        self._last_time = now

    def _advance(self, dt: float) -> None:
        v = self._velocity
        cos_yaw = math.cos(self._yaw)
        sin_yaw = math.sin(self._yaw)
        self._x += (v.forward * cos_yaw - v.lateral * sin_yaw) * dt
        self._y += (v.forward * sin_yaw + v.lateral * cos_yaw) * dt
        self._yaw = normalize_angle(self._yaw + (v.angular + self._yaw_drift) * dt)

    def _publish(self) -> PoseSample:
        sample = self.pose
        for callback in self._subscribers:
            callback(sample)
        return sample

    @property
    def is_connected(self) -> bool:
        """Check connection status"""
        return self._connected

    @property
    def pose(self) -> PoseSample:
        """Current simulated pose"""
        return PoseSample(self._x, self._y, self._z, self._yaw, timestamp=self._clock())

    @property
    def posture(self) -> Optional[PostureCommand]:
        """Last posture command received"""
        return self._posture

    @property
    def commands(self) -> List[Command]:
        """Recent commands received, oldest first (for testing)"""
        return list(self._commands)

    @property
    def last_command(self) -> Optional[Command]:
        """Get last command sent (for testing)"""
        return self._commands[-1] if self._commands else None

    @property
    def command_count(self) -> int:
        """Get total commands sent (for testing)"""
        return self._command_count


__all__ = ["SimTransport"]
