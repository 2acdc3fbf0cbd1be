"""
Unitree Transport - Go2 sport-mode client over DDS.

Uses unitree_sdk2py: pose feedback from the "rt/sportmodestate" topic,
commands through the SportClient RPC interface. SDK calls are blocking,
so they run in a worker thread to keep the control loop responsive.
"""

import asyncio
import logging
import time
from typing import Dict, List, Optional

try:
    from unitree_sdk2py.core.channel import ChannelFactoryInitialize, ChannelSubscriber
    from unitree_sdk2py.go2.sport.sport_client import SportClient
    from unitree_sdk2py.idl.unitree_go.msg.dds_ import SportModeState_
    HAS_UNITREE_SDK = True
except ImportError:
    HAS_UNITREE_SDK = False

from motion_core.errors import ConfigurationError
from motion_core.heading import normalize_angle
from motion_core.interfaces import PoseCallback
from motion_core.types import PoseSample, PostureCommand, VelocityCommand


logger = logging.getLogger(__name__)

TOPIC_HIGHSTATE = "rt/sportmodestate"

# SportClient method name per posture
POSTURE_METHODS: Dict[PostureCommand, str] = {
    PostureCommand.STAND_UP: "StandUp",
    PostureCommand.STAND_DOWN: "StandDown",
    PostureCommand.BALANCE_STAND: "BalanceStand",
    PostureCommand.DAMP: "Damp",
    PostureCommand.RECOVERY_STAND: "RecoveryStand",
    PostureCommand.SIT: "Sit",
    PostureCommand.RISE_SIT: "RiseSit",
    PostureCommand.STOP: "StopMove",
}


def pose_from_state(message) -> PoseSample:
    """
    Convert a SportModeState_ message into a PoseSample.

    Args:
        message: Object with position[3] and imu_state.rpy[3]

    Returns:
        PoseSample stamped with the local monotonic clock
    """
    position = message.position
    return PoseSample(
        x=float(position[0]),
        y=float(position[1]),
        z=float(position[2]),
        yaw=normalize_angle(float(message.imu_state.rpy[2])),
        timestamp=time.monotonic(),
    )


class UnitreeTransport:
    """
    Transport adapter for the Unitree Go2 sport service.
    """

    def __init__(self, rpc_timeout: float = 10.0, domain_id: int = 0) -> None:
        """
        Initialize Unitree transport.

        Args:
            rpc_timeout: SportClient request timeout (seconds)
            domain_id: DDS domain

        Raises:
            ConfigurationError: If unitree_sdk2py is not installed
        """
        if not HAS_UNITREE_SDK:
            raise ConfigurationError(
                "unitree_sdk2py not installed. Install with: pip install go2-motion[unitree]"
            )

        self._rpc_timeout = rpc_timeout
        self._domain_id = domain_id
        self._subscribers: List[PoseCallback] = []
        self._client: Optional["SportClient"] = None
        self._state_sub: Optional["ChannelSubscriber"] = None
        self._connected = False

    def subscribe_pose(self, callback: PoseCallback) -> None:
        """Register a pose subscriber"""
        self._subscribers.append(callback)

    async def connect(self, interface: str) -> bool:
        """
        Initialize DDS on the interface and open the sport client.

        Args:
            interface: Network interface wired to the robot

        Returns:
            True if the client initialized
        """
        try:
            ChannelFactoryInitialize(self._domain_id, interface)

            self._state_sub = ChannelSubscriber(TOPIC_HIGHSTATE, SportModeState_)
            self._state_sub.Init(self._on_state, 10)

            self._client = SportClient()
            self._client.SetTimeout(self._rpc_timeout)
            await asyncio.to_thread(self._client.Init)
        except Exception as e:
            logger.error(f"Unitree connection failed on {interface}: {e}", exc_info=True)
            return False

        self._connected = True
        return True

    async def disconnect(self) -> None:
        """Stop motion and close the state subscription"""
        if self._client is not None and self._connected:
            await self._call("StopMove")
        if self._state_sub is not None:
            self._state_sub.Close()
            self._state_sub = None
        self._connected = False

    async def send_velocity(self, command: VelocityCommand) -> None:
        """SportClient.Move(vx, vy, vyaw)"""
        await self._call("Move", command.forward, command.lateral, command.angular)

    async def send_posture(self, posture: PostureCommand) -> None:
        """Invoke the SportClient method matching the posture"""
        await self._call(POSTURE_METHODS[posture])

    async def _call(self, method: str, *args: float) -> None:
        if self._client is None:
            logger.warning(f"Cannot call {method} - not connected")
            return
        await asyncio.to_thread(getattr(self._client, method), *args)

    def _on_state(self, message) -> None:
        """DDS callback, runs on the SDK's reader thread"""
        sample = pose_from_state(message)
        for callback in self._subscribers:
            callback(sample)

    @property
    def is_connected(self) -> bool:
        """Check connection status"""
        return self._connected
