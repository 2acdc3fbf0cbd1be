"""
Supervisor - Fixed-rate control tick, mode dispatch and safety orchestration.

The Supervisor is the main control loop. It:
- Manages state transitions (disconnected -> starting -> active -> etc.)
- Holds the current mode, written by the input reader from another task
- Runs one control tick per period: mode -> sequencer -> mapper -> transport
- Ensures a stop goes out on failure and on shutdown

This is safety-critical code.
"""

import asyncio
import logging
import threading
import time
from typing import Any, Callable, Iterable, Optional

from .feedback import FeedbackSampler, SharedCell
from .interfaces import Transport
from .mapper import Mapper
from .realtime import RateKeeper
from .sequencer import ManeuverSequencer
from .types import (
    Command,
    Mode,
    ModeKind,
    PoseSample,
    PostureCommand,
    Segment,
    SequencerState,
    SupervisorConfig,
    SupervisorState,
)


logger = logging.getLogger(__name__)

# Postures that are sent once per entry into the mode rather than every tick
LATCHED_POSTURES = frozenset({PostureCommand.SIT, PostureCommand.RISE_SIT})


class Supervisor:
    """
    Main control loop and safety supervisor.

    Orchestrates all components and enforces safety rules through
    the state machine and the fail-closed mapper.
    """

    def __init__(
        self,
        transport: Transport,
        sampler: FeedbackSampler,
        sequencer: ManeuverSequencer,
        mapper: Mapper,
        config: SupervisorConfig,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """
        Initialize supervisor.

        Args:
            transport: Sends commands to the robot, delivers pose feedback
            sampler: Latest-sample slot fed by the transport
            sequencer: Runs autonomous plans
            mapper: Converts the current mode into a command
            config: Supervisor configuration
            clock: Monotonic time source for tick scheduling
        """
        self.transport = transport
        self.sampler = sampler
        self.sequencer = sequencer
        self.mapper = mapper
        self.config = config
        self.clock = clock

        self.state = SupervisorState.DISCONNECTED
        self._running = threading.Event()
        self._active = asyncio.Event()

        # Shared with the input reader
        self._mode: SharedCell[Mode] = SharedCell(Mode.idle())

        self._last_command: Optional[Command] = None
        self._latched: Optional[PostureCommand] = None
        self._tick_count = 0

        # State change callbacks
        self._state_callbacks: list[Callable[[SupervisorState, SupervisorState], Any]] = []

    def add_state_callback(self, callback: Callable[[SupervisorState, SupervisorState], Any]) -> None:
        """
        Register callback for state changes.

        Callback signature: callback(old_state, new_state)

        Args:
            callback: Function to call on state change
        """
        self._state_callbacks.append(callback)

    # Mode control (safe to call from any task or thread)

    @property
    def current_mode(self) -> Mode:
        return self._mode.get()

    def set_mode(self, mode: Mode) -> None:
        """
        Select which command source drives the robot.

        Leaving AUTONOMOUS cancels a running plan.

        Args:
            mode: New mode
        """
        previous = self._mode.swap(mode)
        if previous == mode:
            return

        logger.info(f"Mode: {previous} -> {mode}")
        if previous.kind is ModeKind.AUTONOMOUS and mode.kind is not ModeKind.AUTONOMOUS:
            if self.sequencer.is_running:
                self.sequencer.cancel()

    def start_plan(self, plan: Iterable[Segment], initial_heading: Optional[float] = None) -> None:
        """
        Start an autonomous plan and switch to AUTONOMOUS.

        Args:
            plan: Segments in execution order
            initial_heading: Heading held by a leading Travel segment

        Raises:
            InvalidPlanError: If the plan is empty or malformed (mode unchanged)
        """
        self.sequencer.start(plan, initial_heading=initial_heading)
        self.set_mode(Mode.autonomous())

    def cancel_plan(self) -> None:
        """Cancel the running plan; one terminal stop follows on the next tick"""
        self.sequencer.cancel()

    # Lifecycle

    async def run(self, interface: str) -> None:
        """
        Main control loop - runs until stopped.

        This is the heart of the system. Call this from an async context.

        Args:
            interface: Network interface passed to the transport
        """
        logger.info("Supervisor starting")
        self._running.set()

        try:
            if not await self._connect(interface):
                return

            await self._startup()
            if not self._running.is_set():
                return

            self._transition_to(SupervisorState.ACTIVE)
            rate = RateKeeper(self.config.control_period, self.clock, self.config.lag_warning)

            # Main loop
            while self._running.is_set():
                try:
                    await self.tick()
                except Exception as e:
                    logger.error(f"Error in control tick: {e}", exc_info=True)
                    await self._enter_failsafe(f"Tick error: {e}")
                await rate.keep_time()

        finally:
            logger.info("Supervisor stopping")
            await self._cleanup()

    def stop(self) -> None:
        """Stop the supervisor (safe to call from any thread)"""
        self._running.clear()

    @property
    def is_running(self) -> bool:
        return self._running.is_set()

    async def wait_active(self, timeout: Optional[float] = None) -> None:
        """Wait until the startup routine has finished and ticks are running"""
        await asyncio.wait_for(self._active.wait(), timeout)

    async def wait_plan_finished(self, poll_interval: float = 0.05) -> bool:
        """
        Wait for the running plan to complete or be cancelled.

        Returns:
            True only if every segment completed. False if the plan was
            cancelled (operator, mode change or FAILSAFE) or the
            supervisor stopped first.
        """
        while self.is_running:
            if self.sequencer.is_finished:
                break
            await asyncio.sleep(poll_interval)
        return self.sequencer.succeeded

    # Control tick

    async def tick(self) -> Command:
        """
        Single control tick.

        Reads the mode once, consults the sequencer when autonomous, maps
        to exactly one command and sends it before returning.

        Returns:
            The command selected for this tick
        """
        mode = self._mode.get()

        plan_command: Optional[Command] = None
        if mode.kind is ModeKind.AUTONOMOUS:
            plan_command = self.sequencer.tick()
        elif self.sequencer.state is SequencerState.CANCELLED:
            # Plan was cancelled by a mode change; drain its terminal stop
            self.sequencer.tick()

        if self.state is SupervisorState.FAILSAFE:
            command: Command = PostureCommand.STOP
        else:
            command = self.mapper.map(mode, plan_command)

        await self._send(command)
        self._tick_count += 1

        if mode.kind is ModeKind.AUTONOMOUS and self.sequencer.is_finished:
            if self._mode.compare_and_set(mode, Mode.idle()):
                logger.info("Plan finished, mode -> idle")

        return command

    async def _send(self, command: Command) -> None:
        """Forward one command to the transport"""
        if isinstance(command, PostureCommand):
            if command in LATCHED_POSTURES:
                if self._latched is command:
                    return
                self._latched = command
            else:
                self._latched = None
            await self.transport.send_posture(command)
        else:
            self._latched = None
            await self.transport.send_velocity(command)

        if command != self._last_command:
            logger.debug(f"Command: {command}")
        self._last_command = command

    # State handlers

    async def _connect(self, interface: str) -> bool:
        """Subscribe the sampler and connect the transport"""
        self.transport.subscribe_pose(self.sampler.update)

        logger.info(f"Connecting via {interface}")
        success = await self.transport.connect(interface)
        if not success:
            logger.error(f"Connection via {interface} failed")
            return False

        logger.info("Connected successfully")
        return True

    async def _startup(self) -> None:
        """
        Bring the robot into a standing, stationary posture.

        Repeats StandUp then BalanceStand, then stops. Aborts early if the
        supervisor is stopped meanwhile.
        """
        self._transition_to(SupervisorState.STARTING)

        for posture in (PostureCommand.STAND_UP, PostureCommand.BALANCE_STAND):
            if self.config.startup_repeats > 0:
                logger.info(f"Startup: {posture.value} x{self.config.startup_repeats}")
            for _ in range(self.config.startup_repeats):
                if not self._running.is_set():
                    return
                await self.transport.send_posture(posture)
                await asyncio.sleep(self.config.startup_interval)

        await self.transport.send_posture(PostureCommand.STOP)
        logger.info("Startup complete, ready to move")

    async def _enter_failsafe(self, reason: str) -> None:
        """Enter FAILSAFE state"""
        logger.critical(f"Entering FAILSAFE: {reason}")
        self.sequencer.cancel()
        self._mode.set(Mode.idle())
        self._transition_to(SupervisorState.FAILSAFE)
        try:
            await self.transport.send_posture(PostureCommand.STOP)
        except Exception as e:
            logger.error(f"Failed to send failsafe stop: {e}", exc_info=True)

    def _transition_to(self, new_state: SupervisorState) -> None:
        """
        Transition to new state.

        Args:
            new_state: State to transition to
        """
        if new_state == self.state:
            return

        old_state = self.state
        logger.info(f"State transition: {old_state.value} -> {new_state.value}")
        self.state = new_state

        if new_state is SupervisorState.ACTIVE:
            self._active.set()

        # Notify callbacks
        for callback in self._state_callbacks:
            try:
                callback(old_state, new_state)
            except Exception as e:
                logger.error(f"Error in state callback: {e}", exc_info=True)

    async def _cleanup(self) -> None:
        """Terminal stop and disconnect on shutdown"""
        self._running.clear()
        self.sequencer.cancel()

        try:
            if self.transport.is_connected:
                await self.transport.send_posture(PostureCommand.STOP)
                await self.transport.disconnect()
        except Exception as e:
            logger.error(f"Error during cleanup: {e}", exc_info=True)

        self._transition_to(SupervisorState.STOPPED)

    # Public properties for UI/monitoring

    @property
    def last_command(self) -> Optional[Command]:
        return self._last_command

    @property
    def tick_count(self) -> int:
        return self._tick_count

    @property
    def latest_pose(self) -> Optional[PoseSample]:
        """Latest pose sample, or None before the first one"""
        if not self.sampler.is_ready:
            return None
        return self.sampler.latest()
