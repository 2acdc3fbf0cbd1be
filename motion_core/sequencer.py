"""
Maneuver Sequencer - Runs a plan of Turn/Travel segments in order.

Each tick() is one control tick: read the latest pose, delegate to the
active segment's controller, return the command to forward. Waiting for
a tolerance, a distance or the settle pause between segments is done by
re-evaluating every tick, so the sequencer stays responsive to cancel()
between ticks.
"""

import logging
import math
import threading
import time
from collections import deque
from typing import Callable, Deque, Iterable, List, Optional, Tuple

from .errors import InvalidPlanError, NotReadyError
from .feedback import FeedbackSampler
from .heading import TurnController, normalize_angle
from .straight import StraightLineController
from .types import (
    Command,
    ControllerConfig,
    PoseSample,
    PostureCommand,
    Segment,
    SequencerState,
    Travel,
    Turn,
    VelocityCommand,
)


logger = logging.getLogger(__name__)

DISTANCE_SOURCES = ("elapsed", "pose")


def validate_plan(plan: Iterable[Segment]) -> List[Segment]:
    """
    Check a plan before it runs.

    Args:
        plan: Segments in execution order

    Returns:
        The segments as a list

    Raises:
        InvalidPlanError: If the plan is empty or a segment is malformed
    """
    segments = list(plan)
    if not segments:
        raise InvalidPlanError("Plan is empty")

    for index, segment in enumerate(segments):
        if isinstance(segment, Turn):
            if not math.isfinite(segment.target_heading):
                raise InvalidPlanError(f"Segment {index}: turn heading is not finite")
        elif isinstance(segment, Travel):
            if not math.isfinite(segment.distance) or segment.distance <= 0.0:
                raise InvalidPlanError(
                    f"Segment {index}: travel distance must be positive, got {segment.distance}"
                )
        else:
            raise InvalidPlanError(f"Segment {index}: unknown segment {segment!r}")

    return segments


class ManeuverSequencer:
    """
    Composes the turn and straight-line controllers into a plan runner.

    State machine:
        IDLE -> RUNNING_TURN | RUNNING_TRAVEL    on start()
        RUNNING_* -> RUNNING_* | COMPLETE        as segments finish
        RUNNING_* -> CANCELLED                   on cancel()
    COMPLETE and CANCELLED are terminal until the next start().

    Between segments the sequencer holds a zero velocity for
    config.segment_pause seconds so the robot settles before the next
    maneuver. start(), cancel() and tick() may be called from different
    threads.
    """

    def __init__(
        self,
        sampler: FeedbackSampler,
        config: Optional[ControllerConfig] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """
        Initialize the sequencer.

        Args:
            sampler: Source of the latest pose sample
            config: Controller gains and limits
            clock: Monotonic time source (injectable for tests)
        """
        self.config = config or ControllerConfig()
        if self.config.distance_source not in DISTANCE_SOURCES:
            raise ValueError(
                f"distance_source must be one of {DISTANCE_SOURCES}, "
                f"got {self.config.distance_source!r}"
            )
        if self.config.segment_pause < 0.0:
            raise ValueError(
                f"segment_pause must be >= 0, got {self.config.segment_pause}"
            )

        self.sampler = sampler
        self.clock = clock

        self.turn = TurnController(self.config.turn_speed, self.config.turn_tolerance)
        self.straight = StraightLineController(
            self.config.heading_gain, self.config.heading_correction_limit
        )

        self.state = SequencerState.IDLE
        self._lock = threading.Lock()
        self._plan: Deque[Segment] = deque()
        self._completed = 0
        self._terminal_stop_pending = False
        self._pause_until: Optional[float] = None

        # Per-segment runtime data
        self._segment_active = False
        self._heading_target: Optional[float] = None
        self._travel_start_time: float = 0.0
        self._travel_start_position: Tuple[float, float] = (0.0, 0.0)

    def start(self, plan: Iterable[Segment], initial_heading: Optional[float] = None) -> None:
        """
        Begin executing a plan.

        Args:
            plan: Segments in execution order
            initial_heading: Heading held by a leading Travel segment.
                Defaults to the yaw observed when that segment starts.

        Raises:
            InvalidPlanError: If the plan is empty or malformed
            RuntimeError: If a plan is already running
        """
        segments = validate_plan(plan)

        with self._lock:
            if self.is_running:
                raise RuntimeError("A plan is already running, cancel it first")

            self._plan = deque(segments)
            self._completed = 0
            self._terminal_stop_pending = False
            self._pause_until = None
            self._segment_active = False
            self._heading_target = (
                normalize_angle(initial_heading) if initial_heading is not None else None
            )
            self._update_running_state()
        logger.info(f"Plan started: {len(segments)} segment(s)")

    def cancel(self) -> None:
        """
        Abort the running plan.

        The next tick returns a single Stop, every tick after returns None.
        """
        with self._lock:
            if not self.is_running:
                return
            logger.info(f"Plan cancelled at segment {self._completed + 1}")
            self._plan.clear()
            self._segment_active = False
            self._pause_until = None
            self._terminal_stop_pending = True
            self.state = SequencerState.CANCELLED

    def tick(self) -> Optional[Command]:
        """
        Run one control tick.

        Returns:
            The command to forward, or None when no plan is running
        """
        with self._lock:
            return self._tick()

    def _tick(self) -> Optional[Command]:
        if self.state is SequencerState.CANCELLED:
            if self._terminal_stop_pending:
                self._terminal_stop_pending = False
                return PostureCommand.STOP
            return None

        if not self.is_running:
            return None

        if self._pause_until is not None:
            if self.clock() < self._pause_until:
                return VelocityCommand.zero()
            self._pause_until = None

        try:
            sample = self.sampler.latest()
        except NotReadyError:
            logger.debug("Waiting for first pose sample")
            return VelocityCommand.zero()

        segment = self._plan[0]
        if isinstance(segment, Turn):
            return self._tick_turn(segment, sample)
        return self._tick_travel(segment, sample)

    def _tick_turn(self, segment: Turn, sample: PoseSample) -> Optional[Command]:
        if not self._segment_active:
            self.turn.begin(segment.target_heading)
            self._segment_active = True

        command = self.turn.step(sample.yaw)
        if self.turn.arrived:
            self._heading_target = self.turn.target_heading
            self._advance()
        return command

    def _tick_travel(self, segment: Travel, sample: PoseSample) -> Command:
        now = self.clock()
        if not self._segment_active:
            self._travel_start_time = now
            self._travel_start_position = (sample.x, sample.y)
            if self._heading_target is None:
                self._heading_target = normalize_angle(sample.yaw)
            self._segment_active = True
            logger.info(f"Travel started: {segment.distance:.2f} m")

        measured = None
        if self.config.distance_source == "pose":
            x0, y0 = self._travel_start_position
            measured = math.hypot(sample.x - x0, sample.y - y0)

        command, distance = self.straight.step(
            now - self._travel_start_time,
            self.config.travel_speed,
            sample.yaw,
            self._heading_target,
            measured_distance=measured,
        )

        if distance >= segment.distance:
            logger.info(f"Travel complete: {distance:.2f} m")
            self._advance()
            return PostureCommand.STOP
        return command

    def _advance(self) -> None:
        """Discard the finished segment and move to the next one"""
        self._plan.popleft()
        self._completed += 1
        self._segment_active = False
        self._update_running_state()
        if self.state is SequencerState.COMPLETE:
            logger.info(f"Plan complete: {self._completed} segment(s)")
        elif self.config.segment_pause > 0.0:
            self._pause_until = self.clock() + self.config.segment_pause

    def _update_running_state(self) -> None:
        if not self._plan:
            self.state = SequencerState.COMPLETE
        elif isinstance(self._plan[0], Turn):
            self.state = SequencerState.RUNNING_TURN
        else:
            self.state = SequencerState.RUNNING_TRAVEL

    @property
    def is_running(self) -> bool:
        return self.state in (SequencerState.RUNNING_TURN, SequencerState.RUNNING_TRAVEL)

    @property
    def is_finished(self) -> bool:
        """True once the plan has completed or been cancelled and the terminal stop went out"""
        if self.state is SequencerState.COMPLETE:
            return True
        return self.state is SequencerState.CANCELLED and not self._terminal_stop_pending

    @property
    def succeeded(self) -> bool:
        """True only if every segment ran to completion"""
        return self.state is SequencerState.COMPLETE

    @property
    def is_pausing(self) -> bool:
        return self.is_running and self._pause_until is not None

    @property
    def remaining(self) -> int:
        """Segments not yet completed"""
        return len(self._plan)

    @property
    def completed(self) -> int:
        """Segments completed since start()"""
        return self._completed

    @property
    def heading_target(self) -> Optional[float]:
        return self._heading_target
