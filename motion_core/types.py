"""
Core data types for the go2-motion control system.

All the data structures that flow through the system, fully typed.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple, Union
import math
import time


class PostureCommand(Enum):
    """Discrete (non-velocity) actuation commands"""
    STAND_UP = "stand_up"
    STAND_DOWN = "stand_down"
    BALANCE_STAND = "balance_stand"
    DAMP = "damp"
    RECOVERY_STAND = "recovery_stand"
    SIT = "sit"
    RISE_SIT = "rise_sit"
    STOP = "stop"


class TeleopDirection(Enum):
    """Directions selectable by an operator"""
    FORWARD = "forward"
    BACKWARD = "backward"
    TURN_LEFT = "turn_left"
    TURN_RIGHT = "turn_right"
    STRAFE_LEFT = "strafe_left"
    STRAFE_RIGHT = "strafe_right"
    STAND_UP = "stand_up"
    STAND_DOWN = "stand_down"


class ModeKind(Enum):
    """Which input source the dispatcher listens to"""
    IDLE = "idle"              # Stop every tick
    AUTONOMOUS = "autonomous"  # Forward the maneuver sequencer's output
    TELEOP = "teleop"          # Operator-selected direction
    POSTURE = "posture"        # Hold a single posture command


class SequencerState(Enum):
    """Maneuver sequencer state machine states"""
    IDLE = "idle"
    RUNNING_TURN = "running_turn"
    RUNNING_TRAVEL = "running_travel"
    CANCELLED = "cancelled"
    COMPLETE = "complete"


class SupervisorState(Enum):
    """Supervisor state machine states"""
    DISCONNECTED = "disconnected"  # Transport not connected
    STARTING = "starting"          # Running the startup posture routine
    ACTIVE = "active"              # Control ticks running
    FAILSAFE = "failsafe"          # Error seen, sending stop every tick
    STOPPED = "stopped"            # Loop exited, terminal stop sent


@dataclass(frozen=True)
class PoseSample:
    """
    One pose/orientation reading from the robot.

    Frozen so that every reader holds its own immutable value; the
    feedback sampler replaces the whole object on each update.
    """
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0
    yaw: float = 0.0                  # radians, (-pi, pi]
    timestamp: float = field(default_factory=time.monotonic)

    @property
    def position(self) -> Tuple[float, float, float]:
        """Position estimate (only x and y are meaningful)"""
        return (self.x, self.y, self.z)


@dataclass(frozen=True)
class VelocityCommand:
    """
    Continuous velocity command for the robot body.

    forward and lateral in m/s, angular in rad/s (positive = counter-clockwise).
    """
    forward: float = 0.0
    lateral: float = 0.0
    angular: float = 0.0

    def __post_init__(self) -> None:
        """Validate values are finite"""
        assert math.isfinite(self.forward), f"forward not finite: {self.forward}"
        assert math.isfinite(self.lateral), f"lateral not finite: {self.lateral}"
        assert math.isfinite(self.angular), f"angular not finite: {self.angular}"

    @property
    def is_zero(self) -> bool:
        """Check if this command holds the robot still"""
        return self.forward == 0.0 and self.lateral == 0.0 and self.angular == 0.0

    @classmethod
    def zero(cls) -> "VelocityCommand":
        """Create a neutral command"""
        return cls(0.0, 0.0, 0.0)


# Anything the command sink accepts in one tick
Command = Union[VelocityCommand, PostureCommand]


def is_stop(command: Optional[Command]) -> bool:
    """True for the Stop posture or a neutral velocity command"""
    if isinstance(command, PostureCommand):
        return command is PostureCommand.STOP
    if isinstance(command, VelocityCommand):
        return command.is_zero
    return False


@dataclass(frozen=True)
class Turn:
    """Point-turn to an absolute heading (radians)"""
    target_heading: float


@dataclass(frozen=True)
class Travel:
    """Straight-line travel for a distance (meters)"""
    distance: float


Segment = Union[Turn, Travel]


@dataclass(frozen=True)
class Mode:
    """
    Dispatcher selector.

    Use the constructors rather than building instances by hand:
    Mode.idle(), Mode.autonomous(), Mode.teleop(direction), Mode.posture(kind).
    """
    kind: ModeKind
    direction: Optional[TeleopDirection] = None
    posture_kind: Optional[PostureCommand] = None

    @classmethod
    def idle(cls) -> "Mode":
        return cls(ModeKind.IDLE)

    @classmethod
    def autonomous(cls) -> "Mode":
        return cls(ModeKind.AUTONOMOUS)

    @classmethod
    def teleop(cls, direction: TeleopDirection) -> "Mode":
        return cls(ModeKind.TELEOP, direction=direction)

    @classmethod
    def posture(cls, kind: PostureCommand) -> "Mode":
        return cls(ModeKind.POSTURE, posture_kind=kind)

    def __str__(self) -> str:
        if self.kind is ModeKind.TELEOP and self.direction is not None:
            return f"teleop:{self.direction.value}"
        if self.kind is ModeKind.POSTURE and self.posture_kind is not None:
            return f"posture:{self.posture_kind.value}"
        return self.kind.value


@dataclass
class ControllerConfig:
    """Configuration for the turn and straight-line controllers"""
    turn_speed: float = 0.5                # Bang-bang turn rate (rad/s)
    turn_tolerance: float = 0.05           # Arrival window (rad)
    travel_speed: float = 0.5              # Nominal forward speed (m/s)
    heading_gain: float = 0.5              # Proportional heading bias gain
    heading_correction_limit: float = 0.3  # Heading bias clamp (rad/s)
    distance_source: str = "elapsed"       # "elapsed" (speed x time) or "pose"
    segment_pause: float = 1.0             # Settle time after each segment (s)


@dataclass
class MapperConfig:
    """Configuration for the Mapper teleop table"""
    forward_speed: float = 0.3     # m/s
    backward_speed: float = 0.3    # m/s
    turn_rate: float = 0.4         # rad/s
    lateral_speed: float = 0.4     # m/s


@dataclass
class SupervisorConfig:
    """Configuration for the Supervisor"""
    control_period: float = 0.01       # Control tick period (100Hz)
    input_period: float = 0.05         # Input reader polling period (20Hz)
    feedback_timeout: float = 3.0      # Max wait for the first pose sample
    startup_repeats: int = 30          # StandUp / BalanceStand repetitions
    startup_interval: float = 0.1      # Delay between startup posture commands
    lag_warning: Optional[float] = 0.005  # Warn when a tick overruns by this much
