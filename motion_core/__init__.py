"""
go2-motion core - Closed-loop motion control for a legged robot.

This package contains the control logic:
- Types: Pose samples, commands, plan segments, modes, configs
- Feedback: Latest-sample slot shared with the transport thread
- Heading / Straight: Turn and straight-line controllers
- Sequencer: Runs Turn/Travel plans in order
- Mapper / Supervisor: Mode dispatch and the fixed-rate control tick
"""

from .errors import (
    ConfigurationError,
    InvalidPlanError,
    MotionError,
    NotReadyError,
)
from .feedback import FeedbackSampler, SharedCell
from .interfaces import CommandSink, InputProvider, PoseSource, Transport
from .mapper import Mapper
from .sequencer import ManeuverSequencer
from .supervisor import Supervisor
from .types import (
    ControllerConfig,
    MapperConfig,
    Mode,
    ModeKind,
    PoseSample,
    PostureCommand,
    SupervisorConfig,
    SupervisorState,
    TeleopDirection,
    Travel,
    Turn,
    VelocityCommand,
)

__all__ = [
    "ConfigurationError",
    "InvalidPlanError",
    "MotionError",
    "NotReadyError",
    "FeedbackSampler",
    "SharedCell",
    "CommandSink",
    "InputProvider",
    "PoseSource",
    "Transport",
    "Mapper",
    "ManeuverSequencer",
    "Supervisor",
    "ControllerConfig",
    "MapperConfig",
    "Mode",
    "ModeKind",
    "PoseSample",
    "PostureCommand",
    "SupervisorConfig",
    "SupervisorState",
    "TeleopDirection",
    "Travel",
    "Turn",
    "VelocityCommand",
]
