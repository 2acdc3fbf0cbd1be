"""
Heading/Turn Controller - Angle arithmetic and point-turn control.

Two control laws live here:
- A proportional law, clamped, used as the heading bias while driving
  straight (compute_correction)
- A bang-bang law used for point-turns (TurnController): a fixed angular
  speed in the direction of the error until the heading is within
  tolerance
"""

import logging
import math
from enum import Enum
from typing import Optional

from .types import Command, PostureCommand, VelocityCommand


logger = logging.getLogger(__name__)

TWO_PI = 2.0 * math.pi


def normalize_angle(angle: float) -> float:
    """
    Wrap an angle into (-pi, pi].

    Args:
        angle: Any finite angle (radians)

    Returns:
        Equivalent angle in (-pi, pi]
    """
    wrapped = math.remainder(angle, TWO_PI)
    if wrapped <= -math.pi:
        wrapped += TWO_PI
    return wrapped


def heading_error(current_yaw: float, target_yaw: float) -> float:
    """Signed shortest rotation from current to target, in (-pi, pi]"""
    return normalize_angle(target_yaw - current_yaw)


def clamp(value: float, min_val: float, max_val: float) -> float:
    """Clamp value to range [min_val, max_val]"""
    return max(min_val, min(max_val, value))


def compute_correction(
    current_yaw: float,
    target_yaw: float,
    gain: float,
    max_magnitude: float,
) -> float:
    """
    Proportional heading correction.

    Args:
        current_yaw: Measured heading (radians)
        target_yaw: Desired heading (radians)
        gain: Proportional gain (rad/s per rad of error)
        max_magnitude: Clamp on the output (rad/s)

    Returns:
        Angular rate in [-max_magnitude, max_magnitude]
    """
    error = heading_error(current_yaw, target_yaw)
    return clamp(error * gain, -max_magnitude, max_magnitude)


def is_at_target(current_yaw: float, target_yaw: float, tolerance: float) -> bool:
    """
    Check whether the heading is inside the arrival window.

    The window is half-open, like the (-pi, pi] range the error lives in:
    an error of exactly -tolerance counts as arrived, +tolerance does not.
    For target 0 and tolerance 0.05 that is current_yaw in (-0.05, 0.05].

    Args:
        current_yaw: Measured heading (radians)
        target_yaw: Desired heading (radians)
        tolerance: Window half-width (radians)

    Returns:
        True if the turn is complete
    """
    error = heading_error(current_yaw, target_yaw)
    return -tolerance <= error < tolerance


class TurnPhase(Enum):
    """Turn segment states"""
    TURNING = "turning"
    ARRIVED = "arrived"


class TurnController:
    """
    Bang-bang point-turn controller for one Turn segment.

    Call begin() with the target heading, then step() once per tick.
    The tick that detects arrival returns a Stop; later ticks return None.
    """

    def __init__(self, turn_speed: float = 0.5, tolerance: float = 0.05) -> None:
        """
        Initialize the turn controller.

        Args:
            turn_speed: Angular speed while turning (rad/s)
            tolerance: Arrival window half-width (rad)
        """
        self.turn_speed = turn_speed
        self.tolerance = tolerance
        self.target_heading: float = 0.0
        self.phase = TurnPhase.ARRIVED

    def begin(self, target_heading: float) -> None:
        """Start turning towards target_heading"""
        self.target_heading = normalize_angle(target_heading)
        self.phase = TurnPhase.TURNING
        logger.info(f"Turn started: target={math.degrees(self.target_heading):+.1f} deg")

    @property
    def arrived(self) -> bool:
        return self.phase is TurnPhase.ARRIVED

    def step(self, current_yaw: float) -> Optional[Command]:
        """
        One control tick.

        Args:
            current_yaw: Measured heading (radians)

        Returns:
            Turn velocity while turning, Stop on the arrival tick,
            None once arrived
        """
        if self.phase is TurnPhase.ARRIVED:
            return None

        if is_at_target(current_yaw, self.target_heading, self.tolerance):
            self.phase = TurnPhase.ARRIVED
            logger.info(f"Turn complete: yaw={math.degrees(current_yaw):+.1f} deg")
            return PostureCommand.STOP

        error = heading_error(current_yaw, self.target_heading)
        direction = self.turn_speed if error > 0 else -self.turn_speed
        logger.debug(f"Turning: {math.degrees(error):+.1f} deg to go")
        return VelocityCommand(0.0, 0.0, direction)
