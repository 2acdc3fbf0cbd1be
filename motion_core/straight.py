"""
Straight-Line Controller - Forward travel with heading hold.

Drives at a fixed nominal speed and biases the angular rate with the
clamped proportional heading law. Distance is estimated open loop as
speed x elapsed time unless a measured displacement is supplied.
"""

import logging
from typing import Optional, Tuple

from .heading import compute_correction
from .types import VelocityCommand


logger = logging.getLogger(__name__)


def estimate_distance(nominal_speed: float, elapsed: float) -> float:
    """Open-loop odometry proxy: speed x elapsed time"""
    return nominal_speed * max(0.0, elapsed)


class StraightLineController:
    """
    Heading-hold forward controller for Travel segments.

    Stateless apart from its gains, so one instance serves every segment.
    """

    def __init__(self, correction_gain: float = 0.5, correction_limit: float = 0.3) -> None:
        """
        Initialize the straight-line controller.

        Args:
            correction_gain: Proportional heading gain (rad/s per rad)
            correction_limit: Clamp on the heading bias (rad/s)
        """
        self.correction_gain = correction_gain
        self.correction_limit = correction_limit

    def step(
        self,
        elapsed: float,
        nominal_speed: float,
        current_yaw: float,
        target_yaw: float,
        measured_distance: Optional[float] = None,
    ) -> Tuple[VelocityCommand, float]:
        """
        Compute one tick of straight-line travel.

        Args:
            elapsed: Seconds since the segment started
            nominal_speed: Forward speed (m/s)
            current_yaw: Measured heading (radians)
            target_yaw: Heading to hold (radians)
            measured_distance: Displacement from pose feedback; when given
                it replaces the time-based estimate

        Returns:
            (command, distance travelled so far)
        """
        correction = compute_correction(
            current_yaw, target_yaw, self.correction_gain, self.correction_limit
        )

        if measured_distance is None:
            distance = estimate_distance(nominal_speed, elapsed)
        else:
            distance = measured_distance

        logger.debug(f"Travel: {distance:.2f} m, heading bias {correction:+.3f} rad/s")
        return VelocityCommand(nominal_speed, 0.0, correction), distance
