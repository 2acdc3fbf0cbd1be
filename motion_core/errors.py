"""
Error types raised by the motion core.

Transport failures are deliberately absent: the command sink and the pose
source are treated as always available, integrations wrap them with their
own failure policy.
"""


class MotionError(Exception):
    """Base class for all motion core errors"""


class ConfigurationError(MotionError, ValueError):
    """Missing or invalid startup configuration. Fatal before any tick runs."""


class NotReadyError(MotionError):
    """No pose sample has arrived yet. Recovered by retrying next tick."""


class InvalidPlanError(MotionError, ValueError):
    """Empty or malformed plan passed to the maneuver sequencer."""
