"""
Plan building - A small route language and the built-in routes.

A route is a comma-separated list of steps:
    F<meters>    travel forward
    L<degrees>   turn left (counter-clockwise) relative to the previous heading
    R<degrees>   turn right (clockwise) relative to the previous heading

Relative turns are resolved into absolute Turn segments by accumulating
them onto the heading the robot starts with, so small errors in one turn
do not carry into the next target.
"""

import logging
import math
from dataclasses import dataclass
from typing import Dict, List, Union

from .errors import InvalidPlanError
from .heading import normalize_angle
from .types import Segment, Travel, Turn


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RelativeTurn:
    """Turn by an angle relative to the previous target (radians, CCW positive)"""
    angle: float


Step = Union[RelativeTurn, Travel]


NAMED_PLANS: Dict[str, str] = {
    "square": "F1.0,L90,F1.0,L90,F1.0,L90,F1.0,L90",
    "turn_test": "L90,R90,R90,L90",
    "out_and_back": "F2.0,L90,L90,F2.0,L90,L90",
    "survey": (
        "F1.0,L20,F1.3,R20,F3.2,L90,F5.3,L90,F7.5,L90,F0.8,"
        "L90,F6.0,R90,F3.5,R90,F5.0"
    ),
}


def parse_step(token: str) -> Step:
    """
    Parse one route step.

    Raises:
        InvalidPlanError: If the token is not F/L/R followed by a number
    """
    token = token.strip()
    if len(token) < 2:
        raise InvalidPlanError(f"Bad plan step {token!r}")

    kind, raw = token[0].upper(), token[1:]
    try:
        value = float(raw)
    except ValueError:
        raise InvalidPlanError(f"Bad number in plan step {token!r}") from None

    if not math.isfinite(value):
        raise InvalidPlanError(f"Plan step {token!r} is not finite")

    if kind == "F":
        if value <= 0.0:
            raise InvalidPlanError(f"Travel distance must be positive in {token!r}")
        return Travel(value)
    if kind == "L":
        return RelativeTurn(math.radians(value))
    if kind == "R":
        return RelativeTurn(-math.radians(value))

    raise InvalidPlanError(f"Unknown plan step kind {kind!r} in {token!r}")


def parse_plan(text: str) -> List[Step]:
    """
    Parse a route string into steps.

    Args:
        text: e.g. "F1.0,L90,F0.5"

    Returns:
        Steps in order

    Raises:
        InvalidPlanError: If the route is empty or a step is malformed
    """
    tokens = [t for t in text.split(",") if t.strip()]
    if not tokens:
        raise InvalidPlanError("Plan is empty")
    return [parse_step(t) for t in tokens]


def resolve_plan(steps: List[Step], initial_heading: float) -> List[Segment]:
    """
    Convert relative turns into absolute Turn segments.

    Args:
        steps: Parsed route
        initial_heading: Heading the route starts from (radians)

    Returns:
        Segments ready for the sequencer
    """
    heading = normalize_angle(initial_heading)
    segments: List[Segment] = []
    for step in steps:
        if isinstance(step, RelativeTurn):
            heading = normalize_angle(heading + step.angle)
            segments.append(Turn(heading))
        else:
            segments.append(step)
    return segments


def build_plan(name_or_route: str, initial_heading: float) -> List[Segment]:
    """
    Build a plan from a built-in name or a route string.

    Args:
        name_or_route: Key of NAMED_PLANS, or a route like "F1.0,L90"
        initial_heading: Heading the route starts from (radians)

    Raises:
        InvalidPlanError: If the route cannot be parsed
    """
    route = NAMED_PLANS.get(name_or_route.strip().lower(), name_or_route)
    segments = resolve_plan(parse_plan(route), initial_heading)
    logger.info(f"Plan built: {len(segments)} segment(s) from {name_or_route!r}")
    return segments
