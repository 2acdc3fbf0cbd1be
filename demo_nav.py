#!/usr/bin/env python3
"""
go2-motion Navigation Demo - Runs a plan on the simulated robot.

Demonstrates the core pipeline with no hardware: simulated transport,
feedback sampler, maneuver sequencer, mapper and supervisor.

Usage:
    python demo_nav.py              # square
    python demo_nav.py survey
    python demo_nav.py "F1.0,R45,F0.5"
"""

import asyncio
import logging
import sys

from motion_core.feedback import FeedbackSampler
from motion_core.mapper import Mapper
from motion_core.plans import build_plan
from motion_core.sequencer import ManeuverSequencer
from motion_core.supervisor import Supervisor
from motion_core.transport import SimTransport
from motion_core.types import ControllerConfig, SupervisorConfig, SupervisorState


# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    stream=sys.stdout
)

logger = logging.getLogger(__name__)


async def run_demo(plan_name: str = "square", yaw_drift: float = 0.02) -> bool:
    """Run one plan on the simulator and report the final pose"""

    logger.info("=" * 60)
    logger.info(f"go2-motion Navigation Demo: {plan_name}")
    logger.info("=" * 60)

    # Simulated robot with a slow heading drift for the heading hold to fight
    transport = SimTransport(yaw_drift=yaw_drift)

    sampler = FeedbackSampler()
    sequencer = ManeuverSequencer(
        sampler,
        ControllerConfig(turn_speed=0.8, travel_speed=0.5, distance_source="elapsed"),
    )
    mapper = Mapper()

    # 50 Hz, no startup posture routine in the simulator
    supervisor = Supervisor(
        transport,
        sampler,
        sequencer,
        mapper,
        SupervisorConfig(control_period=0.02, startup_repeats=0),
    )

    def on_state_change(old_state: SupervisorState, new_state: SupervisorState):
        logger.info(f"STATE CHANGE: {old_state.value} -> {new_state.value}")

    supervisor.add_state_callback(on_state_change)

    supervisor_task = asyncio.create_task(supervisor.run("sim0"))
    await supervisor.wait_active(timeout=2.0)

    start = await sampler.wait_ready(timeout=1.0)
    plan = build_plan(plan_name, start.yaw)
    for index, segment in enumerate(plan, 1):
        logger.info(f"  {index:2d}. {segment}")

    supervisor.start_plan(plan, initial_heading=start.yaw)
    finished = await supervisor.wait_plan_finished()

    pose = transport.pose
    logger.info(
        f"Plan {'completed' if finished else 'cancelled'} after "
        f"{supervisor.tick_count} ticks: x={pose.x:+.2f} m, y={pose.y:+.2f} m, "
        f"yaw={pose.yaw:+.3f} rad"
    )

    supervisor.stop()
    await supervisor_task

    logger.info(f"Commands sent: {transport.command_count}")
    return finished


def main():
    """Entry point"""
    plan_name = sys.argv[1] if len(sys.argv) > 1 else "square"
    try:
        ok = asyncio.run(run_demo(plan_name))
    except KeyboardInterrupt:
        logger.info("Demo interrupted")
        ok = False
    sys.exit(0 if ok else 1)


if __name__ == "__main__":
    main()
