#!/usr/bin/env python3
"""
go2-motion Launcher - Start the Go2 motion controller

Usage:
    python launch.py enp44s0                      # Keyboard teleop
    python launch.py enp44s0 --gamepad            # Gamepad teleop
    python launch.py enp44s0 --mode plan --plan square
    python launch.py enp44s0 --mode plan --plan "F1.0,L90,F0.5"
    python launch.py enp44s0 --mode posture --posture sit
    python launch.py sim --sim --mode plan --plan survey   # No hardware
"""

import sys
import argparse
import asyncio
import logging
from typing import Optional

from go2_config import Go2Config
from motion_core.errors import ConfigurationError, InvalidPlanError, NotReadyError
from motion_core.feedback import FeedbackSampler
from motion_core.interfaces import InputProvider, Transport
from motion_core.mapper import Mapper
from motion_core.plans import NAMED_PLANS, build_plan
from motion_core.sequencer import ManeuverSequencer
from motion_core.supervisor import Supervisor
from motion_core.types import Mode, PostureCommand, SupervisorState


logger = logging.getLogger("launch")

# Numeric codes of the sport client test program, plus posture names
POSTURE_CODES = {
    "0": PostureCommand.STAND_UP,
    "1": PostureCommand.BALANCE_STAND,
    "3": PostureCommand.STAND_DOWN,
    "4": PostureCommand.STAND_UP,
    "5": PostureCommand.DAMP,
    "6": PostureCommand.RECOVERY_STAND,
    "7": PostureCommand.SIT,
    "8": PostureCommand.RISE_SIT,
    "99": PostureCommand.STOP,
}

# Sport client codes that are motions rather than postures
MOTION_CODES = {
    "2": "velocity_move (use --mode teleop or a --plan route)",
}


def setup_logging(level: str = "INFO") -> None:
    """Configure logging"""
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        stream=sys.stdout
    )


def parse_posture(value: str) -> PostureCommand:
    """
    Resolve a posture name ("sit", "stand-up") or numeric code ("7").

    Raises:
        ConfigurationError: If the value names no posture
    """
    key = value.strip().lower().replace("-", "_")
    if key in POSTURE_CODES:
        return POSTURE_CODES[key]
    if key in MOTION_CODES:
        raise ConfigurationError(f"Code {key} is a motion, not a posture: {MOTION_CODES[key]}")
    try:
        return PostureCommand(key)
    except ValueError:
        names = ", ".join(p.value for p in PostureCommand)
        raise ConfigurationError(f"Unknown posture {value!r} (choose from: {names})") from None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="go2-motion",
        description="go2-motion - Closed-loop motion control for the Unitree Go2",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=f"""
Built-in plans: {', '.join(sorted(NAMED_PLANS))}
Plan routes:    F<meters>, L<degrees>, R<degrees> separated by commas

Examples:
  python launch.py enp44s0                         Keyboard teleop
  python launch.py enp44s0 --mode plan --plan square
  python launch.py sim --sim --mode plan --plan "F1.0,L90,F1.0"
        """
    )

    parser.add_argument(
        "interface",
        nargs="?",
        help="Network interface wired to the robot (default: GO2_NETWORK_INTERFACE)"
    )
    parser.add_argument(
        "--mode",
        default="teleop",
        choices=["teleop", "plan", "posture"],
        help="What drives the robot (default: teleop)"
    )
    parser.add_argument(
        "--plan",
        default="square",
        help="Built-in plan name or route string (plan mode)"
    )
    parser.add_argument(
        "--posture",
        default="balance_stand",
        help="Posture name or sport client code to hold (posture mode)"
    )
    parser.add_argument(
        "--duration",
        type=float,
        help="Stop after this many seconds (posture mode; default: until Ctrl+C)"
    )
    parser.add_argument(
        "--sim",
        action="store_true",
        help="Use the simulated robot (no hardware needed)"
    )
    parser.add_argument(
        "--gamepad",
        action="store_true",
        help="Use gamepad control instead of the keyboard (requires pygame)"
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Set logging level"
    )
    parser.add_argument("--env-file", help="Path to .env file")

    return parser


def build_transport(use_sim: bool) -> Transport:
    """
    Create the robot transport.

    Raises:
        ConfigurationError: If the Unitree SDK is not installed
    """
    if use_sim:
        from motion_core.transport import SimTransport
        print("Using SIMULATED robot (no actual hardware)")
        return SimTransport()

    from motion_core.transport.unitree import UnitreeTransport
    return UnitreeTransport()


def build_input(use_gamepad: bool) -> InputProvider:
    """Create the operator input provider"""
    if use_gamepad:
        from teleop.gamepad_input import GamepadInput
        return GamepadInput()

    from teleop.keyboard_input import KeyboardInput
    return KeyboardInput()


def build_supervisor(transport: Transport, config: Go2Config) -> Supervisor:
    """
    Wire the core components together.

    Raises:
        ConfigurationError: If the environment configuration is invalid
    """
    sampler = FeedbackSampler()
    sequencer = ManeuverSequencer(sampler, config.controller_config())
    mapper = Mapper(config.mapper_config())
    return Supervisor(transport, sampler, sequencer, mapper, config.supervisor_config())


async def _start(supervisor: Supervisor, interface: str) -> Optional[asyncio.Task]:
    """
    Start the supervisor and wait for the control ticks to begin.

    Returns:
        The running supervisor task, or None if startup failed
    """
    task = asyncio.create_task(supervisor.run(interface))
    while not task.done() and supervisor.state is not SupervisorState.ACTIVE:
        await asyncio.sleep(0.05)

    if task.done():
        await task
        logger.error(f"Supervisor did not start (state: {supervisor.state.value})")
        return None
    return task


async def run_teleop(supervisor: Supervisor, provider: InputProvider, interface: str) -> int:
    """Interactive control until the operator exits"""
    from teleop.reader import InputReader

    task = await _start(supervisor, interface)
    if task is None:
        return 1

    reader = InputReader(provider, supervisor)
    try:
        await reader.run(supervisor.config.input_period)
    finally:
        supervisor.stop()
        await task
    return 0


async def run_plan(supervisor: Supervisor, plan_name: str, interface: str) -> int:
    """Run one autonomous plan to completion"""
    task = await _start(supervisor, interface)
    if task is None:
        return 1

    try:
        sample = await supervisor.sampler.wait_ready(supervisor.config.feedback_timeout)
        print(f"Initial yaw: {sample.yaw:+.3f} rad")

        plan = build_plan(plan_name, sample.yaw)
        supervisor.start_plan(plan, initial_heading=sample.yaw)
        succeeded = await supervisor.wait_plan_finished()

        pose = supervisor.latest_pose
        if pose is not None:
            print(f"Final pose: x={pose.x:+.2f} y={pose.y:+.2f} yaw={pose.yaw:+.3f}")
        if not succeeded:
            print(f"Plan cancelled ({supervisor.sequencer.completed} segment(s) completed)")
            return 1
        return 0

    except NotReadyError as e:
        logger.error(f"Pose feedback not received: {e}")
        return 1

    finally:
        supervisor.stop()
        await task


async def run_posture(
    supervisor: Supervisor,
    posture: PostureCommand,
    interface: str,
    duration: Optional[float] = None,
) -> int:
    """Hold a single posture until stopped"""
    task = await _start(supervisor, interface)
    if task is None:
        return 1

    supervisor.set_mode(Mode.posture(posture))
    print(f"Holding posture: {posture.value} (Ctrl+C to stop)")
    try:
        if duration is not None:
            await asyncio.sleep(duration)
        else:
            await task
    finally:
        supervisor.stop()
        await task
    return 0


def main(argv=None) -> int:
    """Main entry point"""
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(args.log_level)

    config = Go2Config(args.env_file)
    interface = args.interface or config.network_interface
    if not interface:
        parser.error("the network interface is required (argument or GO2_NETWORK_INTERFACE)")

    try:
        posture = parse_posture(args.posture) if args.mode == "posture" else None
        if args.mode == "plan":
            # Syntax check before touching the robot
            build_plan(args.plan, 0.0)

        transport = build_transport(args.sim)
        supervisor = build_supervisor(transport, config)

        if args.mode == "teleop":
            provider = build_input(args.gamepad)
            coro = run_teleop(supervisor, provider, interface)
        elif args.mode == "plan":
            coro = run_plan(supervisor, args.plan, interface)
        else:
            coro = run_posture(supervisor, posture, interface, args.duration)

    except (ConfigurationError, InvalidPlanError) as e:
        parser.print_usage(sys.stderr)
        print(f"{parser.prog}: error: {e}", file=sys.stderr)
        return 2
    except RuntimeError as e:
        print(f"Error: {e}")
        return 1

    try:
        return asyncio.run(coro)
    except KeyboardInterrupt:
        print("\nShutting down...")
        return 0
    except RuntimeError as e:
        print(f"Error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
