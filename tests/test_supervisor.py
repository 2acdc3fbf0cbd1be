"""Tests for the Supervisor tick and lifecycle"""

import asyncio

import pytest
from motion_core.errors import InvalidPlanError
from motion_core.feedback import FeedbackSampler
from motion_core.mapper import Mapper
from motion_core.sequencer import ManeuverSequencer
from motion_core.supervisor import Supervisor
from motion_core.transport import SimTransport
from motion_core.types import (
    Mode,
    ModeKind,
    PoseSample,
    PostureCommand,
    SequencerState,
    SupervisorConfig,
    SupervisorState,
    TeleopDirection,
    Travel,
    Turn,
    VelocityCommand,
)


class FakeClock:
    def __init__(self, now: float = 0.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


class FailingMapper(Mapper):
    """Mapper that blows up on every call"""

    def map(self, mode, plan_command=None):
        raise RuntimeError("mapper exploded")


def make_supervisor(transport=None, mapper=None, clock=None, startup_repeats=0):
    clock = clock or FakeClock()
    transport = transport or SimTransport(clock=clock)
    sampler = FeedbackSampler()
    sequencer = ManeuverSequencer(sampler, clock=clock)
    config = SupervisorConfig(
        control_period=0.005,
        startup_repeats=startup_repeats,
        startup_interval=0.0,
        lag_warning=None,
    )
    return Supervisor(transport, sampler, sequencer, mapper or Mapper(), config)


def connected(supervisor):
    """Subscribe and connect without running the loop"""
    supervisor.transport.subscribe_pose(supervisor.sampler.update)
    asyncio.run(supervisor.transport.connect("sim0"))
    return supervisor


@pytest.fixture
def supervisor():
    return connected(make_supervisor())


def test_default_mode_is_idle(supervisor):
    """Test Idle by default, Stop every tick"""
    assert supervisor.current_mode == Mode.idle()
    assert asyncio.run(supervisor.tick()) is PostureCommand.STOP
    assert supervisor.transport.last_command is PostureCommand.STOP
    assert supervisor.tick_count == 1


def test_teleop_tick(supervisor):
    """Test teleop direction reaches the transport"""
    supervisor.set_mode(Mode.teleop(TeleopDirection.FORWARD))
    asyncio.run(supervisor.tick())
    assert supervisor.transport.last_command == VelocityCommand(0.3, 0.0, 0.0)

    supervisor.set_mode(Mode.teleop(TeleopDirection.STAND_DOWN))
    asyncio.run(supervisor.tick())
    assert supervisor.transport.last_command is PostureCommand.STAND_DOWN


def test_one_command_per_tick(supervisor):
    """Test each tick sends exactly one command"""
    supervisor.set_mode(Mode.teleop(TeleopDirection.TURN_LEFT))
    for _ in range(5):
        asyncio.run(supervisor.tick())
    assert supervisor.transport.command_count == 5


def test_latched_posture_sent_once(supervisor):
    """Test Sit goes out once per entry into the mode"""
    transport = supervisor.transport
    supervisor.set_mode(Mode.posture(PostureCommand.SIT))
    for _ in range(3):
        assert asyncio.run(supervisor.tick()) is PostureCommand.SIT
    assert transport.commands.count(PostureCommand.SIT) == 1

    supervisor.set_mode(Mode.idle())
    asyncio.run(supervisor.tick())
    supervisor.set_mode(Mode.posture(PostureCommand.SIT))
    asyncio.run(supervisor.tick())
    assert transport.commands.count(PostureCommand.SIT) == 2


def test_held_posture_repeated(supervisor):
    """Test non-latched postures are sent every tick"""
    supervisor.set_mode(Mode.posture(PostureCommand.BALANCE_STAND))
    for _ in range(3):
        asyncio.run(supervisor.tick())
    assert supervisor.transport.commands.count(PostureCommand.BALANCE_STAND) == 3


def test_plan_runs_then_returns_to_idle():
    """Test plan completion switches the mode back to Idle"""
    sup = connected(make_supervisor())
    sup.start_plan([Turn(0.0)])
    assert sup.current_mode.kind is ModeKind.AUTONOMOUS

    # Sim starts at yaw 0: arrival on the first tick
    assert asyncio.run(sup.tick()) is PostureCommand.STOP
    assert sup.sequencer.is_finished
    assert sup.current_mode == Mode.idle()


def test_invalid_plan_keeps_mode(supervisor):
    """Test a rejected plan does not switch to Autonomous"""
    with pytest.raises(InvalidPlanError):
        supervisor.start_plan([])
    assert supervisor.current_mode == Mode.idle()


def test_mode_change_cancels_plan(supervisor):
    """Test leaving Autonomous cancels the plan and drains its stop"""
    supervisor.start_plan([Travel(10.0)])
    asyncio.run(supervisor.tick())
    assert supervisor.sequencer.is_running

    supervisor.set_mode(Mode.teleop(TeleopDirection.BACKWARD))
    assert supervisor.sequencer.state is SequencerState.CANCELLED

    command = asyncio.run(supervisor.tick())
    assert command == VelocityCommand(-0.3, 0.0, 0.0)
    assert supervisor.sequencer.is_finished


def test_cancel_plan_sends_stop(supervisor):
    """Test cancel_plan: the next tick sends Stop"""
    supervisor.start_plan([Travel(10.0)])
    asyncio.run(supervisor.tick())

    supervisor.cancel_plan()
    assert asyncio.run(supervisor.tick()) is PostureCommand.STOP
    assert supervisor.current_mode == Mode.idle()


def test_run_lifecycle():
    """Test startup routine, ticking, and terminal stop on shutdown"""
    transport = SimTransport()
    sup = make_supervisor(transport=transport, startup_repeats=2)
    states = []
    sup.add_state_callback(lambda old, new: states.append(new))

    async def scenario():
        task = asyncio.create_task(sup.run("sim0"))
        await sup.wait_active(timeout=1.0)
        sup.set_mode(Mode.teleop(TeleopDirection.FORWARD))
        await asyncio.sleep(0.05)
        sup.stop()
        await task

    asyncio.run(scenario())

    assert states == [SupervisorState.STARTING, SupervisorState.ACTIVE, SupervisorState.STOPPED]
    assert transport.commands[:5] == [
        PostureCommand.STAND_UP,
        PostureCommand.STAND_UP,
        PostureCommand.BALANCE_STAND,
        PostureCommand.BALANCE_STAND,
        PostureCommand.STOP,
    ]
    assert VelocityCommand(0.3, 0.0, 0.0) in transport.commands
    assert transport.last_command is PostureCommand.STOP
    assert not transport.is_connected
    assert sup.tick_count > 0


def test_failsafe_on_tick_error():
    """Test an exception in a tick forces Stop from then on"""
    transport = SimTransport()
    sup = make_supervisor(transport=transport, mapper=FailingMapper())

    async def scenario():
        task = asyncio.create_task(sup.run("sim0"))
        while sup.state is not SupervisorState.FAILSAFE:
            await asyncio.sleep(0.005)
        sup.set_mode(Mode.teleop(TeleopDirection.FORWARD))
        await asyncio.sleep(0.03)
        sup.stop()
        await task

    asyncio.run(scenario())

    # Nothing but stops reached the robot
    assert all(c is PostureCommand.STOP for c in transport.commands)
    assert sup.state is SupervisorState.STOPPED


def test_connect_failure_stops():
    """Test run() returns when the transport cannot connect"""

    class DeadTransport(SimTransport):
        async def connect(self, interface):
            return False

    sup = make_supervisor(transport=DeadTransport())
    asyncio.run(sup.run("eth9"))

    assert sup.state is SupervisorState.STOPPED
    assert sup.tick_count == 0
    assert sup.transport.command_count == 0


def test_latest_pose_from_transport():
    """Test the sampler is fed by the transport subscription"""
    transport = SimTransport(initial_pose=PoseSample(x=1.0, yaw=0.7))
    sup = make_supervisor(transport=transport)
    assert sup.latest_pose is None

    async def scenario():
        task = asyncio.create_task(sup.run("sim0"))
        await sup.wait_active(timeout=1.0)
        sup.stop()
        await task

    asyncio.run(scenario())
    assert sup.latest_pose.yaw == pytest.approx(0.7)
    assert sup.latest_pose.x == pytest.approx(1.0)


def test_wait_plan_finished_reports_outcome():
    """Test a completed plan reports True and a cancelled one False"""
    sup = make_supervisor(transport=SimTransport())

    async def scenario():
        task = asyncio.create_task(sup.run("sim0"))
        await sup.wait_active(timeout=1.0)

        sup.start_plan([Turn(0.0)])
        completed = await asyncio.wait_for(sup.wait_plan_finished(0.005), timeout=1.0)

        sup.start_plan([Travel(10.0)])
        await asyncio.sleep(0.02)
        sup.cancel_plan()
        cancelled = await asyncio.wait_for(sup.wait_plan_finished(0.005), timeout=1.0)

        sup.stop()
        await task
        return completed, cancelled

    assert asyncio.run(scenario()) == (True, False)
