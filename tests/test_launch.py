"""Tests for the launcher command line"""

import asyncio
import os

import pytest
import launch
from motion_core.errors import ConfigurationError
from motion_core.feedback import FeedbackSampler
from motion_core.mapper import Mapper
from motion_core.sequencer import ManeuverSequencer
from motion_core.supervisor import Supervisor
from motion_core.transport import SimTransport
from motion_core.types import PostureCommand, SequencerState, SupervisorConfig


@pytest.fixture
def sim_env(monkeypatch, tmp_path):
    """No .env, no startup routine, fast ticks"""
    env = {k: v for k, v in os.environ.items() if not k.startswith("GO2_")}
    env["GO2_STARTUP_REPEATS"] = "0"
    env["GO2_CONTROL_PERIOD"] = "0.005"
    monkeypatch.setattr(os, "environ", env)
    monkeypatch.chdir(tmp_path)
    return env


@pytest.mark.parametrize("value,expected", [
    ("sit", PostureCommand.SIT),
    ("Rise-Sit", PostureCommand.RISE_SIT),
    ("balance_stand", PostureCommand.BALANCE_STAND),
    ("0", PostureCommand.STAND_UP),
    ("5", PostureCommand.DAMP),
    ("99", PostureCommand.STOP),
])
def test_parse_posture(value, expected):
    """Test posture names and sport client codes"""
    assert launch.parse_posture(value) is expected


@pytest.mark.parametrize("value", ["2", "jump", ""])
def test_parse_posture_rejects(value):
    """Test unknown postures"""
    with pytest.raises(ConfigurationError):
        launch.parse_posture(value)


def test_parse_posture_rejects_motion_code():
    """Test code 2 (velocity_move) is refused with a pointer to teleop"""
    with pytest.raises(ConfigurationError, match="velocity_move"):
        launch.parse_posture("2")


def test_missing_interface_prints_usage(sim_env, capsys):
    """Test the interface is required"""
    with pytest.raises(SystemExit) as exc:
        launch.main(["--sim"])

    assert exc.value.code != 0
    assert "usage:" in capsys.readouterr().err


def test_bad_mode_prints_usage(capsys):
    """Test argparse rejects unknown modes"""
    with pytest.raises(SystemExit) as exc:
        launch.main(["eth0", "--mode", "dance"])

    assert exc.value.code != 0
    assert "usage:" in capsys.readouterr().err


def test_bad_plan_prints_usage(sim_env, capsys):
    """Test an unparseable plan fails before connecting"""
    code = launch.main(["sim0", "--sim", "--mode", "plan", "--plan", "F1,X9"])

    assert code != 0
    assert "usage:" in capsys.readouterr().err


def test_bad_posture_prints_usage(sim_env, capsys):
    """Test an unknown posture fails before connecting"""
    code = launch.main(["sim0", "--sim", "--mode", "posture", "--posture", "jump"])

    assert code != 0
    assert "usage:" in capsys.readouterr().err


def test_invalid_environment(sim_env, capsys):
    """Test a broken .env setting is reported as a usage error"""
    sim_env["GO2_TURN_SPEED"] = "fast"
    code = launch.main(["sim0", "--sim", "--mode", "plan"])

    assert code != 0
    assert "GO2_TURN_SPEED" in capsys.readouterr().err


def test_interface_from_environment(sim_env):
    """Test GO2_NETWORK_INTERFACE stands in for the argument"""
    sim_env["GO2_NETWORK_INTERFACE"] = "sim0"
    code = launch.main(["--sim", "--mode", "posture", "--posture", "stop", "--duration", "0.05"])
    assert code == 0


def test_plan_mode_on_simulator(sim_env, capsys):
    """Test a short plan runs to completion"""
    code = launch.main(["sim0", "--sim", "--mode", "plan", "--plan", "F0.1"])

    assert code == 0
    assert "Final pose" in capsys.readouterr().out


def test_posture_mode_on_simulator(sim_env, capsys):
    """Test holding a posture for a fixed time"""
    code = launch.main(["sim0", "--sim", "--mode", "posture", "--posture", "sit", "--duration", "0.05"])

    assert code == 0
    assert "Holding posture: sit" in capsys.readouterr().out


class FailingSequencer(ManeuverSequencer):
    """Sequencer whose fifth running tick raises"""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.running_ticks = 0

    def tick(self):
        if self.is_running:
            self.running_ticks += 1
            if self.running_ticks == 5:
                raise RuntimeError("controller fault")
        return super().tick()


def test_plan_aborted_by_failsafe_exits_nonzero(capsys):
    """Test a plan cancelled by FAILSAFE is reported as a failure"""
    sampler = FeedbackSampler()
    supervisor = Supervisor(
        SimTransport(),
        sampler,
        FailingSequencer(sampler),
        Mapper(),
        SupervisorConfig(control_period=0.005, startup_repeats=0, lag_warning=None),
    )

    code = asyncio.run(launch.run_plan(supervisor, "F5.0", "sim0"))

    assert code == 1
    assert supervisor.sequencer.state is SequencerState.CANCELLED
    assert supervisor.sequencer.completed == 0
    assert "Plan cancelled" in capsys.readouterr().out
