"""Tests for Mapper"""

import pytest
from motion_core.mapper import Mapper, build_teleop_table
from motion_core.types import (
    MapperConfig,
    Mode,
    ModeKind,
    PostureCommand,
    TeleopDirection,
    VelocityCommand,
)


@pytest.fixture
def default_mapper():
    """Create mapper with default config"""
    return Mapper(MapperConfig())


def all_modes():
    """Every mode the dispatcher can hold"""
    modes = [Mode.idle(), Mode.autonomous()]
    modes += [Mode.teleop(d) for d in TeleopDirection]
    modes += [Mode.posture(p) for p in PostureCommand]
    return modes


@pytest.mark.parametrize("mode", all_modes(), ids=str)
def test_every_mode_maps_to_one_command(default_mapper, mode):
    """Test the mapping is total"""
    command = default_mapper.map(mode)
    assert isinstance(command, (VelocityCommand, PostureCommand))


def test_idle_stops(default_mapper):
    """Test Idle produces Stop"""
    assert default_mapper.map(Mode.idle()) is PostureCommand.STOP


def test_autonomous_forwards_plan_command(default_mapper):
    """Test Autonomous passes the sequencer output through"""
    cmd = VelocityCommand(0.5, 0.0, 0.1)
    assert default_mapper.map(Mode.autonomous(), cmd) is cmd
    assert default_mapper.map(Mode.autonomous(), PostureCommand.STOP) is PostureCommand.STOP


def test_autonomous_without_plan_stops(default_mapper):
    """Test Autonomous with no sequencer output produces Stop"""
    assert default_mapper.map(Mode.autonomous(), None) is PostureCommand.STOP


def test_teleop_table_defaults(default_mapper):
    """Test keyboard speeds"""
    expected = {
        TeleopDirection.FORWARD: VelocityCommand(0.3, 0.0, 0.0),
        TeleopDirection.BACKWARD: VelocityCommand(-0.3, 0.0, 0.0),
        TeleopDirection.TURN_LEFT: VelocityCommand(0.0, 0.0, 0.4),
        TeleopDirection.TURN_RIGHT: VelocityCommand(0.0, 0.0, -0.4),
        TeleopDirection.STRAFE_LEFT: VelocityCommand(0.0, 0.4, 0.0),
        TeleopDirection.STRAFE_RIGHT: VelocityCommand(0.0, -0.4, 0.0),
        TeleopDirection.STAND_UP: PostureCommand.STAND_UP,
        TeleopDirection.STAND_DOWN: PostureCommand.STAND_DOWN,
    }
    for direction, command in expected.items():
        assert default_mapper.map(Mode.teleop(direction)) == command


def test_teleop_ignores_plan_command(default_mapper):
    """Test a stray sequencer command cannot leak into teleop"""
    cmd = default_mapper.map(Mode.teleop(TeleopDirection.FORWARD), VelocityCommand(1.0, 0.0, 0.0))
    assert cmd == VelocityCommand(0.3, 0.0, 0.0)


def test_posture_mode(default_mapper):
    """Test Posture(kind) produces kind"""
    assert default_mapper.map(Mode.posture(PostureCommand.SIT)) is PostureCommand.SIT
    assert default_mapper.map(Mode.posture(PostureCommand.DAMP)) is PostureCommand.DAMP


def test_incomplete_modes_fail_closed(default_mapper):
    """Test malformed modes produce Stop"""
    assert default_mapper.map(Mode(ModeKind.TELEOP)) is PostureCommand.STOP
    assert default_mapper.map(Mode(ModeKind.POSTURE)) is PostureCommand.STOP
    assert default_mapper.map(None) is PostureCommand.STOP
    assert default_mapper.map("forward") is PostureCommand.STOP


def test_custom_speeds():
    """Test configurable teleop table"""
    mapper = Mapper(MapperConfig(forward_speed=0.6, turn_rate=1.0))
    assert mapper.teleop_command(TeleopDirection.FORWARD) == VelocityCommand(0.6, 0.0, 0.0)
    assert mapper.teleop_command(TeleopDirection.TURN_RIGHT) == VelocityCommand(0.0, 0.0, -1.0)


def test_table_covers_all_directions():
    """Test table totality"""
    table = build_teleop_table(MapperConfig())
    assert set(table) == set(TeleopDirection)
