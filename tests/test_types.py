"""Tests for core types"""

import dataclasses
import math

import pytest
from motion_core.types import (
    Mode,
    ModeKind,
    PoseSample,
    PostureCommand,
    TeleopDirection,
    Travel,
    Turn,
    VelocityCommand,
    is_stop,
)


def test_velocity_command_valid():
    """Test valid velocity command"""
    cmd = VelocityCommand(0.5, 0.0, -0.2)
    assert cmd.forward == 0.5
    assert cmd.lateral == 0.0
    assert cmd.angular == -0.2
    assert not cmd.is_zero


def test_velocity_command_rejects_non_finite():
    """Test that NaN/inf components are rejected"""
    with pytest.raises(AssertionError):
        VelocityCommand(math.nan, 0.0, 0.0)

    with pytest.raises(AssertionError):
        VelocityCommand(0.0, 0.0, math.inf)


def test_velocity_zero():
    """Test neutral command"""
    cmd = VelocityCommand.zero()
    assert cmd.is_zero
    assert cmd == VelocityCommand()


def test_is_stop():
    """Test stop detection across command kinds"""
    assert is_stop(PostureCommand.STOP)
    assert is_stop(VelocityCommand.zero())
    assert not is_stop(PostureCommand.STAND_UP)
    assert not is_stop(VelocityCommand(0.3, 0.0, 0.0))
    assert not is_stop(None)


def test_pose_sample_is_immutable():
    """Test readers cannot modify a shared sample"""
    sample = PoseSample(x=1.0, y=2.0, z=0.3, yaw=0.5, timestamp=10.0)
    assert sample.position == (1.0, 2.0, 0.3)

    with pytest.raises(dataclasses.FrozenInstanceError):
        sample.yaw = 1.0


def test_segments_compare_by_value():
    """Test plan segments are plain values"""
    assert Turn(math.pi / 2) == Turn(math.pi / 2)
    assert Travel(2.0) != Travel(1.0)


def test_mode_constructors():
    """Test Mode factory methods"""
    assert Mode.idle().kind is ModeKind.IDLE
    assert Mode.autonomous().kind is ModeKind.AUTONOMOUS

    teleop = Mode.teleop(TeleopDirection.FORWARD)
    assert teleop.kind is ModeKind.TELEOP
    assert teleop.direction is TeleopDirection.FORWARD
    assert str(teleop) == "teleop:forward"

    posture = Mode.posture(PostureCommand.SIT)
    assert posture.kind is ModeKind.POSTURE
    assert posture.posture_kind is PostureCommand.SIT
    assert str(posture) == "posture:sit"


def test_mode_equality():
    """Test modes with the same content are equal (used for compare-and-set)"""
    assert Mode.teleop(TeleopDirection.TURN_LEFT) == Mode.teleop(TeleopDirection.TURN_LEFT)
    assert Mode.teleop(TeleopDirection.TURN_LEFT) != Mode.teleop(TeleopDirection.TURN_RIGHT)
    assert Mode.idle() != Mode.autonomous()
