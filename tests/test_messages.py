import dataclasses

import pytest

from rmdecision.messages import (
    CapacityData,
    ChassisCmd,
    GameRobotStatus,
    GimbalCmd,
    PowerHeatData,
    ShootCmd,
    TrackData,
)


@pytest.mark.parametrize("robot_id", [GameRobotStatus.RED_ENGINEER, GameRobotStatus.BLUE_ENGINEER])
def test_engineers_are_recognised(robot_id):
    assert GameRobotStatus(robot_id=robot_id).is_engineer is True


@pytest.mark.parametrize("robot_id", [GameRobotStatus.RED_HERO, GameRobotStatus.BLUE_HERO, 0])
def test_other_robots_are_not_engineers(robot_id):
    assert GameRobotStatus(robot_id=robot_id).is_engineer is False


def test_chassis_cmd_is_mutable_and_defaults_fresh():
    first = ChassisCmd()
    first.power_limit = 55.0
    assert ChassisCmd().power_limit == 0.0
    assert first.power_limit == 55.0


def test_replace_keeps_other_fields():
    track = TrackData(id=3, v_yaw=1.5, accel=0.2)
    changed = dataclasses.replace(track, v_yaw=-1.5)
    assert changed == TrackData(id=3, v_yaw=-1.5, accel=0.2)
    assert track.v_yaw == 1.5


def test_shoot_cmd_constants_not_fields():
    cmd = ShootCmd(mode=ShootCmd.PUSH)
    names = {f.name for f in dataclasses.fields(cmd)}
    assert names == {"mode", "wheel_speed", "hz", "stamp"}
    assert cmd.mode == ShootCmd.PUSH


def test_messages_compare_by_value():
    assert PowerHeatData(chassis_power_buffer=40) == PowerHeatData(chassis_power_buffer=40)
    assert CapacityData(stamp=1.0) != CapacityData(stamp=2.0)
    assert GimbalCmd(traj_frame_id="odom").traj_frame_id == "odom"