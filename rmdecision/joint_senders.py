"""Senders for simple joint, switch and multi-axis commands, and the double barrel shooter."""

from __future__ import annotations

import logging
import math
import time as _time
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

from rmdecision.command_sender import CommandSenderBase, Publish, ShooterCommandSender, Twist
from rmdecision.messages import (
    GameRobotStatus,
    GimbalDesError,
    PowerHeatData,
    ShootBeforehandCmd,
    ShootCmd,
    TrackData,
)
from rmdecision.params import get_param

logger = logging.getLogger(__name__)

_PER_CHANGE_POSITION = 0.05


@dataclass
class BoolMsg:
    data: bool = False


@dataclass
class UInt8Msg:
    data: int = 0


@dataclass
class Float64Msg:
    data: float = 0.0


@dataclass
class StringMsg:
    data: str = ""


@dataclass
class LegCmd:
    """Command for a legged chassis."""

    jump: bool = False
    leg_length: float = 0.0


@dataclass
class TwistStamped:
    twist: Twist = field(default_factory=Twist)
    stamp: float = 0.0


@dataclass
class MultiDofCmd:
    """Command for a controller that moves along several axes at once."""

    mode: int = 0
    linear_x: float = 0.0
    linear_y: float = 0.0
    linear_z: float = 0.0
    angular_x: float = 0.0
    angular_y: float = 0.0
    angular_z: float = 0.0
    stamp: float = 0.0


@dataclass
class JointState:
    """Names and positions of the robot's joints."""

    name: list[str] = field(default_factory=list)
    position: list[float] = field(default_factory=list)


def _require(params: Mapping[str, Any], name: str) -> Any:
    value = get_param(params, name, None)
    if value is None:
        raise ValueError(f"parameter {name!r} is required")
    return value


def _load(params: Mapping[str, Any], name: str, default: Any, what: str) -> Any:
    value = get_param(params, name, None)
    if value is None:
        logger.error("%s no defined", what)
        return default
    return value


class UseLioCommandSender(CommandSenderBase):
    """Switches lidar-inertial odometry on or off."""

    message_type = BoolMsg

    def set_use_lio(self, flag: bool) -> None:
        self.msg.data = bool(flag)

    @property
    def use_lio(self) -> bool:
        return self.msg.data

    def set_zero(self) -> None:
        pass


class BalanceCommandSender(CommandSenderBase):
    """Selects the balance chassis mode."""

    message_type = UInt8Msg

    def set_balance_mode(self, mode: int) -> None:
        self.msg.data = int(mode) & 0xFF

    @property
    def balance_mode(self) -> int:
        return self.msg.data

    def set_zero(self) -> None:
        pass


class LegCommandSender(CommandSenderBase):
    """Jump and leg length for a legged chassis."""

    message_type = LegCmd

    def set_jump(self, jump: bool) -> None:
        self.msg.jump = bool(jump)

    def set_leg_length(self, length: float) -> None:
        self.msg.leg_length = float(length)

    @property
    def jump(self) -> bool:
        return self.msg.jump

    @property
    def leg_length(self) -> float:
        return self.msg.leg_length

    def set_zero(self) -> None:
        pass


class Vel3DCommandSender(CommandSenderBase):
    """Six-axis velocity scaled by fixed maxima."""

    message_type = TwistStamped
    stamped = True

    def __init__(self, params: Mapping[str, Any] | None, publish: Publish | None) -> None:
        super().__init__(params, publish)
        params = params or {}
        self._max_linear_x = float(_load(params, "max_linear_x", 0.0, "Max X linear velocity"))
        self._max_linear_y = float(_load(params, "max_linear_y", 0.0, "Max Y linear velocity"))
        self._max_linear_z = float(_load(params, "max_linear_z", 0.0, "Max Z linear velocity"))
        self._max_angular_x = float(_load(params, "max_angular_x", 0.0, "Max X angular velocity"))
        self._max_angular_y = float(_load(params, "max_angular_y", 0.0, "Max Y angular velocity"))
        self._max_angular_z = float(_load(params, "max_angular_z", 0.0, "Max Z angular velocity"))

    def set_linear_vel(self, scale_x: float, scale_y: float, scale_z: float) -> None:
        twist = self.msg.twist
        twist.linear_x = self._max_linear_x * scale_x
        twist.linear_y = self._max_linear_y * scale_y
        twist.linear_z = self._max_linear_z * scale_z

    def set_angular_vel(self, scale_x: float, scale_y: float, scale_z: float) -> None:
        twist = self.msg.twist
        twist.angular_x = self._max_angular_x * scale_x
        twist.angular_y = self._max_angular_y * scale_y
        twist.angular_z = self._max_angular_z * scale_z

    def set_zero(self) -> None:
        self.msg.twist = Twist()


class JointPositionBinaryCommandSender(CommandSenderBase):
    """Moves a joint between an on and an off position."""

    message_type = Float64Msg

    def __init__(self, params: Mapping[str, Any] | None, publish: Publish | None) -> None:
        super().__init__(params, publish)
        params = params or {}
        self._on_pos = float(_require(params, "on_pos"))
        self._off_pos = float(_require(params, "off_pos"))
        self.state = False

    def on(self) -> None:
        self.msg.data = self._on_pos
        self.state = True

    def off(self) -> None:
        self.msg.data = self._off_pos
        self.state = False

    def change_position(self, scale: float) -> None:
        """Shift the commanded position by ``scale`` steps."""
        self.msg.data = self.msg.data + scale * _PER_CHANGE_POSITION

    def set_zero(self) -> None:
        pass


class CardCommandSender(CommandSenderBase):
    """Moves a card joint to a long, short or off position."""

    message_type = Float64Msg

    def __init__(self, params: Mapping[str, Any] | None, publish: Publish | None) -> None:
        super().__init__(params, publish)
        params = params or {}
        self._long_pos = float(_require(params, "long_pos"))
        self._short_pos = float(_require(params, "short_pos"))
        self._off_pos = float(_require(params, "off_pos"))
        self.state = False

    def long_on(self) -> None:
        self.msg.data = self._long_pos
        self.state = True

    def short_on(self) -> None:
        self.msg.data = self._short_pos
        self.state = True

    def off(self) -> None:
        self.msg.data = self._off_pos
        self.state = False

    def set_zero(self) -> None:
        pass


def _joint_index(joint_state: JointState, joint: str) -> int:
    try:
        return joint_state.name.index(joint)
    except ValueError:
        return -1


class JointJogCommandSender(CommandSenderBase):
    """Jogs one joint by a fixed step from its measured position."""

    message_type = Float64Msg

    def __init__(self, params: Mapping[str, Any] | None, publish: Publish | None, joint_state: JointState) -> None:
        super().__init__(params, publish)
        params = params or {}
        self.joint = str(_require(params, "joint"))
        self._step = float(_require(params, "step"))
        self._joint_state = joint_state

    def reset(self) -> None:
        """Start from the joint's measured position, or NaN if it is unknown."""
        index = _joint_index(self._joint_state, self.joint)
        if 0 <= index < len(self._joint_state.position):
            self.msg.data = float(self._joint_state.position[index])
        else:
            self.msg.data = math.nan

    def plus(self) -> None:
        self.msg.data += self._step
        self.send_command(0.0)

    def minus(self) -> None:
        self.msg.data -= self._step
        self.send_command(0.0)

    def set_zero(self) -> None:
        pass


class JointPointCommandSender(CommandSenderBase):
    """Sends a position set point to one joint."""

    message_type = Float64Msg

    def __init__(self, params: Mapping[str, Any] | None, publish: Publish | None, joint_state: JointState) -> None:
        super().__init__(params, publish)
        params = params or {}
        self.joint = str(_require(params, "joint"))
        self._joint_state = joint_state
        self._index = 0

    def set_point(self, point: float) -> None:
        self.msg.data = float(point)

    def get_index(self) -> int:
        """Index of the joint in the joint state, or -1 if it is absent."""
        index = _joint_index(self._joint_state, self.joint)
        if index < 0:
            logger.error("Can not find joint %s", self.joint)
            return -1
        self._index = index
        return index

    def set_zero(self) -> None:
        pass


class CameraSwitchCommandSender(CommandSenderBase):
    """Toggles between two cameras by name."""

    message_type = StringMsg

    def __init__(self, params: Mapping[str, Any] | None, publish: Publish | None) -> None:
        super().__init__(params, publish)
        params = params or {}
        self._camera1_name = str(_require(params, "camera1_name"))
        self._camera2_name = str(_require(params, "camera2_name"))
        self.msg.data = self._camera1_name

    def switch_camera(self) -> None:
        self.msg.data = self._camera2_name if self.msg.data == self._camera1_name else self._camera1_name

    def set_zero(self) -> None:
        pass


class MultiDofCommandSender(CommandSenderBase):
    """Six values sent together to a multi-axis controller."""

    message_type = MultiDofCmd
    stamped = True

    @property
    def mode(self) -> int:
        return self.msg.mode

    def set_group_value(
        self,
        linear_x: float,
        linear_y: float,
        linear_z: float,
        angular_x: float,
        angular_y: float,
        angular_z: float,
    ) -> None:
        self.msg.linear_x = linear_x
        self.msg.linear_y = linear_y
        self.msg.linear_z = linear_z
        self.msg.angular_x = angular_x
        self.msg.angular_y = angular_y
        self.msg.angular_z = angular_z

    def set_zero(self) -> None:
        self.set_group_value(0.0, 0.0, 0.0, 0.0, 0.0, 0.0)


class DoubleBarrelCommandSender:
    """Two shooters sharing one feeder; switches barrel when one runs hot.

    ``publishers`` maps ``"shooter_ID1"``, ``"shooter_ID2"`` and ``"barrel"``
    to the functions that publish their commands.
    """

    def __init__(
        self,
        params: Mapping[str, Any] | None,
        publishers: Mapping[str, Publish] | None = None,
        clock: Callable[[], float] = _time.monotonic,
    ) -> None:
        params = params or {}
        publishers = publishers or {}
        self._clock = clock
        self.joint_state = JointState()
        self.shooter_id1 = ShooterCommandSender(
            get_param(params, "shooter_ID1", {}) or {}, publishers.get("shooter_ID1")
        )
        self.shooter_id2 = ShooterCommandSender(
            get_param(params, "shooter_ID2", {}) or {}, publishers.get("shooter_ID2")
        )
        barrel_params = get_param(params, "barrel", {}) or {}
        self.barrel_command_sender = JointPointCommandSender(barrel_params, publishers.get("barrel"), self.joint_state)

        self._is_double_barrel = bool(get_param(barrel_params, "is_double_barrel", False))
        self._id1_point = float(get_param(barrel_params, "id1_point", 0.0))
        self._id2_point = float(get_param(barrel_params, "id2_point", 0.0))
        self._frequency_threshold = float(get_param(barrel_params, "frequency_threshold", 0.0))
        self._check_launch_threshold = float(get_param(barrel_params, "check_launch_threshold", 0.0))
        self._check_switch_threshold = float(get_param(barrel_params, "check_switch_threshold", 0.0))
        self._ready_duration = float(get_param(barrel_params, "ready_duration", 0.0))
        self._switching_duration = float(get_param(barrel_params, "switching_duration", 0.0))

        self._need_switch = False
        self._is_switching = False
        self._last_switch_time = 0.0
        self._last_push_time = 0.0
        self._trigger_error = 0.0
        self._cooling_warned = False

    def joint_state_callback(self, data: JointState) -> None:
        """Replace the joint state in place so the barrel sender sees it."""
        self.joint_state.name[:] = list(data.name)
        self.joint_state.position[:] = list(data.position)

    def trigger_state_callback(self, error: float) -> None:
        self._trigger_error = float(error)

    def update_game_robot_status(self, data: GameRobotStatus) -> None:
        self.shooter_id1.update_game_robot_status(data)
        self.shooter_id2.update_game_robot_status(data)

    def update_power_heat_data(self, data: PowerHeatData) -> None:
        self.shooter_id1.heat_limit.set_cooling_heat_of_shooter(data)
        self.shooter_id2.heat_limit.set_cooling_heat_of_shooter(data)

    def update_referee_status(self, status: bool) -> None:
        self.shooter_id1.update_referee_status(status)
        self.shooter_id2.update_referee_status(status)

    def update_gimbal_des_error(self, error: GimbalDesError) -> None:
        self.shooter_id1.update_gimbal_des_error(error)
        self.shooter_id2.update_gimbal_des_error(error)

    def update_track_data(self, data: TrackData) -> None:
        self.shooter_id1.update_track_data(data)
        self.shooter_id2.update_track_data(data)

    def update_suggest_fire_data(self, data: bool) -> None:
        self.shooter_id1.update_suggest_fire_data(data)
        self.shooter_id2.update_suggest_fire_data(data)

    def update_shoot_beforehand_cmd(self, data: ShootBeforehandCmd) -> None:
        self.shooter_id1.update_shoot_beforehand_cmd(data)
        self.shooter_id2.update_shoot_beforehand_cmd(data)

    def set_mode(self, mode: int) -> None:
        self._barrel().set_mode(mode)

    def set_zero(self) -> None:
        self._barrel().set_zero()

    def check_error(self, time: float) -> None:
        self._barrel().check_error(time)

    def send_command(self, time: float) -> None:
        if self._check_switch():
            self._need_switch = True
        if self._need_switch:
            self._switch_barrel()
        self._check_launch()
        barrel = self._barrel()
        if barrel.msg.mode == ShootCmd.PUSH:
            self._last_push_time = time
        barrel.send_command(time)

    def init(self) -> None:
        """Point at the first barrel and stop both shooters."""
        now = self._clock()
        self.barrel_command_sender.set_point(self._id1_point)
        self.shooter_id1.set_mode(ShootCmd.STOP)
        self.shooter_id2.set_mode(ShootCmd.STOP)
        self.barrel_command_sender.send_command(now)
        self.shooter_id1.send_command(now)
        self.shooter_id2.send_command(now)

    def set_armor_type(self, armor_type: int) -> None:
        self.shooter_id1.set_armor_type(armor_type)
        self.shooter_id2.set_armor_type(armor_type)

    def set_shoot_frequency(self, mode: int) -> None:
        self._barrel().set_shoot_frequency(mode)

    def get_shoot_frequency(self) -> int:
        return self._barrel().get_shoot_frequency()

    def get_speed(self) -> float:
        return self._barrel().get_speed()

    def _barrel(self) -> ShooterCommandSender:
        if self.barrel_command_sender.msg.data == self._id1_point:
            return self.shooter_id1
        return self.shooter_id2

    def _switch_barrel(self) -> None:
        now = self._clock()
        time_to_switch = math.fmod(abs(self._trigger_error), 2.0 * math.pi) < self._check_switch_threshold
        self.set_mode(ShootCmd.READY)
        if time_to_switch or now - self._last_push_time > self._ready_duration:
            if self.barrel_command_sender.msg.data == self._id2_point:
                self.barrel_command_sender.set_point(self._id1_point)
            else:
                self.barrel_command_sender.set_point(self._id2_point)
            self.barrel_command_sender.send_command(now)
            self._last_switch_time = now
            self._need_switch = False
            self._is_switching = True

    def _check_launch(self) -> None:
        if not self._is_switching:
            return
        now = self._clock()
        self.set_mode(ShootCmd.READY)
        if now - self._last_switch_time > self._switching_duration:
            self._is_switching = False
            return
        index = self.barrel_command_sender.get_index()
        if 0 <= index < len(self.joint_state.position):
            error = abs(self.joint_state.position[index] - self.barrel_command_sender.msg.data)
            if error < self._check_launch_threshold:
                self._is_switching = False

    def _check_switch(self) -> bool:
        if not self._is_double_barrel:
            return False
        if self.shooter_id1.heat_limit.cooling_limit == 0 or self.shooter_id2.heat_limit.cooling_limit == 0:
            if not self._cooling_warned:
                logger.warning("Can not get cooling limit")
                self._cooling_warned = True
            return False
        threshold = self._frequency_threshold
        freq1 = self.shooter_id1.heat_limit.get_shoot_frequency()
        freq2 = self.shooter_id2.heat_limit.get_shoot_frequency()
        if freq1 < threshold or freq2 < threshold:
            if self._barrel() is self.shooter_id1:
                return freq1 < threshold and freq2 > threshold
            return freq2 < threshold and freq1 > threshold
        return False