"""Senders that build controller commands and publish them."""

from __future__ import annotations

import abc
import copy
import logging
import time as _time
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any, ClassVar

from rmdecision.heat_limit import HeatLimit
from rmdecision.interpolation import LinearInterp
from rmdecision.messages import (
    CapacityData,
    ChassisCmd,
    GameRobotStatus,
    GimbalCmd,
    GimbalDesError,
    PowerHeatData,
    ShootBeforehandCmd,
    ShootCmd,
    ShootData,
    TrackData,
)
from rmdecision.params import get_param
from rmdecision.power_limit import PowerLimit
from rmdecision.service_caller import StatusChangeRequest

logger = logging.getLogger(__name__)

Publish = Callable[[Any], Any]

_FRESH_MESSAGE_AGE = 0.1
_BUFF_TRACK_ID = 12
_AUTO_WHEEL_STEP = 5.0


@dataclass
class Twist:
    """Linear and angular velocity."""

    linear_x: float = 0.0
    linear_y: float = 0.0
    linear_z: float = 0.0
    angular_x: float = 0.0
    angular_y: float = 0.0
    angular_z: float = 0.0


def _load(params: Mapping[str, Any], name: str, default: Any, what: str) -> Any:
    value = get_param(params, name, None)
    if value is None:
        logger.error("%s no defined", what)
        return default
    return value


def _interp(params: Mapping[str, Any], name: str, what: str) -> LinearInterp:
    config = get_param(params, name, None)
    table = LinearInterp()
    if config is None:
        logger.error("%s no defined", what)
    else:
        table.init(config)
    return table


class CommandSenderBase(abc.ABC):
    """Holds one command message and publishes a copy of it on request."""

    message_type: ClassVar[type]
    stamped: ClassVar[bool] = False

    def __init__(self, params: Mapping[str, Any] | None, publish: Publish | None) -> None:
        params = params or {}
        topic = get_param(params, "topic", None)
        if topic is None:
            logger.error("Topic name no defined")
            topic = ""
        self.topic = str(topic)
        self.queue_size = int(get_param(params, "queue_size", 1))
        self._publish = publish
        message_type = getattr(type(self), "message_type", None)
        if message_type is None:
            raise TypeError(f"{type(self).__name__} defines no message_type")
        self.msg = message_type()

    def set_mode(self, mode: int) -> None:
        """Set the command mode, for messages that carry one."""
        if hasattr(self.msg, "mode"):
            self.msg.mode = int(mode)

    def send_command(self, time: float) -> None:
        if self.stamped:
            self.msg.stamp = time
        if self._publish is not None:
            self._publish(copy.deepcopy(self.msg))

    def update_game_robot_status(self, data: GameRobotStatus) -> None:
        """Hook for referee robot status; ignored by default."""

    def update_game_status(self, data: Any) -> None:
        """Hook for referee game status; ignored by default."""

    def update_capacity_data(self, data: CapacityData) -> None:
        """Hook for capacitor samples; ignored by default."""

    def update_power_heat_data(self, data: PowerHeatData) -> None:
        """Hook for referee power and heat data; ignored by default."""

    @abc.abstractmethod
    def set_zero(self) -> None:
        """Put the command into its resting state."""


class Vel2DCommandSender(CommandSenderBase):
    """Planar chassis velocity scaled by limits that depend on the power limit."""

    message_type = Twist

    def __init__(self, params: Mapping[str, Any] | None, publish: Publish | None) -> None:
        super().__init__(params, publish)
        params = params or {}
        self._max_linear_x = _interp(params, "max_linear_x", "Max X linear velocity")
        self._max_linear_y = _interp(params, "max_linear_y", "Max Y linear velocity")
        self._max_angular_z = _interp(params, "max_angular_z", "Max Z angular velocity")
        self._target_vel_yaw_threshold = float(get_param(params, "target_vel_yaw_threshold", 3.0))
        self.power_limit_topic = str(get_param(params, "power_limit_topic", ""))
        self._power_limit = 0.0
        self._vel_direction = 1.0
        self._track_data = TrackData()

    def chassis_cmd_callback(self, msg: ChassisCmd) -> None:
        self._power_limit = float(msg.power_limit)

    def update_track_data(self, data: TrackData) -> None:
        self._track_data = data

    def set_linear_x_vel(self, scale: float) -> None:
        self.msg.linear_x = scale * self._max_linear_x.output(self._power_limit)

    def set_linear_y_vel(self, scale: float) -> None:
        self.msg.linear_y = scale * self._max_linear_y.output(self._power_limit)

    def set_angular_z_vel(self, scale: float, limit: float | None = None) -> None:
        """Spin against the tracked target's yaw velocity when it is fast enough."""
        if self._track_data.v_yaw > self._target_vel_yaw_threshold:
            self._vel_direction = -1.0
        if self._track_data.v_yaw < -self._target_vel_yaw_threshold:
            self._vel_direction = 1.0
        angular_z = self._max_angular_z.output(self._power_limit)
        if limit is not None and angular_z > limit:
            angular_z = limit
        self.msg.angular_z = scale * angular_z * self._vel_direction

    def set_2d_vel(self, scale_x: float, scale_y: float, scale_z: float) -> None:
        self.set_linear_x_vel(scale_x)
        self.set_linear_y_vel(scale_y)
        self.set_angular_z_vel(scale_z)

    def set_zero(self) -> None:
        self.msg.linear_x = 0.0
        self.msg.linear_y = 0.0
        self.msg.angular_z = 0.0


class ChassisCommandSender(CommandSenderBase):
    """Chassis command whose power limit and acceleration follow the power limiter."""

    message_type = ChassisCmd
    stamped = True

    def __init__(
        self,
        params: Mapping[str, Any] | None,
        publish: Publish | None,
        *,
        clock: Callable[[], float] = _time.monotonic,
    ) -> None:
        super().__init__(params, publish)
        params = params or {}
        self.power_limit = PowerLimit(params, clock)
        self._accel_x = _interp(params, "accel_x", "Accel X")
        self._accel_y = _interp(params, "accel_y", "Accel Y")
        self._accel_z = _interp(params, "accel_z", "Accel Z")

    def update_safety_power(self, safety_power: int) -> None:
        self.power_limit.update_safety_power(safety_power)

    def update_game_robot_status(self, data: GameRobotStatus) -> None:
        self.power_limit.set_game_robot_data(data)

    def update_power_heat_data(self, data: PowerHeatData) -> None:
        self.power_limit.set_chassis_power_buffer(data)

    def update_capacity_data(self, data: CapacityData) -> None:
        self.power_limit.set_capacity_data(data)

    def update_referee_status(self, status: bool) -> None:
        self.power_limit.set_referee_status(status)

    def set_follow_vel_des(self, follow_vel_des: float) -> None:
        self.msg.follow_vel_des = follow_vel_des

    def send_chassis_command(self, time: float, is_gyro: bool) -> None:
        self.power_limit.set_limit_power(self.msg, is_gyro)
        self.msg.accel_x = self._accel_x.output(self.msg.power_limit)
        self.msg.accel_y = self._accel_y.output(self.msg.power_limit)
        self.msg.accel_z = self._accel_z.output(self.msg.power_limit)
        self.send_command(time)

    def set_zero(self) -> None:
        pass


class GimbalCommandSender(CommandSenderBase):
    """Gimbal rate command smoothed by a first-order filter."""

    message_type = GimbalCmd
    stamped = True

    def __init__(self, params: Mapping[str, Any] | None, publish: Publish | None) -> None:
        super().__init__(params, publish)
        params = params or {}
        self._max_yaw_vel = float(_load(params, "max_yaw_vel", 0.0, "Max yaw velocity"))
        self._max_pitch_vel = float(_load(params, "max_pitch_vel", 0.0, "Max pitch velocity"))
        self._time_constant_rc = float(_load(params, "time_constant_rc", 0.0, "Time constant rc"))
        self._time_constant_pc = float(_load(params, "time_constant_pc", 0.0, "Time constant pc"))
        self.track_timeout = float(_load(params, "track_timeout", 0.0, "Track timeout"))
        self._eject_sensitivity = float(get_param(params, "eject_sensitivity", 1.0))
        self.eject = False
        self.use_rc = False

    def set_rate(self, scale_yaw: float, scale_pitch: float) -> None:
        scale_yaw = max(-1.0, min(1.0, scale_yaw))
        scale_pitch = max(-1.0, min(1.0, scale_pitch))
        time_constant = self._time_constant_rc if self.use_rc else self._time_constant_pc
        gain = 0.001 / (time_constant + 0.001)
        self.msg.rate_yaw += (scale_yaw * self._max_yaw_vel - self.msg.rate_yaw) * gain
        self.msg.rate_pitch += (scale_pitch * self._max_pitch_vel - self.msg.rate_pitch) * gain
        if self.eject:
            self.msg.rate_yaw *= self._eject_sensitivity
            self.msg.rate_pitch *= self._eject_sensitivity

    def set_gimbal_traj(self, traj_yaw: float, traj_pitch: float) -> None:
        self.msg.traj_yaw = traj_yaw
        self.msg.traj_pitch = traj_pitch

    def set_gimbal_traj_frame_id(self, traj_frame_id: str) -> None:
        self.msg.traj_frame_id = traj_frame_id

    def set_bullet_speed(self, bullet_speed: float) -> None:
        self.msg.bullet_speed = bullet_speed

    def set_point(self, point: tuple[float, float, float]) -> None:
        self.msg.target_pos = tuple(point)

    def set_zero(self) -> None:
        self.msg.rate_yaw = 0.0
        self.msg.rate_pitch = 0.0


class ShooterCommandSender(CommandSenderBase):
    """Shooter command with heat-limited frequency and bullet-speed tuning."""

    message_type = ShootCmd
    stamped = True

    def __init__(
        self,
        params: Mapping[str, Any] | None,
        publish: Publish | None,
        *,
        heat_publish: Callable[[float], Any] | None = None,
    ) -> None:
        super().__init__(params, publish)
        params = params or {}
        self.heat_limit = HeatLimit(get_param(params, "heat_limit", {}) or {}, heat_publish)
        self._speeds = {
            ShootCmd.SPEED_10M_PER_SECOND: (10.0, float(get_param(params, "speed_10m_per_speed", 10.0)),
                                            float(get_param(params, "wheel_speed_10", 0.0))),
            ShootCmd.SPEED_15M_PER_SECOND: (15.0, float(get_param(params, "speed_15m_per_speed", 15.0)),
                                            float(get_param(params, "wheel_speed_15", 0.0))),
            ShootCmd.SPEED_16M_PER_SECOND: (16.0, float(get_param(params, "speed_16m_per_speed", 16.0)),
                                            float(get_param(params, "wheel_speed_16", 0.0))),
            ShootCmd.SPEED_18M_PER_SECOND: (18.0, float(get_param(params, "speed_18m_per_speed", 18.0)),
                                            float(get_param(params, "wheel_speed_18", 0.0))),
            ShootCmd.SPEED_30M_PER_SECOND: (30.0, float(get_param(params, "speed_30m_per_speed", 30.0)),
                                            float(get_param(params, "wheel_speed_30", 0.0))),
        }
        self._speed_oscillation = float(get_param(params, "speed_oscillation", 1.0))
        self._extra_wheel_speed_once = float(get_param(params, "extra_wheel_speed_once", 0.0))
        self._deploy_wheel_speed = float(get_param(params, "deploy_wheel_speed", 410.0))
        auto = get_param(params, "auto_wheel_speed", None)
        if auto is None:
            logger.info("auto_wheel_speed no defined, set to false.")
            auto = False
        self._auto_wheel_speed = bool(auto)
        accel_tol = get_param(params, "target_acceleration_tolerance", None)
        if accel_tol is None:
            logger.info("target_acceleration_tolerance no defined, set to zero.")
            accel_tol = 0.0
        self._target_acceleration_tolerance = float(accel_tol)
        self._track_armor_error_tolerance = float(
            _load(params, "track_armor_error_tolerance", 0.0, "track armor error tolerance")
        )
        self._untrack_armor_error_tolerance = float(
            get_param(params, "untrack_armor_error_tolerance", self._track_armor_error_tolerance)
        )
        self._track_buff_error_tolerance = float(
            get_param(params, "track_buff_error_tolerance", self._track_armor_error_tolerance)
        )
        self._max_track_target_vel = float(_load(params, "max_track_target_vel", 9.0, "max track target vel"))

        self._speed_des = 0.0
        self._speed_limit = 0.0
        self._wheel_speed_des = 0.0
        self._last_bullet_speed = 0.0
        self._total_extra_wheel_speed = 0.0
        self.deploy = False
        self._track_data = TrackData()
        self._gimbal_des_error = GimbalDesError()
        self._shoot_beforehand_cmd = ShootBeforehandCmd()
        self._shoot_data = ShootData()
        self._suggest_fire = False
        self._armor_type = 0

    def update_game_robot_status(self, data: GameRobotStatus) -> None:
        self.heat_limit.set_status_of_shooter(data)

    def update_power_heat_data(self, data: PowerHeatData) -> None:
        self.heat_limit.set_cooling_heat_of_shooter(data)

    def update_referee_status(self, status: bool) -> None:
        self.heat_limit.set_referee_status(status)

    def update_gimbal_des_error(self, error: GimbalDesError) -> None:
        self._gimbal_des_error = error

    def update_shoot_beforehand_cmd(self, data: ShootBeforehandCmd) -> None:
        self._shoot_beforehand_cmd = data

    def update_track_data(self, data: TrackData) -> None:
        self._track_data = data

    def update_suggest_fire_data(self, data: bool) -> None:
        self._suggest_fire = bool(data)

    def update_shoot_data(self, data: ShootData) -> None:
        """Nudge the wheel speed so measured bullet speed tracks the desired one."""
        self._shoot_data = data
        if not self._auto_wheel_speed:
            return
        if self._last_bullet_speed == 0.0:
            self._last_bullet_speed = self._speed_des
        if data.bullet_speed != self._last_bullet_speed:
            if (
                self._last_bullet_speed - self._speed_des >= self._speed_oscillation
                or data.bullet_speed > self._speed_limit
            ):
                self._total_extra_wheel_speed -= _AUTO_WHEEL_STEP
            elif self._speed_des - self._last_bullet_speed > self._speed_oscillation:
                self._total_extra_wheel_speed += _AUTO_WHEEL_STEP
        if data.bullet_speed != 0.0:
            self._last_bullet_speed = data.bullet_speed

    def check_error(self, time: float) -> None:
        """Hold fire (PUSH to READY) while the aim is off or fire is advised against."""
        if self.msg.mode == ShootCmd.PUSH and time - self._shoot_beforehand_cmd.stamp < _FRESH_MESSAGE_AGE:
            if self._shoot_beforehand_cmd.cmd == ShootBeforehandCmd.ALLOW_SHOOT:
                return
            if self._shoot_beforehand_cmd.cmd == ShootBeforehandCmd.BAN_SHOOT:
                self.set_mode(ShootCmd.READY)
                return
        if self._track_data.id == _BUFF_TRACK_ID:
            tolerance = self._track_buff_error_tolerance
        elif abs(self._track_data.v_yaw) < self._max_track_target_vel:
            tolerance = self._track_armor_error_tolerance
        else:
            tolerance = self._untrack_armor_error_tolerance
        aim_off = (
            self._gimbal_des_error.error > tolerance
            and time - self._gimbal_des_error.stamp < _FRESH_MESSAGE_AGE
        ) or self._track_data.accel > self._target_acceleration_tolerance
        hold_outpost = not self._suggest_fire and self._armor_type == StatusChangeRequest.ARMOR_OUTPOST_BASE
        if (aim_off or hold_outpost) and self.msg.mode == ShootCmd.PUSH:
            self.set_mode(ShootCmd.READY)

    def send_command(self, time: float) -> None:
        self.msg.wheel_speed = self.get_wheel_speed_des()
        self.msg.hz = self.heat_limit.get_shoot_frequency()
        super().send_command(time)

    def get_speed(self) -> float:
        self.set_speed_des_and_wheel_speed_des()
        return self._speed_des

    def get_wheel_speed_des(self) -> float:
        self.set_speed_des_and_wheel_speed_des()
        base = self._deploy_wheel_speed if self.deploy else self._wheel_speed_des
        return base + self._total_extra_wheel_speed

    def set_speed_des_and_wheel_speed_des(self) -> None:
        entry = self._speeds.get(self.heat_limit.get_speed_limit())
        if entry is not None:
            self._speed_limit, self._speed_des, self._wheel_speed_des = entry

    def drop_speed(self) -> None:
        self._total_extra_wheel_speed -= self._extra_wheel_speed_once

    def raise_speed(self) -> None:
        self._total_extra_wheel_speed += self._extra_wheel_speed_once

    def set_armor_type(self, armor_type: int) -> None:
        self._armor_type = int(armor_type) & 0xFF

    def set_shoot_frequency(self, mode: int) -> None:
        self.heat_limit.set_shoot_frequency(mode)

    def get_shoot_frequency(self) -> int:
        return self.heat_limit.shoot_frequency_mode

    def set_zero(self) -> None:
        pass