"""Chassis power limit chosen from referee and super-capacitor state."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Mapping
from enum import IntEnum
from typing import Any

from rmdecision.messages import CapacityData, ChassisCmd, GameRobotStatus, PowerHeatData
from rmdecision.params import get_param

logger = logging.getLogger(__name__)

_ENGINEER_POWER_LIMIT = 400
_CAPACITY_TIMEOUT = 0.3
_GYRO_CHASSIS_LIMIT = 80
_CHARGE_RATIO = 0.70


class PowerMode(IntEnum):
    CHARGE = 0
    BURST = 1
    NORMAL = 2
    ALLOFF = 3
    TEST = 4


def _load(params: Mapping[str, Any], name: str, default: Any, what: str) -> Any:
    value = get_param(params, name, None)
    if value is None:
        logger.error("%s no defined", what)
        return default
    return value


class PowerLimit:
    """Picks the chassis power limit for the current capacitor mode."""

    def __init__(self, params: Mapping[str, Any], clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._safety_power = float(_load(params, "safety_power", 0.0, "Safety power"))
        self._capacitor_threshold = float(_load(params, "capacitor_threshold", 0.0, "Capacitor threshold"))
        self._disable_cap_gyro_threshold = float(
            _load(params, "disable_cap_gyro_threshold", 0.0, "Disable cap gyro threshold")
        )
        self._enable_cap_gyro_threshold = float(
            _load(params, "enable_cap_gyro_threshold", 0.0, "Enable cap gyro threshold")
        )
        self._charge_power = float(_load(params, "charge_power", 0.0, "Charge power"))
        self._extra_power = float(_load(params, "extra_power", 0.0, "Extra power"))
        self._burst_power = float(_load(params, "burst_power", 0.0, "Burst power"))
        self._standard_power = float(_load(params, "standard_power", 0.0, "Standard power"))
        self._max_power_limit = int(_load(params, "max_power_limit", 70, "max power limit"))
        self._power_gain = float(_load(params, "power_gain", 0.0, "power gain"))
        self._buffer_threshold = float(_load(params, "buffer_threshold", 0.0, "buffer threshold"))
        self._is_new_capacitor = bool(_load(params, "is_new_capacitor", False, "is_new_capacitor"))
        self._total_burst_time = int(_load(params, "total_burst_time", 0, "total burst time"))

        self._chassis_power_buffer = 0
        self._robot_id = 0
        self._chassis_power_limit = 0
        self._cap_energy = 0.0
        self._power_buffer_threshold = 50.0
        self._expect_state = 0
        self._cap_state = 0
        self._capacitor_is_on = True
        self._allow_gyro_cap = False
        self._referee_is_online = False
        self._capacity_is_online = False
        self.start_burst_time = 0.0

    def update_safety_power(self, safety_power: int) -> None:
        if safety_power > 0:
            self._safety_power = safety_power
        logger.info("update safety power: %d", safety_power)

    def update_state(self, state: int) -> None:
        self._expect_state = PowerMode.ALLOFF if not self._capacitor_is_on else int(state)

    def update_cap_switch_state(self, state: bool) -> None:
        self._capacitor_is_on = bool(state)

    def set_game_robot_data(self, data: GameRobotStatus) -> None:
        self._robot_id = int(data.robot_id)
        self._chassis_power_limit = int(data.chassis_power_limit)

    def set_chassis_power_buffer(self, data: PowerHeatData) -> None:
        self._chassis_power_buffer = int(data.chassis_power_buffer)
        self._power_buffer_threshold = self._chassis_power_buffer * 0.8

    def set_capacity_data(self, data: CapacityData) -> None:
        self._capacity_is_online = self._clock() - data.stamp < _CAPACITY_TIMEOUT
        self._cap_energy = float(data.capacity_remain_charge)
        self._cap_state = int(data.state_machine_running_state)

    def set_referee_status(self, status: bool) -> None:
        self._referee_is_online = bool(status)

    @property
    def state(self) -> int:
        """The capacitor mode the limiter currently aims for."""
        return self._expect_state

    def set_gyro_power(self, chassis_cmd: ChassisCmd) -> None:
        if not self._allow_gyro_cap and self._cap_energy >= self._enable_cap_gyro_threshold:
            self._allow_gyro_cap = True
        if self._allow_gyro_cap and self._cap_energy <= self._disable_cap_gyro_threshold:
            self._allow_gyro_cap = False
        if self._allow_gyro_cap and self._chassis_power_limit < _GYRO_CHASSIS_LIMIT:
            chassis_cmd.power_limit = self._chassis_power_limit + self._extra_power
        else:
            self._expect_state = PowerMode.NORMAL

    def set_limit_power(self, chassis_cmd: ChassisCmd, is_gyro: bool) -> None:
        """Write the power limit for the current situation into ``chassis_cmd``."""
        if self._robot_id in (GameRobotStatus.BLUE_ENGINEER, GameRobotStatus.RED_ENGINEER):
            chassis_cmd.power_limit = _ENGINEER_POWER_LIMIT
            return
        if not self._referee_is_online:
            chassis_cmd.power_limit = self._safety_power
            return
        if not (self._capacity_is_online and self._expect_state != PowerMode.ALLOFF):
            self._normal(chassis_cmd)
            return
        if self._chassis_power_limit > self._burst_power:
            chassis_cmd.power_limit = self._burst_power
            return
        mode = self._expect_state if self._is_new_capacitor else self._cap_state
        if mode == PowerMode.NORMAL:
            self._normal(chassis_cmd)
        elif mode == PowerMode.BURST:
            self._burst(chassis_cmd, is_gyro)
        elif mode == PowerMode.CHARGE:
            chassis_cmd.power_limit = self._chassis_power_limit * _CHARGE_RATIO
        else:
            chassis_cmd.power_limit = 0.0

    def _normal(self, chassis_cmd: ChassisCmd) -> None:
        plus_power = (self._chassis_power_buffer - self._buffer_threshold) * self._power_gain
        chassis_cmd.power_limit = min(self._chassis_power_limit + plus_power, self._max_power_limit)

    def _burst(self, chassis_cmd: ChassisCmd, is_gyro: bool) -> None:
        if (
            self._cap_state != PowerMode.ALLOFF
            and self._cap_energy > self._capacitor_threshold
            and self._chassis_power_buffer > self._power_buffer_threshold
        ):
            if is_gyro:
                self.set_gyro_power(chassis_cmd)
            elif self._clock() - self.start_burst_time < self._total_burst_time:
                chassis_cmd.power_limit = self._burst_power
            else:
                chassis_cmd.power_limit = self._standard_power
        else:
            self._expect_state = PowerMode.NORMAL