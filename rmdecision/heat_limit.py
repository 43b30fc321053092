"""Shooting frequency limited by barrel heat."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Mapping
from enum import IntEnum
from typing import Any

from rmdecision.messages import GameRobotStatus, PowerHeatData, ShootCmd
from rmdecision.params import get_param

logger = logging.getLogger(__name__)


class ShootHz(IntEnum):
    LOW = 0
    HIGH = 1
    BURST = 2
    MINIMAL = 3


def _load(params: Mapping[str, Any], name: str, default: Any, what: str) -> Any:
    value = get_param(params, name, None)
    if value is None:
        logger.error("%s no defined", what)
        return default
    return value


class HeatLimit:
    """Keeps the shooter below its heat limit using referee data or a local heat model.

    The local heat model cools down when ``timer_callback`` is called, which is
    expected every ``TIMER_PERIOD`` seconds.
    """

    TIMER_PERIOD = 0.1

    def __init__(self, params: Mapping[str, Any], publish: Callable[[float], Any] | None = None) -> None:
        self._low_shoot_frequency = float(_load(params, "low_shoot_frequency", 0.0, "Low shoot frequency"))
        self._high_shoot_frequency = float(_load(params, "high_shoot_frequency", 0.0, "High shoot frequency"))
        self._burst_shoot_frequency = float(_load(params, "burst_shoot_frequency", 0.0, "Burst shoot frequency"))
        self._minimal_shoot_frequency = float(
            _load(params, "minimal_shoot_frequency", 0.0, "Minimal shoot frequency")
        )
        self._safe_shoot_frequency = float(_load(params, "safe_shoot_frequency", 0.0, "Safe shoot frequency"))
        self._heat_coeff = float(_load(params, "heat_coeff", 0.0, "Heat coeff"))
        self._type = str(_load(params, "type", "", "Shooter type"))
        self._heat_protect_threshold = float(
            _load(params, "local_heat_protect_threshold", 0.0, "Local heat protect threshold")
        )
        self._use_local_heat = bool(get_param(params, "use_local_heat", True))
        self._bullet_heat = 100.0 if self._type == "ID1_42MM" else 10.0
        self._publish = publish

        self._state = 0
        self._shoot_frequency = 0.0
        self._referee_is_online = False
        self._last_shoot_state = False
        self._cooling_limit = 0
        self._cooling_rate = 0
        self._cooling_heat = 0
        self._local_heat = 0.0
        self._lock = threading.Lock()

    def heat_callback(self, has_shoot: bool) -> None:
        """Add one bullet's heat on each rising edge of the shot signal."""
        with self._lock:
            if has_shoot and self._last_shoot_state != has_shoot:
                self._local_heat += self._bullet_heat
            self._last_shoot_state = bool(has_shoot)

    def timer_callback(self) -> None:
        """Cool the local heat model by one period and publish it."""
        with self._lock:
            if self._local_heat > 0.0:
                self._local_heat -= self._cooling_rate * self.TIMER_PERIOD
            if self._local_heat < 0.0:
                self._local_heat = 0.0
            heat = self._local_heat
        if self._publish is not None:
            self._publish(heat)

    def set_status_of_shooter(self, data: GameRobotStatus) -> None:
        self._cooling_limit = int(data.shooter_cooling_limit - self._heat_protect_threshold)
        self._cooling_rate = int(data.shooter_cooling_rate)

    def set_cooling_heat_of_shooter(self, data: PowerHeatData) -> None:
        if self._type == "ID1_17MM":
            self._cooling_heat = int(data.shooter_id_1_17_mm_cooling_heat)
        elif self._type == "ID2_17MM":
            self._cooling_heat = int(data.shooter_id_2_17_mm_cooling_heat)
        elif self._type == "ID1_42MM":
            self._cooling_heat = int(data.shooter_id_1_42_mm_cooling_heat)

    def set_referee_status(self, status: bool) -> None:
        self._referee_is_online = bool(status)

    def get_shoot_frequency(self) -> float:
        """Allowed shooting frequency in Hz given the remaining heat margin."""
        with self._lock:
            if self._state == ShootHz.BURST:
                return self._shoot_frequency
            if self._use_local_heat or not self._referee_is_online:
                heat = self._local_heat
            else:
                heat = float(self._cooling_heat)
            margin = self._cooling_limit - heat
            bullet = self._bullet_heat
            sustained = self._cooling_rate / bullet
            if margin < bullet:
                return 0.0
            if margin == bullet:
                return sustained
            if margin <= bullet * self._heat_coeff:
                return margin / (bullet * self._heat_coeff) * (self._shoot_frequency - sustained) + sustained
            return self._shoot_frequency

    def get_speed_limit(self) -> int:
        """Refresh the expected frequency and return the muzzle speed code, -1 if unknown."""
        self._update_expect_shoot_frequency()
        if self._type in ("ID1_17MM", "ID2_17MM"):
            return ShootCmd.SPEED_30M_PER_SECOND
        if self._type == "ID1_42MM":
            return ShootCmd.SPEED_16M_PER_SECOND
        return -1

    @property
    def cooling_limit(self) -> int:
        return self._cooling_limit

    @property
    def cooling_heat(self) -> int:
        return self._cooling_heat

    def set_shoot_frequency(self, mode: int) -> None:
        self._state = int(mode) & 0xFF

    @property
    def shoot_frequency_mode(self) -> int:
        return self._state

    def _update_expect_shoot_frequency(self) -> None:
        frequencies = {
            ShootHz.BURST: self._burst_shoot_frequency,
            ShootHz.LOW: self._low_shoot_frequency,
            ShootHz.HIGH: self._high_shoot_frequency,
            ShootHz.MINIMAL: self._minimal_shoot_frequency,
        }
        with self._lock:
            self._shoot_frequency = frequencies.get(self._state, self._safe_shoot_frequency)