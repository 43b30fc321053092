"""Messages exchanged between the referee, the decision layer and the controllers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar


@dataclass
class GameRobotStatus:
    """Robot identity and limits reported by the referee system."""

    RED_HERO: ClassVar[int] = 1
    RED_ENGINEER: ClassVar[int] = 2
    BLUE_HERO: ClassVar[int] = 101
    BLUE_ENGINEER: ClassVar[int] = 102

    robot_id: int = 0
    chassis_power_limit: int = 0
    shooter_cooling_limit: int = 0
    shooter_cooling_rate: int = 0

    @property
    def is_engineer(self) -> bool:
        return self.robot_id in (self.RED_ENGINEER, self.BLUE_ENGINEER)


@dataclass
class PowerHeatData:
    """Chassis power buffer and barrel heat reported by the referee system."""

    chassis_power_buffer: int = 0
    shooter_id_1_17_mm_cooling_heat: int = 0
    shooter_id_2_17_mm_cooling_heat: int = 0
    shooter_id_1_42_mm_cooling_heat: int = 0


@dataclass
class CapacityData:
    """Super-capacitor sample from the power management board."""

    stamp: float = 0.0
    capacity_remain_charge: float = 0.0
    state_machine_running_state: int = 0


@dataclass
class ChassisCmd:
    """Command for the chassis controller."""

    mode: int = 0
    power_limit: float = 0.0
    follow_vel_des: float = 0.0
    accel_x: float = 0.0
    accel_y: float = 0.0
    accel_z: float = 0.0
    stamp: float = 0.0


@dataclass
class ShootCmd:
    """Command for the shooter controller."""

    STOP: ClassVar[int] = 0
    READY: ClassVar[int] = 1
    PUSH: ClassVar[int] = 2
    SPEED_10M_PER_SECOND: ClassVar[int] = 0
    SPEED_15M_PER_SECOND: ClassVar[int] = 1
    SPEED_16M_PER_SECOND: ClassVar[int] = 2
    SPEED_18M_PER_SECOND: ClassVar[int] = 3
    SPEED_30M_PER_SECOND: ClassVar[int] = 4

    mode: int = 0
    wheel_speed: float = 0.0
    hz: float = 0.0
    stamp: float = 0.0


@dataclass
class GimbalCmd:
    """Command for the gimbal controller."""

    mode: int = 0
    rate_yaw: float = 0.0
    rate_pitch: float = 0.0
    traj_yaw: float = 0.0
    traj_pitch: float = 0.0
    traj_frame_id: str = ""
    bullet_speed: float = 0.0
    target_pos: tuple[float, float, float] = (0.0, 0.0, 0.0)
    stamp: float = 0.0


@dataclass
class TrackData:
    """Target tracked by the vision pipeline."""

    id: int = 0
    v_yaw: float = 0.0
    accel: float = 0.0
    stamp: float = 0.0


@dataclass
class GimbalDesError:
    """Error between the gimbal's desired and actual aim."""

    error: float = 0.0
    stamp: float = 0.0


@dataclass
class ShootBeforehandCmd:
    """Advice from the aiming pipeline on whether to fire now."""

    JUDGE_BY_ERROR: ClassVar[int] = 0
    ALLOW_SHOOT: ClassVar[int] = 1
    BAN_SHOOT: ClassVar[int] = 2

    cmd: int = 0
    stamp: float = 0.0


@dataclass
class ShootData:
    """Measured muzzle speed of the last bullet."""

    bullet_speed: float = 0.0
    stamp: float = 0.0