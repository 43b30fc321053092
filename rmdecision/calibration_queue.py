"""Runs calibration controllers one after another until each reports done."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Mapping, Sequence
from typing import Any, Protocol

from rmdecision.service_caller import QueryCalibrationServiceCaller

logger = logging.getLogger(__name__)

QUERY_INTERVAL = 0.2

CallerFactory = Callable[[str], QueryCalibrationServiceCaller]


class _Switcher(Protocol):
    def start_controllers(self, controllers: Sequence[str]) -> None: ...

    def stop_controllers(self, controllers: Sequence[str]) -> None: ...


def _names(config: Mapping[str, Any], key: str) -> list[str]:
    if key not in config:
        raise ValueError(f"calibration entry has no {key!r}")
    value = config[key]
    if isinstance(value, (str, bytes)) or not isinstance(value, Sequence):
        raise ValueError(f"calibration entry {key!r} must be a list")
    return [str(name) for name in value]


class CalibrationService:
    """One calibration step: controllers to swap and services that report completion."""

    def __init__(self, config: Mapping[str, Any], caller_factory: CallerFactory) -> None:
        if not isinstance(config, Mapping):
            raise ValueError("calibration entry must be a mapping")
        self.start_controllers = _names(config, "start_controllers")
        self.stop_controllers = _names(config, "stop_controllers")
        self.query_services = [caller_factory(name) for name in _names(config, "services_name")]

    def set_calibrated_false(self) -> None:
        for service in self.query_services:
            service.response.is_calibrated = False

    def is_calibrated(self) -> bool:
        return all(service.is_calibrated() for service in self.query_services)

    def call_service(self) -> None:
        for service in self.query_services:
            service.call_service()


class CalibrationQueue:
    """Steps through calibration services; it starts calibrated until ``reset``."""

    def __init__(
        self,
        config: Any,
        caller_factory: CallerFactory,
        controller_manager: _Switcher,
        use_sim_time: bool = False,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._controller_manager = controller_manager
        self._switched = False
        self._services: list[CalibrationService] = []
        # Calibration is skipped in simulation.
        if not use_sim_time and isinstance(config, (list, tuple)):
            self._services = [CalibrationService(entry, caller_factory) for entry in config]
        self._last_query = clock()
        self._index = len(self._services)

    def reset(self) -> None:
        """Start calibrating from the first service."""
        if not self._services:
            return
        self._index = 0
        self._switched = False
        for service in self._services:
            service.set_calibrated_false()

    def update(self, time: float, flip_controllers: bool = True) -> None:
        if not self._services or self.is_calibrated():
            return
        current = self._services[self._index]
        if self._switched:
            if current.is_calibrated():
                if flip_controllers:
                    self._controller_manager.start_controllers(current.stop_controllers)
                self._controller_manager.stop_controllers(current.start_controllers)
                self._index += 1
                self._switched = False
            elif time - self._last_query > QUERY_INTERVAL:
                self._last_query = time
                current.call_service()
        else:
            self._switched = True
            self._controller_manager.start_controllers(current.start_controllers)
            self._controller_manager.stop_controllers(current.stop_controllers)

    def is_calibrated(self) -> bool:
        return self._index == len(self._services)

    def stop_controller(self) -> None:
        if not self._services:
            return
        if not self.is_calibrated() and self._switched:
            self._controller_manager.stop_controllers(self._services[self._index].stop_controllers)

    def stop(self) -> None:
        """Abandon calibration if a step is in progress."""
        if self._switched:
            self._index = len(self._services)
            self._switched = False