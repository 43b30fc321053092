"""Asynchronous callers for the services the decision layer depends on."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import Any, ClassVar

logger = logging.getLogger(__name__)

SWITCH_CONTROLLER_SERVICE = "/controller_manager/switch_controller"
STATUS_SWITCH_SERVICE = "/detection_nodelet/status_switch"


@dataclass
class SwitchControllerRequest:
    """Request to start and stop sets of controllers."""

    BEST_EFFORT: ClassVar[int] = 1
    STRICT: ClassVar[int] = 2

    start_controllers: list[str] = field(default_factory=list)
    stop_controllers: list[str] = field(default_factory=list)
    strictness: int = 0
    start_asap: bool = False


@dataclass
class SwitchControllerResponse:
    ok: bool = False


@dataclass
class QueryCalibrationRequest:
    """Calibration queries carry no arguments."""


@dataclass
class QueryCalibrationResponse:
    is_calibrated: bool = False


@dataclass
class StatusChangeRequest:
    """Detection settings: enemy colour, target kind, armor filter and exposure."""

    RED: ClassVar[int] = 0
    BLUE: ClassVar[int] = 1
    ARMOR: ClassVar[int] = 0
    BUFF: ClassVar[int] = 1
    ARMOR_ALL: ClassVar[int] = 0
    ARMOR_WITHOUT_OUTPOST: ClassVar[int] = 1
    ARMOR_OUTPOST_BASE: ClassVar[int] = 2
    EXPOSURE_LEVEL_0: ClassVar[int] = 0
    EXPOSURE_LEVEL_1: ClassVar[int] = 1
    EXPOSURE_LEVEL_2: ClassVar[int] = 2
    EXPOSURE_LEVEL_3: ClassVar[int] = 3
    EXPOSURE_LEVEL_4: ClassVar[int] = 4

    color: int = 0
    target: int = 0
    armor_target: int = 0
    exposure: int = 0


@dataclass
class StatusChangeResponse:
    switch_is_success: bool = False


ServiceClient = Callable[[Any], Any]


class ServiceCallerBase:
    """Calls a service in a background thread, one call at a time.

    ``client`` is called with the request and returns the response; returning
    ``None`` or raising counts as a failed call and keeps the previous response.
    """

    def __init__(self, client: ServiceClient, service_name: str = "", fail_limit: int = 0) -> None:
        if not service_name:
            raise ValueError("Service name no defined")
        self.service_name = service_name
        self._client = client
        self._fail_limit = int(fail_limit)
        self._fail_count = 0
        self._retry_logged = False
        self._failure_logged = False
        self.request = self._new_request()
        self.response = self._new_response()
        self._busy = threading.Lock()
        self._thread: threading.Thread | None = None

    def _new_request(self) -> Any:
        return None

    def _new_response(self) -> Any:
        return None

    def call_service(self) -> None:
        """Start a call unless one is already running."""
        if not self._busy.acquire(blocking=False):
            return
        try:
            thread = threading.Thread(target=self._calling_thread, daemon=True)
            self._thread = thread
            thread.start()
        except BaseException:
            self._busy.release()
            raise

    def is_calling(self) -> bool:
        return self._busy.locked()

    def wait(self, timeout: float | None = None) -> bool:
        """Wait for the running call to finish; True if none is running afterwards."""
        thread = self._thread
        if thread is not None:
            thread.join(timeout)
        return not self.is_calling()

    def _calling_thread(self) -> None:
        try:
            try:
                response = self._client(self.request)
            except Exception:
                logger.debug("Service %s raised", self.service_name, exc_info=True)
                response = None
            if response is None:
                self._on_failure()
            else:
                self.response = response
        finally:
            self._busy.release()

    def _on_failure(self) -> None:
        if not self._retry_logged:
            logger.info("Failed to call service on %s. Retrying now ...", self.service_name)
            self._retry_logged = True
        if self._fail_limit != 0:
            self._fail_count += 1
            if self._fail_count >= self._fail_limit:
                if not self._failure_logged:
                    logger.error("Failed to call service on %s", self.service_name)
                    self._failure_logged = True
                self._fail_count = 0


class SwitchControllersServiceCaller(ServiceCallerBase):
    """Starts and stops controllers, best effort and as soon as possible."""

    def __init__(
        self, client: ServiceClient, service_name: str = SWITCH_CONTROLLER_SERVICE, fail_limit: int = 0
    ) -> None:
        super().__init__(client, service_name, fail_limit)

    def _new_request(self) -> SwitchControllerRequest:
        return SwitchControllerRequest(strictness=SwitchControllerRequest.BEST_EFFORT, start_asap=True)

    def _new_response(self) -> SwitchControllerResponse:
        return SwitchControllerResponse()

    def start_controllers(self, controllers: Iterable[str]) -> None:
        self.request.start_controllers = list(controllers)

    def stop_controllers(self, controllers: Iterable[str]) -> None:
        self.request.stop_controllers = list(controllers)

    def get_ok(self) -> bool:
        if self.is_calling():
            return False
        return bool(self.response.ok)


class QueryCalibrationServiceCaller(ServiceCallerBase):
    """Asks a calibration controller whether it has finished."""

    def _new_request(self) -> QueryCalibrationRequest:
        return QueryCalibrationRequest()

    def _new_response(self) -> QueryCalibrationResponse:
        return QueryCalibrationResponse()

    def is_calibrated(self) -> bool:
        if self.is_calling():
            return False
        return bool(self.response.is_calibrated)


class SwitchDetectionCaller(ServiceCallerBase):
    """Changes the vision detector's settings; sends the defaults on creation."""

    def __init__(
        self, client: ServiceClient, service_name: str = STATUS_SWITCH_SERVICE, fail_limit: int = 0
    ) -> None:
        super().__init__(client, service_name, fail_limit)
        self.call_service()

    def _new_request(self) -> StatusChangeRequest:
        return StatusChangeRequest(
            target=StatusChangeRequest.ARMOR,
            exposure=StatusChangeRequest.EXPOSURE_LEVEL_0,
            armor_target=StatusChangeRequest.ARMOR_ALL,
        )

    def _new_response(self) -> StatusChangeResponse:
        return StatusChangeResponse()

    def set_enemy_color(self, robot_id: int, robot_color: str) -> None:
        """Target the colour opposite to our own; needs a known robot id."""
        if robot_id != 0:
            self.request.color = StatusChangeRequest.RED if robot_color == "blue" else StatusChangeRequest.BLUE
            name = "red" if self.request.color == StatusChangeRequest.RED else "blue"
            logger.info("Set enemy color: %s", name)
            self.call_service()
        else:
            logger.info("Set enemy color failed: referee offline")

    def set_color(self, color: int) -> None:
        self.request.color = int(color)

    def switch_enemy_color(self) -> None:
        self.request.color = int(self.request.color == StatusChangeRequest.RED)

    def switch_target_type(self) -> None:
        self.request.target = int(self.request.target == StatusChangeRequest.ARMOR)

    def set_target_type(self, target: int) -> None:
        self.request.target = int(target)

    def switch_armor_target_type(self) -> None:
        self.request.armor_target = int(self.request.armor_target == StatusChangeRequest.ARMOR_ALL)

    def set_armor_target_type(self, armor_target: int) -> None:
        self.request.armor_target = int(armor_target)

    def switch_exposure_level(self) -> None:
        if self.request.exposure == StatusChangeRequest.EXPOSURE_LEVEL_4:
            self.request.exposure = StatusChangeRequest.EXPOSURE_LEVEL_0
        else:
            self.request.exposure += 1

    def get_is_switch(self) -> bool:
        if self.is_calling():
            return False
        return bool(self.response.switch_is_success)