import threading

import pytest

from rmdecision.service_caller import (
    SWITCH_CONTROLLER_SERVICE,
    QueryCalibrationResponse,
    QueryCalibrationServiceCaller,
    ServiceCallerBase,
    StatusChangeRequest,
    StatusChangeResponse,
    SwitchControllerRequest,
    SwitchControllerResponse,
    SwitchControllersServiceCaller,
    SwitchDetectionCaller,
)


class Recorder:
    def __init__(self, response):
        self.response = response
        self.requests = []

    def __call__(self, request):
        self.requests.append(request)
        return self.response


def test_empty_service_name_raises():
    with pytest.raises(ValueError):
        ServiceCallerBase(lambda request: None, "")


def test_switch_caller_defaults():
    caller = SwitchControllersServiceCaller(Recorder(SwitchControllerResponse(True)))
    assert caller.service_name == SWITCH_CONTROLLER_SERVICE
    assert caller.request.strictness == SwitchControllerRequest.BEST_EFFORT
    assert caller.request.start_asap is True


def test_start_controllers_copies_list():
    caller = SwitchControllersServiceCaller(Recorder(SwitchControllerResponse(True)))
    names = ["a", "b"]
    caller.start_controllers(names)
    caller.stop_controllers(["c"])
    names.clear()
    assert caller.request.start_controllers == ["a", "b"]
    assert caller.request.stop_controllers == ["c"]


def test_call_stores_response():
    client = Recorder(SwitchControllerResponse(True))
    caller = SwitchControllersServiceCaller(client)
    assert caller.get_ok() is False
    caller.call_service()
    assert caller.wait(5.0)
    assert caller.get_ok() is True
    assert client.requests == [caller.request]


def test_failed_call_keeps_response():
    def failing(request):
        raise RuntimeError("unreachable")

    caller = SwitchControllersServiceCaller(failing, fail_limit=2)
    caller.call_service()
    assert caller.wait(5.0)
    assert caller.get_ok() is False
    assert caller.is_calling() is False


def test_none_response_is_failure():
    caller = QueryCalibrationServiceCaller(lambda request: None, "calib")
    caller.response.is_calibrated = True
    caller.call_service()
    caller.wait(5.0)
    assert caller.is_calibrated() is True


def test_is_calling_while_blocked():
    release = threading.Event()
    calls = []

    def blocking(request):
        calls.append(request)
        release.wait(5.0)
        return SwitchControllerResponse(True)

    caller = SwitchControllersServiceCaller(blocking)
    caller.call_service()
    assert caller.is_calling() is True
    assert caller.get_ok() is False
    caller.call_service()
    release.set()
    assert caller.wait(5.0)
    assert caller.is_calling() is False
    assert caller.get_ok() is True
    assert len(calls) == 1


def test_query_calibration():
    caller = QueryCalibrationServiceCaller(Recorder(QueryCalibrationResponse(True)), "calib")
    assert caller.is_calibrated() is False
    caller.call_service()
    caller.wait(5.0)
    assert caller.is_calibrated() is True


def _detection(success=True):
    caller = SwitchDetectionCaller(Recorder(StatusChangeResponse(success)))
    caller.wait(5.0)
    return caller


def test_detection_calls_on_creation_with_defaults():
    client = Recorder(StatusChangeResponse(True))
    caller = SwitchDetectionCaller(client)
    caller.wait(5.0)
    assert len(client.requests) == 1
    assert caller.get_is_switch() is True
    assert caller.request.target == StatusChangeRequest.ARMOR
    assert caller.request.exposure == StatusChangeRequest.EXPOSURE_LEVEL_0
    assert caller.request.armor_target == StatusChangeRequest.ARMOR_ALL


def test_set_enemy_color():
    caller = _detection()
    caller.set_enemy_color(1, "blue")
    caller.wait(5.0)
    assert caller.request.color == StatusChangeRequest.RED
    caller.set_enemy_color(101, "red")
    caller.wait(5.0)
    assert caller.request.color == StatusChangeRequest.BLUE
    caller.set_enemy_color(0, "blue")
    assert caller.request.color == StatusChangeRequest.BLUE


def test_switch_enemy_color_toggles():
    caller = _detection()
    caller.set_color(StatusChangeRequest.RED)
    caller.switch_enemy_color()
    assert caller.request.color == StatusChangeRequest.BLUE
    caller.switch_enemy_color()
    assert caller.request.color == StatusChangeRequest.RED


def test_switch_target_and_armor_target():
    caller = _detection()
    caller.switch_target_type()
    assert caller.request.target == StatusChangeRequest.BUFF
    caller.switch_target_type()
    assert caller.request.target == StatusChangeRequest.ARMOR
    caller.set_armor_target_type(StatusChangeRequest.ARMOR_OUTPOST_BASE)
    caller.switch_armor_target_type()
    assert caller.request.armor_target == StatusChangeRequest.ARMOR_ALL
    caller.set_target_type(StatusChangeRequest.BUFF)
    assert caller.request.target == StatusChangeRequest.BUFF


def test_exposure_level_cycles():
    caller = _detection()
    caller.switch_exposure_level()
    assert caller.request.exposure == StatusChangeRequest.EXPOSURE_LEVEL_1
    for _ in range(4):
        caller.switch_exposure_level()
    assert caller.request.exposure == StatusChangeRequest.EXPOSURE_LEVEL_0