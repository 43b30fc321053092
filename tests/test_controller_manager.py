import threading

from rmdecision.controller_manager import ControllerManager
from rmdecision.service_caller import SwitchControllerResponse, SwitchControllersServiceCaller

CONTROLLERS = {
    "state_controllers": ["joint_state"],
    "main_controllers": ["chassis", "gimbal"],
    "calibration_controllers": ["trigger_calibration"],
}


class SwitchClient:
    def __init__(self):
        self.calls = []

    def __call__(self, request):
        self.calls.append((list(request.start_controllers), list(request.stop_controllers)))
        return SwitchControllerResponse(True)


def make_manager(controllers=CONTROLLERS, load_ok=True):
    loaded = []

    def load(name):
        loaded.append(name)
        return load_ok

    client = SwitchClient()
    caller = SwitchControllersServiceCaller(client)
    manager = ControllerManager(controllers, load, caller)
    return manager, caller, client, loaded


def test_loads_every_controller_in_order():
    _, _, _, loaded = make_manager()
    assert loaded == ["joint_state", "chassis", "gimbal", "trigger_calibration"]


def test_missing_list_loads_nothing():
    manager, _, client, loaded = make_manager(controllers=None)
    manager.start_main_controllers()
    manager.update()
    assert loaded == []
    assert client.calls == []


def test_load_controller_reports_result():
    manager, _, _, _ = make_manager(load_ok=False)
    assert manager.load_controller("chassis") is False


def test_update_sends_main_controllers():
    manager, caller, client, _ = make_manager()
    manager.start_main_controllers()
    manager.stop_calibration_controllers()
    manager.update()
    caller.wait(5.0)
    assert client.calls == [(["chassis", "gimbal"], ["trigger_calibration"])]


def test_stop_cancels_start_of_same_controller():
    manager, caller, client, _ = make_manager()
    manager.start_controller("gimbal")
    manager.start_controller("gimbal")
    manager.stop_controller("gimbal")
    manager.update()
    caller.wait(5.0)
    assert client.calls == [([], ["gimbal"])]


def test_start_cancels_stop_of_same_controller():
    manager, caller, client, _ = make_manager()
    manager.stop_main_controllers()
    manager.start_controller("chassis")
    manager.update()
    caller.wait(5.0)
    assert client.calls == [(["chassis"], ["gimbal"])]


def test_empty_buffers_send_nothing_and_are_cleared():
    manager, caller, client, _ = make_manager()
    manager.update()
    assert client.calls == []
    manager.start_state_controllers()
    manager.update()
    caller.wait(5.0)
    manager.update()
    caller.wait(5.0)
    assert client.calls == [(["joint_state"], [])]


def test_update_waits_while_calling():
    release = threading.Event()
    calls = []

    def blocking(request):
        calls.append(list(request.start_controllers))
        release.wait(5.0)
        return SwitchControllerResponse(True)

    caller = SwitchControllersServiceCaller(blocking)
    manager = ControllerManager(CONTROLLERS, lambda name: True, caller)
    manager.start_state_controllers()
    manager.update()
    assert manager.is_calling() is True
    manager.start_main_controllers()
    manager.update()
    release.set()
    caller.wait(5.0)
    assert manager.is_calling() is False
    manager.update()
    caller.wait(5.0)
    assert calls == [["joint_state"], ["chassis", "gimbal"]]