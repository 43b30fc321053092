import pytest

from rmdecision.traj_gen import MinTimeTraj, RampTraj


def make_ramp(start, end, acc, duration, t0=0.0):
    traj = RampTraj()
    traj.set_limit(acc)
    traj.set_state(start, end, t0)
    ok = traj.calc(duration)
    return traj, ok


def samples(t0, duration, n=400):
    return [t0 + duration * i / n for i in range(n + 1)]


def test_calc_rejects_too_small_acceleration():
    _, ok = make_ramp(0.0, 10.0, 1.0, 1.0)
    assert ok is False


def test_forward_ramp_endpoints():
    traj, ok = make_ramp(0.0, 1.0, 10.0, 2.0, t0=5.0)
    assert ok is True
    assert traj.get_pos(5.0) == pytest.approx(0.0)
    assert traj.get_pos(7.0) == pytest.approx(1.0)
    assert traj.get_pos(4.0) == 0.0
    assert traj.get_pos(100.0) == 1.0


def test_forward_ramp_is_monotone_and_continuous():
    traj, _ = make_ramp(0.0, 1.0, 10.0, 2.0, t0=5.0)
    positions = [traj.get_pos(t) for t in samples(5.0, 2.0)]
    assert all(b >= a - 1e-12 for a, b in zip(positions, positions[1:]))
    assert max(abs(b - a) for a, b in zip(positions, positions[1:])) < 0.02


def test_backward_ramp_reaches_target():
    traj, ok = make_ramp(1.0, 0.0, 10.0, 2.0)
    assert ok is True
    positions = [traj.get_pos(t) for t in samples(0.0, 2.0)]
    assert all(b <= a + 1e-12 for a, b in zip(positions, positions[1:]))
    assert positions[-1] == pytest.approx(0.0)


def test_velocity_and_acceleration_profile():
    traj, _ = make_ramp(0.0, 1.0, 10.0, 2.0)
    assert traj.get_vel(-1.0) == 0.0
    assert traj.get_vel(3.0) == 0.0
    assert traj.get_acc(-1.0) == 0.0
    assert traj.get_acc(0.0) == pytest.approx(10.0)
    assert traj.get_acc(1.0) == 0.0
    assert traj.get_acc(1.99) == pytest.approx(-10.0)
    assert traj.get_vel(1.0) > 0.0
    assert traj.get_vel(2.0) == pytest.approx(0.0, abs=1e-9)


def test_velocity_matches_position_slope():
    traj, _ = make_ramp(0.0, 1.0, 10.0, 2.0)
    h = 1e-6
    for t in (0.01, 1.0, 1.95):
        slope = (traj.get_pos(t + h) - traj.get_pos(t - h)) / (2 * h)
        assert traj.get_vel(t) == pytest.approx(slope, rel=1e-4, abs=1e-6)


def test_is_reach():
    traj, _ = make_ramp(0.0, 1.0, 10.0, 2.0, t0=1.0)
    assert traj.is_reach(2.5) is False
    assert traj.is_reach(3.0) is True


def test_min_time_traj_pushes_towards_target():
    traj = MinTimeTraj()
    traj.set_limit(2.0, 0.1, 0.01)
    traj.set_target(1.0)
    assert traj.get_tau(0.0, 0.0) == 2.0
    assert traj.get_tau(2.0, 0.0) == -2.0
    assert traj.is_reach() is False


def test_min_time_traj_brakes_when_fast():
    traj = MinTimeTraj()
    traj.set_limit(2.0, 1.0, 0.01)
    traj.set_target(1.0)
    assert traj.get_tau(0.9, 50.0) == -2.0


def test_min_time_traj_reaches_within_tolerance_and_resets():
    traj = MinTimeTraj()
    traj.set_limit(2.0, 0.1, 0.05)
    traj.set_target(1.0)
    assert traj.get_tau(1.01, 3.0) == 0.0
    assert traj.is_reach() is True
    traj.set_target(5.0)
    assert traj.is_reach() is False