import math

import pytest

from rmdecision.math_utils import alpha, angular_minus, min_abs, sgn, square

ANGLE_PAIRS = [
    (0.1, 2 * math.pi - 0.1),
    (3.0, -3.0),
    (-1.0, 1.0),
    (10.0, 0.5),
    (0.0, math.pi / 2),
    (-7.0, 4.0),
]


@pytest.mark.parametrize("a,b", ANGLE_PAIRS)
def test_angular_minus_is_within_half_turn(a, b):
    result = angular_minus(a, b)
    assert -math.pi - 1e-12 <= result <= math.pi + 1e-12


@pytest.mark.parametrize("a,b", ANGLE_PAIRS)
def test_angular_minus_is_congruent_to_difference(a, b):
    result = angular_minus(a, b)
    remainder = math.remainder(a - b - result, 2 * math.pi)
    assert abs(remainder) < 1e-9


def test_angular_minus_wraps_across_zero():
    assert angular_minus(0.1, 2 * math.pi - 0.1) == pytest.approx(0.2)


def test_angular_minus_of_equal_angles_is_zero():
    assert angular_minus(1.3, 1.3) == pytest.approx(0.0)


@pytest.mark.parametrize("a,b", [(5.0, 2.0), (-5.0, 2.0), (1.0, 3.0), (-1.0, 3.0)])
def test_min_abs_clamps_magnitude_and_keeps_sign(a, b):
    result = min_abs(a, b)
    assert abs(result) <= b
    assert math.copysign(1.0, result) == math.copysign(1.0, a)
    if abs(a) < b:
        assert result == a


@pytest.mark.parametrize("val", [-4.5, -1, 0, 2, 7.25])
def test_sgn_times_magnitude_restores_value(val):
    assert sgn(val) * abs(val) == val
    assert sgn(val) in (-1, 0, 1)


def test_square():
    assert square(-3) == 9
    assert square(2.5) == square(-2.5)


def test_alpha_is_half_when_time_constant_matches_period():
    freq = 100.0
    assert alpha(freq / (2 * math.pi), freq) == pytest.approx(0.5)


def test_alpha_grows_with_cutoff_and_stays_in_unit_interval():
    values = [alpha(c, 200.0) for c in (0.1, 1.0, 10.0, 100.0)]
    assert all(0.0 < v < 1.0 for v in values)
    assert values == sorted(values)