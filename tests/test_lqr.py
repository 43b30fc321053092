import numpy as np
import pytest

from rmdecision.lqr import Lqr, solve_riccati_arimoto_potter

A = np.array([[0.0, 1.0], [0.0, 0.0]])
B = np.array([[0.0], [1.0]])
Q = np.eye(2)
R = np.array([[1.0]])


def care_residual(a, b, q, r, p):
    return a.T @ p + p @ a - p @ b @ np.linalg.inv(r) @ b.T @ p + q


def test_riccati_solution_satisfies_care():
    p = solve_riccati_arimoto_potter(A, B, Q, R)
    assert np.allclose(care_residual(A, B, Q, R, p), 0.0, atol=1e-9)
    assert np.allclose(p, p.T, atol=1e-9)


def test_riccati_solution_for_three_states():
    a = np.array([[0.0, 1.0, 0.0], [0.0, 0.0, 1.0], [-1.0, -2.0, -0.5]])
    b = np.array([[0.0, 0.0], [1.0, 0.0], [0.0, 1.0]])
    q = np.diag([2.0, 1.0, 0.5])
    r = np.diag([1.0, 3.0])
    p = solve_riccati_arimoto_potter(a, b, q, r)
    assert np.allclose(care_residual(a, b, q, r, p), 0.0, atol=1e-8)


def test_gain_is_zero_before_compute():
    lqr = Lqr(A, B, Q, R)
    assert np.array_equal(lqr.k, np.zeros((1, 2)))


def test_compute_k_gives_stabilising_gain():
    lqr = Lqr(A, B, Q, R)
    assert lqr.compute_k() is True
    k = lqr.k
    assert k.shape == (1, 2)
    closed_loop = np.linalg.eigvals(A - B @ k)
    assert np.all(closed_loop.real < 0)
    p = solve_riccati_arimoto_potter(A, B, Q, R)
    assert np.allclose(k, np.linalg.inv(R) @ B.T @ p)


@pytest.mark.parametrize(
    "q,r",
    [
        (np.diag([1.0, -1.0]), np.array([[1.0]])),
        (np.eye(2), np.array([[0.0]])),
        (np.eye(2), np.array([[-2.0]])),
        (np.array([[1.0, 0.5], [0.0, 1.0]]), np.array([[1.0]])),
    ],
)
def test_compute_k_rejects_bad_weights(q, r):
    lqr = Lqr(A, B, q, r)
    assert lqr.compute_k() is False
    assert np.array_equal(lqr.k, np.zeros((1, 2)))


@pytest.mark.parametrize(
    "a,b,q,r",
    [
        (np.ones((2, 3)), B, Q, R),
        (A, np.ones((3, 1)), Q, R),
        (A, B, np.eye(3), R),
        (A, B, Q, np.eye(2)),
    ],
)
def test_dimension_mismatch_raises(a, b, q, r):
    with pytest.raises(ValueError):
        Lqr(a, b, q, r)