"""Linear Kalman filter."""

from __future__ import annotations

import numpy as np
from numpy.typing import ArrayLike


def _matrix(value: ArrayLike) -> np.ndarray:
    return np.atleast_2d(np.asarray(value, dtype=float))


def _vector(value: ArrayLike, size: int, name: str) -> np.ndarray:
    vec = np.asarray(value, dtype=float).reshape(-1)
    if vec.size != size:
        raise ValueError(f"{name} should have {size} elements, got {vec.size}")
    return vec


class KalmanFilter:
    """Discrete linear Kalman filter ``x' = A x + B u``, ``z = H x``."""

    def __init__(self, a: ArrayLike, b: ArrayLike, h: ArrayLike, q: ArrayLike, r: ArrayLike) -> None:
        a, b, h, q, r = (_matrix(m) for m in (a, b, h, q, r))
        n = a.shape[0]
        m = h.shape[0]
        if a.shape != (n, n):
            raise ValueError("A should be square matrix")
        if h.shape[1] != n:
            raise ValueError("H columns should be equal to A columns")
        if b.shape[0] != n:
            raise ValueError("B rows should be equal to A columns")
        if q.shape != (n, n):
            raise ValueError("The rows and columns of Q should be equal to the columns of A")
        if r.shape != (m, m):
            raise ValueError("The rows and columns of R should be equal to the rows of H")
        self._a, self._b, self._h, self._q, self._r = a, b, h, q, r
        self._n, self._m = n, m
        self._identity = np.eye(n)
        self._x = np.zeros(n)
        self._p = np.zeros((n, n))
        self._p_new = np.zeros((n, n))
        self._k = np.zeros((n, m))
        self._inited = False

    def clear(self, x: ArrayLike) -> None:
        """Reset the state to ``x`` with zero covariance and start filtering."""
        self._x = _vector(x, self._n, "x")
        self._inited = True
        self._k = np.zeros((self._n, self._m))
        self._p = np.zeros((self._n, self._n))
        self._p_new = np.zeros((self._n, self._n))

    def update(self, z: ArrayLike, r: ArrayLike | None = None) -> None:
        """Correct with measurement ``z``; a given ``r`` replaces the noise covariance."""
        if not self._inited:
            return
        if r is not None:
            r = _matrix(r)
            if r.shape != (self._m, self._m):
                raise ValueError("R should be square with the rows of H")
            self._r = r
        z = _vector(z, self._m, "z")
        h = self._h
        self._k = self._p_new @ h.T @ np.linalg.inv(h @ self._p_new @ h.T + self._r)
        self._x = self._x + self._k @ (z - h @ self._x)
        self._p = (self._identity - self._k @ h) @ self._p_new

    def predict(self, u: ArrayLike, q: ArrayLike | None = None) -> None:
        """Propagate with control ``u``; a given ``q`` replaces the process covariance."""
        if not self._inited:
            return
        if q is not None:
            q = _matrix(q)
            if q.shape != (self._n, self._n):
                raise ValueError("Q should be square with the size of A")
            self._q = q
        u = _vector(u, self._b.shape[1], "u")
        self._x = self._a @ self._x + self._b @ u
        self._p_new = self._a @ self._p @ self._a.T + self._q

    @property
    def state(self) -> np.ndarray:
        """Current state estimate."""
        return self._x.copy()