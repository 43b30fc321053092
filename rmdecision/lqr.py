"""Continuous-time linear quadratic regulator."""

from __future__ import annotations

import numpy as np
from numpy.typing import ArrayLike


def _matrix(value: ArrayLike) -> np.ndarray:
    return np.atleast_2d(np.asarray(value, dtype=float))


def solve_riccati_arimoto_potter(a: ArrayLike, b: ArrayLike, q: ArrayLike, r: ArrayLike) -> np.ndarray:
    """Solve the continuous algebraic Riccati equation from the Hamiltonian's stable subspace."""
    a, b, q, r = (_matrix(m) for m in (a, b, q, r))
    n = a.shape[0]
    ham = np.block([[a, -b @ np.linalg.inv(r) @ b.T], [-q, -a.T]])
    eigenvalues, eigenvectors = np.linalg.eig(ham)
    stable = eigenvectors[:, eigenvalues.real < 0.0]
    if stable.shape[1] != n:
        raise ValueError(f"expected {n} stable eigenvalues, found {stable.shape[1]}")
    vs_1 = stable[:n, :]
    vs_2 = stable[n:, :]
    return (vs_2 @ np.linalg.inv(vs_1)).real


class Lqr:
    """LQR gain for ``dx/dt = A x + B u`` with costs ``Q`` and ``R``."""

    def __init__(self, a: ArrayLike, b: ArrayLike, q: ArrayLike, r: ArrayLike) -> None:
        a, b, q, r = (_matrix(m) for m in (a, b, q, r))
        n = a.shape[0]
        if a.shape != (n, n):
            raise ValueError("lqr: A should be square matrix")
        if b.shape[0] != n:
            raise ValueError("lqr: B rows should be equal to A rows")
        if q.shape != a.shape:
            raise ValueError("lqr: The rows and columns of Q should be equal to A")
        inputs = b.shape[1]
        if r.shape != (inputs, inputs):
            raise ValueError("lqr: The rows and columns of R should be equal to the cols of B")
        self._a, self._b, self._q, self._r = a, b, q, r
        self._k = np.zeros((inputs, n))

    def compute_k(self) -> bool:
        """Compute the gain; False if Q is not PSD symmetric or R not PD symmetric."""
        try:
            q_eig = np.linalg.eigvalsh(self._q)
            r_eig = np.linalg.eigvalsh(self._r)
        except np.linalg.LinAlgError:
            return False
        if np.any(q_eig < 0) or np.any(r_eig <= 0):
            return False
        if not (np.array_equal(self._q, self._q.T) and np.array_equal(self._r, self._r.T)):
            return False
        p = solve_riccati_arimoto_potter(self._a, self._b, self._q, self._r)
        self._k = np.linalg.inv(self._r) @ (self._b.T @ p.T)
        return True

    @property
    def k(self) -> np.ndarray:
        """Feedback gain matrix (inputs x states)."""
        return self._k.copy()