"""The One Euro adaptive low-pass filter."""

from __future__ import annotations

from rmdecision.math_utils import alpha


class OneEuroFilter:
    """Low-pass filter whose cutoff rises with the signal's speed."""

    def __init__(self, freq: float, mincutoff: float, beta: float, dcutoff: float) -> None:
        self.freq = freq
        self.mincutoff = mincutoff
        self.beta = beta
        self.dcutoff = dcutoff
        self._first_time = True
        self._x_prev = 0.0
        self._hat_x_prev = 0.0
        self._d_hat_x_prev = 0.0
        self._filtered = 0.0

    def input(self, value: float) -> None:
        dx = 0.0 if self._first_time else (value - self._x_prev) * self.freq
        if self._first_time:
            self._d_hat_x_prev = dx
        d_alpha = alpha(self.dcutoff, self.freq)
        edx = d_alpha * dx + (1 - d_alpha) * self._d_hat_x_prev
        self._d_hat_x_prev = edx
        cutoff = self.mincutoff + self.beta * abs(edx)
        if self._first_time:
            self._hat_x_prev = value
        x_alpha = alpha(cutoff, self.freq)
        self._filtered = x_alpha * value + (1 - x_alpha) * self._hat_x_prev
        self._hat_x_prev = self._filtered
        self._first_time = False

    def output(self) -> float:
        return self._filtered

    def clear(self) -> None:
        """Forget the history; the last output stays until the next input."""
        self._first_time = True
        self._x_prev = 0.0
        self._hat_x_prev = 0.0
        self._d_hat_x_prev = 0.0