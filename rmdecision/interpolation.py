"""Piecewise linear lookup tables."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from itertools import pairwise


def _as_number(value: object) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"interpolation point coordinate must be a number, got {value!r}")
    return float(value)


class LinearInterp:
    """Linear interpolation over points sorted by abscissa, clamped at both ends."""

    def __init__(self, config: Iterable[Sequence[float]] | None = None) -> None:
        self._inputs: list[float] = []
        self._outputs: list[float] = []
        if config is not None:
            self.init(config)

    def init(self, config: Iterable[Sequence[float]]) -> None:
        """Append ``(x, y)`` points; abscissas must not decrease."""
        if isinstance(config, (str, bytes)) or not isinstance(config, (list, tuple)):
            raise ValueError("interpolation config must be a list of [x, y] pairs")
        points: list[tuple[float, float]] = []
        last = self._inputs[-1] if self._inputs else None
        for pair in config:
            if not isinstance(pair, (list, tuple)) or len(pair) != 2:
                raise ValueError(f"interpolation point must be an [x, y] pair, got {pair!r}")
            x, y = _as_number(pair[0]), _as_number(pair[1])
            if last is not None and x < last:
                raise ValueError(
                    f"Please sort the point's abscissa from smallest to largest. {x} < {last}"
                )
            points.append((x, y))
            last = x
        for x, y in points:
            self._inputs.append(x)
            self._outputs.append(y)

    def output(self, value: float) -> float:
        """Return the interpolated value at ``value``."""
        if not self._inputs:
            raise ValueError("interpolation table is empty")
        if value >= self._inputs[-1]:
            return self._outputs[-1]
        if value <= self._inputs[0]:
            return self._outputs[0]
        points = zip(self._inputs, self._outputs)
        for (x0, y0), (x1, y1) in pairwise(points):
            if x0 <= value <= x1 and x1 > x0:
                return y0 + (y1 - y0) / (x1 - x0) * (value - x0)
        raise RuntimeError("The point's abscissa aren't sorted from smallest to largest.")