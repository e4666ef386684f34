# timeline/curve.py
from bisect import bisect_right
from typing import Callable, Iterable, List, Tuple

ShapeFn = Callable[[float], float]


def linear_falloff(x: float) -> float:
    return 1.0 - x


class Curve:
    """Keyframed curve with linear interpolation, held flat past the ends."""

    def __init__(self, keys: Iterable[Tuple[float, float]]):
        self.keys: List[Tuple[float, float]] = sorted((float(k), float(v)) for k, v in keys)
        if not self.keys:
            raise ValueError("Curve needs at least one key")
        self._times = [k for k, _ in self.keys]

    @classmethod
    def linear(cls, t0: float, v0: float, t1: float, v1: float) -> "Curve":
        return cls([(t0, v0), (t1, v1)])

    @classmethod
    def constant(cls, value: float) -> "Curve":
        return cls([(0.0, value)])

    def __call__(self, x: float) -> float:
        return self.evaluate(x)

    def evaluate(self, x: float) -> float:
        i = bisect_right(self._times, x)
        if i == 0:
            return self.keys[0][1]
        if i == len(self.keys):
            return self.keys[-1][1]
        (t0, v0), (t1, v1) = self.keys[i - 1], self.keys[i]
        return v0 + (v1 - v0) * (x - t0) / (t1 - t0)


CURVES = {
    "linear": lambda: linear_falloff,
    "flat": lambda: Curve.constant(1.0),
    "swell": lambda: Curve([(0.0, 0.0), (0.2, 1.0), (1.0, 0.0)]),
}


def make_curve(name: str) -> ShapeFn:
    try:
        return CURVES[name]()
    except KeyError:
        raise ValueError(f"Unknown curve: {name}") from None
