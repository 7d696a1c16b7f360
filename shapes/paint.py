from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Literal, Tuple

PaintKind = Literal["literal", "gradient", "callback"]


class Gradient:
    """
    Gradient description in the item's user space. Concrete fills are
    produced by the surface at draw time via resolve().
    """

    def __init__(self):
        self.color_stops: List[Tuple[float, Any]] = []

    def color_stop(self, pos: float, color: Any) -> "Gradient":
        if not 0.0 <= pos <= 1.0:
            raise ValueError("color stop position must be in [0, 1]")
        self.color_stops.append((float(pos), color))
        return self

    def resolve(self, surface) -> Any:
        raise NotImplementedError


class LinearGradient(Gradient):
    def __init__(self, x1: float, y1: float, x2: float, y2: float):
        super().__init__()
        self.start = (float(x1), float(y1))
        self.end = (float(x2), float(y2))

    def resolve(self, surface) -> Any:
        g = surface.create_linear_gradient(*self.start, *self.end)
        for pos, color in self.color_stops:
            g.add_color_stop(pos, color)
        return g


class RadialGradient(Gradient):
    def __init__(self, x1: float, y1: float, r1: float, x2: float, y2: float, r2: float):
        super().__init__()
        self.start = (float(x1), float(y1), float(r1))
        self.end = (float(x2), float(y2), float(r2))

    def resolve(self, surface) -> Any:
        g = surface.create_radial_gradient(*self.start, *self.end)
        for pos, color in self.color_stops:
            g.add_color_stop(pos, color)
        return g


@dataclass(frozen=True)
class Paint:
    """
    Tagged paint source: a literal color, a gradient, or a callback that
    computes the paint from the surface.
    """
    kind: PaintKind
    value: Any = field(compare=False)

    def resolve(self, surface) -> Any:
        if self.kind == "gradient":
            return self.value.resolve(surface)
        if self.kind == "callback":
            return self.value(surface)
        return self.value


def as_paint(value: Any) -> Paint:
    if isinstance(value, Paint):
        return value
    if isinstance(value, Gradient):
        return Paint("gradient", value)
    if isinstance(value, (str, tuple, list)):
        return Paint("literal", tuple(value) if isinstance(value, list) else value)
    if callable(value):
        return Paint("callback", value)
    raise TypeError(f"unsupported paint value: {value!r}")
