from __future__ import annotations

import math
from typing import List, Optional, Tuple

from .geometry import Point, Shape
from .style import DrawOptions


class Circle(Shape):
    """
    Circle of radius r centered on its position.
    """
    def __init__(self, x: float, y: float, r: float):
        super().__init__()
        self.radius = float(r)
        self.move(x, y)

    def build_path(self, surface) -> None:
        surface.move_to(self.radius, 0.0)
        surface.arc(0.0, 0.0, self.radius, 0.0, 2.0 * math.pi)
        surface.close_path()


class Rect(Shape):
    """
    Axis-aligned rectangle with its top-left corner at the position.
    Rounded corners when r is given.
    """
    def __init__(self, x: float, y: float, w: float, h: float, r: Optional[float] = None):
        super().__init__()
        self.w = float(w)
        self.h = float(h)
        self.r = None if r is None else float(r)
        self.move(x, y)

    @property
    def width(self) -> float:
        return self.w

    @property
    def height(self) -> float:
        return self.h

    def center(self, surface=None) -> Point:
        return (self.w / 2.0, self.h / 2.0)

    def build_path(self, surface) -> None:
        w, h, r = self.w, self.h, self.r
        if r is None:
            surface.rect(0.0, 0.0, w, h)
            return
        surface.move_to(r, 0.0)
        surface.arc_to(w, 0.0, w, r, r)
        surface.arc_to(w, h, r, h, r)
        surface.arc_to(0.0, h, 0.0, r, r)
        surface.arc_to(0.0, 0.0, r, 0.0, r)
        surface.close_path()


class Path(Shape):
    """
    Open or closed path starting at (x, y). Segment end points and control
    points are given in absolute coordinates and stored relative to the start.
    """
    def __init__(self, x: float = 0.0, y: float = 0.0):
        super().__init__()
        self.offset = (float(x), float(y))
        self.segments: List[Tuple] = []
        self.is_closed = False
        self.move(x, y)

    def _rel(self, x: float, y: float) -> Point:
        return (x - self.offset[0], y - self.offset[1])

    def line(self, x: float, y: float) -> "Path":
        self.segments.append(("line", self._rel(x, y)))
        return self

    def to(self, x: float, y: float) -> "Path":
        return self.line(x, y)

    def quadratic_curve(self, x: float, y: float, cx: float, cy: float) -> "Path":
        self.segments.append(("quadratic", self._rel(x, y), self._rel(cx, cy)))
        return self

    def bezier_curve(self, x: float, y: float, c1x: float, c1y: float, c2x: float, c2y: float) -> "Path":
        self.segments.append(("bezier", self._rel(x, y), self._rel(c1x, c1y), self._rel(c2x, c2y)))
        return self

    def close(self) -> "Path":
        self.is_closed = True
        return self

    def center(self, surface=None) -> Point:
        # Approximate: mean of end and control points, the start excluded
        pts = [p for seg in self.segments for p in seg[1:]]
        if not pts:
            return (0.0, 0.0)
        return (sum(p[0] for p in pts) / len(pts), sum(p[1] for p in pts) / len(pts))

    def build_path(self, surface) -> None:
        surface.move_to(0.0, 0.0)
        for seg in self.segments:
            kind = seg[0]
            if kind == "line":
                surface.line_to(*seg[1])
            elif kind == "quadratic":
                (x, y), (cx, cy) = seg[1], seg[2]
                surface.quadratic_curve_to(cx, cy, x, y)
            else:
                (x, y), (c1x, c1y), (c2x, c2y) = seg[1], seg[2], seg[3]
                surface.bezier_curve_to(c1x, c1y, c2x, c2y, x, y)
        if self.is_closed:
            surface.close_path()


class Polygon(Shape):
    """
    Regular polygon with n corners on a circle of radius r around the position.
    """
    def __init__(self, x: float, y: float, n: int, r: float):
        super().__init__()
        self.points: List[Point] = []
        self.move(x, y)
        self.set_points(n, r)

    def set_points(self, n: int, r: float) -> "Polygon":
        if n < 3:
            raise ValueError("Polygon requires at least 3 corners")
        step = 2.0 * math.pi / n
        self.points = [(r * math.cos(i * step), r * math.sin(i * step)) for i in range(n)]
        return self

    def build_path(self, surface) -> None:
        for x, y in self.points:
            surface.line_to(x, y)
        surface.close_path()


class Text(Shape):
    """
    Single line of text with its baseline origin at the position.
    """
    def __init__(self, x: float, y: float, text: str):
        super().__init__()
        self.t = str(text)
        self.move(x, y)

    def append(self, text) -> "Text":
        self.t += str(text)
        return self

    def prepend(self, text) -> "Text":
        self.t = str(text) + self.t
        return self

    def text(self, text) -> "Text":
        self.t = str(text)
        return self

    def center(self, surface=None) -> Point:
        if surface is None:
            return (0.0, 0.0)
        opts = self.draw_options
        surface.save()
        surface.set_font(opts.font, opts.font_size, opts.text_align)
        width = surface.measure_text(self.t)
        surface.restore()
        return (width / 2.0, 0.0)

    def build_path(self, surface) -> None:
        # Glyphs are rasterized directly in paint(); there is no outline path.
        surface.begin_path()

    def paint(self, surface, style: DrawOptions) -> None:
        surface.set_font(style.font, style.font_size, style.text_align)
        if style.stroke is not None:
            surface.stroke_text(self.t, 0.0, 0.0)
        if style.fill is not None:
            surface.fill_text(self.t, 0.0, 0.0)


class CircleSegment(Shape):
    """
    Arc of `angle` degrees (mod 360) starting on the positive x axis;
    close() joins the chord.
    """
    def __init__(self, x: float, y: float, r: float, angle: float):
        super().__init__()
        self.radius = float(r)
        self.angle = float(angle)
        self.is_closed = False
        self.move(x, y)

    def close(self) -> "CircleSegment":
        self.is_closed = True
        return self

    def build_path(self, surface) -> None:
        surface.move_to(self.radius, 0.0)
        surface.arc(0.0, 0.0, self.radius, 0.0, math.radians(self.angle % 360))
        if self.is_closed:
            surface.close_path()


class CircleSector(Shape):
    """
    Pie slice of `angle` degrees (mod 360).
    """
    def __init__(self, x: float, y: float, r: float, angle: float):
        super().__init__()
        self.radius = float(r)
        self.angle = float(angle)
        self.move(x, y)

    def build_path(self, surface) -> None:
        surface.move_to(0.0, 0.0)
        surface.line_to(self.radius, 0.0)
        surface.arc(0.0, 0.0, self.radius, 0.0, math.radians(self.angle % 360))
        surface.close_path()
