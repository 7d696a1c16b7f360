from __future__ import annotations

import copy
import math
from dataclasses import dataclass
from typing import Any, Optional, Tuple

import numpy as np

from .style import DrawOptions


Point = Tuple[float, float]


@dataclass(frozen=True)
class Affine2D:
    """
    2D affine transform x -> A x + t

    In component form (the order used by set_matrix/change_matrix):
        x' = m11 * x + m12 * y + dx
        y' = m21 * x + m22 * y + dy
    """
    A: np.ndarray  # shape (2, 2)
    t: np.ndarray  # shape (2,)

    def __post_init__(self):
        A = np.asarray(self.A, dtype=float)
        t = np.asarray(self.t, dtype=float)
        if A.shape != (2, 2):
            raise ValueError("A must be 2x2")
        if t.shape != (2,):
            raise ValueError("t must be length-2")
        object.__setattr__(self, "A", A)
        object.__setattr__(self, "t", t)

    def apply(self, point_xy) -> np.ndarray:
        return self.A @ np.asarray(point_xy, dtype=float) + self.t

    def apply_many(self, points_xy: np.ndarray) -> np.ndarray:
        pts = np.asarray(points_xy, dtype=float).reshape(-1, 2)
        return pts @ self.A.T + self.t

    def inverse_apply(self, point_xy) -> np.ndarray:
        return self.inverse().apply(point_xy)

    # ---- Constructors and composition ----
    @staticmethod
    def identity() -> "Affine2D":
        return Affine2D(A=np.eye(2), t=np.zeros(2))

    @staticmethod
    def from_components(m11: float, m12: float, m21: float, m22: float, dx: float, dy: float) -> "Affine2D":
        return Affine2D(A=np.array([[m11, m12], [m21, m22]], dtype=float), t=np.array([dx, dy], dtype=float))

    @staticmethod
    def from_translate(dx: float, dy: float) -> "Affine2D":
        return Affine2D(A=np.eye(2), t=np.array([dx, dy], dtype=float))

    @staticmethod
    def from_scale(sx: float, sy: float | None = None) -> "Affine2D":
        if sy is None:
            sy = sx
        return Affine2D(A=np.array([[sx, 0.0], [0.0, sy]], dtype=float), t=np.zeros(2))

    @staticmethod
    def from_rotation(theta_radians: float) -> "Affine2D":
        c = math.cos(theta_radians)
        s = math.sin(theta_radians)
        return Affine2D(A=np.array([[c, -s], [s, c]], dtype=float), t=np.zeros(2))

    def then(self, after: "Affine2D") -> "Affine2D":
        """
        First apply self, then apply 'after'.
        y = after.apply(self.apply(x))
        """
        A_new = after.A @ self.A
        t_new = after.A @ self.t + after.t
        return Affine2D(A=A_new, t=t_new)

    def __matmul__(self, other: "Affine2D") -> "Affine2D":
        # Homogeneous product self @ other: other is applied first.
        return other.then(self)

    def around(self, pivot: Point) -> "Affine2D":
        """
        Conjugate by a translation so the linear part acts about `pivot`.
        """
        px, py = pivot
        return Affine2D.from_translate(px, py) @ self @ Affine2D.from_translate(-px, -py)

    # ---- Queries ----
    @property
    def components(self) -> Tuple[float, float, float, float, float, float]:
        return (
            float(self.A[0, 0]), float(self.A[0, 1]),
            float(self.A[1, 0]), float(self.A[1, 1]),
            float(self.t[0]), float(self.t[1]),
        )

    @property
    def determinant(self) -> float:
        return float(self.A[0, 0] * self.A[1, 1] - self.A[0, 1] * self.A[1, 0])

    @property
    def is_identity(self) -> bool:
        return self.components == (1.0, 0.0, 0.0, 1.0, 0.0, 0.0)

    @property
    def is_invertible(self) -> bool:
        det = self.determinant
        return det != 0.0 and math.isfinite(det)

    def inverse(self) -> "Affine2D":
        if not self.is_invertible:
            raise ValueError("transform is not invertible")
        Ainv = np.linalg.inv(self.A)
        return Affine2D(A=Ainv, t=-(Ainv @ self.t))


# ---- Transform state ----

@dataclass(frozen=True)
class RotateSpec:
    angle: float  # radians
    pivot: Optional[Point] = None


@dataclass(frozen=True)
class ScaleSpec:
    sx: float
    sy: float
    pivot: Optional[Point] = None


@dataclass
class TransformState:
    """
    Transform components of one drawable. Every component is either set
    or None; identity values are never stored.
    """
    translate: Optional[Point] = None
    scale: Optional[ScaleSpec] = None
    rotate: Optional[RotateSpec] = None
    matrix: Optional[Affine2D] = None
    hidden: bool = False

    def set_translate(self, x: float, y: float) -> None:
        self.translate = None if (x == 0 and y == 0) else (x, y)

    def set_scale(self, sx: float, sy: float, pivot: Optional[Point]) -> None:
        self.scale = None if (sx == 1 and sy == 1) else ScaleSpec(sx, sy, pivot)

    def set_rotate(self, angle: float, pivot: Optional[Point]) -> None:
        self.rotate = None if angle == 0 else RotateSpec(angle, pivot)

    def set_matrix(self, m: Affine2D) -> None:
        self.matrix = None if m.is_identity else m

    def compose(self, center: Point) -> Affine2D:
        """
        Composed matrix: custom matrix, then translate, then rotate about
        its pivot (default `center`), then scale about its pivot (default
        `center`). Pivots are in the pre-translation frame.
        """
        m = Affine2D.identity()
        if self.matrix is not None:
            m = self.matrix
        if self.translate is not None:
            m = m @ Affine2D.from_translate(*self.translate)
        if self.rotate is not None:
            pivot = self.rotate.pivot if self.rotate.pivot is not None else center
            m = m @ Affine2D.from_rotation(self.rotate.angle).around(pivot)
        if self.scale is not None:
            pivot = self.scale.pivot if self.scale.pivot is not None else center
            m = m @ Affine2D.from_scale(self.scale.sx, self.scale.sy).around(pivot)
        return m


def _as_point(p) -> Optional[Point]:
    if p is None:
        return None
    return (float(p[0]), float(p[1]))


class Shape:
    """
    Base drawable: geometry-specific path construction plus the transform
    and style state every item carries. Transform and style methods mutate
    in place and return self for chaining.
    """

    def __init__(self):
        self.draw_options = DrawOptions()
        self.transform = TransformState()

    # ---- Geometry contract ----
    def build_path(self, surface) -> None:
        raise NotImplementedError

    def center(self, surface=None) -> Point:
        return (0.0, 0.0)

    def paint(self, surface, style: DrawOptions) -> None:
        """
        Build the path and stroke/fill it. Shapes that do not render
        through a path (text) override this.
        """
        self.build_path(surface)
        if style.stroke is not None:
            surface.stroke()
        if style.fill is not None:
            surface.fill()

    def clone(self) -> "Shape":
        return copy.deepcopy(self)

    # ---- Visibility / style ----
    @property
    def hidden(self) -> bool:
        return self.transform.hidden

    def hide(self) -> "Shape":
        self.transform.hidden = True
        return self

    def show(self) -> "Shape":
        self.transform.hidden = False
        return self

    def options(self, **values: Any) -> "Shape":
        self.draw_options.update(**values)
        return self

    # ---- Matrix ----
    def set_matrix(self, m11: float, m12: float, m21: float, m22: float, dx: float, dy: float) -> "Shape":
        self.transform.set_matrix(Affine2D.from_components(m11, m12, m21, m22, dx, dy))
        return self

    def change_matrix(self, m11: float, m12: float, m21: float, m22: float, dx: float, dy: float) -> "Shape":
        old = self.transform.matrix if self.transform.matrix is not None else Affine2D.identity()
        self.transform.set_matrix(old @ Affine2D.from_components(m11, m12, m21, m22, dx, dy))
        return self

    # ---- Rotation (degrees in, radians stored) ----
    def rotate(self, angle: float, pivot=None) -> "Shape":
        self.transform.set_rotate(math.radians(angle), _as_point(pivot))
        return self

    def rotate_by(self, angle: float, pivot=None) -> "Shape":
        cur = self.transform.rotate
        if cur is None:
            return self.rotate(angle, pivot)
        new_pivot = _as_point(pivot) if pivot is not None else cur.pivot
        self.transform.set_rotate(cur.angle + math.radians(angle), new_pivot)
        return self

    # ---- Scale ----
    def scale(self, sx: float, sy: float | None = None, pivot=None) -> "Shape":
        if sy is None:
            sy = sx
        self.transform.set_scale(sx, sy, _as_point(pivot))
        return self

    def scale_by(self, dx: float, dy: float | None = None, pivot=None) -> "Shape":
        """
        Add to the scale factors; 0.1 grows the item by 10% of its size.
        """
        if dy is None:
            dy = dx
        cur = self.transform.scale
        if cur is None:
            return self.scale(1 + dx, 1 + dy, pivot)
        new_pivot = _as_point(pivot) if pivot is not None else cur.pivot
        self.transform.set_scale(cur.sx + dx, cur.sy + dy, new_pivot)
        return self

    # ---- Translation ----
    def move(self, x: float, y: float) -> "Shape":
        self.transform.set_translate(x, y)
        return self

    def move_by(self, dx: float, dy: float) -> "Shape":
        cur = self.transform.translate
        if cur is None:
            return self.move(dx, dy)
        self.transform.set_translate(cur[0] + dx, cur[1] + dy)
        return self

    # ---- Composition ----
    def composed_matrix(self, surface=None) -> Affine2D:
        return self.transform.compose(self.center(surface))

    def __repr__(self) -> str:
        return f"{type(self).__name__}(translate={self.transform.translate}, hidden={self.hidden})"
