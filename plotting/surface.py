from __future__ import annotations

import copy
import math
from dataclasses import dataclass, field
from typing import Any, List, Optional, Tuple

import numpy as np
from PIL import Image, ImageChops, ImageColor, ImageDraw, ImageFilter, ImageFont
from shapely import affinity
from shapely.geometry import LinearRing, LineString, MultiPolygon, Polygon

from shapes.geometry import Affine2D

RGBA = Tuple[int, int, int, int]

COMPOSITE_OPERATIONS = ("source-over", "destination-over", "copy")

_SHAPELY_CAPS = {"butt": "flat", "square": "square", "round": "round"}
_SHAPELY_JOINS = {"miter": "mitre", "bevel": "bevel", "round": "round"}
_TEXT_ANCHORS = {"left": "ls", "center": "ms", "right": "rs"}

CURVE_SEGMENTS = 24


def to_rgba(color: Any) -> RGBA:
    """
    Parse a color string ('#ff0000', 'red', 'rgb(...)') or an RGB/RGBA
    tuple of 0-255 ints into an RGBA tuple.
    """
    if isinstance(color, str):
        rgb = ImageColor.getrgb(color)
    else:
        rgb = tuple(int(c) for c in color)
    if len(rgb) == 3:
        return (rgb[0], rgb[1], rgb[2], 255)
    if len(rgb) == 4:
        return (rgb[0], rgb[1], rgb[2], rgb[3])
    raise ValueError(f"color must have 3 or 4 channels: {color!r}")


def load_font(font: Optional[str], size: float) -> ImageFont.ImageFont:
    if font is None:
        return ImageFont.load_default(size=size)
    return ImageFont.truetype(font, size=int(round(size)))


class GradientFill:
    """
    Concrete gradient bound to a surface. Stops are sampled per device pixel
    after mapping the pixel center back into the user space that was active
    when the fill is performed.
    """

    def __init__(self, kind: str, params: Tuple[float, ...]):
        self.kind = kind
        self.params = params
        self.stops: List[Tuple[float, RGBA]] = []

    def add_color_stop(self, pos: float, color: Any) -> "GradientFill":
        self.stops.append((float(pos), to_rgba(color)))
        self.stops.sort(key=lambda s: s[0])
        return self

    def _parameter(self, pts: np.ndarray) -> np.ndarray:
        if self.kind == "linear":
            x1, y1, x2, y2 = self.params
            axis = np.array([x2 - x1, y2 - y1], dtype=float)
            denom = float(axis @ axis)
            if denom == 0.0:
                return np.zeros(len(pts))
            return ((pts - np.array([x1, y1])) @ axis) / denom
        # Two-circle radial gradient: largest t with |p - c(t)| = r(t), r(t) >= 0
        x1, y1, r1, x2, y2, r2 = self.params
        cd = np.array([x2 - x1, y2 - y1], dtype=float)
        dr = r2 - r1
        pd = pts - np.array([x1, y1])
        a = float(cd @ cd) - dr * dr
        b = pd @ cd + r1 * dr
        c = np.sum(pd * pd, axis=1) - r1 * r1
        if a == 0.0:
            with np.errstate(divide="ignore", invalid="ignore"):
                t = np.where(b != 0.0, c / (2.0 * b), 0.0)
            return t
        disc = np.maximum(b * b - a * c, 0.0)
        root = np.sqrt(disc)
        t_hi = (b + root) / a
        t_lo = (b - root) / a
        t = np.maximum(t_hi, t_lo)
        alt = np.minimum(t_hi, t_lo)
        return np.where(r1 + t * dr >= 0.0, t, alt)

    def render(self, box: Tuple[int, int, int, int], transform: Affine2D) -> np.ndarray:
        x0, y0, x1, y1 = box
        w, h = x1 - x0, y1 - y0
        out = np.zeros((h, w, 4), dtype=np.uint8)
        if not self.stops or w <= 0 or h <= 0 or not transform.is_invertible:
            return out
        xs, ys = np.meshgrid(np.arange(x0, x1) + 0.5, np.arange(y0, y1) + 0.5)
        dev = np.stack([xs.ravel(), ys.ravel()], axis=1)
        user = transform.inverse().apply_many(dev)
        t = np.clip(self._parameter(user), 0.0, 1.0)
        positions = np.array([s[0] for s in self.stops], dtype=float)
        colors = np.array([s[1] for s in self.stops], dtype=float)
        for ch in range(4):
            out[..., ch] = np.rint(np.interp(t, positions, colors[:, ch])).reshape(h, w)
        return out


@dataclass
class _State:
    transform: Affine2D = field(default_factory=Affine2D.identity)
    fill_style: Any = (0, 0, 0, 255)
    stroke_style: Any = (0, 0, 0, 255)
    line_width: float = 1.0
    line_cap: str = "butt"
    line_join: str = "miter"
    miter_limit: float = 10.0
    global_alpha: float = 1.0
    composite_operation: str = "source-over"
    shadow_color: RGBA = (0, 0, 0, 0)
    shadow_offset: Tuple[float, float] = (0.0, 0.0)
    shadow_blur: float = 0.0
    font: Optional[str] = None
    font_size: float = 13.0
    text_align: str = "left"


class Surface:
    """
    RGBA raster target with a canvas-like drawing state.

    Paths are recorded in device space as they are built (the transform at
    construction time applies), then filled or stroked onto the image.
    Rasterization is aliased: a solid opaque fill writes its exact color.
    """

    def __init__(self, width: int, height: int):
        if width <= 0 or height <= 0:
            raise ValueError("surface size must be positive")
        self._image = Image.new("RGBA", (int(width), int(height)), (0, 0, 0, 0))
        self._state = _State()
        self._stack: List[_State] = []
        self._subpaths: List[List[Tuple[float, float]]] = []
        self._closed: List[bool] = []

    @property
    def width(self) -> int:
        return self._image.width

    @property
    def height(self) -> int:
        return self._image.height

    @property
    def size(self) -> Tuple[int, int]:
        return self._image.size

    def to_image(self) -> Image.Image:
        return self._image.copy()

    def to_array(self) -> np.ndarray:
        return np.asarray(self._image, dtype=np.uint8).copy()

    # ---- State ----
    def save(self) -> None:
        self._stack.append(copy.copy(self._state))

    def restore(self) -> None:
        if self._stack:
            self._state = self._stack.pop()

    @property
    def current_transform(self) -> Affine2D:
        return self._state.transform

    def set_transform(self, m: Affine2D) -> None:
        self._state.transform = m

    def reset_transform(self) -> None:
        self._state.transform = Affine2D.identity()

    def transform(self, m: Affine2D) -> None:
        self._state.transform = self._state.transform @ m

    def translate(self, dx: float, dy: float) -> None:
        self.transform(Affine2D.from_translate(dx, dy))

    def rotate(self, angle: float) -> None:
        self.transform(Affine2D.from_rotation(angle))

    def scale(self, sx: float, sy: float) -> None:
        self.transform(Affine2D.from_scale(sx, sy))

    @property
    def fill_style(self) -> Any:
        return self._state.fill_style

    @fill_style.setter
    def fill_style(self, value: Any) -> None:
        self._state.fill_style = value if isinstance(value, GradientFill) else to_rgba(value)

    @property
    def stroke_style(self) -> Any:
        return self._state.stroke_style

    @stroke_style.setter
    def stroke_style(self, value: Any) -> None:
        self._state.stroke_style = value if isinstance(value, GradientFill) else to_rgba(value)

    def set_line_style(self, width: float, cap: str = "butt", join: str = "miter", miter_limit: float = 10.0) -> None:
        if cap not in _SHAPELY_CAPS:
            raise ValueError(f"unknown line cap: {cap!r}")
        if join not in _SHAPELY_JOINS:
            raise ValueError(f"unknown line join: {join!r}")
        self._state.line_width = float(width)
        self._state.line_cap = cap
        self._state.line_join = join
        self._state.miter_limit = float(miter_limit)

    def set_shadow(self, color: Any, offset_x: float = 0.0, offset_y: float = 0.0, blur: float = 0.0) -> None:
        self._state.shadow_color = to_rgba(color)
        self._state.shadow_offset = (float(offset_x), float(offset_y))
        self._state.shadow_blur = float(blur)

    def set_font(self, font: Optional[str], size: float, align: str = "left") -> None:
        if align not in _TEXT_ANCHORS:
            raise ValueError(f"unknown text align: {align!r}")
        self._state.font = font
        self._state.font_size = float(size)
        self._state.text_align = align

    @property
    def global_alpha(self) -> float:
        return self._state.global_alpha

    @global_alpha.setter
    def global_alpha(self, value: float) -> None:
        self._state.global_alpha = float(value)

    @property
    def composite_operation(self) -> str:
        return self._state.composite_operation

    @composite_operation.setter
    def composite_operation(self, value: str) -> None:
        if value not in COMPOSITE_OPERATIONS:
            raise ValueError(f"unsupported composite operation: {value!r}")
        self._state.composite_operation = value

    def create_linear_gradient(self, x1: float, y1: float, x2: float, y2: float) -> GradientFill:
        return GradientFill("linear", (x1, y1, x2, y2))

    def create_radial_gradient(self, x1: float, y1: float, r1: float, x2: float, y2: float, r2: float) -> GradientFill:
        return GradientFill("radial", (x1, y1, r1, x2, y2, r2))

    # ---- Clearing / read-back ----
    def clear(self, region: Optional[Tuple[int, int, int, int]] = None) -> None:
        """
        Erase `region` = (x, y, w, h), or the whole surface.
        """
        if region is None:
            self._image = Image.new("RGBA", self._image.size, (0, 0, 0, 0))
            return
        x, y, w, h = region
        ImageDraw.Draw(self._image).rectangle((x, y, x + w - 1, y + h - 1), fill=(0, 0, 0, 0))

    def read_pixel(self, x: int, y: int) -> RGBA:
        x, y = math.floor(x), math.floor(y)
        if not (0 <= x < self.width and 0 <= y < self.height):
            return (0, 0, 0, 0)
        return tuple(self._image.getpixel((x, y)))

    def read_pixels(self, x: int, y: int, w: int, h: int) -> np.ndarray:
        """
        Region read-back as an (h, w, 4) uint8 array; pixels outside the
        surface read as transparent.
        """
        crop = self._image.crop((int(x), int(y), int(x) + int(w), int(y) + int(h)))
        return np.asarray(crop, dtype=np.uint8).copy()

    # ---- Path construction ----
    def begin_path(self) -> None:
        self._subpaths = []
        self._closed = []

    def _device(self, x: float, y: float) -> Optional[Tuple[float, float]]:
        m = self._state.transform
        if not m.is_invertible:
            return None
        p = m.apply((x, y))
        return (float(p[0]), float(p[1]))

    def _current_point(self) -> Optional[Tuple[float, float]]:
        if self._subpaths and self._subpaths[-1]:
            return self._subpaths[-1][-1]
        return None

    def _user_current_point(self) -> Optional[Tuple[float, float]]:
        cur = self._current_point()
        if cur is None:
            return None
        p = self._state.transform.inverse_apply(cur)
        return (float(p[0]), float(p[1]))

    def move_to(self, x: float, y: float) -> None:
        p = self._device(x, y)
        if p is None:
            return
        self._subpaths.append([p])
        self._closed.append(False)

    def line_to(self, x: float, y: float) -> None:
        p = self._device(x, y)
        if p is None:
            return
        if self._current_point() is None:
            self._subpaths.append([p])
            self._closed.append(False)
        else:
            self._subpaths[-1].append(p)

    def _extend_device(self, pts: np.ndarray) -> None:
        if self._current_point() is None:
            self._subpaths.append([])
            self._closed.append(False)
        self._subpaths[-1].extend((float(x), float(y)) for x, y in pts)

    def quadratic_curve_to(self, cx: float, cy: float, x: float, y: float) -> None:
        if not self._state.transform.is_invertible:
            return
        start = self._current_point()
        if start is None:
            self.move_to(cx, cy)
            start = self._current_point()
        m = self._state.transform
        p0 = np.asarray(start)
        p1, p2 = m.apply((cx, cy)), m.apply((x, y))
        t = np.linspace(0.0, 1.0, CURVE_SEGMENTS + 1)[1:, None]
        pts = (1 - t) ** 2 * p0 + 2 * (1 - t) * t * p1 + t ** 2 * p2
        self._extend_device(pts)

    def bezier_curve_to(self, c1x: float, c1y: float, c2x: float, c2y: float, x: float, y: float) -> None:
        if not self._state.transform.is_invertible:
            return
        start = self._current_point()
        if start is None:
            self.move_to(c1x, c1y)
            start = self._current_point()
        m = self._state.transform
        p0 = np.asarray(start)
        p1, p2, p3 = m.apply((c1x, c1y)), m.apply((c2x, c2y)), m.apply((x, y))
        t = np.linspace(0.0, 1.0, CURVE_SEGMENTS + 1)[1:, None]
        pts = (1 - t) ** 3 * p0 + 3 * (1 - t) ** 2 * t * p1 + 3 * (1 - t) * t ** 2 * p2 + t ** 3 * p3
        self._extend_device(pts)

    def _arc_points(self, cx: float, cy: float, r: float, start: float, sweep: float) -> np.ndarray:
        m = self._state.transform
        r_dev = abs(r) * math.sqrt(abs(m.determinant))
        n = int(min(720, max(8, math.ceil(abs(sweep) * max(r_dev, 1.0) / 2.0))))
        angles = start + sweep * np.linspace(0.0, 1.0, n + 1)
        user = np.stack([cx + r * np.cos(angles), cy + r * np.sin(angles)], axis=1)
        return m.apply_many(user)

    def arc(self, cx: float, cy: float, r: float, start: float, end: float, anticlockwise: bool = False) -> None:
        if r < 0:
            raise ValueError("arc radius must be non-negative")
        if not self._state.transform.is_invertible:
            return
        tau = 2.0 * math.pi
        if not anticlockwise:
            sweep = tau if end - start >= tau else (end - start) % tau
        else:
            sweep = -tau if start - end >= tau else -((start - end) % tau)
        self._extend_device(self._arc_points(cx, cy, r, start, sweep))

    def arc_to(self, x1: float, y1: float, x2: float, y2: float, r: float) -> None:
        if r < 0:
            raise ValueError("arc radius must be non-negative")
        if not self._state.transform.is_invertible:
            return
        p0 = self._user_current_point()
        if p0 is None:
            self.move_to(x1, y1)
            return
        a = np.array(p0) - np.array([x1, y1])
        b = np.array([x2, y2], dtype=float) - np.array([x1, y1])
        la, lb = float(np.hypot(*a)), float(np.hypot(*b))
        cross = float(a[0] * b[1] - a[1] * b[0])
        if r == 0 or la == 0.0 or lb == 0.0 or cross == 0.0:
            self.line_to(x1, y1)
            return
        ua, ub = a / la, b / lb
        theta = math.acos(max(-1.0, min(1.0, float(ua @ ub))))
        dist = r / math.tan(theta / 2.0)
        t1 = np.array([x1, y1]) + ua * dist
        t2 = np.array([x1, y1]) + ub * dist
        bis = ua + ub
        bis /= np.hypot(*bis)
        c = np.array([x1, y1]) + bis * (r / math.sin(theta / 2.0))
        start = math.atan2(t1[1] - c[1], t1[0] - c[0])
        end = math.atan2(t2[1] - c[1], t2[0] - c[0])
        sweep = (end - start + math.pi) % (2.0 * math.pi) - math.pi
        self.line_to(float(t1[0]), float(t1[1]))
        self._extend_device(self._arc_points(float(c[0]), float(c[1]), r, start, sweep))

    def rect(self, x: float, y: float, w: float, h: float) -> None:
        self.move_to(x, y)
        self.line_to(x + w, y)
        self.line_to(x + w, y + h)
        self.line_to(x, y + h)
        self.close_path()

    def close_path(self) -> None:
        if not self._subpaths or not self._subpaths[-1]:
            return
        first = self._subpaths[-1][0]
        self._closed[-1] = True
        self._subpaths.append([first])
        self._closed.append(False)

    # ---- Rasterization ----
    def _fill_mask(self) -> Image.Image:
        mask = Image.new("L", self._image.size, 0)
        draw = ImageDraw.Draw(mask)
        for pts in self._subpaths:
            if len(pts) >= 3:
                draw.polygon(pts, fill=255)
        return mask

    def _stroke_mask(self) -> Image.Image:
        mask = Image.new("L", self._image.size, 0)
        st = self._state
        m = st.transform
        if not m.is_invertible or st.line_width <= 0:
            return mask
        inv = m.inverse()
        draw = ImageDraw.Draw(mask)
        m11, m12, m21, m22, dx, dy = m.components
        for pts, closed in zip(self._subpaths, self._closed):
            if len(pts) < 2:
                continue
            user = inv.apply_many(np.asarray(pts))
            if closed and len(user) >= 3:
                line = LinearRing(user)
            else:
                line = LineString(user)
            outline = line.buffer(
                st.line_width / 2.0,
                cap_style=_SHAPELY_CAPS[st.line_cap],
                join_style=_SHAPELY_JOINS[st.line_join],
                mitre_limit=st.miter_limit,
            )
            outline = affinity.affine_transform(outline, [m11, m12, m21, m22, dx, dy])
            _draw_polygons(draw, outline)
        return mask

    def fill(self) -> None:
        self._paint_mask(self._fill_mask(), self._state.fill_style)

    def stroke(self) -> None:
        self._paint_mask(self._stroke_mask(), self._state.stroke_style)

    def _text_mask(self, text: str, x: float, y: float, stroke: bool) -> Image.Image:
        st = self._state
        out = Image.new("L", self._image.size, 0)
        if not text or not st.transform.is_invertible:
            return out
        font = load_font(st.font, st.font_size)
        anchor = _TEXT_ANCHORS[st.text_align]
        sw = max(1, int(round(st.line_width))) if stroke else 0
        bbox = font.getbbox(text, anchor=anchor, stroke_width=sw)
        left, top = math.floor(bbox[0]), math.floor(bbox[1])
        right, bottom = math.ceil(bbox[2]), math.ceil(bbox[3])
        local = Image.new("L", (max(1, right - left), max(1, bottom - top)), 0)
        draw = ImageDraw.Draw(local)
        draw.fontmode = "1"
        origin = (-left, -top)
        if stroke:
            draw.text(origin, text, font=font, anchor=anchor, fill=255, stroke_width=sw, stroke_fill=255)
            inner = Image.new("L", local.size, 0)
            inner_draw = ImageDraw.Draw(inner)
            inner_draw.fontmode = "1"
            inner_draw.text(origin, text, font=font, anchor=anchor, fill=255)
            local = ImageChops.subtract(local, inner)
        else:
            draw.text(origin, text, font=font, anchor=anchor, fill=255)
        # device -> user -> local mask pixel
        to_local = Affine2D.from_translate(-(x + left), -(y + top)) @ st.transform.inverse()
        a, b, d, e, c, f = to_local.components
        return local.transform(
            self._image.size,
            Image.Transform.AFFINE,
            data=(a, b, c, d, e, f),
            resample=Image.Resampling.NEAREST,
        )

    def fill_text(self, text: str, x: float = 0.0, y: float = 0.0) -> None:
        self._paint_mask(self._text_mask(text, x, y, stroke=False), self._state.fill_style)

    def stroke_text(self, text: str, x: float = 0.0, y: float = 0.0) -> None:
        self._paint_mask(self._text_mask(text, x, y, stroke=True), self._state.stroke_style)

    def measure_text(self, text: str) -> float:
        font = load_font(self._state.font, self._state.font_size)
        return float(font.getlength(text))

    def _paint_mask(self, mask: Image.Image, style: Any) -> None:
        st = self._state
        if st.shadow_color[3] > 0:
            self._composite(self._shadow_mask(mask), st.shadow_color)
        self._composite(mask, style)

    def _shadow_mask(self, mask: Image.Image) -> Image.Image:
        st = self._state
        shifted = Image.new("L", mask.size, 0)
        ox, oy = st.shadow_offset
        shifted.paste(mask, (int(round(ox)), int(round(oy))))
        if st.shadow_blur > 0:
            shifted = shifted.filter(ImageFilter.GaussianBlur(st.shadow_blur / 2.0))
        return shifted

    def _composite(self, mask: Image.Image, style: Any) -> None:
        st = self._state
        op = st.composite_operation
        box = mask.getbbox()
        if box is None:
            if op == "copy":
                self.clear()
            return
        if op == "copy":
            box = (0, 0, self.width, self.height)
        x0, y0, x1, y1 = box
        if isinstance(style, GradientFill):
            src = style.render(box, st.transform)
        else:
            src = np.empty((y1 - y0, x1 - x0, 4), dtype=np.uint8)
            src[...] = np.array(style, dtype=np.uint8)
        coverage = np.asarray(mask.crop(box), dtype=np.uint16)
        alpha = src[..., 3].astype(np.uint16) * coverage // 255
        if st.global_alpha < 1.0:
            alpha = np.rint(alpha * max(0.0, st.global_alpha)).astype(np.uint16)
        src[..., 3] = alpha.astype(np.uint8)
        layer = Image.fromarray(src)
        if op == "source-over":
            self._image.alpha_composite(layer, dest=(x0, y0))
        elif op == "destination-over":
            region = self._image.crop(box)
            self._image.paste(Image.alpha_composite(layer, region), (x0, y0))
        else:
            self._image = layer


def _draw_polygons(draw: ImageDraw.ImageDraw, geom) -> None:
    if geom.is_empty:
        return
    if isinstance(geom, MultiPolygon):
        parts = geom.geoms
    elif isinstance(geom, Polygon):
        parts = [geom]
    else:
        parts = [g for g in getattr(geom, "geoms", []) if isinstance(g, Polygon)]
    for part in parts:
        draw.polygon(list(part.exterior.coords), fill=255)
        for interior in part.interiors:
            draw.polygon(list(interior.coords), fill=0)
