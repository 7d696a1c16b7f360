from __future__ import annotations

from dataclasses import dataclass, fields, replace
from typing import Any, Literal, Mapping, Optional


LineCap = Literal["butt", "square", "round"]
LineJoin = Literal["miter", "bevel", "round"]
TextAlign = Literal["left", "center", "right"]

LINE_CAPS = ("butt", "square", "round")
LINE_JOINS = ("miter", "bevel", "round")
TEXT_ALIGNS = ("left", "center", "right")


@dataclass
class DrawOptions:
    """
    Per-item draw style. Paint fields (stroke, fill, shadow) hold a color
    string or RGB(A) tuple, a gradient, or a callable taking the surface.
    None means "do not stroke" / "do not fill" / "no shadow".
    """
    stroke: Any = None
    fill: Any = None
    width: float = 1.0
    font: Optional[str] = None
    font_size: float = 13.0
    text_align: TextAlign = "left"
    line_cap: LineCap = "butt"
    line_join: LineJoin = "miter"
    miter_limit: float = 10.0
    shadow: Any = None
    shadow_x: float = 0.0
    shadow_y: float = 0.0
    shadow_blur: float = 0.0

    def __post_init__(self):
        if self.line_cap not in LINE_CAPS:
            raise ValueError(f"unknown line cap: {self.line_cap!r}")
        if self.line_join not in LINE_JOINS:
            raise ValueError(f"unknown line join: {self.line_join!r}")
        if self.text_align not in TEXT_ALIGNS:
            raise ValueError(f"unknown text align: {self.text_align!r}")

    def update(self, **values: Any) -> "DrawOptions":
        """
        Set fields in place and return self. Unknown names raise TypeError.
        """
        merged = replace(self, **values)
        for f in fields(self):
            setattr(self, f.name, getattr(merged, f.name))
        return self

    def merged(self, override: Optional[Mapping[str, Any]]) -> "DrawOptions":
        """
        Field-by-field merge: every key present in `override` wins,
        everything else keeps this item's value. Returns a new object.
        """
        if not override:
            return replace(self)
        return replace(self, **dict(override))
