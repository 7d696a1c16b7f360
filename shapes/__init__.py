# Re-export drawable API for convenience
from .geometry import (
    Shape,
    Affine2D,
    TransformState,
    RotateSpec,
    ScaleSpec,
)
from .primitives import (
    Circle,
    Rect,
    Path,
    Polygon,
    Text,
    CircleSegment,
    CircleSector,
)
from .paint import (
    Paint,
    Gradient,
    LinearGradient,
    RadialGradient,
    as_paint,
)
from .style import DrawOptions
