from __future__ import annotations

from typing import Optional

from shapes import Circle, CircleSector, LinearGradient, Path, Polygon, RadialGradient, Rect, Text

from .config import SceneOptions
from .scene import Scene


def build_demo_scene(width: int = 480, height: int = 320, options: Optional[SceneOptions] = None) -> Scene:
    """
    A small overlapping composition exercising every geometry kind.
    """
    scene = Scene.of_size(width, height, options)

    backdrop = LinearGradient(0, 0, width, height).color_stop(0.0, "#f4f1de").color_stop(1.0, "#e07a5f")
    scene.add(Rect(0, 0, width, height).options(fill=backdrop), "backdrop")

    scene.add(Rect(40, 40, 160, 110, r=14).options(fill="#3d405b", stroke="#222222", width=3), "card")
    scene.add(
        Circle(170, 120, 60).options(
            fill=RadialGradient(0, 0, 5, 0, 0, 60).color_stop(0.0, "#81b29a").color_stop(1.0, "#2a9d8f"),
            shadow="#00000080", shadow_x=4, shadow_y=4, shadow_blur=6,
        ),
        "disk",
    )
    scene.add(Polygon(300, 150, 6, 55).options(fill="#f2cc8f", stroke="#9c6644", width=4).rotate(15), "hexagon")
    scene.add(CircleSector(360, 90, 50, 270).options(fill="#e63946").rotate(-45), "sector")

    wave = (
        Path(30, 260)
        .quadratic_curve(130, 260, 80, 200)
        .bezier_curve(280, 260, 180, 320, 230, 200)
        .line(420, 270)
    )
    scene.add(wave.options(stroke="#1d3557", width=6, line_cap="round", line_join="round"), "wave")
    scene.add(Text(250, 300, "pick me").options(fill="#1d3557", font_size=28), "label")
    return scene
