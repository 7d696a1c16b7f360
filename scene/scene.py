from __future__ import annotations

from typing import Any, Mapping, Optional, Union

from shapes import Shape
from plotting.hitmap import get_item_at_point
from plotting.renderer import draw_items
from plotting.surface import Surface

from .animation import AnimationCallback, AnimationLoop
from .config import SceneOptions
from .registry import SceneRegistry


class Scene(SceneRegistry):
    """
    A registry bound to the surface it paints on, plus the scene-wide
    options and the animation loop.
    """

    def __init__(self, surface: Surface, options: Optional[SceneOptions] = None):
        super().__init__()
        self.surface = surface
        self.options = options if options is not None else SceneOptions()
        self.is_empty = True
        self.animation = AnimationLoop(self.options.loop_fps)
        self.clear()

    @classmethod
    def of_size(cls, width: int, height: int, options: Optional[SceneOptions] = None) -> "Scene":
        return cls(Surface(width, height), options)

    # ---- Rendering ----
    def draw(self, override: Optional[Mapping[str, Any]] = None) -> "Scene":
        """
        Draw every visible item bottom to top. `override` replaces item style
        fields for this call only.
        """
        if not self.is_empty and self.options.auto_clear:
            self.clear()
        self.is_empty = False
        draw_items(
            self.surface,
            self.drawables(),
            override,
            self.options.global_alpha,
            self.options.composite_operation,
        )
        return self

    def clear(self) -> "Scene":
        self.surface.clear()
        self.is_empty = True
        return self

    def get_item_at_point(self, x: int, y: int) -> Optional[Shape]:
        return get_item_at_point(self, x, y)

    # ---- Animation ----
    def animate(self, callback: AnimationCallback, duration: Union[int, str, None] = None) -> "Scene":
        """
        Register `callback(scene, frame, duration)` to run on each loop()
        step. Duration is frames or a string such as '2s', '90f', '1m'.
        """
        self.animation.add(callback, duration)
        return self

    def stop(self, callback: Union[AnimationCallback, bool] = True) -> "Scene":
        self.animation.stop(callback)
        return self

    @property
    def animating(self) -> bool:
        return self.animation.running

    @property
    def frame(self) -> int:
        return self.animation.frame

    def loop(self) -> "Scene":
        """
        Advance one frame: run the animation callbacks, then redraw.
        """
        self.animation.step(self)
        self.draw()
        return self
