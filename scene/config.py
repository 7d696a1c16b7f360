from __future__ import annotations

from dataclasses import dataclass

from plotting.surface import COMPOSITE_OPERATIONS


@dataclass(frozen=True)
class SceneOptions:
    auto_clear: bool = True
    global_alpha: float = 1.0
    composite_operation: str = "source-over"
    loop_fps: int = 30

    def __post_init__(self):
        if not 0.0 <= self.global_alpha <= 1.0:
            raise ValueError("global_alpha must be in [0, 1]")
        if self.composite_operation not in COMPOSITE_OPERATIONS:
            raise ValueError(f"unsupported composite operation: {self.composite_operation!r}")
        if self.loop_fps <= 0:
            raise ValueError("loop_fps must be positive")
