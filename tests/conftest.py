"""Shared fixtures: small surfaces and scenes, opaque rectangles."""

from __future__ import annotations

from typing import Callable

import matplotlib

matplotlib.use("Agg")

import pytest

from plotting import Surface
from scene import Scene
from shapes import Rect


@pytest.fixture()
def surface() -> Surface:
    return Surface(40, 30)


@pytest.fixture()
def scene() -> Scene:
    return Scene.of_size(40, 30)


@pytest.fixture()
def opaque_rect() -> Callable[..., Rect]:
    def make(x: float = 0, y: float = 0, w: float = 10, h: float = 10, color: str = "#808080") -> Rect:
        rect = Rect(x, y, w, h)
        rect.options(fill=color)
        return rect

    return make
