"""
Point picking by re-rendering.

Instead of per-geometry "is the point inside" tests, candidates are drawn
again on a private off-screen surface in flat synthetic colors and the pixel
under the point is read back. Up to eight items are tested per render, each
in its own palette color, scanning from the top of the paint order down so
that the first decoded hit is the visually topmost one.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterator, Optional, Tuple

from PIL import Image

from shapes import Shape
from plotting.renderer import draw_items
from plotting.surface import RGBA, Surface, to_rgba

logger = logging.getLogger(__name__)

HIT_PALETTE: Tuple[str, ...] = (
    "#ff0000",
    "#00ff00",
    "#0000ff",
    "#ffff00",
    "#ff00ff",
    "#00ffff",
    "#000000",
    "#ffffff",
)
BATCH_SIZE = len(HIT_PALETTE)

_PALETTE_RGB = tuple(to_rgba(c)[:3] for c in HIT_PALETTE)


def batch_ranges(count: int) -> Iterator[Tuple[int, int]]:
    """
    Inclusive (start, end) index ranges from the top of the paint order
    down, BATCH_SIZE records each; the last batch may be shorter.
    """
    for end in range(count - 1, -1, -BATCH_SIZE):
        yield max(0, end - BATCH_SIZE + 1), end


def decode_color(pixel: RGBA) -> Optional[int]:
    """
    Palette index of an opaque hit pixel, exact RGB match only.
    """
    if pixel[3] == 0:
        return None
    rgb = tuple(pixel[:3])
    for i, color in enumerate(_PALETTE_RGB):
        if color == rgb:
            return i
    return None


@dataclass
class HitBatch:
    start: int
    end: int
    candidates: Tuple[Shape, ...]
    pixel: RGBA
    hit_index: Optional[int] = None
    image: Optional[Image.Image] = None

    @property
    def hit(self) -> Optional[Shape]:
        if self.hit_index is None:
            return None
        return self.candidates[self.hit_index]


def _hit_clone(item: Shape, color: str) -> Shape:
    """
    Flat-colored copy with the same footprint as the live item: the palette
    color replaces only the fill and stroke the item actually paints, and
    the shadow is dropped.
    """
    clone = item.clone()
    opts = item.draw_options
    clone.options(
        fill=color if opts.fill is not None else None,
        stroke=color if opts.stroke is not None else None,
        shadow=None,
    )
    return clone


def iter_hit_batches(
    scene,
    x: int,
    y: int,
    keep_images: bool = False,
    stop_at_hit: bool = True,
) -> Iterator[HitBatch]:
    """
    Render and sample every batch for point (x, y), topmost batch first.
    The registry is snapshotted before the first render.
    """
    drawables = tuple(scene.drawables())
    offscreen = Surface(scene.surface.width, scene.surface.height)
    for start, end in batch_ranges(len(drawables)):
        candidates = tuple(d for d in drawables[start:end + 1] if not d.hidden)
        offscreen.clear()
        clones = [_hit_clone(d, HIT_PALETTE[j]) for j, d in enumerate(candidates)]
        draw_items(offscreen, clones)
        pixel = offscreen.read_pixel(x, y)
        batch = HitBatch(start=start, end=end, candidates=candidates, pixel=pixel)
        if keep_images:
            batch.image = offscreen.to_image()
        if pixel[3] != 0:
            batch.hit_index = decode_color(pixel)
            if batch.hit_index is None:
                logger.warning(
                    "Hit pixel %s at (%d, %d) matches no palette color in batch [%d..%d]",
                    pixel, x, y, start, end,
                )
        logger.debug("Hit batch [%d..%d] at (%d, %d): pixel=%s hit=%s", start, end, x, y, pixel, batch.hit_index)
        yield batch
        if stop_at_hit and batch.hit is not None:
            return


def get_item_at_point(scene, x: int, y: int) -> Optional[Shape]:
    """
    Topmost visible drawable covering pixel (x, y) of the scene's surface,
    or None. A transparent live pixel returns None without re-rendering.
    """
    if scene.surface.read_pixel(x, y) == (0, 0, 0, 0):
        logger.debug("No item at (%d, %d): live pixel is transparent", x, y)
        return None
    for batch in iter_hit_batches(scene, x, y):
        if batch.hit is not None:
            return batch.hit
    return None
