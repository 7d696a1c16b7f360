from __future__ import annotations

import logging
import os
from typing import Any, Iterable, Mapping, Optional

import matplotlib.pyplot as plt
import numpy as np
from PIL import Image

from shapes import DrawOptions, Shape, as_paint
from plotting.surface import Surface

logger = logging.getLogger(__name__)


def _apply_style(surface: Surface, style: DrawOptions) -> None:
    if style.fill is not None:
        surface.fill_style = as_paint(style.fill).resolve(surface)
    if style.stroke is not None:
        surface.stroke_style = as_paint(style.stroke).resolve(surface)
        surface.set_line_style(style.width, style.line_cap, style.line_join, style.miter_limit)
    if style.shadow is not None:
        surface.set_shadow(
            as_paint(style.shadow).resolve(surface),
            style.shadow_x,
            style.shadow_y,
            style.shadow_blur,
        )


def draw_item(
    surface: Surface,
    item: Shape,
    override: Optional[Mapping[str, Any]] = None,
    global_alpha: float = 1.0,
    composite_operation: str = "source-over",
) -> None:
    """
    Draw one item: resolve its style (override wins per field), set the
    composed matrix, build the geometry path, then stroke and/or fill.
    Hidden items are skipped entirely.
    """
    if item.hidden:
        return
    style = item.draw_options.merged(override)
    surface.save()
    try:
        surface.global_alpha = global_alpha
        surface.composite_operation = composite_operation
        _apply_style(surface, style)
        surface.reset_transform()
        surface.set_transform(item.composed_matrix(surface))
        surface.begin_path()
        item.paint(surface, style)
    finally:
        surface.restore()


def draw_items(
    surface: Surface,
    items: Iterable[Shape],
    override: Optional[Mapping[str, Any]] = None,
    global_alpha: float = 1.0,
    composite_operation: str = "source-over",
) -> None:
    # Paint order: first item at the bottom
    for item in items:
        draw_item(surface, item, override, global_alpha, composite_operation)


def render_to_file(scene, out_path: str, background: Optional[str] = None) -> None:
    """
    Save the scene's surface as it currently is (draw() first) to a PNG.
    """
    img = scene.surface.to_image()
    if background is not None:
        base = Image.new("RGBA", img.size, background)
        img = Image.alpha_composite(base, img)
    out_dir = os.path.dirname(out_path)
    if out_dir:
        os.makedirs(out_dir, exist_ok=True)
    img.save(out_path, format="PNG")
    logger.info("Saved scene render -> %s", out_path)


def render_hit_batches(
    scene,
    x: int,
    y: int,
    out_path: str,
    cols: int = 4,
    figsize_per_cell: tuple[float, float] = (3.0, 3.0),
) -> None:
    """
    Renders a grid with the live surface followed by every off-screen batch
    the hit test draws for (x, y), marking the sampled point. Batches are
    rendered even below a hit so the whole scan is visible.
    """
    from plotting.hitmap import iter_hit_batches

    batches = list(iter_hit_batches(scene, x, y, keep_images=True, stop_at_hit=False))
    panels = [("live", np.asarray(scene.surface.to_image()))]
    for b in batches:
        label = f"[{b.start}..{b.end}]"
        if b.hit is not None:
            label += f" hit #{b.hit_index}"
        panels.append((label, np.asarray(b.image)))

    n = len(panels)
    cols = max(1, cols)
    rows = (n + cols - 1) // cols
    fig, axes = plt.subplots(
        rows, cols,
        figsize=(figsize_per_cell[0] * cols, figsize_per_cell[1] * rows),
        constrained_layout=True,
    )
    axes = np.atleast_1d(axes).reshape(rows, cols)

    for idx, (label, pixels) in enumerate(panels):
        ax = axes[idx // cols, idx % cols]
        ax.imshow(pixels, interpolation="none")
        ax.plot([x], [y], marker="+", color="gray", markersize=12)
        ax.set_title(label, fontsize=10)
        ax.set_xticks([])
        ax.set_yticks([])

    for idx in range(n, rows * cols):
        axes[idx // cols, idx % cols].axis("off")

    out_dir = os.path.dirname(out_path)
    if out_dir:
        os.makedirs(out_dir, exist_ok=True)
    fmt = "svg" if out_path.endswith(".svg") else "png"
    fig.savefig(out_path, dpi=150, format=fmt, facecolor="white")
    plt.close(fig)
    logger.info("Saved hit batch grid (%d batches) -> %s", len(batches), out_path)
