from __future__ import annotations

import logging

import numpy as np
import pytest

import plotting.hitmap as hitmap
from plotting.hitmap import HIT_PALETTE, batch_ranges, decode_color, get_item_at_point, iter_hit_batches
from plotting.surface import to_rgba
from scene import Scene, SceneOptions
from shapes import Circle, Polygon, Rect, Text


def test_three_overlapping_rects_pick_topmost(scene: Scene, opaque_rect) -> None:
    a, b, c = opaque_rect(0, 0, 10, 10), opaque_rect(2, 2, 10, 10), opaque_rect(4, 4, 10, 10)
    scene.add(a, "A").add(b, "B").add(c, "C").draw()
    assert scene.get_item_at_point(5, 5) is c
    scene.remove(c)
    scene.draw()
    assert scene.get_item_at_point(5, 5) is b
    assert scene.get_item_at_point(1, 1) is a


def test_transparent_point_skips_offscreen_render(scene: Scene, opaque_rect, monkeypatch) -> None:
    scene.add(opaque_rect(0, 0, 10, 10)).draw()

    def fail(*args, **kwargs):
        raise AssertionError("off-screen render attempted")

    monkeypatch.setattr(hitmap, "iter_hit_batches", fail)
    monkeypatch.setattr(hitmap, "Surface", fail)
    assert get_item_at_point(scene, 30, 25) is None


def test_nine_stacked_items_return_topmost(scene: Scene, opaque_rect) -> None:
    items = [opaque_rect(0, 0, 10, 10) for _ in range(9)]
    for item in items:
        scene.add(item)
    scene.draw()
    assert scene.get_item_at_point(5, 5) is items[8]


def test_hit_found_in_second_batch(scene: Scene, opaque_rect) -> None:
    bottom = opaque_rect(0, 0, 10, 10)
    scene.add(bottom)
    for _ in range(8):
        scene.add(opaque_rect(20, 20, 5, 5))
    scene.draw()

    batches = list(iter_hit_batches(scene, 5, 5))
    assert [(b.start, b.end) for b in batches] == [(1, 8), (0, 0)]
    assert batches[0].hit is None
    assert batches[1].hit is bottom
    assert scene.get_item_at_point(5, 5) is bottom


def test_hit_test_does_not_touch_original_style(scene: Scene) -> None:
    rect = Rect(0, 0, 10, 10).options(fill="#123456", stroke="#abcdef", shadow="#00000080", shadow_blur=2)
    scene.add(rect).draw()
    before = scene.surface.to_array()
    assert scene.get_item_at_point(5, 5) is rect
    assert rect.draw_options.fill == "#123456"
    assert rect.draw_options.stroke == "#abcdef"
    assert rect.draw_options.shadow == "#00000080"
    assert (scene.surface.to_array() == before).all()


def test_hidden_items_are_not_picked(scene: Scene, opaque_rect) -> None:
    below, above = opaque_rect(0, 0, 10, 10), opaque_rect(0, 0, 10, 10)
    scene.add(below).add(above).draw()
    above.hide()
    assert scene.get_item_at_point(5, 5) is below


def test_scene_alpha_does_not_affect_decoding(opaque_rect) -> None:
    scene = Scene.of_size(40, 30, SceneOptions(global_alpha=0.3))
    rect = opaque_rect(0, 0, 10, 10)
    scene.add(rect).draw()
    assert scene.get_item_at_point(5, 5) is rect


def test_transformed_shapes_are_picked_by_their_pixels(scene: Scene) -> None:
    disk = Circle(30, 15, 8).options(fill="#00ff00")
    bar = Rect(0, 12, 40, 6).options(fill="#ff0000").rotate(90)
    scene.add(disk).add(bar).draw()
    # the bar is vertical after rotation about its center (20, 15)
    assert scene.get_item_at_point(20, 3) is bar
    assert scene.get_item_at_point(31, 15) is disk
    assert scene.get_item_at_point(2, 15) is None


def test_text_is_pickable(scene: Scene) -> None:
    label = Text(2, 24, "MW").options(fill="#000000", font_size=20)
    scene.add(label).draw()
    ys, xs = (scene.surface.to_array()[..., 3] > 0).nonzero()
    assert scene.get_item_at_point(int(xs[0]), int(ys[0])) is label


def test_point_outside_surface(scene: Scene, opaque_rect) -> None:
    scene.add(opaque_rect(0, 0, 40, 30)).draw()
    assert scene.get_item_at_point(-1, 5) is None
    assert scene.get_item_at_point(40, 5) is None


@pytest.mark.parametrize(
    "count, expected",
    [
        (0, []),
        (1, [(0, 0)]),
        (8, [(0, 7)]),
        (9, [(1, 8), (0, 0)]),
        (17, [(9, 16), (1, 8), (0, 0)]),
    ],
)
def test_batch_ranges(count: int, expected: list) -> None:
    assert list(batch_ranges(count)) == expected


def test_decode_color() -> None:
    for i, color in enumerate(HIT_PALETTE):
        assert decode_color(to_rgba(color)) == i
    assert decode_color((0, 0, 0, 0)) is None
    assert decode_color((10, 20, 30, 255)) is None


def test_undecodable_pixel_is_logged(scene: Scene, opaque_rect, monkeypatch, caplog) -> None:
    scene.add(opaque_rect(0, 0, 10, 10)).draw()
    monkeypatch.setattr(hitmap, "decode_color", lambda pixel: None)
    with caplog.at_level(logging.WARNING, logger="plotting.hitmap"):
        assert get_item_at_point(scene, 5, 5) is None
    assert "matches no palette color" in caplog.text


def test_every_pick_matches_the_visible_item(scene: Scene) -> None:
    owners = {}

    def add(shape, fill, stroke=None):
        shape.options(fill=fill, stroke=stroke, width=2)
        owners[to_rgba(fill)[:3]] = shape
        if stroke is not None:
            owners[to_rgba(stroke)[:3]] = shape
        scene.add(shape)

    add(Rect(0, 0, 12, 10), "#804020")
    add(Rect(5, 5, 12, 10), "#208040")
    add(Circle(28, 12, 7), "#402080")
    add(Polygon(20, 22, 5, 6).rotate(17), "#a0a0a0")
    add(Rect(30, 20, 8, 8), "#101010", stroke="#c0c0c0")
    scene.draw()

    mismatches = []
    for y in range(scene.surface.height):
        for x in range(scene.surface.width):
            live = scene.surface.read_pixel(x, y)
            expected = owners[live[:3]] if live[3] else None
            picked = scene.get_item_at_point(x, y)
            if picked is not expected:
                mismatches.append((x, y))
    assert mismatches == []


def test_hit_clone_footprint_equals_live_footprint(scene: Scene, opaque_rect) -> None:
    scene.add(opaque_rect(2, 2, 10, 10)).draw()
    live = scene.surface.to_array()[..., 3] > 0
    (batch,) = iter_hit_batches(scene, 5, 5, keep_images=True)
    clone = np.asarray(batch.image)[..., 3] > 0
    assert (clone == live).all()


def test_stroke_only_item_interior_is_not_claimed(scene: Scene, opaque_rect) -> None:
    below = opaque_rect(0, 0, 40, 30)
    ring = Rect(5, 5, 20, 20).options(stroke="#000000", width=2)
    scene.add(below).add(ring).draw()
    assert scene.get_item_at_point(15, 15) is below
    assert scene.get_item_at_point(5, 15) is ring
