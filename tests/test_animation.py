from __future__ import annotations

import pytest

from scene import AnimationLoop, Scene, parse_duration
from scene import easing


@pytest.mark.parametrize(
    "duration, fps, frames",
    [
        (None, 30, -1),
        (0, 30, -1),
        (45, 30, 45),
        ("90f", 30, 90),
        ("2s", 30, 60),
        ("0.5s", 60, 30),
        ("1m", 10, 600),
        ("1h", 1, 3600),
    ],
)
def test_parse_duration(duration, fps: int, frames: int) -> None:
    assert parse_duration(duration, fps) == frames


def test_parse_duration_rejects_garbage() -> None:
    with pytest.raises(ValueError):
        parse_duration("soon", 30)


def test_finite_animation_runs_for_its_duration() -> None:
    loop = AnimationLoop(30)
    calls = []
    loop.add(lambda owner, frame, duration: calls.append((frame, duration)), 3)
    for _ in range(5):
        loop.step(None)
    assert calls == [(1, 3), (2, 3), (3, 3)]
    assert not loop.running
    assert loop.frame == 5


def test_endless_animation_until_stopped() -> None:
    loop = AnimationLoop(30)
    calls = []

    def tick(owner, frame, duration):
        calls.append(frame)

    loop.add(tick)
    for _ in range(4):
        loop.step(None)
    loop.stop(tick)
    loop.step(None)
    assert calls == [1, 2, 3, 4]
    assert not loop.running


def test_stop_all_during_step_skips_remaining() -> None:
    loop = AnimationLoop(30)
    calls = []
    loop.add(lambda owner, f, d: loop.stop())
    loop.add(lambda owner, f, d: calls.append(f))
    loop.step(None)
    assert calls == []
    assert not loop.running


def test_scene_loop_runs_callbacks_then_redraws(opaque_rect) -> None:
    scene = Scene.of_size(40, 30)
    rect = opaque_rect(0, 0, 4, 4)
    scene.add(rect, "r")
    scene.animate(lambda s, frame, duration: s.get("r").move_by(5, 0), "2f")
    assert scene.animating
    scene.loop()
    scene.loop()
    scene.loop()
    assert rect.transform.translate == (10, 0)
    assert scene.frame == 3
    assert not scene.animating
    assert scene.surface.read_pixel(12, 2)[3] == 255
    assert scene.surface.read_pixel(1, 2) == (0, 0, 0, 0)


@pytest.mark.parametrize(
    "fn",
    [easing.quad_in, easing.quad_out, easing.quad_in_out, easing.exp_in, easing.exp_out, easing.back_in_out],
)
def test_easing_steps_sum_to_total(fn) -> None:
    total = sum(fn(100.0, f, 400) for f in range(1, 401))
    assert total == pytest.approx(100.0, rel=0.05)


def test_bounce_and_elastic_finish_near_total() -> None:
    assert sum(easing.bounce_out(10.0, f, 1000) for f in range(1, 1001)) == pytest.approx(10.0, rel=0.05)
    assert sum(easing.elastic_in(10.0, f, 1000) for f in range(1, 1001)) == pytest.approx(10.0, rel=0.1)
