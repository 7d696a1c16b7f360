from __future__ import annotations

import math

import numpy as np
import pytest

from shapes import Affine2D, Rect, TransformState


def test_affine_components_order() -> None:
    m = Affine2D.from_components(1, 2, 3, 4, 5, 6)
    assert m.components == (1.0, 2.0, 3.0, 4.0, 5.0, 6.0)
    # x' = m11*x + m12*y + dx, y' = m21*x + m22*y + dy
    assert np.allclose(m.apply((1, 1)), [8.0, 13.0])


def test_matmul_applies_right_operand_first() -> None:
    t = Affine2D.from_translate(10, 0)
    s = Affine2D.from_scale(2)
    assert np.allclose((s @ t).apply((1, 0)), [22.0, 0.0])
    assert np.allclose((t @ s).apply((1, 0)), [12.0, 0.0])


def test_inverse_roundtrip_and_singular() -> None:
    m = Affine2D.from_components(2, 1, 0, 3, 4, -5)
    p = np.array([7.0, -2.0])
    assert np.allclose(m.inverse_apply(m.apply(p)), p)
    singular = Affine2D.from_scale(0, 1)
    assert not singular.is_invertible
    with pytest.raises(ValueError):
        singular.inverse()


def test_affine_rejects_bad_shapes() -> None:
    with pytest.raises(ValueError):
        Affine2D(A=np.eye(3), t=np.zeros(2))
    with pytest.raises(ValueError):
        Affine2D(A=np.eye(2), t=np.zeros(3))


def test_identity_values_collapse_to_unset() -> None:
    r = Rect(5, 5, 10, 10)
    r.rotate(30).scale(2, 3).set_matrix(2, 0, 0, 2, 1, 1)
    assert r.transform.rotate is not None
    assert r.transform.scale is not None
    assert r.transform.matrix is not None

    r.rotate(0).scale(1, 1).move(0, 0).set_matrix(1, 0, 0, 1, 0, 0)
    state = r.transform
    assert state.rotate is None
    assert state.scale is None
    assert state.translate is None
    assert state.matrix is None


def test_change_matrix_after_reset_composes_from_identity() -> None:
    r = Rect(0, 0, 10, 10)
    r.set_matrix(3, 0, 0, 3, 0, 0)
    r.set_matrix(1, 0, 0, 1, 0, 0)
    r.change_matrix(1, 0, 0, 1, 5, 7)
    assert r.transform.matrix.components == (1.0, 0.0, 0.0, 1.0, 5.0, 7.0)


def test_change_matrix_back_to_identity_clears() -> None:
    r = Rect(0, 0, 10, 10)
    r.change_matrix(1, 0, 0, 1, 5, 0)
    r.change_matrix(1, 0, 0, 1, -5, 0)
    assert r.transform.matrix is None


def test_relative_setters_accumulate() -> None:
    r = Rect(0, 0, 10, 10)
    r.move_by(2, 3).move_by(1, 1)
    assert r.transform.translate == (3, 4)
    r.rotate_by(45).rotate_by(45)
    assert r.transform.rotate.angle == pytest.approx(math.pi / 2)
    r.scale_by(0.5)
    assert (r.transform.scale.sx, r.transform.scale.sy) == (1.5, 1.5)
    r.scale_by(-0.5)
    assert r.transform.scale is None


def test_rotation_defaults_to_item_center() -> None:
    r = Rect(10, 10, 20, 20).rotate(90)
    m = r.composed_matrix()
    # local center (10, 10) stays at device (20, 20)
    assert np.allclose(m.apply((10, 10)), [20.0, 20.0])
    assert np.allclose(m.apply((0, 0)), [30.0, 10.0])


def test_scale_about_explicit_pivot() -> None:
    centered = Rect(0, 0, 10, 10).scale(2)
    assert np.allclose(centered.composed_matrix().apply((0, 0)), [-5.0, -5.0])
    pinned = Rect(0, 0, 10, 10).scale(2, pivot=(0, 0))
    assert np.allclose(pinned.composed_matrix().apply((10, 10)), [20.0, 20.0])


def test_custom_matrix_applies_outermost() -> None:
    r = Rect(10, 0, 1, 1).set_matrix(2, 0, 0, 2, 0, 0)
    assert np.allclose(r.composed_matrix().apply((0, 0)), [20.0, 0.0])


def test_compose_without_components_is_identity() -> None:
    assert TransformState().compose((3.0, 4.0)).is_identity


def test_clone_is_independent() -> None:
    r = Rect(1, 2, 3, 4).options(fill="#ff0000").rotate(10)
    c = r.clone()
    c.options(fill="#00ff00").move(0, 0).hide()
    assert r.draw_options.fill == "#ff0000"
    assert r.transform.translate == (1, 2)
    assert not r.hidden
