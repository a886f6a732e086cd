import math

import pytest
from hypothesis import given
from hypothesis import strategies as st

from sublayout.geometry import Rect, Vector
from sublayout.transform import (
    SUBPIXEL_ORDER,
    QuantizedTransform,
    TransformError,
    calc_transform_matrix,
    quantize_blur,
    quantize_transform,
    restore_blur,
    restore_transform,
)


def project(m, x, y):
    z = m[2][0] * x + m[2][1] * y + m[2][2]
    return (
        (m[0][0] * x + m[0][1] * y + m[0][2]) / z,
        (m[1][0] * x + m[1][1] * y + m[1][2]) / z,
    )


def corners(cbox):
    return [
        (cbox.x_min, cbox.y_min),
        (cbox.x_max, cbox.y_min),
        (cbox.x_min, cbox.y_max),
        (cbox.x_max, cbox.y_max),
    ]


def restored_point(q, restored, x, y):
    rx, ry = project(restored, x, y)
    return rx + q.pos.x * 64, ry + q.pos.y * 64


BOX = Rect(0, 0, 640, 640)


def test_nonpositive_depth_raises():
    with pytest.raises(TransformError):
        quantize_transform([[1, 0, 0], [0, 1, 0], [0, 0, 0]], BOX)


def test_huge_translation_raises():
    with pytest.raises(TransformError):
        quantize_transform([[1, 0, 1e12], [0, 1, 0], [0, 0, 1]], BOX)


def test_nan_raises():
    with pytest.raises(TransformError):
        quantize_transform([[1, 0, math.nan], [0, 1, 0], [0, 0, 1]], BOX)


def test_bad_shape_raises():
    with pytest.raises(ValueError):
        quantize_transform([[1, 0], [0, 1]], BOX)


def test_input_matrix_not_modified():
    m = [[1.0, 0.0, 5.0], [0.0, 1.0, 7.0], [0.0, 0.0, 1.0]]
    quantize_transform(m, BOX)
    assert m == [[1.0, 0.0, 5.0], [0.0, 1.0, 7.0], [0.0, 0.0, 1.0]]


def test_homogeneous_scale_gives_same_key():
    m = [[1.5, 0.25, 300.0], [-0.5, 2.0, 900.0], [0.0, 0.0, 1.0]]
    doubled = [[2 * v for v in row] for row in m]
    a = quantize_transform(m, BOX)
    b = quantize_transform(doubled, BOX)
    assert a.key == b.key
    assert a.pos == b.pos


def test_carried_remainder_reproduces_position():
    m = [[1.0, 0.0, 1234.56], [0.0, 1.0, -789.01], [0.0, 0.0, 1.0]]
    first = quantize_transform(m, BOX, None, True)
    later = quantize_transform(m, BOX, first.remainder, False)
    assert later.pos == first.pos
    assert later.offset == first.offset
    assert later.remainder == first.remainder
    assert abs(first.remainder.x) <= 0.5 and abs(first.remainder.y) <= 0.5


@given(
    tx=st.floats(min_value=-100000, max_value=100000),
    ty=st.floats(min_value=-100000, max_value=100000),
    sx=st.floats(min_value=0.5, max_value=4),
    sy=st.floats(min_value=0.5, max_value=4),
    w=st.integers(min_value=0, max_value=4000),
    h=st.integers(min_value=0, max_value=4000),
)
def test_affine_round_trip(tx, ty, sx, sy, w, h):
    cbox = Rect(-w // 2, -h, w - w // 2, 0)
    m = [[sx, 0.0, tx], [0.0, sy, ty], [0.0, 0.0, 1.0]]
    q = quantize_transform(m, cbox)
    sub_mask = (1 << SUBPIXEL_ORDER) - 1
    assert 0 <= q.offset.x <= sub_mask and 0 <= q.offset.y <= sub_mask
    assert q.matrix_z == (0, 0)
    restored = restore_transform(q, cbox)
    for x, y in corners(cbox):
        ox, oy = project(m, x, y)
        rx, ry = restored_point(q, restored, x, y)
        assert abs(ox - rx) <= 16
        assert abs(oy - ry) <= 16


def test_restore_accepts_key_with_zero_linear_part():
    q = QuantizedTransform(
        pos=Vector(0, 0),
        offset=Vector(0, 0),
        matrix_x=(0, 0),
        matrix_y=(0, 0),
        matrix_z=(0, 0),
        remainder=Vector(0, 0),
        centered=(),
    )
    m = restore_transform(q, BOX)
    assert m[2] == [0.0, 0.0, 1.0]


@given(
    x=st.floats(min_value=-5000, max_value=5000),
    y=st.floats(min_value=-5000, max_value=5000),
    px=st.floats(min_value=-50000, max_value=50000),
    py=st.floats(min_value=-50000, max_value=50000),
    shx=st.floats(min_value=-1000, max_value=1000),
    shy=st.floats(min_value=-1000, max_value=1000),
)
def test_unrotated_matrix_translates_by_pos(x, y, px, py, shx, shy):
    m = calc_transform_matrix((0, 0, 0), (0, 0), (1, 1), (shx, shy), 0, (px, py), 1.0, 1.0)
    ox, oy = project(m, x, y)
    assert ox == pytest.approx(x + px, abs=1e-6)
    assert oy == pytest.approx(y + py, abs=1e-6)


def test_rotation_about_z_turns_quarter():
    m = calc_transform_matrix((0, 0, 90), (0, 0), (1, 1), (0, 0), 0, (0, 0), 1.0, 1.0)
    ox, oy = project(m, 100, 0)
    assert ox == pytest.approx(0, abs=1e-9)
    assert oy == pytest.approx(-100)


def test_zero_scale_rejected():
    with pytest.raises(ValueError):
        calc_transform_matrix((0, 0, 0), (0.5, 0), (0, 1), (0, 0), 0, (0, 0), 1.0, 1.0)


def test_zero_blur():
    assert quantize_blur(0.0) == (0, (1 << SUBPIXEL_ORDER) - 1)
    assert restore_blur(0) == 0.0


def test_negative_blur_rejected():
    with pytest.raises(ValueError):
        quantize_blur(-1.0)


@given(st.floats(min_value=0, max_value=10000))
def test_blur_round_trip(radius):
    qblur, mask = quantize_blur(radius)
    assert qblur >= 0
    assert (mask + 1) & mask == 0
    assert mask >= (1 << SUBPIXEL_ORDER) - 1
    sigma = math.sqrt(restore_blur(qblur))
    assert abs(sigma - radius) <= (1 + radius / 32) / 16 + 1e-9


@given(st.floats(min_value=0, max_value=1000), st.floats(min_value=0, max_value=1000))
def test_blur_is_monotonic(a, b):
    lo, hi = sorted((a, b))
    assert quantize_blur(lo)[0] <= quantize_blur(hi)[0]
    assert quantize_blur(lo)[1] <= quantize_blur(hi)[1]