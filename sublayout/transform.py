"""Glyph transformation matrices, their quantization into cache keys, and blur quantization."""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass

from .geometry import Rect, Vector

STROKER_PRECISION = 16
RASTERIZER_PRECISION = 16
POSITION_PRECISION = 8.0
MAX_PERSP_SCALE = 16.0
SUBPIXEL_ORDER = 3
SUBPIXEL_MASK = 63
BLUR_PRECISION = 1.0 / 256

_MAX_VALUE = 1000000.0
_BLUR_SCALE = 64 * BLUR_PRECISION / POSITION_PRECISION

Matrix = list[list[float]]


class TransformError(ValueError):
    """Raised when a transform cannot be quantized (degenerate or out of range)."""


@dataclass(frozen=True)
class QuantizedTransform:
    """A transform reduced to integers suitable as a bitmap cache key.

    ``pos`` is the whole-pixel position of the bitmap origin, ``offset`` the
    remaining subpixel shift in 1/8 pixel, and ``matrix_*`` the quantized
    linear and perspective coefficients. ``remainder`` is the fractional
    position error to carry to later glyphs of the same run, and ``centered``
    is the input matrix with both origins moved to the bounding box center.
    """

    pos: Vector
    offset: Vector
    matrix_x: tuple[int, int]
    matrix_y: tuple[int, int]
    matrix_z: tuple[int, int]
    remainder: Vector
    centered: tuple[tuple[float, float, float], ...]

    @property
    def key(self) -> tuple:
        return (
            (self.offset.x, self.offset.y),
            self.matrix_x,
            self.matrix_y,
            self.matrix_z,
        )


def _copy_matrix(matrix: Sequence[Sequence[float]]) -> Matrix:
    rows = [list(map(float, row)) for row in matrix]
    if len(rows) != 3 or any(len(row) != 3 for row in rows):
        raise ValueError("transform matrix must be 3x3")
    return rows


def _box_extent(cbox: Rect) -> tuple[float, float, float, float]:
    x0 = (cbox.x_min + cbox.x_max) / 2.0
    y0 = (cbox.y_min + cbox.y_max) / 2.0
    dx = (cbox.x_max - cbox.x_min) / 2.0 + 64
    dy = (cbox.y_max - cbox.y_min) / 2.0 + 64
    return x0, y0, dx, dy


def _quantize(value: float) -> int:
    if not abs(value) < _MAX_VALUE:
        raise TransformError("transform coefficient out of range")
    return round(value)


def quantize_transform(
    matrix: Sequence[Sequence[float]],
    cbox: Rect,
    offset: Vector | None = None,
    first: bool = True,
) -> QuantizedTransform:
    """Quantize a projective transform of an outline with control box ``cbox``.

    For the first glyph of a run the position remainder is computed and
    returned; for later glyphs ``offset`` (the first glyph's remainder) is
    subtracted so that the whole run shares the same subpixel error.
    """
    m = _copy_matrix(matrix)
    x0, y0, dx, dy = _box_extent(cbox)

    for row in m:
        row[2] += row[0] * x0 + row[1] * y0

    if m[2][2] <= 0:
        raise TransformError("transform puts the outline behind the viewer")

    w = 1 / m[2][2]
    center = [m[0][2] * w, m[1][2] * w]
    for i in range(2):
        for j in range(2):
            m[i][j] -= m[2][j] * center[i]

    delta = (0.0, 0.0)
    if not first and offset is not None:
        delta = (offset.x, offset.y)

    qr = []
    for i in range(2):
        center[i] /= 64 >> SUBPIXEL_ORDER
        center[i] -= delta[i]
        qr.append(_quantize(center[i]))

    z0 = m[2][2] - abs(m[2][0]) * dx - abs(m[2][1]) * dy
    w = 1.0 / POSITION_PRECISION / max(z0, m[2][2] / MAX_PERSP_SCALE)
    mul = [dx * w, dy * w]

    qm = [[_quantize(m[i][j] * mul[j]) for j in range(2)] for i in range(2)]

    qmx = abs(qm[0][0]) + abs(qm[0][1])
    qmy = abs(qm[1][0]) + abs(qm[1][1])
    w = POSITION_PRECISION * max(qmx, qmy)
    mul = [mul[0] * w, mul[1] * w]
    qm.append([_quantize(m[2][j] * mul[j]) for j in range(2)])

    if first:
        remainder = Vector(center[0] - qr[0], center[1] - qr[1])
    else:
        remainder = offset if offset is not None else Vector(0.0, 0.0)

    sub_mask = (1 << SUBPIXEL_ORDER) - 1
    return QuantizedTransform(
        pos=Vector(qr[0] >> SUBPIXEL_ORDER, qr[1] >> SUBPIXEL_ORDER),
        offset=Vector(qr[0] & sub_mask, qr[1] & sub_mask),
        matrix_x=(qm[0][0], qm[0][1]),
        matrix_y=(qm[1][0], qm[1][1]),
        matrix_z=(qm[2][0], qm[2][1]),
        remainder=remainder,
        centered=tuple(tuple(row) for row in m),
    )


def restore_transform(key: QuantizedTransform, cbox: Rect) -> Matrix:
    """Rebuild a matrix from a quantized key, relative to the key's pixel position."""
    x0, y0, dx, dy = _box_extent(cbox)

    q_x = POSITION_PRECISION / dx
    q_y = POSITION_PRECISION / dy
    m: Matrix = [[0.0] * 3 for _ in range(3)]
    m[0][0] = key.matrix_x[0] * q_x
    m[0][1] = key.matrix_x[1] * q_y
    m[1][0] = key.matrix_y[0] * q_x
    m[1][1] = key.matrix_y[1] * q_y

    qmx = abs(key.matrix_x[0]) + abs(key.matrix_x[1])
    qmy = abs(key.matrix_y[0]) + abs(key.matrix_y[1])
    largest = max(qmx, qmy)
    scale_z = 1.0 / POSITION_PRECISION / largest if largest else 0.0
    m[2][0] = key.matrix_z[0] * q_x * scale_z
    m[2][1] = key.matrix_z[1] * q_y * scale_z

    m[2][2] = min(1 + abs(m[2][0]) * dx + abs(m[2][1]) * dy, MAX_PERSP_SCALE)

    step = 64 >> SUBPIXEL_ORDER
    center = (key.offset.x * step, key.offset.y * step)
    for i in range(2):
        for j in range(3):
            m[i][j] += m[2][j] * center[i]

    for row in m:
        row[2] -= row[0] * x0 + row[1] * y0
    return m


def quantize_blur(radius: float) -> tuple[int, int]:
    """Quantize a gaussian blur radius.

    Returns the blur index and the mask of shadow offset bits (in 1/64 pixel)
    that the blur makes insignificant.
    """
    if radius < 0 or math.isnan(radius):
        raise ValueError("blur radius must be non-negative")
    radius *= _BLUR_SCALE
    _, order = math.frexp((1 + radius) * (POSITION_PRECISION / 2))
    shadow_mask = (1 << order) - 1
    return round(math.log1p(radius) / BLUR_PRECISION), shadow_mask


def restore_blur(qblur: int) -> float:
    """Return the squared blur radius that a quantized blur index stands for."""
    sigma = math.expm1(BLUR_PRECISION * qblur) / _BLUR_SCALE
    return sigma * sigma


def calc_transform_matrix(
    rotation: Sequence[float],
    shear: Sequence[float],
    scale: Sequence[float],
    shift: Sequence[float],
    asc: float,
    pos: Sequence[float],
    font_scale_x: float,
    blur_scale: float,
) -> Matrix:
    """Build the projective matrix for a glyph's rotation, shear and position.

    Angles are in degrees; ``shift`` is the glyph's offset from the rotation
    origin and ``pos`` its screen position, both in 26.6 units.
    """
    frx, fry, frz = (math.radians(a) for a in rotation)
    fax, fay = shear
    scale_x, scale_y = scale
    shift_x, shift_y = shift
    pos_x, pos_y = pos
    if not scale_x or not scale_y:
        raise ValueError("glyph scale must be non-zero")

    sx, cx = -math.sin(frx), math.cos(frx)
    sy, cy = math.sin(fry), math.cos(fry)
    sz, cz = -math.sin(frz), math.cos(frz)

    fax = fax * scale_x / scale_y
    fay = fay * scale_y / scale_x
    x1 = (1.0, fax, shift_x + asc * fax)
    y1 = (fay, 1.0, float(shift_y))

    x2 = [a * cz - b * sz for a, b in zip(x1, y1)]
    y2 = [a * sz + b * cz for a, b in zip(x1, y1)]

    y3 = [v * cx for v in y2]
    z3 = [v * sx for v in y2]

    x4 = [a * cy - b * sy for a, b in zip(x2, z3)]
    z4 = [a * sy + b * cy for a, b in zip(x2, z3)]

    dist = 20000 * blur_scale
    z4[2] += dist

    scale_dist_x = dist * font_scale_x
    offs_x = pos_x - shift_x * font_scale_x
    offs_y = pos_y - shift_y
    return [
        [z * offs_x + x * scale_dist_x for z, x in zip(z4, x4)],
        [z * offs_y + y * dist for z, y in zip(z4, y3)],
        list(z4),
    ]