"""Pixel sampling -- map one output coordinate to one output sample.

Every transform is a pure function of the read-only source image, the
output coordinate and a :class:`SampleParams` record.  :func:`sample` is the
single dispatch point over :class:`SampleMode`; the converter calls it once
per output pixel in row-major order.

Bilinear upscaling
------------------
Each axis is mapped independently by :func:`_axis_span`, which decides
whether the output index is a low border, high border or interior point
and returns the two source slots to blend plus the blend fraction::

    low border   index < int(scale / 2)                     (virtual, i)
    high border  index > out_dim - int((scale + 1) / 2)      (i, virtual)
    interior     otherwise, shifted by int(scale / 2)       (i, i + 1)

A *virtual* slot lies outside the source raster.  Its value is linearly
extrapolated from the anchor sample and its inward neighbour along the same
axis, clamped to ``[0, 255]``.  At corners both axes are virtual and the
doubly missing sample is extrapolated diagonally.

On an edge (exactly one axis is a border) only the border axis is blended.
The other axis is pinned to the unshifted source index ``int(index / scale)``
with fraction 0, so edge rows and columns repeat source samples along the
edge.

The final value is truncated and clamped to the image's max value.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Optional

import numpy as np

from pnmdump.raster.image import RasterImage, Transform

logger = logging.getLogger(__name__)

EXTRAPOLATE_MIN = 0
EXTRAPOLATE_MAX = 255


class SampleMode(enum.Enum):
    IDENTITY = "identity"
    REFLECT = "reflect"
    ROTATE90 = "rotate90"
    NEAREST = "nearest"
    BOX_DOWN = "box_down"
    BILINEAR_UP = "bilinear_up"


@dataclass(frozen=True, slots=True)
class SampleParams:
    """Output geometry shared by every sample of one conversion.

    Parameters
    ----------
    out_width, out_height : int
        Output raster dimensions.
    w_scale, h_scale : float
        Effective output/input ratios (1.0 for non-scaling modes).
    """

    out_width: int
    out_height: int
    w_scale: float = 1.0
    h_scale: float = 1.0


# ---------------------------------------------------------------------------
# Interpolation primitives
# ---------------------------------------------------------------------------


def extrapolate_linear(edge: int, inner: int) -> int:
    """Continue the line through ``inner`` and ``edge`` one step past ``edge``.

    The result is clamped to ``[0, 255]``.
    """
    value = edge - (inner - edge)
    return max(EXTRAPOLATE_MIN, min(EXTRAPOLATE_MAX, value))


def linear_interpolate(t: float, f0: float, f1: float) -> float:
    """Interpolate between ``f0`` (t = 0) and ``f1`` (t = 1)."""
    return f0 * (1 - t) + f1 * t


def bilinear_interpolate(
    tx: float,
    ty: float,
    f00: float,
    f01: float,
    f10: float,
    f11: float,
) -> float:
    """Blend four samples; ``fXY`` is the sample at x offset X, y offset Y."""
    return linear_interpolate(
        ty,
        linear_interpolate(tx, f00, f10),
        linear_interpolate(tx, f01, f11),
    )


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _clamp_index(index: int, size: int) -> int:
    if index < 0:
        return 0
    if index >= size:
        return size - 1
    return index


@dataclass(frozen=True, slots=True)
class _AxisSpan:
    """Source slots for one axis of a bilinear sample.

    ``first``/``second`` are source indices, or ``None`` for a virtual slot
    outside the raster.  ``anchor`` and ``inward`` are the in-bounds samples
    a virtual slot is extrapolated from.
    """

    first: Optional[int]
    second: Optional[int]
    fraction: float
    anchor: int
    inward: int


def _is_border(out_index: int, scale: float, out_dim: int) -> bool:
    return out_index < int(scale / 2) or out_index > out_dim - int((scale + 1) / 2)


def _fixed_span(out_index: int, scale: float, src_dim: int) -> _AxisSpan:
    index = _clamp_index(int(out_index / scale), src_dim)
    return _AxisSpan(index, index, 0.0, index, index)


def _axis_span(out_index: int, scale: float, out_dim: int, src_dim: int) -> _AxisSpan:
    half = int(scale / 2)

    if out_index < half:
        pos = out_index / scale
        index = _clamp_index(int(pos), src_dim)
        inward = _clamp_index(index + 1, src_dim)
        return _AxisSpan(None, index, pos - int(pos), index, inward)

    if out_index > out_dim - int((scale + 1) / 2):
        pos = out_index / scale
        index = _clamp_index(int(pos), src_dim)
        inward = _clamp_index(index - 1, src_dim)
        return _AxisSpan(index, None, pos - int(pos), index, inward)

    pos = (out_index - half) / scale
    index = _clamp_index(int(pos), src_dim)
    neighbour = _clamp_index(index + 1, src_dim)
    return _AxisSpan(index, neighbour, pos - int(pos), index, neighbour)


def _span_value(
    image: RasterImage,
    row: Optional[int],
    col: Optional[int],
    rows: _AxisSpan,
    cols: _AxisSpan,
) -> int:
    if row is not None and col is not None:
        return image.at(row, col)
    if row is None and col is None:
        return extrapolate_linear(
            image.at(rows.anchor, cols.anchor),
            image.at(rows.inward, cols.inward),
        )
    if row is None:
        return extrapolate_linear(image.at(rows.anchor, col), image.at(rows.inward, col))
    return extrapolate_linear(image.at(row, cols.anchor), image.at(row, cols.inward))


# ---------------------------------------------------------------------------
# Per-mode samplers
# ---------------------------------------------------------------------------


def _nearest(image: RasterImage, row: int, col: int, params: SampleParams) -> int:
    src_row = _clamp_index(int(row / params.h_scale), image.height)
    src_col = _clamp_index(int(col / params.w_scale), image.width)
    return image.at(src_row, src_col)


def _box_down(image: RasterImage, row: int, col: int, params: SampleParams) -> int:
    # Block size truncates 1/scale; no correction for inexact reciprocals.
    block_rows = int(1 / params.h_scale)
    block_cols = int(1 / params.w_scale)
    top = int(row / params.h_scale)
    left = int(col / params.w_scale)

    row_idx = np.clip(np.arange(top, top + block_rows), 0, image.height - 1)
    col_idx = np.clip(np.arange(left, left + block_cols), 0, image.width - 1)
    block = image.pixels[np.ix_(row_idx, col_idx)]
    return int(block.sum()) // block.size


def _bilinear_up(image: RasterImage, row: int, col: int, params: SampleParams) -> int:
    row_border = _is_border(row, params.h_scale, params.out_height)
    col_border = _is_border(col, params.w_scale, params.out_width)

    if col_border and not row_border:
        rows = _fixed_span(row, params.h_scale, image.height)
    else:
        rows = _axis_span(row, params.h_scale, params.out_height, image.height)
    if row_border and not col_border:
        cols = _fixed_span(col, params.w_scale, image.width)
    else:
        cols = _axis_span(col, params.w_scale, params.out_width, image.width)

    f00 = _span_value(image, rows.first, cols.first, rows, cols)
    f10 = _span_value(image, rows.first, cols.second, rows, cols)
    f01 = _span_value(image, rows.second, cols.first, rows, cols)
    f11 = _span_value(image, rows.second, cols.second, rows, cols)

    value = int(bilinear_interpolate(cols.fraction, rows.fraction, f00, f01, f10, f11))
    return min(value, image.max_value)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def sample(
    image: RasterImage,
    row: int,
    col: int,
    mode: SampleMode,
    params: Optional[SampleParams] = None,
) -> int:
    """Return the output sample at ``(row, col)``.

    Parameters
    ----------
    image : RasterImage
        Source raster.
    row, col : int
        0-based output coordinate.
    mode : SampleMode
        Transform to apply.
    params : SampleParams, optional
        Output geometry.  Required for every mode except ``IDENTITY`` and
        ``REFLECT``.

    Returns
    -------
    int
        Truncated sample value.
    """
    if mode is SampleMode.IDENTITY:
        return image.at(row, col)
    if mode is SampleMode.REFLECT:
        return image.at(col, row)

    if params is None:
        raise ValueError(f"{mode.value} sampling requires SampleParams")

    if mode is SampleMode.ROTATE90:
        return image.at(params.out_width - 1 - col, row)
    if mode is SampleMode.NEAREST:
        return _nearest(image, row, col, params)
    if mode is SampleMode.BOX_DOWN:
        return _box_down(image, row, col, params)
    if mode is SampleMode.BILINEAR_UP:
        return _bilinear_up(image, row, col, params)

    raise ValueError(f"Unsupported sample mode: {mode!r}")


def select_mode(transform: Transform, ratios: tuple[float, float] = (1.0, 1.0)) -> SampleMode:
    """Map a transform and its effective ``(w, h)`` ratios to a sampling mode.

    Bilinear scaling upsamples when both ratios are at least 1 and box
    filters otherwise; the scale parser guarantees both ratios agree.
    """
    if transform is Transform.IDENTITY:
        return SampleMode.IDENTITY
    if transform is Transform.REFLECT:
        return SampleMode.REFLECT
    if transform is Transform.ROTATE90:
        return SampleMode.ROTATE90
    if transform is Transform.SCALE_NEAREST:
        return SampleMode.NEAREST
    if transform is Transform.SCALE_BILINEAR:
        w_ratio, h_ratio = ratios
        if w_ratio >= 1 and h_ratio >= 1:
            return SampleMode.BILINEAR_UP
        return SampleMode.BOX_DOWN
    raise ValueError(f"Unsupported transform: {transform!r}")
