#!/usr/bin/env python3
"""
Difference Operators
====================
Symmetric finite-difference filters that highlight transitions along one
axis of a kymograph, such as the liquid front in a capillary.

For a window ``span`` the response at a pixel is

    |sum_{k=1}^{span-1} (v[+k] - v[-k])|

taken along X (``XDiffn``), Y (``YDiffn``) or both (``XYDiffn``).
Pixels whose window would leave the image are zero.  ``options.span_diff``
overrides the constructor span when set.

YDiffn1D applies the vertical window to the chromatic contrast
``R - (G+B)/2``.  YDifferenceL compares the mean colour of a window
above each pixel with one below it.
"""

from __future__ import annotations

import numpy as np

from .base import BaseTransform
from .config import (
    DEFAULT_X_SPAN,
    DEFAULT_XY_SPAN,
    DEFAULT_Y1D_SPAN,
    DEFAULT_Y_SPAN,
    MAX_SPAN,
    RGB_CHANNELS,
    XY_HORIZONTAL_SPAN,
)


# ---------------------------------------------------------------------------
# Window sums
# ---------------------------------------------------------------------------

def window_difference(values: np.ndarray, span: int, axis: int,
                      lo: int | None = None, hi: int | None = None) -> np.ndarray:
    """Signed sum ``sum_{k=1}^{span-1} (v[i+k] - v[i-k])`` along *axis*.

    Evaluated for ``lo <= i < hi`` (default ``[span, n - span)``); other
    positions are zero.  The caller guarantees ``lo >= span - 1`` and
    ``hi <= n - span + 1``.
    """
    n = values.shape[axis]
    lo = span if lo is None else lo
    hi = n - span if hi is None else hi
    out = np.zeros(values.shape, dtype=np.float64)
    if hi <= lo:
        return out
    src = np.moveaxis(values, axis, 0)
    dst = np.moveaxis(out, axis, 0)
    for k in range(1, span):
        dst[lo:hi] += src[lo + k:hi + k] - src[lo - k:hi - k]
    return out


def _int_planes(image, count: int = RGB_CHANNELS) -> list[np.ndarray]:
    """First *count* channels truncated to integers, as float64."""
    return [np.trunc(image.data[:, :, c].astype(np.float64))
            for c in range(min(image.channels, count))]


def _zero_outside(plane: np.ndarray, span: int, axis: int) -> np.ndarray:
    n = plane.shape[axis]
    view = np.moveaxis(plane, axis, 0)
    view[:min(span, n)] = 0
    view[max(n - span, 0):] = 0
    return plane


# ---------------------------------------------------------------------------
# Transforms
# ---------------------------------------------------------------------------

class _SpanTransform(BaseTransform):
    """Difference operator with a configurable window."""

    default_span = DEFAULT_Y_SPAN

    def __init__(self, span: int | None = None):
        self.span = self.default_span if span is None else span

    def effective_span(self, options) -> int:
        return options.span_diff if options.span_diff is not None else self.span

    def validate(self, image, options):
        self.check_range("span", self.effective_span(options), 1, MAX_SPAN)

    def __repr__(self):
        return f"{self.name}({self.span})"


class XDiffn(_SpanTransform):
    """Horizontal difference, zero within ``span`` columns of the left/right edges."""

    default_span = DEFAULT_X_SPAN

    def _execute(self, image, options, cache):
        span = self.effective_span(options)
        planes = [np.abs(window_difference(v, span, axis=1)) for v in _int_planes(image)]
        return self.planes_result(planes, image)


class YDiffn(_SpanTransform):
    """Vertical difference, zero within ``span`` of any border."""

    default_span = DEFAULT_Y_SPAN

    def _execute(self, image, options, cache):
        span = self.effective_span(options)
        planes = []
        for v in _int_planes(image):
            diff = np.abs(window_difference(v, span, axis=0))
            planes.append(_zero_outside(diff, span, axis=1))
        return self.planes_result(planes, image)


class XYDiffn(_SpanTransform):
    """Vertical window of ``span`` plus a fixed horizontal window.

    The horizontal window is ``XY_HORIZONTAL_SPAN`` wide whatever the
    span, and only contributes where ``W > x > XY_HORIZONTAL_SPAN`` with
    a full window on the right.  Top and bottom ``span`` rows are zero.
    """

    default_span = DEFAULT_XY_SPAN

    def _execute(self, image, options, cache):
        span = self.effective_span(options)
        hspan = XY_HORIZONTAL_SPAN
        planes = []
        for v in _int_planes(image):
            total = window_difference(v, span, axis=0)
            total += window_difference(v, hspan, axis=1, lo=hspan + 1, hi=v.shape[1] - hspan)
            planes.append(_zero_outside(np.abs(total), span, axis=0))
        return self.planes_result(planes, image)


class YDiffn1D(_SpanTransform):
    """Vertical difference of ``R - (G+B)/2`` as a single replicated plane."""

    default_span = DEFAULT_Y1D_SPAN
    required_channels = 3

    def _execute(self, image, options, cache):
        span = self.effective_span(options)
        r, g, b = _int_planes(image)
        contrast = r - (g + b) / 2.0
        diff = np.abs(window_difference(contrast, span, axis=0))
        return self.single_plane_result(diff, image, options.copy_to_3_planes)


def window_means(planes, row_lo, row_hi, col_lo, col_hi) -> tuple[list[np.ndarray], np.ndarray]:
    """Mean of each plane over inclusive, broadcastable row/column bounds.

    Bounds may reach outside the image; only in-image pixels are
    averaged.  Returns ``(means, count)`` where *means* is 0 wherever
    *count* is 0.  A summed-area table keeps the cost independent of the
    window size.
    """
    h, w = planes[0].shape
    row_lo = np.clip(row_lo, 0, h)
    row_hi = np.clip(row_hi, -1, h - 1)
    col_lo = np.clip(col_lo, 0, w)
    col_hi = np.clip(col_hi, -1, w - 1)
    count = np.maximum(row_hi - row_lo + 1, 0) * np.maximum(col_hi - col_lo + 1, 0)

    means = []
    for p in planes:
        table = np.zeros((h + 1, w + 1), dtype=np.float64)
        table[1:, 1:] = p.cumsum(axis=0).cumsum(axis=1)
        total = (table[row_hi + 1, col_hi + 1] - table[row_lo, col_hi + 1]
                 - table[row_hi + 1, col_lo] + table[row_lo, col_lo])
        mean = np.zeros(np.broadcast(total, count).shape, dtype=np.float64)
        np.divide(total, count, out=mean, where=count > 0)
        means.append(mean)
    return means, count


class YDifferenceL(BaseTransform):
    """Colour distance between a window above and a window below each pixel.

    Rows ``span_y <= y < H - span_y`` compare the mean RGB over rows
    ``[y - span_y - delta_y, y - delta_y]`` with the mean over rows
    ``[y + delta_y, y + span_y + delta_y]``.  Both windows cover columns
    ``[x, x + span_x]``.  Pixels outside the image are left out of the
    means; a window with no pixel in the image gives 0.

    The output plane is ``trunc(sqrt(dr^2 + dg^2 + db^2))`` with
    ``use_l2``, otherwise ``trunc(|dr|) + |dg| + |db|``.  Other rows are
    zero.  ``delta_x`` is kept in the signature but the windows always
    start at the pixel's own column.
    """

    required_channels = 3

    def __init__(self, span_x: int = 0, delta_x: int = 0, span_y: int = DEFAULT_Y1D_SPAN,
                 delta_y: int = 0, use_l2: bool = False):
        self.span_x = span_x
        self.delta_x = delta_x
        self.span_y = span_y
        self.delta_y = delta_y
        self.use_l2 = use_l2

    def validate(self, image, options):
        for parameter in ("span_x", "span_y", "delta_y"):
            self.check_range(parameter, getattr(self, parameter), 0, MAX_SPAN)
        self.check_range("delta_x", self.delta_x, -MAX_SPAN, MAX_SPAN)

    def _execute(self, image, options, cache):
        h, w = image.height, image.width
        out = np.zeros((h, w), dtype=np.float64)
        if h - self.span_y <= self.span_y:
            return self.single_plane_result(out, image, options.copy_to_3_planes)

        rows = np.arange(self.span_y, h - self.span_y)[:, np.newaxis]
        cols = np.arange(w)[np.newaxis, :]
        reach = self.span_y + self.delta_y

        planes = self.rgb_arrays(image, cache)
        above, n_above = window_means(planes, rows - reach, rows - self.delta_y, cols, cols + self.span_x)
        below, n_below = window_means(planes, rows + self.delta_y, rows + reach, cols, cols + self.span_x)
        dr, dg, db = (a - b for a, b in zip(above, below))
        if self.use_l2:
            dist = np.trunc(np.sqrt(dr * dr + dg * dg + db * db))
        else:
            dist = np.trunc(np.abs(dr)) + np.abs(dg) + np.abs(db)
        dist[(n_above == 0) | (n_below == 0)] = 0.0
        out[self.span_y:h - self.span_y] = dist
        return self.single_plane_result(out, image, options.copy_to_3_planes)

    def __repr__(self):
        return (f"{self.name}({self.span_x}, {self.delta_x}, {self.span_y}, "
                f"{self.delta_y}, l2={self.use_l2})")
