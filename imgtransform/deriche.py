#!/usr/bin/env python3
"""
Deriche Edge Detection
======================
Recursive (IIR) approximation of Gaussian-derivative edge detection,
followed by non-maximum suppression with linear interpolation.

Per channel:
    1. smooth along X, differentiate along Y  -> gy
    2. differentiate along X, smooth along Y  -> gx
    3. magnitude  m = sqrt(gx^2 + gy^2)
    4. keep m only where it is a strict local maximum along the gradient
       direction (the two neighbours are interpolated from the 3x3
       neighbourhood, with the sector chosen from gx / gy)
    5. zero the 1-pixel border

Every directional pass is a first-order recursion with pole
``exp(-alpha)``, run causally or anti-causally with zero initial state.
Arithmetic is float32 throughout; the ties in step 4 are decided on
single-precision values.
"""

from __future__ import annotations

import numpy as np
from scipy.signal import lfilter

from .base import BaseTransform, to_safe_array
from .config import DEFAULT_DERICHE_ALPHA, MAX_DERICHE_ALPHA, MIN_DERICHE_ALPHA, RGB_CHANNELS
from .errors import InvalidParameterError


# ---------------------------------------------------------------------------
# Recursive passes
# ---------------------------------------------------------------------------

def _causal(x: np.ndarray, b, k: np.float32, axis: int) -> np.ndarray:
    num = np.asarray(b, dtype=np.float32)
    den = np.asarray([1.0, -k], dtype=np.float32)
    return lfilter(num, den, x, axis=axis).astype(np.float32, copy=False)


def _anticausal(x: np.ndarray, b, k: np.float32, axis: int) -> np.ndarray:
    flipped = np.flip(x, axis=axis)
    return np.flip(_causal(flipped, b, k, axis), axis=axis)


def deriche_gradients(plane: np.ndarray, alpha: float) -> tuple[np.ndarray, np.ndarray]:
    """Return ``(gx, gy)`` float32 gradient planes of a 2D array."""
    k = np.float32(np.exp(-alpha))
    x = plane.astype(np.float32)

    # smoothing along rows, derivative along columns
    smooth_x = _causal(x, [1.0], k, axis=1) + _anticausal(x, [0.0, k], k, axis=1)
    gy = _causal(smooth_x, [0.0, 1.0], k, axis=0) + _anticausal(smooth_x, [0.0, -1.0], k, axis=0)

    # derivative along rows, smoothing along columns
    deriv_x = _causal(x, [0.0, 1.0], k, axis=1) + _anticausal(x, [0.0, -1.0], k, axis=1)
    gx = _causal(deriv_x, [1.0], k, axis=0) + _anticausal(deriv_x, [0.0, k], k, axis=0)
    return gx, gy


# ---------------------------------------------------------------------------
# Non-maximum suppression
# ---------------------------------------------------------------------------

def non_maximum_suppression(gx: np.ndarray, gy: np.ndarray) -> np.ndarray:
    """Keep gradient-magnitude peaks along the gradient direction.

    For ``gy != 0`` the ratio ``wd = gx / gy`` picks one of four sectors
    (``[1, inf)``, ``[0, 1)``, ``[-1, 0)``, ``(-inf, -1)``) and two
    interpolated neighbours ``n1`` (ahead) and ``n2`` (behind).  With
    ``gy > 0`` a pixel survives when ``m > n1 and m >= n2``; with
    ``gy < 0`` when ``m >= n1 and m > n2``.  For ``gy == 0`` the
    horizontal neighbours are used directly and ``gx == 0`` is dropped.
    The outer 1-pixel frame is always zero.
    """
    mag = np.sqrt(gx * gx + gy * gy).astype(np.float32)
    out = np.zeros_like(mag)
    h, w = mag.shape
    if h < 3 or w < 3:
        return out

    def nb(di, dj):
        return mag[1 + di:h - 1 + di, 1 + dj:w - 1 + dj]

    m = nb(0, 0)
    east, west = nb(0, 1), nb(0, -1)
    south, north = nb(1, 0), nb(-1, 0)
    south_east, south_west = nb(1, 1), nb(1, -1)
    north_east, north_west = nb(-1, 1), nb(-1, -1)
    gxi = gx[1:-1, 1:-1]
    gyi = gy[1:-1, 1:-1]

    with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
        wd = gxi / gyi
        sectors = [wd >= 1, wd >= 0, wd >= -1]
        n1 = np.select(sectors, [
            east + (south_east - east) / wd,
            south + (south_east - south) * wd,
            south - (south_west - south) * wd,
        ], default=west - (south_west - west) / wd)
        n2 = np.select(sectors, [
            west + (north_west - west) / wd,
            north + (north_west - north) * wd,
            north - (north_east - north) * wd,
        ], default=east - (north_east - east) / wd)

        keep_pos = (gyi > 0) & (m > n1) & (m >= n2)
        keep_neg = (gyi < 0) & (m >= n1) & (m > n2)

    flat = gyi == 0
    keep_left = flat & (gxi < 0) & (m >= east) & (m > west)
    keep_right = flat & (gxi > 0) & (m >= west) & (m > east)

    keep = keep_pos | keep_neg | keep_left | keep_right
    out[1:-1, 1:-1] = np.where(keep, m, np.float32(0.0))
    return out


# ---------------------------------------------------------------------------
# Transform
# ---------------------------------------------------------------------------

class Deriche(BaseTransform):
    """Deriche edge map, per channel or collapsed to grey.

    Parameters
    ----------
    alpha : float
        Recursive decay, in (0.1, 5.0].  Larger values give sharper,
        noisier edges.
    reduce_to_grayscale : bool
        Average the three edge planes (integer division) into plane 0,
        replicated per ``options.copy_to_3_planes``.
    """

    def __init__(self, alpha: float = DEFAULT_DERICHE_ALPHA, reduce_to_grayscale: bool = False):
        self.alpha = alpha
        self.reduce_to_grayscale = reduce_to_grayscale

    def validate(self, image, options):
        if not (MIN_DERICHE_ALPHA < self.alpha <= MAX_DERICHE_ALPHA):
            raise InvalidParameterError("alpha", self.alpha,
                                        f"Value must be in ({MIN_DERICHE_ALPHA}, {MAX_DERICHE_ALPHA}]",
                                        self.name)

    def _execute(self, image, options, cache):
        # filter input is the 16-bit integer view of each channel
        info = np.iinfo(np.int16)
        planes = []
        for c in range(min(image.channels, RGB_CHANNELS)):
            raw = np.trunc(np.clip(image.data[:, :, c].astype(np.float64), info.min, info.max))
            gx, gy = deriche_gradients(raw.astype(np.int16), self.alpha)
            planes.append(non_maximum_suppression(gx, gy))
        edges = self.planes_result(planes, image)

        if not self.reduce_to_grayscale:
            return edges
        grey = edges.data.astype(np.int64).sum(axis=2) // RGB_CHANNELS
        return self.single_plane_result(to_safe_array(grey, image.dtype), image, options.copy_to_3_planes)

    def __repr__(self):
        return f"{self.name}(alpha={self.alpha}, reduce_to_grayscale={self.reduce_to_grayscale})"
