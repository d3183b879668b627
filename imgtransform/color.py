#!/usr/bin/env python3
"""
Colour Channel Transforms
=========================
Per-pixel functions of the R, G, B planes of a frame.

Families:
    Linear combinations  w0*R + w1*G + w2*B  (plus a chromaticity-normed variant)
    Dispersion           |R-G| + |R-B| + |G-B|, L1 distance to a reference column
    Colour spaces        HSB (OpenCV), HSV (explicit sector formula), H1H2H3

Each visual transform returns a 3-channel image.  Transforms computing a
single plane replicate it into channels 1-2 when
``options.copy_to_3_planes`` is set.

Usage:
    from imgtransform.color import LinearCombination
    result = LinearCombination((2, -1, -1)).transform(image, options)
"""

from __future__ import annotations

import logging
from abc import abstractmethod

import cv2
import numpy as np

from .base import BaseTransform
from .cache import ArrayCache
from .config import (
    HSV_SCALING_FACTOR,
    HUE_FULL_CIRCLE,
    HUE_SECTOR_SIZE,
    LARGE_WEIGHT_WARNING,
    RGB_MAX_VALUE,
    UNDEFINED_HUE,
)
from .errors import InvalidParameterError
from .image import Image

_log = logging.getLogger(__name__)


def value_range(dtype) -> float:
    """Full-scale value used to normalise a channel to [0, 1]."""
    dtype = np.dtype(dtype)
    if np.issubdtype(dtype, np.integer):
        return float(np.iinfo(dtype).max)
    return float(RGB_MAX_VALUE)


# ---------------------------------------------------------------------------
# Linear combinations
# ---------------------------------------------------------------------------

class LinearCombination(BaseTransform):
    """``w0*R + w1*G + w2*B`` in plane 0.

    Built without weights, the combination reads ``options.weights`` at
    call time.
    """

    required_channels = 3

    def __init__(self, weights: tuple[float, float, float] | None = None):
        self.weights = None if weights is None else tuple(float(w) for w in weights)

    def _weights(self, options) -> tuple[float, float, float]:
        return self.weights if self.weights is not None else tuple(float(w) for w in options.weights)

    def validate(self, image, options):
        weights = self._weights(options)
        if len(weights) != 3:
            raise InvalidParameterError("weights", weights, "Exactly three weights required", self.name)
        if all(w == 0 for w in weights):
            raise InvalidParameterError("weights", weights, "At least one weight must be non-zero", self.name)
        if any(abs(w) > LARGE_WEIGHT_WARNING for w in weights):
            _log.warning("%s: large weight in %s may saturate the output", self.name, weights)

    def _execute(self, image, options, cache):
        arrays = self.rgb_arrays(image, cache)
        combined = self._combine(arrays, self._weights(options))
        return self.single_plane_result(combined, image, options.copy_to_3_planes)

    @staticmethod
    def _combine(arrays, weights):
        return ArrayCache.linear_combination(arrays, weights)

    def __repr__(self):
        return f"{self.name}({self.weights})"


class LinearCombinationNormed(LinearCombination):
    """Linear combination of the chromaticity coordinates, scaled to 255.

    ``(w0*R + w1*G + w2*B) / (R + G + B) * 255``; pixels whose channel sum
    is zero map to 0.
    """

    @staticmethod
    def _combine(arrays, weights):
        r, g, b = arrays
        total = r + g + b
        numerator = r * weights[0] + g * weights[1] + b * weights[2]
        out = np.zeros_like(total)
        np.divide(numerator, total, out=out, where=total != 0)
        return out * RGB_MAX_VALUE


# ---------------------------------------------------------------------------
# Dispersion
# ---------------------------------------------------------------------------

def sum_of_differences(r: np.ndarray, g: np.ndarray, b: np.ndarray) -> np.ndarray:
    """Colour dispersion ``|R-G| + |R-B| + |G-B|``; zero on grey pixels."""
    return np.abs(r - g) + np.abs(r - b) + np.abs(g - b)


class SumDiff(BaseTransform):
    required_channels = 3

    def _execute(self, image, options, cache):
        r, g, b = self.rgb_arrays(image, cache)
        return self.single_plane_result(sum_of_differences(r, g, b), image, options.copy_to_3_planes)


class L1DistanceToColumn(BaseTransform):
    """L1 colour distance of each pixel to the pixel of its row at ``column``."""

    required_channels = 3

    def __init__(self, column: int = 0):
        self.column = column

    def validate(self, image, options):
        self.check_range("column", self.column, 0, image.width - 1)

    def _execute(self, image, options, cache):
        r, g, b = self.rgb_arrays(image, cache)
        c = self.column
        dist = (np.abs(r - r[:, c:c + 1])
                + np.abs(g - g[:, c:c + 1])
                + np.abs(b - b[:, c:c + 1]))
        return self.single_plane_result(dist, image, options.copy_to_3_planes)


# ---------------------------------------------------------------------------
# Colour spaces
# ---------------------------------------------------------------------------

class _ColorSpaceTransform(BaseTransform):
    """Common part of the HSB / HSV projections.

    ``channel_out`` selects one projected plane (replicated to all three
    channels) or ``-1`` to keep all three.  Planes are float32 in
    [0, 100].
    """

    required_channels = 3

    def __init__(self, channel_out: int = -1):
        self.channel_out = channel_out

    def validate(self, image, options):
        self.check_range("channel_out", self.channel_out, -1, 2)

    def _execute(self, image, options, cache):
        planes = self._project(image, cache)
        if self.channel_out >= 0:
            keep = planes[self.channel_out]
            planes = (keep, keep, keep)
        return Image.from_planes(planes, dtype=np.float32)

    @abstractmethod
    def _project(self, image, cache):
        """Return the three output planes."""

    def __repr__(self):
        return f"{self.name}({self.channel_out})"


class RGBtoHSB(_ColorSpaceTransform):
    """Hue / saturation / brightness via OpenCV; hue is 0 on grey pixels."""

    def _project(self, image, cache):
        r, g, b = self.rgb_arrays(image, cache)
        scale = value_range(image.dtype)
        rgb = np.clip(np.dstack([r, g, b]) / scale, 0.0, 1.0).astype(np.float32)
        hsv = cv2.cvtColor(rgb, cv2.COLOR_RGB2HSV)
        hue = hsv[:, :, 0] / HUE_FULL_CIRCLE
        return (hue * HSV_SCALING_FACTOR,
                hsv[:, :, 1] * HSV_SCALING_FACTOR,
                hsv[:, :, 2] * HSV_SCALING_FACTOR)


def rgb_to_hsv(r: np.ndarray, g: np.ndarray, b: np.ndarray) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Fast RGB -> HSV conversion (Foley, p. 592) on [0, 1] inputs.

    Returns
    -------
    h : ndarray
        Hue in degrees [0, 360), or ``UNDEFINED_HUE`` where s == 0.
    s, v : ndarray
        Saturation and value in [0, 1].
    """
    mx = np.maximum(b, np.maximum(r, g))
    mn = np.minimum(b, np.minimum(r, g))
    v = mx
    s = np.zeros_like(mx)
    np.divide(mx - mn, mx, out=s, where=mx != 0.0)

    chromatic = s != 0.0
    delta = np.where(chromatic, mx - mn, 1.0)
    h = np.where(r == mx, (g - b) / delta,
                 np.where(g == mx, 2.0 + (b - r) / delta, 4.0 + (r - g) / delta))
    h = h * HUE_SECTOR_SIZE
    h = np.where(h < 0.0, h + HUE_FULL_CIRCLE, h)
    h = np.where(chromatic, h, UNDEFINED_HUE)
    return h, s, v


class RGBtoHSV(_ColorSpaceTransform):
    """Hue / saturation / value with an explicit undefined-hue sentinel.

    The hue plane holds exactly ``UNDEFINED_HUE`` (-1) on achromatic
    pixels and ``hue / 360 * 100`` elsewhere.
    """

    def _project(self, image, cache):
        r, g, b = self.rgb_arrays(image, cache)
        scale = value_range(image.dtype)
        h, s, v = rgb_to_hsv(r / scale, g / scale, b / scale)
        hue = np.where(s == 0.0, UNDEFINED_HUE, h / HUE_FULL_CIRCLE * HSV_SCALING_FACTOR)
        return hue, s * HSV_SCALING_FACTOR, v * HSV_SCALING_FACTOR


class H1H2H3(BaseTransform):
    """Opponent colour planes ``(R+G)/2``, ``(255+R-G)/2``, ``(255+B-(R+G)/2)/2``."""

    required_channels = 3

    def _execute(self, image, options, cache):
        r, g, b = (np.trunc(a) for a in self.rgb_arrays(image, cache))
        h1 = (r + g) / 2.0
        h2 = (RGB_MAX_VALUE + r - g) / 2.0
        h3 = (RGB_MAX_VALUE + b - (r + g) / 2.0) / 2.0
        return self.planes_result([h1, h2, h3], image)
