#!/usr/bin/env python3
"""
Threshold Transforms
====================
Turn a transformed frame into a binary uint8 mask (0 / 255, one channel).

ThresholdSingleValue
    Compares channel 0, read as an 8-bit value, with ``options.threshold``.
ThresholdColors
    Marks pixels within ``options.color_threshold`` of any colour of
    ``options.palette`` under the L1 or L2 colour distance.
"""

from __future__ import annotations

import numpy as np

from .base import BaseTransform
from .config import MASK_OFF, MASK_ON, MAX_THRESHOLD, MIN_THRESHOLD, RGB_MAX_VALUE
from .errors import InvalidParameterError
from .image import Image
from .options import DistanceType


# ---------------------------------------------------------------------------
# Colour distances
# ---------------------------------------------------------------------------

def color_distance_l1(pixels: np.ndarray, color) -> np.ndarray:
    """``|dR| + |dG| + |dB|`` between ``(..., 3)`` pixels and one colour."""
    diff = pixels.astype(np.float64) - np.asarray(color, dtype=np.float64)
    return np.abs(diff).sum(axis=-1)


def color_distance_l2(pixels: np.ndarray, color) -> np.ndarray:
    """Euclidean distance between ``(..., 3)`` pixels and one colour."""
    diff = pixels.astype(np.float64) - np.asarray(color, dtype=np.float64)
    return np.sqrt((diff * diff).sum(axis=-1))


DISTANCE_FUNCTIONS = {
    DistanceType.L1: color_distance_l1,
    DistanceType.L2: color_distance_l2,
}


def max_distance(distance_type: DistanceType) -> float:
    """Distance between black and white under *distance_type*."""
    fn = DISTANCE_FUNCTIONS[DistanceType(distance_type)]
    black = np.zeros(3)
    return float(fn(black, (RGB_MAX_VALUE,) * 3))


# ---------------------------------------------------------------------------
# Transforms
# ---------------------------------------------------------------------------

class ThresholdSingleValue(BaseTransform):
    """Binary mask of channel 0.

    A pixel whose low byte is above ``options.threshold`` is "off", any
    other pixel is "on".  With ``options.if_greater`` on/off are
    255/0; without it they are swapped.
    """

    def validate(self, image, options):
        self.check_range("threshold", options.threshold, MIN_THRESHOLD, MAX_THRESHOLD)

    def _execute(self, image, options, cache):
        values = np.trunc(image.data[:, :, 0].astype(np.float64)).astype(np.int64) & 0xFF
        on, off = (MASK_ON, MASK_OFF) if options.if_greater else (MASK_OFF, MASK_ON)
        mask = np.where(values > options.threshold, off, on).astype(np.uint8)
        return Image(mask)


class ThresholdColors(BaseTransform):
    """Binary mask of pixels close to any palette colour."""

    required_channels = 3

    def validate(self, image, options):
        if not options.palette:
            raise InvalidParameterError("palette", options.palette, "At least one colour required", self.name)
        if options.color_threshold is None or options.color_threshold < 0:
            raise InvalidParameterError("color_threshold", options.color_threshold,
                                        "Value must be non-negative", self.name)
        if options.distance_type not in DISTANCE_FUNCTIONS:
            raise InvalidParameterError("distance_type", options.distance_type, "Unknown distance", self.name)

    def _execute(self, image, options, cache):
        pixels = np.clip(np.trunc(image.data[:, :, :3].astype(np.float64)), 0, RGB_MAX_VALUE)
        distance = DISTANCE_FUNCTIONS[DistanceType(options.distance_type)]
        hit = np.zeros((image.height, image.width), dtype=bool)
        for color in options.palette:
            hit |= distance(pixels, color) <= options.color_threshold
        return Image(np.where(hit, MASK_ON, MASK_OFF).astype(np.uint8))
