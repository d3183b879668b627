#!/usr/bin/env python3
"""
Subtraction Transforms
======================
Remove a reference signal from each frame: a column of the same frame,
a background frame, or the per-row average.
"""

from __future__ import annotations

import numpy as np

from .base import BaseTransform, to_safe_array
from .config import MASK_OFF, MASK_ON, MAX_THRESHOLD, MIN_THRESHOLD, RGB_CHANNELS, RGB_MAX_VALUE
from .image import Image


def _int_data(image: Image) -> np.ndarray:
    return np.trunc(image.data.astype(np.float64))


class SubtractColumn(BaseTransform):
    """``|v - v[row, column]|`` for every channel of every row."""

    def __init__(self, column: int = 0):
        self.column = column

    def validate(self, image, options):
        self.check_range("column", self.column, 0, image.width - 1)

    def _execute(self, image, options, cache):
        values = _int_data(image)
        c = self.column
        diff = np.abs(values - values[:, c:c + 1, :])
        return Image(to_safe_array(diff, image.dtype))

    def __repr__(self):
        return f"{self.name}({self.column})"


class ImageMinusBackground(BaseTransform):
    """Foreground mask against ``options.background_image``.

    Each channel is ``MASK_ON`` where ``src - background < options.threshold``
    and ``MASK_OFF`` elsewhere.  Output is uint8 with the source channel
    count.
    """

    def validate(self, image, options):
        self.check_compatible("background_image", image, options.background_image)
        self.check_range("threshold", options.threshold, MIN_THRESHOLD, MAX_THRESHOLD)

    def _execute(self, image, options, cache):
        diff = _int_data(image) - _int_data(options.background_image)
        mask = np.where(diff < options.threshold, MASK_ON, MASK_OFF)
        return Image(mask.astype(np.uint8))


class SubtractReferenceImage(BaseTransform):
    """``255 - |src - reference|`` per channel; identical pixels map to 255."""

    def validate(self, image, options):
        self.check_compatible("background_image", image, options.background_image)

    def _execute(self, image, options, cache):
        diff = np.abs(_int_data(image) - _int_data(options.background_image))
        return Image(to_safe_array(RGB_MAX_VALUE - diff, image.dtype))


class RemoveHorizontalAverage(BaseTransform):
    """Subtract each row's mean from the row, per channel.

    Removes horizontal traces spanning the whole kymograph.  Negative
    results saturate at the bottom of the source dtype.
    """

    def _execute(self, image, options, cache):
        planes = []
        for c in range(min(image.channels, RGB_CHANNELS)):
            values = image.data[:, :, c].astype(np.float64)
            planes.append(values - values.mean(axis=1, keepdims=True))
        return self.planes_result(planes, image)
