#!/usr/bin/env python3
"""
Column Sorts
============
Reorder the rows of a kymograph so the strongest signal floats to the top.

Three keys:
    SortChan0Columns    each column sorted independently by channel 0
    SortSumDiffColumns  each column sorted by colour dispersion
    SortChan0Column0    whole rows ordered by the key of column 0

Order is descending and stable: equal keys keep their original row
order.  All channels move together, so the output is a permutation of
the input pixels with the source channel count and dtype.
"""

from __future__ import annotations

from abc import abstractmethod

import numpy as np

from .base import BaseTransform
from .color import sum_of_differences
from .image import Image


def descending_order(key: np.ndarray) -> np.ndarray:
    """Stable descending row order of *key* along axis 0."""
    return np.argsort(-key.astype(np.float64), axis=0, kind="stable")


def permute_columns(data: np.ndarray, order: np.ndarray) -> np.ndarray:
    """Apply a per-column row permutation to every channel of ``(H, W, C)`` data."""
    return np.take_along_axis(data, order[:, :, np.newaxis], axis=0)


class _ColumnSort(BaseTransform):

    @abstractmethod
    def _key(self, image, cache) -> np.ndarray:
        """Per-pixel sort key, ``(H, W)``."""

    def _execute(self, image, options, cache):
        order = descending_order(self._key(image, cache))
        return Image(permute_columns(image.data, order))


class SortChan0Columns(_ColumnSort):
    def _key(self, image, cache):
        return image.data[:, :, 0]


class SortSumDiffColumns(_ColumnSort):
    """Sort each column by ``|R-G| + |R-B| + |G-B|``."""

    required_channels = 3

    def _key(self, image, cache):
        r, g, b = self.rgb_arrays(image, cache)
        return sum_of_differences(r, g, b)


class SortChan0Column0(BaseTransform):
    """Reorder whole rows by channel 0 of the first column."""

    def _execute(self, image, options, cache):
        order = descending_order(image.data[:, 0, 0])
        return Image(image.data[order].copy())
