"""Per-image channel extraction with a bounded, thread-safe cache.

Most transforms start by pulling the R, G and B planes out of the source
image as float64 arrays.  ``ArrayCache`` memoizes that extraction so a
preview transform and a batch detector working on the same frame share
one copy.

The cache never evicts: once ``max_entries`` images are cached, new
images are extracted but not stored.  Call :meth:`ArrayCache.clear`
between unrelated processing sessions.
"""

from __future__ import annotations

import logging
import threading
import weakref
from dataclasses import dataclass

import numpy as np

from .config import ARRAY_CACHE_SIZE, MAX_CACHEABLE_PIXELS, RGB_CHANNELS
from .image import Image

_log = logging.getLogger(__name__)


@dataclass
class _CacheEntry:
    width: int
    height: int
    channels: int
    image_ref: weakref.ref
    arrays: tuple[np.ndarray, np.ndarray, np.ndarray]

    def is_valid(self, image: Image) -> bool:
        return (self.image_ref() is image
                and image.width == self.width
                and image.height == self.height
                and image.channels == self.channels)


class ArrayCache:
    """Memoize ``(R, G, B)`` float arrays per image.

    Parameters
    ----------
    max_entries : int
        Maximum number of cached images.  Further images bypass the cache.
    max_pixels : int
        Images with more pixels than this are never cached.
    """

    def __init__(self, max_entries: int = ARRAY_CACHE_SIZE, max_pixels: int = MAX_CACHEABLE_PIXELS):
        self.max_entries = max_entries
        self.max_pixels = max_pixels
        self._entries: dict[tuple[int, int, int, int], _CacheEntry] = {}
        self._lock = threading.Lock()

    # ── extraction ───────────────────────────────────────────────────

    def get_channel_arrays(self, image: Image) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
        """Return three read-only ``(H, W)`` float64 planes for *image*.

        Channels missing from the image come back as zeros.
        """
        if image is None:
            raise ValueError("Cannot extract channel arrays from None")

        cacheable = image.pixel_count <= self.max_pixels
        key = self._fingerprint(image)
        if cacheable:
            with self._lock:
                entry = self._entries.get(key)
                if entry is not None:
                    if entry.is_valid(image):
                        return entry.arrays
                    # identity reused by a different image: stale
                    del self._entries[key]

        arrays = self.extract_channel_arrays(image)

        if cacheable:
            with self._lock:
                if len(self._entries) < self.max_entries:
                    self._entries[key] = _CacheEntry(image.width, image.height, image.channels,
                                                     weakref.ref(image), arrays)
                else:
                    _log.debug("Array cache full (%d entries), not caching %r", len(self._entries), image)
        return arrays

    @staticmethod
    def extract_channel_arrays(image: Image) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
        """Extract the first three channels without touching any cache."""
        arrays = []
        for c in range(RGB_CHANNELS):
            if c < image.channels:
                plane = image.data[:, :, c].astype(np.float64)
            else:
                plane = np.zeros((image.height, image.width), dtype=np.float64)
            plane.flags.writeable = False
            arrays.append(plane)
        return tuple(arrays)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    @staticmethod
    def _fingerprint(image: Image) -> tuple[int, int, int, int]:
        return image.width, image.height, image.channels, id(image)

    # ── vectorised helpers ───────────────────────────────────────────

    @staticmethod
    def linear_combination(arrays, weights) -> np.ndarray:
        """Return ``w0*a0 + w1*a1 + w2*a2`` elementwise."""
        if arrays is None or len(arrays) < 3 or weights is None or len(weights) < 3:
            raise ValueError("Need three arrays and three weights")
        a0, a1, a2 = (np.asarray(a, dtype=np.float64) for a in arrays[:3])
        if not (a0.shape == a1.shape == a2.shape):
            raise ValueError("Arrays must share one shape")
        w0, w1, w2 = (float(w) for w in weights[:3])
        return a0 * w0 + a1 * w1 + a2 * w2

    @staticmethod
    def difference(a, b) -> np.ndarray:
        a, b = ArrayCache._pair(a, b)
        return a - b

    @staticmethod
    def abs_difference(a, b) -> np.ndarray:
        a, b = ArrayCache._pair(a, b)
        return np.abs(a - b)

    @staticmethod
    def _pair(a, b) -> tuple[np.ndarray, np.ndarray]:
        if a is None or b is None:
            raise ValueError("Arrays must be non-null")
        a = np.asarray(a, dtype=np.float64)
        b = np.asarray(b, dtype=np.float64)
        if a.shape != b.shape:
            raise ValueError(f"Arrays must have the same shape, got {a.shape} and {b.shape}")
        return a, b
