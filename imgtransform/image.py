"""Multi-channel raster passed through every transform.

Pixels live in a channel-last ``(height, width, channels)`` numpy array,
channel 0 being red for colour images.  Transforms treat an Image as
read-only and always build a new one for their result.
"""

from __future__ import annotations

import numpy as np


class Image:
    """A 2D raster with 1..N channels of any numeric dtype."""

    def __init__(self, data: np.ndarray):
        data = np.asarray(data)
        if data.ndim == 2:
            data = data[:, :, np.newaxis]
        if data.ndim != 3:
            raise ValueError(f"Expected a (H, W) or (H, W, C) array, got shape {data.shape}")
        if not (np.issubdtype(data.dtype, np.integer) or np.issubdtype(data.dtype, np.floating)):
            raise ValueError(f"Unsupported pixel dtype: {data.dtype}")
        self.data = data

    @classmethod
    def from_planes(cls, planes, dtype=None) -> "Image":
        """Stack 2D planes (all the same shape) into a channel-last Image."""
        stacked = np.stack([np.asarray(p) for p in planes], axis=-1)
        if dtype is not None:
            stacked = stacked.astype(dtype)
        return cls(stacked)

    @classmethod
    def blank(cls, width: int, height: int, channels: int = 3, dtype=np.uint8) -> "Image":
        return cls(np.zeros((height, width, channels), dtype=dtype))

    @property
    def height(self) -> int:
        return int(self.data.shape[0])

    @property
    def width(self) -> int:
        return int(self.data.shape[1])

    @property
    def channels(self) -> int:
        return int(self.data.shape[2])

    @property
    def dtype(self) -> np.dtype:
        return self.data.dtype

    @property
    def pixel_count(self) -> int:
        return self.width * self.height

    def plane(self, c: int) -> np.ndarray:
        """Return a read-only view of channel *c* as a ``(H, W)`` array."""
        view = self.data[:, :, c]
        view.flags.writeable = False
        return view

    def __repr__(self) -> str:
        return f"Image({self.width}x{self.height}x{self.channels}, {self.dtype})"
