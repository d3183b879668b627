#!/usr/bin/env python3
"""
Transform Base Class
====================
Validation and execution template shared by every concrete transform.

``BaseTransform.transform`` runs, in order:

1. generic input checks (image / options present, size and channel
   bounds) - raise ``NullInputError`` / ``IncompatibleImageError``
2. the transform's own ``validate`` hook - typically
   ``InvalidParameterError`` or a channel-count check
3. ``preprocess`` -> ``_execute`` -> ``postprocess``

Anything other than a ``TransformError`` escaping step 3, or a ``None``
result, is rewrapped as ``AlgorithmFailureError`` with the transform name
and the failing step.  ``BaseTransform.run`` returns a
``TransformResult`` instead of raising.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

import numpy as np

from .cache import ArrayCache
from .config import (
    MAX_CHANNELS,
    MAX_IMAGE_DIMENSION,
    MIN_IMAGE_HEIGHT,
    MIN_IMAGE_WIDTH,
)
from .errors import (
    AlgorithmFailureError,
    IncompatibleImageError,
    InvalidParameterError,
    NullInputError,
    TransformError,
    TransformResult,
)
from .image import Image
from .options import TransformOptions

_log = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Numeric conversion
# ---------------------------------------------------------------------------

def to_safe_array(values: np.ndarray, dtype) -> np.ndarray:
    """Convert *values* to *dtype*, saturating integer types.

    Integer targets are clipped to the dtype range and truncated toward
    zero; float targets are cast directly.
    """
    dtype = np.dtype(dtype)
    values = np.asarray(values)
    if np.issubdtype(dtype, np.integer):
        info = np.iinfo(dtype)
        clipped = np.clip(np.nan_to_num(values, nan=0.0), info.min, info.max)
        return np.trunc(clipped).astype(dtype)
    return values.astype(dtype)


# ---------------------------------------------------------------------------
# Base class
# ---------------------------------------------------------------------------

class BaseTransform(ABC):
    """Template wrapping a concrete per-image algorithm."""

    #: Minimum number of channels the algorithm reads.
    required_channels: int = 1

    @property
    def name(self) -> str:
        return type(self).__name__

    def transform(self, image: Image | None, options: TransformOptions | None,
                  cache: ArrayCache | None = None) -> Image:
        """Validate inputs, run the algorithm and return a new Image."""
        self.validate_inputs(image, options)
        return self._execute_safely(image, options, cache)

    def run(self, image: Image | None, options: TransformOptions | None,
            cache: ArrayCache | None = None) -> TransformResult:
        """Like :meth:`transform` but report failure as a value."""
        try:
            return TransformResult(image=self.transform(image, options, cache))
        except TransformError as e:
            _log.warning("Transform failed: %s", e)
            return TransformResult(error=e)

    __call__ = transform

    # ── validation ───────────────────────────────────────────────────

    def validate_inputs(self, image: Image | None, options: TransformOptions | None) -> None:
        if image is None:
            raise NullInputError("Source image cannot be null", self.name, "Input validation")
        if options is None:
            raise NullInputError("Transform options cannot be null", self.name, "Input validation")

        width, height = image.width, image.height
        if width < MIN_IMAGE_WIDTH or height < MIN_IMAGE_HEIGHT:
            raise IncompatibleImageError(f"Image size {width}x{height}", "Dimensions too small", self.name)
        if width > MAX_IMAGE_DIMENSION or height > MAX_IMAGE_DIMENSION:
            raise IncompatibleImageError(f"Image size {width}x{height}", "Dimensions too large", self.name)
        if image.channels > MAX_CHANNELS:
            raise IncompatibleImageError(f"{image.channels} channels", "Too many channels", self.name)

        self.require_channels(image, self.required_channels)
        self.validate(image, options)

    def validate(self, image: Image, options: TransformOptions) -> None:
        """Transform-specific checks; override in subclasses."""

    def require_channels(self, image: Image, minimum: int) -> None:
        if image.channels < minimum:
            raise IncompatibleImageError(f"{image.channels} channels",
                                         f"At least {minimum} channels required", self.name)

    def check_range(self, parameter: str, value, lo, hi) -> None:
        if value is None or value < lo or value > hi:
            raise InvalidParameterError(parameter, value, f"Value must be between {lo} and {hi}", self.name)

    def check_compatible(self, parameter: str, image: Image, other: Image | None) -> None:
        """Require *other* to have the same width, height and channel count."""
        if other is None:
            raise InvalidParameterError(parameter, None, "A reference image is required", self.name)
        if (other.width, other.height, other.channels) != (image.width, image.height, image.channels):
            raise IncompatibleImageError(
                f"{parameter} {other.width}x{other.height}x{other.channels}",
                f"expected {image.width}x{image.height}x{image.channels}", self.name)

    # ── execution ────────────────────────────────────────────────────

    def _execute_safely(self, image: Image, options: TransformOptions, cache: ArrayCache | None) -> Image:
        step = "Pre-processing"
        try:
            self.preprocess(image, options)
            step = "Transform execution"
            result = self._execute(image, options, cache)
            step = "Post-processing"
            result = self.postprocess(result, options)
        except TransformError:
            raise
        except Exception as e:
            raise AlgorithmFailureError(f"Algorithm failure in step '{step}': {e}", self.name, step) from e
        if result is None:
            raise AlgorithmFailureError("Null result returned", self.name, "Result validation")
        return result

    @abstractmethod
    def _execute(self, image: Image, options: TransformOptions, cache: ArrayCache | None) -> Image:
        """Run the algorithm on validated inputs."""

    def preprocess(self, image: Image, options: TransformOptions) -> None:
        pass

    def postprocess(self, result: Image, options: TransformOptions) -> Image:
        return result

    # ── helpers for subclasses ───────────────────────────────────────

    @staticmethod
    def rgb_arrays(image: Image, cache: ArrayCache | None) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
        if cache is not None:
            return cache.get_channel_arrays(image)
        return ArrayCache.extract_channel_arrays(image)

    @staticmethod
    def single_plane_result(plane: np.ndarray, like: Image, copy_to_3_planes: bool, dtype=None) -> Image:
        """Build a 3-channel result whose plane 0 holds *plane*.

        Planes 1 and 2 repeat plane 0 when *copy_to_3_planes* is set and
        are zero otherwise.
        """
        dtype = like.dtype if dtype is None else dtype
        out = to_safe_array(plane, dtype)
        other = out if copy_to_3_planes else np.zeros_like(out)
        return Image.from_planes([out, other, other])

    @staticmethod
    def planes_result(planes, like: Image, channels: int = 3, dtype=None) -> Image:
        """Build a result from per-channel planes, zero-padding to *channels*."""
        dtype = like.dtype if dtype is None else dtype
        converted = [to_safe_array(p, dtype) for p in planes]
        while len(converted) < channels:
            converted.append(np.zeros((like.height, like.width), dtype=dtype))
        return Image.from_planes(converted[:channels])

    def __repr__(self) -> str:
        return f"{self.name}()"
