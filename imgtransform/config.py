"""
Centralized limits and defaults for the transform pipeline.
============================================================
All modules import from here instead of hard-coding bounds.

Every integer limit can be overridden with an environment variable named
``IMGTRANSFORM_<NAME>`` (e.g. ``IMGTRANSFORM_MAX_CHANNELS=3``).  Invalid
overrides are logged and ignored so that ``import imgtransform.config``
never fails (important for tests and worker processes).

Usage in any module::

    from imgtransform.config import MAX_IMAGE_DIMENSION, MAX_SPAN
"""

from __future__ import annotations

import logging
import os

_log = logging.getLogger(__name__)

ENV_PREFIX = "IMGTRANSFORM_"


def _env_int(name: str, default: int, minimum: int = 1) -> int:
    """Read ``IMGTRANSFORM_<name>`` as an int, falling back to *default*."""
    raw = os.environ.get(ENV_PREFIX + name)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError:
        _log.warning("%s%s=%r is not an integer, using %d.", ENV_PREFIX, name, raw, default)
        return default
    if value < minimum:
        _log.warning("%s%s=%d is below %d, using %d.", ENV_PREFIX, name, value, minimum, default)
        return default
    return value


# ── Image validation ──────────────────────────────────────────────────────
MIN_IMAGE_WIDTH: int = 1
MIN_IMAGE_HEIGHT: int = 1
MAX_IMAGE_DIMENSION: int = _env_int("MAX_IMAGE_DIMENSION", 16384)
MAX_CHANNELS: int = _env_int("MAX_CHANNELS", 4)

# ── Array cache ───────────────────────────────────────────────────────────
ARRAY_CACHE_SIZE: int = _env_int("ARRAY_CACHE_SIZE", 100)
MAX_CACHEABLE_PIXELS: int = _env_int("MAX_CACHEABLE_PIXELS", 1920 * 1080)

# ── Color space ───────────────────────────────────────────────────────────
HSV_SCALING_FACTOR: float = 100.0
RGB_MAX_VALUE: int = 255
UNDEFINED_HUE: float = -1.0
RGB_CHANNELS: int = 3
HUE_FULL_CIRCLE: float = 360.0
HUE_SECTOR_SIZE: float = 60.0

# ── Edge detection ────────────────────────────────────────────────────────
DEFAULT_DERICHE_ALPHA: float = 1.0
MIN_DERICHE_ALPHA: float = 0.1
MAX_DERICHE_ALPHA: float = 5.0

# ── Thresholding ──────────────────────────────────────────────────────────
MASK_ON: int = 0xFF
MASK_OFF: int = 0
DEFAULT_THRESHOLD: int = 255
MIN_THRESHOLD: int = 0
MAX_THRESHOLD: int = 255

# ── Linear combinations ───────────────────────────────────────────────────
GRAYSCALE_WEIGHTS: tuple[float, float, float] = (0.299, 0.587, 0.114)
EQUAL_WEIGHTS: tuple[float, float, float] = (1.0 / 3.0, 1.0 / 3.0, 1.0 / 3.0)
LARGE_WEIGHT_WARNING: float = 10.0

# ── Difference operators ──────────────────────────────────────────────────
DEFAULT_X_SPAN: int = 3
DEFAULT_Y_SPAN: int = 5
DEFAULT_Y1D_SPAN: int = 4
DEFAULT_XY_SPAN: int = 5
# Horizontal window blended into the XY operator; independent of span_diff.
XY_HORIZONTAL_SPAN: int = 10
MAX_SPAN: int = _env_int("MAX_SPAN", 20)
