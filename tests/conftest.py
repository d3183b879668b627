import numpy as np
import pytest

from imgtransform.image import Image
from imgtransform.options import TransformOptions


@pytest.fixture
def options():
    return TransformOptions()


@pytest.fixture
def make_rgb():
    """Factory for a uniform RGB image."""
    def _make(color, width=4, height=4, dtype=np.uint8):
        data = np.empty((height, width, 3), dtype=dtype)
        data[:, :] = color
        return Image(data)
    return _make


@pytest.fixture
def random_rgb():
    rng = np.random.default_rng(0)
    return Image(rng.integers(0, 256, size=(12, 10, 3), dtype=np.uint8))
