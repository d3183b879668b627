import numpy as np
import pytest

from imgtransform.errors import IncompatibleImageError, InvalidParameterError
from imgtransform.image import Image
from imgtransform.options import DistanceType
from imgtransform.threshold import (
    ThresholdColors,
    ThresholdSingleValue,
    color_distance_l1,
    color_distance_l2,
    max_distance,
)


def _row(values, dtype=np.uint8):
    return Image(np.array([values], dtype=dtype))


def test_single_value_polarity(options):
    options.set_single_threshold(128, True)
    result = ThresholdSingleValue().transform(_row([0, 100, 128, 200]), options)
    assert result.channels == 1
    assert result.dtype == np.uint8
    assert result.data[0, :, 0].tolist() == [255, 255, 255, 0]


def test_single_value_flipped(options):
    options.set_single_threshold(128, False)
    result = ThresholdSingleValue().transform(_row([0, 100, 128, 200]), options)
    assert result.data[0, :, 0].tolist() == [0, 0, 0, 255]


def test_single_value_reads_low_byte(options):
    options.set_single_threshold(128, True)
    result = ThresholdSingleValue().transform(_row([300, 200], dtype=np.uint16), options)
    assert result.data[0, :, 0].tolist() == [255, 0]


def test_single_value_uses_channel_zero(make_rgb, options):
    options.set_single_threshold(50, True)
    result = ThresholdSingleValue().transform(make_rgb((10, 200, 200)), options)
    assert np.all(result.data == 255)


@pytest.mark.parametrize("threshold", [-1, 256])
def test_single_value_threshold_range(threshold, options):
    options.threshold = threshold
    with pytest.raises(InvalidParameterError):
        ThresholdSingleValue().transform(_row([1, 2]), options)


def test_palette_l1(options):
    options.set_color_array_threshold(DistanceType.L1, 10, [(255, 0, 0)])
    assert options.transform_key == "THRESHOLD_COLORS"
    data = np.array([[[250, 3, 0], [200, 0, 0]]], dtype=np.uint8)
    result = ThresholdColors().transform(Image(data), options)
    assert result.channels == 1
    assert result.data[0, :, 0].tolist() == [255, 0]


def test_palette_l2_any_colour_matches(options):
    options.set_color_array_threshold(0, 6, [(0, 0, 255), (255, 0, 0)])
    data = np.array([[[250, 3, 0], [0, 0, 0]]], dtype=np.uint8)
    result = ThresholdColors().transform(Image(data), options)
    assert result.data[0, :, 0].tolist() == [255, 0]


def test_palette_required(make_rgb, options):
    with pytest.raises(InvalidParameterError):
        ThresholdColors().transform(make_rgb((1, 2, 3)), options)


def test_palette_needs_colour_image(options):
    options.set_color_array_threshold(DistanceType.L2, 10, [(1, 2, 3)])
    with pytest.raises(IncompatibleImageError):
        ThresholdColors().transform(_row([1, 2]), options)


def test_distances():
    pixels = np.array([[0, 0, 0]])
    assert color_distance_l1(pixels, (3, 4, 0))[0] == 7
    assert color_distance_l2(pixels, (3, 4, 0))[0] == 5


def test_max_distance():
    assert max_distance(DistanceType.L1) == 765
    assert max_distance(DistanceType.L2) == pytest.approx(255 * np.sqrt(3))
