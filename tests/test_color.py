import numpy as np
import pytest

from imgtransform.color import (
    H1H2H3,
    L1DistanceToColumn,
    LinearCombination,
    LinearCombinationNormed,
    RGBtoHSB,
    RGBtoHSV,
    SumDiff,
    _ColorSpaceTransform,
    rgb_to_hsv,
)
from imgtransform.errors import ErrorKind, IncompatibleImageError, InvalidParameterError
from imgtransform.image import Image


def test_two_r_minus_gb_on_uniform_image(make_rgb, options):
    result = LinearCombination((2, -1, -1)).transform(make_rgb((100, 50, 50)), options)
    assert result.channels == 3
    assert result.dtype == np.uint8
    assert np.all(result.data == 100)


def test_single_plane_without_copy(make_rgb, options):
    options.copy_to_3_planes = False
    result = LinearCombination((2, -1, -1)).transform(make_rgb((100, 50, 50)), options)
    assert np.all(result.data[:, :, 0] == 100)
    assert np.all(result.data[:, :, 1:] == 0)


def test_negative_combination_saturates_at_zero(make_rgb, options):
    result = LinearCombination((-2, 1, 1)).transform(make_rgb((100, 50, 50)), options)
    assert np.all(result.data == 0)


def test_red_weights_return_red_plane_for_float_images(options):
    rng = np.random.default_rng(1)
    image = Image(rng.random((6, 5, 3)).astype(np.float32) * 255)
    result = LinearCombination((1, 0, 0)).transform(image, options)
    assert result.dtype == np.float32
    assert np.array_equal(result.data[:, :, 0], image.data[:, :, 0])


def test_weights_from_options(make_rgb, options):
    options.weights = (0, 0, 2)
    result = LinearCombination().transform(make_rgb((10, 20, 30)), options)
    assert np.all(result.data[:, :, 0] == 60)


def test_all_zero_weights_rejected(make_rgb, options):
    with pytest.raises(InvalidParameterError) as info:
        LinearCombination((0, 0, 0)).transform(make_rgb((1, 2, 3)), options)
    assert info.value.kind is ErrorKind.INVALID_PARAMETER
    assert info.value.parameter == "weights"


def test_large_weight_logs_warning(make_rgb, options, caplog):
    with caplog.at_level("WARNING"):
        LinearCombination((11, 0, 0)).transform(make_rgb((1, 1, 1)), options)
    assert "large weight" in caplog.text


def test_requires_three_channels(options):
    image = Image(np.zeros((4, 4, 2), dtype=np.uint8))
    with pytest.raises(IncompatibleImageError):
        LinearCombination((1, 0, 0)).transform(image, options)


def test_normed_combination(options):
    data = np.array([[[0, 0, 0], [10, 20, 10]]], dtype=np.uint8)
    result = LinearCombinationNormed((-1, 2, -1)).transform(Image(data), options)
    assert result.data[0, 0, 0] == 0
    assert result.data[0, 1, 0] == 127


def test_sum_diff(make_rgb, options):
    result = SumDiff().transform(make_rgb((10, 20, 40)), options)
    assert np.all(result.data == 60)


def test_sum_diff_zero_on_grey(make_rgb, options):
    result = SumDiff().transform(make_rgb((77, 77, 77)), options)
    assert np.all(result.data == 0)


def test_l1_distance_to_first_column(options):
    data = np.array([[[0, 0, 0], [1, 2, 3]]], dtype=np.uint8)
    result = L1DistanceToColumn(0).transform(Image(data), options)
    assert result.data[0, 0, 0] == 0
    assert result.data[0, 1, 0] == 6


def test_hsv_undefined_hue_on_grey(make_rgb, options):
    result = RGBtoHSV(-1).transform(make_rgb((80, 80, 80)), options)
    assert result.dtype == np.float32
    assert np.all(result.data[:, :, 0] == -1.0)
    assert np.all(result.data[:, :, 1] == 0.0)


def test_hsv_primary_colours(options):
    data = np.array([[[255, 0, 0], [0, 255, 0]]], dtype=np.uint8)
    result = RGBtoHSV(-1).transform(Image(data), options)
    assert result.data[0, 0, 0] == pytest.approx(0.0)
    assert result.data[0, 0, 1] == pytest.approx(100.0)
    assert result.data[0, 0, 2] == pytest.approx(100.0)
    assert result.data[0, 1, 0] == pytest.approx(100.0 / 3.0, rel=1e-5)


def test_hsv_selected_channel_is_replicated(make_rgb, options):
    result = RGBtoHSV(2).transform(make_rgb((0, 0, 255)), options)
    assert np.allclose(result.data, 100.0)


def test_rgb_to_hsv_magenta():
    h, s, v = rgb_to_hsv(np.array([1.0]), np.array([0.0]), np.array([1.0]))
    assert h[0] == pytest.approx(300.0)
    assert s[0] == pytest.approx(1.0)
    assert v[0] == pytest.approx(1.0)


def test_hsb_matches_hsv_on_chromatic_pixels(options):
    data = np.array([[[255, 0, 0], [0, 255, 0], [40, 80, 200]]], dtype=np.uint8)
    hsb = RGBtoHSB(-1).transform(Image(data), options)
    hsv = RGBtoHSV(-1).transform(Image(data), options)
    assert np.allclose(hsb.data, hsv.data, atol=1e-2)


def test_hsb_hue_is_zero_on_grey(make_rgb, options):
    result = RGBtoHSB(0).transform(make_rgb((50, 50, 50)), options)
    assert np.all(result.data == 0.0)


def test_channel_out_out_of_range(make_rgb, options):
    with pytest.raises(InvalidParameterError):
        RGBtoHSB(3).transform(make_rgb((1, 2, 3)), options)


def test_h1h2h3(make_rgb, options):
    result = H1H2H3().transform(make_rgb((100, 50, 20)), options)
    assert np.all(result.data[:, :, 0] == 75)
    assert np.all(result.data[:, :, 1] == 152)
    assert np.all(result.data[:, :, 2] == 100)


def test_color_space_base_is_abstract():
    with pytest.raises(TypeError):
        _ColorSpaceTransform()
