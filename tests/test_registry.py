import numpy as np
import pytest

from imgtransform.errors import InvalidParameterError
from imgtransform.registry import (
    CATEGORY_NAMES,
    TRANSFORM_CATEGORIES,
    TRANSFORM_LABELS,
    TRANSFORM_REGISTRY,
    apply_transform,
    compute_all_transforms,
    find_by_label,
    get_transform,
    get_transform_label,
    get_transform_names,
)


def test_find_by_label():
    assert find_by_label("2R-(G+B)") == "R2MINUS_GB"
    assert find_by_label("Deriche's edges") == "DERICHE_COLOR"
    assert find_by_label("no such label") is None


def test_labels_are_unique():
    labels = list(TRANSFORM_LABELS.values())
    assert len(labels) == len(set(labels))


def test_every_category_is_named():
    assert set(TRANSFORM_CATEGORIES.values()) <= set(CATEGORY_NAMES)


def test_names_by_category():
    assert get_transform_names(["E"]) == ["THRESHOLD_SINGLE", "THRESHOLD_COLORS"]
    assert get_transform_names() == list(TRANSFORM_REGISTRY)


def test_label_fallback():
    assert get_transform_label("XDIFFN") == "XDiffn"
    assert get_transform_label("UNKNOWN") == "UNKNOWN"


def test_unknown_key():
    with pytest.raises(InvalidParameterError):
        get_transform("UNKNOWN")


def test_transform_then_threshold(make_rgb, options):
    image = make_rgb((100, 50, 50))
    options.set_single_threshold(128, True)
    result = apply_transform(image, options, "R2MINUS_GB", threshold_key="THRESHOLD_SINGLE")
    assert result.channels == 1
    assert np.all(result.data == 255)

    options.set_single_threshold(50, True)
    result = apply_transform(image, options, "R2MINUS_GB", threshold_key="THRESHOLD_SINGLE")
    assert np.all(result.data == 0)


def test_key_defaults_to_options(make_rgb, options):
    options.transform_key = "RGB_DIFFS"
    result = apply_transform(make_rgb((10, 20, 40)), options)
    assert np.all(result.data == 60)


def test_default_is_identity_copy(random_rgb, options):
    result = apply_transform(random_rgb, options)
    assert result is not random_rgb
    assert np.array_equal(result.data, random_rgb.data)


def test_equal_weights_average(make_rgb, options):
    result = apply_transform(make_rgb((30, 60, 90)), options, "RGB")
    assert np.all(np.abs(result.data.astype(int) - 60) <= 1)


def test_compute_all_skips_failures(random_rgb, options, caplog):
    with caplog.at_level("WARNING"):
        results = compute_all_transforms(random_rgb, options, skip={"DERICHE"})
    assert "DERICHE" not in results
    assert list(results) == [k for k in TRANSFORM_REGISTRY if k != "DERICHE"]
    assert results["SUBTRACT_REF"] is None
    assert results["THRESHOLD_COLORS"] is None
    assert results["R_RGB"] is not None
    assert results["DERICHE_COLOR"].channels == 3
    assert "SUBTRACT_REF" in caplog.text
