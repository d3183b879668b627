import weakref
from concurrent.futures import ThreadPoolExecutor

import numpy as np
import pytest

from imgtransform.cache import ArrayCache, _CacheEntry
from imgtransform.image import Image


def test_same_image_hits_cache(random_rgb):
    cache = ArrayCache()
    first = cache.get_channel_arrays(random_rgb)
    second = cache.get_channel_arrays(random_rgb)
    assert first is second
    assert len(cache) == 1


def test_arrays_match_channels(random_rgb):
    r, g, b = ArrayCache().get_channel_arrays(random_rgb)
    assert r.dtype == np.float64
    assert np.array_equal(r, random_rgb.data[:, :, 0])
    assert np.array_equal(b, random_rgb.data[:, :, 2])


def test_arrays_are_read_only(random_rgb):
    r, _, _ = ArrayCache().get_channel_arrays(random_rgb)
    with pytest.raises(ValueError):
        r[0, 0] = 1.0


def test_missing_channels_are_zero():
    image = Image(np.full((3, 3, 2), 9, dtype=np.uint8))
    _, g, b = ArrayCache().get_channel_arrays(image)
    assert np.all(g == 9)
    assert np.all(b == 0)


def test_large_images_bypass_cache(random_rgb):
    cache = ArrayCache(max_pixels=10)
    arrays = cache.get_channel_arrays(random_rgb)
    assert len(arrays) == 3
    assert len(cache) == 0


def test_full_cache_stops_storing(make_rgb):
    cache = ArrayCache(max_entries=1)
    a, b = make_rgb((1, 1, 1)), make_rgb((2, 2, 2))
    cache.get_channel_arrays(a)
    arrays = cache.get_channel_arrays(b)
    assert len(cache) == 1
    assert np.all(arrays[0] == 2)


def test_clear(random_rgb):
    cache = ArrayCache()
    cache.get_channel_arrays(random_rgb)
    cache.clear()
    assert len(cache) == 0


def test_none_image_raises():
    with pytest.raises(ValueError):
        ArrayCache().get_channel_arrays(None)


def test_linear_combination():
    a = np.ones((2, 2))
    out = ArrayCache.linear_combination((a, 2 * a, 3 * a), (1, -1, 2))
    assert np.all(out == 5)


def test_linear_combination_shape_mismatch():
    with pytest.raises(ValueError):
        ArrayCache.linear_combination((np.ones(2), np.ones(3), np.ones(2)), (1, 1, 1))


def test_abs_difference():
    out = ArrayCache.abs_difference(np.array([1.0, 5.0]), np.array([4.0, 2.0]))
    assert out.tolist() == [3.0, 3.0]


def test_difference_rejects_none():
    with pytest.raises(ValueError):
        ArrayCache.difference(None, np.ones(2))


def test_stale_entry_is_replaced(make_rgb):
    cache = ArrayCache()
    image, other = make_rgb((5, 5, 5)), make_rgb((7, 7, 7))
    old_arrays = ArrayCache.extract_channel_arrays(other)
    key = cache._fingerprint(image)
    cache._entries[key] = _CacheEntry(image.width, image.height, image.channels,
                                      weakref.ref(other), old_arrays)

    arrays = cache.get_channel_arrays(image)

    assert arrays is not old_arrays
    assert np.all(arrays[0] == 5)
    assert cache._entries[key].image_ref() is image
    assert len(cache) == 1


def test_reshaped_image_is_extracted_again():
    cache = ArrayCache()
    image = Image(np.full((3, 3, 3), 1, dtype=np.uint8))
    cache.get_channel_arrays(image)
    image.data = np.full((4, 2, 3), 2, dtype=np.uint8)

    r, _, _ = cache.get_channel_arrays(image)

    assert r.shape == (4, 2)
    assert np.all(r == 2)


def test_concurrent_access(make_rgb):
    cache = ArrayCache(max_entries=4)
    images = [make_rgb((v, v, v)) for v in range(8)]

    def work(i):
        if i % 5 == 4:
            cache.clear()
        image = images[i % len(images)]
        return image, cache.get_channel_arrays(image)

    with ThreadPoolExecutor(max_workers=8) as pool:
        results = list(pool.map(work, range(200)))

    for image, (r, g, b) in results:
        assert np.array_equal(r, image.data[:, :, 0])
        assert np.array_equal(b, image.data[:, :, 2])
    assert len(cache) <= cache.max_entries
