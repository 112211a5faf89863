from __future__ import annotations

import boost_histogram as bh
import boost_histogram.numpy  # noqa: F401
import dask
import numpy as np
import pytest

import histogrid as hg
import histogrid.routines as hgr


def _normal(*shape, seed=5):
    return np.random.default_rng(seed).standard_normal(size=shape)


def test_histogram():
    x = _normal(3000)
    bins = np.array([-3, -2.2, 0, 1.1, 2.2, 3.3])
    h1, edges1 = hgr.histogram(x, bins=bins)
    h2, edges2 = bh.numpy.histogram(x, bins=bins)
    np.testing.assert_array_almost_equal(h1, h2)
    np.testing.assert_array_almost_equal(edges1, edges2)


def test_histogram_regular():
    x = _normal(3000)
    h1, edges1 = hgr.histogram(x, bins=12, range=(-3, 3))
    h2, edges2 = np.histogram(x, bins=12, range=(-3, 3))
    np.testing.assert_array_almost_equal(h1, h2)
    np.testing.assert_array_almost_equal(edges1, edges2)


def test_histogram_weights_density():
    x = _normal(3000)
    w = np.random.default_rng(1).uniform(0.5, 0.75, size=x.shape)
    h1, _ = hgr.histogram(x, bins=10, range=(-3, 3), weights=w, density=True)
    h2, _ = np.histogram(x[np.abs(x) < 3], bins=10, range=(-3, 3), weights=w[np.abs(x) < 3], density=True)
    np.testing.assert_array_almost_equal(h1, h2)


def test_histogram2d():
    x = _normal(3000)
    y = _normal(3000, seed=6)
    xbins = np.array([-3, -2.2, 0, 1.1, 2.2, 3.3])
    ybins = np.array([-4, -1.1, 0, 2.1, 2.2, 3.5])
    h1, edges1x, edges1y = hgr.histogram2d(x, y, bins=[xbins, ybins])
    h2, edges2x, edges2y = bh.numpy.histogram2d(x, y, bins=[xbins, ybins])
    np.testing.assert_array_almost_equal(h1, h2)
    np.testing.assert_array_almost_equal(edges1x, edges2x)
    np.testing.assert_array_almost_equal(edges1y, edges2y)


def test_histogramdd():
    data = _normal(3000, 3)
    bins = (4, 5, 6)
    range = ((-2.5, 2.5), (-3.5, 3.5), (-2, 2))
    h1, edges1 = hgr.histogramdd(data, bins=bins, range=range)
    h2, edges2 = np.histogramdd(data, bins=bins, range=range)
    np.testing.assert_array_almost_equal(h1, h2)
    for e1, e2 in zip(edges1, edges2):
        np.testing.assert_array_almost_equal(e1, e2)

    h3, _ = hgr.histogramdd(tuple(data.T), bins=bins, range=range)
    np.testing.assert_array_equal(h1, h3)


def test_histogram_object_return():
    x = _normal(1000)
    w = np.ones_like(x)
    h = hgr.histogramdd(
        (x, x), bins=(4, 4), range=((-2, 2), (-2, 2)), weights=w,
        histogram=True, storage=hg.storage.Weight(),
    )
    assert isinstance(h, hg.Histogram)
    assert h.storage_type is hg.storage.Weight
    assert h.sum(flow=True).value == pytest.approx(1000)

    h = hgr.histogram(x, bins=4, range=(-2, 2), histogram=hg.Histogram)
    assert isinstance(h.axes[0], hg.axis.Regular)
    assert h.sum(flow=True) == 1000


def test_invalid_arguments():
    x = _normal(10)
    with pytest.raises(ValueError, match="density"):
        hgr.histogram(x, bins=4, range=(-2, 2), density=True, histogram=True)
    with pytest.raises(ValueError, match="normed"):
        hgr.histogram(x, 4, (-2, 2), True)
    with pytest.raises(ValueError, match="range cannot be None"):
        hgr.histogram(x, bins=4)
    with pytest.warns(UserWarning, match="threads"):
        hgr.histogram(x, bins=4, range=(-2, 2), threads=4)


def _filled(values, storage=None):
    h = hg.Histogram(hg.axis.Regular(4, 0, 1), storage=storage)
    return h.fill(values)


def test_merge():
    parts = [_filled(np.full(i + 1, 0.1 * (i % 10))) for i in range(20)]
    before = [p.copy() for p in parts]
    expected = sum(parts)
    for split_every in (2, 3, 8, False):
        merged = hgr.merge(parts, split_every=split_every)
        assert merged == expected
    assert hgr.merge(iter(parts)) == expected
    assert parts == before


def test_merge_single_returns_copy():
    h = _filled([0.5])
    merged = hg.merge([h])
    assert merged == h
    assert merged is not h


def test_merge_promotes_storage():
    merged = hg.merge(
        [_filled([0.1], hg.storage.Int64()), _filled([0.1], hg.storage.Weight())]
    )
    assert merged.storage_type is hg.storage.Weight
    assert merged.at(0) == (2.0, 2.0)


def test_merge_invalid():
    with pytest.raises(hg.InvalidArgumentError):
        hg.merge([])
    with pytest.raises(hg.InvalidArgumentError):
        hg.merge([_filled([0.5]), _filled([0.5])], split_every=1)
    with pytest.raises(hg.InvalidArgumentError):
        hg.merge([_filled([0.5]), hg.Histogram(hg.axis.Regular(3, 0, 1))])


def test_merge_split_every_from_config():
    parts = [_filled([0.3]) for _ in range(5)]
    with dask.config.set({"histogram.aggregation.split-every": 2}):
        assert hg.merge(parts).at(1) == 5
    with dask.config.set({"histogram.aggregation.split-every": 1}):
        with pytest.raises(hg.InvalidArgumentError):
            hg.merge(parts)
