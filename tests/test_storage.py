import dask
import numpy as np
import pytest

import histogrid.storage as hgs
from histogrid.accumulators import Mean, WeightedMean, WeightedSum
from histogrid.errors import ConfigurationError, InvalidArgumentError


def _filled(kind, offsets, **kwargs):
    s = kind()
    s.reset(4)
    s.fill(np.asarray(offsets, dtype=np.intp), **kwargs)
    return s


def test_reset_and_cells():
    s = hgs.Double()
    assert len(s) == 0
    s.reset(3)
    assert len(s) == 3
    s[1] = 2.5
    assert list(s) == [0.0, 2.5, 0.0]
    s.reset()
    assert list(s) == [0.0, 0.0, 0.0]


def test_int64_fill():
    s = _filled(hgs.Int64, [0, 2, 2])
    assert list(s) == [1, 0, 2, 0]
    assert s.total() == 3
    assert isinstance(s[2], int)
    with pytest.raises(ConfigurationError):
        s.scale(2.0)


def test_weight_fill():
    s = _filled(hgs.Weight, [1, 1, 3], weight=np.array([2.0, 0.5, 1.0]))
    assert s[1] == WeightedSum(2.5, 4.25)
    assert s[3] == WeightedSum(1.0, 1.0)
    assert s.total() == WeightedSum(3.5, 5.25)
    s.scale(2.0)
    assert s[1] == WeightedSum(5.0, 17.0)
    s[0] = WeightedSum(1.0, 3.0)
    assert s[0] == WeightedSum(1.0, 3.0)


def test_mean_fill():
    s = _filled(hgs.Mean, [0, 0, 0, 2], sample=(np.array([1.0, 2.0, 3.0, 7.0]),))
    cell = s[0]
    assert cell.count == 3
    assert cell.value == pytest.approx(2.0)
    assert cell.sum_of_deltas_squared == pytest.approx(2.0)
    assert cell.variance == pytest.approx(1.0)
    assert np.isnan(s[2].variance)
    assert s[1] == Mean(0.0, 0.0, 0.0)

    total = s.total()
    assert total.count == 4
    assert total.value == pytest.approx(13.0 / 4)
    assert total.variance == pytest.approx(np.var([1.0, 2.0, 3.0, 7.0], ddof=1))


def test_mean_fill_in_batches_matches_single_fill():
    x = np.random.default_rng(42).normal(size=100)
    offsets = np.repeat([0, 1, 3, 3], 25)
    once = _filled(hgs.Mean, offsets, sample=(x,))
    twice = _filled(hgs.Mean, offsets[:40], sample=(x[:40],))
    twice.fill(offsets[40:], sample=(x[40:],))
    np.testing.assert_allclose(
        once.data.view((float, 3)), twice.data.view((float, 3)), rtol=1e-12
    )


def test_weighted_mean_fill():
    s = _filled(
        hgs.WeightedMean,
        [1, 1],
        weight=np.array([1.0, 3.0]),
        sample=(np.array([2.0, 6.0]),),
    )
    cell = s[1]
    assert isinstance(cell, WeightedMean)
    assert cell.sum_of_weights == 4.0
    assert cell.sum_of_weights_squared == 10.0
    assert cell.value == pytest.approx(5.0)
    assert cell.sum_of_weighted_deltas_squared == pytest.approx(12.0)
    assert cell.variance == pytest.approx(12.0 / (4.0 - 10.0 / 4.0))


def test_check_fill():
    hgs.Double().check_fill(weight=True, sample=None)
    with pytest.raises(ConfigurationError):
        hgs.Int64().check_fill(weight=True, sample=None)
    with pytest.raises(ConfigurationError):
        hgs.Weight().check_fill(weight=False, sample=1)
    with pytest.raises(ConfigurationError):
        hgs.Mean().check_fill(weight=True, sample=1)
    with pytest.raises(InvalidArgumentError):
        hgs.Mean().check_fill(weight=False, sample=None)
    with pytest.raises(InvalidArgumentError):
        hgs.WeightedMean().check_fill(weight=True, sample=2)


@pytest.mark.parametrize(
    "a, b, expected",
    [
        (hgs.Int64, hgs.Int64, hgs.Int64),
        (hgs.Int64, hgs.Double, hgs.Double),
        (hgs.Int64, hgs.Weight, hgs.Weight),
        (hgs.Double, hgs.Weight, hgs.Weight),
        (hgs.Mean, hgs.WeightedMean, hgs.WeightedMean),
    ],
)
def test_common_storage_type(a, b, expected):
    assert hgs.common_storage_type(a, b) is expected
    assert hgs.common_storage_type(b, a) is expected


def test_common_storage_type_missing():
    with pytest.raises(ConfigurationError):
        hgs.common_storage_type(hgs.Double, hgs.Mean)
    assert hgs.scaled_storage_type(hgs.Int64) is hgs.Double
    assert hgs.scaled_storage_type(hgs.Weight) is hgs.Weight


def test_conversion():
    counts = _filled(hgs.Int64, [0, 2, 2])
    weighted = hgs.Weight.from_storage(counts)
    assert weighted[2] == WeightedSum(2.0, 2.0)
    assert hgs.Double.from_storage(counts)[2] == 2.0
    with pytest.raises(ConfigurationError):
        hgs.Int64.from_storage(weighted)

    means = _filled(hgs.Mean, [3, 3], sample=(np.array([1.0, 3.0]),))
    converted = hgs.WeightedMean.from_storage(means)
    assert converted[3] == WeightedMean(2.0, 2.0, 2.0, 2.0)
    with pytest.raises(ConfigurationError):
        hgs.Mean.from_storage(converted)


def test_iadd_promotes_other():
    s = _filled(hgs.Weight, [0], weight=np.array([2.0]))
    s.iadd(_filled(hgs.Int64, [0, 1]))
    assert s[0] == WeightedSum(3.0, 5.0)
    assert s[1] == WeightedSum(1.0, 1.0)

    with pytest.raises(InvalidArgumentError):
        s.iadd(hgs.Int64())
    with pytest.raises(ConfigurationError):
        _filled(hgs.Int64, [0]).iadd(s)


def test_mean_iadd_merges():
    x = np.array([1.0, 2.0, 3.0, 7.0])
    a = _filled(hgs.Mean, [0, 0], sample=(x[:2],))
    b = _filled(hgs.Mean, [0, 0], sample=(x[2:],))
    a.iadd(b)
    assert a[0].count == 4
    assert a[0].value == pytest.approx(x.mean())
    assert a[0].variance == pytest.approx(np.var(x, ddof=1))


def test_equality_across_kinds():
    assert _filled(hgs.Int64, [1]) == _filled(hgs.Double, [1])
    assert _filled(hgs.Int64, [1]) == _filled(hgs.Weight, [1])
    assert _filled(hgs.Int64, [1]) != _filled(hgs.Int64, [2])
    assert _filled(hgs.Double, [1]) != _filled(hgs.Mean, [1], sample=(np.ones(1),))


def test_default_storage_from_config():
    assert isinstance(hgs.default(), hgs.Double)
    with dask.config.set({"histogram.storage": "weight"}):
        assert isinstance(hgs.default(), hgs.Weight)
    with dask.config.set({"histogram.storage": "bogus"}):
        with pytest.raises(ConfigurationError):
            hgs.default()
    assert isinstance(hgs.from_name("Int64"), hgs.Int64)
    assert isinstance(hgs.from_name("weighted_mean"), hgs.WeightedMean)
