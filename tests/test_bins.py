import numpy as np
import pytest

import histogrid.axis as hga
from histogrid.bins import (
    BinsStyle,
    axes_from_bins_range,
    bins_style,
    normalize_bins_range,
)
from histogrid.errors import InvalidArgumentError


def test_bins_styles_scalar():
    # Valid
    assert bins_style(ndim=1, bins=5) is BinsStyle.SingleScalar
    assert bins_style(ndim=1, bins=np.int64(5)) is BinsStyle.SingleScalar
    assert bins_style(ndim=2, bins=(2, 5)) is BinsStyle.MultiScalar
    assert bins_style(ndim=2, bins=[3, 4]) is BinsStyle.MultiScalar

    # Invalid
    with pytest.raises(
        ValueError,
        match="Total number of bins definitions must be equal to the dimensionality of the histogram.",
    ):
        bins_style(ndim=3, bins=[2, 3])
    with pytest.raises(InvalidArgumentError):
        bins_style(ndim=4, bins=[2, 3, 4, 7, 8])


def test_bins_styles_sequence():
    assert bins_style(ndim=1, bins=np.array([1, 2, 3])) is BinsStyle.SingleSequence
    assert bins_style(ndim=1, bins=[1, 2, 3]) is BinsStyle.SingleSequence
    assert bins_style(ndim=1, bins=(4, 5, 6)) is BinsStyle.SingleSequence
    assert bins_style(ndim=2, bins=[0.0, 0.5, 1.0]) is BinsStyle.SingleSequence
    assert bins_style(ndim=2, bins=[[1, 2, 3], [4, 5, 7]]) is BinsStyle.MultiSequence

    bins = [[1, 2, 6, 7], [1, 2, 3], [4, 7, 11, 12, 13]]
    assert bins_style(ndim=3, bins=bins) is BinsStyle.MultiSequence

    bins = (np.array([1.1, 2.2]), np.array([2.2, 4.4, 6.6]))
    assert BinsStyle.MultiSequence is bins_style(ndim=2, bins=bins)

    with pytest.raises(InvalidArgumentError):
        bins_style(ndim=1, bins=[[1, 2], [4, 5]])
    with pytest.raises(InvalidArgumentError):
        bins_style(ndim=3, bins=(np.array([1.1, 2.2]), np.array([2.2, 4.4, 6.6])))


def test_bins_style_cannot_determine():
    with pytest.raises(ValueError, match="Could not determine bin style from bins=3.3"):
        bins_style(ndim=1, bins=3.3)
    with pytest.raises(InvalidArgumentError):
        bins_style(ndim=1, bins=[])


def test_normalize_bins_range():
    bins, range = normalize_bins_range(ndim=2, bins=(3, 4), range=((0, 1), (2, 5)))
    assert bins == (3, 4)
    assert range == ((0, 1), (2, 5))

    bins, range = normalize_bins_range(ndim=3, bins=10, range=(0, 1))
    assert bins == (10, 10, 10)
    assert range == ((0, 1),) * 3

    bins, range = normalize_bins_range(ndim=2, bins=[[1, 2, 3], [4, 5, 6]], range=None)
    assert bins == ([1, 2, 3], [4, 5, 6])
    assert range == (None, None)

    # a count and edges mixed; only the count needs a range
    bins, range = normalize_bins_range(ndim=2, bins=[5, [0, 1, 3]], range=[(0, 1), None])
    assert bins == (5, [0, 1, 3])
    assert range == ((0, 1), None)


def test_normalize_bins_range_invalid():
    with pytest.raises(
        ValueError,
        match="range cannot be None when bins argument is a scalar or sequence of scalars.",
    ):
        normalize_bins_range(ndim=1, bins=10, range=None)
    with pytest.raises(InvalidArgumentError):
        normalize_bins_range(ndim=2, bins=(3, 4), range=((0, 1), (0, 1), (0, 1)))
    with pytest.raises(InvalidArgumentError):
        normalize_bins_range(ndim=2, bins=(3, 4), range=[(0, 1), None])
    with pytest.raises(InvalidArgumentError):
        normalize_bins_range(ndim=1, bins=3, range=(0, 1, 2))


def test_axes_from_bins_range():
    axes = axes_from_bins_range(2, [4, [0.0, 0.5, 2.0]], [(-1, 1), None])
    assert axes[0] == hga.Regular(4, -1, 1)
    assert isinstance(axes[0], hga.Regular)
    assert isinstance(axes[1], hga.Variable)
    np.testing.assert_array_equal(axes[1].edges, [0.0, 0.5, 2.0])
    assert all(ax.traits == hga.Traits(True, True) for ax in axes)
