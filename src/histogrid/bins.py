"""Help turning NumPy-style bin definitions into axes."""

from __future__ import annotations

import numbers
from enum import Enum
from typing import TYPE_CHECKING, Any

import numpy as np

from histogrid import axis
from histogrid.errors import InvalidArgumentError

if TYPE_CHECKING:
    from histogrid.typing import BinArg, BinType, RangeArg, RangeType


class BinsStyle(Enum):
    """Styles for the bins argument in histogramming functions."""

    SingleScalar = 1
    MultiScalar = 2
    SingleSequence = 3
    MultiSequence = 4


def _is_flat(seq: Any) -> bool:
    return all(isinstance(b, numbers.Real) for b in seq)


def _is_pair(r: Any) -> bool:
    return isinstance(r, (tuple, list, np.ndarray)) and len(r) == 2 and _is_flat(r)


def bins_style(ndim: int, bins: BinArg) -> BinsStyle:
    """Determine bin style from a bins argument and histogram dimensions.

    A flat sequence of integers is read as one bin count per dimension
    when `ndim` is larger than one; any other flat sequence holds bin
    edges shared by all dimensions.

    Raises
    ------
    InvalidArgumentError
        If `bins` is not compatible with `ndim` or the style is
        undetermined.

    """
    if isinstance(bins, numbers.Integral):
        return BinsStyle.SingleScalar
    if isinstance(bins, np.ndarray) and bins.ndim == 1:
        return BinsStyle.SingleSequence
    if isinstance(bins, (tuple, list, np.ndarray)) and len(bins) > 0:
        if _is_flat(bins):
            if ndim == 1:
                return BinsStyle.SingleSequence
            if not all(isinstance(b, numbers.Integral) for b in bins):
                return BinsStyle.SingleSequence
            if len(bins) == ndim:
                return BinsStyle.MultiScalar
        elif len(bins) == ndim:
            return BinsStyle.MultiSequence
        raise InvalidArgumentError(
            "Total number of bins definitions must be equal to the "
            "dimensionality of the histogram."
        )
    raise InvalidArgumentError(f"Could not determine bin style from bins={bins}")


def normalize_bins_range(
    ndim: int, bins: BinArg, range: RangeArg
) -> tuple[tuple[BinType, ...], tuple[RangeType, ...]]:
    """Normalize bins and range arguments to one entry per dimension.

    Parameters
    ----------
    ndim : int
        Total dimensions of the eventual histogram.
    bins : int, sequence of ints, array, or sequence of arrays
        Definition of the bins either by total number of bins in each
        dimension, or by the bin edges in each dimension.
    range : pair or sequence of pairs, optional
        The (min, max) of every dimension whose bins are given by a
        count. A single pair is shared by all dimensions.

    Returns
    -------
    tuple[tuple, tuple]
        Normalized bins and range arguments.

    Raises
    ------
    InvalidArgumentError
        If the arguments cannot be matched to `ndim` dimensions or a
        bin count comes without range.

    """
    style = bins_style(ndim, bins)
    if style in (BinsStyle.SingleScalar, BinsStyle.SingleSequence):
        out_bins = (bins,) * ndim
    else:
        out_bins = tuple(bins)  # type: ignore[arg-type]

    if range is None:
        out_range: tuple = (None,) * ndim
    elif _is_pair(range):
        out_range = (tuple(range),) * ndim  # type: ignore[arg-type]
    elif len(range) == ndim and all(r is None or _is_pair(r) for r in range):  # type: ignore[arg-type]
        out_range = tuple(None if r is None else tuple(r) for r in range)  # type: ignore[union-attr]
    else:
        raise InvalidArgumentError(
            "range must be a (min, max) pair or one pair per dimension."
        )

    for b, r in zip(out_bins, out_range):
        if isinstance(b, numbers.Integral) and r is None:
            raise InvalidArgumentError(
                "range cannot be None when bins argument is a scalar or sequence of scalars."
            )
    return out_bins, out_range


def axes_from_bins_range(ndim: int, bins: BinArg, range: RangeArg) -> list[axis.Axis]:
    """Axes described by NumPy-style `bins` and `range` arguments.

    Bin counts become :py:class:`histogrid.axis.Regular` axes, bin
    edges :py:class:`histogrid.axis.Variable` axes (the range is then
    ignored).

    """
    axes: list[axis.Axis] = []
    for b, r in zip(*normalize_bins_range(ndim, bins, range)):
        if isinstance(b, numbers.Integral):
            axes.append(axis.Regular(int(b), r[0], r[1]))  # type: ignore[index]
        else:
            axes.append(axis.Variable(b))
    return axes
