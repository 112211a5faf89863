"""NumPy-style histogramming routines and histogram merging."""

from __future__ import annotations

import functools
import operator
import warnings
from typing import TYPE_CHECKING, Any, Iterable

import numpy as np

from histogrid import config
from histogrid.bins import axes_from_bins_range
from histogrid.core import Histogram
from histogrid.errors import InvalidArgumentError

if TYPE_CHECKING:
    from numpy.typing import ArrayLike

    from histogrid.storage import Storage
    from histogrid.typing import BinArg, BinType, RangeArg, RangeType

__all__ = ("histogramdd", "histogram2d", "histogram", "merge")


def histogram(
    x: ArrayLike,
    bins: BinType = 10,
    range: RangeType = None,
    normed: bool | None = None,
    weights: ArrayLike | None = None,
    density: bool = False,
    *,
    histogram: Any | None = None,
    storage: Storage | None = None,
    threads: int | None = None,
) -> Any:
    """Histogram data in one dimension.

    Parameters
    ----------
    x : array_like
        Data to be histogrammed.
    bins : int or sequence of scalars.
        If `bins` is an int, it defines the total number of bins to be
        used (this requires the `range` argument to be defined). If
        `bins` is a sequence of scalars (e.g. an array) then it
        defines the bin edges.
    range : (float, float)
        The minimum and maximum of the histogram axis.
    normed : bool, optional
        An unsupported argument that has been deprecated in the NumPy
        API (preserved to maintain calls dependent on argument order).
    weights : array_like, optional
        An array of values weighing each sample in the input data.
    density : bool
        If ``False`` (default), the returned array represents the
        number of samples in each bin. If ``True``, the returned array
        represents the probability density function at each bin.
    histogram : Any, optional
        If not ``None``, a :py:class:`histogrid.Histogram` is returned
        instead of the array style return.
    storage : histogrid.storage.Storage, optional
        Define the storage used by the histogram object.
    threads : int, optional
        Ignored argument kept for compatibility with boost-histogram.

    Returns
    -------
    tuple(numpy.ndarray, numpy.ndarray) or histogrid.Histogram
        The default return is the style of :func:`numpy.histogram`: an
        array of bin contents and an array of bin edges. Flow bins are
        not part of the counts.

    Examples
    --------
    >>> import histogrid as hg
    >>> counts, edges = hg.histogram([0.1, 0.2, 0.7], bins=2, range=(0, 1))
    >>> counts
    array([2., 1.])

    """
    result = histogramdd(
        (x,),
        bins=bins,
        range=range,
        normed=normed,
        weights=weights,
        density=density,
        histogram=histogram,
        storage=storage,
        threads=threads,
    )
    if histogram:
        return result
    counts, edges = result
    return counts, edges[0]


def histogram2d(
    x: ArrayLike,
    y: ArrayLike,
    bins: BinArg = 10,
    range: RangeArg = None,
    normed: bool | None = None,
    weights: ArrayLike | None = None,
    density: bool = False,
    *,
    histogram: Any | None = None,
    storage: Storage | None = None,
    threads: int | None = None,
) -> Any:
    """Histogram data in two dimensions.

    Parameters are those of :func:`histogram`, with `bins` and `range`
    given either once for both dimensions or once per dimension.

    Returns
    -------
    tuple(numpy.ndarray, numpy.ndarray, numpy.ndarray) or histogrid.Histogram
        The default return is the style of :func:`numpy.histogram2d`:
        the bin contents followed by the edges along `x` and `y`.

    """
    result = histogramdd(
        (x, y),
        bins=bins,
        range=range,
        normed=normed,
        weights=weights,
        density=density,
        histogram=histogram,
        storage=storage,
        threads=threads,
    )
    if histogram:
        return result
    counts, edges = result
    return counts, edges[0], edges[1]


def histogramdd(
    a: Any,
    bins: BinArg = 10,
    range: RangeArg = None,
    normed: bool | None = None,
    weights: ArrayLike | None = None,
    density: bool = False,
    *,
    histogram: Any | None = None,
    storage: Storage | None = None,
    threads: int | None = None,
) -> Any:
    """Histogram data in multiple dimensions.

    Parameters
    ----------
    a : array_like or sequence of array_like
        Data to be histogrammed: either an array of shape ``(N, D)``
        (one column per dimension) or a sequence of ``D`` one
        dimensional arrays.
    bins : sequence of arrays, int, or sequence of ints
        The bin specification, either as edges or bin counts, once
        for all dimensions or once per dimension.
    range : sequence of pairs, optional
        The (min, max) of every dimension whose bins are a count.
    normed : bool, optional
        An unsupported argument that has been deprecated in the NumPy
        API (preserved to maintain calls dependent on argument order).
    weights : array_like, optional
        Weights associated with each sample.
    density : bool
        If ``True`` the counts are normalized to a probability density.
    histogram : Any, optional
        If not ``None``, a :py:class:`histogrid.Histogram` is returned
        instead of the array style return.
    storage : histogrid.storage.Storage, optional
        Define the storage used by the histogram object.
    threads : int, optional
        Ignored argument kept for compatibility with boost-histogram.

    Returns
    -------
    tuple(numpy.ndarray, list[numpy.ndarray]) or histogrid.Histogram
        The default return is the style of :func:`numpy.histogramdd`.

    Raises
    ------
    ValueError
        If `normed` is used, or `density` is combined with the
        histogram object return.

    """
    if normed is not None:
        raise InvalidArgumentError(
            "normed argument is only supported for NumPy compatibility; "
            "use density instead."
        )
    if histogram and density:
        raise InvalidArgumentError(
            "density is not supported with a histogram object return."
        )
    if threads is not None:
        warnings.warn(
            "threads argument is not used; histogrid fills on the calling thread."
        )

    if isinstance(a, np.ndarray) and a.ndim == 2:
        data = tuple(a.T)
    else:
        data = tuple(a)
    ndim = len(data)

    h = Histogram(*axes_from_bins_range(ndim, bins, range), storage=storage)
    h.fill(*data, weight=weights)
    if histogram:
        return h

    counts = np.array(h.values())
    edges = [ax.edges for ax in h.axes]
    if density:
        widths = [np.diff(e) for e in edges]
        volumes = functools.reduce(np.multiply.outer, widths)
        counts = counts / counts.sum() / volumes
    return counts, edges


def merge(
    histograms: Iterable[Histogram], split_every: int | bool | None = None
) -> Histogram:
    """Sum histograms with a tree reduction.

    Parameters
    ----------
    histograms : iterable of histogrid.Histogram
        Histograms to combine; their axes must be compatible.
    split_every : int or bool, optional
        Number of histograms combined per node of the reduction tree.
        ``None`` reads ``histogram.aggregation.split-every`` from the
        dask configuration; ``False`` sums everything in one step.

    Returns
    -------
    histogrid.Histogram
        A new histogram; the inputs are not modified.

    Raises
    ------
    InvalidArgumentError
        If no histogram is given or `split_every` is smaller than 2.

    """
    level = list(histograms)
    if not level:
        raise InvalidArgumentError("merge requires at least one histogram.")
    if split_every is None:
        split_every = config.get("aggregation.split-every", 8)
    if split_every is False:
        split_every = max(len(level), 2)
    split_every = int(split_every)
    if split_every < 2:
        raise InvalidArgumentError("split_every must be at least 2.")

    if len(level) == 1:
        return level[0].copy()
    while len(level) > 1:
        level = [
            functools.reduce(operator.add, level[i : i + split_every])
            for i in range(0, len(level), split_every)
        ]
    return level[0]
