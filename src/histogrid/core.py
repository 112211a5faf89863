"""Histogram core: fill, access and arithmetic."""

from __future__ import annotations

import copy
import itertools
import numbers
from typing import TYPE_CHECKING, Any, Iterator

import numpy as np

from histogrid import storage as _storage
from histogrid.axes import AxesTuple
from histogrid.axis import Axis
from histogrid.errors import InvalidArgumentError
from histogrid.linearize import linear_index, prepare_fill
from histogrid.markers import normalize_fill_args

if TYPE_CHECKING:
    import boost_histogram as bh

__all__ = ("Histogram",)


class Histogram:
    """Multi-dimensional histogram over one or more axes.

    Parameters
    ----------
    *axes : histogrid.axis.Axis
        Provide one or more Axis objects (or a single sequence of
        them). Alternatively pass a single Histogram to copy it.
    storage : histogrid.storage.Storage, optional
        Select a storage to use in the histogram. The default storage
        is selected by the ``histogram.storage`` configuration key
        (:py:class:`histogrid.storage.Double` unless overridden).
        When copying a histogram, the copy is converted to this
        storage kind.
    metadata : Any
        Data that is passed along if a new histogram is created.

    Raises
    ------
    ConfigurationError
        If no axes are given, or the storage of a copied histogram
        cannot be converted to `storage` without loss.

    Examples
    --------
    A two dimensional histogram with one fixed bin width axis and
    another variable bin width axis:

    >>> import histogrid as hg
    >>> h = hg.Histogram(
    ...     hg.axis.Regular(10, -3, 3),
    ...     hg.axis.Variable([-3, -2, -1, 0, 1.1, 2.2, 3.3]),
    ...     storage=hg.storage.Weight(),
    ... )
    >>> h.fill([0.5, 1.5], [0.1, -2.5], weight=[2.0, 0.5]).sum()
    WeightedSum(value=2.5, variance=4.25)

    """

    def __init__(
        self,
        *axes: Any,
        storage: _storage.Storage | None = None,
        metadata: Any = None,
    ) -> None:
        """Construct a Histogram object."""
        if len(axes) == 1 and isinstance(axes[0], Histogram):
            other = axes[0]
            kind = other.storage_type if storage is None else type(storage)
            self._axes = other._axes
            self._storage = kind.from_storage(other._storage)
            self.metadata = other.metadata if metadata is None else metadata
            return
        if len(axes) == 1 and isinstance(axes[0], (list, tuple)):
            axes = tuple(axes[0])
        if storage is None:
            storage = _storage.default()
        self._axes = AxesTuple(axes)
        self._storage = type(storage)()
        self._storage.reset(self._axes.bincount)
        self.metadata = metadata

    @classmethod
    def _from_parts(
        cls, axes: AxesTuple, storage: _storage.Storage, metadata: Any
    ) -> Histogram:
        self = cls.__new__(cls)
        self._axes = axes
        self._storage = storage
        self.metadata = metadata
        return self

    @property
    def axes(self) -> AxesTuple:
        """The axes, in dimension order."""
        return self._axes

    @property
    def rank(self) -> int:
        """Number of axes (dimensions)."""
        return self._axes.rank

    def axis(self, i: int = 0) -> Axis:
        """Get the `i`-th axis.

        Raises
        ------
        IndexError
            If `i` is not in ``[0, rank)``.

        """
        return self._axes.axis(i)

    @property
    def size(self) -> int:
        """Total number of bins (including underflow/overflow)."""
        return len(self._storage)

    @property
    def shape(self) -> tuple[int, ...]:
        """Number of ordinary bins along each axis."""
        return self._axes.shape

    @property
    def storage_type(self) -> type[_storage.Storage]:
        return type(self._storage)

    def reset(self) -> Histogram:
        """Reset all bins to default initialized values."""
        self._storage.reset()
        return self

    def fill(self, *args: Any, weight: Any = None, sample: Any = None) -> Histogram:
        """Fill the histogram with values and optional weight or sample.

        Parameters
        ----------
        *args : array_like
            Provide one value or one dimensional array per axis, in
            axis order. An axis taking composite coordinates (like
            :py:class:`histogrid.axis.Radial`) takes a tuple of
            values; if it is the only axis the values may also be
            passed directly. Arguments wrapped with
            :py:func:`histogrid.weight` or :py:func:`histogrid.sample`
            are taken as weight or sample wherever they appear.
        weight : array_like, optional
            Provide weights (only if the storage supports them).
        sample : array_like, optional
            Provide samples (only if the storage supports them).

        Returns
        -------
        histogrid.Histogram
            The histogram itself, now filled.

        Raises
        ------
        InvalidArgumentError
            If the number of coordinates does not match the axes, a
            weight or sample is given twice, the arguments do not
            broadcast to one dimension, or a required sample is
            missing.
        ConfigurationError
            If the storage does not accept the given weight or sample.

        Notes
        -----
        Values outside the domain of an axis go to its flow bin. If the
        axis has no such bin, the entry is dropped. A failing call
        leaves the histogram unchanged.

        """
        fargs = normalize_fill_args(args, weight=weight, sample=sample)
        self._storage.check_fill(
            weight=fargs.weight is not None,
            sample=None if fargs.sample is None else len(fargs.sample),
        )
        offsets, weights, samples = prepare_fill(self._axes, fargs)
        self._storage.fill(offsets, weight=weights, sample=samples)
        return self

    def _offset(self, indices: tuple) -> int:
        if len(indices) == 1 and not isinstance(indices[0], numbers.Integral):
            indices = tuple(indices[0])
        return linear_index(self._axes, indices)

    def at(self, *indices: Any) -> Any:
        """Access cell value at integral indices.

        You can pass indices as individual arguments, as a tuple of
        integers, or as an iterable of integers. Index ``-1`` addresses
        the underflow bin and ``axis.size`` the overflow bin.

        Raises
        ------
        InvalidArgumentError
            If the number of indices differs from the rank.
        OutOfRangeError
            If an index is outside the bins of its axis.

        """
        return self._storage[self._offset(indices)]

    def __getitem__(self, key: Any) -> Any:
        """Access value at index (number for rank 1, else tuple or iterable)."""
        return self.at(key)

    def __setitem__(self, key: Any, value: Any) -> None:
        self._storage[self._offset((key,))] = value

    def __len__(self) -> int:
        return len(self._storage)

    def __iter__(self) -> Iterator[Any]:
        """Every cell, flow bins included, in linear index order.

        Cells are yielded as values; write through :py:meth:`view` or
        item assignment.

        """
        return iter(self._storage)

    def indexed(self, flow: bool = False) -> Iterator[tuple[tuple[int, ...], Any]]:
        """Iterate over ``(indices, cell)`` pairs in linear index order.

        Parameters
        ----------
        flow : bool
            Include the flow bins.

        """
        ranges = [
            range(
                -int(ax.traits.underflow and flow),
                ax.size + int(ax.traits.overflow and flow),
            )
            for ax in self._axes
        ]
        for indices in itertools.product(*ranges):
            yield indices, self._storage[linear_index(self._axes, indices)]

    def view(self, flow: bool = False) -> np.ndarray:
        """Writable array of the raw cells, one dimension per axis.

        Parameters
        ----------
        flow : bool
            Include the flow bins.

        """
        raw = self._storage.data.reshape(self._axes.extents)
        if flow:
            return raw
        return raw[
            tuple(
                slice(int(ax.traits.underflow), int(ax.traits.underflow) + ax.size)
                for ax in self._axes
            )
        ]

    def values(self, flow: bool = False) -> np.ndarray:
        return self._storage.values(self.view(flow=flow))

    def variances(self, flow: bool = False) -> np.ndarray:
        return self._storage.variances(self.view(flow=flow))

    def counts(self, flow: bool = False) -> np.ndarray:
        return self._storage.counts(self.view(flow=flow))

    def __array__(self, dtype: Any = None, copy: Any = None) -> np.ndarray:
        return np.array(self.values(), dtype=dtype)

    def sum(self, flow: bool = False) -> Any:
        """Combine all cells into one.

        Parameters
        ----------
        flow : bool
            Include the flow bins.

        """
        return self._storage.total(self.view(flow=flow))

    def __eq__(self, other: object) -> bool:
        """Equal axes and equal cells."""
        if not isinstance(other, Histogram):
            return NotImplemented
        return (
            self._axes.structurally_equal(other._axes)
            and self._storage == other._storage
        )

    __hash__ = None  # type: ignore[assignment]

    # numpy scalars defer to the reflected operators
    __array_ufunc__ = None

    def copy(self) -> Histogram:
        return Histogram(self)

    def __copy__(self) -> Histogram:
        return self.copy()

    def __deepcopy__(self, memo: dict) -> Histogram:
        new = self.copy()
        new.metadata = copy.deepcopy(self.metadata, memo)
        return new

    def assign(self, other: Histogram) -> Histogram:
        """Replace contents with those of `other`, keeping own types.

        The axes of `other` are converted into the axis kinds of this
        histogram and its storage into this storage kind.

        Raises
        ------
        ConfigurationError
            If the ranks differ, an axis cannot be converted, or the
            storage conversion would lose information.

        """
        axes = self._axes.assign_from(other._axes)
        storage = self.storage_type.from_storage(other._storage)
        self._axes, self._storage = axes, storage
        return self

    def __iadd__(self, other: Any) -> Histogram:
        """Add values of another histogram.

        Raises
        ------
        InvalidArgumentError
            If the axes of the histograms differ.
        ConfigurationError
            If the storage of `other` cannot be added to this storage
            without loss.

        """
        if not isinstance(other, Histogram):
            return NotImplemented
        if not self._axes.structurally_equal(other._axes):
            raise InvalidArgumentError("axes of histograms differ")
        self._storage.iadd(other._storage)
        return self

    def __add__(self, other: Any) -> Histogram:
        """Sum of two histograms in their common axis and storage kinds."""
        if not isinstance(other, Histogram):
            return NotImplemented
        axes = self._axes.common_with(other._axes)
        kind = _storage.common_storage_type(self.storage_type, other.storage_type)
        result = Histogram._from_parts(
            axes, kind.from_storage(self._storage), self.metadata
        )
        result += other
        return result

    def __radd__(self, other: Any) -> Histogram:
        # sum() starts from 0
        if isinstance(other, numbers.Number) and other == 0:
            return self.copy()
        return NotImplemented

    def __imul__(self, other: Any) -> Histogram:
        """Multiply all values with scalar.

        Integer counters cannot hold the result, so an ``Int64``
        histogram is replaced by a new ``Double`` histogram.

        """
        if not isinstance(other, numbers.Real):
            return NotImplemented
        if _storage.scaled_storage_type(self.storage_type) is not self.storage_type:
            return self * other
        self._storage.scale(float(other))
        return self

    def __itruediv__(self, other: Any) -> Histogram:
        """Divide all values by scalar."""
        if not isinstance(other, numbers.Real):
            return NotImplemented
        return self.__imul__(1.0 / other)

    def __mul__(self, other: Any) -> Histogram:
        """Scaled copy; integer counters are promoted to ``Double``."""
        if not isinstance(other, numbers.Real):
            return NotImplemented
        kind = _storage.scaled_storage_type(self.storage_type)
        result = Histogram(self, storage=kind())
        result *= other
        return result

    __rmul__ = __mul__

    def __truediv__(self, other: Any) -> Histogram:
        if not isinstance(other, numbers.Real):
            return NotImplemented
        return self * (1.0 / other)

    def to_boost(self) -> bh.Histogram:
        """Convert to a :py:class:`boost_histogram.Histogram`."""
        from histogrid.boost import to_boost

        return to_boost(self)

    @classmethod
    def from_boost(cls, hist: bh.Histogram) -> Histogram:
        """Convert from a :py:class:`boost_histogram.Histogram`."""
        from histogrid.boost import from_boost

        return from_boost(hist)

    def __repr__(self) -> str:
        newline = "\n  "
        ret = f"{self.__class__.__name__}({newline if self.rank > 1 else ''}"
        ret += f",{newline}".join(repr(ax) for ax in self._axes)
        ret += "{comma}{newline}storage={storage}".format(
            comma=",",
            newline=newline if self.rank > 1 else " ",
            storage=self._storage,
        )
        ret += ")"
        if self.values(flow=True).any():
            outer = self.sum(flow=True)
            inner = self.sum(flow=False)
            ret += f" # Sum: {inner}"
            if inner != outer:
                ret += f" ({outer} with flow)"
        return ret
