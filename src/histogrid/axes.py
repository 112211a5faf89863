"""Ordered, fixed-rank collections of axes."""

from __future__ import annotations

import math
from typing import Iterable

from histogrid.axis import Axis, common_axis_type
from histogrid.errors import ConfigurationError

__all__ = ("AxesTuple",)


class AxesTuple(tuple):
    """Immutable sequence of the axes of one histogram.

    The position of an axis defines its dimension; the first axis
    varies slowest in the linear index.

    Raises
    ------
    ConfigurationError
        If no axes are given or an entry is not an
        :py:class:`histogrid.axis.Axis`.

    """

    __slots__ = ()

    def __new__(cls, axes: Iterable[Axis]) -> AxesTuple:
        axes = tuple(axes)
        if not axes:
            raise ConfigurationError("at least one axis is required.")
        for ax in axes:
            if not isinstance(ax, Axis):
                raise ConfigurationError(
                    f"expected an axis, got {type(ax).__name__}: {ax!r}"
                )
        return super().__new__(cls, axes)

    @property
    def rank(self) -> int:
        return len(self)

    def axis(self, i: int) -> Axis:
        """The `i`-th axis; negative positions are not wrapped."""
        if not 0 <= i < len(self):
            raise IndexError(f"axis {i} out of range for rank {len(self)}")
        return self[i]

    @property
    def extents(self) -> tuple[int, ...]:
        return tuple(ax.extent for ax in self)

    @property
    def shape(self) -> tuple[int, ...]:
        return tuple(ax.size for ax in self)

    @property
    def arity(self) -> int:
        """Number of values forming one coordinate of the whole tuple."""
        return sum(ax.arity for ax in self)

    @property
    def bincount(self) -> int:
        """Number of cells needed to store every bin, flow bins included."""
        return math.prod(self.extents)

    def structurally_equal(self, other: Iterable[Axis]) -> bool:
        other = tuple(other)
        return len(self) == len(other) and all(a == b for a, b in zip(self, other))

    def assign_from(self, other: Iterable[Axis]) -> AxesTuple:
        """Axes of `other` converted into the axis kinds of this tuple.

        Raises
        ------
        ConfigurationError
            If the ranks differ or an axis of `other` cannot be
            converted into the kind of the matching slot.

        """
        other = tuple(other)
        if len(other) != len(self):
            raise ConfigurationError(
                f"cannot assign {len(other)} axes to a histogram of rank {len(self)}"
            )
        return AxesTuple(type(a).from_axis(b) for a, b in zip(self, other))

    def common_with(self, other: Iterable[Axis]) -> AxesTuple:
        """Axes of this tuple converted into the common kinds with `other`."""
        other = tuple(other)
        if len(other) != len(self):
            raise ConfigurationError("histograms differ in rank")
        return AxesTuple(
            common_axis_type(type(a), type(b)).from_axis(a) for a, b in zip(self, other)
        )

    def __repr__(self) -> str:
        return f"AxesTuple({', '.join(repr(ax) for ax in self)})"
