"""Mapping of axis coordinates and bin indices to linear storage offsets.

Offsets use a mixed-radix, row-major encoding: with ``j_k`` the bin id
of axis ``k`` shifted so that an underflow bin is ``0`` and ``r_k`` the
extent of axis ``k``, ``offset = ((j_0 * r_1 + j_1) * r_2 + j_2) ...``.

"""

from __future__ import annotations

import operator
from typing import Any, Sequence

import numpy as np

from histogrid.axes import AxesTuple
from histogrid.errors import InvalidArgumentError, OutOfRangeError
from histogrid.markers import FillArgs

__all__ = (
    "split_coordinates",
    "fill_offsets",
    "prepare_fill",
    "linear_index",
    "unravel_index",
)


def _is_composite(value: Any, arity: int) -> bool:
    return isinstance(value, (tuple, list)) and len(value) == arity


def split_coordinates(axes: AxesTuple, coordinates: Sequence[Any]) -> tuple:
    """Assign the fill coordinates to the axes, one entry per axis.

    A histogram whose only axis takes composite coordinates accepts
    either one tuple or the flattened values.

    Raises
    ------
    InvalidArgumentError
        If the number of coordinates does not match the axes.

    """
    rank = len(axes)
    if rank == 1 and axes[0].arity > 1:
        arity = axes[0].arity
        if len(coordinates) == arity:
            return (tuple(coordinates),)
        if len(coordinates) == 1 and _is_composite(coordinates[0], arity):
            return (tuple(coordinates[0]),)
        raise InvalidArgumentError(
            f"expected one {arity}-tuple or {arity} values, "
            f"got {len(coordinates)} argument(s)"
        )
    if len(coordinates) != rank:
        raise InvalidArgumentError(
            f"expected {rank} coordinate(s) for {rank} axes, got {len(coordinates)}"
        )
    for i, (ax, value) in enumerate(zip(axes, coordinates)):
        if ax.arity > 1 and not _is_composite(value, ax.arity):
            raise InvalidArgumentError(
                f"axis {i} expects a tuple of {ax.arity} values as coordinate"
            )
    return tuple(coordinates)


def fill_offsets(axes: AxesTuple, values: Sequence[Any]) -> tuple[np.ndarray, np.ndarray]:
    """Linear offsets of the coordinates and the mask of storable entries.

    An entry is dropped (mask ``False``) when one of its values is out
    of the domain of an axis lacking the matching flow bin.

    """
    shifted = []
    for ax, value in zip(axes, values):
        try:
            ids = ax.index(value)
        except (TypeError, ValueError) as err:
            raise InvalidArgumentError(f"cannot bin {value!r} on {ax!r}: {err}") from err
        shifted.append(np.asarray(ids, dtype=np.intp) + int(ax.traits.underflow))
    try:
        shifted = np.broadcast_arrays(*shifted)
    except ValueError as err:
        raise InvalidArgumentError(f"fill coordinates do not broadcast: {err}") from err
    offset = np.zeros(shifted[0].shape, dtype=np.intp)
    valid = np.ones(shifted[0].shape, dtype=bool)
    for ax, j in zip(axes, shifted):
        valid &= (j >= 0) & (j < ax.extent)
        offset = offset * ax.extent + j
    return offset, valid


def prepare_fill(
    axes: AxesTuple, fargs: FillArgs
) -> tuple[np.ndarray, np.ndarray | None, tuple[np.ndarray, ...] | None]:
    """Offsets, weights and samples of the storable entries of a fill.

    Coordinates, weight and sample values are broadcast against each
    other; the result is one dimensional.

    """
    offsets, valid = fill_offsets(axes, split_coordinates(axes, fargs.coordinates))
    extra = []
    if fargs.weight is not None:
        extra.append(np.asarray(fargs.weight, dtype=float))
    if fargs.sample is not None:
        extra.extend(np.asarray(s, dtype=float) for s in fargs.sample)
    try:
        arrays = np.broadcast_arrays(offsets, valid, *extra)
    except ValueError as err:
        raise InvalidArgumentError(f"fill arguments do not broadcast: {err}") from err
    if arrays[0].ndim > 1:
        raise InvalidArgumentError("fill arguments must be scalars or one dimensional.")
    mask = np.ravel(arrays[1])
    flat = [np.ravel(a)[mask] for a in arrays]
    weight = None
    if fargs.weight is not None:
        weight = flat[2]
    sample = None
    if fargs.sample is not None:
        sample = tuple(flat[len(flat) - len(fargs.sample) :])
    return flat[0], weight, sample


def linear_index(axes: AxesTuple, indices: Sequence[Any]) -> int:
    """Offset of the cell at logical bin `indices` (``-1`` is underflow).

    Raises
    ------
    InvalidArgumentError
        If the number of indices differs from the rank.
    OutOfRangeError
        If an index is outside the extended range of its axis.

    """
    if len(indices) != len(axes):
        raise InvalidArgumentError(
            f"expected {len(axes)} indices, got {len(indices)}"
        )
    offset = 0
    for i, (ax, index) in enumerate(zip(axes, indices)):
        j = operator.index(index) + int(ax.traits.underflow)
        if not 0 <= j < ax.extent:
            lo = -int(ax.traits.underflow)
            hi = ax.size + int(ax.traits.overflow)
            raise OutOfRangeError(
                f"index {index} out of bounds for axis {i} (valid: {lo} <= i < {hi})"
            )
        offset = offset * ax.extent + j
    return offset


def unravel_index(axes: AxesTuple, offset: int) -> tuple[int, ...]:
    """Logical bin indices of the cell at `offset`."""
    if not 0 <= offset < axes.bincount:
        raise OutOfRangeError(f"offset {offset} out of bounds for {axes.bincount} cells")
    ids = np.unravel_index(offset, axes.extents)
    return tuple(int(j) - int(ax.traits.underflow) for j, ax in zip(ids, axes))
