"""Conversion between histogrid and boost-histogram objects."""

from __future__ import annotations

import boost_histogram as bh
import numpy as np

from histogrid import axis, storage
from histogrid.core import Histogram
from histogrid.errors import ConfigurationError

__all__ = ("axis_to_boost", "axis_from_boost", "to_boost", "from_boost")

_STORAGES: tuple[tuple[type[storage.Storage], type], ...] = (
    (storage.Int64, bh.storage.Int64),
    (storage.Double, bh.storage.Double),
    (storage.Weight, bh.storage.Weight),
    (storage.Mean, bh.storage.Mean),
    (storage.WeightedMean, bh.storage.WeightedMean),
)


def axis_to_boost(ax: axis.Axis) -> bh.axis.Axis:
    """Equivalent boost-histogram axis, with the same flow bins.

    Raises
    ------
    ConfigurationError
        If boost-histogram has no counterpart of the axis kind.

    """
    under, over = ax.traits
    if isinstance(ax, axis.Radial):
        raise ConfigurationError("Radial axes have no boost-histogram counterpart.")
    if isinstance(ax, axis.Regular):
        return bh.axis.Regular(
            ax.size, ax.start, ax.stop, underflow=under, overflow=over
        )
    if isinstance(ax, axis.Integer):
        return bh.axis.Integer(ax.start, ax.stop, underflow=under, overflow=over)
    if isinstance(ax, axis.Variable):
        return bh.axis.Variable(ax.edges, underflow=under, overflow=over)
    if isinstance(ax, axis.IntCategory):
        return bh.axis.IntCategory(list(ax.categories), overflow=over)
    if isinstance(ax, axis.StrCategory):
        return bh.axis.StrCategory(list(ax.categories), overflow=over)
    raise ConfigurationError(f"cannot convert {type(ax).__name__} to boost-histogram.")


def axis_from_boost(ax: bh.axis.Axis) -> axis.Axis:
    """Equivalent histogrid axis of a boost-histogram axis.

    Raises
    ------
    ConfigurationError
        For growing or circular axes, transformed regular axes, and
        axis kinds without counterpart.

    """
    traits = ax.traits
    if traits.growth or traits.circular:
        raise ConfigurationError("growing and circular axes are not supported.")
    flow = dict(underflow=traits.underflow, overflow=traits.overflow)
    if isinstance(ax, bh.axis.Regular):
        if ax.transform is not None:
            raise ConfigurationError("transformed Regular axes are not supported.")
        return axis.Regular(ax.size, ax.edges[0], ax.edges[-1], **flow)
    if isinstance(ax, bh.axis.Integer):
        return axis.Integer(int(ax.edges[0]), int(ax.edges[-1]), **flow)
    if isinstance(ax, bh.axis.Variable):
        return axis.Variable(ax.edges, **flow)
    if isinstance(ax, bh.axis.IntCategory):
        return axis.IntCategory(
            [ax.value(i) for i in range(ax.size)], overflow=traits.overflow
        )
    if isinstance(ax, bh.axis.StrCategory):
        return axis.StrCategory(
            [ax.value(i) for i in range(ax.size)], overflow=traits.overflow
        )
    raise ConfigurationError(f"unsupported boost-histogram axis: {ax!r}")


def _copy_cells(dst: np.ndarray, src: np.ndarray) -> None:
    # plain ndarray views: boost-histogram views only accept whole records
    dst, src = dst.view(np.ndarray), src.view(np.ndarray)
    if dst.dtype.names is None:
        dst[...] = src
        return
    for name in dst.dtype.names:
        dst[name] = src[name]


def to_boost(hist: Histogram) -> bh.Histogram:
    """Convert `hist` to a :py:class:`boost_histogram.Histogram`.

    Axes, storage kind, metadata and every cell (flow bins included)
    are carried over.

    """
    kinds = dict(_STORAGES)
    out = bh.Histogram(
        *(axis_to_boost(ax) for ax in hist.axes),
        storage=kinds[hist.storage_type](),
        metadata=hist.metadata,
    )
    _copy_cells(out.view(flow=True), hist.view(flow=True))
    return out


def from_boost(hist: bh.Histogram) -> Histogram:
    """Convert a :py:class:`boost_histogram.Histogram` to a histogrid one.

    Raises
    ------
    ConfigurationError
        If an axis or the storage has no histogrid counterpart.

    """
    kinds = {b: h for h, b in _STORAGES}
    try:
        kind = kinds[hist.storage_type]
    except KeyError:
        raise ConfigurationError(
            f"unsupported boost-histogram storage: {hist.storage_type.__name__}"
        ) from None
    out = Histogram(
        *(axis_from_boost(ax) for ax in hist.axes),
        storage=kind(),
        metadata=hist.metadata,
    )
    _copy_cells(out.view(flow=True), hist.view(flow=True))
    return out
