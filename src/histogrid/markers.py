"""Weight and sample markers for fill argument lists."""

from __future__ import annotations

from typing import Any, NamedTuple, Sequence

from histogrid.errors import InvalidArgumentError

__all__ = ("WeightMarker", "SampleMarker", "FillArgs", "weight", "sample")


class WeightMarker(NamedTuple):
    value: Any


class SampleMarker(NamedTuple):
    values: tuple


class FillArgs(NamedTuple):
    """A fill call split into coordinates and annotations."""

    coordinates: tuple
    weight: Any
    sample: tuple | None


def weight(value: Any) -> WeightMarker:
    """Mark `value` as the weight of a fill.

    Examples
    --------
    >>> import histogrid as hg
    >>> h = hg.Histogram(hg.axis.Regular(4, 0, 1), storage=hg.storage.Weight())
    >>> h.fill(0.3, hg.weight(2.5)).at(1)
    WeightedSum(value=2.5, variance=6.25)

    """
    return WeightMarker(value)


def sample(*values: Any) -> SampleMarker:
    """Mark one or more `values` as the sample payload of a fill."""
    if not values:
        raise InvalidArgumentError("sample requires at least one value.")
    return SampleMarker(values)


def normalize_fill_args(
    args: Sequence[Any],
    weight: Any = None,
    sample: Any = None,
) -> FillArgs:
    """Extract the weight and sample annotations of a fill call.

    Markers are accepted anywhere in `args`; the keyword arguments are
    equivalent to markers. Every other argument is a coordinate, kept
    in order.

    Raises
    ------
    InvalidArgumentError
        If a weight or a sample is given more than once.

    """
    if sample is not None and not isinstance(sample, SampleMarker):
        sample = SampleMarker((sample,))
    coordinates = []
    for arg in args:
        if isinstance(arg, WeightMarker):
            if weight is not None:
                raise InvalidArgumentError("weight given more than once.")
            weight = arg.value
        elif isinstance(arg, SampleMarker):
            if sample is not None:
                raise InvalidArgumentError("sample given more than once.")
            sample = arg
        else:
            coordinates.append(arg)
    if isinstance(weight, WeightMarker):
        weight = weight.value
    return FillArgs(
        tuple(coordinates), weight, None if sample is None else tuple(sample.values)
    )
