"""Exceptions raised by histogrid."""

from __future__ import annotations

__all__ = (
    "HistogramError",
    "ConfigurationError",
    "InvalidArgumentError",
    "OutOfRangeError",
)


class HistogramError(Exception):
    """Base class for all histogrid errors."""


class ConfigurationError(HistogramError, TypeError):
    """Axis or storage types cannot be combined as requested.

    Raised for histograms without axes, for storages lacking a
    capability a fill needs (weights, samples, in-place scaling) and
    for axis or storage kinds without an entry in the promotion
    tables.

    """


class InvalidArgumentError(HistogramError, ValueError):
    """Arguments do not match the histogram they are applied to."""


class OutOfRangeError(HistogramError, IndexError):
    """A bin index lies outside the extended range of its axis."""
