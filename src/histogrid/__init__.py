"""Multi-dimensional histograms over a flat storage."""

from histogrid import config  # noqa: F401 registers the dask.config defaults
from histogrid import accumulators, axis, storage
from histogrid.axes import AxesTuple
from histogrid.core import Histogram
from histogrid.errors import (
    ConfigurationError,
    HistogramError,
    InvalidArgumentError,
    OutOfRangeError,
)
from histogrid.markers import sample, weight
from histogrid.routines import histogram, histogram2d, histogramdd, merge
from histogrid.version import __version__

__all__ = (
    "AxesTuple",
    "ConfigurationError",
    "Histogram",
    "HistogramError",
    "InvalidArgumentError",
    "OutOfRangeError",
    "__version__",
    "accumulators",
    "axis",
    "histogram",
    "histogram2d",
    "histogramdd",
    "merge",
    "sample",
    "storage",
    "weight",
)
