"""Flat storages of accumulator cells."""

from __future__ import annotations

from typing import Any, ClassVar, Iterator

import numpy as np

from histogrid import accumulators, config
from histogrid.errors import ConfigurationError, InvalidArgumentError

__all__ = (
    "Storage",
    "Int64",
    "Double",
    "Weight",
    "Mean",
    "WeightedMean",
    "common_storage_type",
    "scaled_storage_type",
    "from_name",
    "default",
)


class Storage:
    """Base class of all storages.

    A storage is a one dimensional NumPy array of cells together with
    the rules to fill, add and scale them. Cells are addressed by the
    linear index computed from the histogram axes.

    """

    dtype: ClassVar[np.dtype]
    name: ClassVar[str]
    accepts_weight: ClassVar[bool] = False
    accepts_sample: ClassVar[bool] = False
    requires_sample: ClassVar[bool] = False
    sample_arity: ClassVar[int] = 0

    def __init__(self) -> None:
        self._data = np.zeros(0, dtype=self.dtype)

    @property
    def data(self) -> np.ndarray:
        """Writable flat backing array."""
        return self._data

    def __len__(self) -> int:
        return len(self._data)

    def reset(self, size: int | None = None) -> None:
        """Reset all cells, resizing to `size` cells if given."""
        if size is None or size == len(self._data):
            self._data[...] = np.zeros_like(self._data)
        else:
            self._data = np.zeros(size, dtype=self.dtype)

    def copy(self) -> Storage:
        new = type(self)()
        new._data = self._data.copy()
        return new

    def __getitem__(self, i: int) -> Any:
        return self._cell(self._data[i])

    def __setitem__(self, i: int, value: Any) -> None:
        self._data[i] = self._raw(value)

    def __iter__(self) -> Iterator[Any]:
        for raw in self._data:
            yield self._cell(raw)

    def _cell(self, raw: Any) -> Any:
        return raw.item()

    def _raw(self, value: Any) -> Any:
        return value

    def values(self, raw: np.ndarray) -> np.ndarray:
        """Bin values of the cells in `raw`."""
        return raw

    def variances(self, raw: np.ndarray) -> np.ndarray:
        """Variance estimates of the values; plain counts are Poisson."""
        return raw

    def counts(self, raw: np.ndarray) -> np.ndarray:
        """Effective number of entries of the cells in `raw`."""
        return raw

    def total(self, raw: np.ndarray | None = None) -> Any:
        """Combine the cells of `raw` (default: all cells) into one."""
        raise NotImplementedError

    def check_fill(self, *, weight: bool, sample: int | None) -> None:
        """Validate fill annotations against the storage capabilities.

        Parameters
        ----------
        weight : bool
            Whether the fill carries a weight.
        sample : int, optional
            Number of values in the sample payload, ``None`` without
            sample.

        Raises
        ------
        ConfigurationError
            If the cells cannot take a weight or a sample.
        InvalidArgumentError
            If a required sample is missing or has the wrong size.

        """
        if weight and not self.accepts_weight:
            raise ConfigurationError(f"{self!r} storage does not support weights.")
        if sample is not None and not self.accepts_sample:
            raise ConfigurationError(f"{self!r} storage does not support samples.")
        if sample is None and self.requires_sample:
            raise InvalidArgumentError(f"{self!r} storage requires a sample.")
        if sample is not None and sample != self.sample_arity:
            raise InvalidArgumentError(
                f"{self!r} storage takes {self.sample_arity} sample value(s), "
                f"got {sample}."
            )

    def fill(
        self,
        offsets: np.ndarray,
        weight: np.ndarray | None = None,
        sample: tuple[np.ndarray, ...] | None = None,
    ) -> None:
        """Accumulate one entry per element of `offsets`."""
        raise NotImplementedError

    def iadd(self, other: Storage) -> None:
        """Add `other` cell by cell, converting it to this kind first."""
        if not isinstance(other, Storage):
            raise ConfigurationError(f"cannot add {type(other).__name__} to a storage")
        other = type(self).from_storage(other)
        if len(other) != len(self):
            raise InvalidArgumentError("storages differ in size")
        self._iadd(other._data)

    def _iadd(self, raw: np.ndarray) -> None:
        self._data += raw

    def scale(self, factor: float) -> None:
        """Multiply every cell by `factor`."""
        raise NotImplementedError

    @classmethod
    def from_storage(cls, other: Storage) -> Storage:
        """Copy of `other` converted to this storage kind.

        Raises
        ------
        ConfigurationError
            If this kind is not the common kind of both storages, that
            is, when the conversion would lose information.

        """
        if type(other) is cls:
            return other.copy()
        if common_storage_type(cls, type(other)) is not cls:
            raise ConfigurationError(
                f"cannot convert {type(other).__name__} storage to {cls.__name__} "
                "without loss"
            )
        new = cls()
        new._data = cls._convert(other._data, type(other))
        return new

    @classmethod
    def _convert(cls, raw: np.ndarray, source: type[Storage]) -> np.ndarray:
        raise ConfigurationError(f"no conversion from {source.__name__} to {cls.__name__}")

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Storage):
            return NotImplemented
        try:
            kind = common_storage_type(type(self), type(other))
        except ConfigurationError:
            return False
        a = kind.from_storage(self).data
        b = kind.from_storage(other).data
        return a.shape == b.shape and bool(np.array_equal(a, b))

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class Int64(Storage):
    """Integer counters; no weights and no in-place scaling."""

    dtype = np.dtype(np.int64)
    name = "int64"

    def fill(self, offsets, weight=None, sample=None):
        self._data += np.bincount(offsets, minlength=len(self._data)).astype(np.int64)

    def scale(self, factor: float) -> None:
        raise ConfigurationError(
            "Int64 storage cannot be scaled in place; multiply with h * x "
            "to get a histogram with Double storage."
        )

    def total(self, raw=None):
        raw = self._data if raw is None else raw
        return int(raw.sum())


class Double(Storage):
    """Floating point counters; weights are summed."""

    dtype = np.dtype(np.float64)
    name = "double"
    accepts_weight = True

    def fill(self, offsets, weight=None, sample=None):
        self._data += np.bincount(offsets, weights=weight, minlength=len(self._data))

    def scale(self, factor: float) -> None:
        self._data *= factor

    def total(self, raw=None):
        raw = self._data if raw is None else raw
        return float(raw.sum())

    @classmethod
    def _convert(cls, raw, source):
        return raw.astype(cls.dtype)


class Weight(Storage):
    """Sum of weights and sum of squared weights per cell."""

    dtype = np.dtype([("value", "f8"), ("variance", "f8")])
    name = "weight"
    accepts_weight = True

    def _cell(self, raw):
        return accumulators.WeightedSum(*raw.item())

    def _raw(self, value):
        return tuple(value)

    def fill(self, offsets, weight=None, sample=None):
        n = len(self._data)
        if weight is None:
            counts = np.bincount(offsets, minlength=n)
            self._data["value"] += counts
            self._data["variance"] += counts
        else:
            self._data["value"] += np.bincount(offsets, weights=weight, minlength=n)
            self._data["variance"] += np.bincount(
                offsets, weights=weight * weight, minlength=n
            )

    def _iadd(self, raw):
        self._data["value"] += raw["value"]
        self._data["variance"] += raw["variance"]

    def scale(self, factor: float) -> None:
        self._data["value"] *= factor
        self._data["variance"] *= factor * factor

    def values(self, raw):
        return raw["value"]

    def variances(self, raw):
        return raw["variance"]

    def counts(self, raw):
        value, variance = raw["value"], raw["variance"]
        with np.errstate(invalid="ignore", divide="ignore"):
            return np.where(variance != 0, value**2 / variance, 0.0)

    def total(self, raw=None):
        raw = self._data if raw is None else raw
        return accumulators.WeightedSum(
            float(raw["value"].sum()), float(raw["variance"].sum())
        )

    @classmethod
    def _convert(cls, raw, source):
        # plain counts are taken as Poisson: variance equals value
        out = np.zeros(len(raw), dtype=cls.dtype)
        out["value"] = raw
        out["variance"] = raw
        return out


def _merge_means(n1, m1, s1, n2, m2, s2):
    """Combine (count, mean, sum of squared deltas) of two groups."""
    n = n1 + n2
    with np.errstate(invalid="ignore", divide="ignore"):
        m = np.where(n != 0, (n1 * m1 + n2 * m2) / n, 0.0)
    s = s1 + s2 + n1 * (m1 - m) ** 2 + n2 * (m2 - m) ** 2
    return n, m, s


def _group_means(offsets, x, w, size):
    """Per-cell (sum of weights, mean, sum of squared deltas) of a batch."""
    sw = np.bincount(offsets, weights=w, minlength=size).astype(float)
    swx = np.bincount(offsets, weights=x if w is None else w * x, minlength=size)
    with np.errstate(invalid="ignore", divide="ignore"):
        mean = np.where(sw != 0, swx / sw, 0.0)
    dev2 = (x - mean[offsets]) ** 2
    sd = np.bincount(offsets, weights=dev2 if w is None else w * dev2, minlength=size)
    return sw, mean, sd


class Mean(Storage):
    """Count, mean and sum of squared deltas of samples per cell."""

    dtype = np.dtype(
        [("count", "f8"), ("value", "f8"), ("_sum_of_deltas_squared", "f8")]
    )
    name = "mean"
    accepts_sample = True
    requires_sample = True
    sample_arity = 1

    _count = "count"
    _deltas = "_sum_of_deltas_squared"

    def _cell(self, raw):
        return accumulators.Mean(*raw.item())

    def _raw(self, value):
        return tuple(value)

    def fill(self, offsets, weight=None, sample=None):
        x = np.asarray(sample[0], dtype=float)
        batch = _group_means(offsets, x, None, len(self._data))
        self._merge(*batch)

    def _merge(self, n2, m2, s2):
        d = self._data
        n, m, s = _merge_means(d[self._count], d["value"], d[self._deltas], n2, m2, s2)
        d[self._count] = n
        d["value"] = m
        d[self._deltas] = s

    def _iadd(self, raw):
        self._merge(raw[self._count], raw["value"], raw[self._deltas])

    def scale(self, factor: float) -> None:
        self._data["value"] *= factor
        self._data[self._deltas] *= factor * factor

    def values(self, raw):
        return raw["value"]

    def counts(self, raw):
        return raw["count"]

    def variances(self, raw):
        # variance of the mean
        n = self.counts(raw)
        with np.errstate(invalid="ignore", divide="ignore"):
            return np.where(n > 1, raw[self._deltas] / (raw[self._count] - 1) / n, np.nan)

    def total(self, raw=None):
        raw = self._data if raw is None else raw.ravel()
        n, m = raw[self._count], raw["value"]
        count = n.sum()
        mean = (n * m).sum() / count if count else 0.0
        out = np.zeros((), dtype=self.dtype)
        out[self._count] = count
        out["value"] = mean
        out[self._deltas] = raw[self._deltas].sum() + (n * (m - mean) ** 2).sum()
        if "sum_of_weights_squared" in self.dtype.names:
            out["sum_of_weights_squared"] = raw["sum_of_weights_squared"].sum()
        return self._cell(out[()])


class WeightedMean(Mean):
    """Weighted mean of samples per cell."""

    dtype = np.dtype(
        [
            ("sum_of_weights", "f8"),
            ("sum_of_weights_squared", "f8"),
            ("value", "f8"),
            ("_sum_of_weighted_deltas_squared", "f8"),
        ]
    )
    name = "weighted_mean"
    accepts_weight = True

    _count = "sum_of_weights"
    _deltas = "_sum_of_weighted_deltas_squared"

    def _cell(self, raw):
        return accumulators.WeightedMean(*raw.item())

    def fill(self, offsets, weight=None, sample=None):
        x = np.asarray(sample[0], dtype=float)
        w = np.ones_like(x) if weight is None else np.asarray(weight, dtype=float)
        size = len(self._data)
        self._data["sum_of_weights_squared"] += np.bincount(
            offsets, weights=w * w, minlength=size
        )
        self._merge(*_group_means(offsets, x, w, size))

    def _iadd(self, raw):
        self._data["sum_of_weights_squared"] += raw["sum_of_weights_squared"]
        super()._iadd(raw)

    def counts(self, raw):
        sw, sw2 = raw["sum_of_weights"], raw["sum_of_weights_squared"]
        with np.errstate(invalid="ignore", divide="ignore"):
            return np.where(sw2 != 0, sw**2 / sw2, 0.0)

    def variances(self, raw):
        sw, sw2 = raw["sum_of_weights"], raw["sum_of_weights_squared"]
        with np.errstate(invalid="ignore", divide="ignore"):
            denom = sw - sw2 / sw
            var = np.where(denom > 0, raw[self._deltas] / denom, np.nan)
            return var / self.counts(raw)

    @classmethod
    def _convert(cls, raw, source):
        out = np.zeros(len(raw), dtype=cls.dtype)
        out["sum_of_weights"] = raw["count"]
        out["sum_of_weights_squared"] = raw["count"]
        out["value"] = raw["value"]
        out["_sum_of_weighted_deltas_squared"] = raw["_sum_of_deltas_squared"]
        return out


_PROMOTIONS: dict[frozenset, type[Storage]] = {
    frozenset({Int64, Double}): Double,
    frozenset({Int64, Weight}): Weight,
    frozenset({Double, Weight}): Weight,
    frozenset({Mean, WeightedMean}): WeightedMean,
}

_SCALED: dict[type[Storage], type[Storage]] = {Int64: Double}

_BY_NAME: dict[str, type[Storage]] = {
    s.name: s for s in (Int64, Double, Weight, Mean, WeightedMean)
}


def common_storage_type(a: type[Storage], b: type[Storage]) -> type[Storage]:
    """Storage kind holding the cells of both `a` and `b` without loss.

    Raises
    ------
    ConfigurationError
        If the pair has no entry in the promotion table.

    """
    if a is b:
        return a
    try:
        return _PROMOTIONS[frozenset({a, b})]
    except KeyError:
        raise ConfigurationError(
            f"no common storage type for {a.__name__} and {b.__name__}"
        ) from None


def scaled_storage_type(kind: type[Storage]) -> type[Storage]:
    """Storage kind able to hold `kind` cells multiplied by a real scalar."""
    return _SCALED.get(kind, kind)


def from_name(name: str) -> Storage:
    """Storage instance for a configuration name like ``"weight"``."""
    try:
        return _BY_NAME[name.lower()]()
    except KeyError:
        raise ConfigurationError(
            f"unknown storage {name!r}; expected one of {sorted(_BY_NAME)}"
        ) from None


def default() -> Storage:
    """Storage selected by the ``histogram.storage`` configuration key."""
    return from_name(config.get("storage", "double"))
