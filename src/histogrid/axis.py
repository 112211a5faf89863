"""Axis types mapping raw values to bin indices."""

from __future__ import annotations

from typing import Any, ClassVar, Hashable, NamedTuple, Sequence

import numpy as np

from histogrid.errors import ConfigurationError

__all__ = (
    "Axis",
    "Traits",
    "Regular",
    "Variable",
    "Integer",
    "IntCategory",
    "StrCategory",
    "Radial",
    "common_axis_type",
)


class Traits(NamedTuple):
    """Extra-bin flags of an axis."""

    underflow: bool
    overflow: bool


class Axis:
    """Base class of all axes.

    An axis has ``size`` ordinary bins plus optional underflow and
    overflow bins. :py:meth:`index` returns logical bin ids: ``-1``
    for underflow, ``0..size-1`` for ordinary bins and ``size`` for
    overflow, whether or not the axis actually stores the flow bin.

    """

    arity: ClassVar[int] = 1
    kind: ClassVar[str] = "axis"

    size: int
    traits: Traits

    @property
    def extent(self) -> int:
        """Total number of bins, flow bins included."""
        return self.size + int(self.traits.underflow) + int(self.traits.overflow)

    def __len__(self) -> int:
        return self.size

    def index(self, value: Any) -> Any:
        """Logical bin id(s) of `value`; vectorized over array input."""
        raise NotImplementedError

    def _layout(self) -> Hashable:
        raise NotImplementedError

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Axis):
            return NotImplemented
        return self._layout() == other._layout()

    def __hash__(self) -> int:
        return hash(self._layout())

    @classmethod
    def from_axis(cls, other: Axis) -> Axis:
        """Build an axis of this kind with the bin layout of `other`."""
        if other.kind != cls.kind:
            raise ConfigurationError(
                f"cannot convert {type(other).__name__} axis to {cls.__name__}"
            )
        return other._copy()

    def _copy(self) -> Axis:
        raise NotImplementedError


class _Edged(Axis):
    """Axis whose bins are intervals between increasing edges."""

    _edges: np.ndarray

    @property
    def edges(self) -> np.ndarray:
        return self._edges.copy()

    @property
    def centers(self) -> np.ndarray:
        return 0.5 * (self._edges[1:] + self._edges[:-1])

    @property
    def widths(self) -> np.ndarray:
        return np.diff(self._edges)

    def _layout(self) -> Hashable:
        return (
            "edges",
            self.arity,
            tuple(self._edges.tolist()),
            self.traits.underflow,
            self.traits.overflow,
        )

    def _flow(self, raw: np.ndarray, x: np.ndarray) -> np.ndarray:
        # raw ids are clipped into the ordinary range first; out-of-domain
        # values then get the logical flow ids.
        idx = np.clip(raw, 0, self.size - 1)
        with np.errstate(invalid="ignore"):
            idx = np.where(x < self._edges[0], -1, idx)
            idx = np.where((x >= self._edges[-1]) | np.isnan(x), self.size, idx)
        return idx.astype(np.intp)

    def _copy(self) -> Axis:
        return Variable(
            self._edges,
            underflow=self.traits.underflow,
            overflow=self.traits.overflow,
        )


class Regular(_Edged):
    """Equal width bins over ``[start, stop)``.

    Parameters
    ----------
    bins : int
        Number of ordinary bins.
    start : float
        Lower edge of the first bin.
    stop : float
        Upper edge of the last bin.
    underflow, overflow : bool
        Whether the axis has the corresponding flow bin.

    """

    kind = "regular"

    def __init__(
        self,
        bins: int,
        start: float,
        stop: float,
        *,
        underflow: bool = True,
        overflow: bool = True,
    ) -> None:
        if int(bins) < 1:
            raise ConfigurationError("bins must be a positive integer.")
        if not start < stop:
            raise ConfigurationError("start must be smaller than stop.")
        self.size = int(bins)
        self.start = float(start)
        self.stop = float(stop)
        self.traits = Traits(bool(underflow), bool(overflow))
        self._edges = np.linspace(self.start, self.stop, self.size + 1)

    def _coordinate(self, value: Any) -> np.ndarray:
        return np.asarray(value, dtype=float)

    def index(self, value: Any) -> Any:
        x = self._coordinate(value)
        z = (x - self.start) / (self.stop - self.start)
        # infinities stay finite; flow ids come from x in _flow
        z = np.clip(np.nan_to_num(z), -1.0, 2.0)
        raw = np.floor(z * self.size)
        return self._flow(raw, x)

    def _copy(self) -> Axis:
        return type(self)(
            self.size,
            self.start,
            self.stop,
            underflow=self.traits.underflow,
            overflow=self.traits.overflow,
        )

    def __repr__(self) -> str:
        args = f"{self.size}, {self.start:g}, {self.stop:g}"
        return f"{type(self).__name__}({args}{_flow_repr(self, Traits(True, True))})"


class Variable(_Edged):
    """Bins between arbitrary, strictly increasing edges."""

    kind = "variable"

    def __init__(
        self,
        edges: Sequence[float],
        *,
        underflow: bool = True,
        overflow: bool = True,
    ) -> None:
        edges = np.array(edges, dtype=float)
        if edges.ndim != 1 or len(edges) < 2:
            raise ConfigurationError("edges must be a sequence of at least two values.")
        if np.any(np.diff(edges) <= 0):
            raise ConfigurationError("edges must be strictly increasing.")
        self._edges = edges
        self.size = len(edges) - 1
        self.traits = Traits(bool(underflow), bool(overflow))

    @classmethod
    def from_axis(cls, other: Axis) -> Axis:
        if isinstance(other, _Edged) and other.arity == 1:
            return cls(
                other._edges,
                underflow=other.traits.underflow,
                overflow=other.traits.overflow,
            )
        return super().from_axis(other)

    def index(self, value: Any) -> Any:
        x = np.asarray(value, dtype=float)
        raw = np.searchsorted(self._edges, x, side="right") - 1
        return self._flow(raw, x)

    def __repr__(self) -> str:
        edges = ", ".join(f"{e:g}" for e in self._edges)
        return f"Variable([{edges}]{_flow_repr(self, Traits(True, True))})"


class Integer(_Edged):
    """One bin per integer in ``[start, stop)``."""

    kind = "integer"

    def __init__(
        self,
        start: int,
        stop: int,
        *,
        underflow: bool = True,
        overflow: bool = True,
    ) -> None:
        if not int(start) < int(stop):
            raise ConfigurationError("start must be smaller than stop.")
        self.start = int(start)
        self.stop = int(stop)
        self.size = self.stop - self.start
        self.traits = Traits(bool(underflow), bool(overflow))
        self._edges = np.arange(self.start, self.stop + 1, dtype=float)

    def index(self, value: Any) -> Any:
        x = np.asarray(value, dtype=float)
        with np.errstate(invalid="ignore"):
            raw = np.floor(np.nan_to_num(x)) - self.start
        return self._flow(raw, x)

    def _copy(self) -> Axis:
        return Integer(
            self.start,
            self.stop,
            underflow=self.traits.underflow,
            overflow=self.traits.overflow,
        )

    def __repr__(self) -> str:
        args = f"{self.start}, {self.stop}"
        return f"Integer({args}{_flow_repr(self, Traits(True, True))})"


class Radial(Regular):
    """Regular bins in the distance of an ``(x, y)`` point from the origin.

    The coordinate of this axis is a pair, so a histogram holding only
    this axis accepts either ``h.fill((x, y))`` or ``h.fill(x, y)``.

    """

    arity = 2
    kind = "radial"

    def __init__(
        self,
        bins: int,
        start: float,
        stop: float,
        *,
        underflow: bool = False,
        overflow: bool = True,
    ) -> None:
        if start < 0:
            raise ConfigurationError("a radial axis cannot start below zero.")
        super().__init__(bins, start, stop, underflow=underflow, overflow=overflow)

    def _coordinate(self, value: Any) -> np.ndarray:
        x, y = value
        return np.hypot(np.asarray(x, dtype=float), np.asarray(y, dtype=float))

    def __repr__(self) -> str:
        args = f"{self.size}, {self.start:g}, {self.stop:g}"
        return f"Radial({args}{_flow_repr(self, Traits(False, True))})"


class _Category(Axis):
    """One bin per category; unknown values land in the overflow bin."""

    _dtype: ClassVar[type]

    def __init__(self, categories: Sequence[Any], *, overflow: bool = True) -> None:
        cats = [self._dtype(c) for c in categories]
        if not cats:
            raise ConfigurationError("at least one category is required.")
        if len(set(cats)) != len(cats):
            raise ConfigurationError("categories must be unique.")
        self._categories = tuple(cats)
        self._lookup = {c: i for i, c in enumerate(cats)}
        self.size = len(cats)
        self.traits = Traits(False, bool(overflow))

    @property
    def categories(self) -> tuple:
        return self._categories

    def index(self, value: Any) -> Any:
        values = np.asarray(value)
        ids = [self._lookup.get(v, self.size) for v in values.ravel().tolist()]
        return np.array(ids, dtype=np.intp).reshape(values.shape)

    def _layout(self) -> Hashable:
        return ("categories", self.kind, self._categories, self.traits.overflow)

    def _copy(self) -> Axis:
        return type(self)(self._categories, overflow=self.traits.overflow)

    def __repr__(self) -> str:
        cats = ", ".join(repr(c) for c in self._categories)
        return f"{type(self).__name__}([{cats}]{_flow_repr(self, Traits(False, True))})"


class IntCategory(_Category):
    kind = "intcategory"
    _dtype = int


class StrCategory(_Category):
    kind = "strcategory"
    _dtype = str


def _flow_repr(ax: Axis, default: Traits) -> str:
    out = ""
    if ax.traits.underflow != default.underflow:
        out += f", underflow={ax.traits.underflow}"
    if ax.traits.overflow != default.overflow:
        out += f", overflow={ax.traits.overflow}"
    return out


_PROMOTIONS: dict[frozenset, type[Axis]] = {
    frozenset({Regular, Variable}): Variable,
    frozenset({Integer, Variable}): Variable,
    frozenset({Regular, Integer}): Variable,
}


def common_axis_type(a: type[Axis], b: type[Axis]) -> type[Axis]:
    """Axis kind able to represent both `a` and `b` without loss.

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
            f"no common axis type for {a.__name__} and {b.__name__}"
        ) from None
