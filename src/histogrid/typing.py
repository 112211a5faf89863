from __future__ import annotations

from typing import Sequence, Tuple, Union

from numpy.typing import ArrayLike

BinType = Union[int, ArrayLike]
BinArg = Union[BinType, Sequence[BinType]]

RangeType = Union[Tuple[float, float], None]
RangeArg = Union[RangeType, Sequence[RangeType]]
