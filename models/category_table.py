from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Tuple, Union

import numpy as np

Number = Union[int, float]


def _is_nan(value: object) -> bool:
    return isinstance(value, (float, np.floating)) and bool(np.isnan(value))


def _sorted_unique(values) -> Tuple[Number, ...]:
    """Ascending distinct values; every NaN collapses into one entry, placed last."""
    has_nan = False
    distinct = set()
    for value in values:
        if _is_nan(value):
            has_nan = True
        else:
            distinct.add(value)
    ordered = tuple(sorted(distinct))
    return ordered + (float("nan"),) if has_nan else ordered


@dataclass(frozen=True)
class CategoryTable:
    """Sorted, deduplicated label values found in one label volume.

    Background ``0`` stays in the table.  Colours are assigned by rank within
    this table (``max(0, rank - 1) % palette_size``), so the same literal
    label value can get a different colour in another volume.
    """

    values: Tuple[Number, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "values", _sorted_unique(self.values))

    def __len__(self) -> int:
        return len(self.values)

    def __iter__(self) -> Iterator[Number]:
        return iter(self.values)

    def __contains__(self, value: object) -> bool:
        return value in self.values

    def as_array(self) -> np.ndarray:
        return np.asarray(self.values, dtype=np.float64)

    def index_of(self, value: Number) -> int:
        """Rank of ``value`` in the table, or -1 when absent."""
        try:
            return self.values.index(value)
        except ValueError:
            return -1

    def color_index(self, value: Number, palette_size: int) -> int:
        """Palette slot for ``value``; unknown values fall back to slot 0."""
        if palette_size <= 0:
            raise ValueError("palette_size must be positive")
        return max(0, self.index_of(value) - 1) % palette_size
