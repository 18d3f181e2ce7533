"""Decoded scalar volume.

A :class:`Volume` is the common output of the NRRD and NIfTI decoders.  The
voxel buffer is kept flat, exactly as stored in the file, with ``x`` varying
fastest and ``z`` slowest; ``sizes`` lists the extent of each axis in that
order.  A label map uses the same container, value ``0`` meaning background.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

import numpy as np

from models.value_type import ValueType
from services.exceptions import FormatError


@dataclass(frozen=True)
class Volume:
    """Immutable voxel grid: flat data, per-axis sizes and element type."""

    data: np.ndarray
    sizes: Tuple[int, ...]
    value_type: ValueType
    type_name: str = ""

    def __post_init__(self) -> None:
        sizes = tuple(int(s) for s in self.sizes)
        if len(sizes) < 3:
            raise FormatError(f"Volume needs at least 3 dimensions, got {len(sizes)}: {sizes}")
        if any(s <= 0 for s in sizes):
            raise FormatError(f"Volume sizes must be positive: {sizes}")

        data = np.asarray(self.data).reshape(-1)
        expected = int(np.prod(sizes, dtype=np.int64))
        if data.size != expected:
            raise FormatError(
                f"Voxel count {data.size} does not match sizes {sizes} (expected {expected})"
            )
        if data.flags.writeable:
            data = data.view()
            data.flags.writeable = False

        object.__setattr__(self, "sizes", sizes)
        object.__setattr__(self, "data", data)
        if not self.type_name:
            object.__setattr__(self, "type_name", self.value_type.tag)

    # ------------------------------------------------------------------
    # Geometry
    # ------------------------------------------------------------------
    @property
    def width(self) -> int:
        return self.sizes[0]

    @property
    def height(self) -> int:
        return self.sizes[1]

    @property
    def depth(self) -> int:
        return self.sizes[2]

    @property
    def slice_size(self) -> int:
        return self.sizes[0] * self.sizes[1]

    @property
    def voxel_count(self) -> int:
        return int(self.data.size)

    def same_sizes(self, other: "Volume") -> bool:
        return self.sizes == other.sizes


# A label map is a Volume whose values are category identifiers.
LabelVolume = Volume
