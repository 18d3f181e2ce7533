"""Closed set of voxel element types shared by the volume decoders."""

from __future__ import annotations

from enum import Enum

import numpy as np


class ValueType(Enum):
    """Element type of a decoded voxel buffer.

    Each member carries the little-endian numpy dtype string used to
    reinterpret raw payload bytes, so the byte width and signedness are
    derived from a single place.
    """

    UINT8 = "<u1"
    INT8 = "<i1"
    INT16 = "<i2"
    UINT16 = "<u2"
    INT32 = "<i4"
    UINT32 = "<u4"
    FLOAT32 = "<f4"
    FLOAT64 = "<f8"

    @property
    def dtype(self) -> np.dtype:
        return np.dtype(self.value)

    @property
    def byte_width(self) -> int:
        return self.dtype.itemsize

    @property
    def is_signed(self) -> bool:
        return self.dtype.kind in ("i", "f")

    @property
    def is_float(self) -> bool:
        return self.dtype.kind == "f"

    @property
    def tag(self) -> str:
        """Canonical lower-case name (``uint8``, ``float32``...)."""
        return self.name.lower()
