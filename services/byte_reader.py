"""Little-endian field extraction from binary buffers.

All helpers are stateless and work on any bytes-like object.  Out of range
reads raise :class:`~services.exceptions.FormatError` rather than returning
partial data.
"""

from __future__ import annotations

import numpy as np

from models.value_type import ValueType
from services.exceptions import FormatError


def _read_scalar(buffer: bytes, offset: int, dtype: str):
    width = np.dtype(dtype).itemsize
    if offset < 0 or offset + width > len(buffer):
        raise FormatError(
            f"Cannot read {width} bytes at offset {offset} (buffer has {len(buffer)} bytes)"
        )
    return np.frombuffer(buffer, dtype=dtype, count=1, offset=offset)[0]


def read_uint16(buffer: bytes, offset: int) -> int:
    return int(_read_scalar(buffer, offset, "<u2"))


def read_uint32(buffer: bytes, offset: int) -> int:
    return int(_read_scalar(buffer, offset, "<u4"))


def read_float32(buffer: bytes, offset: int) -> float:
    return float(_read_scalar(buffer, offset, "<f4"))


def read_uint16_array(buffer: bytes, offset: int, count: int) -> list[int]:
    return [int(v) for v in reinterpret(buffer, ValueType.UINT16, count, offset)]


def reinterpret(buffer: bytes, value_type: ValueType, count: int, offset: int = 0) -> np.ndarray:
    """View ``count`` elements of ``value_type`` starting at ``offset``.

    A longer buffer is fine (only the prefix is used); a shorter one is a
    truncated file.
    """
    needed = count * value_type.byte_width
    available = len(buffer) - offset
    if offset < 0 or available < needed:
        raise FormatError(
            f"Payload too short: need {needed} bytes for {count} x {value_type.tag}, "
            f"only {max(available, 0)} available"
        )
    return np.frombuffer(buffer, dtype=value_type.dtype, count=count, offset=offset)
