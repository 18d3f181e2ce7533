"""Minimal decoder for NRRD volume files.

Only the subset of the NRRD format needed by the slice viewer is handled:

* the text header ends at the first blank line (two consecutive ``\\n``);
* ``sizes``, ``type`` and ``encoding`` are the only fields read, every other
  ``field: value`` line is ignored and the last occurrence of a field wins;
* the payload is either raw or gzip/zlib compressed and is always read as
  little-endian, x fastest.

Detached headers, ``endian`` and spacing/orientation fields are not
interpreted.
"""

from __future__ import annotations

import logging
import zlib
from typing import Dict, List, Optional, Tuple

import numpy as np

from models.value_type import ValueType
from models.volume import Volume
from services.byte_reader import reinterpret
from services.exceptions import DecompressionError, FormatError, UnsupportedTypeError

logger = logging.getLogger(__name__)

HEADER_TERMINATOR = b"\n\n"

NRRD_TYPES: Dict[str, ValueType] = {
    "unsigned char": ValueType.UINT8,
    "uint8": ValueType.UINT8,
    "short": ValueType.INT16,
    "int16": ValueType.INT16,
    "unsigned short": ValueType.UINT16,
    "uint16": ValueType.UINT16,
    "int": ValueType.INT32,
    "signed int": ValueType.INT32,
    "int32": ValueType.INT32,
    "unsigned int": ValueType.UINT32,
    "uint32": ValueType.UINT32,
    "float": ValueType.FLOAT32,
    "double": ValueType.FLOAT64,
}

GZIP_ENCODINGS = ("gzip", "gz")


class NrrdDecoder:
    """Decode an in-memory NRRD file into a :class:`~models.volume.Volume`."""

    def decode(self, buffer: bytes) -> Volume:
        buffer = bytes(buffer)
        header_end = self._find_header_end(buffer)
        fields = self.parse_header(buffer[:header_end].decode("utf-8", errors="replace"))

        sizes = self._parse_sizes(fields.get("sizes"))
        type_name = fields.get("type")
        encoding = fields.get("encoding")
        logger.debug("NRRD header: sizes=%s type=%s encoding=%s", sizes, type_name, encoding)

        payload = buffer[header_end:]
        if encoding in GZIP_ENCODINGS:
            payload = self._inflate(payload)

        value_type = self.resolve_type(type_name)
        count = int(np.prod(sizes, dtype=np.int64))
        data = reinterpret(payload, value_type, count)
        return Volume(data=data, sizes=sizes, value_type=value_type, type_name=type_name)

    # ------------------------------------------------------------------
    # Header
    # ------------------------------------------------------------------
    @staticmethod
    def _find_header_end(buffer: bytes) -> int:
        index = buffer.find(HEADER_TERMINATOR)
        if index == -1:
            raise FormatError("Invalid NRRD file - no header end found")
        return index + len(HEADER_TERMINATOR)

    @staticmethod
    def parse_header(header: str) -> Dict[str, str]:
        """Return lower-cased ``field -> value`` pairs from the header text."""
        fields: Dict[str, str] = {}
        for line in header.split("\n"):
            field, sep, value = line.partition(":")
            if not sep:
                continue
            fields[field.strip().lower()] = value.strip()
        return fields

    @staticmethod
    def _parse_sizes(raw: Optional[str]) -> Tuple[int, ...]:
        if raw is None:
            raise FormatError("Invalid NRRD file - no sizes found")
        sizes: List[int] = []
        for token in raw.split():
            try:
                sizes.append(int(token))
            except ValueError:
                logger.debug("Ignoring non-numeric NRRD size token %r", token)
        if not sizes:
            raise FormatError(f"Invalid NRRD file - unusable sizes field: {raw!r}")
        return tuple(sizes)

    @staticmethod
    def resolve_type(type_name: Optional[str]) -> ValueType:
        value_type = NRRD_TYPES.get(type_name) if type_name is not None else None
        if value_type is None:
            raise UnsupportedTypeError(f"Unsupported data type: {type_name}")
        return value_type

    # ------------------------------------------------------------------
    # Payload
    # ------------------------------------------------------------------
    @staticmethod
    def _inflate(payload: bytes) -> bytes:
        # MAX_WBITS | 32 accepts both gzip and zlib wrappers
        inflater = zlib.decompressobj(zlib.MAX_WBITS | 32)
        try:
            data = inflater.decompress(payload)
        except zlib.error as exc:
            raise DecompressionError(f"Failed to decompress GZIP data: {exc}") from exc
        if not inflater.eof:
            raise DecompressionError("Failed to decompress GZIP data: stream is truncated")
        return data
