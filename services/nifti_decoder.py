"""Minimal decoder for single-file NIfTI-1 volumes (``.nii``).

The 348-byte header is read field by field at fixed little-endian offsets;
only the magic, ``dim``, ``datatype``, ``vox_offset``, ``scl_slope`` and
``scl_inter`` fields are used.  Compressed ``.nii.gz`` input must be
gunzipped by the caller (see :mod:`services.volume_loader`).
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Dict, Tuple

import numpy as np

from config.constants import (
    NIFTI_DATATYPE_OFFSET,
    NIFTI_DIM_OFFSET,
    NIFTI_HEADER_SIZE,
    NIFTI_MAGIC,
    NIFTI_MAGIC_OFFSET,
    NIFTI_SCL_INTER_OFFSET,
    NIFTI_SCL_SLOPE_OFFSET,
    NIFTI_VOX_OFFSET_OFFSET,
)
from models.value_type import ValueType
from models.volume import Volume
from services.byte_reader import read_float32, read_uint16, read_uint16_array, read_uint32, reinterpret
from services.exceptions import FormatError, UnsupportedTypeError

logger = logging.getLogger(__name__)

# datatype code -> (element type, display name)
# Code 256 is signed 8-bit but keeps the "unsigned char" label for compatibility.
NIFTI_DATATYPES: Dict[int, Tuple[ValueType, str]] = {
    2: (ValueType.UINT8, "unsigned char"),
    256: (ValueType.INT8, "unsigned char"),
    4: (ValueType.INT16, "short"),
    8: (ValueType.INT32, "int"),
    16: (ValueType.FLOAT32, "float"),
    64: (ValueType.FLOAT64, "double"),
    512: (ValueType.UINT16, "unsigned short"),
    768: (ValueType.UINT32, "unsigned int"),
}


@dataclass(frozen=True)
class NiftiHeader:
    sizes: Tuple[int, ...]
    datatype: int
    data_start: int
    scl_slope: float
    scl_inter: float


class NiftiDecoder:
    """Decode an in-memory NIfTI-1 file into a :class:`~models.volume.Volume`."""

    def decode(self, buffer: bytes) -> Volume:
        buffer = bytes(buffer)
        header = self.parse_header(buffer)
        logger.debug("NIfTI header: %s", header)

        value_type, type_name = self.resolve_datatype(header.datatype)
        count = int(np.prod(header.sizes, dtype=np.int64)) if header.sizes else 0
        if count <= 0:
            raise FormatError(f"Invalid NIFTI dimensions: {header.sizes}")
        data = reinterpret(buffer, value_type, count, offset=header.data_start)

        data, value_type = self.apply_scaling(data, value_type, header.scl_slope, header.scl_inter)
        return Volume(data=data, sizes=header.sizes, value_type=value_type, type_name=type_name)

    # ------------------------------------------------------------------
    # Header
    # ------------------------------------------------------------------
    def parse_header(self, buffer: bytes) -> NiftiHeader:
        if len(buffer) < NIFTI_HEADER_SIZE:
            raise FormatError(
                f"Not a valid NIFTI file - {len(buffer)} bytes is shorter than the "
                f"{NIFTI_HEADER_SIZE}-byte header"
            )
        if read_uint32(buffer, NIFTI_MAGIC_OFFSET) != NIFTI_MAGIC:
            raise FormatError("Not a valid NIFTI file")

        dims = read_uint16_array(buffer, NIFTI_DIM_OFFSET, 8)
        ndim = dims[0]
        if ndim < 1 or ndim > 7:
            raise FormatError(f"Invalid NIFTI dimension count: {ndim}")
        sizes = tuple(dims[1:ndim + 1])

        vox_offset = read_float32(buffer, NIFTI_VOX_OFFSET_OFFSET)
        data_start = int(math.floor(vox_offset)) if vox_offset > 0 else NIFTI_HEADER_SIZE

        return NiftiHeader(
            sizes=sizes,
            datatype=read_uint16(buffer, NIFTI_DATATYPE_OFFSET),
            data_start=data_start,
            scl_slope=read_float32(buffer, NIFTI_SCL_SLOPE_OFFSET),
            scl_inter=read_float32(buffer, NIFTI_SCL_INTER_OFFSET),
        )

    @staticmethod
    def resolve_datatype(datatype: int) -> Tuple[ValueType, str]:
        try:
            return NIFTI_DATATYPES[datatype]
        except KeyError:
            raise UnsupportedTypeError(f"Unsupported NIFTI data type: {datatype}") from None

    # ------------------------------------------------------------------
    # Intensity rescaling
    # ------------------------------------------------------------------
    @staticmethod
    def apply_scaling(
        data: np.ndarray,
        value_type: ValueType,
        slope: float,
        intercept: float,
    ) -> Tuple[np.ndarray, ValueType]:
        """Apply ``scl_slope``/``scl_inter``.

        A slope other than 0 or 1 always wins; an intercept alone only shifts
        the data.  Without either the original typed data is returned as is.
        """
        if slope != 0 and slope != 1:
            scaled = (data.astype(np.float64) * slope + intercept).astype(np.float32)
            return scaled, ValueType.FLOAT32
        if intercept != 0:
            shifted = (data.astype(np.float64) + intercept).astype(np.float32)
            return shifted, ValueType.FLOAT32
        return data, value_type
