"""STL surface decoder (ASCII and binary).

A file starting with ``solid`` is first read as ASCII.  Many exporters also
write ``solid`` at the start of the 80-byte binary header, so any ASCII
failure falls back to the binary reader; when both fail, the binary error is
raised.

ASCII failures are explicit: a ``vertex``/``facet normal`` line with missing,
non-numeric or non-finite coordinates, a trailing incomplete triangle, or a
file without any vertex all raise :class:`~services.exceptions.FormatError`
(and therefore trigger the binary fallback).

Vertices are never shared between triangles: each facet contributes three
fresh vertices, each tagged with the facet normal.
"""

from __future__ import annotations

import logging
import math
from typing import List, Sequence, Tuple

import numpy as np

from config.constants import STL_HEADER_SIZE, STL_MIN_BINARY_SIZE, STL_TRIANGLE_RECORD_SIZE
from models.mesh import Mesh
from services.byte_reader import read_uint32
from services.exceptions import FormatError

logger = logging.getLogger(__name__)

# 50-byte binary record: facet normal, 3 vertices, attribute byte count
STL_RECORD_DTYPE = np.dtype(
    [
        ("normal", "<f4", (3,)),
        ("vertices", "<f4", (3, 3)),
        ("attribute", "<u2"),
    ]
)


class StlDecoder:
    """Decode an in-memory STL file into a :class:`~models.mesh.Mesh`."""

    def decode(self, buffer: bytes) -> Mesh:
        buffer = bytes(buffer)
        if self.looks_like_ascii(buffer):
            try:
                return self.decode_ascii(buffer)
            except FormatError as exc:
                logger.debug("ASCII STL parse failed (%s), trying binary layout", exc)
        return self.decode_binary(buffer)

    @staticmethod
    def looks_like_ascii(buffer: bytes) -> bool:
        return buffer[:5].decode("utf-8", errors="replace").lower() == "solid"

    # ------------------------------------------------------------------
    # ASCII
    # ------------------------------------------------------------------
    def decode_ascii(self, buffer: bytes) -> Mesh:
        text = buffer.decode("utf-8", errors="replace")

        vertices: List[Tuple[float, float, float]] = []
        normals: List[Tuple[float, float, float]] = []
        faces: List[Tuple[int, int, int]] = []
        current_face: List[int] = []
        current_normal = (0.0, 0.0, 0.0)

        for line_no, raw_line in enumerate(text.split("\n"), start=1):
            line = raw_line.strip()
            if line.startswith("facet normal"):
                current_normal = self._parse_triplet(line.split()[2:], line_no)
            elif line.startswith("vertex"):
                vertex = self._parse_triplet(line.split()[1:], line_no)
                current_face.append(len(vertices))
                vertices.append(vertex)
                normals.append(current_normal)
                if len(current_face) == 3:
                    faces.append(tuple(current_face))
                    current_face = []

        if not vertices:
            raise FormatError("No vertices found in STL file")
        if current_face:
            raise FormatError(
                f"Incomplete triangle at end of ASCII STL ({len(current_face)} trailing vertices)"
            )

        mesh = Mesh(
            vertices=np.asarray(vertices, dtype=np.float32),
            normals=np.asarray(normals, dtype=np.float32),
            indices=np.asarray(faces, dtype=np.uint32),
            triangle_count=len(faces),
        )
        logger.debug("ASCII STL parsed: %d triangles", mesh.triangle_count)
        return mesh

    @staticmethod
    def _parse_triplet(tokens: Sequence[str], line_no: int) -> Tuple[float, float, float]:
        if len(tokens) < 3:
            raise FormatError(f"Line {line_no}: expected 3 coordinates, got {len(tokens)}")
        try:
            values = tuple(float(token) for token in tokens[:3])
        except ValueError:
            raise FormatError(f"Line {line_no}: non-numeric coordinate in {list(tokens[:3])}") from None
        if not all(math.isfinite(v) for v in values):
            raise FormatError(f"Line {line_no}: non-finite coordinate {values}")
        return values

    # ------------------------------------------------------------------
    # Binary
    # ------------------------------------------------------------------
    def decode_binary(self, buffer: bytes) -> Mesh:
        if len(buffer) < STL_MIN_BINARY_SIZE:
            raise FormatError("STL file too small - invalid binary STL format")

        triangle_count = read_uint32(buffer, STL_HEADER_SIZE)
        if triangle_count == 0:
            raise FormatError("STL file contains no triangles")

        expected_size = STL_MIN_BINARY_SIZE + triangle_count * STL_TRIANGLE_RECORD_SIZE
        if len(buffer) < expected_size:
            raise FormatError(
                f"STL file truncated: {triangle_count} triangles need {expected_size} bytes, "
                f"got {len(buffer)}"
            )
        if len(buffer) > expected_size:
            logger.debug("Ignoring %d trailing bytes after STL records", len(buffer) - expected_size)

        records = np.frombuffer(
            buffer, dtype=STL_RECORD_DTYPE, count=triangle_count, offset=STL_MIN_BINARY_SIZE
        )
        vertices = records["vertices"].reshape(-1)
        normals = np.repeat(records["normal"], 3, axis=0).reshape(-1)
        indices = np.arange(triangle_count * 3, dtype=np.uint32)

        mesh = Mesh(
            vertices=vertices,
            normals=normals,
            indices=indices,
            triangle_count=triangle_count,
        )
        logger.debug("Binary STL parsed: %d triangles", mesh.triangle_count)
        return mesh
