"""Decoded triangle surface.

Triangles are stored as a soup: every triangle owns three vertex entries and
three normal entries (the facet normal repeated), and ``indices`` simply
enumerates them.  The flat float32/uint32 buffers can be handed directly to a
GPU vertex/index buffer.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

import numpy as np

from services.exceptions import FormatError


@dataclass(frozen=True)
class BoundingBox:
    """Axis-aligned bounds of a mesh."""

    min: Tuple[float, float, float]
    max: Tuple[float, float, float]

    @property
    def center(self) -> Tuple[float, float, float]:
        return tuple((lo + hi) / 2.0 for lo, hi in zip(self.min, self.max))

    @property
    def size(self) -> Tuple[float, float, float]:
        return tuple(hi - lo for lo, hi in zip(self.min, self.max))

    @property
    def max_dimension(self) -> float:
        return max(self.size)


@dataclass(frozen=True)
class Mesh:
    vertices: np.ndarray
    normals: np.ndarray
    indices: np.ndarray
    triangle_count: int

    def __post_init__(self) -> None:
        vertices = np.ascontiguousarray(self.vertices, dtype=np.float32).reshape(-1)
        normals = np.ascontiguousarray(self.normals, dtype=np.float32).reshape(-1)
        indices = np.ascontiguousarray(self.indices, dtype=np.uint32).reshape(-1)

        if vertices.size == 0:
            raise FormatError("No vertices found in STL file")
        if vertices.size % 3 != 0:
            raise FormatError("Invalid vertex data - not divisible by 3")
        if normals.size != vertices.size:
            raise FormatError(
                f"Normal count {normals.size} does not match vertex count {vertices.size}"
            )
        if indices.size % 3 != 0:
            raise FormatError("Invalid index data - not divisible by 3")
        count = int(self.triangle_count)
        if count != indices.size // 3 or count * 9 != vertices.size:
            raise FormatError(
                f"Triangle count {count} inconsistent with {vertices.size // 3} vertices "
                f"and {indices.size} indices"
            )
        if not (np.isfinite(vertices).all() and np.isfinite(normals).all()):
            raise FormatError("STL file contains invalid numeric data")

        object.__setattr__(self, "vertices", vertices)
        object.__setattr__(self, "normals", normals)
        object.__setattr__(self, "indices", indices)
        object.__setattr__(self, "triangle_count", count)

    @property
    def vertex_count(self) -> int:
        return self.vertices.size // 3

    def positions(self) -> np.ndarray:
        """Vertices as an (N, 3) view."""
        return self.vertices.reshape(-1, 3)

    def bounding_box(self) -> BoundingBox:
        points = self.positions()
        lo = points.min(axis=0)
        hi = points.max(axis=0)
        return BoundingBox(
            min=tuple(float(v) for v in lo),
            max=tuple(float(v) for v in hi),
        )
