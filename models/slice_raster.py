from __future__ import annotations

from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True)
class SliceRasterPair:
    """RGBA rasters for one slice: grayscale image layer and coloured label layer.

    Both layers are uint8 arrays of shape (height, width, 4), row-major with
    the origin at the top-left corner.
    """

    image_layer: np.ndarray
    label_layer: np.ndarray
    slice_index: int

    def __post_init__(self) -> None:
        if self.image_layer.shape != self.label_layer.shape:
            raise ValueError(
                f"Layer shapes differ: {self.image_layer.shape} vs {self.label_layer.shape}"
            )
        if self.image_layer.ndim != 3 or self.image_layer.shape[2] != 4:
            raise ValueError(f"RGBA layer of shape (H, W, 4) expected, got {self.image_layer.shape}")

    @property
    def width(self) -> int:
        return int(self.image_layer.shape[1])

    @property
    def height(self) -> int:
        return int(self.image_layer.shape[0])

    def image_bytes(self) -> bytes:
        return self.image_layer.tobytes()

    def label_bytes(self) -> bytes:
        return self.label_layer.tobytes()
