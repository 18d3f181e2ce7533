"""Turns one depth slice of an (image, label) volume pair into RGBA rasters.

The image layer is a grayscale rendering normalized on the slice's own
min/max; the label layer paints every positive label with the palette colour
chosen by its rank in the :class:`~models.category_table.CategoryTable`.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence, Tuple

import numpy as np

from config.constants import CATEGORY_COLORS
from models.category_table import CategoryTable
from models.slice_raster import SliceRasterPair
from models.volume import LabelVolume, Volume
from services.exceptions import DimensionMismatchError
from utils.helpers import clamp

logger = logging.getLogger(__name__)


def ensure_same_dimensions(image: Volume, label: LabelVolume) -> None:
    """Raise :class:`DimensionMismatchError` unless both volumes share their sizes."""
    if tuple(image.sizes) != tuple(label.sizes):
        raise DimensionMismatchError(image.sizes, label.sizes)


class SliceCompositor:
    """Builds the image and label layers for one slice.

    The palette is an explicit parameter; the caller is expected to have
    checked the volume pair with :func:`ensure_same_dimensions`.
    """

    def __init__(self, palette: Optional[Sequence[Tuple[int, int, int]]] = None) -> None:
        colors = np.asarray(palette if palette is not None else CATEGORY_COLORS, dtype=np.uint8)
        if colors.ndim != 2 or colors.shape[0] == 0 or colors.shape[1] != 3:
            raise ValueError(f"Palette must be a non-empty list of RGB triples, got shape {colors.shape}")
        self.palette = colors

    @property
    def palette_size(self) -> int:
        return int(self.palette.shape[0])

    def composite_slice(
        self,
        image: Volume,
        label: LabelVolume,
        categories: CategoryTable,
        slice_index: int,
        opacity: float,
    ) -> SliceRasterPair:
        width, height, depth = image.width, image.height, image.depth
        if not 0 <= slice_index < depth:
            raise IndexError(f"Slice index {slice_index} out of range [0, {depth})")

        slice_size = width * height
        offset = slice_index * slice_size
        image_slice = image.data[offset:offset + slice_size]
        label_slice = label.data[offset:offset + slice_size]

        image_layer = self.render_image_layer(image_slice).reshape(height, width, 4)
        label_layer = self.render_label_layer(label_slice, categories, opacity).reshape(height, width, 4)
        return SliceRasterPair(image_layer=image_layer, label_layer=label_layer, slice_index=slice_index)

    # ------------------------------------------------------------------
    # Layers
    # ------------------------------------------------------------------
    @staticmethod
    def render_image_layer(values: np.ndarray) -> np.ndarray:
        """Grayscale RGBA (N, 4) with intensities stretched to 0-255.

        NaN voxels are ignored for the range and drawn black. A slice whose
        first voxel is NaN has no usable range and is drawn entirely black.
        """
        raw = values.astype(np.float64)
        nan_mask = np.isnan(raw)
        gray = np.zeros(raw.shape, dtype=np.uint8)

        if raw.size and not nan_mask[0]:
            min_val = np.nanmin(raw)
            max_val = np.nanmax(raw)
            value_range = max_val - min_val
            if value_range > 0:
                with np.errstate(invalid="ignore"):
                    scaled = np.floor((raw - min_val) / value_range * 255)
                scaled = np.nan_to_num(scaled, nan=0.0, posinf=255.0, neginf=0.0)
                gray = np.clip(scaled, 0, 255).astype(np.uint8)

        rgba = np.empty((raw.size, 4), dtype=np.uint8)
        rgba[:, 0] = gray
        rgba[:, 1] = gray
        rgba[:, 2] = gray
        rgba[:, 3] = 255
        return rgba

    def render_label_layer(
        self,
        values: np.ndarray,
        categories: CategoryTable,
        opacity: float,
    ) -> np.ndarray:
        """RGBA (N, 4): palette colour for positive labels, transparent elsewhere."""
        alpha = int(np.floor(clamp(float(opacity), 0.0, 1.0) * 255))
        rgba = np.zeros((values.size, 4), dtype=np.uint8)

        labelled = values > 0
        if not labelled.any():
            return rgba

        rgba[labelled, :3] = self.palette[self.color_indices(values[labelled], categories)]
        rgba[labelled, 3] = alpha
        return rgba

    def color_indices(self, values: np.ndarray, categories: CategoryTable) -> np.ndarray:
        """Vectorized :meth:`CategoryTable.color_index` over ``values``."""
        table = categories.as_array()
        if table.size == 0:
            return np.zeros(values.shape, dtype=np.intp)

        as_float = values.astype(np.float64)
        ranks = np.searchsorted(table, as_float)
        found = ranks < table.size
        found[found] = table[ranks[found]] == as_float[found]
        ranks = np.where(found, ranks, -1)
        if not found.all():
            logger.warning("%d labelled voxels have values missing from the category table",
                           int((~found).sum()))
        return np.maximum(0, ranks - 1) % self.palette_size
