"""Detection des catégories présentes dans un volume de labels."""

from __future__ import annotations

import logging
from typing import Set

import numpy as np

from config.constants import CATEGORY_SCAN_CHUNK_SIZE
from models.category_table import CategoryTable
from models.volume import LabelVolume

logger = logging.getLogger(__name__)


def detect_categories(label: LabelVolume, chunk_size: int = CATEGORY_SCAN_CHUNK_SIZE) -> CategoryTable:
    """Parcourt tout le volume de labels et retourne la table triée des valeurs distinctes.

    Args:
        label: Volume de labels (valeur 0 = fond, conservée dans la table)
        chunk_size: Nombre de voxels traités par passe

    Returns:
        CategoryTable: valeurs distinctes, ordre croissant
    """
    if chunk_size <= 0:
        raise ValueError("chunk_size must be positive")

    data = label.data
    unique_values: Set = set()
    has_nan = False
    # Chaque voxel est visité exactement une fois, par blocs contigus
    for start in range(0, data.size, chunk_size):
        chunk = np.unique(data[start:start + chunk_size])
        if chunk.dtype.kind == "f":
            nan_mask = np.isnan(chunk)
            if nan_mask.any():
                has_nan = True
                chunk = chunk[~nan_mask]
        unique_values.update(chunk.tolist())

    # Un seul NaN dans la table, trié en dernier
    if has_nan:
        unique_values.add(float("nan"))
    table = CategoryTable(tuple(unique_values))
    logger.info("Label categories detected: %s", list(table.values))
    return table
