"""Service d'export des coupes composées vers des fichiers PNG."""

from __future__ import annotations

import logging
import os
from typing import Dict

from PIL import Image

from models.slice_raster import SliceRasterPair


class RasterExport:
    """Sauvegarde les couches image/labels d'une coupe et leur superposition."""

    def __init__(self) -> None:
        self.logger = logging.getLogger(__name__)

    @staticmethod
    def to_images(raster: SliceRasterPair) -> Dict[str, Image.Image]:
        """Retourne les images PIL RGBA : 'image', 'label' et 'overlay'."""
        image = Image.fromarray(raster.image_layer)
        label = Image.fromarray(raster.label_layer)
        overlay = Image.alpha_composite(image, label)
        return {"image": image, "label": label, "overlay": overlay}

    def save_png(self, raster: SliceRasterPair, output_folder: str, prefix: str = "slice") -> Dict[str, str]:
        """
        Sauvegarde les trois images et retourne leurs chemins.

        Args:
            raster: Paire de couches RGBA d'une coupe
            output_folder: Dossier de sortie (créé si absent)
            prefix: Préfixe des noms de fichiers
        """
        os.makedirs(output_folder, exist_ok=True)

        paths: Dict[str, str] = {}
        for kind, img in self.to_images(raster).items():
            path = os.path.join(output_folder, f"{prefix}_{raster.slice_index:04d}_{kind}.png")
            img.save(path)
            paths[kind] = path

        self.logger.info("Coupe %d exportée vers: %s", raster.slice_index, output_folder)
        return paths
