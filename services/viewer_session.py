"""Session de visualisation : associe un volume image et un volume de labels."""

from __future__ import annotations

import logging
from typing import Optional

from models.category_table import CategoryTable
from models.slice_raster import SliceRasterPair
from models.view_state_model import ViewStateModel
from models.volume import LabelVolume, Volume
from services.category_detector import detect_categories
from services.slice_compositor import SliceCompositor, ensure_same_dimensions


class ViewerSession:
    """Garde la paire image/labels, la table des catégories et l'état de vue.

    Les deux volumes peuvent être fournis dans n'importe quel ordre ; le rendu
    n'est possible qu'une fois les deux présents et de mêmes dimensions.
    """

    def __init__(
        self,
        compositor: Optional[SliceCompositor] = None,
        view_state: Optional[ViewStateModel] = None,
    ) -> None:
        self.logger = logging.getLogger(__name__)
        self.compositor = compositor or SliceCompositor()
        self.view_state = view_state or ViewStateModel()
        self.image: Optional[Volume] = None
        self.label: Optional[LabelVolume] = None
        self.categories: CategoryTable = CategoryTable()

    # ------------------------------------------------------------------ #
    # Chargement
    # ------------------------------------------------------------------ #
    def set_image(self, volume: Volume) -> None:
        self.image = volume
        self._on_volume_changed()

    def set_label(self, volume: LabelVolume) -> None:
        """Enregistre le volume de labels et recalcule la table des catégories."""
        self.label = volume
        self.categories = detect_categories(volume)
        self._on_volume_changed()

    def load_pair(self, image: Volume, label: LabelVolume) -> None:
        """Charge les deux volumes d'un coup ; lève DimensionMismatchError si incompatibles."""
        ensure_same_dimensions(image, label)
        self.image = image
        self.set_label(label)

    def has_both_files(self) -> bool:
        return self.image is not None and self.label is not None

    def validate_dimensions(self) -> None:
        if not self.has_both_files():
            raise RuntimeError("Image et labels doivent être chargés avant la validation.")
        ensure_same_dimensions(self.image, self.label)

    def clear(self) -> None:
        self.image = None
        self.label = None
        self.categories = CategoryTable()
        self.view_state = ViewStateModel()
        self.logger.info("Session réinitialisée")

    # ------------------------------------------------------------------ #
    # Rendu
    # ------------------------------------------------------------------ #
    def render(self, slice_index: Optional[int] = None, opacity: Optional[float] = None) -> SliceRasterPair:
        """Compose la coupe demandée (coupe courante par défaut)."""
        self.validate_dimensions()

        if slice_index is not None:
            self.view_state.set_slice(slice_index)
        if opacity is not None:
            self.view_state.set_label_opacity(opacity)

        return self.compositor.composite_slice(
            self.image,
            self.label,
            self.categories,
            self.view_state.current_slice,
            self.view_state.label_opacity,
        )

    def slice_info(self) -> str:
        depth = self.image.depth if self.image is not None else None
        return self.view_state.slice_info(depth)

    # ------------------------------------------------------------------ #
    # Helpers
    # ------------------------------------------------------------------ #
    def _on_volume_changed(self) -> None:
        if not self.has_both_files():
            return
        if self.image.sizes != self.label.sizes:
            self.logger.warning(
                "Dimensions image %s et labels %s différentes",
                self.image.sizes,
                self.label.sizes,
            )
            return
        self.view_state.reset_for_depth(self.image.depth)
        self.logger.info(
            "Image et labels prêts: sizes=%s, coupe initiale %s",
            self.image.sizes,
            self.slice_info(),
        )
