from typing import Optional

from config.constants import DEFAULT_LABEL_OPACITY
from utils.helpers import clamp


class ViewStateModel:
    """
    Stores slice-viewer state: slice navigation and label overlay opacity.
    Pure model, no rendering and no services.
    """

    def __init__(self) -> None:

        # --- Label overlay ---
        self.label_opacity: float = DEFAULT_LABEL_OPACITY

        # --- Navigation ---
        self.current_slice: int = 0
        self.slice_min: int = 0
        self.slice_max: int = 0

    # ------------------------------------------------------------------ #
    # Slice control
    # ------------------------------------------------------------------ #
    def set_slice_bounds(self, min_idx: int, max_idx: int) -> None:
        """Define valid slice range."""
        self.slice_min = int(min_idx)
        self.slice_max = int(max_idx)

    def clamp_slice(self, index: int) -> int:
        """Clamp slice index inside defined bounds."""
        index = int(index)
        return clamp(index, self.slice_min, self.slice_max)

    def set_slice(self, index: int) -> None:
        """Update current slice using clamping rules."""
        self.current_slice = self.clamp_slice(index)

    def reset_for_depth(self, depth: int) -> None:
        """Bounds become [0, depth - 1] and the middle slice is selected."""
        self.set_slice_bounds(0, max(0, int(depth) - 1))
        self.set_slice(int(depth) // 2)

    # ------------------------------------------------------------------ #
    # Overlay
    # ------------------------------------------------------------------ #
    def set_label_opacity(self, opacity: float) -> None:
        self.label_opacity = clamp(float(opacity), 0.0, 1.0)

    # ------------------------------------------------------------------ #
    # Display helpers
    # ------------------------------------------------------------------ #
    def slice_info(self, depth: Optional[int] = None) -> str:
        """Human readable position, 1-based: ``"12/40"``."""
        total = self.slice_max + 1 if depth is None else int(depth)
        return f"{self.current_slice + 1}/{total}"
