"""
Modèles de données du noyau de décodage.

- Volume / LabelVolume : grille de voxels décodée (NRRD, NIfTI)
- CategoryTable : valeurs de labels distinctes, triées
- SliceRasterPair : couches RGBA d'une coupe
- Mesh : soupe de triangles décodée (STL)
- ViewStateModel : état de navigation (coupe courante, opacité)
"""

from .value_type import ValueType
from .volume import LabelVolume, Volume
from .category_table import CategoryTable
from .slice_raster import SliceRasterPair
from .mesh import BoundingBox, Mesh
from .view_state_model import ViewStateModel

__all__ = [
    'ValueType',
    'Volume',
    'LabelVolume',
    'CategoryTable',
    'SliceRasterPair',
    'BoundingBox',
    'Mesh',
    'ViewStateModel',
]
