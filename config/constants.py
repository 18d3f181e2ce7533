# Palette par défaut des catégories de labels (format RGB).
# L'index de couleur dépend du rang de la valeur dans la table des catégories,
# pas de la valeur elle-même.
CATEGORY_COLORS = (
    (255, 0, 0),      # Rouge
    (0, 255, 0),      # Vert
    (0, 0, 255),      # Bleu
    (255, 255, 0),    # Jaune
    (255, 0, 255),    # Magenta
    (0, 255, 255),    # Cyan
    (255, 128, 0),    # Orange
    (128, 0, 255),    # Violet
)

DEFAULT_LABEL_OPACITY = 0.5

# Nombre de voxels traités par passe lors de la détection des catégories
CATEGORY_SCAN_CHUNK_SIZE = 100_000

# Extensions reconnues par le chargeur de fichiers
MEDICAL_IMAGE_EXTENSIONS = (".nrrd", ".nii", ".nii.gz")
MESH_EXTENSIONS = (".stl",)

# NIfTI-1 (fichier unique .nii)
NIFTI_HEADER_SIZE = 348
NIFTI_MAGIC = 0x2B31696E  # octets "ni1+" sur disque (uint32 little-endian)
NIFTI_MAGIC_OFFSET = 344
NIFTI_DIM_OFFSET = 40
NIFTI_DATATYPE_OFFSET = 70
NIFTI_VOX_OFFSET_OFFSET = 108
NIFTI_SCL_SLOPE_OFFSET = 112
NIFTI_SCL_INTER_OFFSET = 116

# STL binaire
STL_HEADER_SIZE = 80
STL_MIN_BINARY_SIZE = 84
STL_TRIANGLE_RECORD_SIZE = 50
