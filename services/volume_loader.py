"""Chargement des fichiers volume (NRRD/NIfTI) et maillage (STL) depuis le disque."""

from __future__ import annotations

import gzip
import logging
import zlib
from pathlib import Path
from typing import Optional

from config.constants import MEDICAL_IMAGE_EXTENSIONS, MESH_EXTENSIONS
from models.mesh import Mesh
from models.volume import Volume
from services.exceptions import DecodeError, DecompressionError, FormatError
from services.nifti_decoder import NiftiDecoder
from services.nrrd_decoder import NrrdDecoder
from services.stl_decoder import StlDecoder
from utils.helpers import format_bytes


def get_file_format(filename: str) -> str:
    """Retourne 'nrrd', 'nifti', 'stl' ou 'unknown' selon l'extension."""
    lower_name = str(filename).lower()
    if lower_name.endswith(".nrrd"):
        return "nrrd"
    if lower_name.endswith(".nii") or lower_name.endswith(".nii.gz"):
        return "nifti"
    if lower_name.endswith(MESH_EXTENSIONS):
        return "stl"
    return "unknown"


def is_supported_medical_format(filename: str) -> bool:
    return str(filename).lower().endswith(MEDICAL_IMAGE_EXTENSIONS)


class VolumeLoader:
    """Lit un fichier, choisit le décodeur d'après l'extension et renvoie un Volume ou un Mesh."""

    def __init__(
        self,
        nrrd_decoder: Optional[NrrdDecoder] = None,
        nifti_decoder: Optional[NiftiDecoder] = None,
        stl_decoder: Optional[StlDecoder] = None,
    ) -> None:
        self.logger = logging.getLogger(__name__)
        self.nrrd_decoder = nrrd_decoder or NrrdDecoder()
        self.nifti_decoder = nifti_decoder or NiftiDecoder()
        self.stl_decoder = stl_decoder or StlDecoder()

    # ------------------------------------------------------------------ #
    # Public API
    # ------------------------------------------------------------------ #
    def decode_volume(self, buffer: bytes, filename: str) -> Volume:
        """Décode un buffer NRRD/NIfTI; `filename` sert uniquement au choix du format."""
        file_format = get_file_format(filename)
        if file_format == "nrrd":
            return self.nrrd_decoder.decode(buffer)
        if file_format == "nifti":
            if str(filename).lower().endswith(".gz"):
                buffer = self._gunzip(buffer)
            return self.nifti_decoder.decode(buffer)
        raise FormatError(
            f"Unsupported file format: {file_format}. "
            f"Please use {', '.join(MEDICAL_IMAGE_EXTENSIONS)} files."
        )

    def load_volume(self, path: str) -> Volume:
        """Charge un fichier volume depuis le disque."""
        file_path = Path(path)
        buffer = self._read(file_path)
        try:
            volume = self.decode_volume(buffer, file_path.name)
        except DecodeError as exc:
            exc.filename = file_path.name
            self.logger.error("Erreur de chargement de %s: %s", file_path.name, exc.message)
            raise

        self.logger.info(
            "Volume chargé: %s sizes=%s type=%s",
            file_path.name,
            volume.sizes,
            volume.type_name,
        )
        return volume

    def load_mesh(self, path: str) -> Mesh:
        """Charge un fichier STL depuis le disque."""
        file_path = Path(path)
        if get_file_format(file_path.name) != "stl":
            raise FormatError(
                f"Unsupported mesh format. Please use {', '.join(MESH_EXTENSIONS)} files.",
                filename=file_path.name,
            )
        buffer = self._read(file_path)
        try:
            mesh = self.stl_decoder.decode(buffer)
        except DecodeError as exc:
            exc.filename = file_path.name
            self.logger.error("Erreur de chargement de %s: %s", file_path.name, exc.message)
            raise

        self.logger.info("Maillage chargé: %s (%d triangles)", file_path.name, mesh.triangle_count)
        return mesh

    # ------------------------------------------------------------------ #
    # Helpers
    # ------------------------------------------------------------------ #
    def _read(self, file_path: Path) -> bytes:
        if not file_path.exists():
            raise FileNotFoundError(f"Fichier introuvable: {file_path}")
        buffer = file_path.read_bytes()
        self.logger.info("Lecture de %s (%s)", file_path.name, format_bytes(len(buffer)))
        return buffer

    @staticmethod
    def _gunzip(buffer: bytes) -> bytes:
        try:
            return gzip.decompress(buffer)
        except (OSError, EOFError, zlib.error) as exc:
            raise DecompressionError(f"Failed to decompress .nii.gz data: {exc}") from exc
