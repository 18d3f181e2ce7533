import struct
from pathlib import Path

import numpy as np

import main


def _nrrd(path: Path, voxels: np.ndarray, sizes=(2, 2, 3)) -> str:
    header = f"NRRD0004\ntype: uint8\nsizes: {' '.join(map(str, sizes))}\nencoding: raw\n\n"
    path.write_bytes(header.encode("ascii") + voxels.astype(np.uint8).tobytes())
    return str(path)


def test_exports_slice_pngs(tmp_path: Path):
    image = _nrrd(tmp_path / "image.nrrd", np.arange(12))
    label = _nrrd(tmp_path / "label.nrrd", np.arange(12) % 3)
    out_dir = tmp_path / "out"

    assert main.main([image, label, "2", str(out_dir)]) == 0
    assert sorted(p.name for p in out_dir.iterdir()) == [
        "slice_0002_image.png",
        "slice_0002_label.png",
        "slice_0002_overlay.png",
    ]


def test_mismatched_pair_fails(tmp_path: Path):
    image = _nrrd(tmp_path / "image.nrrd", np.arange(12))
    label = _nrrd(tmp_path / "label.nrrd", np.arange(12), sizes=(3, 2, 2))
    assert main.main([image, label]) == 1


def test_mesh_summary(tmp_path: Path):
    path = tmp_path / "part.stl"
    payload = bytearray(b"\x00" * 80) + struct.pack("<I", 1)
    payload += struct.pack("<12f", 0, 0, 1, 0, 0, 0, 1, 0, 0, 0, 1, 0) + b"\x00\x00"
    path.write_bytes(bytes(payload))
    assert main.main([str(path)]) == 0


def test_usage_error():
    assert main.main([]) == 2
