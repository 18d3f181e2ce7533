from pathlib import Path

import numpy as np
import pytest
from PIL import Image

from config.constants import CATEGORY_COLORS
from models.value_type import ValueType
from models.volume import Volume
from services.exceptions import DimensionMismatchError
from services.raster_export import RasterExport
from services.viewer_session import ViewerSession


def _volume(values, sizes, value_type=ValueType.UINT8):
    return Volume(data=np.asarray(values, dtype=value_type.dtype), sizes=sizes, value_type=value_type)


def _pair(sizes=(2, 2, 5)):
    count = int(np.prod(sizes))
    image = _volume(np.arange(count), sizes, ValueType.INT16)
    labels = np.zeros(count, dtype=np.uint8)
    labels[::3] = 4
    labels[1::7] = 9
    return image, _volume(labels, sizes)


def test_load_pair_selects_middle_slice():
    session = ViewerSession()
    session.load_pair(*_pair())

    assert session.has_both_files()
    assert session.view_state.current_slice == 2
    assert session.slice_info() == "3/5"
    assert session.categories.values == (0, 4, 9)


def test_files_can_arrive_in_any_order():
    image, label = _pair()
    session = ViewerSession()
    session.set_label(label)
    assert not session.has_both_files()
    session.set_image(image)

    raster = session.render()
    assert raster.slice_index == 2


def test_render_uses_view_state_and_clamps():
    session = ViewerSession()
    session.load_pair(*_pair())

    assert session.render(slice_index=99).slice_index == 4
    raster = session.render(slice_index=0, opacity=1.0)
    assert raster.slice_index == 0
    # voxel 0 carries label 4 (rank 1 -> first palette colour)
    assert raster.label_layer[0, 0].tolist() == [*CATEGORY_COLORS[0], 255]


def test_default_opacity_is_half():
    session = ViewerSession()
    session.load_pair(*_pair())
    raster = session.render(slice_index=0)
    assert raster.label_layer[0, 0, 3] == 127


def test_mismatched_pair_is_rejected_before_rendering():
    image, _ = _pair((2, 2, 5))
    _, label = _pair((2, 5, 2))

    session = ViewerSession()
    with pytest.raises(DimensionMismatchError):
        session.load_pair(image, label)
    assert session.image is None

    session.set_image(image)
    session.set_label(label)
    with pytest.raises(DimensionMismatchError):
        session.render()


def test_render_requires_both_volumes():
    session = ViewerSession()
    session.set_image(_pair()[0])
    with pytest.raises(RuntimeError):
        session.render()


def test_clear_resets_session():
    session = ViewerSession()
    session.load_pair(*_pair())
    session.clear()

    assert not session.has_both_files()
    assert len(session.categories) == 0
    assert session.view_state.current_slice == 0


def test_export_png(tmp_path: Path):
    session = ViewerSession()
    session.load_pair(*_pair())
    raster = session.render(slice_index=1, opacity=1.0)

    paths = RasterExport().save_png(raster, str(tmp_path / "out"))

    assert set(paths) == {"image", "label", "overlay"}
    for path in paths.values():
        assert Path(path).is_file()
    with Image.open(paths["overlay"]) as overlay:
        assert overlay.mode == "RGBA"
        assert overlay.size == (raster.width, raster.height)
    with Image.open(paths["image"]) as image:
        assert np.array_equal(np.asarray(image), raster.image_layer)
