import numpy as np
import pytest

from config.constants import CATEGORY_COLORS
from models.category_table import CategoryTable
from models.value_type import ValueType
from models.volume import Volume
from services.category_detector import detect_categories
from services.exceptions import DimensionMismatchError
from services.slice_compositor import SliceCompositor, ensure_same_dimensions


def _volume(values, sizes, value_type):
    return Volume(data=np.asarray(values, dtype=value_type.dtype).reshape(-1), sizes=sizes, value_type=value_type)


def _pair(width=3, height=2, depth=2):
    count = width * height * depth
    image = _volume(np.arange(count) * 10, (width, height, depth), ValueType.INT16)
    label = _volume(np.zeros(count), (width, height, depth), ValueType.UINT8)
    return image, label


def test_raster_shape_and_row_major_layout():
    image, label = _pair(width=3, height=2, depth=2)
    raster = SliceCompositor().composite_slice(image, label, CategoryTable((0,)), 1, 0.5)

    assert raster.image_layer.shape == (2, 3, 4)
    assert raster.label_layer.shape == (2, 3, 4)
    assert raster.width == 3 and raster.height == 2
    assert len(raster.image_bytes()) == 3 * 2 * 4
    # slice 1 holds values 60..110, normalized over the slice only
    gray = raster.image_layer[..., 0]
    assert gray.tolist() == [[0, 51, 102], [153, 204, 255]]
    assert (raster.image_layer[..., 3] == 255).all()
    assert (raster.image_layer[..., 0] == raster.image_layer[..., 2]).all()


def test_uniform_slice_is_black_not_nan():
    image = _volume(np.full(8, 37.5), (2, 2, 2), ValueType.FLOAT32)
    label = _volume(np.zeros(8), (2, 2, 2), ValueType.UINT8)
    raster = SliceCompositor().composite_slice(image, label, CategoryTable((0,)), 0, 1.0)

    assert raster.image_layer.reshape(-1, 4).tolist() == [[0, 0, 0, 255]] * 4


def test_normalization_floors():
    image = _volume([0, 1, 2, 3], (2, 2, 1), ValueType.UINT8)
    label = _volume([0, 0, 0, 0], (2, 2, 1), ValueType.UINT8)
    raster = SliceCompositor().composite_slice(image, label, CategoryTable((0,)), 0, 1.0)
    # 1/3*255 = 85.0, 2/3*255 = 170.0
    assert raster.image_layer[..., 0].reshape(-1).tolist() == [0, 85, 170, 255]


def test_unsigned_values_do_not_overflow():
    image = _volume([0, 4_000_000_000, 2_000_000_000, 0], (2, 2, 1), ValueType.UINT32)
    label = _volume([0, 0, 0, 0], (2, 2, 1), ValueType.UINT8)
    raster = SliceCompositor().composite_slice(image, label, CategoryTable((0,)), 0, 1.0)
    assert raster.image_layer[..., 0].reshape(-1).tolist() == [0, 255, 127, 0]


def test_nan_voxels_are_black_and_ignored_for_range():
    image = _volume([0, np.nan, 10, 5], (2, 2, 1), ValueType.FLOAT32)
    label = _volume([0, 0, 0, 0], (2, 2, 1), ValueType.UINT8)
    raster = SliceCompositor().composite_slice(image, label, CategoryTable((0,)), 0, 1.0)

    assert raster.image_layer[..., 0].reshape(-1).tolist() == [0, 0, 255, 127]
    assert (raster.image_layer[..., 3] == 255).all()


def test_leading_nan_blanks_the_slice():
    image = _volume([np.nan, 1, 2, 3], (2, 2, 1), ValueType.FLOAT32)
    label = _volume([0, 0, 0, 0], (2, 2, 1), ValueType.UINT8)
    raster = SliceCompositor().composite_slice(image, label, CategoryTable((0,)), 0, 1.0)

    assert raster.image_layer.reshape(-1, 4).tolist() == [[0, 0, 0, 255]] * 4


def test_label_colors_follow_category_rank():
    image = _volume(np.zeros(4), (2, 2, 1), ValueType.UINT8)
    label = _volume([0, 3, 7, 3], (2, 2, 1), ValueType.UINT8)
    categories = detect_categories(label)
    raster = SliceCompositor().composite_slice(image, label, categories, 0, 0.5)

    pixels = raster.label_layer.reshape(-1, 4).tolist()
    assert pixels[0] == [0, 0, 0, 0]
    assert pixels[1] == [*CATEGORY_COLORS[0], 127]
    assert pixels[2] == [*CATEGORY_COLORS[1], 127]
    assert pixels[3] == pixels[1]


def test_background_stays_transparent_at_full_opacity():
    image, label = _pair()
    raster = SliceCompositor().composite_slice(image, label, CategoryTable((0,)), 0, 1.0)
    assert not raster.label_layer.any()


def test_negative_labels_are_transparent():
    image = _volume(np.zeros(4), (2, 2, 1), ValueType.INT16)
    label = _volume([-1, 0, 2, -5], (2, 2, 1), ValueType.INT16)
    categories = detect_categories(label)
    raster = SliceCompositor().composite_slice(image, label, categories, 0, 1.0)

    alpha = raster.label_layer[..., 3].reshape(-1).tolist()
    assert alpha == [0, 0, 255, 0]
    # rank of 2 in (-5, -1, 0, 2) is 3 -> palette slot 2
    assert raster.label_layer.reshape(-1, 4)[2, :3].tolist() == list(CATEGORY_COLORS[2])


def test_palette_wraps_after_eight_categories():
    values = list(range(10))
    image = _volume(np.zeros(10), (10, 1, 1), ValueType.UINT8)
    label = _volume(values, (10, 1, 1), ValueType.UINT8)
    raster = SliceCompositor().composite_slice(image, label, detect_categories(label), 0, 1.0)

    rgb = raster.label_layer.reshape(-1, 4)[:, :3].tolist()
    assert rgb[9] == list(CATEGORY_COLORS[0])
    assert rgb[1] == list(CATEGORY_COLORS[0])
    assert rgb[8] == list(CATEGORY_COLORS[7])


def test_value_missing_from_table_uses_first_color():
    image = _volume(np.zeros(2), (2, 1, 1), ValueType.UINT8)
    label = _volume([5, 9], (2, 1, 1), ValueType.UINT8)
    raster = SliceCompositor().composite_slice(image, label, CategoryTable((0, 5)), 0, 1.0)
    assert raster.label_layer[0, 1, :3].tolist() == list(CATEGORY_COLORS[0])


def test_float_labels_match_integer_table():
    image = _volume(np.zeros(3), (3, 1, 1), ValueType.UINT8)
    label = _volume([0.0, 4.0, 8.0], (3, 1, 1), ValueType.FLOAT32)
    raster = SliceCompositor().composite_slice(image, label, detect_categories(label), 0, 1.0)
    assert raster.label_layer[0, 2, :3].tolist() == list(CATEGORY_COLORS[1])


def test_opacity_is_floored_and_clamped():
    image = _volume(np.zeros(1), (1, 1, 1), ValueType.UINT8)
    label = _volume([1], (1, 1, 1), ValueType.UINT8)
    compositor = SliceCompositor()
    categories = CategoryTable((1,))

    assert compositor.composite_slice(image, label, categories, 0, 0.3).label_layer[0, 0, 3] == 76
    assert compositor.composite_slice(image, label, categories, 0, 1.7).label_layer[0, 0, 3] == 255
    assert compositor.composite_slice(image, label, categories, 0, -1).label_layer[0, 0, 3] == 0


def test_custom_palette():
    image = _volume(np.zeros(1), (1, 1, 1), ValueType.UINT8)
    label = _volume([1], (1, 1, 1), ValueType.UINT8)
    compositor = SliceCompositor(palette=[(10, 20, 30)])
    raster = compositor.composite_slice(image, label, CategoryTable((0, 1)), 0, 1.0)
    assert raster.label_layer[0, 0].tolist() == [10, 20, 30, 255]


def test_invalid_palette():
    with pytest.raises(ValueError):
        SliceCompositor(palette=[])


@pytest.mark.parametrize("slice_index", [-1, 2])
def test_slice_index_out_of_range(slice_index):
    image, label = _pair(depth=2)
    with pytest.raises(IndexError):
        SliceCompositor().composite_slice(image, label, CategoryTable((0,)), slice_index, 0.5)


def test_dimension_check():
    image, _ = _pair(width=3, height=2, depth=2)
    other = _volume(np.zeros(12), (2, 3, 2), ValueType.UINT8)
    with pytest.raises(DimensionMismatchError) as info:
        ensure_same_dimensions(image, other)
    assert info.value.image_sizes == (3, 2, 2)
    assert info.value.label_sizes == (2, 3, 2)
