import pytest
from PIL import Image

from motionmaps.image_loader import (
    MapLoadError,
    MapMode,
    load_map_from_file,
    map_from_image,
)


def _gray(rows):
    height = len(rows)
    width = len(rows[0])
    image = Image.new("L", (width, height))
    image.putdata([v for row in rows for v in row])
    return image


def _single(mode, pixel):
    image = Image.new(mode, (1, 1))
    image.putpixel((0, 0), pixel)
    return image


def test_white_is_free_and_black_is_occupied():
    result = map_from_image(_gray([[255, 0]]))
    assert result.data == [0, 100]


def test_rows_are_flipped_so_bottom_row_comes_first():
    result = map_from_image(_gray([[0], [255]]))
    assert result.data == [0, 100]


def test_dimensions_origin_and_resolution():
    image = _gray([[255, 255, 255], [255, 255, 255]])
    result = map_from_image(image, resolution=0.5, origin=(1.0, 2.0, 3.0))
    assert result.dim == (3, 2, 1)
    assert result.origin == (1.0, 2.0, 3.0)
    assert result.resolution == 0.5
    assert len(result.data) == 6


def test_mid_gray_is_unknown_in_trinary_mode():
    result = map_from_image(_gray([[128]]))
    assert result.data == [-1]


def test_negate_inverts_occupancy():
    result = map_from_image(_gray([[255, 0]]), negate=True)
    assert result.data == [100, 0]


def test_raw_mode_keeps_pixel_value():
    assert map_from_image(_gray([[100]]), mode=MapMode.RAW).data == [100]
    assert map_from_image(_gray([[255]]), negate=True, mode=MapMode.RAW).data == [0]


def test_scale_mode_gives_intermediate_values_for_opaque_gray():
    image = _single("RGBA", (128, 128, 128, 255))
    value = map_from_image(image, mode=MapMode.SCALE).data[0]
    assert 0 <= value <= 99


def test_scale_mode_transparent_pixel_is_unknown():
    image = _single("RGBA", (128, 128, 128, 0))
    assert map_from_image(image, mode=MapMode.SCALE).data == [-1]


def test_scale_mode_rgb_uses_last_channel_as_alpha():
    zero_blue = _single("RGB", (200, 200, 0))
    assert map_from_image(zero_blue, mode=MapMode.SCALE).data == [-1]
    blue = _single("RGB", (100, 100, 200))
    value = map_from_image(blue, mode=MapMode.SCALE).data[0]
    assert 0 <= value <= 99


def test_scale_mode_darker_pixels_are_more_occupied():
    dark = map_from_image(_gray([[100]]), mode=MapMode.SCALE).data[0]
    light = map_from_image(_gray([[160]]), mode=MapMode.SCALE).data[0]
    assert dark >= light
    assert 0 <= light <= 99


def test_palette_image_matches_grayscale():
    gray = _gray([[0, 255], [255, 0]])
    palette = gray.convert("P")
    assert map_from_image(palette).data == map_from_image(gray).data


def test_load_from_file_matches_in_memory(tmp_path):
    image = _gray([[0, 128, 255], [255, 0, 128]])
    path = tmp_path / "map.png"
    image.save(path)
    loaded = load_map_from_file(path, resolution=0.25, origin=(1.0, 0.0, 0.0))
    expected = map_from_image(image, resolution=0.25, origin=(1.0, 0.0, 0.0))
    assert loaded == expected


def test_missing_file_raises(tmp_path):
    path = tmp_path / "absent.png"
    with pytest.raises(MapLoadError, match="absent.png"):
        load_map_from_file(path)


def test_non_image_file_raises(tmp_path):
    path = tmp_path / "notes.png"
    path.write_text("not an image", encoding="utf-8")
    with pytest.raises(MapLoadError, match="failed to open image file"):
        load_map_from_file(path)