import pytest

from motionmaps.voxel_map import (
    VoxelMap,
    load_map,
    map_from_dict,
    save_map,
    slice_map,
)


def _layered_map():
    # 2 x 2 x 3 map, origin z 0, resolution 1; layer k filled with value k * 10
    data = []
    for layer in range(3):
        data.extend([layer * 10] * 4)
    return VoxelMap(origin=(1.0, 2.0, 0.0), dim=(2, 2, 3), resolution=1.0, data=data)


def test_index_follows_x_fastest_layout():
    vm = _layered_map()
    assert vm.index(0, 0, 0) == 0
    assert vm.index(1, 0, 0) == 1
    assert vm.index(0, 1, 0) == 2
    assert vm.index(1, 1, 2) == len(vm.data) - 1


def test_data_length_must_match_dimensions():
    with pytest.raises(ValueError):
        VoxelMap(origin=(0, 0, 0), dim=(2, 2, 2), resolution=1.0, data=[0] * 7)


def test_slice_picks_single_layer():
    vm = _layered_map()
    sliced = slice_map(vm, 1.5)
    assert sliced.dim == (2, 2, 1)
    assert sliced.origin == (1.0, 2.0, 1.5)
    assert sliced.data == [10] * 4


def test_slice_takes_maximum_over_thickness():
    vm = _layered_map()
    vm.data[vm.index(0, 1, 0)] = 50
    sliced = slice_map(vm, 1.5, 1.0)
    # layers 0..2 are included, so the column with 50 keeps it
    assert sliced.data[sliced.index(0, 1, 0)] == 50
    assert sliced.data[sliced.index(1, 1, 0)] == 20


def test_slice_clamps_height_above_map():
    vm = _layered_map()
    assert slice_map(vm, 10.0).data == [20] * 4


def test_slice_clamps_height_below_map():
    vm = _layered_map()
    assert slice_map(vm, -5.0).data == [0] * 4


def test_slice_keeps_resolution_and_frame():
    vm = _layered_map()
    vm.frame_id = "map"
    sliced = slice_map(vm, 0.5)
    assert sliced.resolution == vm.resolution
    assert sliced.frame_id == "map"


def test_dict_round_trip():
    vm = _layered_map()
    assert map_from_dict(vm.to_dict()) == vm


def test_map_from_dict_missing_field():
    bad = _layered_map().to_dict()
    del bad["dim"]
    with pytest.raises(ValueError):
        map_from_dict(bad)


def test_file_round_trip(tmp_path):
    vm = _layered_map()
    vm.frame_id = "map"
    target = tmp_path / "map.json"
    save_map(vm, target)
    assert load_map(target) == vm