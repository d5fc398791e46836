import json

import numpy as np
import pytest

from motionmaps.cloud_to_map import cloud_to_map, main, read_cloud
from motionmaps.voxel_map import load_map


def test_read_plain_text_cloud(tmp_path):
    path = tmp_path / "cloud.txt"
    path.write_text("# points\n0.1 0.2 0.3\n\n1.0,2.0,3.0 9\n", encoding="utf-8")
    points = read_cloud(path)
    assert points.shape == (2, 3)
    assert np.allclose(points, [[0.1, 0.2, 0.3], [1.0, 2.0, 3.0]])


def test_read_ascii_pcd(tmp_path):
    path = tmp_path / "cloud.pcd"
    path.write_text(
        "VERSION .7\nFIELDS x y z\nSIZE 4 4 4\nTYPE F F F\nCOUNT 1 1 1\n"
        "WIDTH 2\nHEIGHT 1\nVIEWPOINT 0 0 0 1 0 0 0\nPOINTS 2\nDATA ascii\n"
        "0.5 0.5 0.5\n-1 -2 -3\n",
        encoding="utf-8",
    )
    points = read_cloud(path)
    assert np.allclose(points, [[0.5, 0.5, 0.5], [-1.0, -2.0, -3.0]])


def test_binary_pcd_rejected(tmp_path):
    path = tmp_path / "cloud.pcd"
    path.write_text("FIELDS x y z\nDATA binary\n", encoding="utf-8")
    with pytest.raises(ValueError, match="ASCII"):
        read_cloud(path)


def test_short_row_rejected(tmp_path):
    path = tmp_path / "cloud.txt"
    path.write_text("1.0 2.0\n", encoding="utf-8")
    with pytest.raises(ValueError):
        read_cloud(path)


def test_empty_file_gives_empty_cloud(tmp_path):
    path = tmp_path / "cloud.txt"
    path.write_text("", encoding="utf-8")
    assert read_cloud(path).shape == (0, 3)


def test_cloud_to_map_marks_cell_and_ignores_outside():
    result = cloud_to_map(
        [(0.1, 0.1, 0.1), (5.0, 5.0, 5.0)], origin=(0, 0, 0), dim=(1, 1, 1), res=0.5
    )
    assert result.dim == (2, 2, 2)
    assert result.data[result.index(0, 0, 0)] == 100
    assert sum(1 for v in result.data if v == 100) == 1
    assert set(result.data) == {0, 100}


def test_cloud_to_map_uses_x_fastest_order():
    result = cloud_to_map([(0.75, 0.25, 0.25)], origin=(0, 0, 0), dim=(1, 1, 1), res=0.5)
    assert result.data[result.index(1, 0, 0)] == 100
    assert result.data[result.index(0, 1, 0)] == 0


def test_main_accumulates_clouds(tmp_path):
    first = tmp_path / "a.txt"
    second = tmp_path / "b.txt"
    first.write_text("0.1 0.1 0.1\n", encoding="utf-8")
    second.write_text("0.6 0.6 0.6\n", encoding="utf-8")
    out = tmp_path / "map.json"
    args = [
        str(first),
        str(second),
        "--resolution", "0.5",
        "--origin-x", "0", "--origin-y", "0", "--origin-z", "0",
        "--range-x", "1", "--range-y", "1", "--range-z", "1",
        "--output", str(out),
    ]
    assert main(args) == 0
    result = load_map(out)
    assert result.frame_id == "map"
    assert result.data[result.index(0, 0, 0)] == 100
    assert result.data[result.index(1, 1, 1)] == 100
    assert result.data.count(100) == 2


def test_main_prints_json(tmp_path, capsys):
    path = tmp_path / "a.txt"
    path.write_text("0.0 0.0 0.0\n", encoding="utf-8")
    assert main([str(path), "--frame-id", "world"]) == 0
    printed = json.loads(capsys.readouterr().out)
    assert printed["frame_id"] == "world"
    assert 100 in printed["data"]


def test_main_missing_file_fails(tmp_path):
    out = tmp_path / "map.json"
    assert main([str(tmp_path / "absent.txt"), "--output", str(out)]) == 1
    assert not out.exists()