"""Building voxel maps from point cloud files."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Iterable, Sequence

import numpy as np

from motionmaps.voxel_grid import VoxelGrid
from motionmaps.voxel_map import VoxelMap, save_map

log = logging.getLogger(__name__)

_PCD_HEADER_KEYS = frozenset(
    {
        "VERSION",
        "FIELDS",
        "SIZE",
        "TYPE",
        "COUNT",
        "WIDTH",
        "HEIGHT",
        "VIEWPOINT",
        "POINTS",
        "DATA",
    }
)


def read_cloud(path: str | Path) -> np.ndarray:
    """Read points from a text file of ``x y z`` rows or an ASCII PCD file.

    Extra columns are ignored; ``#`` starts a comment. Returns an (N, 3) array.
    """
    points: list[list[float]] = []
    with open(path, encoding="utf-8") as stream:
        for lineno, line in enumerate(stream, 1):
            text = line.split("#", 1)[0].replace(",", " ").strip()
            if not text:
                continue
            fields = text.split()
            key = fields[0].upper()
            if key in _PCD_HEADER_KEYS:
                if key == "DATA" and (len(fields) < 2 or fields[1].lower() != "ascii"):
                    raise ValueError(f"{path}:{lineno}: only ASCII point data is supported")
                continue
            if len(fields) < 3:
                raise ValueError(f"{path}:{lineno}: expected three coordinates")
            try:
                points.append([float(v) for v in fields[:3]])
            except ValueError as exc:
                raise ValueError(f"{path}:{lineno}: bad coordinate in {text!r}") from exc
    return np.asarray(points, dtype=float).reshape(-1, 3)


def cloud_to_map(
    points: Iterable[Sequence[float]],
    origin: Sequence[float] = (-5.0, -10.0, 0.0),
    dim: Sequence[float] = (50.0, 20.0, 4.0),
    res: float = 0.2,
) -> VoxelMap:
    """Return the map of a grid over ``origin`` .. ``origin + dim`` holding the points."""
    grid = VoxelGrid(origin, dim, res)
    grid.add_cloud(points)
    return grid.get_map()


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cloud-to-map", description="Accumulate point clouds into a voxel map."
    )
    parser.add_argument("clouds", nargs="*", help="point cloud files, in order")
    parser.add_argument("--resolution", type=float, default=0.2)
    parser.add_argument("--origin-x", type=float, default=-5.0)
    parser.add_argument("--origin-y", type=float, default=-10.0)
    parser.add_argument("--origin-z", type=float, default=0.0)
    parser.add_argument("--range-x", type=float, default=50.0)
    parser.add_argument("--range-y", type=float, default=20.0)
    parser.add_argument("--range-z", type=float, default=4.0)
    parser.add_argument("--frame-id", default="map")
    parser.add_argument(
        "--output", help="where to write the map as JSON (default: standard output)"
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Add every cloud to one grid and write the resulting map; return the exit status."""
    logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
    args = _parser().parse_args(argv)

    grid = VoxelGrid(
        (args.origin_x, args.origin_y, args.origin_z),
        (args.range_x, args.range_y, args.range_z),
        args.resolution,
    )
    for cloud_path in args.clouds:
        try:
            points = read_cloud(cloud_path)
        except (OSError, ValueError) as exc:
            log.error("%s", exc)
            return 1
        grid.add_cloud(points)
        log.info("Publish the voxel map! [%d]", len(points))

    voxel_map = grid.get_map()
    voxel_map.frame_id = args.frame_id
    if args.output:
        save_map(voxel_map, args.output)
    else:
        print(json.dumps(voxel_map.to_dict()))
    return 0


if __name__ == "__main__":
    sys.exit(main())