"""Command that turns an image file into a voxel map file."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Sequence

from motionmaps.image_loader import MapLoadError, MapMode, load_map_from_file
from motionmaps.voxel_map import save_map

log = logging.getLogger(__name__)


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="image-to-map", description="Create a voxel map from an image."
    )
    parser.add_argument("file", nargs="?", default="", help="image file to load")
    parser.add_argument("--resolution", type=float, default=0.1)
    parser.add_argument("--frame-id", default="map")
    parser.add_argument("--negate", type=int, default=0)
    parser.add_argument("--occ-th", type=float, default=0.65)
    parser.add_argument("--free-th", type=float, default=0.2)
    parser.add_argument("--origin-x", type=float, default=0.0)
    parser.add_argument("--origin-y", type=float, default=0.0)
    parser.add_argument("--origin-z", type=float, default=0.0)
    parser.add_argument(
        "--mode",
        choices=[m.value for m in MapMode],
        default=MapMode.TRINARY.value,
    )
    parser.add_argument(
        "--output", help="where to write the map as JSON (default: standard output)"
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Load the image, convert it and write the map; return the exit status."""
    logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
    args = _parser().parse_args(argv)

    log.info('Loading map from image "%s"', args.file)
    try:
        voxel_map = load_map_from_file(
            args.file,
            resolution=args.resolution,
            negate=bool(args.negate),
            occ_th=args.occ_th,
            free_th=args.free_th,
            origin=(args.origin_x, args.origin_y, args.origin_z),
            mode=MapMode(args.mode),
        )
    except MapLoadError as exc:
        log.error("%s", exc)
        return 1

    voxel_map.frame_id = args.frame_id
    log.info(
        "Read a %.1f X %.1f map @ %.3f m/cell",
        voxel_map.dim[0],
        voxel_map.dim[1],
        voxel_map.resolution,
    )

    if args.output:
        save_map(voxel_map, args.output)
    else:
        print(json.dumps(voxel_map.to_dict()))
    return 0


if __name__ == "__main__":
    sys.exit(main())