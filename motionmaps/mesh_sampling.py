"""Uniform surface sampling of triangle meshes into point clouds."""

from __future__ import annotations

import argparse
import logging
import struct
import sys
from pathlib import Path
from typing import Sequence

import numpy as np

log = logging.getLogger(__name__)

DEFAULT_NUMBER_SAMPLES = 100000
DEFAULT_LEAF_SIZE = 0.01

_STL_HEADER = 80
_STL_RECORD = struct.Struct("<12fH")


def _read_binary_stl(raw: bytes) -> np.ndarray:
    (count,) = struct.unpack_from("<I", raw, _STL_HEADER)
    triangles = np.empty((count, 3, 3), dtype=float)
    offset = _STL_HEADER + 4
    for i, values in enumerate(_STL_RECORD.iter_unpack(raw[offset:offset + count * _STL_RECORD.size])):
        triangles[i] = np.asarray(values[3:12], dtype=float).reshape(3, 3)
    return triangles


def _read_ascii_stl(text: str, path: str | Path) -> np.ndarray:
    vertices: list[list[float]] = []
    for lineno, line in enumerate(text.splitlines(), 1):
        fields = line.split()
        if not fields or fields[0].lower() != "vertex":
            continue
        if len(fields) != 4:
            raise ValueError(f"{path}:{lineno}: a vertex needs three coordinates")
        try:
            vertices.append([float(v) for v in fields[1:]])
        except ValueError as exc:
            raise ValueError(f"{path}:{lineno}: bad vertex coordinate") from exc
    if len(vertices) % 3:
        raise ValueError(f"{path}: vertex count {len(vertices)} is not a multiple of three")
    return np.asarray(vertices, dtype=float).reshape(-1, 3, 3)


def read_stl(path: str | Path) -> np.ndarray:
    """Read a binary or ASCII STL file into an (N, 3, 3) array of triangles."""
    raw = Path(path).read_bytes()
    if len(raw) >= _STL_HEADER + 4:
        (count,) = struct.unpack_from("<I", raw, _STL_HEADER)
        if _STL_HEADER + 4 + count * _STL_RECORD.size == len(raw):
            return _read_binary_stl(raw)
    if raw.lstrip().lower().startswith(b"solid"):
        return _read_ascii_stl(raw.decode("utf-8", errors="replace"), path)
    raise ValueError(f"{path}: not a valid STL file")


def _areas(triangles: np.ndarray) -> np.ndarray:
    a, b, c = triangles[:, 0], triangles[:, 1], triangles[:, 2]
    return 0.5 * np.linalg.norm(np.cross(b - a, c - a), axis=1)


def triangle_area(a: Sequence[float], b: Sequence[float], c: Sequence[float]) -> float:
    """Return the area of the triangle with corners a, b and c."""
    tri = np.asarray([a, b, c], dtype=float)[np.newaxis]
    return float(_areas(tri)[0])


def random_point_in_triangle(
    a: Sequence[float],
    b: Sequence[float],
    c: Sequence[float],
    r1: float,
    r2: float,
) -> np.ndarray:
    """Map two numbers in [0, 1] to a point of the triangle, uniformly by area."""
    pa, pb, pc = (np.asarray(p, dtype=float) for p in (a, b, c))
    s = np.sqrt(r1)
    return s * (r2 * pc + (1.0 - r2) * pb) + (1.0 - s) * pa


def uniform_sampling(
    triangles: np.ndarray,
    n_samples: int,
    rng: np.random.Generator | None = None,
) -> np.ndarray:
    """Draw ``n_samples`` points spread uniformly over the surface of the triangles."""
    tris = np.asarray(triangles, dtype=float).reshape(-1, 3, 3)
    if n_samples < 0:
        raise ValueError(f"number of samples must not be negative, got {n_samples}")
    if n_samples == 0:
        return np.empty((0, 3), dtype=float)
    if len(tris) == 0:
        raise ValueError("cannot sample a mesh without triangles")
    rng = rng if rng is not None else np.random.default_rng()

    cumulative = np.cumsum(_areas(tris))
    total = cumulative[-1]
    r = rng.random(n_samples) * total
    r1 = rng.random(n_samples)
    r2 = rng.random(n_samples)

    chosen = np.minimum(np.searchsorted(cumulative, r, side="left"), len(tris) - 1)
    a, b, c = tris[chosen, 0], tris[chosen, 1], tris[chosen, 2]
    s = np.sqrt(r1)[:, np.newaxis]
    r2 = r2[:, np.newaxis]
    return s * (r2 * c + (1.0 - r2) * b) + (1.0 - s) * a


def voxel_filter(points: np.ndarray, leaf_size: float) -> np.ndarray:
    """Replace the points of every cubic leaf by their centroid.

    Leaves are aligned to multiples of ``leaf_size``; the result is ordered
    by leaf index with x varying fastest. Non-finite points are dropped.
    """
    if leaf_size <= 0:
        raise ValueError(f"leaf size must be positive, got {leaf_size}")
    pts = np.asarray(points, dtype=float).reshape(-1, 3)
    pts = pts[np.all(np.isfinite(pts), axis=1)]
    if len(pts) == 0:
        return np.empty((0, 3), dtype=float)

    inverse = 1.0 / leaf_size
    cells = np.floor(pts * inverse).astype(np.int64)
    lowest = np.floor(pts.min(axis=0) * inverse).astype(np.int64)
    highest = np.floor(pts.max(axis=0) * inverse).astype(np.int64)
    rel = cells - lowest
    span = highest - lowest + 1
    keys = rel[:, 0] + rel[:, 1] * span[0] + rel[:, 2] * span[0] * span[1]

    _, inverse_idx, counts = np.unique(keys, return_inverse=True, return_counts=True)
    sums = np.zeros((len(counts), 3), dtype=float)
    np.add.at(sums, inverse_idx.ravel(), pts)
    return sums / counts[:, np.newaxis]


def save_pcd_ascii(points: np.ndarray, path: str | Path) -> None:
    """Write points as an ASCII PCD file with fields x, y and z."""
    pts = np.asarray(points, dtype=float).reshape(-1, 3)
    n = len(pts)
    header = [
        "# .PCD v0.7 - Point Cloud Data file format",
        "VERSION 0.7",
        "FIELDS x y z",
        "SIZE 4 4 4",
        "TYPE F F F",
        "COUNT 1 1 1",
        f"WIDTH {n}",
        "HEIGHT 1",
        "VIEWPOINT 0 0 0 1 0 0 0",
        f"POINTS {n}",
        "DATA ascii",
    ]
    rows = (" ".join(f"{v:.8g}" for v in p) for p in pts)
    with open(path, "w", encoding="utf-8") as stream:
        stream.write("\n".join(header) + "\n")
        for row in rows:
            stream.write(row + "\n")


def read_pcd_ascii(path: str | Path) -> np.ndarray:
    """Read the x, y and z fields of an ASCII PCD file into an (N, 3) array."""
    fields: list[str] = []
    expected: int | None = None
    in_data = False
    points: list[list[float]] = []
    with open(path, encoding="utf-8") as stream:
        for lineno, line in enumerate(stream, 1):
            text = line.strip()
            if not text or text.startswith("#"):
                continue
            parts = text.split()
            if not in_data:
                key = parts[0].upper()
                if key == "FIELDS":
                    fields = [f.lower() for f in parts[1:]]
                elif key == "POINTS":
                    expected = int(parts[1])
                elif key == "DATA":
                    if len(parts) < 2 or parts[1].lower() != "ascii":
                        raise ValueError(f"{path}:{lineno}: only ASCII point data is supported")
                    if not {"x", "y", "z"} <= set(fields):
                        raise ValueError(f"{path}: fields x, y and z are required")
                    columns = [fields.index(name) for name in ("x", "y", "z")]
                    in_data = True
                continue
            if len(parts) < len(fields):
                raise ValueError(f"{path}:{lineno}: expected {len(fields)} values")
            try:
                points.append([float(parts[i]) for i in columns])
            except ValueError as exc:
                raise ValueError(f"{path}:{lineno}: bad value in {text!r}") from exc
    if not in_data:
        raise ValueError(f"{path}: no DATA section")
    if expected is not None and expected != len(points):
        raise ValueError(f"{path}: header announces {expected} points, found {len(points)}")
    return np.asarray(points, dtype=float).reshape(-1, 3)


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mesh-sampling",
        description="Convert a CAD model to a point cloud using uniform sampling.",
    )
    parser.add_argument("file", nargs="?", default="", help="STL file to sample")
    parser.add_argument("--n-samples", type=int, default=DEFAULT_NUMBER_SAMPLES)
    parser.add_argument("--leaf-size", type=float, default=DEFAULT_LEAF_SIZE)
    parser.add_argument("--save-pcd", action="store_true")
    parser.add_argument("--pcd-file", default="tmp.pcd")
    parser.add_argument("--seed", type=int, default=None)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Sample the mesh, filter the cloud and write it; return the exit status."""
    logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
    args = _parser().parse_args(argv)
    log.info(
        "n_samples: %d, leaf_size: %.3f, save_pcd: %d",
        args.n_samples,
        args.leaf_size,
        args.save_pcd,
    )

    if not args.file.endswith("stl"):
        log.warning("Fail to open the file %s", args.file)
        return 0
    try:
        triangles = read_stl(args.file)
        samples = uniform_sampling(triangles, args.n_samples, np.random.default_rng(args.seed))
        cloud = voxel_filter(samples, args.leaf_size)
    except (OSError, ValueError) as exc:
        log.error("%s", exc)
        return 1

    if args.save_pcd:
        save_pcd_ascii(cloud, args.pcd_file)
        log.info("Cloud saved!")
    else:
        for p in cloud:
            print(" ".join(f"{v:.8g}" for v in p))
    return 0


if __name__ == "__main__":
    sys.exit(main())