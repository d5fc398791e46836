"""Flat occupancy voxel maps and slicing of 3D maps into 2D layers."""

from __future__ import annotations

import json
import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping, Sequence

import numpy as np


@dataclass
class VoxelMap:
    """A voxel map stored as a flat list, x varying fastest, then y, then z."""

    origin: tuple[float, float, float]
    dim: tuple[int, int, int]
    resolution: float
    data: list[int] = field(default_factory=list)
    frame_id: str = ""

    def __post_init__(self) -> None:
        self.origin = tuple(float(v) for v in self.origin)
        self.dim = tuple(int(v) for v in self.dim)
        self.resolution = float(self.resolution)
        self.data = [int(v) for v in self.data]
        if len(self.origin) != 3 or len(self.dim) != 3:
            raise ValueError("origin and dim must have three components")
        if any(d < 0 for d in self.dim):
            raise ValueError(f"negative map dimension: {self.dim}")
        expected = math.prod(self.dim)
        if len(self.data) != expected:
            raise ValueError(
                f"map data holds {len(self.data)} cells, dimensions need {expected}"
            )

    def index(self, nx: int, ny: int, nz: int) -> int:
        """Return the flat index of cell (nx, ny, nz)."""
        dx, dy, _ = self.dim
        return nx + dx * ny + dx * dy * nz

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-ready dictionary of the map."""
        return {
            "origin": list(self.origin),
            "dim": list(self.dim),
            "resolution": self.resolution,
            "data": list(self.data),
            "frame_id": self.frame_id,
        }

    def _as_array(self) -> np.ndarray:
        dx, dy, dz = self.dim
        return np.asarray(self.data, dtype=np.int16).reshape((dz, dy, dx))


def slice_map(
    voxel_map: VoxelMap, height: float, half_thickness: float = 0.0
) -> VoxelMap:
    """Collapse the layers around ``height`` into a single-layer map.

    Each column of the result holds the maximum value found in the layers
    within ``half_thickness`` of ``height``; the result's origin z is ``height``.
    """
    res = voxel_map.resolution
    ox, oy, oz = voxel_map.origin
    dx, dy, dz = voxel_map.dim

    hhi = int(half_thickness / res)
    level = (height - oz) / res
    h_min = int(level - hhi)
    h_min = max(h_min, 0)
    h_min = min(h_min, dz - 1)
    h_max = int(level + hhi + 1)
    h_max = max(h_max, 1)
    h_max = min(h_max, dz)

    layers = voxel_map._as_array()[h_min:h_max] if dz > 0 else np.empty((0, dy, dx))
    sliced = np.full((dy, dx), -1, dtype=np.int16)
    if layers.shape[0] > 0:
        sliced = np.maximum(sliced, layers.max(axis=0))

    return VoxelMap(
        origin=(ox, oy, height),
        dim=(dx, dy, 1),
        resolution=res,
        data=sliced.ravel().tolist(),
        frame_id=voxel_map.frame_id,
    )


def map_from_dict(data: Mapping[str, Any]) -> VoxelMap:
    """Build a map from a dictionary as produced by :meth:`VoxelMap.to_dict`."""
    try:
        return VoxelMap(
            origin=tuple(data["origin"]),
            dim=tuple(data["dim"]),
            resolution=data["resolution"],
            data=list(data["data"]),
            frame_id=data.get("frame_id", ""),
        )
    except KeyError as exc:
        raise ValueError(f"map description lacks field {exc.args[0]!r}") from exc


def save_map(voxel_map: VoxelMap, path: str | Path) -> None:
    """Write a map to a JSON file."""
    Path(path).write_text(json.dumps(voxel_map.to_dict()), encoding="utf-8")


def load_map(path: str | Path) -> VoxelMap:
    """Read a map from a JSON file written by :func:`save_map`."""
    return map_from_dict(json.loads(Path(path).read_text(encoding="utf-8")))


def _cells(values: Sequence[int]) -> list[int]:
    return [int(v) for v in values]