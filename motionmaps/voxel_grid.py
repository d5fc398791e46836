"""A resizable 3D occupancy grid built from point clouds."""

from __future__ import annotations

from typing import Iterable, Sequence

import numpy as np

from motionmaps.voxel_map import VoxelMap

VAL_OCC = 100
VAL_FREE = 0
VAL_UNKNOWN = -1


def _trunc3(values: Iterable[float]) -> np.ndarray:
    return np.array([int(v) for v in values], dtype=np.int64)


class VoxelGrid:
    """Occupancy grid with a raw map and an inflated map of the same shape."""

    def __init__(
        self, origin: Sequence[float], dim: Sequence[float], res: float
    ) -> None:
        self.res = float(res)
        self.origin = np.zeros(3, dtype=np.int64)
        self.origin_d = np.zeros(3, dtype=float)
        self.dim = np.zeros(3, dtype=np.int64)
        self.map = np.zeros((0, 0, 0), dtype=np.int16)
        self.inflated_map = np.zeros((0, 0, 0), dtype=np.int16)
        self.allocate(dim, origin)

    def clear(self) -> None:
        """Mark every cell of both maps free."""
        self.map.fill(VAL_FREE)
        self.inflated_map.fill(VAL_FREE)

    def clear_column(self, nx: int, ny: int) -> None:
        """Mark every cell of column (nx, ny) free."""
        if not (0 <= nx < self.dim[0] and 0 <= ny < self.dim[1]):
            raise IndexError(f"column ({nx}, {ny}) lies outside the grid")
        self.map[nx, ny, :] = VAL_FREE

    def fill_column(self, nx: int, ny: int) -> None:
        """Mark every cell of column (nx, ny) occupied; ignored outside the grid."""
        if 0 <= nx < self.dim[0] and 0 <= ny < self.dim[1]:
            self.map[nx, ny, :] = VAL_OCC

    def fill(self, nx: int, ny: int, nz: int) -> None:
        """Mark cell (nx, ny, nz) occupied; ignored outside the grid."""
        if not self.is_outside((nx, ny, nz)):
            self.map[nx, ny, nz] = VAL_OCC

    def get_cloud(self) -> np.ndarray:
        """Return the centres of all occupied cells as an (N, 3) array."""
        cells = np.argwhere(self.map > VAL_FREE)
        return self._centres(cells)

    def get_local_cloud(
        self, pos: Sequence[float], ori: Sequence[float], dim: Sequence[float]
    ) -> np.ndarray:
        """Return centres of inflated-occupied cells in the box pos+ori .. pos+ori+dim."""
        corner = np.asarray(pos, dtype=float) + np.asarray(ori, dtype=float)
        low = np.maximum(self.float_to_int(corner), 0)
        up = np.minimum(
            self.float_to_int(corner + np.asarray(dim, dtype=float)), self.dim
        )
        up = np.maximum(up, low)
        sub = self.inflated_map[low[0]:up[0], low[1]:up[1], low[2]:up[2]]
        cells = np.argwhere(sub > VAL_FREE) + low
        return self._centres(cells)

    def get_map(self) -> VoxelMap:
        """Return the raw map as a flat voxel map."""
        return self._to_voxel_map(self.map)

    def get_inflated_map(self) -> VoxelMap:
        """Return the inflated map as a flat voxel map."""
        return self._to_voxel_map(self.inflated_map)

    def allocate(self, dim: Sequence[float], origin: Sequence[float]) -> bool:
        """Resize the grid, keeping cells that overlap the old extent.

        Returns False when the size and origin are unchanged.
        """
        new_dim = _trunc3(d / self.res for d in dim)
        new_ori = _trunc3(o / self.res for o in origin)
        if new_dim[2] == 0 and new_ori[2] == 0:
            new_dim[2] = 1
        if np.any(new_dim < 0):
            raise ValueError(f"negative grid dimension: {tuple(new_dim)}")

        if np.array_equal(new_dim, self.dim) and np.array_equal(new_ori, self.origin):
            return False

        new_map = np.full(tuple(new_dim), VAL_FREE, dtype=np.int16)
        lo = np.maximum(new_ori, self.origin)
        hi = np.minimum(new_ori + new_dim, self.origin + self.dim)
        if np.all(lo < hi):
            dst = tuple(slice(a, b) for a, b in zip(lo - new_ori, hi - new_ori))
            src = tuple(slice(a, b) for a, b in zip(lo - self.origin, hi - self.origin))
            new_map[dst] = self.map[src]

        self.map = new_map
        self.inflated_map = new_map.copy()
        self.dim = new_dim
        self.origin = new_ori
        self.origin_d = np.asarray(origin, dtype=float).copy()
        return True

    def add_cloud(self, points: Iterable[Sequence[float]]) -> None:
        """Mark the cells holding the given points occupied."""
        for point in points:
            n = self.float_to_int(point)
            if self.is_outside(n):
                continue
            self.map[tuple(n)] = VAL_OCC

    def add_cloud_inflated(
        self,
        points: Iterable[Sequence[float]],
        neighbors: Iterable[Sequence[int]],
    ) -> list[tuple[int, int, int]]:
        """Add points and inflate each new obstacle by the neighbour offsets.

        Returns the cells newly occupied in the inflated map, in order.
        """
        offsets = [np.asarray(n, dtype=np.int64) for n in neighbors]
        new_obs: list[tuple[int, int, int]] = []
        for point in points:
            n = self.float_to_int(point)
            if self.is_outside(n):
                continue
            if self.map[tuple(n)] != VAL_OCC:
                for offset in offsets:
                    n2 = n + offset
                    if not self.is_outside(n2) and self.inflated_map[tuple(n2)] != VAL_OCC:
                        self.inflated_map[tuple(n2)] = VAL_OCC
                        new_obs.append(tuple(int(v) for v in n2))
            self.map[tuple(n)] = VAL_OCC
        return new_obs

    def float_to_int(self, point: Sequence[float]) -> np.ndarray:
        """Return the cell index holding a point (truncated toward zero)."""
        scaled = (np.asarray(point, dtype=float) - self.origin_d) / self.res
        return np.trunc(scaled).astype(np.int64)

    def int_to_float(self, cell: Sequence[int]) -> np.ndarray:
        """Return the centre of a cell."""
        return (np.asarray(cell, dtype=float) + 0.5) * self.res + self.origin_d

    def is_outside(self, cell: Sequence[int]) -> bool:
        """Tell whether a cell index lies outside the grid."""
        return any(not (0 <= int(c) < int(d)) for c, d in zip(cell, self.dim))

    def decay(self) -> None:
        """Lower every occupied value of both maps by one."""
        self.map[self.map > VAL_FREE] -= 1
        self.inflated_map[self.inflated_map > VAL_FREE] -= 1

    def _centres(self, cells: np.ndarray) -> np.ndarray:
        if len(cells) == 0:
            return np.empty((0, 3), dtype=float)
        return (cells.astype(float) + 0.5) * self.res + self.origin_d

    def _to_voxel_map(self, grid: np.ndarray) -> VoxelMap:
        flat = np.where(grid > VAL_FREE, VAL_OCC, VAL_FREE).ravel(order="F")
        return VoxelMap(
            origin=tuple(float(v) for v in self.origin_d),
            dim=tuple(int(v) for v in self.dim),
            resolution=self.res,
            data=flat.tolist(),
        )