"""Building occupancy maps from greyscale or colour images."""

from __future__ import annotations

import enum
from pathlib import Path
from typing import Sequence

import numpy as np
from PIL import Image

from motionmaps.voxel_map import VoxelMap

_OCCUPIED = 100
_FREE = 0
_UNKNOWN = -1

_NATIVE_MODES = {"L": False, "LA": True, "RGB": False, "RGBA": True}


class MapMode(enum.Enum):
    """How pixel values turn into cell values."""

    TRINARY = "trinary"
    SCALE = "scale"
    RAW = "raw"


class MapLoadError(RuntimeError):
    """Raised when an image file cannot be read as a map."""


def _normalise(image: Image.Image) -> Image.Image:
    mode = image.mode
    if mode in _NATIVE_MODES:
        return image
    if mode == "1" or mode == "F" or mode.startswith("I"):
        return image.convert("L")
    if "A" in mode or "a" in mode or (mode == "P" and "transparency" in image.info):
        return image.convert("RGBA")
    return image.convert("RGB")


def map_from_image(
    image: Image.Image,
    resolution: float = 0.1,
    negate: bool = False,
    occ_th: float = 0.65,
    free_th: float = 0.2,
    origin: Sequence[float] = (0.0, 0.0, 0.0),
    mode: MapMode = MapMode.TRINARY,
) -> VoxelMap:
    """Turn an image into a single-layer map whose cell (0, 0) is the lower-left pixel.

    In TRINARY mode alpha is averaged with the colour channels. For images
    without an alpha channel the last channel stands in for alpha in SCALE mode.
    """
    image = _normalise(image)
    has_alpha = _NATIVE_MODES[image.mode]
    width, height = image.size

    pixels = np.asarray(image, dtype=np.float64)
    if pixels.ndim == 2:
        pixels = pixels[:, :, np.newaxis]
    n_channels = pixels.shape[2]

    if mode is MapMode.TRINARY or not has_alpha:
        avg_channels = n_channels
    else:
        avg_channels = n_channels - 1

    color_avg = pixels[:, :, :avg_channels].sum(axis=2) / avg_channels
    if n_channels == 1:
        alpha = np.ones(color_avg.shape)
    else:
        alpha = pixels[:, :, n_channels - 1]

    if negate:
        color_avg = 255 - color_avg

    if mode is MapMode.RAW:
        values = np.trunc(color_avg).astype(np.int64) % 256
        values = np.where(values > 127, values - 256, values)
    else:
        occ = (255 - color_avg) / 255.0
        with np.errstate(divide="ignore", invalid="ignore"):
            ratio = (occ - free_th) / (occ_th - free_th)
        scaled = np.trunc(np.nan_to_num(99 * ratio)).astype(np.int64)
        unknown = (alpha < 1.0) if mode is MapMode.SCALE else np.ones(occ.shape, bool)
        values = np.select(
            [occ > occ_th, occ < free_th, unknown],
            [_OCCUPIED, _FREE, _UNKNOWN],
            default=scaled,
        )

    data = np.flipud(values).ravel()
    return VoxelMap(
        origin=tuple(float(v) for v in origin),
        dim=(width, height, 1),
        resolution=resolution,
        data=data.tolist(),
    )


def load_map_from_file(
    path: str | Path,
    resolution: float = 0.1,
    negate: bool = False,
    occ_th: float = 0.65,
    free_th: float = 0.2,
    origin: Sequence[float] = (0.0, 0.0, 0.0),
    mode: MapMode = MapMode.TRINARY,
) -> VoxelMap:
    """Read an image file and turn it into a map; raise MapLoadError if it cannot be read."""
    try:
        with Image.open(path) as image:
            image.load()
            loaded = image.copy()
    except OSError as exc:
        raise MapLoadError(f'failed to open image file "{path}": {exc}') from exc
    return map_from_image(loaded, resolution, negate, occ_th, free_th, origin, mode)