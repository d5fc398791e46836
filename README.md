# motionmaps

Tools for building and handling occupancy voxel maps for motion planning.

The package covers the map side of a planning pipeline:

- `motionmaps.voxel_grid`: a voxel grid that accumulates points into
  occupied cells, with an inflated layer, local cloud extraction, decay and
  re-allocation;
- `motionmaps.voxel_map`: a plain voxel map record that can be sliced into
  a single layer around a given height and saved to or loaded from JSON;
- `motionmaps.image_loader`: conversion of greyscale or colour images into
  occupancy maps, in trinary, scale and raw modes;
- `motionmaps.mesh_sampling`: uniform surface sampling of STL meshes into
  point clouds, a voxel filter, and ASCII PCD reading and writing;
- `motionmaps.controls`: the discretised control input sets used by
  motion-primitive planners.

## Installation

```
pip install motionmaps
```

The package depends on `numpy` and `pillow`.

## Command-line tools

Three commands are installed. Each takes `--help`.

- `image-to-map FILE` loads an image and writes the map as JSON to
  standard output or to `--output`. Options: `--resolution` (0.1),
  `--frame-id` (`map`), `--negate` (0), `--occ-th` (0.65), `--free-th`
  (0.2), `--origin-x/-y/-z` (0), `--mode` (`trinary`, `scale` or `raw`).
  It exits with status 1 if the image cannot be read.
- `cloud-to-map CLOUD...` adds every point cloud file, in order, to one
  grid and writes the resulting map as JSON to standard output or to
  `--output`. Cloud files are plain text with `x y z` rows (extra columns
  and `#` comments ignored) or ASCII PCD. Options: `--resolution` (0.2),
  `--origin-x` (-5), `--origin-y` (-10), `--origin-z` (0), `--range-x`
  (50), `--range-y` (20), `--range-z` (4), `--frame-id` (`map`).
- `mesh-sampling FILE.stl` samples points uniformly over the surface of an
  STL mesh (binary or ASCII), thins them with a voxel filter and prints
  them one `x y z` per line, or with `--save-pcd` writes them as an ASCII
  PCD file to `--pcd-file` (`tmp.pcd`). Options: `--n-samples` (100000),
  `--leaf-size` (0.01), `--seed`. A file name not ending in `stl` is
  reported and the command exits with status 0.

## Library use

### Building a map from points

```python
from motionmaps.voxel_grid import VoxelGrid

grid = VoxelGrid((-5.0, -10.0, 0.0), (50.0, 20.0, 4.0), 0.2)
grid.add_cloud([(1.0, 2.0, 0.5), (3.0, -1.0, 1.5)])

voxel_map = grid.get_map()       # occupied cells 100, all others 0
occupied = grid.get_cloud()      # (N, 3) array of occupied cell centres
```

Point-to-cell conversion truncates toward zero (`float_to_int`);
`int_to_float` gives a cell's centre and `is_outside` tells whether a cell
index lies outside the grid. `fill` marks one cell, `fill_column` a whole
column (both ignore cells outside the grid); `clear_column` frees a column
and raises `IndexError` outside the grid; `clear` frees everything.

`add_cloud_inflated(points, neighbors)` marks the neighbourhood of each new
obstacle in the inflated layer and returns the cells that became occupied
there; `get_inflated_map` and `get_local_cloud(pos, ori, dim)` read that
layer back. `decay` lowers every occupied value of both layers by one, and
`allocate(dim, origin)` resizes or shifts the grid while keeping the cells
that overlap, returning `False` when nothing changes.

### Slicing and storing maps

```python
from motionmaps.voxel_map import slice_map, save_map, load_map

layer = slice_map(voxel_map, 0.8, 2.0)   # single layer around height 0.8
save_map(layer, "layer.json")
restored = load_map("layer.json")
```

`slice_map` keeps, for each column, the largest value of the layers within
the given half thickness of the height (unknown, -1, where none applies).
A `VoxelMap` stores its cells in x-fastest order and checks that the data
length matches its dimensions; `VoxelMap.index` gives the flat position of
a cell and `VoxelMap.to_dict` / `map_from_dict` convert to and from plain
data.

### Maps from images

```python
from motionmaps.image_loader import MapMode, load_map_from_file

voxel_map = load_map_from_file(
    "floor.png", 0.1, False, 0.65, 0.2, (0.0, 0.0, 0.0), MapMode.TRINARY
)
```

Pixels darker than the occupancy threshold become occupied (100), lighter
than the free threshold become free (0), and the rest are unknown (-1) in
trinary mode or scaled between 0 and 99 in scale mode (unknown where the
pixel is transparent). Raw mode stores the averaged pixel value itself.
The bottom image row becomes map row 0. A file that cannot be opened
raises `MapLoadError`. `map_from_image` does the same for a Pillow image.

### Control inputs

```python
from motionmaps.controls import planar_control_inputs, control_inputs

U2 = planar_control_inputs(1.0, 1)                 # 3 x 3 grid in x, y
U4 = control_inputs(1.0, 1, False, True, 0.3)      # (dx, dy, 0, dyaw)
```

`reduced_z_control_inputs(u, u_z, num)` builds 3D inputs whose z component
uses its own bound. A step count below 1 or a non-positive bound raises
`ValueError`.

### Mesh sampling

```python
import numpy as np
from motionmaps.mesh_sampling import read_stl, uniform_sampling, voxel_filter

triangles = read_stl("part.stl")
points = uniform_sampling(triangles, 100000, np.random.default_rng(0))
thinned = voxel_filter(points, 0.01)
```

Samples are spread over triangles in proportion to their area
(`triangle_area`, `random_point_in_triangle`). `voxel_filter` replaces the
points of each cubic leaf by their centroid. `save_pcd_ascii` and
`read_pcd_ascii` write and read ASCII PCD files.

## What the package does not do

It builds and prepares maps and control input sets but contains no motion
planner and no trajectory solver: nothing here searches for or optimises a
path. It reads and writes files only; it does not subscribe to or publish
live data streams.

## Running the tests

```
pip install "motionmaps[test]"
pytest
```