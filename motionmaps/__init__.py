"""Occupancy voxel maps for motion planning: grids, slicing, image and mesh conversion, control inputs."""

__version__ = "0.1.0"

__all__ = [
    "voxel_map",
    "voxel_grid",
    "controls",
    "image_loader",
    "image_to_map",
    "cloud_to_map",
    "mesh_sampling",
]