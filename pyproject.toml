[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "motionmaps"
version = "0.1.0"
description = "Occupancy voxel maps for motion planning: building them from point clouds, images and meshes, slicing them, and generating control input sets."
requires-python = ">=3.10"
dependencies = [
    "numpy",
    "pillow",
]
keywords = [
    "motion planning",
    "voxel map",
    "occupancy grid",
    "point cloud",
    "robotics",
    "mesh sampling",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Science/Research",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
image-to-map = "motionmaps.image_to_map:main"
cloud-to-map = "motionmaps.cloud_to_map:main"
mesh-sampling = "motionmaps.mesh_sampling:main"

[tool.hatch.build.targets.wheel]
packages = ["motionmaps"]

[tool.hatch.build.targets.sdist]
include = [
    "motionmaps",
    "tests",
]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 88
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
