"""Discretised control inputs for motion primitive planners."""

from __future__ import annotations

from typing import Iterator


def _steps(limit: float, step: float) -> Iterator[float]:
    """Yield -limit, -limit + step, ... while not above limit.

    The value is accumulated by repeated addition, so rounding may drop the
    last step for steps that are not exactly representable.
    """
    value = -limit
    while value <= limit:
        yield value
        value += step


def _step_size(u: float, num: int) -> float:
    if num < 1:
        raise ValueError(f"number of steps must be at least 1, got {num}")
    if u <= 0:
        raise ValueError(f"control bound must be positive, got {u}")
    return u / num


def planar_control_inputs(u: float = 1.0, num: int = 1) -> list[tuple[float, float]]:
    """Return the 2D inputs (dx, dy) on a grid over [-u, u] with ``num`` steps per side."""
    du = _step_size(u, num)
    return [(dx, dy) for dx in _steps(u, du) for dy in _steps(u, du)]


def control_inputs(
    u: float = 1.0,
    num: int = 1,
    use_3d: bool = False,
    use_yaw: bool = False,
    u_yaw: float = 0.3,
) -> list[tuple[float, ...]]:
    """Return control inputs for a 3D planner, optionally with a yaw rate.

    Without yaw each input is (dx, dy, dz); with yaw it is (dx, dy, dz, dyaw)
    where dyaw takes the values -u_yaw, 0 and u_yaw. When ``use_3d`` is false
    dz is always zero.
    """
    du = _step_size(u, num)
    if use_yaw and u_yaw <= 0:
        raise ValueError(f"yaw control bound must be positive, got {u_yaw}")

    z_values = list(_steps(u, du)) if use_3d else [0.0]
    inputs: list[tuple[float, ...]] = []
    for dx in _steps(u, du):
        for dy in _steps(u, du):
            for dz in z_values:
                if use_yaw:
                    inputs.extend(
                        (dx, dy, dz, dyaw) for dyaw in _steps(u_yaw, u_yaw)
                    )
                else:
                    inputs.append((dx, dy, dz))
    return inputs


def reduced_z_control_inputs(
    u: float = 1.0, u_z: float = 1.0, num: int = 1
) -> list[tuple[float, float, float]]:
    """Return 3D inputs (dx, dy, dz) with a separate bound ``u_z`` on the z axis."""
    du = _step_size(u, num)
    du_z = _step_size(u_z, num)
    return [
        (dx, dy, dz)
        for dx in _steps(u, du)
        for dy in _steps(u, du)
        for dz in _steps(u_z, du_z)
    ]