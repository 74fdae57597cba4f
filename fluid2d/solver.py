"""
solver.py — Pressure Projection Kernels
========================================
The projection step pushes the velocity field toward INCOMPRESSIBILITY:
  div(v) ≈ 0 everywhere

It is three kernels, run in order by the simulation driver:
  1. compute_divergence        : divergence of the current velocity
  2. jacobi_pressure_sweep     : one relaxation sweep of ∇²p = div (×K)
  3. subtract_pressure_gradient: v = v - ∇p, one component at a time

All three are pure functions over whole grids. They read their inputs,
fully overwrite `out`, and never touch buffer indices; the driver swaps
after each call. Every stencil uses clamp-to-edge neighbors.

Scaling follows the usual GPU-fluid convention with cell size 1/N:
  divergence = -0.5 * (Δx velX + Δy velY) / N
  pressure   = (divergence + sum_of_4_neighbors) / 4
  velocity  -= 0.5 * N * Δ pressure
"""

import numpy as np

from .errors import ConfigurationError
from .grid import check_same_shape, edge_neighbors


def compute_divergence(vel_x: np.ndarray, vel_y: np.ndarray,
                       out: np.ndarray = None) -> np.ndarray:
    """
    Central-difference divergence of (vel_x, vel_y).

        div[x,y] = -0.5 * ((vx[x+1,y] - vx[x-1,y]) + (vy[x,y+1] - vy[x,y-1])) / N

    Returns: (N, N) grid (`out` if given).
    """
    N = check_same_shape(vel_x, vel_y) if out is None else check_same_shape(vel_x, vel_y, out)
    if out is None:
        out = np.empty_like(vel_x)

    left, right, _, _ = edge_neighbors(vel_x)
    _, _, down, up = edge_neighbors(vel_y)
    np.multiply(-0.5 / N, (right - left) + (up - down), out=out, casting="same_kind")
    return out


def jacobi_pressure_sweep(pressure: np.ndarray, divergence: np.ndarray,
                          out: np.ndarray = None) -> np.ndarray:
    """
    One Jacobi sweep of the pressure Poisson equation.

        p_new[x,y] = (div[x,y] + left + right + down + up) / 4

    `pressure` is the previous sweep (or last frame's converged field on
    the first sweep); `out` must be a different array.
    """
    if out is None:
        check_same_shape(pressure, divergence)
        out = np.empty_like(pressure)
    else:
        check_same_shape(pressure, divergence, out)

    left, right, down, up = edge_neighbors(pressure)
    np.multiply(0.25, divergence + left + right + down + up, out=out, casting="same_kind")
    return out


def subtract_pressure_gradient(velocity: np.ndarray, pressure: np.ndarray, axis: str,
                               out: np.ndarray = None) -> np.ndarray:
    """
    Remove the pressure gradient from ONE velocity component.

        out[x,y] = velocity[x,y] - 0.5 * N * (p[+] - p[-])

    where (p[-], p[+]) is the (x-1, x+1) pair for axis="x" and the
    (y-1, y+1) pair for axis="y".
    """
    N = check_same_shape(velocity, pressure) if out is None else check_same_shape(velocity, pressure, out)
    if out is None:
        out = np.empty_like(velocity)

    left, right, down, up = edge_neighbors(pressure)
    if axis == "x":
        minus, plus = left, right
    elif axis == "y":
        minus, plus = down, up
    else:
        raise ConfigurationError(f"Unknown axis: {axis!r}. Use 'x' or 'y'.")

    np.subtract(velocity, 0.5 * N * (plus - minus), out=out, casting="same_kind")
    return out
