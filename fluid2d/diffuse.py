"""
diffuse.py — Viscous Diffusion via Jacobi Iteration
====================================================
Viscosity makes velocity spread out over time.
  - High viscosity  → thick fluid (honey), the splat smears quickly
  - Low viscosity   → thin fluid (air, water), the splat stays sharp

The math: implicit Euler on the heat equation,
  (I - a·∇²) x_new = x_old,      a = dt * viscosity * N²

Rearranged for one cell (4 neighbors in 2-D):
  x_new[x,y] = (x_old[x,y] + a * (left + right + down + up)) / (1 + 4a)

This is ONE Jacobi sweep of that system, not a direct solve. The live
pipeline runs exactly one sweep per step; that choice sets how fast the
splat visibly dissipates, so `iterations` defaults to 1. More sweeps
relax toward the true implicit step (right-hand side stays x_old).

Both velocity components go through the same function with the same
(dt, viscosity, N). Neighbors past the edge are clamped to the edge cell.
"""

import numpy as np

from .grid import check_same_shape, edge_neighbors


def _jacobi_sweep(x: np.ndarray, b: np.ndarray, alpha: float, beta: float,
                  out: np.ndarray) -> np.ndarray:
    """out = (b + alpha * sum_of_4_neighbors(x)) / beta, fully vectorized."""
    left, right, down, up = edge_neighbors(x)
    np.divide(b + alpha * (left + right + down + up), beta, out=out, casting="same_kind")
    return out


def diffuse(prev: np.ndarray, dt: float, viscosity: float,
            iterations: int = 1, out: np.ndarray = None) -> np.ndarray:
    """
    Advance one scalar field by one implicit-Euler viscosity step.

    Args:
        prev       : Current field (read only), shape (N, N)
        dt         : Timestep
        viscosity  : Kinematic viscosity
        iterations : Jacobi sweeps (1 = single sweep, 0 = copy through)
        out        : Write target, same shape as prev. Allocated if None.

    Returns:
        `out`, fully overwritten.
    """
    N = check_same_shape(prev) if out is None else check_same_shape(prev, out)
    if out is None:
        out = np.empty_like(prev)

    if iterations <= 0:
        np.copyto(out, prev)
        return out

    alpha = dt * viscosity * N * N
    beta  = 1.0 + 4.0 * alpha

    # Ping-pong between `out` and one scratch grid so every sweep reads
    # only the previous sweep's values. Parity picks the start so the
    # last sweep lands in `out`.
    scratch = np.empty_like(out) if iterations > 1 else out
    targets = (out, scratch) if iterations % 2 == 1 else (scratch, out)

    x = prev
    for i in range(iterations):
        target = targets[i % 2]
        _jacobi_sweep(x, prev, alpha, beta, target)
        x = target
    return out
