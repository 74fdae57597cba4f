"""
grid.py — Ping-Pong Grid Storage
=================================
The foundation of the entire simulation.

Every field lives on the same collocated N × N grid of float32 values,
indexed [x, y]. A kernel never reads and writes the same array: each
persistent field keeps two buffers and a single `active` index.

    read()          → active buffer (the "current" state, read-only view)
    write_target()  → the other buffer (where a kernel writes "next")
    swap()          → flip `active` once the full-grid write is done

Velocity is two independent double-buffered scalar fields (X and Y).
Divergence is a plain scratch grid: it is rebuilt from scratch every
projection and never carried across steps.

Boundaries use clamp-to-edge sampling: a neighbor read past the edge
returns the edge cell itself. That is NOT a no-slip or free-slip wall.
"""

from typing import NamedTuple

import numpy as np

from .errors import ConfigurationError, GridShapeError, ResourceAllocationError


DTYPE = np.float32


def allocate_grid(N: int) -> np.ndarray:
    """
    Allocate one zeroed N × N float32 grid.

    Raises:
        ConfigurationError      : N is not a positive integer
        ResourceAllocationError : numpy could not get the memory
    """
    if isinstance(N, bool) or not isinstance(N, (int, np.integer)) or N <= 0:
        raise ConfigurationError(f"Grid resolution must be a positive integer, got {N!r}")
    try:
        return np.zeros((N, N), dtype=DTYPE)
    except MemoryError as exc:
        raise ResourceAllocationError(f"Could not allocate a {N}x{N} grid") from exc


def check_same_shape(*grids: np.ndarray) -> int:
    """
    Make sure every grid is square, 2-D and the same size.
    Returns N.
    """
    shape = grids[0].shape
    if len(shape) != 2 or shape[0] != shape[1]:
        raise GridShapeError(f"Expected a square 2-D grid, got shape {shape}")
    for g in grids[1:]:
        if g.shape != shape:
            raise GridShapeError(f"Grid shape mismatch: {g.shape} vs {shape}")
    return shape[0]


def edge_neighbors(field: np.ndarray) -> tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray]:
    """
    The four axis neighbors of every cell with clamp-to-edge addressing.

    Returns (left, right, down, up) — i.e. values at (x-1, y), (x+1, y),
    (x, y-1), (x, y+1) — each the same shape as `field`.
    """
    padded = np.pad(field, 1, mode="edge")
    left  = padded[:-2, 1:-1]
    right = padded[2:,  1:-1]
    down  = padded[1:-1, :-2]
    up    = padded[1:-1, 2:]
    return left, right, down, up


class DoubleBufferedField:
    """
    Two same-shaped grids plus one bit saying which is current.

    Kernels receive read() as input and write_target() as `out`; only the
    owner (the simulation driver) calls swap() after the kernel returns.
    """

    def __init__(self, N: int):
        self.N = N
        self._buffers = [allocate_grid(N), allocate_grid(N)]
        self.active = 0

    @property
    def shape(self) -> tuple[int, int]:
        return self._buffers[0].shape

    def read(self) -> np.ndarray:
        """Active buffer as a read-only view."""
        view = self._buffers[self.active].view()
        view.flags.writeable = False
        return view

    def write_target(self) -> np.ndarray:
        """Inactive buffer, to be fully overwritten by a kernel."""
        return self._buffers[self.active ^ 1]

    def swap(self):
        self.active ^= 1

    def fill(self, value: float = 0.0):
        for buf in self._buffers:
            buf.fill(value)

    def __repr__(self):
        return f"DoubleBufferedField(N={self.N}, active={self.active})"


class VelocityField:
    """
    X and Y velocity components, each double-buffered on its own.

    They are diffused and corrected one at a time, so their active flags
    can differ, but read() always hands back the matched current pair.
    """

    def __init__(self, N: int):
        self.N = N
        self.x = DoubleBufferedField(N)
        self.y = DoubleBufferedField(N)

    def read(self) -> tuple[np.ndarray, np.ndarray]:
        return self.x.read(), self.y.read()

    def component(self, axis: str) -> DoubleBufferedField:
        if axis == "x":
            return self.x
        if axis == "y":
            return self.y
        raise ConfigurationError(f"Unknown velocity component: {axis!r} (use 'x' or 'y')")

    def fill(self, value: float = 0.0):
        self.x.fill(value)
        self.y.fill(value)


class BufferState(NamedTuple):
    """Which buffer is current for each ping-pong field."""
    active_x: int
    active_y: int
    active_pressure: int


def seed(grid: np.ndarray, center_x: float, center_y: float,
         radius: float, strength: float = 1.0) -> np.ndarray:
    """
    Overwrite `grid` with a circular splat that decays linearly to zero.

        value = strength * (1 - d / radius)   for d <  radius
        value = 0                             for d >= radius

    d is the distance from (center_x, center_y) in cell units. The center
    may sit on an edge or corner, or even off the grid; only the in-range
    part of the disk is written.

    Returns the same grid for chaining.
    """
    if radius <= 0:
        raise ConfigurationError(f"Splat radius must be > 0, got {radius}")
    Nx, Ny = grid.shape
    ix, iy = np.meshgrid(
        np.arange(Nx, dtype=np.float64),
        np.arange(Ny, dtype=np.float64),
        indexing="ij"
    )
    dist = np.sqrt((ix - center_x) ** 2 + (iy - center_y) ** 2)
    values = np.where(dist < radius, strength * (1.0 - dist / radius), 0.0)
    grid[:] = values
    return grid


def velocity_magnitude(vel_x: np.ndarray, vel_y: np.ndarray) -> np.ndarray:
    """Per-cell speed sqrt(vx² + vy²). This is what the renderer shows."""
    check_same_shape(vel_x, vel_y)
    return np.sqrt(vel_x * vel_x + vel_y * vel_y)


def kinetic_energy(vel_x: np.ndarray, vel_y: np.ndarray) -> float:
    """Sum of squared speeds over the grid, accumulated in float64."""
    check_same_shape(vel_x, vel_y)
    vx = vel_x.astype(np.float64)
    vy = vel_y.astype(np.float64)
    return float(np.sum(vx * vx + vy * vy))
