"""
errors.py — Solver Error Taxonomy
==================================
Everything the solver raises derives from FluidError, so a host loop can
catch the whole family in one place.

  ConfigurationError        → bad grid size / iteration counts (fatal)
    GridShapeError          → kernel inputs of mismatched shape
  ResourceAllocationError   → numpy could not allocate a grid (fatal)

Numerical blow-ups (NaN / inf from absurd dt or viscosity) are NOT
detected here. Validating physical parameters is the caller's job.
"""


class FluidError(Exception):
    """Base class for all solver errors."""


class ConfigurationError(FluidError, ValueError):
    """Invalid grid dimensions or simulation parameters."""


class GridShapeError(ConfigurationError):
    """Two grids that must share an N × N shape do not."""


class ResourceAllocationError(FluidError, MemoryError):
    """Backing storage for a grid could not be obtained."""
