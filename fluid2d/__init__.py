"""
fluid2d/ — 2D Diffusion + Projection Solver
============================================
Exports the interfaces the renderer and the host loop use.

visualizer.py imports: FluidSimulation → current_velocity(), velocity_magnitude
main.py imports:       FluidSimulation, SimulationParams → advance_frame()
"""

from .errors import ConfigurationError, FluidError, GridShapeError, ResourceAllocationError
from .grid import DoubleBufferedField, VelocityField, kinetic_energy, seed, velocity_magnitude
from .params import SimulationParams
from .simulation import FluidSimulation, SimulationState

__all__ = [
    "FluidSimulation", "SimulationState", "SimulationParams",
    "DoubleBufferedField", "VelocityField",
    "seed", "velocity_magnitude", "kinetic_energy",
    "FluidError", "ConfigurationError", "GridShapeError", "ResourceAllocationError",
]
