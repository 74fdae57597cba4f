"""
simulation.py — Master Solver Loop
===================================
The complete simulation step that ties the kernels together.
One call to `step()` advances the velocity field by one dt.

Pipeline per step:
  1. Diffuse velocity X, then Y (viscosity, same params for both)
  2. Project:
       a. divergence of the diffused velocity
       b. K Jacobi pressure sweeps, warm-started from last step's pressure
       c. subtract ∂p/∂x from X, then ∂p/∂y from Y

There is no advection and no external forcing: the only motion is the
initial splat spreading out and being made divergence-free.

`advance_frame()` runs `iteration_count` steps per rendered frame so the
flow evolves faster than the display refreshes.

Every kernel writes the inactive buffer; the driver flips the buffer
only after the kernel returns. All index state lives on the instance,
so any number of simulations can run side by side.
"""

import logging
import time
from enum import Enum

import numpy as np

from .diffuse import diffuse
from .errors import ConfigurationError
from .grid import (BufferState, DoubleBufferedField, VelocityField, allocate_grid,
                   kinetic_energy, seed)
from .params import SimulationParams
from .solver import compute_divergence, jacobi_pressure_sweep, subtract_pressure_gradient

logger = logging.getLogger(__name__)


# Default initial condition: one splat at the grid center.
SPLAT_RADIUS   = 20.0
SPLAT_STRENGTH = 1.0


class SimulationState(Enum):
    IDLE       = "idle"
    DIFFUSING  = "diffusing"
    PROJECTING = "projecting"
    SETTLED    = "settled"     # ready to render


class FluidSimulation:
    """
    The complete 2D diffusion + projection solver.

    Usage:
        sim = FluidSimulation(N=128)
        sim.seed()                          # splat at the center
        for frame in range(100):
            sim.advance_frame()
            vx, vy = sim.current_velocity() # Hand to visualizer
    """

    def __init__(self, N: int = 128, params: SimulationParams = None):
        """
        Args:
            N      : Grid resolution (128 → 128² cells). Fixed for life.
            params : Solver settings; defaults to SimulationParams()

        Raises:
            ConfigurationError      : N <= 0 or bad params
            ResourceAllocationError : grids could not be allocated
        """
        self.N = N
        self.velocity   = VelocityField(N)
        self.pressure   = DoubleBufferedField(N)
        self.divergence = allocate_grid(N)

        self._params = self._check_params(params if params is not None else SimulationParams())
        self.state = SimulationState.IDLE
        self.steps = 0
        self.frame = 0
        self.perf_log = []   # one metrics dict per step

        logger.info("Allocated %dx%d simulation (%s)", N, N, self._params)

    # ── Configuration ───────────────────────────────────────────────────────

    @staticmethod
    def _check_params(params) -> SimulationParams:
        if not isinstance(params, SimulationParams):
            raise ConfigurationError(f"Expected SimulationParams, got {type(params).__name__}")
        params.validate()
        return params

    @property
    def params(self) -> SimulationParams:
        return self._params

    @params.setter
    def params(self, params: SimulationParams):
        self._params = self._check_params(params)
        logger.info("Parameters changed: %s", self._params)

    @property
    def buffer_state(self) -> BufferState:
        return BufferState(
            active_x=self.velocity.x.active,
            active_y=self.velocity.y.active,
            active_pressure=self.pressure.active,
        )

    # ── Initial conditions ──────────────────────────────────────────────────

    def seed(self, center_x: float = None, center_y: float = None,
             radius: float = SPLAT_RADIUS, strength: float = SPLAT_STRENGTH,
             components: tuple = ("x", "y")):
        """
        Write a radially decaying splat into the chosen velocity component(s).
        Cells outside the radius become zero.

        Args:
            center_x, center_y : Splat center in cells (default: N // 2)
            radius             : Splat radius in cells
            strength           : Value at the very center
            components         : Which of "x" / "y" to seed
        """
        cx = self.N // 2 if center_x is None else center_x
        cy = self.N // 2 if center_y is None else center_y

        for axis in components:
            field = self.velocity.component(axis)
            seed(field.write_target(), cx, cy, radius, strength)
            field.swap()

        logger.info("Seeded splat at (%s, %s) r=%s strength=%s into %s",
                    cx, cy, radius, strength, ",".join(components))

    # ── Stepping ────────────────────────────────────────────────────────────

    def step(self, params: SimulationParams = None) -> dict:
        """
        Advance by one diffusion + projection cycle.

        Args:
            params : One-off settings for this step (default: self.params)

        Returns metrics dict for benchmarking.
        """
        p = self._params if params is None else self._check_params(params)
        t_total_start = time.perf_counter()

        # ── Step 1: Diffuse velocity (viscosity) ───────────────────────────
        self.state = SimulationState.DIFFUSING
        t0 = time.perf_counter()
        self._diffuse(p)
        t_diffuse = (time.perf_counter() - t0) * 1000

        # ── Step 2: Project velocity (enforce incompressibility) ───────────
        self.state = SimulationState.PROJECTING
        t0 = time.perf_counter()
        div_max = self._project(p)
        t_project = (time.perf_counter() - t0) * 1000

        self.state = SimulationState.SETTLED
        self.steps += 1
        t_total = (time.perf_counter() - t_total_start) * 1000

        metrics = {
            "step"           : self.steps,
            "total_ms"       : t_total,
            "diffuse_ms"     : t_diffuse,
            "project_ms"     : t_project,
            "divergence_max" : div_max,
            "energy"         : kinetic_energy(*self.current_velocity()),
        }
        self.perf_log.append(metrics)
        logger.debug("step %d: %.2fms div_max=%.3e energy=%.6f",
                     self.steps, t_total, div_max, metrics["energy"])
        return metrics

    def _diffuse(self, p: SimulationParams):
        # Same dt, viscosity and N for both components.
        for field in (self.velocity.x, self.velocity.y):
            diffuse(field.read(), p.dt, p.viscosity,
                    iterations=p.diffusion_iterations, out=field.write_target())
            field.swap()

    def _project(self, p: SimulationParams) -> float:
        """Divergence → pressure sweeps → gradient subtraction. Returns max |div|."""
        vx, vy = self.velocity.read()
        compute_divergence(vx, vy, out=self.divergence)

        # Warm start: pressure is NOT zeroed, last step's result is the guess.
        for _ in range(p.pressure_iterations):
            jacobi_pressure_sweep(self.pressure.read(), self.divergence,
                                  out=self.pressure.write_target())
            self.pressure.swap()

        pressure = self.pressure.read()
        for axis in ("x", "y"):
            field = self.velocity.component(axis)
            subtract_pressure_gradient(field.read(), pressure, axis,
                                       out=field.write_target())
            field.swap()

        return float(np.abs(self.divergence).max())

    def advance_frame(self, params: SimulationParams = None) -> list:
        """
        Run `iteration_count` steps, i.e. everything between two renders.
        Returns the per-step metrics.
        """
        p = self._params if params is None else self._check_params(params)
        metrics = [self.step(p) for _ in range(p.iteration_count)]
        self.frame += 1
        return metrics

    # ── Accessors ───────────────────────────────────────────────────────────

    def current_velocity(self) -> tuple[np.ndarray, np.ndarray]:
        """Read-only (X, Y) views of the active velocity buffers."""
        return self.velocity.read()

    def reset(self):
        """Zero out all fields and go back to IDLE."""
        self.velocity.fill(0.0)
        self.pressure.fill(0.0)
        self.divergence.fill(0.0)
        self.state = SimulationState.IDLE
        self.steps = 0
        self.frame = 0
        self.perf_log = []

    def status(self) -> str:
        """Multi-line summary of the current state."""
        vx, vy = self.current_velocity()
        pressure = self.pressure.read()
        lines = [
            "=" * 50,
            f"  Frame: {self.frame}  |  Step: {self.steps}  |  State: {self.state.value}",
            f"  Velocity  : max_x={np.abs(vx).max():.4f}, max_y={np.abs(vy).max():.4f}",
            f"  Energy    : {kinetic_energy(vx, vy):.6f}",
            f"  Divergence: max={np.abs(self.divergence).max():.6e}",
            f"  Pressure  : max={pressure.max():.4e}, min={pressure.min():.4e}",
        ]
        if self.perf_log:
            last = self.perf_log[-1]
            lines.append(f"  Perf      : {last['total_ms']:.2f}ms/step")
        lines.append("=" * 50)
        return "\n".join(lines)

    def __repr__(self):
        return f"FluidSimulation(N={self.N}, state={self.state.value}, steps={self.steps})"
