"""
params.py — Simulation Parameters
==================================
The handful of knobs the solver reads every step:

  dt                   : timestep
  viscosity            : kinematic viscosity used by the diffusion pass
  iteration_count      : diffusion+projection steps per rendered frame
  pressure_iterations  : Jacobi sweeps per pressure solve
  diffusion_iterations : Jacobi sweeps per diffusion pass (1 = single sweep)

Field metadata carries ranges and labels for CLIs / GUIs, the same way
the flow configs in a shader pipeline describe their sliders.
"""

import json
import numbers
from dataclasses import asdict, dataclass, field, fields, replace as _dc_replace
from pathlib import Path

from .errors import ConfigurationError


@dataclass(frozen=True)
class SimulationParams:
    """Process-wide solver settings. Immutable; use replace() to adjust."""

    dt: float = field(
        default=1.6e-5,
        metadata={"min": 0.0, "label": "Timestep",
                  "description": "Simulated seconds per step"}
    )
    viscosity: float = field(
        default=1e-6,
        metadata={"min": 0.0, "label": "Viscosity",
                  "description": "Same value is used for both velocity components"}
    )
    iteration_count: int = field(
        default=5,
        metadata={"min": 0, "label": "Steps per Frame",
                  "description": "Diffusion+projection steps run for every rendered frame"}
    )
    pressure_iterations: int = field(
        default=20,
        metadata={"min": 0, "label": "Pressure Iterations",
                  "description": "Jacobi sweeps per pressure solve (warm-started)"}
    )
    diffusion_iterations: int = field(
        default=1,
        metadata={"min": 0, "label": "Diffusion Iterations",
                  "description": "Jacobi sweeps per diffusion pass (1 = single sweep)"}
    )

    def __post_init__(self):
        self.validate()

    def validate(self):
        """
        Raise ConfigurationError for counts that make no sense.

        dt and viscosity only have to be real numbers. Negative or huge
        values are allowed through; the NaNs they produce are on the caller.
        """
        for name in ("dt", "viscosity"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, numbers.Real):
                raise ConfigurationError(f"{name} must be a real number, got {value!r}")

        for name in ("iteration_count", "pressure_iterations", "diffusion_iterations"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, numbers.Integral):
                raise ConfigurationError(f"{name} must be an integer, got {value!r}")
            if value < 0:
                raise ConfigurationError(f"{name} must be >= 0, got {value}")

    def replace(self, **changes) -> "SimulationParams":
        """Return a validated copy with some fields changed."""
        unknown = set(changes) - {f.name for f in fields(self)}
        if unknown:
            raise ConfigurationError(f"Unknown parameter(s): {sorted(unknown)}")
        return _dc_replace(self, **changes)

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "SimulationParams":
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ConfigurationError(f"Unknown parameter(s): {sorted(unknown)}")
        return cls(**data)

    @classmethod
    def from_json(cls, path) -> "SimulationParams":
        """
        Load parameters from a JSON object, e.g.:
            {"dt": 1.6e-5, "viscosity": 1e-6, "pressure_iterations": 40}
        Missing keys keep their defaults.
        """
        with open(Path(path)) as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ConfigurationError(f"{path}: expected a JSON object, got {type(data).__name__}")
        return cls.from_dict(data)

    @classmethod
    def field_info(cls) -> dict:
        """Metadata (min / label / description) keyed by field name."""
        return {f.name: dict(f.metadata) for f in fields(cls)}
