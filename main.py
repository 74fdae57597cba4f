"""
main.py — Entry Point
======================
Top-level script: sets up the solver, seeds the splat and drives frames.

Usage:
    python main.py                           # Headless run, stats every 10 frames
    python main.py --mode live               # Live magnitude window
    python main.py --mode benchmark          # Per-kernel timing breakdown
    python main.py --config params.json      # Load SimulationParams from JSON
"""

import argparse
import logging
import time

import numpy as np

from fluid2d import FluidSimulation, SimulationParams


def build_params(args) -> SimulationParams:
    """JSON file first (if any), then explicit CLI flags on top."""
    params = SimulationParams.from_json(args.config) if args.config else SimulationParams()
    overrides = {
        "dt"                   : args.dt,
        "viscosity"            : args.viscosity,
        "iteration_count"      : args.iterations,
        "pressure_iterations"  : args.pressure_iterations,
        "diffusion_iterations" : args.diffusion_iterations,
    }
    overrides = {k: v for k, v in overrides.items() if v is not None}
    return params.replace(**overrides) if overrides else params


def make_simulation(args) -> FluidSimulation:
    sim = FluidSimulation(N=args.N, params=build_params(args))
    sim.seed(radius=args.radius, strength=args.strength)
    return sim


def run_live(args):
    """Live interactive visualization."""
    from visualizer import FluidVisualizer

    print(f"Starting live simulation (N={args.N})...")
    print("Close the window to exit.\n")

    sim = make_simulation(args)
    viz = FluidVisualizer(sim)
    viz.run(fps=60)


def run_headless(args):
    """Run simulation without display — prints stats every 10 frames."""
    sim = make_simulation(args)

    print(f"\nHeadless simulation | N={args.N} | {args.frames} frames | "
          f"{sim.params.iteration_count} steps/frame")
    print(f"{'─'*60}")

    frame_times = []
    for f in range(args.frames):
        t0 = time.perf_counter()
        metrics = sim.advance_frame()
        frame_times.append((time.perf_counter() - t0) * 1000)

        if f % 10 == 0 and metrics:
            last = metrics[-1]
            print(f"  Frame {f:03d} | {frame_times[-1]:6.1f}ms | "
                  f"div_max={last['divergence_max']:.3e} | "
                  f"energy={last['energy']:.4f}")

    if frame_times:
        mean_ms = np.mean(frame_times)
        print(f"\n{'─'*60}")
        print(f"  Average: {mean_ms:.1f}ms/frame ({1000 / mean_ms if mean_ms > 0 else 0:.1f} FPS)")
        print(f"  Min:     {np.min(frame_times):.1f}ms")
        print(f"  Max:     {np.max(frame_times):.1f}ms")
    print(sim.status())


def run_benchmark(args, warmup: int = 5):
    """Per-kernel timing breakdown over `frames` frames."""
    sim = make_simulation(args)

    print(f"\n{'='*60}")
    print(f"  SOLVER BENCHMARK | N={args.N} | {args.frames} frames")
    print(f"{'='*60}")

    for _ in range(warmup):
        sim.advance_frame()

    logs = []
    for _ in range(args.frames):
        logs.extend(sim.advance_frame())

    if not logs:
        print("  No steps run (iteration_count is 0).")
        return

    keys = ["diffuse_ms", "project_ms", "total_ms"]
    print(f"\n{'Kernel':<20} {'Mean':>8} {'Min':>8} {'Max':>8}")
    print(f"{'─'*50}")
    for k in keys:
        vals = [m[k] for m in logs]
        print(f"  {k:<18} {np.mean(vals):>7.2f}ms {np.min(vals):>7.2f}ms {np.max(vals):>7.2f}ms")

    frame_ms = np.mean([m["total_ms"] for m in logs]) * sim.params.iteration_count
    print(f"\n{'─'*50}")
    print(f"  Solver-only FPS: {1000 / frame_ms if frame_ms > 0 else 0:.1f}")


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="2D Velocity Diffusion + Projection")
    parser.add_argument(
        "--mode", choices=["live", "headless", "benchmark"],
        default="headless",
        help="Run mode (default: headless)"
    )
    parser.add_argument("--N",      type=int, default=128, help="Grid resolution (default: 128)")
    parser.add_argument("--frames", type=int, default=100, help="Number of frames")
    parser.add_argument("--config", type=str, default=None, help="JSON file with SimulationParams")
    parser.add_argument("--dt",        type=float, default=None, help="Timestep")
    parser.add_argument("--viscosity", type=float, default=None, help="Viscosity")
    parser.add_argument("--iterations", type=int, default=None, help="Steps per frame")
    parser.add_argument("--pressure-iterations",  type=int, default=None, help="Jacobi sweeps per pressure solve")
    parser.add_argument("--diffusion-iterations", type=int, default=None, help="Jacobi sweeps per diffusion pass")
    parser.add_argument("--radius",   type=float, default=20.0, help="Splat radius in cells")
    parser.add_argument("--strength", type=float, default=1.0,  help="Splat strength at the center")
    parser.add_argument("--log-level", default="WARNING",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"], help="Logging level")
    return parser.parse_args(argv)


if __name__ == "__main__":
    args = parse_args()
    logging.basicConfig(level=getattr(logging, args.log_level),
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    if args.mode == "live":
        run_live(args)
    elif args.mode == "headless":
        run_headless(args)
    elif args.mode == "benchmark":
        run_benchmark(args)
