"""
visualizer.py — Velocity Magnitude Viewer
==========================================
Renders |v| = sqrt(vx² + vy²) of the solver's current velocity as a
grayscale image, clamped to [0, 1] the way a float render target would
be when presented.

Uses matplotlib FuncAnimation for real-time updates. Each animation
frame advances the solver by one frame (iteration_count steps).
"""

import logging

import numpy as np
import matplotlib.pyplot as plt
import matplotlib.animation as animation

from fluid2d import velocity_magnitude

logger = logging.getLogger(__name__)


def magnitude_image(vel_x: np.ndarray, vel_y: np.ndarray) -> np.ndarray:
    """
    Display image for one frame: speed clamped to [0, 1], transposed so
    X runs horizontally (use with origin='lower').
    """
    return np.clip(velocity_magnitude(vel_x, vel_y), 0.0, 1.0).T


class FluidVisualizer:
    """
    Real-time magnitude viewer of the fluid simulation.

    Usage (standalone):
        from fluid2d import FluidSimulation
        from visualizer import FluidVisualizer

        sim = FluidSimulation(N=128)
        sim.seed()
        viz = FluidVisualizer(sim)
        viz.run()  # Opens live window
    """

    def __init__(self, simulation):
        self.sim = simulation
        self.N = simulation.N
        self._setup_figure()

    def _setup_figure(self):
        self.fig, self.ax = plt.subplots(figsize=(6, 6))
        self.fig.patch.set_facecolor('#0a0a0a')

        self.ax.set_facecolor('#0a0a0a')
        self.ax.set_xticks([])
        self.ax.set_yticks([])
        for spine in self.ax.spines.values():
            spine.set_edgecolor('#333333')

        self.img = self.ax.imshow(
            magnitude_image(*self.sim.current_velocity()),
            cmap='gray',
            vmin=0, vmax=1.0,
            interpolation='nearest',
            origin='lower',
            aspect='equal'
        )

        self.title_text = self.fig.suptitle(
            "Velocity magnitude — Frame 0",
            color='#cccccc', fontsize=10, fontfamily='monospace'
        )
        plt.tight_layout()

    def update(self, frame_num):
        """Called by FuncAnimation each frame. Steps sim and updates the image."""
        metrics = self.sim.advance_frame()

        self.img.set_data(magnitude_image(*self.sim.current_velocity()))

        if metrics:
            last = metrics[-1]
            frame_ms = sum(m["total_ms"] for m in metrics)
            self.title_text.set_text(
                f"Velocity magnitude — Frame {self.sim.frame} | "
                f"{frame_ms:.1f}ms | div_max={last['divergence_max']:.2e} | "
                f"E={last['energy']:.4f}"
            )
        return [self.img, self.title_text]

    def run(self, fps: int = 60, frames: int = None):
        """
        Start the live animation window.

        Args:
            fps    : Target animation frame rate
            frames : Total frames to render (None = until the window closes)
        """
        interval_ms = max(1, 1000 // fps)
        self.anim = animation.FuncAnimation(
            self.fig,
            self.update,
            frames=frames,
            interval=interval_ms,
            blit=False,
            cache_frame_data=False
        )
        plt.show()

    def save_gif(self, path: str = "velocity.gif", fps: int = 30, frames: int = 100):
        """Save animation as a GIF (for reports and demos)."""
        logger.info("Rendering %d frames to %s", frames, path)
        self.anim = animation.FuncAnimation(
            self.fig, self.update, frames=frames, interval=1000 // fps, blit=False
        )
        writer = animation.PillowWriter(fps=fps)
        self.anim.save(path, writer=writer)
        logger.info("Saved: %s", path)
