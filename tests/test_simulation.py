import numpy as np
import pytest

from fluid2d import FluidSimulation, SimulationParams, SimulationState, kinetic_energy
from fluid2d.errors import ConfigurationError


@pytest.fixture
def sim():
    s = FluidSimulation(N=32, params=SimulationParams(dt=0.01, viscosity=0.001,
                                                      iteration_count=3, pressure_iterations=10))
    s.seed(radius=6.0)
    return s


@pytest.mark.parametrize("N", [0, -1])
def test_bad_resolution_is_fatal(N):
    with pytest.raises(ConfigurationError):
        FluidSimulation(N=N)


def test_params_must_be_simulation_params():
    with pytest.raises(ConfigurationError):
        FluidSimulation(N=8, params={"dt": 0.1})


def test_seed_writes_both_components_at_center():
    s = FluidSimulation(N=64)
    s.seed()
    vx, vy = s.current_velocity()
    assert vx[32, 32] == pytest.approx(1.0)
    np.testing.assert_array_equal(vx, vy)
    assert vx[0, 0] == 0.0
    assert s.buffer_state == (1, 1, 0)


def test_seed_single_component():
    s = FluidSimulation(N=16)
    s.seed(radius=4.0, components=("x",))
    vx, vy = s.current_velocity()
    assert vx.any()
    assert not vy.any()


def test_state_machine(sim):
    assert sim.state is SimulationState.IDLE
    sim.step()
    assert sim.state is SimulationState.SETTLED
    sim.reset()
    assert sim.state is SimulationState.IDLE
    assert sim.steps == 0
    assert not sim.current_velocity()[0].any()


def test_step_flips_buffers(sim):
    before = sim.buffer_state
    sim.step()
    after = sim.buffer_state
    # Diffusion + correction: two flips per velocity component.
    assert after.active_x == before.active_x
    assert after.active_y == before.active_y
    # Ten pressure sweeps: even number of flips.
    assert after.active_pressure == before.active_pressure

    sim.step(sim.params.replace(pressure_iterations=3))
    assert sim.buffer_state.active_pressure != before.active_pressure


def test_step_never_changes_shape(sim):
    for _ in range(4):
        sim.advance_frame()
    vx, vy = sim.current_velocity()
    assert vx.shape == vy.shape == (32, 32)
    assert sim.pressure.shape == (32, 32)
    assert sim.divergence.shape == (32, 32)


def test_current_velocity_is_read_only(sim):
    vx, _ = sim.current_velocity()
    with pytest.raises(ValueError):
        vx[0, 0] = 1.0


def test_pressure_is_warm_started(sim):
    sim.step()
    p1 = np.array(sim.pressure.read())
    assert p1.any()

    # With no sweeps the pressure must still be last step's result.
    sim.step(sim.params.replace(pressure_iterations=0))
    np.testing.assert_array_equal(sim.pressure.read(), p1)


def test_projection_reduces_divergence(sim):
    sim.params = sim.params.replace(pressure_iterations=60)
    first = sim.step()["divergence_max"]
    sim.step()
    second = sim.step()["divergence_max"]
    assert second < first


def test_advance_frame_runs_iteration_count_steps(sim):
    metrics = sim.advance_frame()
    assert len(metrics) == 3
    assert sim.steps == 3
    assert sim.frame == 1
    assert len(sim.perf_log) == 3
    assert metrics[-1]["energy"] == pytest.approx(kinetic_energy(*sim.current_velocity()))


def test_advance_frame_honours_runtime_params(sim):
    sim.params = sim.params.replace(iteration_count=1)
    assert len(sim.advance_frame()) == 1
    with pytest.raises(ConfigurationError):
        sim.params = "not params"


def test_instances_are_independent():
    a = FluidSimulation(N=16)
    b = FluidSimulation(N=16)
    a.seed(radius=4.0)
    a.step()
    assert not b.current_velocity()[0].any()
    assert b.buffer_state == (0, 0, 0)


def test_corner_splat_runs_without_error():
    s = FluidSimulation(N=32, params=SimulationParams(dt=0.01, viscosity=0.01))
    s.seed(center_x=0, center_y=0, radius=10.0)
    for _ in range(3):
        s.step()
    vx, vy = s.current_velocity()
    assert np.all(np.isfinite(vx))
    assert np.all(np.isfinite(vy))


def test_status_mentions_frame(sim):
    sim.advance_frame()
    text = sim.status()
    assert "Frame: 1" in text
    assert "Energy" in text
