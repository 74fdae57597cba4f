import numpy as np
import pytest

from fluid2d.errors import ConfigurationError, GridShapeError
from fluid2d.solver import compute_divergence, jacobi_pressure_sweep, subtract_pressure_gradient


def linear_field(N, a_x, b_x, a_y, b_y):
    ix, iy = np.meshgrid(np.arange(N, dtype=np.float32),
                         np.arange(N, dtype=np.float32), indexing="ij")
    return (a_x * ix + b_x).astype(np.float32), (a_y * iy + b_y).astype(np.float32)


def test_divergence_of_linear_field_matches_closed_form():
    N = 32
    a_x, a_y = 0.3, -0.7
    vel_x, vel_y = linear_field(N, a_x, 1.5, a_y, -2.0)

    div = compute_divergence(vel_x, vel_y)

    # Interior: central differences of a linear function are exact.
    expected = -0.5 * (2 * a_x + 2 * a_y) / N
    np.testing.assert_allclose(div[1:-1, 1:-1], expected, atol=1e-4)

    # x = 0 edge: the left neighbor clamps to the cell itself.
    expected_edge = -0.5 * (a_x + 2 * a_y) / N
    np.testing.assert_allclose(div[0, 1:-1], expected_edge, atol=1e-4)


def test_divergence_of_uniform_field_is_zero():
    vel = np.full((16, 16), 2.0, dtype=np.float32)
    div = compute_divergence(vel, vel)
    assert not div.any()


def test_divergence_writes_into_out():
    vel_x, vel_y = linear_field(8, 1.0, 0.0, 1.0, 0.0)
    out = np.full((8, 8), 99.0, dtype=np.float32)
    assert compute_divergence(vel_x, vel_y, out=out) is out
    assert out[4, 4] == pytest.approx(-2.0 / 8)


def test_pressure_sweep_zero_is_fixed_point():
    zeros = np.zeros((32, 32), dtype=np.float32)
    p = jacobi_pressure_sweep(zeros, zeros)
    assert not p.any()


def test_pressure_sweep_matches_formula():
    rng = np.random.default_rng(2)
    pressure = rng.random((8, 8)).astype(np.float32)
    div = rng.random((8, 8)).astype(np.float32)

    out = jacobi_pressure_sweep(pressure, div)

    x, y = 2, 5
    expected = (div[x, y] + pressure[x - 1, y] + pressure[x + 1, y] +
                pressure[x, y - 1] + pressure[x, y + 1]) / 4
    assert out[x, y] == pytest.approx(expected, rel=1e-5)

    expected_corner = (div[7, 7] + pressure[6, 7] + pressure[7, 7] +
                       pressure[7, 6] + pressure[7, 7]) / 4
    assert out[7, 7] == pytest.approx(expected_corner, rel=1e-5)


def test_pressure_sweep_keeps_uniform_guess_with_zero_divergence():
    pressure = np.full((8, 8), 0.25, dtype=np.float32)
    out = jacobi_pressure_sweep(pressure, np.zeros_like(pressure))
    np.testing.assert_allclose(out, 0.25)


def test_repeated_sweeps_reduce_poisson_residual():
    N = 16
    div = np.zeros((N, N), dtype=np.float64)
    div[6, 6], div[9, 9] = 1.0, -1.0

    def residual(p):
        padded = np.pad(p, 1, mode="edge")
        nb = padded[:-2, 1:-1] + padded[2:, 1:-1] + padded[1:-1, :-2] + padded[1:-1, 2:]
        return np.abs(4 * p - nb - div).max()

    p = np.zeros_like(div)
    first = residual(jacobi_pressure_sweep(p, div))
    for _ in range(200):
        p = jacobi_pressure_sweep(p, div)
    assert residual(p) < first


def test_gradient_subtraction_per_axis():
    N = 16
    beta = 0.01
    ix, iy = np.meshgrid(np.arange(N, dtype=np.float32),
                         np.arange(N, dtype=np.float32), indexing="ij")
    pressure = (beta * ix).astype(np.float32)
    velocity = np.ones((N, N), dtype=np.float32)

    corrected_x = subtract_pressure_gradient(velocity, pressure, "x")
    # Interior: 0.5 * N * (p[x+1] - p[x-1]) = N * beta
    np.testing.assert_allclose(corrected_x[1:-1, :], 1.0 - N * beta, rtol=1e-5)
    # Edges see half the difference because of clamping.
    np.testing.assert_allclose(corrected_x[0, :], 1.0 - 0.5 * N * beta, rtol=1e-5)

    # Pressure only varies along x, so the y pass leaves velocity alone.
    corrected_y = subtract_pressure_gradient(velocity, pressure, "y")
    np.testing.assert_allclose(corrected_y, 1.0)


def test_gradient_subtraction_rejects_unknown_axis():
    grid = np.zeros((4, 4), dtype=np.float32)
    with pytest.raises(ConfigurationError):
        subtract_pressure_gradient(grid, grid, "z")


def test_kernels_reject_mismatched_grids():
    a = np.zeros((8, 8), dtype=np.float32)
    b = np.zeros((6, 6), dtype=np.float32)
    with pytest.raises(GridShapeError):
        compute_divergence(a, b)
    with pytest.raises(GridShapeError):
        jacobi_pressure_sweep(a, b)
    with pytest.raises(GridShapeError):
        subtract_pressure_gradient(a, a, "x", out=b)
