import numpy as np
import pytest

from bloodflow import config
from bloodflow.physics.cylinder_particles import (
    CylinderUniforms,
    create_particle_data,
    cylinder_positions,
    cylinder_velocity,
)


def test_particle_data_layout(rng):
    data = create_particle_data(1000, rng)
    assert data.shape == (1000, 4)
    assert np.all((data[:, 0] >= 0) & (data[:, 0] <= 1))
    assert np.all((data[:, 1] >= 0) & (data[:, 1] < 2 * np.pi))
    assert np.all((data[:, 2] >= 0) & (data[:, 2] < 1))


def test_radii_uniform_over_area(rng):
    data = create_particle_data(20000, rng)
    # Half of the area lies inside r = 1/sqrt(2)
    inside = np.mean(data[:, 0] < 1 / np.sqrt(2))
    assert inside == pytest.approx(0.5, abs=0.02)


def test_velocity_peaks_on_axis_and_vanishes_at_wall():
    uniforms = CylinderUniforms()
    v = cylinder_velocity(uniforms, np.array([0.0, 0.5, 1.0]))
    expected_peak = 100 / (4 * 10 * 50) * 100 ** 2 * config.CYLINDER_VELOCITY_SCALE
    assert v[0] == pytest.approx(expected_peak)
    assert v[2] == pytest.approx(0.0)
    assert v[0] > v[1] > v[2]


def test_denominator_floor():
    uniforms = CylinderUniforms(viscosity=0.0)
    v = cylinder_velocity(uniforms, np.array([0.0]))
    assert np.isfinite(v[0])


def test_positions_at_time_zero(rng):
    data = create_particle_data(200, rng)
    uniforms = CylinderUniforms(time=0.0)
    positions, _ = cylinder_positions(data, uniforms)
    assert positions.shape == (200, 3)
    np.testing.assert_allclose(positions[:, 0], (data[:, 2] - 0.5) * uniforms.visual_length)
    radial = np.hypot(positions[:, 1], positions[:, 2])
    np.testing.assert_allclose(radial, data[:, 0] * uniforms.visual_radius)


def test_positions_stay_inside_vessel(rng):
    data = create_particle_data(500, rng)
    for t in (0.0, 0.7, 13.0, 250.0):
        uniforms = CylinderUniforms(time=t)
        positions, _ = cylinder_positions(data, uniforms)
        half = uniforms.visual_length / 2
        assert np.all((positions[:, 0] >= -half) & (positions[:, 0] < half))


def test_wall_particles_do_not_move():
    data = np.array([[1.0, 0.0, 0.25, 0.0]])
    start, _ = cylinder_positions(data, CylinderUniforms(time=0.0))
    later, _ = cylinder_positions(data, CylinderUniforms(time=5.0))
    np.testing.assert_allclose(start, later, atol=1e-9)


def test_visual_length_floor():
    assert CylinderUniforms(length=0.001).visual_length == 1.0
