from dataclasses import replace

import matplotlib.pyplot as plt
import numpy as np
import pytest

from bloodflow import config
from bloodflow.errors import RenderSurfaceError
from bloodflow.physics.pulse import FlowMode, PulseGenerator, PulseMode
from bloodflow.physics.velocity_field import TermMask
from bloodflow.visualization.cylinder_view import CylinderFlowView
from bloodflow.visualization.frame_driver import DriverState
from bloodflow.visualization.pipe_views import LaminarFlowView, PlugFlowView, PulsatileFlowView
from bloodflow.visualization.visualization_core import ensure_render_surface, setup_figure_layout


def run_frames(view, clock, frames=5, dt=0.03):
    view.start(animate=False)
    for _ in range(frames):
        view.driver.tick()
        clock.advance(dt)


def test_missing_axes_raise():
    with pytest.raises(RenderSurfaceError):
        LaminarFlowView(None)


def test_cylinder_needs_3d_axes(ax2d):
    with pytest.raises(RenderSurfaceError):
        CylinderFlowView(ax2d)


def test_ensure_render_surface_returns_figure(ax2d):
    assert ensure_render_surface(ax2d) is ax2d.figure


def test_view_lifecycle(ax2d, rng, clock):
    view = LaminarFlowView(ax2d, num_particles=50, rng=rng, clock=clock)
    assert view.state is DriverState.IDLE
    assert view.system is None
    view.start(animate=False)
    assert view.state is DriverState.RUNNING
    view.dispose()
    assert view.state is DriverState.DISPOSED
    before = view.system['axial_positions'].copy()
    clock.advance(0.1)
    view.driver.tick()
    np.testing.assert_array_equal(view.system['axial_positions'], before)


def test_laminar_particles_stay_in_pipe(ax2d, rng, clock):
    view = LaminarFlowView(ax2d, num_particles=200, rng=rng, clock=clock)
    run_frames(view, clock, frames=20, dt=0.1)
    x0, x1 = view.pipe_extent(view.params.length)
    positions = view.system['axial_positions']
    assert np.all((positions >= x0) & (positions < x1))
    assert np.all(np.abs(view.system['radial_offsets']) <= view.params.radius)
    offsets = view.particles.get_offsets()
    assert offsets.shape == (200, 2)


def test_laminar_follows_parameter_changes(ax2d, rng, clock):
    view = LaminarFlowView(ax2d, num_particles=200, rng=rng, clock=clock)
    run_frames(view, clock, frames=2)
    view.params = replace(view.params, radius=15, length=40)
    run_frames(view, clock, frames=2)
    x0, x1 = view.pipe_extent(40)
    assert view.system['domain'] == (x0, x1)
    assert np.all(np.abs(view.system['radial_offsets']) <= 15)
    assert 'L = 40' in view.flow_text.get_text()


def test_laminar_pipe_length_follows_l(ax2d):
    view = LaminarFlowView(ax2d)
    x0, x1 = view.pipe_extent(100)
    assert x1 - x0 == pytest.approx(config.LAMINAR_CANVAS[0] * config.PIPE_FILL_FRACTION)
    x0, x1 = view.pipe_extent(0.001)
    assert x1 - x0 == pytest.approx(2.0)


def test_laminar_formula_follows_mask(ax2d, rng, clock):
    view = LaminarFlowView(ax2d, num_particles=10, rng=rng, clock=clock)
    view.params = replace(view.params, terms=TermMask().with_term('viscosity', False))
    run_frames(view, clock, frames=1)
    assert r'\mu' not in view.formula_text.get_text()


def test_laminar_vectors_toggle(ax2d, rng, clock):
    view = LaminarFlowView(ax2d, num_particles=10, rng=rng, clock=clock)
    run_frames(view, clock, frames=1)
    assert view.vectors.get_visible()
    assert len(view.vectors.get_segments()) > 0
    view.show_vectors = False
    run_frames(view, clock, frames=1)
    assert not view.vectors.get_visible()


def test_laminar_degenerate_parameters_do_not_move(ax2d, rng, clock):
    view = LaminarFlowView(ax2d, num_particles=30, rng=rng, clock=clock)
    view.start(animate=False)
    view.params = replace(view.params, viscosity=0.0)
    view.driver.tick()
    before = view.system['axial_positions'].copy()
    clock.advance(0.1)
    view.driver.tick()
    np.testing.assert_array_equal(view.system['axial_positions'], before)


def test_pulsatile_view_runs(ax2d, rng, clock):
    view = PulsatileFlowView(ax2d, num_particles=100, rng=rng, clock=clock)
    run_frames(view, clock, frames=10, dt=0.05)
    assert view.pulse_state.elapsed == pytest.approx(0.45)
    positions = view.system['axial_positions']
    assert np.all((positions >= view.x0) & (positions < view.x1))
    assert view.modifier_text.get_text().startswith('ΔP_mod = ΔP * ')
    assert 'Startup Ramp' in view.ramp_text.get_text()


def test_pulsatile_ramp_readout_disappears(ax2d, rng):
    view = PulsatileFlowView(ax2d, num_particles=10, rng=rng)
    view.start(fixed_dt=0.25, animate=False)
    for _ in range(10):
        view.driver.tick()
    assert view.ramp_text.get_text() == ''


def test_pulsatile_effective_parameters(ax2d):
    generator = PulseGenerator(mode=PulseMode.FOURIER)
    view = PulsatileFlowView(ax2d, generator=generator)
    params, profile_scale = view.effective_parameters(1.5)
    assert params.pressure_drop == pytest.approx(config.PULSATILE_PRESSURE * 1.5)
    assert profile_scale == 1.0

    generator.mode = PulseMode.PIECEWISE
    params, profile_scale = view.effective_parameters(1.5)
    assert params.pressure_drop == pytest.approx(config.PULSATILE_PRESSURE)
    assert profile_scale == 1.5

    view.flow_mode = FlowMode.OSCILLATION_ONLY
    params, _ = view.effective_parameters(0.5)
    assert params.pressure_drop == pytest.approx(config.OSCILLATION_BASE_PRESSURE)


def test_pulsatile_reset_restarts_clocks(ax2d, rng, clock):
    view = PulsatileFlowView(ax2d, num_particles=10, rng=rng, clock=clock)
    run_frames(view, clock, frames=5)
    view.reset()
    assert view.pulse_state.elapsed == 0.0
    assert view.pulse_state.phase_time == 0.0


def test_plug_flow_moves_uniformly(ax2d, rng):
    view = PlugFlowView(ax2d, pressure=10, num_particles=50, rng=rng)
    view.start(fixed_dt=0.1, animate=False)
    view.system['axial_positions'][:] = 100.0
    view.driver.tick()
    expected = 100.0 + 10 * config.PLUG_VELOCITY_GAIN * 0.1
    np.testing.assert_allclose(view.system['axial_positions'], expected)


def test_plug_flow_wraps(ax2d, rng):
    view = PlugFlowView(ax2d, pressure=100, num_particles=50, rng=rng)
    view.start(fixed_dt=0.25, animate=False)
    for _ in range(40):
        view.driver.tick()
    positions = view.system['axial_positions']
    assert np.all((positions >= 0) & (positions < config.PLUG_CANVAS[0]))


def test_cylinder_view_runs(ax3d, rng, clock):
    view = CylinderFlowView(ax3d, num_particles=400, rng=rng, clock=clock)
    run_frames(view, clock, frames=3)
    total = sum(len(line.get_data_3d()[0]) for line in view.bands)
    assert total == 400
    assert view.uniforms.time == pytest.approx(0.06)
    view.params = replace(view.params, radius=40)
    run_frames(view, clock, frames=1)
    assert view.uniforms.radius == 40
    view.dispose()
    assert view.state is DriverState.DISPOSED


def test_setup_figure_layout_kinds():
    fig, ax = setup_figure_layout('cylinder')
    assert ax.name == '3d'
    plt.close(fig)
    fig, ax = setup_figure_layout('laminar', with_controls=False)
    assert ax.name == 'rectilinear'
    plt.close(fig)
