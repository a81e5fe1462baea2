"""
Pipe flow views for bloodflow.

Each view owns a 2D axes laid out as a pixel canvas, a particle system and a
frame driver. Controls replace the view's parameters between frames; the next
frame reads the current values, so no parameter is ever cached across frames
except the readouts, which are recomputed whenever the parameters change.
"""

import logging
from dataclasses import replace

import numpy as np
from matplotlib.collections import LineCollection
from matplotlib.patches import Rectangle

from .. import config
from ..physics import particle_system
from ..physics.pulse import FlowMode, PulseGenerator, PulseMode, PulseState, smooth_ramp
from ..physics.velocity_field import (
    FlowParameters, build_velocity_label, flow_rate, laminar_velocity, velocity_profile,
)
from . import color_system as colors
from .frame_driver import FrameDriver
from .visualization_core import PipeArtists, apply_canvas_styling, ensure_render_surface

logger = logging.getLogger(__name__)


class FlowView:
    """
    Common lifecycle of the animated views.

    A view starts idle. start() seeds the particles and registers the frame
    driver; dispose() cancels the driver, after which no frame runs again.
    """

    title = ''
    requires_3d = False

    def __init__(self, ax, num_particles, rng=None, clock=None):
        self.fig = ensure_render_surface(ax, require_3d=self.requires_3d)
        self.ax = ax
        self.num_particles = int(num_particles)
        self.rng = np.random.default_rng() if rng is None else rng
        self.system = None
        if clock is None:
            self.driver = FrameDriver(self.step)
        else:
            self.driver = FrameDriver(self.step, clock=clock)

    @property
    def state(self):
        return self.driver.state

    def start(self, interval=None, frames=None, fixed_dt=None, animate=True):
        """
        Seed the particles and begin animating.

        Args:
            interval (int): Milliseconds between frames
            frames (int): Stop after this many frames; None runs until closed
            fixed_dt (float): Advance by a constant dt per frame (saving to file)
            animate (bool): Create the matplotlib timer; headless callers pass
                False and call driver.tick() themselves

        Returns:
            FuncAnimation or None
        """
        if self.system is None:
            self.reset()
        if fixed_dt is not None:
            self.driver.fixed_dt = fixed_dt
        logger.info("Starting %s with %d particles", type(self).__name__, self.num_particles)
        return self.driver.start(self.fig if animate else None, interval=interval, frames=frames)

    def dispose(self):
        self.driver.cancel()

    def reset(self):
        raise NotImplementedError

    def step(self, dt, elapsed):
        raise NotImplementedError


class LaminarFlowView(FlowView):
    """Steady Poiseuille flow with profile overlay, vectors and formula."""

    title = "Laminar Flow: Poiseuille Profile"

    def __init__(self, ax, params=None, show_vectors=True, num_particles=None, rng=None, clock=None):
        if num_particles is None:
            num_particles = config.LAMINAR_NUM_PARTICLES
        super().__init__(ax, num_particles, rng, clock)
        if params is None:
            params = FlowParameters(config.DEFAULT_RADIUS, config.DEFAULT_PRESSURE,
                                    config.DEFAULT_VISCOSITY, config.DEFAULT_LENGTH)
        self.params = params
        self.show_vectors = show_vectors
        self.width, self.height = config.LAMINAR_CANVAS
        self.center_y = self.height / 2
        self._readout_params = None
        self._init_artists()

    def _init_artists(self):
        ax = self.ax
        apply_canvas_styling(ax, self.width, self.height, self.title)
        self.pipe = PipeArtists(ax)
        self.particles = ax.scatter([], [], s=config.PARTICLE_SIZE, color=colors.PARTICLE_COLOR,
                                    linewidths=0, zorder=5)
        self.profile_line, = ax.plot([], [], color=colors.PROFILE_COLOR, alpha=colors.PROFILE_ALPHA,
                                     linewidth=2, zorder=6)
        vector_rgba = colors.with_alpha(colors.VECTOR_COLOR, colors.VECTOR_ALPHA)
        self.vectors = LineCollection([], colors=[vector_rgba], linewidths=1, zorder=6)
        ax.add_collection(self.vectors)
        self.vector_heads = ax.scatter([], [], marker='>', s=12, color=[vector_rgba],
                                       linewidths=0, zorder=6)
        self.formula_text = ax.text(10, self.height - 10, '', ha='left', va='top',
                                    fontsize=12, color=colors.TEXT_COLOR)
        self.flow_text = ax.text(10, 10, '', ha='left', va='bottom', fontsize=9,
                                 family='monospace', color=colors.TEXT_COLOR)

    def pipe_extent(self, length):
        """Horizontal extent (x0, x1) of the pipe; its drawn length follows L."""
        full = self.width * config.PIPE_FILL_FRACTION
        if np.isfinite(length):
            pipe_px = min(max(2.0, (length / 100.0) * full), full)
        else:
            pipe_px = full
        center_x = self.width / 2
        return center_x - pipe_px / 2, center_x + pipe_px / 2

    def velocity_at(self, params, r):
        """Particle velocity in canvas units per second."""
        return laminar_velocity(params, r, v_scale=config.LAMINAR_VELOCITY_SCALE) * config.LAMINAR_TIME_GAIN

    def reset(self):
        x0, x1 = self.pipe_extent(self.params.length)
        self.system = particle_system.create_particles(self.num_particles, self.params.radius,
                                                       (x0, x1), self.rng)

    def step(self, dt, elapsed):
        params = self.params
        radius = max(float(params.radius), 0.0)
        x0, x1 = self.pipe_extent(params.length)
        if self.system['domain'] != (x0, x1):
            particle_system.set_domain(self.system, (x0, x1))

        particle_system.update_particles(self.system, lambda r: self.velocity_at(params, r), dt,
                                         radius=radius, reseed_on_wrap=True)

        self.pipe.update(x0, x1, self.center_y, radius)
        self.particles.set_offsets(np.column_stack((self.system['axial_positions'],
                                                    self.center_y + self.system['radial_offsets'])))
        self._update_profile(params, x0, x1, radius)
        self._update_readouts(params)
        return self.artists

    def _update_profile(self, params, x0, x1, radius):
        pipe_px = x1 - x0
        start_x = x0 + min(20.0, pipe_px * 0.2)
        max_vx = max(5.0, x1 - start_x - 5.0)

        r, v = velocity_profile(params, v_scale=config.LAMINAR_VELOCITY_SCALE)
        self.profile_line.set_data(start_x + np.minimum(v, max_vx), self.center_y + r)

        self.vectors.set_visible(self.show_vectors)
        self.vector_heads.set_visible(self.show_vectors)
        if not self.show_vectors:
            return
        r_vec = np.arange(-radius + 5.0, radius, config.VECTOR_STEP)
        v_vec = np.minimum(laminar_velocity(params, r_vec, v_scale=config.LAMINAR_VELOCITY_SCALE), max_vx)
        y_vec = self.center_y + r_vec
        starts = np.column_stack((np.full_like(r_vec, start_x), y_vec))
        ends = np.column_stack((start_x + v_vec, y_vec))
        self.vectors.set_segments(np.stack((starts, ends), axis=1))
        # Arrowheads only where the arrow is long enough to read
        heads = (v_vec > 5.0) & (pipe_px > 30.0)
        self.vector_heads.set_offsets(ends[heads])

    def _update_readouts(self, params):
        if params == self._readout_params:
            return
        self.formula_text.set_text(build_velocity_label(params.terms))
        q = flow_rate(params)
        self.flow_text.set_text(
            f"R = {params.radius:g}   ΔP = {params.pressure_drop:g}   "
            f"μ = {params.viscosity:g}   L = {params.length:g}   Q = {q:.4g}")
        self._readout_params = params

    @property
    def artists(self):
        return self.pipe.artists + [self.particles, self.profile_line, self.vectors,
                                    self.vector_heads, self.formula_text, self.flow_text]


class PulsatileFlowView(FlowView):
    """
    Pulsatile pipe flow with a live waveform plot.

    In Fourier mode the waveform scales the pressure drop; in piecewise mode it
    scales the profile factor. In oscillation-only mode the steady component is
    removed and a fixed base pressure keeps the slosh visible.
    """

    title = "Pulsatile Flow"

    def __init__(self, ax, params=None, generator=None, flow_mode=FlowMode.STEADY_PLUS_PULSE,
                 num_particles=None, rng=None, clock=None):
        if num_particles is None:
            num_particles = config.PULSATILE_NUM_PARTICLES
        super().__init__(ax, num_particles, rng, clock)
        if params is None:
            params = FlowParameters(config.PULSATILE_RADIUS, config.PULSATILE_PRESSURE,
                                    config.PULSATILE_VISCOSITY, config.PULSATILE_LENGTH)
        self.params = params
        self.generator = PulseGenerator() if generator is None else generator
        self.flow_mode = FlowMode(flow_mode)
        self.pulse_state = PulseState()
        self.multiplier = 0.0

        self.width, self.height = config.PULSATILE_CANVAS
        self.center_y = config.PULSATILE_PIPE_CENTER_Y
        pipe_px = self.width * config.PIPE_FILL_FRACTION
        self.x0 = (self.width - pipe_px) / 2
        self.x1 = self.x0 + pipe_px
        self._waveform_key = None
        self._init_artists()

    @property
    def steady(self):
        return self.flow_mode is FlowMode.STEADY_PLUS_PULSE

    def _init_artists(self):
        ax = self.ax
        apply_canvas_styling(ax, self.width, self.height, self.title)
        self.pipe = PipeArtists(ax)
        self.particles = ax.scatter([], [], s=config.PARTICLE_SIZE, color=colors.PARTICLE_COLOR,
                                    linewidths=0, zorder=5)
        self.profile_line, = ax.plot([], [], color=colors.PROFILE_COLOR, linewidth=2, zorder=6)

        base = config.PULSATILE_PLOT_BASE_Y
        unit = config.PULSATILE_PLOT_HEIGHT
        plot_width = self.x1 - self.x0
        self.plot_box = Rectangle((self.x0, base - 1.5 * unit), plot_width, 4 * unit,
                                  facecolor=colors.PLOT_BACKGROUND, edgecolor=colors.PLOT_BORDER, zorder=1)
        ax.add_patch(self.plot_box)
        self.zero_line, = ax.plot([self.x0, self.x1], [base, base], color=colors.PLOT_ZERO_LINE,
                                  linewidth=1, linestyle=(0, (5, 5)), zorder=2)
        ax.text(self.x0, base + 2.5 * unit + 6, "Pressure Multiplier", ha='left', va='bottom',
                fontsize=10, color=colors.TEXT_COLOR)
        self.waveform_line, = ax.plot([], [], color=colors.WAVEFORM_COLOR, linewidth=2, zorder=3)
        self.scan_line, = ax.plot([], [], color=colors.SCAN_LINE_COLOR, linewidth=2, zorder=4)

        self.modifier_text = ax.text(self.x0 + 5, base - 1.5 * unit + 5, '', ha='left', va='bottom',
                                     fontsize=10, family='monospace', color=colors.READOUT_COLOR)
        self.time_text = ax.text(20, self.height - 10, '', ha='left', va='top',
                                 fontsize=10, family='monospace', color=colors.TEXT_COLOR)
        self.ramp_text = ax.text(20, self.height - 28, '', ha='left', va='top',
                                 fontsize=10, family='monospace', color=colors.READOUT_COLOR)

    def reset(self):
        """Restart the pulse clocks and re-seed the particles."""
        self.pulse_state.reset()
        self.system = particle_system.create_particles(self.num_particles, self.params.radius,
                                                       (self.x0, self.x1), self.rng)

    def effective_parameters(self, multiplier):
        """
        Parameters and profile scale that realize a pressure multiplier.

        Returns:
            tuple: (FlowParameters, profile_scale)
        """
        base = self.params.pressure_drop if self.steady else config.OSCILLATION_BASE_PRESSURE
        if self.generator.mode is PulseMode.PIECEWISE:
            return replace(self.params, pressure_drop=base), multiplier
        return replace(self.params, pressure_drop=base * multiplier), 1.0

    def step(self, dt, elapsed):
        generator = self.generator
        self.pulse_state.advance(dt, generator.period)
        self.multiplier = generator.pressure_multiplier(self.pulse_state, self.flow_mode)
        effective, profile_scale = self.effective_parameters(self.multiplier)
        radius = max(float(effective.radius), 0.0)

        def velocity_func(r):
            return laminar_velocity(effective, r, v_scale=config.PULSATILE_VELOCITY_SCALE,
                                    profile_scale=profile_scale)

        particle_system.update_particles(self.system, velocity_func, dt, radius=radius)

        particle_color = colors.STEADY_PARTICLE_COLOR if self.steady else colors.PARTICLE_COLOR
        self.pipe.update(self.x0, self.x1, self.center_y, radius)
        self.particles.set_offsets(np.column_stack((self.system['axial_positions'],
                                                    self.center_y + self.system['radial_offsets'])))
        self.particles.set_color(particle_color)

        profile_x = self.x0 + (self.x1 - self.x0) * 0.2
        r, v = velocity_profile(effective, v_scale=config.PULSATILE_VELOCITY_SCALE,
                                profile_scale=profile_scale)
        self.profile_line.set_data(profile_x + v, self.center_y + r)
        self.profile_line.set_color(colors.STEADY_PROFILE_COLOR if self.steady else colors.PROFILE_COLOR)

        self._update_waveform_plot()
        self._update_readouts()
        return self.artists

    def _update_waveform_plot(self):
        generator = self.generator
        base = config.PULSATILE_PLOT_BASE_Y
        unit = config.PULSATILE_PLOT_HEIGHT
        plot_width = self.x1 - self.x0

        key = (generator.mode, generator.period, generator.amplitude, self.flow_mode)
        if key != self._waveform_key:
            t = np.linspace(0.0, generator.period, int(plot_width) + 1)
            if self.steady:
                values = [generator.waveform(ti) for ti in t]
            else:
                values = [generator.oscillation(ti) for ti in t]
            self.waveform_line.set_data(self.x0 + t / generator.period * plot_width,
                                        base + np.asarray(values) * unit)
            self._waveform_key = key

        scan_x = self.x0 + (self.pulse_state.phase_time / generator.period) * plot_width
        self.scan_line.set_data([scan_x, scan_x], [base - 1.5 * unit, base + 2.5 * unit])

    def _update_readouts(self):
        state = self.pulse_state
        if self.steady:
            self.modifier_text.set_text(f"ΔP_mod = ΔP * {self.multiplier:.3f}")
        else:
            self.modifier_text.set_text(
                f"ΔP_mod = {config.OSCILLATION_BASE_PRESSURE:g} * {self.multiplier:.3f}")
        self.time_text.set_text(f"t = {state.phase_time:.2f}s / {self.generator.period:.1f}s")
        if state.elapsed < config.RAMP_DISPLAY_SECONDS:
            ramp = smooth_ramp(state.elapsed, self.generator.tau)
            self.ramp_text.set_text(f"Startup Ramp: {ramp * 100:.0f}%")
        else:
            self.ramp_text.set_text('')

    @property
    def artists(self):
        return self.pipe.artists + [self.particles, self.profile_line, self.waveform_line,
                                    self.scan_line, self.modifier_text, self.time_text, self.ramp_text]


class PlugFlowView(FlowView):
    """Uniform-velocity plug flow: every particle moves at the same speed."""

    title = "Plug Flow"

    def __init__(self, ax, pressure=None, num_particles=None, rng=None, clock=None):
        if num_particles is None:
            num_particles = config.PLUG_NUM_PARTICLES
        super().__init__(ax, num_particles, rng, clock)
        self.pressure = config.DEFAULT_PLUG_PRESSURE if pressure is None else pressure
        self.width, self.height = config.PLUG_CANVAS
        self.center_y = self.height / 2
        self.pipe_height = max(160.0, min(self.height * 0.7, 220.0))
        self._init_artists()

    def _init_artists(self):
        ax = self.ax
        apply_canvas_styling(ax, self.width, self.height, self.title)
        self.pipe = PipeArtists(ax, show_centerline=False)
        self.pipe.update(0, self.width, self.center_y, self.pipe_height / 2)
        self.particles = ax.scatter([], [], s=config.PARTICLE_SIZE, color=colors.PARTICLE_COLOR,
                                    linewidths=0, zorder=5)
        self.profile_line, = ax.plot([], [], color=colors.PROFILE_COLOR, linewidth=2, zorder=6)
        self.readout_text = ax.text(10, self.height - 6, '', ha='left', va='top', fontsize=10,
                                    family='monospace', color=colors.TEXT_COLOR)

    def velocity(self):
        """Common axial speed in canvas units per second."""
        return float(self.pressure) * config.PLUG_VELOCITY_GAIN

    def reset(self):
        half = self.pipe_height / 2 - config.PLUG_PARTICLE_MARGIN
        self.system = particle_system.create_particles(self.num_particles, half,
                                                       (0.0, float(self.width)), self.rng)

    def step(self, dt, elapsed):
        speed = self.velocity()
        particle_system.update_particles(self.system, lambda r: speed, dt)
        self.particles.set_offsets(np.column_stack((self.system['axial_positions'],
                                                    self.center_y + self.system['radial_offsets'])))

        half = self.pipe_height / 2
        profile_x = config.PLUG_PROFILE_X + float(self.pressure) * config.PLUG_PROFILE_GAIN
        self.profile_line.set_data([profile_x, profile_x], [self.center_y - half, self.center_y + half])
        self.readout_text.set_text(f"ΔP = {self.pressure:g}   v = {speed:.1f}")
        return self.artists

    @property
    def artists(self):
        return self.pipe.artists + [self.particles, self.profile_line, self.readout_text]
