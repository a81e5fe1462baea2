"""
3D cylinder view for bloodflow.

Renders laminar flow inside a translucent vessel. Particle positions are a
closed-form function of time (see physics.cylinder_particles), so a frame only
refreshes the uniforms and re-evaluates the whole buffer.
"""

import logging

import numpy as np

from .. import config
from ..physics.cylinder_particles import CylinderUniforms, create_particle_data, cylinder_positions
from ..physics.velocity_field import FlowParameters
from . import color_system as colors
from .pipe_views import FlowView

logger = logging.getLogger(__name__)


class CylinderFlowView(FlowView):
    """Particles drifting through a 3D vessel at the Poiseuille velocity."""

    title = "3D Laminar Flow"
    requires_3d = True

    def __init__(self, ax, params=None, num_particles=None, rng=None, clock=None):
        if num_particles is None:
            num_particles = config.CYLINDER_NUM_PARTICLES
        super().__init__(ax, num_particles, rng, clock)
        if params is None:
            params = FlowParameters(config.PULSATILE_RADIUS, config.PULSATILE_PRESSURE,
                                    config.PULSATILE_VISCOSITY, config.PULSATILE_LENGTH)
        self.params = params
        self.uniforms = CylinderUniforms()
        self._band_masks = []
        self._vessel = None
        self._vessel_key = None

        ax.set_title(self.title, fontsize=14, color=colors.TEXT_COLOR, weight='bold')
        ax.set_xlabel('axis')
        # One line per radial band, each drawn with its own shade
        edges = np.linspace(0.0, 1.0, config.CYLINDER_SHADE_BANDS + 1)
        shades = colors.radial_shading(0.5 * (edges[:-1] + edges[1:]))
        self.band_edges = edges
        self.bands = []
        for shade in shades:
            line, = ax.plot([], [], [], linestyle='none', marker='o',
                            markersize=config.CYLINDER_MARKER_SIZE, color=tuple(shade))
            self.bands.append(line)

    def reset(self):
        self.system = create_particle_data(self.num_particles, self.rng)
        band = np.clip(np.digitize(self.system[:, 0], self.band_edges) - 1,
                       0, len(self.bands) - 1)
        self._band_masks = [band == i for i in range(len(self.bands))]

    def upload_uniforms(self, elapsed):
        """Copy the current parameters into the per-frame uniform set."""
        params = self.params
        uniforms = self.uniforms
        uniforms.time = elapsed
        uniforms.radius = params.radius
        uniforms.pressure = params.pressure_drop
        uniforms.viscosity = params.viscosity
        uniforms.length = params.length
        return uniforms

    def step(self, dt, elapsed):
        uniforms = self.upload_uniforms(elapsed)
        positions, _ = cylinder_positions(self.system, uniforms)
        for line, mask in zip(self.bands, self._band_masks):
            pts = positions[mask]
            line.set_data_3d(pts[:, 0], pts[:, 1], pts[:, 2])
        self._update_vessel(uniforms)
        return self.artists

    def _update_vessel(self, uniforms):
        key = (uniforms.visual_radius, uniforms.visual_length)
        if key == self._vessel_key:
            return
        if self._vessel is not None:
            self._vessel.remove()

        radius, length = key
        axial = np.linspace(-length / 2, length / 2, 2)
        theta = np.linspace(0.0, 2.0 * np.pi, 40)
        axial_grid, theta_grid = np.meshgrid(axial, theta)
        self._vessel = self.ax.plot_surface(axial_grid, radius * np.sin(theta_grid),
                                            radius * np.cos(theta_grid),
                                            color=colors.VESSEL_COLOR, alpha=colors.VESSEL_ALPHA,
                                            linewidth=0, shade=False)

        extent = max(length / 2, radius) * 1.1
        self.ax.set_xlim(-extent, extent)
        self.ax.set_ylim(-extent, extent)
        self.ax.set_zlim(-extent, extent)
        self._vessel_key = key
        logger.debug("Vessel redrawn (radius=%.3g, length=%.3g)", radius, length)

    @property
    def artists(self):
        artists = list(self.bands)
        if self._vessel is not None:
            artists.append(self._vessel)
        return artists
