"""
3D cylinder particle field.

Particles in the 3D view never carry per-frame state: every position is a
closed-form function of the particle's seed data and the uniform set of the
frame, z = (z0 + v(r) · t / L_visual) mod 1. The positions are evaluated on
the host with numpy and handed to the renderer as one buffer.
"""

from dataclasses import dataclass

import numpy as np

from .. import config


@dataclass
class CylinderUniforms:
    """Scalars uploaded once per frame."""
    time: float = 0.0
    radius: float = config.PULSATILE_RADIUS
    pressure: float = config.PULSATILE_PRESSURE
    viscosity: float = config.PULSATILE_VISCOSITY
    length: float = config.PULSATILE_LENGTH
    velocity_scale: float = config.CYLINDER_VELOCITY_SCALE

    @property
    def visual_radius(self) -> float:
        return self.radius * config.CYLINDER_RADIUS_SCALE

    @property
    def visual_length(self) -> float:
        return max(self.length * config.CYLINDER_LENGTH_SCALE, 1.0)


def create_particle_data(num_particles=None, rng=None) -> np.ndarray:
    """
    Seed data per particle: (r_normalized, theta, z_normalized, random_offset).

    r is drawn as sqrt(u) so particles are uniform over the cross-section
    area rather than crowding the axis.
    """
    if num_particles is None:
        num_particles = config.CYLINDER_NUM_PARTICLES
    if rng is None:
        rng = np.random.default_rng()
    data = np.empty((num_particles, 4))
    data[:, 0] = np.sqrt(rng.random(num_particles))
    data[:, 1] = rng.random(num_particles) * 2.0 * np.pi
    data[:, 2] = rng.random(num_particles)
    data[:, 3] = rng.random(num_particles)
    return data


def cylinder_velocity(uniforms: CylinderUniforms, r_norm: np.ndarray) -> np.ndarray:
    """Poiseuille velocity on normalized radius, with a floored denominator."""
    denom = max(4.0 * uniforms.viscosity * uniforms.length, config.CYLINDER_MIN_DENOMINATOR)
    R = uniforms.radius
    velocity = (uniforms.pressure / denom) * (R * R) * (1.0 - r_norm * r_norm) * uniforms.velocity_scale
    return np.where(np.isfinite(velocity), velocity, 0.0)


def cylinder_positions(particle_data: np.ndarray, uniforms: CylinderUniforms):
    """
    Evaluate all particle positions for one frame.

    Returns:
        tuple: (positions, velocity) where positions has shape (N, 3) with
        the pipe axis in column 0, centered on 0 and spanning the visual length
    """
    r_norm = particle_data[:, 0]
    theta = particle_data[:, 1]
    z_start = particle_data[:, 2]

    visual_length = uniforms.visual_length
    velocity = cylinder_velocity(uniforms, r_norm)

    z_current = np.mod(z_start + velocity * uniforms.time / visual_length, 1.0)
    axial = (z_current - 0.5) * visual_length
    r_world = r_norm * uniforms.visual_radius

    positions = np.column_stack((axial, r_world * np.sin(theta), r_world * np.cos(theta)))
    return positions, velocity
