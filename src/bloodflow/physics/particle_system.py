"""
Particle system module for bloodflow.

This module handles particle advection along the pipe axis using simple Euler
integration, wraparound at the pipe ends, and re-sampling of radial offsets
that no longer fit inside the current pipe radius.
"""

import logging

import numpy as np

from .. import config

logger = logging.getLogger(__name__)


def create_particles(num_particles, radius, domain, rng=None):
    """
    Create a particle system spread uniformly over the pipe.

    Args:
        num_particles (int): Number of particles to create
        radius (float): Current pipe radius; offsets are drawn from [-R, R]
        domain (tuple): (start, end) of the axial domain
        rng (np.random.Generator, optional): Random source, for reproducible runs

    Returns:
        dict: Particle system dictionary with positions, offsets, domain, etc.
    """
    if rng is None:
        rng = np.random.default_rng()
    start, end = domain
    if not end > start:
        raise ValueError(f"Empty particle domain: {domain}")

    radius = max(float(radius), 0.0)
    system = {
        'axial_positions': rng.uniform(start, end, size=num_particles),
        'radial_offsets': rng.uniform(-radius, radius, size=num_particles),
        'domain': (float(start), float(end)),
        'radius': radius,
        'last_velocity': np.zeros(num_particles),
        'rng': rng,
    }
    return system


def set_domain(system, domain):
    """Move the axial domain; particles outside it are wrapped on the next update."""
    start, end = domain
    if not end > start:
        raise ValueError(f"Empty particle domain: {domain}")
    system['domain'] = (float(start), float(end))


def wrap_positions(positions, start, end):
    """
    Wrap axial positions into [start, end).

    Particles leaving the far end re-enter at the start and vice versa, keeping
    the overshoot so the stream stays evenly spaced.
    """
    length = end - start
    if not length > 0:
        raise ValueError(f"Empty particle domain: ({start}, {end})")
    wrapped = start + np.mod(np.asarray(positions, dtype=float) - start, length)
    # np.mod may round a tiny negative overshoot up to exactly `length`
    return np.where(wrapped >= end, start, wrapped)


def resample_radial_offsets(system, radius=None):
    """
    Re-draw radial offsets that exceed the pipe radius.

    Used after the radius shrinks under live particles. The new offset keeps
    the side of the centerline and is uniform in magnitude, so the radial
    distribution stays uniform instead of piling up at the wall.

    Returns:
        int: Number of particles re-sampled
    """
    if radius is None:
        radius = system['radius']
    radius = max(float(radius), 0.0)
    offsets = system['radial_offsets']
    outside = np.abs(offsets) > radius
    count = int(np.count_nonzero(outside))
    if count:
        signs = np.sign(offsets[outside])
        signs[signs == 0] = 1.0
        offsets[outside] = signs * system['rng'].uniform(0.0, radius, size=count)
    return count


def euler_step(pos, dt, get_vel_func):
    """
    Simple Euler integration step.

    Args:
        pos (np.ndarray): Current positions
        dt (float): Time step
        get_vel_func (callable): Function to get velocity at positions

    Returns:
        tuple: (new_position, velocity)
    """
    velocity = get_vel_func(pos)
    new_pos = pos + velocity * dt
    return new_pos, velocity


def update_particles(system, velocity_func, dt, radius=None, max_speed=None,
                     reseed_on_wrap=False):
    """
    Advance all particles by one frame.

    Args:
        system (dict): Particle system dictionary
        velocity_func (callable): Maps an array of radial offsets to axial
            velocities (a scalar is broadcast, e.g. plug flow)
        dt (float): Time step in seconds, must be >= 0
        radius (float, optional): Current pipe radius; updates the system
        max_speed (float, optional): Velocity magnitude cap
        reseed_on_wrap (bool): Draw a fresh radial offset for particles that
            leave the far end of the pipe

    Returns:
        np.ndarray: Per-particle velocities used for this step
    """
    if dt < 0:
        raise ValueError(f"Time step must be non-negative, got {dt}")
    if radius is not None:
        system['radius'] = max(float(radius), 0.0)
    if max_speed is None:
        max_speed = config.MAX_SAFE_VELOCITY

    resampled = resample_radial_offsets(system)
    if resampled:
        logger.debug("Re-sampled %d radial offsets outside R=%.3g", resampled, system['radius'])

    offsets = system['radial_offsets']

    # The field depends on the radial offset only, not on the axial position
    def get_velocity(positions):
        velocity = np.asarray(velocity_func(offsets), dtype=float)
        velocity = np.broadcast_to(velocity, positions.shape).copy()
        velocity[~np.isfinite(velocity)] = 0.0
        return np.clip(velocity, -max_speed, max_speed)

    new_pos, velocity = euler_step(system['axial_positions'], dt, get_velocity)

    start, end = system['domain']
    exited_far = new_pos >= end
    system['axial_positions'] = wrap_positions(new_pos, start, end)

    if reseed_on_wrap and np.any(exited_far):
        R = system['radius']
        offsets[exited_far] = system['rng'].uniform(-R, R, size=int(np.count_nonzero(exited_far)))

    system['last_velocity'] = velocity
    return velocity
