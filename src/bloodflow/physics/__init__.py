"""
Physics components for bloodflow: velocity field, pulse generator and particles.
"""

from .velocity_field import (
    TermMask,
    FlowParameters,
    laminar_velocity,
    velocity_profile,
    flow_rate,
    poiseuille_flow_rate,
    mean_velocity,
    build_velocity_label,
)
from .pulse import (
    PulseMode,
    FlowMode,
    PulseState,
    PulseGenerator,
    asymmetric_pulse,
    piecewise_pulse,
    smooth_ramp,
)

__all__ = [
    'TermMask',
    'FlowParameters',
    'laminar_velocity',
    'velocity_profile',
    'flow_rate',
    'poiseuille_flow_rate',
    'mean_velocity',
    'build_velocity_label',
    'PulseMode',
    'FlowMode',
    'PulseState',
    'PulseGenerator',
    'asymmetric_pulse',
    'piecewise_pulse',
    'smooth_ramp',
]
