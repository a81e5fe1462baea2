"""
Velocity field module for bloodflow.

This module evaluates the Hagen-Poiseuille velocity profile of laminar pipe
flow. Each multiplicative factor of the formula can be switched off through a
TermMask; a disabled factor is replaced by 1 so the field stays defined and
the learner can see what each dependency contributes.
"""

import logging
from dataclasses import dataclass, field, replace
from typing import List, Tuple, Union

import numpy as np
from scipy import integrate

from .. import config

logger = logging.getLogger(__name__)

TERM_NAMES = ('pressure', 'constant', 'viscosity', 'length', 'radius_scale', 'profile')

ArrayLike = Union[float, np.ndarray]


@dataclass(frozen=True)
class TermMask:
    """Enable/disable flags for the factors of the velocity formula."""
    pressure: bool = True      # ΔP
    constant: bool = True      # 1/4
    viscosity: bool = True     # μ
    length: bool = True        # L
    radius_scale: bool = True  # R^2
    profile: bool = True       # (1 - (r/R)^2)

    @classmethod
    def all_enabled(cls) -> 'TermMask':
        return cls()

    def with_term(self, name: str, enabled: bool) -> 'TermMask':
        """Return a copy with a single term switched on or off."""
        if name not in TERM_NAMES:
            raise ValueError(f"Unknown formula term: {name}")
        return replace(self, **{name: bool(enabled)})

    def enabled_terms(self) -> List[str]:
        return [name for name in TERM_NAMES if getattr(self, name)]


@dataclass(frozen=True)
class FlowParameters:
    """
    Physical parameters of the pipe.

    Instances are immutable; controls build a new one with
    dataclasses.replace between frames.
    """
    radius: float
    pressure_drop: float
    viscosity: float
    length: float
    terms: TermMask = field(default_factory=TermMask)


def is_degenerate(params: FlowParameters) -> bool:
    """
    True when the parameters cannot produce a finite field.

    R must always be positive. Viscosity and length only matter while their
    terms are enabled, since a disabled term contributes a factor of 1.
    """
    eps = config.DEGENERATE_EPSILON
    if not np.isfinite(params.radius) or params.radius <= eps:
        return True
    if params.terms.viscosity and abs(params.viscosity) <= eps:
        return True
    if params.terms.length and abs(params.length) <= eps:
        return True
    return False


def laminar_velocity(params: FlowParameters, r: ArrayLike,
                     v_scale: float = 1.0, profile_scale: float = 1.0) -> ArrayLike:
    """
    Axial velocity at radial offset r.

    v = ΔP / (4 μ L) · R² · (1 - (r/R)²) · profile_scale · v_scale

    Args:
        params: Pipe parameters and term mask
        r: Radial offset, scalar or array of offsets
        v_scale: Visual scaling applied after the physics
        profile_scale: Extra multiplier on the profile factor (pulsatile
            waveforms that act on the profile)

    Returns:
        float for scalar r, otherwise an array shaped like r. Degenerate or
        non-finite results are reported as 0.
    """
    scalar = np.ndim(r) == 0
    r = np.asarray(r, dtype=float)

    if is_degenerate(params):
        return 0.0 if scalar else np.zeros_like(r)

    terms = params.terms
    R = float(params.radius)
    dp_factor = params.pressure_drop if terms.pressure else 1.0
    mu_factor = params.viscosity if terms.viscosity else 1.0
    length_factor = params.length if terms.length else 1.0
    const_factor = 4.0 if terms.constant else 1.0
    radius_factor = R * R if terms.radius_scale else 1.0

    with np.errstate(divide='ignore', invalid='ignore', over='ignore'):
        if terms.profile:
            profile_factor = 1.0 - (r * r) / (R * R)
        else:
            profile_factor = np.ones_like(r)
        v = (dp_factor / (const_factor * mu_factor * length_factor)) \
            * radius_factor * profile_factor * profile_scale * v_scale

    v = np.where(np.isfinite(v), v, 0.0)
    return float(v) if scalar else v


def velocity_profile(params: FlowParameters, samples: int = None,
                     v_scale: float = 1.0, profile_scale: float = 1.0) -> Tuple[np.ndarray, np.ndarray]:
    """
    Sample the velocity across the full diameter.

    Returns:
        tuple: (r, v) arrays from -R to R
    """
    if samples is None:
        samples = config.PROFILE_SAMPLES
    radius = params.radius if np.isfinite(params.radius) and params.radius > 0 else 0.0
    r = np.linspace(-radius, radius, samples)
    return r, laminar_velocity(params, r, v_scale=v_scale, profile_scale=profile_scale)


def flow_rate(params: FlowParameters) -> float:
    """
    Volumetric flow rate Q = ∫ 2πr v(r) dr over the cross-section.

    Integrates the masked field numerically, so it also reports the flow of
    ablated formulas.
    """
    if is_degenerate(params):
        return 0.0
    q, abserr = integrate.quad(
        lambda r: 2.0 * np.pi * r * laminar_velocity(params, r),
        0.0, float(params.radius))
    logger.debug("Flow rate %.6g (quad error estimate %.2g)", q, abserr)
    return q


def poiseuille_flow_rate(params: FlowParameters) -> float:
    """Closed-form Hagen-Poiseuille flow rate πR⁴ΔP / (8μL), ignoring the mask."""
    if is_degenerate(replace(params, terms=TermMask.all_enabled())):
        return 0.0
    R = params.radius
    return np.pi * R ** 4 * params.pressure_drop / (8.0 * params.viscosity * params.length)


def mean_velocity(params: FlowParameters) -> float:
    """Cross-section averaged velocity Q / (πR²)."""
    if is_degenerate(params):
        return 0.0
    return flow_rate(params) / (np.pi * params.radius ** 2)


def build_velocity_label(terms: TermMask) -> str:
    """
    Matplotlib mathtext rendering of the formula for the given mask.

    Disabled factors are shown as 1, which is exactly how they enter the
    computation.
    """
    numerator = r'\Delta P' if terms.pressure else '1'
    denominator = r'\,'.join([
        '4' if terms.constant else '1',
        r'\mu' if terms.viscosity else '1',
        'L' if terms.length else '1',
    ])
    radius = 'R^2' if terms.radius_scale else '1'
    profile = r'\left(1-\left(\frac{r}{R}\right)^2\right)' if terms.profile else '1'
    return (r'$v(r)=\frac{' + numerator + '}{' + denominator + r'}\cdot '
            + radius + r'\cdot ' + profile + '$')
