"""
Pulse generator module for bloodflow.

Heartbeat-like pressure multipliers for pulsatile flow. Two waveform models
are available: a Fourier-based asymmetric pulse and a piecewise sinusoid with
a sine rise followed by a cosine decay. Both have a cycle mean of exactly 1,
so subtracting 1 leaves a purely oscillating component. A startup ramp
suppresses the jump at t = 0.
"""

import math
from dataclasses import dataclass
from enum import Enum

from .. import config


class PulseMode(Enum):
    FOURIER = 'fourier'
    PIECEWISE = 'piecewise'


class FlowMode(Enum):
    STEADY_PLUS_PULSE = 'steady_plus_pulse'
    OSCILLATION_ONLY = 'oscillation_only'


def _check_period(period: float) -> None:
    if not period > 0:
        raise ValueError(f"Pulse period must be positive, got {period}")


def asymmetric_pulse(t: float, period: float, amplitude: float) -> float:
    """
    Fourier-based asymmetric pulse around a unit mean.

    1 + amplitude · (0.7 cos(ωt) + 0.3 cos(2ωt)),  ω = 2π / period
    """
    _check_period(period)
    w1, w2 = config.FOURIER_WEIGHTS
    omega = 2.0 * math.pi / period
    return 1.0 + amplitude * (w1 * math.cos(omega * t) + w2 * math.cos(2.0 * omega * t))


def piecewise_pulse(t: float, period: float, amplitude: float,
                    systole_fraction: float = None) -> float:
    """
    Two-segment sinusoid: a quarter-sine rise over the systolic fraction of the
    cycle, then a quarter-cosine decay over the rest.

    The raw segment value lies in [0, 1] and averages 2/π over a cycle whatever
    the split, so it is re-centred on 1 before scaling by the amplitude.
    """
    _check_period(period)
    if systole_fraction is None:
        systole_fraction = config.SYSTOLE_FRACTION
    if not 0.0 < systole_fraction < 1.0:
        raise ValueError(f"Systole fraction must be in (0, 1), got {systole_fraction}")

    phase = (t % period) / period
    if phase < systole_fraction:
        segment = math.sin(0.5 * math.pi * phase / systole_fraction)
    else:
        segment = math.cos(0.5 * math.pi * (phase - systole_fraction) / (1.0 - systole_fraction))
    return 1.0 + amplitude * (segment - 2.0 / math.pi)


def smooth_ramp(t: float, tau: float = None) -> float:
    """Startup envelope 1 - exp(-t/τ); 0 before the start."""
    if tau is None:
        tau = config.RAMP_TAU
    if not tau > 0:
        raise ValueError(f"Ramp time constant must be positive, got {tau}")
    if t <= 0:
        return 0.0
    return 1.0 - math.exp(-t / tau)


@dataclass
class PulseState:
    """
    Clocks of a pulsatile view.

    phase_time wraps at the oscillation period; elapsed only grows and drives
    the startup ramp.
    """
    phase_time: float = 0.0
    elapsed: float = 0.0

    def advance(self, dt: float, period: float) -> None:
        _check_period(period)
        if dt < 0:
            raise ValueError(f"Time step must be non-negative, got {dt}")
        self.elapsed += dt
        self.phase_time = (self.phase_time + dt) % period

    def reset(self) -> None:
        self.phase_time = 0.0
        self.elapsed = 0.0


class PulseGenerator:
    """Selects a waveform model and composes it with the startup ramp."""

    def __init__(self, mode: PulseMode = PulseMode.FOURIER, period: float = None,
                 amplitude: float = None, tau: float = None):
        self.mode = PulseMode(mode)
        self.period = config.DEFAULT_PERIOD if period is None else period
        self.amplitude = config.DEFAULT_AMPLITUDE if amplitude is None else amplitude
        self.tau = config.RAMP_TAU if tau is None else tau
        _check_period(self.period)

    def waveform(self, t: float) -> float:
        if self.mode is PulseMode.PIECEWISE:
            return piecewise_pulse(t, self.period, self.amplitude)
        return asymmetric_pulse(t, self.period, self.amplitude)

    def oscillation(self, t: float) -> float:
        """Waveform with its unit mean removed."""
        return self.waveform(t) - 1.0

    def pressure_multiplier(self, state: PulseState,
                            flow_mode: FlowMode = FlowMode.STEADY_PLUS_PULSE) -> float:
        """
        Multiplier for the driving pressure at the state's current time.

        Steady plus pulse modulates the base pressure around its mean.
        Oscillation only removes the mean before the ramp is applied, so the
        net drift over a cycle is zero and the start is smooth.
        """
        ramp = smooth_ramp(state.elapsed, self.tau)
        if FlowMode(flow_mode) is FlowMode.OSCILLATION_ONLY:
            return self.oscillation(state.phase_time) * ramp
        return self.waveform(state.phase_time) * ramp
