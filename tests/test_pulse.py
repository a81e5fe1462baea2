import numpy as np
import pytest

from bloodflow.physics.pulse import (
    FlowMode,
    PulseGenerator,
    PulseMode,
    PulseState,
    asymmetric_pulse,
    piecewise_pulse,
    smooth_ramp,
)


def test_fourier_pulse_peak_at_zero():
    assert asymmetric_pulse(0.0, 1.5, 0.8) == pytest.approx(1.8)


def test_fourier_pulse_is_periodic():
    assert asymmetric_pulse(0.3, 1.5, 1.0) == pytest.approx(asymmetric_pulse(1.8, 1.5, 1.0))


def test_zero_amplitude_is_constant():
    for t in np.linspace(0, 3, 7):
        assert asymmetric_pulse(t, 1.5, 0.0) == pytest.approx(1.0)
        assert piecewise_pulse(t, 1.5, 0.0) == pytest.approx(1.0)


@pytest.mark.parametrize('pulse', [asymmetric_pulse, piecewise_pulse])
def test_cycle_mean_is_one(pulse):
    t = np.linspace(0, 1.5, 20001)[:-1]
    values = [pulse(ti, 1.5, 1.0) for ti in t]
    assert np.mean(values) == pytest.approx(1.0, abs=1e-3)


def test_piecewise_pulse_shape():
    # Peak of the raw segment at the end of the systolic rise
    peak = piecewise_pulse(0.75, 1.5, 1.0)
    assert peak == pytest.approx(2.0 - 2.0 / np.pi)
    assert piecewise_pulse(0.0, 1.5, 1.0) == pytest.approx(1.0 - 2.0 / np.pi)


def test_piecewise_pulse_rejects_bad_split():
    with pytest.raises(ValueError):
        piecewise_pulse(0.0, 1.5, 1.0, systole_fraction=1.0)


@pytest.mark.parametrize('pulse', [asymmetric_pulse, piecewise_pulse])
def test_period_must_be_positive(pulse):
    with pytest.raises(ValueError):
        pulse(0.0, 0.0, 1.0)


def test_ramp_starts_at_zero_and_approaches_one():
    assert smooth_ramp(0.0) == 0.0
    assert smooth_ramp(-1.0) == 0.0
    assert smooth_ramp(10.0) == pytest.approx(1.0, abs=1e-6)


def test_ramp_is_monotone():
    values = [smooth_ramp(t) for t in np.linspace(0, 5, 50)]
    assert all(b > a for a, b in zip(values, values[1:]))


def test_ramp_time_constant():
    assert smooth_ramp(0.5, tau=0.5) == pytest.approx(1.0 - np.exp(-1.0))
    with pytest.raises(ValueError):
        smooth_ramp(1.0, tau=0.0)


def test_state_phase_wraps_and_elapsed_grows():
    state = PulseState()
    state.advance(1.0, 1.5)
    state.advance(1.0, 1.5)
    assert state.phase_time == pytest.approx(0.5)
    assert state.elapsed == pytest.approx(2.0)
    state.reset()
    assert state.phase_time == 0.0 and state.elapsed == 0.0


def test_state_rejects_negative_dt():
    with pytest.raises(ValueError):
        PulseState().advance(-0.1, 1.5)


def test_multiplier_is_zero_at_start():
    generator = PulseGenerator(period=1.5, amplitude=1.0)
    state = PulseState()
    assert generator.pressure_multiplier(state, FlowMode.STEADY_PLUS_PULSE) == 0.0
    assert generator.pressure_multiplier(state, FlowMode.OSCILLATION_ONLY) == 0.0


def test_steady_multiplier_after_startup():
    generator = PulseGenerator(period=1.5, amplitude=0.8)
    state = PulseState(phase_time=0.0, elapsed=30.0)
    assert generator.pressure_multiplier(state) == pytest.approx(1.8)


def test_oscillation_only_has_zero_mean():
    generator = PulseGenerator(mode=PulseMode.PIECEWISE, period=1.5, amplitude=1.0)
    values = []
    for t in np.linspace(0, 1.5, 3001)[:-1]:
        state = PulseState(phase_time=t, elapsed=100.0)
        values.append(generator.pressure_multiplier(state, FlowMode.OSCILLATION_ONLY))
    assert np.mean(values) == pytest.approx(0.0, abs=1e-3)


def test_generator_switches_model():
    generator = PulseGenerator(mode='fourier', period=1.5, amplitude=1.0)
    fourier = generator.waveform(0.2)
    generator.mode = PulseMode.PIECEWISE
    assert generator.waveform(0.2) != pytest.approx(fourier)
    assert generator.oscillation(0.2) == pytest.approx(generator.waveform(0.2) - 1.0)
