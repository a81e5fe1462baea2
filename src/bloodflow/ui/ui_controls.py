"""
UI controls module for bloodflow.

Sliders, formula-term toggles and mode selectors placed in the strip below a
view. Every callback builds new parameters and hands them to the view; the
next animation frame picks them up.
"""

import logging
import os
from dataclasses import replace
from datetime import datetime

from matplotlib.widgets import Button, CheckButtons, RadioButtons, Slider

from .. import config
from ..physics.pulse import FlowMode, PulseMode
from ..physics.velocity_field import TERM_NAMES, TermMask
from ..visualization.visualization_core import save_final_figure

logger = logging.getLogger(__name__)

TERM_LABELS = {
    'pressure': 'ΔP',
    'constant': '1/4',
    'viscosity': 'μ',
    'length': 'L',
    'radius_scale': 'R²',
    'profile': '(1-(r/R)²)',
}

# Slider attribute -> formula term it feeds
SLIDER_TERMS = {
    'radius': 'radius_scale',
    'pressure_drop': 'pressure',
    'viscosity': 'viscosity',
    'length': 'length',
}

FLOW_MODE_LABELS = {
    'Steady + pulse': FlowMode.STEADY_PLUS_PULSE,
    'Oscillation only': FlowMode.OSCILLATION_ONLY,
}

PULSE_MODE_LABELS = {
    'Fourier': PulseMode.FOURIER,
    'Piecewise': PulseMode.PIECEWISE,
}

SHOW_VECTORS_LABEL = 'Show vectors'


class UIController:
    """Main UI controller for managing interactive controls."""

    def __init__(self, fig, view, kind, output_dir='output'):
        """
        Initialize UI controller.

        Args:
            fig: Matplotlib figure
            view: The flow view the controls drive
            kind (str): 'laminar', 'pulsatile', 'plug' or 'cylinder'
            output_dir (str): Folder for snapshots
        """
        self.fig = fig
        self.view = view
        self.kind = kind
        self.output_dir = output_dir
        self.sliders = {}
        self.term_buttons = None
        self.flow_mode_buttons = None
        self.pulse_mode_buttons = None

        self.setup_ui_controls()

    def setup_ui_controls(self):
        """Create the widgets for this kind of view."""
        if self.kind == 'plug':
            self._add_slider('pressure', 'ΔP', config.PLUG_PRESSURE_RANGE, self.view.pressure)
        else:
            params = self.view.params
            self._add_slider('radius', 'Radius R', config.RADIUS_RANGE, params.radius)
            self._add_slider('pressure_drop', 'Pressure ΔP', config.PRESSURE_RANGE, params.pressure_drop)
            self._add_slider('viscosity', 'Viscosity μ', config.VISCOSITY_RANGE, params.viscosity)
            self._add_slider('length', 'Length L', config.LENGTH_RANGE, params.length)

        if self.kind == 'pulsatile':
            generator = self.view.generator
            self._add_slider('period', 'Period (s)', config.PERIOD_RANGE, generator.period)
            self._add_slider('amplitude', 'Amplitude', config.AMPLITUDE_RANGE, generator.amplitude)

        if self.kind in ('laminar', 'pulsatile'):
            self._add_term_buttons()

        if self.kind == 'pulsatile':
            ax_flow = self.fig.add_axes([0.78, 0.17, 0.18, 0.12])
            ax_flow.set_title('Flow mode', fontsize=9)
            self.flow_mode_buttons = RadioButtons(
                ax_flow, list(FLOW_MODE_LABELS),
                active=list(FLOW_MODE_LABELS.values()).index(self.view.flow_mode))
            self.flow_mode_buttons.on_clicked(self._on_flow_mode_clicked)

            ax_pulse = self.fig.add_axes([0.78, 0.03, 0.18, 0.12])
            ax_pulse.set_title('Pulse model', fontsize=9)
            self.pulse_mode_buttons = RadioButtons(
                ax_pulse, list(PULSE_MODE_LABELS),
                active=list(PULSE_MODE_LABELS.values()).index(self.view.generator.mode))
            self.pulse_mode_buttons.on_clicked(self._on_pulse_mode_clicked)

        btn_ax = self.fig.add_axes([0.02, 0.02, 0.12, 0.045])
        self._snapshot_button = Button(btn_ax, 'Save Snapshot')
        self._snapshot_button.on_clicked(self._on_snapshot_clicked)

        reset_ax = self.fig.add_axes([0.15, 0.02, 0.08, 0.045])
        self._reset_button = Button(reset_ax, 'Reset')
        self._reset_button.on_clicked(self._on_reset_clicked)

    def _add_slider(self, name, label, value_range, initial):
        valmin, valmax, valstep = value_range
        top = 0.29 - 0.035 * len(self.sliders)
        ax_slider = self.fig.add_axes([0.12, top, 0.35, 0.025])
        slider = Slider(ax_slider, label, valmin, valmax, valinit=initial, valstep=valstep)
        slider.on_changed(lambda value: self.set_parameter(name, value))
        self.sliders[name] = slider
        return slider

    def _add_term_buttons(self):
        terms = self.view.params.terms
        labels = [TERM_LABELS[name] for name in TERM_NAMES]
        status = [getattr(terms, name) for name in TERM_NAMES]
        if self.kind == 'laminar':
            labels.append(SHOW_VECTORS_LABEL)
            status.append(self.view.show_vectors)
        ax_terms = self.fig.add_axes([0.55, 0.03, 0.2, 0.26])
        ax_terms.set_title('Formula terms', fontsize=9)
        self.term_buttons = CheckButtons(ax_terms, labels, status)
        self.term_buttons.on_clicked(self._on_term_clicked)

    def set_parameter(self, name, value):
        """Apply one slider value to the view."""
        value = float(value)
        if name == 'pressure':
            self.view.pressure = value
        elif name in ('period', 'amplitude'):
            setattr(self.view.generator, name, value)
        else:
            self.view.params = replace(self.view.params, **{name: value})
        logger.debug("%s set to %g", name, value)

    def set_terms(self, terms):
        """Replace the formula mask and dim the sliders of disabled terms."""
        self.view.params = replace(self.view.params, terms=terms)
        for name, term in SLIDER_TERMS.items():
            slider = self.sliders.get(name)
            if slider is not None:
                slider.label.set_alpha(1.0 if getattr(terms, term) else 0.4)
        logger.debug("Formula terms: %s", ', '.join(terms.enabled_terms()) or 'none')

    def _on_term_clicked(self, label):
        status = self.term_buttons.get_status()
        self.set_terms(TermMask(*status[:len(TERM_NAMES)]))
        if self.kind == 'laminar':
            self.view.show_vectors = status[len(TERM_NAMES)]

    def _on_flow_mode_clicked(self, label):
        self.view.flow_mode = FLOW_MODE_LABELS[label]
        logger.info("Flow mode: %s", self.view.flow_mode.value)

    def _on_pulse_mode_clicked(self, label):
        self.view.generator.mode = PULSE_MODE_LABELS[label]
        logger.info("Pulse model: %s", self.view.generator.mode.value)

    def save_snapshot(self):
        """Save the whole figure as a timestamped PNG."""
        ts = datetime.now().strftime('%Y%m%d_%H%M%S')
        path = os.path.join(self.output_dir, f'{self.kind}_{ts}.png')
        save_final_figure(self.fig, path)
        return path

    def _on_snapshot_clicked(self, event):
        self.save_snapshot()

    def _on_reset_clicked(self, event):
        self.view.reset()
        logger.info("View reset")
