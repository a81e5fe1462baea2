#!/usr/bin/env python3
"""
bloodflow - command-line entry point.

Opens one of the animated flow views with its controls, or renders it
headlessly to a GIF or PNG.

Usage:
    bloodflow laminar
    bloodflow pulsatile --pulse-model piecewise --oscillation-only
    bloodflow plug --save output/plug.gif --no-show
    bloodflow cylinder --particles 5000
"""

import argparse
import logging
import sys

import matplotlib.pyplot as plt
import numpy as np

from . import config
from .errors import BloodflowError, RenderSurfaceError
from .logging_config import setup_logging
from .physics.pulse import FlowMode, PulseGenerator, PulseMode
from .ui.ui_controls import UIController
from .visualization.cylinder_view import CylinderFlowView
from .visualization.pipe_views import LaminarFlowView, PlugFlowView, PulsatileFlowView
from .visualization.visualization_core import save_animation, save_final_figure, setup_figure_layout

logger = logging.getLogger(__name__)

VIEW_CHOICES = ('laminar', 'pulsatile', 'plug', 'cylinder')
LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR')


def parse_arguments(argv=None):
    parser = argparse.ArgumentParser(
        prog='bloodflow',
        description='Interactive visualizations of laminar and pulsatile blood flow in a pipe'
    )
    parser.add_argument('view', nargs='?', default='laminar', choices=VIEW_CHOICES,
                        help='Which flow view to open (default: laminar)')
    parser.add_argument('--pulse-model', choices=[m.value for m in PulseMode],
                        default=PulseMode.FOURIER.value,
                        help='Waveform of the pulsatile view')
    parser.add_argument('--oscillation-only', action='store_true',
                        help='Pulsatile view: show only the oscillating component')
    parser.add_argument('--particles', '-n', type=int, default=None,
                        help='Number of particles (default depends on the view)')
    parser.add_argument('--seed', type=int, default=None,
                        help='Random seed for particle placement')
    parser.add_argument('--save', '-s', default=None,
                        help='Write the animation to a .gif, or the last frame to a .png')
    parser.add_argument('--frames', type=int, default=config.SAVE_FRAMES,
                        help='Frames rendered when saving (default: %(default)s)')
    parser.add_argument('--no-show', action='store_true',
                        help='Do not open a window')
    parser.add_argument('--no-controls', action='store_true',
                        help='Hide sliders and toggles')
    parser.add_argument('--output-dir', default='output',
                        help='Folder for snapshots taken from the controls')
    parser.add_argument('--log-level', default='INFO', choices=LOG_LEVELS)
    parser.add_argument('--log-file', default=None, help='Also write the log to this file')

    args = parser.parse_args(argv)
    if args.particles is not None and args.particles <= 0:
        parser.error('--particles must be positive')
    if args.frames <= 0:
        parser.error('--frames must be positive')
    return args


def build_view(kind, ax, args):
    """Construct the requested view on the given axes."""
    rng = np.random.default_rng(args.seed)
    if kind == 'laminar':
        return LaminarFlowView(ax, num_particles=args.particles, rng=rng)
    if kind == 'pulsatile':
        flow_mode = FlowMode.OSCILLATION_ONLY if args.oscillation_only else FlowMode.STEADY_PLUS_PULSE
        generator = PulseGenerator(mode=PulseMode(args.pulse_model))
        return PulsatileFlowView(ax, generator=generator, flow_mode=flow_mode,
                                 num_particles=args.particles, rng=rng)
    if kind == 'plug':
        return PlugFlowView(ax, num_particles=args.particles, rng=rng)
    if kind == 'cylinder':
        return CylinderFlowView(ax, num_particles=args.particles, rng=rng)
    raise ValueError(f"Unknown view: {kind}")


def run(args):
    fig, ax = setup_figure_layout(args.view, with_controls=not args.no_controls)
    view = build_view(args.view, ax, args)
    controller = None
    if not args.no_controls:
        controller = UIController(fig, view, args.view, output_dir=args.output_dir)
    logger.debug("Controls %s", 'attached' if controller is not None else 'disabled')

    try:
        if args.save and args.save.lower().endswith('.png'):
            view.start(fixed_dt=1.0 / config.SAVE_FPS, animate=False)
            for _ in range(args.frames):
                view.driver.tick()
            save_final_figure(fig, args.save)
        elif args.save:
            anim = view.start(frames=args.frames, fixed_dt=1.0 / config.SAVE_FPS)
            save_animation(anim, args.save)
        else:
            # Keep a reference so the animation is not garbage collected
            anim = view.start(frames=config.ANIMATION_FRAMES)

        if not args.no_show:
            plt.show()
    finally:
        view.dispose()
        plt.close(fig)
    return 0


def main(argv=None):
    args = parse_arguments(argv)
    setup_logging(level=getattr(logging, args.log_level), log_file=args.log_file)
    logger.info("Opening %s view", args.view)

    try:
        return run(args)
    except RenderSurfaceError as e:
        logger.error("Cannot create the %s view: %s", args.view, e)
        return 1
    except BloodflowError as e:
        logger.error("%s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
