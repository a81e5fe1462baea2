"""
bloodflow: interactive visualizations of laminar and pulsatile pipe flow.

This package provides closed-form Poiseuille and pulsatile velocity models,
a particle advection loop and animated matplotlib views with live controls.
"""

__version__ = "0.1.0"

__all__ = []
