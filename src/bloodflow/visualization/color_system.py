"""
Color system module for bloodflow views.

Fluid, wall and overlay colors shared by the pipe and cylinder views.
"""

import numpy as np

# Pipe and fluid
WALL_COLOR = "#333333"
FLUID_COLOR = "#fee2e2"
PARTICLE_COLOR = "#f87171"
STEADY_PARTICLE_COLOR = "#ef4444"
CENTERLINE_COLOR = "#999999"

# Overlays
PROFILE_COLOR = "#ef4444"
PROFILE_ALPHA = 0.5
STEADY_PROFILE_COLOR = "#dc2626"
VECTOR_COLOR = "#3b82f6"
VECTOR_ALPHA = 0.6
WAVEFORM_COLOR = "#3b82f6"
SCAN_LINE_COLOR = "#ef4444"
READOUT_COLOR = "#2563eb"

# Waveform plot panel
PLOT_BACKGROUND = "#f8fafc"
PLOT_BORDER = "#e2e8f0"
PLOT_ZERO_LINE = "#94a3b8"

# 3D view
VESSEL_COLOR = "#88ccff"
VESSEL_ALPHA = 0.15
BLOOD_RGB = (0.93, 0.26, 0.26)

# Professional styling colors
BACKGROUND_COLOR = "#F7F7F7"  # Off-white background
CANVAS_COLOR = "#f9fafb"      # Drawing area
TEXT_COLOR = "#333333"        # Dark gray for text


def hex_to_rgb(hex_color):
    """Convert hex color to RGB tuple (0-1 range)."""
    hex_color = hex_color.lstrip('#')
    return tuple(int(hex_color[i:i+2], 16) / 255.0 for i in (0, 2, 4))


def with_alpha(hex_color, alpha):
    """RGBA tuple for a hex color with the given opacity."""
    return hex_to_rgb(hex_color) + (float(alpha),)


def radial_shading(r_norm, base_rgb=BLOOD_RGB):
    """
    Per-particle RGB darkened toward the centerline.

    r_norm is 0 on the axis and 1 at the wall; the shade runs from 0.65 to 1
    along a smoothstep curve.
    """
    t = np.clip(r_norm, 0.0, 1.0)
    edge = t * t * (3.0 - 2.0 * t)
    shade = 0.65 + 0.35 * np.power(edge, 0.85)
    return np.outer(shade, np.asarray(base_rgb))
