"""
Visualization core module for bloodflow.

This module handles figure layout, canvas styling and the pipe primitives
(walls, fluid band, centerline) shared by the 2D views.
"""

import logging
import os

import matplotlib.pyplot as plt
from matplotlib.patches import Rectangle

from .. import config
from ..errors import RenderSurfaceError
from .color_system import (
    BACKGROUND_COLOR, CANVAS_COLOR, CENTERLINE_COLOR, FLUID_COLOR, TEXT_COLOR, WALL_COLOR,
)

logger = logging.getLogger(__name__)


def ensure_render_surface(ax, require_3d=False):
    """
    Check that a view has axes attached to a live canvas.

    Raises:
        RenderSurfaceError: if the axes, figure or canvas is missing
    """
    if ax is None:
        raise RenderSurfaceError("No axes to draw on")
    fig = getattr(ax, 'figure', None)
    if fig is None or getattr(fig, 'canvas', None) is None:
        raise RenderSurfaceError("Axes are not attached to a figure canvas")
    if require_3d and getattr(ax, 'name', None) != '3d':
        raise RenderSurfaceError("This view needs 3D axes (projection='3d')")
    return fig


def setup_figure_layout(kind, with_controls=True):
    """
    Create the figure for a view, leaving room below for the controls.

    Args:
        kind (str): View name, one of config.WINDOW_TITLES
        with_controls (bool): Reserve a control strip at the bottom

    Returns:
        tuple: (fig, ax) - Figure and the drawing axes
    """
    fig = plt.figure(figsize=(12, 8))
    fig.patch.set_facecolor(BACKGROUND_COLOR)

    bottom = 0.34 if with_controls else 0.05
    if kind == 'cylinder':
        ax = fig.add_axes([0.05, bottom, 0.9, 0.95 - bottom], projection='3d')
    else:
        ax = fig.add_axes([0.05, bottom, 0.9, 0.95 - bottom])

    manager = getattr(fig.canvas, 'manager', None)
    if manager is not None:
        manager.set_window_title(config.WINDOW_TITLES.get(kind, kind))
    return fig, ax


def apply_canvas_styling(ax, width, height, title=None):
    """
    Style a 2D axes as a fixed-size drawing canvas in pixel-like units.

    Args:
        ax: matplotlib axes object
        width, height: canvas extent in data units
        title: optional title
    """
    ax.set_xlim(0, width)
    ax.set_ylim(0, height)
    ax.set_aspect('equal')
    ax.set_facecolor(CANVAS_COLOR)
    ax.set_xticks([])
    ax.set_yticks([])
    for spine in ax.spines.values():
        spine.set_color(TEXT_COLOR)
        spine.set_linewidth(0.5)
    if title:
        ax.set_title(title, fontsize=14, color=TEXT_COLOR, pad=14, weight='bold')


class PipeArtists:
    """Walls, fluid band and centerline of a horizontal pipe."""

    def __init__(self, ax, wall_width=4, show_centerline=True):
        self.upper_wall, = ax.plot([], [], color=WALL_COLOR, linewidth=wall_width, zorder=4)
        self.lower_wall, = ax.plot([], [], color=WALL_COLOR, linewidth=wall_width, zorder=4)
        self.fluid = Rectangle((0, 0), 0, 0, facecolor=FLUID_COLOR, edgecolor='none', zorder=1)
        ax.add_patch(self.fluid)
        self.centerline = None
        if show_centerline:
            self.centerline, = ax.plot([], [], color=CENTERLINE_COLOR, linewidth=1,
                                       linestyle=(0, (5, 5)), zorder=3)

    def update(self, x0, x1, center_y, half_height):
        self.upper_wall.set_data([x0, x1], [center_y + half_height, center_y + half_height])
        self.lower_wall.set_data([x0, x1], [center_y - half_height, center_y - half_height])
        self.fluid.set_bounds(x0, center_y - half_height, x1 - x0, 2 * half_height)
        if self.centerline is not None:
            self.centerline.set_data([x0, x1], [center_y, center_y])

    @property
    def artists(self):
        artists = [self.fluid, self.upper_wall, self.lower_wall]
        if self.centerline is not None:
            artists.append(self.centerline)
        return artists


def save_animation(anim, path, fps=None):
    """
    Save an animation through the pillow writer.

    Args:
        anim: FuncAnimation created with a finite frame count
        path (str): Output file (.gif)
        fps (int): Frames per second of the output
    """
    if fps is None:
        fps = config.SAVE_FPS
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    anim.save(path, writer='pillow', fps=fps)
    logger.info("Animation saved to %s", path)


def save_final_figure(fig, path):
    """
    Save the current figure as an image.

    Args:
        fig: Matplotlib figure object
        path (str): Output file path
    """
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    fig.savefig(path, dpi=config.DPI)
    logger.info("Figure saved to %s", path)
