"""
Visualization components for bloodflow: frame driver, pipe views and the 3D view.
"""

from .frame_driver import DriverState, FrameDriver, schedule_frames
from .pipe_views import FlowView, LaminarFlowView, PulsatileFlowView, PlugFlowView
from .cylinder_view import CylinderFlowView

__all__ = [
    'DriverState',
    'FrameDriver',
    'schedule_frames',
    'FlowView',
    'LaminarFlowView',
    'PulsatileFlowView',
    'PlugFlowView',
    'CylinderFlowView',
]
