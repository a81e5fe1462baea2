"""
Interactive controls for bloodflow views.
"""

from .ui_controls import UIController

__all__ = ['UIController']
