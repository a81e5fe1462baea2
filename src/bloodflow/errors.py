"""Exception types raised by bloodflow views and the command-line interface."""


class BloodflowError(Exception):
    """Base class for bloodflow errors."""


class RenderSurfaceError(BloodflowError):
    """A view could not acquire the axes or canvas it draws on."""
