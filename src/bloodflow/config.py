"""
Configuration module for bloodflow visualizations.

This module contains global constants, default parameters, and configuration
settings used throughout the flow models, particle system and views.
"""

# Numeric safety
DEGENERATE_EPSILON = 1e-9  # R, mu or L at or below this magnitude yields zero velocity

# Default physical parameters (laminar view)
DEFAULT_RADIUS = 50
DEFAULT_PRESSURE = 50
DEFAULT_VISCOSITY = 10
DEFAULT_LENGTH = 100

# Default physical parameters (pulsatile view)
PULSATILE_RADIUS = 100
PULSATILE_PRESSURE = 100
PULSATILE_VISCOSITY = 10
PULSATILE_LENGTH = 50
DEFAULT_PERIOD = 1.5  # seconds per heartbeat
DEFAULT_AMPLITUDE = 1.0

# Base pressure used when only the oscillating component is shown, so the
# slosh stays visible regardless of the pressure slider
OSCILLATION_BASE_PRESSURE = 50

# Default plug flow pressure
DEFAULT_PLUG_PRESSURE = 50

# Pulse model parameters
RAMP_TAU = 0.5  # seconds, startup ramp time constant
FOURIER_WEIGHTS = (0.7, 0.3)  # fundamental and first harmonic
SYSTOLE_FRACTION = 0.5  # share of the cycle spent in the sine rise
RAMP_DISPLAY_SECONDS = 2.0  # show the ramp readout only during startup

# Slider ranges (min, max, step); step None means continuous
RADIUS_RANGE = (10, 150, 1)
PRESSURE_RANGE = (0, 200, 1)
VISCOSITY_RANGE = (1, 50, 1)
LENGTH_RANGE = (0.001, 100, 0.001)
PERIOD_RANGE = (0.5, 3.0, 0.1)
AMPLITUDE_RANGE = (0.0, 2.0, 0.1)
PLUG_PRESSURE_RANGE = (0, 100, 1)

# Canvas geometry (data units behave like pixels)
LAMINAR_CANVAS = (800, 400)
PULSATILE_CANVAS = (900, 520)
PULSATILE_PIPE_CENTER_Y = 360  # pipe centerline, measured from the bottom edge
PULSATILE_PLOT_BASE_Y = 100  # zero line of the waveform plot
PULSATILE_PLOT_HEIGHT = 50  # drawn height of a unit multiplier
PLUG_CANVAS = (900, 240)
PIPE_FILL_FRACTION = 0.9  # share of the canvas width taken by the pipe

# Particle system parameters
LAMINAR_NUM_PARTICLES = 1000
PULSATILE_NUM_PARTICLES = 800
PLUG_NUM_PARTICLES = 500
CYLINDER_NUM_PARTICLES = 10000
PARTICLE_SIZE = 9  # matplotlib scatter 's' in points^2

# Visual velocity scales
# Laminar: normalizes the default parameter set to ~150 px of profile bulge
LAMINAR_VELOCITY_SCALE = 150 / ((100 * 100 * 100) / (4 * 1 * 100)) * 2
LAMINAR_TIME_GAIN = 6.0  # 0.1 of the profile bulge per frame at 60 Hz
PULSATILE_VELOCITY_SCALE = 0.32
PLUG_VELOCITY_GAIN = 6.0  # pressure * 0.1 per frame at 60 Hz
PROFILE_SAMPLES = 101
VECTOR_STEP = 10  # radial spacing of velocity vectors

# Particle physics parameters
MAX_SAFE_VELOCITY = 3000.0  # px/s cap to prevent runaway particles
MAX_FRAME_DT = 0.25  # seconds; a stalled window must not teleport particles

# 3D cylinder view
CYLINDER_RADIUS_SCALE = 0.05
CYLINDER_LENGTH_SCALE = 0.1
CYLINDER_VELOCITY_SCALE = 0.01
CYLINDER_MIN_DENOMINATOR = 0.001

# Animation parameters
ANIMATION_FRAMES = None  # None keeps the animation running until the window closes
ANIMATION_INTERVAL = 30  # milliseconds between frames (33 FPS)
SAVE_FRAMES = 150  # frames written when saving an animation
SAVE_FPS = 30

# Window titles
WINDOW_TITLES = {
    'laminar': "Laminar Flow (Poiseuille)",
    'pulsatile': "Pulsatile Flow",
    'plug': "Plug Flow",
    'cylinder': "3D Laminar Flow",
}

DPI = 150  # For saved figures

# Plug flow profile line: x = PLUG_PROFILE_X + pressure * PLUG_PROFILE_GAIN
PLUG_PROFILE_X = 100
PLUG_PROFILE_GAIN = 2.0
PLUG_PARTICLE_MARGIN = 6  # keep plug particles off the walls

# Cylinder view rendering
CYLINDER_SHADE_BANDS = 4  # radial bands drawn with their own shade
CYLINDER_MARKER_SIZE = 2
