"""
Frame driver for bloodflow animations.

Wraps matplotlib's FuncAnimation timer: one callback per frame, dt measured
from the real-time delta since the previous frame, and deterministic
cancellation on every teardown path (explicit dispose or window close).
"""

import logging
import time
from enum import Enum

from matplotlib.animation import FuncAnimation

from .. import config

logger = logging.getLogger(__name__)


class DriverState(Enum):
    IDLE = 'idle'
    RUNNING = 'running'
    DISPOSED = 'disposed'


class FrameDriver:
    """
    Calls step(dt, elapsed) once per animation frame until cancelled.

    The step callable returns the artists it changed, as FuncAnimation
    expects from its frame function.
    """

    def __init__(self, step, clock=time.perf_counter, max_dt=None, fixed_dt=None):
        """
        Args:
            step: Per-frame callable taking (dt, elapsed) in seconds
            clock: Monotonic time source in seconds
            max_dt: Upper bound for a single frame's dt
            fixed_dt: Use a constant dt instead of the clock (saving to file)
        """
        self.step = step
        self.clock = clock
        self.max_dt = config.MAX_FRAME_DT if max_dt is None else max_dt
        self.fixed_dt = fixed_dt
        self.state = DriverState.IDLE
        self.elapsed = 0.0
        self.frame_count = 0
        self._last_time = None
        self._animation = None
        self._fig = None
        self._close_cid = None

    @property
    def animation(self):
        return self._animation

    def start(self, fig=None, interval=None, frames=None):
        """
        Begin delivering frames.

        Without a figure no timer is created and frames are delivered only by
        calling tick(), which is how headless callers drive a view.

        Returns:
            FuncAnimation or None
        """
        if self.state is DriverState.DISPOSED:
            raise RuntimeError("Cannot restart a disposed frame driver")
        if self.state is DriverState.RUNNING:
            return self._animation

        self.state = DriverState.RUNNING
        self._last_time = None
        if fig is not None:
            if interval is None:
                interval = config.ANIMATION_INTERVAL
            self._fig = fig
            self._animation = FuncAnimation(fig, self._on_frame, frames=frames,
                                            interval=interval, blit=False,
                                            repeat=False, cache_frame_data=False)
            self._close_cid = fig.canvas.mpl_connect('close_event', self._on_close)
        logger.debug("Frame driver started (interval=%s ms)", interval)
        return self._animation

    def _on_frame(self, frame):
        return self.tick()

    def _on_close(self, event):
        self.cancel()

    def _next_dt(self):
        if self.fixed_dt is not None:
            return self.fixed_dt
        now = self.clock()
        if self._last_time is None:
            self._last_time = now
            return 0.0
        dt = now - self._last_time
        self._last_time = now
        return min(max(dt, 0.0), self.max_dt)

    def tick(self):
        """Run one frame; a driver that is not running does nothing."""
        if self.state is not DriverState.RUNNING:
            return []
        dt = self._next_dt()
        self.elapsed += dt
        self.frame_count += 1
        artists = self.step(dt, self.elapsed)
        return artists if artists is not None else []

    def cancel(self):
        """Stop the timer. No step runs after this returns. Idempotent."""
        if self.state is DriverState.DISPOSED:
            return
        self.state = DriverState.DISPOSED
        if self._animation is not None:
            # FuncAnimation drops its event source itself when the figure closes
            event_source = self._animation.event_source
            if event_source is not None:
                event_source.stop()
        if self._fig is not None and self._close_cid is not None:
            self._fig.canvas.mpl_disconnect(self._close_cid)
            self._close_cid = None
        logger.debug("Frame driver disposed after %d frames (%.2fs)", self.frame_count, self.elapsed)


def schedule_frames(fig, step, interval=None, clock=time.perf_counter):
    """
    Register step(dt, elapsed) on the figure's animation timer.

    Returns:
        FrameDriver: the cancellation handle; call cancel() on teardown
    """
    driver = FrameDriver(step, clock=clock)
    driver.start(fig, interval=interval)
    return driver
