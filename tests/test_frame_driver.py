import matplotlib.pyplot as plt
import pytest
from matplotlib.backend_bases import CloseEvent

from bloodflow.visualization.frame_driver import DriverState, FrameDriver, schedule_frames


class Recorder:
    def __init__(self):
        self.calls = []

    def __call__(self, dt, elapsed):
        self.calls.append((dt, elapsed))
        return []


def test_idle_driver_does_not_step(clock):
    step = Recorder()
    driver = FrameDriver(step, clock=clock)
    assert driver.state is DriverState.IDLE
    assert driver.tick() == []
    assert step.calls == []


def test_dt_follows_the_clock(clock):
    step = Recorder()
    driver = FrameDriver(step, clock=clock)
    driver.start()
    driver.tick()
    clock.advance(0.016)
    driver.tick()
    clock.advance(0.020)
    driver.tick()
    dts = [dt for dt, _ in step.calls]
    assert dts == pytest.approx([0.0, 0.016, 0.020])
    assert step.calls[-1][1] == pytest.approx(0.036)
    assert driver.frame_count == 3


def test_dt_is_clamped(clock):
    step = Recorder()
    driver = FrameDriver(step, clock=clock, max_dt=0.1)
    driver.start()
    driver.tick()
    clock.advance(5.0)
    driver.tick()
    assert step.calls[-1][0] == pytest.approx(0.1)


def test_fixed_dt_ignores_clock(clock):
    step = Recorder()
    driver = FrameDriver(step, clock=clock, fixed_dt=0.5)
    driver.start()
    driver.tick()
    driver.tick()
    assert [dt for dt, _ in step.calls] == [0.5, 0.5]
    assert driver.elapsed == pytest.approx(1.0)


def test_no_step_after_cancel(clock):
    step = Recorder()
    driver = FrameDriver(step, clock=clock)
    driver.start()
    driver.tick()
    driver.cancel()
    clock.advance(0.1)
    driver.tick()
    assert len(step.calls) == 1
    assert driver.state is DriverState.DISPOSED


def test_cancel_is_idempotent(clock):
    driver = FrameDriver(Recorder(), clock=clock)
    driver.start()
    driver.cancel()
    driver.cancel()
    assert driver.state is DriverState.DISPOSED


def test_cancel_before_start(clock):
    step = Recorder()
    driver = FrameDriver(step, clock=clock)
    driver.cancel()
    with pytest.raises(RuntimeError):
        driver.start()
    assert step.calls == []


def test_start_with_figure_creates_animation(clock):
    fig = plt.figure()
    step = Recorder()
    driver = FrameDriver(step, clock=clock)
    anim = driver.start(fig, interval=10, frames=3)
    assert anim is not None
    assert driver.animation is anim
    # Starting twice keeps the same timer
    assert driver.start(fig) is anim
    driver.cancel()
    assert driver._on_frame(0) == []
    assert step.calls == []
    plt.close(fig)


def test_window_close_cancels(clock):
    fig = plt.figure()
    step = Recorder()
    driver = schedule_frames(fig, step, interval=10, clock=clock)
    assert driver.state is DriverState.RUNNING
    fig.canvas.callbacks.process('close_event', CloseEvent('close_event', fig.canvas))
    assert driver.state is DriverState.DISPOSED
    driver.tick()
    assert step.calls == []
    plt.close(fig)
