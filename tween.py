"""
Time-stepped interpolation.

A task is a generator. Each ``yield`` suspends it until the next frame; the
driver resumes it with ``send(dt)``, dt being the seconds elapsed since it
last yielded. Tasks compose with ``yield from`` and with the combinators
below, and a Timeline drives the outermost task frame by frame.
"""

from __future__ import annotations

import logging
import math
from typing import Any, Callable, Generator

logger = logging.getLogger(__name__)

Task = Generator[None, float, None]
TimingFunction = Callable[[float], float]

# Float accumulation of 1/fps steps must not cost an extra frame
_EPSILON = 1e-9


# =============================================================================
# Easing
# =============================================================================


def linear(t: float) -> float:
    return t


def ease_in_cubic(t: float) -> float:
    return t**3


def ease_out_cubic(t: float) -> float:
    return 1 - (1 - t) ** 3


def ease_in_out_cubic(t: float) -> float:
    return 4 * t**3 if t < 0.5 else 1 - (-2 * t + 2) ** 3 / 2


def ease_in_out_sine(t: float) -> float:
    return -(math.cos(math.pi * t) - 1) / 2


def interpolate(start: Any, end: Any, t: float) -> Any:
    """
    Linear interpolation between two numbers or two equal-length tuples of numbers.

    Returns end exactly once t reaches 1, so a finished tween lands on its target.
    """
    if t >= 1:
        return end
    if isinstance(start, tuple):
        if not isinstance(end, tuple) or len(start) != len(end):
            raise ValueError(
                f"Cannot interpolate between {start!r} and {end!r}\n"
                f"  Both ends must be tuples of the same length"
            )
        return tuple(interpolate(a, b, t) for a, b in zip(start, end))
    return start + (end - start) * t


# =============================================================================
# Tasks
# =============================================================================


def tween(
    duration: float,
    on_progress: Callable[[float], None],
    timing: TimingFunction = ease_in_out_cubic,
    active: Callable[[], bool] | None = None,
) -> Task:
    """
    Report eased progress from 0 to 1 over duration seconds.

    on_progress receives timing(0) immediately and timing(1) on the last
    frame. A zero duration reports 1 without suspending. If active is given
    and returns False when the task resumes, the task ends without reporting.
    """
    if duration <= 0:
        on_progress(timing(1.0))
        return
    elapsed = 0.0
    on_progress(timing(0.0))
    while duration - elapsed > _EPSILON:
        dt = yield
        if active is not None and not active():
            logger.debug("tween: cancelled after %.3fs of %.3fs", elapsed, duration)
            return
        elapsed += dt
        progress = 1.0 if duration - elapsed <= _EPSILON else elapsed / duration
        on_progress(timing(progress))


def wait_for(seconds: float) -> Task:
    elapsed = 0.0
    while seconds - elapsed > _EPSILON:
        elapsed += yield


def chain(*tasks: Task) -> Task:
    """Run tasks one after another."""
    for task in tasks:
        yield from task


def delay(seconds: float, task: Task) -> Task:
    yield from wait_for(seconds)
    yield from task


def all_of(*tasks: Task) -> Task:
    """Run tasks side by side; finishes when the last one does."""
    running = [task for task in tasks if _start(task)]
    while running:
        dt = yield
        running = [task for task in running if _advance(task, dt)]


def sequence(spacing: float, *tasks: Task) -> Task:
    """Start each task spacing seconds after the previous one started."""
    yield from all_of(*(delay(i * spacing, task) for i, task in enumerate(tasks)))


def _start(task: Task) -> bool:
    """Run a task up to its first suspension. False if it finished outright."""
    try:
        next(task)
    except StopIteration:
        return False
    return True


def _advance(task: Task, dt: float) -> bool:
    try:
        task.send(dt)
    except StopIteration:
        return False
    return True


# =============================================================================
# Driver
# =============================================================================


class Timeline:
    """
    Fixed-rate driver for tasks.

    Usage:
        timeline = Timeline(fps=30)
        timeline.run(cell.tween_coord((2, 2), 1.0))
        print(timeline.time)  # 1.0
    """

    def __init__(self, fps: int = 60) -> None:
        if fps <= 0:
            raise ValueError(f"fps must be positive, got {fps}")
        self.fps = fps
        self.frame = 0
        self._task: Task | None = None

    @property
    def frame_duration(self) -> float:
        return 1 / self.fps

    @property
    def time(self) -> float:
        return self.frame / self.fps

    @property
    def busy(self) -> bool:
        return self._task is not None

    def start(self, task: Task) -> bool:
        """
        Begin driving task; its state at time zero is applied immediately.

        Returns False if the task completed without suspending. Any task
        still running is dropped.
        """
        if self._task is not None:
            logger.debug("Timeline.start: dropping unfinished task at frame %d", self.frame)
        self._task = task if _start(task) else None
        return self._task is not None

    def step(self) -> bool:
        """Advance the current task by one frame. False once it has finished."""
        if self._task is None:
            return False
        self.frame += 1
        if not _advance(self._task, self.frame_duration):
            self._task = None
        return self._task is not None

    def run(self, task: Task, on_frame: Callable[[Timeline], None] | None = None) -> int:
        """Drive task to completion, returning the number of frames it took."""
        first_frame = self.frame
        alive = self.start(task)
        if on_frame is not None:
            on_frame(self)
        while alive:
            alive = self.step()
            if on_frame is not None:
                on_frame(self)
        frames = self.frame - first_frame
        logger.info(
            "Timeline.run: %d frames (%.3fs at %d fps)",
            frames,
            frames / self.fps,
            self.fps,
        )
        return frames
