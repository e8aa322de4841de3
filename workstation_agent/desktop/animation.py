"""Cursor and window animations as awaitable coroutines.

Every animation returns only once its logical duration has elapsed and always
finishes exactly on its target, so callers can await one step before starting
the next.
"""

import asyncio
import math
import random
from typing import Callable, Optional, Sequence, Tuple

from .models import Geometry, Window

Point = Tuple[float, float]


def ease_out(progress: float, power: int) -> float:
    return 1 - math.pow(1 - progress, power)


def quadratic_bezier(start: Point, control: Point, end: Point, t: float) -> Point:
    x = (1 - t) ** 2 * start[0] + 2 * (1 - t) * t * control[0] + t ** 2 * end[0]
    y = (1 - t) ** 2 * start[1] + 2 * (1 - t) * t * control[1] + t ** 2 * end[1]
    return (x, y)


def segment_duration(start: Point, end: Point) -> float:
    """Duration (seconds) of one straight cursor segment, proportional to its length."""
    distance = math.hypot(end[0] - start[0], end[1] - start[1])
    return max(0.05, distance * 0.0035)


class Animator:
    """
    Drives cursor and window motion for one runtime.

    Args:
        get_cursor: Returns the current cursor position
        set_cursor: Moves the cursor
        time_scale: Multiplier for every duration; 0 jumps straight to the end
        frame_rate: Frames per second while animating
        rng: Random source for the curve control points
    """

    def __init__(
        self,
        get_cursor: Callable[[], Point],
        set_cursor: Callable[[float, float], None],
        time_scale: float = 1.0,
        frame_rate: int = 60,
        rng: Optional[random.Random] = None,
    ):
        self._get_cursor = get_cursor
        self._set_cursor = set_cursor
        self.time_scale = time_scale
        self.frame_rate = frame_rate
        self.rng = rng or random.Random()

    async def pause(self, seconds: float) -> None:
        """Sleep for a scaled duration; still yields to the loop when instant."""
        await asyncio.sleep(max(0.0, seconds * self.time_scale))

    async def _run(self, duration: float, step: Callable[[float], None]) -> None:
        """Call `step(progress)` once per frame, ending with progress == 1."""
        if self.time_scale <= 0 or duration <= 0:
            step(1.0)
            await asyncio.sleep(0)
            return
        frames = max(1, int(math.ceil(duration * self.frame_rate)))
        frame_time = duration * self.time_scale / frames
        for frame in range(1, frames + 1):
            step(frame / frames)
            await asyncio.sleep(frame_time)

    async def curve_to(self, x: float, y: float, duration: float = 0.6) -> None:
        """Move the cursor along a randomly bowed curve with a quintic ease-out."""
        start = self._get_cursor()
        end = (x, y)
        control = (
            (start[0] + end[0]) / 2 + (end[1] - start[1]) * (self.rng.random() - 0.5) * 0.8,
            (start[1] + end[1]) / 2 + (start[0] - end[0]) * (self.rng.random() - 0.5) * 0.8,
        )

        def step(progress: float) -> None:
            if progress >= 1:
                self._set_cursor(*end)
                return
            self._set_cursor(*quadratic_bezier(start, control, end, ease_out(progress, 5)))

        await self._run(duration, step)

    async def linear_to(self, x: float, y: float, duration: float) -> None:
        start = self._get_cursor()

        def step(progress: float) -> None:
            if progress >= 1:
                self._set_cursor(x, y)
                return
            self._set_cursor(start[0] + (x - start[0]) * progress, start[1] + (y - start[1]) * progress)

        await self._run(duration, step)

    async def follow_path(self, path: Sequence[Point]) -> None:
        """Trace a polyline with the cursor: curve to its first point, then straight segments."""
        if not path:
            return
        await self.curve_to(path[0][0], path[0][1], 0.3)
        for start, end in zip(path, path[1:]):
            await self.linear_to(end[0], end[1], segment_duration(start, end))

    async def drag(
        self,
        window: Window,
        cursor_start: Point,
        cursor_end: Point,
        window_end: Point,
        duration: float = 1.0,
    ) -> None:
        """Move cursor and window together with a quartic ease-out."""
        window_start = (window.geometry.left, window.geometry.top)

        def step(progress: float) -> None:
            if progress >= 1:
                self._set_cursor(*cursor_end)
                window.geometry = Geometry(window_end[0], window_end[1], window.geometry.width, window.geometry.height)
                return
            eased = ease_out(progress, 4)
            self._set_cursor(
                cursor_start[0] + (cursor_end[0] - cursor_start[0]) * eased,
                cursor_start[1] + (cursor_end[1] - cursor_start[1]) * eased,
            )
            window.geometry = Geometry(
                window_start[0] + (window_end[0] - window_start[0]) * eased,
                window_start[1] + (window_end[1] - window_start[1]) * eased,
                window.geometry.width,
                window.geometry.height,
            )

        await self._run(duration, step)
