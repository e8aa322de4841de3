"""Text snapshot of the desktop sent to the model with every chat request."""

import math
from typing import List


def _px(value: float) -> int:
    """Round half up, the way pixel values are shown to the model."""
    return int(math.floor(value + 0.5))


def format_window(window, desktop_width: float, desktop_height: float) -> str:
    """One line per window; maximized windows report the full desktop."""
    if window.maximized:
        left, top, width, height = 0, 0, desktop_width, desktop_height
    else:
        geometry = window.geometry
        left, top, width, height = geometry.left, geometry.top, geometry.width, geometry.height
    maximized = "true" if window.maximized else "false"
    return (
        f'- Window ID: #{window.id}, Title: "{window.title}", Maximized: {maximized}, '
        f"Position: {{ left: {_px(left)}px, top: {_px(top)}px }}, "
        f"Size: {{ width: {_px(width)}px, height: {_px(height)}px }}"
    )


def describe_desktop(windows, desktop_width: float, desktop_height: float) -> str:
    """
    Format the desktop for the model.

    Args:
        windows: Open windows in the order they were opened
        desktop_width: Desktop width in pixels
        desktop_height: Desktop height in pixels

    Returns:
        Multi-line description: dimensions, then either the empty-desktop
        sentence or one line per open window
    """
    lines: List[str] = [f"Desktop Dimensions: {_px(desktop_width)}px wide, {_px(desktop_height)}px tall."]
    windows = list(windows)
    if not windows:
        lines.append("The desktop is empty. No windows are open.")
        return "\n".join(lines)

    lines.append("Open Windows:")
    for window in windows:
        lines.append(format_window(window, desktop_width, desktop_height))
    return "\n".join(lines)


def snapshot_runtime(runtime) -> str:
    return describe_desktop(runtime.open_windows, runtime.width, runtime.height)
