"""Command to drag a window by its header."""

from .base import Command

APPROACH_DURATION = 0.5
DRAG_DURATION = 1.0


class DragWindowCommand(Command):
    """
    Command to drag a window so its header centre lands on (x, y).

    The target is clamped to the desktop; maximized windows are not moved.
    """

    def can_handle(self, action_kind: str) -> bool:
        return action_kind == "drag_window"

    async def execute(self, action) -> bool:
        if not action.selector or action.x is None or action.y is None:
            self.report("I was asked to move a window, but the details were missing.")
            return False

        window = self.runtime.find_window(action.selector)
        header = self.runtime.apps.find(window, ".window-header") if window is not None else None
        if window is None or header is None:
            self.report("I tried to move a window, but I couldn't find it.")
            return False
        if window.maximized:
            self.report("I can't move that window because it's maximized.")
            return False

        surface = self.runtime.surface
        grab = surface.center(header)
        await self.runtime.animator.curve_to(grab[0], grab[1], APPROACH_DURATION)

        offset_x = grab[0] - window.geometry.left
        offset_y = grab[1] - window.geometry.top
        left, top = self.runtime.clamp_position(
            window.geometry.width,
            window.geometry.height,
            action.x - offset_x,
            action.y - offset_y,
        )
        await self.runtime.animator.drag(
            window,
            cursor_start=grab,
            cursor_end=(left + offset_x, top + offset_y),
            window_end=(left, top),
            duration=DRAG_DURATION,
        )
        return True
