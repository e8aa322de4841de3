"""Command to draw on the doodle pad."""

from ..desktop import AppKind
from .base import Command


class DoodleCommand(Command):
    """Command to open the doodle pad and ink polylines onto its canvas."""

    def can_handle(self, action_kind: str) -> bool:
        return action_kind == "doodle"

    async def execute(self, action) -> bool:
        window = await self.runtime.open_app_via_icon(AppKind.DOODLE)
        if window is None or window.canvas is None:
            self.report("I couldn't open the Doodle Pad.")
            return False
        self.runtime.set_active_window(window)

        for line in action.lines:
            if len(line) < 2:
                continue
            window.canvas.begin_stroke(line[0])
            for point in line[1:]:
                window.canvas.extend_stroke(point)
                await self.runtime.sleep(0.01)
        return True
