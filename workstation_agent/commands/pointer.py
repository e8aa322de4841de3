"""Commands driving the cursor: moving, clicking, scrolling and tracing paths."""

from .base import Command


class MoveMouseCommand(Command):
    """Command to move the cursor to the centre of an element."""

    def can_handle(self, action_kind: str) -> bool:
        return action_kind == "move_mouse_to_element"

    async def execute(self, action) -> bool:
        element = self.runtime.surface.query(action.selector)
        if element is None:
            # Unknown selectors leave the cursor where it is
            return False
        await self.runtime.move_cursor_to(element, 0.6)
        return True


class ClickCommand(Command):
    """Command to click whatever is under the cursor."""

    def can_handle(self, action_kind: str) -> bool:
        return action_kind == "click"

    async def execute(self, action) -> bool:
        if not await self.runtime.click():
            return False
        await self.runtime.sleep(0.3)
        return True


class ScrollCommand(Command):
    """Command to scroll an element by a number of pixels."""

    def can_handle(self, action_kind: str) -> bool:
        return action_kind == "scroll"

    async def execute(self, action) -> bool:
        element = self.runtime.surface.query(action.selector)
        if element is None:
            return False
        self.runtime.surface.scroll(element, action.pixels)
        await self.runtime.sleep(0.5)
        return True


class DrawWithCursorCommand(Command):
    """Command to trace polylines with the cursor without leaving ink."""

    def can_handle(self, action_kind: str) -> bool:
        return action_kind == "draw_with_cursor"

    async def execute(self, action) -> bool:
        for line in action.lines:
            await self.runtime.animator.follow_path(line)
        return True
