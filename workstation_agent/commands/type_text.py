"""Command to type text into the active window."""

from ..desktop import AppKind
from .base import Command

DOCUMENT_KEY_DELAY = 0.02
INPUT_KEY_DELAY = 0.025


class TypeCommand(Command):
    """
    Command to type text.

    Documents receive the text directly in their body; other windows type
    into their focused input, where `enter` presses the Enter key.
    """

    def can_handle(self, action_kind: str) -> bool:
        return action_kind == "type"

    async def execute(self, action) -> bool:
        window = self.runtime.active_window
        if window is None:
            return False

        if window.app is AppKind.DOCS:
            for char in action.text.replace("\n", "<br>"):
                window.body_html += char
                await self.runtime.sleep(DOCUMENT_KEY_DELAY)
            if action.enter:
                window.body_html += "<br>"
            return True

        element = self.runtime.focused
        if element is None or element.window is not window or not element.is_input:
            return False
        for char in action.text:
            element.value += char
            await self.runtime.sleep(INPUT_KEY_DELAY)
        if action.enter:
            await self.runtime.press_enter(element)
        return True
