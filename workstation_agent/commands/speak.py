"""Command to post an assistant message to the chat."""

from .base import Command


class SpeakCommand(Command):
    """Command to post an assistant message to the chat."""

    def can_handle(self, action_kind: str) -> bool:
        return action_kind == "speak"

    async def execute(self, action) -> bool:
        self.runtime.add_message("assistant", action.text, kind="speech")
        return True
