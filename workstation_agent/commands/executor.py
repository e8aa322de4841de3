"""Action interpreter routing each action of a sequence to its command."""

import logging
from typing import List, Optional, Sequence

from ..actions import Action
from ..config import ACTION_DELAY
from .base import Command
from .doodle import DoodleCommand
from .drag_window import DragWindowCommand
from .files import DeleteFileCommand, ListFilesCommand, OpenFileCommand, SaveActiveFileCommand
from .images import FindImageCommand, GenerateImageCommand, PlaceImageCommand
from .pointer import ClickCommand, DrawWithCursorCommand, MoveMouseCommand, ScrollCommand
from .speak import SpeakCommand
from .type_text import TypeCommand

logger = logging.getLogger(__name__)


class ActionInterpreter:
    """Replays action sequences against a desktop runtime, one action at a time."""

    def __init__(self, runtime, action_delay: Optional[float] = None):
        """
        Initialize the interpreter with the available commands.

        Args:
            runtime: DesktopRuntime the actions are carried out on
            action_delay: Pause before every action in seconds (defaults to config value)
        """
        self.runtime = runtime
        self.action_delay = ACTION_DELAY if action_delay is None else action_delay
        self.commands: List[Command] = [
            SpeakCommand(runtime),
            MoveMouseCommand(runtime),
            ClickCommand(runtime),
            TypeCommand(runtime),
            ScrollCommand(runtime),
            DoodleCommand(runtime),
            DrawWithCursorCommand(runtime),
            GenerateImageCommand(runtime),
            FindImageCommand(runtime),
            PlaceImageCommand(runtime),
            ListFilesCommand(runtime),
            OpenFileCommand(runtime),
            SaveActiveFileCommand(runtime),
            DeleteFileCommand(runtime),
            DragWindowCommand(runtime),
        ]

    def command_for(self, action_kind: str) -> Optional[Command]:
        for command in self.commands:
            if command.can_handle(action_kind):
                return command
        return None

    async def execute(self, sequence: Sequence[Action]) -> bool:
        """
        Execute a sequence in order.

        A failing action never stops the ones after it, not even when its
        command raises.

        Returns:
            True if every action succeeded, False if any failed
        """
        all_succeeded = True
        for i, action in enumerate(sequence, 1):
            await self.runtime.sleep(self.action_delay)
            logger.info("Executing action %d of %d: %s", i, len(sequence), action.kind)

            command = self.command_for(action.kind)
            if command is None:
                logger.warning("Unknown action kind: %s", action.kind)
                all_succeeded = False
                continue

            try:
                success = await command.execute(action)
            except Exception:
                logger.exception("Action %s failed", action.kind)
                self.runtime.add_message(
                    "assistant", f'Something went wrong while carrying out "{action.kind}".', kind="error"
                )
                success = False

            if not success:
                logger.info("Action %s did not complete", action.kind)
                all_succeeded = False
        return all_succeeded
