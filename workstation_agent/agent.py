"""Chat turn driver: user prompt in, action sequence replayed on the desktop."""

import logging
from typing import Optional

from .actions import parse_decision
from .commands import ActionInterpreter
from .exceptions import ActionValidationError, ApiError
from .snapshot import snapshot_runtime

logger = logging.getLogger(__name__)

ERROR_REPLY = "Sorry, I encountered an error. Please try again."
NO_SEQUENCE_REPLY = "I'm not sure how to respond to that."
BUSY_REPLY = "I'm still working on your last request. Please wait until it's finished."


def build_prompt(desktop_state: str, prompt: str) -> str:
    return f"DESKTOP STATE:\n{desktop_state}\n\nUSER REQUEST:\n{prompt}"


class ChatAgent:
    """Sends each user request with a fresh desktop snapshot and runs the reply."""

    def __init__(self, runtime, interpreter: Optional[ActionInterpreter] = None, files=None):
        self.runtime = runtime
        self.interpreter = interpreter or ActionInterpreter(runtime)
        self.files = files or runtime.files
        self._busy = False

    @property
    def busy(self) -> bool:
        return self._busy

    async def handle_user_input(self, prompt: str) -> bool:
        """
        Run one chat turn.

        Empty prompts and prompts sent in testing mode are ignored. A prompt
        sent while the previous sequence is still running is turned away.

        Returns:
            True if a sequence ran and every action in it succeeded
        """
        prompt = (prompt or "").strip()
        if not prompt or self.runtime.state.testing_mode:
            return False
        if self._busy:
            self.runtime.add_message("assistant", BUSY_REPLY, kind="error")
            return False

        self._busy = True
        try:
            self.runtime.add_message("user", prompt)
            full_prompt = build_prompt(snapshot_runtime(self.runtime), prompt)
            try:
                decision_text = await self.files.chat(full_prompt)
                sequence = parse_decision(decision_text)
            except (ApiError, ActionValidationError) as e:
                logger.error("Error processing user input: %s", e)
                self.runtime.add_message("assistant", ERROR_REPLY, kind="error")
                return False

            if sequence is None:
                self.runtime.add_message("assistant", NO_SEQUENCE_REPLY, kind="error")
                return False
            return await self.interpreter.execute(sequence)
        finally:
            self._busy = False
