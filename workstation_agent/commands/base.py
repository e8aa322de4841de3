"""Base command class for desktop actions."""

from abc import ABC, abstractmethod

from ..actions import Action


class Command(ABC):
    """Abstract base class for the commands that carry out actions on the desktop."""

    def __init__(self, runtime):
        self.runtime = runtime

    @abstractmethod
    async def execute(self, action: Action) -> bool:
        """
        Carry out one action.

        Args:
            action: Validated action of a kind this command handles

        Returns:
            True if execution succeeded, False if a precondition failed
        """
        pass

    @abstractmethod
    def can_handle(self, action_kind: str) -> bool:
        """
        Check if this command can handle the given action kind.

        Args:
            action_kind: The action kind string

        Returns:
            True if this command can handle the action kind
        """
        pass

    def report(self, text: str) -> None:
        """Tell the user in the chat why an action could not be carried out."""
        self.runtime.add_message("assistant", text, kind="error")
