"""Commands working with saved files: listing, opening, saving and deleting."""

import logging

from ..desktop import AppKind
from ..desktop.models import FILE_BACKED_APPS
from ..exceptions import ApiError
from .base import Command

logger = logging.getLogger(__name__)


class ListFilesCommand(Command):
    """Command to show the saved files in the file explorer."""

    def can_handle(self, action_kind: str) -> bool:
        return action_kind == "list_files"

    async def execute(self, action) -> bool:
        window = await self.runtime.open_app_via_icon(AppKind.EXPLORER)
        if window is None:
            self.report("I couldn't open the File Explorer.")
            return False
        return True


class OpenFileCommand(Command):
    """Command to open a saved document or image by name."""

    def can_handle(self, action_kind: str) -> bool:
        return action_kind == "open_file"

    async def execute(self, action) -> bool:
        name = action.filename
        if not name:
            self.report("I was asked to open a file, but no file name was given.")
            return False

        try:
            found = await self.runtime.files.find_file(name)
        except ApiError as e:
            logger.warning("Looking up %s failed: %s", name, e)
            self.report(f'I couldn\'t open "{name}": {e}')
            return False

        if found is None:
            self.report(f'File not found: "{name}"')
            return False
        namespace, entry = found
        await self.runtime.apps.open_saved_file(namespace, name, entry)
        return True


class SaveActiveFileCommand(Command):
    """Command to save the active window's content under a file name."""

    def can_handle(self, action_kind: str) -> bool:
        return action_kind == "save_active_file"

    async def execute(self, action) -> bool:
        window = self.runtime.active_window
        if window is None:
            self.report("There's no active window to save.")
            return False
        if not action.filename:
            self.report("I was asked to save a file, but no file name was given.")
            return False
        if window.app not in FILE_BACKED_APPS:
            self.report(f'The "{window.title}" window can\'t be saved to a file.')
            return False
        return await self.runtime.apps.save_window(window, action.filename)


class DeleteFileCommand(Command):
    """Command to delete a saved file, documents first."""

    def can_handle(self, action_kind: str) -> bool:
        return action_kind == "delete_file"

    async def execute(self, action) -> bool:
        name = action.filename
        if not name:
            self.report("I was asked to delete a file, but no file name was given.")
            return False

        try:
            found = await self.runtime.files.find_file(name)
        except ApiError as e:
            logger.warning("Looking up %s failed: %s", name, e)
            self.report(f'I couldn\'t delete "{name}": {e}')
            return False

        if found is None:
            self.report(f'File not found: "{name}"')
            await self.runtime.apps.refresh_explorer()
            return False
        namespace, _ = found
        return await self.runtime.apps.delete_file(namespace, name)
