"""Commands producing images and placing them into documents."""

import logging

from ..desktop import AppKind, ClipboardItem, image_data_url
from ..exceptions import ApiError
from .base import Command

logger = logging.getLogger(__name__)


class GenerateImageCommand(Command):
    """Command to generate an image in the Image Studio and copy it to the clipboard."""

    def can_handle(self, action_kind: str) -> bool:
        return action_kind == "generate_image"

    async def execute(self, action) -> bool:
        window = await self.runtime.open_app_via_icon(AppKind.STUDIO)
        if window is None:
            self.report("I couldn't open the Image Studio.")
            return False
        self.runtime.set_active_window(window)

        # Failures are shown inside the studio window
        image_url = await self.runtime.apps.generate_in_studio(window, action.prompt)
        if image_url is None:
            return False
        self.runtime.state.clipboard = ClipboardItem(type="image", data=image_url)
        logger.info("Image generated and copied to clipboard")
        return True


class FindImageCommand(Command):
    """Command to generate an image straight onto the clipboard, without opening a window."""

    def can_handle(self, action_kind: str) -> bool:
        return action_kind == "find_image"

    async def execute(self, action) -> bool:
        try:
            base64_bytes = await self.runtime.files.generate_image(action.prompt)
        except ApiError as e:
            logger.warning("find_image failed: %s", e)
            base64_bytes = None

        if not base64_bytes:
            self.report(f'Sorry, I couldn\'t create an image for: "{action.prompt}"')
            return False
        self.runtime.state.clipboard = ClipboardItem(type="image", data=image_data_url(base64_bytes))
        return True


class PlaceImageCommand(Command):
    """Command to append the clipboard image to a document."""

    def can_handle(self, action_kind: str) -> bool:
        return action_kind == "place_image_in_doc"

    async def execute(self, action) -> bool:
        clipboard = self.runtime.state.clipboard
        if clipboard is None or clipboard.type != "image":
            self.report("There's no image on the clipboard to place.")
            return False

        window = next(
            (w for w in self.runtime.open_windows if w.app is AppKind.DOCS and w.file_binding is None),
            None,
        )
        if window is None:
            window = await self.runtime.open_app_via_icon(AppKind.DOCS)
        if window is None:
            self.report("I couldn't open a document to place the image.")
            return False

        self.runtime.set_active_window(window)
        # The clipboard keeps the image so it can be placed again
        window.body_html += f'<img src="{clipboard.data}" alt="AI Generated Image">'
        return True
