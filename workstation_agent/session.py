"""Saving and restoring the whole desktop as a named session."""

import logging
from typing import Any, Dict, List, Optional

from .desktop import AppKind, BrowserState, ChatMessage, DoodleCanvas, FileBinding, Geometry, Window
from .exceptions import DesktopError

logger = logging.getLogger(__name__)


def _session_time(session_id: str) -> int:
    try:
        return int(session_id.split("_", 1)[1])
    except (IndexError, ValueError):
        return 0


class SessionManager:
    """Serializes the runtime to the backend's session store and back."""

    def __init__(self, runtime, files=None):
        self.runtime = runtime
        self.files = files or runtime.files

    # Serialization

    def serialize_window(self, window: Window) -> Dict[str, Any]:
        if window.app is AppKind.DOODLE and window.canvas is not None:
            content = window.canvas.to_data_url()
        elif window.app is AppKind.STUDIO:
            content = window.image_src or ""
        else:
            content = window.body_html
        return {
            "key": window.key,
            "app": window.app.value,
            "title": window.title,
            "left": window.geometry.left,
            "top": window.geometry.top,
            "width": window.geometry.width,
            "height": window.geometry.height,
            "maximized": window.maximized,
            "restore": window.restore_geometry.to_dict() if window.restore_geometry else None,
            "content": content,
            "imagePrompt": window.image_prompt,
            "explorerView": window.explorer_view,
            "fileInfo": window.file_binding.to_dict() if window.file_binding else None,
            "browserState": window.browser_state.to_dict() if window.browser_state else None,
        }

    def serialize(self) -> Dict[str, Any]:
        """The session payload: open windows in opening order plus the chat transcript."""
        return {
            "openWindows": [self.serialize_window(w) for w in self.runtime.open_windows],
            "chatHistory": [m.to_dict() for m in self.runtime.state.messages],
        }

    def _clamped(self, geometry: Geometry) -> Geometry:
        # Sessions saved on a larger desktop must still land on screen
        left, top = self.runtime.clamp_position(geometry.width, geometry.height, geometry.left, geometry.top)
        return Geometry(left, top, geometry.width, geometry.height)

    async def _restore_window(self, data: Dict[str, Any]) -> Optional[Window]:
        apps = self.runtime.apps
        app = AppKind(data["app"])
        # Parsed before anything opens so a bad entry leaves no window behind
        geometry = self._clamped(Geometry.from_dict(data))
        restore = self._clamped(Geometry.from_dict(data["restore"])) if data.get("restore") else None
        content = data.get("content") or ""

        if app is AppKind.DOCS:
            window = apps.open_document(content=content)
        elif app is AppKind.BROWSER:
            window = apps.open_browser()
            saved = data.get("browserState")
            if isinstance(saved, dict):
                window.browser_state = BrowserState(
                    query=saved.get("query") or "",
                    sources=list(saved.get("sources") or []),
                    summary=saved.get("summary") or "",
                )
            apps.render_browser(window)
        elif app is AppKind.DOODLE:
            window = apps.open_doodle_pad()
            if content:
                window.canvas = DoodleCanvas()
                window.canvas.load_data_url(content)
        elif app is AppKind.STUDIO:
            window = apps.open_image_studio()
            window.image_src = content or None
            window.image_prompt = data.get("imagePrompt") or ""
            apps.render_studio(window)
        else:
            window = await apps.open_file_explorer()
            window.explorer_view = data.get("explorerView") or "list"
            await apps.render_explorer(window)

        window.title = data.get("title") or window.title
        window.geometry = geometry
        window.maximized = bool(data.get("maximized"))
        window.restore_geometry = restore
        file_info = data.get("fileInfo")
        window.file_binding = FileBinding(type=file_info["type"], name=file_info["name"]) if file_info else None
        return window

    async def restore(self, state: Dict[str, Any]) -> None:
        """
        Replace the desktop with a serialized session.

        Windows are rebuilt with their kinds, geometries and file bindings;
        the transcript is restored verbatim.
        """
        if not isinstance(state, dict):
            raise DesktopError("Invalid session data.")

        self.runtime.initialize()
        self.runtime.state.messages = [
            ChatMessage(role=m.get("role", "assistant"), text=m.get("text", ""), kind=m.get("kind", "speech"))
            for m in state.get("chatHistory") or []
            if isinstance(m, dict)
        ]
        for data in state.get("openWindows") or []:
            try:
                await self._restore_window(data)
            except (AttributeError, KeyError, TypeError, ValueError) as e:
                logger.warning("Skipping unreadable window in session: %s", e)

    # Backend

    async def save(self) -> str:
        session_id = await self.files.save_session(self.serialize())
        logger.info("Saved session %s", session_id)
        return session_id

    async def load(self, session_id: str) -> None:
        state = await self.files.load_session(session_id)
        await self.restore(state)
        logger.info("Loaded session %s", session_id)

    async def list(self) -> List[str]:
        """Saved session ids, newest first."""
        sessions = await self.files.list_sessions()
        return sorted(sessions, key=_session_time, reverse=True)

    async def delete(self, session_id: str) -> None:
        await self.files.delete_session(session_id)
