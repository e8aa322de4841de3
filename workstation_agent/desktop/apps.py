"""The desktop applications and the elements each one puts on the surface."""

import logging
from typing import Any, Dict, List, Optional, Tuple

from ..exceptions import ApiError
from .canvas import CANVAS_HEIGHT, CANVAS_WIDTH, DoodleCanvas
from .models import AppKind, BrowserState, FILE_BACKED_APPS, Geometry, Window
from .surface import Element, Layout

logger = logging.getLogger(__name__)

HEADER_HEIGHT = 36
BUTTON_SIZE = 24
ROW_HEIGHT = 56
GRID_CELL = (120, 130)

# Names offered by the save button of a window that is not bound to a file yet
DEFAULT_FILENAMES = {
    AppKind.DOCS: "document.txt",
    AppKind.DOODLE: "doodle.png",
    AppKind.STUDIO: "image.png",
}

STUDIO_PLACEHOLDER = "Enter a prompt via chat to generate an image."
STUDIO_NO_IMAGE = "Couldn't generate an image for that prompt."
STUDIO_FAILED = "An error occurred during image generation."
SEARCH_FAILED = "Sorry, something went wrong with the search."


def image_data_url(base64_bytes: str) -> str:
    """Wrap base64 image bytes in a data URL, PNG when the payload says so."""
    mime = "image/png" if base64_bytes.startswith("iVBOR") else "image/jpeg"
    return f"data:{mime};base64,{base64_bytes}"


def header_rect(frame: Geometry) -> Geometry:
    return Geometry(frame.left, frame.top, frame.width, HEADER_HEIGHT)


def body_rect(frame: Geometry) -> Geometry:
    return Geometry(frame.left, frame.top + HEADER_HEIGHT, frame.width, max(0.0, frame.height - HEADER_HEIGHT))


def body_region(
    left: float,
    top: float,
    width: Optional[float] = None,
    height: Optional[float] = None,
    right: float = 0.0,
    bottom: float = 0.0,
) -> Layout:
    """
    Layout of a box inside the window body.

    A negative `left` is measured from the right edge. Omitted sizes stretch
    to the body edge minus the `right` / `bottom` margin.
    """
    def layout(frame: Geometry) -> Geometry:
        body = body_rect(frame)
        x = body.left + left if left >= 0 else body.right + left
        w = width if width is not None else max(0.0, body.right - right - x)
        h = height if height is not None else max(0.0, body.height - top - bottom)
        return Geometry(x, body.top + top, w, h)
    return layout


def header_button(slot: int) -> Layout:
    """Layout of the n-th header button counted from the right edge."""
    def layout(frame: Geometry) -> Geometry:
        return Geometry(frame.right - (slot + 1) * (BUTTON_SIZE + 4) - 4, frame.top + 6, BUTTON_SIZE, BUTTON_SIZE)
    return layout


class DesktopApps:
    """Opens app windows on a runtime and wires their handlers into the surface."""

    def __init__(self, runtime):
        self.runtime = runtime

    @property
    def surface(self):
        return self.runtime.surface

    def find(self, window: Window, selector: str) -> Optional[Element]:
        return self.surface.query(f"#{window.id} {selector}")

    def body(self, window: Window) -> Optional[Element]:
        return self.find(window, ".window-body")

    def _add(self, parent: Element, layout: Layout, tag: str = "div", classes=(), **kwargs) -> Element:
        return self.surface.add(Element(tag=tag, classes=set(classes), parent=parent, layout=layout, **kwargs))

    # Window chrome

    def render_chrome(self, window: Window) -> None:
        """Root, header (title and controls) and body elements of a new window."""
        root = self.surface.add(Element(
            tag="div",
            id=window.id,
            classes={"app-window", "window", f"{window.app.value}-window"},
            window=window,
        ))
        window.element = root

        header = self._add(root, header_rect, tag="header", classes=("window-header",))
        self._add(
            header,
            lambda frame: Geometry(frame.left + 10, frame.top + 6, max(0.0, frame.width - 130), BUTTON_SIZE),
            tag="span",
            classes=("window-title",),
        )
        controls = self._add(
            header,
            lambda frame: Geometry(frame.right - 96, frame.top + 4, 92, HEADER_HEIGHT - 8),
            classes=("window-controls",),
        )
        self._add(
            controls, header_button(0), tag="button", classes=("close-btn",),
            on_click=lambda: self.runtime.close_window(window),
        )
        self._add(
            controls, header_button(1), tag="button", classes=("maximize-btn",),
            on_click=lambda: self.runtime.toggle_maximize(window),
        )
        if window.app in FILE_BACKED_APPS:
            self._add(
                controls, header_button(2), tag="button", classes=("save-btn",),
                on_click=lambda: self.on_save_button(window),
            )
        self._add(root, body_rect, classes=("window-body",))

    # Files

    async def refresh_explorer(self) -> None:
        explorer = self.runtime.state.windows.get(AppKind.EXPLORER.value)
        if explorer is not None:
            await self.render_explorer(explorer)

    async def save_file(self, namespace: str, name: str, content: str) -> bool:
        """Save through the backend and report the outcome in the chat."""
        try:
            await self.runtime.files.save_file(namespace, name, content)
        except ApiError as e:
            logger.warning("Saving %s/%s failed: %s", namespace, name, e)
            self.runtime.add_message("assistant", f'I couldn\'t save "{name}": {e}', kind="error")
            return False
        self.runtime.add_message("assistant", f'Saved {namespace[:-1]} as "{name}"', kind="notice")
        await self.refresh_explorer()
        return True

    async def delete_file(self, namespace: str, name: str) -> bool:
        try:
            await self.runtime.files.delete_file(namespace, name)
        except ApiError as e:
            logger.warning("Deleting %s/%s failed: %s", namespace, name, e)
            self.runtime.add_message("assistant", f'I couldn\'t delete "{name}": {e}', kind="error")
            return False
        self.runtime.add_message("assistant", f'Deleted {namespace[:-1]}: "{name}"', kind="notice")
        await self.refresh_explorer()
        return True

    def window_content(self, window: Window) -> Optional[Tuple[str, str]]:
        """
        What saving a window would store.

        Returns:
            (namespace, content), or None when the window has nothing to save
        """
        if window.app is AppKind.DOCS:
            return "documents", window.body_html
        if window.app is AppKind.DOODLE and window.canvas is not None:
            return "images", window.canvas.to_data_url()
        if window.app is AppKind.STUDIO and window.image_src:
            return "images", window.image_src
        return None

    async def save_window(self, window: Window, name: str) -> bool:
        """Save a window's content under a name and bind the window to it."""
        content = self.window_content(window)
        if content is None:
            self.runtime.add_message("assistant", "There is no image to save.", kind="error")
            return False
        namespace, data = content
        if not await self.save_file(namespace, name, data):
            return False
        self.runtime.bind_file(window, window.app.value, name)
        return True

    async def on_save_button(self, window: Window) -> None:
        if window.file_binding is not None:
            name = window.file_binding.name
        else:
            default = DEFAULT_FILENAMES[window.app]
            name = self.runtime.prompt_filename(default) if self.runtime.prompt_filename else default
        if name:
            await self.save_window(window, name)

    # Document writer

    def open_document(self, name: Optional[str] = None, content: str = "") -> Window:
        """Open a document writer, or focus the one already showing `name`."""
        if name is not None:
            existing = self.runtime.find_bound_window(("docs",), name)
            if existing is not None:
                self.runtime.set_active_window(existing)
                return existing

        window = self.runtime.create_window(AppKind.DOCS)
        window.body_html = content
        self.body(window).data["contenteditable"] = True
        if name is not None:
            self.runtime.bind_file(window, "docs", name)
        return window

    # Browser

    def open_browser(self) -> Window:
        existing = self.runtime.state.windows.get(AppKind.BROWSER.value)
        if existing is not None:
            self.runtime.set_active_window(existing)
            return existing

        window = self.runtime.create_window(AppKind.BROWSER)
        window.browser_state = BrowserState()
        body = self.body(window)
        address_bar = self._add(body, body_region(12, 8, height=28, right=64), tag="input", classes=("address-bar",))
        address_bar.on_enter = lambda: self.browser_search(window, address_bar.value)
        self._add(
            body, body_region(-56, 8, width=44, height=28), tag="button", classes=("search-button",),
            on_click=lambda: self.browser_search(window, address_bar.value),
        )
        self._add(body, body_region(0, 44), classes=("browser-content",))
        self.render_browser(window)
        return window

    async def browser_search(self, window: Window, query: str) -> None:
        """Run a web search and show the results in the browser window."""
        query = (query or "").strip()
        if not query:
            return
        address_bar = self.find(window, "input.address-bar")
        if address_bar is not None:
            address_bar.value = query
        window.browser_page = None
        window.browser_status = f'Searching for "{query}"...'
        self.render_browser(window)

        try:
            result = await self.runtime.files.google_search(query)
        except ApiError as e:
            logger.warning("Browser search failed: %s", e)
            window.browser_status = SEARCH_FAILED
            self.render_browser(window)
            return

        window.browser_state = BrowserState(
            query=query,
            sources=list(result.get("sources") or []),
            summary=result.get("summary") or "",
        )
        window.browser_status = None
        self.render_browser(window)

    def show_page(self, window: Window, index: int) -> None:
        window.browser_page = index
        self.render_browser(window)

    def show_results(self, window: Window) -> None:
        window.browser_page = None
        self.render_browser(window)

    def render_browser(self, window: Window) -> None:
        content = self.find(window, ".browser-content")
        if content is None:
            return
        self.surface.remove_children(content)
        content.scroll_top = 0
        content.scroll_height = 0

        if window.browser_status:
            self._add(content, body_region(12, 56, height=24, right=12), tag="p",
                      classes=("placeholder",), data={"text": window.browser_status})
            return

        state = window.browser_state
        if state is None or not state.query:
            self._add(content, body_region(12, 56, right=12, bottom=12), classes=("browser-homepage",),
                      data={"text": "Search the web using the address bar."})
            return

        if window.browser_page is not None and 0 <= window.browser_page < len(state.sources):
            web = state.sources[window.browser_page].get("web") or {}
            page = self._add(content, body_region(12, 52, right=12, bottom=12), classes=("browser-page-view",),
                             data={"title": web.get("title") or "Untitled", "uri": web.get("uri"),
                                   "summary": state.summary})
            self._add(page, body_region(12, 56, width=140, height=28), tag="button", classes=("back-button",),
                      on_click=lambda: self.show_results(window))
            return

        if not state.sources:
            self._add(content, body_region(12, 56, height=24, right=12), tag="p",
                      classes=("placeholder",), data={"text": "No results found."})
            return

        for i, source in enumerate(state.sources):
            web = source.get("web") or {}
            self._add(
                content,
                body_region(12, 56 + i * ROW_HEIGHT, height=ROW_HEIGHT - 8, right=12),
                classes=("google-result",),
                data={"index": i, "uri": web.get("uri") or "Unknown Source", "title": web.get("title") or "Untitled"},
                on_click=lambda i=i: self.show_page(window, i),
            )
        content.scroll_height = 24 + len(state.sources) * ROW_HEIGHT

    # Doodle pad

    def open_doodle_pad(self, name: Optional[str] = None, content: Optional[str] = None) -> Window:
        """Open the doodle pad; with a name, show that saved image in it."""
        window = self.runtime.state.windows.get(AppKind.DOODLE.value)
        if window is None:
            window = self.runtime.create_window(AppKind.DOODLE)
            window.canvas = DoodleCanvas()
            self._add(self.body(window), body_region(10, 10, width=CANVAS_WIDTH, height=CANVAS_HEIGHT),
                      tag="canvas", classes=("doodle-canvas",))
        else:
            self.runtime.set_active_window(window)

        if name is not None:
            window.canvas = DoodleCanvas()
            if content and not window.canvas.load_data_url(content):
                logger.warning("Could not decode image %s", name)
            self.runtime.bind_file(window, "doodle", name)
        return window

    # Image studio

    def open_image_studio(self) -> Window:
        existing = self.runtime.state.windows.get(AppKind.STUDIO.value)
        if existing is not None:
            self.runtime.set_active_window(existing)
            return existing

        window = self.runtime.create_window(AppKind.STUDIO)
        body = self.body(window)
        self._add(body, body_region(12, 8, height=24, right=12), classes=("image-prompt",))
        self._add(body, body_region(12, 40, right=12, bottom=12), classes=("image-container",))
        self.render_studio(window)
        return window

    def render_studio(self, window: Window) -> None:
        prompt = self.find(window, ".image-prompt")
        if prompt is not None:
            prompt.data["text"] = window.image_prompt or STUDIO_PLACEHOLDER
        container = self.find(window, ".image-container")
        if container is None:
            return
        self.surface.remove_children(container)
        if window.image_src:
            self._add(container, body_region(12, 40, right=12, bottom=12), tag="img",
                      data={"src": window.image_src})
        elif window.image_error:
            self._add(container, body_region(12, 40, height=24, right=12), tag="p",
                      classes=("error",), data={"text": window.image_error})

    async def generate_in_studio(self, window: Window, prompt: str) -> Optional[str]:
        """
        Generate an image into the studio window.

        Failures are shown inside the window and never raised.

        Returns:
            The image data URL, or None if nothing was generated
        """
        window.image_prompt = f'Prompt: "{prompt}"'
        window.image_src = None
        window.image_error = None
        self.render_studio(window)

        try:
            base64_bytes = await self.runtime.files.generate_image(prompt)
        except ApiError as e:
            logger.warning("Image generation failed: %s", e)
            window.image_error = STUDIO_FAILED
            self.render_studio(window)
            return None

        if not base64_bytes:
            window.image_error = STUDIO_NO_IMAGE
            self.render_studio(window)
            return None

        window.image_src = image_data_url(base64_bytes)
        self.render_studio(window)
        return window.image_src

    # Image viewer

    def open_image_viewer(self, name: str, content: str) -> Window:
        """Show a saved image: doodles in the doodle pad, anything else in the image studio."""
        existing = self.runtime.find_bound_window(("doodle", "studio"), name)
        if existing is not None:
            self.runtime.set_active_window(existing)
            return existing

        if "doodle" in name.lower():
            return self.open_doodle_pad(name, content)

        window = self.open_image_studio()
        window.image_prompt = f'Viewing: "{name}"'
        window.image_src = content
        window.image_error = None
        self.runtime.bind_file(window, "studio", name)
        self.render_studio(window)
        return window

    async def open_saved_file(self, namespace: str, name: str, entry: Dict[str, Any]) -> Window:
        if namespace == "documents":
            return self.open_document(name, entry.get("content", ""))
        return self.open_image_viewer(name, entry.get("content", ""))

    # File explorer

    async def open_file_explorer(self) -> Window:
        existing = self.runtime.state.windows.get(AppKind.EXPLORER.value)
        if existing is not None:
            self.runtime.set_active_window(existing)
            await self.render_explorer(existing)
            return existing

        window = self.runtime.create_window(AppKind.EXPLORER)
        header = self.find(window, ".window-header")
        for slot, view in ((3, "list"), (4, "grid")):
            self._add(
                header, header_button(slot), tag="button", classes=("view-toggle", view),
                data={"view": view}, on_click=lambda view=view: self.set_explorer_view(window, view),
            )
        await self.render_explorer(window)
        return window

    async def set_explorer_view(self, window: Window, view: str) -> None:
        window.explorer_view = view
        await self.render_explorer(window)

    async def _list_files(self) -> List[Dict[str, Any]]:
        """Saved files of both namespaces, newest first."""
        try:
            files = await self.runtime.files.get_files()
        except ApiError as e:
            logger.warning("Could not load files: %s", e)
            return []
        entries = []
        for namespace, file_type in (("documents", "document"), ("images", "image")):
            for name, data in (files.get(namespace) or {}).items():
                entries.append({
                    "name": name,
                    "type": file_type,
                    "namespace": namespace,
                    "modified": data.get("modified", 0),
                })
        entries.sort(key=lambda entry: entry["modified"], reverse=True)
        return entries

    async def render_explorer(self, window: Window) -> None:
        """Rebuild the explorer listing from the backend."""
        entries = await self._list_files()
        window.explorer_entries = entries
        body = self.body(window)
        if body is None:
            return
        self.surface.remove_children(body)
        for toggle in self.surface.query_all(f"#{window.id} .view-toggle"):
            toggle.classes.discard("active")
            if toggle.data.get("view") == window.explorer_view:
                toggle.classes.add("active")

        if not entries:
            self._add(body, body_region(12, 12, height=24, right=12), classes=("placeholder",),
                      data={"text": "No saved files yet."})
            return

        grid = window.explorer_view == "grid"
        for i, entry in enumerate(entries):
            layout = self._grid_cell(i) if grid else body_region(8, 8 + i * ROW_HEIGHT, height=ROW_HEIGHT - 8, right=8)
            row = self._add(
                body, layout, tag="li", classes=("file-grid-item" if grid else "file-item-row",),
                data={"filename": entry["name"], "filetype": entry["type"]},
                on_click=lambda entry=entry: self.open_entry(entry),
            )
            self._add(
                row,
                lambda frame, layout=layout: Geometry(layout(frame).right - 64, layout(frame).bottom - 28, 56, 22),
                tag="button", classes=("delete-file-btn",),
                data={"filename": entry["name"], "filetype": entry["type"]},
                on_click=lambda entry=entry: self.delete_file(entry["namespace"], entry["name"]),
            )
        if not grid:
            body.scroll_height = 16 + len(entries) * ROW_HEIGHT

    @staticmethod
    def _grid_cell(index: int) -> Layout:
        def layout(frame: Geometry) -> Geometry:
            body = body_rect(frame)
            columns = max(1, int((body.width - 8) // GRID_CELL[0]))
            column, row = index % columns, index // columns
            return Geometry(body.left + 8 + column * GRID_CELL[0], body.top + 8 + row * GRID_CELL[1],
                            GRID_CELL[0] - 8, GRID_CELL[1] - 8)
        return layout

    async def open_entry(self, entry: Dict[str, Any]) -> Optional[Window]:
        try:
            files = await self.runtime.files.get_files()
        except ApiError as e:
            logger.warning("Could not load files: %s", e)
            return None
        data = (files.get(entry["namespace"]) or {}).get(entry["name"])
        if data is None:
            return None
        return await self.open_saved_file(entry["namespace"], entry["name"], data)
