"""Cursor and window runtime of the simulated desktop."""

import hmac
import inspect
import logging
import random
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Tuple

from ..config import DESKTOP_HEIGHT, DESKTOP_WIDTH, FRAME_RATE, TESTING_PASSWORD, TIME_SCALE
from .animation import Animator
from .models import (
    APP_ICONS,
    APP_SIZES,
    APP_TITLES,
    AppKind,
    ChatMessage,
    ClipboardItem,
    FileBinding,
    Geometry,
    SINGLETON_APPS,
    Window,
)
from .surface import DesktopSurface, Element

logger = logging.getLogger(__name__)

CURSOR_HOME = (100.0, 100.0)
Z_INDEX_START = 10
WINDOW_MIN_LEFT = 120

# Icon order on the desktop, top to bottom
DESKTOP_ICONS = (AppKind.DOCS, AppKind.BROWSER, AppKind.DOODLE, AppKind.STUDIO, AppKind.EXPLORER)


def icon_selector(kind: AppKind) -> str:
    return f"#icon-{kind.value}"


@dataclass
class RuntimeState:
    """Everything the interpreter mutates while replaying a sequence."""
    cursor: Tuple[float, float] = CURSOR_HOME
    # Registry key -> window; singleton apps use their kind, documents `docs-<n>`
    windows: Dict[str, Window] = field(default_factory=dict)
    active_window: Optional[Window] = None
    z_counter: int = Z_INDEX_START
    window_counter: int = 0
    clipboard: Optional[ClipboardItem] = None
    messages: List[ChatMessage] = field(default_factory=list)
    testing_mode: bool = False


class DesktopRuntime:
    """
    Owns the desktop: its state, element surface and cursor animator.

    Args:
        files: FileSessionClient used by apps that load or save files
        state: Pre-built state (a fresh one is created when omitted)
        width: Desktop width in pixels (defaults to config value)
        height: Desktop height in pixels (defaults to config value)
        time_scale: Multiplier for every delay (defaults to config value)
        frame_rate: Animation frame rate (defaults to config value)
        rng: Random source for window placement and cursor curves
        testing_password: Password unlocking testing mode (defaults to config value)
    """

    def __init__(
        self,
        files=None,
        state: Optional[RuntimeState] = None,
        width: Optional[int] = None,
        height: Optional[int] = None,
        time_scale: Optional[float] = None,
        frame_rate: Optional[int] = None,
        rng: Optional[random.Random] = None,
        testing_password: Optional[str] = TESTING_PASSWORD,
    ):
        from .apps import DesktopApps

        self.width = width or DESKTOP_WIDTH
        self.height = height or DESKTOP_HEIGHT
        self.files = files
        self.state = state or RuntimeState()
        self.rng = rng or random.Random()
        self.testing_password = testing_password
        self.surface = DesktopSurface(self.width, self.height)
        self.animator = Animator(
            self.get_cursor,
            self.set_cursor,
            time_scale=TIME_SCALE if time_scale is None else time_scale,
            frame_rate=frame_rate or FRAME_RATE,
            rng=self.rng,
        )
        self.apps = DesktopApps(self)
        self.username: Optional[str] = None
        # Asked for a file name when an unbound window's save button is clicked;
        # returning None cancels the save. Without a hook the default name is used.
        self.prompt_filename: Optional[Callable[[str], Optional[str]]] = None
        self._build_desktop()

    def _build_desktop(self) -> None:
        for i, kind in enumerate(DESKTOP_ICONS):
            self.surface.add(Element(
                tag="div",
                id=f"icon-{kind.value}",
                classes={"icon"},
                rect=Geometry(20, 20 + i * 90, 72, 80),
                on_click=lambda kind=kind: self.open_app(kind),
            ))

    # State

    def initialize(self, username: Optional[str] = None) -> None:
        """Reset to an empty desktop with a greeting in the transcript."""
        for window in list(self.state.windows.values()):
            self.surface.remove_window(window)
        self.state.cursor = CURSOR_HOME
        self.state.windows = {}
        self.state.active_window = None
        self.state.z_counter = Z_INDEX_START
        self.state.window_counter = 0
        self.state.clipboard = None
        self.state.messages = []
        self.state.testing_mode = False
        self.surface.focused = None
        if username is not None:
            self.username = username
        name = self.username or "there"
        self.add_message("assistant", f"Hello, {name}! I'm your AI assistant. What can I help you with today?")

    @property
    def open_windows(self) -> List[Window]:
        return list(self.state.windows.values())

    @property
    def active_window(self) -> Optional[Window]:
        return self.state.active_window

    @property
    def focused(self) -> Optional[Element]:
        return self.surface.focused

    def get_cursor(self) -> Tuple[float, float]:
        return self.state.cursor

    def set_cursor(self, x: float, y: float) -> None:
        self.state.cursor = (x, y)

    def add_message(self, role: str, text: str, kind: str = "speech") -> ChatMessage:
        message = ChatMessage(role=role, text=text, kind=kind)
        self.state.messages.append(message)
        logger.debug("[%s/%s] %s", role, kind, text)
        return message

    async def sleep(self, seconds: float) -> None:
        await self.animator.pause(seconds)

    # Testing mode

    def enable_testing_mode(self, password: str) -> bool:
        """Turn testing mode on if the password matches; never enabled without a configured password."""
        if not self.testing_password or not password:
            return False
        if not hmac.compare_digest(password.encode("utf-8"), self.testing_password.encode("utf-8")):
            return False
        self.state.testing_mode = True
        logger.info("Testing mode enabled")
        return True

    def disable_testing_mode(self) -> None:
        self.state.testing_mode = False

    # Windows

    def create_window(self, app: AppKind, title: Optional[str] = None) -> Window:
        """Open a new window of an app at a random spot and make it active."""
        self.state.window_counter += 1
        number = self.state.window_counter
        width, height = APP_SIZES[app]
        max_x = self.width - width - 20
        max_y = self.height - height - 20
        # Windows open to the right of the icon column
        left = self.rng.random() * max(0, max_x - WINDOW_MIN_LEFT) + WINDOW_MIN_LEFT
        top = self.rng.random() * max(0, max_y - 50) + 50
        left, top = self.clamp_position(width, height, left, top)

        key = f"docs-{number}" if app is AppKind.DOCS else app.value
        window = Window(
            id=f"window-{app.value}-{number}",
            key=key,
            app=app,
            title=title or APP_TITLES[app],
            geometry=Geometry(left, top, width, height),
        )
        self.state.windows[key] = window
        self.apps.render_chrome(window)
        self.set_active_window(window)
        logger.debug("Opened %s at (%d, %d)", window.id, left, top)
        return window

    def set_active_window(self, window: Window) -> None:
        if self.state.active_window is window:
            return
        self.state.z_counter += 1
        window.z_index = self.state.z_counter
        self.state.active_window = window

    def close_window(self, window: Window) -> None:
        if self.state.windows.get(window.key) is window:
            del self.state.windows[window.key]
        self.surface.remove_window(window)
        window.file_binding = None
        window.browser_state = None
        if self.state.active_window is window:
            self.state.active_window = None
        logger.debug("Closed %s", window.id)

    def toggle_maximize(self, window: Window) -> None:
        """Maximize a window, or restore the geometry it had before."""
        if window.maximized:
            if window.restore_geometry is not None:
                window.geometry = window.restore_geometry
            window.restore_geometry = None
            window.maximized = False
        else:
            window.restore_geometry = window.geometry.copy()
            window.maximized = True

    def clamp_position(self, width: float, height: float, left: float, top: float) -> Tuple[float, float]:
        left = max(0.0, min(left, self.width - width))
        top = max(0.0, min(top, self.height - height))
        return left, top

    def move_window(self, window: Window, left: float, top: float) -> Geometry:
        left, top = self.clamp_position(window.geometry.width, window.geometry.height, left, top)
        window.geometry = Geometry(left, top, window.geometry.width, window.geometry.height)
        return window.geometry

    def find_window(self, selector: str) -> Optional[Window]:
        """Window containing the first element a selector resolves to."""
        element = self.surface.query(selector)
        if element is None:
            return None
        return element.window

    def find_bound_window(self, file_types, name: str) -> Optional[Window]:
        for window in self.open_windows:
            binding = window.file_binding
            if binding is not None and binding.type in file_types and binding.name == name:
                return window
        return None

    def bind_file(self, window: Window, file_type: str, name: str) -> None:
        """Associate a window with a saved file and retitle it."""
        window.file_binding = FileBinding(type=file_type, name=name)
        window.title = f"{APP_ICONS[window.app]} {name}"

    def existing_app_window(self, kind: AppKind) -> Optional[Window]:
        """Window `open_app_via_icon` would reuse: the singleton, or the newest unbound document."""
        if kind in SINGLETON_APPS:
            return self.state.windows.get(kind.value)
        unbound = [w for w in self.open_windows if w.app is AppKind.DOCS and w.file_binding is None]
        if not unbound:
            return None
        return max(unbound, key=lambda w: w.z_index)

    # Apps

    async def open_app(self, kind: AppKind) -> Window:
        """Icon click handler: open an app, focusing singletons that are already open."""
        if kind is AppKind.DOCS:
            return self.apps.open_document()
        if kind is AppKind.BROWSER:
            return self.apps.open_browser()
        if kind is AppKind.DOODLE:
            return self.apps.open_doodle_pad()
        if kind is AppKind.STUDIO:
            return self.apps.open_image_studio()
        return await self.apps.open_file_explorer()

    async def open_app_via_icon(self, kind: AppKind) -> Optional[Window]:
        """
        Bring up an app the way a user would.

        An already open singleton (or an unbound document) is focused without
        animation. Otherwise the cursor travels to the desktop icon and clicks
        it, and the window that click opened is returned.

        Returns:
            The app window, or None if it could not be opened
        """
        existing = self.existing_app_window(kind)
        if existing is not None:
            self.set_active_window(existing)
            if kind is AppKind.EXPLORER:
                await self.apps.render_explorer(existing)
            return existing

        icon = self.surface.query(icon_selector(kind))
        if icon is None:
            return None
        await self.animator.curve_to(*self.surface.center(icon), 0.6)
        # No click when a window covers the icon
        if self.surface.element_at(*self.state.cursor) is icon:
            await self.click()
            await self.sleep(0.3)

        window = self.existing_app_window(kind)
        if window is not None:
            self.set_active_window(window)
        return window

    # Pointer

    async def move_cursor_to(self, element: Element, duration: float = 0.6) -> None:
        await self.animator.curve_to(*self.surface.center(element), duration)

    async def click(self) -> bool:
        """
        Click whatever is under the cursor.

        The click activates the window it lands in, moves focus to inputs and
        runs the nearest click handler of the element or its ancestors.

        Returns:
            False if nothing was under the cursor
        """
        element = self.surface.element_at(*self.state.cursor)
        if element is None:
            return False

        if element.window is not None and element.window.key in self.state.windows:
            self.set_active_window(element.window)
        self.surface.focused = element if element.is_input else None

        for node in [element, *element.ancestors()]:
            if node.on_click is not None:
                result = node.on_click()
                if inspect.isawaitable(result):
                    await result
                break
        return True

    async def press_enter(self, element: Element) -> None:
        if element.on_enter is not None:
            result = element.on_enter()
            if inspect.isawaitable(result):
                await result
