"""Simulated desktop the agent's actions are replayed against."""

from .apps import DesktopApps, image_data_url
from .canvas import DoodleCanvas
from .models import (
    AppKind,
    BrowserState,
    ChatMessage,
    ClipboardItem,
    FileBinding,
    Geometry,
    Window,
)
from .runtime import DesktopRuntime, RuntimeState, icon_selector
from .surface import DesktopSurface, Element

__all__ = [
    "AppKind",
    "BrowserState",
    "ChatMessage",
    "ClipboardItem",
    "DesktopApps",
    "DesktopRuntime",
    "DesktopSurface",
    "DoodleCanvas",
    "Element",
    "FileBinding",
    "Geometry",
    "RuntimeState",
    "Window",
    "icon_selector",
    "image_data_url",
]
