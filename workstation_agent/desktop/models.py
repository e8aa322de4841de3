"""Data models for the simulated desktop."""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, List, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from .canvas import DoodleCanvas
    from .surface import Element


class AppKind(str, Enum):
    """Application kinds a window can host."""
    DOCS = "docs"
    DOODLE = "doodle"
    STUDIO = "studio"
    BROWSER = "browser"
    EXPLORER = "explorer"


# Apps of which at most one window may be open
SINGLETON_APPS = frozenset({AppKind.BROWSER, AppKind.DOODLE, AppKind.STUDIO, AppKind.EXPLORER})

# Window kinds that can be bound to a saved file
FILE_BACKED_APPS = frozenset({AppKind.DOCS, AppKind.DOODLE, AppKind.STUDIO})

APP_TITLES: Dict[AppKind, str] = {
    AppKind.DOCS: "📝 New Document",
    AppKind.DOODLE: "🎨 Doodle Pad",
    AppKind.STUDIO: "🖼️ Image Studio",
    AppKind.BROWSER: "🌐 Web Browser",
    AppKind.EXPLORER: "📁 File Explorer",
}

APP_ICONS: Dict[AppKind, str] = {
    AppKind.DOCS: "📝",
    AppKind.DOODLE: "🎨",
    AppKind.STUDIO: "🖼️",
    AppKind.BROWSER: "🌐",
    AppKind.EXPLORER: "📁",
}

# Default (width, height) of a freshly opened window
APP_SIZES: Dict[AppKind, tuple] = {
    AppKind.DOCS: (500, 400),
    AppKind.DOODLE: (420, 460),
    AppKind.STUDIO: (460, 480),
    AppKind.BROWSER: (640, 480),
    AppKind.EXPLORER: (520, 400),
}


@dataclass
class Geometry:
    """Rectangle in desktop coordinates (pixels)."""
    left: float
    top: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.left + self.width

    @property
    def bottom(self) -> float:
        return self.top + self.height

    @property
    def center(self) -> tuple:
        return (self.left + self.width / 2, self.top + self.height / 2)

    def contains(self, x: float, y: float) -> bool:
        return self.left <= x < self.right and self.top <= y < self.bottom

    def copy(self) -> "Geometry":
        return replace(self)

    def to_dict(self) -> Dict[str, float]:
        return {"left": self.left, "top": self.top, "width": self.width, "height": self.height}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Geometry":
        return cls(
            left=float(data["left"]),
            top=float(data["top"]),
            width=float(data["width"]),
            height=float(data["height"]),
        )


@dataclass
class FileBinding:
    """Saved file a window is associated with."""
    type: str  # docs | doodle | studio
    name: str

    def to_dict(self) -> Dict[str, str]:
        return {"type": self.type, "name": self.name}


@dataclass
class BrowserState:
    """Last search shown by a browser window."""
    query: str = ""
    sources: List[Dict[str, Any]] = field(default_factory=list)
    summary: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {"query": self.query, "sources": list(self.sources), "summary": self.summary}


@dataclass
class ClipboardItem:
    """Single clipboard entry; only images are produced today."""
    type: str
    data: str


@dataclass
class ChatMessage:
    """One line of the chat transcript."""
    role: str  # user | assistant
    text: str
    kind: str = "speech"  # speech | notice | error

    def to_dict(self) -> Dict[str, str]:
        return {"role": self.role, "text": self.text, "kind": self.kind}


@dataclass(eq=False)
class Window:
    """An app window on the desktop."""
    id: str
    key: str
    app: AppKind
    title: str
    geometry: Geometry
    z_index: int = 0
    maximized: bool = False
    restore_geometry: Optional[Geometry] = None
    file_binding: Optional[FileBinding] = None
    browser_state: Optional[BrowserState] = None

    # Document writer
    body_html: str = ""

    # Image studio
    image_src: Optional[str] = None
    image_prompt: str = ""
    image_error: Optional[str] = None

    # Doodle pad
    canvas: Optional["DoodleCanvas"] = None

    # Browser: index of the source shown in page view, None for the results list
    browser_page: Optional[int] = None
    browser_status: Optional[str] = None

    # File explorer
    explorer_view: str = "list"
    explorer_entries: List[Dict[str, Any]] = field(default_factory=list)

    # Root element of this window on the surface
    element: Optional["Element"] = None

    @property
    def selector(self) -> str:
        return f"#{self.id}"
