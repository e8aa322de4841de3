"""Headless element tree standing in for the page the agent acts on.

Elements carry an id, a tag and classes so the selectors the model emits
(`#window-docs-3 .maximize-btn`, `input.address-bar`, `#icon-studio`) can be
resolved, plus a rectangle so the cursor can hit-test them.
"""

import re
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Optional, Set, Tuple, Union

from .models import Geometry, Window

Handler = Callable[[], Union[None, Awaitable[None]]]
Layout = Callable[[Geometry], Geometry]

_COMPOUND_RE = re.compile(r"^(?P<tag>[a-zA-Z][\w-]*)?(?P<rest>(?:[#.][\w-]+)*)$")
_PART_RE = re.compile(r"([#.])([\w-]+)")


@dataclass(eq=False)
class Element:
    """One node of the surface.

    An element either has a fixed rectangle in desktop coordinates (`rect`)
    or belongs to a window and computes its rectangle from the window frame
    through `layout`.
    """
    tag: str = "div"
    id: Optional[str] = None
    classes: Set[str] = field(default_factory=set)
    parent: Optional["Element"] = None
    window: Optional[Window] = None
    rect: Optional[Geometry] = None
    layout: Optional[Layout] = None
    on_click: Optional[Handler] = None
    on_enter: Optional[Handler] = None
    value: str = ""
    scroll_top: float = 0.0
    scroll_height: float = 0.0
    data: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_input(self) -> bool:
        return self.tag in ("input", "textarea")

    def ancestors(self):
        node = self.parent
        while node is not None:
            yield node
            node = node.parent

    @property
    def depth(self) -> int:
        return sum(1 for _ in self.ancestors())


def _parse_compound(text: str) -> Optional[Tuple[Optional[str], Optional[str], Set[str]]]:
    match = _COMPOUND_RE.match(text)
    if not match or not text:
        return None
    tag = match.group("tag")
    element_id = None
    classes: Set[str] = set()
    for prefix, name in _PART_RE.findall(match.group("rest")):
        if prefix == "#":
            element_id = name
        else:
            classes.add(name)
    return (tag.lower() if tag else None, element_id, classes)


def _matches(element: Element, compound: Tuple[Optional[str], Optional[str], Set[str]]) -> bool:
    tag, element_id, classes = compound
    if tag is not None and element.tag != tag:
        return False
    if element_id is not None and element.id != element_id:
        return False
    return classes <= element.classes


class DesktopSurface:
    """Ordered collection of elements with selector lookup and hit-testing."""

    def __init__(self, width: float, height: float):
        self.width = width
        self.height = height
        self.elements: List[Element] = []
        self.focused: Optional[Element] = None

    @property
    def desktop_rect(self) -> Geometry:
        return Geometry(0, 0, self.width, self.height)

    def add(self, element: Element) -> Element:
        """Append an element; children inherit the owning window of their parent."""
        if element.parent is not None and element.window is None:
            element.window = element.parent.window
        self.elements.append(element)
        return element

    def remove(self, element: Element) -> None:
        """Remove an element and all of its descendants."""
        doomed = {element}
        doomed.update(e for e in self.elements if element in set(e.ancestors()))
        self.elements = [e for e in self.elements if e not in doomed]
        if self.focused in doomed:
            self.focused = None

    def remove_children(self, element: Element) -> None:
        for child in [e for e in self.elements if e.parent is element]:
            self.remove(child)

    def remove_window(self, window: Window) -> None:
        self.elements = [e for e in self.elements if e.window is not window]
        if self.focused is not None and self.focused.window is window:
            self.focused = None

    def window_frame(self, window: Window) -> Geometry:
        """Visible frame of a window; maximized windows cover the desktop."""
        if window.maximized:
            return self.desktop_rect
        return window.geometry

    def bounds(self, element: Element) -> Geometry:
        """Rectangle of an element in desktop coordinates."""
        if element.window is not None:
            frame = self.window_frame(element.window)
            if element.layout is not None:
                return element.layout(frame)
            return frame.copy()
        if element.rect is not None:
            return element.rect.copy()
        return Geometry(0, 0, 0, 0)

    def center(self, element: Element) -> Tuple[float, float]:
        return self.bounds(element).center

    def query_all(self, selector: str) -> List[Element]:
        """
        Resolve a selector made of descendant compounds (`tag#id.class ...`).

        Unsupported or malformed selectors match nothing.
        """
        if not isinstance(selector, str):
            return []
        compounds = []
        for part in selector.split():
            compound = _parse_compound(part)
            if compound is None:
                return []
            compounds.append(compound)
        if not compounds:
            return []

        found = []
        for element in self.elements:
            if not _matches(element, compounds[-1]):
                continue
            remaining = compounds[:-1]
            for ancestor in element.ancestors():
                if not remaining:
                    break
                if _matches(ancestor, remaining[-1]):
                    remaining = remaining[:-1]
            if not remaining:
                found.append(element)
        return found

    def query(self, selector: str) -> Optional[Element]:
        """First element matching the selector in document order, or None."""
        matches = self.query_all(selector)
        return matches[0] if matches else None

    def element_at(self, x: float, y: float) -> Optional[Element]:
        """
        Topmost element under a point.

        Windows are stacked by z-index above desktop elements; inside one
        layer the deepest element wins, later elements winning ties.
        """
        hits = [e for e in self.elements if self.bounds(e).contains(x, y)]
        if not hits:
            return None

        window_hits = [e for e in hits if e.window is not None]
        if window_hits:
            top_z = max(e.window.z_index for e in window_hits)
            layer = [e for e in window_hits if e.window.z_index == top_z]
        else:
            layer = hits

        best = None
        best_depth = -1
        for element in layer:
            depth = element.depth
            if depth >= best_depth:
                best = element
                best_depth = depth
        return best

    def scroll(self, element: Element, pixels: float) -> float:
        """Scroll an element by a relative offset, clamped to its content when known."""
        top = max(0.0, element.scroll_top + pixels)
        if element.scroll_height > 0:
            visible = self.bounds(element).height
            top = min(top, max(0.0, element.scroll_height - visible))
        element.scroll_top = top
        return element.scroll_top
