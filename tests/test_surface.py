from __future__ import annotations

from workstation_agent.desktop import DesktopSurface, Element, Geometry


def _surface() -> tuple:
    surface = DesktopSurface(800, 600)
    panel = surface.add(Element(id="panel", classes={"card", "wide"}, rect=Geometry(100, 100, 300, 200)))
    field = surface.add(Element(tag="input", classes={"address-bar"}, parent=panel, rect=Geometry(110, 110, 200, 30)))
    button = surface.add(Element(tag="button", classes={"go"}, parent=panel, rect=Geometry(320, 110, 60, 30)))
    return surface, panel, field, button


def test_query_by_id_class_and_tag() -> None:
    surface, panel, field, button = _surface()
    assert surface.query("#panel") is panel
    assert surface.query(".card.wide") is panel
    assert surface.query("input.address-bar") is field
    assert surface.query("button") is button


def test_query_descendant_selector() -> None:
    surface, panel, field, button = _surface()
    assert surface.query("#panel .go") is button
    assert surface.query(".card input") is field
    assert surface.query("#elsewhere .go") is None


def test_unsupported_selectors_match_nothing() -> None:
    surface, *_ = _surface()
    assert surface.query("#panel > .go") is None
    assert surface.query("[data-x]") is None
    assert surface.query("") is None
    assert surface.query(None) is None


def test_element_at_prefers_deepest_element() -> None:
    surface, panel, field, button = _surface()
    assert surface.element_at(120, 120) is field
    assert surface.element_at(200, 250) is panel
    assert surface.element_at(10, 10) is None


def test_remove_drops_descendants_and_focus() -> None:
    surface, panel, field, button = _surface()
    surface.focused = field
    surface.remove(panel)
    assert surface.elements == []
    assert surface.focused is None


def test_scroll_is_clamped_to_content() -> None:
    surface = DesktopSurface(800, 600)
    box = surface.add(Element(rect=Geometry(0, 0, 100, 100), scroll_height=300))
    assert surface.scroll(box, 500) == 200
    assert surface.scroll(box, -1000) == 0


def test_scroll_without_known_content_only_stops_at_top() -> None:
    surface = DesktopSurface(800, 600)
    box = surface.add(Element(rect=Geometry(0, 0, 100, 100)))
    assert surface.scroll(box, 250) == 250
    assert surface.scroll(box, -300) == 0
