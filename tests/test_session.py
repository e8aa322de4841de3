from __future__ import annotations

import asyncio

import pytest

from workstation_agent.desktop import AppKind, ChatMessage
from workstation_agent.exceptions import ApiError, DesktopError
from workstation_agent.session import SessionManager

from conftest import PNG_B64


def _build_desktop(runtime) -> None:
    apps = runtime.apps
    doc = apps.open_document("notes.txt", "Hello <b>there</b>")
    runtime.toggle_maximize(doc)

    browser = apps.open_browser()
    asyncio.run(apps.browser_search(browser, "cats"))

    pad = apps.open_doodle_pad()
    pad.canvas.begin_stroke((10, 10))
    pad.canvas.extend_stroke((80, 40))

    studio = apps.open_image_studio()
    asyncio.run(apps.generate_in_studio(studio, "a red fox"))

    explorer = asyncio.run(apps.open_file_explorer())
    asyncio.run(apps.set_explorer_view(explorer, "grid"))

    runtime.move_window(browser, 300, 120)
    runtime.add_message("user", "show me cats")
    runtime.add_message("assistant", "Here you go.")
    runtime.add_message("assistant", "Saved document as \"notes.txt\"", kind="notice")


def test_save_and_load_restores_desktop(runtime) -> None:
    _build_desktop(runtime)
    sessions = SessionManager(runtime)
    before = sessions.serialize()
    messages = list(runtime.state.messages)

    session_id = asyncio.run(sessions.save())
    runtime.initialize()
    assert runtime.open_windows == []

    asyncio.run(sessions.load(session_id))
    assert sessions.serialize() == before
    assert runtime.state.messages == messages


def test_restored_windows_keep_kinds_geometry_and_bindings(runtime) -> None:
    _build_desktop(runtime)
    sessions = SessionManager(runtime)
    expected = [(w.app, w.geometry.copy(), w.maximized, w.file_binding) for w in runtime.open_windows]

    asyncio.run(sessions.restore(sessions.serialize()))
    restored = [(w.app, w.geometry, w.maximized, w.file_binding) for w in runtime.open_windows]
    assert restored == expected

    doc = runtime.open_windows[0]
    assert doc.title == "📝 notes.txt"
    runtime.toggle_maximize(doc)
    assert doc.maximized is False
    assert runtime.state.windows["studio"].image_src == f"data:image/png;base64,{PNG_B64}"
    assert runtime.state.windows["browser"].browser_state.query == "cats"
    assert runtime.state.windows["explorer"].explorer_view == "grid"


def test_serialized_window_shape(runtime) -> None:
    window = runtime.apps.open_document("notes.txt", "hi")
    data = SessionManager(runtime).serialize_window(window)
    assert data["app"] == "docs"
    assert data["content"] == "hi"
    assert data["fileInfo"] == {"type": "docs", "name": "notes.txt"}
    assert data["restore"] is None
    assert set(data) >= {"key", "title", "left", "top", "width", "height", "maximized"}


def test_restore_skips_unreadable_windows(runtime) -> None:
    state = {
        "openWindows": [
            {"app": "spreadsheet", "left": 0, "top": 0, "width": 10, "height": 10},
            {"app": "docs", "title": "📝 New Document", "left": 200, "top": 100, "width": 500, "height": 400},
            {"app": "browser"},
        ],
        "chatHistory": [{"role": "user", "text": "hello", "kind": "speech"}],
    }
    asyncio.run(SessionManager(runtime).restore(state))
    assert [w.app for w in runtime.open_windows] == [AppKind.DOCS]
    assert runtime.state.messages == [ChatMessage(role="user", text="hello", kind="speech")]


def test_restore_rejects_non_object(runtime) -> None:
    with pytest.raises(DesktopError):
        asyncio.run(SessionManager(runtime).restore("not a session"))


def test_list_is_newest_first_and_delete(runtime) -> None:
    sessions = SessionManager(runtime)
    first = asyncio.run(sessions.save())
    second = asyncio.run(sessions.save())
    assert asyncio.run(sessions.list()) == [second, first]

    asyncio.run(sessions.delete(first))
    assert asyncio.run(sessions.list()) == [second]
    with pytest.raises(ApiError) as excinfo:
        asyncio.run(sessions.load(first))
    assert excinfo.value.status == 404


def test_restore_ignores_malformed_browser_state(runtime) -> None:
    state = {
        "openWindows": [
            {"app": "browser", "left": 200, "top": 100, "width": 600, "height": 400, "browserState": "cats"},
        ],
        "chatHistory": [],
    }
    asyncio.run(SessionManager(runtime).restore(state))
    browser = runtime.state.windows["browser"]
    assert browser.browser_state.query == ""


def test_restore_clamps_geometry_to_smaller_desktop(runtime) -> None:
    state = {
        "openWindows": [
            {
                "app": "docs", "left": 1800, "top": 900, "width": 500, "height": 400,
                "maximized": True,
                "restore": {"left": 1800, "top": 900, "width": 500, "height": 400},
            },
        ],
        "chatHistory": [],
    }
    asyncio.run(SessionManager(runtime).restore(state))
    window = runtime.open_windows[0]
    assert (window.geometry.left, window.geometry.top) == (780, 320)
    assert (window.geometry.width, window.geometry.height) == (500, 400)
    assert (window.restore_geometry.left, window.restore_geometry.top) == (780, 320)
