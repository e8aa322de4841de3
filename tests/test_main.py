from __future__ import annotations

import asyncio

import pytest

from workstation_agent.main import handle_slash_command, main, print_messages
from workstation_agent.session import SessionManager


def _slash(text, runtime, files) -> None:
    asyncio.run(handle_slash_command(text, runtime, files, SessionManager(runtime)))


def test_state_command_prints_snapshot(runtime, files, capsys) -> None:
    _slash("/state", runtime, files)
    out = capsys.readouterr().out
    assert "Desktop Dimensions: 1280px wide, 720px tall." in out
    assert "The desktop is empty. No windows are open." in out


def test_files_command(runtime, files, backend, capsys) -> None:
    _slash("/files", runtime, files)
    assert "No saved files yet." in capsys.readouterr().out
    backend.save_file("documents", "notes.txt", "x")
    _slash("/files", runtime, files)
    assert "📝 notes.txt" in capsys.readouterr().out


def test_save_sessions_and_load(runtime, files, capsys) -> None:
    runtime.apps.open_document()
    _slash("/save", runtime, files)
    out = capsys.readouterr().out
    session_id = out.strip().split()[-1]
    assert session_id.startswith("session_")

    runtime.initialize()
    _slash(f"/load {session_id}", runtime, files)
    assert len(runtime.open_windows) == 1
    assert f"✓ Session {session_id} loaded" in capsys.readouterr().out


def test_load_unknown_session_prints_error(runtime, files, capsys) -> None:
    _slash("/load session_1", runtime, files)
    assert "✗ Session not found." in capsys.readouterr().out


def test_testing_command(runtime, files, capsys) -> None:
    _slash("/testing nope", runtime, files)
    assert "✗ Incorrect password" in capsys.readouterr().out
    _slash("/testing letmein", runtime, files)
    assert runtime.state.testing_mode is True
    _slash("/testing off", runtime, files)
    assert runtime.state.testing_mode is False


def test_print_messages_marks_errors(runtime, capsys) -> None:
    runtime.add_message("user", "hi")
    runtime.add_message("assistant", "oops", kind="error")
    assert print_messages(runtime.state.messages, 1) == 3
    lines = capsys.readouterr().out.splitlines()
    assert lines == ["🧑 hi", "🤖 ✗ oops"]


def test_main_requires_subcommand() -> None:
    with pytest.raises(SystemExit):
        main([])
