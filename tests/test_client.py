from __future__ import annotations

import asyncio
from typing import Any, List

import pytest
import requests

from workstation_agent.client import BackendClient, LocalBackend
from workstation_agent.exceptions import AIServiceUnavailableError, ApiError
from workstation_agent.file_client import FileSessionClient, format_bytes
from workstation_agent.store import UserStore


class FakeResponse:
    def __init__(self, status_code: int, body: Any = None, reason: str = "") -> None:
        self.status_code = status_code
        self._body = body
        self.reason = reason

    @property
    def ok(self) -> bool:
        return self.status_code < 400

    def json(self) -> Any:
        if self._body is None:
            raise ValueError("no JSON body")
        return self._body


class FakeSession:
    def __init__(self, *responses: Any) -> None:
        self.responses: List[Any] = list(responses)
        self.calls: List[dict] = []

    def request(self, method, url, json=None, headers=None, timeout=None):
        self.calls.append({"method": method, "url": url, "json": json, "headers": headers})
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


def test_login_keeps_token_for_later_calls() -> None:
    session = FakeSession(
        FakeResponse(200, {"message": "Login successful.", "token": "tok", "data": {"files": {}}}),
        FakeResponse(200, {"documents": {"a.txt": {"content": "x", "modified": 1}}}),
    )
    client = BackendClient("http://server:10000/", session=session)
    assert client.login("alice", "Secret123") == {"files": {}}

    files = client.get_files()
    assert files == {"documents": {"a.txt": {"content": "x", "modified": 1}}, "images": {}}
    assert session.calls[0]["url"] == "http://server:10000/api/login"
    assert "Authorization" not in session.calls[0]["headers"]
    assert session.calls[1]["headers"]["Authorization"] == "Bearer tok"


def test_error_message_comes_from_body() -> None:
    client = BackendClient("http://server", session=FakeSession(FakeResponse(404, {"message": "File not found."})))
    with pytest.raises(ApiError) as excinfo:
        client.delete_file("documents", "a.txt")
    assert excinfo.value.status == 404
    assert str(excinfo.value) == "File not found."


def test_error_without_json_uses_reason() -> None:
    client = BackendClient("http://server", session=FakeSession(FakeResponse(502, None, "Bad Gateway")))
    with pytest.raises(ApiError) as excinfo:
        client.get_files()
    assert excinfo.value.status == 502
    assert excinfo.value.message == "Bad Gateway"


def test_unreachable_server_is_status_zero() -> None:
    client = BackendClient("http://server", session=FakeSession(requests.ConnectionError("refused")))
    with pytest.raises(ApiError) as excinfo:
        client.get_storage_usage()
    assert excinfo.value.status == 0


def test_names_are_quoted_in_urls() -> None:
    session = FakeSession(FakeResponse(200, {"message": "ok"}), FakeResponse(200, {"message": "ok"}))
    client = BackendClient("http://server", session=session)
    client.delete_file("documents", "my notes/v2.txt")
    client.delete_session("session_1")
    assert session.calls[0]["url"] == "http://server/api/files/documents/my%20notes%2Fv2.txt"
    assert session.calls[0]["method"] == "DELETE"
    assert session.calls[1]["url"] == "http://server/api/sessions/session_1"


def test_ai_calls_unwrap_bodies() -> None:
    session = FakeSession(
        FakeResponse(200, {"decision": '{"sequence": []}'}),
        FakeResponse(200, {"base64ImageBytes": None}),
        FakeResponse(200, {"summary": "s"}),
    )
    client = BackendClient("http://server", session=session)
    assert client.chat("hi") == '{"sequence": []}'
    assert client.generate_image("fox") is None
    assert client.google_search("cats") == {"summary": "s", "sources": []}
    assert session.calls[2]["json"] == {"query": "cats"}


def test_logout_forgets_token_even_on_failure() -> None:
    session = FakeSession(
        FakeResponse(200, {"token": "tok", "data": {}}),
        FakeResponse(500, {"message": "boom"}),
    )
    client = BackendClient("http://server", session=session)
    client.login("alice", "Secret123")
    with pytest.raises(ApiError):
        client.logout()
    assert client.token is None


def test_local_backend_translates_store_errors(store) -> None:
    backend = LocalBackend(store)
    with pytest.raises(ApiError) as excinfo:
        backend.get_files()
    assert excinfo.value.status == 401

    backend.signup("alice", "Secret123")
    with pytest.raises(ApiError) as excinfo:
        backend.signup("alice", "Secret123")
    assert excinfo.value.status == 409

    backend.login("alice", "Secret123")
    with pytest.raises(ApiError) as excinfo:
        backend.delete_file("documents", "missing.txt")
    assert excinfo.value.status == 404


def test_local_backend_without_ai_is_503(store) -> None:
    backend = LocalBackend(store)
    backend.signup("alice", "Secret123")
    backend.login("alice", "Secret123")
    with pytest.raises(ApiError) as excinfo:
        backend.chat("hi")
    assert excinfo.value.status == 503


def test_local_backend_unconfigured_ai_is_503(backend, ai) -> None:
    ai.decisions = [AIServiceUnavailableError("API key not set.")]
    with pytest.raises(ApiError) as excinfo:
        backend.chat("hi")
    assert excinfo.value.status == 503
    assert "API key not set." in excinfo.value.message


def test_find_file_prefers_documents(files, backend) -> None:
    backend.save_file("images", "same", "data:image/png;base64,AAAA")
    backend.save_file("documents", "same", "text")
    namespace, entry = asyncio.run(files.find_file("same"))
    assert namespace == "documents"
    assert entry["content"] == "text"
    assert asyncio.run(files.find_file("other")) is None


def test_storage_summary(files) -> None:
    summary = asyncio.run(files.storage_summary())
    assert summary.endswith(" / 10.0 MB")


@pytest.mark.parametrize(
    "size, text",
    [(0, "0 KB"), (1, "0 KB"), (2048, "2 KB"), (1536 * 1024, "1.5 MB"), (10 * 1024 * 1024, "10.0 MB")],
)
def test_format_bytes(size, text) -> None:
    assert format_bytes(size) == text


def test_file_session_client_runs_calls_off_loop() -> None:
    backend = LocalBackend(UserStore())
    backend.signup("alice", "Secret123")
    backend.login("alice", "Secret123")
    files = FileSessionClient(backend)
    asyncio.run(files.save_file("documents", "a.txt", "x"))
    assert asyncio.run(files.get_files())["documents"]["a.txt"]["content"] == "x"
