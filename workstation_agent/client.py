"""Backends the desktop talks to: the HTTP API, or the same store in-process."""

import logging
from typing import Any, Dict, Optional
from urllib.parse import quote

import requests

from .config import API_URL
from .exceptions import AIServiceError, AIServiceUnavailableError, ApiError, StoreError

logger = logging.getLogger(__name__)


class BackendClient:
    """Client for the workstation REST API.

    All methods are blocking; failures raise ApiError carrying the HTTP status
    and the message the server returned.
    """

    def __init__(self, base_url: Optional[str] = None, session: Optional[requests.Session] = None, timeout: float = 60.0):
        """
        Initialize the client.

        Args:
            base_url: Server root (defaults to config value); routes live under /api
            session: requests session to reuse (optional)
            timeout: Per-request timeout in seconds
        """
        self.base_url = (base_url or API_URL).rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout
        self.token: Optional[str] = None
        self.username: Optional[str] = None

    def _request(self, method: str, endpoint: str, payload: Any = None) -> Any:
        headers = {"Content-Type": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"

        url = f"{self.base_url}/api{endpoint}"
        try:
            response = self.session.request(method, url, json=payload, headers=headers, timeout=self.timeout)
        except requests.RequestException as e:
            logger.warning("%s %s failed: %s", method, endpoint, e)
            raise ApiError(0, f"Could not reach the server: {e}") from e

        if not response.ok:
            message = None
            try:
                body = response.json()
                if isinstance(body, dict):
                    message = body.get("message")
            except ValueError:
                pass
            raise ApiError(response.status_code, message or response.reason or "An unknown API error occurred")

        try:
            return response.json()
        except ValueError:
            return {}

    # Auth

    def signup(self, username: str, password: str) -> None:
        self._request("POST", "/signup", {"username": username, "password": password})

    def login(self, username: str, password: str) -> Dict[str, Any]:
        """Log in and keep the issued token for later calls; returns the user's data."""
        body = self._request("POST", "/login", {"username": username, "password": password})
        self.token = body.get("token")
        self.username = username
        return body.get("data") or {}

    def logout(self) -> None:
        if self.token:
            try:
                self._request("POST", "/logout")
            finally:
                self.token = None
                self.username = None

    # Files

    def get_files(self) -> Dict[str, Dict[str, Any]]:
        body = self._request("GET", "/files")
        return {"documents": body.get("documents") or {}, "images": body.get("images") or {}}

    def save_file(self, file_type: str, name: str, content: str) -> None:
        self._request("POST", "/files", {"type": file_type, "name": name, "content": content})

    def delete_file(self, file_type: str, name: str) -> None:
        self._request("DELETE", f"/files/{quote(file_type, safe='')}/{quote(name, safe='')}")

    # Sessions

    def list_sessions(self) -> Dict[str, Any]:
        body = self._request("GET", "/sessions")
        return body.get("sessions") or {}

    def save_session(self, state: Dict[str, Any]) -> str:
        body = self._request("POST", "/sessions", state)
        return body.get("id", "")

    def load_session(self, session_id: str) -> Dict[str, Any]:
        return self._request("GET", f"/sessions/{quote(session_id, safe='')}")

    def delete_session(self, session_id: str) -> None:
        self._request("DELETE", f"/sessions/{quote(session_id, safe='')}")

    # Storage

    def get_storage_usage(self) -> int:
        body = self._request("GET", "/storage")
        return int(body.get("used", 0))

    # AI

    def chat(self, prompt: str) -> str:
        body = self._request("POST", "/ai/chat", {"prompt": prompt})
        return body.get("decision") or ""

    def generate_image(self, prompt: str) -> Optional[str]:
        body = self._request("POST", "/ai/generate-image", {"prompt": prompt})
        return body.get("base64ImageBytes")

    def google_search(self, query: str) -> Dict[str, Any]:
        body = self._request("POST", "/ai/google-search", {"query": query})
        return {"summary": body.get("summary") or "", "sources": body.get("sources") or []}


class LocalBackend:
    """Same surface as BackendClient, served from an in-process store and AI service.

    Used by the CLI's --local mode and by tests. Store and AI errors are
    translated into ApiError with the status the HTTP server would have used.
    """

    def __init__(self, store, ai_service=None):
        self.store = store
        self.ai_service = ai_service
        self.token: Optional[str] = None
        self.username: Optional[str] = None

    def _user(self) -> str:
        try:
            return self.store.authenticate(self.token)
        except StoreError as e:
            raise ApiError(e.status, str(e)) from e

    def _store_call(self, func, *args):
        try:
            return func(self._user(), *args)
        except StoreError as e:
            raise ApiError(e.status, str(e)) from e

    def _ai_call(self, method: str, *args):
        self._user()
        if self.ai_service is None:
            raise ApiError(503, "AI service is unavailable.")
        try:
            return getattr(self.ai_service, method)(*args)
        except AIServiceUnavailableError as e:
            raise ApiError(503, f"AI service is unavailable. Server-side error: {e}") from e
        except AIServiceError as e:
            raise ApiError(500, str(e)) from e

    def signup(self, username: str, password: str) -> None:
        try:
            self.store.signup(username, password)
        except StoreError as e:
            raise ApiError(e.status, str(e)) from e

    def login(self, username: str, password: str) -> Dict[str, Any]:
        try:
            self.token = self.store.login(username, password)
        except StoreError as e:
            raise ApiError(e.status, str(e)) from e
        self.username = username
        return self.store.export_data(username)

    def logout(self) -> None:
        if self.token:
            self.store.logout(self.token)
        self.token = None
        self.username = None

    def get_files(self) -> Dict[str, Dict[str, Any]]:
        return self._store_call(self.store.get_files)

    def save_file(self, file_type: str, name: str, content: str) -> None:
        self._store_call(self.store.save_file, file_type, name, content)

    def delete_file(self, file_type: str, name: str) -> None:
        self._store_call(self.store.delete_file, file_type, name)

    def list_sessions(self) -> Dict[str, Any]:
        return self._store_call(self.store.list_sessions)

    def save_session(self, state: Dict[str, Any]) -> str:
        return self._store_call(self.store.save_session, state)

    def load_session(self, session_id: str) -> Dict[str, Any]:
        return self._store_call(self.store.get_session, session_id)

    def delete_session(self, session_id: str) -> None:
        self._store_call(self.store.delete_session, session_id)

    def get_storage_usage(self) -> int:
        return self._store_call(self.store.storage_used)

    def chat(self, prompt: str) -> str:
        return self._ai_call("decide", prompt)

    def generate_image(self, prompt: str) -> Optional[str]:
        return self._ai_call("generate_image", prompt)

    def google_search(self, query: str) -> Dict[str, Any]:
        return self._ai_call("search", query)
