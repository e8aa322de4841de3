"""In-memory user store backing the REST API.

Data lives only as long as the process. Every public method takes the lock,
so the store can be shared between request threads.
"""

import copy
import json
import re
import secrets
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Dict

from werkzeug.security import check_password_hash, generate_password_hash

from .exceptions import AuthenticationError, InvalidRequestError, NotFoundError, UserExistsError

FILE_TYPES = ("documents", "images")

# At least 8 characters with a lowercase letter, an uppercase letter and a digit
_PASSWORD_RE = re.compile(r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d).{8,}$")


def validate_password(password: str) -> bool:
    return bool(_PASSWORD_RE.match(password or ""))


@dataclass
class UserRecord:
    """Stored data for one user."""
    password_hash: str
    files: Dict[str, Dict[str, Dict[str, Any]]] = field(
        default_factory=lambda: {"documents": {}, "images": {}}
    )
    sessions: Dict[str, Any] = field(default_factory=dict)


class UserStore:
    """Users, their files and sessions, and the bearer tokens issued at login."""

    def __init__(self):
        self._users: Dict[str, UserRecord] = {}
        self._tokens: Dict[str, str] = {}
        self._lock = threading.Lock()

    # Auth

    def signup(self, username: str, password: str) -> None:
        if not username or not password:
            raise InvalidRequestError("Username and password are required.")
        if not validate_password(password):
            raise InvalidRequestError("Password does not meet requirements.")
        with self._lock:
            if username in self._users:
                raise UserExistsError("Username is already taken.")
            self._users[username] = UserRecord(password_hash=generate_password_hash(password))

    def login(self, username: str, password: str) -> str:
        """Check credentials and issue a new token."""
        if not username or not password:
            raise InvalidRequestError("Username and password are required.")
        with self._lock:
            user = self._users.get(username)
            if user is None or not check_password_hash(user.password_hash, password):
                raise AuthenticationError("Invalid username or password.")
            token = secrets.token_urlsafe(32)
            self._tokens[token] = username
            return token

    def logout(self, token: str) -> None:
        with self._lock:
            self._tokens.pop(token, None)

    def authenticate(self, token: str) -> str:
        """Return the username a token was issued to."""
        if not token:
            raise AuthenticationError("Unauthorized: a bearer token is required.")
        with self._lock:
            username = self._tokens.get(token)
            if username is None or username not in self._users:
                raise AuthenticationError("Unauthorized: invalid or expired token.")
            return username

    def _user(self, username: str) -> UserRecord:
        user = self._users.get(username)
        if user is None:
            raise AuthenticationError("Unauthorized: User not found.")
        return user

    def export_data(self, username: str) -> Dict[str, Any]:
        with self._lock:
            user = self._user(username)
            return copy.deepcopy({"files": user.files, "sessions": user.sessions})

    # Files

    def get_files(self, username: str) -> Dict[str, Dict[str, Any]]:
        with self._lock:
            return copy.deepcopy(self._user(username).files)

    def save_file(self, username: str, file_type: str, name: str, content: str) -> None:
        """Create or overwrite a file; files are never versioned."""
        if file_type not in FILE_TYPES or not isinstance(name, str) or not name or not isinstance(content, str):
            raise InvalidRequestError("Invalid file data provided.")
        with self._lock:
            self._user(username).files[file_type][name] = {
                "content": content,
                "modified": int(time.time() * 1000),
            }

    def delete_file(self, username: str, file_type: str, name: str) -> None:
        if file_type not in FILE_TYPES:
            raise InvalidRequestError("Invalid file type.")
        with self._lock:
            files = self._user(username).files[file_type]
            if name not in files:
                raise NotFoundError("File not found.")
            del files[name]

    # Sessions

    def list_sessions(self, username: str) -> Dict[str, Any]:
        with self._lock:
            return copy.deepcopy(self._user(username).sessions)

    def save_session(self, username: str, state: Any) -> str:
        if not isinstance(state, dict):
            raise InvalidRequestError("Invalid session data provided.")
        with self._lock:
            sessions = self._user(username).sessions
            stamp = int(time.time() * 1000)
            while f"session_{stamp}" in sessions:
                stamp += 1
            session_id = f"session_{stamp}"
            sessions[session_id] = copy.deepcopy(state)
            return session_id

    def get_session(self, username: str, session_id: str) -> Dict[str, Any]:
        with self._lock:
            session = self._user(username).sessions.get(session_id)
            if session is None:
                raise NotFoundError("Session not found.")
            return copy.deepcopy(session)

    def delete_session(self, username: str, session_id: str) -> None:
        with self._lock:
            sessions = self._user(username).sessions
            if session_id not in sessions:
                raise NotFoundError("Session not found.")
            del sessions[session_id]

    # Storage

    def storage_used(self, username: str) -> int:
        """Size in bytes of the user's files and sessions serialized as JSON."""
        with self._lock:
            user = self._user(username)
            payload = json.dumps({"files": user.files, "sessions": user.sessions}, separators=(",", ":"))
        return len(payload.encode("utf-8"))
