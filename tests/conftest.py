from __future__ import annotations

import random
from typing import Any, Dict, List, Optional

import pytest

from workstation_agent.client import LocalBackend
from workstation_agent.commands import ActionInterpreter
from workstation_agent.desktop import DesktopRuntime
from workstation_agent.file_client import FileSessionClient
from workstation_agent.store import UserStore

USERNAME = "alice"
PASSWORD = "Secret123"
TESTING_PASSWORD = "letmein"

# 1x1 PNG
PNG_B64 = "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAQAAAC1HAwCAAAAC0lEQVR42mNkYAAAAAYAAjCB0C8AAAAASUVORK5CYII="


class FakeAIService:
    """Stands in for AIService; answers are set per test."""

    def __init__(self) -> None:
        self.available = True
        self.initialization_error: Optional[str] = None
        self.decisions: List[Any] = []
        self.image: Any = PNG_B64
        self.search_result: Any = {
            "summary": "Cats are small carnivorous mammals.",
            "sources": [
                {"web": {"uri": "https://example.com/cats", "title": "All about cats"}},
                {"web": {"uri": "https://example.org/felines", "title": "Felines"}},
            ],
        }
        self.prompts: List[str] = []
        self.queries: List[str] = []

    @staticmethod
    def _answer(value: Any) -> Any:
        if isinstance(value, Exception):
            raise value
        return value

    def decide(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if not self.decisions:
            return '{"sequence": []}'
        return self._answer(self.decisions.pop(0))

    def generate_image(self, prompt: str) -> Optional[str]:
        self.prompts.append(prompt)
        return self._answer(self.image)

    def search(self, query: str) -> Dict[str, Any]:
        self.queries.append(query)
        return self._answer(self.search_result)


@pytest.fixture
def store() -> UserStore:
    return UserStore()


@pytest.fixture
def ai() -> FakeAIService:
    return FakeAIService()


@pytest.fixture
def backend(store: UserStore, ai: FakeAIService) -> LocalBackend:
    backend = LocalBackend(store, ai)
    backend.signup(USERNAME, PASSWORD)
    backend.login(USERNAME, PASSWORD)
    return backend


@pytest.fixture
def files(backend: LocalBackend) -> FileSessionClient:
    return FileSessionClient(backend, max_storage=10 * 1024 * 1024)


@pytest.fixture
def runtime(files: FileSessionClient) -> DesktopRuntime:
    runtime = DesktopRuntime(
        files=files,
        width=1280,
        height=720,
        time_scale=0,
        frame_rate=60,
        rng=random.Random(7),
        testing_password=TESTING_PASSWORD,
    )
    runtime.initialize(USERNAME)
    return runtime


@pytest.fixture
def interpreter(runtime: DesktopRuntime) -> ActionInterpreter:
    return ActionInterpreter(runtime, action_delay=0)
