from __future__ import annotations

from types import SimpleNamespace

import openai
import pytest

from workstation_agent import ai_service as ai_module
from workstation_agent.ai_service import SYSTEM_INSTRUCTION, AIService
from workstation_agent.exceptions import AIServiceError, AIServiceUnavailableError


class FakeCompletions:
    def __init__(self, content: str) -> None:
        self.content = content
        self.calls = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


class FakeImages:
    def __init__(self, data) -> None:
        self.data = data
        self.calls = []

    def generate(self, **kwargs):
        self.calls.append(kwargs)
        if isinstance(self.data, Exception):
            raise self.data
        return SimpleNamespace(data=self.data)


class FakeResponses:
    def __init__(self, response) -> None:
        self.response = response

    def create(self, **kwargs):
        return self.response


def _client(content: str = "{}", image_data=None, response=None):
    return SimpleNamespace(
        chat=SimpleNamespace(completions=FakeCompletions(content)),
        images=FakeImages(image_data if image_data is not None else []),
        responses=FakeResponses(response),
    )


def test_missing_key_leaves_service_unavailable(monkeypatch) -> None:
    monkeypatch.setattr(ai_module, "AI_API_KEY", None)
    service = AIService()
    assert service.available is False
    assert "API key not set" in service.initialization_error
    with pytest.raises(AIServiceUnavailableError):
        service.decide("hi")


def test_system_instruction_lists_every_action() -> None:
    assert SYSTEM_INSTRUCTION.count('{"action": "') >= 15
    assert "#icon-docs" in SYSTEM_INSTRUCTION


def test_decide_strips_code_fences_and_sends_schema() -> None:
    client = _client('```json\n{"sequence": []}\n```')
    service = AIService(client=client, chat_model="test-model")
    assert service.decide("DESKTOP STATE:\n...") == '{"sequence": []}'

    call = client.chat.completions.calls[0]
    assert call["model"] == "test-model"
    assert call["messages"][0] == {"role": "system", "content": SYSTEM_INSTRUCTION}
    assert call["response_format"]["type"] == "json_schema"


def test_generate_image_returns_base64() -> None:
    client = _client(image_data=[SimpleNamespace(b64_json="iVBORabc")])
    service = AIService(client=client, image_model="dall-e-3")
    assert service.generate_image("a fox") == "iVBORabc"
    assert client.images.calls[0]["response_format"] == "b64_json"


def test_generate_image_without_data_is_none() -> None:
    service = AIService(client=_client(image_data=[]), image_model="gpt-image-1")
    assert service.generate_image("a fox") is None


def test_generate_image_upstream_error() -> None:
    service = AIService(client=_client(image_data=openai.OpenAIError("quota")))
    with pytest.raises(AIServiceError):
        service.generate_image("a fox")


def test_search_collects_unique_citations() -> None:
    cats = SimpleNamespace(type="url_citation", url="https://example.com/cats", title="Cats")
    response = SimpleNamespace(
        output_text="Cats purr.",
        output=[
            SimpleNamespace(type="web_search_call"),
            SimpleNamespace(
                type="message",
                content=[
                    SimpleNamespace(annotations=[cats, cats]),
                    SimpleNamespace(annotations=[SimpleNamespace(type="url_citation", url="https://b.org", title=None)]),
                ],
            ),
        ],
    )
    service = AIService(client=_client(response=response))
    assert service.search("cats") == {
        "summary": "Cats purr.",
        "sources": [
            {"web": {"uri": "https://example.com/cats", "title": "Cats"}},
            {"web": {"uri": "https://b.org", "title": "https://b.org"}},
        ],
    }


def test_decide_with_empty_choices_is_service_error() -> None:
    service = AIService(client=_client())
    service.client.chat.completions.create = lambda **kwargs: SimpleNamespace(choices=[])
    with pytest.raises(AIServiceError, match="Error processing AI chat request."):
        service.decide("hi")


def test_generate_image_with_malformed_data_is_service_error() -> None:
    service = AIService(client=_client(image_data=[SimpleNamespace()]))
    with pytest.raises(AIServiceError, match="Error generating image."):
        service.generate_image("a fox")


def test_search_with_malformed_citation_is_service_error() -> None:
    response = SimpleNamespace(
        output_text="Cats purr.",
        output=[SimpleNamespace(type="message", content=[SimpleNamespace(annotations=[SimpleNamespace(type="url_citation")])])],
    )
    service = AIService(client=_client(response=response))
    with pytest.raises(AIServiceError, match="Error with web search."):
        service.search("cats")
