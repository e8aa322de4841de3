"""Generative AI calls proxied by the backend: decisions, images and web search."""

import logging
from typing import Any, Dict, List, Optional

import openai

from .actions import ACTION_REFERENCE, RESPONSE_SCHEMA
from .config import AI_API_KEY, AI_BASE_URL, AI_CHAT_MODEL, AI_IMAGE_MODEL, AI_SEARCH_MODEL
from .exceptions import AIServiceError, AIServiceUnavailableError

logger = logging.getLogger(__name__)


def build_system_instruction() -> str:
    """System instruction describing the desktop and the action vocabulary."""
    lines = [
        "You are an AI assistant with a virtual workstation. You can control a virtual mouse cursor to interact with applications on the desktop.",
        "With every request, you will receive the current state of the desktop, including desktop dimensions and details for all open windows (ID, title, position, size). Use this information to understand what's on the screen and where to position items. The user's request will follow the desktop state.",
        "Your primary role is to find and display information for the user, not to narrate it back to them in the chat. Use the browser to find information and leave the results on the screen for the user to read. Use the 'speak' action to explain your steps, not to deliver the final answer.",
        'Your response MUST be a JSON object with a single key "sequence", which is an array of action objects. Do not add any extra text or markdown.',
        "Desktop icons: #icon-docs, #icon-browser, #icon-doodle, #icon-studio, #icon-explorer.",
        "To resize a window, move the mouse to its maximize/restore button (selector: '#window-id .maximize-btn') and click it.",
        "To search the web, open the browser, move to 'input.address-bar', click it, then type the query with enter set to true.",
        "Available actions:",
    ]
    for i, reference in enumerate(ACTION_REFERENCE, 1):
        lines.append(f"{i}. {reference}")
    lines.extend([
        'Example Task: "Make the document window fullscreen."',
        'Assuming desktop state shows: Open Windows: - Window ID: #window-docs-1, Title: "📝 New Document", Maximized: false',
        '{ "sequence": [',
        '    {"action": "speak", "text": "Okay, I\'ll make the document window fullscreen."},',
        '    {"action": "move_mouse_to_element", "selector": "#window-docs-1 .maximize-btn"},',
        '    {"action": "click"}',
        "]}",
    ])
    return "\n".join(lines)


SYSTEM_INSTRUCTION = build_system_instruction()


def _strip_code_fence(content: str) -> str:
    if "```json" in content:
        return content.split("```json")[1].split("```")[0].strip()
    if "```" in content:
        return content.split("```")[1].split("```")[0].strip()
    return content


def _citations(response) -> List[Dict[str, Any]]:
    """Collect unique url citations from a Responses API result."""
    sources: List[Dict[str, Any]] = []
    seen = set()
    for item in response.output or []:
        if getattr(item, "type", None) != "message":
            continue
        for part in getattr(item, "content", None) or []:
            for annotation in getattr(part, "annotations", None) or []:
                if getattr(annotation, "type", None) != "url_citation":
                    continue
                if annotation.url in seen:
                    continue
                seen.add(annotation.url)
                sources.append({"web": {"uri": annotation.url, "title": annotation.title or annotation.url}})
    return sources


class AIService:
    """OpenAI-compatible client for the three proxied AI calls."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        chat_model: Optional[str] = None,
        image_model: Optional[str] = None,
        search_model: Optional[str] = None,
        client: Optional[Any] = None,
    ):
        """
        Initialize the AI service.

        A missing API key does not raise: the service stays unconfigured and
        every call fails with AIServiceUnavailableError, so the server can
        keep running and report the problem.

        Args:
            api_key: API key (defaults to config value)
            base_url: Endpoint override for OpenAI-compatible servers (defaults to config value)
            chat_model: Model for decisions (defaults to config value)
            image_model: Model for image generation (defaults to config value)
            search_model: Model for web-search summaries (defaults to config value)
            client: Pre-built client (for testing)
        """
        self.chat_model = chat_model or AI_CHAT_MODEL
        self.image_model = image_model or AI_IMAGE_MODEL
        self.search_model = search_model or AI_SEARCH_MODEL
        self.initialization_error: Optional[str] = None
        self.client = client

        if self.client is None:
            key = api_key or AI_API_KEY
            if not key:
                self.initialization_error = (
                    "API key not set. Set WORKSTATION_AI_API_KEY or OPENAI_API_KEY in the environment or a .env file."
                )
                logger.error("AI service initialization failed: %s", self.initialization_error)
            else:
                self.client = openai.OpenAI(api_key=key, base_url=base_url or AI_BASE_URL)
                logger.info("AI service initialized (chat model: %s)", self.chat_model)

    @property
    def available(self) -> bool:
        return self.client is not None

    def _require_client(self):
        if self.client is None:
            raise AIServiceUnavailableError(self.initialization_error)
        return self.client

    def decide(self, prompt: str) -> str:
        """
        Ask the model for an action sequence.

        Returns:
            The raw JSON decision text; validation is the caller's job
        """
        client = self._require_client()
        messages = [
            {"role": "system", "content": SYSTEM_INSTRUCTION},
            {"role": "user", "content": prompt},
        ]
        try:
            try:
                response = client.chat.completions.create(
                    model=self.chat_model,
                    messages=messages,
                    temperature=0.2,
                    response_format={
                        "type": "json_schema",
                        "json_schema": {"name": "action_sequence", "schema": RESPONSE_SCHEMA},
                    },
                )
            except openai.BadRequestError as format_error:
                # Endpoints without structured output still accept plain JSON mode
                logger.info("Structured output not supported, using JSON mode: %s", format_error)
                response = client.chat.completions.create(
                    model=self.chat_model,
                    messages=messages,
                    temperature=0.2,
                    response_format={"type": "json_object"},
                )
            content = (response.choices[0].message.content or "").strip()
        except openai.OpenAIError as e:
            logger.error("AI chat error: %s", e)
            raise AIServiceError("Error processing AI chat request.") from e
        except Exception as e:
            logger.error("Unexpected AI chat response: %s", e)
            raise AIServiceError("Error processing AI chat request.") from e

        return _strip_code_fence(content)

    def generate_image(self, prompt: str) -> Optional[str]:
        """Generate one image; returns its base64 bytes, or None if the model returned nothing."""
        client = self._require_client()
        kwargs: Dict[str, Any] = {"model": self.image_model, "prompt": prompt, "n": 1}
        if self.image_model.startswith("dall-e"):
            kwargs["response_format"] = "b64_json"
        try:
            result = client.images.generate(**kwargs)
            if not result.data:
                return None
            return result.data[0].b64_json or None
        except openai.OpenAIError as e:
            logger.error("AI image generation error: %s", e)
            raise AIServiceError("Error generating image.") from e
        except Exception as e:
            logger.error("Unexpected AI image response: %s", e)
            raise AIServiceError("Error generating image.") from e

    def search(self, query: str) -> Dict[str, Any]:
        """
        Summarize web results for a query.

        Returns:
            {"summary": str, "sources": [{"web": {"uri": str, "title": str}}, ...]}
        """
        client = self._require_client()
        try:
            response = client.responses.create(
                model=self.search_model,
                tools=[{"type": "web_search_preview"}],
                input=f'Summarize information about "{query}" from the web.',
            )
            return {"summary": response.output_text or "", "sources": _citations(response)}
        except openai.OpenAIError as e:
            logger.error("AI web search error: %s", e)
            raise AIServiceError("Error with web search.") from e
        except Exception as e:
            logger.error("Unexpected AI web search response: %s", e)
            raise AIServiceError("Error with web search.") from e
