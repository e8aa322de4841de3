from __future__ import annotations

import asyncio
import json
from types import SimpleNamespace

from workstation_agent.agent import BUSY_REPLY, ERROR_REPLY, NO_SEQUENCE_REPLY, ChatAgent, build_prompt
from workstation_agent.ai_service import AIService
from workstation_agent.commands import ActionInterpreter
from workstation_agent.exceptions import AIServiceError


def _agent(runtime) -> ChatAgent:
    return ChatAgent(runtime, interpreter=ActionInterpreter(runtime, action_delay=0))


def _decision(*actions) -> str:
    return json.dumps({"sequence": list(actions)})


def test_build_prompt() -> None:
    assert build_prompt("Desktop Dimensions: 1px wide, 1px tall.", "hi") == (
        "DESKTOP STATE:\nDesktop Dimensions: 1px wide, 1px tall.\n\nUSER REQUEST:\nhi"
    )


def test_turn_runs_returned_sequence(runtime, ai) -> None:
    ai.decisions = [_decision({"action": "speak", "text": "Opening the browser."})]
    assert asyncio.run(_agent(runtime).handle_user_input("  find cats  ")) is True

    texts = [(m.role, m.text) for m in runtime.state.messages[1:]]
    assert texts == [("user", "find cats"), ("assistant", "Opening the browser.")]
    assert ai.prompts[0].startswith("DESKTOP STATE:\nDesktop Dimensions: 1280px wide, 720px tall.")
    assert ai.prompts[0].endswith("USER REQUEST:\nfind cats")


def test_snapshot_sent_with_request_lists_windows(runtime, ai) -> None:
    runtime.apps.open_document()
    asyncio.run(_agent(runtime).handle_user_input("type hello"))
    assert "- Window ID: #window-docs-1" in ai.prompts[0]


def test_invalid_decision_is_one_error_reply(runtime, ai) -> None:
    ai.decisions = ['{"sequence": [{"action": "fly"}]}']
    assert asyncio.run(_agent(runtime).handle_user_input("hi")) is False
    last = runtime.state.messages[-1]
    assert (last.text, last.kind) == (ERROR_REPLY, "error")
    assert runtime.open_windows == []


def test_upstream_failure_is_error_reply(runtime, ai) -> None:
    ai.decisions = [AIServiceError("Error processing AI chat request.")]
    assert asyncio.run(_agent(runtime).handle_user_input("hi")) is False
    assert runtime.state.messages[-1].text == ERROR_REPLY


def test_decision_without_sequence(runtime, ai) -> None:
    ai.decisions = ['{"reply": "hello"}']
    assert asyncio.run(_agent(runtime).handle_user_input("hi")) is False
    assert runtime.state.messages[-1].text == NO_SEQUENCE_REPLY


def test_empty_input_and_testing_mode_are_ignored(runtime, ai) -> None:
    agent = _agent(runtime)
    assert asyncio.run(agent.handle_user_input("   ")) is False
    runtime.enable_testing_mode("letmein")
    assert asyncio.run(agent.handle_user_input("hello")) is False
    assert len(runtime.state.messages) == 1
    assert ai.prompts == []


def test_second_request_while_busy_is_turned_away(runtime, ai) -> None:
    ai.decisions = [_decision({"action": "speak", "text": "first done"})]
    agent = _agent(runtime)

    async def both():
        return await asyncio.gather(agent.handle_user_input("first"), agent.handle_user_input("second"))

    results = asyncio.run(both())
    assert results == [True, False]
    texts = [m.text for m in runtime.state.messages[1:]]
    assert texts == ["first", BUSY_REPLY, "first done"]
    assert len(ai.prompts) == 1
    assert agent.busy is False


def test_malformed_model_reply_is_error_reply(runtime, backend) -> None:
    empty_chat = SimpleNamespace(
        chat=SimpleNamespace(completions=SimpleNamespace(create=lambda **kwargs: SimpleNamespace(choices=[]))),
    )
    backend.ai_service = AIService(client=empty_chat)
    assert asyncio.run(_agent(runtime).handle_user_input("hello")) is False
    last = runtime.state.messages[-1]
    assert (last.text, last.kind) == (ERROR_REPLY, "error")
