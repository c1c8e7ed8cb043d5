"""
Tests for the LangGraph agent loop. The LLM stream and tool execution are mocked.
"""

import json
from unittest.mock import patch

from app.agent.graph import FALLBACK_ANSWER, build_messages, run_agent_stream

HISTORY = [{"role": "user", "content": "Quando passa il vetro in Via Roma a Cittadella?"}]


def scripted_llm(*turns):
    """Return a side_effect that replays one scripted model turn per call."""
    calls = iter(turns)

    def fake_stream(messages, tools, max_tokens=1024):
        yield from next(calls)

    return fake_stream


ZONE_CALL = ("tool_calls", [
    {"id": "call_1", "name": "find_zone_collection_info",
     "arguments": {"address": "Via Roma", "municipality": "Cittadella"}},
], "")
ANSWER = [("content_delta", "Il vetro "), ("content_delta", "passa il martedì."), ("content_done",)]


def test_build_messages_puts_system_prompt_first() -> None:
    messages = build_messages([
        {"role": "user", "content": " Ciao "},
        {"role": "assistant", "content": ""},
        {"role": "tool", "content": "ignored"},
    ])
    assert messages[0]["role"] == "system"
    assert "Cittadella" in messages[0]["content"]
    assert messages[1:] == [{"role": "user", "content": "Ciao"}]


def test_answer_without_tools() -> None:
    with patch("app.agent.graph.chat_with_tools_stream", side_effect=scripted_llm(ANSWER)), \
         patch("app.agent.graph.execute_tool") as mock_tool:
        events = list(run_agent_stream(HISTORY, thread_id="t1"))

    assert [e["event"] for e in events] == ["answer_delta", "answer_delta", "done"]
    assert events[-1] == {"event": "done", "answer": "Il vetro passa il martedì.", "tools_used": []}
    mock_tool.assert_not_called()


def test_tool_round_then_answer() -> None:
    zone = json.dumps({"zone": "B"})
    with patch("app.agent.graph.chat_with_tools_stream", side_effect=scripted_llm([ZONE_CALL], ANSWER)) as mock_llm, \
         patch("app.agent.graph.execute_tool", return_value=zone) as mock_tool:
        events = list(run_agent_stream(HISTORY))

    assert [e["event"] for e in events] == ["tool", "tool_result", "answer_delta", "answer_delta", "done"]
    assert events[0] == {
        "event": "tool",
        "id": "call_1",
        "name": "find_zone_collection_info",
        "arguments": {"address": "Via Roma", "municipality": "Cittadella"},
    }
    assert events[1]["result"] == zone
    assert events[-1]["tools_used"] == ["find_zone_collection_info"]
    mock_tool.assert_called_once_with("find_zone_collection_info", {"address": "Via Roma", "municipality": "Cittadella"})

    # Second model turn sees the assistant tool call and the tool result.
    second_messages = mock_llm.call_args_list[1].args[0]
    assert second_messages[-2]["tool_calls"][0]["id"] == "call_1"
    assert second_messages[-1] == {"role": "tool", "tool_call_id": "call_1", "content": zone}


def test_rounds_are_capped() -> None:
    turns = [[ZONE_CALL]] * 3
    with patch("app.agent.graph.MAX_AGENTIC_ROUNDS", 2), \
         patch("app.agent.graph.chat_with_tools_stream", side_effect=scripted_llm(*turns)) as mock_llm, \
         patch("app.agent.graph.execute_tool", return_value="{}"):
        events = list(run_agent_stream(HISTORY))

    assert mock_llm.call_count == 2
    assert events[-1] == {"event": "done", "answer": FALLBACK_ANSWER, "tools_used": ["find_zone_collection_info"]}


def test_llm_failure_yields_error_event() -> None:
    def broken(messages, tools, max_tokens=1024):
        raise RuntimeError("OpenAI unavailable")
        yield  # pragma: no cover

    with patch("app.agent.graph.chat_with_tools_stream", side_effect=broken):
        events = list(run_agent_stream(HISTORY))

    assert events == [{"event": "error", "message": "OpenAI unavailable"}]
