"""
LangGraph agent: call_model → (run_tools → call_model)* → END.

The model streams its answer; token deltas and tool activity are pushed through
the LangGraph custom stream so the API can relay them as they happen.
"""

import json
import logging
from typing import Any, Literal, TypedDict

from langgraph.config import get_stream_writer
from langgraph.graph import END, StateGraph

from app.agent.llm import chat_with_tools_stream
from app.agent.prompts import build_system_prompt
from app.agent.tools import AGENT_TOOLS, execute_tool
from app.core.config import AGENT_MAX_TOKENS, MAX_AGENTIC_ROUNDS

logger = logging.getLogger(__name__)

FALLBACK_ANSWER = "Non sono riuscito a completare la richiesta. Riprova tra poco."


class AgentState(TypedDict):
    messages: list  # OpenAI chat messages, system prompt first
    pending_tool_calls: list  # [{"id", "name", "arguments"}] requested by the last model turn
    tools_used: list
    answer: str
    rounds: int


def _call_model(state: AgentState) -> dict:
    """Node 1: one streamed model turn. Ends with either a final answer or tool calls."""
    writer = get_stream_writer()
    messages = state["messages"]
    rounds = (state.get("rounds") or 0) + 1
    logger.info("[graph:call_model] IN  round=%d messages=%d", rounds, len(messages))
    streamed: list[str] = []
    for item in chat_with_tools_stream(messages, AGENT_TOOLS, max_tokens=AGENT_MAX_TOKENS):
        if item[0] == "content_delta":
            streamed.append(item[1])
            writer({"event": "answer_delta", "content": item[1]})
        elif item[0] == "tool_calls":
            tool_calls, content = item[1], (item[2] or "").strip()
            assistant_msg: dict[str, Any] = {
                "role": "assistant",
                "content": content,
                "tool_calls": [
                    {
                        "id": tc["id"],
                        "type": "function",
                        "function": {"name": tc["name"], "arguments": json.dumps(tc.get("arguments") or {})},
                    }
                    for tc in tool_calls
                ],
            }
            logger.info("[graph:call_model] OUT tool_calls=%s", [tc["name"] for tc in tool_calls])
            return {
                "messages": messages + [assistant_msg],
                "pending_tool_calls": tool_calls,
                "rounds": rounds,
            }
    answer = "".join(streamed).strip()
    logger.info("[graph:call_model] OUT answer_len=%d", len(answer))
    return {"answer": answer, "pending_tool_calls": [], "rounds": rounds}


def _run_tools(state: AgentState) -> dict:
    """Node 2: execute every pending tool call and append the results."""
    writer = get_stream_writer()
    messages = list(state["messages"])
    tools_used = list(state.get("tools_used") or [])
    for tc in state.get("pending_tool_calls") or []:
        name = tc.get("name", "")
        args = tc.get("arguments") or {}
        writer({"event": "tool", "id": tc.get("id", ""), "name": name, "arguments": args})
        result = execute_tool(name, args)
        writer({"event": "tool_result", "id": tc.get("id", ""), "name": name, "result": result})
        tools_used.append(name)
        messages.append({"role": "tool", "tool_call_id": tc.get("id", ""), "content": result})
    logger.info("[graph:run_tools] OUT tools_used=%s", tools_used)
    return {"messages": messages, "pending_tool_calls": [], "tools_used": tools_used}


def _route_after_model(state: AgentState) -> Literal["run_tools", "__end__"]:
    """Run tools while the model asks for them and rounds remain; otherwise finish."""
    pending = state.get("pending_tool_calls") or []
    rounds = state.get("rounds") or 0
    next_node = "run_tools" if (pending and rounds < MAX_AGENTIC_ROUNDS) else END
    logger.info("[graph:route_after_model] pending=%d round=%d -> %s", len(pending), rounds, next_node)
    return next_node


def build_graph():
    graph = StateGraph(AgentState)

    graph.add_node("call_model", _call_model)
    graph.add_node("run_tools", _run_tools)

    graph.set_entry_point("call_model")
    graph.add_conditional_edges("call_model", _route_after_model)
    graph.add_edge("run_tools", "call_model")

    return graph.compile()


def build_messages(history: list[dict[str, str]]) -> list[dict[str, str]]:
    """System prompt followed by the conversation's non-empty user/assistant/system turns."""
    messages = [{"role": "system", "content": build_system_prompt()}]
    for m in history:
        role = (m.get("role") or "user").strip().lower()
        content = (m.get("content") or "").strip()
        if role in ("user", "assistant", "system") and content:
            messages.append({"role": role, "content": content})
    return messages


def run_agent_stream(history: list[dict[str, str]], thread_id: str = ""):
    """
    Run the agent over the full conversation and yield events:
    {"event": "answer_delta", "content"}, {"event": "tool", "id", "name", "arguments"},
    {"event": "tool_result", "id", "name", "result"}, {"event": "done", "answer", "tools_used"},
    or {"event": "error", "message"}.
    """
    logger.info("[run_agent_stream] START thread_id=%s history_len=%d", thread_id, len(history))
    initial: AgentState = {
        "messages": build_messages(history),
        "pending_tool_calls": [],
        "tools_used": [],
        "answer": "",
        "rounds": 0,
    }
    final: dict = dict(initial)
    try:
        graph = build_graph()
        for mode, chunk in graph.stream(
            initial,
            config={"recursion_limit": 2 * MAX_AGENTIC_ROUNDS + 2},
            stream_mode=["custom", "values"],
        ):
            if mode == "custom":
                yield chunk
            elif mode == "values":
                final = chunk
    except Exception as e:
        logger.exception("[run_agent_stream] Agent stream failed")
        yield {"event": "error", "message": str(e)}
        return
    answer = (final.get("answer") or "").strip() or FALLBACK_ANSWER
    tools_used = list(final.get("tools_used") or [])
    logger.info("[run_agent_stream] END thread_id=%s tools_used=%s answer_len=%d", thread_id, tools_used, len(answer))
    yield {"event": "done", "answer": answer, "tools_used": tools_used}
