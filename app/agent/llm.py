"""
Agent LLM: OpenAI chat completions (streaming with tools) and short plain completions.
"""

import json
import logging
from typing import Any

from openai import OpenAI

from app.core.config import (
    LLM_API_TIMEOUT,
    OPENAI_API_KEY,
    OPENAI_LLM_MODEL,
    OPENAI_TITLE_MODEL,
)
from app.core.errors import ServiceUnavailableError

logger = logging.getLogger(__name__)


def _client() -> OpenAI:
    if not OPENAI_API_KEY:
        raise ServiceUnavailableError("OPENAI_API_KEY must be set in .env")
    return OpenAI(api_key=OPENAI_API_KEY, timeout=LLM_API_TIMEOUT)


def complete(prompt: str, max_tokens: int = 64, model: str = OPENAI_TITLE_MODEL) -> str:
    """Single-turn completion. Returns the generated text ("" when the model returns nothing)."""
    logger.info("[llm:complete] IN  prompt_len=%d max_tokens=%d", len(prompt), max_tokens)
    response = _client().chat.completions.create(
        model=model,
        messages=[{"role": "user", "content": prompt}],
        max_tokens=max_tokens,
    )
    msg = response.choices[0].message if response.choices else None
    out = ((msg.content if msg else None) or "").strip()
    logger.info("[llm:complete] OUT response_len=%d", len(out))
    return out


def chat_with_tools_stream(
    messages: list[dict[str, Any]],
    tools: list[dict[str, Any]],
    max_tokens: int = 1024,
):
    """
    Call OpenAI chat with tools and stream the response. Yields:
    - ('content_delta', str) for each token of the final answer;
    - ('content_done',) when the answer is complete (no tool_calls);
    - ('tool_calls', list[dict], content_str) when the model called tools (content_str may be empty).
    """
    stream = _client().chat.completions.create(
        model=OPENAI_LLM_MODEL,
        messages=messages,
        tools=tools,
        max_tokens=max_tokens,
        stream=True,
    )
    content_parts: list[str] = []
    tool_calls_accum: dict[int, dict[str, Any]] = {}
    for chunk in stream:
        if not chunk.choices:
            continue
        d = chunk.choices[0].delta
        if getattr(d, "content", None):
            content_parts.append(d.content)
            yield ("content_delta", d.content)
        for tc in getattr(d, "tool_calls", None) or []:
            acc = tool_calls_accum.setdefault(tc.index, {"id": "", "name": "", "arguments": ""})
            if tc.id:
                acc["id"] = tc.id
            if tc.function is not None:
                if tc.function.name:
                    acc["name"] = tc.function.name
                if tc.function.arguments:
                    acc["arguments"] += tc.function.arguments
    full_content = "".join(content_parts)
    if tool_calls_accum:
        tool_calls_list = []
        for i in sorted(tool_calls_accum):
            t = tool_calls_accum[i]
            try:
                args = json.loads(t["arguments"]) if t["arguments"] else {}
            except json.JSONDecodeError:
                args = {}
            tool_calls_list.append({"id": t["id"], "name": t["name"], "arguments": args})
        logger.info("[llm:chat_with_tools_stream] OUT tool_calls=%s", [x["name"] for x in tool_calls_list])
        yield ("tool_calls", tool_calls_list, full_content)
    else:
        logger.info("[llm:chat_with_tools_stream] OUT content_done len=%d", len(full_content))
        yield ("content_done",)
