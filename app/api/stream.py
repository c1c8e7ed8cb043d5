"""
Encode agent events as the AI SDK UI message stream (Server-Sent Events).

Each frame is `data: <json>\\n\\n`; the stream ends with `data: [DONE]`.
"""

import json
import logging
import uuid
from typing import Any, Iterable, Iterator

logger = logging.getLogger(__name__)

UI_STREAM_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
    "x-vercel-ai-ui-message-stream": "v1",
}


def sse_frame(payload: dict[str, Any] | str) -> str:
    data = payload if isinstance(payload, str) else json.dumps(payload, ensure_ascii=False)
    return f"data: {data}\n\n"


def _tool_output(result: str) -> Any:
    try:
        return json.loads(result)
    except (TypeError, ValueError):
        return result


def encode_ui_stream(events: Iterable[dict], message_id: str | None = None) -> Iterator[str]:
    """Translate agent events (answer_delta, tool, tool_result, done, error) into UI stream frames."""
    message_id = message_id or str(uuid.uuid4())
    text_id: str | None = None
    round_text: list[str] = []  # text streamed since the last tool call

    yield sse_frame({"type": "start", "messageId": message_id})
    try:
        for evt in events:
            event_type = evt.get("event", "")
            if event_type == "answer_delta":
                if text_id is None:
                    text_id = str(uuid.uuid4())
                    yield sse_frame({"type": "text-start", "id": text_id})
                round_text.append(evt.get("content", ""))
                yield sse_frame({"type": "text-delta", "id": text_id, "delta": evt.get("content", "")})
            elif event_type == "tool":
                round_text = []
                if text_id is not None:
                    yield sse_frame({"type": "text-end", "id": text_id})
                    text_id = None
                yield sse_frame({
                    "type": "tool-input-available",
                    "toolCallId": evt.get("id", ""),
                    "toolName": evt.get("name", ""),
                    "input": evt.get("arguments") or {},
                })
            elif event_type == "tool_result":
                yield sse_frame({
                    "type": "tool-output-available",
                    "toolCallId": evt.get("id", ""),
                    "output": _tool_output(evt.get("result", "")),
                })
            elif event_type == "done":
                answer = evt.get("answer") or ""
                if answer and answer.strip() != "".join(round_text).strip():
                    if text_id is not None:
                        yield sse_frame({"type": "text-end", "id": text_id})
                    text_id = str(uuid.uuid4())
                    yield sse_frame({"type": "text-start", "id": text_id})
                    yield sse_frame({"type": "text-delta", "id": text_id, "delta": answer})
                if text_id is not None:
                    yield sse_frame({"type": "text-end", "id": text_id})
                    text_id = None
                yield sse_frame({"type": "finish"})
            elif event_type == "error":
                yield sse_frame({"type": "error", "errorText": evt.get("message", "")})
    except Exception as e:
        logger.exception("UI stream failed")
        yield sse_frame({"type": "error", "errorText": str(e)})
    yield sse_frame("[DONE]")
