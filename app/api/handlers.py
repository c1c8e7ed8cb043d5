"""
API handlers: read request data, call services, map results/errors to HTTP.

Responsibility: Bridge HTTP types and services. Rate limiting, body validation,
the anonymous-user cookie and exception-to-HTTP mapping live here so services
stay free of FastAPI/HTTP types.
"""

import json
import logging
import uuid
from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse, Response, StreamingResponse
from pydantic import BaseModel, ValidationError
from sqlalchemy.orm import Session
from starlette.background import BackgroundTask
from starlette.concurrency import run_in_threadpool

from app.agent.graph import run_agent_stream
from app.api.stream import UI_STREAM_HEADERS, encode_ui_stream
from app.core.config import ANONYMOUS_COOKIE_MAX_AGE, ANONYMOUS_COOKIE_NAME, APP_ENV
from app.core.errors import RequestValidationFailed
from app.core.rate_limit import check_rate_limit
from app.schemas.chat import ChatRequest, SaveMessageRequest, SaveMessageResponse
from app.services.chat_service import generate_chat_title, prepare_chat, save_message, to_agent_messages

logger = logging.getLogger(__name__)


def client_identifier(request: Request) -> str:
    """Rate-limit key: first forwarded IP, then the real-IP header, else 'anonymous'."""
    forwarded = request.headers.get("x-forwarded-for", "")
    if forwarded.strip():
        return forwarded.split(",")[0].strip()
    return request.headers.get("x-real-ip", "").strip() or "anonymous"


async def parse_body(request: Request, model: type[BaseModel]) -> Any:
    """Read the JSON body and validate it against model. Raises RequestValidationFailed."""
    try:
        body = await request.json()
    except ValueError as e:
        raise RequestValidationFailed("Invalid request format", [{"msg": f"Malformed JSON: {e}"}]) from e
    try:
        return model.model_validate(body)
    except ValidationError as e:
        raise RequestValidationFailed("Invalid request format", json.loads(e.json())) from e


def _error(status_code: int, error: str, details: Any = None, headers: dict | None = None) -> JSONResponse:
    content: dict[str, Any] = {"error": error}
    if details is not None:
        content["details"] = details
    return JSONResponse(content, status_code=status_code, headers=headers)


async def handle_chat(request: Request, db: Session) -> Response:
    """
    POST /api/chat: rate limit → validate → user/chat/messages rows → stream the agent's answer.
    Nothing is written before the body has been validated.
    """
    try:
        allowed, rate_headers = check_rate_limit(client_identifier(request))
        if not allowed:
            return _error(429, "Too many requests. Please try again later.", headers=rate_headers)

        try:
            chat_request: ChatRequest = await parse_body(request, ChatRequest)
        except RequestValidationFailed as e:
            logger.info("[api:chat] rejected invalid body: %s", e.details)
            return _error(400, e.message, e.details)

        chat_id = str(chat_request.id) if chat_request.id else str(uuid.uuid4())
        user_id = request.cookies.get(ANONYMOUS_COOKIE_NAME)
        new_user = not user_id
        if new_user:
            user_id = str(uuid.uuid4())
        logger.info("[api:chat] IN  chat_id=%s messages=%d new_user=%s", chat_id, len(chat_request.messages), new_user)

        prepared = await run_in_threadpool(prepare_chat, db, chat_id, user_id, chat_request.messages)

        history = to_agent_messages(chat_request.messages)
        background = None
        if prepared.created:
            first_user = next((m["content"] for m in history if m["role"] == "user" and m["content"]), "")
            background = BackgroundTask(generate_chat_title, chat_id, first_user)

        response = StreamingResponse(
            encode_ui_stream(run_agent_stream(history, thread_id=chat_id)),
            media_type="text/event-stream",
            headers={**UI_STREAM_HEADERS, **rate_headers},
            background=background,
        )
        if new_user:
            response.set_cookie(
                ANONYMOUS_COOKIE_NAME,
                user_id,
                max_age=ANONYMOUS_COOKIE_MAX_AGE,
                httponly=True,
                secure=APP_ENV == "production",
                samesite="lax",
            )
        return response
    except Exception as e:
        logger.exception("[api:chat] API error")
        return _error(500, "Internal server error", str(e))


async def handle_save_message(request: Request, db: Session) -> Response:
    """POST /api/messages: store one message (typically the assistant's streamed reply)."""
    try:
        try:
            body = await request.json()
        except ValueError:
            body = None
        if not isinstance(body, dict) or not body.get("chatId") or not body.get("message"):
            return _error(400, "chatId and message required")

        try:
            payload = SaveMessageRequest.model_validate(body)
        except ValidationError as e:
            return _error(400, "Invalid request format", json.loads(e.json()))

        inserted = await run_in_threadpool(save_message, db, payload.chatId, payload.message)
        logger.info("[api:messages] chat_id=%s inserted=%d", payload.chatId, inserted)
        return JSONResponse(SaveMessageResponse().model_dump())
    except Exception as e:
        logger.exception("[api:messages] Error saving message")
        return _error(500, "Internal server error", str(e))
