"""
API route aggregator: register endpoints; no logic, only delegate to handlers.
"""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import Response
from sqlalchemy.orm import Session

from app.api.handlers import handle_chat, handle_save_message
from app.db.database import get_db

router = APIRouter()


# --- System ---

@router.get("/", tags=["system"])
def root():
    return {"status": "Waste collection assistant running"}


@router.get("/health", tags=["system"])
def health():
    return {"ok": True}


# --- Chat ---

@router.post(
    "/api/chat",
    tags=["chat"],
    summary="Chat with the waste-collection agent (streamed)",
    description=(
        "Body {id?, messages[]}. Stores the chat and any new messages, then streams the agent's answer "
        "as an AI SDK UI message stream. 429 when rate-limited, 400 on invalid body, 500 on internal error."
    ),
)
async def post_chat(request: Request, db: Session = Depends(get_db)) -> Response:
    return await handle_chat(request, db)


@router.post(
    "/api/messages",
    tags=["chat"],
    summary="Store one chat message",
    description="Body {chatId, message}. Returns {success: true}; 400 when a field is missing, 500 on failure.",
)
async def post_message(request: Request, db: Session = Depends(get_db)) -> Response:
    return await handle_save_message(request, db)
