"""
Chat service: persist an incoming conversation and prepare it for the agent.

Responsibility: ensure user and chat rows exist, insert only new messages,
convert UI messages to plain {role, content} turns, and generate chat titles.
Called by the API handlers; no HTTP here.
"""

import logging
from dataclasses import dataclass

from sqlalchemy.orm import Session

from app.agent.llm import complete
from app.core.config import DEFAULT_CHAT_TITLE
from app.db.database import SessionLocal
from app.schemas.chat import ChatMessage
from app.services.chat_repository import ChatRepository

logger = logging.getLogger(__name__)

TITLE_MAX_LENGTH = 80


@dataclass
class PreparedChat:
    """Outcome of persisting one chat request."""

    chat_id: str
    created: bool
    inserted_messages: int


def message_text(message: ChatMessage) -> str:
    """Plain text of a message: string content as-is, otherwise text parts joined by newlines."""
    if isinstance(message.content, str):
        return message.content
    parts = message.parts if message.parts is not None else (message.content or [])
    return "\n".join(p.text for p in parts if p.type == "text" and p.text)


def to_agent_messages(messages: list[ChatMessage]) -> list[dict[str, str]]:
    return [{"role": m.role, "content": message_text(m)} for m in messages]


def prepare_chat(db: Session, chat_id: str, user_id: str, messages: list[ChatMessage]) -> PreparedChat:
    """
    Ensure the user and chat rows exist and store the messages not seen before.
    Each step's failure is logged and does not stop the following ones.
    """
    repo = ChatRepository(db)
    created = False
    inserted = 0

    try:
        repo.ensure_user(user_id)
    except Exception:
        db.rollback()
        logger.exception("[chat_service:prepare_chat] error creating user user_id=%s", user_id)

    try:
        if repo.get_chat_by_id(chat_id) is None:
            repo.save_chat(chat_id, user_id=user_id, title=DEFAULT_CHAT_TITLE, visibility="private")
            created = True
    except Exception:
        db.rollback()
        logger.exception("[chat_service:prepare_chat] error creating chat chat_id=%s", chat_id)

    try:
        inserted = len(repo.save_messages(chat_id, [m.to_record() for m in messages]))
    except Exception:
        db.rollback()
        logger.exception("[chat_service:prepare_chat] error saving messages chat_id=%s", chat_id)

    logger.info("[chat_service:prepare_chat] chat_id=%s created=%s inserted=%d", chat_id, created, inserted)
    return PreparedChat(chat_id=chat_id, created=created, inserted_messages=inserted)


def save_message(db: Session, chat_id: str, message: ChatMessage) -> int:
    """Store a single message (skipped if its id is already stored). Returns rows inserted."""
    return len(ChatRepository(db).save_messages(chat_id, [message.to_record()]))


def build_title_prompt(first_message: str) -> str:
    return (
        "Genera un titolo breve (massimo 80 caratteri) per una conversazione che inizia con il "
        "messaggio seguente. Rispondi solo con il titolo, senza virgolette.\n\n"
        f"Messaggio: {first_message}"
    )


def generate_chat_title(chat_id: str, first_message: str) -> None:
    """Generate a title from the first user message and store it. Runs after the response is sent."""
    text = (first_message or "").strip()
    if not text:
        return
    try:
        title = complete(build_title_prompt(text[:1000])).strip().strip('"').strip()
    except Exception:
        logger.exception("[chat_service:generate_chat_title] title generation failed chat_id=%s", chat_id)
        return
    if not title:
        return
    db = SessionLocal()
    try:
        ChatRepository(db).update_chat_title(chat_id, title[:TITLE_MAX_LENGTH])
        logger.info("[chat_service:generate_chat_title] chat_id=%s title=%r", chat_id, title)
    finally:
        db.close()
