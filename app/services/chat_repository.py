"""
SQL repository for users, chats and messages.

All writes are inserts; messages are append-only and never inserted twice
for the same id.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from app.db.models import Chat, Message, User

logger = logging.getLogger(__name__)


class ChatRepository:
    def __init__(self, db_session: Session):
        self.db = db_session

    # --- User Methods ---
    def ensure_user(self, user_id: str) -> User:
        """Return the user row, inserting an anonymous one if missing."""
        user = self.db.get(User, user_id)
        if user is not None:
            return user
        user = User(id=user_id, email=f"anonymous-{user_id}@local", password=None)
        self.db.add(user)
        self.db.commit()
        logger.info("[chat_repository:ensure_user] created user_id=%s", user_id)
        return user

    # --- Chat Methods ---
    def get_chat_by_id(self, chat_id: str) -> Optional[Chat]:
        return self.db.query(Chat).filter(Chat.id == chat_id).first()

    def save_chat(self, chat_id: str, user_id: str, title: str, visibility: str = "private") -> Chat:
        chat = Chat(id=chat_id, user_id=user_id, title=title, visibility=visibility)
        self.db.add(chat)
        self.db.commit()
        logger.info("[chat_repository:save_chat] created chat_id=%s user_id=%s", chat_id, user_id)
        return chat

    def update_chat_title(self, chat_id: str, title: str) -> bool:
        chat = self.get_chat_by_id(chat_id)
        if chat is None:
            return False
        chat.title = title
        self.db.commit()
        return True

    # --- Message Methods ---
    def get_messages_by_chat_id(self, chat_id: str) -> List[Message]:
        return (
            self.db.query(Message)
            .filter(Message.chat_id == chat_id)
            .order_by(Message.created_at.asc())
            .all()
        )

    def save_messages(self, chat_id: str, records: List[Dict]) -> List[Message]:
        """
        Insert the records whose id is not yet stored. Message ids are unique
        across all chats, so an id already used by another chat is skipped too.
        Records without an id get a fresh UUID. Returns the inserted rows.
        """
        ids = [record.get("id") or str(uuid.uuid4()) for record in records]
        existing_ids = set()
        if ids:
            existing_ids = {
                row[0] for row in self.db.query(Message.id).filter(Message.id.in_(set(ids))).all()
            }
        new_rows: List[Message] = []
        for message_id, record in zip(ids, records):
            if message_id in existing_ids:
                continue
            existing_ids.add(message_id)
            new_rows.append(
                Message(
                    id=message_id,
                    chat_id=chat_id,
                    role=record["role"],
                    parts=record.get("parts") or [],
                    attachments=record.get("attachments") or [],
                    created_at=record.get("created_at") or datetime.now(timezone.utc),
                )
            )
        if new_rows:
            self.db.add_all(new_rows)
            self.db.commit()
        logger.info(
            "[chat_repository:save_messages] chat_id=%s received=%d inserted=%d",
            chat_id, len(records), len(new_rows),
        )
        return new_rows
