"""Schemas for the chat and message endpoints."""

from datetime import datetime
from typing import Any, Literal, Optional, Union
from uuid import UUID

from pydantic import AnyUrl, BaseModel, Field, model_validator

from app.core.config import MAX_CONTENT_LENGTH, MAX_MESSAGES_PER_REQUEST


class ChatMessagePart(BaseModel):
    """One ordered content part of a message."""

    type: Literal["text", "image"]
    text: Optional[str] = None
    image: Optional[AnyUrl] = None


class ChatMessage(BaseModel):
    """A UI chat message as sent by the client."""

    role: Literal["user", "assistant", "system"]
    content: Optional[Union[str, list[ChatMessagePart]]] = None
    id: Optional[str] = None
    createdAt: Optional[datetime] = None
    parts: Optional[list[ChatMessagePart]] = None
    attachments: Optional[list[Any]] = None

    @model_validator(mode="after")
    def _check_content(self) -> "ChatMessage":
        if self.content is None and self.parts is None:
            raise ValueError("either content or parts is required")
        if isinstance(self.content, str) and not 1 <= len(self.content) <= MAX_CONTENT_LENGTH:
            raise ValueError(f"content must be 1 to {MAX_CONTENT_LENGTH} characters")
        return self

    def to_record(self) -> dict[str, Any]:
        """Row data for the messages table. String content is stored as a single text part."""
        if self.parts is not None:
            parts = [p.model_dump(mode="json", exclude_none=True) for p in self.parts]
        elif isinstance(self.content, str):
            parts = [{"type": "text", "text": self.content}]
        else:
            parts = [p.model_dump(mode="json", exclude_none=True) for p in self.content or []]
        return {
            "id": self.id,
            "role": self.role,
            "parts": parts,
            "attachments": self.attachments or [],
            "created_at": self.createdAt,
        }


class ChatRequest(BaseModel):
    """Request body for POST /api/chat."""

    id: Optional[UUID] = Field(None, description="Chat id; a new chat is created when omitted or unknown.")
    messages: list[ChatMessage] = Field(..., min_length=1, max_length=MAX_MESSAGES_PER_REQUEST)
    modelId: Optional[str] = None


class SaveMessageRequest(BaseModel):
    """Request body for POST /api/messages."""

    chatId: str = Field(..., min_length=1)
    message: ChatMessage


class SaveMessageResponse(BaseModel):
    success: bool = True
