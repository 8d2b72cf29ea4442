# model/chat.py
from datetime import datetime, timezone
from typing import Literal
from pydantic import BaseModel, ConfigDict, Field

ChatRole = Literal["user", "assistant", "system"]

CHAT_LOG_VERSION = 1


def _now() -> datetime:
    return datetime.now(timezone.utc)


class ChatMessage(BaseModel):
    role: ChatRole
    content: str
    timestamp: datetime = Field(default_factory=_now)


class ChatLog(BaseModel):
    """On-disk envelope for one conversation."""

    model_config = ConfigDict(populate_by_name=True)

    version: int = CHAT_LOG_VERSION
    conversation_id: str = Field(alias="conversationId")
    messages: list[ChatMessage] = Field(default_factory=list)
