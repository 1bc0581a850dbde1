from datetime import datetime
from typing import List, Literal

from pydantic import Field

from zenithfit.schemas.common import CamelModel, PersistOutcome

DEFAULT_CHAT_TITLE = "New Conversation"


class ChatMessage(CamelModel):
    id: str
    role: Literal["user", "model"]
    text: str = ""
    timestamp: datetime


class ChatSession(CamelModel):
    id: str
    title: str = DEFAULT_CHAT_TITLE
    messages: List[ChatMessage] = []
    last_modified: datetime


class ChatMessageCreate(CamelModel):
    text: str = Field(min_length=1, max_length=4000)


class ChatSessionResponse(CamelModel):
    session: ChatSession
    persisted: PersistOutcome
