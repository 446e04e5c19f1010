"""Chat Pydantic schemas."""

from datetime import datetime
from typing import List, Optional

from pydantic import Field

from app.schemas.common import CamelModel, UserSummary


class ChatCreate(CamelModel):
    name: Optional[str] = None
    idea_id: Optional[int] = None
    participants: List[int] = Field(min_length=1)


class MessageCreate(CamelModel):
    chat_id: int
    content: str = Field(min_length=1)


class MessageOut(CamelModel):
    id: int
    chat_id: int
    sender_id: int
    content: str
    created_at: Optional[datetime] = None
    sender: UserSummary


class ParticipantOut(CamelModel):
    user_id: int
    joined_at: Optional[datetime] = None
    last_read: Optional[datetime] = None
    user: UserSummary


class ChatIdeaSummary(CamelModel):
    id: int
    title: str
    is_anonymous: bool
    user: UserSummary


class ChatOut(CamelModel):
    id: int
    name: Optional[str] = None
    idea_id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    idea: Optional[ChatIdeaSummary] = None
    participants: List[ParticipantOut] = []


class ChatListItem(ChatOut):
    last_message: Optional[MessageOut] = None
    message_count: int = 0
    unread_count: int = 0


class MessagePage(CamelModel):
    messages: List[MessageOut]
    has_more: bool


class ChatListOut(CamelModel):
    chats: List[ChatListItem]


class MessageSentOut(CamelModel):
    success: bool = True
    message: MessageOut


class ChatCreatedOut(CamelModel):
    success: bool = True
    chat: ChatOut
