"""Chat router — conversations between users, optionally about an idea."""

from typing import Optional, Union

from fastapi import APIRouter, Body, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.errors import InvalidInput
from app.models.user import User
from app.routers.auth import require_user
from app.schemas.chat import ChatCreate, ChatCreatedOut, ChatListOut, MessageCreate, MessagePage, MessageSentOut
from app.services import chat as chat_service

router = APIRouter(prefix="/chat", tags=["chat"])


@router.get("", response_model=ChatListOut)
async def list_chats(
    current_user: User = Depends(require_user),
    db: AsyncSession = Depends(get_db),
):
    """The caller's chats, most recently active first, with unread counts."""
    return ChatListOut(chats=await chat_service.list_chats(db, current_user.id))


@router.post("", response_model=Union[MessageSentOut, ChatCreatedOut])
async def post_chat(
    body: dict = Body(...),
    current_user: User = Depends(require_user),
    db: AsyncSession = Depends(get_db),
):
    """
    A body carrying ``chatId`` and ``content`` sends a message; any other
    body creates a chat.
    """
    if body.get("chatId") and body.get("content"):
        message = await chat_service.send_message(db, current_user, MessageCreate.model_validate(body))
        return MessageSentOut(message=message)

    chat = await chat_service.create_chat(db, current_user, ChatCreate.model_validate(body))
    return ChatCreatedOut(chat=chat)


@router.get("/messages", response_model=MessagePage)
async def get_messages(
    chat_id: Optional[int] = Query(None, alias="chatId"),
    limit: int = Query(50, ge=1, le=200),
    before: Optional[int] = None,
    current_user: User = Depends(require_user),
    db: AsyncSession = Depends(get_db),
):
    if chat_id is None:
        raise InvalidInput("Chat ID is required")
    return await chat_service.get_messages(db, current_user.id, chat_id, limit=limit, before=before)
