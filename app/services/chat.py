"""
Chats between users, optionally attached to an idea.

Every participant row keeps a ``last_read`` timestamp; a chat's unread count
is the number of messages from *other* participants created after it.
"""

import logging
from typing import List, Optional

from sqlalchemy import and_, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.errors import Forbidden, InvalidInput, NotFound
from app.models.chat import Chat, ChatParticipant
from app.models.idea import Idea
from app.models.message import Message
from app.models.notification import NotificationType
from app.models.user import User
from app.schemas.chat import ChatCreate, ChatListItem, ChatOut, MessageCreate, MessageOut, MessagePage
from app.schemas.common import ANONYMOUS_USER
from app.services.notifications import notify_many

logger = logging.getLogger(__name__)

_CHAT_OPTIONS = (
    selectinload(Chat.idea).selectinload(Idea.user),
    selectinload(Chat.participants).selectinload(ChatParticipant.user),
)


def _mask_idea_owner(out: ChatOut, chat: Chat) -> ChatOut:
    if out.idea is not None and chat.idea is not None and chat.idea.is_anonymous:
        out.idea.user = ANONYMOUS_USER
    return out


async def _get_participant(db: AsyncSession, chat_id: int, user_id: int) -> ChatParticipant:
    result = await db.execute(
        select(ChatParticipant).where(
            ChatParticipant.chat_id == chat_id,
            ChatParticipant.user_id == user_id,
        )
    )
    participant = result.scalar_one_or_none()
    if participant is None:
        raise Forbidden("You are not a participant in this chat")
    return participant


async def _touch_last_read(db: AsyncSession, chat_id: int, user_id: int) -> None:
    await db.execute(
        update(ChatParticipant)
        .where(ChatParticipant.chat_id == chat_id, ChatParticipant.user_id == user_id)
        .values(last_read=func.now())
        .execution_options(synchronize_session=False)
    )


# ═══════════════════════════════════════════════════════════════
#  Chat list
# ═══════════════════════════════════════════════════════════════

async def list_chats(db: AsyncSession, user_id: int) -> List[ChatListItem]:
    """The caller's chats, most recently active first."""
    result = await db.execute(
        select(Chat)
        .options(*_CHAT_OPTIONS)
        .where(Chat.participants.any(ChatParticipant.user_id == user_id))
        .order_by(Chat.updated_at.desc(), Chat.id.desc())
    )
    chats = result.scalars().all()
    if not chats:
        return []
    chat_ids = [c.id for c in chats]

    totals = dict((await db.execute(
        select(Message.chat_id, func.count(Message.id))
        .where(Message.chat_id.in_(chat_ids))
        .group_by(Message.chat_id)
    )).all())

    unread = dict((await db.execute(
        select(Message.chat_id, func.count(Message.id))
        .join(
            ChatParticipant,
            and_(ChatParticipant.chat_id == Message.chat_id, ChatParticipant.user_id == user_id),
        )
        .where(
            Message.chat_id.in_(chat_ids),
            Message.sender_id != user_id,
            Message.created_at > ChatParticipant.last_read,
        )
        .group_by(Message.chat_id)
    )).all())

    latest_ids = select(func.max(Message.id)).where(Message.chat_id.in_(chat_ids)).group_by(Message.chat_id)
    latest = {
        m.chat_id: m
        for m in (await db.execute(
            select(Message).options(selectinload(Message.sender)).where(Message.id.in_(latest_ids))
        )).scalars().all()
    }

    items = []
    for chat in chats:
        item = ChatListItem.model_validate(chat)
        item.message_count = totals.get(chat.id, 0)
        item.unread_count = unread.get(chat.id, 0)
        if chat.id in latest:
            item.last_message = MessageOut.model_validate(latest[chat.id])
        items.append(_mask_idea_owner(item, chat))
    return items


async def _load_chat(db: AsyncSession, chat_id: int) -> Chat:
    result = await db.execute(
        select(Chat)
        .options(*_CHAT_OPTIONS)
        .where(Chat.id == chat_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one()


async def create_chat(db: AsyncSession, creator: User, payload: ChatCreate) -> ChatOut:
    """Open a chat; the creator is always a participant."""
    member_ids = list(dict.fromkeys([*payload.participants, creator.id]))

    if payload.idea_id is not None:
        idea = (await db.execute(select(Idea.id).where(Idea.id == payload.idea_id))).scalar_one_or_none()
        if idea is None:
            raise NotFound("Idea not found")

    found = (await db.execute(select(func.count(User.id)).where(User.id.in_(member_ids)))).scalar()
    if found != len(member_ids):
        raise InvalidInput("One or more participants do not exist")

    chat = Chat(name=payload.name, idea_id=payload.idea_id)
    chat.participants = [ChatParticipant(user_id=uid) for uid in member_ids]
    db.add(chat)
    await db.flush()

    label = f' "{payload.name}"' if payload.name else ""
    notify_many(
        db,
        [uid for uid in member_ids if uid != creator.id],
        type=NotificationType.SYSTEM,
        title="New Chat",
        content=f"{creator.name or 'Someone'} added you to a chat{label}",
        related_id=chat.id,
    )
    await db.commit()
    logger.info("Chat %s created by user %s with %d participants", chat.id, creator.id, len(member_ids))

    return _mask_idea_owner(ChatOut.model_validate(await _load_chat(db, chat.id)), chat)


# ═══════════════════════════════════════════════════════════════
#  Messages
# ═══════════════════════════════════════════════════════════════

async def send_message(db: AsyncSession, sender: User, payload: MessageCreate) -> MessageOut:
    await _get_participant(db, payload.chat_id, sender.id)

    message = Message(chat_id=payload.chat_id, sender_id=sender.id, content=payload.content)
    db.add(message)
    await db.flush()

    await db.execute(
        update(Chat)
        .where(Chat.id == payload.chat_id)
        .values(updated_at=func.now())
        .execution_options(synchronize_session=False)
    )
    await _touch_last_read(db, payload.chat_id, sender.id)

    recipients = (await db.execute(
        select(ChatParticipant.user_id).where(
            ChatParticipant.chat_id == payload.chat_id,
            ChatParticipant.user_id != sender.id,
        )
    )).scalars().all()
    notify_many(
        db,
        recipients,
        type=NotificationType.MESSAGE,
        title="New Message",
        content=f"{sender.name or 'Someone'} sent you a message",
        related_id=message.id,
    )
    await db.commit()

    result = await db.execute(
        select(Message).options(selectinload(Message.sender)).where(Message.id == message.id)
    )
    return MessageOut.model_validate(result.scalar_one())


async def get_messages(
    db: AsyncSession,
    user_id: int,
    chat_id: int,
    limit: int = 50,
    before: Optional[int] = None,
) -> MessagePage:
    """
    Up to ``limit`` messages older than message ``before`` (or the newest
    ones), returned oldest first. Reading marks the chat as read.
    """
    await _get_participant(db, chat_id, user_id)

    filters = [Message.chat_id == chat_id]
    if before is not None:
        filters.append(Message.id < before)

    result = await db.execute(
        select(Message)
        .options(selectinload(Message.sender))
        .where(*filters)
        .order_by(Message.created_at.desc(), Message.id.desc())
        .limit(limit)
    )
    messages = list(result.scalars().all())

    await _touch_last_read(db, chat_id, user_id)
    await db.commit()

    messages.reverse()
    return MessagePage(
        messages=[MessageOut.model_validate(m) for m in messages],
        has_more=len(messages) == limit,
    )
