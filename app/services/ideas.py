"""Idea submission, browsing and ownership-checked edits."""

import logging
from typing import Dict, Iterable, List, Optional

from sqlalchemy import func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.config import settings
from app.errors import Conflict, Forbidden, NotFound
from app.models.feedback import Feedback
from app.models.idea import Idea, IdeaStatus, MediaType, Tag
from app.models.notification import NotificationType
from app.models.user import User
from app.schemas.common import ANONYMOUS_USER, Pagination
from app.schemas.idea import IdeaCreate, IdeaDetail, IdeaListItem, IdeaOut, IdeaPage, IdeaUpdate
from app.services.notifications import notify

logger = logging.getLogger(__name__)

# Free-text columns that the search box matches against.
SEARCH_COLUMNS = (Idea.title, Idea.description, Idea.problem, Idea.solution)


def resolve_media_type(requested: MediaType, audio_url: Optional[str], video_url: Optional[str]) -> MediaType:
    """Derive the media type from the attached URLs, falling back to ``requested``."""
    if audio_url and video_url:
        return MediaType.MIXED
    if audio_url:
        return MediaType.AUDIO
    if video_url:
        return MediaType.VIDEO
    return requested


def can_manage(user: User, idea: Idea) -> bool:
    return idea.user_id == user.id or user.is_admin


def mask_owner(out: IdeaOut, idea: Idea) -> IdeaOut:
    if idea.is_anonymous:
        out.user = ANONYMOUS_USER
    return out


async def get_or_create_tags(db: AsyncSession, names: Iterable[str]) -> List[Tag]:
    """Resolve tag names to rows, creating any that do not exist yet."""
    wanted = list(dict.fromkeys(n.strip() for n in names if n and n.strip()))
    if not wanted:
        return []

    result = await db.execute(select(Tag).where(Tag.name.in_(wanted)))
    existing = {t.name: t for t in result.scalars().all()}
    for name in wanted:
        if name not in existing:
            tag = Tag(name=name)
            db.add(tag)
            existing[name] = tag
    await db.flush()
    return [existing[name] for name in wanted]


async def _load_idea(db: AsyncSession, idea_id: int, *options) -> Idea:
    result = await db.execute(
        select(Idea)
        .options(*options)
        .where(Idea.id == idea_id)
        .execution_options(populate_existing=True)
    )
    idea = result.scalar_one_or_none()
    if idea is None:
        raise NotFound("Idea not found")
    return idea


# ═══════════════════════════════════════════════════════════════
#  Browse
# ═══════════════════════════════════════════════════════════════

async def list_ideas(
    db: AsyncSession,
    status: Optional[IdeaStatus] = None,
    tag: Optional[str] = None,
    search: Optional[str] = None,
    media_type: Optional[MediaType] = None,
    page: int = 1,
    limit: int = 10,
) -> IdeaPage:
    """Published ideas by default, newest first, with anonymous owners masked."""
    filters = [Idea.status == (status or IdeaStatus.PUBLISHED)]
    if search:
        pattern = f"%{search.lower()}%"
        filters.append(or_(*(func.lower(col).like(pattern) for col in SEARCH_COLUMNS)))
    if media_type:
        filters.append(Idea.media_type == media_type)
    if tag:
        filters.append(Idea.tags.any(Tag.name == tag))

    result = await db.execute(
        select(Idea)
        .options(selectinload(Idea.user), selectinload(Idea.tags), selectinload(Idea.ai_summary))
        .where(*filters)
        .order_by(Idea.created_at.desc(), Idea.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    )
    ideas = result.scalars().all()

    counts: Dict[int, int] = {}
    if ideas:
        count_rows = await db.execute(
            select(Feedback.idea_id, func.count(Feedback.id))
            .where(Feedback.idea_id.in_([i.id for i in ideas]))
            .group_by(Feedback.idea_id)
        )
        counts = dict(count_rows.all())

    total = (await db.execute(select(func.count(Idea.id)).where(*filters))).scalar() or 0

    items = []
    for idea in ideas:
        item = IdeaListItem.model_validate(idea)
        item.feedback_count = counts.get(idea.id, 0)
        items.append(mask_owner(item, idea))

    return IdeaPage(ideas=items, pagination=Pagination.build(total, page, limit))


async def get_idea_detail(db: AsyncSession, idea_id: int) -> IdeaDetail:
    """Full idea with feedback and AI summary; counts as one view."""
    result = await db.execute(
        update(Idea)
        .where(Idea.id == idea_id)
        .values(views=Idea.views + 1)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        raise NotFound("Idea not found")

    idea = await _load_idea(
        db,
        idea_id,
        selectinload(Idea.user),
        selectinload(Idea.tags),
        selectinload(Idea.ai_summary),
        selectinload(Idea.feedbacks).selectinload(Feedback.user),
    )
    detail = IdeaDetail.model_validate(idea)
    detail.feedbacks.sort(key=lambda f: (f.created_at, f.id), reverse=True)
    return mask_owner(detail, idea)


# ═══════════════════════════════════════════════════════════════
#  Submit / edit / delete
# ═══════════════════════════════════════════════════════════════

async def create_idea(db: AsyncSession, owner: User, payload: IdeaCreate) -> Idea:
    """
    Create a DRAFT idea and, in the same transaction, credit the owner's
    idea count and points and leave them a confirmation notification.
    """
    audio_url = str(payload.audio_url) if payload.audio_url else None
    video_url = str(payload.video_url) if payload.video_url else None
    points = settings.IDEA_SUBMISSION_POINTS

    idea = Idea(
        user_id=owner.id,
        title=payload.title,
        description=payload.description,
        problem=payload.problem,
        solution=payload.solution,
        target_audience=payload.target_audience,
        market_size=payload.market_size,
        competition=payload.competition,
        business_model=payload.business_model,
        media_urls=payload.media_urls,
        audio_url=audio_url,
        video_url=video_url,
        media_type=resolve_media_type(payload.media_type, audio_url, video_url),
        is_anonymous=payload.is_anonymous,
        status=IdeaStatus.DRAFT,
    )
    idea.tags = await get_or_create_tags(db, payload.tags)
    db.add(idea)
    await db.flush()

    result = await db.execute(
        update(User)
        .where(User.id == owner.id)
        .values(
            ideas_count=User.ideas_count + 1,
            points=User.points + points,
            last_active=func.now(),
        )
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        raise Conflict("Owner account no longer exists")

    notify(
        db,
        user_id=owner.id,
        type=NotificationType.SYSTEM,
        title="Idea Submitted Successfully",
        content=f'Your idea "{idea.title}" has been submitted successfully. You\'ve earned {points} points!',
        related_id=idea.id,
    )
    await db.commit()
    logger.info("Idea %s submitted by user %s", idea.id, owner.id)

    return await _load_idea(db, idea.id, selectinload(Idea.user), selectinload(Idea.tags))


async def update_idea(db: AsyncSession, user: User, idea_id: int, payload: IdeaUpdate) -> Idea:
    idea = await _load_idea(db, idea_id, selectinload(Idea.tags))
    if not can_manage(user, idea):
        raise Forbidden("You don't have permission to update this idea")

    changes = payload.model_dump(exclude_unset=True, exclude={"tags"})
    for field, value in changes.items():
        setattr(idea, field, value)
    if payload.tags is not None:
        idea.tags = await get_or_create_tags(db, payload.tags)

    await db.commit()
    return await _load_idea(
        db, idea_id, selectinload(Idea.user), selectinload(Idea.tags)
    )


async def delete_idea(db: AsyncSession, user: User, idea_id: int) -> None:
    # Children are loaded up front so the ORM cascade never lazy-loads.
    idea = await _load_idea(
        db, idea_id,
        selectinload(Idea.tags),
        selectinload(Idea.feedbacks),
        selectinload(Idea.ai_summary),
    )
    if not can_manage(user, idea):
        raise Forbidden("You don't have permission to delete this idea")

    await db.delete(idea)
    await db.commit()
    logger.info("Idea %s deleted by user %s", idea_id, user.id)
