"""
Feedback submission workflow.

A reviewer's feedback on an idea is recorded once per (idea, reviewer) pair.
The first submission awards points, bumps the idea and reviewer aggregates
and notifies both sides; every later submission is a pure edit of the row.

The existence check and the insert are one statement: a conditional insert
against the ``uq_feedback_idea_reviewer`` constraint. Whether that insert
produced a row decides which branch runs, so two concurrent first-time
submissions can never both award points.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

from sqlalchemy import case, func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.database import insert_for
from app.errors import Conflict, Forbidden, Internal, InvalidInput, NotFound, ServiceError
from app.models.feedback import Feedback, FeedbackAction
from app.models.idea import Idea
from app.models.notification import NotificationType
from app.models.user import User
from app.schemas.common import ANONYMOUS_OWNER, Pagination
from app.schemas.feedback import (
    FeedbackCreate,
    FeedbackItem,
    FeedbackListOut,
    FeedbackStats,
    IdeaFeedbackItem,
    IdeaFeedbackPage,
)
from app.services.notifications import notify

logger = logging.getLogger(__name__)

# Curated vocabulary offered by the review UI.
FEEDBACK_TAGS = (
    "Innovative",
    "Needs Improvement",
    "Market Potential",
    "Technical Feasibility",
    "Scalable",
    "User-Friendly",
    "Profitable",
    "Solves Real Problem",
    "Unique",
    "Competitive",
)
FREE_TAG_MIN_LENGTH = 3
FREE_TAG_MAX_LENGTH = 20

LIKE_POINTS = 10
PASS_POINTS = 5
DETAILED_FULL_POINTS = 20
DETAILED_PARTIAL_POINTS = 15
DETAILED_BASIC_POINTS = 10

_OWNER_PHRASES = {
    FeedbackAction.LIKE: "a like",
    FeedbackAction.DETAILED: "detailed feedback",
}


@dataclass
class SubmissionResult:
    feedback: Feedback
    points_awarded: int
    created: bool


def compute_points(action: FeedbackAction, rating: Optional[int], comment: Optional[str]) -> int:
    """Points for a first-time submission; an empty comment counts as absent."""
    if action == FeedbackAction.LIKE:
        return LIKE_POINTS
    if action == FeedbackAction.PASS:
        return PASS_POINTS

    has_rating = rating is not None
    has_comment = bool(comment)
    if has_rating and has_comment:
        return DETAILED_FULL_POINTS
    if has_rating or has_comment:
        return DETAILED_PARTIAL_POINTS
    return DETAILED_BASIC_POINTS


def filter_tags(tags: Optional[List[str]]) -> Optional[List[str]]:
    """
    Keep curated tags verbatim, and any other tag whose length is within the
    free-text bounds. Everything else is dropped.
    """
    if tags is None:
        return None
    return [
        tag for tag in tags
        if tag in FEEDBACK_TAGS or FREE_TAG_MIN_LENGTH <= len(tag) <= FREE_TAG_MAX_LENGTH
    ]


async def _get_idea(db: AsyncSession, idea_id: int) -> Idea:
    result = await db.execute(select(Idea).where(Idea.id == idea_id))
    idea = result.scalar_one_or_none()
    if idea is None:
        raise NotFound("Idea not found")
    return idea


async def _record_first_submission(
    db: AsyncSession,
    idea: Idea,
    reviewer_id: int,
    feedback_id: int,
    action: FeedbackAction,
    points: int,
) -> None:
    """Counters and notifications that accompany a newly inserted feedback row."""
    result = await db.execute(
        update(User)
        .where(User.id == reviewer_id)
        .values(
            points=User.points + points,
            feedback_count=User.feedback_count + 1,
            last_active=func.now(),
        )
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        raise Conflict("Reviewer account no longer exists")

    idea_values = {"views": Idea.views + 1}
    if action == FeedbackAction.LIKE:
        idea_values["upvotes"] = Idea.upvotes + 1
    elif action == FeedbackAction.PASS:
        idea_values["downvotes"] = Idea.downvotes + 1

    result = await db.execute(
        update(Idea)
        .where(Idea.id == idea.id)
        .values(**idea_values)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        raise Conflict("Idea no longer exists")

    if not idea.is_anonymous:
        phrase = _OWNER_PHRASES.get(action, "feedback")
        notify(
            db,
            user_id=idea.user_id,
            type=NotificationType.FEEDBACK,
            title="New Feedback Received",
            content=f'Someone provided {phrase} on your idea "{idea.title}".',
            related_id=idea.id,
        )

    notify(
        db,
        user_id=reviewer_id,
        type=NotificationType.SYSTEM,
        title="Points Earned",
        content=f'You earned {points} points for providing feedback on "{idea.title}".',
        related_id=feedback_id,
    )
    await db.flush()


async def submit_feedback(db: AsyncSession, reviewer_id: int, payload: FeedbackCreate) -> SubmissionResult:
    """
    Record ``payload`` as ``reviewer_id``'s feedback on the idea and commit.

    Raises NotFound for an unknown idea, Forbidden when the reviewer owns the
    idea, Conflict when a row touched by the first-submission branch vanished,
    and Internal for any other persistence failure. Nothing is committed in
    any of those cases.
    """
    idea = await _get_idea(db, payload.idea_id)
    if idea.user_id == reviewer_id:
        raise Forbidden("You cannot provide feedback on your own idea")

    idea_id = idea.id
    points = compute_points(payload.action, payload.rating, payload.comment)
    tags = filter_tags(payload.tags)
    content = {
        "action": payload.action,
        "rating": payload.rating or None,
        "comment": payload.comment or None,
        "tags": ",".join(tags) if tags is not None else None,
    }

    try:
        insert = insert_for(db)
        inserted = await db.execute(
            insert(Feedback)
            .values(idea_id=idea.id, user_id=reviewer_id, **content)
            .on_conflict_do_nothing(index_elements=["idea_id", "user_id"])
            .returning(Feedback.id)
        )
        feedback_id = inserted.scalar_one_or_none()

        if feedback_id is None:
            # Already reviewed: edit in place, no points, no side effects.
            await db.execute(
                update(Feedback)
                .where(Feedback.idea_id == idea.id, Feedback.user_id == reviewer_id)
                .values(**content, updated_at=func.now())
                .execution_options(synchronize_session=False)
            )
            points = 0
        else:
            await _record_first_submission(db, idea, reviewer_id, feedback_id, payload.action, points)

        await db.commit()
    except ServiceError:
        await db.rollback()
        raise
    except SQLAlchemyError as exc:
        await db.rollback()
        logger.exception("Feedback transaction failed (idea=%s reviewer=%s)", idea_id, reviewer_id)
        raise Internal("Failed to submit feedback") from exc

    result = await db.execute(
        select(Feedback)
        .where(Feedback.idea_id == idea_id, Feedback.user_id == reviewer_id)
        .execution_options(populate_existing=True)
    )
    feedback = result.scalar_one()
    logger.info(
        "Feedback %s on idea %s by user %s (%s, +%d points)",
        "created" if feedback_id is not None else "updated",
        idea_id, reviewer_id, payload.action.value, points,
    )
    return SubmissionResult(feedback=feedback, points_awarded=points, created=feedback_id is not None)


# ═══════════════════════════════════════════════════════════════
#  Read side
# ═══════════════════════════════════════════════════════════════

async def feedback_stats(db: AsyncSession, idea_id: int) -> FeedbackStats:
    """Aggregate counts and ratings for one idea's feedback."""
    row = (await db.execute(
        select(
            func.count(Feedback.id),
            func.sum(case((Feedback.action == FeedbackAction.LIKE, 1), else_=0)),
            func.sum(case((Feedback.action == FeedbackAction.PASS, 1), else_=0)),
            func.sum(case((Feedback.action == FeedbackAction.DETAILED, 1), else_=0)),
            func.avg(Feedback.rating),
        ).where(Feedback.idea_id == idea_id)
    )).one()

    total, likes, passes, detailed, avg_rating = row
    total = total or 0
    likes = likes or 0
    return FeedbackStats(
        total=total,
        likes=likes,
        passes=passes or 0,
        detailed=detailed or 0,
        average_rating=float(avg_rating or 0),
        like_percentage=(likes / total * 100) if total > 0 else 0,
    )


def to_feedback_item(feedback: Feedback) -> FeedbackItem:
    """Serialize with reviewer and idea summaries, masking anonymous owners."""
    item = FeedbackItem.model_validate(feedback)
    if feedback.idea.is_anonymous:
        item.idea.user = ANONYMOUS_OWNER
    return item


async def list_feedback(
    db: AsyncSession,
    idea_id: Optional[int] = None,
    user_id: Optional[int] = None,
    action: Optional[str] = None,
) -> FeedbackListOut:
    """Feedback filtered by idea and/or reviewer; stats only when filtering by idea."""
    if idea_id is None and user_id is None:
        raise InvalidInput("Either Idea ID or User ID is required")

    filters = []
    if idea_id is not None:
        await _get_idea(db, idea_id)
        filters.append(Feedback.idea_id == idea_id)
    if user_id is not None:
        filters.append(Feedback.user_id == user_id)
    # Unknown action values are ignored rather than rejected.
    if action in {a.value for a in FeedbackAction}:
        filters.append(Feedback.action == FeedbackAction(action))

    result = await db.execute(
        select(Feedback)
        .options(
            selectinload(Feedback.user),
            selectinload(Feedback.idea).selectinload(Idea.user),
        )
        .where(*filters)
        .order_by(Feedback.created_at.desc(), Feedback.id.desc())
        .execution_options(populate_existing=True)
    )
    items = [to_feedback_item(fb) for fb in result.scalars().all()]

    stats = await feedback_stats(db, idea_id) if idea_id is not None else None
    return FeedbackListOut(feedback=items, stats=stats)


async def list_idea_feedback(db: AsyncSession, idea_id: int, page: int = 1, limit: int = 10) -> IdeaFeedbackPage:
    """One page of an idea's feedback, newest first."""
    await _get_idea(db, idea_id)

    result = await db.execute(
        select(Feedback)
        .options(selectinload(Feedback.user))
        .where(Feedback.idea_id == idea_id)
        .order_by(Feedback.created_at.desc(), Feedback.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    )
    feedback = [IdeaFeedbackItem.model_validate(fb) for fb in result.scalars().all()]

    total, avg_rating = (await db.execute(
        select(func.count(Feedback.id), func.avg(Feedback.rating)).where(Feedback.idea_id == idea_id)
    )).one()

    return IdeaFeedbackPage(
        feedback=feedback,
        average_rating=float(avg_rating or 0),
        pagination=Pagination.build(total or 0, page, limit),
    )
