"""Feedback router — submit and browse idea feedback."""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.errors import Forbidden, InvalidInput
from app.models.user import User
from app.routers.auth import require_user
from app.schemas.feedback import FeedbackCreate, FeedbackListOut, FeedbackOut, FeedbackSubmitOut
from app.services import feedback as feedback_service

router = APIRouter(prefix="/feedback", tags=["feedback"])


@router.post("", response_model=FeedbackSubmitOut)
async def submit_feedback(
    payload: FeedbackCreate,
    current_user: User = Depends(require_user),
    db: AsyncSession = Depends(get_db),
):
    """Create or update the caller's feedback on an idea."""
    reviewer_id = current_user.id
    try:
        result = await feedback_service.submit_feedback(db, reviewer_id, payload)
    except Forbidden as exc:
        # Self-review is reported as a bad request on this endpoint.
        raise InvalidInput(exc.message) from exc

    return FeedbackSubmitOut(
        feedback=FeedbackOut.model_validate(result.feedback),
        points_awarded=result.points_awarded,
    )


@router.get("", response_model=FeedbackListOut)
async def list_feedback(
    idea_id: Optional[int] = Query(None, alias="ideaId"),
    user_id: Optional[int] = Query(None, alias="userId"),
    action: Optional[str] = Query(None),
    current_user: User = Depends(require_user),
    db: AsyncSession = Depends(get_db),
):
    """Feedback for an idea and/or by a reviewer, with stats when filtered by idea."""
    return await feedback_service.list_feedback(db, idea_id=idea_id, user_id=user_id, action=action)
