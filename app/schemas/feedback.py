"""Feedback Pydantic schemas."""

from datetime import datetime
from typing import List, Optional

from pydantic import Field

from app.models.feedback import FeedbackAction
from app.schemas.common import CamelModel, OwnerRef, Pagination, UserSummary


class FeedbackCreate(CamelModel):
    """Body of ``POST /feedback``. The reviewer always comes from the session."""
    idea_id: int
    rating: Optional[int] = Field(None, ge=1, le=5, strict=True)
    comment: Optional[str] = None
    tags: Optional[List[str]] = None
    action: FeedbackAction


class FeedbackOut(CamelModel):
    id: int
    idea_id: int
    user_id: int
    action: FeedbackAction
    rating: Optional[int] = None
    comment: Optional[str] = None
    tags: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class FeedbackSubmitOut(CamelModel):
    success: bool = True
    feedback: FeedbackOut
    points_awarded: int


class ReviewerSummary(UserSummary):
    points: int = 0


class FeedbackIdeaSummary(CamelModel):
    id: int
    title: str
    is_anonymous: bool
    user: OwnerRef


class FeedbackItem(FeedbackOut):
    user: ReviewerSummary
    idea: FeedbackIdeaSummary


class FeedbackStats(CamelModel):
    total: int
    likes: int
    passes: int
    detailed: int
    average_rating: float
    like_percentage: float


class FeedbackListOut(CamelModel):
    feedback: List[FeedbackItem]
    stats: Optional[FeedbackStats] = None


class IdeaFeedbackItem(FeedbackOut):
    user: UserSummary


class IdeaFeedbackPage(CamelModel):
    feedback: List[IdeaFeedbackItem]
    average_rating: float
    pagination: Pagination
