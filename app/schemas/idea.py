"""Idea Pydantic schemas."""

from datetime import datetime
from typing import List, Optional

from pydantic import Field, HttpUrl

from app.models.idea import IdeaStatus, MediaType
from app.schemas.common import CamelModel, Pagination, UserSummary
from app.schemas.feedback import IdeaFeedbackItem


class IdeaCreate(CamelModel):
    title: str = Field(min_length=3)
    description: str = Field(min_length=10)
    problem: str = Field(min_length=10)
    solution: str = Field(min_length=10)
    target_audience: Optional[str] = None
    market_size: Optional[str] = None
    competition: Optional[str] = None
    business_model: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    media_urls: Optional[str] = None
    audio_url: Optional[HttpUrl] = None
    video_url: Optional[HttpUrl] = None
    media_type: MediaType = MediaType.TEXT
    is_anonymous: bool = False


class IdeaUpdate(CamelModel):
    title: Optional[str] = Field(None, min_length=3)
    description: Optional[str] = Field(None, min_length=10)
    problem: Optional[str] = Field(None, min_length=10)
    solution: Optional[str] = Field(None, min_length=10)
    target_audience: Optional[str] = None
    market_size: Optional[str] = None
    competition: Optional[str] = None
    business_model: Optional[str] = None
    status: Optional[IdeaStatus] = None
    tags: Optional[List[str]] = None
    media_urls: Optional[str] = None


class TagOut(CamelModel):
    id: int
    name: str


class AISummaryOut(CamelModel):
    id: int
    idea_id: int
    content: str
    strengths: str
    weaknesses: str
    opportunities: str
    threats: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class IdeaOut(CamelModel):
    id: int
    title: str
    description: str
    problem: str
    solution: str
    target_audience: Optional[str] = None
    market_size: Optional[str] = None
    competition: Optional[str] = None
    business_model: Optional[str] = None
    media_urls: Optional[str] = None
    audio_url: Optional[str] = None
    video_url: Optional[str] = None
    media_type: MediaType
    status: IdeaStatus
    is_anonymous: bool
    upvotes: int
    downvotes: int
    views: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    user: UserSummary
    tags: List[TagOut] = []


class IdeaListItem(IdeaOut):
    feedback_count: int = 0
    ai_summary: Optional[AISummaryOut] = None


class IdeaDetail(IdeaOut):
    feedbacks: List[IdeaFeedbackItem] = []
    ai_summary: Optional[AISummaryOut] = None


class IdeaPage(CamelModel):
    ideas: List[IdeaListItem]
    pagination: Pagination


class IdeaCreatedOut(CamelModel):
    message: str
    idea: IdeaOut
    points_awarded: int


class AIAnalysisOut(CamelModel):
    message: str
    ai_summary: AISummaryOut
