"""Ideas router — browse, submit, edit and analyse ideas."""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.database import get_db
from app.models.idea import IdeaStatus, MediaType
from app.models.user import User
from app.routers.auth import require_user
from app.schemas.feedback import IdeaFeedbackPage
from app.schemas.idea import AIAnalysisOut, AISummaryOut, IdeaCreate, IdeaCreatedOut, IdeaDetail, IdeaOut, IdeaPage, IdeaUpdate
from app.services import ai_analysis, ideas as idea_service
from app.services.feedback import list_idea_feedback

router = APIRouter(prefix="/ideas", tags=["ideas"])


@router.get("", response_model=IdeaPage)
async def list_ideas(
    status_filter: Optional[IdeaStatus] = Query(None, alias="status"),
    tag: Optional[str] = None,
    search: Optional[str] = None,
    media_type: Optional[MediaType] = Query(None, alias="mediaType"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
):
    """Published ideas by default, newest first."""
    return await idea_service.list_ideas(
        db, status=status_filter, tag=tag, search=search, media_type=media_type, page=page, limit=limit
    )


@router.post("", response_model=IdeaCreatedOut, status_code=status.HTTP_201_CREATED)
async def create_idea(
    payload: IdeaCreate,
    current_user: User = Depends(require_user),
    db: AsyncSession = Depends(get_db),
):
    idea = await idea_service.create_idea(db, current_user, payload)
    return IdeaCreatedOut(
        message="Idea submitted successfully",
        idea=idea_service.mask_owner(IdeaOut.model_validate(idea), idea),
        points_awarded=settings.IDEA_SUBMISSION_POINTS,
    )


@router.get("/{idea_id}", response_model=IdeaDetail)
async def get_idea(idea_id: int, db: AsyncSession = Depends(get_db)):
    """Full idea view; counts as one view."""
    return await idea_service.get_idea_detail(db, idea_id)


@router.patch("/{idea_id}", response_model=IdeaOut)
async def update_idea(
    idea_id: int,
    payload: IdeaUpdate,
    current_user: User = Depends(require_user),
    db: AsyncSession = Depends(get_db),
):
    idea = await idea_service.update_idea(db, current_user, idea_id, payload)
    return idea_service.mask_owner(IdeaOut.model_validate(idea), idea)


@router.delete("/{idea_id}")
async def delete_idea(
    idea_id: int,
    current_user: User = Depends(require_user),
    db: AsyncSession = Depends(get_db),
):
    await idea_service.delete_idea(db, current_user, idea_id)
    return {"message": "Idea deleted successfully"}


@router.get("/{idea_id}/feedback", response_model=IdeaFeedbackPage)
async def get_idea_feedback(
    idea_id: int,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
):
    return await list_idea_feedback(db, idea_id, page=page, limit=limit)


# ── AI analysis ──

@router.get("/{idea_id}/ai-analysis", response_model=AISummaryOut)
async def get_ai_analysis(idea_id: int, db: AsyncSession = Depends(get_db)):
    return await ai_analysis.get_analysis(db, idea_id)


@router.post("/{idea_id}/ai-analysis", response_model=AIAnalysisOut)
async def generate_ai_analysis(
    idea_id: int,
    current_user: User = Depends(require_user),
    db: AsyncSession = Depends(get_db),
):
    summary = await ai_analysis.generate_analysis(db, current_user, idea_id)
    return AIAnalysisOut(
        message="AI analysis generated successfully",
        ai_summary=AISummaryOut.model_validate(summary),
    )
