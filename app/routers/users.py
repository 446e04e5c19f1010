"""Users router – profiles and the points leaderboard."""

from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.models.user import User
from app.routers.auth import require_user
from app.schemas.user import LeaderboardEntry, UserOut
from app.services import accounts

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/me", response_model=UserOut)
async def read_me(current_user: User = Depends(require_user)):
    """Return the authenticated user's profile."""
    return current_user


@router.get("/leaderboard", response_model=List[LeaderboardEntry])
async def read_leaderboard(
    limit: int = Query(10, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
):
    """Users ranked by points."""
    return await accounts.leaderboard(db, limit)


@router.get("/{user_id}", response_model=UserOut)
async def read_user(user_id: int, db: AsyncSession = Depends(get_db)):
    """Get a public user profile by ID."""
    return await accounts.get_user(db, user_id)
