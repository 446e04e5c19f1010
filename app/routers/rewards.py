"""Rewards router — catalogue, admin creation and point redemption."""

from typing import List, Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.models.user import User
from app.routers.auth import require_admin, require_user
from app.schemas.reward import RedeemIn, RedeemOut, RedemptionOut, RewardCreate, RewardOut
from app.services import rewards as reward_service

router = APIRouter(prefix="/rewards", tags=["rewards"])


@router.get("", response_model=List[RewardOut])
async def list_rewards(available: Optional[bool] = None, db: AsyncSession = Depends(get_db)):
    """Rewards, cheapest first."""
    return await reward_service.list_rewards(db, available)


@router.post("", response_model=RewardOut, status_code=status.HTTP_201_CREATED)
async def create_reward(
    payload: RewardCreate,
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await reward_service.create_reward(db, current_user, payload)


@router.post("/redeem", response_model=RedeemOut)
async def redeem(
    payload: RedeemIn,
    current_user: User = Depends(require_user),
    db: AsyncSession = Depends(get_db),
):
    redemption, remaining = await reward_service.redeem_reward(db, current_user.id, payload.reward_id)
    return RedeemOut(
        message="Reward redeemed successfully",
        redemption=RedemptionOut.model_validate(redemption),
        remaining_points=remaining,
    )


@router.get("/redeem", response_model=List[RedemptionOut])
async def redemption_history(
    current_user: User = Depends(require_user),
    db: AsyncSession = Depends(get_db),
):
    """The caller's redemptions, newest first."""
    return await reward_service.redemption_history(db, current_user.id)
