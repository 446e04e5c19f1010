"""Reward catalogue and point redemption."""

import logging
from typing import List, Optional, Tuple

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.errors import Forbidden, InvalidInput, NotFound
from app.models.notification import NotificationType
from app.models.reward import Redemption, Reward
from app.models.user import User
from app.schemas.reward import RewardCreate
from app.services.notifications import notify

logger = logging.getLogger(__name__)


async def list_rewards(db: AsyncSession, available: Optional[bool] = None) -> List[Reward]:
    query = select(Reward).order_by(Reward.points_cost.asc(), Reward.id.asc())
    if available is not None:
        query = query.where(Reward.is_available == available)
    result = await db.execute(query)
    return list(result.scalars().all())


async def create_reward(db: AsyncSession, user: User, payload: RewardCreate) -> Reward:
    if not user.is_admin:
        raise Forbidden("Only administrators can create rewards")

    reward = Reward(
        name=payload.name,
        description=payload.description,
        points_cost=payload.points_cost,
        image_url=str(payload.image_url) if payload.image_url else None,
        is_available=payload.is_available,
    )
    db.add(reward)
    await db.commit()
    logger.info("Reward %s created by admin %s", reward.id, user.id)
    return reward


async def redeem_reward(db: AsyncSession, user_id: int, reward_id: int) -> Tuple[Redemption, int]:
    """
    Spend ``user_id``'s points on a reward.

    The deduction is a single guarded UPDATE (``points >= cost``), so two
    concurrent redemptions can never take the balance below zero. Returns the
    redemption and the remaining balance.
    """
    reward = (await db.execute(select(Reward).where(Reward.id == reward_id))).scalar_one_or_none()
    if reward is None:
        raise NotFound("Reward not found")
    if not reward.is_available:
        raise InvalidInput("This reward is not available")

    cost = reward.points_cost
    result = await db.execute(
        update(User)
        .where(User.id == user_id, User.points >= cost)
        .values(points=User.points - cost)
        .returning(User.points)
        .execution_options(synchronize_session=False)
    )
    remaining = result.scalar_one_or_none()
    if remaining is None:
        await db.rollback()
        raise InvalidInput("You don't have enough points to redeem this reward")

    redemption = Redemption(user_id=user_id, reward_id=reward.id, points_cost=cost)
    db.add(redemption)
    notify(
        db,
        user_id=user_id,
        type=NotificationType.SYSTEM,
        title="Reward Redeemed",
        content=f'You redeemed "{reward.name}" for {cost} points.',
        related_id=reward.id,
    )
    await db.commit()
    logger.info("User %s redeemed reward %s for %d points", user_id, reward.id, cost)

    redemption = (await db.execute(
        select(Redemption)
        .options(selectinload(Redemption.reward))
        .where(Redemption.id == redemption.id)
    )).scalar_one()
    return redemption, remaining


async def redemption_history(db: AsyncSession, user_id: int) -> List[Redemption]:
    result = await db.execute(
        select(Redemption)
        .options(selectinload(Redemption.reward))
        .where(Redemption.user_id == user_id)
        .order_by(Redemption.created_at.desc(), Redemption.id.desc())
    )
    return list(result.scalars().all())
