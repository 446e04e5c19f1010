"""Reward / redemption Pydantic schemas."""

from datetime import datetime
from typing import Optional

from pydantic import Field, HttpUrl

from app.schemas.common import CamelModel


class RewardCreate(CamelModel):
    name: str = Field(min_length=3)
    description: str = Field(min_length=10)
    points_cost: int = Field(ge=1)
    image_url: Optional[HttpUrl] = None
    is_available: bool = True


class RewardOut(CamelModel):
    id: int
    name: str
    description: str
    points_cost: int
    image_url: Optional[str] = None
    is_available: bool
    created_at: Optional[datetime] = None


class RedeemIn(CamelModel):
    reward_id: int


class RedemptionOut(CamelModel):
    id: int
    user_id: int
    reward_id: int
    points_cost: int
    created_at: Optional[datetime] = None
    reward: RewardOut


class RedeemOut(CamelModel):
    message: str
    redemption: RedemptionOut
    remaining_points: int
