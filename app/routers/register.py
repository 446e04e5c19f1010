"""Registration router — credential sign-up."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.schemas.user import UserCreate, UserOut
from app.services import accounts

router = APIRouter(prefix="/register", tags=["auth"])


@router.post("", response_model=UserOut, status_code=status.HTTP_201_CREATED)
async def register(payload: UserCreate, db: AsyncSession = Depends(get_db)):
    """Create an account; the password is stored hashed and never returned."""
    return await accounts.register_user(db, payload)
