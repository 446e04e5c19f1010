"""Credential accounts, email verification and public profiles."""

import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import List, Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.errors import Conflict, Forbidden, InvalidInput, NotFound, Unauthenticated
from app.models.user import User
from app.models.verification_token import VerificationToken
from app.schemas.user import LeaderboardEntry, UserCreate
from app.services.email import send_verification_email

logger = logging.getLogger(__name__)


def _utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; everything is stored in UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def normalize_email(email: str) -> str:
    return email.strip().lower()


async def get_user_by_email(db: AsyncSession, email: str) -> Optional[User]:
    result = await db.execute(select(User).where(User.email == normalize_email(email)))
    return result.scalar_one_or_none()


async def get_user(db: AsyncSession, user_id: int) -> User:
    user = (await db.execute(select(User).where(User.id == user_id))).scalar_one_or_none()
    if user is None:
        raise NotFound("User not found")
    return user


# ═══════════════════════════════════════════════════════════════
#  Registration & sign-in
# ═══════════════════════════════════════════════════════════════

async def register_user(db: AsyncSession, payload: UserCreate) -> User:
    """Create a credentials account. Credential sign-ups are verified on creation."""
    if await get_user_by_email(db, payload.email) is not None:
        raise Conflict("User with this email already exists")

    user = User(
        email=normalize_email(payload.email),
        name=payload.name,
        email_verified_at=datetime.now(timezone.utc),
    )
    user.set_password(payload.password)
    db.add(user)
    await db.commit()
    logger.info("Registered user %s", user.id)
    return user


async def authenticate(db: AsyncSession, email: str, password: str) -> User:
    user = await get_user_by_email(db, email)
    if user is None or not user.check_password(password):
        raise Unauthenticated("Invalid email or password")
    if user.email_verified_at is None:
        raise Forbidden("EmailNotVerified")
    return user


async def find_or_create_oauth_user(
    db: AsyncSession,
    provider: str,
    oauth_id: str,
    email: str,
    name: Optional[str] = None,
    picture: Optional[str] = None,
) -> User:
    """
    Resolve an OAuth identity to a user: by provider id first, then by email
    (linking the provider to that account), else create a new, unverified
    account and send it a verification email.
    """
    result = await db.execute(
        select(User).where(User.oauth_provider == provider, User.oauth_id == oauth_id)
    )
    user = result.scalar_one_or_none()
    if user is not None:
        return user

    user = await get_user_by_email(db, email)
    if user is not None:
        user.oauth_provider = provider
        user.oauth_id = oauth_id
        if picture:
            user.image = picture
        await db.commit()
        return user

    user = User(
        email=normalize_email(email),
        name=name or email.split("@")[0],
        oauth_provider=provider,
        oauth_id=oauth_id,
        image=picture,
    )
    db.add(user)
    await db.flush()
    token = await issue_verification_token(db, user.email)
    await db.commit()
    logger.info("Created user %s from %s sign-in", user.id, provider)

    await send_verification_email(user.email, token)
    return user


# ═══════════════════════════════════════════════════════════════
#  Email verification
# ═══════════════════════════════════════════════════════════════

async def issue_verification_token(db: AsyncSession, email: str) -> str:
    """Replace any outstanding tokens for ``email`` with a fresh one."""
    await db.execute(delete(VerificationToken).where(VerificationToken.identifier == email))
    token = secrets.token_urlsafe(32)
    db.add(VerificationToken(
        identifier=email,
        token=token,
        expires=datetime.now(timezone.utc) + timedelta(hours=settings.VERIFICATION_TOKEN_HOURS),
    ))
    await db.flush()
    return token


async def verify_email(db: AsyncSession, token: str) -> User:
    record = (await db.execute(
        select(VerificationToken).where(VerificationToken.token == token)
    )).scalar_one_or_none()
    if record is None:
        raise InvalidInput("Invalid verification token")
    if _utc(record.expires) < datetime.now(timezone.utc):
        raise InvalidInput("Verification token has expired")

    user = await get_user_by_email(db, record.identifier)
    if user is None:
        raise NotFound("User not found")

    user.email_verified_at = datetime.now(timezone.utc)
    await db.delete(record)
    await db.commit()
    logger.info("Email verified for user %s", user.id)
    return user


async def resend_verification(db: AsyncSession, email: str) -> None:
    user = await get_user_by_email(db, email)
    if user is None:
        raise NotFound("User not found")
    if user.email_verified_at is not None:
        raise InvalidInput("Email is already verified")

    token = await issue_verification_token(db, user.email)
    await db.commit()
    await send_verification_email(user.email, token)


# ═══════════════════════════════════════════════════════════════
#  Leaderboard
# ═══════════════════════════════════════════════════════════════

async def leaderboard(db: AsyncSession, limit: int = 10) -> List[LeaderboardEntry]:
    result = await db.execute(
        select(User).order_by(User.points.desc(), User.id.asc()).limit(limit)
    )
    return [
        LeaderboardEntry(
            rank=rank,
            id=user.id,
            name=user.name,
            image=user.image,
            points=user.points,
            ideas_count=user.ideas_count,
            feedback_count=user.feedback_count,
        )
        for rank, user in enumerate(result.scalars().all(), start=1)
    ]
