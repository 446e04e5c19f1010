"""User model — identity plus the gamification counters."""

import enum
from datetime import datetime
from typing import List, Optional

from sqlalchemy import CheckConstraint, DateTime, Enum, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column, relationship
from werkzeug.security import check_password_hash, generate_password_hash

from app.database import Base


class RoleEnum(str, enum.Enum):
    USER = "USER"
    ADMIN = "ADMIN"


class User(Base):
    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint("points >= 0", name="ck_users_points_non_negative"),
    )

    # ── Identity ──
    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    email: Mapped[str] = mapped_column(
        String(255), unique=True, index=True, nullable=False
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    password_hash: Mapped[Optional[str]] = mapped_column(String(255))
    image: Mapped[Optional[str]] = mapped_column(String(500))
    role: Mapped[RoleEnum] = mapped_column(Enum(RoleEnum), default=RoleEnum.USER)
    email_verified_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))

    # ── OAuth ──
    oauth_provider: Mapped[Optional[str]] = mapped_column(String(20))
    oauth_id: Mapped[Optional[str]] = mapped_column(String(255))

    # ── Gamification counters (only ever changed via SQL increments) ──
    points: Mapped[int] = mapped_column(Integer, default=0, server_default="0", nullable=False)
    ideas_count: Mapped[int] = mapped_column(Integer, default=0, server_default="0", nullable=False)
    feedback_count: Mapped[int] = mapped_column(Integer, default=0, server_default="0", nullable=False)
    last_active: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))

    # ── Timestamps ──
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    # ── Relationships ──
    ideas: Mapped[List["Idea"]] = relationship("Idea", back_populates="user")  # noqa: F821

    @property
    def is_admin(self) -> bool:
        return self.role == RoleEnum.ADMIN

    # helpers
    def set_password(self, password: str) -> None:
        self.password_hash = generate_password_hash(password)

    def check_password(self, password: str) -> bool:
        # OAuth-only accounts have no password
        if not self.password_hash:
            return False
        return check_password_hash(self.password_hash, password)
