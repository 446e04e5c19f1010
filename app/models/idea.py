"""Idea model and its tag vocabulary."""

import enum
from datetime import datetime
from typing import List, Optional

from sqlalchemy import Boolean, Column, DateTime, Enum, ForeignKey, Integer, String, Table, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base


class MediaType(str, enum.Enum):
    TEXT = "TEXT"
    AUDIO = "AUDIO"
    VIDEO = "VIDEO"
    MIXED = "MIXED"


class IdeaStatus(str, enum.Enum):
    DRAFT = "DRAFT"
    PUBLISHED = "PUBLISHED"
    FEATURED = "FEATURED"
    ARCHIVED = "ARCHIVED"


idea_tags = Table(
    "idea_tags",
    Base.metadata,
    Column("idea_id", ForeignKey("ideas.id", ondelete="CASCADE"), primary_key=True),
    Column("tag_id", ForeignKey("tags.id", ondelete="CASCADE"), primary_key=True),
)


class Tag(Base):
    __tablename__ = "tags"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    name: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)


class Idea(Base):
    __tablename__ = "ideas"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )

    # ── Pitch ──
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    problem: Mapped[str] = mapped_column(Text, nullable=False)
    solution: Mapped[str] = mapped_column(Text, nullable=False)
    target_audience: Mapped[Optional[str]] = mapped_column(Text)
    market_size: Mapped[Optional[str]] = mapped_column(Text)
    competition: Mapped[Optional[str]] = mapped_column(Text)
    business_model: Mapped[Optional[str]] = mapped_column(Text)

    # ── Media ──
    media_urls: Mapped[Optional[str]] = mapped_column(Text)
    audio_url: Mapped[Optional[str]] = mapped_column(String(500))
    video_url: Mapped[Optional[str]] = mapped_column(String(500))
    media_type: Mapped[MediaType] = mapped_column(Enum(MediaType), default=MediaType.TEXT)

    status: Mapped[IdeaStatus] = mapped_column(Enum(IdeaStatus), default=IdeaStatus.DRAFT, index=True)
    is_anonymous: Mapped[bool] = mapped_column(Boolean, default=False)

    # ── Aggregates (SQL increments only) ──
    upvotes: Mapped[int] = mapped_column(Integer, default=0, server_default="0", nullable=False)
    downvotes: Mapped[int] = mapped_column(Integer, default=0, server_default="0", nullable=False)
    views: Mapped[int] = mapped_column(Integer, default=0, server_default="0", nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    # ── Relationships ──
    user: Mapped["User"] = relationship("User", back_populates="ideas")  # noqa: F821
    tags: Mapped[List[Tag]] = relationship(Tag, secondary=idea_tags, order_by=Tag.name)
    feedbacks: Mapped[List["Feedback"]] = relationship(  # noqa: F821
        "Feedback", back_populates="idea", cascade="all, delete-orphan"
    )
    ai_summary: Mapped[Optional["AISummary"]] = relationship(  # noqa: F821
        "AISummary", back_populates="idea", uselist=False, cascade="all, delete-orphan"
    )
