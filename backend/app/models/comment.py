"""Easy Reply comment ORM model."""
import enum
from datetime import datetime

from sqlalchemy import Boolean, DateTime, Index, Integer, String, Text, UniqueConstraint, text
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base, JSONDict, TimestampMixin, UUIDMixin, pg_enum
from app.models.platform import Platform


class CommentStatus(str, enum.Enum):
    PENDING = "pending"
    REVIEWED = "reviewed"
    ARCHIVED = "archived"
    IGNORED = "ignored"


class CommentCategory(str, enum.Enum):
    QUESTION = "question"
    CONSTRUCTIVE_CRITICISM = "constructive_criticism"
    COMPLIMENT = "compliment"
    SPAM = "spam"
    PROMOTION = "promotion"
    OTHER = "other"


class AISentiment(str, enum.Enum):
    POSITIVE = "positive"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"


class AIPriority(str, enum.Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class ReplyTone(str, enum.Enum):
    PROFESSIONAL = "professional"
    FRIENDLY = "friendly"
    FORMAL = "formal"
    CASUAL = "casual"


class Comment(Base, UUIDMixin, TimestampMixin):
    __tablename__ = "comments"
    __table_args__ = (
        UniqueConstraint("platform_comment_id", "platform", "channel_id", name="uq_comment_platform_channel"),
        Index("ix_comments_workspace_post", "workspace_id", "post_id"),
        Index("ix_comments_workspace_status_score", "workspace_id", "status", "ai_score"),
    )

    # Owning scope
    workspace_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    channel_id: Mapped[str] = mapped_column(String(64), nullable=False)
    platform: Mapped[Platform] = mapped_column(pg_enum(Platform, name="platform"), nullable=False)

    # Comment as seen on the network
    platform_comment_id: Mapped[str] = mapped_column(String(200), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    author_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    author_id: Mapped[str | None] = mapped_column(String(200), nullable=True)
    author_avatar_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    likes_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default=text("0"))
    replies_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default=text("0"))
    commented_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    # Parent post snapshot
    post_id: Mapped[str] = mapped_column(String(200), nullable=False)
    post_content: Mapped[str | None] = mapped_column(Text, nullable=True)
    post_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    post_created_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    # Reply state
    has_official_reply: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default=text("false"))
    is_replied_by_us: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default=text("false"))
    reply_content: Mapped[str | None] = mapped_column(Text, nullable=True)
    replied_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    # AI analysis (written by the scorer only)
    ai_score: Mapped[int | None] = mapped_column(Integer, nullable=True)
    ai_category: Mapped[CommentCategory | None] = mapped_column(
        pg_enum(CommentCategory, name="comment_category"), nullable=True
    )
    ai_sentiment: Mapped[AISentiment | None] = mapped_column(pg_enum(AISentiment, name="ai_sentiment"), nullable=True)
    ai_priority: Mapped[AIPriority | None] = mapped_column(pg_enum(AIPriority, name="ai_priority"), nullable=True)
    ai_analysis_metadata: Mapped[dict | None] = mapped_column(JSONDict, nullable=True)
    ai_analyzed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    # Triage (written by swipes only)
    status: Mapped[CommentStatus] = mapped_column(
        pg_enum(CommentStatus, name="comment_status"),
        nullable=False,
        default=CommentStatus.PENDING,
        server_default=text("'pending'"),
    )
    reviewed_by: Mapped[str | None] = mapped_column(String(64), nullable=True)
    reviewed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
