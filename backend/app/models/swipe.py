"""Swipe triage session and swipe action ORM models."""
import enum
import uuid
from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String, Text, func, text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import Base, JSONDict, UUIDMixin, pg_enum
from app.models.comment import CommentStatus


class SwipeAction(str, enum.Enum):
    SWIPE_RIGHT = "swipe_right"  # reply
    SWIPE_LEFT = "swipe_left"  # ignore
    SWIPE_UP = "swipe_up"  # archive


# Comment status reached by each action; any status may be swiped again.
SWIPE_STATUS: dict[SwipeAction, CommentStatus] = {
    SwipeAction.SWIPE_RIGHT: CommentStatus.REVIEWED,
    SwipeAction.SWIPE_LEFT: CommentStatus.IGNORED,
    SwipeAction.SWIPE_UP: CommentStatus.ARCHIVED,
}


class SwipeSession(Base, UUIDMixin):
    __tablename__ = "swipe_sessions"

    workspace_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    channel_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    session_started_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    session_ended_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    comments_reviewed: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default=text("0"))
    comments_replied: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default=text("0"))
    session_metadata: Mapped[dict | None] = mapped_column(JSONDict, nullable=True)

    swipes = relationship("CommentSwipe", back_populates="session", lazy="noload")


class CommentSwipe(Base, UUIDMixin):
    __tablename__ = "comment_swipes"

    session_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("swipe_sessions.id"), nullable=False, index=True
    )
    comment_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("comments.id"), nullable=False, index=True
    )
    action: Mapped[SwipeAction] = mapped_column(pg_enum(SwipeAction, name="swipe_action"), nullable=False)
    reply_sent: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default=text("false"))
    reply_content: Mapped[str | None] = mapped_column(Text, nullable=True)
    swiped_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())

    session = relationship("SwipeSession", back_populates="swipes")
    comment = relationship("Comment", lazy="noload")
