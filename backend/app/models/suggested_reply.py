"""AI suggested reply ORM model."""
import uuid
from datetime import datetime

from sqlalchemy import DateTime, Float, ForeignKey, Text, func
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base, JSONDict, UUIDMixin, pg_enum
from app.models.comment import ReplyTone


class SuggestedReply(Base, UUIDMixin):
    __tablename__ = "ai_suggested_replies"

    comment_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("comments.id"), nullable=False, index=True
    )
    suggested_reply: Mapped[str] = mapped_column(Text, nullable=False)
    tone: Mapped[ReplyTone] = mapped_column(pg_enum(ReplyTone, name="reply_tone"), nullable=False)
    confidence_score: Mapped[float] = mapped_column(Float, nullable=False, default=0.5)
    alternative_replies: Mapped[list | None] = mapped_column(JSONDict, nullable=True)
    generated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())
