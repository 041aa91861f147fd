"""Comment ingestion, listing and AI analysis schemas."""
import uuid
from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator

from app.models.comment import AIPriority, AISentiment, CommentCategory, CommentStatus, ReplyTone
from app.models.platform import Platform
from app.utils.helpers import clamp

CommentSortBy = Literal["created_at", "likes", "ai_score"]


class CommentIn(BaseModel):
    """A comment as delivered by an ingestion job."""
    workspace_id: str
    channel_id: str
    platform: Platform
    platform_comment_id: str
    content: str
    author_name: str | None = None
    author_id: str | None = None
    author_avatar_url: str | None = None
    likes_count: int = Field(0, ge=0)
    replies_count: int = Field(0, ge=0)
    commented_at: datetime | None = None
    post_id: str
    post_content: str | None = None
    post_url: str | None = None
    post_created_at: datetime | None = None
    has_official_reply: bool = False
    is_replied_by_us: bool = False


class CommentIngestRequest(BaseModel):
    comments: list[CommentIn] = Field(min_length=1)


class CommentResponse(BaseModel):
    id: uuid.UUID
    workspace_id: str
    channel_id: str
    platform: Platform
    platform_comment_id: str
    content: str
    author_name: str | None = None
    author_id: str | None = None
    author_avatar_url: str | None = None
    likes_count: int
    replies_count: int
    commented_at: datetime | None = None
    post_id: str
    post_content: str | None = None
    post_url: str | None = None
    post_created_at: datetime | None = None
    has_official_reply: bool
    is_replied_by_us: bool
    reply_content: str | None = None
    replied_at: datetime | None = None
    ai_score: int | None = None
    ai_category: CommentCategory | None = None
    ai_sentiment: AISentiment | None = None
    ai_priority: AIPriority | None = None
    ai_analysis_metadata: dict | None = None
    ai_analyzed_at: datetime | None = None
    status: CommentStatus
    reviewed_by: str | None = None
    reviewed_at: datetime | None = None

    model_config = {"from_attributes": True}


class ReplyStatusUpdate(BaseModel):
    is_replied: bool
    reply_content: str | None = None


class AnalyzeRequest(BaseModel):
    channel_id: str | None = None
    post_id: str | None = None
    force_reanalysis: bool = False


# ── AI analysis ──

_CATEGORY_ALIASES = {
    "critique_constructive": CommentCategory.CONSTRUCTIVE_CRITICISM.value,
    "autre": CommentCategory.OTHER.value,
}


def _normalize_label(value: Any, allowed: type, default: str, aliases: dict[str, str] | None = None) -> str:
    label = str(value or "").strip().lower()
    if aliases:
        label = aliases.get(label, label)
    if label in {member.value for member in allowed}:
        return label
    return default


class CommentAnalysis(BaseModel):
    """Reply-worthiness assessment of one comment."""
    score: int = Field(ge=0, le=100)
    category: CommentCategory = CommentCategory.OTHER
    sentiment: AISentiment = AISentiment.NEUTRAL
    priority: AIPriority = AIPriority.MEDIUM
    reasoning: str = ""
    suggested_tone: ReplyTone = ReplyTone.PROFESSIONAL
    fallback: bool = False

    @field_validator("score", mode="before")
    @classmethod
    def _clamp_score(cls, value: Any) -> int:
        if isinstance(value, bool) or value is None:
            raise ValueError("score must be a number")
        return int(round(clamp(float(value), 0, 100)))

    @field_validator("category", mode="before")
    @classmethod
    def _normalize_category(cls, value: Any) -> str:
        return _normalize_label(value, CommentCategory, CommentCategory.OTHER.value, _CATEGORY_ALIASES)

    @field_validator("sentiment", mode="before")
    @classmethod
    def _normalize_sentiment(cls, value: Any) -> str:
        return _normalize_label(value, AISentiment, AISentiment.NEUTRAL.value)

    @field_validator("priority", mode="before")
    @classmethod
    def _normalize_priority(cls, value: Any) -> str:
        return _normalize_label(value, AIPriority, AIPriority.MEDIUM.value)

    @field_validator("suggested_tone", mode="before")
    @classmethod
    def _normalize_tone(cls, value: Any) -> str:
        return _normalize_label(value, ReplyTone, ReplyTone.PROFESSIONAL.value)

    @field_validator("reasoning", mode="before")
    @classmethod
    def _stringify_reasoning(cls, value: Any) -> str:
        return "" if value is None else str(value)


class AnalyzeResult(BaseModel):
    analyzed_count: int
