"""Easy Reply swipe session, swipe and reply suggestion schemas."""
import uuid
from datetime import datetime

from pydantic import BaseModel, Field

from app.models.comment import ReplyTone
from app.models.swipe import SwipeAction


class SessionStartRequest(BaseModel):
    workspace_id: str
    user_id: str
    channel_id: str | None = None
    metadata: dict | None = None


class SwipeSessionResponse(BaseModel):
    id: uuid.UUID
    workspace_id: str
    channel_id: str | None = None
    user_id: str
    session_started_at: datetime
    session_ended_at: datetime | None = None
    comments_reviewed: int
    comments_replied: int
    session_metadata: dict | None = None

    model_config = {"from_attributes": True}


class SwipeRequest(BaseModel):
    session_id: uuid.UUID
    comment_id: uuid.UUID
    action: SwipeAction
    reply_content: str | None = None


class CommentSwipeResponse(BaseModel):
    id: uuid.UUID
    session_id: uuid.UUID
    comment_id: uuid.UUID
    action: SwipeAction
    reply_sent: bool
    reply_content: str | None = None
    swiped_at: datetime

    model_config = {"from_attributes": True}


class SuggestReplyRequest(BaseModel):
    comment_id: uuid.UUID
    tone: ReplyTone | None = None
    context: str | None = Field(None, max_length=1000)


class SuggestedReplyResponse(BaseModel):
    id: uuid.UUID
    comment_id: uuid.UUID
    suggested_reply: str
    tone: ReplyTone
    confidence_score: float
    alternative_replies: list[str] | None = None
    generated_at: datetime

    model_config = {"from_attributes": True}


# ── Statistics ──

class GlobalCommentStats(BaseModel):
    total_comments: int = 0
    analyzed_comments: int = 0
    replied_comments: int = 0
    avg_ai_score: float | None = None
    high_priority_comments: int = 0


class CategoryBreakdown(BaseModel):
    category: str
    count: int
    replied_count: int


class SessionStats(BaseModel):
    total_sessions: int = 0
    avg_reviewed_per_session: float = 0.0
    avg_replied_per_session: float = 0.0
    total_replies_sent: int = 0


class EasyReplyStats(BaseModel):
    period_days: int
    global_stats: GlobalCommentStats
    category_breakdown: list[CategoryBreakdown] = []
    session_stats: SessionStats
