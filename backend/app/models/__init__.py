"""SQLAlchemy ORM models - comments, triage sessions, metrics, reply suggestions."""
from app.models.base import Base, TimestampMixin, UUIDMixin
from app.models.platform import Platform
from app.models.comment import (
    AIPriority,
    AISentiment,
    Comment,
    CommentCategory,
    CommentStatus,
    ReplyTone,
)
from app.models.swipe import SWIPE_STATUS, CommentSwipe, SwipeAction, SwipeSession
from app.models.metric import MetricSample, MetricType
from app.models.suggested_reply import SuggestedReply

__all__ = [
    "Base",
    "TimestampMixin",
    "UUIDMixin",
    "Platform",
    "Comment",
    "CommentStatus",
    "CommentCategory",
    "AISentiment",
    "AIPriority",
    "ReplyTone",
    "SwipeSession",
    "CommentSwipe",
    "SwipeAction",
    "SWIPE_STATUS",
    "MetricSample",
    "MetricType",
    "SuggestedReply",
]
