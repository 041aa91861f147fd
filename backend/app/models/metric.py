"""Collected metric sample ORM model."""
import enum
from datetime import date, datetime

from sqlalchemy import Date, DateTime, Float, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base, JSONDict, UUIDMixin, pg_enum
from app.models.platform import Platform


class MetricType(str, enum.Enum):
    LIKES = "likes"
    COMMENTS = "comments"
    SHARES = "shares"
    VIEWS = "views"
    CLICKS = "clicks"
    IMPRESSIONS = "impressions"
    ENGAGEMENT_RATE = "engagement_rate"
    REACH = "reach"


class MetricSample(Base, UUIDMixin):
    __tablename__ = "metrics"
    __table_args__ = (
        # One sample per post, metric and UTC day; same-day re-collection overwrites.
        UniqueConstraint("channel_id", "post_id", "metric_type", "collection_date", name="uq_metric_daily_sample"),
        Index("ix_metrics_workspace_type_collected", "workspace_id", "metric_type", "collected_at"),
        Index("ix_metrics_channel_post", "channel_id", "post_id"),
    )

    channel_id: Mapped[str] = mapped_column(String(64), nullable=False)
    workspace_id: Mapped[str] = mapped_column(String(64), nullable=False)
    platform: Mapped[Platform] = mapped_column(pg_enum(Platform, name="platform"), nullable=False)
    post_id: Mapped[str | None] = mapped_column(String(200), nullable=True)
    metric_type: Mapped[MetricType] = mapped_column(pg_enum(MetricType, name="metric_type"), nullable=False)
    value: Mapped[float] = mapped_column(Float, nullable=False)
    # "metadata" is reserved on declarative classes
    sample_metadata: Mapped[dict | None] = mapped_column("metadata", JSONDict, nullable=True)
    collected_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    collection_date: Mapped[date] = mapped_column(Date, nullable=False)
    post_created_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
