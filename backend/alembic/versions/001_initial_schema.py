"""Initial schema - comments, swipe triage, metrics, suggested replies.

Revision ID: 001
Revises: None
Create Date: 2026-10-19
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import ENUM, JSONB, UUID

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # --- ENUM types ---
    # Shared by comments and metrics, so created once up front
    platform = ENUM(
        "facebook", "instagram", "twitter", "linkedin", "youtube", "tiktok", "wordpress", "pinterest",
        name="platform",
        create_type=False,
    )
    platform.create(op.get_bind(), checkfirst=True)
    comment_status = sa.Enum("pending", "reviewed", "archived", "ignored", name="comment_status")
    comment_category = sa.Enum(
        "question", "constructive_criticism", "compliment", "spam", "promotion", "other",
        name="comment_category",
    )
    ai_sentiment = sa.Enum("positive", "negative", "neutral", name="ai_sentiment")
    ai_priority = sa.Enum("high", "medium", "low", name="ai_priority")
    reply_tone = sa.Enum("professional", "friendly", "formal", "casual", name="reply_tone")
    swipe_action = sa.Enum("swipe_right", "swipe_left", "swipe_up", name="swipe_action")
    metric_type = sa.Enum(
        "likes", "comments", "shares", "views", "clicks", "impressions", "engagement_rate", "reach",
        name="metric_type",
    )

    # --- 1. comments ---
    op.create_table(
        "comments",
        sa.Column("id", UUID(as_uuid=True), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("workspace_id", sa.String(64), nullable=False),
        sa.Column("channel_id", sa.String(64), nullable=False),
        sa.Column("platform", platform, nullable=False),
        sa.Column("platform_comment_id", sa.String(200), nullable=False),
        sa.Column("content", sa.Text, nullable=False),
        sa.Column("author_name", sa.String(200), nullable=True),
        sa.Column("author_id", sa.String(200), nullable=True),
        sa.Column("author_avatar_url", sa.String(500), nullable=True),
        sa.Column("likes_count", sa.Integer, nullable=False, server_default=sa.text("0")),
        sa.Column("replies_count", sa.Integer, nullable=False, server_default=sa.text("0")),
        sa.Column("commented_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("post_id", sa.String(200), nullable=False),
        sa.Column("post_content", sa.Text, nullable=True),
        sa.Column("post_url", sa.String(500), nullable=True),
        sa.Column("post_created_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("has_official_reply", sa.Boolean, nullable=False, server_default=sa.text("false")),
        sa.Column("is_replied_by_us", sa.Boolean, nullable=False, server_default=sa.text("false")),
        sa.Column("reply_content", sa.Text, nullable=True),
        sa.Column("replied_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("ai_score", sa.Integer, nullable=True),
        sa.Column("ai_category", comment_category, nullable=True),
        sa.Column("ai_sentiment", ai_sentiment, nullable=True),
        sa.Column("ai_priority", ai_priority, nullable=True),
        sa.Column("ai_analysis_metadata", JSONB, nullable=True),
        sa.Column("ai_analyzed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("status", comment_status, nullable=False, server_default=sa.text("'pending'")),
        sa.Column("reviewed_by", sa.String(64), nullable=True),
        sa.Column("reviewed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint("platform_comment_id", "platform", "channel_id", name="uq_comment_platform_channel"),
        sa.CheckConstraint("ai_score IS NULL OR ai_score BETWEEN 0 AND 100", name="ck_comments_ai_score_range"),
    )

    # --- 2. swipe_sessions ---
    op.create_table(
        "swipe_sessions",
        sa.Column("id", UUID(as_uuid=True), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("workspace_id", sa.String(64), nullable=False),
        sa.Column("channel_id", sa.String(64), nullable=True),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("session_started_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("session_ended_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("comments_reviewed", sa.Integer, nullable=False, server_default=sa.text("0")),
        sa.Column("comments_replied", sa.Integer, nullable=False, server_default=sa.text("0")),
        sa.Column("session_metadata", JSONB, nullable=True),
    )

    # --- 3. comment_swipes (append-only) ---
    op.create_table(
        "comment_swipes",
        sa.Column("id", UUID(as_uuid=True), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("session_id", UUID(as_uuid=True), sa.ForeignKey("swipe_sessions.id", ondelete="CASCADE"), nullable=False),
        sa.Column("comment_id", UUID(as_uuid=True), sa.ForeignKey("comments.id", ondelete="CASCADE"), nullable=False),
        sa.Column("action", swipe_action, nullable=False),
        sa.Column("reply_sent", sa.Boolean, nullable=False, server_default=sa.text("false")),
        sa.Column("reply_content", sa.Text, nullable=True),
        sa.Column("swiped_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )

    # --- 4. metrics ---
    op.create_table(
        "metrics",
        sa.Column("id", UUID(as_uuid=True), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("channel_id", sa.String(64), nullable=False),
        sa.Column("workspace_id", sa.String(64), nullable=False),
        sa.Column("platform", platform, nullable=False),
        sa.Column("post_id", sa.String(200), nullable=True),
        sa.Column("metric_type", metric_type, nullable=False),
        sa.Column("value", sa.Float, nullable=False),
        sa.Column("metadata", JSONB, nullable=True),
        sa.Column("collected_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("collection_date", sa.Date, nullable=False),
        sa.Column("post_created_at", sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint("channel_id", "post_id", "metric_type", "collection_date", name="uq_metric_daily_sample"),
    )

    # --- 5. ai_suggested_replies ---
    op.create_table(
        "ai_suggested_replies",
        sa.Column("id", UUID(as_uuid=True), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("comment_id", UUID(as_uuid=True), sa.ForeignKey("comments.id", ondelete="CASCADE"), nullable=False),
        sa.Column("suggested_reply", sa.Text, nullable=False),
        sa.Column("tone", reply_tone, nullable=False),
        sa.Column("confidence_score", sa.Float, nullable=False, server_default=sa.text("0.5")),
        sa.Column("alternative_replies", JSONB, nullable=True),
        sa.Column("generated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )

    # --- Indexes ---
    op.create_index("ix_comments_workspace_id", "comments", ["workspace_id"])
    op.create_index("ix_comments_workspace_post", "comments", ["workspace_id", "post_id"])
    op.create_index("ix_comments_workspace_status_score", "comments", ["workspace_id", "status", "ai_score"])
    op.create_index(
        "idx_comments_unanalyzed", "comments", ["workspace_id", "commented_at"],
        postgresql_where=sa.text("ai_analyzed_at IS NULL"),
    )
    op.create_index("ix_swipe_sessions_workspace_id", "swipe_sessions", ["workspace_id"])
    op.create_index("ix_comment_swipes_session_id", "comment_swipes", ["session_id"])
    op.create_index("ix_comment_swipes_comment_id", "comment_swipes", ["comment_id"])
    op.create_index("ix_metrics_workspace_type_collected", "metrics", ["workspace_id", "metric_type", "collected_at"])
    op.create_index("ix_metrics_channel_post", "metrics", ["channel_id", "post_id"])
    op.create_index("ix_ai_suggested_replies_comment_id", "ai_suggested_replies", ["comment_id"])

    # --- updated_at auto-update trigger ---
    op.execute("""
        CREATE OR REPLACE FUNCTION update_updated_at_column()
        RETURNS TRIGGER AS $$
        BEGIN
            NEW.updated_at = NOW();
            RETURN NEW;
        END;
        $$ language 'plpgsql';
    """)
    op.execute("""
        CREATE TRIGGER trigger_update_comments_updated_at
        BEFORE UPDATE ON comments
        FOR EACH ROW EXECUTE FUNCTION update_updated_at_column();
    """)


def downgrade() -> None:
    op.execute("DROP TRIGGER IF EXISTS trigger_update_comments_updated_at ON comments")
    op.execute("DROP FUNCTION IF EXISTS update_updated_at_column()")

    for table in ["ai_suggested_replies", "metrics", "comment_swipes", "swipe_sessions", "comments"]:
        op.drop_table(table)

    enums = [
        "platform", "comment_status", "comment_category", "ai_sentiment", "ai_priority",
        "reply_tone", "swipe_action", "metric_type",
    ]
    for enum in enums:
        op.execute(f"DROP TYPE IF EXISTS {enum}")
