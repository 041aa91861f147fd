"""Tests for ORM models, enum storage and table constraints."""
from datetime import datetime, timezone

import pytest
from sqlalchemy import UniqueConstraint, text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from app.database import transaction
from app.models import (
    SWIPE_STATUS, Base, Comment, CommentStatus, CommentSwipe, MetricSample, SuggestedReply, SwipeAction,
)
from app.models.comment import CommentCategory
from app.models.platform import Platform
from app.utils.errors import StorageError
from tests.conftest import create_comment

pytestmark = pytest.mark.anyio


def test_tables_registered():
    assert set(Base.metadata.tables) == {
        "comments", "swipe_sessions", "comment_swipes", "metrics", "ai_suggested_replies",
    }


def _unique_columns(model) -> set[tuple[str, ...]]:
    return {
        tuple(c.name for c in constraint.columns)
        for constraint in model.__table__.constraints
        if isinstance(constraint, UniqueConstraint)
    }


def test_comment_identity_constraint():
    assert ("platform_comment_id", "platform", "channel_id") in _unique_columns(Comment)


def test_metric_daily_sample_constraint():
    assert ("channel_id", "post_id", "metric_type", "collection_date") in _unique_columns(MetricSample)
    assert "metadata" in MetricSample.__table__.c


def test_every_swipe_is_its_own_row():
    assert _unique_columns(CommentSwipe) == set()
    assert SuggestedReply.__tablename__ == "ai_suggested_replies"


def test_swipe_status_mapping():
    assert SWIPE_STATUS == {
        SwipeAction.SWIPE_RIGHT: CommentStatus.REVIEWED,
        SwipeAction.SWIPE_LEFT: CommentStatus.IGNORED,
        SwipeAction.SWIPE_UP: CommentStatus.ARCHIVED,
    }


async def test_enums_stored_as_values(db_session):
    await create_comment(db_session, ai_category=CommentCategory.CONSTRUCTIVE_CRITICISM)
    row = (await db_session.execute(text("SELECT platform, status, ai_category FROM comments"))).one()
    assert tuple(row) == ("linkedin", "pending", "constructive_criticism")


async def test_duplicate_comment_rejected(db_session):
    await create_comment(db_session, platform_comment_id="dup")
    with pytest.raises(IntegrityError):
        await create_comment(db_session, platform_comment_id="dup")


async def test_transaction_rolls_back_and_raises_storage_error(session_factory):
    with pytest.raises(StorageError) as exc_info:
        async with transaction(session_factory) as db:
            db.add(Comment(
                workspace_id="ws-1", channel_id="ch-1", platform=Platform.LINKEDIN, platform_comment_id="lost",
                content="Lost in the rollback", post_id="urn:li:share:100",
                commented_at=datetime(2026, 10, 1, 10, 0, tzinfo=timezone.utc),
            ))
            await db.flush()
            await db.execute(text("SELECT * FROM no_such_table"))
    assert exc_info.value.status_code == 503
    assert isinstance(exc_info.value.__cause__, SQLAlchemyError)

    async with session_factory() as db:
        assert (await db.execute(text("SELECT COUNT(*) FROM comments"))).scalar() == 0
