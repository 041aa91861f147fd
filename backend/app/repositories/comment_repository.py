"""Comment data access layer."""
import uuid as _uuid
from datetime import datetime
from typing import Any

from sqlalchemy import Select, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.comment import Comment, CommentStatus
from app.models.platform import Platform
from app.utils.helpers import utc_now
from app.utils.sql import dialect_insert

# Columns an ingestion re-run is allowed to refresh on an existing comment
INGEST_REFRESH_COLUMNS = ("content", "likes_count", "replies_count", "has_official_reply")
COMMENT_IDENTITY = ("platform_comment_id", "platform", "channel_id")


async def get_by_id(db: AsyncSession, comment_id: _uuid.UUID) -> Comment | None:
    return (await db.execute(select(Comment).where(Comment.id == comment_id))).scalar_one_or_none()


def latest_per_identity(rows: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Keep the last copy of each comment in a batch.

    PostgreSQL refuses an ON CONFLICT DO UPDATE statement that touches the
    same row twice, so repeated identities are collapsed before the insert.
    """
    latest: dict[tuple, dict[str, Any]] = {}
    for row in rows:
        latest[tuple(row[col] for col in COMMENT_IDENTITY)] = row
    return list(latest.values())


def build_ingest_upsert(insert, rows: list[dict[str, Any]]):
    stmt = insert.values([{"id": _uuid.uuid4(), **row} for row in rows])
    return stmt.on_conflict_do_update(
        index_elements=list(COMMENT_IDENTITY),
        set_={
            **{col: stmt.excluded[col] for col in INGEST_REFRESH_COLUMNS},
            "updated_at": func.now(),
        },
    )


async def upsert_many(db: AsyncSession, rows: list[dict[str, Any]]) -> int:
    """Upsert a batch of comments; returns the number of distinct comments written."""
    rows = latest_per_identity(rows)
    if not rows:
        return 0
    await db.execute(build_ingest_upsert(dialect_insert(db, Comment.__table__), rows))
    return len(rows)


def _order(q: Select, sort_by: str) -> Select:
    if sort_by == "ai_score":
        return q.order_by(Comment.ai_score.desc().nulls_last(), Comment.commented_at.desc())
    if sort_by == "likes":
        return q.order_by(Comment.likes_count.desc(), Comment.commented_at.desc())
    return q.order_by(Comment.commented_at.desc(), Comment.created_at.desc())


async def list_comments(
    db: AsyncSession,
    *,
    workspace_id: str,
    post_id: str | None = None,
    channel_id: str | None = None,
    platform: Platform | None = None,
    filter_replied: bool | None = None,
    date_from: datetime | None = None,
    date_to: datetime | None = None,
    sort_by: str = "created_at",
    skip: int = 0,
    limit: int = 50,
) -> tuple[list[Comment], int]:
    conditions = [Comment.workspace_id == workspace_id]
    if post_id:
        conditions.append(Comment.post_id == post_id)
    if channel_id:
        conditions.append(Comment.channel_id == channel_id)
    if platform:
        conditions.append(Comment.platform == platform)
    if filter_replied is not None:
        conditions.append(Comment.is_replied_by_us.is_(filter_replied))
    if date_from:
        conditions.append(Comment.commented_at >= date_from)
    if date_to:
        conditions.append(Comment.commented_at <= date_to)

    count_q = select(func.count()).select_from(Comment).where(*conditions)
    total = (await db.execute(count_q)).scalar() or 0

    q = _order(select(Comment).where(*conditions), sort_by)
    rows = (await db.execute(q.offset(skip).limit(limit))).scalars().all()
    return list(rows), total


async def set_reply_status(
    db: AsyncSession,
    comment_id: _uuid.UUID,
    *,
    is_replied_by_us: bool,
    reply_content: str | None,
    replied_at: datetime | None,
) -> Comment | None:
    comment = await get_by_id(db, comment_id)
    if comment is None:
        return None
    comment.is_replied_by_us = is_replied_by_us
    comment.reply_content = reply_content
    comment.replied_at = replied_at
    comment.updated_at = utc_now()
    await db.flush()
    return comment


async def set_analysis(db: AsyncSession, comment_id: _uuid.UUID, values: dict[str, Any]) -> bool:
    result = await db.execute(
        update(Comment).where(Comment.id == comment_id).values(**values, updated_at=utc_now())
    )
    return result.rowcount > 0


async def set_triage(db: AsyncSession, comment_id: _uuid.UUID, values: dict[str, Any]) -> bool:
    result = await db.execute(
        update(Comment).where(Comment.id == comment_id).values(**values, updated_at=utc_now())
    )
    return result.rowcount > 0


async def list_for_analysis(
    db: AsyncSession,
    *,
    workspace_id: str,
    channel_id: str | None = None,
    post_id: str | None = None,
    include_analyzed: bool = False,
    limit: int = 100,
) -> list[Comment]:
    q = select(Comment).where(Comment.workspace_id == workspace_id)
    if channel_id:
        q = q.where(Comment.channel_id == channel_id)
    if post_id:
        q = q.where(Comment.post_id == post_id)
    if not include_analyzed:
        q = q.where(Comment.ai_analyzed_at.is_(None))
    q = q.order_by(Comment.commented_at.desc(), Comment.created_at.desc()).limit(limit)
    return list((await db.execute(q)).scalars().all())


async def swipe_queue(
    db: AsyncSession,
    *,
    workspace_id: str,
    channel_id: str | None = None,
    min_score: int = 50,
    exclude_replied: bool = True,
    limit: int = 20,
) -> list[Comment]:
    q = select(Comment).where(
        Comment.workspace_id == workspace_id,
        Comment.status == CommentStatus.PENDING,
        Comment.ai_score >= min_score,
    )
    if channel_id:
        q = q.where(Comment.channel_id == channel_id)
    if exclude_replied:
        q = q.where(Comment.is_replied_by_us.is_(False))
    q = q.order_by(Comment.ai_score.desc(), Comment.commented_at.desc()).limit(limit)
    return list((await db.execute(q)).scalars().all())
