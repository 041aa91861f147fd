"""Swipe session and swipe action data access layer."""
import uuid as _uuid
from datetime import datetime

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.comment import AIPriority, Comment
from app.models.swipe import CommentSwipe, SwipeSession


async def get_session(db: AsyncSession, session_id: _uuid.UUID) -> SwipeSession | None:
    return (await db.execute(select(SwipeSession).where(SwipeSession.id == session_id))).scalar_one_or_none()


async def create_session(db: AsyncSession, session: SwipeSession) -> SwipeSession:
    db.add(session)
    await db.flush()
    return session


async def create_swipe(db: AsyncSession, swipe: CommentSwipe) -> CommentSwipe:
    db.add(swipe)
    await db.flush()
    return swipe


async def count_swipes(db: AsyncSession, session_id: _uuid.UUID) -> tuple[int, int]:
    """Return ``(swipes, swipes_with_reply_sent)`` recorded for a session."""
    row = (
        await db.execute(
            select(
                func.count(CommentSwipe.id),
                func.count(CommentSwipe.id).filter(CommentSwipe.reply_sent.is_(True)),
            ).where(CommentSwipe.session_id == session_id)
        )
    ).one()
    return row[0] or 0, row[1] or 0


async def comment_exists(db: AsyncSession, comment_id: _uuid.UUID) -> bool:
    return (await db.execute(select(Comment.id).where(Comment.id == comment_id))).scalar_one_or_none() is not None


async def session_totals(db: AsyncSession, workspace_id: str, since: datetime) -> dict:
    row = (
        await db.execute(
            select(
                func.count(SwipeSession.id),
                func.avg(SwipeSession.comments_reviewed),
                func.avg(SwipeSession.comments_replied),
                func.coalesce(func.sum(SwipeSession.comments_replied), 0),
            ).where(
                SwipeSession.workspace_id == workspace_id,
                SwipeSession.session_started_at >= since,
            )
        )
    ).one()
    return {
        "total_sessions": row[0] or 0,
        "avg_reviewed_per_session": float(row[1] or 0),
        "avg_replied_per_session": float(row[2] or 0),
        "total_replies_sent": int(row[3] or 0),
    }


async def comment_totals(db: AsyncSession, workspace_id: str, since: datetime) -> dict:
    row = (
        await db.execute(
            select(
                func.count(Comment.id),
                func.count(Comment.ai_analyzed_at),
                func.count(Comment.id).filter(Comment.is_replied_by_us.is_(True)),
                func.avg(Comment.ai_score),
                func.count(Comment.id).filter(Comment.ai_priority == AIPriority.HIGH),
            ).where(Comment.workspace_id == workspace_id, Comment.created_at >= since)
        )
    ).one()
    return {
        "total_comments": row[0] or 0,
        "analyzed_comments": row[1] or 0,
        "replied_comments": row[2] or 0,
        "avg_ai_score": round(float(row[3]), 1) if row[3] is not None else None,
        "high_priority_comments": row[4] or 0,
    }


async def category_breakdown(db: AsyncSession, workspace_id: str, since: datetime) -> list[dict]:
    count_col = func.count(Comment.id).label("count")
    q = (
        select(
            Comment.ai_category,
            count_col,
            func.count(Comment.id).filter(Comment.is_replied_by_us.is_(True)).label("replied_count"),
        )
        .where(
            Comment.workspace_id == workspace_id,
            Comment.created_at >= since,
            Comment.ai_category.is_not(None),
        )
        .group_by(Comment.ai_category)
        .order_by(count_col.desc())
    )
    return [
        {"category": row.ai_category.value, "count": row.count, "replied_count": row.replied_count}
        for row in (await db.execute(q)).all()
    ]
