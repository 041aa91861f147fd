"""Metric sample data access layer."""
import uuid as _uuid
from datetime import datetime
from typing import Any

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.metric import MetricSample, MetricType
from app.utils.sql import date_trunc, dialect_insert

DAILY_SAMPLE_KEY = ["channel_id", "post_id", "metric_type", "collection_date"]
# Refreshed when a sample for the same post, metric and day is collected again
SAMPLE_REFRESH_COLUMNS = ("value", "metadata", "collected_at")


async def upsert_sample(db: AsyncSession, row: dict[str, Any]) -> None:
    """Insert one daily sample or overwrite the existing one for that day.

    ``row`` is keyed by column name, so the JSON payload goes under ``metadata``.
    """
    if row.get("post_id") is None:
        # NULLs never collide in a unique index; match account-level samples explicitly
        await _upsert_account_sample(db, row)
        return
    stmt = dialect_insert(db, MetricSample.__table__).values(id=_uuid.uuid4(), **row)
    stmt = stmt.on_conflict_do_update(
        index_elements=DAILY_SAMPLE_KEY,
        set_={col: stmt.excluded[col] for col in SAMPLE_REFRESH_COLUMNS},
    )
    await db.execute(stmt)


async def _upsert_account_sample(db: AsyncSession, row: dict[str, Any]) -> None:
    table = MetricSample.__table__
    key = (
        table.c.channel_id == row["channel_id"],
        table.c.post_id.is_(None),
        table.c.metric_type == row["metric_type"],
        table.c.collection_date == row["collection_date"],
    )
    existing = (await db.execute(select(table.c.id).where(*key))).scalar_one_or_none()
    if existing is None:
        await db.execute(table.insert().values(id=_uuid.uuid4(), **row))
        return
    await db.execute(
        update(table).where(table.c.id == existing).values({col: row[col] for col in SAMPLE_REFRESH_COLUMNS})
    )


async def bucketed_averages(
    db: AsyncSession,
    *,
    workspace_id: str,
    metric_type: MetricType,
    start: datetime,
    end: datetime,
    granularity: str = "day",
    channel_ids: list[str] | None = None,
) -> list[tuple[datetime, float]]:
    bucket = date_trunc(granularity, MetricSample.collected_at).label("bucket")
    q = (
        select(bucket, func.avg(MetricSample.value).label("value"))
        .where(
            MetricSample.workspace_id == workspace_id,
            MetricSample.metric_type == metric_type,
            MetricSample.collected_at >= start,
            MetricSample.collected_at <= end,
        )
        .group_by(bucket)
        .order_by(bucket)
    )
    if channel_ids:
        q = q.where(MetricSample.channel_id.in_(channel_ids))
    rows = (await db.execute(q)).all()
    return [(row.bucket, float(row.value)) for row in rows]


async def last_collected_at(db: AsyncSession, channel_id: str, post_id: str) -> datetime | None:
    return (
        await db.execute(
            select(func.max(MetricSample.collected_at)).where(
                MetricSample.channel_id == channel_id,
                MetricSample.post_id == post_id,
            )
        )
    ).scalar()


async def list_post_samples(
    db: AsyncSession, *, workspace_id: str, channel_id: str, post_id: str
) -> list[MetricSample]:
    q = (
        select(MetricSample)
        .where(
            MetricSample.workspace_id == workspace_id,
            MetricSample.channel_id == channel_id,
            MetricSample.post_id == post_id,
        )
        .order_by(MetricSample.collected_at.desc())
    )
    return list((await db.execute(q)).scalars().all())
