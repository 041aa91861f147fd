"""Metric sample storage and time-bucketed aggregation."""
import logging
from collections import defaultdict
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.database import transaction
from app.models.metric import MetricSample
from app.repositories import metric_repository
from app.schemas.stats import DataPoint, MetricSampleIn, MetricSeries, StatsRequest, StatsResponse
from app.utils.helpers import ensure_utc, utc_date

logger = logging.getLogger(__name__)


class MetricsService:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def save_metrics(self, samples: list[MetricSampleIn]) -> int:
        """Store samples, one row per channel, post, metric and UTC day.

        A sample collected again on the same day overwrites value, metadata
        and collected_at of that day's row.
        """
        async with transaction(self.session_factory) as db:
            for sample in samples:
                collected_at = ensure_utc(sample.collected_at)
                await metric_repository.upsert_sample(
                    db,
                    {
                        "channel_id": sample.channel_id,
                        "workspace_id": sample.workspace_id,
                        "platform": sample.platform,
                        "post_id": sample.post_id,
                        "metric_type": sample.metric_type,
                        "value": sample.value,
                        "metadata": sample.metadata,
                        "collected_at": collected_at,
                        "collection_date": utc_date(collected_at),
                        "post_created_at": sample.post_created_at,
                    },
                )
        logger.info("Saved %d metric samples", len(samples))
        return len(samples)

    async def get_stats(self, request: StatsRequest) -> StatsResponse:
        """Average each metric per time bucket over the requested window.

        ``current_value`` is the sum of the bucket averages.
        """
        response = StatsResponse()
        async with transaction(self.session_factory) as db:
            for metric_type in request.metrics:
                buckets = await metric_repository.bucketed_averages(
                    db,
                    workspace_id=request.workspace_id,
                    metric_type=metric_type,
                    start=ensure_utc(request.period.start_date),
                    end=ensure_utc(request.period.end_date),
                    granularity=request.granularity,
                    channel_ids=request.channel_ids,
                )
                points = [DataPoint(date=ensure_utc(bucket), value=value) for bucket, value in buckets]
                response.metrics[metric_type] = MetricSeries(
                    current_value=sum(p.value for p in points),
                    data_points=points,
                )
        return response

    async def get_last_collection_time(self, channel_id: str, post_id: str) -> datetime | None:
        async with transaction(self.session_factory) as db:
            last = await metric_repository.last_collected_at(db, channel_id, post_id)
        return ensure_utc(last) if last is not None else None

    async def get_post_metrics(
        self, workspace_id: str, channel_id: str, post_id: str
    ) -> dict[str, list[MetricSample]]:
        """Samples of one post grouped by metric type, newest first."""
        async with transaction(self.session_factory) as db:
            samples = await metric_repository.list_post_samples(
                db, workspace_id=workspace_id, channel_id=channel_id, post_id=post_id
            )
        grouped: dict[str, list[MetricSample]] = defaultdict(list)
        for sample in samples:
            grouped[sample.metric_type.value].append(sample)
        return dict(grouped)
