"""Decay-scheduled metrics collection for posts, plus account-level collection."""
import logging
from dataclasses import dataclass
from datetime import datetime

from app.integrations.networks.base import NetworkCapability
from app.integrations.networks.registry import NetworkRegistry
from app.schemas.stats import ChannelRef
from app.services.collection_scheduler import CollectionDecision, should_collect_metrics
from app.services.metrics_service import MetricsService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CollectionOutcome:
    decision: CollectionDecision
    saved_count: int = 0


class CollectionService:
    def __init__(self, registry: NetworkRegistry, metrics: MetricsService):
        self.registry = registry
        self.metrics = metrics

    async def check(
        self,
        channel: ChannelRef,
        post_id: str,
        post_created_at: datetime,
        last_collection_at: datetime | None = None,
        now: datetime | None = None,
    ) -> CollectionDecision:
        """Scheduler decision; the stored last collection time is used unless one is given."""
        backend = self.registry.require(channel.platform, NetworkCapability.STATISTICS)
        if last_collection_at is None:
            last_collection_at = await self.metrics.get_last_collection_time(channel.channel_id, post_id)
        return should_collect_metrics(
            backend.statistics.collection_rules, post_created_at, last_collection_at, now=now
        )

    async def collect_post(
        self,
        channel: ChannelRef,
        post_id: str,
        post_created_at: datetime,
        now: datetime | None = None,
    ) -> CollectionOutcome:
        decision = await self.check(channel, post_id, post_created_at, now=now)
        if not decision.should_collect:
            return CollectionOutcome(decision=decision)

        backend = self.registry.require(channel.platform, NetworkCapability.STATISTICS)
        collector = backend.statistics.collector_factory(channel)
        try:
            samples = await collector.collect_post_metrics(post_id)
        finally:
            await collector.aclose()

        wanted = set(decision.metrics_to_collect)
        approved = [
            s.model_copy(update={"post_created_at": post_created_at})
            for s in samples
            if s.metric_type in wanted
        ]
        saved = await self.metrics.save_metrics(approved) if approved else 0
        logger.info(
            "Collected %s post %s: %d of %d samples saved",
            channel.platform.value, post_id, saved, len(samples),
        )
        return CollectionOutcome(decision=decision, saved_count=saved)

    async def collect_account(self, channel: ChannelRef) -> int:
        """Collect account-level samples (no post) and store them for today."""
        backend = self.registry.require(channel.platform, NetworkCapability.STATISTICS)
        collector = backend.statistics.collector_factory(channel)
        try:
            samples = await collector.get_account_metrics()
        finally:
            await collector.aclose()

        saved = await self.metrics.save_metrics(samples) if samples else 0
        logger.info("Collected %s account %s: %d samples saved", channel.platform.value, channel.channel_id, saved)
        return saved
