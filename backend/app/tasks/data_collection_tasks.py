"""Data collection tasks: MEDIUM queue.

Decay-scheduled metrics collection, triggered per post (or per account) by an
external caller.
"""
import asyncio
import logging
from datetime import datetime

from app.tasks.celery_app import celery_app
from app.utils.errors import ExternalServiceError

logger = logging.getLogger(__name__)


def _collection_service(engine):
    from app.config import settings
    from app.database import create_session_factory
    from app.integrations.networks.registry import build_network_registry
    from app.services.collection_service import CollectionService
    from app.services.metrics_service import MetricsService

    return CollectionService(
        build_network_registry(settings),
        MetricsService(create_session_factory(engine)),
    )


async def run_post_collection(channel: dict, post_id: str, post_created_at: str) -> dict:
    """Collect one post's metrics if its decay schedule says so."""
    from app.config import settings
    from app.database import create_engine
    from app.schemas.stats import ChannelRef

    engine = create_engine(settings)
    try:
        outcome = await _collection_service(engine).collect_post(
            ChannelRef.model_validate(channel), post_id, datetime.fromisoformat(post_created_at),
        )
    finally:
        await engine.dispose()

    decision = outcome.decision
    return {
        "should_collect": decision.should_collect,
        "metrics_to_collect": [m.value for m in decision.metrics_to_collect],
        "next_collection_at": decision.next_collection_at.isoformat() if decision.next_collection_at else None,
        "saved_count": outcome.saved_count,
    }


async def run_account_collection(channel: dict) -> dict:
    from app.config import settings
    from app.database import create_engine
    from app.schemas.stats import ChannelRef

    engine = create_engine(settings)
    try:
        saved = await _collection_service(engine).collect_account(ChannelRef.model_validate(channel))
    finally:
        await engine.dispose()
    return {"saved_count": saved}


@celery_app.task(
    bind=True, name="app.tasks.data_collection_tasks.collect_post_metrics", max_retries=3, default_retry_delay=60,
)
def collect_post_metrics(self, channel: dict, post_id: str, post_created_at: str) -> dict:
    """Collect metrics for one post.

    Args:
        channel: {channel_id, workspace_id, platform, credentials}
        post_id: network identifier of the post
        post_created_at: ISO-8601 publication time of the post

    Network failures are retried; scheduling and credential errors are not.
    """
    try:
        result = asyncio.run(run_post_collection(channel, post_id, post_created_at))
    except ExternalServiceError as exc:
        logger.error("Metrics collection failed for post %s: %s", post_id, exc)
        raise self.retry(exc=exc)
    logger.info("Metrics collection for post %s: %s", post_id, result)
    return result


@celery_app.task(
    bind=True, name="app.tasks.data_collection_tasks.collect_account_metrics", max_retries=3, default_retry_delay=300,
)
def collect_account_metrics(self, channel: dict) -> dict:
    """Collect account-level metrics (page views, unique visitors) for one channel."""
    try:
        result = asyncio.run(run_account_collection(channel))
    except ExternalServiceError as exc:
        logger.error("Account metrics collection failed for channel %s: %s", channel.get("channel_id"), exc)
        raise self.retry(exc=exc)
    logger.info("Account metrics collection for channel %s: %s", channel.get("channel_id"), result)
    return result
