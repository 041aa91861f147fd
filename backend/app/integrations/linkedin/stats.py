"""LinkedIn statistics: decay rule table and metric sample collector."""
import logging
from typing import Any

import httpx

from app.config import Settings
from app.integrations.linkedin.client import LinkedInRestClient
from app.integrations.resilience import retry_with_backoff
from app.models.metric import MetricType
from app.models.platform import Platform
from app.schemas.stats import ChannelRef, MetricSampleIn
from app.services.collection_scheduler import CollectionRule
from app.utils.errors import ExternalServiceError, InvalidRequestError
from app.utils.helpers import utc_now

logger = logging.getLogger(__name__)

_ALL = (MetricType.LIKES, MetricType.COMMENTS, MetricType.SHARES, MetricType.VIEWS, MetricType.IMPRESSIONS)
_CORE = (MetricType.LIKES, MetricType.COMMENTS, MetricType.SHARES, MetricType.VIEWS)
_SOCIAL = (MetricType.LIKES, MetricType.COMMENTS, MetricType.SHARES)
_REACTIONS = (MetricType.LIKES, MetricType.COMMENTS)
_LIKES = (MetricType.LIKES,)

LINKEDIN_COLLECTION_RULES: tuple[CollectionRule, ...] = (
    CollectionRule(0, 5, _ALL),  # 0-1h
    CollectionRule(1, 30, _ALL),  # 1-6h
    CollectionRule(6, 60, _ALL),  # 6-24h
    CollectionRule(24, 120, _CORE),  # 1-3 days
    CollectionRule(72, 360, _CORE),  # 3-7 days
    CollectionRule(168, 720, _SOCIAL),  # 7-14 days
    CollectionRule(336, 1440, _SOCIAL),  # 14-21 days
    CollectionRule(504, 2880, _REACTIONS),  # 21-30 days
    CollectionRule(720, 10080, _REACTIONS),  # 30 days-3 months
    CollectionRule(2160, 43200, _LIKES),  # 3 months-1 year
    CollectionRule(8760, 129600, _LIKES),  # 1-5 years
    CollectionRule(43800, 525600, _LIKES),  # 5 years+
)


class LinkedInStatsCollector:
    """Turn LinkedIn social actions and organization statistics into metric samples.

    Credentials: ``ACCESS_TOKEN`` (required), ``ORGANIZATION_URN`` (optional,
    enables share and page statistics).
    """

    def __init__(self, channel: ChannelRef, client: LinkedInRestClient):
        self.channel = channel
        self.client = client
        self.organization_id = channel.credentials.get("ORGANIZATION_URN") or None

    @classmethod
    def from_channel(
        cls,
        channel: ChannelRef,
        settings: Settings,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "LinkedInStatsCollector":
        if not channel.credentials:
            raise InvalidRequestError(f"No credentials configured for {channel.platform.value}")
        access_token = channel.credentials.get("ACCESS_TOKEN")
        if not access_token:
            raise InvalidRequestError("LinkedIn ACCESS_TOKEN is required for stats collection")
        client = LinkedInRestClient(
            access_token,
            base_url=settings.LINKEDIN_API_BASE_URL,
            api_version=settings.LINKEDIN_API_VERSION,
            transport=transport,
        )
        return cls(channel, client)

    async def aclose(self) -> None:
        await self.client.close()

    def _sample(self, metric_type: MetricType, value: Any, collected_at, post_id=None, **metadata) -> MetricSampleIn:
        return MetricSampleIn(
            channel_id=self.channel.channel_id,
            workspace_id=self.channel.workspace_id,
            platform=Platform.LINKEDIN,
            post_id=post_id,
            metric_type=metric_type,
            value=float(value or 0),
            metadata={k: v for k, v in metadata.items() if v is not None},
            collected_at=collected_at,
        )

    async def collect_post_metrics(self, post_id: str) -> list[MetricSampleIn]:
        now = utc_now()
        try:
            social = await retry_with_backoff(self.client.get_social_actions, post_id)
        except httpx.HTTPError as exc:
            raise ExternalServiceError("linkedin", f"collect post metrics failed: {exc}") from exc

        samples: list[MetricSampleIn] = []
        likes = social.get("likesSummary")
        if likes:
            samples.append(self._sample(
                MetricType.LIKES, likes.get("totalLikes"), now, post_id,
                likedByCurrentUser=likes.get("likedByCurrentUser"),
            ))
        comments = social.get("commentsSummary")
        if comments:
            samples.append(self._sample(
                MetricType.COMMENTS, comments.get("totalFirstLevelComments"), now, post_id,
                aggregatedTotalComments=comments.get("aggregatedTotalComments"),
            ))

        if self.organization_id:
            samples.extend(await self._share_statistics(post_id, now))

        logger.info("Collected %d LinkedIn metrics for post %s", len(samples), post_id)
        return samples

    async def _share_statistics(self, post_id: str, now) -> list[MetricSampleIn]:
        try:
            raw = await retry_with_backoff(self.client.get_share_statistics, self.organization_id, post_id)
        except httpx.HTTPError as exc:
            # Not every account can read organization statistics
            logger.warning("LinkedIn organization stats not available for %s: %s", post_id, exc)
            return []

        elements = raw.get("elements") or [{}]
        stats = elements[0].get("totalShareStatistics")
        if not stats:
            return []

        samples: list[MetricSampleIn] = []
        if stats.get("impressionCount") is not None:
            samples.append(self._sample(
                MetricType.IMPRESSIONS, stats["impressionCount"], now, post_id,
                uniqueImpressions=stats.get("uniqueImpressionsCount"),
            ))
        if stats.get("uniqueImpressionsCount") is not None:
            samples.append(self._sample(MetricType.VIEWS, stats["uniqueImpressionsCount"], now, post_id))
        if stats.get("clickCount") is not None:
            samples.append(self._sample(MetricType.CLICKS, stats["clickCount"], now, post_id))
        if stats.get("shareCount") is not None:
            samples.append(self._sample(
                MetricType.SHARES, stats["shareCount"], now, post_id,
                shareMentionsCount=stats.get("shareMentionsCount"),
            ))
        if stats.get("engagement") is not None:
            samples.append(self._sample(
                MetricType.ENGAGEMENT_RATE, stats["engagement"] * 100, now, post_id,
                rawEngagement=stats["engagement"],
                totalEngagements=(stats.get("likeCount") or 0)
                + (stats.get("commentCount") or 0)
                + (stats.get("shareCount") or 0),
            ))
        return samples

    async def get_account_metrics(self) -> list[MetricSampleIn]:
        if not self.organization_id:
            return []
        now = utc_now()
        try:
            raw = await retry_with_backoff(self.client.get_page_statistics, self.organization_id)
        except httpx.HTTPError as exc:
            raise ExternalServiceError("linkedin", f"get account metrics failed: {exc}") from exc

        elements = raw.get("elements") or [{}]
        page_views = (
            (elements[0].get("totalPageStatistics") or {}).get("views", {}).get("allPageViews", {})
        )
        samples: list[MetricSampleIn] = []
        if page_views.get("pageViews") is not None:
            samples.append(self._sample(
                MetricType.VIEWS, page_views["pageViews"], now,
                type="page_views", uniquePageViews=page_views.get("uniquePageViews"),
            ))
        if page_views.get("uniquePageViews") is not None:
            samples.append(self._sample(
                MetricType.REACH, page_views["uniquePageViews"], now, type="unique_page_visitors",
            ))
        return samples
