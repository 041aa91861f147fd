"""Keyed registry of network backends, built once at startup."""
import logging
from functools import partial

import httpx

from app.config import Settings
from app.integrations.linkedin.stats import LINKEDIN_COLLECTION_RULES, LinkedInStatsCollector
from app.integrations.networks.base import NetworkBackend, NetworkCapability, StatisticsSupport
from app.models.platform import Platform
from app.utils.errors import InvalidRequestError

logger = logging.getLogger(__name__)


class NetworkRegistry:
    def __init__(self):
        self._backends: dict[Platform, NetworkBackend] = {}

    def register(self, backend: NetworkBackend) -> None:
        if backend.platform in self._backends:
            logger.warning("Replacing registered backend for %s", backend.platform.value)
        self._backends[backend.platform] = backend

    def get(self, platform: Platform) -> NetworkBackend | None:
        return self._backends.get(platform)

    def supports(self, platform: Platform, capability: NetworkCapability) -> bool:
        backend = self._backends.get(platform)
        return backend is not None and capability in backend.capabilities

    def require(self, platform: Platform, capability: NetworkCapability) -> NetworkBackend:
        if not self.supports(platform, capability):
            raise InvalidRequestError(f"{platform.value} does not support {capability.value}")
        return self._backends[platform]

    def platforms_with(self, capability: NetworkCapability) -> list[Platform]:
        return [p for p, backend in self._backends.items() if capability in backend.capabilities]

    def describe(self) -> list[dict]:
        return [
            {
                "platform": platform,
                "capabilities": sorted(c.value for c in backend.capabilities),
            }
            for platform, backend in sorted(self._backends.items(), key=lambda item: item[0].value)
        ]


def build_network_registry(
    settings: Settings, transport: httpx.AsyncBaseTransport | None = None
) -> NetworkRegistry:
    registry = NetworkRegistry()
    registry.register(
        NetworkBackend(
            platform=Platform.LINKEDIN,
            capabilities=frozenset({NetworkCapability.STATISTICS}),
            statistics=StatisticsSupport(
                collection_rules=LINKEDIN_COLLECTION_RULES,
                collector_factory=partial(LinkedInStatsCollector.from_channel, settings=settings, transport=transport),
            ),
        )
    )
    logger.info("Network registry initialised: %s", [p.value for p in registry.platforms_with(NetworkCapability.STATISTICS)])
    return registry
