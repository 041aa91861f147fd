"""Capability-tagged social network backends.

A backend declares which capabilities it implements and supplies only those
implementations. Statistics is the one capability with an implementation in
this service; posting and messaging are declared so that the registry can
answer capability queries for networks that add them later.
"""
import enum
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Protocol

from app.models.platform import Platform
from app.schemas.stats import ChannelRef, MetricSampleIn
from app.services.collection_scheduler import CollectionRule


class NetworkCapability(str, enum.Enum):
    POSTING = "posting"
    MESSAGING = "messaging"
    STATISTICS = "statistics"


class StatsCollector(Protocol):
    """Fetches metric samples for one connected channel."""

    async def collect_post_metrics(self, post_id: str) -> list[MetricSampleIn]: ...

    async def get_account_metrics(self) -> list[MetricSampleIn]: ...

    async def aclose(self) -> None: ...


StatsCollectorFactory = Callable[[ChannelRef], StatsCollector]


@dataclass(frozen=True)
class StatisticsSupport:
    """Statistics capability: the decay rule table and a collector factory."""
    collection_rules: Sequence[CollectionRule]
    collector_factory: StatsCollectorFactory


@dataclass(frozen=True)
class NetworkBackend:
    platform: Platform
    capabilities: frozenset[NetworkCapability] = field(default_factory=frozenset)
    statistics: StatisticsSupport | None = None

    def __post_init__(self):
        declares_stats = NetworkCapability.STATISTICS in self.capabilities
        if declares_stats != (self.statistics is not None):
            raise ValueError(
                f"{self.platform.value}: statistics implementation must be given exactly when the capability is declared"
            )
