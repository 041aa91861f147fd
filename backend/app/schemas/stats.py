"""Metrics ingestion, aggregation and collection scheduling schemas."""
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field, model_validator

from app.models.metric import MetricType
from app.models.platform import Platform

Granularity = Literal["hour", "day", "week", "month"]


class MetricSampleIn(BaseModel):
    """One observed metric value for a channel or one of its posts."""
    channel_id: str
    workspace_id: str
    platform: Platform
    post_id: str | None = None
    metric_type: MetricType
    value: float
    metadata: dict = Field(default_factory=dict)
    collected_at: datetime
    post_created_at: datetime | None = None


class MetricSamplesRequest(BaseModel):
    metrics: list[MetricSampleIn] = Field(min_length=1)


class MetricSampleResponse(BaseModel):
    channel_id: str
    workspace_id: str
    platform: Platform
    post_id: str | None = None
    metric_type: MetricType
    value: float
    metadata: dict | None = Field(None, validation_alias="sample_metadata")
    collected_at: datetime
    post_created_at: datetime | None = None

    model_config = {"from_attributes": True}


class StatsPeriod(BaseModel):
    start_date: datetime
    end_date: datetime

    @model_validator(mode="after")
    def _check_window(self) -> "StatsPeriod":
        if self.end_date < self.start_date:
            raise ValueError("end_date must not be earlier than start_date")
        return self


class StatsRequest(BaseModel):
    workspace_id: str
    channel_ids: list[str] | None = None
    metrics: list[MetricType] = Field(min_length=1)
    period: StatsPeriod
    granularity: Granularity = "day"


class StatsQuery(BaseModel):
    """Body of the workspace/channel stats routes; scope comes from the path."""
    metrics: list[MetricType] = Field(min_length=1)
    period: StatsPeriod
    granularity: Granularity = "day"
    channel_ids: list[str] | None = None


class DataPoint(BaseModel):
    date: datetime
    value: float


class MetricSeries(BaseModel):
    current_value: float = 0.0
    data_points: list[DataPoint] = []


class StatsResponse(BaseModel):
    metrics: dict[MetricType, MetricSeries] = {}


# ── Collection scheduling ──

class ChannelRef(BaseModel):
    """A connected account, with the credentials its network backend needs."""
    channel_id: str
    workspace_id: str
    platform: Platform
    credentials: dict[str, str] = Field(default_factory=dict)


class CollectionCheckRequest(BaseModel):
    channel: ChannelRef
    post_id: str
    post_created_at: datetime
    last_collection_at: datetime | None = None


class CollectRequest(BaseModel):
    channel: ChannelRef
    post_id: str
    post_created_at: datetime


class AccountCollectRequest(BaseModel):
    channel: ChannelRef


class CollectionDecisionResponse(BaseModel):
    should_collect: bool
    metrics_to_collect: list[MetricType] = []
    next_collection_at: datetime | None = None


class CollectResult(BaseModel):
    decision: CollectionDecisionResponse
    saved_count: int = 0


class NetworkDescription(BaseModel):
    platform: Platform
    capabilities: list[str]
