"""Decay schedule for post metrics collection.

Fresh posts are polled every few minutes for every metric; as a post ages the
polling interval grows and fewer metrics are collected. Each network ships its
own rule table, the policy below is shared by all of them.
"""
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime, timedelta

from app.models.metric import MetricType
from app.utils.errors import InvalidRequestError
from app.utils.helpers import ensure_utc, utc_now


@dataclass(frozen=True)
class CollectionRule:
    post_age_hours: float
    frequency_minutes: int
    metrics_to_collect: tuple[MetricType, ...]


@dataclass(frozen=True)
class CollectionDecision:
    should_collect: bool
    metrics_to_collect: list[MetricType] = field(default_factory=list)
    next_collection_at: datetime | None = None


def select_rule(rules: Sequence[CollectionRule], post_age_hours: float) -> CollectionRule | None:
    """The rule with the largest threshold not above the post's age."""
    for rule in sorted(rules, key=lambda r: r.post_age_hours, reverse=True):
        if rule.post_age_hours <= post_age_hours:
            return rule
    return None


def should_collect_metrics(
    rules: Sequence[CollectionRule],
    post_created_at: datetime,
    last_collection_at: datetime | None = None,
    now: datetime | None = None,
) -> CollectionDecision:
    now = ensure_utc(now) if now is not None else utc_now()
    post_created_at = ensure_utc(post_created_at)
    if post_created_at > now:
        raise InvalidRequestError("post_created_at is in the future")
    if last_collection_at is not None:
        last_collection_at = ensure_utc(last_collection_at)
        if last_collection_at > now:
            raise InvalidRequestError("last_collection_at is in the future")

    post_age_hours = (now - post_created_at) / timedelta(hours=1)
    rule = select_rule(rules, post_age_hours)
    if rule is None:
        return CollectionDecision(should_collect=False)

    metrics = list(rule.metrics_to_collect)
    if last_collection_at is None:
        return CollectionDecision(should_collect=True, metrics_to_collect=metrics)

    frequency = timedelta(minutes=rule.frequency_minutes)
    if now - last_collection_at < frequency:
        return CollectionDecision(
            should_collect=False,
            metrics_to_collect=metrics,
            next_collection_at=last_collection_at + frequency,
        )
    return CollectionDecision(should_collect=True, metrics_to_collect=metrics)
