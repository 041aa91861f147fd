"""Celery application: queues for AI analysis and metrics collection.

No beat schedule is owned here; an external cron caller enqueues
``collect_post_metrics`` for the posts it tracks.
"""
from celery import Celery

from app.config import settings

celery_app = Celery(
    "social_hub",
    broker=settings.REDIS_URL,
    backend=settings.REDIS_URL,
)

celery_app.conf.update(
    task_serializer="json",
    result_serializer="json",
    accept_content=["json"],
    timezone="UTC",
    enable_utc=True,
    task_routes={
        "app.tasks.ai_tasks.*": {"queue": "high"},
        "app.tasks.data_collection_tasks.*": {"queue": "medium"},
    },
    task_default_retry_delay=60,
    task_max_retries=3,
    task_acks_late=True,
    worker_prefetch_multiplier=1,
    result_expires=3600,
)

celery_app.autodiscover_tasks([
    "app.tasks.ai_tasks",
    "app.tasks.data_collection_tasks",
])
