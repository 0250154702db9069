"""Celery application configuration for background cache work."""

import logging

from celery import Celery

from catalog.config import get_settings

logger = logging.getLogger(__name__)
settings = get_settings()

celery_app = Celery(
    "catalog",
    broker=settings.celery_broker_url,
    backend=settings.celery_result_backend,
)

celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    # Task summaries expire after an hour
    result_expires=3600,
    # Must cover a full validation batch (100 calls plus delays)
    task_time_limit=600,
    # Validation batches are quota-bound; take one at a time
    worker_prefetch_multiplier=1,
    broker_connection_retry_on_startup=True,
)

celery_app.autodiscover_tasks(["catalog.workers"])

logger.info("Celery app initialized with broker: %s", settings.celery_broker_url)
