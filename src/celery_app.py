"""Celery application configuration.

Ingestion and step precomputation run on separate queues so that slow
precompute work never delays a user's recipe:

    celery -A src.celery_app worker -Q ingestion,precompute
"""

from celery import Celery

from src.config import get_settings

settings = get_settings()

app = Celery(
    "clipcook",
    broker=settings.redis_url,
    backend=settings.redis_url,
    include=["src.tasks.recipe_ingestion", "src.tasks.step_preparation"],
)

app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    task_default_queue="ingestion",
    task_routes={
        "src.tasks.recipe_ingestion.*": {"queue": "ingestion"},
        "src.tasks.step_preparation.*": {"queue": "precompute"},
    },
    task_time_limit=600,  # video download + two model calls
    task_soft_time_limit=540,
    # One long download per worker process at a time
    worker_prefetch_multiplier=1,
    result_expires=24 * 60 * 60,
)
