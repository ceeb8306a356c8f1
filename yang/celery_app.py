"""Celery application configuration."""

from celery import Celery

from yang.config import get_settings

settings = get_settings()

app = Celery(
    "yang",
    broker=settings.redis_url,
    backend=settings.redis_url,
    include=["yang.tasks.tokens"],
)

# Celery configuration
app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    task_track_started=True,
    task_time_limit=300,  # 5 minutes max per task
    task_soft_time_limit=240,  # 4 minutes soft limit
    beat_schedule={
        "purge-expired-credential-tokens": {
            "task": "yang.tasks.tokens.purge_expired_tokens",
            "schedule": 3600.0,
        },
    },
)
