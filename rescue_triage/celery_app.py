"""
Celery application configuration for background tasks.
"""
import os
from celery import Celery
from celery.schedules import schedule
from datetime import timedelta
from rescue_triage.config import settings
from rescue_triage.logging_config import setup_logging

setup_logging(level=os.getenv("LOG_LEVEL", "INFO"))

# Create Celery app
celery_app = Celery(
	"rescue_triage",
	broker=settings.celery_broker_url,
	backend=settings.celery_result_backend
)

# Celery configuration
celery_app.conf.update(
	task_serializer="json",
	accept_content=["json"],
	result_serializer="json",
	timezone="UTC",
	enable_utc=True,
)

# CeleryBeat schedule
celery_app.conf.beat_schedule = {
	"rematch-sweep": {
		"task": "rescue_triage.tasks.rematch_sweep_task",
		"schedule": schedule(run_every=timedelta(minutes=settings.sweep_interval_minutes)),
	},
}

# Import tasks to ensure they're registered
# This must be done AFTER celery_app is created
import rescue_triage.tasks.rematch_sweep_task  # noqa: F401
